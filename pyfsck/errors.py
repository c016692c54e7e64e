"""Exceptions raised while loading, validating and diffing objects."""

from __future__ import annotations


class FsckError(Exception):
    """Base exception for pyfsck."""

    pass


class NotARepositoryError(FsckError):
    """Raised when a path is neither a work tree with .git nor a bare repository."""

    pass


class HeadNotFoundError(FsckError):
    """Raised when HEAD is missing or points to a ref that does not exist."""

    pass


class MissingObjectError(FsckError):
    """Raised when the store cannot resolve a hash."""

    pass


class MalformedRecordError(FsckError):
    """Raised when raw bytes do not split into a '<type> <size>' header and payload."""

    pass


class InvalidModeError(FsckError):
    """Raised when a tree entry carries a mode outside the recognized table."""

    pass


class InvalidTypeError(FsckError):
    """Raised when an object's declared type disagrees with the variant it was requested as."""

    pass


class InvalidSizeError(FsckError):
    """Raised when the declared size disagrees with the payload length."""

    pass


class InvalidSha1Error(FsckError):
    """Raised when the recomputed content hash disagrees with the requested hash."""

    pass


class MissingCommitDataError(FsckError):
    """Raised when a commit lacks its tree row, a valid author row, or a subject."""

    pass


class ExcessiveCommitDataError(FsckError):
    """Raised when a commit has more than one row of a single-valued header."""

    pass


class TreeDepthExceededError(FsckError):
    """Raised when tree nesting goes deeper than fsck.maxTreeDepth."""

    pass


class UnsafePathError(FsckError):
    """Raised when a tree entry name would escape the checkout destination."""

    pass


class InvalidConfigValueError(FsckError):
    """Raised when a config key is malformed or its value has the wrong type."""

    pass


class OperationCancelledError(FsckError):
    """Raised when the caller's cancel token fires during a walk."""

    pass
