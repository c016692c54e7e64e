"""Git objects: GitObject, the Blob family, Tree, Commit; payload parsing and per-type validation."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional, Tuple, Type

from .constants import (
    MODE_DIR,
    MODE_FILE,
    MODE_FILE_EXECUTABLE,
    MODE_FILE_GROUP_WRITEABLE,
    MODE_SUBMODULE,
    MODE_SYMLINK,
    OBJ_BLOB,
    OBJ_COMMIT,
    OBJ_TREE,
    SHA1_RAW_LEN,
)
from .errors import (
    ExcessiveCommitDataError,
    InvalidModeError,
    InvalidSha1Error,
    InvalidSizeError,
    InvalidTypeError,
    MalformedRecordError,
    MissingCommitDataError,
)
from .record import content_hash

if TYPE_CHECKING:
    from .cache import ObjectCache

logger = logging.getLogger(__name__)

_SIGNATURE_RE = re.compile(r"(.*) (\d+) ([+-]\d{4})")


class GitObject:
    """Base object: the record loaded for `sha`, plus integrity checks.

    Subclasses set `expected_type` (the declared type their records must carry)
    and implement validate_self().
    """

    expected_type = ""
    loads_record = True

    def __init__(self, cache: "ObjectCache", sha: str, depth: int = 1) -> None:
        self.cache = cache
        self.sha = sha
        self.depth = depth  # commit ancestry level; diagnostics only
        self.validated = False
        self.declared_type: Optional[str] = None
        self.declared_size: Optional[int] = None
        self.payload = b""
        self.content_sha: Optional[str] = None
        if self.loads_record:
            self._load()

    def __repr__(self) -> str:
        return f"<{self.kind} {self.sha}>"

    def _load(self) -> None:
        record = self.cache.load(self.sha)
        self.declared_type = record.declared_type
        self.declared_size = record.declared_size
        self.payload = record.payload
        self.content_sha = content_hash(record)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def check_integrity(self) -> None:
        """Type, then size, then content hash; the order fixes which error a multiply-broken record reports."""
        if self.declared_type != self.expected_type:
            raise InvalidTypeError(f"Invalid type '{self.declared_type}' (expected '{self.expected_type}')")
        if self.declared_size != len(self.payload):
            raise InvalidSizeError(f"Invalid size {self.declared_size} (expected {len(self.payload)})")
        if self.sha != self.content_sha:
            raise InvalidSha1Error(f"Invalid SHA1 '{self.sha}' (expected '{self.content_sha}')")

    def validate_self(self) -> Iterable["GitObject"]:
        """Type-specific checks; yields the objects this one references, in the order they are validated."""
        raise NotImplementedError

    def validate(self) -> None:
        """Validate this object and everything reachable from it, depth-first, fail-fast.

        Walks a stack of reference iterators, which visits objects in the same order as
        recursing into each reference in turn (references are loaded only when reached)
        without hitting the interpreter's recursion limit on long histories. Objects
        already validated in this session are skipped.
        """
        stack: List[Iterator[GitObject]] = [iter([self])]
        while stack:
            obj = next(stack[-1], None)
            if obj is None:
                stack.pop()
                continue
            if obj.validated:
                continue
            self.cache.check_cancelled()
            logger.info("(%d) Validating %s with SHA1 %s", obj.depth, obj.kind, obj.sha)
            obj.check_integrity()
            obj.validated = True
            self.cache.stats["validated"] += 1
            stack.append(iter(obj.validate_self()))


class Blob(GitObject):
    """Blob object: raw file content, no structure to check."""

    expected_type = OBJ_BLOB

    def validate_self(self) -> List[GitObject]:
        return []


class ExecutableFile(Blob):
    pass


class GroupWriteableFile(Blob):
    pass


class SymLink(Blob):
    pass


class SubmoduleRef(Blob):
    """Commit of another repository recorded in a tree. Never loaded, always valid."""

    loads_record = False

    def check_integrity(self) -> None:
        pass


class FileMode(str, Enum):
    """Tree entry modes git writes (see `git ls-tree`)."""

    TREE = MODE_DIR
    REGULAR = MODE_FILE
    EXECUTABLE = MODE_FILE_EXECUTABLE
    GROUP_WRITEABLE = MODE_FILE_GROUP_WRITEABLE
    SYMLINK = MODE_SYMLINK
    SUBMODULE = MODE_SUBMODULE

    @classmethod
    def lookup(cls, token: str, name: str) -> "FileMode":
        try:
            return cls(token)
        except ValueError:
            raise InvalidModeError(f"Invalid mode {token} in file '{name}'") from None

    @property
    def variant(self) -> Type[GitObject]:
        return _MODE_VARIANTS[self]


@dataclass(frozen=True)
class TreeEntry:
    """One row of a tree: its mode and the object it names."""
    mode: FileMode
    name: str
    obj: GitObject

    @property
    def sha(self) -> str:
        return self.obj.sha

    @property
    def is_tree(self) -> bool:
        return self.mode is FileMode.TREE


class Tree(GitObject):
    """Tree object: rows of b'<mode> <name>\\0' + 20-byte sha."""

    expected_type = OBJ_TREE

    def _read_rows(self) -> Iterator[Tuple[FileMode, str, bytes]]:
        content = self.payload
        seen = set()
        i = 0
        while i < len(content):
            null_idx = content.find(b"\0", i)
            sp = content.find(b" ", i, null_idx)
            if null_idx == -1 or sp == -1:
                raise MalformedRecordError(f"truncated entry at offset {i} in tree {self.sha}")
            sha_bin = content[null_idx + 1 : null_idx + 1 + SHA1_RAW_LEN]
            if len(sha_bin) != SHA1_RAW_LEN:
                raise MalformedRecordError(f"truncated entry at offset {i} in tree {self.sha}")
            # surrogateescape keeps non-UTF-8 names reversible through os.fsencode
            name = content[sp + 1 : null_idx].decode("utf-8", errors="surrogateescape")
            mode = FileMode.lookup(content[i:sp].decode("ascii", errors="replace"), name)
            if name in seen:
                raise MalformedRecordError(f"duplicate entry '{name}' in tree {self.sha}")
            seen.add(name)
            yield mode, name, sha_bin
            i = null_idx + 1 + SHA1_RAW_LEN

    @cached_property
    def entries(self) -> Dict[str, TreeEntry]:
        """name -> TreeEntry in payload order; child objects come from the session cache."""
        entries: Dict[str, TreeEntry] = {}
        for mode, name, sha_bin in self._read_rows():
            obj = self.cache.get_or_create(mode.variant, sha_bin, self.depth)
            entries[name] = TreeEntry(mode, name, obj)
        return entries

    def validate_self(self) -> List[GitObject]:
        return [entry.obj for entry in self.entries.values()]


@dataclass(frozen=True)
class Signature:
    """'<identity> <unix timestamp> <+hhmm>' as found on author/committer rows."""
    identity: str
    timestamp: int
    tz_offset: str

    @classmethod
    def parse(cls, label: str, value: str) -> "Signature":
        m = _SIGNATURE_RE.fullmatch(value)
        if m is None:
            raise MissingCommitDataError(f"Malformed {label} in commit.")
        return cls(m.group(1), int(m.group(2)), m.group(3))

    @property
    def when(self) -> datetime:
        sign = -1 if self.tz_offset.startswith("-") else 1
        offset = timedelta(hours=int(self.tz_offset[1:3]), minutes=int(self.tz_offset[3:5]))
        return datetime.fromtimestamp(self.timestamp, timezone(sign * offset))


@dataclass(frozen=True)
class CommitFields:
    """Parsed commit header rows and subject."""
    tree_sha: str
    parent_shas: Tuple[str, ...]
    author: Signature
    committer: Optional[Signature]
    subject: str


class Commit(GitObject):
    """Commit object: one tree, ordered parents, author, subject."""

    expected_type = OBJ_COMMIT

    @staticmethod
    def _read_rows(header: List[str], label: str) -> List[str]:
        values = []
        for row in header:
            key, _, value = row.partition(" ")
            if key == label:
                values.append(value)
        return values

    @classmethod
    def _read_row(cls, header: List[str], label: str, required: bool = True) -> Optional[str]:
        rows = cls._read_rows(header, label)
        if not rows:
            if required:
                raise MissingCommitDataError(f"Missing {label} in commit.")
            return None
        if len(rows) > 1:
            raise ExcessiveCommitDataError(f"Excessive {label} rows in commit.")
        return rows[0]

    @cached_property
    def fields(self) -> CommitFields:
        """Header rows are the lines before the first blank line; the subject is everything after it."""
        rows = self.payload.decode("utf-8", errors="replace").split("\n")
        while rows and rows[-1] == "":
            rows.pop()
        blank = rows.index("") if "" in rows else None
        header = rows if blank is None else rows[:blank]
        tree_sha = self._read_row(header, "tree")
        parent_shas = tuple(self._read_rows(header, "parent"))
        author = Signature.parse("author", self._read_row(header, "author"))
        committer_row = self._read_row(header, "committer", required=False)
        committer = Signature.parse("committer", committer_row) if committer_row is not None else None
        if blank is None:
            raise MissingCommitDataError("Missing subject in commit.")
        return CommitFields(tree_sha, parent_shas, author, committer, "\n".join(rows[blank + 1 :]))

    @cached_property
    def tree(self) -> Tree:
        return self.cache.get_or_create(Tree, self.fields.tree_sha, self.depth)

    @cached_property
    def parents(self) -> List["Commit"]:
        return [self.cache.get_or_create(Commit, sha, self.depth + 1) for sha in self.fields.parent_shas]

    @property
    def author(self) -> Signature:
        return self.fields.author

    @property
    def committer(self) -> Optional[Signature]:
        return self.fields.committer

    @property
    def subject(self) -> str:
        return self.fields.subject

    def validate_self(self) -> Iterator[GitObject]:
        yield self.tree
        # every parent is loaded before the first one is walked
        yield from self.parents


_MODE_VARIANTS: Dict[FileMode, Type[GitObject]] = {
    FileMode.TREE: Tree,
    FileMode.REGULAR: Blob,
    FileMode.EXECUTABLE: ExecutableFile,
    FileMode.GROUP_WRITEABLE: GroupWriteableFile,
    FileMode.SYMLINK: SymLink,
    FileMode.SUBMODULE: SubmoduleRef,
}
