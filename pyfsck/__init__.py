"""pyfsck: load, validate (fsck) and diff git's blob/tree/commit object graph without git."""

from .diff import Action, Change, commit_diff, tree_diff
from .errors import FsckError, NotARepositoryError
from .fsck import head_fsck
from .repo import Repository
from .store import MemoryStore, ObjectStore

__all__ = [
    "Action",
    "Change",
    "FsckError",
    "MemoryStore",
    "NotARepositoryError",
    "ObjectStore",
    "Repository",
    "commit_diff",
    "head_fsck",
    "tree_diff",
]
