"""Object store boundary and the in-memory store used as a test double."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import DEFAULT_BRANCH, MODE_DIR, OBJ_BLOB, OBJ_COMMIT, OBJ_TREE
from .errors import HeadNotFoundError, MissingObjectError
from .record import RawRecord, content_hash


class ObjectStore:
    """What the object model needs from a backend: HEAD and records by hash."""

    def resolve_head(self) -> str:
        """Return the commit hash HEAD points to. Raises HeadNotFoundError."""
        raise NotImplementedError

    def load_object(self, sha: str) -> RawRecord:
        """Return the record stored under sha. Raises MissingObjectError."""
        raise NotImplementedError


def _tree_sort_key(entry: Tuple[str, str, str]) -> bytes:
    # git orders tree rows as if directory names ended with '/'
    mode, name, _ = entry
    return (name + "/" if mode == MODE_DIR else name).encode()


class MemoryStore(ObjectStore):
    """Records kept in a dict, branches in another; HEAD follows `head` (a branch name)."""

    def __init__(self, head: str = DEFAULT_BRANCH) -> None:
        self.objects: Dict[str, RawRecord] = {}
        self.branches: Dict[str, str] = {}
        self.head = head

    def resolve_head(self) -> str:
        sha = self.branches.get(self.head)
        if sha is None:
            raise HeadNotFoundError(f"branch '{self.head}' has no commits")
        return sha

    def load_object(self, sha: str) -> RawRecord:
        record = self.objects.get(sha)
        if record is None:
            raise MissingObjectError(f"Object '{sha}' not found!")
        return record

    def add_record(self, record: RawRecord) -> str:
        """Store a record under its own content hash; return the hash."""
        sha = content_hash(record)
        self.objects.setdefault(sha, record)
        return sha

    def put_record(self, sha: str, record: RawRecord) -> None:
        """Store a record under an arbitrary hash (overwrites). For corrupt fixtures."""
        self.objects[sha] = record

    def add_object(self, obj_type: str, payload: bytes, size: Optional[int] = None) -> str:
        """Store payload as obj_type; size defaults to the payload length."""
        return self.add_record(RawRecord(obj_type, len(payload) if size is None else size, payload))

    def add_blob(self, content: bytes) -> str:
        return self.add_object(OBJ_BLOB, content)

    def add_tree(self, entries: Iterable[Tuple[str, str, str]]) -> str:
        """entries: (mode, name, hex sha). Rows are written in git's order."""
        out = b""
        for mode, name, sha in sorted(entries, key=_tree_sort_key):
            out += f"{mode} {name}\0".encode() + bytes.fromhex(sha)
        return self.add_object(OBJ_TREE, out)

    def add_commit(
        self,
        tree: str,
        parents: Sequence[str] = (),
        message: str = "commit",
        author: str = "PyFsck <fsck@example.com>",
        timestamp: int = 1700000000,
        tz_offset: str = "+0000",
    ) -> str:
        lines: List[str] = [f"tree {tree}"]
        for p in parents:
            lines.append(f"parent {p}")
        lines.append(f"author {author} {timestamp} {tz_offset}")
        lines.append(f"committer {author} {timestamp} {tz_offset}")
        lines.append("")
        lines.append(message if message.endswith("\n") else message + "\n")
        return self.add_object(OBJ_COMMIT, "\n".join(lines).encode())

    def update_branch(self, name: str, commit_sha: str) -> None:
        self.branches[name] = commit_sha

    def branch_names(self) -> List[str]:
        return list(self.branches)
