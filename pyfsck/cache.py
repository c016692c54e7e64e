"""Per-session object cache: at most one object instance per hash."""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING, Dict, Optional, Type, TypeVar

from .cancel import CancelToken
from .config import FsckOptions
from .errors import InvalidSha1Error, InvalidTypeError
from .record import RawRecord
from .store import ObjectStore
from .util import is_hex_sha, standardize_sha

if TYPE_CHECKING:
    from .objects import GitObject

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="GitObject")


class ObjectCache:
    """Arena of objects keyed by hash for one validation/diff session.

    The caller picks the variant (Blob, Tree, Commit, ...) since it knows what the
    reference should point to; the record's own declared type is checked later by
    GitObject.validate(). Submodule references point into a foreign graph and are
    kept apart from loaded objects.
    """

    def __init__(
        self,
        store: ObjectStore,
        options: Optional[FsckOptions] = None,
        cancel: Optional[CancelToken] = None,
    ) -> None:
        self.store = store
        self.options = options or FsckOptions()
        self.cancel = cancel
        self.objects: Dict[str, "GitObject"] = {}
        self.foreign: Dict[str, "GitObject"] = {}
        self.stats: Counter[str] = Counter()

    def __contains__(self, sha: str) -> bool:
        return standardize_sha(sha) in self.objects

    def __len__(self) -> int:
        return len(self.objects)

    def check_cancelled(self) -> None:
        if self.cancel is not None:
            self.cancel.raise_if_cancelled()

    def get_or_create(self, cls: Type[T], sha: str | bytes, depth: int = 1) -> T:
        """Return the cached object for sha, building it as cls on first request."""
        sha = standardize_sha(sha)
        if not is_hex_sha(sha):
            raise InvalidSha1Error(f"Malformed SHA1 '{sha}'")
        pool = self.objects if cls.loads_record else self.foreign
        obj = pool.get(sha)
        if obj is not None:
            if obj.expected_type != cls.expected_type:
                raise InvalidTypeError(
                    f"Object {sha} is referenced as a {cls.expected_type} but was loaded as a {obj.expected_type}"
                )
            self.stats["hits"] += 1
            return obj  # type: ignore[return-value]
        self.check_cancelled()
        obj = cls(self, sha, depth)
        pool[sha] = obj
        return obj

    def load(self, sha: str) -> RawRecord:
        """Fetch a record from the store; every store access goes through here."""
        self.stats["loads"] += 1
        logger.debug("Loading object %s", sha)
        return self.store.load_object(sha)
