"""Repository: ties a store, options and the session's object cache together."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from .cache import ObjectCache
from .cancel import CancelToken
from .config import FsckOptions, load_options
from .diff import Change, commit_diff
from .fsck import fsck_commit, head_fsck
from .objects import Commit, Tree
from .odb import FileSystemStore
from .store import ObjectStore

logger = logging.getLogger(__name__)


class Repository:
    """One session over a store. Objects loaded here live until reset()."""

    def __init__(
        self,
        store: ObjectStore,
        options: Optional[FsckOptions] = None,
        cancel: Optional[CancelToken] = None,
    ) -> None:
        self.store = store
        self.options = options or FsckOptions()
        self.cancel = cancel
        self._head_sha: Optional[str] = None
        self.cache = ObjectCache(store, self.options, cancel)

    @classmethod
    def open(
        cls,
        path: Union[str, Path] = ".",
        bare: Optional[bool] = None,
        cancel: Optional[CancelToken] = None,
    ) -> "Repository":
        """Open a repository on disk; bare=None detects the layout."""
        store = FileSystemStore(path, bare=bare)
        options = load_options(store.git_dir)
        if options.bare is not None and options.bare != store.bare:
            logger.warning(
                "core.bare is %s but %s was opened as a %s repository",
                str(options.bare).lower(),
                store.project_path,
                "bare" if store.bare else "non-bare",
            )
        return cls(store, options, cancel)

    def reset(self) -> None:
        """Drop every loaded object and start a new session."""
        self._head_sha = None
        self.cache = ObjectCache(self.store, self.options, self.cancel)

    def head_sha(self) -> str:
        if self._head_sha is None:
            self._head_sha = self.store.resolve_head()
        return self._head_sha

    def resolve(self, rev: str) -> str:
        """'HEAD' or a full commit hash."""
        return self.head_sha() if rev == "HEAD" else rev

    def commit(self, sha: str) -> Commit:
        return self.cache.get_or_create(Commit, sha)

    def tree(self, sha: str) -> Tree:
        return self.cache.get_or_create(Tree, sha)

    def head_commit(self) -> Commit:
        return self.commit(self.head_sha())

    def head_fsck(self) -> Commit:
        return head_fsck(self)

    def fsck(self, rev: str = "HEAD") -> Commit:
        return fsck_commit(self, self.resolve(rev))

    def commit_diff(self, rev: str = "HEAD") -> List[Change]:
        return commit_diff(self.commit(self.resolve(rev)))
