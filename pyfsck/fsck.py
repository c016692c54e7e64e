"""fsck: validate the object graph reachable from a commit."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .objects import Commit

if TYPE_CHECKING:
    from .repo import Repository

logger = logging.getLogger(__name__)


def fsck_commit(repo: "Repository", sha: str) -> Commit:
    """Validate commit sha, its tree and all its ancestry. Raises the first FsckError met."""
    commit = repo.commit(sha)
    commit.validate()
    logger.info("Validated %d objects from %s", repo.cache.stats["validated"], commit.sha)
    return commit


def head_fsck(repo: "Repository") -> Commit:
    """Validate everything reachable from HEAD; returns the head commit on success."""
    return fsck_commit(repo, repo.head_sha())
