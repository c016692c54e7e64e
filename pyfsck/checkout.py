"""Checkout: write a commit's tree to a directory, honoring file modes."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from .errors import TreeDepthExceededError, UnsafePathError
from .objects import Commit, FileMode, Tree, TreeEntry
from .util import short_sha, write_bytes_atomic

logger = logging.getLogger(__name__)

CHECKOUT_DIR = "checkout_files"

_FILE_PERMISSIONS = {
    FileMode.REGULAR: 0o644,
    FileMode.EXECUTABLE: 0o755,
    FileMode.GROUP_WRITEABLE: 0o664,
}


def _safe_name(name: str) -> str:
    if not name or name in (".", "..") or "/" in name or "\0" in name or name == ".git":
        raise UnsafePathError(f"refusing to check out entry named {name!r}")
    return name


def checkout_tree(tree: Tree, destination: Union[str, Path]) -> None:
    """Write tree's files under destination; directories are created, symlinks and submodules skipped."""
    stack: List[Tuple[Iterator[TreeEntry], Path, int]] = []
    _enter(stack, tree, Path(destination), 0)
    while stack:
        entries, directory, level = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue
        path = directory / _safe_name(entry.name)
        if entry.mode in _FILE_PERMISSIONS:
            logger.info("Checking out %s", path)
            write_bytes_atomic(path, entry.obj.payload)
            os.chmod(path, _FILE_PERMISSIONS[entry.mode])
        elif entry.is_tree:
            logger.info("Creating folder %s", path)
            _enter(stack, entry.obj, path, level + 1)
        else:
            logger.info("Skipping %s...", path)


def _enter(stack: List[Tuple[Iterator[TreeEntry], Path, int]], tree: Tree, directory: Path, level: int) -> None:
    cache = tree.cache
    cache.check_cancelled()
    if level > cache.options.max_tree_depth:
        raise TreeDepthExceededError(f"trees nested deeper than {cache.options.max_tree_depth} at '{directory}'")
    directory.mkdir(parents=True, exist_ok=True)
    stack.append((iter(tree.entries.values()), directory, level))


def checkout_commit(commit: Commit, destination: Optional[Union[str, Path]] = None) -> Path:
    """Check out commit's tree; defaults to checkout_files/<short sha>. Returns the destination."""
    dest = Path(destination) if destination is not None else Path(CHECKOUT_DIR) / short_sha(commit.sha)
    checkout_tree(commit.tree, dest)
    return dest
