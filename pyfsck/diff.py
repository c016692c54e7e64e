"""Changes introduced by a commit: merge-aware created/updated/deleted, plus renames.

For a merge, a path counts as updated only when its content differs from every
parent's version, and as deleted only when every parent had it and the commit
does not. See http://thomasrast.ch/git/evil_merge.html for the rules.
"""

from __future__ import annotations

import logging
import posixpath
from enum import Enum
from functools import reduce
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

from .errors import TreeDepthExceededError
from .objects import Commit, Tree, TreeEntry
from .util import short_sha

logger = logging.getLogger(__name__)

HashSide = Union[str, Tuple[str, ...]]
_DiffFrame = Tuple[Iterator[TreeEntry], List[Tree], Optional[str], int]


class Action(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    RENAMED = "renamed"


class Change(NamedTuple):
    """One diff record. hashes is (old, new) in short form:

    created ((), new), updated ((old, ...), new), deleted (old, ()), renamed (old, new).
    """
    path: str
    action: Action
    hashes: Tuple[HashSide, HashSide]


def _other_matches(entry: TreeEntry, other_trees: Sequence[Tree], path: str) -> Tuple[List[TreeEntry], bool]:
    """Entries with the same name in other_trees, one per distinct hash, in tree order.

    An entry of the other kind (tree vs file) is not comparable and is left out; the
    flag reports whether any was.
    """
    matches: List[TreeEntry] = []
    seen = set()
    skipped = False
    for other in other_trees:
        match = other.entries.get(entry.name)
        if match is None or match.sha in seen:
            continue
        if match.is_tree != entry.is_tree:
            logger.info("Skipping %s: %s vs %s", path, match.mode.name.lower(), entry.mode.name.lower())
            skipped = True
            continue
        seen.add(match.sha)
        matches.append(match)
    return matches, skipped


def tree_diff(tree: Tree, other_trees: Sequence[Tree], base_path: Optional[str] = None) -> List[Change]:
    """Files of tree that are new or changed relative to all of other_trees.

    Sub-trees are walked with an explicit stack, in the order recursion would visit
    them, so deep nesting is bounded by max_tree_depth rather than the interpreter.
    """
    changes: List[Change] = []
    stack: List[_DiffFrame] = []
    _enter(stack, tree, list(other_trees), base_path, 0)
    while stack:
        entries, others, base, level = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue
        path = posixpath.join(base, entry.name) if base else entry.name
        matches, skipped = _other_matches(entry, others, path)
        if entry.is_tree:
            if entry.sha in {m.sha for m in matches}:
                continue
            _enter(stack, entry.obj, [m.obj for m in matches], path, level + 1)
        elif not matches:
            if skipped:
                continue  # only a directory of the same name to compare against
            changes.append(Change(path, Action.CREATED, ((), short_sha(entry.sha))))
        elif entry.sha not in {m.sha for m in matches}:
            changes.append(Change(path, Action.UPDATED, (tuple(short_sha(m.sha) for m in matches), short_sha(entry.sha))))
    return changes


def _enter(stack: List[_DiffFrame], tree: Tree, other_trees: List[Tree], base_path: Optional[str], level: int) -> None:
    cache = tree.cache
    cache.check_cancelled()
    if level > cache.options.max_tree_depth:
        raise TreeDepthExceededError(f"trees nested deeper than {cache.options.max_tree_depth} at '{base_path}'")
    stack.append((iter(tree.entries.values()), other_trees, base_path, level))


def _deletions_against(parent: Commit, commit: Commit) -> List[Change]:
    """Files parent had that commit lacks: parent-side creations, reversed."""
    return [
        Change(c.path, Action.DELETED, (c.hashes[1], ()))
        for c in tree_diff(parent.tree, [commit.tree])
        if c.action is Action.CREATED
    ]


def _intersect(left: List[Change], right: List[Change]) -> List[Change]:
    keep = set(right)
    return [c for c in left if c in keep]


def detect_renames(changes: List[Change]) -> List[Change]:
    """Fold each created record whose content matches a deleted one into a renamed record.

    Pairing is by hash only, first deletion in list order wins; a created record with
    no matching deletion stays as it is.
    """
    result = list(changes)
    for created in [c for c in changes if c.action is Action.CREATED]:
        new_sha = created.hashes[1]
        deleted = next((c for c in result if c.action is Action.DELETED and c.hashes[0] == new_sha), None)
        if deleted is None:
            continue
        result.remove(created)
        result.remove(deleted)
        result.append(Change(f"{deleted.path} -> {created.path}", Action.RENAMED, (deleted.hashes[0], new_sha)))
    return result


def commit_diff(commit: Commit) -> List[Change]:
    """Changes introduced by commit relative to its parents (all files created for a root commit)."""
    parents = commit.parents
    changes = tree_diff(commit.tree, [p.tree for p in parents])
    if parents:
        changes.extend(reduce(_intersect, [_deletions_against(p, commit) for p in parents]))
    return detect_renames(changes)
