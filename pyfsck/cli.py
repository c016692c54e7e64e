"""CLI: argparse and command dispatch."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .checkout import checkout_commit
from .diff import Change, HashSide
from .errors import FsckError
from .repo import Repository


def _repo(args: argparse.Namespace) -> Repository:
    return Repository.open(args.repo, bare=True if args.bare else None)


def _format_side(side: HashSide) -> str:
    if isinstance(side, tuple):
        return ",".join(side) or "-"
    return side


def format_change(change: Change) -> str:
    """'<action>\\t<path>\\t<old>\\t<new>'; an empty side prints as '-'."""
    old, new = change.hashes
    return f"{change.action.value}\t{change.path}\t{_format_side(old)}\t{_format_side(new)}"


def cmd_fsck(args: argparse.Namespace) -> int:
    repo = _repo(args)
    commit = repo.fsck(args.commit)
    print(f"OK {commit.sha} ({repo.cache.stats['validated']} objects)")
    return 0


def cmd_diff(args: argparse.Namespace) -> int:
    repo = _repo(args)
    for change in sorted(repo.commit_diff(args.commit)):
        print(format_change(change))
    return 0


def cmd_checkout(args: argparse.Namespace) -> int:
    repo = _repo(args)
    commit = repo.commit(repo.resolve(args.commit))
    dest = checkout_commit(commit, args.destination)
    print(f"Checked out {commit.sha} into {dest}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="pyfsck", description="Validate and diff git object graphs")
    parser.add_argument("-C", "--repo", type=Path, default=Path("."), help="Repository path (default: .)")
    parser.add_argument("--bare", action="store_true", help="Treat the path as a bare repository")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every object visited")
    sub = parser.add_subparsers(dest="command", help="Commands")

    p_fsck = sub.add_parser("fsck", help="Validate every object reachable from a commit")
    p_fsck.add_argument("commit", nargs="?", default="HEAD", help="Commit hash (default: HEAD)")

    p_diff = sub.add_parser("diff", help="Show the changes a commit introduces over its parents")
    p_diff.add_argument("commit", nargs="?", default="HEAD", help="Commit hash (default: HEAD)")

    p_checkout = sub.add_parser("checkout", help="Write a commit's files to a directory")
    p_checkout.add_argument("commit", nargs="?", default="HEAD", help="Commit hash (default: HEAD)")
    p_checkout.add_argument("destination", nargs="?", default=None, help="Target directory (default: checkout_files/<short sha>)")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(message)s")
    if not args.command:
        parser.print_help()
        return 0

    handlers = {
        "fsck": cmd_fsck,
        "diff": cmd_diff,
        "checkout": cmd_checkout,
    }
    handler = handlers[args.command]
    try:
        return handler(args) or 0
    except FsckError as e:
        print(f"Error: {type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
