"""HEAD and ref resolution: symbolic or detached HEAD, loose refs, packed-refs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from .constants import HEAD_FILE, PACKED_REFS_FILE
from .errors import HeadNotFoundError
from .util import is_hex_sha, read_text_safe

# symbolic refs pointing at symbolic refs; git gives up at 5
MAX_SYMREF_DEPTH = 5


@dataclass
class HeadState:
    """HEAD state: either symbolic ref or detached commit hash."""
    kind: Literal["ref", "detached"]
    value: str  # refs/heads/main or 40-char commit hash


def read_head(git_dir: Path) -> Optional[HeadState]:
    """Read HEAD; return HeadState or None if there is no usable HEAD file."""
    raw = read_text_safe(git_dir / HEAD_FILE)
    if raw is None:
        return None
    raw = raw.strip()
    if raw.startswith("ref: "):
        return HeadState("ref", raw[5:].strip())
    if is_hex_sha(raw):
        return HeadState("detached", raw.lower())
    return None


def read_packed_refs(git_dir: Path) -> dict[str, str]:
    """Read .git/packed-refs; return dict refname -> sha."""
    raw = read_text_safe(git_dir / PACKED_REFS_FILE)
    if raw is None:
        return {}
    result: dict[str, str] = {}
    for line in raw.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("^"):
            continue  # comment, or peeled tag line for the previous ref
        parts = line.split(None, 1)
        if len(parts) == 2 and is_hex_sha(parts[0]):
            result[parts[1]] = parts[0].lower()
    return result


def resolve_ref(git_dir: Path, refname: str, _depth: int = 0) -> Optional[str]:
    """Resolve ref to a commit hash; None if the ref does not exist. Loose file wins over packed-refs."""
    if _depth > MAX_SYMREF_DEPTH:
        return None
    content = read_text_safe(git_dir / refname)
    if content is None:
        return read_packed_refs(git_dir).get(refname)
    content = content.strip()
    if is_hex_sha(content):
        return content.lower()
    if content.startswith("ref: "):
        return resolve_ref(git_dir, content[5:].strip(), _depth + 1)
    return None


def resolve_head(git_dir: Path) -> str:
    """Commit hash HEAD points to. Raises HeadNotFoundError."""
    state = read_head(git_dir)
    if state is None:
        raise HeadNotFoundError(f"no HEAD found in '{git_dir}'")
    if state.kind == "detached":
        return state.value
    sha = resolve_ref(git_dir, state.value)
    if sha is None:
        raise HeadNotFoundError(f"HEAD points to '{state.value}', which does not exist")
    return sha
