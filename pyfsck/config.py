"""Repository configuration: read <git dir>/config (INI format) into FsckOptions."""

from __future__ import annotations

import configparser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .constants import CONFIG_FILE, DEFAULT_MAX_TREE_DEPTH
from .errors import InvalidConfigValueError
from .util import read_text_safe

_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0", ""}


@dataclass
class FsckOptions:
    """Per-session settings. bare=None means detect from the directory layout."""
    max_tree_depth: int = DEFAULT_MAX_TREE_DEPTH
    bare: Optional[bool] = None


def _parse_key(key: str) -> tuple[str, str]:
    """Return (section, option). Raises InvalidConfigValueError if key invalid."""
    parts = key.split(".")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise InvalidConfigValueError(f"invalid config key: {key!r} (expected section.option)")
    return parts[0].strip(), parts[1].strip()


def read_config(git_dir: Path) -> configparser.ConfigParser:
    """Read <git dir>/config. Return empty parser if the file is missing or unreadable."""
    # git allows repeated sections and bare keys (implicit true)
    cfg = configparser.ConfigParser(interpolation=None, strict=False, allow_no_value=True)
    content = read_text_safe(Path(git_dir) / CONFIG_FILE)
    if content:
        try:
            cfg.read_string(content)
        except configparser.Error:
            pass
    return cfg


def get_value(git_dir: Path, key: str) -> Optional[str]:
    """Get config value for key (section.option). Return None if missing."""
    section, option = _parse_key(key)
    cfg = read_config(git_dir)
    if not cfg.has_option(section, option):
        return None
    value = cfg.get(section, option)
    return "true" if value is None else value.strip()


def _as_bool(key: str, value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise InvalidConfigValueError(f"bad boolean config value {value!r} for '{key}'")


def _as_positive_int(key: str, value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise InvalidConfigValueError(f"bad numeric config value {value!r} for '{key}'") from None
    if n <= 0:
        raise InvalidConfigValueError(f"'{key}' must be positive (got {n})")
    return n


def load_options(git_dir: Path) -> FsckOptions:
    """Build FsckOptions from core.bare and fsck.maxTreeDepth; defaults for anything unset."""
    options = FsckOptions()
    bare = get_value(git_dir, "core.bare")
    if bare is not None:
        options.bare = _as_bool("core.bare", bare)
    depth = get_value(git_dir, "fsck.maxTreeDepth")
    if depth is not None:
        options.max_tree_depth = _as_positive_int("fsck.maxTreeDepth", depth)
    return options
