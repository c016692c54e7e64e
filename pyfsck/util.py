"""Helper functions: hashing, hash normalization, safe file ops."""

from __future__ import annotations

import hashlib
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from .constants import SHA1_RAW_LEN, SHORT_SHA_LEN

_HEX_SHA_RE = re.compile(r"[0-9a-f]{40}")


def sha1_hash(data: bytes) -> str:
    """Compute SHA-1 hex digest of data."""
    return hashlib.sha1(data).hexdigest()


def is_hex_sha(value: str) -> bool:
    """Return True for a full 40-char hex digest (either case)."""
    return bool(_HEX_SHA_RE.fullmatch(value.lower()))


def standardize_sha(value: Union[str, bytes]) -> str:
    """Return the lowercase hex form of a hash given as hex text or 20 raw bytes."""
    if isinstance(value, bytes):
        if len(value) == SHA1_RAW_LEN:
            return value.hex()
        value = value.decode("ascii", errors="replace")
    return value.strip().lower()


def short_sha(sha: str) -> str:
    """Leading characters of a hash used for display in diff output."""
    return sha[:SHORT_SHA_LEN]


def read_text_safe(path: Path) -> Optional[str]:
    """Read file as text; return None if not found or error."""
    try:
        return path.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return None


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Write bytes to file atomically (temp then replace)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
    try:
        os.write(fd, data)
        os.close(fd)
        os.replace(tmp, path)
    except Exception:
        try:
            os.close(fd)
        except OSError:
            pass
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
