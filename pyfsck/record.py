"""Raw object records: canonical '<type> <size>\\0<payload>' encoding, hashing, parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import MalformedRecordError
from .util import sha1_hash

_HEADER_RE = re.compile(rb"([a-z]+) (0|[1-9][0-9]*)")


@dataclass(frozen=True)
class RawRecord:
    """A record as handed out by a store: declared type and size plus payload bytes."""
    declared_type: str
    declared_size: int
    payload: bytes


def canonical_encode(obj_type: str, size: int, payload: bytes) -> bytes:
    """Header '<type> <size>\\0' followed by the payload; this is what the hash covers."""
    return f"{obj_type} {size}\0".encode() + payload


def content_hash(record: RawRecord) -> str:
    """SHA-1 of the canonical encoding of a record."""
    return sha1_hash(canonical_encode(record.declared_type, record.declared_size, record.payload))


def parse_record(raw: bytes) -> RawRecord:
    """Split decompressed object bytes at the first NUL into header and payload.

    The header must be exactly a lowercase type token and a decimal size. Anything
    else (no NUL, extra spaces, leading zeros) raises MalformedRecordError, which keeps
    canonical_encode(parse_record(raw)) == raw for every record that parses.
    """
    null_idx = raw.find(b"\0")
    if null_idx == -1:
        raise MalformedRecordError("invalid object: no null byte in header")
    header = raw[:null_idx]
    m = _HEADER_RE.fullmatch(header)
    if m is None:
        raise MalformedRecordError(f"invalid object header {header[:32]!r}")
    return RawRecord(m.group(1).decode(), int(m.group(2)), raw[null_idx + 1 :])
