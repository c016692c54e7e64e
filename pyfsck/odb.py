"""Loose object database on disk: .git/objects/<aa>/<bb...>, zlib-compressed."""

from __future__ import annotations

import logging
import zlib
from pathlib import Path
from typing import Optional, Union

from .constants import HEAD_FILE, OBJECTS_DIR
from .errors import MalformedRecordError, MissingObjectError, NotARepositoryError
from .record import RawRecord, parse_record
from .refs import resolve_head
from .store import ObjectStore
from .util import is_hex_sha

logger = logging.getLogger(__name__)


def _looks_bare(path: Path) -> bool:
    return (path / HEAD_FILE).is_file() and (path / OBJECTS_DIR).is_dir()


class FileSystemStore(ObjectStore):
    """Read-only store over a repository directory (work tree with .git, or bare).

    Only loose objects are read. Pack files must be unpacked first
    (`git unpack-objects < pack` for each pack moved out of objects/pack).
    """

    def __init__(self, project_path: Union[str, Path] = ".", bare: Optional[bool] = None) -> None:
        self.project_path = Path(project_path).resolve()
        if bare is None:
            bare = not (self.project_path / ".git").is_dir() and _looks_bare(self.project_path)
        self.bare = bare
        self.git_dir = self.project_path if bare else self.project_path / ".git"
        if not _looks_bare(self.git_dir):
            raise NotARepositoryError(f"not a git repository: {self.project_path}")
        self.objects_dir = self.git_dir / OBJECTS_DIR

    def object_path(self, sha: str) -> Path:
        """Path to loose object file. sha must be full 40-char hex."""
        if not is_hex_sha(sha):
            raise ValueError(f"invalid full sha: {sha}")
        sha = sha.lower()
        return self.objects_dir / sha[:2] / sha[2:]

    def resolve_head(self) -> str:
        return resolve_head(self.git_dir)

    def load_object(self, sha: str) -> RawRecord:
        path = self.object_path(sha)
        if not path.is_file():
            raise MissingObjectError(f"File '{path}' not found! Have you unpacked all pack files?")
        logger.debug("Reading %s", path)
        try:
            raw = zlib.decompress(path.read_bytes())
        except zlib.error as e:
            raise MalformedRecordError(f"cannot inflate '{path}': {e}") from e
        return parse_record(raw)
