"""Tests for the on-disk loose object store and Repository.open over it."""

import re
import tempfile
import unittest
import zlib
from pathlib import Path

from pyfsck.constants import MODE_DIR, MODE_FILE
from pyfsck.errors import (
    InvalidSha1Error,
    MalformedRecordError,
    MissingObjectError,
    NotARepositoryError,
)
from pyfsck.odb import FileSystemStore
from pyfsck.record import RawRecord, canonical_encode
from pyfsck.repo import Repository
from pyfsck.store import MemoryStore


def export_objects(store: MemoryStore, git_dir: Path) -> None:
    """Write every record of store as a loose object under git_dir/objects."""
    for sha, record in store.objects.items():
        path = git_dir / "objects" / sha[:2] / sha[2:]
        path.parent.mkdir(parents=True, exist_ok=True)
        raw = canonical_encode(record.declared_type, record.declared_size, record.payload)
        path.write_bytes(zlib.compress(raw))


def make_repo(bare: bool = False) -> tuple:
    """Empty repository on disk. Returns (project path, git dir)."""
    project = Path(tempfile.mkdtemp(prefix="pyfsck_odb_"))
    git_dir = project if bare else project / ".git"
    (git_dir / "objects").mkdir(parents=True)
    (git_dir / "refs" / "heads").mkdir(parents=True)
    (git_dir / "HEAD").write_text("ref: refs/heads/master\n")
    return project, git_dir


def build_sample(store: MemoryStore) -> str:
    blob = store.add_blob(b"hello\n")
    sub = store.add_tree([(MODE_FILE, "inner.txt", blob)])
    tree = store.add_tree([(MODE_FILE, "hello.txt", blob), (MODE_DIR, "dir", sub)])
    first = store.add_commit(tree, message="first")
    return store.add_commit(tree, [first], message="second")


class TestFileSystemStore(unittest.TestCase):
    def setUp(self) -> None:
        self.project, self.git_dir = make_repo()
        self.mem = MemoryStore()
        self.head = build_sample(self.mem)
        export_objects(self.mem, self.git_dir)
        (self.git_dir / "refs" / "heads" / "master").write_text(self.head + "\n")

    def test_head_fsck_on_disk(self) -> None:
        repo = Repository.open(self.project)
        self.assertFalse(repo.store.bare)
        self.assertEqual(repo.head_fsck().sha, self.head)

    def test_load_matches_memory_record(self) -> None:
        store = FileSystemStore(self.project)
        for sha, record in self.mem.objects.items():
            self.assertEqual(store.load_object(sha), record)

    def test_object_path_layout(self) -> None:
        store = FileSystemStore(self.project)
        sha = "bd9dbf5aae1a3862dd1526723246b20206e5fc37"
        self.assertEqual(store.object_path(sha), self.git_dir.resolve() / "objects" / "bd" / sha[2:])

    def test_missing_object_names_path(self) -> None:
        sha = "bd9dbf5aae1a3862dd1526723246b20206e5fc37"
        with self.assertRaises(MissingObjectError) as ctx:
            FileSystemStore(self.project).load_object(sha)
        self.assertRegex(str(ctx.exception), re.compile(r"File '.*/\.git/objects/bd/9dbf5aae1a3862dd1526723246b20206e5fc37' not found"))

    def test_missing_object_during_fsck(self) -> None:
        blob = self.mem.add_blob(b"never written")
        tree = self.mem.add_tree([(MODE_FILE, "ghost", blob)])
        commit = self.mem.add_commit(tree, [self.head])
        for sha in (tree, commit):
            record = self.mem.objects[sha]
            path = self.git_dir / "objects" / sha[:2] / sha[2:]
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(zlib.compress(canonical_encode(record.declared_type, record.declared_size, record.payload)))
        (self.git_dir / "refs" / "heads" / "master").write_text(commit + "\n")
        with self.assertRaises(MissingObjectError):
            Repository.open(self.project).head_fsck()

    def test_flipped_byte_on_disk(self) -> None:
        blob = self.mem.add_blob(b"hello\n")
        path = self.git_dir / "objects" / blob[:2] / blob[2:]
        path.write_bytes(zlib.compress(b"blob 6\0jello\n"))
        with self.assertRaises(InvalidSha1Error):
            Repository.open(self.project).head_fsck()

    def test_corrupt_zlib(self) -> None:
        path = self.git_dir / "objects" / self.head[:2] / self.head[2:]
        path.write_bytes(b"not zlib at all")
        with self.assertRaises(MalformedRecordError):
            FileSystemStore(self.project).load_object(self.head)

    def test_bad_header(self) -> None:
        path = self.git_dir / "objects" / self.head[:2] / self.head[2:]
        path.write_bytes(zlib.compress(b"commit\0payload"))
        with self.assertRaises(MalformedRecordError):
            FileSystemStore(self.project).load_object(self.head)

    def test_invalid_hash_argument(self) -> None:
        with self.assertRaises(ValueError):
            FileSystemStore(self.project).object_path("xyz")

    def test_detached_head(self) -> None:
        first = Repository(self.mem).commit(self.head).parents[0].sha
        (self.git_dir / "HEAD").write_text(first + "\n")
        self.assertEqual(FileSystemStore(self.project).resolve_head(), first)
        self.assertEqual(Repository.open(self.project).head_fsck().sha, first)


class TestRepositoryLayout(unittest.TestCase):
    def test_bare_detected(self) -> None:
        project, git_dir = make_repo(bare=True)
        mem = MemoryStore()
        head = build_sample(mem)
        export_objects(mem, git_dir)
        (git_dir / "packed-refs").write_text(f"{head} refs/heads/master\n")
        repo = Repository.open(project)
        self.assertTrue(repo.store.bare)
        self.assertEqual(repo.store.git_dir, project.resolve())
        self.assertEqual(repo.head_fsck().sha, head)

    def test_not_a_repository(self) -> None:
        d = Path(tempfile.mkdtemp(prefix="pyfsck_odb_"))
        with self.assertRaises(NotARepositoryError):
            FileSystemStore(d)

    def test_forced_bare_on_work_tree_fails(self) -> None:
        project, _ = make_repo()
        with self.assertRaises(NotARepositoryError):
            FileSystemStore(project, bare=True)

    def test_core_bare_mismatch_is_logged(self) -> None:
        project, git_dir = make_repo()
        (git_dir / "config").write_text("[core]\n\tbare = true\n")
        with self.assertLogs("pyfsck.repo", level="WARNING") as logs:
            Repository.open(project)
        self.assertIn("core.bare is true", logs.output[0])

    def test_reset_starts_new_session(self) -> None:
        project, git_dir = make_repo()
        mem = MemoryStore()
        head = build_sample(mem)
        export_objects(mem, git_dir)
        (git_dir / "refs" / "heads" / "master").write_text(head + "\n")
        repo = Repository.open(project)
        first = repo.head_commit()
        repo.reset()
        self.assertNotIn(head, repo.cache)
        self.assertIsNot(repo.head_commit(), first)


class TestMemoryRecordOnDisk(unittest.TestCase):
    def test_export_roundtrip_of_odd_size(self) -> None:
        project, git_dir = make_repo()
        mem = MemoryStore()
        sha = mem.add_record(RawRecord("blob", 10, b"short"))
        export_objects(mem, git_dir)
        self.assertEqual(FileSystemStore(project).load_object(sha), RawRecord("blob", 10, b"short"))
