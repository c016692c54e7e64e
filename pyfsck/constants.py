"""Constants for pyfsck: object types, file modes, ref paths, limits."""

from __future__ import annotations

# Branch HEAD points to in a fresh MemoryStore
DEFAULT_BRANCH = "main"

# Object types
OBJ_BLOB = "blob"
OBJ_TREE = "tree"
OBJ_COMMIT = "commit"

# Git file modes as written in tree objects
MODE_FILE = "100644"
MODE_FILE_EXECUTABLE = "100755"
MODE_FILE_GROUP_WRITEABLE = "100664"
MODE_SYMLINK = "120000"
MODE_DIR = "40000"
MODE_SUBMODULE = "160000"

# Ref paths under .git
HEAD_FILE = "HEAD"
PACKED_REFS_FILE = "packed-refs"
OBJECTS_DIR = "objects"
CONFIG_FILE = "config"

# SHA-1 lengths: binary digest in tree rows, display prefix
SHA1_RAW_LEN = 20
SHORT_SHA_LEN = 7

# Default bound on tree nesting for diff and checkout recursion (git's core.maxTreeDepth default)
DEFAULT_MAX_TREE_DEPTH = 4096
