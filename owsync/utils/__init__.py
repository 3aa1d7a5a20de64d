# OWSYNC Utilities Module
# Filesystem scanning, pattern matching and content fingerprints

from owsync.utils.hashing import (
    content_hash,
    file_hash,
    fingerprint,
)
from owsync.utils.paths import (
    EntryKind,
    ensure_dir,
    expand_path,
    list_entries,
    matches_any_pattern,
    matches_pattern,
    read_json,
    read_list,
)

__all__ = [
    # Paths
    "EntryKind",
    "expand_path",
    "ensure_dir",
    "list_entries",
    "matches_pattern",
    "matches_any_pattern",
    "read_json",
    "read_list",
    # Hashing
    "content_hash",
    "file_hash",
    "fingerprint",
]
