# OWSYNC Hashing Utilities
# Content fingerprints for change detection

import hashlib
from pathlib import Path

from owsync.utils.paths import EntryKind, list_entries

# md5 keeps recorded fingerprints compatible with existing "md5sum" annotations
DEFAULT_ALGORITHM = "md5"


def content_hash(content: str | bytes, *, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """
    Calculate hash of content.

    Args:
        content: String or bytes content.
        algorithm: Hash algorithm (default md5).

    Returns:
        Hex digest of hash.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    hasher = hashlib.new(algorithm)
    hasher.update(content)
    return hasher.hexdigest()


def file_hash(path: Path, *, algorithm: str = DEFAULT_ALGORITHM, chunk_size: int = 65536) -> str | None:
    """
    Calculate hash of file content.

    Args:
        path: Path to file.
        algorithm: Hash algorithm (default md5).
        chunk_size: Chunk size for reading large files.

    Returns:
        Hex digest of hash, or None if file doesn't exist.
    """
    if not path.exists() or not path.is_file():
        return None

    hasher = hashlib.new(algorithm)

    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)

    return hasher.hexdigest()


def fingerprint(
    directory: Path,
    exclude_patterns: list[str] | None = None,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str | None:
    """
    Calculate the content fingerprint of a directory.

    Every non-excluded file is hashed on its own and paired with its
    relative path; the per-file entries are concatenated in sorted
    relative-path order and the concatenation is hashed again. Sorting
    happens before concatenation, so the result does not depend on the
    order the filesystem lists entries in. The path is part of each entry,
    so renaming or moving a file changes the result.

    Args:
        directory: Directory to fingerprint.
        exclude_patterns: Glob patterns of files to leave out.
        algorithm: Hash algorithm (default md5).

    Returns:
        Hex digest, or None if directory doesn't exist.
    """
    if not directory.exists() or not directory.is_dir():
        return None

    files = list_entries(directory, exclude=exclude_patterns, kind=EntryKind.FILE, recursive=True)

    entries = []
    for rel_path in files:
        digest = file_hash(directory / rel_path, algorithm=algorithm)
        if digest is not None:
            entries.append(content_hash(f"{rel_path}\0{digest}", algorithm=algorithm))

    return content_hash("".join(entries), algorithm=algorithm)
