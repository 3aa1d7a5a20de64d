# OWSYNC Path Utilities
# Directory scanning, pattern matching and small file readers

import fnmatch
import json
import os
from enum import Enum
from pathlib import Path
from typing import Any

from owsync.exceptions import ConfigurationError


class EntryKind(str, Enum):
    """Kind of directory entry to return from a scan."""

    ANY = "any"
    DIRECTORY = "directory"
    FILE = "file"


def expand_path(path: str | Path) -> Path:
    """
    Expand ~ and environment variables in path.

    Args:
        path: Path string or Path object.

    Returns:
        Expanded, absolute Path object.
    """
    path_str = str(path)
    path_str = os.path.expanduser(path_str)
    path_str = os.path.expandvars(path_str)
    return Path(path_str).resolve()


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists, creating if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def matches_pattern(path: str | Path, pattern: str) -> bool:
    """
    Check if a relative path matches a glob pattern.

    Supports:
    - * for any characters
    - ** for any path components
    - ? for single character

    Patterns without a slash are matched against every component of the
    path, so ".git" excludes both ".git" and "sub/.git".

    Patterns with a slash are anchored at the root and matched component
    by component, so "lib/*.js" matches "lib/util.js" but not
    "lib/sub/x.js". A match on a directory also covers everything below it.

    Args:
        path: Relative path to check (always using "/" separators).
        pattern: Glob pattern.

    Returns:
        True if path matches pattern.
    """
    path_str = Path(path).as_posix()
    pattern = pattern.strip()
    if pattern.startswith("./"):
        pattern = pattern[2:]
    pattern = pattern.rstrip("/")

    if not pattern:
        return False

    if "**" in pattern:
        parts = pattern.split("**")
        if len(parts) == 2:
            prefix, suffix = parts
            if prefix and not (path_str.startswith(prefix) or fnmatch.fnmatch(path_str, f"{prefix}*")):
                return False
            if suffix:
                suffix = suffix.lstrip("/")
                if not (fnmatch.fnmatch(path_str, f"*/{suffix}") or fnmatch.fnmatch(path_str, suffix)):
                    return False
            return True

    if "/" not in pattern:
        return any(fnmatch.fnmatch(part, pattern) for part in path_str.split("/"))

    # Anchored pattern: match the path or one of its ancestors, one component at a time
    parts = path_str.split("/")
    pattern_parts = pattern.split("/")
    if len(parts) < len(pattern_parts):
        return False
    return all(fnmatch.fnmatch(part, p) for part, p in zip(parts, pattern_parts))


def matches_any_pattern(path: str | Path, patterns: list[str]) -> bool:
    """Check if path matches any of the given patterns."""
    return any(matches_pattern(path, p) for p in patterns)


def list_entries(
    root: Path,
    *,
    exclude: list[str] | None = None,
    include: list[str] | None = None,
    kind: EntryKind = EntryKind.ANY,
    recursive: bool = True,
) -> list[str]:
    """
    List entries below a directory.

    Entries are returned as "/"-separated paths relative to ``root``,
    sorted so that identical directory contents always produce the same
    sequence regardless of the order the OS reports them in. Excluded
    directories are pruned, so nothing below them is returned either.

    Args:
        root: Directory to scan.
        exclude: Glob patterns of entries to leave out.
        include: Optional glob patterns an entry must match to be returned.
        kind: Restrict results to files or directories.
        recursive: Descend into subdirectories.

    Returns:
        Sorted list of relative paths. Empty if root doesn't exist.
    """
    if not root.exists() or not root.is_dir():
        return []

    exclude = exclude or []
    results: list[str] = []

    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else f"{rel_dir}/"

        kept_dirs = []
        for dirname in dirnames:
            rel_path = prefix + dirname
            if exclude and matches_any_pattern(rel_path, exclude):
                continue
            kept_dirs.append(dirname)
            if kind != EntryKind.FILE and _is_included(rel_path, include):
                results.append(rel_path)

        if kind != EntryKind.DIRECTORY:
            for filename in filenames:
                rel_path = prefix + filename
                if exclude and matches_any_pattern(rel_path, exclude):
                    continue
                if not (current / filename).is_file():
                    continue
                if _is_included(rel_path, include):
                    results.append(rel_path)

        # Prune in place so os.walk skips excluded subtrees
        dirnames[:] = kept_dirs if recursive else []

    return sorted(results)


def _is_included(rel_path: str, include: list[str] | None) -> bool:
    """Check include patterns; no patterns means everything is included."""
    if not include:
        return True
    return matches_any_pattern(rel_path, include)


def read_json(path: Path, default: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Read a JSON object from file, returning a default if the file is absent.

    Raises:
        ConfigurationError: If the file exists but is not a JSON object.
    """
    if not path.is_file():
        return dict(default or {})

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Malformed JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"JSON root is not an object in {path}")

    return data


def read_list(path: Path) -> list[str]:
    """Read non-empty, non-comment lines from a file. Missing file yields []."""
    if not path.is_file():
        return []

    lines = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            lines.append(line)
    return lines
