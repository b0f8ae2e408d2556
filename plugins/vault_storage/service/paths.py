"""Path normalization and root-jail resolution for vault storage.

All storage paths are relative to the vault root. Backslashes are accepted
as separators so archives produced on Windows resolve the same way.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from vaultimport.core.errors import UnsafePathError


def normalize_rel_path(rel_path: str) -> PurePosixPath:
    """Normalize and validate a vault-relative path.

    Rules:
    - a leading separator is rejected (absolute path)
    - no '..' segments
    - backslashes are treated as separators

    Raises:
        UnsafePathError
    """
    rel_path = str(rel_path).replace("\\", "/")

    p = PurePosixPath(rel_path)
    if p.is_absolute():
        raise UnsafePathError(f"Absolute paths are not allowed: {rel_path!r}")

    if any(part == ".." for part in p.parts):
        raise UnsafePathError(f"Parent path segments ('..') are not allowed: {rel_path!r}")

    # PurePosixPath('') and PurePosixPath('.') both denote the root itself.
    return p


def to_storage_key(rel_path: str) -> str:
    """Return the canonical '/'-joined key for rel_path ('' for the root)."""
    key = normalize_rel_path(rel_path).as_posix()
    return "" if key == "." else key


def parent_key(key: str) -> str:
    parent = PurePosixPath(key).parent.as_posix()
    return "" if parent == "." else parent


def resolve_path(root_dir: Path, rel_path: str) -> Path:
    """Resolve a relative path inside root_dir.

    Raises:
        UnsafePathError: If the path is invalid or escapes root_dir
            (including through symlinks).
    """
    rel = normalize_rel_path(rel_path)

    root_resolved = root_dir.resolve()
    abs_path = (root_resolved / Path(*rel.parts)).resolve()
    try:
        abs_path.relative_to(root_resolved)
    except ValueError:
        raise UnsafePathError(f"Path escapes vault root: {rel_path!r}") from None
    return abs_path
