"""Entry classification.

Kinds are derived from the entry name only; content is never sniffed.
Suffix matching is case-sensitive.

ASCII-only.
"""

from __future__ import annotations

from .models import ArchiveEntry, EntryKind

IMAGE_SUFFIXES: tuple[str, ...] = (".png", ".jpg", ".jpeg", ".gif")
STYLESHEET_SUFFIX = ".css"


def _segments(path: str) -> list[str]:
    p = str(path).replace("\\", "/")
    return [seg for seg in p.split("/") if seg not in ("", ".")]


def classify(path: str, *, is_directory: bool = False) -> EntryKind:
    """Return the kind of an archive entry.

    Rules, first match wins:
    1. directory flag, or a trailing separator -> DIRECTORY
    2. any segment (file name included) starting with '.' -> HIDDEN
    3. image suffix -> IMAGE
    4. '.css' suffix -> STYLESHEET
    5. anything else -> TEXT
    """
    p = str(path).replace("\\", "/")
    if is_directory or p.endswith("/"):
        return EntryKind.DIRECTORY

    segments = _segments(p)
    if not segments:
        # Nothing but separators and '.' segments: the archive root itself.
        return EntryKind.DIRECTORY

    # '..' starts with '.', so traversal segments are never materialized.
    if any(seg.startswith(".") for seg in segments):
        return EntryKind.HIDDEN

    file_name = segments[-1]
    if file_name.endswith(IMAGE_SUFFIXES):
        return EntryKind.IMAGE
    if file_name.endswith(STYLESHEET_SUFFIX):
        return EntryKind.STYLESHEET
    return EntryKind.TEXT


def classify_entry(entry: ArchiveEntry) -> EntryKind:
    return classify(entry.path, is_directory=entry.is_directory)
