"""Destination path resolution.

Style sheets are redirected to the snippets folder before any generic
resolution happens; every other kind keeps its archive-relative structure
under the import root.

ASCII-only.
"""

from __future__ import annotations

from vaultimport.core.interfaces import IStorage

from .models import DestinationPath, DestinationRoot, EntryKind, ImportConfig

SNIPPETS_DIR_NAME = "snippets"


def join_path(*parts: str) -> str:
    """Join vault-relative path parts.

    Both '/' and '\\' separate segments; empty and '.' segments are dropped,
    so an empty root joins to a path without a leading separator.
    """
    segments: list[str] = []
    for part in parts:
        p = str(part or "").replace("\\", "/")
        segments.extend(seg for seg in p.split("/") if seg not in ("", "."))
    return "/".join(segments)


def basename(path: str) -> str:
    p = join_path(path)
    return p.rsplit("/", 1)[-1]


def snippets_root_for(storage: IStorage) -> str:
    return join_path(storage.config_dir, SNIPPETS_DIR_NAME)


def resolve_destination(entry_path: str, kind: EntryKind, config: ImportConfig) -> DestinationPath:
    if kind is EntryKind.STYLESHEET:
        return DestinationPath(
            path=join_path(config.snippets_root, basename(entry_path)),
            root=DestinationRoot.SNIPPETS,
        )
    return DestinationPath(
        path=join_path(config.import_root, entry_path),
        root=DestinationRoot.IMPORT,
    )
