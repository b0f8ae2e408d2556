"""Unit tests for zip_import destination resolution."""

from __future__ import annotations

import pytest
from plugins.vault_storage.service import MemoryVaultStorage
from plugins.zip_import.models import DestinationRoot, EntryKind, ImportConfig
from plugins.zip_import.paths import basename, join_path, resolve_destination, snippets_root_for


@pytest.mark.parametrize(
    ("parts", "expected"),
    [
        (("", "note.md"), "note.md"),
        (("Imports", "note.md"), "Imports/note.md"),
        (("Imports/", "/note.md"), "Imports/note.md"),
        (("Imports//deep", "a//b.md"), "Imports/deep/a/b.md"),
        (("./Imports", "./x.md"), "Imports/x.md"),
        (("Imports", "img\\logo.png"), "Imports/img/logo.png"),
        (("", ""), ""),
    ],
)
def test_join_path_normalizes_separators(parts: tuple[str, str], expected: str) -> None:
    assert join_path(*parts) == expected


def test_empty_import_root_has_no_leading_separator() -> None:
    cfg = ImportConfig(import_root="")
    dest = resolve_destination("note.md", EntryKind.TEXT, cfg)
    assert dest.path == "note.md"
    assert dest.root is DestinationRoot.IMPORT
    assert dest.parent == ""


def test_nested_structure_is_preserved_under_import_root() -> None:
    cfg = ImportConfig(import_root="Imports")
    dest = resolve_destination("img/logo.png", EntryKind.IMAGE, cfg)
    assert dest.path == "Imports/img/logo.png"
    assert dest.parent == "Imports/img"
    assert dest.name == "logo.png"


def test_stylesheet_is_redirected_to_snippets_root() -> None:
    cfg = ImportConfig(import_root="Imports", snippets_root=".obsidian/snippets")
    dest = resolve_destination("theme/dark/style.css", EntryKind.STYLESHEET, cfg)
    assert dest.path == ".obsidian/snippets/style.css"
    assert dest.root is DestinationRoot.SNIPPETS
    assert dest.parent == ".obsidian/snippets"
    assert not dest.path.startswith("Imports")


@pytest.mark.parametrize("entry_path", ["style.css", "a/b/c/My Theme.css", "x\\y\\z.css"])
def test_stylesheet_keeps_file_name_exactly(entry_path: str) -> None:
    cfg = ImportConfig(snippets_root="cfg/snippets")
    dest = resolve_destination(entry_path, EntryKind.STYLESHEET, cfg)
    assert dest.parent == "cfg/snippets"
    assert dest.name == basename(entry_path)


def test_snippets_root_comes_from_storage_config_dir() -> None:
    assert snippets_root_for(MemoryVaultStorage()) == ".obsidian/snippets"
    assert snippets_root_for(MemoryVaultStorage(config_dir="conf/")) == "conf/snippets"


def test_basename() -> None:
    assert basename("a/b/c.md") == "c.md"
    assert basename("c.md") == "c.md"
    assert basename("a\\b.css") == "b.css"
