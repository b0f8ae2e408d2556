"""Unit tests for the local filesystem vault backend."""

from __future__ import annotations

import errno
from pathlib import Path

import pytest
from plugins.vault_storage.service import local as local_backend
from plugins.vault_storage.service import LocalVaultStorage, resolve_path, to_storage_key

from vaultimport.core.config import ConfigResolver
from vaultimport.core.errors import (
    AlreadyExistsError,
    NotFoundError,
    StorageError,
    UnsafePathError,
)
from vaultimport.core.events import get_event_bus
from vaultimport.core.interfaces import IStorage


@pytest.fixture()
def storage(tmp_path: Path) -> LocalVaultStorage:
    root = tmp_path / "vault"
    root.mkdir()
    return LocalVaultStorage(root)


def test_satisfies_storage_protocol(storage: LocalVaultStorage) -> None:
    assert isinstance(storage, IStorage)
    assert storage.config_dir == ".obsidian"


@pytest.mark.asyncio
async def test_create_folder_creates_ancestors(storage: LocalVaultStorage) -> None:
    await storage.create_folder("a/b/c")
    assert (storage.root_dir / "a" / "b" / "c").is_dir()

    with pytest.raises(AlreadyExistsError):
        await storage.create_folder("a/b")


@pytest.mark.asyncio
async def test_create_is_exclusive(storage: LocalVaultStorage) -> None:
    await storage.create("note.md", "hello")
    assert (storage.root_dir / "note.md").read_text(encoding="utf-8") == "hello"

    with pytest.raises(AlreadyExistsError):
        await storage.create("note.md", "again")
    assert await storage.read("note.md") == "hello"


@pytest.mark.asyncio
async def test_create_binary_round_trip(storage: LocalVaultStorage) -> None:
    await storage.create_binary("logo.png", b"\x89PNG\x00\xff")
    assert await storage.read_binary("logo.png") == b"\x89PNG\x00\xff"
    assert await storage.exists("logo.png")


@pytest.mark.asyncio
async def test_create_without_parent_is_not_found(storage: LocalVaultStorage) -> None:
    with pytest.raises(NotFoundError):
        await storage.create("missing/note.md", "x")


@pytest.mark.asyncio
async def test_write_replaces_atomically(storage: LocalVaultStorage) -> None:
    await storage.create("note.md", "v1")
    await storage.write("note.md", "v2")
    assert await storage.read("note.md") == "v2"
    assert sorted(p.name for p in storage.root_dir.iterdir()) == ["note.md"]

    await storage.write_binary("note.md", b"v3")
    assert await storage.read_binary("note.md") == b"v3"


@pytest.mark.asyncio
async def test_write_keeps_unrelated_tmp_sibling(storage: LocalVaultStorage) -> None:
    await storage.create("note.md.tmp", "user file")
    await storage.create("note.md", "v1")
    await storage.write("note.md", "v2")

    assert await storage.read("note.md") == "v2"
    assert await storage.read("note.md.tmp") == "user file"
    assert sorted(p.name for p in storage.root_dir.iterdir()) == ["note.md", "note.md.tmp"]


class _FullDisk:
    def __init__(self, f) -> None:
        self._f = f

    def __enter__(self) -> _FullDisk:
        return self

    def __exit__(self, *exc) -> None:
        self._f.close()

    def write(self, data: bytes) -> int:
        raise OSError(errno.ENOSPC, "No space left on device")


@pytest.mark.asyncio
async def test_failed_create_leaves_no_partial_file(
    storage: LocalVaultStorage, monkeypatch: pytest.MonkeyPatch
) -> None:
    real_open = open
    monkeypatch.setattr(
        local_backend, "open", lambda *a, **kw: _FullDisk(real_open(*a, **kw)), raising=False
    )

    with pytest.raises(StorageError, match="No space left"):
        await storage.create("note.md", "hello")
    assert not (storage.root_dir / "note.md").exists()

    monkeypatch.undo()
    await storage.create("note.md", "hello")
    assert await storage.read("note.md") == "hello"


@pytest.mark.asyncio
async def test_create_folder_over_file_is_not_already_exists(
    storage: LocalVaultStorage,
) -> None:
    await storage.create("taken", "x")
    with pytest.raises(StorageError) as excinfo:
        await storage.create_folder("taken")
    assert not isinstance(excinfo.value, AlreadyExistsError)
    assert "file is in the way" in str(excinfo.value)


@pytest.mark.asyncio
async def test_write_without_parent_is_not_found(storage: LocalVaultStorage) -> None:
    with pytest.raises(NotFoundError):
        await storage.write("missing/note.md", "x")


@pytest.mark.asyncio
async def test_write_onto_folder_fails(storage: LocalVaultStorage) -> None:
    await storage.create_folder("dir")
    with pytest.raises(StorageError):
        await storage.write("dir", "x")
    assert (storage.root_dir / "dir").is_dir()
    assert [p.name for p in storage.root_dir.iterdir()] == ["dir"]


@pytest.mark.asyncio
async def test_read_errors(storage: LocalVaultStorage) -> None:
    with pytest.raises(NotFoundError):
        await storage.read("nope.md")

    await storage.create_binary("bin.dat", b"\xff\xfe")
    with pytest.raises(StorageError):
        await storage.read("bin.dat")


@pytest.mark.asyncio
async def test_paths_are_jailed(storage: LocalVaultStorage) -> None:
    with pytest.raises(UnsafePathError):
        await storage.create("../outside.md", "x")
    with pytest.raises(UnsafePathError):
        await storage.create_folder("/etc/evil")
    assert not (storage.root_dir.parent / "outside.md").exists()


@pytest.mark.asyncio
async def test_unsafe_paths_publish_failed_envelopes(storage: LocalVaultStorage) -> None:
    seen: list[tuple[str, dict]] = []
    get_event_bus().subscribe_all(lambda event, data: seen.append((event, data)))

    with pytest.raises(UnsafePathError):
        await storage.create("../outside.md", "x")
    with pytest.raises(UnsafePathError):
        await storage.write("../outside.md", "x")
    with pytest.raises(UnsafePathError):
        await storage.create_folder("../evil")
    with pytest.raises(UnsafePathError):
        await storage.read("../outside.md")

    ends = [d for e, d in seen if e == "operation.end"]
    assert [e for e, _d in seen].count("operation.start") == 4
    assert [d["operation"] for d in ends] == [
        "vault_storage.create",
        "vault_storage.write",
        "vault_storage.create_folder",
        "vault_storage.read",
    ]
    assert {d["data"]["error_type"] for d in ends} == {"UnsafePathError"}


def test_symlink_escape_is_rejected(tmp_path: Path) -> None:
    root = tmp_path / "vault"
    root.mkdir()
    outside = tmp_path / "outside"
    outside.mkdir()
    (root / "link").symlink_to(outside, target_is_directory=True)

    with pytest.raises(UnsafePathError):
        resolve_path(root, "link/file.md")


def test_storage_keys() -> None:
    assert to_storage_key("") == ""
    assert to_storage_key(".") == ""
    assert to_storage_key("a\\b/c.md") == "a/b/c.md"
    assert to_storage_key("a//b/") == "a/b"


@pytest.mark.asyncio
async def test_operations_publish_envelopes(storage: LocalVaultStorage) -> None:
    seen: list[tuple[str, dict]] = []
    get_event_bus().subscribe_all(lambda event, data: seen.append((event, data)))

    await storage.create("a.md", "x")
    with pytest.raises(AlreadyExistsError):
        await storage.create("a.md", "x")

    assert [e for e, _d in seen] == [
        "operation.start",
        "operation.end",
        "operation.start",
        "operation.end",
    ]
    ok, failed = seen[1][1], seen[3][1]
    assert ok["component"] == "vault_storage"
    assert ok["operation"] == "vault_storage.create"
    assert ok["data"]["status"] == "succeeded"
    assert ok["data"]["bytes"] == 1
    assert failed["data"]["status"] == "failed"
    assert failed["data"]["error_type"] == "AlreadyExistsError"


def test_from_resolver_creates_root(tmp_path: Path) -> None:
    root = tmp_path / "new-vault"
    resolver = ConfigResolver(
        cli_args={"vault": {"root_dir": str(root), "config_dir": "conf"}},
        user_config_path=tmp_path / "user.yaml",
        system_config_path=tmp_path / "system.yaml",
    )
    storage = LocalVaultStorage.from_resolver(resolver)
    assert root.is_dir()
    assert storage.root_dir == root
    assert storage.config_dir == "conf"
