"""In-memory vault backend.

Mirrors the semantics of LocalVaultStorage without touching disk, so the
importer can be embedded or tested against a plain dict tree. Text files are
stored as str and binary files as bytes; every mutation is appended to
``calls``.
"""

from __future__ import annotations

from dataclasses import dataclass

from vaultimport.core.errors import AlreadyExistsError, NotFoundError, StorageError

from .paths import parent_key, to_storage_key


@dataclass(frozen=True)
class StorageCall:
    op: str
    path: str


class MemoryVaultStorage:
    """Vault backend holding files and folders in memory."""

    def __init__(
        self,
        *,
        config_dir: str = ".obsidian",
        files: dict[str, bytes | str] | None = None,
    ) -> None:
        self._config_dir = to_storage_key(config_dir)
        self.files: dict[str, bytes | str] = {}
        self.folders: set[str] = {""}
        self.calls: list[StorageCall] = []

        for path, content in (files or {}).items():
            key = to_storage_key(path)
            self._add_ancestors(parent_key(key))
            self.files[key] = content

    @property
    def config_dir(self) -> str:
        return self._config_dir

    def mutations(self, op: str | None = None) -> list[StorageCall]:
        return [c for c in self.calls if op is None or c.op == op]

    def _add_ancestors(self, key: str) -> None:
        parts = key.split("/") if key else []
        for i in range(1, len(parts) + 1):
            prefix = "/".join(parts[:i])
            if prefix in self.files:
                raise StorageError(f"Not a folder: {prefix}")
            self.folders.add(prefix)

    def _require_parent(self, key: str) -> None:
        if parent_key(key) not in self.folders:
            raise NotFoundError(key)

    async def create_folder(self, path: str) -> None:
        key = to_storage_key(path)
        if key in self.files:
            raise StorageError(f"Cannot create folder '{key}': a file is in the way")
        if key in self.folders:
            raise AlreadyExistsError(key)
        self._add_ancestors(key)
        self.calls.append(StorageCall("create_folder", key))

    async def create(self, path: str, text: str) -> None:
        self._create(path, str(text), op="create")

    async def create_binary(self, path: str, data: bytes) -> None:
        self._create(path, bytes(data), op="create_binary")

    async def write(self, path: str, text: str) -> None:
        self._write(path, str(text), op="write")

    async def write_binary(self, path: str, data: bytes) -> None:
        self._write(path, bytes(data), op="write_binary")

    async def read(self, path: str) -> str:
        content = self._get(path)
        if isinstance(content, str):
            return content
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StorageError(f"Not a UTF-8 text file: {path}") from e

    async def read_binary(self, path: str) -> bytes:
        content = self._get(path)
        return content.encode("utf-8") if isinstance(content, str) else content

    async def exists(self, path: str) -> bool:
        key = to_storage_key(path)
        return key in self.files or key in self.folders

    def _get(self, path: str) -> bytes | str:
        key = to_storage_key(path)
        if key not in self.files:
            raise NotFoundError(key)
        return self.files[key]

    def _create(self, path: str, content: bytes | str, *, op: str) -> None:
        key = to_storage_key(path)
        if key in self.files or key in self.folders:
            raise AlreadyExistsError(key)
        self._require_parent(key)
        self.files[key] = content
        self.calls.append(StorageCall(op, key))

    def _write(self, path: str, content: bytes | str, *, op: str) -> None:
        key = to_storage_key(path)
        if key in self.folders:
            raise StorageError(f"Is a folder: {key}")
        self._require_parent(key)
        self.files[key] = content
        self.calls.append(StorageCall(op, key))
