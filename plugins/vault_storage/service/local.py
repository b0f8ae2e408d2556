"""Local filesystem vault backend.

Implements the IStorage capability over a directory on disk. Each call is
root-jailed, emits operation.start / operation.end diagnostics envelopes and
logs one summary line when it finishes.

Creates use exclusive open mode so the filesystem, not a prior exists()
check, decides whether a name is taken. Overwrites stage the new content in
a uniquely named hidden sibling and replace the target with it.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
import time
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from vaultimport.core.config import ConfigResolver
from vaultimport.core.diagnostics import build_envelope, safe_publish
from vaultimport.core.errors import AlreadyExistsError, NotFoundError, StorageError
from vaultimport.core.logging import get_logger

from .paths import resolve_path, to_storage_key

_logger = get_logger(__name__)


def _short_traceback(*, max_lines: int = 20) -> str:
    tb_lines = traceback.format_exc().strip().splitlines()
    return "\n".join(tb_lines[-max_lines:])


@contextmanager
def _observe_operation(*, operation: str, base: dict[str, Any]) -> Iterator[dict[str, Any]]:
    start = time.perf_counter()

    safe_publish(
        "operation.start",
        build_envelope(
            event="operation.start",
            component="vault_storage",
            operation=operation,
            data=dict(base),
        ),
    )

    summary: dict[str, Any] = {}
    try:
        yield summary
    except Exception as e:
        duration_ms = int((time.perf_counter() - start) * 1000)
        end_data = dict(base)
        end_data.update(
            {
                "status": "failed",
                "duration_ms": duration_ms,
                "error_type": type(e).__name__,
                "error_message": str(e),
                "traceback": _short_traceback(),
            }
        )
        safe_publish(
            "operation.end",
            build_envelope(
                event="operation.end",
                component="vault_storage",
                operation=operation,
                data=end_data,
            ),
        )
        _logger.debug(
            f"{operation} status=failed duration_ms={duration_ms} "
            f"path={base.get('path')!r} error_type={type(e).__name__!r}"
        )
        raise
    else:
        duration_ms = int((time.perf_counter() - start) * 1000)
        end_data = dict(base)
        end_data.update(summary)
        end_data.update({"status": "succeeded", "duration_ms": duration_ms})
        safe_publish(
            "operation.end",
            build_envelope(
                event="operation.end",
                component="vault_storage",
                operation=operation,
                data=end_data,
            ),
        )
        parts = [f"status=succeeded duration_ms={duration_ms} path={base.get('path')!r}"]
        if "bytes" in end_data:
            parts.append(f"bytes={end_data['bytes']!r}")
        _logger.debug(f"{operation} " + " ".join(parts))


def _os_reason(e: OSError) -> str:
    return e.strerror or str(e)


class LocalVaultStorage:
    """Vault backend rooted at a local directory."""

    def __init__(self, root_dir: Path, *, config_dir: str = ".obsidian") -> None:
        self._root_dir = Path(root_dir).expanduser()
        self._config_dir = to_storage_key(config_dir)

    @classmethod
    def from_resolver(cls, resolver: ConfigResolver) -> LocalVaultStorage:
        """Build the backend from configuration.

        Configuration keys:
        - vault.root_dir (default: current directory)
        - vault.config_dir (default: .obsidian)
        """
        root_dir = Path(resolver.resolve_str("vault.root_dir", ".")).expanduser()
        config_dir = resolver.resolve_str("vault.config_dir", ".obsidian")

        # Ensure the vault root exists.
        root_dir.mkdir(parents=True, exist_ok=True)
        return cls(root_dir, config_dir=config_dir)

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    @property
    def config_dir(self) -> str:
        return self._config_dir

    def resolve_abs_path(self, path: str) -> Path:
        return resolve_path(self._root_dir, path)

    async def create_folder(self, path: str) -> None:
        with _observe_operation(operation="vault_storage.create_folder", base={"path": path}):
            abs_path = self.resolve_abs_path(path)
            if abs_path.is_dir():
                raise AlreadyExistsError(path)
            if abs_path.exists():
                raise StorageError(f"Cannot create folder '{path}': a file is in the way")
            try:
                abs_path.mkdir(parents=True, exist_ok=False)
            except FileExistsError:
                raise AlreadyExistsError(path) from None
            except OSError as e:
                raise StorageError(f"Cannot create folder '{path}': {_os_reason(e)}") from e

    async def create(self, path: str, text: str) -> None:
        self._create_exclusive("vault_storage.create", path, text.encode("utf-8"))

    async def create_binary(self, path: str, data: bytes) -> None:
        self._create_exclusive("vault_storage.create_binary", path, bytes(data))

    async def write(self, path: str, text: str) -> None:
        self._replace("vault_storage.write", path, text.encode("utf-8"))

    async def write_binary(self, path: str, data: bytes) -> None:
        self._replace("vault_storage.write_binary", path, bytes(data))

    async def read(self, path: str) -> str:
        data = await self.read_binary(path)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StorageError(f"Not a UTF-8 text file: {path}") from e

    async def read_binary(self, path: str) -> bytes:
        with _observe_operation(operation="vault_storage.read", base={"path": path}) as summary:
            abs_path = self.resolve_abs_path(path)
            try:
                data = abs_path.read_bytes()
            except FileNotFoundError:
                raise NotFoundError(path) from None
            except OSError as e:
                raise StorageError(f"Cannot read '{path}': {_os_reason(e)}") from e
            summary["bytes"] = len(data)
            return data

    async def exists(self, path: str) -> bool:
        return self.resolve_abs_path(path).exists()

    def _create_exclusive(self, operation: str, path: str, data: bytes) -> None:
        with _observe_operation(operation=operation, base={"path": path}) as summary:
            abs_path = self.resolve_abs_path(path)
            try:
                f = open(abs_path, "xb")
            except FileExistsError:
                raise AlreadyExistsError(path) from None
            except FileNotFoundError:
                raise NotFoundError(path) from None
            except OSError as e:
                raise StorageError(f"Cannot create '{path}': {_os_reason(e)}") from e

            # From here on the file is ours; a failed write must not leave it behind.
            try:
                with f:
                    f.write(data)
            except OSError as e:
                with contextlib.suppress(OSError):
                    abs_path.unlink(missing_ok=True)
                raise StorageError(f"Cannot create '{path}': {_os_reason(e)}") from e
            summary["bytes"] = len(data)

    def _replace(self, operation: str, path: str, data: bytes) -> None:
        with _observe_operation(operation=operation, base={"path": path}) as summary:
            abs_path = self.resolve_abs_path(path)
            if not abs_path.parent.is_dir():
                raise NotFoundError(path)

            tmp_path: Path | None = None
            try:
                fd, tmp_name = tempfile.mkstemp(
                    dir=abs_path.parent, prefix=f".{abs_path.name}.", suffix=".tmp"
                )
                tmp_path = Path(tmp_name)
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, abs_path)
            except OSError as e:
                raise StorageError(f"Cannot write '{path}': {_os_reason(e)}") from e
            finally:
                if tmp_path is not None:
                    with contextlib.suppress(FileNotFoundError):
                        tmp_path.unlink()
            summary["bytes"] = len(data)
