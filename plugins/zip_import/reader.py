"""Archive reader: decode a ZIP byte buffer into ArchiveEntry objects.

The whole buffer is kept in memory. Entries are yielded in central
directory order and each entry reads only its own member on demand.

ASCII-only.
"""

from __future__ import annotations

import io
import zipfile
import zlib
from collections.abc import Iterator
from types import TracebackType

from vaultimport.core.errors import DecodeError, EntryReadError
from vaultimport.core.logging import get_logger

from .models import ArchiveEntry

log = get_logger(__name__)


def normalize_entry_path(name: str) -> str:
    """Archives built on Windows may use backslashes as separators."""
    return name.replace("\\", "/")


class ZipArchive:
    """A decoded, in-memory ZIP archive.

    Usage:
        with read_archive(data) as archive:
            for entry in archive:
                text = await entry.read_text()
    """

    def __init__(self, data: bytes) -> None:
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise DecodeError(str(e)) from e
        except (ValueError, OSError, EOFError) as e:
            raise DecodeError(f"{type(e).__name__}: {e}") from e

        self._entries = [self._make_entry(info) for info in self._zip.infolist()]
        log.debug(f"zip_import.read entries={len(self._entries)} bytes={len(data)}")

    def _make_entry(self, info: zipfile.ZipInfo) -> ArchiveEntry:
        path = normalize_entry_path(info.filename)

        async def _read() -> bytes:
            return self._read_member(info, path)

        return ArchiveEntry(
            path=path,
            is_directory=info.is_dir() or path.endswith("/"),
            _read=_read,
        )

    def _read_member(self, info: zipfile.ZipInfo, path: str) -> bytes:
        try:
            return self._zip.read(info)
        except (zipfile.BadZipFile, zlib.error, EOFError, OSError) as e:
            raise EntryReadError(path, str(e)) from e
        except (RuntimeError, NotImplementedError) as e:
            # Encrypted members and unsupported compression methods.
            raise EntryReadError(path, str(e)) from e

    def entries(self) -> list[ArchiveEntry]:
        return list(self._entries)

    def __iter__(self) -> Iterator[ArchiveEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> ZipArchive:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def read_archive(data: bytes) -> ZipArchive:
    """Decode data as a ZIP archive.

    Raises:
        DecodeError: If data is not a valid ZIP archive.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise DecodeError(f"expected bytes, got {type(data).__name__}")
    return ZipArchive(bytes(data))
