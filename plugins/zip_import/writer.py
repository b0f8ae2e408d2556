"""Conflict resolution and writes.

The backend is the single source of truth for existence: a create is always
attempted first and only an AlreadyExistsError routes to the overwrite
policy. No separate exists() check is made.

ASCII-only.
"""

from __future__ import annotations

from dataclasses import replace

from vaultimport.core.errors import AlreadyExistsError, StorageError
from vaultimport.core.interfaces import IStorage

from .models import DestinationPath, EntryKind, OutcomeStatus, WriteOutcome

ALREADY_EXISTS_REASON = "already exists"


async def _create(storage: IStorage, path: str, content: bytes | str, kind: EntryKind) -> None:
    if kind.is_binary:
        await storage.create_binary(path, _as_bytes(content))
    else:
        await storage.create(path, _as_text(content))


async def _overwrite(storage: IStorage, path: str, content: bytes | str, kind: EntryKind) -> None:
    if kind.is_binary:
        await storage.write_binary(path, _as_bytes(content))
    else:
        await storage.write(path, _as_text(content))


def _as_bytes(content: bytes | str) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else bytes(content)


def _as_text(content: bytes | str) -> str:
    return content if isinstance(content, str) else bytes(content).decode("utf-8")


async def write_entry(
    storage: IStorage,
    destination: DestinationPath,
    content: bytes | str,
    kind: EntryKind,
    overwrite_existing: bool,
    *,
    entry_path: str | None = None,
) -> WriteOutcome:
    """Write one entry and report what happened.

    Never raises for backend failures: they become FAILED outcomes.
    """
    created = WriteOutcome(
        status=OutcomeStatus.CREATED,
        entry_path=entry_path if entry_path is not None else destination.path,
        kind=kind,
        destination=destination,
    )

    try:
        await _create(storage, destination.path, content, kind)
        return created
    except AlreadyExistsError:
        pass
    except StorageError as e:
        return replace(created, status=OutcomeStatus.FAILED, error=e)

    if not overwrite_existing:
        return replace(created, status=OutcomeStatus.SKIPPED, reason=ALREADY_EXISTS_REASON)

    try:
        await _overwrite(storage, destination.path, content, kind)
    except StorageError as e:
        return replace(created, status=OutcomeStatus.FAILED, error=e)
    return replace(created, status=OutcomeStatus.OVERWRITTEN)
