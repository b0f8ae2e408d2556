"""ZIP import engine.

Drives one import run:

    DECODING -> (CLASSIFYING -> RESOLVING -> MATERIALIZING -> WRITING) x N
             -> SUMMARIZING -> DONE

Entries are processed strictly one after another, in archive order. Any
failure inside an entry is recorded as a FAILED outcome for that entry and
the run continues. Only an undecodable archive fails the run (state FAILED,
DecodeError raised, no summary).

ASCII-only.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

from vaultimport.core.diagnostics import build_envelope, safe_publish
from vaultimport.core.errors import DecodeError, ImportInProgressError
from vaultimport.core.events import EventBus
from vaultimport.core.interfaces import INotifier, IStorage
from vaultimport.core.logging import get_logger

from .classify import classify_entry
from .materialize import ensure_parent
from .models import (
    ArchiveEntry,
    DestinationPath,
    ImportConfig,
    ImportState,
    ImportSummary,
    OutcomeStatus,
    WriteOutcome,
)
from .notices import SUCCESS_MESSAGE, LogNotifier, failure_message, outcome_level, outcome_message
from .paths import resolve_destination
from .reader import read_archive
from .writer import write_entry

log = get_logger(__name__)


class ZipImporter:
    """Materialize ZIP archives into a vault through an IStorage backend.

    One importer runs one import at a time; a second concurrent call raises
    ImportInProgressError.
    """

    def __init__(
        self,
        storage: IStorage,
        *,
        notifier: INotifier | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._storage = storage
        self._notifier = notifier or LogNotifier()
        self._bus = event_bus
        self._state = ImportState.IDLE
        self._running = False

    @property
    def state(self) -> ImportState:
        return self._state

    @property
    def storage(self) -> IStorage:
        return self._storage

    def _set_state(self, state: ImportState) -> None:
        self._state = state

    def _publish(self, event: str, operation: str, data: dict[str, Any]) -> None:
        safe_publish(
            event,
            build_envelope(event=event, component="zip_import", operation=operation, data=data),
            bus=self._bus,
        )

    async def import_archive(
        self,
        data: bytes,
        config: ImportConfig,
        *,
        cancel: asyncio.Event | None = None,
    ) -> ImportSummary:
        """Import every entry of a ZIP archive.

        Args:
            data: Raw archive bytes
            config: Settings snapshot for this run
            cancel: Optional event; checked between entries only, never mid-write

        Returns:
            ImportSummary with one outcome per importable entry

        Raises:
            DecodeError: data is not a valid ZIP archive
            ImportInProgressError: another run is active on this importer
        """
        if self._running:
            raise ImportInProgressError()

        self._running = True
        try:
            return await self._run(data, config, cancel)
        finally:
            self._running = False

    async def _run(
        self, data: bytes, config: ImportConfig, cancel: asyncio.Event | None
    ) -> ImportSummary:
        start = time.perf_counter()
        base = {
            "import_root": config.import_root,
            "snippets_root": config.snippets_root,
            "overwrite_existing": config.overwrite_existing,
        }
        self._publish("zip_import.run.start", "zip_import.run", dict(base))

        self._set_state(ImportState.DECODING)
        try:
            archive = read_archive(data)
        except DecodeError as e:
            self._set_state(ImportState.FAILED)
            duration_ms = int((time.perf_counter() - start) * 1000)
            log.error(f"zip_import.run status=failed duration_ms={duration_ms} error={e.message!r}")
            self._publish(
                "zip_import.run.end",
                "zip_import.run",
                {**base, "status": "failed", "duration_ms": duration_ms, "error": e.message},
            )
            self._notifier.notify(failure_message(e), level="error")
            raise

        summary = ImportSummary()
        with archive:
            for entry in archive:
                if cancel is not None and cancel.is_set():
                    summary.cancelled = True
                    break

                outcome = await self._process_entry(entry, config)
                if outcome is not None:
                    summary.add(outcome)
                    self._report(outcome)

        self._set_state(ImportState.SUMMARIZING)
        counts = {status.value: n for status, n in summary.counts.items()}
        duration_ms = int((time.perf_counter() - start) * 1000)
        status = "cancelled" if summary.cancelled else "done"
        log.info(
            f"zip_import.run status={status} duration_ms={duration_ms} "
            + " ".join(f"{k}={v}" for k, v in counts.items())
        )
        self._publish(
            "zip_import.run.end",
            "zip_import.run",
            {**base, "status": status, "duration_ms": duration_ms, "counts": counts},
        )

        if summary.cancelled:
            self._notifier.notify(
                f"Import cancelled after {len(summary.outcomes)} file(s)", level="warning"
            )
        else:
            self._notifier.notify(SUCCESS_MESSAGE)

        self._set_state(ImportState.DONE)
        return summary

    async def _process_entry(self, entry: ArchiveEntry, config: ImportConfig) -> WriteOutcome | None:
        self._set_state(ImportState.CLASSIFYING)
        kind = classify_entry(entry)
        if kind.is_skipped:
            log.debug(f"zip_import.entry status=ignored kind={kind.value} entry={entry.path!r}")
            return None

        destination: DestinationPath | None = None
        try:
            self._set_state(ImportState.RESOLVING)
            destination = resolve_destination(entry.path, kind, config)

            self._set_state(ImportState.MATERIALIZING)
            await ensure_parent(self._storage, destination)

            self._set_state(ImportState.WRITING)
            content: bytes | str
            if kind.is_binary:
                content = await entry.read_bytes()
            else:
                content = await entry.read_text()

            return await write_entry(
                self._storage,
                destination,
                content,
                kind,
                config.overwrite_existing,
                entry_path=entry.path,
            )
        except Exception as e:
            return WriteOutcome(
                status=OutcomeStatus.FAILED,
                entry_path=entry.path,
                kind=kind,
                destination=destination,
                error=e,
            )

    def _report(self, outcome: WriteOutcome) -> None:
        destination = None if outcome.destination is None else outcome.destination.path
        line = (
            f"zip_import.entry status={outcome.status.value} kind={outcome.kind.value} "
            f"entry={outcome.entry_path!r} destination={destination!r}"
        )
        if outcome.status is OutcomeStatus.FAILED:
            log.warning(f"{line} error_type={type(outcome.error).__name__!r} error={outcome.error}")
        else:
            log.verbose(line)

        self._publish("zip_import.entry", "zip_import.write", outcome.to_dict())
        self._notifier.notify(outcome_message(outcome), level=outcome_level(outcome))


async def import_archive(
    storage: IStorage,
    data: bytes,
    config: ImportConfig,
    *,
    notifier: INotifier | None = None,
) -> ImportSummary:
    """One-shot convenience wrapper around ZipImporter."""
    return await ZipImporter(storage, notifier=notifier).import_archive(data, config)
