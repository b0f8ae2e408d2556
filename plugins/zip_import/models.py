"""Data model for ZIP imports.

ASCII-only.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any

from vaultimport.core.errors import EntryReadError

if TYPE_CHECKING:
    from vaultimport.core.config import ConfigResolver
    from vaultimport.core.interfaces import IStorage


class EntryKind(StrEnum):
    DIRECTORY = "directory"
    HIDDEN = "hidden"
    IMAGE = "image"
    STYLESHEET = "stylesheet"
    TEXT = "text"

    @property
    def is_skipped(self) -> bool:
        """Skipped kinds produce no outcome at all."""
        return self in (EntryKind.DIRECTORY, EntryKind.HIDDEN)

    @property
    def is_binary(self) -> bool:
        return self is EntryKind.IMAGE


@dataclass(frozen=True)
class ArchiveEntry:
    """One member of a decoded archive.

    Content is produced lazily by the reader that owns the archive.
    """

    path: str
    is_directory: bool
    _read: Callable[[], Awaitable[bytes]] = field(repr=False, compare=False)

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    async def read_bytes(self) -> bytes:
        return await self._read()

    async def read_text(self) -> str:
        data = await self._read()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EntryReadError(self.path, f"not valid UTF-8 text ({e.reason})") from e


@dataclass(frozen=True)
class ImportConfig:
    """Per-run import settings. Never mutated while a run is active."""

    import_root: str = ""
    overwrite_existing: bool = False
    snippets_root: str = ".obsidian/snippets"

    @classmethod
    def from_resolver(cls, resolver: ConfigResolver, storage: IStorage) -> ImportConfig:
        """Snapshot importer settings for one run.

        Configuration keys:
        - importer.import_path (default: "", the vault root)
        - importer.overwrite_files (default: false)
        """
        from .paths import join_path, snippets_root_for

        return cls(
            import_root=join_path(resolver.resolve_str("importer.import_path", "")),
            overwrite_existing=resolver.resolve_bool("importer.overwrite_files", False),
            snippets_root=snippets_root_for(storage),
        )


class DestinationRoot(StrEnum):
    IMPORT = "import"
    SNIPPETS = "snippets"


@dataclass(frozen=True)
class DestinationPath:
    path: str
    root: DestinationRoot

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def parent(self) -> str:
        parent = PurePosixPath(self.path).parent.as_posix()
        return "" if parent == "." else parent


class OutcomeStatus(StrEnum):
    CREATED = "created"
    OVERWRITTEN = "overwritten"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class WriteOutcome:
    status: OutcomeStatus
    entry_path: str
    kind: EntryKind
    destination: DestinationPath | None = None
    reason: str | None = None
    error: Exception | None = None

    @property
    def name(self) -> str:
        if self.destination is not None:
            return self.destination.name
        return PurePosixPath(self.entry_path).name

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry": self.entry_path,
            "kind": self.kind.value,
            "status": self.status.value,
            "destination": None if self.destination is None else self.destination.path,
            "root": None if self.destination is None else self.destination.root.value,
            "reason": self.reason,
            "error": None if self.error is None else str(self.error),
        }


@dataclass
class ImportSummary:
    outcomes: list[WriteOutcome] = field(default_factory=list)
    cancelled: bool = False

    def add(self, outcome: WriteOutcome) -> None:
        self.outcomes.append(outcome)

    def _with(self, status: OutcomeStatus) -> list[WriteOutcome]:
        return [o for o in self.outcomes if o.status is status]

    @property
    def created(self) -> list[WriteOutcome]:
        return self._with(OutcomeStatus.CREATED)

    @property
    def overwritten(self) -> list[WriteOutcome]:
        return self._with(OutcomeStatus.OVERWRITTEN)

    @property
    def skipped(self) -> list[WriteOutcome]:
        return self._with(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> list[WriteOutcome]:
        return self._with(OutcomeStatus.FAILED)

    @property
    def counts(self) -> dict[OutcomeStatus, int]:
        counts = {status: 0 for status in OutcomeStatus}
        for o in self.outcomes:
            counts[o.status] += 1
        return counts

    @property
    def failures(self) -> list[tuple[str, Exception]]:
        return [(o.entry_path, o.error) for o in self.failed if o.error is not None]

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "counts": {status.value: n for status, n in self.counts.items()},
            "cancelled": self.cancelled,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


class ImportState(Enum):
    """Importer run state."""

    IDLE = "idle"
    DECODING = "decoding"
    CLASSIFYING = "classifying"
    RESOLVING = "resolving"
    MATERIALIZING = "materializing"
    WRITING = "writing"
    SUMMARIZING = "summarizing"
    DONE = "done"
    FAILED = "failed"
