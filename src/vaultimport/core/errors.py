"""Error handling with friendly messages."""

from __future__ import annotations


class VaultImportError(Exception):
    """Base exception for all vaultimport errors."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message


class ConfigError(VaultImportError):
    """Configuration error."""

    pass


class ArchiveError(VaultImportError):
    """Archive-related error."""

    pass


class DecodeError(ArchiveError):
    """The supplied bytes are not a readable ZIP archive.

    Fatal to an import run: no entry is processed.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Not a valid ZIP archive: {reason}",
            "Check that the file is a complete .zip archive",
        )
        self.reason = reason


class EntryReadError(ArchiveError):
    """A single archive member could not be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read '{path}' from archive: {reason}")
        self.path = path
        self.reason = reason


class StorageError(VaultImportError):
    """Storage backend operation error."""

    pass


class AlreadyExistsError(StorageError):
    """Raised when a folder or file already exists at the requested path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Already exists: {path}")
        self.path = path


class NotFoundError(StorageError):
    """Raised when a file or its parent folder is missing."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Not found: {path}")
        self.path = path


class DirectoryError(StorageError):
    """Directory materialization failed for a reason other than pre-existence."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot create folder '{path}': {reason}")
        self.path = path
        self.reason = reason


class UnsafePathError(StorageError):
    """Raised when a requested path escapes the storage root."""

    pass


class ImportInProgressError(VaultImportError):
    """An import run is already active on this importer."""

    def __init__(self) -> None:
        super().__init__(
            "An import is already running",
            "Wait for the current import to finish before starting another",
        )
