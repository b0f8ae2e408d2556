"""vaultimport core.

Kernel services shared by every plugin: errors, logging, events,
diagnostics, configuration and capability interfaces.
"""

from vaultimport.core.config import ConfigResolver, LoggingPolicy
from vaultimport.core.config_service import ConfigService
from vaultimport.core.errors import (
    AlreadyExistsError,
    ArchiveError,
    ConfigError,
    DecodeError,
    DirectoryError,
    EntryReadError,
    ImportInProgressError,
    NotFoundError,
    StorageError,
    UnsafePathError,
    VaultImportError,
)
from vaultimport.core.events import EventBus, get_event_bus
from vaultimport.core.interfaces import INotifier, IStorage
from vaultimport.core.logging import (
    VerbosityLevel,
    apply_logging_policy,
    get_logger,
    get_verbosity,
    set_colors,
    set_verbosity,
)

__all__ = [
    # Config
    "ConfigResolver",
    "ConfigService",
    "LoggingPolicy",
    # Errors
    "VaultImportError",
    "ConfigError",
    "ArchiveError",
    "DecodeError",
    "EntryReadError",
    "StorageError",
    "AlreadyExistsError",
    "NotFoundError",
    "DirectoryError",
    "UnsafePathError",
    "ImportInProgressError",
    # Events
    "EventBus",
    "get_event_bus",
    # Interfaces
    "IStorage",
    "INotifier",
    # Logging
    "VerbosityLevel",
    "apply_logging_policy",
    "get_logger",
    "get_verbosity",
    "set_colors",
    "set_verbosity",
]
