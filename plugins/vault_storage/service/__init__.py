"""vault_storage service package."""

from .local import LocalVaultStorage
from .memory import MemoryVaultStorage, StorageCall
from .paths import normalize_rel_path, resolve_path, to_storage_key

__all__ = [
    "LocalVaultStorage",
    "MemoryVaultStorage",
    "StorageCall",
    "normalize_rel_path",
    "resolve_path",
    "to_storage_key",
]
