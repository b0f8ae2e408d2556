"""Vault storage plugin.

Provides the IStorage capability used by the ZIP importer. The default
backend is a local directory resolved from configuration.
"""

from __future__ import annotations

from vaultimport.core.config import ConfigResolver
from vaultimport.core.interfaces import IStorage

from .service import LocalVaultStorage


class VaultStoragePlugin:
    """Storage capability provider."""

    def __init__(self, resolver: ConfigResolver | None = None) -> None:
        # Fallback resolver is for tests only. Real hosts must provide a resolver.
        self._resolver = resolver or ConfigResolver(cli_args={})
        self.storage = LocalVaultStorage.from_resolver(self._resolver)

    def get_storage(self) -> IStorage:
        return self.storage
