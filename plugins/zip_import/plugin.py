"""ZIP import plugin entrypoint.

Wires the ZipImporter to the vault storage capability and provides the
top-level 'import' CLI command.

ASCII-only.
"""

from __future__ import annotations

from vaultimport.core.config import ConfigResolver
from vaultimport.core.interfaces import INotifier, IStorage

from plugins.vault_storage.plugin import VaultStoragePlugin

from .cli import import_cli_main
from .engine import ZipImporter
from .models import ImportConfig


class ZipImportPlugin:
    """ZIP import plugin providing the ZipImporter.

    The storage backend defaults to the vault storage plugin and is only
    built when the importer is first requested.
    """

    def __init__(
        self,
        resolver: ConfigResolver | None = None,
        *,
        storage: IStorage | None = None,
        notifier: INotifier | None = None,
    ) -> None:
        # Fallback resolver is for tests only. Real hosts must provide a resolver.
        self._resolver = resolver or ConfigResolver(cli_args={})
        self._storage = storage
        self._notifier = notifier
        self._importer: ZipImporter | None = None

    def get_importer(self) -> ZipImporter:
        if self._importer is None:
            storage = self._storage or VaultStoragePlugin(self._resolver).get_storage()
            self._importer = ZipImporter(storage, notifier=self._notifier)
        return self._importer

    def build_config(self) -> ImportConfig:
        """Snapshot current settings for one run."""
        return ImportConfig.from_resolver(self._resolver, self.get_importer().storage)

    def get_cli_commands(self) -> dict[str, object]:
        """Return plugin-provided CLI command handlers.

        This plugin provides the top-level 'import' command.
        """
        return {
            "import": lambda argv, console=None: import_cli_main(
                argv, resolver=self._resolver, console=console
            )
        }
