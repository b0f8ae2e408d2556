"""CLI plugin - command-line host for the vault importer.

Features:
- 4 verbosity modes (quiet/normal/verbose/debug), flags accepted anywhere
- 'import' command provided by the zip_import plugin
- 'config' command for persisted settings
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vaultimport.core.config import ConfigResolver
from vaultimport.core.config_service import ConfigService
from vaultimport.core.errors import ConfigError
from vaultimport.core.logging import (
    VerbosityLevel,
    apply_logging_policy,
    get_logger,
    get_verbosity,
    set_colors,
)

from plugins.zip_import.plugin import ZipImportPlugin

log = get_logger(__name__)

VERSION = "1.0.0"

_VERBOSITY_FLAGS = {
    "-q": "quiet",
    "--quiet": "quiet",
    "-v": "verbose",
    "--verbose": "verbose",
    "-d": "debug",
    "--debug": "debug",
}


class CLIPlugin:
    """Command-line host."""

    def __init__(self, config: dict | None = None, *, console: Console | None = None) -> None:
        """Initialize CLI plugin.

        Args:
            config: Plugin configuration. Recognized keys: user_config_path,
                system_config_path (mainly for tests).
            console: Rich console used for tables and notices
        """
        self.config = config or {}
        self.console = console or Console()

    def _extract_verbosity(self, argv: list[str]) -> tuple[list[str], str | None]:
        """Strip verbosity flags from any position.

        Accepts:
        - vaultimport -v import notes.zip
        - vaultimport import notes.zip -d
        The last flag wins.
        """
        level: str | None = None
        rest: list[str] = []
        for arg in argv:
            if arg in _VERBOSITY_FLAGS:
                level = _VERBOSITY_FLAGS[arg]
            else:
                rest.append(arg)
        return rest, level

    def _config_paths(self) -> dict[str, Path | None]:
        user = self.config.get("user_config_path")
        system = self.config.get("system_config_path")
        return {
            "user_config_path": Path(user) if user else None,
            "system_config_path": Path(system) if system else None,
        }

    def _build_resolver(self, cli_args: dict[str, Any]) -> ConfigResolver:
        return ConfigResolver(cli_args=cli_args, **self._config_paths())

    async def run(self, argv: list[str] | None = None) -> int:
        """Run CLI - main entry point.

        Returns:
            Process exit code
        """
        args = list(sys.argv[1:] if argv is None else argv)
        args, level = self._extract_verbosity(args)

        cli_args: dict[str, Any] = {}
        if level is not None:
            cli_args["logging"] = {"level": level}

        resolver = self._build_resolver(cli_args)
        try:
            apply_logging_policy(resolver.resolve_logging_policy())
            set_colors(resolver.resolve_bool("logging.color", True))
        except ConfigError as e:
            log.error(str(e))
            return 1

        log.debug(f"Parsed CLI args: {cli_args}")

        if not args or args[0] in ("help", "--help", "-h"):
            self._print_usage()
            return 0

        command, rest = args[0], args[1:]
        if command == "version":
            print(f"vaultimport {VERSION}")
            return 0
        if command == "config":
            return self._config_command(rest)

        commands = ZipImportPlugin(resolver).get_cli_commands()
        handler = commands.get(command)
        if handler is None:
            log.error(f"Unknown command: {command}")
            self._print_usage()
            return 2

        return await handler(rest, console=self.console)  # type: ignore[operator]

    def _print_usage(self) -> None:
        """Print usage information."""
        print(f"vaultimport {VERSION}")
        print()
        print("Usage:")
        print("  vaultimport import ARCHIVE [options]   Import a ZIP archive into the vault")
        print("  vaultimport config show                Show effective settings")
        print("  vaultimport config set KEY VALUE       Persist a setting")
        print("  vaultimport config unset KEY           Remove a persisted setting")
        print("  vaultimport version                    Show version")
        print("  vaultimport help                       Show this help")
        print()
        print("Import options:")
        print("  --vault DIR                            Vault root directory")
        print("  --import-path P                        Vault folder for imported files")
        print("  --overwrite / --no-overwrite           Replace existing files or keep them")
        print("  --json                                 Print the summary as JSON")
        print()
        print("Settings:")
        print("  import_path      (importer.import_path)      default: vault root")
        print("  overwrite_files  (importer.overwrite_files)  default: false")
        print()
        print("Verbosity:")
        print("  -q, --quiet                            Quiet mode (warnings and errors)")
        print("  -v, --verbose                          Verbose mode (per-file detail)")
        print("  -d, --debug                            Debug mode (everything)")

    def _config_command(self, args: list[str]) -> int:
        svc = ConfigService(**self._config_paths())
        sub = args[0] if args else "show"

        try:
            if sub == "show" and len(args) <= 1:
                self._print_effective_config(svc)
                return 0
            if sub == "set" and len(args) == 3:
                svc.set_value(args[1], args[2])
                log.info(f"Saved {args[1]} to {svc.user_config_path}")
                return 0
            if sub == "unset" and len(args) == 2:
                svc.unset_value(args[1])
                log.info(f"Removed {args[1]} from {svc.user_config_path}")
                return 0
        except ConfigError as e:
            log.error(str(e))
            return 1

        log.error(f"Invalid config command: {' '.join(args)}")
        self._print_usage()
        return 2

    def _print_effective_config(self, svc: ConfigService) -> None:
        if get_verbosity() < VerbosityLevel.NORMAL:
            print(svc.get_effective_config_snapshot(), end="")
            return

        table = Table(title="Effective configuration")
        table.add_column("Key")
        table.add_column("Value")
        table.add_column("Source")
        for item in svc.get_effective_items():
            table.add_row(escape(item.key), escape(repr(item.value)), item.source)
        self.console.print(table)
