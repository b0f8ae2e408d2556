"""ZIP import CLI adapter.

Implements:
  vaultimport import ARCHIVE [--vault DIR] [--import-path P]
                             [--overwrite | --no-overwrite] [--json]

This is UI-only: reading the archive file stands in for the file picker,
and everything else is delegated to the ZipImporter.

ASCII-only.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vaultimport.core.config import ConfigResolver
from vaultimport.core.diagnostics import install_jsonl_sink
from vaultimport.core.errors import ConfigError, DecodeError, StorageError
from vaultimport.core.logging import VerbosityLevel, get_logger, get_verbosity

from plugins.vault_storage.plugin import VaultStoragePlugin

from .engine import ZipImporter
from .models import ImportConfig, ImportSummary, OutcomeStatus

log = get_logger(__name__)

_STATUS_STYLES = {
    OutcomeStatus.CREATED: "green",
    OutcomeStatus.OVERWRITTEN: "cyan",
    OutcomeStatus.SKIPPED: "yellow",
    OutcomeStatus.FAILED: "red",
}


class ConsoleNotifier:
    """Render notices on a Rich console.

    Info notices are hidden in quiet mode; warnings and errors always show.
    """

    _PREFIXES = {
        "error": "[bold red]x[/bold red]",
        "warning": "[bold yellow]![/bold yellow]",
        "info": "[bold green]+[/bold green]",
    }

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def notify(self, message: str, *, level: str = "info") -> None:
        if level == "info" and get_verbosity() < VerbosityLevel.NORMAL:
            return
        prefix = self._PREFIXES.get(level, self._PREFIXES["info"])
        self.console.print(f"{prefix} {escape(message)}", highlight=False)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="vaultimport import", add_help=False)
    p.add_argument("archive")
    p.add_argument("--vault", dest="vault", default=None)
    p.add_argument("--import-path", dest="import_path", default=None)
    overwrite = p.add_mutually_exclusive_group()
    overwrite.add_argument("--overwrite", dest="overwrite", action="store_true", default=None)
    overwrite.add_argument("--no-overwrite", dest="overwrite", action="store_false")
    p.add_argument("--json", dest="as_json", action="store_true", default=False)
    return p


def _print_help() -> None:
    print("Usage:")
    print("  vaultimport import ARCHIVE [options]")
    print("")
    print("Options:")
    print("  --vault DIR          Vault root directory (default: vault.root_dir)")
    print("  --import-path P      Vault folder for imported files (default: vault root)")
    print("  --overwrite          Replace files that already exist")
    print("  --no-overwrite       Keep files that already exist")
    print("  --json               Print the summary as JSON")


def _cli_overrides(ns: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if ns.vault is not None:
        overrides.setdefault("vault", {})["root_dir"] = ns.vault
    if ns.import_path is not None:
        overrides.setdefault("importer", {})["import_path"] = ns.import_path
    if ns.overwrite is not None:
        overrides.setdefault("importer", {})["overwrite_files"] = ns.overwrite
    return overrides


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in overrides.items():
        cur = out.get(key)
        if isinstance(cur, dict) and isinstance(value, dict):
            out[key] = _merge(cur, value)
        else:
            out[key] = value
    return out


def _with_overrides(resolver: ConfigResolver, overrides: dict[str, Any]) -> ConfigResolver:
    if not overrides:
        return resolver
    return ConfigResolver(
        cli_args=_merge(resolver.cli_args, overrides),
        user_config_path=resolver.user_config_path,
        system_config_path=resolver.system_config_path,
        defaults=resolver.defaults,
    )


def render_summary(console: Console, summary: ImportSummary) -> None:
    """Print outcome counts and, if any, the failed entries."""
    title = "Import cancelled" if summary.cancelled else "Import summary"
    table = Table(title=title)
    table.add_column("Status")
    table.add_column("Files", justify="right")
    for status, count in summary.counts.items():
        style = _STATUS_STYLES[status]
        table.add_row(f"[{style}]{status.value}[/{style}]", str(count))
    console.print(table)

    if summary.failed:
        failures = Table(title="Failed entries")
        failures.add_column("Entry")
        failures.add_column("Error")
        for outcome in summary.failed:
            failures.add_row(escape(outcome.entry_path), escape(str(outcome.error)))
        console.print(failures)


async def import_cli_main(
    argv: list[str],
    *,
    resolver: ConfigResolver,
    console: Console | None = None,
) -> int:
    """Run 'vaultimport import'.

    Returns:
        0 when the run completed (per-entry failures included), 1 when the
        archive is missing or undecodable or the settings are invalid.

    Raises:
        SystemExit: with code 2 on usage errors
    """
    parser = _build_parser()
    try:
        ns = parser.parse_args(argv)
    except SystemExit:
        _print_help()
        raise SystemExit(2) from None

    console = console or Console()
    resolver = _with_overrides(resolver, _cli_overrides(ns))
    install_jsonl_sink(resolver=resolver)

    archive_path = Path(ns.archive).expanduser()
    if not archive_path.is_file():
        log.error(f"Archive not found: {archive_path}")
        return 1

    try:
        storage = VaultStoragePlugin(resolver).get_storage()
        config = ImportConfig.from_resolver(resolver, storage)
    except (ConfigError, StorageError) as e:
        log.error(str(e))
        return 1
    except OSError as e:
        log.error(f"Cannot open vault: {e}")
        return 1

    log.verbose(
        f"zip_import.cli archive={str(archive_path)!r} import_root={config.import_root!r} "
        f"overwrite_existing={config.overwrite_existing}"
    )

    try:
        data = archive_path.read_bytes()
    except OSError as e:
        log.error(f"Cannot read archive {archive_path}: {e}")
        return 1

    importer = ZipImporter(storage, notifier=ConsoleNotifier(console))
    try:
        summary = await importer.import_archive(data, config)
    except DecodeError:
        # The notifier already reported the failure.
        return 1

    if ns.as_json:
        print(json.dumps(summary.to_dict(), indent=2, sort_keys=True))
    elif get_verbosity() >= VerbosityLevel.NORMAL:
        render_summary(console, summary)
    return 0
