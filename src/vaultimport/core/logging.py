"""Centralized logging for vaultimport.

Four verbosity levels:
- QUIET (0): Warnings + errors
- NORMAL (1): Info + warnings + errors
- VERBOSE (2): Per-entry detail
- DEBUG (3): Everything, including storage calls

Usage:
    from vaultimport.core.logging import get_logger, set_verbosity

    log = get_logger(__name__)
    set_verbosity(2)  # VERBOSE

    log.verbose("zip_import.entry status=created entry='a.md'")
    log.warning("diagnostics sink disabled")
"""

from __future__ import annotations

import sys
from enum import IntEnum

from vaultimport.core.config import LoggingPolicy
from vaultimport.core.log_bus import LogRecord, get_log_bus


class VerbosityLevel(IntEnum):
    """Verbosity levels for vaultimport."""

    QUIET = 0  # Warnings + errors
    NORMAL = 1  # Info + warnings + errors
    VERBOSE = 2  # Detailed info
    DEBUG = 3  # Everything


_VERBOSITY: VerbosityLevel = VerbosityLevel.NORMAL

_USE_COLORS: bool = True

# Console echo can be turned off by hosts that render LogBus records themselves.
_CONSOLE_ENABLED: bool = True


def set_verbosity(level: int | VerbosityLevel) -> None:
    """Set global verbosity level.

    Args:
        level: Verbosity level (0-3 or VerbosityLevel enum)
    """
    global _VERBOSITY
    _VERBOSITY = VerbosityLevel(level)


def get_verbosity() -> VerbosityLevel:
    return _VERBOSITY


def apply_logging_policy(policy: LoggingPolicy) -> None:
    """Apply a resolved LoggingPolicy to the global verbosity."""
    if policy.level_name == "debug":
        set_verbosity(VerbosityLevel.DEBUG)
    elif policy.level_name == "verbose":
        set_verbosity(VerbosityLevel.VERBOSE)
    elif policy.emit_info:
        set_verbosity(VerbosityLevel.NORMAL)
    else:
        set_verbosity(VerbosityLevel.QUIET)


def set_colors(enabled: bool) -> None:
    global _USE_COLORS
    _USE_COLORS = enabled


def set_console_enabled(enabled: bool) -> None:
    """Enable or disable printing log lines to stdout/stderr.

    LogBus subscribers keep receiving records either way.
    """
    global _CONSOLE_ENABLED
    _CONSOLE_ENABLED = enabled


class VaultImportLogger:
    """Logger with verbosity support."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "VERBOSE": "\033[34m",  # Blue
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "RESET": "\033[0m",
    }

    def __init__(self, name: str):
        self.name = name

    def _format_message(self, level_name: str, message: str) -> str:
        stream = sys.stderr if level_name == "ERROR" else sys.stdout
        if _USE_COLORS and stream.isatty():
            color = self.COLORS.get(level_name, "")
            reset = self.COLORS["RESET"]
            return f"{color}[{level_name.lower()}]{reset} {message}"
        return f"[{level_name.lower()}] {message}"

    def _log(self, level: VerbosityLevel, level_name: str, message: str) -> None:
        if level > _VERBOSITY:
            return

        get_log_bus().publish(
            LogRecord(level_name=level_name, message=message, logger_name=self.name)
        )

        if _CONSOLE_ENABLED:
            print(
                self._format_message(level_name, message),
                file=sys.stderr if level_name == "ERROR" else sys.stdout,
            )

    def debug(self, message: str) -> None:
        self._log(VerbosityLevel.DEBUG, "DEBUG", message)

    def verbose(self, message: str) -> None:
        self._log(VerbosityLevel.VERBOSE, "VERBOSE", message)

    def info(self, message: str) -> None:
        self._log(VerbosityLevel.NORMAL, "INFO", message)

    def warning(self, message: str) -> None:
        self._log(VerbosityLevel.QUIET, "WARNING", message)

    def error(self, message: str) -> None:
        """Log error message (always shown)."""
        self._log(VerbosityLevel.QUIET, "ERROR", message)


_LOGGERS: dict[str, VaultImportLogger] = {}


def get_logger(name: str = __name__) -> VaultImportLogger:
    """Get logger instance for module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    if name not in _LOGGERS:
        _LOGGERS[name] = VaultImportLogger(name)

    return _LOGGERS[name]
