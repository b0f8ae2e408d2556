"""User-facing notices for import outcomes.

ASCII-only.
"""

from __future__ import annotations

from vaultimport.core.logging import get_logger

from .models import EntryKind, OutcomeStatus, WriteOutcome

SUCCESS_MESSAGE = "Files imported successfully!"

_FILE_MESSAGES = {
    OutcomeStatus.CREATED: "File created: {name}",
    OutcomeStatus.OVERWRITTEN: "File overwritten: {name}",
    OutcomeStatus.SKIPPED: "File already exists: {name}",
}

_IMAGE_MESSAGES = {
    OutcomeStatus.CREATED: "Image created: {name}",
    OutcomeStatus.OVERWRITTEN: "Image updated: {name}",
    OutcomeStatus.SKIPPED: "Image already exists: {name}",
}


def outcome_message(outcome: WriteOutcome) -> str:
    if outcome.status is OutcomeStatus.FAILED:
        return f"Error importing {outcome.name}: {outcome.error}"
    templates = _IMAGE_MESSAGES if outcome.kind is EntryKind.IMAGE else _FILE_MESSAGES
    return templates[outcome.status].format(name=outcome.name)


def outcome_level(outcome: WriteOutcome) -> str:
    return "error" if outcome.status is OutcomeStatus.FAILED else "info"


def failure_message(error: Exception) -> str:
    message = getattr(error, "message", None) or str(error)
    return f"Error importing files: {message}"


class LogNotifier:
    """Notifier that routes notices to the core logger."""

    def __init__(self, logger_name: str = "vaultimport.notices") -> None:
        self._log = get_logger(logger_name)

    def notify(self, message: str, *, level: str = "info") -> None:
        if level == "error":
            self._log.error(message)
        elif level == "warning":
            self._log.warning(message)
        else:
            self._log.info(message)
