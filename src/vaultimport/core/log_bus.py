"""LogBus: publish/subscribe stream of log records.

The core logger publishes every emitted line here so hosts (CLI renderers,
tests, embedding editors) can mirror log output without parsing stdout.
Subscriber failures are contained and never reach the publisher.
"""

from __future__ import annotations

import contextlib
import sys
import traceback
from collections.abc import Callable
from dataclasses import dataclass

LogSubscriber = Callable[["LogRecord"], None]


@dataclass(frozen=True)
class LogRecord:
    level_name: str
    message: str
    logger_name: str

    @property
    def plain(self) -> str:
        return f"[{self.level_name.lower()}] {self.message}"


class LogBus:
    def __init__(self) -> None:
        self._by_level: dict[str, list[LogSubscriber]] = {}
        self._everything: list[LogSubscriber] = []

    def subscribe(self, cb: LogSubscriber, *, level_name: str | None = None) -> None:
        """Register cb for one level, or for all levels when level_name is None."""
        if level_name is None:
            self._everything.append(cb)
        else:
            self._by_level.setdefault(level_name.upper(), []).append(cb)

    def unsubscribe(self, cb: LogSubscriber, *, level_name: str | None = None) -> None:
        subs = self._everything if level_name is None else self._by_level.get(level_name.upper())
        if not subs:
            return
        with contextlib.suppress(ValueError):
            subs.remove(cb)

    def publish(self, record: LogRecord) -> None:
        targets = list(self._everything) + list(self._by_level.get(record.level_name, []))
        for cb in targets:
            try:
                cb(record)
            except Exception:
                # The core logger must not be used here (recursion).
                with contextlib.suppress(Exception):
                    sys.stderr.write(
                        "LogBus subscriber raised; suppressed.\n" + traceback.format_exc()
                    )

    def clear(self) -> None:
        self._by_level.clear()
        self._everything.clear()


_LOG_BUS: LogBus | None = None


def get_log_bus() -> LogBus:
    global _LOG_BUS
    if _LOG_BUS is None:
        _LOG_BUS = LogBus()
    return _LOG_BUS
