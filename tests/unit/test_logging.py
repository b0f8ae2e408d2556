"""Tests for centralized logging system."""

from __future__ import annotations

from vaultimport.core.config import LoggingPolicy
from vaultimport.core.log_bus import LogRecord, get_log_bus
from vaultimport.core.logging import (
    VerbosityLevel,
    apply_logging_policy,
    get_logger,
    get_verbosity,
    set_colors,
    set_console_enabled,
    set_verbosity,
)


class TestVerbosityLevel:
    """Test VerbosityLevel enum."""

    def test_verbosity_values(self):
        """Test verbosity level values."""
        assert VerbosityLevel.QUIET == 0
        assert VerbosityLevel.NORMAL == 1
        assert VerbosityLevel.VERBOSE == 2
        assert VerbosityLevel.DEBUG == 3

    def test_verbosity_ordering(self):
        assert VerbosityLevel.QUIET < VerbosityLevel.NORMAL < VerbosityLevel.VERBOSE
        assert VerbosityLevel.VERBOSE < VerbosityLevel.DEBUG


class TestLoggingSetup:
    """Test logging setup functions."""

    def test_set_get_verbosity(self):
        set_verbosity(2)
        assert get_verbosity() == VerbosityLevel.VERBOSE

        set_verbosity(VerbosityLevel.DEBUG)
        assert get_verbosity() == VerbosityLevel.DEBUG

    def test_apply_logging_policy(self):
        apply_logging_policy(LoggingPolicy("quiet", False, False, "cli"))
        assert get_verbosity() == VerbosityLevel.QUIET

        apply_logging_policy(LoggingPolicy("debug", True, True, "cli"))
        assert get_verbosity() == VerbosityLevel.DEBUG

        apply_logging_policy(LoggingPolicy("normal", True, False, "default"))
        assert get_verbosity() == VerbosityLevel.NORMAL

    def test_set_colors(self, capsys):
        set_colors(False)
        get_logger("test").info("plain")
        set_colors(True)

        assert capsys.readouterr().out == "[info] plain\n"


def _collect() -> list[LogRecord]:
    collected: list[LogRecord] = []
    get_log_bus().subscribe(collected.append)
    return collected


def test_log_bus_receives_plain_records() -> None:
    collected = _collect()

    get_logger("logbus_test").info("hello")

    assert len(collected) == 1
    assert collected[0].plain == "[info] hello"
    assert collected[0].logger_name == "logbus_test"


def test_log_bus_level_filter() -> None:
    collected: list[LogRecord] = []
    get_log_bus().subscribe(collected.append, level_name="error")

    logger = get_logger("logbus_test")
    logger.info("hello")
    logger.error("boom")

    assert [r.level_name for r in collected] == ["ERROR"]
    assert collected[0].plain == "[error] boom"


def test_log_bus_unsubscribe() -> None:
    collected: list[LogRecord] = []
    bus = get_log_bus()
    bus.subscribe(collected.append)
    bus.unsubscribe(collected.append)

    get_logger("logbus_test").info("hello")
    assert collected == []


def test_log_bus_callback_exception_is_suppressed(capsys) -> None:
    def _boom(_rec: LogRecord) -> None:
        raise RuntimeError("fail")

    get_log_bus().subscribe(_boom)
    get_logger("logbus_test").info("hello")

    assert "LogBus subscriber raised" in capsys.readouterr().err


def test_verbosity_gates_levels() -> None:
    collected = _collect()
    logger = get_logger("gate_test")

    set_verbosity(VerbosityLevel.QUIET)
    logger.info("hidden")
    logger.verbose("hidden")
    logger.warning("shown")
    logger.error("shown")

    set_verbosity(VerbosityLevel.VERBOSE)
    logger.verbose("detail")
    logger.debug("hidden")

    assert [r.plain for r in collected] == ["[warning] shown", "[error] shown", "[verbose] detail"]


def test_console_can_be_disabled(capsys) -> None:
    collected = _collect()
    set_console_enabled(False)

    get_logger("quiet_console").error("boom")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""
    assert [r.plain for r in collected] == ["[error] boom"]
