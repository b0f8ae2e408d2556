"""Unit tests for the event bus and diagnostics envelopes."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from vaultimport.core.config import ConfigResolver
from vaultimport.core.diagnostics import (
    build_envelope,
    install_jsonl_sink,
    is_diagnostics_enabled,
    is_envelope,
    safe_publish,
)
from vaultimport.core.events import EventBus, get_event_bus


def assert_is_envelope(published_event: str, payload: dict[str, Any]) -> None:
    assert isinstance(payload, dict)
    assert set(payload.keys()) == {"event", "component", "operation", "timestamp", "data"}
    assert payload["event"] == published_event
    assert isinstance(payload["timestamp"], str)
    assert payload["timestamp"].endswith("Z")
    assert isinstance(payload["data"], dict)


def _resolver(tmp_path: Path, **cli: Any) -> ConfigResolver:
    return ConfigResolver(
        cli_args=cli,
        user_config_path=tmp_path / "user.yaml",
        system_config_path=tmp_path / "system.yaml",
    )


def test_build_envelope_shape() -> None:
    env = build_envelope(
        event="zip_import.entry",
        component="zip_import",
        operation="zip_import.write",
        data={"status": "created"},
    )
    assert_is_envelope("zip_import.entry", env)
    assert is_envelope(env)
    assert not is_envelope({"event": "x"})


def test_event_bus_subscribe_and_unsubscribe() -> None:
    bus = EventBus()
    got: list[dict[str, Any]] = []
    bus.subscribe("a", got.append)

    bus.publish("a", {"n": 1})
    bus.publish("b", {"n": 2})
    bus.unsubscribe("a", got.append)
    bus.publish("a", {"n": 3})

    assert got == [{"n": 1}]


def test_event_bus_handler_errors_do_not_propagate() -> None:
    bus = EventBus()
    got: list[str] = []

    def _boom(_data: dict[str, Any]) -> None:
        raise RuntimeError("handler failed")

    bus.subscribe("a", _boom)
    bus.subscribe_all(lambda event, _data: got.append(event))

    bus.publish("a")
    assert got == ["a"]


def test_safe_publish_uses_given_bus() -> None:
    bus = EventBus()
    got: list[str] = []
    bus.subscribe_all(lambda event, _data: got.append(event))

    safe_publish("x", {})
    safe_publish("y", {}, bus=bus)

    assert got == ["y"]


def test_diagnostics_disabled_by_default(tmp_path: Path) -> None:
    assert not is_diagnostics_enabled(_resolver(tmp_path))


def test_jsonl_sink_writes_envelopes(tmp_path: Path) -> None:
    out = tmp_path / "diag" / "events.jsonl"
    resolver = _resolver(tmp_path, diagnostics={"enabled": True, "path": str(out)})

    assert install_jsonl_sink(resolver=resolver) is True
    assert install_jsonl_sink(resolver=resolver) is False

    bus = get_event_bus()
    bus.publish(
        "zip_import.run.end",
        build_envelope(
            event="zip_import.run.end",
            component="zip_import",
            operation="zip_import.run",
            data={"status": "done"},
        ),
    )
    bus.publish("custom.event", {"k": "v"})

    lines = [json.loads(line) for line in out.read_text(encoding="utf-8").splitlines()]
    assert [line["event"] for line in lines] == ["zip_import.run.end", "custom.event"]
    assert lines[0]["data"] == {"status": "done"}
    assert lines[1]["component"] == "unknown"
    assert lines[1]["data"] == {"k": "v"}


def test_jsonl_sink_respects_disabled_flag(tmp_path: Path) -> None:
    out = tmp_path / "events.jsonl"
    resolver = _resolver(tmp_path, diagnostics={"enabled": False, "path": str(out)})

    install_jsonl_sink(resolver=resolver)
    get_event_bus().publish("anything", {})

    assert not out.exists()
