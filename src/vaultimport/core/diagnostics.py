"""Diagnostics envelope + JSONL sink.

Every diagnostic event published on the event bus uses one envelope shape:

    {
      "event": "<string>",
      "component": "<string>",
      "operation": "<string>",
      "timestamp": "<iso8601 utc, trailing Z>",
      "data": { ... }
    }

The JSONL sink appends envelopes to ``diagnostics.path`` while
``diagnostics.enabled`` resolves true.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from vaultimport.core.config import ConfigResolver
from vaultimport.core.errors import ConfigError
from vaultimport.core.events import EventBus, get_event_bus
from vaultimport.core.logging import get_logger

_logger = get_logger(__name__)

ENVELOPE_KEYS = frozenset({"event", "component", "operation", "timestamp", "data"})


def build_envelope(
    *,
    event: str,
    component: str,
    operation: str,
    data: dict[str, Any],
) -> dict[str, Any]:
    ts = datetime.now(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    return {
        "event": event,
        "component": component,
        "operation": operation,
        "timestamp": ts,
        "data": data,
    }


def is_envelope(obj: Any) -> bool:
    if not isinstance(obj, dict) or set(obj.keys()) != ENVELOPE_KEYS:
        return False
    if not all(isinstance(obj[k], str) for k in ("event", "component", "operation", "timestamp")):
        return False
    return isinstance(obj["data"], dict)


def safe_publish(event: str, payload: dict[str, Any], *, bus: EventBus | None = None) -> None:
    """Publish without ever raising into the caller."""
    try:
        (bus or get_event_bus()).publish(event, payload)
    except Exception:
        return


def is_diagnostics_enabled(resolver: ConfigResolver) -> bool:
    try:
        return resolver.resolve_bool("diagnostics.enabled", default=False)
    except ConfigError as e:
        _logger.warning(f"Invalid diagnostics.enabled value; treating as disabled. {e.message}")
        return False


_SINK_INSTALLED = False


def install_jsonl_sink(*, resolver: ConfigResolver, bus: EventBus | None = None) -> bool:
    """Install the JSONL diagnostics subscriber once per process.

    Returns:
        True if this call installed the sink, False if it was already present.
    """
    global _SINK_INSTALLED
    if _SINK_INSTALLED:
        return False

    def _on_any_event(event: str, data: dict[str, Any]) -> None:
        if not is_diagnostics_enabled(resolver):
            return

        try:
            out_path = Path(resolver.resolve_str("diagnostics.path")).expanduser()
        except ConfigError:
            _logger.warning("Missing diagnostics.path; cannot write diagnostics JSONL.")
            return

        payload = data
        if not is_envelope(data):
            payload = build_envelope(
                event=event, component="unknown", operation="unknown", data=data
            )

        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            line = json.dumps(
                payload, ensure_ascii=True, separators=(",", ":"), sort_keys=True, default=str
            )
            with out_path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception as e:
            _logger.warning(f"Diagnostics sink write failed: {type(e).__name__}: {e}")

    (bus or get_event_bus()).subscribe_all(_on_any_event)
    _SINK_INSTALLED = True
    return True


def reset_jsonl_sink_flag() -> None:
    """Allow the sink to be installed again (tests clear the bus between runs)."""
    global _SINK_INSTALLED
    _SINK_INSTALLED = False
