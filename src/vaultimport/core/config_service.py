"""ConfigService: structured configuration access and mutation.

This is the persisted-preferences side of the importer: hosts read effective
settings and set individual values without touching the YAML file format.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from vaultimport.core.config import (
    ALLOWED_LOGGING_LEVELS,
    ConfigResolver,
    coerce_bool,
    default_user_config_path,
)
from vaultimport.core.errors import ConfigError

# Short names used by the settings UI of the editor plugin.
KEY_ALIASES = {
    "import_path": "importer.import_path",
    "overwrite_files": "importer.overwrite_files",
}

_BOOL_KEYS = frozenset({"importer.overwrite_files", "diagnostics.enabled", "logging.color"})


def _load_yaml_dict(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except Exception as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e
    return data if isinstance(data, dict) else {}


def _dump_yaml_dict(data: dict[str, Any]) -> str:
    return yaml.safe_dump(data, sort_keys=True, default_flow_style=False, allow_unicode=False)


def _set_nested(data: dict[str, Any], key_path: str, value: Any) -> None:
    parts = [p for p in key_path.split(".") if p]
    if not parts:
        raise ConfigError("Empty key path")

    cur = data
    for part in parts[:-1]:
        nxt = cur.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[part] = nxt
        cur = nxt
    cur[parts[-1]] = value


def _unset_nested(data: dict[str, Any], key_path: str) -> bool:
    parts = [p for p in key_path.split(".") if p]
    if not parts:
        raise ConfigError("Empty key path")

    cur = data
    stack: list[tuple[dict[str, Any], str]] = []
    for part in parts[:-1]:
        nxt = cur.get(part)
        if not isinstance(nxt, dict):
            return False
        stack.append((cur, part))
        cur = nxt

    if parts[-1] not in cur:
        return False
    del cur[parts[-1]]

    # Prune empty parent mappings.
    while stack and cur == {}:
        parent, key = stack.pop()
        del parent[key]
        cur = parent
    return True


def canonical_key(key_path: str) -> str:
    return KEY_ALIASES.get(key_path, key_path)


def normalize_value(key_path: str, value: Any) -> Any:
    """Validate and normalize a value before it is persisted."""
    if key_path in _BOOL_KEYS:
        return coerce_bool(key_path, value)

    if key_path == "logging.level":
        norm = str(value).strip().lower()
        if norm not in ALLOWED_LOGGING_LEVELS:
            allowed = ", ".join(sorted(ALLOWED_LOGGING_LEVELS))
            raise ConfigError(f"Invalid '{key_path}': {value!r}. Allowed values: {allowed}")
        return norm

    if key_path == "importer.import_path":
        return str(value).strip().replace("\\", "/").strip("/")

    return value


@dataclass(frozen=True)
class EffectiveConfigItem:
    key: str
    value: Any
    source: str


class ConfigService:
    """Structured configuration API for hosts."""

    def __init__(
        self,
        *,
        cli_args: dict[str, Any] | None = None,
        user_config_path: Path | None = None,
        system_config_path: Path | None = None,
        defaults: dict[str, Any] | None = None,
    ) -> None:
        self._resolver = ConfigResolver(
            cli_args=cli_args,
            user_config_path=user_config_path or default_user_config_path(),
            system_config_path=system_config_path,
            defaults=defaults,
        )

    @property
    def resolver(self) -> ConfigResolver:
        return self._resolver

    @property
    def user_config_path(self) -> Path:
        return self._resolver.user_config_path

    def get_effective_items(self) -> list[EffectiveConfigItem]:
        resolved = self._resolver.resolve_all()
        return [
            EffectiveConfigItem(key=k, value=resolved[k].value, source=resolved[k].source)
            for k in sorted(resolved)
        ]

    def get_effective_config_snapshot(self) -> str:
        """Return a YAML snapshot of effective values and their sources."""
        flat = {
            item.key: {"value": item.value, "source": item.source}
            for item in self.get_effective_items()
        }
        return _dump_yaml_dict(flat)

    def _reinit_resolver(self) -> None:
        self._resolver = ConfigResolver(
            cli_args=self._resolver.cli_args,
            user_config_path=self._resolver.user_config_path,
            system_config_path=self._resolver.system_config_path,
            defaults=self._resolver.defaults,
        )

    def set_value(self, key_path: str, value: Any) -> None:
        """Persist a value in the user config file."""
        key_path = canonical_key(key_path)
        value = normalize_value(key_path, value)

        path = self.user_config_path
        data = _load_yaml_dict(path)
        _set_nested(data, key_path, value)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_dump_yaml_dict(data), encoding="utf-8")
        self._reinit_resolver()

    def unset_value(self, key_path: str) -> None:
        """Remove a key from the user config file (idempotent)."""
        key_path = canonical_key(key_path)
        path = self.user_config_path
        data = _load_yaml_dict(path)
        if not _unset_nested(data, key_path):
            return

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_dump_yaml_dict(data), encoding="utf-8")
        self._reinit_resolver()
