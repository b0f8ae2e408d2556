"""Configuration resolver with layered priority.

Priority (highest to lowest):
1. CLI arguments
2. Environment variables (VAULTIMPORT_*)
3. Config files (user > system)
4. Defaults
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from vaultimport.core.errors import ConfigError

ALLOWED_LOGGING_LEVELS = frozenset({"quiet", "normal", "verbose", "debug"})
DEFAULT_LOGGING_LEVEL = "normal"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ConfigSource:
    """Represents where a config value came from."""

    value: Any
    source: str  # 'cli' | 'env' | 'user_config' | 'system_config' | 'default'


@dataclass(frozen=True)
class LoggingPolicy:
    """Resolved, immutable logging policy."""

    level_name: str  # quiet | normal | verbose | debug
    emit_info: bool
    emit_debug: bool
    source: str


def _flatten_items(data: dict[str, Any], prefix: str = "") -> list[tuple[str, Any]]:
    """Flatten nested dicts to dot-notation key paths."""
    items: list[tuple[str, Any]] = []
    for key, value in data.items():
        key_path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            items.extend(_flatten_items(value, key_path))
        else:
            items.append((key_path, value))
    return items


def coerce_bool(key: str, value: Any) -> bool:
    """Normalize a resolved value into a bool.

    Environment variables always arrive as strings, YAML values usually as
    real booleans.

    Raises:
        ConfigError: If the value has no boolean meaning.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    s = str(value).strip().lower()
    if s in _TRUE_VALUES:
        return True
    if s in _FALSE_VALUES:
        return False
    raise ConfigError(
        f"Config key '{key}' must be a bool, got {value!r}",
        "Use true/false, yes/no, on/off or 1/0",
    )


class ConfigResolver:
    """Resolve configuration with strict priority.

    Example:
        resolver = ConfigResolver(
            cli_args={'importer': {'import_path': 'Templates'}},
            user_config_path=Path('~/.config/vaultimport/config.yaml'),
        )

        value, source = resolver.resolve('importer.import_path')
        # value = 'Templates', source = 'cli'
    """

    def __init__(
        self,
        cli_args: dict[str, Any] | None = None,
        user_config_path: Path | None = None,
        system_config_path: Path | None = None,
        defaults: dict[str, Any] | None = None,
    ) -> None:
        """Initialize config resolver.

        Args:
            cli_args: Arguments from CLI (highest priority), nested dicts
            user_config_path: Path to user config file
            system_config_path: Path to system config file
            defaults: Default values (lowest priority)
        """
        self.cli_args = cli_args or {}
        self.user_config_path = user_config_path or default_user_config_path()
        self.system_config_path = system_config_path or Path("/etc/vaultimport/config.yaml")
        self.defaults = self._default_config() if defaults is None else defaults

        self._user_config: dict[str, Any] | None = None
        self._system_config: dict[str, Any] | None = None

    def resolve(self, key: str) -> tuple[Any, str]:
        """Resolve config value with priority.

        Args:
            key: Config key (dot notation: 'importer.import_path')

        Returns:
            (value, source) tuple

        Raises:
            ConfigError: If key not found in any source
        """
        for source, lookup in self._layers():
            value = lookup(key)
            if value is not None:
                return value, source

        raise ConfigError(f"Config key '{key}' not found in any source")

    def _layers(self) -> list[tuple[str, Callable[[str], Any | None]]]:
        """Lookups in priority order. File layers load lazily on first use."""
        return [
            ("cli", lambda k: self._get_nested(self.cli_args, k)),
            ("env", self._from_env),
            ("user_config", lambda k: self._get_nested(self._get_user_config(), k)),
            ("system_config", lambda k: self._get_nested(self._get_system_config(), k)),
            ("default", lambda k: self._get_nested(self.defaults, k)),
        ]

    def resolve_str(self, key: str, default: str | None = None) -> str:
        try:
            value, _src = self.resolve(key)
        except ConfigError:
            if default is None:
                raise
            return default
        if not isinstance(value, str):
            raise ConfigError(f"Config key '{key}' must be a string, got {type(value).__name__}")
        return value

    def resolve_bool(self, key: str, default: bool | None = None) -> bool:
        try:
            value, _src = self.resolve(key)
        except ConfigError:
            if default is None:
                raise
            return default
        return coerce_bool(key, value)

    def resolve_logging_level(self) -> str:
        """Resolve and validate logging.level.

        Allowed values (after normalization): quiet | normal | verbose | debug.
        Missing key resolves to DEFAULT_LOGGING_LEVEL.

        Raises:
            ConfigError: If the resolved value is invalid.
        """
        level, _src = self._resolve_logging_level_and_source()
        return level

    def resolve_logging_policy(self) -> LoggingPolicy:
        """Resolve the logging policy (side-effect free)."""
        level_name, source = self._resolve_logging_level_and_source()
        return LoggingPolicy(
            level_name=level_name,
            emit_info=level_name != "quiet",
            emit_debug=level_name in ("verbose", "debug"),
            source=source,
        )

    def _resolve_logging_level_and_source(self) -> tuple[str, str]:
        key = "logging.level"
        try:
            value, source = self.resolve(key)
        except ConfigError:
            return DEFAULT_LOGGING_LEVEL, "default"

        if not isinstance(value, str):
            raise ConfigError(f"Config key '{key}' must be a string, got {type(value).__name__}")

        norm = value.strip().lower()
        if norm not in ALLOWED_LOGGING_LEVELS:
            allowed = ", ".join(sorted(ALLOWED_LOGGING_LEVELS))
            raise ConfigError(f"Invalid '{key}': {value!r}. Allowed values: {allowed}")
        return norm, source

    def list_known_keys(self) -> list[str]:
        return sorted(k for k, _v in _flatten_items(self.defaults))

    def resolve_all(self) -> dict[str, ConfigSource]:
        """Resolve every key known to defaults, CLI args or config files."""
        all_keys: set[str] = set(self.list_known_keys())
        all_keys.update(k for k, _v in _flatten_items(self.cli_args))
        all_keys.update(k for k, _v in _flatten_items(self._get_user_config()))
        all_keys.update(k for k, _v in _flatten_items(self._get_system_config()))

        result: dict[str, ConfigSource] = {}
        for key in sorted(all_keys):
            try:
                value, source = self.resolve(key)
            except ConfigError:
                continue
            result[key] = ConfigSource(value=value, source=source)
        return result

    def _from_env(self, key: str) -> Any | None:
        """Environment variable format: VAULTIMPORT_IMPORTER_IMPORT_PATH."""
        env_key = f"VAULTIMPORT_{key.upper().replace('.', '_')}"
        return os.environ.get(env_key)

    def _get_user_config(self) -> dict[str, Any]:
        if self._user_config is None:
            self._user_config = self._load_yaml(self.user_config_path)
        return self._user_config

    def _get_system_config(self) -> dict[str, Any]:
        if self._system_config is None:
            self._system_config = self._load_yaml(self.system_config_path)
        return self._system_config

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except Exception as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e
        return data if isinstance(data, dict) else {}

    def _get_nested(self, data: dict[str, Any], key: str) -> Any | None:
        """Get nested value using dot notation.

        Example:
            data = {'importer': {'import_path': 'Templates'}}
            _get_nested(data, 'importer.import_path') -> 'Templates'
        """
        current: Any = data
        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
            if current is None:
                return None
        return current

    @staticmethod
    def _default_config() -> dict[str, Any]:
        """Default configuration."""
        return {
            "vault": {
                "root_dir": ".",
                "config_dir": ".obsidian",
            },
            "importer": {
                # Empty string means the vault root.
                "import_path": "",
                "overwrite_files": False,
            },
            "logging": {
                "level": DEFAULT_LOGGING_LEVEL,
                "color": True,
            },
            "diagnostics": {
                "enabled": False,
                "path": str(Path.home() / ".vaultimport" / "diagnostics.jsonl"),
            },
        }


def default_user_config_path() -> Path:
    return Path.home() / ".config/vaultimport/config.yaml"
