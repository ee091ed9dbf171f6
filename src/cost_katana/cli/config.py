"""Configuration storage for cost-katana.

Settings live in ~/.config/cost-katana/config in an INI-style format:

    [default]
    apiKey = ck-...
    baseUrl = https://cost-katana-backend.store
    defaultModel = gpt-4

Every key is declared in CONFIG_SCHEMA with its type and default, so values
come back typed and ``set`` rejects anything the schema does not allow.

Security:
- File permissions are set to 600 (owner read/write only)
- The API key is never logged
"""

from __future__ import annotations

import logging
import os
import stat
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cost_katana.errors import InvalidConfigValue

log = logging.getLogger(__name__)

SECTION = "default"
CONFIG_DIR_ENV = "COST_KATANA_CONFIG_DIR"
DEFAULT_BASE_URL = "https://cost-katana-backend.store"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def default_config_path() -> Path:
    """Path of the config file, honoring $COST_KATANA_CONFIG_DIR."""
    override = os.environ.get(CONFIG_DIR_ENV)
    base = Path(override).expanduser() if override else Path.home() / ".config" / "cost-katana"
    return base / "config"


@dataclass(frozen=True)
class ConfigKey:
    """Schema entry for one configuration key.

    Attributes:
        name: Key name as stored and typed on the command line.
        type: One of str, int, float, bool.
        default: Value used when the key is not set.
        description: Shown by ``config show``.
        choices: Allowed values for enum-like string keys.
        env_var: Environment variable that overrides the stored value.
        secret: Mask the value when displayed.
    """

    name: str
    type: type
    default: Any = None
    description: str = ""
    choices: tuple[str, ...] | None = None
    env_var: str | None = None
    secret: bool = False

    def convert(self, raw: Any) -> Any:
        """Coerce a raw value (usually a string) to this key's type.

        Raises:
            InvalidConfigValue: If the value cannot be converted or is out of range.
        """
        if self.type is bool:
            if isinstance(raw, bool):
                return raw
            text = str(raw).strip().lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise InvalidConfigValue(self.name, f"expected true/false, got {raw!r}")

        if self.type in (int, float):
            try:
                value = self.type(raw)
            except (TypeError, ValueError):
                kind = "integer" if self.type is int else "number"
                raise InvalidConfigValue(self.name, f"invalid {kind}: {raw!r}") from None
            _check_range(self.name, value)
            return value

        value = str(raw).strip()
        if not value:
            raise InvalidConfigValue(self.name, "value cannot be empty")
        if self.choices and value not in self.choices:
            raise InvalidConfigValue(
                self.name, f"must be one of {', '.join(self.choices)}, got {value!r}"
            )
        return value


def _check_range(name: str, value: float) -> None:
    if name == "defaultTemperature" and not 0.0 <= value <= 2.0:
        raise InvalidConfigValue(name, "must be between 0 and 2")
    if name == "defaultMaxTokens" and value <= 0:
        raise InvalidConfigValue(name, "must be greater than 0")


CONFIG_SCHEMA: dict[str, ConfigKey] = {
    key.name: key
    for key in (
        ConfigKey(
            "apiKey",
            str,
            None,
            "Backend API key",
            env_var="COST_KATANA_API_KEY",
            secret=True,
        ),
        ConfigKey(
            "baseUrl",
            str,
            DEFAULT_BASE_URL,
            "Backend base URL",
            env_var="COST_KATANA_BASE_URL",
        ),
        ConfigKey(
            "defaultModel",
            str,
            "gpt-4",
            "Model used by chat",
            env_var="COST_KATANA_DEFAULT_MODEL",
        ),
        ConfigKey("defaultTemperature", float, 0.7, "Chat temperature (0.0-2.0)"),
        ConfigKey("defaultMaxTokens", int, 2000, "maxTokens sent with each chat message"),
        ConfigKey(
            "outputFormat",
            str,
            "table",
            "Default output format",
            choices=("table", "json", "csv"),
        ),
        ConfigKey("debugMode", bool, False, "Enable debug logging"),
    )
}


def mask_secret(value: str) -> str:
    """Mask a secret for display, showing only first and last 4 chars."""
    if len(value) <= 12:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"


class ConfigStore:
    """Typed key/value settings backed by an INI file.

    Example:
        >>> store = ConfigStore()
        >>> store.set("apiKey", "ck-...")
        >>> store.save()
        >>> store.get("defaultTemperature")
        0.7
    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize config store.

        Args:
            path: Custom path for the config file. Defaults to
                  ~/.config/cost-katana/config
        """
        self.path = path or default_config_path()
        self._values: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load settings from file, skipping unknown or invalid entries."""
        if not self.path.exists():
            return

        try:
            parser = ConfigParser(interpolation=None)
            parser.optionxform = str  # keep camelCase keys
            parser.read(self.path)
        except Exception as e:
            log.warning(f"Failed to load configuration: {e}")
            return

        if not parser.has_section(SECTION):
            return

        for name, raw in parser.items(SECTION):
            spec = CONFIG_SCHEMA.get(name)
            if spec is None:
                log.debug(f"Ignoring unknown configuration key: {name}")
                continue
            try:
                self._values[name] = spec.convert(raw)
            except InvalidConfigValue as e:
                log.warning(f"Ignoring invalid configuration value: {e}")

    def save(self) -> None:
        """Save settings to file with secure permissions."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        parser = ConfigParser(interpolation=None)
        parser.optionxform = str
        parser.add_section(SECTION)
        for name, value in self._values.items():
            parser.set(SECTION, name, str(value).lower() if isinstance(value, bool) else str(value))

        with open(self.path, "w") as f:
            parser.write(f)

        try:
            os.chmod(self.path, stat.S_IRUSR | stat.S_IWUSR)
        except OSError:
            log.warning("Could not set secure file permissions on configuration file")

    @staticmethod
    def _spec(key: str) -> ConfigKey:
        spec = CONFIG_SCHEMA.get(key)
        if spec is None:
            raise InvalidConfigValue(key, f"unknown key (valid keys: {', '.join(CONFIG_SCHEMA)})")
        return spec

    @staticmethod
    def _env_value(spec: ConfigKey) -> str | None:
        """The key's environment override, ignoring unset or blank variables."""
        if not spec.env_var:
            return None
        return os.environ.get(spec.env_var, "").strip() or None

    def get(self, key: str) -> Any:
        """Get the effective value of a key.

        Environment overrides win over the file, the file wins over the
        schema default. A blank environment variable does not override.

        Raises:
            InvalidConfigValue: If the key is not in the schema.
        """
        spec = self._spec(key)
        env_value = self._env_value(spec)
        if env_value is not None:
            return spec.convert(env_value)
        if key in self._values:
            return self._values[key]
        return spec.default

    def source(self, key: str) -> str:
        """Where the effective value of ``key`` comes from: env, file or default."""
        spec = self._spec(key)
        if self._env_value(spec) is not None:
            return f"${spec.env_var}"
        if key in self._values:
            return "file"
        return "default"

    def set(self, key: str, value: Any) -> Any:
        """Validate, convert and store a value. Returns the stored value.

        Raises:
            InvalidConfigValue: Unknown key or invalid value.
        """
        spec = self._spec(key)
        converted = spec.convert(value)
        self._values[key] = converted
        log.debug(f"Configuration updated: {key}")
        return converted

    def has(self, key: str) -> bool:
        """Whether the key is explicitly stored in the file."""
        self._spec(key)
        return key in self._values

    def delete(self, key: str) -> bool:
        """Remove a stored key. Returns False if it was not stored."""
        self._spec(key)
        if key not in self._values:
            return False
        del self._values[key]
        self.save()
        return True

    def reset(self) -> None:
        """Remove all stored settings."""
        self._values.clear()
        if self.path.exists():
            self.path.unlink()

    def display_value(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            return ""
        if CONFIG_SCHEMA[key].secret:
            return mask_secret(str(value))
        return str(value).lower() if isinstance(value, bool) else str(value)

    def records(self) -> list[dict[str, str]]:
        """One display record per schema key, secrets masked."""
        return [
            {
                "key": name,
                "value": self.display_value(name),
                "source": self.source(name),
                "description": spec.description,
            }
            for name, spec in CONFIG_SCHEMA.items()
        ]
