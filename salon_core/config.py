# =============================================================================
# salon_core/config.py
# Runtime Configuration for the Salon Sync Core
# =============================================================================
"""
Configuration loading.

Settings come from a TOML file (same layout as a Streamlit secrets file) and
are then overridden by environment variables:

    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"

    [local]
    db_path = "local_data/salon.db"

    [sync]
    connection_timeout = 5
    check_interval_online = 30
    check_interval_offline = 10
    delete_batch_limit = 500
    page_size = 1000
    start_monitoring = true

    [app]
    locale = "tr"

Environment overrides: SUPABASE_URL, SUPABASE_KEY, SALON_DB_PATH, SALON_LOCALE.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import toml

from salon_core.errors import ConfigurationError
from salon_core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(".salon") / "config.toml"
DEFAULT_DB_PATH = Path("local_data") / "salon.db"
SUPPORTED_LOCALES = ("tr", "en")


@dataclass
class SyncConfig:
    """Settings shared by every service built in the composition root."""
    db_path: Path = field(default_factory=lambda: DEFAULT_DB_PATH)
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    locale: str = "tr"
    connection_timeout: float = 5.0
    check_interval_online: float = 30.0
    check_interval_offline: float = 10.0
    delete_batch_limit: int = 500
    page_size: int = 1000
    start_monitoring: bool = True

    def __post_init__(self):
        self.db_path = Path(self.db_path)
        self.validate()

    @property
    def has_supabase(self) -> bool:
        """Whether cloud credentials are configured."""
        return bool(self.supabase_url and self.supabase_key)

    def validate(self) -> None:
        """Raise ConfigurationError for values the services cannot use."""
        if self.locale not in SUPPORTED_LOCALES:
            raise ConfigurationError(
                f"Unsupported locale: {self.locale}",
                config_key="locale",
                expected_type=" | ".join(SUPPORTED_LOCALES),
            )
        for key in ("connection_timeout", "check_interval_online", "check_interval_offline"):
            if getattr(self, key) <= 0:
                raise ConfigurationError(f"{key} must be positive", config_key=key, expected_type="float > 0")
        for key in ("delete_batch_limit", "page_size"):
            if getattr(self, key) <= 0:
                raise ConfigurationError(f"{key} must be positive", config_key=key, expected_type="int > 0")
        if bool(self.supabase_url) != bool(self.supabase_key):
            raise ConfigurationError(
                "Supabase url and key must be configured together",
                config_key="supabase",
            )


# Maps TOML (section, key) to SyncConfig field names
_TOML_KEYS = {
    ("supabase", "url"): "supabase_url",
    ("supabase", "key"): "supabase_key",
    ("local", "db_path"): "db_path",
    ("sync", "connection_timeout"): "connection_timeout",
    ("sync", "check_interval_online"): "check_interval_online",
    ("sync", "check_interval_offline"): "check_interval_offline",
    ("sync", "delete_batch_limit"): "delete_batch_limit",
    ("sync", "page_size"): "page_size",
    ("sync", "start_monitoring"): "start_monitoring",
    ("app", "locale"): "locale",
}

_ENV_KEYS = {
    "SUPABASE_URL": "supabase_url",
    "SUPABASE_KEY": "supabase_key",
    "SALON_DB_PATH": "db_path",
    "SALON_LOCALE": "locale",
}


def _read_toml(path: Path) -> Dict[str, Any]:
    """Flatten a TOML file into SyncConfig keyword arguments."""
    try:
        raw = toml.load(path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}") from e

    values: Dict[str, Any] = {}
    for (section, key), name in _TOML_KEYS.items():
        if section in raw and key in raw[section]:
            values[name] = raw[section][key]
    return values


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    """Convert raw TOML/env values to the SyncConfig field types."""
    types = {f.name: f.type for f in fields(SyncConfig)}
    coerced = {}
    for name, value in values.items():
        expected = types.get(name)
        try:
            if expected == "float":
                coerced[name] = float(value)
            elif expected == "int":
                coerced[name] = int(value)
            elif expected == "bool" and isinstance(value, str):
                coerced[name] = value.strip().lower() in ("1", "true", "yes", "on")
            else:
                coerced[name] = value
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid value for {name}: {value!r}",
                config_key=name,
                expected_type=str(expected),
            ) from e
    return coerced


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> SyncConfig:
    """
    Load configuration from a TOML file and environment overrides.

    Args:
        path: TOML file; defaults to .salon/config.toml when it exists
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated SyncConfig
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if config_path.exists():
        values.update(_read_toml(config_path))
        logger.debug(f"Loaded config from {config_path}")
    elif path:
        raise ConfigurationError(f"Config file not found: {config_path}")

    for env_key, name in _ENV_KEYS.items():
        if environ.get(env_key):
            values[name] = environ[env_key]

    return SyncConfig(**_coerce(values))
