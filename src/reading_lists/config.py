"""Configuration persistence and preference access."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from platformdirs import user_config_dir, user_data_dir

from reading_lists.models import (
    CONFIG_APP_NAME,
    DEFAULT_SITE,
    MAX_PAGES_PER_LIST,
    MAX_READING_LISTS,
    SORT_MODES,
    SORT_NAME_ASC,
    UserConfig,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# Validation contract: _dict_to_config() guarantees valid output for any input:
#
#   Field                Rule                        Handler
#   ───────────────────  ──────────────────────────  ──────────────────
#   sort_mode            in SORT_MODES               _dict_to_config
#   max_lists            x ≥ 1                       _coerce_limit
#   max_pages_per_list   x ≥ 1                       _coerce_limit
#   scalar fields        type-checked via _safe_get  _dict_to_config
#
CONFIG_FILENAME = "config.json"
DB_FILENAME = "reading_lists.db"

ONBOARDING_PREF_KEY = "onboarding_enabled"
SORT_MODE_PREF_KEY = "sort_mode"


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/reading-lists/config.json
    - macOS: ~/Library/Application Support/reading-lists/config.json
    - Windows: %APPDATA%/reading-lists/config.json
    """
    config_dir = Path(user_config_dir(CONFIG_APP_NAME))
    return config_dir / CONFIG_FILENAME


def get_db_path(config: UserConfig) -> Path:
    """Get the path to the reading list database (config override wins)."""
    if config.db_path:
        return Path(config.db_path).expanduser()
    return Path(user_data_dir(CONFIG_APP_NAME)) / DB_FILENAME


def _config_to_dict(config: UserConfig) -> dict[str, Any]:
    """Serialize UserConfig to a JSON-compatible dictionary."""
    return {
        "version": config.version,
        "onboarding_enabled": config.onboarding_enabled,
        "sort_mode": config.sort_mode,
        "max_lists": max(1, config.max_lists),
        "max_pages_per_list": max(1, config.max_pages_per_list),
        "site": config.site,
        "db_path": config.db_path,
        "limits_fetched_at": config.limits_fetched_at,
    }


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type):
        return default
    return value


def _coerce_limit(value: Any, default: int) -> int:
    """Validate a limit value; bools and non-positive ints fall back."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        return default
    return value


def _dict_to_config(data: dict[str, Any]) -> UserConfig:
    """Deserialize a dictionary to UserConfig with type validation."""
    sort_mode = _safe_get(data, "sort_mode", SORT_NAME_ASC, str)
    if sort_mode not in SORT_MODES:
        logger.warning("Invalid sort_mode %r, defaulting to %r", sort_mode, SORT_NAME_ASC)
        sort_mode = SORT_NAME_ASC
    return UserConfig(
        onboarding_enabled=_safe_get(data, "onboarding_enabled", True, bool),
        sort_mode=sort_mode,
        max_lists=_coerce_limit(data.get("max_lists"), MAX_READING_LISTS),
        max_pages_per_list=_coerce_limit(data.get("max_pages_per_list"), MAX_PAGES_PER_LIST),
        site=_safe_get(data, "site", DEFAULT_SITE, str) or DEFAULT_SITE,
        db_path=_safe_get(data, "db_path", "", str),
        limits_fetched_at=_safe_get(data, "limits_fetched_at", "", str),
        version=_safe_get(data, "version", 1, int),
    )


def load_config() -> UserConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return UserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            logger.warning("Config file root is not an object, using defaults")
            return UserConfig()
        return _dict_to_config(data)
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        return UserConfig()
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return UserConfig()


def save_config(config: UserConfig) -> bool:
    """Write the config next to its final path, then swap it in with os.replace().

    Returns False (and logs) when the directory or file cannot be written.
    """
    config_path = get_config_path()
    payload = json.dumps(_config_to_dict(config), indent=2, ensure_ascii=False)
    tmp_path: str | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=config_path.parent,
            prefix=".config-",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(payload)
        os.replace(tmp_path, config_path)
    except OSError as e:
        logger.error("Failed to save config to %s: %s", config_path, e)
        if tmp_path is not None:
            Path(tmp_path).unlink(missing_ok=True)
        return False
    return True


# ============================================================================
# Preference access
# ============================================================================


@runtime_checkable
class Preferences(Protocol):
    """Key-value view over persisted user preferences."""

    def get_bool(self, key: str, default: bool) -> bool: ...

    def set_bool(self, key: str, value: bool) -> None: ...

    def get_str(self, key: str, default: str) -> str: ...

    def set_str(self, key: str, value: str) -> None: ...


class MemoryPreferences:
    """In-process preferences; nothing survives the process."""

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self.values: dict[str, Any] = dict(values or {})

    def get_bool(self, key: str, default: bool) -> bool:
        return _safe_get(self.values, key, default, bool)

    def set_bool(self, key: str, value: bool) -> None:
        self.values[key] = value

    def get_str(self, key: str, default: str) -> str:
        return _safe_get(self.values, key, default, str)

    def set_str(self, key: str, value: str) -> None:
        self.values[key] = value


class ConfigPreferences:
    """Preferences backed by UserConfig; every write is saved to disk."""

    _FIELDS: dict[str, type] = {
        ONBOARDING_PREF_KEY: bool,
        SORT_MODE_PREF_KEY: str,
    }

    def __init__(self, config: UserConfig, *, save: bool = True) -> None:
        self.config = config
        self._save = save

    def _get(self, key: str, default: Any, expected_type: type) -> Any:
        if self._FIELDS.get(key) is not expected_type:
            raise KeyError(f"Unknown {expected_type.__name__} preference: {key}")
        value = getattr(self.config, key)
        return value if isinstance(value, expected_type) else default

    def _set(self, key: str, value: Any, expected_type: type) -> None:
        if self._FIELDS.get(key) is not expected_type:
            raise KeyError(f"Unknown {expected_type.__name__} preference: {key}")
        setattr(self.config, key, value)
        if self._save and not save_config(self.config):
            logger.warning("Preference %s changed but could not be saved", key)

    def get_bool(self, key: str, default: bool) -> bool:
        return self._get(key, default, bool)

    def set_bool(self, key: str, value: bool) -> None:
        self._set(key, value, bool)

    def get_str(self, key: str, default: str) -> str:
        return self._get(key, default, str)

    def set_str(self, key: str, value: str) -> None:
        self._set(key, value, str)


__all__ = [
    "CONFIG_APP_NAME",
    "CONFIG_FILENAME",
    "DB_FILENAME",
    "ONBOARDING_PREF_KEY",
    "SORT_MODE_PREF_KEY",
    "ConfigPreferences",
    "MemoryPreferences",
    "Preferences",
    "get_config_path",
    "get_db_path",
    "load_config",
    "save_config",
]
