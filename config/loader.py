"""
Configuration loader.

Loads configuration from:
1. Default values (built-in)
2. TOML config file (chartreplay.toml or ~/.config/chartreplay/config.toml)
3. Environment variables (CHARTREPLAY_ prefix, .env honoured)

Priority: env vars > config file > defaults
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ports.errors import ErrorCode

from .schema import EngineConfig

logger = logging.getLogger(__name__)

# Config file search paths (in priority order)
CONFIG_PATHS = [
    Path("chartreplay.toml"),                          # Current directory
    Path(".chartreplay.toml"),                         # Hidden in current directory
    Path.home() / ".config" / "chartreplay" / "config.toml",  # User config
]

# Environment variable prefix
ENV_PREFIX = "CHARTREPLAY_"

# Env var suffix -> (section, field)
ENV_OVERRIDES = {
    "BUFFER_AHEAD": ("replay", "buffer_ahead"),
    "BUFFER_THRESHOLD": ("replay", "buffer_threshold"),
    "BASE_INTERVAL_MS": ("replay", "base_interval_ms"),
    "MIN_INTERVAL_MS": ("replay", "min_interval_ms"),
    "ANIMATION_FRAME_MS": ("replay", "animation_frame_ms"),
    "DEFAULT_SPEED": ("replay", "default_speed"),
    "DEFAULT_LOOKBACK": ("indicators", "default_lookback"),
    "VOLUME_UP_COLOR": ("display", "volume_up_color"),
    "VOLUME_DOWN_COLOR": ("display", "volume_down_color"),
    "LABEL_FORMAT": ("display", "label_format"),
}


class ConfigError(Exception):
    """Configuration error with helpful message."""

    def __init__(self, message: str, source: str | None = None, field: str | None = None):
        self.code = ErrorCode.VALIDATION_CONFIG
        self.source = source
        self.field = field
        super().__init__(message)

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {super().__str__()}"]
        if self.source:
            parts.append(f"Source: {self.source}")
        if self.field:
            parts.append(f"Field: {self.field}")
        return " | ".join(parts)


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load TOML file if it exists."""
    if not path.exists():
        return {}

    try:
        import tomllib
    except ImportError:
        # Python < 3.11 fallback
        import tomli as tomllib

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        logger.info(f"Loaded config from: {path}")
        return data
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to parse TOML: {e}", source=str(path)) from e


def _find_config_file() -> Path | None:
    """Find the first existing config file."""
    for path in CONFIG_PATHS:
        if path.exists():
            return path
    return None


def _load_env_overrides() -> dict[str, dict[str, str]]:
    """Collect CHARTREPLAY_* overrides grouped by config section."""
    overrides: dict[str, dict[str, str]] = {}
    for suffix, (section, field) in ENV_OVERRIDES.items():
        value = os.environ.get(f"{ENV_PREFIX}{suffix}")
        if value is not None:
            overrides.setdefault(section, {})[field] = value
    return overrides


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: Path | str | None = None) -> EngineConfig:
    """
    Load and validate configuration.

    Args:
        config_path: Explicit path to config file (optional)

    Returns:
        Validated EngineConfig

    Raises:
        ConfigError: If configuration is invalid
    """
    load_dotenv()

    config_data: dict[str, Any] = {}
    source: str | None = None

    # Load from config file
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}", source=str(path))
        config_data = _load_toml_file(path)
        source = str(path)
    else:
        found_path = _find_config_file()
        if found_path:
            config_data = _load_toml_file(found_path)
            source = str(found_path)

    # Environment wins over the file
    env_overrides = _load_env_overrides()
    if env_overrides:
        config_data = _deep_merge(config_data, env_overrides)
        count = sum(len(v) for v in env_overrides.values())
        logger.debug(f"Applied {count} override(s) from environment")

    # Validate and create config
    try:
        config = EngineConfig(**config_data)
    except ValidationError as e:
        errors = e.errors()
        if errors:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get("loc", []))
            msg = first_error.get("msg", "Validation error")
            raise ConfigError(f"Invalid configuration: {msg}", source=source, field=field) from e
        raise ConfigError(f"Invalid configuration: {e}", source=source) from e

    return config


@lru_cache
def get_config() -> EngineConfig:
    """
    Get singleton configuration instance.

    Uses LRU cache to ensure config is loaded only once.
    """
    return load_config()


def reload_config(config_path: Path | str | None = None) -> EngineConfig:
    """
    Force reload configuration.

    Clears the cache and reloads from file/environment. An explicit path
    is loaded directly and not cached.
    """
    get_config.cache_clear()
    if config_path:
        return load_config(config_path)
    return get_config()
