"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import LaterReadConfig

logger = logging.getLogger(__name__)

_config_cache: LaterReadConfig | None = None


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_config_dir() -> Path:
    """Directory holding laterread's user files."""
    return get_xdg_config_home() / "laterread"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/laterread/config.json (or XDG equivalent)
    """
    return get_config_dir() / "config.json"


def get_user_env_path() -> Path:
    """Path of the user .env file (also holds the stored API key)."""
    return get_config_dir() / ".env"


def get_state_path() -> Path:
    """Path of the small JSON file with reminder state."""
    return get_config_dir() / "state.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries; nested dicts are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 30}})
        {'a': 1, 'b': {'x': 10, 'y': 30}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def _set(config_dict: dict[str, Any], section: str, key: str, value: Any) -> None:
    config_dict.setdefault(section, {})[key] = value


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        LATERREAD_VAULT - overrides storage.vault_dir
        LATERREAD_INBOX - overrides storage.inbox_path
        LATERREAD_LATERWRITE - overrides storage.laterwrite_path
        LATERREAD_MODEL - overrides classifier.model
        LATERREAD_AUTO_CLASSIFY - overrides classifier.auto_classify

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if vault := os.environ.get("LATERREAD_VAULT"):
        _set(result, "storage", "vault_dir", vault)

    if inbox := os.environ.get("LATERREAD_INBOX"):
        _set(result, "storage", "inbox_path", inbox)

    if laterwrite := os.environ.get("LATERREAD_LATERWRITE"):
        _set(result, "storage", "laterwrite_path", laterwrite)

    if model := os.environ.get("LATERREAD_MODEL"):
        _set(result, "classifier", "model", model)

    if auto_str := os.environ.get("LATERREAD_AUTO_CLASSIFY"):
        _set(result, "classifier", "auto_classify", auto_str.lower() not in ("false", "0", ""))

    return result


def load_config(use_cache: bool = True) -> LaterReadConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (LATERREAD_*)
        2. User config (~/.config/laterread/config.json)
        3. Model defaults

    Args:
        use_cache: If True, return cached config from previous load

    Returns:
        Validated LaterReadConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged: dict[str, Any] = {}

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    merged = apply_env_overrides(merged)

    config = LaterReadConfig(**merged)
    _config_cache = config
    return config


def clear_cache() -> None:
    """Clear the cached configuration."""
    global _config_cache
    _config_cache = None
