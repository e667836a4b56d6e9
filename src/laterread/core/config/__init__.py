"""
Configuration models and loading.

Pydantic models for laterread configuration with multi-layer merging:
defaults < user config < env vars.
"""

from .env import env_files, load_layered_env
from .loader import (
    clear_cache,
    get_config_dir,
    get_state_path,
    get_user_config_path,
    get_user_env_path,
    get_xdg_config_home,
    load_config,
)
from .models import ClassifierConfig, LaterReadConfig, ReadingConfig, StorageConfig

__all__ = [
    # Models
    "ClassifierConfig",
    "LaterReadConfig",
    "ReadingConfig",
    "StorageConfig",
    # Loader functions
    "clear_cache",
    "env_files",
    "get_config_dir",
    "get_state_path",
    "get_user_config_path",
    "get_user_env_path",
    "get_xdg_config_home",
    "load_config",
    "load_layered_env",
]
