"""
Configuration management for taskcal.
"""

import os
from pathlib import Path
from typing import Optional

from .models import AppConfig
from .paths import get_path_manager


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return get_path_manager().config_path


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        AppConfig object
    """
    if config_path is None:
        config_path = str(get_default_config_path())

    return AppConfig.load_from_file(config_path)


def save_config(config: AppConfig, config_path: Optional[str] = None):
    """
    Save configuration to file.

    Args:
        config: AppConfig object to save
        config_path: Optional path to save to. Uses default if not provided.
    """
    if config_path is None:
        manager = get_path_manager()
        manager.ensure_directories()
        config_path = str(manager.config_path)

    config_dir = os.path.dirname(config_path)
    os.makedirs(config_dir, exist_ok=True)

    config.save_to_file(config_path)


def get_log_path() -> Path:
    """Get the log file path, creating its directory."""
    manager = get_path_manager()
    manager.ensure_directories()
    return manager.log_path
