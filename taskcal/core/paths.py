"""
Centralized path management for taskcal.

Resolves the per-user working directory and the files kept in it.
"""

import os
import sys
from pathlib import Path
from typing import Optional
import logging


class PathManager:
    """Manages taskcal file paths."""

    APP_DIR_NAME = "taskcal"
    HOME_ENV_VAR = "TASKCAL_HOME"

    # File names
    CONFIG_FILE = "config.json"
    STATE_FILE = "state.json"
    LOG_FILE = "taskcal.log"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._working_dir: Optional[Path] = None

    def _default_user_dir(self) -> Path:
        """Platform-appropriate per-user data directory."""
        if sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / self.APP_DIR_NAME
        if sys.platform.startswith("win"):
            appdata = os.environ.get("APPDATA")
            if appdata:
                return Path(appdata) / self.APP_DIR_NAME
            return Path.home() / "AppData" / "Roaming" / self.APP_DIR_NAME
        return Path.home() / ".config" / self.APP_DIR_NAME

    @property
    def working_dir(self) -> Path:
        """
        Get the working directory for taskcal data.

        Priority order:
        1. TASKCAL_HOME environment variable (explicit override)
        2. Platform per-user application directory
        """
        if self._working_dir is not None:
            return self._working_dir

        env_override = os.environ.get(self.HOME_ENV_VAR)
        if env_override:
            env_path = Path(env_override).expanduser().resolve()
            self.logger.debug(f"Using {self.HOME_ENV_VAR} override: {env_path}")
            self._working_dir = env_path
        else:
            self._working_dir = self._default_user_dir()

        return self._working_dir

    @property
    def config_path(self) -> Path:
        return self.working_dir / self.CONFIG_FILE

    @property
    def state_path(self) -> Path:
        """File holding persisted UI state such as marked events."""
        return self.working_dir / self.STATE_FILE

    @property
    def log_dir(self) -> Path:
        return self.working_dir / "logs"

    @property
    def log_path(self) -> Path:
        return self.log_dir / self.LOG_FILE

    def ensure_directories(self) -> None:
        """Create the working and log directories if they are missing."""
        for directory in (self.working_dir, self.log_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self.logger.warning(f"Could not create directory {directory}: {e}")


_path_manager: Optional[PathManager] = None


def get_path_manager() -> PathManager:
    """Return the process-wide PathManager."""
    global _path_manager
    if _path_manager is None:
        _path_manager = PathManager()
    return _path_manager


def reset_path_manager() -> None:
    """Forget the cached PathManager (used when TASKCAL_HOME changes)."""
    global _path_manager
    _path_manager = None
