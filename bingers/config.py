import copy
import logging
import os
import sys
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

APP_NAME = "bingers"


class ConfigManager:
    """Handles configuration loading, validation, and defaults."""

    DEFAULT_CONFIG = {
        "data_dir": "",
        "api": {
            "base_url": "https://api.tvmaze.com",
            "timeout": 10,
            "retries": 3,
        },
        "search": {
            "statuses": ["Running"],
            "languages": ["English"],
        },
        "debug": False,
    }

    def __init__(self, config_path: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        if config_path:
            self.config_path = Path(config_path)
        else:
            self.config_path = self._get_default_config_path()

    def _get_base_path(self, env_var: str, fallback: Path) -> Path:
        if sys.platform == "win32":
            return Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        # Linux/Mac (XDG standard)
        return Path(os.environ.get(env_var, fallback))

    def _get_default_config_path(self) -> Path:
        """Determine the platform-specific default config path."""
        base_path = self._get_base_path("XDG_CONFIG_HOME", Path.home() / ".config")
        return base_path / APP_NAME / "config.yaml"

    def _get_default_data_dir(self) -> Path:
        base_path = self._get_base_path("XDG_DATA_HOME", Path.home() / ".local" / "share")
        return base_path / APP_NAME

    def load(self) -> Dict[str, Any]:
        """Load configuration from file, creating default if missing."""
        if not self.config_path.exists():
            self._create_default_config()
            config = {}
        else:
            try:
                config = yaml.safe_load(self.config_path.read_text()) or {}
            except (OSError, yaml.YAMLError) as e:
                self.logger.error(f"Error loading config {self.config_path}: {e}")
                config = {}

            if not isinstance(config, dict):
                self.logger.error(f"Ignoring config {self.config_path}: expected a mapping")
                config = {}

        config = self._apply_defaults(config)

        # Expand environment variables and ~ in data_dir
        if config["data_dir"]:
            config["data_dir"] = os.path.expanduser(os.path.expandvars(str(config["data_dir"])))
        else:
            config["data_dir"] = str(self._get_default_data_dir())

        return config

    def _apply_defaults(self, config: Dict) -> Dict:
        """Fill missing keys (one level of nesting) from DEFAULT_CONFIG."""
        merged = copy.deepcopy(self.DEFAULT_CONFIG)
        for key, value in config.items():
            if isinstance(merged.get(key), dict):
                if isinstance(value, dict):
                    merged[key].update(value)
                elif value is not None:
                    self.logger.error(f"Ignoring '{key}' in {self.config_path}: expected a mapping")
            elif value is not None:
                merged[key] = value
        return merged

    def _create_default_config(self):
        """Create a default configuration file."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            self.config_path.write_text(
                yaml.dump(self.DEFAULT_CONFIG, allow_unicode=True, default_flow_style=False)
            )
        except OSError as e:
            self.logger.warning(f"Unable to create default config at {self.config_path}: {e}")
            return
        self.logger.info(f"Created default config at {self.config_path}")
