# ycb/core/user_config.py
"""User preferences loader (.toml format)."""

import os
import toml
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field

from .errors import ConfigError

DEFAULT_YCB_URL = "https://yourcommonbase.com/backend"

LOCAL_CONFIG_PATH = Path(".ycb/config.toml")
HOME_CONFIG_PATH = Path.home() / ".ycb" / "config.toml"


@dataclass
class Preferences:
    """Credentials and backend location."""
    api_key: str = ""
    ycb_url: str = DEFAULT_YCB_URL


@dataclass
class UserConfig:
    """Complete user configuration."""
    preferences: Preferences = field(default_factory=Preferences)

    @classmethod
    def resolve_path(cls) -> Path:
        """Local project config first, then the home directory."""
        if LOCAL_CONFIG_PATH.exists():
            return LOCAL_CONFIG_PATH
        return HOME_CONFIG_PATH

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'UserConfig':
        """
        Load user configuration from .toml file.

        Environment variables YCB_API_KEY and YCB_URL override the file.

        Args:
            config_path: Path to config file. If None, uses .ycb/config.toml
                or ~/.ycb/config.toml

        Returns:
            UserConfig instance (defaults when the file is missing)
        """
        if config_path is None:
            config_path = cls.resolve_path()

        data = {}
        if config_path.exists():
            try:
                data = toml.load(config_path)
            except (toml.TomlDecodeError, OSError) as e:
                raise ConfigError(f"Could not load config {config_path}: {e}") from e

        section = data.get('preferences', {})
        prefs = Preferences(
            api_key=str(section.get('api_key', '')),
            ycb_url=str(section.get('ycb_url', DEFAULT_YCB_URL)),
        )

        env_key = os.environ.get("YCB_API_KEY")
        if env_key:
            prefs.api_key = env_key
        env_url = os.environ.get("YCB_URL")
        if env_url:
            prefs.ycb_url = env_url

        if not prefs.ycb_url:
            prefs.ycb_url = DEFAULT_YCB_URL

        return cls(preferences=prefs)

    def require_api_key(self) -> str:
        api_key = self.preferences.api_key.strip()
        if not api_key:
            raise ConfigError("No API key configured")
        return api_key

    def save(self, config_path: Optional[Path] = None) -> Path:
        """Save configuration to file."""
        if config_path is None:
            config_path = self.resolve_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            'preferences': vars(self.preferences),
        }

        with open(config_path, 'w') as f:
            toml.dump(data, f)

        return config_path
