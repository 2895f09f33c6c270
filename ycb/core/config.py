# ycb/core/config.py
"""Service configuration loader (endpoints and tuning)."""

import copy
import yaml
from pathlib import Path
from typing import Dict, Any, Optional


DEFAULTS: Dict[str, Any] = {
    'backend': {
        'default_url': 'https://yourcommonbase.com/backend',
    },
    'lexical': {
        'host': 'https://meili-i59l.onrender.com',
        'index': 'ycb_fts_staging',
        'page_size': 20,
    },
    'semantic': {
        'match_limit': 5,
        'match_threshold': 0.35,
    },
    'images': {
        'batch_size': 20,
        'concurrency': 4,
    },
    'auth': {
        'token_ttl_seconds': 3000,
    },
    'http': {
        'timeout': 15.0,
    },
    'ui': {
        'debounce_seconds': 0.15,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Loads configuration from YAML and merges it over built-in defaults."""

    @staticmethod
    def load(config_path: Optional[Path] = None) -> Dict[str, Any]:
        """
        Load configuration from file.

        Args:
            config_path: Path to config file. If None, looks for config/default.yaml
                and falls back to the built-in defaults when none is found.

        Returns:
            Configuration dictionary
        """
        if config_path is None:
            possible_paths = [
                Path("config/default.yaml"),
                Path(__file__).parent.parent.parent / "config" / "default.yaml",
            ]

            for path in possible_paths:
                if path.exists():
                    config_path = path
                    break

            if config_path is None:
                return copy.deepcopy(DEFAULTS)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        return _merge(DEFAULTS, config)
