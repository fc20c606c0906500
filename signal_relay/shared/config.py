"""
Centralized environment configuration.

Values are merged from, in increasing priority:
1) `env.example` (committed, safe placeholders)
2) `env.local` (optional, MUST NOT be committed)
3) System environment variables
"""

import os
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger

PROJECT_ROOT = Path(__file__).parent.parent.parent


class EnvironConfig:
    """Singleton holding the merged environment, read through typed getters."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(EnvironConfig, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._config = load_environ(PROJECT_ROOT)
            EnvironConfig._initialized = True

    def get(self, key, default=None):
        """Get configuration value by key with optional default."""
        return self._config.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """
        Interpret a configuration value as a boolean flag.

        Accepts true/yes/on/1 (case-insensitive); anything else is False.
        """
        value = self.get(key)
        if value is None:
            return default
        return str(value).strip().lower() in {"true", "yes", "on", "1"}

    def get_int(self, key: str, default: int) -> int:
        value = (self.get(key) or "").strip()
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid {} value '{}', defaulting to {}", key, value, default)
            return default


def load_environ(root: Path) -> dict:
    """
    Merge env files under ``root`` with the process environment.

    Priority order (later overrides earlier):
    1. env.example (committed placeholders)
    2. env.local (developer-local, not committed)
    3. System environment variables (highest priority)
    """
    values = {}

    example_path = root / "env.example"
    if example_path.exists():
        values.update(dotenv_values(example_path))
        logger.info("Loaded environment variables from {}", example_path)

    local_path = root / "env.local"
    if local_path.exists():
        values.update(dotenv_values(local_path))
        logger.info("Loaded and overrode environment variables from {}", local_path)

    values.update(os.environ)
    return values


# Global configuration instance
config = EnvironConfig()
