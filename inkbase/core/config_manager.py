"""Configuration management for the inkbase server."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Canvas and refresh defaults for display requests
DEFAULT_CANVAS_WIDTH = 400
DEFAULT_CANVAS_HEIGHT = 300
DEFAULT_REFRESH_RATE_SECONDS = 900

# List widget pagination
MAX_LIST_ROWS = 4
LIST_ROW_HEIGHT = 35

# Slot preview canvas (fixed reference resolution)
SLOT_CANVAS_WIDTH = 800
SLOT_CANVAS_HEIGHT = 480
SLOT_HEADER_HEIGHT = 40

# Recurrence expansion limits
MAX_OCCURRENCES_PER_RULE = 250

DEFAULT_SERVER_BIND = "0.0.0.0"  # nosec B104 - device-facing server
DEFAULT_SERVER_PORT = 8080


class ConfigManager:
    """Manages application configuration from environment variables and .env files."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Apply ``KEY=value`` defaults from the .env file.

        Values already present in the environment win. ``export`` prefixes and
        matching surrounding quotes are accepted.

        Returns:
            Keys that were taken from the file, in file order
        """
        try:
            content = self.env_file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No .env file found at %s", self.env_file_path)
            return []
        except OSError:
            logger.warning("Failed to read .env file %s (continuing)", self.env_file_path, exc_info=True)
            return []

        defaults = dict(_parse_env_assignments(content))
        applied = [key for key in defaults if key not in os.environ]
        os.environ.update({key: defaults[key] for key in applied})

        if applied:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(applied))
        return applied

    def build_config_from_env(self) -> dict[str, Any]:
        """Build configuration dictionary from environment variables.

        Recognizes:
        - INKBASE_WEB_HOST -> 'server_bind'
        - INKBASE_WEB_PORT -> 'server_port' (int)
        - INKBASE_CANVAS_WIDTH / INKBASE_CANVAS_HEIGHT -> 'canvas_width' / 'canvas_height' (int)
        - INKBASE_REFRESH_RATE_SECONDS -> 'refresh_rate_seconds' (int)
        - INKBASE_DEFAULT_TIMEZONE -> 'default_timezone'

        Returns:
            Configuration dictionary with defaults filled in
        """
        cfg: dict[str, Any] = {
            "server_bind": DEFAULT_SERVER_BIND,
            "server_port": DEFAULT_SERVER_PORT,
            "canvas_width": DEFAULT_CANVAS_WIDTH,
            "canvas_height": DEFAULT_CANVAS_HEIGHT,
            "refresh_rate_seconds": DEFAULT_REFRESH_RATE_SECONDS,
            "default_timezone": "UTC",
        }

        host = os.environ.get("INKBASE_WEB_HOST")
        if host:
            cfg["server_bind"] = host

        int_vars = {
            "INKBASE_WEB_PORT": "server_port",
            "INKBASE_CANVAS_WIDTH": "canvas_width",
            "INKBASE_CANVAS_HEIGHT": "canvas_height",
            "INKBASE_REFRESH_RATE_SECONDS": "refresh_rate_seconds",
        }
        for env_name, key in int_vars.items():
            raw = os.environ.get(env_name)
            if not raw:
                continue
            try:
                cfg[key] = int(raw)
            except ValueError:
                logger.warning("Invalid %s=%r; ignoring", env_name, raw)

        default_tz = os.environ.get("INKBASE_DEFAULT_TIMEZONE")
        if default_tz:
            cfg["default_timezone"] = default_tz

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load .env file and build configuration from environment.

        Returns:
            Configuration dictionary
        """
        self.load_env_file()
        return self.build_config_from_env()


def get_config_value(config: Any, key: str, default: Any = None) -> Any:
    """Get configuration value supporting both dict and attribute-style objects.

    Args:
        config: Configuration object (dict or object with attributes)
        key: Configuration key to retrieve
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    if isinstance(config, dict):
        return config.get(key, default)
    return getattr(config, key, default)


def _parse_env_assignments(content: str) -> Iterator[tuple[str, str]]:
    for line in content.splitlines():
        line = line.strip()
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key or key.startswith("#"):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        yield key, value
