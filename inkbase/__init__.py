"""inkbase - layout and render service for low-power e-ink displays.

Takes a screen definition plus already-fetched provider data and returns a
static SVG background with a list of text overlays for the device to paint.
"""

__version__ = "0.1.0"

from typing import Optional


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Honors INKBASE_DEBUG (truthy: "1", "true", "yes", "on") which forces DEBUG
    verbosity regardless of the requested level.
    """
    import logging
    import os
    import sys

    from colorlog import ColoredFormatter

    debug_env = os.environ.get("INKBASE_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   logger.name: message, with only the level colorized
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
    logging.getLogger(__name__).debug("Logging initialized at level %s", logging.getLevelName(level))


def run_server(args: Optional[object] = None) -> None:
    """Start the inkbase server.

    Configuration comes from the environment (and an optional .env file),
    then command line overrides from ``args`` (host, port, debug).
    """
    import logging
    import os

    _init_logging(os.environ.get("INKBASE_LOG_LEVEL"))
    logger = logging.getLogger(__name__)

    from .core.config_manager import ConfigManager
    from .server import start_server

    cfg = ConfigManager().load_full_config()

    if args is not None:
        host = getattr(args, "host", None)
        if host:
            cfg["server_bind"] = host
        port = getattr(args, "port", None)
        if port is not None:
            cfg["server_port"] = int(port)
            logger.debug("Applied command line port override: %d", cfg["server_port"])
        if getattr(args, "debug", False):
            cfg["debug_logging"] = True

    start_server(cfg)
