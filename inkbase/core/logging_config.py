"""
Logging setup for the running server.

Every composed display and calendar request can drop individual widgets, rows
or events. Those drops are logged as warnings by the render path modules
listed in ``RENDER_PATH_LOGGERS``; their per-render debug chatter stays off
unless debug logging is requested. Records are tagged with the request's
correlation ID so a skipped item can be traced back to the request.
"""

import logging
import os
from typing import Optional

_TRUTHY = ("1", "true", "yes", "on")

# Modules that turn bad input into RenderWarnings instead of failing a request
RENDER_PATH_LOGGERS = (
    "inkbase.models",
    "inkbase.calendar.feed_parser",
    "inkbase.calendar.recurrence_expander",
    "inkbase.rendering.overlay_composer",
    "inkbase.rendering.slot_layout_renderer",
)

THIRD_PARTY_LEVELS = {
    "aiohttp.access": logging.WARNING,
    "aiohttp.server": logging.WARNING,
    "asyncio": logging.WARNING,
    "PIL": logging.INFO,
}

REQUEST_ID_FORMAT = "%(asctime)s [%(request_id)s] %(levelname)-7s %(name)s: %(message)s"


class RequestIdFilter(logging.Filter):
    """Add the current request correlation ID to all log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Imported here to avoid pulling aiohttp into CLI-only imports
        from ..middleware import get_request_id

        record.request_id = get_request_id()
        return True


def _debug_requested(debug_mode: bool, force_debug: Optional[bool]) -> bool:
    if force_debug is not None:
        return force_debug
    return debug_mode or os.getenv("INKBASE_DEBUG", "").strip().lower() in _TRUTHY


def _tag_handlers(root: logging.Logger) -> None:
    """Make sure every root handler stamps records with the request ID."""
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(REQUEST_ID_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)
    for handler in root.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())


def configure_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> int:
    """
    Apply server logging levels.

    ``INKBASE_DEBUG`` turns debug on unless ``force_debug`` says otherwise.
    ``INKBASE_LOG_LEVEL`` overrides only the root level; the package and
    render path levels follow the debug setting.

    Returns:
        The level applied to the ``inkbase`` package logger
    """
    debug = _debug_requested(debug_mode, force_debug)
    package_level = logging.DEBUG if debug else logging.INFO

    root = logging.getLogger()
    override = logging.getLevelName(os.getenv("INKBASE_LOG_LEVEL", "").strip().upper())
    root.setLevel(override if isinstance(override, int) else package_level)
    _tag_handlers(root)

    logging.getLogger("inkbase").setLevel(package_level)
    for name in RENDER_PATH_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)
    for name, level in THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s package=%s",
        logging.getLevelName(root.level),
        logging.getLevelName(package_level),
    )
    return package_level
