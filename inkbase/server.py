"""inkbase HTTP server: application factory and blocking entrypoint."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from typing import Any, Optional

from . import __version__
from .core.config_manager import (
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    DEFAULT_REFRESH_RATE_SECONDS,
    DEFAULT_SERVER_BIND,
    DEFAULT_SERVER_PORT,
    get_config_value,
)
from .core.timezone_utils import now_utc
from .middleware import correlation_id_middleware
from .rendering import (
    BackgroundRenderer,
    DisplayService,
    OverlayComposer,
    SlotLayoutRenderer,
    ThemeResolver,
)

logger = logging.getLogger(__name__)


def make_app(config: Any = None) -> Any:
    """Build the aiohttp application with all inkbase routes registered.

    Args:
        config: dict or attribute-style object; see ConfigManager.build_config_from_env

    Returns:
        aiohttp.web.Application
    """
    from aiohttp import web

    from .calendar import RecurrenceExpander
    from .routes import (
        register_calendar_routes,
        register_display_routes,
        register_health_routes,
        register_layout_routes,
    )

    config = config if config is not None else {}
    default_timezone = get_config_value(config, "default_timezone", "UTC")

    theme_resolver = ThemeResolver()
    composer = OverlayComposer(
        theme_resolver=theme_resolver,
        expander=RecurrenceExpander(time_provider=now_utc, default_timezone=default_timezone),
        time_provider=now_utc,
        default_timezone=default_timezone,
    )
    display_service = DisplayService(
        background_renderer=BackgroundRenderer(theme_resolver),
        overlay_composer=composer,
        canvas_width=int(get_config_value(config, "canvas_width", DEFAULT_CANVAS_WIDTH)),
        canvas_height=int(get_config_value(config, "canvas_height", DEFAULT_CANVAS_HEIGHT)),
        refresh_rate_seconds=int(
            get_config_value(config, "refresh_rate_seconds", DEFAULT_REFRESH_RATE_SECONDS)
        ),
    )
    slot_renderer = SlotLayoutRenderer()

    app = web.Application(middlewares=[correlation_id_middleware])
    app["config"] = config
    app["display_service"] = display_service
    app["slot_renderer"] = slot_renderer

    register_health_routes(app, time_provider=now_utc, version=__version__)
    register_display_routes(app, display_service)
    register_calendar_routes(app, time_provider=now_utc, default_timezone=default_timezone)
    register_layout_routes(app, slot_renderer)

    logger.debug("Web application created with %d routes", len(app.router.routes()))
    return app


async def _serve(config: Any, stop_event: Optional[asyncio.Event] = None) -> None:
    from aiohttp import web

    app = make_app(config)
    runner = web.AppRunner(app)
    await runner.setup()

    host = get_config_value(config, "server_bind", DEFAULT_SERVER_BIND)
    port = int(get_config_value(config, "server_port", DEFAULT_SERVER_PORT))
    site = web.TCPSite(runner, host=host, port=port)

    stop_event = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on every platform; Ctrl-C still raises KeyboardInterrupt
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop_event.set)

    try:
        await site.start()
        logger.info("inkbase server listening on %s:%d", host, port)
        await stop_event.wait()
    finally:
        logger.info("Shutting down inkbase server")
        await runner.cleanup()


def start_server(config: Any) -> None:
    """Run the server until SIGINT/SIGTERM.

    Blocks the calling thread.
    """
    from .core.logging_config import configure_logging

    configure_logging(debug_mode=bool(get_config_value(config, "debug_logging", False)))

    try:
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except OSError:
        logger.exception("Server could not bind")
        raise
