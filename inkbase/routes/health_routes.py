"""Health check route for inkbase."""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


def register_health_routes(app: Any, time_provider: Callable[[], Any], version: str) -> None:
    """Register the health endpoint.

    Args:
        app: aiohttp web application
        time_provider: Callable returning the current UTC datetime
        version: Package version reported to clients
    """
    from aiohttp import web

    async def health_check(_request: Any) -> Any:
        """Liveness check for devices and supervisors."""
        return web.json_response(
            {
                "status": "ok",
                "version": version,
                "server_time_iso": time_provider().isoformat(),
            }
        )

    app.router.add_get("/api/health", health_check)
