"""Display render route: screen + provider data to background and overlays."""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

logger = logging.getLogger(__name__)


def _optional_int(value: Any, name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    parsed = int(value)
    if parsed <= 0:
        raise ValueError(f"{name} must be positive")
    return parsed


def register_display_routes(app: Any, display_service: Any) -> None:
    """Register display render routes.

    Args:
        app: aiohttp web application
        display_service: DisplayService used for every render
    """
    from aiohttp import web

    from ..rendering import build_screen

    async def render_display(request: Any) -> Any:
        """Render a screen definition with already-fetched provider data."""
        try:
            body = await request.json()
        except ValueError:
            return web.json_response({"error": "invalid json"}, status=400)
        if not isinstance(body, dict):
            return web.json_response({"error": "request body must be an object"}, status=400)

        try:
            screen = build_screen(body)
        except (ValidationError, TypeError) as e:
            logger.info("Rejected screen definition: %s", e)
            return web.json_response({"error": "invalid screen definition", "detail": str(e)}, status=400)

        try:
            width = _optional_int(body.get("width"), "width")
            height = _optional_int(body.get("height"), "height")
            refresh = _optional_int(body.get("refresh_rate_seconds"), "refresh_rate_seconds")
        except (TypeError, ValueError) as e:
            return web.json_response({"error": str(e)}, status=400)

        data = body.get("data") or {}
        if not isinstance(data, dict):
            return web.json_response({"error": "data must be an object keyed by widget"}, status=400)

        response = display_service.render(
            screen,
            data=data,
            width=width,
            height=height,
            color_mode=body.get("color_mode"),
            refresh_rate_seconds=refresh,
        )
        logger.debug("/api/display rendered %d overlays", len(response.overlays))
        return web.json_response(response.model_dump(mode="json"))

    app.router.add_post("/api/display", render_display)
