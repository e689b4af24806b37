"""Slot layout preview route."""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def register_layout_routes(app: Any, slot_renderer: Any) -> None:
    """Register slot layout preview routes.

    Args:
        app: aiohttp web application
        slot_renderer: SlotLayoutRenderer producing JPEG previews
    """
    from aiohttp import web

    from ..exceptions import LayoutError
    from ..rendering import PREVIEW_MIME_TYPE, parse_layout_type

    def _preview_response(layout_value: Any, slots: Any) -> Any:
        try:
            layout = parse_layout_type(layout_value)
        except LayoutError as e:
            return web.json_response({"error": str(e)}, status=400)
        image_bytes = slot_renderer.render_jpeg(layout, slots)
        return web.Response(body=image_bytes, content_type=PREVIEW_MIME_TYPE)

    async def preview_get(request: Any) -> Any:
        """Preview from query parameters: ?layout=thirds&slots={"0": "weather"}."""
        slots: Any = None
        raw_slots = request.query.get("slots")
        if raw_slots:
            try:
                slots = json.loads(raw_slots)
            except ValueError:
                return web.json_response({"error": "slots must be JSON"}, status=400)
        return _preview_response(request.query.get("layout"), slots)

    async def preview_post(request: Any) -> Any:
        """Preview from a JSON body: {"layout": "focus", "slots": {...}}."""
        try:
            body = await request.json()
        except ValueError:
            return web.json_response({"error": "invalid json"}, status=400)
        if not isinstance(body, dict):
            return web.json_response({"error": "request body must be an object"}, status=400)
        return _preview_response(body.get("layout") or body.get("layout_type"), body.get("slots"))

    app.router.add_get("/api/layout/preview", preview_get)
    app.router.add_post("/api/layout/preview", preview_post)
