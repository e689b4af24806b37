"""Calendar expansion route."""

from __future__ import annotations

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def register_calendar_routes(app: Any, time_provider: Any, default_timezone: Optional[str] = None) -> None:
    """Register calendar expansion routes.

    Args:
        app: aiohttp web application
        time_provider: Callable returning the current UTC datetime
        default_timezone: Timezone for floating and date-only feed values
    """
    from aiohttp import web

    from ..calendar import RecurrenceExpander, parse_horizon, parse_ics_feed, parse_projection
    from ..exceptions import FeedParseError

    async def expand_events(request: Any) -> Any:
        """Expand an ICS feed or raw event list into instances inside the horizon."""
        try:
            body = await request.json()
        except ValueError:
            return web.json_response({"error": "invalid json"}, status=400)
        if not isinstance(body, dict):
            return web.json_response({"error": "request body must be an object"}, status=400)

        tz_name = body.get("timezone") or default_timezone
        if tz_name is not None and not isinstance(tz_name, str):
            return web.json_response({"error": "timezone must be a string"}, status=400)
        warnings = []

        feed = body.get("feed")
        if isinstance(feed, str):
            try:
                parsed = parse_ics_feed(feed, tz_name)
            except FeedParseError as e:
                return web.json_response({"error": str(e)}, status=400)
            events: list[Any] = list(parsed.events)
            warnings.extend(parsed.warnings)
        elif isinstance(body.get("events"), list):
            events = body["events"]
        else:
            return web.json_response({"error": "missing feed or events"}, status=400)

        horizon, horizon_warning = parse_horizon(body.get("horizon"))
        if horizon_warning is not None:
            warnings.append(horizon_warning)
        projection = parse_projection(body.get("projection"))

        expander = RecurrenceExpander(time_provider=time_provider, default_timezone=tz_name)
        result = expander.expand(events, horizon, projection)
        warnings.extend(result.warnings)

        return web.json_response(
            {
                "events": result.serialize(),
                "warnings": [w.model_dump() for w in warnings],
                "horizon": horizon.value,
                "projection": projection.value,
            }
        )

    app.router.add_post("/api/calendar/events", expand_events)
