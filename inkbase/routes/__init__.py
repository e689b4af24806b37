"""Route modules for the inkbase server."""

from .calendar_routes import register_calendar_routes
from .display_routes import register_display_routes
from .health_routes import register_health_routes
from .layout_routes import register_layout_routes

__all__ = [
    "register_calendar_routes",
    "register_display_routes",
    "register_health_routes",
    "register_layout_routes",
]
