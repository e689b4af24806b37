"""Widget theming: per-type colors and icon glyphs for both color modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from ..models import ColorMode, WidgetType

INK_BLACK = "#000000"
PAPER_WHITE = "#ffffff"
MUTED_GRAY = "#7f8c8d"
DEFAULT_HUE = "#2c3e50"


@dataclass(frozen=True)
class IconGlyph:
    """Outline icon drawn on a 24x24 grid, scaled when placed."""

    name: str
    path: str
    scale: float = 1.0


@dataclass(frozen=True)
class ThemeStyle:
    stroke_color: str
    label_color: str
    icon: Optional[IconGlyph] = None


@dataclass(frozen=True)
class ThemePalette:
    """Lookup tables for ThemeResolver.

    ``hues`` is consulted in color mode only; monochrome always uses ``ink``.
    """

    hues: dict[str, str] = field(default_factory=dict)
    icons: dict[str, IconGlyph] = field(default_factory=dict)
    default_hue: str = DEFAULT_HUE
    ink: str = INK_BLACK


DEFAULT_ICONS: dict[str, IconGlyph] = {
    WidgetType.WEATHER.value: IconGlyph(
        "cloud", "M17.5 19H9a7 7 0 1 1 6.71-9h1.79a4.5 4.5 0 1 1 0 9Z", 1.0
    ),
    WidgetType.STOCK.value: IconGlyph("trending-up", "M22 7 13.5 15.5 8.5 10.5 2 17 M16 7h6v6", 1.0),
    WidgetType.CLOCK.value: IconGlyph(
        "clock", "M22 12a10 10 0 1 1-20 0a10 10 0 1 1 20 0Z M12 6v6l4 2", 0.9
    ),
    WidgetType.CALENDAR.value: IconGlyph(
        "calendar",
        "M5 4h14a2 2 0 0 1 2 2v14a2 2 0 0 1-2 2H5a2 2 0 0 1-2-2V6a2 2 0 0 1 2-2Z M16 2v4 M8 2v4 M3 10h18",
        0.9,
    ),
    WidgetType.CANVAS.value: IconGlyph(
        "book-open",
        "M2 3h6a4 4 0 0 1 4 4v14a3 3 0 0 0-3-3H2Z M22 3h-6a4 4 0 0 0-4 4v14a3 3 0 0 1 3-3h7Z",
        0.9,
    ),
    WidgetType.SPOTIFY.value: IconGlyph(
        "music",
        "M9 18V5l12-2v13 M9 18a3 3 0 1 1-6 0a3 3 0 1 1 6 0Z M21 16a3 3 0 1 1-6 0a3 3 0 1 1 6 0Z",
        0.9,
    ),
}

DEFAULT_HUES: dict[str, str] = {
    WidgetType.WEATHER.value: "#3498db",
    WidgetType.STOCK.value: "#27ae60",
    WidgetType.CLOCK.value: "#e67e22",
    WidgetType.TEXT.value: "#8e44ad",
    WidgetType.CALENDAR.value: "#e74c3c",
    WidgetType.CANVAS.value: "#d35400",
    WidgetType.SPOTIFY.value: "#1db954",
}

DEFAULT_PALETTE = ThemePalette(hues=DEFAULT_HUES, icons=DEFAULT_ICONS)


class ThemeResolver:
    """Pure table lookup from (widget type, color mode) to a ThemeStyle."""

    def __init__(self, palette: ThemePalette = DEFAULT_PALETTE) -> None:
        self.palette = palette

    def resolve(self, widget_type: Union[str, WidgetType], color_mode: Union[str, ColorMode]) -> ThemeStyle:
        key = widget_type.value if isinstance(widget_type, WidgetType) else str(widget_type)
        mode = ColorMode.parse(color_mode)

        if mode is ColorMode.COLOR:
            color = self.palette.hues.get(key, self.palette.default_hue)
        else:
            color = self.palette.ink

        return ThemeStyle(stroke_color=color, label_color=color, icon=self.palette.icons.get(key))

    def text_color(self, widget_type: Union[str, WidgetType], color_mode: Union[str, ColorMode]) -> str:
        """Color for a widget's primary overlay line."""
        return self.resolve(widget_type, color_mode).label_color
