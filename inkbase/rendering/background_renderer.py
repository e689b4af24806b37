"""Vector background rendering for widget screens.

Produces an SVG document containing the canvas fill, one rounded border per
widget, the widget's icon glyph and its upper-cased label. Output is a pure
function of (screen, size, color mode), so results are memoized in a small
LRU keyed on those values.
"""

from __future__ import annotations

import base64
import hashlib
import html
import logging
from collections import OrderedDict
from typing import Optional, Union

from ..models import ColorMode, ScreenDefinition, WidgetBase, WidgetType
from .theme import PAPER_WHITE, ThemeResolver

logger = logging.getLogger(__name__)

SVG_OPEN = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
    'viewBox="0 0 {width} {height}">'
)
SVG_CLOSE = "</svg>"
CANVAS_RECT = '<rect x="0" y="0" width="{width}" height="{height}" fill="{fill}"/>'
BORDER_RECT = (
    '<rect x="{x}" y="{y}" width="{w}" height="{h}" rx="{radius}" ry="{radius}" '
    'fill="none" stroke="{stroke}" stroke-width="{stroke_width}"/>'
)
ICON_GROUP = (
    '<g transform="translate({x},{y}) scale({scale})">'
    '<path d="{path}" fill="none" stroke="{stroke}" stroke-width="2" '
    'stroke-linecap="round" stroke-linejoin="round"/></g>'
)
LABEL_TEXT = (
    '<text x="{x}" y="{y}" font-family="{font}" font-size="{size}" '
    'font-weight="bold" fill="{fill}">{text}</text>'
)

BORDER_RADIUS = 8
BORDER_STROKE_WIDTH = 2
ICON_OFFSET = (10, 10)
LABEL_OFFSET = (45, 28)
LABEL_FONT_SIZE = 14
LABEL_FONT_FAMILY = "Arial"

DEFAULT_LABELS = {
    WidgetType.WEATHER.value: "Weather",
    WidgetType.STOCK.value: "Stocks",
    WidgetType.CLOCK.value: "Clock",
    WidgetType.TEXT.value: "Text",
    WidgetType.CALENDAR.value: "Calendar",
    WidgetType.CANVAS.value: "Assignments",
    WidgetType.SPOTIFY.value: "Spotify",
}

MAX_CACHE_SIZE = 32


class BackgroundRenderer:
    """Turns a widget grid into an SVG background."""

    def __init__(self, theme_resolver: Optional[ThemeResolver] = None, cache_size: int = MAX_CACHE_SIZE) -> None:
        self.theme_resolver = theme_resolver or ThemeResolver()
        self.cache_size = cache_size
        self._cache: OrderedDict[tuple[str, int, int, str], str] = OrderedDict()

    def render(
        self,
        screen: ScreenDefinition,
        width: int,
        height: int,
        color_mode: Union[str, ColorMode] = ColorMode.MONOCHROME,
    ) -> str:
        """Render the SVG document for ``screen`` at the given pixel size."""
        mode = ColorMode.parse(color_mode)
        key = (screen_digest(screen), int(width), int(height), mode.value)

        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            return cached

        svg = self._build_svg(screen, int(width), int(height), mode)

        self._cache[key] = svg
        if len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)
        logger.debug(
            "Rendered background: %d widgets, %dx%d, mode=%s, %d bytes",
            len(screen.widgets),
            width,
            height,
            mode.value,
            len(svg),
        )
        return svg

    def render_data_uri(
        self,
        screen: ScreenDefinition,
        width: int,
        height: int,
        color_mode: Union[str, ColorMode] = ColorMode.MONOCHROME,
    ) -> str:
        return svg_to_data_uri(self.render(screen, width, height, color_mode))

    def clear_cache(self) -> None:
        self._cache.clear()

    def _build_svg(self, screen: ScreenDefinition, width: int, height: int, mode: ColorMode) -> str:
        parts = [
            SVG_OPEN.format(width=width, height=height),
            CANVAS_RECT.format(width=width, height=height, fill=PAPER_WHITE),
        ]
        for widget in screen.widgets:
            parts.extend(self._widget_elements(widget, mode))
        parts.append(SVG_CLOSE)
        return "".join(parts)

    def _widget_elements(self, widget: WidgetBase, mode: ColorMode) -> list[str]:
        style = self.theme_resolver.resolve(widget.type, mode)
        elements = [
            BORDER_RECT.format(
                x=widget.x,
                y=widget.y,
                w=widget.w,
                h=widget.h,
                radius=BORDER_RADIUS,
                stroke=style.stroke_color,
                stroke_width=BORDER_STROKE_WIDTH,
            )
        ]

        if style.icon is not None:
            elements.append(
                ICON_GROUP.format(
                    x=widget.x + ICON_OFFSET[0],
                    y=widget.y + ICON_OFFSET[1],
                    scale=f"{style.icon.scale:g}",
                    path=style.icon.path,
                    stroke=style.stroke_color,
                )
            )

        elements.append(
            LABEL_TEXT.format(
                x=widget.x + LABEL_OFFSET[0],
                y=widget.y + LABEL_OFFSET[1],
                font=LABEL_FONT_FAMILY,
                size=LABEL_FONT_SIZE,
                fill=style.label_color,
                text=html.escape(widget_label(widget)),
            )
        )
        return elements


def widget_label(widget: WidgetBase) -> str:
    """Upper-cased display name, falling back to the type's default label."""
    label = widget.label or DEFAULT_LABELS.get(widget.type) or widget.type
    return label.upper()


def screen_digest(screen: ScreenDefinition) -> str:
    return hashlib.sha256(screen.model_dump_json().encode("utf-8")).hexdigest()


def svg_to_data_uri(svg: str) -> str:
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"
