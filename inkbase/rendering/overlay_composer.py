"""Overlay composition: live widget data to positioned text instructions.

Single-value widgets (weather, stock, clock, text) get centered overlays.
List widgets (calendar, canvas assignments) get up to ``MAX_LIST_ROWS`` rows
of two left-aligned lines each. Spotify is a degenerate list with one or two
centered lines. Every widget is composed independently: a failure becomes a
placeholder overlay plus a RenderWarning and never stops the other widgets.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError

from ..calendar.recurrence_expander import RecurrenceExpander
from ..core.config_manager import LIST_ROW_HEIGHT, MAX_LIST_ROWS
from ..core.timezone_utils import ensure_aware, now_utc, resolve_timezone
from ..exceptions import WidgetDataError
from ..models import (
    Assignment,
    CalendarEvent,
    CalendarWidget,
    CanvasWidget,
    ClockData,
    ClockWidget,
    ColorMode,
    DetailedEventInstance,
    Overlay,
    PlaybackData,
    Projection,
    RenderWarning,
    ScreenDefinition,
    SimpleEventInstance,
    SpotifyWidget,
    StockData,
    StockWidget,
    TextData,
    TextWidget,
    WeatherData,
    WeatherWidget,
    WidgetBase,
)
from .theme import MUTED_GRAY, ThemeResolver

logger = logging.getLogger(__name__)

# Single-value font sizes
CLOCK_FONT_SIZE = 42
TEXT_FONT_SIZE = 18
VALUE_FONT_SIZE = 32
CAPTION_FONT_SIZE = 16

# Weather splits into two lines around the widget center
WEATHER_VALUE_OFFSET = -10
WEATHER_CAPTION_OFFSET = 25

# List rows
ROW_INSET_X = 10
ROW_SECONDARY_OFFSET = 50
ROW_PRIMARY_OFFSET = 65
ROW_SECONDARY_SIZE = 14
ROW_PRIMARY_SIZE = 16

# Playback
TRACK_MAX_CHARS = 20
ARTIST_MAX_CHARS = 25
TRACK_FONT_SIZE = 18
ARTIST_FONT_SIZE = 14
TRACK_OFFSET = -10
ARTIST_OFFSET = 15

PLACEHOLDER_UNAVAILABLE = "Unavailable"
PLACEHOLDER_NO_DATA = "--"
STATUS_IDLE = "Idle"
STATUS_NOT_CONNECTED = "Not Connected"


@dataclass
class WidgetResult:
    overlays: list[Overlay] = field(default_factory=list)
    warnings: list[RenderWarning] = field(default_factory=list)


@dataclass
class CompositionResult:
    """Overlays for a whole screen, in widget order, plus collected warnings."""

    overlays: list[Overlay] = field(default_factory=list)
    warnings: list[RenderWarning] = field(default_factory=list)


def lookup_widget_data(data: Optional[Mapping[str, Any]], widget: WidgetBase, index: int) -> Any:
    """Find a widget's provider data by id, then list index, then widget type."""
    if not data:
        return None
    for key in (widget.id, str(index), widget.type):
        if key is not None and key in data:
            return data[key]
    return None


class OverlayComposer:
    """Builds the overlay list for a screen from already-fetched provider data."""

    def __init__(
        self,
        theme_resolver: Optional[ThemeResolver] = None,
        expander: Optional[RecurrenceExpander] = None,
        time_provider: Callable[[], datetime] = now_utc,
        default_timezone: Optional[str] = None,
    ) -> None:
        self.theme_resolver = theme_resolver or ThemeResolver()
        self.time_provider = time_provider
        self.default_timezone = default_timezone
        self.expander = expander or RecurrenceExpander(
            time_provider=time_provider, default_timezone=default_timezone
        )
        self._handlers: dict[type, Callable[[Any, Any, ColorMode], WidgetResult]] = {
            WeatherWidget: self._compose_weather,
            StockWidget: self._compose_stock,
            ClockWidget: self._compose_clock,
            TextWidget: self._compose_text,
            CalendarWidget: self._compose_calendar,
            CanvasWidget: self._compose_assignments,
            SpotifyWidget: self._compose_playback,
        }

    def compose(
        self,
        screen: ScreenDefinition,
        data: Optional[Mapping[str, Any]] = None,
        color_mode: Union[str, ColorMode] = ColorMode.MONOCHROME,
    ) -> CompositionResult:
        mode = ColorMode.parse(color_mode)
        result = CompositionResult()

        for index, widget in enumerate(screen.widgets):
            widget_result = self.compose_widget(widget, lookup_widget_data(data, widget, index), mode)
            result.overlays.extend(widget_result.overlays)
            result.warnings.extend(widget_result.warnings)

        logger.debug(
            "Composed %d overlays for %d widgets (%d warnings)",
            len(result.overlays),
            len(screen.widgets),
            len(result.warnings),
        )
        return result

    def compose_widget(
        self, widget: WidgetBase, payload: Any, color_mode: Union[str, ColorMode] = ColorMode.MONOCHROME
    ) -> WidgetResult:
        mode = ColorMode.parse(color_mode)
        handler = self._handlers.get(type(widget))
        if handler is None:
            logger.debug("No overlay handler for widget type %r", widget.type)
            return WidgetResult()

        try:
            return handler(widget, payload, mode)
        except (WidgetDataError, ValidationError, TypeError, ValueError) as e:
            source = widget.id or widget.type
            logger.warning("Widget %s rendered as placeholder: %s", source, e)
            placeholder = STATUS_NOT_CONNECTED if isinstance(widget, SpotifyWidget) else PLACEHOLDER_UNAVAILABLE
            return WidgetResult(
                overlays=[self._centered(widget, placeholder, CAPTION_FONT_SIZE, MUTED_GRAY)],
                warnings=[RenderWarning(source=source, code="invalid_data", message=str(e))],
            )

    # ==================== Single-value widgets ====================

    def _compose_weather(self, widget: WeatherWidget, payload: Any, mode: ColorMode) -> WidgetResult:
        if payload is None:
            return self._missing(widget)
        weather = _coerce(WeatherData, payload)
        center_x, center_y = widget.center
        overlays = [
            Overlay(
                value=weather.temp,
                x=center_x,
                y=center_y + WEATHER_VALUE_OFFSET,
                size=VALUE_FONT_SIZE,
                color=self.theme_resolver.text_color(widget.type, mode),
                align="center",
            )
        ]
        if weather.condition:
            overlays.append(
                Overlay(
                    value=weather.condition,
                    x=center_x,
                    y=center_y + WEATHER_CAPTION_OFFSET,
                    size=CAPTION_FONT_SIZE,
                    color=MUTED_GRAY,
                    align="center",
                )
            )
        return WidgetResult(overlays=overlays)

    def _compose_stock(self, widget: StockWidget, payload: Any, mode: ColorMode) -> WidgetResult:
        if payload is None:
            return self._missing(widget)
        quote = _coerce(StockData, payload)
        symbol = quote.symbol or widget.config.symbol
        value = f"{symbol} {quote.price}" if symbol else quote.price
        color = self.theme_resolver.text_color(widget.type, mode)
        return WidgetResult(overlays=[self._centered(widget, value, VALUE_FONT_SIZE, color)])

    def _compose_clock(self, widget: ClockWidget, payload: Any, mode: ColorMode) -> WidgetResult:
        clock = _coerce(ClockData, payload) if payload is not None else ClockData()
        if clock.time:
            value = clock.time
        else:
            tz = resolve_timezone(widget.config.timezone, self.default_timezone or "UTC")
            local_now = self.time_provider().astimezone(tz)
            value = local_now.strftime("%I:%M %p" if widget.config.format == "12h" else "%H:%M")
        color = self.theme_resolver.text_color(widget.type, mode)
        return WidgetResult(overlays=[self._centered(widget, value, CLOCK_FONT_SIZE, color)])

    def _compose_text(self, widget: TextWidget, payload: Any, mode: ColorMode) -> WidgetResult:
        if payload is None:
            value = widget.config.text
        elif isinstance(payload, str):
            value = payload
        else:
            value = _coerce(TextData, payload).text
        color = self.theme_resolver.text_color(widget.type, mode)
        return WidgetResult(overlays=[self._centered(widget, value, TEXT_FONT_SIZE, color)])

    # ==================== List widgets ====================

    def _compose_calendar(self, widget: CalendarWidget, payload: Any, mode: ColorMode) -> WidgetResult:
        result = WidgetResult()
        items = _unwrap_list(payload, "events")
        tz = resolve_timezone(widget.config.timezone, self.default_timezone or "UTC")

        instances: list[SimpleEventInstance] = []
        raw_events: list[Any] = []
        for index, item in enumerate(items):
            if _is_raw_event(item):
                raw_events.append(item)
                continue
            try:
                instances.append(_coerce_instance(item))
            except ValidationError as e:
                result.warnings.append(_row_warning(widget, index, e))

        if raw_events:
            expansion = self.expander.expand(raw_events, widget.config.horizon, Projection.DETAILED)
            result.warnings.extend(expansion.warnings)
            instances.extend(expansion.instances)
            # naive provider times are wall clock in the widget timezone
            instances.sort(key=lambda instance: ensure_aware(instance.start, tz))

        rows = [(_format_event_time(instance, tz), instance.name) for instance in instances]
        result.overlays = self._list_rows(widget, rows, mode)
        return result

    def _compose_assignments(self, widget: CanvasWidget, payload: Any, mode: ColorMode) -> WidgetResult:
        result = WidgetResult()
        tz = resolve_timezone(widget.config.timezone, self.default_timezone or "UTC")

        rows: list[tuple[str, str]] = []
        for index, item in enumerate(_unwrap_list(payload, "assignments")):
            try:
                assignment = _coerce(Assignment, item)
            except ValidationError as e:
                result.warnings.append(_row_warning(widget, index, e))
                continue
            rows.append((_format_assignment_subtitle(assignment, tz), assignment.name))

        result.overlays = self._list_rows(widget, rows, mode)
        return result

    def _compose_playback(self, widget: SpotifyWidget, payload: Any, mode: ColorMode) -> WidgetResult:
        color = self.theme_resolver.text_color(widget.type, mode)
        if payload is None:
            return WidgetResult(overlays=[self._centered(widget, STATUS_NOT_CONNECTED, CAPTION_FONT_SIZE, color)])

        playback = _coerce(PlaybackData, payload)
        if not (playback.is_playing and playback.track):
            status = playback.status or STATUS_IDLE
            return WidgetResult(overlays=[self._centered(widget, status, CAPTION_FONT_SIZE, color)])

        center_x, center_y = widget.center
        return WidgetResult(
            overlays=[
                Overlay(
                    value=playback.track[:TRACK_MAX_CHARS],
                    x=center_x,
                    y=center_y + TRACK_OFFSET,
                    size=TRACK_FONT_SIZE,
                    color=color,
                    align="center",
                ),
                Overlay(
                    value=(playback.artist or "")[:ARTIST_MAX_CHARS],
                    x=center_x,
                    y=center_y + ARTIST_OFFSET,
                    size=ARTIST_FONT_SIZE,
                    color=MUTED_GRAY,
                    align="center",
                ),
            ]
        )

    def _list_rows(self, widget: WidgetBase, rows: list[tuple[str, str]], mode: ColorMode) -> list[Overlay]:
        """Two overlays per row, capped at MAX_LIST_ROWS; extra rows are dropped."""
        color = self.theme_resolver.text_color(widget.type, mode)
        x = widget.x + ROW_INSET_X
        overlays: list[Overlay] = []
        for i, (secondary, primary) in enumerate(rows[:MAX_LIST_ROWS]):
            overlays.append(
                Overlay(
                    value=secondary,
                    x=x,
                    y=widget.y + ROW_SECONDARY_OFFSET + LIST_ROW_HEIGHT * i,
                    size=ROW_SECONDARY_SIZE,
                    color=MUTED_GRAY,
                    align="left",
                )
            )
            overlays.append(
                Overlay(
                    value=primary,
                    x=x,
                    y=widget.y + ROW_PRIMARY_OFFSET + LIST_ROW_HEIGHT * i,
                    size=ROW_PRIMARY_SIZE,
                    color=color,
                    align="left",
                )
            )
        return overlays

    # ==================== Helpers ====================

    def _centered(self, widget: WidgetBase, value: str, size: int, color: str) -> Overlay:
        center_x, center_y = widget.center
        return Overlay(value=value, x=center_x, y=center_y, size=size, color=color, align="center")

    def _missing(self, widget: WidgetBase) -> WidgetResult:
        return WidgetResult(
            overlays=[self._centered(widget, PLACEHOLDER_NO_DATA, VALUE_FONT_SIZE, MUTED_GRAY)],
            warnings=[
                RenderWarning(source=widget.id or widget.type, code="missing_data", message="No provider data")
            ],
        )


def _coerce(model: type[BaseModel], payload: Any) -> Any:
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    if not isinstance(payload, Mapping):
        raise WidgetDataError(f"Expected {model.__name__} mapping, got {type(payload).__name__}")
    return model.model_validate(payload)


def _unwrap_list(payload: Any, key: str) -> list[Any]:
    if payload is None:
        return []
    if isinstance(payload, Mapping):
        payload = payload.get(key)
        if payload is None:
            return []
    if not isinstance(payload, (list, tuple)):
        raise WidgetDataError(f"Expected a list of {key}, got {type(payload).__name__}")
    return list(payload)


def _is_raw_event(item: Any) -> bool:
    if isinstance(item, CalendarEvent):
        return True
    return isinstance(item, Mapping) and "summary" in item and "name" not in item


def _coerce_instance(item: Any) -> SimpleEventInstance:
    if isinstance(item, SimpleEventInstance):
        return item
    if isinstance(item, Mapping) and "duration_ms" in item:
        return DetailedEventInstance.model_validate(item)
    return SimpleEventInstance.model_validate(item)


def _row_warning(widget: WidgetBase, index: int, error: ValidationError) -> RenderWarning:
    logger.warning("Dropping row %d of widget %s: %d errors", index, widget.id or widget.type, error.error_count())
    return RenderWarning(
        source=f"{widget.id or widget.type}[{index}]", code="invalid_row", message=str(error)
    )


def _format_event_time(instance: SimpleEventInstance, tz: tzinfo) -> str:
    if isinstance(instance, DetailedEventInstance) and instance.all_day:
        return f"{instance.start:%a} All day"
    return f"{_localize(instance.start, tz):%a %H:%M}"


def _format_assignment_subtitle(assignment: Assignment, tz: tzinfo) -> str:
    parts = []
    if assignment.course:
        parts.append(assignment.course)
    if assignment.due_at is not None:
        parts.append(f"Due {_localize(assignment.due_at, tz):%a %H:%M}")
    return " · ".join(parts)


def _localize(dt: datetime, tz: tzinfo) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(tz)
