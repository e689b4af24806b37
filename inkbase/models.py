"""Data models for screen composition, provider data and calendar expansion."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "Arial"


class WidgetType(str, Enum):
    """Widget types understood by the renderers."""

    WEATHER = "weather"
    STOCK = "stock"
    CLOCK = "clock"
    TEXT = "text"
    CALENDAR = "calendar"
    CANVAS = "canvas"
    SPOTIFY = "spotify"


class ColorMode(str, Enum):
    """Rendering palette selector."""

    MONOCHROME = "1bit"
    COLOR = "color"

    @classmethod
    def parse(cls, value: Any) -> "ColorMode":
        """Coerce a request value into a ColorMode, defaulting to monochrome."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in ("color", "colour"):
                return cls.COLOR
            if normalized not in ("", "1bit", "mono", "monochrome"):
                logger.warning("Unknown color mode %r, using monochrome", value)
        return cls.MONOCHROME


class Horizon(str, Enum):
    """Look-ahead window for calendar expansion."""

    ONE_DAY = "1d"
    THREE_DAYS = "3d"
    ONE_WEEK = "1w"
    ONE_MONTH = "1m"


class Projection(str, Enum):
    """Shape of expanded event instances."""

    SIMPLE = "simple"
    DETAILED = "detailed"


class LayoutType(str, Enum):
    """Fixed geometric partitions of the slot preview canvas."""

    QUADRANT = "quadrant"
    THIRDS = "thirds"
    FOCUS = "focus"
    SINGLE = "single"

    @property
    def slot_count(self) -> int:
        return {"quadrant": 4, "thirds": 3, "focus": 3, "single": 1}[self.value]


# ==================== Widget configuration ====================


class WidgetConfig(BaseModel):
    """Settings shared by every widget type."""

    label: Optional[str] = Field(default=None, description="Display name drawn on the background")

    model_config = ConfigDict(extra="allow")


class WeatherConfig(WidgetConfig):
    city: Optional[str] = None
    units: Literal["imperial", "metric"] = "imperial"


class StockConfig(WidgetConfig):
    symbol: str = "AAPL"


class ClockConfig(WidgetConfig):
    timezone: Optional[str] = Field(default=None, description="IANA timezone for the clock face")
    format: Literal["12h", "24h"] = "24h"


class TextConfig(WidgetConfig):
    text: str = ""


class CalendarConfig(WidgetConfig):
    horizon: Horizon = Field(default=Horizon.ONE_DAY, validation_alias="range")
    timezone: Optional[str] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class CanvasConfig(WidgetConfig):
    timezone: Optional[str] = None


class SpotifyConfig(WidgetConfig):
    pass


class WidgetBase(BaseModel):
    """Common geometry for all widgets.

    Bounds are not checked against the canvas; an out-of-range widget simply
    renders off-canvas.
    """

    id: Optional[str] = None
    type: str
    x: int = Field(default=0, ge=0)
    y: int = Field(default=0, ge=0)
    w: int = Field(default=100, ge=0)
    h: int = Field(default=50, ge=0)

    model_config = ConfigDict(extra="ignore")

    @property
    def label(self) -> Optional[str]:
        config = getattr(self, "config", None)
        return getattr(config, "label", None)

    @property
    def center(self) -> tuple[int, int]:
        return self.x + self.w // 2, self.y + self.h // 2


class WeatherWidget(WidgetBase):
    type: Literal["weather"] = "weather"
    config: WeatherConfig = Field(default_factory=WeatherConfig)


class StockWidget(WidgetBase):
    type: Literal["stock"] = "stock"
    config: StockConfig = Field(default_factory=StockConfig)


class ClockWidget(WidgetBase):
    type: Literal["clock"] = "clock"
    config: ClockConfig = Field(default_factory=ClockConfig)


class TextWidget(WidgetBase):
    type: Literal["text"] = "text"
    config: TextConfig = Field(default_factory=TextConfig)


class CalendarWidget(WidgetBase):
    type: Literal["calendar"] = "calendar"
    config: CalendarConfig = Field(default_factory=CalendarConfig)


class CanvasWidget(WidgetBase):
    type: Literal["canvas"] = "canvas"
    config: CanvasConfig = Field(default_factory=CanvasConfig)


class SpotifyWidget(WidgetBase):
    type: Literal["spotify"] = "spotify"
    config: SpotifyConfig = Field(default_factory=SpotifyConfig)


class UnknownWidget(WidgetBase):
    """Widget of a type this version does not know; kept so the background still draws it."""

    config: WidgetConfig = Field(default_factory=WidgetConfig)


Widget = Union[
    WeatherWidget,
    StockWidget,
    ClockWidget,
    TextWidget,
    CalendarWidget,
    CanvasWidget,
    SpotifyWidget,
    UnknownWidget,
]

WIDGET_MODELS: dict[str, type[WidgetBase]] = {
    WidgetType.WEATHER.value: WeatherWidget,
    WidgetType.STOCK.value: StockWidget,
    WidgetType.CLOCK.value: ClockWidget,
    WidgetType.TEXT.value: TextWidget,
    WidgetType.CALENDAR.value: CalendarWidget,
    WidgetType.CANVAS.value: CanvasWidget,
    WidgetType.SPOTIFY.value: SpotifyWidget,
}


def parse_widget(raw: Any) -> WidgetBase:
    """Build the typed widget variant for a raw mapping.

    A known widget whose config block is malformed falls back to that type's
    default config. Geometry errors still raise ``ValidationError``.
    """
    if isinstance(raw, WidgetBase):
        return raw
    if not isinstance(raw, dict):
        raise TypeError(f"Widget must be a mapping, got {type(raw).__name__}")

    model = WIDGET_MODELS.get(str(raw.get("type", "")), UnknownWidget)
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        if "config" not in raw:
            raise
        logger.warning("Widget %s has invalid config, using defaults: %s", raw.get("type"), e)
        return model.model_validate({**raw, "config": {"label": _safe_label(raw.get("config"))}})


def _safe_label(config: Any) -> Optional[str]:
    if isinstance(config, dict) and isinstance(config.get("label"), str):
        return config["label"]
    return None


class ScreenDefinition(BaseModel):
    """Ordered widget list for one display layout."""

    name: Optional[str] = None
    widgets: list[Widget] = Field(default_factory=list)

    @field_validator("widgets", mode="before")
    @classmethod
    def _build_widget_variants(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        return [parse_widget(item) for item in value]


# ==================== Provider data ====================


class WeatherData(BaseModel):
    temp: str
    condition: str = ""

    @field_validator("temp", mode="before")
    @classmethod
    def _stringify_temp(cls, value: Any) -> Any:
        return str(value) if isinstance(value, (int, float)) else value


class StockData(BaseModel):
    symbol: Optional[str] = None
    price: str
    change: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _stringify_price(cls, value: Any) -> Any:
        return f"${value:.2f}" if isinstance(value, (int, float)) else value


class ClockData(BaseModel):
    time: Optional[str] = None


class TextData(BaseModel):
    text: str


class PlaybackData(BaseModel):
    is_playing: bool = False
    track: Optional[str] = None
    artist: Optional[str] = None
    status: Optional[str] = None


class Assignment(BaseModel):
    name: str
    due_at: Optional[datetime] = None
    course: Optional[str] = None


# ==================== Output ====================


class Overlay(BaseModel):
    """A single positioned text instruction for the display firmware."""

    kind: Literal["text"] = "text"
    value: str
    x: int
    y: int
    size: int
    font: str = DEFAULT_FONT_FAMILY
    color: str
    align: Literal["left", "center"] = "left"


class RenderWarning(BaseModel):
    """Non-fatal problem reported alongside a successful result."""

    source: str = Field(..., description="Widget id/type or event uid that failed")
    code: str = Field(..., description="Short machine-readable reason")
    message: str = Field(default="", description="Human-readable detail")


class RenderResponse(BaseModel):
    """Payload returned for a display request."""

    background: str
    overlays: list[Overlay] = Field(default_factory=list)
    refresh_rate_seconds: int = 900
    color_mode: str = ColorMode.MONOCHROME.value
    filename: str
    warnings: list[RenderWarning] = Field(default_factory=list)


# ==================== Calendar ====================


class StructuredLocation(BaseModel):
    display_name: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class CalendarEvent(BaseModel):
    """Raw calendar feed record, possibly carrying a repeat rule."""

    uid: Optional[str] = None
    summary: str = "No Title"
    start: datetime
    end: Optional[datetime] = None
    all_day: bool = Field(default=False, description="Source used a date-only DTSTART")
    location: Optional[str] = None
    geo: Optional[tuple[float, float]] = None
    rrule: Optional[str] = None
    exdates: list[datetime] = Field(default_factory=list)
    description: Optional[str] = None
    organizer: Optional[str] = None
    alarms: list[timedelta] = Field(default_factory=list, description="VALARM trigger offsets")

    @model_validator(mode="before")
    @classmethod
    def _promote_dates(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("start", "end"):
            value = data.get(key)
            if isinstance(value, str) and len(value) == 10:
                # JSON all-day events arrive as "YYYY-MM-DD"
                try:
                    value = date.fromisoformat(value)
                except ValueError:
                    pass
            if isinstance(value, date) and not isinstance(value, datetime):
                # Left naive so the expander places midnight in its configured timezone
                data[key] = datetime.combine(value, time.min)
                if key == "start":
                    data["all_day"] = True
        return data


class SimpleEventInstance(BaseModel):
    """Concrete occurrence inside the query window."""

    name: str
    start: datetime
    end: datetime
    location: Optional[str] = None

    @field_serializer("start", "end")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime to ISO format."""
        return dt.isoformat()


class DetailedEventInstance(SimpleEventInstance):
    duration_ms: int
    description: Optional[str] = None
    all_day: bool = False
    alarm_offset_minutes: Optional[int] = Field(
        default=None, description="Minutes before start of the first alarm"
    )
    organizer: Optional[str] = None
    structured_location: Optional[StructuredLocation] = None

    def to_simple(self) -> SimpleEventInstance:
        return SimpleEventInstance(name=self.name, start=self.start, end=self.end, location=self.location)


EventInstance = Union[SimpleEventInstance, DetailedEventInstance]
