"""Unit tests for inkbase.models."""

from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from inkbase.models import (
    CalendarEvent,
    CalendarWidget,
    ClockWidget,
    ColorMode,
    DetailedEventInstance,
    Horizon,
    LayoutType,
    ScreenDefinition,
    SimpleEventInstance,
    StockData,
    UnknownWidget,
    WeatherData,
    WeatherWidget,
    parse_widget,
)

pytestmark = pytest.mark.unit


class TestParseWidget:
    def test_known_type_builds_typed_variant(self):
        widget = parse_widget({"type": "weather", "x": 1, "y": 2, "w": 3, "h": 4, "config": {"city": "Oslo"}})

        assert isinstance(widget, WeatherWidget)
        assert widget.config.city == "Oslo"
        assert (widget.x, widget.y, widget.w, widget.h) == (1, 2, 3, 4)

    def test_unknown_type_is_kept(self):
        widget = parse_widget({"type": "crypto", "x": 0, "y": 0, "w": 10, "h": 10})

        assert isinstance(widget, UnknownWidget)
        assert widget.type == "crypto"

    def test_invalid_config_falls_back_to_defaults_but_keeps_label(self):
        widget = parse_widget({"type": "clock", "config": {"format": "36h", "label": "Office"}})

        assert isinstance(widget, ClockWidget)
        assert widget.config.format == "24h"
        assert widget.label == "Office"

    def test_negative_geometry_is_rejected(self):
        with pytest.raises(ValidationError):
            parse_widget({"type": "text", "x": -5})

    def test_non_mapping_raises_type_error(self):
        with pytest.raises(TypeError):
            parse_widget(["weather"])

    def test_calendar_range_alias(self):
        widget = parse_widget({"type": "calendar", "config": {"range": "1w"}})

        assert isinstance(widget, CalendarWidget)
        assert widget.config.horizon is Horizon.ONE_WEEK

    def test_center_uses_integer_division(self):
        widget = parse_widget({"type": "text", "x": 10, "y": 10, "w": 101, "h": 61})
        assert widget.center == (60, 40)


class TestScreenDefinition:
    def test_widgets_keep_order_and_variants(self):
        screen = ScreenDefinition.model_validate(
            {"widgets": [{"type": "clock"}, {"type": "mystery"}, {"type": "weather"}]}
        )

        assert [type(w).__name__ for w in screen.widgets] == ["ClockWidget", "UnknownWidget", "WeatherWidget"]

    def test_null_widgets_become_empty(self):
        assert ScreenDefinition.model_validate({"widgets": None}).widgets == []


class TestColorMode:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("color", ColorMode.COLOR),
            ("COLOR", ColorMode.COLOR),
            ("1bit", ColorMode.MONOCHROME),
            (None, ColorMode.MONOCHROME),
            ("", ColorMode.MONOCHROME),
            ("grayscale", ColorMode.MONOCHROME),
            (ColorMode.COLOR, ColorMode.COLOR),
        ],
    )
    def test_parse(self, value, expected):
        assert ColorMode.parse(value) is expected


class TestProviderData:
    def test_numeric_temperature_is_stringified(self):
        assert WeatherData.model_validate({"temp": 72}).temp == "72"

    def test_numeric_price_is_formatted(self):
        assert StockData.model_validate({"price": 123.4}).price == "$123.40"

    def test_string_price_passes_through(self):
        assert StockData.model_validate({"price": "€10"}).price == "€10"


class TestCalendarModels:
    def test_date_start_becomes_all_day_floating_midnight(self):
        event = CalendarEvent.model_validate({"summary": "Holiday", "start": date(2025, 1, 15)})

        assert event.all_day is True
        assert event.start == datetime(2025, 1, 15)
        assert event.start.tzinfo is None

    def test_summary_defaults_to_no_title(self):
        assert CalendarEvent.model_validate({"start": "2025-01-15T10:00:00Z"}).summary == "No Title"

    def test_detailed_instance_projects_down_to_simple(self):
        start = datetime(2025, 1, 15, 10, tzinfo=timezone.utc)
        detailed = DetailedEventInstance(
            name="Standup",
            start=start,
            end=start + timedelta(minutes=15),
            location="Room 1",
            duration_ms=900000,
            description="Daily",
        )
        simple = detailed.to_simple()

        assert isinstance(simple, SimpleEventInstance)
        assert simple.model_dump() == {
            key: value for key, value in detailed.model_dump().items() if key in simple.model_dump()
        }
        assert set(simple.model_dump()) < set(detailed.model_dump())

    def test_instance_timestamps_serialize_as_iso(self):
        start = datetime(2025, 1, 15, 10, tzinfo=timezone.utc)
        dumped = SimpleEventInstance(name="x", start=start, end=start).model_dump(mode="json")

        assert dumped["start"] == "2025-01-15T10:00:00+00:00"


@pytest.mark.parametrize(
    "layout,count",
    [(LayoutType.QUADRANT, 4), (LayoutType.THIRDS, 3), (LayoutType.FOCUS, 3), (LayoutType.SINGLE, 1)],
)
def test_layout_slot_count(layout, count):
    assert layout.slot_count == count


def test_json_date_string_is_all_day():
    event = CalendarEvent.model_validate({"summary": "Holiday", "start": "2025-01-15", "end": "2025-01-16"})

    assert event.all_day is True
    assert event.end == datetime(2025, 1, 16)
