"""Unit tests for inkbase.rendering.theme."""

import pytest

from inkbase.models import ColorMode, WidgetType
from inkbase.rendering.theme import (
    DEFAULT_HUE,
    INK_BLACK,
    IconGlyph,
    ThemePalette,
    ThemeResolver,
)

pytestmark = pytest.mark.unit


class TestThemeResolver:
    @pytest.mark.parametrize("widget_type", [t.value for t in WidgetType] + ["news"])
    def test_monochrome_is_black_for_every_type(self, widget_type):
        style = ThemeResolver().resolve(widget_type, ColorMode.MONOCHROME)

        assert style.stroke_color == INK_BLACK
        assert style.label_color == INK_BLACK

    @pytest.mark.parametrize(
        "widget_type,expected",
        [
            ("weather", "#3498db"),
            ("stock", "#27ae60"),
            ("clock", "#e67e22"),
            ("text", "#8e44ad"),
            ("calendar", "#e74c3c"),
            ("spotify", "#1db954"),
        ],
    )
    def test_color_mode_uses_type_hue(self, widget_type, expected):
        style = ThemeResolver().resolve(widget_type, "color")

        assert style.stroke_color == expected
        assert style.label_color == expected

    def test_unknown_type_gets_default_hue(self):
        assert ThemeResolver().resolve("crypto", "color").stroke_color == DEFAULT_HUE

    def test_enum_and_string_types_resolve_the_same(self):
        resolver = ThemeResolver()
        assert resolver.resolve(WidgetType.CLOCK, "color") == resolver.resolve("clock", "color")

    def test_text_widget_has_no_icon(self):
        assert ThemeResolver().resolve("text", "1bit").icon is None

    def test_icons_are_independent_of_color_mode(self):
        resolver = ThemeResolver()
        mono = resolver.resolve("weather", "1bit")
        color = resolver.resolve("weather", "color")

        assert mono.icon is not None
        assert mono.icon == color.icon

    def test_unparseable_mode_falls_back_to_monochrome(self):
        assert ThemeResolver().resolve("weather", "sepia").stroke_color == INK_BLACK

    def test_injected_palette(self):
        """A custom palette replaces the default tables without global state."""
        palette = ThemePalette(
            hues={"weather": "#111111"},
            icons={"weather": IconGlyph("sun", "M0 0", 2.0)},
            default_hue="#222222",
            ink="#333333",
        )
        resolver = ThemeResolver(palette)

        assert resolver.resolve("weather", "color").stroke_color == "#111111"
        assert resolver.resolve("stock", "color").stroke_color == "#222222"
        assert resolver.resolve("stock", "1bit").stroke_color == "#333333"
        assert resolver.resolve("weather", "1bit").icon.name == "sun"
        assert ThemeResolver().resolve("weather", "color").stroke_color == "#3498db"

    def test_text_color_matches_label_color(self):
        resolver = ThemeResolver()
        assert resolver.text_color("stock", "color") == resolver.resolve("stock", "color").label_color
