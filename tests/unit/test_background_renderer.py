"""Unit tests for inkbase.rendering.background_renderer."""

import base64
import xml.etree.ElementTree as ET

import pytest

from inkbase.models import ScreenDefinition
from inkbase.rendering.background_renderer import (
    BackgroundRenderer,
    screen_digest,
    svg_to_data_uri,
    widget_label,
)

pytestmark = pytest.mark.unit

SVG_NS = "{http://www.w3.org/2000/svg}"


def _screen(*widgets):
    return ScreenDefinition.model_validate({"widgets": list(widgets)})


@pytest.fixture
def dashboard():
    return _screen(
        {"type": "weather", "x": 10, "y": 10, "w": 180, "h": 130},
        {"type": "text", "x": 200, "y": 10, "w": 190, "h": 130, "config": {"text": "hi"}},
        {"type": "calendar", "x": 10, "y": 150, "w": 380, "h": 140, "config": {"label": "Agenda"}},
    )


class TestBackgroundRenderer:
    def test_root_declares_exact_size(self, dashboard):
        svg = BackgroundRenderer().render(dashboard, 400, 300)
        root = ET.fromstring(svg)

        assert root.tag == f"{SVG_NS}svg"
        assert root.attrib["width"] == "400"
        assert root.attrib["height"] == "300"

    def test_canvas_then_one_border_per_widget(self, dashboard):
        root = ET.fromstring(BackgroundRenderer().render(dashboard, 400, 300))
        rects = root.findall(f"{SVG_NS}rect")

        assert rects[0].attrib["width"] == "400"
        assert "rx" not in rects[0].attrib
        borders = rects[1:]
        assert [(r.attrib["x"], r.attrib["y"]) for r in borders] == [("10", "10"), ("200", "10"), ("10", "150")]
        assert all(r.attrib["rx"] == "8" for r in borders)

    def test_icon_and_label_offsets(self, dashboard):
        root = ET.fromstring(BackgroundRenderer().render(dashboard, 400, 300))

        groups = root.findall(f"{SVG_NS}g")
        labels = root.findall(f"{SVG_NS}text")

        # text widget has no icon
        assert len(groups) == 2
        assert groups[0].attrib["transform"] == "translate(20,20) scale(1)"
        assert groups[1].attrib["transform"] == "translate(20,160) scale(0.9)"
        assert [(t.attrib["x"], t.attrib["y"], t.text) for t in labels] == [
            ("55", "38", "WEATHER"),
            ("245", "38", "TEXT"),
            ("55", "178", "AGENDA"),
        ]

    def test_monochrome_draws_everything_black(self, dashboard):
        svg = BackgroundRenderer().render(dashboard, 400, 300, "1bit")

        assert "#3498db" not in svg
        assert 'stroke="#000000"' in svg

    def test_color_mode_uses_type_hues(self, dashboard):
        svg = BackgroundRenderer().render(dashboard, 400, 300, "color")

        assert 'stroke="#3498db"' in svg
        assert 'fill="#e74c3c"' in svg

    def test_label_is_escaped(self):
        screen = _screen({"type": "text", "config": {"label": "R&D <lab>"}})
        svg = BackgroundRenderer().render(screen, 400, 300)

        assert "R&amp;D &lt;LAB&gt;" in svg
        ET.fromstring(svg)

    def test_unknown_widget_still_gets_border_and_label(self):
        screen = _screen({"type": "crypto", "x": 5, "y": 5, "w": 50, "h": 50})
        root = ET.fromstring(BackgroundRenderer().render(screen, 400, 300, "color"))

        assert len(root.findall(f"{SVG_NS}rect")) == 2
        assert root.find(f"{SVG_NS}text").text == "CRYPTO"
        assert root.findall(f"{SVG_NS}rect")[1].attrib["stroke"] == "#2c3e50"

    def test_empty_screen_is_canvas_only(self):
        root = ET.fromstring(BackgroundRenderer().render(_screen(), 200, 100))
        assert len(list(root)) == 1


class TestDeterminismAndCache:
    def test_identical_inputs_give_identical_output(self, dashboard):
        first = BackgroundRenderer().render(dashboard, 400, 300, "color")
        second = BackgroundRenderer().render(_screen(*[w.model_dump() for w in dashboard.widgets]), 400, 300, "color")

        assert first == second

    def test_cache_hit_returns_same_document(self, dashboard):
        renderer = BackgroundRenderer()
        first = renderer.render(dashboard, 400, 300)

        assert renderer.render(dashboard, 400, 300) is first
        assert renderer.render(dashboard, 400, 300, "color") != first

    def test_cache_is_bounded(self):
        renderer = BackgroundRenderer(cache_size=2)
        for width in (100, 200, 300):
            renderer.render(_screen(), width, 100)

        assert len(renderer._cache) == 2

        renderer.clear_cache()
        assert len(renderer._cache) == 0

    def test_screen_digest_changes_with_geometry(self):
        assert screen_digest(_screen({"type": "text", "x": 1})) != screen_digest(_screen({"type": "text", "x": 2}))


def test_data_uri_round_trip(dashboard):
    renderer = BackgroundRenderer()
    svg = renderer.render(dashboard, 400, 300)

    uri = renderer.render_data_uri(dashboard, 400, 300)

    assert uri == svg_to_data_uri(svg)
    assert uri.startswith("data:image/svg+xml;base64,")
    assert base64.b64decode(uri.split(",", 1)[1]).decode("utf-8") == svg


@pytest.mark.parametrize(
    "raw,expected",
    [
        ({"type": "canvas"}, "ASSIGNMENTS"),
        ({"type": "stock"}, "STOCKS"),
        ({"type": "stock", "config": {"label": "Portfolio"}}, "PORTFOLIO"),
        ({"type": "news"}, "NEWS"),
    ],
)
def test_widget_label(raw, expected):
    assert widget_label(_screen(raw).widgets[0]) == expected
