"""Display composition: backgrounds, overlays and slot previews."""

from .background_renderer import BackgroundRenderer, svg_to_data_uri, widget_label
from .display_service import DisplayService, background_filename, build_screen
from .overlay_composer import CompositionResult, OverlayComposer, WidgetResult, lookup_widget_data
from .slot_layout_renderer import (
    PREVIEW_MIME_TYPE,
    SlotLayoutRenderer,
    SlotRegion,
    layout_regions,
    parse_layout_type,
    resolve_slot_map,
)
from .theme import DEFAULT_PALETTE, IconGlyph, ThemePalette, ThemeResolver, ThemeStyle

__all__ = [
    "DEFAULT_PALETTE",
    "PREVIEW_MIME_TYPE",
    "BackgroundRenderer",
    "CompositionResult",
    "DisplayService",
    "IconGlyph",
    "OverlayComposer",
    "SlotLayoutRenderer",
    "SlotRegion",
    "ThemePalette",
    "ThemeResolver",
    "ThemeStyle",
    "WidgetResult",
    "background_filename",
    "build_screen",
    "layout_regions",
    "lookup_widget_data",
    "parse_layout_type",
    "resolve_slot_map",
    "svg_to_data_uri",
    "widget_label",
]
