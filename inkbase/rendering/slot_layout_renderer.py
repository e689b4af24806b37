"""Coarse slot-layout preview rendering.

Paints the fixed 800x480 preview canvas split into named regions for a
LayoutType. Assigned regions get a black header bar with the service name in
white; unassigned regions get a border only. Output is a JPEG.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Optional, Union

from PIL import Image, ImageDraw, ImageFont
from PIL.ImageFont import FreeTypeFont, ImageFont as BuiltinFont

from ..core.config_manager import SLOT_CANVAS_HEIGHT, SLOT_CANVAS_WIDTH, SLOT_HEADER_HEIGHT
from ..exceptions import LayoutError
from ..models import LayoutType

logger = logging.getLogger(__name__)

BACKGROUND = 255
INK = 0
BORDER_WIDTH = 2
HEADER_FONT_SIZE = 20
HEADER_TEXT_INSET = 10
HEADER_FONT_PATH = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"
JPEG_QUALITY = 90
PREVIEW_MIME_TYPE = "image/jpeg"


@dataclass(frozen=True)
class SlotRegion:
    """Rectangular region of the preview canvas."""

    x: int
    y: int
    width: int
    height: int

    def get_coordinates(self) -> tuple[int, int, int, int]:
        """Inclusive PIL box (x0, y0, x1, y1)."""
        return (self.x, self.y, self.x + self.width - 1, self.y + self.height - 1)


def _thirds(width: int, height: int) -> "OrderedDict[str, SlotRegion]":
    edges = [round(i * width / 3) for i in range(4)]
    return OrderedDict(
        (str(i), SlotRegion(edges[i], 0, edges[i + 1] - edges[i], height)) for i in range(3)
    )


def layout_regions(
    layout_type: LayoutType, width: int = SLOT_CANVAS_WIDTH, height: int = SLOT_CANVAS_HEIGHT
) -> "OrderedDict[str, SlotRegion]":
    """Slot id to region mapping for a layout type, in drawing order."""
    half_w, half_h = width // 2, height // 2
    if layout_type is LayoutType.QUADRANT:
        return OrderedDict(
            [
                ("0", SlotRegion(0, 0, half_w, half_h)),
                ("1", SlotRegion(half_w, 0, width - half_w, half_h)),
                ("2", SlotRegion(0, half_h, half_w, height - half_h)),
                ("3", SlotRegion(half_w, half_h, width - half_w, height - half_h)),
            ]
        )
    if layout_type is LayoutType.THIRDS:
        return _thirds(width, height)
    if layout_type is LayoutType.FOCUS:
        return OrderedDict(
            [
                ("0", SlotRegion(0, 0, width, half_h)),
                ("1", SlotRegion(0, half_h, half_w, height - half_h)),
                ("2", SlotRegion(half_w, half_h, width - half_w, height - half_h)),
            ]
        )
    return OrderedDict([("0", SlotRegion(0, 0, width, height))])


def parse_layout_type(value: Any) -> LayoutType:
    """Coerce a request value into a LayoutType.

    Raises:
        LayoutError: If the value names no known layout
    """
    if isinstance(value, LayoutType):
        return value
    try:
        return LayoutType(str(value or LayoutType.QUADRANT.value).strip().lower())
    except ValueError as e:
        raise LayoutError(f"Unknown layout type {value!r}") from e


def resolve_slot_map(stored: Any, layout_type: Union[LayoutType, str]) -> dict[str, str]:
    """Normalize a stored slot map to ``{slot_id: service_id}`` for one layout.

    Stored maps come either nested by layout type or flat. The nested entry for
    the active layout wins; the flat form is used only when every stored value
    is a plain service id (string or empty).
    """
    if not isinstance(stored, dict) or not stored:
        return {}
    key = layout_type.value if isinstance(layout_type, LayoutType) else str(layout_type)

    nested = stored.get(key)
    if isinstance(nested, dict):
        return _clean_assignments(nested)

    if all(value is None or isinstance(value, str) for value in stored.values()):
        return _clean_assignments(stored)

    logger.debug("Slot map has no entry for layout %s", key)
    return {}


def _clean_assignments(mapping: dict[Any, Any]) -> dict[str, str]:
    return {str(slot): value for slot, value in mapping.items() if isinstance(value, str) and value.strip()}


class SlotLayoutRenderer:
    """Renders slot layout previews at the fixed reference resolution."""

    def __init__(self, width: int = SLOT_CANVAS_WIDTH, height: int = SLOT_CANVAS_HEIGHT) -> None:
        self.width = width
        self.height = height
        self._font: Optional[Union[FreeTypeFont, BuiltinFont]] = None

    def render_image(self, layout_type: Union[LayoutType, str], slot_map: Any = None) -> Image.Image:
        layout = parse_layout_type(layout_type)
        assignments = resolve_slot_map(slot_map, layout)

        image = Image.new("L", (self.width, self.height), BACKGROUND)
        draw = ImageDraw.Draw(image)

        for slot_id, region in layout_regions(layout, self.width, self.height).items():
            draw.rectangle(region.get_coordinates(), outline=INK, width=BORDER_WIDTH)
            service = assignments.get(slot_id)
            if service:
                self._draw_header(draw, region, service)

        logger.debug("Rendered %s slot preview with %d assigned slots", layout.value, len(assignments))
        return image

    def render_jpeg(self, layout_type: Union[LayoutType, str], slot_map: Any = None) -> bytes:
        image = self.render_image(layout_type, slot_map)
        buf = BytesIO()
        image.save(buf, format="JPEG", quality=JPEG_QUALITY)
        return buf.getvalue()

    def _draw_header(self, draw: ImageDraw.ImageDraw, region: SlotRegion, service: str) -> None:
        draw.rectangle(
            (region.x, region.y, region.x + region.width - 1, region.y + SLOT_HEADER_HEIGHT - 1),
            fill=INK,
        )
        text_y = region.y + (SLOT_HEADER_HEIGHT - HEADER_FONT_SIZE) // 2
        draw.text((region.x + HEADER_TEXT_INSET, text_y), service.upper(), font=self._get_font(), fill=BACKGROUND)

    def _get_font(self) -> Union[FreeTypeFont, BuiltinFont]:
        if self._font is None:
            try:
                self._font = ImageFont.truetype(HEADER_FONT_PATH, HEADER_FONT_SIZE)
            except OSError:
                logger.warning("Header font not available, using default")
                self._font = ImageFont.load_default()
        return self._font
