"""Assembles the display payload: background image plus overlay list."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from ..core.config_manager import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH, DEFAULT_REFRESH_RATE_SECONDS
from ..models import ColorMode, RenderResponse, ScreenDefinition
from .background_renderer import BackgroundRenderer, svg_to_data_uri
from .overlay_composer import OverlayComposer

logger = logging.getLogger(__name__)


class DisplayService:
    """Runs one full render: background once, then overlays for every widget."""

    def __init__(
        self,
        background_renderer: Optional[BackgroundRenderer] = None,
        overlay_composer: Optional[OverlayComposer] = None,
        canvas_width: int = DEFAULT_CANVAS_WIDTH,
        canvas_height: int = DEFAULT_CANVAS_HEIGHT,
        refresh_rate_seconds: int = DEFAULT_REFRESH_RATE_SECONDS,
    ) -> None:
        self.background_renderer = background_renderer or BackgroundRenderer()
        self.overlay_composer = overlay_composer or OverlayComposer()
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.refresh_rate_seconds = refresh_rate_seconds

    def render(
        self,
        screen: ScreenDefinition,
        data: Optional[Mapping[str, Any]] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        color_mode: Union[str, ColorMode, None] = ColorMode.MONOCHROME,
        refresh_rate_seconds: Optional[int] = None,
    ) -> RenderResponse:
        mode = ColorMode.parse(color_mode)
        canvas_width = width or self.canvas_width
        canvas_height = height or self.canvas_height

        svg = self.background_renderer.render(screen, canvas_width, canvas_height, mode)
        composition = self.overlay_composer.compose(screen, data, mode)

        if composition.warnings:
            logger.info("Render finished with %d warnings", len(composition.warnings))

        return RenderResponse(
            background=svg_to_data_uri(svg),
            overlays=composition.overlays,
            refresh_rate_seconds=refresh_rate_seconds or self.refresh_rate_seconds,
            color_mode=mode.value,
            filename=background_filename(svg),
            warnings=composition.warnings,
        )


def background_filename(svg: str) -> str:
    digest = hashlib.sha256(svg.encode("utf-8")).hexdigest()
    return f"background_{digest[:12]}.svg"


def build_screen(payload: Mapping[str, Any]) -> ScreenDefinition:
    """Build a ScreenDefinition from a request body.

    Accepts ``{"screen": {...}}`` or a top-level ``{"widgets": [...]}``.
    """
    screen = payload.get("screen")
    if isinstance(screen, Mapping):
        return ScreenDefinition.model_validate(dict(screen))
    return ScreenDefinition.model_validate({"name": payload.get("name"), "widgets": payload.get("widgets") or []})
