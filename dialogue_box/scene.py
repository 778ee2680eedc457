"""Turns a DialogueFrame into renderer primitive calls.

WHY: The session decides *what* is on screen; something still has to
decide the draw order and colours. Keeping that here means every renderer
gets exactly the same picture.

HOW: render_frame() draws, in order: the opening/closing animation
(centreline, white flash, then the two frame panels), the full text frame,
the "more text" triangle, the speaker name, and the revealed passage
glyphs. Spaces are never drawn.

RULES:
- Colours come from config; alpha values 0-100 are scaled to 0-255
- Triangle vertices: (0, r*k), (-2r/sqrt(3), -r*k), (2r/sqrt(3), -r*k)
  around the indicator centre, with r = INDICATOR_RADIUS, k = y-scale
"""

from __future__ import annotations

import math
from typing import Any, List, Tuple

from dialogue_box.config import (
    CENTERLINE_COLOR,
    CENTERLINE_WEIGHT,
    FLASH_COLOR,
    FRAME_CYAN,
    HIGHLIGHT_COLOR,
    INDICATOR_RADIUS,
    INDICATOR_Y_SCALE,
    TEXT_COLOR,
)
from dialogue_box.core.animation import FLASH_CORNER_RADIUS, FrameGeometry, Rect
from dialogue_box.core.session import DialogueFrame
from dialogue_box.renderers.base import BaseRenderer


def _alpha(value: float) -> int:
    return int(round(max(0.0, min(value, 100.0)) * 2.55))


def indicator_points(center: Tuple[float, float]) -> List[Tuple[float, float]]:
    cx, cy = center
    r = INDICATOR_RADIUS
    dy = r * INDICATOR_Y_SCALE
    dx = 2 * r / math.sqrt(3)
    return [(cx, cy + dy), (cx - dx, cy - dy), (cx + dx, cy - dy)]


def draw_animation(geometry: FrameGeometry, renderer: BaseRenderer) -> None:
    line = geometry.centerline
    if line.visible:
        renderer.draw_line(line.start, line.end, CENTERLINE_COLOR, CENTERLINE_WEIGHT)

    if geometry.flash is not None:
        renderer.draw_rect(geometry.flash, FLASH_COLOR, radius=FLASH_CORNER_RADIUS)

    if geometry.top_panel is not None and geometry.bottom_panel is not None:
        renderer.draw_image("frame_top", geometry.top_panel, geometry.opacity)
        renderer.draw_image("frame_bottom", geometry.bottom_panel, geometry.opacity)


def draw_text(frame: DialogueFrame, renderer: BaseRenderer) -> None:
    renderer.draw_image("text_frame", Rect(0, 0, renderer.width, renderer.height), 100)

    if frame.show_indicator:
        color = FRAME_CYAN + (_alpha(frame.indicator_alpha),)
        renderer.draw_triangle(indicator_points(frame.indicator_center), color)

    for glyph in frame.speaker:
        if glyph.drawn:
            renderer.draw_glyph(glyph.char, glyph.x, glyph.y, FRAME_CYAN)

    if frame.layout is None:
        return
    for glyph in frame.layout.drawn_glyphs:
        color = HIGHLIGHT_COLOR if glyph.highlighted else TEXT_COLOR
        renderer.draw_glyph(glyph.char, glyph.x, glyph.y, color)


def render_frame(frame: DialogueFrame, renderer: BaseRenderer) -> Any:
    """Draw one frame and return whatever the renderer produces for it."""
    renderer.begin_frame()
    if frame.animation is not None:
        draw_animation(frame.animation, renderer)
    if frame.visible:
        draw_text(frame, renderer)
    return renderer.end_frame()
