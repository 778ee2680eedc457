"""Abstract drawing surface consumed by the scene.

WHY: The dialogue core never assumes a graphics API. Whatever ends up
putting pixels on screen (Pillow for offline frames, a recorder for tests
and traces, a game engine in an embedding app) only has to provide these
few primitives.

HOW: BaseRenderer is an ABC with one method per primitive plus
begin_frame()/end_frame() brackets. Colours are RGB tuples with an
optional alpha in 0-255; opacity for images is 0-100, as in the tint
values the animation produces.

RULES:
- Subclasses implement ``name`` and every draw_* method
- end_frame() returns the renderer's product for that frame
- Coordinates are canvas pixels, origin top-left, glyph y is the baseline
- To add a renderer: subclass, then register it in renderers/__init__.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence, Tuple

from dialogue_box.core.animation import Rect

Color = Tuple[int, ...]
Point = Tuple[float, float]


class BaseRenderer(ABC):
    """Abstract base for all renderers.

    Args:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable renderer name, e.g. 'Pillow PNG frames'."""

    @abstractmethod
    def begin_frame(self) -> None:
        """Start a new, empty frame."""

    @abstractmethod
    def end_frame(self) -> Any:
        """Finish the current frame and return what was produced."""

    @abstractmethod
    def draw_glyph(self, char: str, x: float, y: float, color: Color) -> None:
        """Draw one character with its baseline-left corner at (x, y)."""

    @abstractmethod
    def draw_rect(self, rect: Rect, color: Color, radius: float = 0) -> None:
        """Fill a rectangle."""

    @abstractmethod
    def draw_image(self, name: str, rect: Rect, opacity: float) -> None:
        """Draw a named frame asset stretched to ``rect``, tinted to ``opacity``."""

    @abstractmethod
    def draw_line(self, start: Point, end: Point, color: Color, weight: float) -> None:
        """Stroke a straight line."""

    @abstractmethod
    def draw_triangle(self, points: Sequence[Point], color: Color) -> None:
        """Fill a triangle."""
