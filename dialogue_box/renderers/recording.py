"""Renderer that records draw calls instead of drawing.

WHY: Tests need to assert on what the scene asked to draw, and a JSON
trace of draw calls is a convenient way to diff two runs or feed the
dialogue into another engine without Pillow.

HOW: Every draw_* method appends a DrawCall (operation name plus keyword
arguments as plain JSON-friendly values). end_frame() returns the frame's
calls and keeps them in ``frames``; to_json() serialises all frames.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Sequence

from dialogue_box.core.animation import Rect
from dialogue_box.renderers.base import BaseRenderer, Color, Point


@dataclass
class DrawCall:
    op: str
    args: Dict[str, Any] = field(default_factory=dict)


class RecordingRenderer(BaseRenderer):
    """Keeps every draw call of every frame in memory."""

    def __init__(self, width: int, height: int) -> None:
        super().__init__(width, height)
        self.frames: List[List[DrawCall]] = []
        self._current: List[DrawCall] = []

    @property
    def name(self) -> str:
        return "Draw call trace"

    def begin_frame(self) -> None:
        self._current = []

    def end_frame(self) -> List[DrawCall]:
        self.frames.append(self._current)
        return self._current

    def _record(self, op: str, **args: Any) -> None:
        self._current.append(DrawCall(op=op, args=args))

    def draw_glyph(self, char: str, x: float, y: float, color: Color) -> None:
        self._record("glyph", char=char, x=x, y=y, color=list(color))

    def draw_rect(self, rect: Rect, color: Color, radius: float = 0) -> None:
        self._record("rect", rect=asdict(rect), color=list(color), radius=radius)

    def draw_image(self, name: str, rect: Rect, opacity: float) -> None:
        self._record("image", name=name, rect=asdict(rect), opacity=opacity)

    def draw_line(self, start: Point, end: Point, color: Color, weight: float) -> None:
        self._record("line", start=list(start), end=list(end), color=list(color), weight=weight)

    def draw_triangle(self, points: Sequence[Point], color: Color) -> None:
        self._record("triangle", points=[list(p) for p in points], color=list(color))

    def calls(self, op: str) -> List[DrawCall]:
        """All recorded calls of one operation type in the latest frame."""
        frame = self.frames[-1] if self.frames else self._current
        return [c for c in frame if c.op == op]

    def to_json(self) -> str:
        payload = [[asdict(call) for call in frame] for frame in self.frames]
        return json.dumps(payload, indent=2, ensure_ascii=False)
