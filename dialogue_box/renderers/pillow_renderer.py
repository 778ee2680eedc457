"""Renderer that draws frames into Pillow RGBA images.

WHY: Offline rendering (preview stills, frame sequences to assemble into
a video over the 3D animation) needs real pixels with transparency so the
dialogue box can be composited over another layer.

HOW: Each frame starts as a fully transparent canvas. Opaque primitives
are drawn directly with ImageDraw; anything translucent (tinted panels,
the pulsing indicator) is drawn onto a scratch layer and alpha-composited
so it blends instead of overwriting.

RULES:
- Glyph y is the baseline for TrueType fonts (anchor "ls")
- Image opacity 0-100 scales the asset's own alpha channel
- Degenerate (zero or negative size) rects and images are skipped
"""

from __future__ import annotations

from typing import Sequence

from PIL import Image, ImageDraw, ImageFont

from dialogue_box.assets import FrameAssets
from dialogue_box.core.animation import Rect
from dialogue_box.core.glyphs import FontType
from dialogue_box.renderers.base import BaseRenderer, Color, Point


class PillowRenderer(BaseRenderer):
    """Draws onto a transparent RGBA PIL image per frame.

    Args:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        font: Font used for glyphs (same font the measurer scanned).
        assets: Frame images looked up by name in draw_image().
    """

    def __init__(self, width: int, height: int, font: FontType, assets: FrameAssets) -> None:
        super().__init__(width, height)
        self.font = font
        self.assets = assets
        self.image = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        self._draw = ImageDraw.Draw(self.image)

    @property
    def name(self) -> str:
        return "Pillow PNG frames"

    def begin_frame(self) -> None:
        self.image = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
        self._draw = ImageDraw.Draw(self.image)

    def end_frame(self) -> Image.Image:
        return self.image

    def draw_glyph(self, char: str, x: float, y: float, color: Color) -> None:
        if isinstance(self.font, ImageFont.FreeTypeFont):
            self._draw.text((x, y), char, font=self.font, fill=tuple(color), anchor="ls")
        else:
            self._draw.text((x, y), char, font=self.font, fill=tuple(color))

    def draw_rect(self, rect: Rect, color: Color, radius: float = 0) -> None:
        if rect.width <= 0 or rect.height <= 0:
            return
        box = [rect.x, rect.y, rect.x + rect.width, rect.y + rect.height]
        self._draw.rounded_rectangle(box, radius=radius, fill=tuple(color))

    def draw_image(self, name: str, rect: Rect, opacity: float) -> None:
        width, height = int(round(rect.width)), int(round(rect.height))
        if width < 1 or height < 1:
            return
        source = self.assets.get(name).convert("RGBA")
        if source.size != (width, height):
            source = source.resize((width, height), Image.Resampling.BILINEAR)
        scale = max(0.0, min(opacity, 100.0)) / 100.0
        if scale < 1.0:
            alpha = source.getchannel("A").point(lambda a: int(a * scale))
            source.putalpha(alpha)
        dest = (max(0, int(round(rect.x))), max(0, int(round(rect.y))))
        self.image.alpha_composite(source, dest=dest)

    def draw_line(self, start: Point, end: Point, color: Color, weight: float) -> None:
        self._draw.line([tuple(start), tuple(end)], fill=tuple(color), width=max(1, int(weight)))

    def draw_triangle(self, points: Sequence[Point], color: Color) -> None:
        layer = Image.new("RGBA", self.image.size, (0, 0, 0, 0))
        ImageDraw.Draw(layer).polygon([tuple(p) for p in points], fill=tuple(color))
        self.image.alpha_composite(layer)
