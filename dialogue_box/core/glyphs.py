"""Glyph width measurement by rasterisation, with a process-lifetime cache.

WHY: The dialogue font reports wrong advance widths through the normal
text-measurement API, so laying text out with those metrics puts letters
on top of each other. The only reliable width is the one you can see:
draw the glyph and find its rightmost lit pixel.

HOW: RasterGlyphMeasurer draws one character in white onto an opaque
black buffer (font_size wide, 1.5 x font_size tall to fit ascenders and
descenders), then scans the pixels with numpy for the largest x where any
channel differs from opaque black. The result is stored in a
GlyphWidthCache so each distinct character is rasterised once. Word
widths are sums of glyph widths plus letter spacing.

RULES:
- The space character is never rasterised; its width is space_width
- Letter spacing is added after every character except a space
- A glyph with no lit pixels measures 0; that is a valid width
- The cache is append-only and never invalidated (font is fixed)
- prewarm() measures a whole alphabet up front to avoid first-use spikes
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

SPACE = " "

# Buffer height relative to font size; covers ascent + descent for the
# whole alphabet of the dialogue font.
_BUFFER_HEIGHT_FACTOR = 1.5

_OPAQUE_BLACK = np.array([0, 0, 0, 255], dtype=np.uint8)

FontType = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


class GlyphWidthCache:
    """Memoised pixel widths keyed by single character."""

    def __init__(self) -> None:
        self._widths: Dict[str, int] = {}

    def get(self, char: str) -> Optional[int]:
        """Return the cached width, or None on a miss."""
        return self._widths.get(char)

    def put(self, char: str, width: int) -> None:
        self._widths[char] = width

    def __contains__(self, char: object) -> bool:
        return char in self._widths

    def __len__(self) -> int:
        return len(self._widths)


def scan_glyph_width(pixels: np.ndarray) -> int:
    """Return the largest x at which any pixel is not opaque black.

    Args:
        pixels: RGBA buffer of shape (height, width, 4), uint8.

    Returns:
        The rightmost lit column index, or 0 when nothing is lit.
    """
    lit = np.any(pixels != _OPAQUE_BLACK, axis=-1)
    columns = np.flatnonzero(lit.any(axis=0))
    if columns.size == 0:
        return 0
    return int(columns[-1])


class GlyphMeasurer(ABC):
    """Width source for layout: per-character and per-word pixel widths.

    WHY: Layout only needs widths; how they are obtained (rasterising,
    a lookup table, a pre-warmed cache) is an implementation choice the
    typewriter should not care about.

    HOW: Subclasses implement ``_measure_uncached``. This base class owns
    the cache lookup, the space rule, letter spacing, and pre-warming.

    RULES:
    - measure(" ") returns space_width without touching the cache
    - measure(c) consults the cache first; on a miss it measures and stores
    - word_width adds letter_spacing after every non-space character
    """

    def __init__(
        self,
        letter_spacing: float,
        space_width: float,
        cache: Optional[GlyphWidthCache] = None,
    ) -> None:
        self.letter_spacing = letter_spacing
        self.space_width = space_width
        self.cache = cache if cache is not None else GlyphWidthCache()

    @abstractmethod
    def _measure_uncached(self, char: str) -> int:
        """Measure one non-space character without consulting the cache."""

    @property
    @abstractmethod
    def text_height(self) -> int:
        """Ascent plus descent of the font, in pixels."""

    def measure(self, char: str) -> float:
        if char == SPACE:
            return self.space_width
        cached = self.cache.get(char)
        if cached is not None:
            return cached
        width = self._measure_uncached(char)
        self.cache.put(char, width)
        logger.debug("Measured glyph %r: %d px", char, width)
        return width

    def word_width(self, word: str) -> float:
        total = 0.0
        for char in word:
            if char == SPACE:
                total += self.space_width
            else:
                total += self.measure(char) + self.letter_spacing
        return total

    def prewarm(self, chars: Iterable[str]) -> int:
        """Measure every character in ``chars`` now.

        Returns:
            How many characters were newly measured (cache misses).
        """
        measured = 0
        for char in chars:
            if char == SPACE or char in self.cache:
                continue
            self.measure(char)
            measured += 1
        logger.info("Pre-warmed %d glyph width(s); cache holds %d", measured, len(self.cache))
        return measured


class RasterGlyphMeasurer(GlyphMeasurer):
    """Measures glyphs by drawing them with Pillow and scanning the pixels.

    Each miss costs a full width x height scan, so on a cold cache the
    first frame that shows a new character pays for it; call prewarm()
    at startup to move that cost out of the render loop.
    """

    def __init__(
        self,
        font: FontType,
        font_size: int,
        letter_spacing: float,
        space_width: Optional[float] = None,
        cache: Optional[GlyphWidthCache] = None,
    ) -> None:
        super().__init__(
            letter_spacing=letter_spacing,
            space_width=font_size / 2 if space_width is None else space_width,
            cache=cache,
        )
        self.font = font
        self.font_size = font_size

    @property
    def buffer_size(self) -> tuple:
        return self.font_size, int(self.font_size * _BUFFER_HEIGHT_FACTOR)

    def _rasterize(self, char: str) -> np.ndarray:
        """Draw ``char`` white-on-black and return the RGBA pixel array."""
        width, height = self.buffer_size
        image = Image.new("RGBA", (width, height), (0, 0, 0, 255))
        draw = ImageDraw.Draw(image)
        if isinstance(self.font, ImageFont.FreeTypeFont):
            # Baseline half a font size above the bottom edge leaves room
            # for descenders like 'j' and 'g'.
            baseline = height - self.font_size / 2
            draw.text((0, baseline), char, font=self.font, fill=(255, 255, 255, 255), anchor="ls")
        else:
            draw.text((0, 0), char, font=self.font, fill=(255, 255, 255, 255))
        return np.asarray(image)

    def _measure_uncached(self, char: str) -> int:
        return scan_glyph_width(self._rasterize(char))

    @property
    def text_height(self) -> int:
        if isinstance(self.font, ImageFont.FreeTypeFont):
            ascent, descent = self.font.getmetrics()
            return ascent + descent
        left, top, right, bottom = self.font.getbbox("Ag")
        return int(bottom - top)
