"""Font and frame-image loading, and wiring of a ready-to-run session.

WHY: The core only needs a glyph measurer and panel sizes; somebody has
to open the font file and the frame images and hand the pieces over.
Keeping that I/O here leaves the core free of file access.

HOW: load_font() opens a TrueType file with Pillow, or falls back to
Pillow's bundled font. load_frame_assets() reads textFrame.png,
frameTop.png and frameBottom.png from a directory; generate_frame_assets()
draws equivalent images to the configured box geometry when no artwork is
available. build_session() assembles measurer, animator and session.

RULES:
- Missing font or image files raise InvalidConfigurationError
- Asset names used by the scene: "text_frame", "frame_top", "frame_bottom"
- frame_bottom is frame_top flipped vertically when generated
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, ImageOps

from dialogue_box.config import (
    BOX_FILL_COLOR,
    BOX_HEIGHT,
    FRAME_BORDER_WIDTH,
    FRAME_CYAN,
    LEFT_MARGIN,
    RIGHT_MARGIN,
    DialogueSettings,
)
from dialogue_box.core.animation import OpenCloseAnimator
from dialogue_box.core.clock import AudioClock
from dialogue_box.core.errors import InvalidConfigurationError
from dialogue_box.core.glyphs import FontType, GlyphWidthCache, RasterGlyphMeasurer
from dialogue_box.core.passages import PassageModel
from dialogue_box.core.session import DialogueSession

logger = logging.getLogger(__name__)

ASSET_FILES = {
    "text_frame": "textFrame.png",
    "frame_top": "frameTop.png",
    "frame_bottom": "frameBottom.png",
}

_FRAME_CORNER_RADIUS = 12


@dataclass
class FrameAssets:
    """The three images that make up the dialogue frame."""

    text_frame: Image.Image
    frame_top: Image.Image
    frame_bottom: Image.Image

    def get(self, name: str) -> Image.Image:
        if name not in ASSET_FILES:
            raise KeyError("Unknown frame asset: {}".format(name))
        return getattr(self, name)

    @property
    def panel_size(self) -> Tuple[int, int]:
        return self.frame_top.size


def load_font(path: str, size: int) -> FontType:
    """Open the dialogue font.

    Args:
        path: TrueType/OpenType file, or "" for Pillow's default font.
        size: Font size in pixels.

    Raises:
        InvalidConfigurationError: If the file cannot be opened as a font.
    """
    if not path:
        return ImageFont.load_default(size=size)
    try:
        return ImageFont.truetype(path, size)
    except OSError as e:
        raise InvalidConfigurationError("Cannot load font {}: {}".format(path, e)) from e


def load_frame_assets(directory: str | Path) -> FrameAssets:
    """Load textFrame.png, frameTop.png and frameBottom.png from ``directory``."""
    directory = Path(directory)
    images = {}
    for name, filename in ASSET_FILES.items():
        path = directory / filename
        if not path.is_file():
            raise InvalidConfigurationError("Missing frame asset: {}".format(path))
        with Image.open(path) as image:
            images[name] = image.convert("RGBA")
    logger.info("Loaded frame assets from %s", directory)
    return FrameAssets(**images)


def generate_frame_assets(settings: DialogueSettings) -> FrameAssets:
    """Draw frame images matching the configured box geometry.

    The text frame is canvas-sized with the box drawn in place; the top
    panel is the upper half of the box and the bottom panel its mirror.
    """
    width = settings.canvas_width - LEFT_MARGIN - RIGHT_MARGIN
    half = BOX_HEIGHT // 2

    text_frame = Image.new("RGBA", (settings.canvas_width, settings.canvas_height), (0, 0, 0, 0))
    ImageDraw.Draw(text_frame).rounded_rectangle(
        [LEFT_MARGIN, settings.box_top, LEFT_MARGIN + width - 1, settings.box_top + BOX_HEIGHT - 1],
        radius=_FRAME_CORNER_RADIUS,
        fill=BOX_FILL_COLOR,
        outline=FRAME_CYAN,
        width=FRAME_BORDER_WIDTH,
    )

    # Draw a full box twice the panel height and keep the top half so the
    # panel's open edge has no border.
    full = Image.new("RGBA", (width, half * 2), (0, 0, 0, 0))
    ImageDraw.Draw(full).rounded_rectangle(
        [0, 0, width - 1, half * 2 - 1],
        radius=_FRAME_CORNER_RADIUS,
        fill=BOX_FILL_COLOR,
        outline=FRAME_CYAN,
        width=FRAME_BORDER_WIDTH,
    )
    frame_top = full.crop((0, 0, width, half))
    frame_bottom = ImageOps.flip(frame_top)
    return FrameAssets(text_frame=text_frame, frame_top=frame_top, frame_bottom=frame_bottom)


def resolve_frame_assets(settings: DialogueSettings) -> FrameAssets:
    if settings.assets_dir:
        return load_frame_assets(settings.assets_dir)
    return generate_frame_assets(settings)


def build_session(
    model: PassageModel,
    settings: DialogueSettings,
    clock=None,
    font: Optional[FontType] = None,
    assets: Optional[FrameAssets] = None,
    cache: Optional[GlyphWidthCache] = None,
    on_dialogue_end: Optional[Callable[[], None]] = None,
) -> DialogueSession:
    """Build a DialogueSession with a raster measurer and asset-sized animator.

    Args:
        model: Passages to play.
        settings: Validated settings (see config.load_settings()).
        clock: AudioClock or ManualClock; when omitted, an unstarted
               AudioClock using settings.audio_skip_ms (call
               session.clock.start() when playback begins).
        font: Pre-loaded font; loaded from settings when omitted.
        assets: Frame images; resolved from settings when omitted.
        cache: Shared glyph cache, e.g. to reuse widths across sessions.
        on_dialogue_end: Called once when the dialogue finishes.
    """
    if clock is None:
        clock = AudioClock.from_settings(settings)
    if font is None:
        font = load_font(settings.font_path, settings.font_size)
    if assets is None:
        assets = resolve_frame_assets(settings)
    measurer = RasterGlyphMeasurer(
        font=font,
        font_size=settings.font_size,
        letter_spacing=settings.letter_spacing,
        space_width=settings.space_width,
        cache=cache,
    )
    animator = OpenCloseAnimator.from_settings(settings, panel_size=assets.panel_size)
    return DialogueSession(
        model=model,
        measurer=measurer,
        settings=settings,
        clock=clock,
        animator=animator,
        on_dialogue_end=on_dialogue_end,
    )
