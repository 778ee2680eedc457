"""Configuration constants, palette, dialogue box geometry, and .env loading.

WHY: The dialogue box is tuned with dozens of pixel offsets, timing values,
and colours that came out of matching a reference screenshot by eye. They
belong in one place where they are easy to find and override, not buried
inside the layout and animation code.

HOW: python-dotenv loads the .env file on import. Values that a user may
reasonably want to change (font, reveal rate, audio offset) read an
environment variable with a default. ``load_settings()`` bundles the
runtime values into a frozen ``DialogueSettings`` so the core receives its
configuration explicitly instead of reading module globals.

RULES:
- Geometry constants are in canvas pixels, origin at the top-left
- Times are integer milliseconds of audio unless the name says otherwise
- Colours are RGB(A) tuples converted from HSB values
- FONT_SIZE must be a positive even integer
- Range checks on these values happen in load_settings()
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from dialogue_box.core.errors import InvalidConfigurationError

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Canvas and font
# ---------------------------------------------------------------------------

CANVAS_WIDTH = int(os.getenv("DIALOGUE_CANVAS_WIDTH", "1280"))
CANVAS_HEIGHT = int(os.getenv("DIALOGUE_CANVAS_HEIGHT", "720"))

FONT_PATH = os.getenv("DIALOGUE_FONT_PATH", "")
"""TrueType font file. Empty means Pillow's bundled default font."""

FONT_SIZE = int(os.getenv("DIALOGUE_FONT_SIZE", "24"))
LETTER_SPACING = float(os.getenv("DIALOGUE_LETTER_SPACING", "1.25"))

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

AUDIO_SKIP_MS = int(os.getenv("DIALOGUE_AUDIO_SKIP_MS", "12000"))
"""Offset into the voice track at which playback starts."""

OPEN_ANIMATION_MS = int(os.getenv("DIALOGUE_OPEN_ANIMATION_MS", "400"))

REVEAL_RATE_CPS = float(os.getenv("DIALOGUE_REVEAL_RATE_CPS", "30"))
"""Characters revealed per second (one every other frame at 60 fps)."""

INDICATOR_PULSE_DIVISOR_MS = 200.0
"""sin(t / divisor) drives the indicator alpha; 12 frames at 60 fps."""

# ---------------------------------------------------------------------------
# Dialogue box geometry (from the textFrame.png generation script)
# ---------------------------------------------------------------------------

LEFT_MARGIN = 80
RIGHT_MARGIN = LEFT_MARGIN
BOTTOM_MARGIN = 20
BOX_HEIGHT = 224

TEXT_TOP_PADDING = 84
TEXT_LEFT_PADDING = 40
LINE_EXTRA_SPACING = 5  # added to ascent + descent to match the game's line height

SPEAKER_NAME = os.getenv("DIALOGUE_SPEAKER_NAME", "ADAM")
SPEAKER_LEFT_PADDING = -20
SPEAKER_TOP_PADDING = -40

INDICATOR_RIGHT_OFFSET = 125
INDICATOR_BOTTOM_OFFSET = 55
INDICATOR_RADIUS = 8
INDICATOR_Y_SCALE = 0.63
INDICATOR_MIN_ALPHA = 25
INDICATOR_MAX_ALPHA = 100

ASSETS_DIR = os.getenv("DIALOGUE_ASSETS_DIR", "")
"""Directory holding textFrame.png, frameTop.png and frameBottom.png."""

# ---------------------------------------------------------------------------
# Palette, RGB converted from HSB 360/100/100
# ---------------------------------------------------------------------------

TEXT_COLOR = (196, 201, 204)        # hsb(204, 4, 80)
HIGHLIGHT_COLOR = (185, 191, 77)    # hsb(63, 60, 75)
FRAME_CYAN = (192, 234, 240)        # hsb(188, 20, 94)
FLASH_COLOR = (255, 255, 255)
CENTERLINE_COLOR = (255, 255, 255)
CENTERLINE_WEIGHT = 2
BOX_FILL_COLOR = (40, 46, 61, 230)  # hsb(223, 34, 24), slightly translucent
FRAME_BORDER_WIDTH = 2


@dataclass(frozen=True)
class DialogueSettings:
    """Runtime configuration handed to the session and its collaborators.

    Attributes:
        canvas_width: Canvas width in pixels.
        canvas_height: Canvas height in pixels.
        font_path: TrueType font path, or "" for Pillow's default font.
        font_size: Font size in pixels; positive and even.
        letter_spacing: Pixels added after every non-space character.
        audio_skip_ms: Offset into the audio at which playback starts.
        open_animation_ms: Length of the open (and close) animation.
        reveal_rate_cps: Typewriter reveal rate in characters per second.
        speaker_name: Label drawn above the passage text.
        assets_dir: Directory with frame images, or "" to generate them.
    """

    canvas_width: int = CANVAS_WIDTH
    canvas_height: int = CANVAS_HEIGHT
    font_path: str = FONT_PATH
    font_size: int = FONT_SIZE
    letter_spacing: float = LETTER_SPACING
    audio_skip_ms: int = AUDIO_SKIP_MS
    open_animation_ms: int = OPEN_ANIMATION_MS
    reveal_rate_cps: float = REVEAL_RATE_CPS
    speaker_name: str = SPEAKER_NAME
    assets_dir: str = ASSETS_DIR

    @property
    def space_width(self) -> float:
        """Fixed width of the space character (half the font size)."""
        return self.font_size / 2

    @property
    def box_top(self) -> int:
        """y-coordinate of the top edge of the dialogue box."""
        return self.canvas_height - BOX_HEIGHT - BOTTOM_MARGIN

    @property
    def box_center_y(self) -> float:
        """Vertical centre of the box; the open animation grows from here."""
        return self.canvas_height - BOX_HEIGHT / 2 - BOTTOM_MARGIN


def load_settings(**overrides: object) -> DialogueSettings:
    """Build and validate a DialogueSettings from defaults plus overrides.

    WHY: The CLI and tests override a handful of values (font, reveal rate).
    Validation happens here, once, so the core can trust its inputs.

    HOW: Overrides whose value is None are ignored, so argparse namespaces
    with unset options can be passed straight through.

    RULES:
    - font_size must be a positive even integer
    - reveal_rate_cps and open_animation_ms must be positive
    - canvas must be wider than both horizontal margins
    - Raises InvalidConfigurationError on any violation
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        settings = DialogueSettings(**values)  # type: ignore[arg-type]
    except TypeError as e:
        raise InvalidConfigurationError("Unknown setting: {}".format(e)) from e

    if settings.font_size <= 0 or settings.font_size % 2 != 0:
        raise InvalidConfigurationError(
            "Font size must be a positive even number, got {}".format(settings.font_size)
        )
    if settings.reveal_rate_cps <= 0:
        raise InvalidConfigurationError(
            "Reveal rate must be positive, got {}".format(settings.reveal_rate_cps)
        )
    if settings.open_animation_ms <= 0:
        raise InvalidConfigurationError(
            "Open animation duration must be positive, got {}".format(settings.open_animation_ms)
        )
    if settings.canvas_width <= LEFT_MARGIN + RIGHT_MARGIN:
        raise InvalidConfigurationError(
            "Canvas width {} leaves no room for the dialogue box".format(settings.canvas_width)
        )
    return settings
