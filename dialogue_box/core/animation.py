"""Open/close animation geometry for the dialogue frame.

WHY: The box does not pop in. A white line grows outward from the centre,
then the top and bottom halves of the frame unfold vertically from that
line, fading in and flashing white just before they settle. Every part of
that is a pure function of one "open ratio", which keeps the animation
independent of frame rate and wall-clock units.

HOW: OpenCloseAnimator.geometry(open_ratio) returns a FrameGeometry with
the centreline, the two panel rectangles, the panel opacity, and the
optional flash rectangle. open_ratio_at() and close_ratio_at() turn an
elapsed-audio time into a ratio for the 400 ms window before the first
passage starts (and the same window after the dialogue ends).

RULES:
- open_ratio is clamped to [0.01, 100]; 0.01 is closed, 100 is open
- [0.01, 30]: centreline half-length = map(r, 0.01, 30, 0, 50)% of the
  box width; no panels
- (30, 100]: panel height = map(r, 30, 100, 0.01, 100)% of the panel
  image height, growing up and down from the box's vertical centre
- opacity = clamp(r, 5, 30) below 80, then 100
- flash rectangle only for 80 <= r <= 99, using the FLASH_* constants
- The centreline is drawn only for 0.1 < r < 32
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from dialogue_box.config import BOX_HEIGHT, LEFT_MARGIN, RIGHT_MARGIN, DialogueSettings

MIN_OPEN_RATIO = 0.01
MAX_OPEN_RATIO = 100.0

LINE_PHASE_END = 30.0
CENTERLINE_MIN_RATIO = 0.1
CENTERLINE_MAX_RATIO = 32.0
MIN_OPACITY = 5.0
MAX_RAMP_OPACITY = 30.0
FULL_OPACITY_RATIO = 80.0
FLASH_START_RATIO = 80.0
FLASH_END_RATIO = 99.0

# Flash rectangle offsets, tuned by eye against the frame art. The 6 px
# height correction has no derivation; changing it shifts the flash.
FLASH_LEFT_PADDING = 4
FLASH_BORDER_WIDTH = 5
FLASH_HEIGHT_CORRECTION = 6
FLASH_CORNER_RADIUS = 8


def map_range(
    value: float,
    in_low: float,
    in_high: float,
    out_low: float,
    out_high: float,
    clamp: bool = False,
) -> float:
    """Linearly re-map ``value`` from one range to another.

    With ``clamp`` the result is held within the output range, whichever
    way round its bounds are given.
    """
    result = out_low + (value - in_low) * (out_high - out_low) / (in_high - in_low)
    if clamp:
        low, high = min(out_low, out_high), max(out_low, out_high)
        result = constrain(result, low, high)
    return result


def constrain(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Centerline:
    """Horizontal line centred on (center_x, y) spanning +/- half_length."""

    center_x: float
    y: float
    half_length: float
    visible: bool

    @property
    def start(self) -> tuple:
        return self.center_x - self.half_length, self.y

    @property
    def end(self) -> tuple:
        return self.center_x + self.half_length, self.y


@dataclass(frozen=True)
class FrameGeometry:
    """Everything the renderer needs to draw one step of the animation.

    Attributes:
        open_ratio: The clamped ratio this geometry was computed for.
        centerline: The growing white line (first phase).
        top_panel: Rectangle for the top frame half, or None before it shows.
        bottom_panel: Rectangle for the bottom frame half, or None.
        opacity: Panel tint alpha in [0, 100].
        flash: White flash rectangle, or None outside [80, 99].
    """

    open_ratio: float
    centerline: Centerline
    top_panel: Optional[Rect]
    bottom_panel: Optional[Rect]
    opacity: float
    flash: Optional[Rect]

    @property
    def panel_height(self) -> float:
        return self.top_panel.height if self.top_panel is not None else 0.0


class OpenCloseAnimator:
    """Computes frame geometry from an open ratio; holds no state.

    Args:
        canvas_width: Canvas width in pixels.
        center_y: Vertical centre of the dialogue box.
        panel_width: Width of the frame panel images.
        panel_height: Full height of one frame panel image.
        left_margin: x of the panels' left edge.
    """

    def __init__(
        self,
        canvas_width: float,
        center_y: float,
        panel_width: float,
        panel_height: float,
        left_margin: float = LEFT_MARGIN,
    ) -> None:
        self.canvas_width = canvas_width
        self.center_y = center_y
        self.panel_width = panel_width
        self.panel_height = panel_height
        self.left_margin = left_margin

    @classmethod
    def from_settings(
        cls,
        settings: DialogueSettings,
        panel_size: Optional[Tuple[int, int]] = None,
    ) -> "OpenCloseAnimator":
        """Build an animator for the configured canvas.

        ``panel_size`` is the (width, height) of the frame panel images;
        without it the panels span the box width and half its height.
        """
        if panel_size is None:
            panel_size = (settings.canvas_width - LEFT_MARGIN - RIGHT_MARGIN, BOX_HEIGHT // 2)
        return cls(
            canvas_width=settings.canvas_width,
            center_y=settings.box_center_y,
            panel_width=panel_size[0],
            panel_height=panel_size[1],
        )

    def geometry(self, open_ratio: float) -> FrameGeometry:
        ratio = constrain(open_ratio, MIN_OPEN_RATIO, MAX_OPEN_RATIO)

        sigma = map_range(ratio, MIN_OPEN_RATIO, LINE_PHASE_END, 0, 50, clamp=True)
        half_length = (sigma / 100) * (self.canvas_width - 2 * self.left_margin)
        centerline = Centerline(
            center_x=self.canvas_width / 2,
            y=self.center_y,
            half_length=half_length,
            visible=CENTERLINE_MIN_RATIO < ratio < CENTERLINE_MAX_RATIO,
        )

        if ratio >= FULL_OPACITY_RATIO:
            opacity = 100.0
        else:
            opacity = constrain(ratio, MIN_OPACITY, MAX_RAMP_OPACITY)

        if ratio <= LINE_PHASE_END:
            return FrameGeometry(
                open_ratio=ratio,
                centerline=centerline,
                top_panel=None,
                bottom_panel=None,
                opacity=opacity,
                flash=None,
            )

        panel_ratio = map_range(ratio, LINE_PHASE_END, MAX_OPEN_RATIO, MIN_OPEN_RATIO, 100, clamp=True)
        h = self.panel_height * panel_ratio / 100.0
        w = self.panel_width
        top_panel = Rect(self.left_margin, self.center_y - h, w, h)
        bottom_panel = Rect(self.left_margin, self.center_y, w, h)

        flash = None
        if FLASH_START_RATIO <= ratio <= FLASH_END_RATIO:
            flash = Rect(
                x=self.left_margin + FLASH_LEFT_PADDING,
                y=self.center_y - h + FLASH_BORDER_WIDTH,
                width=w - FLASH_LEFT_PADDING * 2,
                height=(h - FLASH_HEIGHT_CORRECTION) * 2 - 2 * FLASH_BORDER_WIDTH,
            )

        return FrameGeometry(
            open_ratio=ratio,
            centerline=centerline,
            top_panel=top_panel,
            bottom_panel=bottom_panel,
            opacity=opacity,
            flash=flash,
        )


def open_ratio_at(elapsed_audio_ms: float, first_start_ms: float, duration_ms: float) -> Optional[float]:
    """Open ratio for the window ending when the first passage starts.

    Returns:
        None before the window, a ratio in [0.01, 100] inside it, and 100
        once the window has passed.
    """
    start = first_start_ms - duration_ms
    if elapsed_audio_ms <= start:
        return None
    if elapsed_audio_ms >= first_start_ms:
        return MAX_OPEN_RATIO
    return map_range(elapsed_audio_ms - start, 0, duration_ms, MIN_OPEN_RATIO, MAX_OPEN_RATIO)


def close_ratio_at(elapsed_since_close_ms: float, duration_ms: float) -> Optional[float]:
    """Open ratio while closing: the opening played backwards.

    Returns:
        A ratio falling from 100 to 0.01 over ``duration_ms``, then None
        once the box is fully closed.
    """
    if elapsed_since_close_ms >= duration_ms:
        return None
    if elapsed_since_close_ms <= 0:
        return MAX_OPEN_RATIO
    return map_range(elapsed_since_close_ms, 0, duration_ms, MAX_OPEN_RATIO, MIN_OPEN_RATIO)
