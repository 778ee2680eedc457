"""Dialogue session: one owned object that ties the core together per frame.

WHY: The dialogue needs a passage list, a typewriter, a glyph cache, an
animator, and a clock, all advanced together once per rendered frame.
Holding them in one session object that is passed to the render call
replaces the free-floating globals a sketch would use.

HOW: ``update()`` reads the audio clock once and, in order:
  1. works out the opening (or closing) animation ratio,
  2. keeps everything hidden until the first passage starts,
  3. reveals characters at the configured rate since the passage began,
  4. lays out the revealed text and the speaker name,
  5. advances the passage when the audio passes the next start time, and
     signals the end of the dialogue when the last passage's speech ends.
The result is an immutable DialogueFrame for the scene to draw.

RULES:
- Nothing is shown or advanced until the clock has started
- Character reveal is paced by reveal_rate_cps, never by frame count
- Passage switching is driven only by audio timestamps
- The last passage never advances on time (next start is infinity); the
  end-of-dialogue signal fires once its end time passes
- After the dialogue ends the close animation plays, then nothing is shown
- No operation blocks; glyph measurement may be slow on a cold cache
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from dialogue_box.config import (
    INDICATOR_BOTTOM_OFFSET,
    INDICATOR_MAX_ALPHA,
    INDICATOR_MIN_ALPHA,
    INDICATOR_PULSE_DIVISOR_MS,
    INDICATOR_RIGHT_OFFSET,
    SPEAKER_LEFT_PADDING,
    SPEAKER_TOP_PADDING,
    DialogueSettings,
)
from dialogue_box.core.animation import (
    MAX_OPEN_RATIO,
    FrameGeometry,
    OpenCloseAnimator,
    close_ratio_at,
    map_range,
    open_ratio_at,
)
from dialogue_box.core.glyphs import GlyphMeasurer
from dialogue_box.core.passages import PassageModel
from dialogue_box.core.typewriter import (
    LayoutGlyph,
    TextBox,
    TypewriterEngine,
    VisibleLayout,
    layout_label,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DialogueFrame:
    """Everything the scene needs to draw one frame of the dialogue box.

    Attributes:
        elapsed_audio_ms: Audio time this frame was computed for.
        passage_index: Active passage.
        visible: True when the text frame and text should be drawn.
        animation: Open/close geometry, or None when not animating.
        layout: Revealed passage text, or None when not visible.
        speaker: Laid-out speaker name glyphs (empty when not visible).
        indicator_alpha: Alpha for the "more text" triangle, in [25, 100].
        indicator_center: Canvas position of the triangle's centre.
    """

    elapsed_audio_ms: int
    passage_index: int
    visible: bool
    animation: Optional[FrameGeometry] = None
    layout: Optional[VisibleLayout] = None
    speaker: Tuple[LayoutGlyph, ...] = ()
    indicator_alpha: float = INDICATOR_MAX_ALPHA
    indicator_center: Tuple[float, float] = (0.0, 0.0)

    @property
    def show_indicator(self) -> bool:
        return self.layout is not None and self.layout.more_text


class DialogueSession:
    """Owns the passage model, typewriter, glyph cache and animator.

    Args:
        model: The passages to play.
        measurer: Glyph width source (holds the glyph cache).
        settings: Validated runtime settings.
        clock: Audio time source with ``started`` and ``elapsed_audio_ms()``.
        animator: Open/close animator; built from settings when omitted.
        text_box: Text placement; built from settings and the font height
                  when omitted.
        on_dialogue_end: Called once when the dialogue finishes.
    """

    def __init__(
        self,
        model: PassageModel,
        measurer: GlyphMeasurer,
        settings: DialogueSettings,
        clock,
        animator: Optional[OpenCloseAnimator] = None,
        text_box: Optional[TextBox] = None,
        on_dialogue_end: Optional[Callable[[], None]] = None,
    ) -> None:
        self.model = model
        self.measurer = measurer
        self.settings = settings
        self.clock = clock
        self.animator = animator or OpenCloseAnimator.from_settings(settings)
        self.text_box = text_box or TextBox.from_settings(settings, measurer.text_height)
        self.engine = TypewriterEngine(model, measurer, self.text_box, on_dialogue_end=on_dialogue_end)

        self._reveal_anchor_ms: Optional[int] = None
        self._revealed = 0
        self._close_start_ms: Optional[int] = None
        self._last_elapsed_ms = 0

    # -- operations exposed to the surrounding application -----------------

    def advance_char(self) -> None:
        self.engine.advance_char()

    def advance_passage(self) -> bool:
        advanced = self.engine.advance_passage()
        if advanced:
            self._reveal_anchor_ms = self._last_elapsed_ms
            self._revealed = 0
        return advanced

    def compute_visible_layout(self) -> VisibleLayout:
        return self.engine.compute_visible_layout()

    def open_animation_geometry(self, open_ratio: float) -> FrameGeometry:
        return self.animator.geometry(open_ratio)

    def is_passage_complete(self) -> bool:
        return self.engine.is_passage_complete()

    def is_dialogue_complete(self) -> bool:
        return self.engine.is_dialogue_complete()

    @property
    def passage_index(self) -> int:
        return self.engine.passage_index

    @property
    def char_index(self) -> int:
        return self.engine.char_index

    def speech_ended(self, elapsed_audio_ms: Optional[int] = None) -> bool:
        """True once the audio has passed the current passage's end time."""
        if elapsed_audio_ms is None:
            elapsed_audio_ms = self._last_elapsed_ms
        return elapsed_audio_ms >= self.model.end_time(self.engine.passage_index)

    def prewarm(self) -> int:
        """Measure every character the dialogue will ever show."""
        return self.measurer.prewarm(self.model.alphabet() + self.settings.speaker_name)

    # -- per-frame driver ---------------------------------------------------

    def update(self) -> DialogueFrame:
        if not self.clock.started:
            return DialogueFrame(
                elapsed_audio_ms=0,
                passage_index=self.engine.passage_index,
                visible=False,
            )

        elapsed = self.clock.elapsed_audio_ms()
        self._last_elapsed_ms = elapsed
        duration = self.settings.open_animation_ms

        if self.engine.dialogue_ended:
            return self._closing_frame(elapsed, duration)

        opening = None
        ratio = open_ratio_at(elapsed, self.model.first_start_time, duration)
        if ratio is not None and ratio < MAX_OPEN_RATIO:
            opening = self.animator.geometry(ratio)

        if self.engine.passage_index == 0 and elapsed < self.model.first_start_time:
            return DialogueFrame(
                elapsed_audio_ms=elapsed,
                passage_index=0,
                visible=False,
                animation=opening,
            )

        self._reveal(elapsed)
        frame = DialogueFrame(
            elapsed_audio_ms=elapsed,
            passage_index=self.engine.passage_index,
            visible=True,
            animation=opening,
            layout=self.engine.compute_visible_layout(),
            speaker=self._speaker_layout(),
            indicator_alpha=self._indicator_alpha(elapsed),
            indicator_center=(
                self.settings.canvas_width - INDICATOR_RIGHT_OFFSET,
                self.settings.canvas_height - INDICATOR_BOTTOM_OFFSET,
            ),
        )

        if elapsed > self.model.next_start_time(self.engine.passage_index):
            self.advance_passage()
        elif self.engine.is_last_passage() and self.speech_ended(elapsed):
            self.engine.advance_passage()
        return frame

    def _reveal(self, elapsed: int) -> None:
        if self._reveal_anchor_ms is None:
            self._reveal_anchor_ms = elapsed
        target = int((elapsed - self._reveal_anchor_ms) * self.settings.reveal_rate_cps / 1000.0)
        owed = target - self._revealed
        if owed <= 0:
            return
        for _ in range(min(owed, len(self.engine.passage.text))):
            self.engine.advance_char()
        self._revealed = target

    def _closing_frame(self, elapsed: int, duration: int) -> DialogueFrame:
        if self._close_start_ms is None:
            self._close_start_ms = elapsed
            logger.debug("Closing dialogue box at %d ms", elapsed)
        ratio = close_ratio_at(elapsed - self._close_start_ms, duration)
        return DialogueFrame(
            elapsed_audio_ms=elapsed,
            passage_index=self.engine.passage_index,
            visible=False,
            animation=self.animator.geometry(ratio) if ratio is not None else None,
        )

    def _speaker_layout(self) -> Tuple[LayoutGlyph, ...]:
        return layout_label(
            self.measurer,
            self.settings.speaker_name,
            self.text_box.left + SPEAKER_LEFT_PADDING,
            self.text_box.top + SPEAKER_TOP_PADDING,
        )

    def _indicator_alpha(self, elapsed: int) -> float:
        return map_range(
            math.sin(elapsed / INDICATOR_PULSE_DIVISOR_MS),
            -1, 1,
            INDICATOR_MIN_ALPHA, INDICATOR_MAX_ALPHA,
        )
