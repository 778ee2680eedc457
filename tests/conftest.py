"""Shared test fixtures for the dialogue_box test suite.

WHY: Layout, session and scene tests all need passages with known text
and timing plus a glyph measurer whose widths are predictable, so the
expected coordinates can be worked out by hand.

HOW: FixedWidthMeasurer gives every non-space glyph the same width and
records which characters it was asked to measure. Fixtures build a
three-passage model with audio timestamps and validated settings.

RULES:
- Fixture passages start at 15000, 18000 and 21000 ms; the last ends at 24000
- Settings are built with explicit values so .env overrides cannot leak in
"""

from typing import List

import pytest

from dialogue_box.config import load_settings
from dialogue_box.core.clock import ManualClock
from dialogue_box.core.glyphs import GlyphMeasurer
from dialogue_box.core.passages import HighlightSpan, Passage, PassageModel
from dialogue_box.core.typewriter import TextBox, TypewriterEngine


class FixedWidthMeasurer(GlyphMeasurer):
    """Every non-space glyph is ``char_width`` pixels wide."""

    def __init__(
        self,
        char_width: int = 10,
        letter_spacing: float = 0.0,
        space_width: float = 10.0,
        text_height: int = 20,
    ) -> None:
        super().__init__(letter_spacing=letter_spacing, space_width=space_width)
        self.char_width = char_width
        self._text_height = text_height
        self.calls: List[str] = []

    def _measure_uncached(self, char: str) -> int:
        self.calls.append(char)
        return self.char_width

    @property
    def text_height(self) -> int:
        return self._text_height


SAMPLE_PASSAGES = [
    Passage(
        text="Hello there.",
        highlights=(HighlightSpan(start=7, end=12),),
        start_ms=15000,
    ),
    Passage(
        text="General Kenobi.",
        highlights=(),
        start_ms=18000,
    ),
    Passage(
        text="You are a bold one.",
        highlights=(HighlightSpan(start=11, end=15),),
        start_ms=21000,
        end_ms=24000,
    ),
]


@pytest.fixture
def measurer():
    return FixedWidthMeasurer()


@pytest.fixture
def sample_model():
    return PassageModel(SAMPLE_PASSAGES)


@pytest.fixture
def settings():
    return load_settings(
        canvas_width=1280,
        canvas_height=720,
        font_path="",
        font_size=24,
        letter_spacing=1.25,
        audio_skip_ms=12000,
        open_animation_ms=400,
        reveal_rate_cps=30.0,
        speaker_name="ADAM",
        assets_dir="",
    )


@pytest.fixture
def wide_box():
    return TextBox(left=0, top=0, right=1000, line_height=20)


@pytest.fixture
def make_engine(measurer, wide_box):
    """Factory: engine over the given passage texts (or Passage objects)."""

    def _make(*passages, text_box=None, on_dialogue_end=None):
        items = [
            p if isinstance(p, Passage) else Passage(text=p, start_ms=i * 1000)
            for i, p in enumerate(passages)
        ]
        return TypewriterEngine(
            PassageModel(items),
            measurer,
            text_box or wide_box,
            on_dialogue_end=on_dialogue_end,
        )

    return _make


@pytest.fixture
def clock():
    return ManualClock()
