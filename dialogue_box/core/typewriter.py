"""Typewriter state machine and greedy word-wrap layout.

WHY: Dialogue text appears one character at a time, wraps at word
boundaries without a word ever jumping lines mid-reveal, and moves on to
the next passage when the voice track gets there. This module owns the
only mutable state of the dialogue core: which passage is showing and how
many of its characters are revealed.

HOW: TypewriterEngine holds (passage_index, char_index) and exposes the
two transitions advance_char() and advance_passage(). Layout is recomputed
from scratch on every call: walk the revealed prefix, place each character
at a cursor, and at each space look ahead to the end of the next word (in
the full passage text, revealed or not) to decide whether to wrap first.

RULES:
- char_index stays within [0, len(text) - 1]; advancing past it is a no-op
- passage_index stays within [0, passage_count - 1]; advancing past the
  last passage is a no-op that fires the end-of-dialogue signal once
- advance_passage() resets char_index to 0 only when it actually advances
- Wrapping is decided only at spaces: if cursor.x + width(next word) +
  width(" ") exceeds the right boundary, move to a new line first
- With no later space, the next word runs to the end of the text
- Spaces are positioned but not drawn (the font's space glyph is broken)
- The "more text" indicator is on iff char_index == len(text) - 1
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from dialogue_box.config import (
    LEFT_MARGIN,
    LINE_EXTRA_SPACING,
    RIGHT_MARGIN,
    TEXT_LEFT_PADDING,
    TEXT_TOP_PADDING,
    DialogueSettings,
)
from dialogue_box.core.glyphs import SPACE, GlyphMeasurer
from dialogue_box.core.passages import Passage, PassageModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextBox:
    """Where passage text may be placed.

    Attributes:
        left: x of the first character on every line.
        top: Baseline y of the first line.
        right: Wrap boundary; a word that would cross it starts a new line.
        line_height: Distance between consecutive baselines.
    """

    left: float
    top: float
    right: float
    line_height: float

    @classmethod
    def from_settings(cls, settings: DialogueSettings, text_height: float) -> "TextBox":
        left = LEFT_MARGIN + TEXT_LEFT_PADDING
        right_margin = RIGHT_MARGIN + TEXT_LEFT_PADDING
        return cls(
            left=left,
            top=settings.box_top + TEXT_TOP_PADDING,
            right=settings.canvas_width - right_margin,
            line_height=text_height + LINE_EXTRA_SPACING,
        )


@dataclass(frozen=True)
class LayoutGlyph:
    """One positioned character of laid-out text."""

    char: str
    index: int
    x: float
    y: float
    highlighted: bool = False

    @property
    def drawn(self) -> bool:
        return self.char != SPACE


@dataclass(frozen=True)
class VisibleLayout:
    """The revealed part of the active passage, ready to draw.

    Attributes:
        passage_index: Which passage this layout belongs to.
        char_index: How many characters are revealed.
        glyphs: Every revealed character in text order, spaces included.
        more_text: True when the passage is fully revealed and the
                   "more text" indicator should show.
    """

    passage_index: int
    char_index: int
    glyphs: Tuple[LayoutGlyph, ...]
    more_text: bool

    @property
    def drawn_glyphs(self) -> Tuple[LayoutGlyph, ...]:
        return tuple(g for g in self.glyphs if g.drawn)

    def lines(self) -> List[Tuple[LayoutGlyph, ...]]:
        """Group glyphs into lines by baseline, top to bottom."""
        lines: List[List[LayoutGlyph]] = []
        for glyph in self.glyphs:
            if not lines or lines[-1][-1].y != glyph.y:
                lines.append([])
            lines[-1].append(glyph)
        return [tuple(line) for line in lines]


def layout_label(measurer: GlyphMeasurer, label: str, x: float, y: float) -> Tuple[LayoutGlyph, ...]:
    """Lay out a single-line label (the speaker name) with no wrapping."""
    glyphs = []
    for index, char in enumerate(label):
        glyphs.append(LayoutGlyph(char=char, index=index, x=x, y=y))
        x += measurer.word_width(char)
    return tuple(glyphs)


def _next_word(text: str, space_index: int) -> str:
    """Return the word following the space at ``space_index``."""
    next_space = text.find(SPACE, space_index + 1)
    if next_space == -1:
        return text[space_index + 1:]
    return text[space_index + 1:next_space]


class TypewriterEngine:
    """Reveals passages character by character and lays out the result.

    WHY: The session drives time; this class only knows how to step the
    reveal forward and where the revealed characters go.

    HOW: See module docstring. ``on_dialogue_end`` is called once, the
    first time advance_passage() is asked to move past the last passage.
    """

    def __init__(
        self,
        model: PassageModel,
        measurer: GlyphMeasurer,
        text_box: TextBox,
        on_dialogue_end: Optional[Callable[[], None]] = None,
    ) -> None:
        self.model = model
        self.measurer = measurer
        self.text_box = text_box
        self.on_dialogue_end = on_dialogue_end
        self._passage_index = 0
        self._char_index = 0
        self._dialogue_ended = False

    @property
    def passage_index(self) -> int:
        return self._passage_index

    @property
    def char_index(self) -> int:
        return self._char_index

    @property
    def passage(self) -> Passage:
        return self.model.passage(self._passage_index)

    @property
    def dialogue_ended(self) -> bool:
        """True once the end-of-dialogue signal has fired."""
        return self._dialogue_ended

    def is_last_passage(self) -> bool:
        return self._passage_index == self.model.passage_count() - 1

    def is_passage_complete(self) -> bool:
        return self._char_index == self.passage.last_index

    def is_dialogue_complete(self) -> bool:
        return self.is_last_passage() and self.is_passage_complete()

    def advance_char(self) -> None:
        if self._char_index < self.passage.last_index:
            self._char_index += 1

    def advance_passage(self) -> bool:
        """Move to the next passage.

        Returns:
            True if the passage changed, False at the terminal passage.
        """
        if self.is_last_passage():
            if not self._dialogue_ended:
                self._dialogue_ended = True
                logger.info("Dialogue finished after %d passage(s)", self.model.passage_count())
                if self.on_dialogue_end is not None:
                    self.on_dialogue_end()
            return False
        self._passage_index += 1
        self._char_index = 0
        logger.info("Advanced to passage %d", self._passage_index)
        return True

    def compute_visible_layout(self) -> VisibleLayout:
        passage = self.passage
        text = passage.text
        box = self.text_box
        word_width = self.measurer.word_width
        space_width = word_width(SPACE)

        x, y = box.left, box.top
        glyphs = []
        for i in range(self._char_index):
            char = text[i]
            glyphs.append(LayoutGlyph(
                char=char,
                index=i,
                x=x,
                y=y,
                highlighted=passage.is_highlighted(i),
            ))
            x += word_width(char)

            if char == SPACE:
                if x + word_width(_next_word(text, i)) + space_width > box.right:
                    x = box.left
                    y += box.line_height

        return VisibleLayout(
            passage_index=self._passage_index,
            char_index=self._char_index,
            glyphs=tuple(glyphs),
            more_text=self.is_passage_complete(),
        )
