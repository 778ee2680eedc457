"""Passage data model: highlight spans, passages, and the ordered passage list.

WHY: Each passage of dialogue carries its text, the words to emphasise,
and the audio timestamps at which it starts and stops being spoken. The
typewriter engine and the session read these; nothing writes them after
load.

HOW: Three frozen dataclasses. ``HighlightSpan`` carries its own index
convention so the off-by-one question lives in one documented place.
``PassageModel`` owns the ordered passages and answers the timing
questions the session asks every frame.

RULES:
- Passages and spans are immutable after construction
- A PassageModel has at least one passage (InvalidConfigurationError)
- passage(i) raises PassageIndexError outside [0, passage_count)
- next_start_time(i) on the last passage is math.inf ("never advance")
- HighlightSpan.one_based=True reproduces the authored passages.json data,
  whose bounds are shifted by one: characters start-1 .. end-2 highlight
- HighlightSpan.one_based=False treats bounds as 0-based half-open
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from dialogue_box.core.errors import InvalidConfigurationError, PassageIndexError


@dataclass(frozen=True)
class HighlightSpan:
    """A range of character indices in a passage to draw in the highlight colour.

    Attributes:
        start: First bound as stored in the passage data.
        end: Second bound as stored in the passage data (exclusive).
        one_based: When True, both bounds are shifted down by one before
                   use, matching the authored passages.json data. When
                   False, the bounds are a plain 0-based half-open range.
    """

    start: int
    end: int
    one_based: bool = True

    @property
    def first_index(self) -> int:
        """0-based index of the first highlighted character."""
        return self.start - 1 if self.one_based else self.start

    @property
    def stop_index(self) -> int:
        """0-based index one past the last highlighted character."""
        return self.end - 1 if self.one_based else self.end

    def contains(self, index: int) -> bool:
        return self.first_index <= index < self.stop_index


@dataclass(frozen=True)
class Passage:
    """One block of dialogue text with its highlight spans and audio timing.

    Attributes:
        text: The passage text, revealed one character at a time.
        highlights: Spans of emphasised characters; may overlap.
        start_ms: Audio timestamp at which the passage starts being spoken.
        end_ms: Audio timestamp at which the speech ends, or None when the
                source data does not say (see PassageModel.end_time).
    """

    text: str
    highlights: Tuple[HighlightSpan, ...] = field(default_factory=tuple)
    start_ms: int = 0
    end_ms: Optional[int] = None

    def is_highlighted(self, index: int) -> bool:
        return any(span.contains(index) for span in self.highlights)

    @property
    def last_index(self) -> int:
        """Index of the last character; the typewriter never goes past it."""
        return max(len(self.text) - 1, 0)


class PassageModel:
    """The ordered, fixed list of passages for one dialogue.

    WHY: The session needs to know which passage comes next and when; the
    typewriter needs the active passage's text and spans. Keeping both
    behind one small read-only interface means neither touches a raw list.

    HOW: Stores the passages as a tuple. Timing queries are index based;
    the cursor itself lives in the TypewriterEngine.

    RULES:
    - Construction with zero passages raises InvalidConfigurationError
    - A passage with empty text raises InvalidConfigurationError
    - passage(i) raises PassageIndexError for i outside [0, count)
    - next_start_time(i) is the start of passage i+1, or math.inf
    - end_time(i) is passage i's end_ms, falling back to next_start_time(i)
    """

    def __init__(self, passages: Sequence[Passage]) -> None:
        if not passages:
            raise InvalidConfigurationError(
                "A dialogue needs at least one passage; got an empty passage list."
            )
        for position, passage in enumerate(passages):
            if not passage.text:
                raise InvalidConfigurationError(
                    "Passage {} has empty text; every passage needs at least one character.".format(position)
                )
        self._passages: Tuple[Passage, ...] = tuple(passages)

    def __len__(self) -> int:
        return len(self._passages)

    def __iter__(self):
        return iter(self._passages)

    def passage_count(self) -> int:
        return len(self._passages)

    def passage(self, index: int) -> Passage:
        if not 0 <= index < len(self._passages):
            raise PassageIndexError(index, len(self._passages))
        return self._passages[index]

    def next_start_time(self, index: int) -> float:
        """Return the start time of the passage after ``index``.

        The last passage has no successor, so the answer is positive
        infinity: no finite elapsed time ever compares greater.
        """
        self.passage(index)
        if index < len(self._passages) - 1:
            return self._passages[index + 1].start_ms
        return math.inf

    def end_time(self, index: int) -> float:
        end_ms = self.passage(index).end_ms
        if end_ms is not None:
            return end_ms
        return self.next_start_time(index)

    @property
    def first_start_time(self) -> int:
        return self._passages[0].start_ms

    def alphabet(self) -> str:
        """Every distinct character across all passages, in first-seen order."""
        seen: dict = {}
        for passage in self._passages:
            for char in passage.text:
                seen.setdefault(char, None)
        return "".join(seen)
