"""Exception hierarchy for the dialogue box.

WHY: Callers (CLI, tests, an embedding game loop) need to tell a bad
passage file or bad settings apart from a programming error such as
reading a passage index that does not exist.

HOW: One base class plus two specific errors. Each also subclasses the
closest built-in exception so generic ``except ValueError`` /
``except IndexError`` handlers keep working.

RULES:
- InvalidConfigurationError: empty passage list, bad settings, bad files
- PassageIndexError: passage lookup outside [0, passage_count)
- Per-frame operations never raise under valid input
"""

from __future__ import annotations


class DialogueError(Exception):
    """Base class for every error raised by the dialogue box package."""


class InvalidConfigurationError(DialogueError, ValueError):
    """Raised when the dialogue cannot be built from the given input.

    Covers an empty passage list, malformed passage files, missing font
    or asset files, and out-of-range settings.
    """


class PassageIndexError(DialogueError, IndexError):
    """Raised when a passage index falls outside the passage list.

    The typewriter state machine never produces such an index on its own,
    so seeing this means a caller indexed the model directly with a bad
    value.
    """

    def __init__(self, index: int, count: int) -> None:
        self.index = index
        self.count = count
        super().__init__(
            "Passage index {} out of range for {} passage(s)".format(index, count)
        )
