"""Audio time sources for the dialogue session.

WHY: Passage changes are locked to the voice track, so the session needs
"how far into the audio are we" every frame. In a live player that comes
from the wall clock since playback began; when rendering frames offline
it comes from the frame number.

HOW: Both clocks expose ``started`` and ``elapsed_audio_ms()``. AudioClock
anchors a monotonic wall clock at start() and adds the offset the audio
file was started from. ManualClock is set explicitly.

RULES:
- elapsed_audio_ms() is in audio time: 0 is the start of the audio file
- AudioClock.elapsed_audio_ms() before start() raises RuntimeError
- The session shows nothing while ``started`` is False
- AudioClock.from_settings() takes the skip offset from audio_skip_ms
- Reads never block
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from dialogue_box.config import DialogueSettings


class AudioClock:
    """Wall-clock time since playback started, shifted by the skip offset.

    Args:
        audio_skip_ms: Position in the audio file playback starts from.
        time_source: Seconds-returning monotonic clock (injectable for tests).
    """

    def __init__(
        self,
        audio_skip_ms: int = 0,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        self.audio_skip_ms = audio_skip_ms
        self._time_source = time_source
        self._start_s: Optional[float] = None

    @classmethod
    def from_settings(
        cls,
        settings: "DialogueSettings",
        time_source: Callable[[], float] = time.monotonic,
    ) -> "AudioClock":
        return cls(audio_skip_ms=settings.audio_skip_ms, time_source=time_source)

    @property
    def started(self) -> bool:
        return self._start_s is not None

    def start(self) -> None:
        self._start_s = self._time_source()

    def elapsed_audio_ms(self) -> int:
        if self._start_s is None:
            raise RuntimeError("AudioClock.start() must be called before reading the clock")
        elapsed_ms = (self._time_source() - self._start_s) * 1000.0
        return int(elapsed_ms) + self.audio_skip_ms


class ManualClock:
    """A clock that reads whatever it was last set to."""

    started = True

    def __init__(self, elapsed_ms: int = 0) -> None:
        self._elapsed_ms = elapsed_ms

    def set(self, elapsed_ms: int) -> None:
        self._elapsed_ms = elapsed_ms

    def advance(self, delta_ms: int) -> None:
        self._elapsed_ms += delta_ms

    def elapsed_audio_ms(self) -> int:
        return self._elapsed_ms
