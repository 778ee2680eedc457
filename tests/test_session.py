"""Tests for the per-frame dialogue session and its clocks.

WHY: The session is where audio time, reveal rate, passage switching and
the open/close animation meet. Most user-visible timing bugs (text that
appears before the voice, a passage that never advances, a box that never
closes) would show up here first.

HOW: A DialogueSession over the three fixture passages (15000, 18000,
21000 ms; last ends at 24000) is driven by a ManualClock. Each test sets
the clock and calls update(), then inspects the returned DialogueFrame.
"""

import math

import pytest

from dialogue_box.config import (
    INDICATOR_BOTTOM_OFFSET,
    INDICATOR_MAX_ALPHA,
    INDICATOR_MIN_ALPHA,
    INDICATOR_RIGHT_OFFSET,
    SPEAKER_LEFT_PADDING,
    SPEAKER_TOP_PADDING,
)
from dialogue_box.core.clock import AudioClock, ManualClock
from dialogue_box.core.session import DialogueSession


@pytest.fixture
def ended():
    return []


@pytest.fixture
def session(sample_model, measurer, settings, clock, ended):
    return DialogueSession(
        sample_model,
        measurer,
        settings,
        clock,
        on_dialogue_end=lambda: ended.append(True),
    )


def _frame_at(session, clock, elapsed_ms):
    clock.set(elapsed_ms)
    return session.update()


class TestBeforeFirstPassage:
    """Nothing but the opening animation before the first start time."""

    def test_hidden_and_not_animating_early(self, session, clock):
        frame = _frame_at(session, clock, 14000)
        assert not frame.visible
        assert frame.animation is None
        assert frame.layout is None
        assert frame.speaker == ()

    def test_opening_animation_in_window(self, session, clock):
        frame = _frame_at(session, clock, 14800)
        assert not frame.visible
        assert frame.animation is not None
        assert 0.01 < frame.animation.open_ratio < 100

    def test_visible_at_first_start(self, session, clock):
        frame = _frame_at(session, clock, 15000)
        assert frame.visible
        assert frame.animation is None
        assert frame.layout.glyphs == ()
        assert frame.passage_index == 0


class TestReveal:
    """Characters appear at reveal_rate_cps from the passage start."""

    def test_reveals_at_rate(self, session, clock):
        _frame_at(session, clock, 15000)
        frame = _frame_at(session, clock, 15100)
        # 30 characters per second for 100 ms
        assert frame.layout.char_index == 3

    def test_frame_rate_independent(self, session, clock, sample_model, measurer, settings):
        _frame_at(session, clock, 15000)
        for elapsed in range(15016, 15321, 16):
            _frame_at(session, clock, elapsed)

        other_clock = ManualClock()
        other = DialogueSession(sample_model, measurer, settings, other_clock)
        _frame_at(other, other_clock, 15000)
        _frame_at(other, other_clock, 15320)

        assert session.char_index == other.char_index == 9

    def test_reveal_stops_at_last_character(self, session, clock):
        _frame_at(session, clock, 15000)
        frame = _frame_at(session, clock, 15500)
        assert frame.layout.char_index == len("Hello there.") - 1
        assert frame.layout.more_text
        assert frame.show_indicator

    def test_indicator_hidden_while_revealing(self, session, clock):
        _frame_at(session, clock, 15000)
        frame = _frame_at(session, clock, 15100)
        assert not frame.show_indicator

    def test_highlight_reaches_layout(self, session, clock):
        _frame_at(session, clock, 15000)
        frame = _frame_at(session, clock, 15500)
        marked = "".join(g.char for g in frame.layout.glyphs if g.highlighted)
        assert marked == "there"


class TestPassageAdvance:
    """Passages switch on audio timestamps only."""

    def test_advances_after_next_start(self, session, clock):
        _frame_at(session, clock, 15000)
        frame = _frame_at(session, clock, 18000)
        assert frame.passage_index == 0
        assert session.passage_index == 0

        frame = _frame_at(session, clock, 18001)
        assert frame.passage_index == 0
        assert session.passage_index == 1
        assert session.char_index == 0

    def test_reveal_restarts_for_new_passage(self, session, clock):
        _frame_at(session, clock, 15000)
        _frame_at(session, clock, 18001)
        frame = _frame_at(session, clock, 18101)
        assert frame.passage_index == 1
        assert frame.layout.char_index == 3

    def test_reaches_last_passage(self, session, clock):
        for elapsed in (15000, 18001, 21001):
            _frame_at(session, clock, elapsed)
        assert session.passage_index == 2

    def test_speech_ended(self, session, clock):
        _frame_at(session, clock, 15000)
        assert not session.speech_ended(17999)
        assert session.speech_ended(18000)


class TestEndOfDialogue:
    """End signal, then the closing animation, then nothing."""

    def _play_to_last(self, session, clock):
        for elapsed in (15000, 18001, 21001):
            _frame_at(session, clock, elapsed)

    def test_last_passage_holds_until_end_time(self, session, clock, ended):
        self._play_to_last(session, clock)
        frame = _frame_at(session, clock, 23000)
        assert frame.visible
        assert session.passage_index == 2
        assert ended == []

    def test_end_signal_fires_once(self, session, clock, ended):
        self._play_to_last(session, clock)
        frame = _frame_at(session, clock, 25000)
        assert frame.visible
        assert ended == [True]
        _frame_at(session, clock, 25100)
        _frame_at(session, clock, 26000)
        assert ended == [True]

    def test_closing_animation(self, session, clock):
        self._play_to_last(session, clock)
        _frame_at(session, clock, 25000)

        frame = _frame_at(session, clock, 25100)
        assert not frame.visible
        assert frame.animation.open_ratio == 100

        frame = _frame_at(session, clock, 25300)
        assert 0.01 < frame.animation.open_ratio < 100

        frame = _frame_at(session, clock, 25600)
        assert not frame.visible
        assert frame.animation is None

    def test_dialogue_complete(self, session, clock):
        self._play_to_last(session, clock)
        assert not session.is_dialogue_complete()
        _frame_at(session, clock, 23000)
        assert session.is_dialogue_complete()


class TestFrameDecorations:
    def test_speaker_label_position(self, session, clock):
        frame = _frame_at(session, clock, 15000)
        assert "".join(g.char for g in frame.speaker) == "ADAM"
        first = frame.speaker[0]
        assert first.x == session.text_box.left + SPEAKER_LEFT_PADDING
        assert first.y == session.text_box.top + SPEAKER_TOP_PADDING

    def test_indicator_position(self, session, clock):
        frame = _frame_at(session, clock, 15000)
        assert frame.indicator_center == (1280 - INDICATOR_RIGHT_OFFSET, 720 - INDICATOR_BOTTOM_OFFSET)

    @pytest.mark.parametrize("elapsed", [15000, 15157, 15314, 16000])
    def test_indicator_alpha_pulses_in_range(self, session, clock, elapsed):
        frame = _frame_at(session, clock, elapsed)
        expected = INDICATOR_MIN_ALPHA + (math.sin(elapsed / 200.0) + 1) / 2 * (
            INDICATOR_MAX_ALPHA - INDICATOR_MIN_ALPHA
        )
        assert frame.indicator_alpha == pytest.approx(expected)
        assert INDICATOR_MIN_ALPHA <= frame.indicator_alpha <= INDICATOR_MAX_ALPHA


class TestOperations:
    def test_open_animation_geometry_delegates(self, session):
        assert session.open_animation_geometry(100).opacity == 100

    def test_prewarm_measures_every_character_once(self, session, measurer, sample_model):
        expected = set(sample_model.alphabet() + "ADAM") - {" "}
        assert session.prewarm() == len(expected)
        assert sorted(measurer.calls) == sorted(expected)
        assert session.prewarm() == 0

    def test_text_box_from_settings(self, session, settings):
        box = session.text_box
        assert box.left == 120
        assert box.right == 1280 - 120
        assert box.top == settings.box_top + 84
        assert box.line_height == 25


class TestAudioClock:
    """Wall-clock audio time with an injected time source."""

    def test_requires_start(self):
        clock = AudioClock(audio_skip_ms=12000, time_source=lambda: 5.0)
        assert not clock.started
        with pytest.raises(RuntimeError):
            clock.elapsed_audio_ms()

    def test_adds_skip_offset(self):
        now = [100.0]
        clock = AudioClock(audio_skip_ms=12000, time_source=lambda: now[0])
        clock.start()
        now[0] = 101.5
        assert clock.started
        assert clock.elapsed_audio_ms() == 13500

    def test_from_settings_uses_audio_skip(self, settings):
        now = [50.0]
        clock = AudioClock.from_settings(settings, time_source=lambda: now[0])
        assert clock.audio_skip_ms == 12000
        clock.start()
        now[0] = 50.25
        assert clock.elapsed_audio_ms() == 12250

    def test_manual_clock(self):
        clock = ManualClock(100)
        clock.advance(50)
        assert clock.elapsed_audio_ms() == 150
        clock.set(7)
        assert clock.elapsed_audio_ms() == 7


class TestUnstartedClock:
    """Nothing happens until playback has started."""

    def test_hidden_until_started(self, sample_model, measurer, settings):
        now = [0.0]
        clock = AudioClock.from_settings(settings, time_source=lambda: now[0])
        session = DialogueSession(sample_model, measurer, settings, clock)

        frame = session.update()
        assert not frame.visible
        assert frame.animation is None
        assert session.char_index == 0

        clock.start()
        now[0] = 3.5
        frame = session.update()
        # 12000 ms skip + 3500 ms of playback
        assert frame.elapsed_audio_ms == 15500
        assert frame.visible
