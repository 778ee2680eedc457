"""Tests for settings validation in dialogue_box.config.

WHY: Everything downstream trusts DialogueSettings. Bad values (an odd
font size, a zero reveal rate) must be rejected once, up front, with a
clear message.
"""

import dataclasses

import pytest

from dialogue_box.config import DialogueSettings, load_settings
from dialogue_box.core.errors import InvalidConfigurationError


class TestLoadSettings:
    def test_none_overrides_are_ignored(self):
        settings = load_settings(font_size=None, reveal_rate_cps=None)
        assert settings == DialogueSettings()

    def test_overrides_apply(self):
        settings = load_settings(font_size=32, speaker_name="EVE")
        assert settings.font_size == 32
        assert settings.speaker_name == "EVE"

    def test_unknown_setting(self):
        with pytest.raises(InvalidConfigurationError, match="Unknown setting"):
            load_settings(font_colour="red")

    @pytest.mark.parametrize("size", [0, -2, 25])
    def test_font_size_must_be_positive_and_even(self, size):
        with pytest.raises(InvalidConfigurationError, match="even"):
            load_settings(font_size=size)

    @pytest.mark.parametrize("rate", [0, -1.5])
    def test_reveal_rate_must_be_positive(self, rate):
        with pytest.raises(InvalidConfigurationError, match="Reveal rate"):
            load_settings(reveal_rate_cps=rate)

    def test_open_animation_must_be_positive(self):
        with pytest.raises(InvalidConfigurationError, match="Open animation"):
            load_settings(open_animation_ms=0)

    def test_canvas_must_fit_box(self):
        with pytest.raises(InvalidConfigurationError, match="no room"):
            load_settings(canvas_width=160)

    def test_settings_are_frozen(self, settings):
        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.font_size = 30


class TestDerivedValues:
    def test_space_width_is_half_font_size(self, settings):
        assert settings.space_width == 12

    def test_box_geometry(self, settings):
        assert settings.box_top == 720 - 224 - 20
        assert settings.box_center_y == 588
