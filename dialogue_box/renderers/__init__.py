"""Renderer registry.

WHY: The CLI picks a renderer by name (``--renderer pillow``). A central
dict keeps that lookup in one place.

HOW: RENDERERS maps string keys to renderer *classes*. Constructors
differ (the Pillow renderer needs a font and assets), so callers build
instances themselves; see cli._make_renderer().

RULES:
- Keys are the names accepted by the CLI's --renderer flag
- Values are BaseRenderer subclasses (not instances)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dialogue_box.renderers.pillow_renderer import PillowRenderer
from dialogue_box.renderers.recording import RecordingRenderer

if TYPE_CHECKING:
    from dialogue_box.renderers.base import BaseRenderer

RENDERERS: dict[str, type[BaseRenderer]] = {
    "pillow": PillowRenderer,
    "trace": RecordingRenderer,
}
