"""Dialogue Box: an audio-synchronised typewriter dialogue box renderer.

WHY: Character dialogue in the style of a console game box needs text
that types itself out, wraps cleanly, emphasises key words, and moves on
exactly when the voice track does, framed by an opening animation. The
font involved reports wrong metrics, so widths are measured from pixels.

HOW: A renderer-agnostic core (passage model, glyph measurement,
typewriter layout, open/close animation, session) produces plain
dataclasses each frame; a scene turns those into primitive draw calls on
a pluggable renderer (Pillow images or a JSON trace).

RULES:
- The core never draws and never opens files itself (config.py loads
  .env on import)
- Passage changes follow audio time; character reveal follows a rate
- Adding a renderer = one BaseRenderer subclass + one registry entry
"""

__version__ = "0.1.0"
