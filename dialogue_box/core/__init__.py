"""Dialogue core: passage model, glyph measurement, typewriter, animation.

WHY: The core is the part of the dialogue box with real state and real
algorithms. It has no idea what graphics library draws the result, so it
can be driven from a live loop, an offline frame renderer, or a test.

HOW: passages.py holds the immutable data, glyphs.py measures widths,
typewriter.py owns the reveal state and layout, animation.py computes the
open/close geometry, clock.py supplies audio time, and session.py wires
them together once per frame.

RULES:
- No module here draws anything or opens files itself; output is plain
  dataclasses. Layout constants come from dialogue_box.config, whose
  import loads .env once
- Submodules are imported explicitly; this package imports nothing so
  config.py can depend on core.errors without a cycle
"""
