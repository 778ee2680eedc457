"""Command-line interface: render a dialogue offline, frame by frame.

WHY: The dialogue box is meant to sit over a separately rendered
animation. Rendering it offline to a transparent PNG sequence (or a JSON
trace of draw calls) lets it be composited in any video tool and checked
frame by frame without a live audio player.

HOW: Loads and validates the passages file, builds a DialogueSession
driven by a ManualClock, then steps the clock at the requested frame rate
across an audio-time range, rendering each frame with the selected
renderer. PNG frames go to --output-dir; the trace renderer writes one
{stem}-trace.json. Status messages go to stderr.

RULES:
- Positional argument: passages JSON file
- --renderer: pillow (PNG frames, default) or trace (JSON draw calls)
- Default time range: from the start of the open animation to two
  seconds after the last passage finishes revealing (or its end time,
  plus the close animation)
- Output naming: frame-00001.png ...; {stem}-trace.json with a numeric
  suffix on conflict (-trace-2.json)
- Errors print "Error: ..." to stderr and exit 1; Ctrl-C exits 130
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from dialogue_box.adapters.passages_json import load_passages
from dialogue_box.assets import FrameAssets, build_session, load_font, resolve_frame_assets
from dialogue_box.config import DialogueSettings, load_settings
from dialogue_box.core.clock import ManualClock
from dialogue_box.core.errors import DialogueError
from dialogue_box.core.glyphs import FontType
from dialogue_box.core.passages import PassageModel
from dialogue_box.renderers import RENDERERS
from dialogue_box.renderers.base import BaseRenderer
from dialogue_box.renderers.pillow_renderer import PillowRenderer
from dialogue_box.renderers.recording import RecordingRenderer
from dialogue_box.scene import render_frame

logger = logging.getLogger(__name__)

_TAIL_MS = 2000


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _default_time_range(model: PassageModel, settings: DialogueSettings) -> Tuple[int, int]:
    """Audio-time range that covers the whole dialogue.

    Starts when the open animation begins. Ends after the last passage's
    end time plus the close animation when the end time is known, or
    two seconds after its text finishes revealing when it is not.
    """
    start = max(0, model.first_start_time - settings.open_animation_ms)
    last_index = model.passage_count() - 1
    last = model.passage(last_index)
    end_time = model.end_time(last_index)
    if math.isinf(end_time):
        reveal_ms = len(last.text) * 1000.0 / settings.reveal_rate_cps
        end = int(last.start_ms + reveal_ms) + _TAIL_MS
    else:
        end = int(end_time) + settings.open_animation_ms + _TAIL_MS
    return start, end


def _frame_times(start_ms: int, end_ms: int, fps: float) -> Iterator[int]:
    step = 1000.0 / fps
    count = int((end_ms - start_ms) / step) + 1
    for i in range(count):
        yield start_ms + int(round(i * step))


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Return {stem}{suffix} in output_dir, adding -2, -3 ... on conflict."""
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _make_renderer(
    key: str,
    settings: DialogueSettings,
    font: FontType,
    assets: FrameAssets,
) -> BaseRenderer:
    renderer_cls = RENDERERS[key]
    if renderer_cls is PillowRenderer:
        return PillowRenderer(settings.canvas_width, settings.canvas_height, font, assets)
    return renderer_cls(settings.canvas_width, settings.canvas_height)


def _run(args: argparse.Namespace) -> List[Path]:
    """Render the dialogue described by ``args`` and return written files."""
    input_path = Path(args.passages_file).resolve()
    if not input_path.is_file():
        raise DialogueError("File not found: {}".format(input_path))

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        raise DialogueError("Output directory does not exist: {}".format(output_dir))

    settings = load_settings(
        font_path=args.font,
        font_size=args.font_size,
        assets_dir=args.assets,
        reveal_rate_cps=args.reveal_rate,
        speaker_name=args.speaker,
    )

    _status("Loading passages...")
    model = load_passages(input_path, one_based_highlights=not args.zero_based_highlights)
    _status("  {} passage(s), first starts at {} ms".format(
        model.passage_count(), model.first_start_time,
    ))

    font = load_font(settings.font_path, settings.font_size)
    assets = resolve_frame_assets(settings)
    clock = ManualClock()
    session = build_session(model, settings, clock, font=font, assets=assets)

    if args.prewarm:
        measured = session.prewarm()
        _status("  Pre-warmed {} glyph width(s)".format(measured))

    default_start, default_end = _default_time_range(model, settings)
    start_ms = args.start_ms if args.start_ms is not None else default_start
    end_ms = args.end_ms if args.end_ms is not None else default_end
    if end_ms < start_ms:
        raise DialogueError("--end-ms ({}) is before --start-ms ({})".format(end_ms, start_ms))

    renderer = _make_renderer(args.renderer, settings, font, assets)
    _status("Rendering {} to {} ms at {} fps with {}...".format(
        start_ms, end_ms, args.fps, renderer.name,
    ))

    saved: List[Path] = []
    for number, elapsed in enumerate(_frame_times(start_ms, end_ms, args.fps), start=1):
        clock.set(elapsed)
        product = render_frame(session.update(), renderer)
        if isinstance(renderer, PillowRenderer):
            path = output_dir / "frame-{:05d}.png".format(number)
            product.save(path)
            saved.append(path)

    if isinstance(renderer, RecordingRenderer):
        path = _resolve_output_path(input_path.stem, "-trace.json", output_dir)
        path.write_text(renderer.to_json(), encoding="utf-8")
        saved.append(path)

    _status("")
    _status("Done! Wrote {} file(s) to {}".format(len(saved), output_dir))
    return saved


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Separate from main() so tests can inspect it without rendering.
    """
    parser = argparse.ArgumentParser(
        prog="dialogue_box",
        description="Render an audio-synchronised typewriter dialogue box to "
                    "transparent PNG frames or a JSON trace of draw calls.",
    )

    parser.add_argument(
        "passages_file",
        help="Path to the passages JSON file.",
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to write output into (default: next to the passages file).",
    )

    parser.add_argument(
        "--renderer",
        choices=sorted(RENDERERS.keys()),
        default="pillow",
        help="Output renderer (default: %(default)s).",
    )

    parser.add_argument(
        "--fps",
        type=float,
        default=60.0,
        help="Frames per second of audio time (default: %(default)s).",
    )

    parser.add_argument(
        "--start-ms",
        type=int,
        default=None,
        help="First audio timestamp to render (default: start of the open animation).",
    )

    parser.add_argument(
        "--end-ms",
        type=int,
        default=None,
        help="Last audio timestamp to render (default: end of the dialogue).",
    )

    parser.add_argument(
        "--font",
        default=None,
        help="TrueType font file (default: DIALOGUE_FONT_PATH or Pillow's default font).",
    )

    parser.add_argument(
        "--font-size",
        type=int,
        default=None,
        help="Font size in pixels; must be even (default: DIALOGUE_FONT_SIZE or 24).",
    )

    parser.add_argument(
        "--assets",
        default=None,
        help="Directory with textFrame.png, frameTop.png and frameBottom.png "
             "(default: generate the frame).",
    )

    parser.add_argument(
        "--reveal-rate",
        type=float,
        default=None,
        help="Characters revealed per second (default: DIALOGUE_REVEAL_RATE_CPS or 30).",
    )

    parser.add_argument(
        "--speaker",
        default=None,
        help="Speaker name shown above the text (default: DIALOGUE_SPEAKER_NAME or ADAM).",
    )

    parser.add_argument(
        "--zero-based-highlights",
        action="store_true",
        help="Treat highlight bounds as 0-based half-open ranges instead of one-based.",
    )

    parser.add_argument(
        "--prewarm",
        action="store_true",
        help="Measure every glyph before rendering the first frame.",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output (glyph measurements, passage changes).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m dialogue_box``.

    argv=None means use sys.argv; an explicit list is for tests.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    try:
        _run(args)
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (DialogueError, ValueError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
