"""Command-line interface for the video captioner.

WHY: Users want captions for a local video without running the web
app. The CLI wires the same pipeline the API uses (transcribe, segment)
to the output formatters and writes the files next to the video.

HOW: argparse accepts an input video, segmentation and style options,
output format selection, and an output directory. The async pipeline
runs via asyncio.run(). Status messages go to stderr; output files are
saved as ``{stem}{suffix}`` with a numeric suffix on conflicts.

RULES:
- Positional argument: input video file path
- Validates the file and its extension before any API call
- --formats: comma-separated formatter keys (default: all registered)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (-captions-2.json)
- Status output goes to stderr (not stdout)
- A CaptionError prints its message and category and exits with status 1
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from video_captioner.config import (
    DEFAULT_CAPTION_STYLE,
    SUPPORTED_VIDEO_FORMATS,
    WORDS_PER_SEGMENT,
)
from video_captioner.core.ir import CaptionStyle
from video_captioner.errors import CaptionError
from video_captioner.formatters import FORMATTERS
from video_captioner.formatters.base import FormatterOutput
from video_captioner.pipeline import generate_captions


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed so it shows immediately."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. talk-captions.json)
    - Conflict: insert counter before the extension
      (e.g. talk-captions-2.json, talk-2.srt)
    - Counter starts at 2 and increments
    """
    candidate = output_dir / (stem + suffix)
    if not candidate.exists():
        return candidate

    head, dot, ext = suffix.rpartition(".")
    if not dot:
        head, ext = suffix, ""
    else:
        ext = dot + ext

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, head, counter, ext)
        if candidate.exists():
            counter += 1
            continue
        return candidate


def _save_output(
    output: FormatterOutput,
    stem: str,
    output_dir: Path,
) -> Path:
    """Write one formatter output to a conflict-free path and return it."""
    target = _resolve_output_path(stem, output.suffix, output_dir)
    content = output.content
    if isinstance(content, str):
        content = content.encode("utf-8")
    target.write_bytes(content)
    return target


def _parse_formats(formats: Optional[str]) -> List[str]:
    if not formats:
        return list(FORMATTERS.keys())
    format_keys = [f.strip() for f in formats.split(",") if f.strip()]
    for key in format_keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            _fail("Unknown format '{}'. Available formats: {}".format(key, available))
    return format_keys


async def _run_pipeline(args: argparse.Namespace) -> List[Path]:
    """Execute the captioning pipeline and save all requested outputs."""
    input_path = Path(args.input_file).resolve()

    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    ext = input_path.suffix.lower()
    if ext not in SUPPORTED_VIDEO_FORMATS:
        _fail("Unsupported file type '{}'. Supported formats: {}".format(
            ext, ", ".join(sorted(SUPPORTED_VIDEO_FORMATS))
        ))

    if args.words_per_segment <= 0:
        _fail("--words-per-segment must be positive, got {}".format(args.words_per_segment))

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    format_keys = _parse_formats(args.formats)

    try:
        track = await generate_captions(
            input_path,
            words_per_segment=args.words_per_segment,
            on_status=_status,
        )
    except CaptionError as exc:
        _fail("{} [{}]".format(exc.message, exc.category.value))

    track.style = CaptionStyle(args.style)
    track.video_url = args.video_url or input_path.name
    _status("  {} words, {} segments, {:.2f}s, language: {}".format(
        track.word_count, len(track.segments), track.duration_s, track.language
    ))

    _status("Formatting output...")
    saved_files: List[Path] = []
    for key in format_keys:
        formatter = FORMATTERS[key]()
        _status("  Running {} formatter...".format(formatter.name))
        for output in formatter.format(track):
            saved_files.append(_save_output(output, input_path.stem, output_dir))

    _status("Done. {} file(s) written:".format(len(saved_files)))
    for path in saved_files:
        _status("  {}".format(path))
    return saved_files


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser (separate from main() for testability)."""
    parser = argparse.ArgumentParser(
        prog="video_captioner",
        description="Transcribe a video with AssemblyAI and write caption files "
                    "(rendering-project composition props, SRT).",
    )

    parser.add_argument(
        "input_file",
        help="Path to the video file to caption.",
    )

    parser.add_argument(
        "--words-per-segment",
        type=int,
        default=WORDS_PER_SEGMENT,
        help="Words grouped into one caption segment (default: %(default)s).",
    )

    parser.add_argument(
        "--style",
        choices=[s.value for s in CaptionStyle],
        default=DEFAULT_CAPTION_STYLE,
        help="Caption style written into the composition props (default: %(default)s).",
    )

    parser.add_argument(
        "--video-url",
        default=None,
        help="Video URL written into the composition props (default: the input filename).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m video_captioner`` and the console script.

    argv=None means use sys.argv; explicit argv is for testing.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    asyncio.run(_run_pipeline(args))


if __name__ == "__main__":
    main()
