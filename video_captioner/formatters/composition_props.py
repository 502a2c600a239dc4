"""Composition props formatter: the rendering framework's input JSON.

WHY: Video composition happens in an external rendering project. It
renders the ``VideoWithCaptions`` composition from three input props
(video URL, captions, style) plus the composition geometry. This
formatter writes exactly that document so a render can be started with
``--props`` and no hand editing.

HOW: Segments are serialized with the rendering project's field names
(``start``/``end`` in seconds, words as ``{word, start, end}``). The
composition length is ``ceil(duration * fps)`` frames. The document is
validated against the bundled JSON schema before returning.

RULES:
- Output suffix is "-captions.json"
- Field names match the rendering project's prop schema exactly
- Style is the CaptionStyle string value ("bottom-centered", ...)
- Schema validation is mandatory; raises on invalid output
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import jsonschema

from video_captioner.config import (
    DEFAULT_DURATION_IN_FRAMES,
    VIDEO_CAPTION_COMP_NAME,
    VIDEO_FPS,
    VIDEO_HEIGHT,
    VIDEO_WIDTH,
)
from video_captioner.core.ir import CaptionSegment, CaptionTrack, Word
from video_captioner.core.timing import duration_in_frames
from video_captioner.formatters.base import BaseFormatter, FormatterOutput

_SCHEMA_PATH = Path(__file__).resolve().parent / "video_caption_props.schema.json"

_CACHED_SCHEMA: Optional[dict] = None


def _get_schema() -> dict:
    """Load and cache the composition props JSON schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH) as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def word_to_dict(word: Word) -> dict[str, Any]:
    return {"word": word.text, "start": word.start_s, "end": word.end_s}


def segment_to_dict(segment: CaptionSegment) -> dict[str, Any]:
    return {
        "text": segment.text,
        "start": segment.start_s,
        "end": segment.end_s,
        "words": [word_to_dict(w) for w in segment.words],
    }


def build_composition(track: CaptionTrack, fps: int = VIDEO_FPS) -> dict[str, Any]:
    """Build the composition document for ``track``.

    Tracks without captions keep the rendering project's default length.
    """
    if track.segments:
        frames = duration_in_frames(track.duration_s, fps)
    else:
        frames = DEFAULT_DURATION_IN_FRAMES

    return {
        "compositionId": VIDEO_CAPTION_COMP_NAME,
        "fps": fps,
        "width": VIDEO_WIDTH,
        "height": VIDEO_HEIGHT,
        "durationInFrames": frames,
        "inputProps": {
            "videoUrl": track.video_url,
            "captions": [segment_to_dict(s) for s in track.segments],
            "style": track.style.value,
        },
    }


class CompositionPropsFormatter(BaseFormatter):
    """Formatter producing the ``VideoWithCaptions`` composition document."""

    def __init__(self, fps: int = VIDEO_FPS) -> None:
        self._fps = fps

    @property
    def name(self) -> str:
        return "Composition Props JSON"

    def format(self, track: CaptionTrack) -> list[FormatterOutput]:
        """Serialize ``track`` as schema-validated composition JSON.

        Raises:
            jsonschema.ValidationError: if the document does not conform
                to the composition props schema.
        """
        document = build_composition(track, self._fps)
        jsonschema.validate(instance=document, schema=_get_schema())

        return [
            FormatterOutput(
                suffix="-captions.json",
                content=json.dumps(document, indent=2, ensure_ascii=False),
                media_type="application/json",
            )
        ]
