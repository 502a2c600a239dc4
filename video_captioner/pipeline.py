"""Caption generation pipeline: video file -> CaptionTrack.

WHY: The HTTP API and the CLI both need the same sequence: transcribe the
video, convert the word stream to seconds, refuse silent videos, and
batch the words into caption segments. Keeping it in one place means both
surfaces report the same errors for the same failures.

HOW: generate_captions() drives an AssemblyAIClient (a fresh one unless
the caller passes its own), then hands the words to the segmenter and
wraps the result in a CaptionTrack.

RULES:
- Millisecond times are converted to seconds before segmentation
- Zero words -> EmptyResultError ("no speech detected"), not an empty track
- Malformed word timings -> UpstreamError, never a bare ValueError
- Duration is the end of the last word
- The upstream transcript is deleted afterwards when cleanup is True
- Failures propagate as CaptionError subclasses; nothing is retried
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from video_captioner.api.client import AssemblyAIClient
from video_captioner.api.models import TranscriptResult
from video_captioner.config import WORDS_PER_SEGMENT
from video_captioner.core.ir import CaptionTrack
from video_captioner.core.segmenter import build_segments, words_from_milliseconds
from video_captioner.errors import EmptyResultError, UpstreamError

logger = logging.getLogger(__name__)

NO_SPEECH_MESSAGE = "No speech detected in the video. Please ensure the video has audio."


def _check_batch_size(words_per_segment: int) -> None:
    if isinstance(words_per_segment, bool) or not isinstance(words_per_segment, int):
        raise ValueError(
            "words_per_segment must be an integer, got {!r}".format(words_per_segment)
        )
    if words_per_segment <= 0:
        raise ValueError(
            "words_per_segment must be positive, got {}".format(words_per_segment)
        )


def build_caption_track(
    result: TranscriptResult,
    source_filename: str,
    words_per_segment: int = WORDS_PER_SEGMENT,
) -> CaptionTrack:
    """Turn a completed transcript into a CaptionTrack.

    Raises:
        EmptyResultError: if the transcript has no words.
        UpstreamError: if the word timings are malformed (inverted,
            negative, non-numeric, or out of order).
        ValueError: if words_per_segment is not a positive integer.
    """
    _check_batch_size(words_per_segment)
    try:
        words = words_from_milliseconds(w.to_record() for w in result.words)
        segments = build_segments(words, words_per_segment)
    except (TypeError, ValueError) as exc:
        raise UpstreamError("Malformed response from AssemblyAI", str(exc)) from exc

    if not words:
        raise EmptyResultError(NO_SPEECH_MESSAGE)
    logger.info("Generated %d caption segments from %d words", len(segments), len(words))

    return CaptionTrack(
        segments=segments,
        source_filename=source_filename,
        duration_s=words[-1].end_s,
        language=result.language_code or "auto-detected",
        confidence=result.confidence,
        words=words,
    )


async def generate_captions(
    video_path: Path,
    client: Optional[AssemblyAIClient] = None,
    words_per_segment: int = WORDS_PER_SEGMENT,
    cleanup: bool = True,
    on_status: Optional[Callable[[str], None]] = None,
) -> CaptionTrack:
    """Transcribe ``video_path`` and build its caption segments.

    Args:
        video_path: Local video file.
        client: An AssemblyAIClient that is *not yet entered*; one is
            created from config when omitted.
        words_per_segment: Segment batch size.
        cleanup: Delete the transcript upstream once words are extracted.
        on_status: Optional callback for human-readable progress.
    """
    _check_batch_size(words_per_segment)

    video_path = Path(video_path)
    client = client or AssemblyAIClient()

    async with client:
        result = await client.transcribe(video_path, on_status=on_status)
        if on_status:
            on_status("Transcription completed, processing words...")
        logger.info("Transcription completed, processing %d words", len(result.words))
        try:
            return build_caption_track(result, video_path.name, words_per_segment)
        finally:
            if cleanup:
                await client.delete_transcript(result.id, on_status=on_status)
