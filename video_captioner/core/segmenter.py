"""Word-stream to caption-segment batching.

WHY: A transcript arrives as one long list of timestamped words. The
renderer shows a phrase at a time, so words must be grouped into caption
segments, each with its own display span.

HOW: Fixed-size positional batching. The stream is cut into consecutive
chunks of at most ``words_per_segment`` words; each chunk becomes one
CaptionSegment spanning its first word's start to its last word's end.

RULES:
- Batching is purely positional: no punctuation, pause, or sentence logic
- Every segment except possibly the last has exactly words_per_segment words
- Per-word times are preserved verbatim, never renormalized
- Concatenating all segments' words reproduces the input stream exactly
- Empty input -> empty output (callers treat that as "no speech detected")
- words_per_segment <= 0 raises ValueError
- Upstream milliseconds are converted to seconds here, before batching
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence

from video_captioner.config import WORDS_PER_SEGMENT
from video_captioner.core.ir import CaptionSegment, Word


def words_from_milliseconds(records: Iterable[Mapping]) -> List[Word]:
    """Convert upstream word records with millisecond times into Words.

    Each record needs ``text``, ``start`` and ``end`` keys (milliseconds),
    which is the shape the transcription service returns.
    """
    return [
        Word(
            text=record["text"],
            start_s=record["start"] / 1000,
            end_s=record["end"] / 1000,
        )
        for record in records
    ]


def build_segments(
    words: Sequence[Word],
    words_per_segment: int = WORDS_PER_SEGMENT,
) -> List[CaptionSegment]:
    """Partition a word stream into caption segments of fixed size.

    Args:
        words: Ordered word stream (non-decreasing start times).
        words_per_segment: Maximum words per segment (the final segment
            may hold fewer).

    Returns:
        ``ceil(len(words) / words_per_segment)`` segments, in stream order.

    Raises:
        ValueError: if words_per_segment is not a positive integer, or the
            stream's start times decrease.
    """
    if isinstance(words_per_segment, bool) or not isinstance(words_per_segment, int):
        raise ValueError(
            "words_per_segment must be an integer, got {!r}".format(words_per_segment)
        )
    if words_per_segment <= 0:
        raise ValueError(
            "words_per_segment must be positive, got {}".format(words_per_segment)
        )

    for previous, current in zip(words, words[1:]):
        if current.start_s < previous.start_s:
            raise ValueError(
                "Word stream is out of order: {!r} at {}s follows {!r} at {}s".format(
                    current.text, current.start_s, previous.text, previous.start_s
                )
            )

    segments: List[CaptionSegment] = []
    for i in range(0, len(words), words_per_segment):
        chunk = words[i:i + words_per_segment]
        segments.append(CaptionSegment(
            text=" ".join(w.text for w in chunk),
            start_s=chunk[0].start_s,
            end_s=chunk[-1].end_s,
            words=tuple(chunk),
        ))
    return segments
