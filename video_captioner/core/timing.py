"""Per-frame lookups: active segment, active words, fade envelope, frame math.

WHY: Every rendered frame asks the same questions: which caption is on
screen, which of its words is being spoken, and how opaque the caption
is while it fades in or out. Answering them from scratch on each frame
keeps seeking and scrubbing backwards correct without any cached state.

HOW: Plain functions over their arguments.
  find_active_segment   first segment whose span contains t (linear scan)
  resolve_active_words  per-word inclusive range check
  fade_opacity          linear fade-in / hold / fade-out, clamped to [0, 1]
  seconds_to_frames     ceil(seconds * fps)

RULES:
- Span checks are inclusive on both ends
- Overlapping or boundary-sharing segments resolve to the first in order
- The linear scan is O(segments) per frame; segment lists are short, so
  there is no index structure
- fade_opacity is total over every frame for valid arguments, including
  segments shorter than fade_in + fade_out
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from video_captioner.config import FADE_IN_FRAMES, FADE_OUT_FRAMES
from video_captioner.core.ir import CaptionSegment, Word


def find_active_segment(
    segments: Sequence[CaptionSegment],
    time_s: float,
) -> Optional[CaptionSegment]:
    """Return the first segment with ``start_s <= time_s <= end_s``, else None.

    A time exactly on a boundary shared by two adjacent segments matches
    both ranges; the earlier segment wins because it comes first.
    """
    for segment in segments:
        if segment.contains(time_s):
            return segment
    return None


def resolve_active_words(words: Sequence[Word], time_s: float) -> List[bool]:
    """Return one flag per word: True when ``start_s <= time_s <= end_s``.

    Several words can be active at once only if their ranges overlap in
    the source data; that is reported as-is. An empty word list yields an
    empty result, and the caller falls back to whole-text display.
    """
    return [word.contains(time_s) for word in words]


def fade_opacity(
    frame: float,
    start_frame: float,
    end_frame: float,
    fade_in: int = FADE_IN_FRAMES,
    fade_out: int = FADE_OUT_FRAMES,
) -> float:
    """Opacity of a segment at ``frame`` under a linear fade envelope.

    WHY: Bottom-centered and top-bar captions fade in over ``fade_in``
    frames and out over ``fade_out`` frames instead of popping.

    HOW: Inside ``[start_frame, end_frame]`` the opacity is the smaller of
    the rising edge ``(frame - start) / fade_in`` and the falling edge
    ``(end - frame) / fade_out``, clamped to [0, 1]. Outside the window
    it is 0.

    RULES:
    - opacity(start) == 0, opacity(start + fade_in) == 1,
      opacity(end - fade_out) == 1, opacity(end) == 0 whenever
      end - fade_out >= start + fade_in
    - Short segments (end - fade_out < start + fade_in) get a triangle:
      0 at both ends, peaking below 1 where the two edges cross
    - Frames before start or after end clamp to 0
    - fade_in and fade_out must be positive; end_frame >= start_frame

    Raises:
        ValueError: for non-positive fade lengths or end before start.
    """
    if fade_in <= 0 or fade_out <= 0:
        raise ValueError(
            "Fade durations must be positive, got fade_in={} fade_out={}".format(
                fade_in, fade_out
            )
        )
    if end_frame < start_frame:
        raise ValueError(
            "end_frame {} is before start_frame {}".format(end_frame, start_frame)
        )

    if frame <= start_frame or frame >= end_frame:
        return 0.0

    rising = (frame - start_frame) / fade_in
    falling = (end_frame - frame) / fade_out
    return max(0.0, min(1.0, rising, falling))


def seconds_to_frames(seconds: float, fps: float) -> int:
    """Frames needed to cover ``seconds`` at ``fps``: ``ceil(seconds * fps)``."""
    if fps <= 0:
        raise ValueError("fps must be positive, got {}".format(fps))
    return math.ceil(seconds * fps)


def duration_in_frames(duration_s: float, fps: float) -> int:
    """Composition length in frames; never less than one frame."""
    return max(1, seconds_to_frames(duration_s, fps))
