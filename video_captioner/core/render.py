"""Per-style render rules that turn a frame number into a RenderState.

WHY: The three caption styles differ in what they compute per frame:
bottom-centered and top-bar fade the whole segment in and out, karaoke
keeps the segment fully opaque and highlights the word being spoken.
Modeling each style as one rule in a table keeps the set exhaustive and
avoids string comparisons scattered through the renderer.

HOW: compute_render_state() converts the frame to seconds, finds the
active segment, and hands it to the rule registered for the style.

RULES:
- RENDER_RULES has exactly one entry per CaptionStyle member
- Karaoke never applies the fade envelope (opacity is always 1)
- Karaoke with an empty word list falls back to whole-text display
- No active segment -> empty RenderState with opacity 0
- Segment frames are start_s * fps and end_s * fps, unrounded
"""

from __future__ import annotations

from typing import Callable, Dict, Sequence

from video_captioner.config import FADE_IN_FRAMES, FADE_OUT_FRAMES, VIDEO_FPS
from video_captioner.core.ir import (
    CaptionSegment,
    CaptionStyle,
    RenderState,
    WordState,
)
from video_captioner.core.timing import (
    fade_opacity,
    find_active_segment,
    resolve_active_words,
)

RenderRule = Callable[..., RenderState]


def _faded(
    segment: CaptionSegment,
    frame: int,
    time_s: float,
    style: CaptionStyle,
    fps: float,
    fade_in: int,
    fade_out: int,
    text: str,
) -> RenderState:
    opacity = fade_opacity(
        frame,
        segment.start_s * fps,
        segment.end_s * fps,
        fade_in=fade_in,
        fade_out=fade_out,
    )
    return RenderState(
        frame=frame,
        time_s=time_s,
        style=style,
        segment=segment,
        text=text,
        opacity=opacity,
    )


def _render_bottom_centered(segment, frame, time_s, fps, fade_in, fade_out):
    return _faded(
        segment, frame, time_s, CaptionStyle.BOTTOM_CENTERED,
        fps, fade_in, fade_out, segment.text,
    )


def _render_top_bar(segment, frame, time_s, fps, fade_in, fade_out):
    return _faded(
        segment, frame, time_s, CaptionStyle.TOP_BAR,
        fps, fade_in, fade_out, segment.text.upper(),
    )


def _render_karaoke(segment, frame, time_s, fps, fade_in, fade_out):
    if not segment.words:
        return RenderState(
            frame=frame,
            time_s=time_s,
            style=CaptionStyle.KARAOKE,
            segment=segment,
            text=segment.text,
            opacity=1.0,
            whole_text=True,
        )

    flags = resolve_active_words(segment.words, time_s)
    return RenderState(
        frame=frame,
        time_s=time_s,
        style=CaptionStyle.KARAOKE,
        segment=segment,
        text=segment.text,
        opacity=1.0,
        word_states=tuple(
            WordState(word=word, active=active)
            for word, active in zip(segment.words, flags)
        ),
    )


RENDER_RULES: Dict[CaptionStyle, RenderRule] = {
    CaptionStyle.BOTTOM_CENTERED: _render_bottom_centered,
    CaptionStyle.TOP_BAR: _render_top_bar,
    CaptionStyle.KARAOKE: _render_karaoke,
}


def compute_render_state(
    segments: Sequence[CaptionSegment],
    style: CaptionStyle,
    frame: int,
    fps: float = VIDEO_FPS,
    fade_in: int = FADE_IN_FRAMES,
    fade_out: int = FADE_OUT_FRAMES,
) -> RenderState:
    """Compute what the caption layer shows on ``frame``.

    Args:
        segments: Caption segments in display order.
        style: Caption style (or its string value).
        frame: Zero-based frame number.
        fps: Composition frame rate.
        fade_in: Fade-in length in frames (faded styles only).
        fade_out: Fade-out length in frames (faded styles only).

    Returns:
        A fresh RenderState; nothing is cached between calls.

    Raises:
        ValueError: for an unknown style, negative frame, or fps <= 0.
    """
    style = CaptionStyle(style)
    if frame < 0:
        raise ValueError("frame must be non-negative, got {}".format(frame))
    if fps <= 0:
        raise ValueError("fps must be positive, got {}".format(fps))

    time_s = frame / fps
    segment = find_active_segment(segments, time_s)
    if segment is None:
        return RenderState(frame=frame, time_s=time_s, style=style)

    return RENDER_RULES[style](segment, frame, time_s, fps, fade_in, fade_out)
