"""Intermediate representation for timed captions.

WHY: The transcription service returns a flat word stream; the rendering
side needs grouped caption segments and, per frame, a render decision.
Typed, immutable records make both contracts explicit and let malformed
timing fail at construction instead of surfacing as a blank frame later.

HOW: Frozen dataclasses with __post_init__ validation:
  Word           one spoken word with start/end in seconds
  CaptionSegment consecutive words displayed together as one subtitle
  CaptionStyle   closed set of visual styles, one render rule each
  WordState      a word plus its active flag for the current frame
  RenderState    everything a renderer needs for one frame
  CaptionTrack   the complete result of one upload+transcription cycle

RULES:
- All times are float seconds (converted from upstream milliseconds)
- Times must be finite and non-negative, with end >= start
- A segment's words are ordered by start and start inside the segment span
- RenderState is derived per frame and never cached
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple


def _check_span(kind: str, start_s: float, end_s: float) -> None:
    for name, value in (("start_s", start_s), ("end_s", end_s)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("{} {} must be a number, got {!r}".format(kind, name, value))
        if not math.isfinite(value):
            raise ValueError("{} {} must be finite, got {!r}".format(kind, name, value))
        if value < 0:
            raise ValueError("{} {} must be non-negative, got {!r}".format(kind, name, value))
    if end_s < start_s:
        raise ValueError(
            "{} ends before it starts ({} < {})".format(kind, end_s, start_s)
        )


@dataclass(frozen=True)
class Word:
    """A single transcribed word with its spoken time range.

    RULES:
    - text: the word as returned by the transcription service
    - start_s / end_s: float seconds, 0 <= start_s <= end_s
    """

    text: str
    start_s: float
    end_s: float

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise ValueError("Word text must be a string, got {!r}".format(self.text))
        _check_span("Word", self.start_s, self.end_s)

    def contains(self, time_s: float) -> bool:
        """Inclusive on both ends."""
        return self.start_s <= time_s <= self.end_s


@dataclass(frozen=True)
class CaptionSegment:
    """A group of consecutive words displayed together as one subtitle.

    WHY: Captions are shown a phrase at a time, not a word at a time. The
    segment carries its own span so the renderer can find it with a
    single range check, and keeps its words for karaoke highlighting.

    HOW: Built by the segmenter from a contiguous slice of the word
    stream, or from client-supplied data at the HTTP boundary. Words may
    be empty (e.g. placeholder captions); the karaoke rule then falls back
    to whole-text display.

    RULES:
    - text: space-joined word texts when built by the segmenter
    - start_s / end_s: first word's start / last word's end when built
      by the segmenter
    - words: tuple, ordered by start, each starting inside [start_s, end_s]
    """

    text: str
    start_s: float
    end_s: float
    words: Tuple[Word, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise ValueError("Segment text must be a string, got {!r}".format(self.text))
        _check_span("CaptionSegment", self.start_s, self.end_s)
        words = tuple(self.words)
        object.__setattr__(self, "words", words)

        previous_start = None
        for word in words:
            if not isinstance(word, Word):
                raise ValueError("Segment words must be Word instances, got {!r}".format(word))
            if not self.start_s <= word.start_s <= self.end_s:
                raise ValueError(
                    "Word {!r} starts at {}s, outside segment span {}-{}".format(
                        word.text, word.start_s, self.start_s, self.end_s
                    )
                )
            if previous_start is not None and word.start_s < previous_start:
                raise ValueError("Segment words must be ordered by start time")
            previous_start = word.start_s

    def contains(self, time_s: float) -> bool:
        """Inclusive on both ends."""
        return self.start_s <= time_s <= self.end_s

    @property
    def duration_s(self) -> float:
        return self.end_s - self.start_s


class CaptionStyle(str, enum.Enum):
    """Visual caption styles understood by the rendering layer.

    Inherits from str so values serialize cleanly to JSON and match the
    rendering project's style identifiers.
    """

    BOTTOM_CENTERED = "bottom-centered"
    TOP_BAR = "top-bar"
    KARAOKE = "karaoke"

    @property
    def uses_fade(self) -> bool:
        return self is not CaptionStyle.KARAOKE


@dataclass(frozen=True)
class WordState:
    word: Word
    active: bool


@dataclass(frozen=True)
class RenderState:
    """Render decision for one frame.

    RULES:
    - segment is None when no caption is on screen; opacity is then 0
    - word_states is empty unless the style highlights words
    - whole_text is True for the karaoke fallback (segment has no words):
      the full text is shown highlighted as a single unit
    - text is the display text after style transforms (e.g. upper-case)
    """

    frame: int
    time_s: float
    style: CaptionStyle
    segment: Optional[CaptionSegment] = None
    text: str = ""
    opacity: float = 0.0
    word_states: Tuple[WordState, ...] = ()
    whole_text: bool = False

    @property
    def visible(self) -> bool:
        return self.segment is not None

    @property
    def active_words(self) -> Tuple[Word, ...]:
        return tuple(ws.word for ws in self.word_states if ws.active)


@dataclass
class CaptionTrack:
    """The complete captioning result for one uploaded video.

    WHY: This is the container formatters and the HTTP layer receive. It
    holds the segments plus the metadata the rendering side needs
    (duration for the composition length, style, video location).

    RULES:
    - segments: ordered, non-overlapping, built by the segmenter
    - duration_s: end of the last word (0.0 when there are no words)
    - language: upstream language code or "auto-detected"
    - confidence: upstream overall confidence, None when not reported
    """

    segments: list[CaptionSegment]
    source_filename: str
    duration_s: float
    language: str = "auto-detected"
    confidence: Optional[float] = None
    style: CaptionStyle = CaptionStyle.BOTTOM_CENTERED
    video_url: str = ""
    words: list[Word] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return len(self.words)
