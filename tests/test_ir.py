"""Unit tests for the caption IR dataclasses.

WHY: Every later stage trusts the IR: the resolver assumes spans are
ordered, the fade envelope assumes end >= start, the HTTP layer relies on
construction to reject malformed client captions. A gap here turns into a
blank or flickering frame far away from the real cause.

HOW: Construct Word, CaptionSegment, RenderState and CaptionTrack with
valid and invalid values and check what is accepted or rejected.

RULES:
- Construction errors are ValueError, never a CaptionError
- Span checks are inclusive on both ends
"""

import math

import pytest

from video_captioner.core.ir import (
    CaptionSegment,
    CaptionStyle,
    CaptionTrack,
    RenderState,
    Word,
    WordState,
)


class TestWord:
    def test_valid_word(self):
        word = Word(text="hello", start_s=0.0, end_s=0.5)
        assert word.text == "hello"
        assert word.end_s == 0.5

    def test_zero_length_word_is_allowed(self):
        word = Word(text="a", start_s=1.0, end_s=1.0)
        assert word.contains(1.0)

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError, match="ends before it starts"):
            Word(text="x", start_s=1.0, end_s=0.5)

    def test_negative_time_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            Word(text="x", start_s=-0.1, end_s=0.5)

    @pytest.mark.parametrize("bad", [math.nan, math.inf])
    def test_non_finite_time_rejected(self, bad):
        with pytest.raises(ValueError, match="finite"):
            Word(text="x", start_s=0.0, end_s=bad)

    def test_bool_time_rejected(self):
        with pytest.raises(ValueError, match="must be a number"):
            Word(text="x", start_s=True, end_s=2.0)

    def test_contains_is_inclusive(self):
        word = Word(text="x", start_s=1.0, end_s=2.0)
        assert word.contains(1.0)
        assert word.contains(2.0)
        assert not word.contains(0.999)
        assert not word.contains(2.001)

    def test_is_frozen(self):
        word = Word(text="x", start_s=0.0, end_s=1.0)
        with pytest.raises(AttributeError):
            word.text = "y"


class TestCaptionSegment:
    def test_words_list_becomes_tuple(self):
        words = [Word("a", 0.0, 0.5), Word("b", 0.5, 1.0)]
        segment = CaptionSegment(text="a b", start_s=0.0, end_s=1.0, words=words)
        assert isinstance(segment.words, tuple)
        assert segment.duration_s == 1.0

    def test_empty_words_allowed(self):
        segment = CaptionSegment(text="Hello world", start_s=0.0, end_s=2.0)
        assert segment.words == ()

    def test_word_starting_outside_span_rejected(self):
        with pytest.raises(ValueError, match="outside segment span"):
            CaptionSegment(
                text="late", start_s=0.0, end_s=1.0, words=[Word("late", 1.5, 2.0)]
            )

    def test_word_ending_after_span_is_tolerated(self):
        """Overlapping source words may run past the segment end."""
        segment = CaptionSegment(
            text="a", start_s=0.0, end_s=1.0, words=[Word("a", 0.9, 1.2)]
        )
        assert segment.words[0].end_s == 1.2

    def test_unordered_words_rejected(self):
        with pytest.raises(ValueError, match="ordered"):
            CaptionSegment(
                text="b a",
                start_s=0.0,
                end_s=1.0,
                words=[Word("b", 0.5, 1.0), Word("a", 0.0, 0.5)],
            )

    def test_non_word_entries_rejected(self):
        with pytest.raises(ValueError, match="Word instances"):
            CaptionSegment(text="a", start_s=0.0, end_s=1.0, words=[("a", 0.0, 1.0)])

    def test_inverted_span_rejected(self):
        with pytest.raises(ValueError):
            CaptionSegment(text="a", start_s=2.0, end_s=1.0)


class TestCaptionStyle:
    def test_wire_values(self):
        assert [s.value for s in CaptionStyle] == ["bottom-centered", "top-bar", "karaoke"]

    def test_unknown_style_rejected(self):
        with pytest.raises(ValueError):
            CaptionStyle("neon")

    def test_only_karaoke_skips_fade(self):
        assert CaptionStyle.BOTTOM_CENTERED.uses_fade
        assert CaptionStyle.TOP_BAR.uses_fade
        assert not CaptionStyle.KARAOKE.uses_fade


class TestRenderState:
    def test_empty_state_is_invisible(self):
        state = RenderState(frame=0, time_s=0.0, style=CaptionStyle.KARAOKE)
        assert not state.visible
        assert state.opacity == 0.0
        assert state.active_words == ()

    def test_active_words(self):
        a, b = Word("a", 0.0, 0.5), Word("b", 0.5, 1.0)
        segment = CaptionSegment(text="a b", start_s=0.0, end_s=1.0, words=[a, b])
        state = RenderState(
            frame=6,
            time_s=0.2,
            style=CaptionStyle.KARAOKE,
            segment=segment,
            text="a b",
            opacity=1.0,
            word_states=(WordState(a, True), WordState(b, False)),
        )
        assert state.visible
        assert state.active_words == (a,)


class TestCaptionTrack:
    def test_defaults(self, ten_words):
        track = CaptionTrack(segments=[], source_filename="talk.mp4", duration_s=5.0,
                             words=ten_words)
        assert track.language == "auto-detected"
        assert track.style is CaptionStyle.BOTTOM_CENTERED
        assert track.confidence is None
        assert track.word_count == 10
