"""Pydantic request/response models for the HTTP API.

WHY: The browser front end and the rendering project exchange captions
as JSON. Pydantic models validate that JSON at the edge, generate the
OpenAPI schema shown in /docs, and convert into the immutable core types
so malformed captions are rejected before any frame is computed.

HOW: Field names follow the front end's wire format (camelCase, times
in seconds as ``start``/``end``). Caption models build the matching core
CaptionSegment during validation, so timing errors become 400 responses.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- CaptionStyle is the core enum; its values are the wire identifiers
- Response models never expose internal implementation details
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from video_captioner.config import VIDEO_FPS, WORDS_PER_SEGMENT
from video_captioner.core.ir import CaptionSegment, CaptionStyle, RenderState, Word


# ---------------------------------------------------------------------------
# Caption data
# ---------------------------------------------------------------------------


class CaptionWordModel(BaseModel):
    word: str = Field(description="Word text.")
    start: float = Field(description="Word start in seconds.")
    end: float = Field(description="Word end in seconds.")

    def to_word(self) -> Word:
        return Word(text=self.word, start_s=self.start, end_s=self.end)

    @classmethod
    def from_word(cls, word: Word) -> CaptionWordModel:
        return cls(word=word.text, start=word.start_s, end=word.end_s)


class CaptionSegmentModel(BaseModel):
    """One caption segment in wire format.

    RULES:
    - start/end are seconds, 0 <= start <= end
    - words, when present, are ordered and start inside [start, end]
    - validation builds the core CaptionSegment and rejects what it rejects
    """

    text: str = Field(description="Caption text shown on screen.")
    start: float = Field(description="Segment start in seconds.")
    end: float = Field(description="Segment end in seconds.")
    words: Optional[List[CaptionWordModel]] = Field(
        default=None,
        description="Word-level timing used by the karaoke style.",
    )

    @model_validator(mode="after")
    def _check_timing(self) -> CaptionSegmentModel:
        self.to_segment()
        return self

    def to_segment(self) -> CaptionSegment:
        return CaptionSegment(
            text=self.text,
            start_s=self.start,
            end_s=self.end,
            words=tuple(w.to_word() for w in self.words or []),
        )

    @classmethod
    def from_segment(cls, segment: CaptionSegment) -> CaptionSegmentModel:
        return cls(
            text=segment.text,
            start=segment.start_s,
            end=segment.end_s,
            words=[CaptionWordModel.from_word(w) for w in segment.words],
        )


class VideoCaptionProps(BaseModel):
    """Input props of the ``VideoWithCaptions`` composition."""

    videoUrl: str = Field(default="", description="Public URL or path of the video.")
    captions: List[CaptionSegmentModel] = Field(description="Caption segments in display order.")
    style: CaptionStyle = Field(description="Caption style.")


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class GenerateCaptionsRequest(BaseModel):
    videoPath: Optional[str] = Field(
        default=None,
        description="Public path returned by /api/upload, e.g. '/uploads/123-talk.mp4'.",
    )
    wordsPerSegment: int = Field(
        default=WORDS_PER_SEGMENT,
        ge=1,
        description="Number of words grouped into one caption segment.",
    )


class RenderRequest(BaseModel):
    inputProps: Optional[VideoCaptionProps] = Field(
        default=None, description="Composition input props."
    )
    compositionId: Optional[str] = Field(default=None, description="Composition to render.")
    outputFileName: Optional[str] = Field(default=None, description="Output video filename.")


class PreviewFrameRequest(BaseModel):
    captions: List[CaptionSegmentModel] = Field(description="Caption segments in display order.")
    style: CaptionStyle = Field(description="Caption style to preview.")
    frame: int = Field(ge=0, description="Zero-based frame number.")
    fps: int = Field(default=VIDEO_FPS, ge=1, description="Composition frame rate.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UploadResponse(BaseModel):
    success: bool = Field(description="Always true on success.")
    videoUrl: str = Field(description="Public path of the stored video.")
    filename: str = Field(description="Stored filename (timestamp-prefixed).")
    size: int = Field(description="File size in bytes.")
    path: str = Field(description="Same as videoUrl; kept for older clients.")


class CaptionResponse(BaseModel):
    success: bool = Field(description="Always true on success.")
    captions: List[CaptionSegmentModel] = Field(description="Generated caption segments.")
    language: str = Field(description="Detected language code.")
    duration: float = Field(description="End of the last word, in seconds.")
    durationInFrames: int = Field(description="Composition length at the default frame rate.")
    confidence: Optional[float] = Field(default=None, description="Overall transcript confidence.")


class RenderInstructions(BaseModel):
    command: str = Field(description="Command that renders the composition locally.")
    note: str = Field(description="How to use the command.")


class RenderResponse(BaseModel):
    success: bool = Field(description="False: rendering runs outside this service.")
    message: str = Field(description="Human-readable explanation.")
    instructions: RenderInstructions
    durationInFrames: int = Field(description="Composition length in frames.")


class WordStateModel(BaseModel):
    word: str
    start: float
    end: float
    active: bool = Field(description="True while the word is being spoken.")


class RenderStateResponse(BaseModel):
    """What the caption layer shows on one frame."""

    frame: int
    time: float = Field(description="Frame time in seconds.")
    style: CaptionStyle
    visible: bool = Field(description="False when no caption is active.")
    text: str = Field(description="Display text after style transforms.")
    opacity: float = Field(description="Caption opacity in [0, 1].")
    caption: Optional[CaptionSegmentModel] = None
    words: List[WordStateModel] = Field(default_factory=list)
    wholeText: bool = Field(
        default=False,
        description="Karaoke fallback: whole text highlighted, no per-word timing.",
    )

    @classmethod
    def from_state(cls, state: RenderState) -> RenderStateResponse:
        return cls(
            frame=state.frame,
            time=state.time_s,
            style=state.style,
            visible=state.visible,
            text=state.text,
            opacity=state.opacity,
            caption=(
                CaptionSegmentModel.from_segment(state.segment)
                if state.segment is not None else None
            ),
            words=[
                WordStateModel(
                    word=ws.word.text,
                    start=ws.word.start_s,
                    end=ws.word.end_s,
                    active=ws.active,
                )
                for ws in state.word_states
            ],
            wholeText=state.whole_text,
        )


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str = Field(description="Human-readable error description.")
    category: str = Field(description="Failure category, e.g. 'upstream_rate_limited'.")
    details: Optional[str] = Field(default=None, description="Extra context, when available.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    message: str = Field(description="Human-readable status message.")
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
