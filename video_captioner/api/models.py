"""AssemblyAI response dataclasses.

WHY: The AssemblyAI v2 API returns flat JSON objects for transcripts and
their words. Typed dataclasses make the fields we depend on explicit and
catch shape mismatches at the boundary instead of deep in the pipeline.

HOW: Each dataclass maps to one AssemblyAI JSON object. Factory methods
(from_dict) parse raw API responses. Fields only present for some
requests or statuses are Optional.

RULES:
- AssemblyAIWord times are integer milliseconds, exactly as returned
- TranscriptResult.words is empty until status is "completed"
- error is only present when status is "error"
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AssemblyAIWord:
    """A single word from a completed AssemblyAI transcript.

    RULES:
    - text: word text, punctuation attached when format_text is enabled
    - start / end: integer milliseconds from the start of the media
    - confidence: float 0.0-1.0
    - speaker: label when speaker_labels is enabled, else None
    """

    text: str
    start: int
    end: int
    confidence: float = 0.0
    speaker: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> AssemblyAIWord:
        return cls(
            text=data["text"],
            start=data["start"],
            end=data["end"],
            confidence=data.get("confidence", 0.0),
            speaker=data.get("speaker"),
        )

    def to_record(self) -> dict:
        """Millisecond record in the shape the segmenter converts."""
        return {"text": self.text, "start": self.start, "end": self.end}


@dataclass
class TranscriptResult:
    """Transcript object from POST /transcript and GET /transcript/{id}.

    WHY: The same object is returned while the job is queued, while it is
    processing, and once it has completed or failed. The polling loop
    reads status; the pipeline reads words and metadata.

    RULES:
    - status is one of: "queued", "processing", "completed", "error"
    - language_code is set when language detection ran
    - audio_duration is in seconds when reported
    """

    id: str
    status: str
    words: list[AssemblyAIWord] = field(default_factory=list)
    text: str | None = None
    language_code: str | None = None
    confidence: float | None = None
    audio_duration: float | None = None
    error: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> TranscriptResult:
        return cls(
            id=data["id"],
            status=data["status"],
            words=[AssemblyAIWord.from_dict(w) for w in data.get("words") or []],
            text=data.get("text"),
            language_code=data.get("language_code"),
            confidence=data.get("confidence"),
            audio_duration=data.get("audio_duration"),
            error=data.get("error"),
        )
