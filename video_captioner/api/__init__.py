"""AssemblyAI client package: async HTTP interface to the transcription service.

WHY: Caption generation needs word-level timestamps. This package keeps
all speech-to-text HTTP traffic behind one client class.

HOW: client.py wraps httpx.AsyncClient; models.py parses responses into
typed dataclasses.

RULES:
- All HTTP calls to AssemblyAI go through AssemblyAIClient
- HTTP failures are translated into video_captioner.errors categories
"""

from video_captioner.api.client import AssemblyAIClient
from video_captioner.api.models import AssemblyAIWord, TranscriptResult

__all__ = ["AssemblyAIClient", "AssemblyAIWord", "TranscriptResult"]
