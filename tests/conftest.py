"""Shared test fixtures for the video_captioner test suite.

WHY: Most test modules need the same word streams and the same fake
AssemblyAI service. Centralizing them keeps timings consistent across
segmenter, resolver, pipeline, and API tests.

HOW: Plain pytest fixtures for word streams, plus a FakeAssemblyAI class
that serves the AssemblyAI v2 endpoints through httpx.MockTransport and
records every request it sees.

RULES:
- TEN_WORDS: 10 contiguous words of 0.5s each, from 0.0s to 5.0s
- Millisecond records mirror the AssemblyAI word shape exactly
- The fake service never touches the network
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest

from video_captioner.api.client import AssemblyAIClient
from video_captioner.core.ir import Word

TEN_WORD_TEXTS = [
    "Welcome", "to", "the", "caption", "studio", "where", "every", "word",
    "gets", "timed.",
]

TEN_WORDS: List[Word] = [
    Word(text=text, start_s=0.5 * i, end_s=0.5 * (i + 1))
    for i, text in enumerate(TEN_WORD_TEXTS)
]

TEN_WORD_RECORDS: List[Dict[str, Any]] = [
    {"text": text, "start": 500 * i, "end": 500 * (i + 1), "confidence": 0.9, "speaker": None}
    for i, text in enumerate(TEN_WORD_TEXTS)
]

BASE_URL = "https://assemblyai.test/v2"


@pytest.fixture
def ten_words() -> List[Word]:
    return list(TEN_WORDS)


@pytest.fixture
def ten_word_records() -> List[Dict[str, Any]]:
    return [dict(r) for r in TEN_WORD_RECORDS]


class FakeAssemblyAI:
    """In-memory stand-in for the AssemblyAI v2 REST API.

    Attributes:
        words: Word records returned once the transcript completes.
        statuses: Status sequence returned by successive polls; the last
            one repeats.
        failures: Optional {path suffix: httpx.Response or Exception} to
            inject failures on a specific endpoint.
        requests: Every request received, in order.
    """

    def __init__(
        self,
        words: Optional[List[Dict[str, Any]]] = None,
        statuses: Optional[List[str]] = None,
        failures: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> None:
        self.words = list(TEN_WORD_RECORDS) if words is None else words
        self.statuses = statuses or ["queued", "processing", "completed"]
        self.failures = failures or {}
        self.error_message = error_message
        self.requests: List[httpx.Request] = []
        self._polls = 0

    def _transcript(self, status: str) -> Dict[str, Any]:
        body = {"id": "tr-123", "status": status}
        if status == "completed":
            body.update({
                "words": self.words,
                "text": " ".join(w["text"] for w in self.words),
                "language_code": "en",
                "confidence": 0.93,
                "audio_duration": 5.0,
            })
        if status == "error":
            body["error"] = self.error_message
        return body

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        for suffix, failure in self.failures.items():
            if request.method != "DELETE" and path.endswith(suffix):
                if isinstance(failure, Exception):
                    raise failure
                return failure

        if request.method == "POST" and path.endswith("/upload"):
            return httpx.Response(200, json={"upload_url": "https://cdn.assemblyai.test/abc"})
        if request.method == "POST" and path.endswith("/transcript"):
            return httpx.Response(200, json={"id": "tr-123", "status": "queued"})
        if request.method == "GET" and "/transcript/" in path:
            status = self.statuses[min(self._polls, len(self.statuses) - 1)]
            self._polls += 1
            return httpx.Response(200, json=self._transcript(status))
        if request.method == "DELETE" and "/transcript/" in path:
            return httpx.Response(200, json={"id": "tr-123", "status": "completed"})
        return httpx.Response(404, json={"error": "not found"})

    def client(self, **kwargs) -> AssemblyAIClient:
        kwargs.setdefault("poll_interval_s", 0)
        return AssemblyAIClient(
            api_key="test-key",
            base_url=BASE_URL,
            transport=httpx.MockTransport(self.handler),
            **kwargs,
        )

    def paths(self) -> List[str]:
        return ["{} {}".format(r.method, r.url.path) for r in self.requests]


@pytest.fixture
def fake_service() -> FakeAssemblyAI:
    return FakeAssemblyAI()


@pytest.fixture
def make_service():
    """Factory for FakeAssemblyAI instances with custom words or failures."""
    return FakeAssemblyAI


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "talk.mp4"
    path.write_bytes(b"fake video bytes")
    return path
