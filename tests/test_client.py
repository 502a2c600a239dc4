"""Tests for the AssemblyAI async client.

WHY: Every upstream failure must reach the caller with the right
category, otherwise the front end retries a bad API key or gives up on a
rate limit. The happy path must also hit the endpoints in the documented
order with the documented bodies.

HOW: FakeAssemblyAI (conftest.py) serves the REST endpoints through
httpx.MockTransport. Failures are injected per endpoint. Async calls run
through asyncio.run() so no async test plugin is needed.

RULES:
- The network is never touched
- Polling runs with a zero interval so tests do not sleep
"""

import asyncio
import json

import httpx
import pytest

from video_captioner.api.client import AssemblyAIClient, raise_for_upstream_status
from video_captioner.errors import (
    ConfigurationError,
    ErrorCategory,
    UpstreamAuthError,
    UpstreamError,
    UpstreamRateLimitedError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)


def _transcribe(service, video_file, **client_kwargs):
    async def _run():
        async with service.client(**client_kwargs) as client:
            return await client.transcribe(video_file)

    return asyncio.run(_run())


class TestTranscribeFlow:
    def test_upload_create_poll(self, fake_service, video_file):
        result = _transcribe(fake_service, video_file)

        assert result.status == "completed"
        assert result.id == "tr-123"
        assert len(result.words) == 10
        assert result.words[0].text == "Welcome"
        assert result.words[0].end == 500
        assert result.language_code == "en"
        assert fake_service.paths() == [
            "POST /v2/upload",
            "POST /v2/transcript",
            "GET /v2/transcript/tr-123",
            "GET /v2/transcript/tr-123",
            "GET /v2/transcript/tr-123",
        ]

    def test_upload_sends_raw_bytes_with_key(self, fake_service, video_file):
        _transcribe(fake_service, video_file)

        upload = fake_service.requests[0]
        assert upload.content == b"fake video bytes"
        assert upload.headers["authorization"] == "test-key"

    def test_create_transcript_body(self, fake_service, video_file):
        _transcribe(fake_service, video_file)

        body = json.loads(fake_service.requests[1].content)
        assert body == {
            "audio_url": "https://cdn.assemblyai.test/abc",
            "language_detection": True,
            "format_text": True,
        }

    def test_word_boost_sent_when_given(self, fake_service):
        async def _run():
            async with fake_service.client() as client:
                return await client.create_transcript("https://x", word_boost=["Remotion"])

        assert asyncio.run(_run()) == "tr-123"
        body = json.loads(fake_service.requests[0].content)
        assert body["word_boost"] == ["Remotion"]

    def test_status_callback(self, fake_service, video_file):
        messages = []

        async def _run():
            async with fake_service.client() as client:
                await client.transcribe(video_file, on_status=messages.append)

        asyncio.run(_run())
        assert messages[0] == "Uploading video to AssemblyAI..."
        assert "Transcription queued..." in messages
        assert messages[-1] == "Transcription complete."

    def test_delete_transcript(self, fake_service):
        async def _run():
            async with fake_service.client() as client:
                await client.delete_transcript("tr-123")

        asyncio.run(_run())
        assert fake_service.paths() == ["DELETE /v2/transcript/tr-123"]


class TestErrorMapping:
    @pytest.mark.parametrize(
        "status,error_cls,category",
        [
            (401, UpstreamAuthError, ErrorCategory.UPSTREAM_AUTH),
            (403, UpstreamAuthError, ErrorCategory.UPSTREAM_AUTH),
            (429, UpstreamRateLimitedError, ErrorCategory.UPSTREAM_RATE_LIMITED),
            (408, UpstreamTimeoutError, ErrorCategory.UPSTREAM_TIMEOUT),
            (504, UpstreamTimeoutError, ErrorCategory.UPSTREAM_TIMEOUT),
            (500, UpstreamError, ErrorCategory.UPSTREAM_FAILURE),
            (400, UpstreamError, ErrorCategory.UPSTREAM_FAILURE),
        ],
    )
    def test_upload_status_codes(self, make_service, video_file, status, error_cls, category):
        service = make_service(
            failures={"/upload": httpx.Response(status, json={"error": "nope"})}
        )
        with pytest.raises(error_cls) as exc_info:
            _transcribe(service, video_file)
        assert exc_info.value.category is category

    def test_auth_message(self, make_service, video_file):
        service = make_service(
            failures={"/transcript": httpx.Response(401, json={"error": "Invalid API key"})}
        )
        with pytest.raises(UpstreamAuthError) as exc_info:
            _transcribe(service, video_file)
        assert exc_info.value.message == "Invalid AssemblyAI API key. Please check your API key."
        assert exc_info.value.details == "Invalid API key"

    def test_generic_error_includes_upstream_message(self, make_service, video_file):
        service = make_service(
            failures={"/tr-123": httpx.Response(500, json={"error": "boom"})}
        )
        with pytest.raises(UpstreamError) as exc_info:
            _transcribe(service, video_file)
        assert exc_info.value.message == "AssemblyAI API error 500: boom"

    def test_client_timeout(self, make_service, video_file):
        service = make_service(failures={"/upload": httpx.ReadTimeout("timed out")})
        with pytest.raises(UpstreamTimeoutError):
            _transcribe(service, video_file)

    def test_connection_failure(self, make_service, video_file):
        service = make_service(failures={"/upload": httpx.ConnectError("refused")})
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            _transcribe(service, video_file)
        assert exc_info.value.status_code == 503

    def test_transcript_error_status(self, make_service, video_file):
        service = make_service(statuses=["queued", "error"], error_message="Audio too short")
        with pytest.raises(UpstreamError, match="Audio too short"):
            _transcribe(service, video_file)

    def test_poll_timeout(self, make_service, video_file):
        service = make_service(statuses=["processing"])
        with pytest.raises(UpstreamTimeoutError, match="timed out"):
            _transcribe(service, video_file, poll_timeout_s=-1)

    @pytest.mark.parametrize(
        "failure",
        [httpx.Response(404, json={"error": "not found"}), httpx.ConnectError("reset")],
    )
    def test_delete_failure_is_swallowed(self, failure, caplog):
        def handler(request):
            if isinstance(failure, Exception):
                raise failure
            return failure

        async def _run():
            client = AssemblyAIClient(
                api_key="test-key",
                base_url="https://assemblyai.test/v2",
                transport=httpx.MockTransport(handler),
            )
            async with client:
                await client.delete_transcript("tr-123")

        asyncio.run(_run())
        assert "Could not delete transcript tr-123" in caplog.text

    def test_non_json_error_body(self):
        resp = httpx.Response(502, text="Bad Gateway")
        with pytest.raises(UpstreamError, match="Bad Gateway"):
            raise_for_upstream_status(resp)

    def test_success_passes(self):
        raise_for_upstream_status(httpx.Response(200, json={}))


class TestClientSetup:
    def test_requires_context_manager(self, fake_service):
        client = fake_service.client()
        with pytest.raises(RuntimeError, match="async context manager"):
            asyncio.run(client.get_transcript("tr-123"))

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("ASSEMBLYAI_API_KEY", raising=False)
        with pytest.raises(ConfigurationError, match="ASSEMBLYAI_API_KEY"):
            AssemblyAIClient()


class TestMalformedResponses:
    @pytest.mark.parametrize(
        "suffix,response",
        [
            ("/upload", httpx.Response(200, json={})),
            ("/upload", httpx.Response(200, text="<html>ok</html>")),
            ("/transcript", httpx.Response(200, json={"status": "queued"})),
            ("/transcript", httpx.Response(200, json=["tr-123"])),
            ("/tr-123", httpx.Response(200, json={"id": "tr-123"})),
            ("/tr-123", httpx.Response(200, json={
                "id": "tr-123", "status": "completed", "words": [{"text": "hi"}],
            })),
        ],
    )
    def test_malformed_body_is_upstream_error(self, make_service, video_file, suffix, response):
        service = make_service(failures={suffix: response})
        with pytest.raises(UpstreamError) as exc_info:
            _transcribe(service, video_file)

        assert type(exc_info.value) is UpstreamError
        assert exc_info.value.message == "Malformed response from AssemblyAI"
        assert exc_info.value.category is ErrorCategory.UPSTREAM_FAILURE

    def test_error_status_with_timeout_message(self, make_service, video_file):
        service = make_service(
            statuses=["processing", "error"],
            error_message="Transcoding timeout while reading the file",
        )
        with pytest.raises(UpstreamTimeoutError) as exc_info:
            _transcribe(service, video_file)
        assert exc_info.value.status_code == 408
        assert exc_info.value.details == "Transcoding timeout while reading the file"
