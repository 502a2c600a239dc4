"""Async HTTP client for the AssemblyAI speech-to-text API.

WHY: Caption generation needs word-level timestamps for an uploaded
video. AssemblyAI provides them through a three-step REST workflow. This
module hides that workflow behind one client class and translates every
failure into the error category the caller needs to pick a retry policy.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. The client is an
async context manager; each API step is a separate method:
upload_file -> create_transcript -> poll_until_complete -> delete_transcript.
transcribe() runs the first three in order.

RULES:
- Always use the async context manager (async with AssemblyAIClient() as c:)
- Authentication is the raw API key in the "authorization" header
- Polling backs off 2s initial, 1.5x factor, 15s max, 300s total
- 401/403 -> UpstreamAuthError, 429 -> UpstreamRateLimitedError,
  408/504 and client timeouts -> UpstreamTimeoutError,
  connection failures -> UpstreamUnavailableError,
  everything else non-2xx -> UpstreamError
- 2xx bodies missing expected fields or not JSON -> UpstreamError
  ("Malformed response from AssemblyAI")
- Nothing is retried here; retry is the caller's decision
- delete_transcript is best-effort and never raises for HTTP failures
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from pathlib import Path

import httpx

from video_captioner.api.models import TranscriptResult
from video_captioner.config import ASSEMBLYAI_BASE_URL, load_api_key
from video_captioner.errors import (
    UpstreamAuthError,
    UpstreamError,
    UpstreamRateLimitedError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_POLL_INITIAL_INTERVAL_S = 2.0
_POLL_BACKOFF_FACTOR = 1.5
_POLL_MAX_INTERVAL_S = 15.0
_POLL_TIMEOUT_S = 300.0  # 5 minutes

_TIMEOUT_STATUSES = frozenset({408, 504})
_AUTH_STATUSES = frozenset({401, 403})


def _error_message(resp: httpx.Response) -> str:
    """Extract AssemblyAI's {"error": ...} message, falling back to the body."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return resp.text


def _malformed(exc: Exception) -> UpstreamError:
    return UpstreamError("Malformed response from AssemblyAI", "{}: {}".format(
        type(exc).__name__, exc
    ))


def raise_for_upstream_status(resp: httpx.Response) -> None:
    """Raise the categorized upstream error for a non-2xx response."""
    if resp.is_success:
        return

    detail = _error_message(resp)
    status = resp.status_code
    if status in _AUTH_STATUSES:
        raise UpstreamAuthError(
            "Invalid AssemblyAI API key. Please check your API key.", detail
        )
    if status == 429:
        raise UpstreamRateLimitedError(
            "AssemblyAI rate limit exceeded. Please wait and try again.", detail
        )
    if status in _TIMEOUT_STATUSES:
        raise UpstreamTimeoutError(
            "Request timeout. Video file might be too large. Try with a shorter video.",
            detail,
        )
    raise UpstreamError(
        "AssemblyAI API error {}: {}".format(status, detail),
        "Check server logs for more information",
    )


class AssemblyAIClient:
    """Async client for the AssemblyAI pre-recorded transcription API.

    WHY: Provides a typed interface for upload -> create -> poll -> delete,
    with auth, backoff, and error categorization in one place.

    RULES:
    - Use as: async with AssemblyAIClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url defaults to ASSEMBLYAI_BASE_URL from config
    - transport is for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        poll_interval_s: float = _POLL_INITIAL_INTERVAL_S,
        poll_timeout_s: float = _POLL_TIMEOUT_S,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or ASSEMBLYAI_BASE_URL).rstrip("/")
        self._transport = transport
        self._poll_interval_s = poll_interval_s
        self._poll_timeout_s = poll_timeout_s
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> AssemblyAIClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"authorization": self._api_key},
            timeout=httpx.Timeout(300.0, connect=30.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "AssemblyAIClient must be used as an async context manager: "
                "async with AssemblyAIClient() as client: ..."
            )
        return self._client

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send one request, mapping transport failures to upstream errors."""
        client = self._ensure_client()
        try:
            resp = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError(
                "Request timeout. Video file might be too large. Try with a shorter video.",
                str(exc),
            ) from exc
        except httpx.TransportError as exc:
            raise UpstreamUnavailableError(
                "Connection to AssemblyAI API failed. Please check your "
                "internet connection and try again.",
                "Network timeout or connection reset",
            ) from exc
        raise_for_upstream_status(resp)
        return resp

    # ------------------------------------------------------------------
    # Step 1: Upload file
    # ------------------------------------------------------------------

    async def upload_file(
        self,
        file_path: Path,
        on_status: Callable[[str], None] | None = None,
    ) -> str:
        """Upload a local media file and return its private upload URL.

        AssemblyAI takes the raw bytes as the request body of POST /upload
        and answers with ``{"upload_url": ...}``.
        """
        if on_status:
            on_status("Uploading video to AssemblyAI...")

        file_path = Path(file_path)
        logger.info("Uploading video to AssemblyAI: %s", file_path)
        resp = await self._request(
            "POST",
            "/upload",
            content=file_path.read_bytes(),
            headers={"content-type": "application/octet-stream"},
        )
        try:
            return resp.json()["upload_url"]
        except (KeyError, TypeError, ValueError) as exc:
            raise _malformed(exc) from exc

    # ------------------------------------------------------------------
    # Step 2: Create transcript
    # ------------------------------------------------------------------

    async def create_transcript(
        self,
        audio_url: str,
        language_detection: bool = True,
        format_text: bool = True,
        word_boost: list[str] | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> str:
        """Create a transcription job and return its ID.

        RULES:
        - language_detection is on by default (mixed-language speech)
        - format_text adds punctuation and casing to word texts
        - word_boost is only sent when non-empty
        """
        if on_status:
            on_status("Creating transcription job...")

        body: dict = {
            "audio_url": audio_url,
            "language_detection": language_detection,
            "format_text": format_text,
        }
        if word_boost:
            body["word_boost"] = word_boost

        logger.info("Creating transcription job...")
        resp = await self._request("POST", "/transcript", json=body)
        try:
            return resp.json()["id"]
        except (KeyError, TypeError, ValueError) as exc:
            raise _malformed(exc) from exc

    # ------------------------------------------------------------------
    # Step 3: Poll until complete
    # ------------------------------------------------------------------

    async def get_transcript(self, transcript_id: str) -> TranscriptResult:
        resp = await self._request("GET", "/transcript/{}".format(transcript_id))
        try:
            return TranscriptResult.from_dict(resp.json())
        except (KeyError, TypeError, ValueError) as exc:
            raise _malformed(exc) from exc

    async def poll_until_complete(
        self,
        transcript_id: str,
        on_status: Callable[[str], None] | None = None,
    ) -> TranscriptResult:
        """Poll a transcript until it completes or fails.

        HOW: Exponential backoff, starting at the configured interval,
        growing by 1.5x per poll, capped at 15s.

        RULES:
        - Returns the TranscriptResult when status is "completed"
        - Raises UpstreamError when status is "error", or UpstreamTimeoutError
          when that error message mentions a timeout
        - Raises UpstreamTimeoutError once the poll timeout is exceeded
        """
        interval = self._poll_interval_s
        start_time = time.monotonic()

        while True:
            elapsed = time.monotonic() - start_time
            if elapsed > self._poll_timeout_s:
                raise UpstreamTimeoutError(
                    "Transcription timed out. Try with a shorter video.",
                    "Transcript {} not complete after {:.0f}s (limit: {:.0f}s)".format(
                        transcript_id, elapsed, self._poll_timeout_s
                    ),
                )

            result = await self.get_transcript(transcript_id)

            if on_status:
                if result.status == "queued":
                    on_status("Transcription queued...")
                elif result.status == "processing":
                    on_status("Transcribing... (elapsed: {:.0f}s)".format(elapsed))
                elif result.status == "completed":
                    on_status("Transcription complete.")

            if result.status == "completed":
                logger.info("Transcription %s completed", transcript_id)
                return result

            if result.status == "error":
                message = result.error or "Transcription failed"
                if "timeout" in message.lower():
                    raise UpstreamTimeoutError(
                        "Request timeout. Video file might be too large. Try with a shorter video.",
                        message,
                    )
                raise UpstreamError(message)

            await asyncio.sleep(interval)
            interval = min(interval * _POLL_BACKOFF_FACTOR, _POLL_MAX_INTERVAL_S)

    # ------------------------------------------------------------------
    # Step 4: Cleanup
    # ------------------------------------------------------------------

    async def delete_transcript(
        self,
        transcript_id: str,
        on_status: Callable[[str], None] | None = None,
    ) -> None:
        """Delete a transcript from AssemblyAI (best effort)."""
        client = self._ensure_client()
        if on_status:
            on_status("Cleaning up...")

        try:
            resp = await client.delete("/transcript/{}".format(transcript_id))
        except httpx.HTTPError as exc:
            logger.warning("Could not delete transcript %s: %s", transcript_id, exc)
            return
        if not resp.is_success:
            logger.warning(
                "Could not delete transcript %s: HTTP %s", transcript_id, resp.status_code
            )

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------

    async def transcribe(
        self,
        file_path: Path,
        word_boost: list[str] | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> TranscriptResult:
        """Upload, create, and poll in one call."""
        upload_url = await self.upload_file(file_path, on_status=on_status)
        transcript_id = await self.create_transcript(
            upload_url, word_boost=word_boost, on_status=on_status
        )
        return await self.poll_until_complete(transcript_id, on_status=on_status)
