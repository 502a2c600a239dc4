"""Failure taxonomy for caption generation.

WHY: Callers (HTTP API, CLI) must decide between retrying and aborting.
That decision depends on *why* an operation failed: a bad request, a
rejected API key, a rate limit, a slow upstream, or simply a silent video.
One exception class per category makes the decision a type check.

HOW: Every failure derives from CaptionError and carries a category, an
HTTP-equivalent status code, a human-readable message, and optional
details. Upstream failures share the UpstreamError base.

RULES:
- Nothing in this package retries; the category tells the caller whether to
- The status codes are the ones the HTTP API responds with
- Core pure functions raise ValueError for precondition violations instead
"""

from __future__ import annotations

import enum
from typing import Optional


class ErrorCategory(str, enum.Enum):
    """Distinguishable failure categories exposed to callers."""

    INVALID_INPUT = "invalid_input"
    UPSTREAM_AUTH = "upstream_auth"
    UPSTREAM_RATE_LIMITED = "upstream_rate_limited"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_FAILURE = "upstream_failure"
    EMPTY_RESULT = "empty_result"
    STORAGE_FAILURE = "storage_failure"
    CONFIGURATION = "configuration"


class CaptionError(Exception):
    """Base class for all structured caption-generation failures.

    Attributes:
        message: Human-readable description shown to the user.
        details: Optional extra context (upstream body, exception text).
    """

    category = ErrorCategory.UPSTREAM_FAILURE
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"error": self.message, "category": self.category.value}
        if self.details:
            body["details"] = self.details
        return body


class InvalidInputError(CaptionError):
    """Malformed request, missing field, or unsupported file type."""

    category = ErrorCategory.INVALID_INPUT
    status_code = 400


class VideoNotFoundError(InvalidInputError):
    """The referenced upload does not exist on disk."""

    status_code = 404


class UpstreamError(CaptionError):
    """Generic failure reported by the transcription service."""

    category = ErrorCategory.UPSTREAM_FAILURE
    status_code = 500


class UpstreamAuthError(UpstreamError):
    category = ErrorCategory.UPSTREAM_AUTH
    status_code = 401


class UpstreamRateLimitedError(UpstreamError):
    category = ErrorCategory.UPSTREAM_RATE_LIMITED
    status_code = 429


class UpstreamTimeoutError(UpstreamError):
    category = ErrorCategory.UPSTREAM_TIMEOUT
    status_code = 408


class UpstreamUnavailableError(UpstreamError):
    """Connection to the transcription service failed or was reset."""

    category = ErrorCategory.UPSTREAM_UNAVAILABLE
    status_code = 503


class EmptyResultError(CaptionError):
    """The transcription succeeded but produced zero words."""

    category = ErrorCategory.EMPTY_RESULT
    status_code = 400


class StorageError(CaptionError):
    """Writing the uploaded file to local disk failed."""

    category = ErrorCategory.STORAGE_FAILURE
    status_code = 500


class ConfigurationError(CaptionError):
    category = ErrorCategory.CONFIGURATION
    status_code = 500
