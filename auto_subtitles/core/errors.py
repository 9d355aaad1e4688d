"""Transcription error taxonomy.

WHY: Callers (CLI, service, retry policy) need to know two things about a
failed provider call: what kind of failure it was and whether trying again
could help. Raw OpenAIAPIError / httpx exceptions carry a status code or a
transport failure; this module maps both onto a small, stable set of codes.

HOW: TranscribeError carries code, status_code and retryable. The function
wrap_transcribe_error() converts any provider-side exception into one.

RULES:
- 400 -> INVALID_REQUEST, not retryable
- 401 -> UNAUTHORIZED, not retryable
- 429 -> RATE_LIMITED, retryable
- everything else -> TRANSCRIPTION_FAILED with status 500, retryable
- An existing TranscribeError is returned unchanged
"""

from __future__ import annotations

import enum

import httpx

from auto_subtitles.api.client import OpenAIAPIError


class ErrorCode(str, enum.Enum):
    """Stable failure codes exposed to callers."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"
    TRANSCRIPTION_FAILED = "TRANSCRIPTION_FAILED"


class TranscribeError(Exception):
    """A classified transcription failure.

    Attributes:
        message: Human-readable description.
        code: One of ErrorCode.
        status_code: HTTP-style status (400, 401, 429, 500).
        retryable: True when a later attempt may succeed.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        status_code: int,
        retryable: bool = False,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.code.value} ({self.status_code}): {self.message}"


def _status_of(exc: BaseException) -> int | None:
    if isinstance(exc, OpenAIAPIError):
        return exc.status_code
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


def wrap_transcribe_error(exc: BaseException, model: str | None = None) -> TranscribeError:
    """Classify a provider exception as a TranscribeError.

    Args:
        exc: The exception raised by a provider or the HTTP client.
        model: Optional model ID, included in the message for context.

    Returns:
        A TranscribeError (the same object if exc already is one).
    """
    if isinstance(exc, TranscribeError):
        return exc

    detail = exc.message if isinstance(exc, OpenAIAPIError) else str(exc) or type(exc).__name__
    if model:
        detail = f"{detail} (model: {model})"

    status = _status_of(exc)
    if status == 400:
        return TranscribeError(detail, ErrorCode.INVALID_REQUEST, 400, retryable=False)
    if status == 401:
        return TranscribeError(detail, ErrorCode.UNAUTHORIZED, 401, retryable=False)
    if status == 429:
        return TranscribeError(detail, ErrorCode.RATE_LIMITED, 429, retryable=True)
    return TranscribeError(detail, ErrorCode.TRANSCRIPTION_FAILED, 500, retryable=True)
