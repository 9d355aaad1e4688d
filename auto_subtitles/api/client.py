"""Async HTTP client for the OpenAI audio transcription endpoint.

WHY: Providers need to post an audio file with model/format options and get
back either JSON (json, verbose_json, diarized_json) or subtitle text (vtt,
srt, text). This module encapsulates the HTTP details (auth, multipart
encoding, timeouts, error wrapping) behind a single client class so the
provider code only deals with options and parsed results.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. OpenAIClient is an async
context manager: enter it to get an authenticated client, exit to close the
connection pool. One method, create_transcription(), maps to
POST /audio/transcriptions.

RULES:
- Always use the async context manager (async with OpenAIClient(...) as client:)
- api_key defaults to load_api_key() from .env
- Non-2xx responses raise OpenAIAPIError with the status code and body
- JSON formats return a dict; text formats return the raw body string
- An optional httpx transport can be injected (tests use httpx.MockTransport)
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from auto_subtitles.config import OPENAI_BASE_URL, load_api_key

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

JSON_FORMATS = {"json", "verbose_json", "diarized_json"}
TEXT_FORMATS = {"text", "srt", "vtt"}
MAX_KNOWN_SPEAKERS = 4

_TIMEOUT = httpx.Timeout(600.0, connect=30.0)


class OpenAIAPIError(Exception):
    """Raised when the OpenAI API returns an error response.

    WHY: Callers need a typed exception to distinguish API rejections from
    network errors so the error taxonomy can map status codes.

    HOW: Wraps the HTTP status code and response body.

    RULES:
    - Always include status_code and message
    - message is the response body text or a summary
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"OpenAI API error {status_code}: {message}")


class OpenAIClient:
    """Async client for POST /audio/transcriptions.

    WHY: Provides a clean, typed interface to the transcription endpoint
    with auth and error wrapping handled once.

    HOW: Wraps httpx.AsyncClient with Bearer token auth. Use as an async
    context manager to ensure the HTTP connection pool is closed.

    RULES:
    - Use as: async with OpenAIClient() as client: ...
    - base_url defaults to OPENAI_BASE_URL from config
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or OPENAI_BASE_URL).rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> OpenAIClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=_TIMEOUT,
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
                "OpenAIClient must be used as an async context manager: "
                "async with OpenAIClient() as client: ..."
            )
        return self._client

    async def create_transcription(
        self,
        file_path: Path,
        model: str,
        response_format: str = "json",
        language: str | None = None,
        prompt: str | None = None,
        temperature: float | None = None,
        timestamp_granularities: list[str] | None = None,
        chunking_strategy: str | None = None,
        known_speaker_names: list[str] | None = None,
    ) -> dict | str:
        """Transcribe one audio file.

        WHY: Every provider call (whisper verbose_json, whisper vtt, gpt-4o
        json, diarized_json) is the same multipart POST with different form
        fields.

        HOW: Builds the multipart form, omitting unset options, posts the
        file, and decodes the body according to response_format.

        RULES:
        - known_speaker_names is truncated to the first 4 names
        - list-valued fields are sent as repeated "name[]" form fields
        - Raises OpenAIAPIError on non-2xx responses

        Args:
            file_path: Audio file to upload.
            model: Model ID (e.g. "whisper-1").
            response_format: One of JSON_FORMATS or TEXT_FORMATS.
            language: ISO 639-1 language hint.
            prompt: Optional decoding prompt (vocabulary, continuity text).
            temperature: Optional sampling temperature.
            timestamp_granularities: e.g. ["word"] (verbose_json only).
            chunking_strategy: e.g. "auto" (diarization model).
            known_speaker_names: Optional speaker names for diarization.

        Returns:
            Parsed JSON dict for JSON formats, raw text otherwise.
        """
        client = self._ensure_client()
        file_path = Path(file_path)

        data: dict = {"model": model, "response_format": response_format}
        if language:
            data["language"] = language
        if prompt:
            data["prompt"] = prompt
        if temperature is not None:
            data["temperature"] = str(temperature)
        if timestamp_granularities:
            data["timestamp_granularities[]"] = list(timestamp_granularities)
        if chunking_strategy:
            data["chunking_strategy"] = chunking_strategy
        if known_speaker_names:
            data["known_speaker_names[]"] = list(known_speaker_names[:MAX_KNOWN_SPEAKERS])

        logger.debug("POST /audio/transcriptions model=%s format=%s file=%s",
                     model, response_format, file_path.name)

        with open(file_path, "rb") as f:
            resp = await client.post(
                "/audio/transcriptions",
                data=data,
                files={"file": (file_path.name, f)},
            )

        if resp.status_code not in (200, 201):
            raise OpenAIAPIError(resp.status_code, resp.text)

        if response_format in JSON_FORMATS:
            return resp.json()
        return resp.text
