"""OpenAI API client package: async HTTP interface to the transcription endpoint.

WHY: Providers need to upload audio and receive JSON or subtitle text. This
package keeps all HTTP communication behind one async client class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Response JSON is parsed
into typed dataclasses defined in models.py.

RULES:
- All HTTP calls go through OpenAIClient (no direct httpx usage elsewhere)
- Authentication is via Bearer token from config
"""

from auto_subtitles.api.client import OpenAIAPIError, OpenAIClient
from auto_subtitles.api.models import ApiSegment, ApiWord, TranscriptionResponse

__all__ = ["OpenAIAPIError", "OpenAIClient", "ApiSegment", "ApiWord", "TranscriptionResponse"]
