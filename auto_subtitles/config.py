"""Configuration constants, model catalogues, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Model lists, supported file formats, and API and
retry defaults are plain data structures, not buried in logic, so both
humans and coding agents can modify them confidently.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values read from the environment with defaults. The
load_api_key() function provides a clear error when the key is missing.

RULES:
- API keys are loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
- VALID_TRANSCRIBE_MODELS lists every model some built-in provider serves
- SUPPORTED_OUTPUT_FORMATS must match the keys of formatters.FORMATTERS
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# OpenAI API
# ---------------------------------------------------------------------------

OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
DEFAULT_MODEL = os.getenv("DEFAULT_MODEL", "whisper-1")
DEFAULT_PROVIDER = os.getenv("DEFAULT_PROVIDER") or None
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "en")

OPENAI_MODELS: list[str] = [
    "whisper-1",
    "gpt-4o-transcribe",
    "gpt-4o-mini-transcribe",
    "gpt-4o-mini-transcribe-2025-12-15",
    "gpt-4o-transcribe-diarize",
]

DIARIZE_MODEL = "gpt-4o-transcribe-diarize"

LOCAL_WHISPER_MODELS: list[str] = [
    "tiny", "tiny.en", "base", "base.en", "small", "small.en",
    "medium", "medium.en", "large", "large-v2", "large-v3", "turbo",
]

VALID_TRANSCRIBE_MODELS: list[str] = OPENAI_MODELS + LOCAL_WHISPER_MODELS

# ---------------------------------------------------------------------------
# Files and formats
# ---------------------------------------------------------------------------

SUPPORTED_AUDIO_FORMATS: set[str] = {
    ".aac", ".flac", ".m4a", ".mp3", ".mp4", ".mpeg", ".mpga",
    ".mov", ".mkv", ".ogg", ".wav", ".webm",
}
"""Input extensions accepted by the CLI (lowercase, with dot). Video is
reduced to audio by ffmpeg before transcription."""

SUPPORTED_OUTPUT_FORMATS: list[str] = ["vtt", "srt", "json", "text"]

STAGING_DIR = Path(os.getenv("STAGING_DIR", os.path.join(tempfile.gettempdir(), "auto-subtitles")))
MAX_CHUNK_SIZE_BYTES = int(os.getenv("MAX_CHUNK_SIZE_BYTES", str(25 * 1024 * 1024)))

# ---------------------------------------------------------------------------
# Retry, quality gate, logging
# ---------------------------------------------------------------------------

RETRY_MAX_RETRIES = int(os.getenv("RETRY_MAX_RETRIES", "3"))
RETRY_BASE_DELAY_S = float(os.getenv("RETRY_BASE_DELAY_S", "1.0"))
QUALITY_THRESHOLD = float(os.getenv("QUALITY_THRESHOLD", "70"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ---------------------------------------------------------------------------
# Local whisper CLI
# ---------------------------------------------------------------------------

LOCAL_WHISPER_BINARY = os.getenv("LOCAL_WHISPER_BINARY") or None
LOCAL_WHISPER_MODEL_DIR = os.getenv("LOCAL_WHISPER_MODELS") or None
LOCAL_WHISPER_THREADS = int(os.getenv("LOCAL_WHISPER_THREADS", "4"))
LOCAL_WHISPER_DEVICE = os.getenv("LOCAL_WHISPER_DEVICE", "auto")


def load_api_key() -> str:
    """Load the OpenAI API key from the environment.

    WHY: The key is required for every OpenAI call. Loading it from the
    environment (via .env) keeps it out of source code.

    HOW: Reads OPENAI_API_KEY from os.environ (populated by python-dotenv).

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("OPENAI_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "OpenAI API key not configured. "
            "Add OPENAI_API_KEY to the .env file or the environment."
        )
    return key
