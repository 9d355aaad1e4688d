"""Speech-to-text backends behind a common interface.

HOW: TranscriptionProvider (base.py) defines the contract; OpenAIProvider
and LocalWhisperProvider implement it; ProviderRegistry maps model IDs to
providers.
"""

from auto_subtitles.providers.base import (
    ProviderCapabilities,
    TranscriptionOptions,
    TranscriptionProvider,
    TranscriptionResult,
)
from auto_subtitles.providers.local_whisper import LocalWhisperError, LocalWhisperProvider
from auto_subtitles.providers.openai_provider import OpenAIProvider
from auto_subtitles.providers.registry import ProviderRegistry, create_default_registry

__all__ = [
    "LocalWhisperError",
    "LocalWhisperProvider",
    "OpenAIProvider",
    "ProviderCapabilities",
    "ProviderRegistry",
    "TranscriptionOptions",
    "TranscriptionProvider",
    "TranscriptionResult",
    "create_default_registry",
]
