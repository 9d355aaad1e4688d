"""Abstract transcription provider and its option/result types.

WHY: The pipeline must not care whether speech is recognized by a hosted
API or a local whisper binary. Each backend differs in models, upload
limits and whether it returns word timings, so the service asks the
provider what it can do (capabilities) instead of branching on its name.

HOW: TranscriptionProvider is an ABC. Subclasses implement
``capabilities`` and ``transcribe()``; diarization is optional and the
base implementation refuses it. Model resolution lives here so every
provider validates model IDs the same way.

RULES:
- transcribe() returns a TranscriptionResult with segments in time order
- default_model falls back to the first supported model
- resolve_model(None) returns default_model; unsupported models raise ValueError
- transcribe_diarize() raises NotImplementedError unless the provider
  declares supports_diarization
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from auto_subtitles.core.ir import Segment, Word


@dataclass(frozen=True)
class ProviderCapabilities:
    """What a provider can do.

    Attributes:
        supported_models: Model IDs the provider serves.
        supports_word_timestamps: True when results may include words.
        supports_streaming: True when partial text can be streamed.
        supports_diarization: True when transcribe_diarize() is available.
        max_file_size_bytes: Upload limit, or None for no limit.
        supported_audio_formats: Accepted input extensions (no dot).
        native_output_formats: response_format values the backend offers.
    """

    supported_models: tuple[str, ...]
    supports_word_timestamps: bool = False
    supports_streaming: bool = False
    supports_diarization: bool = False
    max_file_size_bytes: int | None = None
    supported_audio_formats: tuple[str, ...] = ()
    native_output_formats: tuple[str, ...] = ()


@dataclass
class TranscriptionOptions:
    """One transcription request."""

    file_path: Path
    language: str | None = None
    prompt: str | None = None
    model: str | None = None
    temperature: float | None = None
    known_speaker_names: list[str] | None = None


@dataclass
class TranscriptionResult:
    """Cues (and optionally words) recognized in one audio file.

    RULES:
    - segments are relative to the start of the submitted file
    - words is None when the backend gave no word timings
    - speakers lists distinct speaker IDs in first-appearance order
    """

    segments: list[Segment] = field(default_factory=list)
    words: list[Word] | None = None
    vtt_text: str | None = None
    text: str | None = None
    language: str | None = None
    duration: float | None = None
    speakers: list[str] = field(default_factory=list)


class TranscriptionProvider(ABC):
    """Base class for speech-to-text backends.

    To add a backend:
    1. Subclass TranscriptionProvider in providers/
    2. Implement capabilities and transcribe()
    3. Register a factory in registry.create_default_registry()
    """

    def __init__(self, provider_id: str, default_model: str | None = None) -> None:
        self._provider_id = provider_id
        self._default_model = default_model

    @property
    def provider_id(self) -> str:
        return self._provider_id

    @property
    @abstractmethod
    def capabilities(self) -> ProviderCapabilities:
        """Static description of the backend."""

    @property
    def default_model(self) -> str:
        return self._default_model or self.capabilities.supported_models[0]

    def supports_model(self, model: str) -> bool:
        return model in self.capabilities.supported_models

    def resolve_model(self, requested: str | None = None) -> str:
        """Return the model to use for a request.

        Raises:
            ValueError: If ``requested`` is not served by this provider.
        """
        if not requested:
            return self.default_model
        if not self.supports_model(requested):
            raise ValueError(
                f'Model "{requested}" is not supported by provider "{self.provider_id}". '
                f"Supported models: {', '.join(self.capabilities.supported_models)}"
            )
        return requested

    @abstractmethod
    async def transcribe(self, options: TranscriptionOptions) -> TranscriptionResult:
        """Transcribe one audio file."""

    async def transcribe_diarize(self, options: TranscriptionOptions) -> TranscriptionResult:
        """Transcribe with speaker attribution on every segment."""
        raise NotImplementedError(
            f'Diarization is not supported by provider "{self.provider_id}". '
            "Check capabilities.supports_diarization before calling this method."
        )
