"""Provider registry: look up a backend by ID or by model.

WHY: The CLI and service accept a model name ("whisper-1", "large-v3") or
an explicit provider ID. The registry turns either into a concrete provider
without callers knowing which backends are configured.

HOW: register() stores a factory plus its keyword config, instantiates it
once to read capabilities, and records which provider serves each model.
Instances are cached.

RULES:
- The first provider registered for a model owns it
- resolve(model, provider_id): provider_id wins; then model; then the first
  registered provider's default model
- Unknown providers/models raise KeyError listing what is available
- create_default_registry() registers OpenAI when OPENAI_API_KEY is set and
  local whisper when LOCAL_WHISPER_BINARY is set
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from auto_subtitles import config
from auto_subtitles.providers.base import ProviderCapabilities, TranscriptionProvider
from auto_subtitles.providers.local_whisper import LocalWhisperProvider
from auto_subtitles.providers.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

ProviderFactory = Callable[..., TranscriptionProvider]


@dataclass
class _Registration:
    provider_id: str
    factory: ProviderFactory
    config: dict[str, Any] = field(default_factory=dict)
    instance: TranscriptionProvider | None = None


class ProviderRegistry:
    def __init__(self) -> None:
        self._providers: dict[str, _Registration] = {}
        self._model_to_provider: dict[str, str] = {}

    def register(self, provider_id: str, factory: ProviderFactory, **config: Any) -> None:
        """Register a provider factory; ``config`` is passed to it as keywords."""
        entry = _Registration(provider_id=provider_id, factory=factory, config=config)
        entry.instance = factory(provider_id=provider_id, **config)
        self._providers[provider_id] = entry
        for model in entry.instance.capabilities.supported_models:
            self._model_to_provider.setdefault(model, provider_id)
        logger.debug("Registered provider %s", provider_id)

    def get_provider(self, provider_id: str) -> TranscriptionProvider:
        entry = self._providers.get(provider_id)
        if entry is None:
            raise KeyError(
                f'Provider "{provider_id}" is not registered. '
                f"Available providers: {', '.join(self._providers) or 'none'}"
            )
        if entry.instance is None:
            entry.instance = entry.factory(provider_id=provider_id, **entry.config)
        return entry.instance

    def get_provider_for_model(self, model: str) -> TranscriptionProvider:
        provider_id = self._model_to_provider.get(model)
        if provider_id is None:
            raise KeyError(
                f'No provider registered for model "{model}". '
                f"Available models: {', '.join(self._model_to_provider) or 'none'}"
            )
        return self.get_provider(provider_id)

    def resolve(
        self, model: str | None = None, provider_id: str | None = None
    ) -> tuple[TranscriptionProvider, str]:
        """Pick a provider and model for a request."""
        if provider_id:
            provider = self.get_provider(provider_id)
            return provider, provider.resolve_model(model)
        if model:
            return self.get_provider_for_model(model), model
        if not self._providers:
            raise KeyError("No providers registered")
        provider = self.get_provider(next(iter(self._providers)))
        return provider, provider.default_model

    def list_providers(self) -> list[tuple[str, ProviderCapabilities]]:
        return [(pid, self.get_provider(pid).capabilities) for pid in self._providers]

    def list_models(self) -> list[tuple[str, str]]:
        """Return (model, provider_id) pairs in registration order."""
        return list(self._model_to_provider.items())

    @property
    def has_providers(self) -> bool:
        return bool(self._providers)


def create_default_registry() -> ProviderRegistry:
    """Register every provider the environment configures."""
    registry = ProviderRegistry()

    api_key = os.getenv("OPENAI_API_KEY", "").strip()
    if api_key:
        openai_default = config.DEFAULT_MODEL if config.DEFAULT_MODEL in config.OPENAI_MODELS else "whisper-1"
        registry.register(
            "openai",
            OpenAIProvider,
            default_model=openai_default,
            api_key=api_key,
            base_url=config.OPENAI_BASE_URL,
        )

    if config.LOCAL_WHISPER_BINARY:
        local_default = config.DEFAULT_MODEL if config.DEFAULT_MODEL in config.LOCAL_WHISPER_MODELS else "base"
        registry.register(
            "local-whisper",
            LocalWhisperProvider,
            default_model=local_default,
            binary_path=config.LOCAL_WHISPER_BINARY,
            model_dir=config.LOCAL_WHISPER_MODEL_DIR,
            threads=config.LOCAL_WHISPER_THREADS,
            device=config.LOCAL_WHISPER_DEVICE,
        )

    if not registry.has_providers:
        logger.warning("No transcription providers registered. Set OPENAI_API_KEY or LOCAL_WHISPER_BINARY.")
    return registry
