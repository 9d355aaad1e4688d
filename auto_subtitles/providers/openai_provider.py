"""OpenAI hosted transcription (whisper-1 and the gpt-4o transcribe family).

WHY: The hosted models differ in what they return. whisper-1 gives VTT cues
plus word timings (two requests), the gpt-4o models return only JSON text
(sometimes with segments), and the diarize model attributes segments to
speakers. This provider hides those differences behind one result type.

HOW: Each call opens an OpenAIClient (httpx) for the duration of the
request(s). Responses are decoded with TranscriptionResponse.from_dict()
and converted into Segment / Word objects.

RULES:
- whisper-1: verbose_json with word timestamps, then vtt; cues come from the VTT
- gpt-4o models: json; with no segments, one segment spans [0, duration]
- gpt-4o-transcribe-diarize: diarized_json with chunking_strategy=auto and at
  most 4 known speaker names; missing speaker IDs become "unknown"
- Upload limit is 25 MiB; larger files must be chunked by the caller
"""

from __future__ import annotations

import logging

import httpx

from auto_subtitles.api.client import OpenAIClient
from auto_subtitles.api.models import TranscriptionResponse
from auto_subtitles.config import DIARIZE_MODEL, OPENAI_MODELS
from auto_subtitles.core.aligner import parse_vtt_to_segments
from auto_subtitles.core.ir import Segment, Word
from auto_subtitles.providers.base import (
    ProviderCapabilities,
    TranscriptionOptions,
    TranscriptionProvider,
    TranscriptionResult,
)

logger = logging.getLogger(__name__)

OPENAI_MAX_FILE_SIZE_BYTES = 25 * 1024 * 1024
UNKNOWN_SPEAKER = "unknown"

_CAPABILITIES = ProviderCapabilities(
    supported_models=tuple(OPENAI_MODELS),
    supports_word_timestamps=True,
    supports_streaming=False,
    supports_diarization=True,
    max_file_size_bytes=OPENAI_MAX_FILE_SIZE_BYTES,
    supported_audio_formats=("mp3", "mp4", "mpeg", "mpga", "m4a", "ogg", "wav", "webm"),
    native_output_formats=("json", "text", "srt", "vtt", "verbose_json", "diarized_json"),
)


class OpenAIProvider(TranscriptionProvider):
    """Transcription through POST /audio/transcriptions."""

    def __init__(
        self,
        provider_id: str = "openai",
        default_model: str | None = "whisper-1",
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(provider_id, default_model)
        self._api_key = api_key
        self._base_url = base_url
        self._transport = transport

    @property
    def capabilities(self) -> ProviderCapabilities:
        return _CAPABILITIES

    def _client(self) -> OpenAIClient:
        return OpenAIClient(api_key=self._api_key, base_url=self._base_url, transport=self._transport)

    async def transcribe(self, options: TranscriptionOptions) -> TranscriptionResult:
        model = self.resolve_model(options.model)
        language = options.language or "en"
        if model == "whisper-1":
            return await self._transcribe_whisper(options, language)
        return await self._transcribe_json(options, model, language)

    async def _transcribe_whisper(self, options: TranscriptionOptions, language: str) -> TranscriptionResult:
        async with self._client() as client:
            verbose = await client.create_transcription(
                options.file_path,
                model="whisper-1",
                response_format="verbose_json",
                language=language,
                prompt=options.prompt,
                temperature=options.temperature,
                timestamp_granularities=["word"],
            )
            vtt_text = await client.create_transcription(
                options.file_path,
                model="whisper-1",
                response_format="vtt",
                language=language,
                prompt=options.prompt,
                temperature=options.temperature,
            )

        response = TranscriptionResponse.from_dict(verbose)
        segments = parse_vtt_to_segments(vtt_text)
        logger.debug("whisper-1 returned %d cues and %d words", len(segments), len(response.words))
        return TranscriptionResult(
            segments=segments,
            words=[Word(word=w.word, start=w.start, end=w.end) for w in response.words],
            vtt_text=vtt_text,
            text=response.text,
            language=response.language or language,
            duration=response.duration,
        )

    async def _transcribe_json(
        self, options: TranscriptionOptions, model: str, language: str
    ) -> TranscriptionResult:
        async with self._client() as client:
            body = await client.create_transcription(
                options.file_path,
                model=model,
                response_format="json",
                language=language,
                prompt=options.prompt,
                temperature=options.temperature,
            )

        response = TranscriptionResponse.from_dict(body)
        segments = [Segment(start=s.start, end=s.end, text=s.text) for s in response.segments]
        if not segments and response.text.strip():
            segments = [Segment(start=0.0, end=response.duration or 0.0, text=response.text.strip())]
        return TranscriptionResult(
            segments=segments,
            words=[Word(word=w.word, start=w.start, end=w.end) for w in response.words] or None,
            text=response.text,
            language=response.language or language,
            duration=response.duration,
        )

    async def transcribe_diarize(self, options: TranscriptionOptions) -> TranscriptionResult:
        language = options.language or "en"
        async with self._client() as client:
            body = await client.create_transcription(
                options.file_path,
                model=DIARIZE_MODEL,
                response_format="diarized_json",
                language=language,
                prompt=options.prompt,
                temperature=options.temperature,
                chunking_strategy="auto",
                known_speaker_names=options.known_speaker_names,
            )

        response = TranscriptionResponse.from_dict(body)
        speakers: list[str] = []
        segments: list[Segment] = []
        for seg in response.segments:
            speaker = seg.speaker or UNKNOWN_SPEAKER
            if speaker not in speakers:
                speakers.append(speaker)
            segments.append(Segment(start=seg.start, end=seg.end, text=seg.text, speaker=speaker))

        logger.debug("Diarized %d segments across %d speakers", len(segments), len(speakers))
        return TranscriptionResult(
            segments=segments,
            text=response.text,
            language=response.language or language,
            duration=response.duration,
            speakers=speakers,
        )
