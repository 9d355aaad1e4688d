"""End-to-end transcription of one source into optimized subtitle cues.

WHY: Turning a video URL or file into readable subtitles takes several
stages that must run in a fixed order and clean up after themselves:
audio extraction, chunking for upload limits, provider calls with retry,
timestamp alignment, stitching chunks back onto one timeline, and
readability optimization. This service is the single place that sequences
them, so the CLI (and any batch caller) stays thin.

HOW: transcribe_to_segments() converts the source to a staging mp3, splits
it when the provider has an upload limit, then transcribes chunks strictly
in order. Each chunk after the first gets a continuity prompt built from
the tail of the previous chunk's text. Chunk cues are aligned against
word timings when the provider returns them, then shifted by the total
duration of the chunks before it. The merged cues go through
optimize_segments(). transcribe() adds formatting on top.

RULES:
- state is ACTIVE while a job runs and INACTIVE afterwards, even on failure
- Each chunk file is deleted as soon as its cues are extracted; a finally
  sweep removes chunks not yet reached when a job fails
- The converted mp3 is deleted in a finally block; a chunk marked
  is_original is the converted mp3 and is deleted once
- A text-only result (one cue at [0, 0]) spans the probed chunk duration
- Provider failures surface as TranscribeError; ffmpeg failures as
  AudioProcessingError
- Continuity prompts are the last <= 200 characters of the previous chunk,
  cut at a word boundary, appended to the caller's prompt
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from auto_subtitles import config
from auto_subtitles.audio.chunker import (
    AudioProcessingError,
    convert_to_mp3,
    probe_duration,
    split_audio_on_silence,
)
from auto_subtitles.core.aligner import align_segments
from auto_subtitles.core.errors import wrap_transcribe_error
from auto_subtitles.core.ir import AudioChunk, Segment
from auto_subtitles.core.optimizer import adjust_segment_timecodes, optimize_segments
from auto_subtitles.core.retry import with_retry
from auto_subtitles.formatters import FORMATTERS
from auto_subtitles.providers.base import TranscriptionOptions, TranscriptionProvider, TranscriptionResult
from auto_subtitles.providers.registry import ProviderRegistry, create_default_registry
from auto_subtitles.service.workers import WorkerState

logger = logging.getLogger(__name__)

CONTINUITY_PROMPT_MAX_CHARS = 200

StatusCallback = Callable[[str], None]


def continuity_tail(text: str, max_chars: int = CONTINUITY_PROMPT_MAX_CHARS) -> str:
    """Return the last ``max_chars`` characters of text, starting at a word."""
    flat = " ".join(text.split())
    if len(flat) <= max_chars:
        return flat
    tail = flat[-max_chars:]
    if flat[-max_chars - 1] != " ":
        _, _, tail = tail.partition(" ")
    return tail.strip()


def build_prompt(user_prompt: str | None, previous_text: str | None) -> str | None:
    """Combine the caller's prompt with the continuity tail of the previous chunk."""
    tail = continuity_tail(previous_text) if previous_text else ""
    parts = [p for p in ((user_prompt or "").strip(), tail) if p]
    return " ".join(parts) or None


def span_untimed_cue(segments: list[Segment], chunk_duration: float) -> list[Segment]:
    """Stretch a lone zero-length cue over the whole chunk.

    Text-only responses (gpt-4o ``json``) carry no timing, so the provider
    returns one cue at [0, 0]. The chunk's probed duration is the only
    timing available for it.
    """
    if len(segments) == 1 and segments[0].end <= segments[0].start and chunk_duration > 0:
        return [replace(segments[0], start=0.0, end=chunk_duration)]
    return segments


def _result_text(result: TranscriptionResult) -> str:
    if result.text:
        return result.text
    return " ".join(seg.text for seg in result.segments)


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)


class TranscribeService:
    """One transcription worker.

    Args:
        registry: Provider registry (default: create_default_registry()).
        staging_dir: Directory for converted audio and chunks.
        max_retries: Retries per provider call.
        base_delay_s: First retry delay; doubles per retry.
    """

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        staging_dir: Path | None = None,
        max_retries: int = config.RETRY_MAX_RETRIES,
        base_delay_s: float = config.RETRY_BASE_DELAY_S,
    ) -> None:
        self.id = uuid.uuid4().hex
        self.state = WorkerState.IDLE
        self.registry = registry if registry is not None else create_default_registry()
        self.staging_dir = Path(staging_dir or config.STAGING_DIR)
        self.max_retries = max_retries
        self.base_delay_s = base_delay_s

    async def _call_provider(
        self,
        provider: TranscriptionProvider,
        options: TranscriptionOptions,
    ) -> TranscriptionResult:
        diarize = options.model == config.DIARIZE_MODEL and provider.capabilities.supports_diarization

        async def attempt() -> TranscriptionResult:
            if diarize:
                return await provider.transcribe_diarize(options)
            return await provider.transcribe(options)

        try:
            return await with_retry(attempt, max_retries=self.max_retries, base_delay_s=self.base_delay_s)
        except (ValueError, AudioProcessingError):
            raise
        except Exception as e:
            raise wrap_transcribe_error(e, options.model) from e

    async def _transcribe_chunks(
        self,
        chunks: list[AudioChunk],
        provider: TranscriptionProvider,
        model: str,
        language: str | None,
        prompt: str | None,
        known_speaker_names: list[str] | None,
        status: StatusCallback,
    ) -> list[Segment]:
        segments: list[Segment] = []
        offset = 0.0
        previous_text: str | None = None

        try:
            for chunk in chunks:
                status(f"  Transcribing chunk {chunk.sequence_index + 1}/{len(chunks)}...")
                options = TranscriptionOptions(
                    file_path=chunk.file_path,
                    language=language,
                    prompt=build_prompt(prompt, previous_text),
                    model=model,
                    known_speaker_names=known_speaker_names,
                )
                result = await self._call_provider(provider, options)
                chunk_duration = probe_duration(chunk.file_path)
                cues = span_untimed_cue(result.segments, chunk_duration)
                aligned = align_segments(cues, result.words)
                segments.extend(adjust_segment_timecodes(aligned, offset))
                previous_text = _result_text(result)
                offset += chunk_duration
                if not chunk.is_original:
                    _remove_quietly(Path(chunk.file_path))
        finally:
            for chunk in chunks:
                if not chunk.is_original:
                    _remove_quietly(Path(chunk.file_path))
        return segments

    async def transcribe_to_segments(
        self,
        source: str,
        language: str | None = None,
        model: str | None = None,
        provider_id: str | None = None,
        prompt: str | None = None,
        known_speaker_names: list[str] | None = None,
        on_status: StatusCallback | None = None,
    ) -> list[Segment]:
        """Transcribe a local file or URL into optimized cues.

        Args:
            source: Local path or http(s) URL readable by ffmpeg.
            language: ISO 639-1 code (default config.DEFAULT_LANGUAGE).
            model: Model ID; resolved through the registry.
            provider_id: Force a specific provider.
            prompt: Vocabulary/context prompt passed to every chunk.
            known_speaker_names: Speaker names for the diarization model.
            on_status: Callback receiving human-readable progress lines.

        Returns:
            Optimized segments on the source's timeline.
        """
        status = on_status or (lambda _msg: None)
        language = language or config.DEFAULT_LANGUAGE
        provider, resolved_model = self.registry.resolve(model, provider_id)
        job_id = uuid.uuid4().hex[:12]
        logger.info("Job %s: %s with %s/%s", job_id, source, provider.provider_id, resolved_model)

        self.state = WorkerState.ACTIVE
        converted: Path | None = None
        try:
            status("Extracting audio...")
            converted = convert_to_mp3(source, self.staging_dir)

            max_bytes = provider.capabilities.max_file_size_bytes
            if max_bytes:
                status("Checking upload size...")
                chunks = split_audio_on_silence(
                    converted,
                    staging_dir=self.staging_dir,
                    max_chunk_bytes=min(max_bytes, config.MAX_CHUNK_SIZE_BYTES),
                    job_id=job_id,
                )
            else:
                chunks = [AudioChunk(file_path=converted, sequence_index=0, is_original=True)]

            raw = await self._transcribe_chunks(
                chunks, provider, resolved_model, language, prompt, known_speaker_names, status
            )
        finally:
            if converted is not None:
                _remove_quietly(converted)
            self.state = WorkerState.INACTIVE

        status(f"Optimizing {len(raw)} cues...")
        return optimize_segments(raw, model=resolved_model, language=language)

    async def transcribe(
        self,
        source: str,
        output_format: str = "vtt",
        speaker_labels: bool = False,
        **kwargs,
    ) -> str:
        """Transcribe and render in one of FORMATTERS' formats.

        Raises:
            ValueError: If output_format is unknown (checked before any work).
        """
        if output_format not in FORMATTERS:
            raise ValueError(
                f"Unknown format '{output_format}'. Available formats: {', '.join(sorted(FORMATTERS))}"
            )
        segments = await self.transcribe_to_segments(source, **kwargs)
        output = FORMATTERS[output_format]().format(segments, speaker_labels=speaker_labels)[0]
        return output.content


