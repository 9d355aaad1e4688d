"""Local transcription through the openai-whisper command-line tool.

WHY: Some recordings cannot leave the machine, and offline runs avoid API
cost. The whisper CLI produces the same segment/word structure as the hosted
verbose_json format, so it slots in behind the provider interface.

HOW: Runs ``whisper <file> --output_format json --word_timestamps True``
via subprocess (in a worker thread so the event loop stays free), reads the
``<stem>.json`` file written next to the input, converts it, and deletes it.

RULES:
- No upload limit; the service never chunks for this provider
- --device is passed only when it is not "auto"
- The JSON output file is always removed, even when parsing fails
- A non-zero exit, a timeout or a missing output file raises a retryable
  LocalWhisperError (a TranscribeError); a missing binary is not retried
"""

from __future__ import annotations

import asyncio
import json
import logging
import subprocess
from pathlib import Path

from auto_subtitles.config import LOCAL_WHISPER_MODELS
from auto_subtitles.core.errors import ErrorCode, TranscribeError
from auto_subtitles.core.ir import Segment, Word
from auto_subtitles.providers.base import (
    ProviderCapabilities,
    TranscriptionOptions,
    TranscriptionProvider,
    TranscriptionResult,
)

logger = logging.getLogger(__name__)

LOCAL_WHISPER_TIMEOUT_S = 600

_CAPABILITIES = ProviderCapabilities(
    supported_models=tuple(LOCAL_WHISPER_MODELS),
    supports_word_timestamps=True,
    supports_streaming=False,
    supports_diarization=False,
    max_file_size_bytes=None,
    supported_audio_formats=("flac", "mp3", "mp4", "mpeg", "mpga", "ogg", "wav", "webm", "m4a"),
    native_output_formats=("json", "text", "srt", "vtt", "verbose_json"),
)


class LocalWhisperError(TranscribeError):
    """Raised when the whisper CLI fails or produces no output.

    A TRANSCRIPTION_FAILED error, retryable unless the binary is missing.
    """

    def __init__(self, message: str, retryable: bool = True) -> None:
        super().__init__(message, ErrorCode.TRANSCRIPTION_FAILED, 500, retryable=retryable)


class LocalWhisperProvider(TranscriptionProvider):
    def __init__(
        self,
        provider_id: str = "local-whisper",
        default_model: str | None = "base",
        binary_path: str = "whisper",
        model_dir: str | None = None,
        threads: int = 4,
        device: str = "auto",
    ) -> None:
        super().__init__(provider_id, default_model or "base")
        self.binary_path = binary_path
        self.model_dir = model_dir
        self.threads = threads
        self.device = device

    @property
    def capabilities(self) -> ProviderCapabilities:
        return _CAPABILITIES

    def build_command(self, file_path: Path, model: str, language: str, prompt: str | None = None) -> list[str]:
        """Return the whisper argv for one file."""
        args = [
            self.binary_path, str(file_path),
            "--model", model,
            "--language", language,
            "--output_format", "json",
            "--output_dir", str(file_path.parent),
            "--word_timestamps", "True",
            "--threads", str(self.threads),
        ]
        if self.device != "auto":
            args += ["--device", self.device]
        if self.model_dir:
            args += ["--model_dir", self.model_dir]
        if prompt:
            args += ["--initial_prompt", prompt]
        return args

    def _run_whisper(self, args: list[str]) -> None:
        logger.info("Running local whisper: %s", " ".join(args))
        try:
            result = subprocess.run(args, capture_output=True, text=True, timeout=LOCAL_WHISPER_TIMEOUT_S)
        except FileNotFoundError as e:
            raise LocalWhisperError(f"{self.binary_path} not found on PATH", retryable=False) from e
        except subprocess.TimeoutExpired as e:
            raise LocalWhisperError(f"whisper timed out after {LOCAL_WHISPER_TIMEOUT_S}s") from e
        if result.returncode != 0:
            raise LocalWhisperError(f"whisper failed (exit {result.returncode}): {result.stderr.strip()[-500:]}")

    async def transcribe(self, options: TranscriptionOptions) -> TranscriptionResult:
        model = self.resolve_model(options.model)
        language = options.language or "en"
        file_path = Path(options.file_path)
        output_path = file_path.with_suffix(".json")

        await asyncio.to_thread(self._run_whisper, self.build_command(file_path, model, language, options.prompt))

        if not output_path.exists():
            raise LocalWhisperError(f"Whisper did not produce expected output file: {output_path}")
        try:
            raw = json.loads(output_path.read_text(encoding="utf-8"))
        finally:
            try:
                output_path.unlink()
            except OSError as e:
                logger.warning("Could not remove %s: %s", output_path, e)

        raw_segments = raw.get("segments") or []
        segments = [
            Segment(start=float(s["start"]), end=float(s["end"]), text=(s.get("text") or "").strip())
            for s in raw_segments
        ]
        words = [
            Word(word=w["word"].strip(), start=float(w["start"]), end=float(w["end"]))
            for s in raw_segments
            for w in s.get("words") or []
        ]
        return TranscriptionResult(
            segments=segments,
            words=words or None,
            text=(raw.get("text") or "").strip(),
            language=raw.get("language") or language,
            duration=segments[-1].end if segments else None,
        )
