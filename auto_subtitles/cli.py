"""Command-line interface for Auto Subtitles.

WHY: Users need a simple way to turn an audio/video file (or URL) into
subtitle files from the terminal. The CLI wires together the transcription
service, the formatter registry, file saving and the optional quality
gate behind a single command.

HOW: Uses argparse to accept an input path or URL, provider/model options,
output format selection and output directory. Runs the async service via
asyncio.run(). Status messages go to stderr; output files are saved next
to the source (or to --output-dir; URL inputs default to the current
directory).

RULES:
- Positional argument: input file path or http(s) URL
- Local files are validated against SUPPORTED_AUDIO_FORMATS before any work
- --formats: comma-separated formatter keys (default: vtt,srt)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (talk-2.vtt)
- Status output goes to stderr (not stdout); --list-models prints to stdout
- Exit codes: 0 success, 1 error or failed quality gate, 130 interrupted
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from urllib.parse import urlparse

from auto_subtitles import config
from auto_subtitles.audio.chunker import AudioProcessingError
from auto_subtitles.core.errors import TranscribeError
from auto_subtitles.formatters import FORMATTERS
from auto_subtitles.formatters.base import FormatterOutput
from auto_subtitles.providers.registry import ProviderRegistry, create_default_registry
from auto_subtitles.service.transcribe import TranscribeService
from subtitle_rules.gate import format_gate_summary, run_quality_gate

logger = logging.getLogger(__name__)

DEFAULT_FORMATS = "vtt,srt"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def configure_logging(level: str = config.LOG_LEVEL) -> None:
    """Configure root logging once for CLI runs."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _is_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    WHY: Users may run the tool several times on the same file.
    Overwriting previous output would lose work.

    RULES:
    - First attempt: {stem}{suffix} (e.g. talk.vtt)
    - Conflict: counter inserted before the extension (talk-2.vtt)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / f"{stem}{suffix}"
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx >= 0:
        suffix_name, suffix_ext = suffix[:dot_idx], suffix[dot_idx:]
    else:
        suffix_name, suffix_ext = suffix, ""

    counter = 2
    while True:
        candidate = output_dir / f"{stem}{suffix_name}-{counter}{suffix_ext}"
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def _parse_formats(value: str) -> list[str]:
    keys = [f.strip() for f in value.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            raise ValueError(
                f"Unknown format '{key}'. Available formats: {', '.join(sorted(FORMATTERS))}"
            )
    return keys


def _print_models(registry: ProviderRegistry) -> None:
    models = registry.list_models()
    if not models:
        print("No providers configured. Set OPENAI_API_KEY or LOCAL_WHISPER_BINARY.")
        return
    for model, provider_id in models:
        print(f"{model}\t{provider_id}")


async def _run_pipeline(args: argparse.Namespace, registry: ProviderRegistry) -> int:
    """Transcribe, format, save, and optionally gate. Returns the exit code."""
    source = args.input
    if _is_url(source):
        stem = Path(urlparse(source).path).stem or "subtitles"
        default_dir = Path.cwd()
    else:
        input_path = Path(source).resolve()
        if not input_path.is_file():
            raise ValueError(f"File not found: {input_path}")
        ext = input_path.suffix.lower()
        if ext not in config.SUPPORTED_AUDIO_FORMATS:
            raise ValueError(
                f"Unsupported file type '{ext}'. "
                f"Supported formats: {', '.join(sorted(config.SUPPORTED_AUDIO_FORMATS))}"
            )
        source = str(input_path)
        stem = input_path.stem
        default_dir = input_path.parent

    output_dir = Path(args.output_dir).resolve() if args.output_dir else default_dir
    if not output_dir.is_dir():
        raise ValueError(f"Output directory does not exist: {output_dir}")

    format_keys = _parse_formats(args.formats)

    service = TranscribeService(registry=registry)
    segments = await service.transcribe_to_segments(
        source,
        language=args.language,
        model=args.model,
        provider_id=args.provider,
        prompt=args.prompt,
        known_speaker_names=args.speaker_name,
        on_status=_status,
    )
    _status(f"  {len(segments)} cues")

    saved: list[Path] = []
    for key in format_keys:
        formatter = FORMATTERS[key]()
        for output in formatter.format(segments, speaker_labels=args.speaker_labels):
            path = _save_output(output, stem, output_dir)
            saved.append(path)
            _status(f"  Saved: {path.name}")

    _status("")
    _status(f"Done! Saved {len(saved)} file(s) to {output_dir}")

    if args.quality_threshold is not None:
        result = run_quality_gate(segments, threshold=args.quality_threshold, language=args.language)
        _status(format_gate_summary(result))
        if not result.passed:
            return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="auto_subtitles",
        description="Transcribe audio/video into readable subtitle files (VTT, SRT, JSON, text).",
    )
    parser.add_argument("input", nargs="?", help="Audio/video file path or http(s) URL.")
    parser.add_argument(
        "--language",
        default=config.DEFAULT_LANGUAGE,
        help="ISO 639-1 language code (default: %(default)s).",
    )
    parser.add_argument("--model", default=None, help="Transcription model, e.g. whisper-1 or large-v3.")
    parser.add_argument("--provider", default=config.DEFAULT_PROVIDER, help="Force a provider ID (openai, local-whisper).")
    parser.add_argument("--prompt", default=None, help="Vocabulary or context prompt passed to the model.")
    parser.add_argument(
        "--speaker-name",
        action="append",
        default=None,
        help="Known speaker name for the diarization model. Can be given up to 4 times.",
    )
    parser.add_argument(
        "--formats",
        default=DEFAULT_FORMATS,
        help=f"Comma-separated output formats. Available: {', '.join(sorted(FORMATTERS))}. "
             "Default: %(default)s.",
    )
    parser.add_argument("--output-dir", default=None, help="Directory to save output files (default: next to the input).")
    parser.add_argument("--speaker-labels", action="store_true", help="Prefix cue text with [speaker].")
    parser.add_argument(
        "--quality-threshold",
        type=float,
        default=None,
        help="Run the quality gate on the result; exit 1 when the score is below this value.",
    )
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level (default: %(default)s).")
    parser.add_argument("--list-models", action="store_true", help="List available models and exit.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``python -m auto_subtitles``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    registry = create_default_registry()
    if args.list_models:
        _print_models(registry)
        return 0
    if not args.input:
        parser.error("the following arguments are required: input")

    try:
        return asyncio.run(_run_pipeline(args, registry))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        return 130
    except (ValueError, KeyError, TranscribeError, AudioProcessingError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
