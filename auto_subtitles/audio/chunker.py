"""Silence-aware audio chunking for provider upload limits.

WHY: Hosted transcription endpoints reject files above a size limit (25 MiB
for OpenAI). Cutting a long recording at arbitrary points splits words in
half and confuses the decoder, so cuts are placed in detected silences
whenever the audio has any.

HOW: ffmpeg's silencedetect filter reports "silence_end: <t>" on stderr.
Those timestamps become -segment_times split points for ffmpeg's segment
muxer (stream copy, no re-encode). Audio without usable silences is split
into equal-duration pieces instead. Any piece still over the limit is split
again into equal parts.

RULES:
- Input at or below the limit with no silences is returned as-is
  (is_original=True); callers must not delete it
- Chunk files are named {job_id}_chunk_%03d.mp3 in the staging directory;
  lexicographic order equals temporal order
- A silence ending within 2 s of the end of the file is ignored
- Any ffmpeg/ffprobe failure raises AudioProcessingError after removing the
  chunk files already written for the job
- The caller owns deleting every returned chunk that is not is_original
"""

from __future__ import annotations

import logging
import math
import re
import subprocess
import uuid
from pathlib import Path

from auto_subtitles.config import MAX_CHUNK_SIZE_BYTES, STAGING_DIR
from auto_subtitles.core.ir import AudioChunk

logger = logging.getLogger(__name__)

SILENCE_END_RE = re.compile(r"silence_end: ([\d.]+)")
TRAILING_SILENCE_WINDOW_S = 2.0


class AudioProcessingError(Exception):
    """Raised when ffmpeg/ffprobe fails or is missing. Never retried."""


def _run(args: list[str]) -> subprocess.CompletedProcess:
    """Run an ffmpeg-family command, raising AudioProcessingError on failure."""
    try:
        result = subprocess.run(args, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise AudioProcessingError(f"{args[0]} not found on PATH") from e
    if result.returncode != 0:
        raise AudioProcessingError(
            f"{args[0]} failed (exit {result.returncode}): {result.stderr.strip()[-500:]}"
        )
    return result


def probe_duration(path: str | Path) -> float:
    """Return the media duration in seconds using ffprobe."""
    result = _run([
        "ffprobe", "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(path),
    ])
    try:
        return float(result.stdout.strip())
    except ValueError as e:
        raise AudioProcessingError(f"ffprobe returned no duration for {path}") from e


def detect_silences(
    path: str | Path,
    noise_db: int = -30,
    min_silence_s: float = 2.0,
) -> list[float]:
    """Return the end time of every silence of at least ``min_silence_s``."""
    result = _run([
        "ffmpeg", "-hide_banner", "-nostats",
        "-i", str(path),
        "-af", f"silencedetect=noise={noise_db}dB:d={min_silence_s:g}",
        "-f", "null", "-",
    ])
    return [float(m.group(1)) for m in SILENCE_END_RE.finditer(result.stderr)]


def convert_to_mp3(source: str, staging_dir: Path | None = None) -> Path:
    """Extract the audio track of a local file or URL into a staging mp3.

    The caller owns deleting the returned file.
    """
    staging = Path(staging_dir or STAGING_DIR)
    staging.mkdir(parents=True, exist_ok=True)
    out_path = staging / f"{uuid.uuid4().hex}.mp3"
    try:
        _run(["ffmpeg", "-y", "-i", str(source), "-vn", "-f", "mp3", str(out_path)])
    except AudioProcessingError:
        _remove_quietly([out_path])
        raise
    logger.info("Converted %s to %s", source, out_path.name)
    return out_path


def _remove_quietly(paths: list[Path]) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)


def _split_equal(input_file: Path, pattern: Path, parts: int) -> None:
    duration = probe_duration(input_file)
    segment_time = duration / parts
    _run([
        "ffmpeg", "-y", "-i", str(input_file),
        "-f", "segment", "-segment_time", f"{segment_time:.3f}",
        "-c", "copy", str(pattern),
    ])


def _split_at(input_file: Path, pattern: Path, times: list[float]) -> None:
    _run([
        "ffmpeg", "-y", "-i", str(input_file),
        "-f", "segment", "-segment_times", ",".join(f"{t:g}" for t in times),
        "-c", "copy", str(pattern),
    ])


def _collect(pattern: Path) -> list[Path]:
    return sorted(pattern.parent.glob(pattern.name.replace("%03d", "*")))


def _resplit_oversized(chunks: list[Path], max_chunk_bytes: int) -> list[Path]:
    """Split any chunk above the limit into equal parts named {stem}_part_%03d.mp3."""
    result: list[Path] = []
    for chunk in chunks:
        size = chunk.stat().st_size
        if size <= max_chunk_bytes:
            result.append(chunk)
            continue
        parts = math.ceil(size / max_chunk_bytes)
        pattern = chunk.with_name(f"{chunk.stem}_part_%03d.mp3")
        logger.info("Chunk %s is %d bytes; re-splitting into %d parts", chunk.name, size, parts)
        _split_equal(chunk, pattern, parts)
        _remove_quietly([chunk])
        result.extend(_collect(pattern))
    return result


def split_audio_on_silence(
    input_file: str | Path,
    staging_dir: Path | None = None,
    max_chunk_bytes: int = MAX_CHUNK_SIZE_BYTES,
    job_id: str | None = None,
) -> list[AudioChunk]:
    """Split an audio file into upload-sized chunks, preferring silence cuts.

    WHY: Keeps each provider request under its size limit without cutting
    through speech.

    HOW: Detect silences, drop a trailing one, then split either at the
    silence points or, with none, into ceil(size/limit) equal parts.

    RULES:
    - Returns chunks in temporal order with sequence_index 0..n-1
    - Returns [AudioChunk(input, 0, is_original=True)] when no split is needed

    Args:
        input_file: Audio file to split.
        staging_dir: Directory for chunk files (default STAGING_DIR).
        max_chunk_bytes: Provider upload limit.
        job_id: Prefix for chunk names (default: random hex).

    Returns:
        List of AudioChunk.
    """
    input_path = Path(input_file)
    staging = Path(staging_dir or STAGING_DIR)
    staging.mkdir(parents=True, exist_ok=True)
    job_id = job_id or uuid.uuid4().hex
    pattern = staging / f"{job_id}_chunk_%03d.mp3"

    try:
        silences = detect_silences(input_path)
        if silences:
            duration = probe_duration(input_path)
            if duration - silences[-1] <= TRAILING_SILENCE_WINDOW_S:
                silences = silences[:-1]

        size = input_path.stat().st_size
        if not silences:
            if size <= max_chunk_bytes:
                logger.debug("%s fits in one request (%d bytes)", input_path.name, size)
                return [AudioChunk(file_path=input_path, sequence_index=0, is_original=True)]
            parts = math.ceil(size / max_chunk_bytes)
            logger.info("No silences in %s; splitting into %d equal chunks", input_path.name, parts)
            _split_equal(input_path, pattern, parts)
        else:
            logger.info("Splitting %s at %d silence points", input_path.name, len(silences))
            _split_at(input_path, pattern, silences)

        chunk_paths = _resplit_oversized(_collect(pattern), max_chunk_bytes)
    except (AudioProcessingError, OSError) as e:
        _remove_quietly(sorted(staging.glob(f"{job_id}_chunk_*")))
        if isinstance(e, AudioProcessingError):
            raise
        raise AudioProcessingError(f"Chunking {input_path} failed: {e}") from e

    return [AudioChunk(file_path=p, sequence_index=i) for i, p in enumerate(chunk_paths)]
