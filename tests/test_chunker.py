"""Tests for silence-aware audio chunking.

WHY: A wrong split point or a leaked chunk file is invisible until a long
job fails halfway or the staging directory fills up. These tests pin the
ffmpeg commands the chunker issues and the files it leaves behind.

HOW: subprocess.run is patched with FakeFFmpeg, which answers ffprobe with
a fixed duration, answers silencedetect with canned stderr, and emulates
the segment muxer by writing chunk files of configured sizes into the
staging directory. No real ffmpeg is ever invoked.

RULES:
- Every test runs in its own tmp_path staging directory
- Chunk names follow {job_id}_chunk_%03d.mp3
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from auto_subtitles.audio.chunker import (
    AudioProcessingError,
    convert_to_mp3,
    detect_silences,
    probe_duration,
    split_audio_on_silence,
)


class FakeFFmpeg:
    """Stand-in for subprocess.run covering the ffmpeg calls the chunker makes."""

    def __init__(self, silences=(), duration=60.0, chunk_sizes=(100, 100), part_sizes=(10, 10, 10),
                 fail_segment=False):
        self.silences = list(silences)
        self.duration = duration
        self.chunk_sizes = list(chunk_sizes)
        self.part_sizes = list(part_sizes)
        self.fail_segment = fail_segment
        self.calls: list[list[str]] = []

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        if args[0] == "ffprobe":
            return subprocess.CompletedProcess(args, 0, stdout=f"{self.duration}\n", stderr="")
        if any("silencedetect" in a for a in args):
            stderr = "".join(
                f"[silencedetect @ 0x1] silence_end: {t} | silence_duration: 2.5\n" for t in self.silences
            )
            return subprocess.CompletedProcess(args, 0, stdout="", stderr=stderr)
        if "segment" in args:
            pattern = args[-1]
            sizes = self.part_sizes if "_part_" in pattern else self.chunk_sizes
            for i, size in enumerate(sizes):
                Path(pattern.replace("%03d", f"{i:03d}")).write_bytes(b"\0" * size)
            if self.fail_segment:
                return subprocess.CompletedProcess(args, 1, stdout="", stderr="muxer exploded")
            return subprocess.CompletedProcess(args, 0, stdout="", stderr="")
        Path(args[-1]).write_bytes(b"mp3")
        return subprocess.CompletedProcess(args, 0, stdout="", stderr="")

    def segment_calls(self):
        return [c for c in self.calls if "segment" in c]


def _audio(tmp_path, size=150) -> Path:
    path = tmp_path / "input.mp3"
    path.write_bytes(b"\0" * size)
    return path


# ---------------------------------------------------------------------------
# ffprobe / silencedetect helpers
# ---------------------------------------------------------------------------


class TestProbeAndDetect:
    def test_probe_duration(self, tmp_path):
        with patch("auto_subtitles.audio.chunker.subprocess.run", FakeFFmpeg(duration=12.5)):
            assert probe_duration(tmp_path / "a.mp3") == pytest.approx(12.5)

    def test_duration_without_output_raises(self, tmp_path):
        empty = subprocess.CompletedProcess([], 0, stdout="N/A\n", stderr="")
        with patch("auto_subtitles.audio.chunker.subprocess.run", return_value=empty):
            with pytest.raises(AudioProcessingError, match="no duration"):
                probe_duration(tmp_path / "a.mp3")

    def test_detect_silences_parses_stderr(self, tmp_path):
        fake = FakeFFmpeg(silences=[3.5, 10.25])
        with patch("auto_subtitles.audio.chunker.subprocess.run", fake):
            assert detect_silences(tmp_path / "a.mp3") == [3.5, 10.25]
        assert "silencedetect=noise=-30dB:d=2" in fake.calls[0]

    def test_missing_binary(self, tmp_path):
        with patch("auto_subtitles.audio.chunker.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(AudioProcessingError, match="ffprobe not found"):
                probe_duration(tmp_path / "a.mp3")


# ---------------------------------------------------------------------------
# split_audio_on_silence
# ---------------------------------------------------------------------------


class TestSplitAudioOnSilence:
    """Split strategies, naming, and cleanup."""

    def test_small_file_without_silence_is_original(self, tmp_path, staging_dir):
        source = _audio(tmp_path, size=150)
        fake = FakeFFmpeg()
        with patch("auto_subtitles.audio.chunker.subprocess.run", fake):
            chunks = split_audio_on_silence(source, staging_dir, max_chunk_bytes=1000, job_id="job")
        assert len(chunks) == 1
        assert chunks[0].file_path == source
        assert chunks[0].is_original
        assert fake.segment_calls() == []

    def test_splits_at_silences(self, tmp_path, staging_dir):
        source = _audio(tmp_path)
        fake = FakeFFmpeg(silences=[12.0, 30.5], duration=60.0, chunk_sizes=(100, 100, 100))
        with patch("auto_subtitles.audio.chunker.subprocess.run", fake):
            chunks = split_audio_on_silence(source, staging_dir, max_chunk_bytes=1000, job_id="job")

        assert [c.file_path.name for c in chunks] == [
            "job_chunk_000.mp3", "job_chunk_001.mp3", "job_chunk_002.mp3",
        ]
        assert [c.sequence_index for c in chunks] == [0, 1, 2]
        assert not any(c.is_original for c in chunks)
        segment_call = fake.segment_calls()[0]
        assert segment_call[segment_call.index("-segment_times") + 1] == "12,30.5"

    def test_trailing_silence_ignored(self, tmp_path, staging_dir):
        source = _audio(tmp_path)
        fake = FakeFFmpeg(silences=[12.0, 59.0], duration=60.0)
        with patch("auto_subtitles.audio.chunker.subprocess.run", fake):
            split_audio_on_silence(source, staging_dir, max_chunk_bytes=1000, job_id="job")
        segment_call = fake.segment_calls()[0]
        assert segment_call[segment_call.index("-segment_times") + 1] == "12"

    def test_only_trailing_silence_keeps_original(self, tmp_path, staging_dir):
        source = _audio(tmp_path)
        fake = FakeFFmpeg(silences=[59.0], duration=60.0)
        with patch("auto_subtitles.audio.chunker.subprocess.run", fake):
            chunks = split_audio_on_silence(source, staging_dir, max_chunk_bytes=1000, job_id="job")
        assert chunks[0].is_original

    def test_large_file_without_silence_split_equally(self, tmp_path, staging_dir):
        source = _audio(tmp_path, size=250)
        fake = FakeFFmpeg(duration=60.0, chunk_sizes=(90, 90, 70))
        with patch("auto_subtitles.audio.chunker.subprocess.run", fake):
            chunks = split_audio_on_silence(source, staging_dir, max_chunk_bytes=100, job_id="job")
        assert len(chunks) == 3
        segment_call = fake.segment_calls()[0]
        assert segment_call[segment_call.index("-segment_time") + 1] == "20.000"

    def test_oversized_chunk_resplit(self, tmp_path, staging_dir):
        source = _audio(tmp_path)
        fake = FakeFFmpeg(silences=[20.0], chunk_sizes=(50, 250), part_sizes=(90, 90, 70))
        with patch("auto_subtitles.audio.chunker.subprocess.run", fake):
            chunks = split_audio_on_silence(source, staging_dir, max_chunk_bytes=100, job_id="job")
        assert [c.file_path.name for c in chunks] == [
            "job_chunk_000.mp3",
            "job_chunk_001_part_000.mp3",
            "job_chunk_001_part_001.mp3",
            "job_chunk_001_part_002.mp3",
        ]
        assert not (staging_dir / "job_chunk_001.mp3").exists()
        assert all(c.file_path.stat().st_size <= 100 for c in chunks)

    def test_failure_removes_partial_chunks(self, tmp_path, staging_dir):
        source = _audio(tmp_path)
        fake = FakeFFmpeg(silences=[20.0], fail_segment=True)
        with patch("auto_subtitles.audio.chunker.subprocess.run", fake):
            with pytest.raises(AudioProcessingError, match="muxer exploded"):
                split_audio_on_silence(source, staging_dir, max_chunk_bytes=1000, job_id="job")
        assert list(staging_dir.glob("job_chunk_*")) == []
        assert source.exists()

    def test_missing_input_raises_processing_error(self, tmp_path, staging_dir):
        with patch("auto_subtitles.audio.chunker.subprocess.run", FakeFFmpeg()):
            with pytest.raises(AudioProcessingError, match="Chunking"):
                split_audio_on_silence(tmp_path / "nope.mp3", staging_dir, job_id="job")


# ---------------------------------------------------------------------------
# convert_to_mp3
# ---------------------------------------------------------------------------


class TestConvertToMp3:
    def test_writes_into_staging(self, tmp_path, staging_dir):
        fake = FakeFFmpeg()
        with patch("auto_subtitles.audio.chunker.subprocess.run", fake):
            out = convert_to_mp3(str(tmp_path / "talk.mp4"), staging_dir)
        assert out.parent == staging_dir
        assert out.suffix == ".mp3"
        assert "-vn" in fake.calls[0]

    def test_failure_removes_output(self, staging_dir):
        failed = subprocess.CompletedProcess([], 1, stdout="", stderr="Invalid data found")
        with patch("auto_subtitles.audio.chunker.subprocess.run", return_value=failed):
            with pytest.raises(AudioProcessingError, match="Invalid data"):
                convert_to_mp3("broken.mp4", staging_dir)
        assert list(staging_dir.iterdir()) == []
