"""Audio tooling: ffmpeg/ffprobe wrappers and silence-aware chunking."""

from auto_subtitles.audio.chunker import (
    AudioProcessingError,
    convert_to_mp3,
    detect_silences,
    probe_duration,
    split_audio_on_silence,
)

__all__ = [
    "AudioProcessingError",
    "convert_to_mp3",
    "detect_silences",
    "probe_duration",
    "split_audio_on_silence",
]
