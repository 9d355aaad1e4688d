"""Intermediate representation shared by providers, aligner, and formatters.

WHY: Providers return cue segments and (sometimes) word timings; the chunker
hands out audio files that must be cleaned up; the optimizer and formatters
work on segments. A single set of small types decouples those stages.

HOW: Segment is re-exported from subtitle_rules so the quality gate can
score pipeline output directly. Word and AudioChunk are local dataclasses.

RULES:
- All times are float seconds
- Word lists are optional; cue-only providers return none
- AudioChunk.is_original marks a chunk that IS the caller's input file;
  it must never be deleted by cleanup code
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from subtitle_rules.models import Segment

__all__ = ["AudioChunk", "Segment", "Word"]


@dataclass
class Word:
    """One recognized word with timing, as returned by word-timestamp APIs."""

    word: str
    start: float
    end: float


@dataclass
class AudioChunk:
    """A piece of audio small enough for the provider's upload limit.

    Attributes:
        file_path: Path to the chunk file.
        sequence_index: 0-based temporal position of the chunk.
        is_original: True when the chunker returned the input unchanged.
    """

    file_path: Path
    sequence_index: int
    is_original: bool = False
