"""Shared test fixtures for the auto_subtitles test suite.

WHY: Several test modules need the same small, hand-checked subtitle
tracks: a clean track that should score well, a VTT document as whisper-1
returns it, and word timings matching that document. Centralizing them here
avoids duplication and keeps the numbers consistent across modules.

HOW: Pytest fixtures return fresh lists so tests can mutate them freely.
The staging_dir fixture points every service/chunker test at tmp_path.

RULES:
- Times are in seconds and chosen so English reading speed (15 CPS target)
  is respected by the clean track.
- Fixture data never touches the network or ffmpeg.
"""

from typing import List

import pytest

from auto_subtitles.core.ir import Segment, Word

SAMPLE_VTT = (
    "WEBVTT\n"
    "\n"
    "00:00:00.000 --> 00:00:02.000\n"
    "Hello there\n"
    "\n"
    "00:00:02.000 --> 00:00:04.000\n"
    "Goodbye now\n"
    "\n"
)


@pytest.fixture
def clean_segments() -> List[Segment]:
    """Three well-formed English cues with comfortable timing and gaps."""
    return [
        Segment(start=0.0, end=2.5, text="Welcome back to the show."),
        Segment(start=2.7, end=5.2, text="Today we talk about rivers."),
        Segment(start=5.4, end=8.0, text="Let us start with the Rhine."),
    ]


@pytest.fixture
def sample_vtt() -> str:
    return SAMPLE_VTT


@pytest.fixture
def sample_words() -> List[Word]:
    """Word timings for SAMPLE_VTT, each cue spoken 0.1-0.2 s late."""
    return [
        Word(word="Hello", start=0.1, end=0.5),
        Word(word="there", start=0.6, end=1.0),
        Word(word="Goodbye", start=2.2, end=2.7),
        Word(word="now", start=2.8, end=3.1),
    ]


@pytest.fixture
def staging_dir(tmp_path):
    path = tmp_path / "staging"
    path.mkdir()
    return path
