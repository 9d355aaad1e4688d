"""Tests for VTT cue parsing and word-timing alignment.

WHY: whisper-1 cue times drift by a few hundred milliseconds. The aligner
is the only place that corrects them, so its shift rules must be exact:
matched cues move onto the matched word, everything else keeps its order.

HOW: Uses SAMPLE_VTT and sample_words from conftest.py, where every cue is
spoken 0.1-0.2 s after its VTT start. Extra cases build small word lists
inline.

RULES:
- Alignment never mutates its input
- Output starts are non-decreasing
"""

from __future__ import annotations

import pytest

from auto_subtitles.core.aligner import (
    align_segments,
    normalize_token,
    parse_and_align,
    parse_vtt_to_segments,
)
from auto_subtitles.core.ir import Segment, Word


# ---------------------------------------------------------------------------
# Parsing and normalization
# ---------------------------------------------------------------------------


class TestParseVtt:
    def test_parses_sample(self, sample_vtt):
        segments = parse_vtt_to_segments(sample_vtt)
        assert [(s.start, s.end, s.text) for s in segments] == [
            (0.0, 2.0, "Hello there"),
            (2.0, 4.0, "Goodbye now"),
        ]

    def test_empty_document(self):
        assert parse_vtt_to_segments("WEBVTT\n\n") == []


class TestNormalizeToken:
    def test_lowercases_and_strips_punctuation(self):
        assert normalize_token("Hello,") == "hello"
        assert normalize_token('"Now!"') == "now"

    def test_keeps_internal_apostrophe(self):
        assert normalize_token("Don't") == "don't"
        assert normalize_token("don’t") == "don't"

    def test_pure_punctuation_is_empty(self):
        assert normalize_token("--") == ""


# ---------------------------------------------------------------------------
# Alignment
# ---------------------------------------------------------------------------


class TestAlignSegments:
    """Shift rules against word timing."""

    def test_matched_cues_move_onto_first_word(self, sample_vtt, sample_words):
        aligned = align_segments(parse_vtt_to_segments(sample_vtt), sample_words)
        assert [(s.start, s.end) for s in aligned] == [
            pytest.approx((0.1, 2.1)),
            pytest.approx((2.2, 4.2)),
        ]
        assert [s.text for s in aligned] == ["Hello there", "Goodbye now"]

    def test_duration_is_preserved(self, sample_vtt, sample_words):
        segments = parse_vtt_to_segments(sample_vtt)
        aligned = align_segments(segments, sample_words)
        for before, after in zip(segments, aligned):
            assert after.duration == pytest.approx(before.duration)

    def test_without_words_returns_copies(self, sample_vtt):
        segments = parse_vtt_to_segments(sample_vtt)
        aligned = align_segments(segments, None)
        assert [(s.start, s.end) for s in aligned] == [(0.0, 2.0), (2.0, 4.0)]
        assert aligned[0] is not segments[0]
        assert align_segments(segments, []) == segments

    def test_input_not_mutated(self, sample_vtt, sample_words):
        segments = parse_vtt_to_segments(sample_vtt)
        align_segments(segments, sample_words)
        assert segments[0].start == 0.0

    def test_unmatched_cue_nudged_to_first_word(self):
        segments = [Segment(0.0, 1.0, "Something else entirely")]
        words = [Word("unrelated", 0.5, 0.9), Word("speech", 1.0, 1.4)]
        aligned = align_segments(segments, words)
        assert (aligned[0].start, aligned[0].end) == pytest.approx((0.5, 1.5))

    def test_partial_match_is_not_committed(self):
        """Only 1 of the 3 required leading tokens agrees, so no match."""
        segments = [Segment(1.0, 3.0, "hello big world")]
        words = [Word("um", 0.5, 0.8), Word("hello", 1.4, 1.6), Word("there", 1.7, 2.0), Word("world", 2.1, 2.5)]
        aligned = align_segments(segments, words)
        assert aligned[0].start == pytest.approx(1.0)

    def test_short_cue_needs_only_its_own_tokens(self):
        segments = [Segment(1.0, 2.0, "Yes.")]
        words = [Word("no", 0.2, 0.4), Word("yes", 1.3, 1.5)]
        aligned = align_segments(segments, words)
        assert aligned[0].start == pytest.approx(1.3)

    def test_match_outside_window_ignored(self):
        segments = [Segment(0.0, 2.0, "far away")]
        words = [Word("intro", 0.0, 0.5), Word("far", 20.0, 20.4), Word("away", 20.5, 21.0)]
        aligned = align_segments(segments, words)
        assert aligned[0].start == pytest.approx(0.0)

    def test_overlapping_cue_pushed_past_previous(self):
        segments = [Segment(0.0, 2.0, "first cue"), Segment(1.5, 3.0, "second cue")]
        words = [Word("first", 0.0, 0.4), Word("cue", 0.5, 0.9)]
        aligned = align_segments(segments, words)
        assert aligned[1].start == pytest.approx(2.0)
        assert aligned[1].end == pytest.approx(3.5)

    def test_starts_non_decreasing(self, sample_words):
        segments = [
            Segment(0.0, 2.0, "Hello there"),
            Segment(0.5, 1.0, "Goodbye now"),
            Segment(0.2, 0.4, "trailing"),
        ]
        aligned = align_segments(segments, sample_words)
        starts = [s.start for s in aligned]
        assert starts == sorted(starts)
        assert all(s.end >= s.start for s in aligned)

    def test_negative_duration_repaired(self, sample_words):
        aligned = align_segments([Segment(1.0, 0.5, "odd")], sample_words)
        assert aligned[0].end >= aligned[0].start

    def test_speaker_kept(self, sample_words):
        aligned = align_segments([Segment(0.0, 2.0, "Hello there", speaker="A")], sample_words)
        assert aligned[0].speaker == "A"


def test_parse_and_align(sample_vtt, sample_words):
    aligned = parse_and_align(sample_vtt, sample_words)
    assert aligned[1].start == pytest.approx(2.2)
