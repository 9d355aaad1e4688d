"""Tests for timecode formatting and WebVTT/SRT cue parsing.

WHY: The formatters and the aligner both depend on timestamps surviving a
write/read cycle to the millisecond.

RULES:
- Milliseconds are rounded, not truncated.
"""

import pytest

from subtitle_rules.timecodes import format_timestamp, parse_cues, parse_timestamp


class TestFormatTimestamp:
    def test_vtt_separator(self):
        assert format_timestamp(2.5) == "00:00:02.500"

    def test_srt_separator(self):
        assert format_timestamp(1.25, ",") == "00:00:01,250"

    def test_hours_and_rounding(self):
        assert format_timestamp(3661.0019) == "01:01:01.002"

    def test_negative_clamped_to_zero(self):
        assert format_timestamp(-1.0) == "00:00:00.000"


class TestParseTimestamp:
    def test_full_form(self):
        assert parse_timestamp("01:02:03.456") == pytest.approx(3723.456)

    def test_comma_decimal(self):
        assert parse_timestamp("00:00:01,250") == pytest.approx(1.25)

    def test_minutes_seconds_form(self):
        assert parse_timestamp("00:01.5") == pytest.approx(1.5)

    def test_invalid(self):
        assert parse_timestamp("not a time") is None


class TestParseCues:
    """Line-oriented cue scanning."""

    def test_basic_vtt(self, sample_vtt):
        segments = parse_cues(sample_vtt)
        assert [(s.start, s.end, s.text) for s in segments] == [
            (0.0, 2.0, "Hello there"),
            (2.0, 4.0, "Goodbye now"),
        ]

    def test_multiline_text_joined_with_space(self):
        vtt = "WEBVTT\n\n00:00:01.000 --> 00:00:03.000\nfirst line\nsecond line\n"
        assert parse_cues(vtt)[0].text == "first line second line"

    def test_skips_notes_identifiers_and_settings(self):
        vtt = (
            "WEBVTT\n\n"
            "NOTE this is a comment\nspanning lines\n\n"
            "cue-1\n"
            "00:00:01.000 --> 00:00:02.000 align:start position:10%\n"
            "Hi\n"
        )
        segments = parse_cues(vtt)
        assert len(segments) == 1
        assert segments[0].text == "Hi"
        assert segments[0].end == pytest.approx(2.0)

    def test_srt(self):
        srt = "1\n00:00:00,500 --> 00:00:01,750\nOne\n\n2\n00:00:02,000 --> 00:00:03,000\nTwo\n\n"
        segments = parse_cues(srt)
        assert [(s.start, s.end, s.text) for s in segments] == [(0.5, 1.75, "One"), (2.0, 3.0, "Two")]

    def test_bad_timecode_dropped(self):
        vtt = "WEBVTT\n\nxx:yy --> 00:00:02.000\nlost\n\n00:00:03.000 --> 00:00:04.000\nkept\n"
        assert [s.text for s in parse_cues(vtt)] == ["kept"]

    def test_round_trip_to_the_millisecond(self):
        vtt = "WEBVTT\n\n{} --> {}\nText\n".format(format_timestamp(1.2345), format_timestamp(7.0006))
        segment = parse_cues(vtt)[0]
        assert format_timestamp(segment.start) == format_timestamp(1.2345)
        assert format_timestamp(segment.end) == "00:00:07.001"
