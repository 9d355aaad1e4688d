"""Unit tests for all formatter modules.

WHY: Each formatter turns the optimized cue list into a file that players
and editors parse strictly. A missing blank line or a dot where SRT wants a
comma makes the whole file unreadable.

HOW: Tests compare exact output strings for small hand-built tracks, then
check that VTT and SRT output parse back to the same cues through
subtitle_rules.timecodes.parse_cues().

RULES:
- All formatters are looked up through FORMATTERS, as the CLI does.
"""

import json

import pytest

from auto_subtitles.config import SUPPORTED_OUTPUT_FORMATS
from auto_subtitles.core.ir import Segment
from auto_subtitles.formatters import FORMATTERS
from auto_subtitles.formatters.base import labeled_text
from auto_subtitles.formatters.plain_text import segments_to_text
from auto_subtitles.formatters.srt import segments_to_srt
from auto_subtitles.formatters.vtt import segments_to_vtt
from subtitle_rules.timecodes import parse_cues


@pytest.fixture
def dialogue():
    return [
        Segment(0.0, 1.5, "Are you coming?", speaker="Ann"),
        Segment(1.7, 3.0, "In a minute.\nWait for me.", speaker="Ben"),
        Segment(3.2, 4.0, "Fine.", speaker="Ben"),
    ]


# =========================================================================
# Registry
# =========================================================================

class TestFormatterRegistry:
    def test_keys_match_config(self):
        assert sorted(FORMATTERS) == sorted(SUPPORTED_OUTPUT_FORMATS)

    @pytest.mark.parametrize("key,suffix,media_type", [
        ("vtt", ".vtt", "text/vtt"),
        ("srt", ".srt", "application/x-subrip"),
        ("json", ".json", "application/json"),
        ("text", ".txt", "text/plain"),
    ])
    def test_output_metadata(self, key, suffix, media_type, clean_segments):
        outputs = FORMATTERS[key]().format(clean_segments)
        assert len(outputs) == 1
        assert (outputs[0].suffix, outputs[0].media_type) == (suffix, media_type)

    def test_names(self):
        assert {key: cls().name for key, cls in FORMATTERS.items()} == {
            "vtt": "WebVTT", "srt": "SubRip", "json": "JSON Segments", "text": "Plain Text",
        }


# =========================================================================
# WebVTT / SRT
# =========================================================================

class TestVTT:
    def test_exact_output(self):
        assert segments_to_vtt([Segment(0.0, 2.5, "Hello world")]) == (
            "WEBVTT\n\n00:00:00.000 --> 00:00:02.500\nHello world\n\n"
        )

    def test_empty_has_header(self):
        assert segments_to_vtt([]) == "WEBVTT\n\n"

    def test_multiline_cue_kept(self, dialogue):
        assert "00:00:01.700 --> 00:00:03.000\nIn a minute.\nWait for me.\n\n" in segments_to_vtt(dialogue)

    def test_speaker_labels(self, dialogue):
        content = segments_to_vtt(dialogue, speaker_labels=True)
        assert "\n[Ann] Are you coming?\n" in content

    def test_parses_back(self, clean_segments):
        parsed = parse_cues(segments_to_vtt(clean_segments))
        assert [(s.start, s.end, s.text) for s in parsed] == [
            (s.start, s.end, s.text) for s in clean_segments
        ]


class TestSRT:
    def test_exact_output(self):
        segments = [Segment(0.0, 1.25, "One"), Segment(61.5, 62.0, "Two")]
        assert segments_to_srt(segments) == (
            "1\n00:00:00,000 --> 00:00:01,250\nOne\n\n"
            "2\n00:01:01,500 --> 00:01:02,000\nTwo\n\n"
        )

    def test_empty(self):
        assert segments_to_srt([]) == ""

    def test_parses_back(self, clean_segments):
        parsed = parse_cues(segments_to_srt(clean_segments))
        assert [s.text for s in parsed] == [s.text for s in clean_segments]
        assert parsed[2].end == pytest.approx(8.0)


# =========================================================================
# JSON
# =========================================================================

class TestJSONSegments:
    def test_payload(self, dialogue):
        content = FORMATTERS["json"]().format(dialogue)[0].content
        data = json.loads(content)
        assert data["segments"][1] == {
            "start": 1.7, "end": 3.0, "text": "In a minute.\nWait for me.", "speaker": "Ben",
        }
        assert content.endswith("}\n")

    def test_unknown_speaker_is_null(self):
        data = json.loads(FORMATTERS["json"]().format([Segment(0.12345, 1.0, "x")])[0].content)
        assert data["segments"][0]["speaker"] is None
        assert data["segments"][0]["start"] == 0.123

    def test_non_ascii_kept(self):
        content = FORMATTERS["json"]().format([Segment(0, 1, "Grüße")])[0].content
        assert "Grüße" in content


# =========================================================================
# Plain text
# =========================================================================

class TestPlainText:
    def test_single_paragraph_without_speakers(self, clean_segments):
        assert segments_to_text(clean_segments) == (
            "Welcome back to the show. Today we talk about rivers. Let us start with the Rhine.\n"
        )

    def test_speaker_paragraphs(self, dialogue):
        assert segments_to_text(dialogue) == (
            "Are you coming?\n\nIn a minute. Wait for me. Fine.\n"
        )

    def test_speaker_labels(self, dialogue):
        assert segments_to_text(dialogue, speaker_labels=True) == (
            "Ann:\nAre you coming?\n\nBen:\nIn a minute. Wait for me. Fine.\n"
        )

    def test_blank_cues_skipped(self):
        assert segments_to_text([Segment(0, 1, "  "), Segment(1, 2, "Hi")]) == "Hi\n"

    def test_empty(self):
        assert segments_to_text([]) == ""


def test_labeled_text():
    assert labeled_text(Segment(0, 1, "Hi", speaker="A"), True) == "[A] Hi"
    assert labeled_text(Segment(0, 1, "Hi", speaker="A"), False) == "Hi"
    assert labeled_text(Segment(0, 1, "Hi"), True) == "Hi"
