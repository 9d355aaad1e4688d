"""Tests for the pass/fail quality gate and its command-line wrapper.

WHY: CI jobs rely on the gate's verdict and exit codes; a silent change
would either block good releases or let broken subtitles through.

HOW: Gate tests call run_quality_gate() directly. CLI tests write small
SRT/VTT files to tmp_path and call subtitle_rules.cli.main() with an argv
list, capturing stdout with capsys.

RULES:
- Exit codes: 0 pass, 1 fail, 2 unreadable input.
"""

import json

import pytest

from subtitle_rules import cli as gate_cli
from subtitle_rules.gate import (
    QualityGateError,
    assert_subtitle_quality,
    format_gate_summary,
    run_quality_gate,
)
from subtitle_rules.models import Segment, SegmentLogprobs, TokenLogprob
from subtitle_rules.timecodes import format_timestamp


def _write_srt(path, segments):
    blocks = []
    for number, seg in enumerate(segments, 1):
        blocks.append("{}\n{} --> {}\n{}\n".format(
            number, format_timestamp(seg.start, ","), format_timestamp(seg.end, ","), seg.text
        ))
    path.write_text("\n".join(blocks), encoding="utf-8")
    return path


# =========================================================================
# run_quality_gate
# =========================================================================

class TestRunQualityGate:
    """Verdicts, empty input, and category failures."""

    def test_clean_track_passes(self, clean_segments):
        result = run_quality_gate(clean_segments, 70)
        assert result.passed
        assert result.score == 100
        assert result.segments_below_threshold == 0
        assert result.category_failures == []

    def test_empty_input_fails(self):
        result = run_quality_gate([], 70)
        assert not result.passed
        assert result.score == 0
        assert result.quality_level == "Failing"
        assert result.report == "No segments to evaluate."
        assert [(f.category, f.detail) for f in result.category_failures] == [
            ("content", "No subtitle segments provided")
        ]

    def test_overlap_is_reported(self):
        segments = [Segment(0.0, 2.0, "Hello there"), Segment(1.5, 3.5, "General Kenobi")]
        result = run_quality_gate(segments, 70)
        assert any(f.category == "gaps" and "overlaps" in f.detail for f in result.category_failures)

    def test_fast_track_fails_threshold(self):
        segments = [Segment(i * 1.2, i * 1.2 + 1.0, "x" * 30) for i in range(5)]
        result = run_quality_gate(segments, 80)
        assert not result.passed
        assert result.segments_below_threshold == 5
        assert any(f.category == "readingSpeed" for f in result.category_failures)

    def test_language_defaults_to_english(self, clean_segments):
        assert run_quality_gate(clean_segments, 70, None).score == run_quality_gate(clean_segments, 70, "en").score


class TestGateSummary:
    def test_pass_summary(self, clean_segments):
        summary = format_gate_summary(run_quality_gate(clean_segments, 70))
        assert summary.startswith("[PASS] Score: 100/70 | Level: Excellent | Segments: 3")

    def test_fail_summary_lists_issues(self):
        summary = format_gate_summary(run_quality_gate([], 70))
        assert summary.startswith("[FAIL]")
        assert "  - [content] No subtitle segments provided" in summary


class TestAssertSubtitleQuality:
    def test_returns_result_on_pass(self, clean_segments):
        assert assert_subtitle_quality(clean_segments, 70).passed

    def test_raises_on_fail(self):
        with pytest.raises(QualityGateError) as excinfo:
            assert_subtitle_quality([], 70)
        assert "[FAIL]" in excinfo.value.summary
        assert isinstance(excinfo.value, AssertionError)

    def test_logprobs_passed_through(self, clean_segments):
        logprobs = [SegmentLogprobs(i, [TokenLogprob("x", -3.0)] * 3) for i in range(3)]
        assert assert_subtitle_quality(clean_segments, 95).passed
        with pytest.raises(QualityGateError) as excinfo:
            assert_subtitle_quality(clean_segments, 95, logprobs=logprobs)
        assert "[confidence]" in excinfo.value.summary


# =========================================================================
# Command line
# =========================================================================

class TestGateCli:
    """python -m subtitle_rules.cli"""

    def test_pass_exit_code(self, tmp_path, clean_segments, capsys):
        srt = _write_srt(tmp_path / "good.srt", clean_segments)
        assert gate_cli.main([str(srt), "--threshold", "70"]) == 0
        assert "[PASS]" in capsys.readouterr().out

    def test_fail_exit_code(self, tmp_path):
        srt = _write_srt(tmp_path / "bad.srt", [Segment(0.0, 0.5, "x" * 40)])
        assert gate_cli.main([str(srt), "--threshold", "90"]) == 1

    def test_missing_file(self, tmp_path, capsys):
        assert gate_cli.main([str(tmp_path / "missing.srt")]) == 2
        assert "Error:" in capsys.readouterr().err

    def test_json_output(self, tmp_path, clean_segments, capsys):
        vtt = tmp_path / "good.vtt"
        vtt.write_text(
            "WEBVTT\n\n" + "".join(
                "{} --> {}\n{}\n\n".format(format_timestamp(s.start), format_timestamp(s.end), s.text)
                for s in clean_segments
            ),
            encoding="utf-8",
        )
        assert gate_cli.main([str(vtt), "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["passed"] is True
        assert payload["total_segments"] == 3
        assert payload["report"]["overall_score"] == 100

    def test_logprobs_file(self, tmp_path, clean_segments, capsys):
        srt = _write_srt(tmp_path / "good.srt", clean_segments)
        logprobs = tmp_path / "logprobs.json"
        logprobs.write_text(json.dumps([
            {"segmentIndex": 0, "tokens": [{"token": "x", "logprob": -4.0}] * 4},
        ]))
        gate_cli.main([str(srt), "--logprobs", str(logprobs), "--json"])
        payload = json.loads(capsys.readouterr().out)
        assert payload["report"]["categories"]["confidence"]["possible_hallucination_count"] == 1

    def test_bad_logprobs_file(self, tmp_path, clean_segments):
        srt = _write_srt(tmp_path / "good.srt", clean_segments)
        logprobs = tmp_path / "logprobs.json"
        logprobs.write_text(json.dumps({"not": "a list"}))
        assert gate_cli.main([str(srt), "--logprobs", str(logprobs)]) == 2

    def test_bad_logprobs_entries(self, tmp_path, clean_segments, capsys):
        srt = _write_srt(tmp_path / "good.srt", clean_segments)
        logprobs = tmp_path / "logprobs.json"
        for content in (
            [1, 2],
            [{"segment_index": 0, "tokens": [{"token": "x", "logprob": None}]}],
            [{"segment_index": 0, "tokens": ["x"]}],
        ):
            logprobs.write_text(json.dumps(content))
            assert gate_cli.main([str(srt), "--logprobs", str(logprobs)]) == 2
            assert "Error:" in capsys.readouterr().err

    def test_multi_line_cues_keep_their_lines(self, tmp_path, capsys):
        srt = _write_srt(tmp_path / "lines.srt", [
            Segment(0.0, 5.0, "The river rises high in the Alps,\nthen flows north to the sea."),
            Segment(5.5, 8.0, "One\nTwo\nThree"),
        ])
        gate_cli.main([str(srt), "--json"])
        report = json.loads(capsys.readouterr().out)["report"]

        assert report["categories"]["line_length"]["violation_count"] == 0
        assert report["categories"]["line_length"]["max_cpl"] == 33
        assert report["categories"]["line_count"]["violation_count"] == 1
        assert [v["category"] for v in report["segments"][0]["violations"]] == []
        assert "lineCount" in [v["category"] for v in report["segments"][1]["violations"]]
