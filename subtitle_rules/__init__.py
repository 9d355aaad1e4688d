"""Subtitle standards library: language profiles, line breaking, and quality scoring.

WHY: The rules that define a readable subtitle (reading speed, characters
per line, where a line may break, minimum gaps) are shared by the
transcription pipeline, which must produce good cues, and by review tooling,
which must grade any cue file. This package holds those rules with no
dependency on transcription, HTTP or audio code.

HOW: languages.py holds per-language profiles; wordlists.py the linguistic
word sets; line_breaking.py picks the best two-line split; quality.py scores
a track; gate.py turns the score into pass/fail; timecodes.py reads and
writes HH:MM:SS.mmm timestamps.

RULES:
- Pure functions and frozen data; no global mutable state.
- Standard library only.
"""

from .gate import (
    CategoryFailure,
    QualityGateError,
    QualityGateResult,
    assert_subtitle_quality,
    format_gate_summary,
    run_quality_gate,
)
from .languages import (
    DEFAULT_PROFILE,
    LANGUAGE_PROFILES,
    LanguageProfile,
    get_language_profile,
    get_supported_languages,
    has_language_profile,
)
from .line_breaking import apply_line_breaking, find_optimal_line_break
from .models import QualityReport, Segment, SegmentLogprobs, SegmentScore, TokenLogprob, Violation
from .quality import ConfidenceThresholds, evaluate_subtitles, format_quality_report, report_to_dict

__all__ = [
    "CategoryFailure",
    "ConfidenceThresholds",
    "DEFAULT_PROFILE",
    "LANGUAGE_PROFILES",
    "LanguageProfile",
    "QualityGateError",
    "QualityGateResult",
    "QualityReport",
    "Segment",
    "SegmentLogprobs",
    "SegmentScore",
    "TokenLogprob",
    "Violation",
    "apply_line_breaking",
    "assert_subtitle_quality",
    "evaluate_subtitles",
    "find_optimal_line_break",
    "format_gate_summary",
    "format_quality_report",
    "get_language_profile",
    "get_supported_languages",
    "has_language_profile",
    "report_to_dict",
    "run_quality_gate",
]
