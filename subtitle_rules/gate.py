"""Pass/fail quality gate over the subtitle scorer.

WHY: CI pipelines and the transcription CLI need a single yes/no answer plus
a short list of what went wrong, not a full report. The gate wraps
evaluate_subtitles() with a threshold and category-level failure checks.

HOW: run_quality_gate() scores the track, compares the overall score to the
threshold, and scans the category summary for systemic problems (e.g. more
than 20% of cues reading too fast). format_gate_summary() renders a
one-line status plus an issue list; assert_subtitle_quality() turns a
failure into an exception for test suites.

RULES:
- run_quality_gate() never raises on a low score; it returns passed=False.
- Category failures are informational; only the score decides pass/fail.
- Empty input fails with score 0 and a single "content" failure.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .models import QualityReport, Segment, SegmentLogprobs
from .quality import evaluate_subtitles, format_quality_report

DEFAULT_THRESHOLD = 70


@dataclass
class CategoryFailure:
    category: str
    detail: str


@dataclass
class QualityGateResult:
    """Outcome of a gate run.

    Attributes:
        passed: True when score >= threshold.
        score: Overall score 0-100.
        threshold: The threshold used.
        quality_level: Level label from the scorer.
        report: Full plain-text report.
        segments_below_threshold: Segments whose own score is below threshold.
        total_segments: Number of evaluated segments.
        category_failures: Systemic problems found in the category summary.
        full_report: The structured QualityReport.
    """
    passed: bool
    score: int
    threshold: float
    quality_level: str
    report: str
    segments_below_threshold: int
    total_segments: int
    category_failures: List[CategoryFailure] = field(default_factory=list)
    full_report: Optional[QualityReport] = None


class QualityGateError(AssertionError):
    """Raised by assert_subtitle_quality() when a track fails the gate."""

    def __init__(self, summary: str, report: str):
        self.summary = summary
        self.report = report
        super().__init__("Subtitle quality gate failed:\n{}\n\n{}".format(summary, report))


def _category_failures(report: QualityReport) -> List[CategoryFailure]:
    cat = report.categories
    failures = []

    if cat.reading_speed.violation_percentage > 20:
        failures.append(CategoryFailure(
            "readingSpeed",
            "{} segments ({:.0f}%) exceed target CPS; max CPS: {:.1f}".format(
                cat.reading_speed.violation_count,
                cat.reading_speed.violation_percentage,
                cat.reading_speed.max_cps,
            ),
        ))
    if cat.line_length.violation_percentage > 10:
        failures.append(CategoryFailure(
            "lineLength",
            "{} segments ({:.0f}%) exceed CPL limit; max CPL: {}".format(
                cat.line_length.violation_count,
                cat.line_length.violation_percentage,
                cat.line_length.max_cpl,
            ),
        ))
    if cat.line_count.violation_count > 0:
        failures.append(CategoryFailure(
            "lineCount",
            "{} segments exceed 2-line maximum".format(cat.line_count.violation_count),
        ))
    if cat.duration.too_short > 0:
        failures.append(CategoryFailure(
            "duration",
            "{} segments are too short (below minimum duration)".format(cat.duration.too_short),
        ))
    if cat.duration.too_long > 0:
        failures.append(CategoryFailure(
            "duration",
            "{} segments are too long (above maximum duration)".format(cat.duration.too_long),
        ))
    if cat.line_breaking.bad_break_percentage > 30:
        failures.append(CategoryFailure(
            "lineBreaking",
            "{} multi-line segments ({:.0f}%) have poor line breaks".format(
                cat.line_breaking.bad_break_count, cat.line_breaking.bad_break_percentage
            ),
        ))
    if cat.gaps.overlap_count > 0:
        failures.append(CategoryFailure(
            "gaps", "{} segment overlaps detected".format(cat.gaps.overlap_count)
        ))
    if cat.gaps.no_gap_count > report.total_segments * 0.1:
        failures.append(CategoryFailure(
            "gaps",
            "{} segments have zero gap with the next subtitle".format(cat.gaps.no_gap_count),
        ))

    attribution = cat.speaker_attribution
    if attribution is not None and attribution.missing_attribution_percentage > 20:
        failures.append(CategoryFailure(
            "speakerAttribution",
            "{} speaker changes ({:.0f}%) lack proper attribution".format(
                attribution.missing_attribution_count,
                attribution.missing_attribution_percentage,
            ),
        ))

    confidence = cat.confidence
    if confidence is not None and confidence.low_confidence_percentage > 10:
        failures.append(CategoryFailure(
            "confidence",
            "{} segments ({:.0f}%) have low transcription confidence".format(
                confidence.low_confidence_segments, confidence.low_confidence_percentage
            ),
        ))
    if confidence is not None and confidence.possible_hallucination_count > 0:
        failures.append(CategoryFailure(
            "confidence",
            "{} possible hallucination sequences detected".format(
                confidence.possible_hallucination_count
            ),
        ))
    return failures


def run_quality_gate(
    segments: Sequence[Segment],
    threshold: float = DEFAULT_THRESHOLD,
    language: Optional[str] = None,
    logprobs: Optional[Sequence[SegmentLogprobs]] = None,
) -> QualityGateResult:
    """Score ``segments`` and decide pass/fail against ``threshold``."""
    language = language or "en"

    if not segments:
        return QualityGateResult(
            passed=False,
            score=0,
            threshold=threshold,
            quality_level="Failing",
            report="No segments to evaluate.",
            segments_below_threshold=0,
            total_segments=0,
            category_failures=[CategoryFailure("content", "No subtitle segments provided")],
            full_report=evaluate_subtitles([], language),
        )

    evaluation = evaluate_subtitles(segments, language, logprobs)
    return QualityGateResult(
        passed=evaluation.overall_score >= threshold,
        score=evaluation.overall_score,
        threshold=threshold,
        quality_level=evaluation.quality_level,
        report=format_quality_report(evaluation),
        segments_below_threshold=sum(1 for s in evaluation.segments if s.score < threshold),
        total_segments=len(segments),
        category_failures=_category_failures(evaluation),
        full_report=evaluation,
    )


def format_gate_summary(result: QualityGateResult) -> str:
    """One status line plus an indented issue list."""
    parts = [
        "Score: {}/{:g}".format(result.score, result.threshold),
        "Level: {}".format(result.quality_level),
        "Segments: {}".format(result.total_segments),
    ]
    if result.segments_below_threshold > 0:
        parts.append("Below threshold: {}".format(result.segments_below_threshold))

    summary = "[{}] {}".format("PASS" if result.passed else "FAIL", " | ".join(parts))
    if result.category_failures:
        summary += "\nIssues:"
        for failure in result.category_failures:
            summary += "\n  - [{}] {}".format(failure.category, failure.detail)
    return summary


def assert_subtitle_quality(
    segments: Sequence[Segment],
    threshold: float = DEFAULT_THRESHOLD,
    language: Optional[str] = None,
    logprobs: Optional[Sequence[SegmentLogprobs]] = None,
) -> QualityGateResult:
    """Run the gate and raise QualityGateError if it fails."""
    result = run_quality_gate(segments, threshold, language, logprobs)
    if not result.passed:
        raise QualityGateError(format_gate_summary(result), result.report)
    return result
