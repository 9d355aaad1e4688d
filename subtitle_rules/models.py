"""Data models shared by the line breaker and the quality scorer.

WHY: A subtitle track is a list of timed text cues no matter which tool
produced it. The scorer must evaluate tracks from the transcription
pipeline, from hand-edited SRT files, and from CI fixtures alike, so the
cue type and the report types live here, independent of any transcription
code.

HOW: Plain dataclasses. Segment is the universal cue; Violation, SegmentScore,
the per-category summaries, and QualityReport form the scorer's output tree.
TokenLogprob and SegmentLogprobs carry optional model confidence data.

RULES:
- Segment times are float seconds; text may contain "\\n" line separators.
- Violations are only ever produced by the scorer, never by the optimizer.
- Deductions are non-negative numbers; segment scores are floored at 0.
- Optional summaries (speaker attribution, confidence) are None when the
  input carries no speaker labels or no logprob data.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Segment:
    """A single subtitle cue.

    Attributes:
        start: Start time in seconds.
        end: End time in seconds (expected to be >= start).
        text: Cue text. Multiple display lines are separated by "\\n".
        speaker: Speaker label from diarization, or None.
    """
    start: float
    end: float
    text: str
    speaker: Optional[str] = None

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass
class TokenLogprob:
    """One decoded token and its log-probability (lower = less confident)."""
    token: str
    logprob: float


@dataclass
class SegmentLogprobs:
    """Token confidence data for the segment at ``segment_index``."""
    segment_index: int
    tokens: List[TokenLogprob] = field(default_factory=list)


@dataclass
class Violation:
    """A single rule violation found by the scorer.

    Attributes:
        category: Rule family, e.g. "readingSpeed", "gap", "content".
        severity: "low", "medium", "high" or "critical".
        message: Human-readable description.
        deduction: Points subtracted from the segment's 100-point score.
    """
    category: str
    severity: str
    message: str
    deduction: float


@dataclass
class SegmentScore:
    index: int
    start: float
    end: float
    text: str
    score: float
    violations: List[Violation] = field(default_factory=list)


@dataclass
class ReadingSpeedSummary:
    average_cps: float = 0.0
    max_cps: float = 0.0
    violation_count: int = 0
    violation_percentage: float = 0.0


@dataclass
class LineLengthSummary:
    max_cpl: int = 0
    violation_count: int = 0
    violation_percentage: float = 0.0


@dataclass
class LineCountSummary:
    violation_count: int = 0


@dataclass
class DurationSummary:
    too_short: int = 0
    too_long: int = 0
    average_duration: float = 0.0


@dataclass
class LineBreakingSummary:
    bad_break_count: int = 0
    bad_break_percentage: float = 0.0


@dataclass
class LineBalanceSummary:
    average_ratio: float = 0.0
    poor_balance_count: int = 0


@dataclass
class GapSummary:
    overlap_count: int = 0
    no_gap_count: int = 0
    too_small_gap_count: int = 0


@dataclass
class SpeakerAttributionSummary:
    total_speaker_changes: int = 0
    missing_attribution_count: int = 0
    missing_attribution_percentage: float = 0.0


@dataclass
class ConfidenceSummary:
    average_logprob: float = 0.0
    low_confidence_segments: int = 0
    low_confidence_percentage: float = 0.0
    possible_hallucination_count: int = 0


@dataclass
class CategorySummary:
    """Per-category breakdown of a whole subtitle track."""
    reading_speed: ReadingSpeedSummary = field(default_factory=ReadingSpeedSummary)
    line_length: LineLengthSummary = field(default_factory=LineLengthSummary)
    line_count: LineCountSummary = field(default_factory=LineCountSummary)
    duration: DurationSummary = field(default_factory=DurationSummary)
    line_breaking: LineBreakingSummary = field(default_factory=LineBreakingSummary)
    line_balance: LineBalanceSummary = field(default_factory=LineBalanceSummary)
    gaps: GapSummary = field(default_factory=GapSummary)
    speaker_attribution: Optional[SpeakerAttributionSummary] = None
    confidence: Optional[ConfidenceSummary] = None


@dataclass
class QualityReport:
    """Result of evaluating a subtitle track.

    Attributes:
        overall_score: Integer score 0-100 after file-level multipliers.
        quality_level: "Excellent", "Good", "Fair", "Poor" or "Failing".
        total_segments: Number of evaluated segments.
        total_duration: Sum of segment durations in seconds.
        categories: Per-category summary.
        segments: One SegmentScore per input segment, in input order.
    """
    overall_score: int
    quality_level: str
    total_segments: int
    total_duration: float
    categories: CategorySummary
    segments: List[SegmentScore] = field(default_factory=list)
