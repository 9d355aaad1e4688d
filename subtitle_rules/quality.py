"""Subtitle quality scoring against broadcast readability standards.

WHY: Generated subtitles need an objective, repeatable quality number so
regressions in the pipeline show up in CI and so a human reviewer knows which
cues to look at first. The rules follow the Netflix Timed Text Style Guide,
BBC subtitle guidelines and EBU-TT-D practice: reading speed, line length,
line count, duration, linguistic line breaks, line balance, inter-cue gaps,
speaker attribution, and (when available) model confidence.

HOW: Each segment starts at 100 and every rule that fires subtracts a
deduction (score floored at 0). The overall score is the duration-weighted
mean of segment scores, reduced by file-level multipliers when a problem is
systemic (e.g. more than 20% of cues read too fast), then rounded and
clamped to 0-100. All thresholds come from the language profile.

RULES:
- Scoring never raises for malformed timing: a zero or negative duration
  yields an infinite CPS, which is reported as a violation.
- Infinite CPS values are excluded from the average/max summary figures so
  the report stays JSON-serializable.
- Speaker attribution and confidence summaries appear only when the input
  carries speaker labels or logprob data.
- Segment order is the input order; neighbours are the list neighbours.
"""

import math
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

from .languages import LanguageProfile, get_language_profile
from .models import (
    CategorySummary,
    ConfidenceSummary,
    DurationSummary,
    GapSummary,
    LineBalanceSummary,
    LineBreakingSummary,
    LineCountSummary,
    LineLengthSummary,
    QualityReport,
    ReadingSpeedSummary,
    Segment,
    SegmentLogprobs,
    SegmentScore,
    SpeakerAttributionSummary,
    Violation,
)
from .wordlists import SCORER_ARTICLES, SCORER_AUXILIARIES, SCORER_NEGATIONS, clean_token

# Netflix absolute minimum display time (5/6 s).
ABSOLUTE_MIN_DURATION = 0.83
VERY_LOW_CPS = 3
SPEAKER_LABEL_MAX_CHARS = 10
SPEAKER_LABEL_RE = re.compile(r"^-\s+([^:]+):\s")
HALLUCINATION_MARKER = "possible hallucination"


@dataclass(frozen=True)
class ConfidenceThresholds:
    """Logprob thresholds for the confidence rules.

    Attributes:
        low_average: Average logprob below this is "low confidence".
        medium_average: Average logprob below this is "medium confidence".
        very_low_token: Any single token below this is flagged.
        hallucination_token: Tokens below this count toward a suspicious run.
        hallucination_run: Run length that flags a possible hallucination.
    """
    low_average: float = -2.0
    medium_average: float = -0.5
    very_low_token: float = -5.0
    hallucination_token: float = -2.0
    hallucination_run: int = 3
    low_average_deduction: float = 15
    medium_average_deduction: float = 5
    very_low_token_deduction: float = 10
    hallucination_deduction: float = 20


DEFAULT_CONFIDENCE = ConfidenceThresholds()


# =============================================================================
# Helpers
# =============================================================================

def get_lines(text: str) -> List[str]:
    return [line for line in text.split("\n") if line]


def display_length(text: str) -> int:
    """Characters shown on screen (newlines excluded)."""
    return len(text.replace("\n", ""))


def characters_per_second(segment: Segment) -> float:
    duration = segment.end - segment.start
    if duration <= 0:
        return math.inf
    return display_length(segment.text) / duration


def quality_level(score: float) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 75:
        return "Good"
    if score >= 60:
        return "Fair"
    if score >= 40:
        return "Poor"
    return "Failing"


def _last_word(line: str) -> str:
    parts = line.split()
    return clean_token(parts[-1]) if parts else ""


def _first_word(line: str) -> str:
    parts = line.split()
    return clean_token(parts[0]) if parts else ""


# =============================================================================
# Per-segment rules
# =============================================================================

def score_empty(segment: Segment) -> List[Violation]:
    if segment.text.strip():
        return []
    return [Violation("content", "critical", "Segment has empty or whitespace-only text", 50)]


def score_reading_speed(segment: Segment, profile: LanguageProfile) -> List[Violation]:
    violations = []
    cps = characters_per_second(segment)
    target = profile.target_cps
    maximum = profile.max_cps

    if cps > maximum:
        violations.append(Violation(
            "readingSpeed", "high",
            "CPS {:.1f} exceeds maximum acceptable {:g} (target: {:g})".format(cps, maximum, target),
            30,
        ))
    elif cps > target + 3:
        excess = cps - (target + 3)
        violations.append(Violation(
            "readingSpeed", "medium",
            "CPS {:.1f} is notably above target {:g}".format(cps, target),
            15 + math.floor(excess) * 10,
        ))
    elif cps > target:
        violations.append(Violation(
            "readingSpeed", "low",
            "CPS {:.1f} slightly exceeds target {:g}".format(cps, target),
            math.ceil(cps - target) * 5,
        ))

    if 0 < cps < VERY_LOW_CPS:
        violations.append(Violation(
            "readingSpeed", "low",
            "CPS {:.1f} is very low; subtitle displayed much longer than needed".format(cps),
            5,
        ))
    return violations


def score_line_length(segment: Segment, profile: LanguageProfile) -> List[Violation]:
    violations = []
    cpl = profile.cpl
    for number, line in enumerate(get_lines(segment.text), 1):
        excess = len(line) - cpl
        if excess <= 0:
            continue
        message = "Line {} has {} characters, exceeds limit of {} by {}".format(
            number, len(line), cpl, excess
        )
        if excess > 10:
            violations.append(Violation("lineLength", "high", message, 20))
        elif excess > 5:
            violations.append(Violation("lineLength", "medium", message, 5 * (excess - 5) + 15))
        else:
            violations.append(Violation("lineLength", "low", message, excess * 3))
    return violations


def score_line_count(segment: Segment, profile: LanguageProfile) -> List[Violation]:
    count = len(get_lines(segment.text))
    message = "Segment has {} lines, maximum is {}".format(count, profile.max_lines)
    if count > profile.max_lines + 1:
        return [Violation("lineCount", "critical", message, 30)]
    if count > profile.max_lines:
        return [Violation("lineCount", "high", message, 15)]
    return []


def score_duration(segment: Segment, profile: LanguageProfile) -> List[Violation]:
    violations = []
    duration = segment.end - segment.start

    if duration < ABSOLUTE_MIN_DURATION:
        violations.append(Violation(
            "duration", "high",
            "Duration {:.2f}s is below minimum {}s".format(duration, ABSOLUTE_MIN_DURATION),
            15,
        ))
    elif duration < profile.min_duration:
        violations.append(Violation(
            "duration", "low",
            "Duration {:.2f}s is below ideal minimum {}s".format(duration, profile.min_duration),
            5,
        ))

    if duration > profile.max_duration + 1:
        violations.append(Violation(
            "duration", "high",
            "Duration {:.2f}s exceeds maximum {}s".format(duration, profile.max_duration),
            15,
        ))
    elif duration > profile.max_duration:
        violations.append(Violation(
            "duration", "low",
            "Duration {:.2f}s slightly exceeds maximum {}s".format(duration, profile.max_duration),
            5,
        ))
    return violations


def score_line_breaking(segment: Segment) -> List[Violation]:
    violations = []
    lines = get_lines(segment.text)
    for current, following in zip(lines, lines[1:]):
        last = _last_word(current)
        first_next = _first_word(following)
        if last in SCORER_ARTICLES:
            violations.append(Violation(
                "lineBreaking", "high",
                'Line break splits article "{}" from its noun "{}"'.format(last, first_next),
                10,
            ))
        if last in SCORER_AUXILIARIES:
            violations.append(Violation(
                "lineBreaking", "medium",
                'Line break splits auxiliary "{}" from verb'.format(last),
                8,
            ))
        if last in SCORER_NEGATIONS:
            violations.append(Violation(
                "lineBreaking", "high",
                'Line break splits negation "{}" from verb'.format(last),
                10,
            ))
    return violations


def score_line_balance(segment: Segment) -> List[Violation]:
    lines = get_lines(segment.text)
    if len(lines) != 2:
        return []
    len1, len2 = len(lines[0]), len(lines[1])
    longer = max(len1, len2)
    if longer == 0:
        return []
    ratio = min(len1, len2) / longer
    detail = "{} / {} characters (ratio {:.2f})".format(len1, len2, ratio)

    if ratio < 0.2:
        return [Violation("lineBalance", "medium", "Very unbalanced lines: " + detail, 10)]
    if ratio < 0.35:
        return [Violation("lineBalance", "low", "Notably unbalanced lines: " + detail, 6)]
    if ratio < 0.5:
        return [Violation("lineBalance", "low", "Slightly unbalanced lines: " + detail, 3)]
    return []


def score_gap(current: Segment, following: Optional[Segment], profile: LanguageProfile) -> List[Violation]:
    if following is None:
        return []
    gap = following.start - current.end
    if gap < 0:
        return [Violation("gap", "critical", "Overlap of {:.3f}s with next segment".format(-gap), 20)]
    if gap == 0:
        return [Violation(
            "gap", "medium",
            "No gap between segments; viewer cannot distinguish subtitle change",
            8,
        )]
    if gap < profile.min_gap:
        return [Violation(
            "gap", "low",
            "Gap of {:.0f}ms is below minimum {:.0f}ms".format(gap * 1000, profile.min_gap * 1000),
            5,
        )]
    return []


def score_speaker_attribution(segment: Segment, previous: Optional[Segment]) -> List[Violation]:
    violations = []
    lines = get_lines(segment.text)
    speaker_change = (
        previous is not None
        and previous.speaker is not None
        and segment.speaker is not None
        and previous.speaker != segment.speaker
    )
    dashed = [line for line in lines if line.lstrip().startswith("- ")]

    if speaker_change and len(lines) >= 2 and not dashed:
        violations.append(Violation(
            "speakerAttribution", "high",
            "Speaker change detected but lines lack dash prefix formatting",
            15,
        ))
    if dashed and len(dashed) != len(lines):
        violations.append(Violation(
            "speakerAttribution", "medium",
            "{} of {} lines have dash prefix; all should have it for consistency".format(
                len(dashed), len(lines)
            ),
            10,
        ))
    for line in lines:
        match = SPEAKER_LABEL_RE.match(line)
        if match and len(match.group(1)) > SPEAKER_LABEL_MAX_CHARS:
            violations.append(Violation(
                "speakerAttribution", "low",
                'Speaker label "{}" exceeds {} characters, consuming CPL budget'.format(
                    match.group(1), SPEAKER_LABEL_MAX_CHARS
                ),
                3,
            ))
    return violations


def _average_logprob(logprobs: SegmentLogprobs) -> float:
    return sum(t.logprob for t in logprobs.tokens) / len(logprobs.tokens)


def score_confidence(
    logprobs: Optional[SegmentLogprobs],
    thresholds: ConfidenceThresholds = DEFAULT_CONFIDENCE,
) -> List[Violation]:
    if logprobs is None or not logprobs.tokens:
        return []
    violations = []
    average = _average_logprob(logprobs)
    lowest = min(logprobs.tokens, key=lambda t: t.logprob)

    if average < thresholds.low_average:
        violations.append(Violation(
            "confidence", "high",
            "Low average confidence (logprob {:.2f}); likely transcription errors".format(average),
            thresholds.low_average_deduction,
        ))
    elif average < thresholds.medium_average:
        violations.append(Violation(
            "confidence", "low",
            "Medium confidence (logprob {:.2f}); may contain errors".format(average),
            thresholds.medium_average_deduction,
        ))

    if lowest.logprob < thresholds.very_low_token:
        violations.append(Violation(
            "confidence", "high",
            'Token "{}" has very low confidence (logprob {:.2f})'.format(lowest.token, lowest.logprob),
            thresholds.very_low_token_deduction,
        ))

    run = longest = 0
    for token in logprobs.tokens:
        run = run + 1 if token.logprob < thresholds.hallucination_token else 0
        longest = max(longest, run)
    if longest >= thresholds.hallucination_run:
        violations.append(Violation(
            "confidence", "critical",
            "{} consecutive low-confidence tokens detected; {}".format(longest, HALLUCINATION_MARKER),
            thresholds.hallucination_deduction,
        ))
    return violations


def score_segment(
    segment: Segment,
    index: int,
    previous: Optional[Segment],
    following: Optional[Segment],
    profile: LanguageProfile,
    logprobs: Optional[SegmentLogprobs] = None,
    thresholds: ConfidenceThresholds = DEFAULT_CONFIDENCE,
) -> SegmentScore:
    """Apply every rule to one segment and return its 0-100 score."""
    violations = (
        score_empty(segment)
        + score_reading_speed(segment, profile)
        + score_line_length(segment, profile)
        + score_line_count(segment, profile)
        + score_duration(segment, profile)
        + score_line_breaking(segment)
        + score_line_balance(segment)
        + score_gap(segment, following, profile)
        + score_speaker_attribution(segment, previous)
        + score_confidence(logprobs, thresholds)
    )
    total = sum(v.deduction for v in violations)
    return SegmentScore(
        index=index,
        start=segment.start,
        end=segment.end,
        text=segment.text,
        score=max(0, 100 - total),
        violations=violations,
    )


# =============================================================================
# Track evaluation
# =============================================================================

def evaluate_subtitles(
    segments: Sequence[Segment],
    language: str = "en",
    logprobs: Optional[Sequence[SegmentLogprobs]] = None,
    thresholds: ConfidenceThresholds = DEFAULT_CONFIDENCE,
) -> QualityReport:
    """Score a subtitle track.

    Args:
        segments: Cues in display order.
        language: ISO 639-1 code selecting the language profile.
        logprobs: Optional per-segment token confidence, keyed by segment_index.
        thresholds: Confidence rule thresholds.

    Returns:
        QualityReport with overall score, level, category summary, and one
        SegmentScore per input segment. Empty input scores 0 ("Failing").
    """
    if not segments:
        return QualityReport(
            overall_score=0,
            quality_level="Failing",
            total_segments=0,
            total_duration=0.0,
            categories=CategorySummary(),
            segments=[],
        )

    profile = get_language_profile(language)
    logprob_map = {lp.segment_index: lp for lp in (logprobs or [])}
    count = len(segments)

    scores = [
        score_segment(
            seg,
            i,
            segments[i - 1] if i > 0 else None,
            segments[i + 1] if i + 1 < count else None,
            profile,
            logprob_map.get(i),
            thresholds,
        )
        for i, seg in enumerate(segments)
    ]

    total_duration = sum(s.end - s.start for s in segments)
    weighted = 0.0
    for seg, seg_score in zip(segments, scores):
        weight = (seg.end - seg.start) / total_duration if total_duration > 0 else 1 / count
        weighted += seg_score.score * weight

    finite_cps: List[float] = []
    cps_violations = cpl_violations = line_count_violations = 0
    max_line = 0
    too_short = too_long = 0
    bad_breaks = multi_line = 0
    ratios: List[float] = []
    poor_balance = 0
    overlaps = no_gap = small_gap = 0
    has_speakers = False
    speaker_changes = missing_attribution = 0
    segment_averages: List[float] = []
    low_confidence = hallucinations = 0

    for i, seg in enumerate(segments):
        seg_score = scores[i]
        categories = {v.category for v in seg_score.violations}
        cps = characters_per_second(seg)
        duration = seg.end - seg.start
        lines = get_lines(seg.text)

        if math.isfinite(cps):
            finite_cps.append(cps)
        if cps > profile.target_cps:
            cps_violations += 1

        for line in lines:
            max_line = max(max_line, len(line))
        if any(len(line) > profile.cpl for line in lines):
            cpl_violations += 1
        if len(lines) > profile.max_lines:
            line_count_violations += 1
        if duration < profile.min_duration:
            too_short += 1
        if duration > profile.max_duration:
            too_long += 1

        if len(lines) >= 2:
            multi_line += 1
            if "lineBreaking" in categories:
                bad_breaks += 1
            longer = max(len(lines[0]), len(lines[1]))
            if longer > 0:
                ratio = min(len(lines[0]), len(lines[1])) / longer
                ratios.append(ratio)
                if ratio < 0.35:
                    poor_balance += 1

        if i + 1 < count:
            gap = segments[i + 1].start - seg.end
            if gap < 0:
                overlaps += 1
            elif gap == 0:
                no_gap += 1
            elif gap < profile.min_gap:
                small_gap += 1

        if seg.speaker is not None:
            has_speakers = True
            if i > 0 and segments[i - 1].speaker != seg.speaker:
                speaker_changes += 1
                if "speakerAttribution" in categories:
                    missing_attribution += 1

        seg_logprobs = logprob_map.get(i)
        if seg_logprobs is not None and seg_logprobs.tokens:
            average = _average_logprob(seg_logprobs)
            segment_averages.append(average)
            if average < thresholds.low_average:
                low_confidence += 1
            if any(HALLUCINATION_MARKER in v.message for v in seg_score.violations):
                hallucinations += 1

    multiplier = 1.0
    if cps_violations / count > 0.2:
        multiplier *= 0.95
    if cpl_violations / count > 0.1:
        multiplier *= 0.95
    if overlaps / count > 0.05:
        multiplier *= 0.9
    if any(s.score < 40 for s in scores):
        multiplier *= 0.95
    if multi_line and bad_breaks / multi_line > 0.5:
        multiplier *= 0.9
    if segment_averages and low_confidence / len(segment_averages) > 0.1:
        multiplier *= 0.9
    if speaker_changes and missing_attribution / speaker_changes > 0.2:
        multiplier *= 0.9

    # Halves round up.
    final = max(0, min(100, int(math.floor(weighted * multiplier + 0.5))))

    summary = CategorySummary(
        reading_speed=ReadingSpeedSummary(
            average_cps=sum(finite_cps) / len(finite_cps) if finite_cps else 0.0,
            max_cps=max(finite_cps) if finite_cps else 0.0,
            violation_count=cps_violations,
            violation_percentage=cps_violations / count * 100,
        ),
        line_length=LineLengthSummary(
            max_cpl=max_line,
            violation_count=cpl_violations,
            violation_percentage=cpl_violations / count * 100,
        ),
        line_count=LineCountSummary(violation_count=line_count_violations),
        duration=DurationSummary(
            too_short=too_short,
            too_long=too_long,
            average_duration=total_duration / count,
        ),
        line_breaking=LineBreakingSummary(
            bad_break_count=bad_breaks,
            bad_break_percentage=bad_breaks / multi_line * 100 if multi_line else 0.0,
        ),
        line_balance=LineBalanceSummary(
            average_ratio=sum(ratios) / len(ratios) if ratios else 1.0,
            poor_balance_count=poor_balance,
        ),
        gaps=GapSummary(overlap_count=overlaps, no_gap_count=no_gap, too_small_gap_count=small_gap),
    )
    if has_speakers:
        summary.speaker_attribution = SpeakerAttributionSummary(
            total_speaker_changes=speaker_changes,
            missing_attribution_count=missing_attribution,
            missing_attribution_percentage=(
                missing_attribution / speaker_changes * 100 if speaker_changes else 0.0
            ),
        )
    if segment_averages:
        summary.confidence = ConfidenceSummary(
            average_logprob=sum(segment_averages) / len(segment_averages),
            low_confidence_segments=low_confidence,
            low_confidence_percentage=low_confidence / len(segment_averages) * 100,
            possible_hallucination_count=hallucinations,
        )

    return QualityReport(
        overall_score=final,
        quality_level=quality_level(final),
        total_segments=count,
        total_duration=total_duration,
        categories=summary,
        segments=scores,
    )


# =============================================================================
# Output
# =============================================================================

def _preview(text: str, limit: int = 50) -> str:
    if len(text) > limit:
        return text[:limit].replace("\n", " ") + "..."
    return text.replace("\n", " ")


def format_quality_report(report: QualityReport) -> str:
    """Render a QualityReport as a plain-text block for logs and the CLI."""
    cat = report.categories
    lines = [
        "Subtitle Quality Report",
        "=======================",
        "Overall Score: {}/100 ({})".format(report.overall_score, report.quality_level),
        "Total Segments: {}".format(report.total_segments),
        "Total Duration: {:.1f}s".format(report.total_duration),
        "",
        "Reading Speed:",
        "  Average CPS: {:.1f}".format(cat.reading_speed.average_cps),
        "  Max CPS: {:.1f}".format(cat.reading_speed.max_cps),
        "  Violations: {} ({:.1f}%)".format(
            cat.reading_speed.violation_count, cat.reading_speed.violation_percentage
        ),
        "Line Length:",
        "  Max CPL: {}".format(cat.line_length.max_cpl),
        "  Violations: {} ({:.1f}%)".format(
            cat.line_length.violation_count, cat.line_length.violation_percentage
        ),
        "Line Count Violations: {}".format(cat.line_count.violation_count),
        "Duration:",
        "  Too Short: {}".format(cat.duration.too_short),
        "  Too Long: {}".format(cat.duration.too_long),
        "  Average: {:.2f}s".format(cat.duration.average_duration),
        "Line Breaking:",
        "  Bad Breaks: {} ({:.1f}% of multi-line)".format(
            cat.line_breaking.bad_break_count, cat.line_breaking.bad_break_percentage
        ),
        "Line Balance:",
        "  Average Ratio: {:.2f}".format(cat.line_balance.average_ratio),
        "  Poor Balance Count: {}".format(cat.line_balance.poor_balance_count),
        "Gaps:",
        "  Overlaps: {}".format(cat.gaps.overlap_count),
        "  No Gap: {}".format(cat.gaps.no_gap_count),
        "  Too Small Gap: {}".format(cat.gaps.too_small_gap_count),
    ]

    if cat.speaker_attribution is not None:
        attribution = cat.speaker_attribution
        lines += [
            "Speaker Attribution:",
            "  Speaker Changes: {}".format(attribution.total_speaker_changes),
            "  Missing Attribution: {} ({:.1f}%)".format(
                attribution.missing_attribution_count,
                attribution.missing_attribution_percentage,
            ),
        ]

    if cat.confidence is not None:
        confidence = cat.confidence
        lines += [
            "Transcription Confidence:",
            "  Average Logprob: {:.2f}".format(confidence.average_logprob),
            "  Low Confidence Segments: {} ({:.1f}%)".format(
                confidence.low_confidence_segments, confidence.low_confidence_percentage
            ),
            "  Possible Hallucinations: {}".format(confidence.possible_hallucination_count),
        ]

    worst = [s for s in sorted(report.segments, key=lambda s: s.score)[:5] if s.score < 100]
    if worst:
        lines += ["", "Lowest Scoring Segments:"]
        for seg in worst:
            lines.append('  #{} [{:.1f}s-{:.1f}s] Score: {:g} "{}"'.format(
                seg.index + 1, seg.start, seg.end, seg.score, _preview(seg.text)
            ))
            for v in seg.violations:
                lines.append("    - [{}] {} (-{:g})".format(v.severity, v.message, v.deduction))

    return "\n".join(lines)


def report_to_dict(report: QualityReport) -> Dict[str, Any]:
    """JSON-ready dict of a QualityReport (snake_case keys, None for absent summaries)."""
    return asdict(report)
