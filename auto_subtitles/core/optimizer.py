"""Duration and line optimization for raw transcription cues.

WHY: Providers segment speech by acoustics, not readability. Their cues are
often too short to read ("Hi" for 0.4 s), too long to fit on screen (a
15-second paragraph), or broken into three or more lines. This module
reshapes cues so each one can be read comfortably at the language's target
reading speed and fits the two-line layout.

HOW: A fixed sequence of passes, each returning new segments:
  1. optimize_segment_durations(): extend short cues, split long ones at
     word boundaries with time shared out in proportion to characters.
  2. merge_short_segments(): join sub-second cues into their neighbour.
  3. limit_segment_lines(): re-break text with the linguistic line breaker.
  4. validate_segment_timing(): remove overlaps and non-positive durations.
optimize_segments() runs them in that order.

RULES:
- No pass raises on malformed timing; invalid cues are repaired or dropped
- No pass mutates its input list or its segments
- Extensions never cross the next cue's start
- Cues from two different known speakers are never merged
- Output cues have at most OptimizerPolicy.max_lines lines and last at most
  OptimizerPolicy.max_duration seconds
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace

from auto_subtitles.core.ir import Segment
from subtitle_rules.languages import LanguageProfile, get_language_profile
from subtitle_rules.line_breaking import apply_line_breaking

# Models that return one coarse block of text; whisper cue timing is kept as is.
DURATION_SHAPING_MODEL_PREFIXES = ("gpt-",)


@dataclass(frozen=True)
class OptimizerPolicy:
    """Timing constants for the optimizer passes (seconds)."""

    min_duration: float = 1.5
    max_duration: float = 7.0
    merge_max_duration: float = 1.0
    merge_max_gap: float = 0.3
    extend_previous_max_gap: float = 0.5
    max_lines: int = 2
    min_valid_duration: float = 0.1


DEFAULT_POLICY = OptimizerPolicy()


def _is_finite(seg: Segment) -> bool:
    return math.isfinite(seg.start) and math.isfinite(seg.end)


def _is_valid(seg: Segment) -> bool:
    return _is_finite(seg) and seg.end >= seg.start


def _text_length(text: str) -> int:
    return len(" ".join(text.split()))


# ---------------------------------------------------------------------------
# Pass 1: durations
# ---------------------------------------------------------------------------


def _needs_split(seg: Segment, profile: LanguageProfile, policy: OptimizerPolicy) -> bool:
    length = _text_length(seg.text)
    required = length / profile.target_cps
    multi_word = len(seg.text.split()) > 1
    return multi_word and (
        required > policy.max_duration
        or length > policy.max_lines * profile.cpl
        or seg.duration > policy.max_duration
    )


def _split_segment(seg: Segment, profile: LanguageProfile, policy: OptimizerPolicy) -> list[Segment]:
    """Split a cue at word boundaries into readable pieces."""
    char_budget = policy.max_lines * profile.cpl
    pieces: list[list[str]] = []
    current: list[str] = []

    for word in seg.text.split():
        candidate_len = len(" ".join(current + [word]))
        too_slow = candidate_len / profile.target_cps > policy.max_duration
        if current and (too_slow or candidate_len > char_budget):
            pieces.append(current)
            current = []
        current.append(word)
    if current:
        pieces.append(current)

    texts = [" ".join(p) for p in pieces]
    total_chars = sum(len(t) for t in texts)
    span = seg.duration

    result: list[Segment] = []
    cursor = seg.start
    for i, text in enumerate(texts):
        share = span * len(text) / total_chars if total_chars else span / len(texts)
        start = cursor
        end = seg.end if i == len(texts) - 1 else min(seg.end, cursor + share)
        end = min(end, start + policy.max_duration)
        result.append(replace(seg, start=start, end=end, text=text))
        cursor += share
    return result


def optimize_segment_durations(
    segments: Sequence[Segment],
    language: str | None = None,
    policy: OptimizerPolicy | None = None,
) -> list[Segment]:
    """Extend short cues and split long ones.

    WHY: A cue must stay on screen long enough to be read at the
    language's target CPS, and no cue may exceed max_duration.

    HOW: Each cue gets a target duration of max(min_duration, chars/CPS),
    capped at max_duration. Short cues grow toward it without crossing the
    next cue; if that is not enough, the previous cue is extended to close a
    small gap instead. Cues that are too long to read, too long to fit two
    lines, or (multi-word) longer than max_duration are split.

    RULES:
    - Cues with end < start or non-finite times are dropped
    - Split pieces keep the original start; the last ends at or before the
      original end

    Args:
        segments: Cues in time order.
        language: ISO 639-1 code selecting the reading-speed profile.
        policy: Timing constants (default OptimizerPolicy()).

    Returns:
        New list of segments.
    """
    policy = policy or DEFAULT_POLICY
    profile = get_language_profile(language)
    valid = [replace(s) for s in segments if _is_valid(s)]
    result: list[Segment] = []

    for i, seg in enumerate(valid):
        if _needs_split(seg, profile, policy):
            result.extend(_split_segment(seg, profile, policy))
            continue

        required = _text_length(seg.text) / profile.target_cps
        target = min(max(policy.min_duration, required), policy.max_duration)
        following = valid[i + 1] if i + 1 < len(valid) else None
        limit = following.start if following is not None and following.start > seg.start else math.inf

        if seg.duration < target:
            seg.end = max(seg.end, min(seg.start + target, limit))
            if seg.duration < target and result:
                prev = result[-1]
                gap = seg.start - prev.end
                if 0 <= gap < policy.extend_previous_max_gap and seg.start - prev.start <= policy.max_duration:
                    prev.end = seg.start
        elif seg.duration > policy.max_duration:
            seg.end = seg.start + policy.max_duration

        result.append(seg)

    return result


# ---------------------------------------------------------------------------
# Pass 2: merging
# ---------------------------------------------------------------------------


def _speakers_compatible(a: Segment, b: Segment) -> bool:
    return a.speaker is None or b.speaker is None or a.speaker == b.speaker


def merge_short_segments(
    segments: Sequence[Segment],
    policy: OptimizerPolicy | None = None,
) -> list[Segment]:
    """Join sub-second cues into the following cue when the gap is small.

    Merged text is joined with a newline; chains of short cues collapse
    repeatedly while the merged cue stays under merge_max_duration.
    """
    policy = policy or DEFAULT_POLICY
    if not segments:
        return []

    result: list[Segment] = []
    current = replace(segments[0])
    for nxt in segments[1:]:
        gap = nxt.start - current.end
        merged_end = max(current.end, nxt.end)
        if (
            current.duration < policy.merge_max_duration
            and gap < policy.merge_max_gap
            and _speakers_compatible(current, nxt)
            and merged_end - current.start <= policy.max_duration
        ):
            current = replace(
                current,
                end=merged_end,
                text=f"{current.text}\n{nxt.text}",
                speaker=current.speaker or nxt.speaker,
            )
        else:
            result.append(current)
            current = replace(nxt)
    result.append(current)
    return result


# ---------------------------------------------------------------------------
# Pass 3: lines
# ---------------------------------------------------------------------------


def redistribute_lines(lines: list[str], max_lines: int = 2) -> list[str]:
    """Fold every line past ``max_lines - 1`` into the last allowed line."""
    if len(lines) <= max_lines:
        return list(lines)
    return lines[: max_lines - 1] + [" ".join(lines[max_lines - 1:])]


def _is_dash_dialogue(lines: list[str]) -> bool:
    return len(lines) >= 2 and all(line.lstrip().startswith("- ") for line in lines)


def limit_segment_lines(
    segments: Sequence[Segment],
    language: str | None = None,
    max_cpl: int | None = None,
    max_lines: int = 2,
) -> list[Segment]:
    """Re-break each cue into at most two lines at the best linguistic point.

    Two-speaker dash cues ("- Hi.\\n- Hello.") keep one line per speaker when
    every line fits; extra dash lines are folded into the second line.
    """
    cpl = max_cpl if max_cpl is not None else get_language_profile(language).cpl
    result: list[Segment] = []
    for seg in segments:
        lines = [line for line in seg.text.split("\n") if line.strip()]
        if _is_dash_dialogue(lines) and all(len(line) <= cpl for line in lines):
            text = "\n".join(redistribute_lines(lines, max_lines))
        else:
            text = apply_line_breaking(seg.text, cpl, language)
        result.append(replace(seg, text=text))
    return result


# ---------------------------------------------------------------------------
# Pass 4: timing validation and offsets
# ---------------------------------------------------------------------------


def validate_segment_timing(
    segments: Sequence[Segment],
    min_duration: float = DEFAULT_POLICY.min_valid_duration,
) -> list[Segment]:
    """Repair non-positive durations and overlaps.

    RULES:
    - end <= next.start whenever next.start > start
    - duration >= min_duration unless that would cross the next start
    """
    result = [replace(s) for s in segments]
    for i, seg in enumerate(result):
        following = result[i + 1] if i + 1 < len(result) else None
        next_start = following.start if following is not None and following.start > seg.start else None

        if seg.end <= seg.start:
            seg.end = seg.start + min_duration
        if next_start is not None and seg.end > next_start:
            seg.end = next_start
        if seg.end - seg.start < min_duration:
            wanted = seg.start + min_duration
            if next_start is not None:
                wanted = min(wanted, next_start)
            seg.end = max(seg.end, wanted)
    return result


def adjust_segment_timecodes(segments: Sequence[Segment], offset: float) -> list[Segment]:
    """Return copies shifted by ``offset`` seconds."""
    return [replace(s, start=s.start + offset, end=s.end + offset) for s in segments]


def uses_duration_shaping(model: str | None) -> bool:
    """gpt-4o family models get duration shaping; whisper cue timing is kept."""
    return bool(model) and model.startswith(DURATION_SHAPING_MODEL_PREFIXES)


def optimize_segments(
    segments: Sequence[Segment],
    model: str = "whisper-1",
    language: str | None = None,
    policy: OptimizerPolicy | None = None,
) -> list[Segment]:
    """Run every optimizer pass in order and return readable cues."""
    policy = policy or DEFAULT_POLICY
    shaped = (
        optimize_segment_durations(segments, language, policy)
        if uses_duration_shaping(model)
        else [replace(s) for s in segments if _is_finite(s)]
    )
    merged = merge_short_segments(shaped, policy)
    limited = limit_segment_lines(merged, language, max_lines=policy.max_lines)
    return validate_segment_timing(limited, policy.min_valid_duration)
