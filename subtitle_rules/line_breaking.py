"""Linguistic line breaking for subtitle cues.

WHY: Where a two-line subtitle is split matters as much as how long the
lines are. "I told him that the / book was lost" forces the reader to hold
"the" in mind across lines; "I told him / that the book was lost" does not.
This module finds the split that keeps syntactic units together while
staying inside the per-language characters-per-line (CPL) limit.

HOW: For space-separated scripts every word boundary whose first line fits
CPL is scored by score_break_point(): strong bonuses for punctuation and
clause starts, penalties for separating articles, negations, prepositions,
auxiliaries and determiners from the following word, plus a small balance
term that prefers even or bottom-heavy layouts. The highest score wins.
CJK text has no spaces, so it is split by character index near the middle,
honoring kinsoku rules (no closing punctuation at line start, no opening
bracket at line end).

RULES:
- Output is always 1 or 2 lines; input newlines are treated as spaces.
- Text that already fits one line is returned unchanged (idempotent).
- Line 1 never exceeds CPL unless a single word is longer than CPL, in
  which case the word is hard-sliced.
- Line 2 may exceed CPL only when no better split exists; callers that need
  a strict character budget split the cue in time first.
"""

import re
from typing import List, Optional

from .languages import get_language_profile
from .wordlists import (
    ARTICLES,
    AUXILIARIES,
    CONJUNCTIONS,
    DETERMINERS_AND_SHORT_ADJECTIVES,
    NEGATIONS,
    PARTICLES,
    PREPOSITIONS,
    clean_token,
)

# =============================================================================
# Patterns
# =============================================================================

SENTENCE_END_RE = re.compile(r"[.!?]$")
CLAUSE_END_RE = re.compile(r"[,;:]$")
CLOSING_QUOTE_RE = re.compile(r"[\"”)\]]$")
DASH_END_RE = re.compile(r"[-–—]$")
CJK_RE = re.compile(r"[一-鿿぀-ヿ가-힯㐀-䶿]")

# Kinsoku: characters that may not start a line / may not end a line.
CJK_NO_START = frozenset("）」』】〉》。、，！？；：.!?,;:)>}]．，")
CJK_NO_END = frozenset("（「『【〈《(<{[")

LINE2_OVERFLOW_PENALTY = 200


def normalize_text(text: str) -> str:
    """Replace newlines with spaces, collapse whitespace, and trim."""
    return re.sub(r"\s+", " ", text.replace("\n", " ")).strip()


def is_cjk(text: str) -> bool:
    return bool(CJK_RE.search(text))


# =============================================================================
# Scoring
# =============================================================================

def score_break_point(words: List[str], i: int, total_length: int) -> float:
    """Score a line break placed after ``words[i]``.

    Args:
        words: The cue's words in order.
        i: Index of the last word on line 1.
        total_length: Character length of the whole normalized cue text.

    Returns:
        Higher is better. Typical range is roughly -150 to +200.
    """
    raw_before = words[i]
    raw_after = words[i + 1] if i + 1 < len(words) else ""
    before = clean_token(raw_before)
    after = clean_token(raw_after)

    score = 0.0

    # Natural break points
    if SENTENCE_END_RE.search(raw_before) or raw_before.endswith("..."):
        score += 100
    if CLAUSE_END_RE.search(raw_before):
        score += 60
    if CLOSING_QUOTE_RE.search(raw_before):
        score += 50
    if after in CONJUNCTIONS:
        score += 40
    if DASH_END_RE.search(raw_before) or raw_before.endswith("--"):
        score += 35
    if after in PREPOSITIONS:
        score += 15

    # Bound pairs that must not be separated
    if before in ARTICLES:
        score -= 50
    if before in NEGATIONS:
        score -= 45
    if before in PREPOSITIONS:
        score -= 40
    if before in AUXILIARIES:
        score -= 35
    if before in DETERMINERS_AND_SHORT_ADJECTIVES:
        score -= 30
    if (
        after in PARTICLES
        and before not in ARTICLES
        and before not in PREPOSITIONS
        and before not in CONJUNCTIONS
    ):
        score -= 25

    left_length = len(" ".join(words[: i + 1]))
    if total_length > 0:
        balance = 1 - abs(left_length / total_length - 0.5) * 2
        score += balance * 15
    if left_length < total_length - left_length:
        score += 2

    return score


# =============================================================================
# Fallbacks
# =============================================================================

def fallback_break(words: List[str], max_cpl: int) -> List[str]:
    """Greedy wrap: fill line 1 up to CPL, put everything else on line 2."""
    line1 = ""
    break_idx = 0
    for idx, word in enumerate(words):
        candidate = "{} {}".format(line1, word) if line1 else word
        if len(candidate) > max_cpl and line1:
            break
        line1 = candidate
        break_idx = idx + 1

    first = " ".join(words[:break_idx])
    second = " ".join(words[break_idx:])
    return [first, second] if second else [first]


def _hard_slice(text: str, max_cpl: int) -> List[str]:
    return [part for part in (text[:max_cpl], text[max_cpl:max_cpl * 2]) if part]


def break_cjk_lines(text: str, max_cpl: int) -> List[str]:
    """Split unspaced CJK text by character index near the midpoint."""
    if len(text) <= max_cpl:
        return [text]

    target = len(text) // 2
    search_range = min(10, len(text) // 4)
    lo = max(1, target - search_range)
    hi = min(len(text) - 1, target + search_range)

    best_pos = target
    best_distance = float("inf")
    for pos in range(lo, hi + 1):
        if text[pos] in CJK_NO_START or text[pos - 1] in CJK_NO_END:
            continue
        if pos > max_cpl or len(text) - pos > max_cpl:
            continue
        distance = abs(pos - target)
        # Ties go to the bottom-heavy side.
        adjusted = distance if pos >= target else distance + 0.5
        if adjusted < best_distance:
            best_distance = adjusted
            best_pos = pos

    line1, line2 = text[:best_pos], text[best_pos:]
    if len(line1) > max_cpl:
        return _hard_slice(text, max_cpl)
    return [part for part in (line1, line2) if part]


# =============================================================================
# Public API
# =============================================================================

def find_optimal_line_break(
    text: str,
    max_cpl: Optional[int] = None,
    language: Optional[str] = None,
) -> List[str]:
    """Return the cue text as 1 or 2 lines broken at the best boundary.

    Args:
        text: Cue text; existing newlines are re-broken.
        max_cpl: Characters per line. Defaults to the language profile's CPL.
        language: ISO 639-1 code; selects the CPL default and CJK mode.

    Returns:
        A list of one or two non-empty lines (empty text gives [""]).
    """
    profile = get_language_profile(language)
    cpl = max_cpl if max_cpl is not None else profile.cpl
    normalized = normalize_text(text)

    if len(normalized) <= cpl:
        return [normalized]

    if profile.script_type == "cjk" or is_cjk(normalized):
        return break_cjk_lines(normalized, cpl)

    words = normalized.split(" ")
    if len(words) <= 1:
        return _hard_slice(normalized, cpl)

    total_length = len(normalized)
    best_score = float("-inf")
    best_index = -1

    for i in range(len(words) - 1):
        line1 = " ".join(words[: i + 1])
        if len(line1) > cpl:
            continue
        line2 = " ".join(words[i + 1:])
        score = score_break_point(words, i, total_length)
        if len(line2) > cpl:
            score -= LINE2_OVERFLOW_PENALTY
        if score > best_score:
            best_score = score
            best_index = i

    if best_index < 0:
        return fallback_break(words, cpl)

    line1 = " ".join(words[: best_index + 1])
    line2 = " ".join(words[best_index + 1:])
    return [part for part in (line1, line2) if part]


def apply_line_breaking(
    text: str,
    max_cpl: Optional[int] = None,
    language: Optional[str] = None,
) -> str:
    """find_optimal_line_break() joined with newlines."""
    return "\n".join(find_optimal_line_break(text, max_cpl, language))
