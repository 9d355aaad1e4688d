"""Cue parsing and timestamp alignment against word-level timing.

WHY: whisper-1's VTT cues are readable but their timestamps drift: a cue
often starts while the previous speaker is still talking, or hundreds of
milliseconds before the first word is spoken. The same request's
verbose_json gives accurate per-word times. Anchoring each cue on the words
it contains fixes the drift without re-segmenting the text.

HOW: parse_vtt_to_segments() turns VTT text into segments. align_segments()
walks the cues with a running interval_start (the corrected end of the
previous cue). For each cue it looks, within a 15 s window after
interval_start, for a run of words matching the cue's leading tokens. On a
confident match the cue is moved so its start lands on the matched word,
keeping its duration.

RULES:
- Never raises on malformed timing; end >= start holds for every output cue
- Output starts are non-decreasing
- A match is committed only after min(3, token count) consecutive tokens agree
- Tokens compare lowercased with punctuation removed; internal apostrophes stay
- With no words, segments are returned as unmodified copies
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import replace

from auto_subtitles.core.ir import Segment, Word
from subtitle_rules.timecodes import parse_cues

SEARCH_WINDOW_S = 15.0
MIN_MATCH_TOKENS = 3

_NON_WORD_RE = re.compile(r"[^\w']+")


def normalize_token(token: str) -> str:
    """Lowercase and strip punctuation, keeping internal apostrophes."""
    return _NON_WORD_RE.sub("", token.lower().replace("’", "'")).strip("'")


def parse_vtt_to_segments(vtt_text: str) -> list[Segment]:
    """Parse WebVTT (or SRT) text into segments; multi-line cue text is space-joined."""
    return parse_cues(vtt_text)


def _find_match(
    tokens: list[str],
    words: Sequence[Word],
    normalized_words: list[str],
    window_start: float,
) -> Word | None:
    """Return the first word in the search window that starts a confident match."""
    needed = min(MIN_MATCH_TOKENS, len(tokens))
    window_end = window_start + SEARCH_WINDOW_S

    for idx, word in enumerate(words):
        if word.start < window_start:
            continue
        if word.start > window_end:
            break
        if normalized_words[idx] != tokens[0]:
            continue
        matched = 1
        while (
            matched < len(tokens)
            and idx + matched < len(words)
            and normalized_words[idx + matched] == tokens[matched]
        ):
            matched += 1
        if matched >= needed:
            return word
    return None


def align_segments(
    segments: Sequence[Segment],
    words: Sequence[Word] | None = None,
) -> list[Segment]:
    """Correct cue timestamps using word-level timing.

    Args:
        segments: Cues in file order.
        words: Word timings for the same audio, in time order.

    Returns:
        New Segment objects; the input is not mutated.
    """
    if not words:
        return [replace(s) for s in segments]
    if not segments:
        return []

    words = sorted(words, key=lambda w: w.start)
    normalized_words = [normalize_token(w.word) for w in words]
    first_word_start = words[0].start

    aligned: list[Segment] = []
    interval_start = segments[0].start

    for seg in segments:
        start = seg.start
        end = max(seg.end, seg.start)

        if start < interval_start:
            delta = interval_start - start
            start, end = start + delta, end + delta

        tokens = [t for t in (normalize_token(raw) for raw in seg.text.split()) if t]
        match = _find_match(tokens, words, normalized_words, interval_start) if tokens else None

        if match is not None:
            delta = match.start - start
            start, end = start + delta, end + delta
        elif first_word_start > start:
            delta = first_word_start - start
            start, end = start + delta, end + delta

        aligned.append(replace(seg, start=start, end=end))
        interval_start = end

    return aligned


def parse_and_align(vtt_text: str, words: Sequence[Word] | None = None) -> list[Segment]:
    """parse_vtt_to_segments() followed by align_segments()."""
    return align_segments(parse_vtt_to_segments(vtt_text), words)
