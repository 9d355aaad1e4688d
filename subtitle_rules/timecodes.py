"""Timecode formatting and WebVTT/SRT cue parsing.

WHY: Both the formatters (writing) and the aligner and gate CLI (reading)
deal with the same HH:MM:SS.mmm timestamps. Keeping one implementation avoids
the classic off-by-one-millisecond bug where 1.001 renders as 1.000.

HOW: format_timestamp() rounds to whole milliseconds before splitting into
fields. parse_cues() is a line-oriented scanner: a timecode line opens a
cue, following non-blank lines are its text, a blank line closes it.

RULES:
- Milliseconds are rounded, never truncated.
- Both "." and "," decimal separators are accepted when reading.
- MM:SS.mmm (no hours) is accepted when reading.
- Cues with unparseable timecodes are dropped silently; header lines, cue
  identifiers and NOTE/STYLE/REGION blocks are skipped.
"""

import re
from typing import List, Optional

from .models import Segment

TIMECODE_RE = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{1,2})[.,](\d{1,3})$")
ARROW = "-->"
_SKIP_BLOCKS = ("NOTE", "STYLE", "REGION")


def format_timestamp(seconds: float, sep: str = ".") -> str:
    """Format seconds as HH:MM:SS<sep>mmm (sep is "." for VTT, "," for SRT)."""
    total_ms = int(round(max(0.0, seconds) * 1000))
    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, millis = divmod(rem, 1000)
    return "{:02d}:{:02d}:{:02d}{}{:03d}".format(hours, minutes, secs, sep, millis)


def parse_timestamp(value: str) -> Optional[float]:
    """Parse HH:MM:SS.mmm, MM:SS.mmm, or the comma variants. None on failure."""
    match = TIMECODE_RE.match(value.strip())
    if not match:
        return None
    hours, minutes, secs, frac = match.groups()
    millis = int(frac.ljust(3, "0"))
    return int(hours or 0) * 3600 + int(minutes) * 60 + int(secs) + millis / 1000.0


def _parse_timing_line(line: str):
    left, _, right = line.partition(ARROW)
    start = parse_timestamp(left)
    # Cue settings ("align:start position:10%") may follow the end time.
    right_parts = right.strip().split()
    end = parse_timestamp(right_parts[0]) if right_parts else None
    if start is None or end is None:
        return None
    return start, end


def parse_cues(text: str, join: str = " ") -> List[Segment]:
    """Parse WebVTT or SRT text into segments.

    Multi-line cue text is joined with ``join``: a single space by default,
    "\\n" to keep the display lines as written. Overlapping cues are all
    kept; ordering is left as found in the file.
    """
    segments: List[Segment] = []
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")

    timing = None
    text_lines: List[str] = []
    skipping = False

    def close_cue():
        if timing is not None:
            segments.append(Segment(start=timing[0], end=timing[1], text=join.join(text_lines)))

    for raw in lines:
        line = raw.strip()
        if not line:
            close_cue()
            timing, text_lines, skipping = None, [], False
            continue
        if skipping:
            continue
        if ARROW in line:
            close_cue()
            timing, text_lines = _parse_timing_line(line), []
            if timing is None:
                skipping = True
            continue
        if timing is None:
            # Header, cue identifier, or a metadata block.
            if line.split(" ")[0] in _SKIP_BLOCKS:
                skipping = True
            continue
        text_lines.append(line)

    close_cue()
    return segments
