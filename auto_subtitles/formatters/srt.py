"""SubRip (SRT) subtitle formatter.

WHY: SRT is the lowest common denominator for editors, players and
broadcast tools. It differs from WebVTT only in having 1-based cue numbers,
a comma decimal separator and no header, but players are strict about all
three.

RULES:
- Cue: "n\\nHH:MM:SS,mmm --> HH:MM:SS,mmm\\n<text>\\n\\n", n starting at 1
- Empty input produces an empty file
"""

from __future__ import annotations

from collections.abc import Sequence

from auto_subtitles.core.ir import Segment
from auto_subtitles.formatters.base import BaseFormatter, FormatterOutput, labeled_text
from subtitle_rules.timecodes import format_timestamp


def segments_to_srt(segments: Sequence[Segment], speaker_labels: bool = False) -> str:
    parts = []
    for number, seg in enumerate(segments, start=1):
        parts.append(
            f"{number}\n"
            f"{format_timestamp(seg.start, ',')} --> {format_timestamp(seg.end, ',')}\n"
            f"{labeled_text(seg, speaker_labels)}\n\n"
        )
    return "".join(parts)


class SRTFormatter(BaseFormatter):
    @property
    def name(self) -> str:
        return "SubRip"

    def format(self, segments: Sequence[Segment], speaker_labels: bool = False) -> list[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=".srt",
                content=segments_to_srt(segments, speaker_labels),
                media_type="application/x-subrip",
            )
        ]
