"""WebVTT subtitle formatter.

RULES:
- Header "WEBVTT" followed by a blank line, even with no cues
- Cue: "HH:MM:SS.mmm --> HH:MM:SS.mmm\\n<text>\\n\\n" (no cue identifiers)
- Milliseconds are rounded
"""

from __future__ import annotations

from collections.abc import Sequence

from auto_subtitles.core.ir import Segment
from auto_subtitles.formatters.base import BaseFormatter, FormatterOutput, labeled_text
from subtitle_rules.timecodes import format_timestamp


def segments_to_vtt(segments: Sequence[Segment], speaker_labels: bool = False) -> str:
    parts = ["WEBVTT\n\n"]
    for seg in segments:
        parts.append(
            f"{format_timestamp(seg.start)} --> {format_timestamp(seg.end)}\n"
            f"{labeled_text(seg, speaker_labels)}\n\n"
        )
    return "".join(parts)


class VTTFormatter(BaseFormatter):
    @property
    def name(self) -> str:
        return "WebVTT"

    def format(self, segments: Sequence[Segment], speaker_labels: bool = False) -> list[FormatterOutput]:
        return [FormatterOutput(suffix=".vtt", content=segments_to_vtt(segments, speaker_labels), media_type="text/vtt")]
