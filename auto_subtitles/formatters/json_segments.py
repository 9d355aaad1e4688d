"""JSON segment list formatter.

WHY: Downstream tools (editors, the quality gate CLI, scripts) want the
cues as data rather than re-parsing subtitle text.

HOW: Serializes each segment as {"start", "end", "text", "speaker"} with
times rounded to milliseconds, inside a {"segments": [...]} object.

RULES:
- speaker is null when unknown
- With speaker_labels=True the prefix is applied to "text" as in VTT/SRT
- Output is UTF-8 with non-ASCII kept as-is, indented by 2
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from auto_subtitles.core.ir import Segment
from auto_subtitles.formatters.base import BaseFormatter, FormatterOutput, labeled_text


def segments_to_dicts(segments: Sequence[Segment], speaker_labels: bool = False) -> list[dict]:
    return [
        {
            "start": round(seg.start, 3),
            "end": round(seg.end, 3),
            "text": labeled_text(seg, speaker_labels),
            "speaker": seg.speaker,
        }
        for seg in segments
    ]


class JSONSegmentsFormatter(BaseFormatter):
    @property
    def name(self) -> str:
        return "JSON Segments"

    def format(self, segments: Sequence[Segment], speaker_labels: bool = False) -> list[FormatterOutput]:
        payload = {"segments": segments_to_dicts(segments, speaker_labels)}
        return [
            FormatterOutput(
                suffix=".json",
                content=json.dumps(payload, indent=2, ensure_ascii=False) + "\n",
                media_type="application/json",
            )
        ]
