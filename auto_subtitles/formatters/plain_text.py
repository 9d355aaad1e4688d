"""Plain text transcript formatter.

WHY: Editors need a simple, readable transcript for review and archival:
no timecodes, just text. Speaker turns become paragraphs when diarization
attributed the cues.

HOW: Walks segments in order. Cue line breaks are flattened to spaces.
Contiguous cues from the same speaker are joined into one paragraph; a
change of speaker starts a new paragraph. With speaker_labels=True each
paragraph starts with "<speaker>:" on its own line.

RULES:
- Double newline between paragraphs
- No trailing whitespace on any line
- Without any speaker information, the whole transcript is one paragraph
"""

from __future__ import annotations

from collections.abc import Sequence

from auto_subtitles.core.ir import Segment
from auto_subtitles.formatters.base import BaseFormatter, FormatterOutput


def _flatten(text: str) -> str:
    return " ".join(text.split())


def segments_to_text(segments: Sequence[Segment], speaker_labels: bool = False) -> str:
    paragraphs: list[tuple[str | None, list[str]]] = []
    for seg in segments:
        text = _flatten(seg.text)
        if not text:
            continue
        if paragraphs and paragraphs[-1][0] == seg.speaker:
            paragraphs[-1][1].append(text)
        else:
            paragraphs.append((seg.speaker, [text]))

    blocks = []
    for speaker, texts in paragraphs:
        body = " ".join(texts)
        if speaker_labels and speaker:
            body = f"{speaker}:\n{body}"
        blocks.append(body)

    content = "\n\n".join(blocks)
    return content + "\n" if content else ""


class PlainTextFormatter(BaseFormatter):
    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, segments: Sequence[Segment], speaker_labels: bool = False) -> list[FormatterOutput]:
        return [FormatterOutput(suffix=".txt", content=segments_to_text(segments, speaker_labels), media_type="text/plain")]
