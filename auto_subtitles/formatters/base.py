"""Abstract base formatter and output container.

WHY: Every output format consumes the same optimized segment list but
produces different file content. This base class enforces a consistent
interface so the CLI and the service can work with any formatter
generically.

HOW: BaseFormatter is an ABC with two requirements: a ``name`` property
and a ``format()`` method. FormatterOutput is a plain dataclass that
bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` (human-readable) and ``format()``
- ``format()`` returns a list of FormatterOutput (one item per file)
- ``suffix`` starts with a dot or hyphen, e.g. ``".vtt"``
- The caller is responsible for prepending the source filename stem
- With speaker_labels=True, cue text of segments with a speaker is
  prefixed with ``[speaker] ``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from auto_subtitles.core.ir import Segment


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem,
                e.g. ``".srt"`` -> ``"interview.srt"``.
        content: The file content.
        media_type: MIME type for the content, e.g. ``"text/vtt"``.
    """

    suffix: str
    content: str
    media_type: str


def labeled_text(segment: Segment, speaker_labels: bool) -> str:
    """Return cue text, prefixed with ``[speaker] `` when labels are on."""
    if speaker_labels and segment.speaker:
        return f"[{segment.speaker}] {segment.text}"
    return segment.text


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'WebVTT'."""

    @abstractmethod
    def format(self, segments: Sequence[Segment], speaker_labels: bool = False) -> list[FormatterOutput]:
        """Render segments as one or more output files."""
