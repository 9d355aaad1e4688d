"""Output formatter registry.

WHY: The CLI and the service need a single lookup to find the right
formatter by name. A central dict makes it trivial to add new formats:
create the formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["vtt"]()``.

RULES:
- Keys match config.SUPPORTED_OUTPUT_FORMATS
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from auto_subtitles.formatters.json_segments import JSONSegmentsFormatter
from auto_subtitles.formatters.plain_text import PlainTextFormatter
from auto_subtitles.formatters.srt import SRTFormatter
from auto_subtitles.formatters.vtt import VTTFormatter

if TYPE_CHECKING:
    from auto_subtitles.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "vtt": VTTFormatter,
    "srt": SRTFormatter,
    "json": JSONSegmentsFormatter,
    "text": PlainTextFormatter,
}
