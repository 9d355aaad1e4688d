"""Auto Subtitles: turns audio and video into broadcast-quality subtitle files.

WHY: Speech-to-text services return raw cues whose timing drifts, whose
durations are too short to read, and whose lines run past the screen width.
This package wraps transcription providers with the processing needed to
turn their output into readable subtitles.

HOW: Four-stage pipeline: chunk (audio/chunker), transcribe (providers),
align and optimize (core), format (pluggable formatters). The quality gate
from subtitle_rules can score any result. Each stage is independently
testable.

RULES:
- All stages exchange subtitle_rules.models.Segment lists
- Adding a new output format = one new formatter module, no core changes
- Adding a new provider = one TranscriptionProvider subclass + registration
"""

__version__ = "0.1.0"
