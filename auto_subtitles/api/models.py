"""OpenAI transcription response dataclasses.

WHY: The audio transcription endpoint answers with differently shaped JSON
depending on response_format (json, verbose_json, diarized_json). Typed
dataclasses make the fields explicit and keep the .get() fallbacks in one
place instead of sprinkling them through the provider.

HOW: Each dataclass maps to one JSON object. from_dict() factories accept
the raw response dict and tolerate absent optional fields.

RULES:
- Times are float seconds, as returned by the API
- words/segments default to empty lists when the format omits them
- ApiSegment.speaker falls back to speaker_id, then None
- Segment text is stripped of surrounding whitespace
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ApiWord:
    """One word with timing from a verbose_json response."""

    word: str
    start: float
    end: float

    @classmethod
    def from_dict(cls, data: dict) -> ApiWord:
        return cls(word=data["word"], start=float(data["start"]), end=float(data["end"]))


@dataclass
class ApiSegment:
    start: float
    end: float
    text: str
    speaker: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ApiSegment:
        """Parse a plain or diarized segment.

        RULES:
        - speaker is read from "speaker", then "speaker_id"; None if both absent
        """
        speaker = data.get("speaker", data.get("speaker_id"))
        return cls(
            start=float(data.get("start", 0.0)),
            end=float(data.get("end", 0.0)),
            text=(data.get("text") or "").strip(),
            speaker=str(speaker) if speaker is not None else None,
        )


@dataclass
class TranscriptionResponse:
    """Body of a json / verbose_json / diarized_json transcription response.

    WHY: One type covers all three JSON formats; unused fields stay empty.

    RULES:
    - text is always present (may be "")
    - duration/language are None for the plain json format
    - diarized_json may use "utterances" instead of "segments"
    """

    text: str
    language: str | None = None
    duration: float | None = None
    words: list[ApiWord] = field(default_factory=list)
    segments: list[ApiSegment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> TranscriptionResponse:
        raw_segments = data.get("segments") or data.get("utterances") or []
        duration = data.get("duration")
        return cls(
            text=data.get("text") or "",
            language=data.get("language"),
            duration=float(duration) if duration is not None else None,
            words=[ApiWord.from_dict(w) for w in data.get("words") or []],
            segments=[ApiSegment.from_dict(s) for s in raw_segments],
        )
