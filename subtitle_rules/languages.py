"""Per-language subtitle profiles: reading speed, line length, and timing.

WHY: A reading speed that is comfortable in English is far too fast in
Japanese and slightly slow in German. The optimizer, the line breaker, and
the scorer all need the same per-language numbers, so they live in one
table instead of being scattered as magic constants.

HOW: LanguageProfile is a frozen dataclass validated on construction.
LANGUAGE_PROFILES maps ISO 639-1 codes to profiles; get_language_profile()
normalizes locale codes ("en-US" -> "en") and falls back to
DEFAULT_PROFILE for anything unknown.

RULES:
- Profiles are immutable and module-level; never mutate them at runtime.
- Every profile satisfies target_cps <= max_cps and
  min_duration <= max_duration (enforced in __post_init__).
- CJK profiles use 16 characters per line; Thai and Tamil 35; other
  Indic scripts 38; everything else 42.
- Unknown or empty codes resolve to DEFAULT_PROFILE (12/17 CPS, 42 CPL).
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

SCRIPT_TYPES = ("latin", "cjk", "rtl", "indic", "thai")


@dataclass(frozen=True)
class LanguageProfile:
    """Subtitle constants for one language.

    Attributes:
        code: ISO 639-1 code ("default" for the fallback profile).
        name: English language name.
        target_cps: Comfortable reading speed in characters per second.
        max_cps: Highest acceptable reading speed.
        cpl: Maximum characters per line.
        min_duration: Minimum (ideal) cue duration in seconds.
        max_duration: Maximum cue duration in seconds.
        max_lines: Maximum display lines per cue.
        min_gap: Minimum gap between consecutive cues (~2 frames at 24 fps).
        script_type: One of SCRIPT_TYPES; "cjk" switches line breaking to
                     character mode.
    """
    code: str
    name: str
    target_cps: float
    max_cps: float
    cpl: int = 42
    min_duration: float = 1.0
    max_duration: float = 7.0
    max_lines: int = 2
    min_gap: float = 0.083
    script_type: str = "latin"

    def __post_init__(self) -> None:
        if self.target_cps > self.max_cps:
            raise ValueError(
                "Profile '{}': target_cps {} exceeds max_cps {}".format(
                    self.code, self.target_cps, self.max_cps
                )
            )
        if self.min_duration > self.max_duration:
            raise ValueError(
                "Profile '{}': min_duration {} exceeds max_duration {}".format(
                    self.code, self.min_duration, self.max_duration
                )
            )
        if self.script_type not in SCRIPT_TYPES:
            raise ValueError(
                "Profile '{}': unknown script type '{}'".format(self.code, self.script_type)
            )


DEFAULT_PROFILE = LanguageProfile(code="default", name="Default", target_cps=12, max_cps=17)


def _profile(code: str, name: str, cps: float, max_cps: float, **kwargs) -> LanguageProfile:
    return LanguageProfile(code=code, name=name, target_cps=cps, max_cps=max_cps, **kwargs)


# ---------------------------------------------------------------------------
# Language table: ISO 639-1 -> profile
# ---------------------------------------------------------------------------

LANGUAGE_PROFILES: Dict[str, LanguageProfile] = {
    p.code: p
    for p in (
        # Germanic
        _profile("en", "English", 15, 20),
        _profile("de", "German", 20, 25),
        _profile("nl", "Dutch", 18, 23),
        _profile("sv", "Swedish", 17, 22),
        _profile("da", "Danish", 17, 22),
        _profile("no", "Norwegian", 17, 22),
        # Romance
        _profile("fr", "French", 17, 22),
        _profile("es", "Spanish", 17, 22),
        _profile("pt", "Portuguese", 17, 22),
        _profile("it", "Italian", 16, 21),
        _profile("ro", "Romanian", 16, 21),
        # Slavic
        _profile("ru", "Russian", 16, 21),
        _profile("pl", "Polish", 15, 20),
        _profile("cs", "Czech", 16, 21),
        _profile("uk", "Ukrainian", 16, 21),
        _profile("hr", "Croatian", 16, 21),
        _profile("bg", "Bulgarian", 16, 21),
        # Other European
        _profile("fi", "Finnish", 14, 19),
        _profile("el", "Greek", 15, 20),
        _profile("hu", "Hungarian", 15, 20),
        _profile("tr", "Turkish", 15, 20),
        # CJK
        _profile("ja", "Japanese", 5, 8, cpl=16, script_type="cjk"),
        _profile("zh", "Chinese", 6, 9, cpl=16, script_type="cjk"),
        _profile("ko", "Korean", 6, 9, cpl=16, script_type="cjk"),
        # Right-to-left
        _profile("ar", "Arabic", 11, 15, script_type="rtl"),
        _profile("he", "Hebrew", 12, 16, script_type="rtl"),
        _profile("fa", "Persian", 11, 15, script_type="rtl"),
        # Indic
        _profile("hi", "Hindi", 12, 17, cpl=38, script_type="indic"),
        _profile("ta", "Tamil", 11, 16, cpl=35, script_type="indic"),
        _profile("bn", "Bengali", 11, 16, cpl=38, script_type="indic"),
        _profile("te", "Telugu", 11, 16, cpl=38, script_type="indic"),
        # Southeast Asian
        _profile("th", "Thai", 10, 14, cpl=35, script_type="thai"),
        _profile("vi", "Vietnamese", 14, 19),
        _profile("id", "Indonesian", 16, 21),
        _profile("ms", "Malay", 16, 21),
    )
}


def normalize_language_code(language: Optional[str]) -> str:
    """Reduce a locale such as "en-US" or "PT_br" to its two-letter prefix."""
    if not language:
        return ""
    return language.strip().lower().replace("_", "-").split("-")[0][:2]


def get_language_profile(language: Optional[str] = None) -> LanguageProfile:
    """Return the profile for a language code, or DEFAULT_PROFILE.

    Accepts full locale codes ("en-US") and uses only the ISO 639-1 prefix.
    """
    return LANGUAGE_PROFILES.get(normalize_language_code(language), DEFAULT_PROFILE)


def has_language_profile(language: str) -> bool:
    return normalize_language_code(language) in LANGUAGE_PROFILES


def get_supported_languages() -> List[str]:
    return list(LANGUAGE_PROFILES.keys())
