"""Linguistic word lists for line-break decisions.

WHY: Subtitle guidelines (Netflix TTSG, BBC, EBU) agree that some word pairs
must stay on the same line: an article and its noun, an auxiliary and its
verb, a negation and what it negates, a preposition and its object, a verb
and its particle. Conjunctions and prepositions, on the other hand, are good
places to start a new line. Both the line breaker (which avoids bad breaks)
and the scorer (which reports them) need these lists.

HOW: Module-level frozensets, all lowercase, compared against tokens that
have been cleaned with clean_token().

RULES:
- Sets are frozen; never extend them at runtime.
- English is the primary language; common French, Spanish, German, Italian
  and Portuguese function words are included where they are unambiguous.
- clean_token() keeps internal apostrophes so contractions ("don't")
  still match NEGATIONS.
- SCORER_* sets are the narrower lists the quality scorer uses; they are
  deliberately stricter about what counts as a fault than the breaker's
  avoidance lists.
"""

import re

# Articles bind to the NEXT word (their noun).
ARTICLES = frozenset({
    "a", "an", "the",
    "le", "la", "les", "un", "une", "des",  # French
    "el", "los", "las", "una", "unos", "unas",  # Spanish
    "der", "die", "das", "ein", "eine", "einem", "einen", "einer", "eines",  # German
    "il", "lo", "i", "gli", "uno",  # Italian
    "o", "os", "um", "uma", "uns", "umas",  # Portuguese
})

# Prepositions are penalized as the last word of a line.
PREPOSITIONS = frozenset({
    "at", "by", "for", "from", "in", "into", "of", "on", "to", "with",
    "about", "above", "after", "before", "between", "through", "under",
    "over", "without", "against", "within", "along", "upon", "across",
    "toward", "towards", "among", "around", "behind", "beyond", "beside",
    "beneath", "outside", "inside", "throughout", "despite", "below",
    "during", "near", "past", "since", "until", "via",
})

# Auxiliaries bind to the NEXT word (their main verb).
AUXILIARIES = frozenset({
    "am", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "having",
    "do", "does", "did",
    "will", "would", "shall", "should", "can", "could", "may", "might", "must",
})

# Negations bind to the NEXT word (their verb).
NEGATIONS = frozenset({
    "don't", "doesn't", "didn't", "won't", "wouldn't", "can't", "couldn't",
    "shouldn't", "isn't", "aren't", "wasn't", "weren't", "hasn't", "haven't",
    "hadn't", "mustn't", "needn't", "not", "never",
})

# A conjunction starting line 2 is a natural clause boundary.
CONJUNCTIONS = frozenset({
    # Coordinating
    "and", "but", "or", "nor", "so", "yet",
    # Subordinating
    "because", "although", "though", "while", "if", "when", "since", "after",
    "before", "unless", "until", "whereas", "whenever", "wherever", "whether",
    "once", "that", "which", "who",
    "und", "aber", "oder", "weil", "obwohl", "wenn", "dass",  # German
    "et", "mais", "ou", "parce", "quand", "que", "qui",  # French
    "y", "pero", "porque", "cuando", "quien",  # Spanish
    "e", "ma", "perché",  # Italian
})

# Determiners and short adjectives that almost always precede a noun.
DETERMINERS_AND_SHORT_ADJECTIVES = frozenset({
    "my", "his", "her", "its", "our", "your", "their",
    "this", "that", "these", "those",
    "each", "every", "both", "all", "some", "any", "no", "few", "many",
    "much", "more", "most", "such",
    "own", "other", "same", "whole", "entire", "full", "big", "old", "new",
    "good", "bad", "long", "great", "little", "first", "last", "next", "real",
})

# Phrasal-verb particles bind to the PREVIOUS word ("pick / up" reads badly).
PARTICLES = frozenset({
    "up", "out", "off", "down", "away", "back", "over", "through", "along",
    "around", "about",
})

# ---------------------------------------------------------------------------
# Scorer lists
# ---------------------------------------------------------------------------

SCORER_ARTICLES = frozenset({
    "a", "an", "the", "el", "la", "los", "las", "un", "una", "le", "les",
    "der", "die", "das", "ein", "eine",
})

SCORER_AUXILIARIES = frozenset({
    "is", "are", "was", "were", "be", "been", "being", "have", "has", "had",
    "having", "do", "does", "did", "will", "would", "shall", "should", "may",
    "might", "can", "could", "must",
})

SCORER_NEGATIONS = frozenset({
    "not", "n't", "never", "no", "don't", "doesn't", "didn't", "won't",
    "wouldn't", "shouldn't", "couldn't", "can't", "isn't", "aren't", "wasn't",
    "weren't", "hasn't", "haven't", "hadn't",
})

_TOKEN_STRIP_RE = re.compile(r"[.,!?;:\"(){}\[\]—–“”]")


def clean_token(word: str) -> str:
    """Lowercase a token and strip punctuation, keeping internal apostrophes."""
    cleaned = _TOKEN_STRIP_RE.sub("", word).strip("'’").lower()
    return cleaned.replace("’", "'")
