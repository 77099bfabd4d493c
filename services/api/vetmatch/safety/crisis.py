"""
Crisis keyword detection. Fixed lexicon, case-insensitive substring scan.
Conservative: any hit forces the crisis response; false positives are acceptable.
"""

from typing import Iterable, NamedTuple

CRISIS_TERMS: tuple[str, ...] = (
    "suicide",
    "suicidal",
    "kill myself",
    "end my life",
    "want to die",
    "self-harm",
    "self harm",
    "hurt myself",
    "cutting",
    "overdose",
    "homicidal",
    "kill someone",
    "voices telling me",
    "hallucinating",
    "psychosis",
    "can't go on",
    "no reason to live",
    "better off dead",
    "planning to end",
    "emergency",
    "crisis",
)


class CrisisMatch(NamedTuple):
    hit: bool
    matched_terms: list[str]


def _normalize(text: str | Iterable[str] | None) -> str:
    if text is None:
        return ""
    if not isinstance(text, str):
        text = " ".join(t for t in text if isinstance(t, str))
    return text.lower().replace("’", "'")


def check_crisis(text: str | Iterable[str] | None) -> CrisisMatch:
    """Return (hit, matched_terms). Accepts one string or several (joined with spaces)."""
    lower = _normalize(text)
    if not lower.strip():
        return CrisisMatch(False, [])
    matched = sorted({term for term in CRISIS_TERMS if term in lower})
    return CrisisMatch(bool(matched), matched)


def detect_crisis(text: str | Iterable[str] | None) -> bool:
    return check_crisis(text).hit
