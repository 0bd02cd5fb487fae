"""
Text normalisation shared by the rule engines.
All detectors and category rules match against lower-cased text.
"""

from typing import Optional


def normalize_text(text: Optional[str]) -> str:
    """Lower-case document text for case-insensitive pattern search."""
    if not text:
        return ""
    return text.lower()


def is_blank(text: Optional[str]) -> bool:
    """True for None, empty or whitespace-only text."""
    return not text or not text.strip()


def contains_any(text: str, needles) -> bool:
    return any(n in text for n in needles)


def contains_all(text: str, needles) -> bool:
    return all(n in text for n in needles)
