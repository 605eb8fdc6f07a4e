"""
Name normalization
- raw roster string -> comparable token sequence
- display capitalization for reviewer-facing output
"""
import re
from typing import List, Optional


# Anything outside lowercase ascii letters and whitespace is dropped
# (digits, hyphens, apostrophes, typed diacritics)
_NON_ALPHA = re.compile(r"[^a-z\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(raw: Optional[str]) -> str:
    """Lower-cased, alphabetic-only, whitespace-collapsed projection"""
    if not raw:
        return ""
    text = raw.strip().lower()
    text = _NON_ALPHA.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def normalize(raw: Optional[str]) -> List[str]:
    """
    Name tokens for matching.

    "  O'Brien,  JOHN-paul 3rd " -> ["obrien", "johnpaul", "rd"]
    A string with no alphabetic content yields [].
    """
    text = normalize_text(raw)
    if not text:
        return []
    return text.split(" ")


def capitalize(raw: Optional[str]) -> str:
    """Title-case each space-separated word for display (not an identity operation)"""
    if not raw:
        return ""
    return " ".join(word[:1].upper() + word[1:] for word in raw.lower().split(" "))
