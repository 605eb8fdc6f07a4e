"""
Candidate split generation

Registries store one first and one last name; roster strings vary in order
and word count. Over-produce plausible splits and let scoring pick.
"""
from typing import List, Optional, Sequence

from .schemas import CandidateSplit


def _append_unique(values: List[str], token: str) -> None:
    if token not in values:
        values.append(token)


def generate_candidates(tokens: Sequence[str]) -> Optional[CandidateSplit]:
    """
    Build first/last name candidates from normalized tokens.

    - fewer than 2 tokens: None (a bare single word is never resolvable)
    - ["a", "b"]: first {a, b}, last {b, a} (handles "Surname Given")
    - ["a", "m", "b"]: first {a, m}, last {b} (middle names as first name only)
    """
    if len(tokens) < 2:
        return None

    first_names = [tokens[0]]
    last_names = [tokens[-1]]

    if len(tokens) == 2:
        _append_unique(first_names, tokens[1])
        _append_unique(last_names, tokens[0])
    else:
        for token in tokens[1:-1]:
            _append_unique(first_names, token)

    return CandidateSplit(first_names=tuple(first_names), last_names=tuple(last_names))
