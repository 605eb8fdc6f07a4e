"""
Registry matching

Scores candidate splits against one immutable registry snapshot.

Scoring per registry record (first and last name fields independently):
- exact token == field: +50, stop scanning that field
- substring either way: +25, keep scanning (may stack across tokens)
- whole normalized name == record's full name: score forced to 100
- otherwise the score is capped at 100
A record becomes the best match only if its score is strictly greater than
the current best AND at least the threshold. Ties keep the first record seen.
"""

from dataclasses import dataclass
from typing import Callable, Collection, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from .normalizer import normalize_text
from .schemas import CandidateSplit, StudentRecord

EXACT_FIELD_SCORE = 50
PARTIAL_FIELD_SCORE = 25
FULL_NAME_SCORE = 100
DEFAULT_MATCH_THRESHOLD = 50

EligibilityPredicate = Callable[[StudentRecord], bool]


def grade_exclusion(excluded_grades: Collection[str]) -> EligibilityPredicate:
    """Eligibility predicate that skips graduating cohorts"""
    excluded = frozenset(excluded_grades)

    def is_eligible(student: StudentRecord) -> bool:
        return student.grade not in excluded

    return is_eligible


def _everyone(student: StudentRecord) -> bool:
    return True


@dataclass(frozen=True)
class RegistryEntry:
    """Student plus its precomputed normalized name fields"""
    student: StudentRecord
    first_name: str
    last_name: str
    full_name: str


class RegistrySnapshot:
    """
    Read-only view of the student registry for one import run.

    Loaded once; iteration order is the load order and never changes,
    which makes first-seen tie breaking deterministic within a run.
    """

    def __init__(self, students: Iterable[StudentRecord]):
        self._entries: Tuple[RegistryEntry, ...] = tuple(
            RegistryEntry(
                student=s,
                first_name=normalize_text(s.first_name),
                last_name=normalize_text(s.last_name),
                full_name=normalize_text(f"{s.first_name} {s.last_name}"),
            )
            for s in students
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def students(self) -> List[StudentRecord]:
        return [e.student for e in self._entries]


def score_field(candidates: Sequence[str], field_value: str) -> int:
    """Score one name field against its candidate tokens"""
    score = 0
    for token in candidates:
        if field_value == token:
            score += EXACT_FIELD_SCORE
            break
        # an empty registry field is a substring of everything; never reward it
        if field_value and (token in field_value or field_value in token):
            score += PARTIAL_FIELD_SCORE
    return score


def score_entry(candidate: CandidateSplit, normalized_full: str, entry: RegistryEntry) -> int:
    """Score one registry entry against a candidate split"""
    score = score_field(candidate.first_names, entry.first_name)
    score += score_field(candidate.last_names, entry.last_name)

    if normalized_full and entry.full_name == normalized_full:
        return FULL_NAME_SCORE

    # stacked partial hits can exceed a whole-name match; scores live in 0-100
    return min(score, FULL_NAME_SCORE)


class RegistryMatcher:
    """Resolves candidate splits to the single best registry record"""

    def __init__(
        self,
        snapshot: RegistrySnapshot,
        is_eligible: Optional[EligibilityPredicate] = None,
        threshold: int = DEFAULT_MATCH_THRESHOLD,
    ):
        self.snapshot = snapshot
        self.is_eligible = is_eligible or _everyone
        self.threshold = threshold
        self._eligible: Tuple[RegistryEntry, ...] = tuple(
            e for e in snapshot if self.is_eligible(e.student)
        )
        logger.debug(
            f"Registry matcher ready: {len(self._eligible)}/{len(snapshot)} eligible students "
            f"(threshold {threshold})"
        )

    @property
    def eligible_count(self) -> int:
        return len(self._eligible)

    def match(
        self,
        candidate: CandidateSplit,
        normalized_full: str,
    ) -> Optional[Tuple[StudentRecord, int]]:
        """
        Best (student, score) for the candidate, or None below threshold.

        Args:
            candidate: first/last name candidates for one extracted name
            normalized_full: the extracted name's whole normalized text
        """
        best: Optional[StudentRecord] = None
        best_score = 0

        for entry in self._eligible:
            score = score_entry(candidate, normalized_full, entry)
            if score > best_score and score >= self.threshold:
                best_score = score
                best = entry.student

        if best is None:
            return None
        return best, best_score
