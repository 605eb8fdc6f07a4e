"""
Roster import pipeline

Sequence for one upload:
1. Resolve the target club's category
2. Load one registry snapshot
3. Normalize -> candidate split -> match every extracted name
4. Collapse duplicate matches of the same student
5. Read the matched students' active memberships once
6. Classify (already member / category conflict / allowed)
7. Commit allowed intents (bulk, per-row fallback)
8. Assemble the summary

Anything that prevents classifying every entry aborts the run before any
write; per-entry problems land in a summary bucket.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from .candidates import generate_candidates
from .commit import BatchCommitCoordinator
from .config import import_config
from .exceptions import ClubNotFoundError, NoNamesFoundError, UpstreamError
from .matcher import (
    EligibilityPredicate,
    RegistryMatcher,
    RegistrySnapshot,
    grade_exclusion,
)
from .normalizer import capitalize, normalize
from .schemas import (
    ClubCategory,
    ClubId,
    ConstraintDecision,
    ImportResult,
    ImportResultEntry,
    ImportResults,
    ImportSummary,
    MatchResult,
    MembershipIntent,
    coerce_raw_names,
)
from .stores import ClubStore, MembershipStore, StudentRegistry
from .validators import MembershipConstraintChecker, MembershipSnapshot


def _upstream(action: str, fn: Callable):
    """Run a store read; any failure aborts the whole run"""
    try:
        return fn()
    except Exception as e:
        logger.error(f"{action} failed: {e}")
        raise UpstreamError(f"{action} failed: {e}") from e


def match_names(
    raw_names: Iterable[str],
    matcher: RegistryMatcher,
) -> Tuple[List[MatchResult], List[str]]:
    """Resolve every raw name; returns (matched, unmatched display names)"""
    matched: List[MatchResult] = []
    unmatched: List[str] = []

    for raw in raw_names:
        tokens = normalize(raw)
        candidate = generate_candidates(tokens)
        if candidate is None:
            logger.debug(f"✗ Unmatched (fewer than 2 tokens): {raw!r}")
            unmatched.append(capitalize(raw))
            continue

        found = matcher.match(candidate, " ".join(tokens))
        if found is None:
            logger.debug(f"✗ Unmatched: {raw!r}")
            unmatched.append(capitalize(raw))
            continue

        student, score = found
        matched.append(MatchResult(student=student, extracted_name=capitalize(raw), score=score))
        logger.debug(f"✓ Matched: {raw!r} -> {student.full_name} (score: {score})")

    return matched, unmatched


def collapse_duplicates(matches: Iterable[MatchResult]) -> List[MatchResult]:
    """One match per student; the first extracted name that resolved to them wins"""
    seen: Dict[str, MatchResult] = {}
    for m in matches:
        key = str(m.student.id)
        if key in seen:
            logger.debug(
                f"Duplicate match for student {key}: {m.extracted_name!r} "
                f"(kept {seen[key].extracted_name!r})"
            )
            continue
        seen[key] = m
    return list(seen.values())


class ImportPipeline:
    """Reconciles extracted roster names against the registry and commits memberships"""

    def __init__(
        self,
        registry: StudentRegistry,
        memberships: MembershipStore,
        clubs: ClubStore,
        is_eligible: Optional[EligibilityPredicate] = None,
        threshold: Optional[int] = None,
    ):
        self.registry = registry
        self.memberships = memberships
        self.clubs = clubs
        self.is_eligible = is_eligible or grade_exclusion(import_config.excluded_grades)
        self.threshold = import_config.match_threshold if threshold is None else threshold
        self.committer = BatchCommitCoordinator(memberships)

    def resolve_category(self, club_id: ClubId) -> ClubCategory:
        category = _upstream("Club lookup", lambda: self.clubs.get_category(club_id))
        if category is None:
            raise ClubNotFoundError(club_id)
        return category

    def load_snapshot(self) -> RegistrySnapshot:
        students = _upstream("Student registry read", self.registry.list_all)
        snapshot = RegistrySnapshot(students)
        logger.info(f"Registry snapshot loaded: {len(snapshot)} students")
        return snapshot

    def run(self, club_id: ClubId, raw_names: Optional[Iterable[str]]) -> ImportResult:
        """Run one import for the target club"""
        names = coerce_raw_names(raw_names)
        if not names:
            raise NoNamesFoundError()

        logger.info(f"Import started: club {club_id}, {len(names)} extracted names")
        category = self.resolve_category(club_id)

        # ==================== Matching ====================
        matcher = RegistryMatcher(self.load_snapshot(), self.is_eligible, self.threshold)
        matched, unmatched = match_names(names, matcher)
        logger.info(f"Matching complete: {len(matched)} matched, {len(unmatched)} unmatched")

        unique = collapse_duplicates(matched)

        # ==================== Constraint check ====================
        already: List[MatchResult] = []
        pre_conflicts: List[MatchResult] = []
        allowed: List[MembershipIntent] = []

        if unique:
            rows = _upstream(
                "Membership snapshot read",
                lambda: self.memberships.list_active_for_students([m.student.id for m in unique]),
            )
            checker = MembershipConstraintChecker(MembershipSnapshot(rows))

            for m in unique:
                decision = checker.check(m.student.id, club_id, category)
                if decision == ConstraintDecision.ALREADY_MEMBER:
                    already.append(m)
                elif decision == ConstraintDecision.CATEGORY_CONFLICT:
                    pre_conflicts.append(m)
                else:
                    allowed.append(MembershipIntent(student_id=m.student.id, club_id=club_id, match=m))

        available = len(unique) - len(already)
        logger.info(
            f"Available to add: {available}, already members: {len(already)}, "
            f"category conflicts: {len(pre_conflicts)}"
        )

        # ==================== Commit ====================
        report = self.committer.commit(allowed)

        added = [i.match for i in report.succeeded]
        category_conflicts = pre_conflicts + [i.match for i in report.category_conflicts]

        summary = ImportSummary(
            totalExtracted=len(names),
            totalMatched=len(matched),
            availableToAdd=available,
            successfullyAdded=len(added),
            alreadyMembers=len(already),
            categoryConflicts=len(category_conflicts),
            unmatched=len(unmatched),
        )
        logger.info(f"Import finished for club {club_id}: {summary.model_dump(by_alias=True)}")

        return ImportResult(
            summary=summary,
            results=ImportResults(
                added=[ImportResultEntry.from_match(m) for m in added],
                conflicts=[ImportResultEntry.from_match(m) for m in already],
                categoryConflicts=[ImportResultEntry.from_match(m) for m in category_conflicts],
                unmatched=unmatched,
            ),
        )
