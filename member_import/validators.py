"""
Membership constraint checks

A student may hold at most one active membership per club category and at
most two active memberships overall. Decisions are made against a snapshot
read once per batch; the storage layer remains the final enforcement point.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from .schemas import ActiveMembership, ClubCategory, ClubId, ConstraintDecision, StudentId

MAX_ACTIVE_MEMBERSHIPS = 2


def check_constraint(
    student_id: StudentId,
    target_club_id: ClubId,
    target_category: Optional[ClubCategory],
    active_memberships: Iterable[ActiveMembership],
) -> ConstraintDecision:
    """
    Decide whether a new membership is permitted.

    Rules, first hit wins:
    1. already active in the target club -> ALREADY_MEMBER
    2. 2+ active memberships anywhere -> CATEGORY_CONFLICT
    3/4. active membership of the target's category in another club -> CATEGORY_CONFLICT
    5. ALLOWED
    """
    memberships = [m for m in active_memberships if str(m.student_id) == str(student_id)]
    target = str(target_club_id)

    if any(str(m.club_id) == target for m in memberships):
        return ConstraintDecision.ALREADY_MEMBER

    if len(memberships) >= MAX_ACTIVE_MEMBERSHIPS:
        return ConstraintDecision.CATEGORY_CONFLICT

    if target_category is not None:
        for m in memberships:
            if m.club_category == target_category and str(m.club_id) != target:
                return ConstraintDecision.CATEGORY_CONFLICT

    return ConstraintDecision.ALLOWED


class MembershipSnapshot:
    """Active memberships of a set of students, frozen at decision time"""

    def __init__(self, rows: Iterable[ActiveMembership]):
        by_student: Dict[str, List[ActiveMembership]] = defaultdict(list)
        for row in rows:
            by_student[str(row.student_id)].append(row)
        self._by_student = dict(by_student)

    def for_student(self, student_id: StudentId) -> List[ActiveMembership]:
        return list(self._by_student.get(str(student_id), []))

    def active_club_ids(self, student_id: StudentId) -> List[str]:
        return [str(m.club_id) for m in self.for_student(student_id)]


class MembershipConstraintChecker:
    """Applies check_constraint to many students against one snapshot"""

    def __init__(self, snapshot: MembershipSnapshot):
        self.snapshot = snapshot

    def check(
        self,
        student_id: StudentId,
        target_club_id: ClubId,
        target_category: Optional[ClubCategory],
    ) -> ConstraintDecision:
        return check_constraint(
            student_id,
            target_club_id,
            target_category,
            self.snapshot.for_student(student_id),
        )
