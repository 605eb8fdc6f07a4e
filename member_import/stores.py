"""
Collaborator contracts and in-memory stores

The Supabase adapters in database/supabase_client.py implement the same
protocols. The in-memory stores enforce the membership invariants the way
the database constraints do, so batch fallback behaves identically in tests
and dry runs.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from loguru import logger

from .schemas import (
    ActiveMembership,
    ClubCategory,
    ClubId,
    CommitOutcome,
    MembershipIntent,
    MembershipStatus,
    StudentId,
    StudentRecord,
)
from .validators import MAX_ACTIVE_MEMBERSHIPS


# =============================================
# Protocols
# =============================================

class StudentRegistry(Protocol):
    def list_all(self) -> List[StudentRecord]: ...


class ClubStore(Protocol):
    def get_category(self, club_id: ClubId) -> Optional[ClubCategory]: ...


class MembershipStore(Protocol):
    def list_active_for_students(self, student_ids: Sequence[StudentId]) -> List[ActiveMembership]: ...

    def list_active_student_ids(self, club_id: ClubId) -> List[str]: ...

    def bulk_insert(self, intents: Sequence[MembershipIntent]) -> int: ...

    def insert_one(self, intent: MembershipIntent) -> CommitOutcome: ...

    def mark_left(self, club_id: ClubId, student_id: StudentId) -> bool: ...


class ExtractionService(Protocol):
    def upload(self, file_name: str, content: bytes, content_type: str) -> str: ...

    def extract_names(self, file_path: str, content_type: str) -> List[str]: ...

    def remove(self, file_path: str) -> None: ...


# =============================================
# In-memory implementations
# =============================================

class MembershipConstraintViolation(Exception):
    """Raised by the in-memory store where the database raises a constraint error"""


class InMemoryStudentRegistry:
    def __init__(self, students: Iterable[StudentRecord] = ()):
        self.students: List[StudentRecord] = list(students)

    def list_all(self) -> List[StudentRecord]:
        return list(self.students)


class InMemoryClubStore:
    def __init__(self, categories: Optional[Dict[ClubId, ClubCategory]] = None):
        self.categories: Dict[str, ClubCategory] = {
            str(k): ClubCategory(v) for k, v in (categories or {}).items()
        }

    def get_category(self, club_id: ClubId) -> Optional[ClubCategory]:
        return self.categories.get(str(club_id))


class InMemoryMembershipStore:
    """
    Membership rows with the storage-level rules:
    - one active row per (club, student)
    - at most 2 active rows per student, one per category
    """

    def __init__(self, clubs: InMemoryClubStore):
        self.clubs = clubs
        self.rows: List[Dict] = []

    def _active(self, student_id: StudentId) -> List[Dict]:
        return [
            r for r in self.rows
            if r["student_id"] == str(student_id) and r["membership_status"] == MembershipStatus.ACTIVE.value
        ]

    def add_active(self, club_id: ClubId, student_id: StudentId) -> None:
        """Seed an active row without checks (fixtures)"""
        self.rows.append(self._row(club_id, student_id))

    def _row(self, club_id: ClubId, student_id: StudentId) -> Dict:
        return {
            "club_id": str(club_id),
            "student_id": str(student_id),
            "membership_status": MembershipStatus.ACTIVE.value,
            "joined_at": datetime.now(),
            "left_at": None,
        }

    def _violation(self, club_id: ClubId, student_id: StudentId) -> Optional[str]:
        active = self._active(student_id)
        if any(r["club_id"] == str(club_id) for r in active):
            return "duplicate"
        if len(active) >= MAX_ACTIVE_MEMBERSHIPS:
            return "Student already has the maximum number of active memberships"
        category = self.clubs.get_category(club_id)
        for r in active:
            if category is not None and self.clubs.get_category(r["club_id"]) == category:
                return f"Student already has a membership in category {category.value}"
        return None

    # ---- reads ----

    def list_active_for_students(self, student_ids: Sequence[StudentId]) -> List[ActiveMembership]:
        wanted = {str(s) for s in student_ids}
        return [
            ActiveMembership(
                student_id=r["student_id"],
                club_id=r["club_id"],
                club_category=self.clubs.get_category(r["club_id"]),
            )
            for r in self.rows
            if r["student_id"] in wanted and r["membership_status"] == MembershipStatus.ACTIVE.value
        ]

    def list_active_student_ids(self, club_id: ClubId) -> List[str]:
        return [
            r["student_id"] for r in self.rows
            if r["club_id"] == str(club_id) and r["membership_status"] == MembershipStatus.ACTIVE.value
        ]

    # ---- writes ----

    def bulk_insert(self, intents: Sequence[MembershipIntent]) -> int:
        """All-or-nothing insert; duplicates skipped, any other violation raises"""
        staged: List[Dict] = []
        for intent in intents:
            reason = self._violation(intent.club_id, intent.student_id)
            staged_dup = any(
                r["club_id"] == str(intent.club_id) and r["student_id"] == str(intent.student_id)
                for r in staged
            )
            if reason == "duplicate" or staged_dup:
                continue
            if reason:
                raise MembershipConstraintViolation(reason)
            staged.append(self._row(intent.club_id, intent.student_id))
        self.rows.extend(staged)
        return len(staged)

    def insert_one(self, intent: MembershipIntent) -> CommitOutcome:
        reason = self._violation(intent.club_id, intent.student_id)
        if reason:
            logger.debug(f"In-memory insert rejected for student {intent.student_id}: {reason}")
            return CommitOutcome.CATEGORY_CONFLICT
        self.rows.append(self._row(intent.club_id, intent.student_id))
        return CommitOutcome.COMMITTED

    def mark_left(self, club_id: ClubId, student_id: StudentId) -> bool:
        changed = False
        for r in self._active(student_id):
            if r["club_id"] == str(club_id):
                r["membership_status"] = MembershipStatus.LEFT.value
                r["left_at"] = datetime.now()
                changed = True
        return changed


class StaticExtractionService:
    """Extraction stand-in returning a fixed list of names"""

    def __init__(self, names: Iterable[str] = ()):
        self.names = list(names)
        self.uploaded: Dict[str, bytes] = {}

    def upload(self, file_name: str, content: bytes, content_type: str) -> str:
        self.uploaded[file_name] = content
        return file_name

    def extract_names(self, file_path: str, content_type: str) -> List[str]:
        return list(self.names)

    def remove(self, file_path: str) -> None:
        self.uploaded.pop(file_path, None)
