"""
Member import schemas

Registry/membership records are validated with Pydantic at the store boundary.
Per-run intermediates (splits, matches, intents) are plain dataclasses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator


# ==================== Enums ====================

class ClubCategory(str, Enum):
    """Club grouping used to cap simultaneous memberships"""
    SUBJECT_ORIENTED = "subject_oriented_clubs"
    SOFT_SKILLS_ORIENTED = "soft_skills_oriented_clubs"


class MembershipStatus(str, Enum):
    """Membership lifecycle"""
    ACTIVE = "active"
    LEFT = "left"


class ConstraintDecision(str, Enum):
    """Outcome of the membership constraint check"""
    ALLOWED = "allowed"
    ALREADY_MEMBER = "already_member"
    CATEGORY_CONFLICT = "category_conflict"


class CommitOutcome(str, Enum):
    """Per-intent result of a single membership insert"""
    COMMITTED = "committed"
    CATEGORY_CONFLICT = "category_conflict"   # lost a race against a concurrent insert
    FAILED = "failed"                         # logged and dropped


# ==================== Registry / store records ====================

StudentId = Union[int, str]
ClubId = Union[int, str]


class StudentRecord(BaseModel):
    """Canonical student registry entry (read-only for the importer)"""
    id: StudentId
    first_name: str = ""
    last_name: str = ""
    grade: Optional[str] = None
    combination: Optional[str] = None
    gender: Optional[str] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    class Config:
        frozen = True


class ActiveMembership(BaseModel):
    """One row of a student's membership snapshot"""
    student_id: StudentId
    club_id: ClubId
    club_category: Optional[ClubCategory] = None

    class Config:
        frozen = True


# ==================== Per-run intermediates ====================

@dataclass(frozen=True)
class CandidateSplit:
    """Plausible first/last name tokens for one extracted name (insertion ordered)"""
    first_names: Tuple[str, ...]
    last_names: Tuple[str, ...]


@dataclass(frozen=True)
class MatchResult:
    """A raw name resolved to a registry student"""
    student: StudentRecord
    extracted_name: str     # display-capitalized raw name
    score: int


@dataclass(frozen=True)
class MembershipIntent:
    """A (student, club) pair waiting for a constraint decision / commit"""
    student_id: StudentId
    club_id: ClubId
    match: Optional[MatchResult] = None


@dataclass
class CommitReport:
    """Result of committing a batch of approved intents"""
    succeeded: List[MembershipIntent] = field(default_factory=list)
    category_conflicts: List[MembershipIntent] = field(default_factory=list)
    failures: List[MembershipIntent] = field(default_factory=list)
    used_fallback: bool = False


def coerce_raw_names(values: Optional[Iterable[Any]]) -> List[str]:
    """Extraction output -> list of raw name strings (non-strings dropped)"""
    if not values:
        return []
    return [v for v in values if isinstance(v, str)]


# ==================== Caller-facing result ====================

class ImportSummary(BaseModel):
    """Literal counts for one import run"""
    total_extracted: int = Field(0, alias="totalExtracted")
    total_matched: int = Field(0, alias="totalMatched")
    available_to_add: int = Field(0, alias="availableToAdd")
    successfully_added: int = Field(0, alias="successfullyAdded")
    already_members: int = Field(0, alias="alreadyMembers")
    category_conflicts: int = Field(0, alias="categoryConflicts")
    unmatched: int = 0

    class Config:
        populate_by_name = True


class ImportResultEntry(BaseModel):
    """A matched student as reported back to the reviewer"""
    student_id: str = Field(..., alias="studentId")
    name: str
    extracted_name: str = Field(..., alias="extractedName")
    match_score: int = Field(..., alias="matchScore")

    @classmethod
    def from_match(cls, match: MatchResult) -> "ImportResultEntry":
        return cls(
            studentId=str(match.student.id),
            name=match.student.full_name,
            extractedName=match.extracted_name,
            matchScore=match.score,
        )

    class Config:
        populate_by_name = True


class ImportResults(BaseModel):
    """Itemized buckets"""
    added: List[ImportResultEntry] = Field(default_factory=list)
    conflicts: List[ImportResultEntry] = Field(default_factory=list)
    category_conflicts: List[ImportResultEntry] = Field(default_factory=list, alias="categoryConflicts")
    unmatched: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class ImportResult(BaseModel):
    """Complete answer for one import request"""
    success: bool = True
    summary: ImportSummary
    results: ImportResults
    completed_at: datetime = Field(default_factory=datetime.now, alias="completedAt")

    class Config:
        populate_by_name = True


class MembershipChangeResult(BaseModel):
    """Outcome of a manual add of selected students"""
    added: List[str] = Field(default_factory=list)
    already_members: List[str] = Field(default_factory=list, alias="alreadyMembers")
    category_conflicts: List[str] = Field(default_factory=list, alias="categoryConflicts")
    failed: List[str] = Field(default_factory=list)

    @property
    def message(self) -> str:
        msg = f"Successfully added {len(self.added)} student(s) to the club"
        if self.already_members:
            msg += f". {len(self.already_members)} student(s) were already members."
        if self.category_conflicts:
            msg += (
                f" {len(self.category_conflicts)} student(s) could not be added due to club"
                " membership restrictions (maximum 2 clubs: 1 subject-oriented + 1 soft skills-oriented)."
            )
        return msg

    class Config:
        populate_by_name = True
