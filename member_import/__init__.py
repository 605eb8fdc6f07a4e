"""
Member reconciliation & import package

Roster import in four stages:
- Normalize: raw extracted names -> comparable tokens
- Match: candidate splits scored against one registry snapshot
- Check: per-student category / membership caps
- Commit: bulk insert with per-row fallback
"""

from .schemas import (
    ClubCategory,
    MembershipStatus,
    ConstraintDecision,
    CommitOutcome,
    StudentRecord,
    ActiveMembership,
    CandidateSplit,
    MatchResult,
    MembershipIntent,
    CommitReport,
    ImportSummary,
    ImportResult,
    MembershipChangeResult,
)
from .exceptions import (
    MemberImportError,
    InvalidUploadError,
    ClubNotFoundError,
    NoNamesFoundError,
    UpstreamError,
)
from .normalizer import normalize, normalize_text, capitalize
from .candidates import generate_candidates
from .matcher import RegistryMatcher, RegistrySnapshot, grade_exclusion
from .validators import check_constraint, MembershipConstraintChecker, MembershipSnapshot
from .commit import BatchCommitCoordinator
from .pipeline import ImportPipeline

__all__ = [
    # Schemas
    "ClubCategory",
    "MembershipStatus",
    "ConstraintDecision",
    "CommitOutcome",
    "StudentRecord",
    "ActiveMembership",
    "CandidateSplit",
    "MatchResult",
    "MembershipIntent",
    "CommitReport",
    "ImportSummary",
    "ImportResult",
    "MembershipChangeResult",
    # Errors
    "MemberImportError",
    "InvalidUploadError",
    "ClubNotFoundError",
    "NoNamesFoundError",
    "UpstreamError",
    # Stages
    "normalize",
    "normalize_text",
    "capitalize",
    "generate_candidates",
    "RegistryMatcher",
    "RegistrySnapshot",
    "grade_exclusion",
    "check_constraint",
    "MembershipConstraintChecker",
    "MembershipSnapshot",
    "BatchCommitCoordinator",
    # Pipeline
    "ImportPipeline",
]
