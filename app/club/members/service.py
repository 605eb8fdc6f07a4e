"""
Club Member Service

Roster import around the core pipeline (upload validation, storage,
extraction, cleanup) plus manual add / removal of members.
"""

import time
from typing import List, Optional, Sequence

from loguru import logger

from member_import.commit import BatchCommitCoordinator
from member_import.config import import_config, ImportConfig
from member_import.exceptions import ClubNotFoundError, InvalidUploadError, UpstreamError
from member_import.matcher import grade_exclusion
from member_import.pipeline import ImportPipeline
from member_import.schemas import (
    ClubId,
    ConstraintDecision,
    ImportResult,
    MembershipChangeResult,
    MembershipIntent,
    StudentId,
    coerce_raw_names,
)
from member_import.stores import ClubStore, ExtractionService, MembershipStore, StudentRegistry
from member_import.validators import MembershipConstraintChecker, MembershipSnapshot


class MemberService:
    """Club membership operations"""

    def __init__(
        self,
        registry: StudentRegistry,
        memberships: MembershipStore,
        clubs: ClubStore,
        extraction: ExtractionService,
        config: ImportConfig = import_config,
    ):
        self.memberships = memberships
        self.clubs = clubs
        self.extraction = extraction
        self.config = config
        self.pipeline = ImportPipeline(
            registry,
            memberships,
            clubs,
            is_eligible=grade_exclusion(config.excluded_grades),
            threshold=config.match_threshold,
        )

    # =============================================
    # Bulk import
    # =============================================

    def validate_upload(
        self,
        club_id: Optional[ClubId],
        file_name: Optional[str],
        content_type: Optional[str],
        size: int,
    ) -> None:
        """Input errors are rejected before anything is uploaded"""
        if not file_name:
            raise InvalidUploadError("No file provided")
        if club_id in (None, ""):
            raise InvalidUploadError("No club ID provided")
        if content_type not in self.config.allowed_content_types:
            raise InvalidUploadError("Invalid file type. Please upload Excel, CSV, PDF, or Word documents.")
        if size > self.config.max_file_size:
            max_mb = self.config.max_file_size // (1024 * 1024)
            raise InvalidUploadError(f"File too large. Maximum size is {max_mb}MB.")

    def bulk_import(
        self,
        club_id: ClubId,
        file_name: str,
        content: bytes,
        content_type: str,
    ) -> ImportResult:
        """
        Import club members from an uploaded roster

        1. validate type/size
        2. upload to storage
        3. extract names (edge function)
        4. run the import pipeline
        5. remove the upload (always)
        """
        self.validate_upload(club_id, file_name, content_type, len(content))

        # unknown club is an input error; reject before uploading
        self._require_club(club_id)

        stored_name = f"bulk-import-{int(time.time() * 1000)}-{file_name}"
        path = self.extraction.upload(stored_name, content, content_type)
        logger.info(f"Roster uploaded: {path} ({len(content)} bytes, {content_type})")

        try:
            names = coerce_raw_names(self.extraction.extract_names(path, content_type))
            return self.pipeline.run(club_id, names)
        finally:
            self.extraction.remove(path)

    # =============================================
    # Manual membership changes
    # =============================================

    def add_members(self, club_id: ClubId, student_ids: Sequence[StudentId]) -> MembershipChangeResult:
        """Add selected students, judged against one membership snapshot"""
        if not student_ids:
            raise InvalidUploadError("Please select at least one student")

        category = self._require_club(club_id)
        ids = list(dict.fromkeys(str(s) for s in student_ids))

        try:
            rows = self.memberships.list_active_for_students(ids)
        except Exception as e:
            raise UpstreamError(f"Membership snapshot read failed: {e}") from e
        checker = MembershipConstraintChecker(MembershipSnapshot(rows))

        result = MembershipChangeResult()
        allowed: List[MembershipIntent] = []
        for sid in ids:
            decision = checker.check(sid, club_id, category)
            if decision == ConstraintDecision.ALREADY_MEMBER:
                result.already_members.append(sid)
            elif decision == ConstraintDecision.CATEGORY_CONFLICT:
                result.category_conflicts.append(sid)
            else:
                allowed.append(MembershipIntent(student_id=sid, club_id=club_id))

        report = BatchCommitCoordinator(self.memberships).commit(allowed)
        result.added = [str(i.student_id) for i in report.succeeded]
        result.category_conflicts.extend(str(i.student_id) for i in report.category_conflicts)
        result.failed = [str(i.student_id) for i in report.failures]

        logger.info(f"Manual add to club {club_id}: {result.message}")
        return result

    def remove_member(self, club_id: ClubId, student_id: StudentId) -> bool:
        """Active -> left; rows are never deleted here"""
        removed = self.memberships.mark_left(club_id, student_id)
        if removed:
            logger.info(f"Student {student_id} left club {club_id}")
        else:
            logger.warning(f"No active membership for student {student_id} in club {club_id}")
        return removed

    def active_member_ids(self, club_id: ClubId) -> List[str]:
        return self.memberships.list_active_student_ids(club_id)

    def _require_club(self, club_id: ClubId):
        try:
            category = self.clubs.get_category(club_id)
        except Exception as e:
            raise UpstreamError(f"Club lookup failed: {e}") from e
        if category is None:
            raise ClubNotFoundError(club_id)
        return category
