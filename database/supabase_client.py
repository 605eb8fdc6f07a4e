"""
Supabase database client

Student registry, clubs, club-members and the roster extraction edge function.
"""
import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger
from postgrest.exceptions import APIError
from supabase import create_client, Client

from member_import.config import import_config, supabase_config, ImportConfig
from member_import.exceptions import UpstreamError
from member_import.schemas import (
    ActiveMembership,
    ClubCategory,
    ClubId,
    CommitOutcome,
    MembershipIntent,
    MembershipStatus,
    StudentId,
    StudentRecord,
)


# Singleton client
_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Supabase client instance (singleton).
    The service role key is preferred: storage and edge functions need it.
    """
    global _supabase_client
    if _supabase_client is None:
        key = supabase_config.supabase_service_key or supabase_config.supabase_key
        if not supabase_config.supabase_url or not key:
            raise ValueError("Set SUPABASE_URL and SUPABASE_SERVICE_KEY (or SUPABASE_KEY)")
        _supabase_client = create_client(supabase_config.supabase_url, key)
    return _supabase_client


def classify_insert_error(
    error: Exception,
    codes: Sequence[str],
    messages: Sequence[str],
) -> CommitOutcome:
    """
    Map a failed single-row insert to a tagged outcome.

    Unique / check constraint violations (SQLSTATE, exact match) and the
    category trigger message mean the row lost a race against a concurrent
    insert. Row values in `details` are never inspected.
    """
    if isinstance(error, APIError):
        if error.code and str(error.code) in codes:
            return CommitOutcome.CATEGORY_CONFLICT
        text = str(error.message or "")
    else:
        text = str(error)
    if any(fragment in text for fragment in messages):
        return CommitOutcome.CATEGORY_CONFLICT
    return CommitOutcome.FAILED


def _parse_category(value: Any) -> Optional[ClubCategory]:
    try:
        return ClubCategory(value) if value else None
    except ValueError:
        logger.warning(f"Unknown club category: {value}")
        return None


class SupabaseStudentRegistry:
    """Student registry (read-only)"""

    def __init__(self, client: Optional[Client] = None, config: ImportConfig = import_config):
        self.client = client or get_supabase_client()
        self.config = config

    def list_all(self) -> List[StudentRecord]:
        """Full registry snapshot, ordered by id, read page by page"""
        students: List[StudentRecord] = []
        page_size = self.config.registry_page_size
        start = 0

        while True:
            response = self.client.table(self.config.students_table).select(
                "id, first_name, last_name, grade, combination, gender"
            ).order("id").range(start, start + page_size - 1).execute()

            rows = response.data or []
            students.extend(StudentRecord(**row) for row in rows)
            if len(rows) < page_size:
                break
            start += page_size

        return students


class SupabaseClubStore:
    """Club lookups"""

    def __init__(self, client: Optional[Client] = None, config: ImportConfig = import_config):
        self.client = client or get_supabase_client()
        self.config = config

    def get_category(self, club_id: ClubId) -> Optional[ClubCategory]:
        response = self.client.table(self.config.clubs_table).select(
            "id, category"
        ).eq("id", club_id).limit(1).execute()

        if not response.data:
            return None
        return _parse_category(response.data[0].get("category"))


class SupabaseMembershipStore:
    """club-members table"""

    def __init__(self, client: Optional[Client] = None, config: ImportConfig = import_config):
        self.client = client or get_supabase_client()
        self.config = config

    @property
    def table(self):
        return self.client.table(self.config.memberships_table)

    @staticmethod
    def _row(intent: MembershipIntent) -> Dict[str, Any]:
        return {
            "club_id": intent.club_id,
            "student_id": intent.student_id,
            "membership_status": MembershipStatus.ACTIVE.value,
            "joined_at": datetime.now().isoformat(),
        }

    # ==================== Reads ====================

    def list_active_for_students(self, student_ids: Sequence[StudentId]) -> List[ActiveMembership]:
        if not student_ids:
            return []
        response = self.table.select(
            "student_id, club_id, clubs(category)"
        ).in_("student_id", list(student_ids)).eq(
            "membership_status", MembershipStatus.ACTIVE.value
        ).execute()

        memberships = []
        for row in response.data or []:
            club = row.get("clubs") or {}
            memberships.append(ActiveMembership(
                student_id=row["student_id"],
                club_id=row["club_id"],
                club_category=_parse_category(club.get("category")),
            ))
        return memberships

    def list_active_student_ids(self, club_id: ClubId) -> List[str]:
        response = self.table.select("student_id").eq("club_id", club_id).eq(
            "membership_status", MembershipStatus.ACTIVE.value
        ).execute()
        return [str(row["student_id"]) for row in response.data or []]

    # ==================== Writes ====================

    def bulk_insert(self, intents: Sequence[MembershipIntent]) -> int:
        """Single statement insert, duplicate (club, student) pairs skipped; raises on any other error"""
        response = self.table.upsert(
            [self._row(i) for i in intents],
            on_conflict="club_id,student_id",
            ignore_duplicates=True,
        ).execute()
        return len(response.data or [])

    def insert_one(self, intent: MembershipIntent) -> CommitOutcome:
        try:
            self.table.insert(self._row(intent)).execute()
            return CommitOutcome.COMMITTED
        except Exception as e:
            outcome = classify_insert_error(
                e,
                self.config.category_conflict_codes,
                self.config.category_conflict_messages,
            )
            if outcome == CommitOutcome.FAILED:
                logger.error(f"Failed to add student {intent.student_id}: {e}")
            else:
                logger.info(f"Category conflict for student {intent.student_id}: {e}")
            return outcome

    def mark_left(self, club_id: ClubId, student_id: StudentId) -> bool:
        response = self.table.update({
            "membership_status": MembershipStatus.LEFT.value,
            "left_at": datetime.now().isoformat(),
        }).eq("student_id", student_id).eq("club_id", club_id).eq(
            "membership_status", MembershipStatus.ACTIVE.value
        ).execute()
        return len(response.data or []) > 0


class SupabaseExtractionService:
    """Roster upload + extract-names edge function"""

    def __init__(self, client: Optional[Client] = None, config: ImportConfig = import_config):
        self.client = client or get_supabase_client()
        self.config = config

    @property
    def bucket(self):
        return self.client.storage.from_(self.config.storage_bucket)

    def upload(self, file_name: str, content: bytes, content_type: str) -> str:
        try:
            result = self.bucket.upload(
                file_name,
                content,
                {"content-type": content_type, "upsert": "true"},
            )
        except Exception as e:
            logger.error(f"Upload error: {e}")
            raise UpstreamError("Failed to upload file to storage") from e
        return getattr(result, "path", None) or file_name

    def extract_names(self, file_path: str, content_type: str) -> List[str]:
        try:
            data = self.client.functions.invoke(
                self.config.extraction_function,
                invoke_options={
                    "body": {"filePath": file_path, "fileType": content_type},
                    "responseType": "json",
                },
            )
        except Exception as e:
            logger.error(f"Edge function error: {e}")
            raise UpstreamError("Failed to process file with AI") from e

        if isinstance(data, (bytes, str)):
            try:
                data = json.loads(data or "{}")
            except ValueError as e:
                logger.error(f"Edge function returned invalid JSON: {e}")
                raise UpstreamError("Failed to process file with AI") from e

        data = data or {}
        names = (data.get("names") or []) if isinstance(data, dict) else None
        if not isinstance(names, list):
            logger.error(f"Unexpected edge function payload: {type(data).__name__} {data!r:.200}")
            raise UpstreamError("Failed to process file with AI")

        logger.info(f"Extracted {len(names)} names from {file_path}")
        return names

    def remove(self, file_path: str) -> None:
        try:
            self.bucket.remove([file_path])
        except Exception as e:
            # best effort
            logger.warning(f"Failed to remove uploaded file {file_path}: {e}")
