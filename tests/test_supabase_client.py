"""
Supabase adapter tests

The Supabase client is a MagicMock; query builder chains return themselves
so each test only scripts execute().
"""

import pytest
from unittest.mock import MagicMock

from postgrest.exceptions import APIError

from database.supabase_client import (
    SupabaseClubStore,
    SupabaseExtractionService,
    SupabaseMembershipStore,
    SupabaseStudentRegistry,
    classify_insert_error,
)
from member_import.config import ImportConfig
from member_import.exceptions import UpstreamError
from member_import.schemas import ClubCategory, CommitOutcome, MembershipIntent

CODES = ImportConfig().category_conflict_codes
MESSAGES = ImportConfig().category_conflict_messages


def make_query(*pages):
    """Chainable query builder whose execute() yields the given data pages"""
    query = MagicMock()
    for name in ("select", "eq", "in_", "order", "range", "limit", "insert", "upsert", "update"):
        getattr(query, name).return_value = query
    query.execute.side_effect = [MagicMock(data=page) for page in pages]
    return query


def make_client(query):
    client = MagicMock()
    client.table.return_value = query
    return client


class TestClassifyInsertError:
    def test_unique_violation(self):
        error = APIError({"code": "23505", "message": "duplicate key value violates unique constraint"})
        assert classify_insert_error(error, CODES, MESSAGES) == CommitOutcome.CATEGORY_CONFLICT

    def test_category_trigger(self):
        error = APIError({"code": "P0001", "message": "Student already has a membership in category subject_oriented_clubs"})
        assert classify_insert_error(error, CODES, MESSAGES) == CommitOutcome.CATEGORY_CONFLICT

    def test_other_error_fails(self):
        error = APIError({"code": "42501", "message": "permission denied"})
        assert classify_insert_error(error, CODES, MESSAGES) == CommitOutcome.FAILED

    def test_non_api_error(self):
        assert classify_insert_error(ConnectionError("reset"), CODES, MESSAGES) == CommitOutcome.FAILED

    def test_codes_in_row_values_do_not_count(self):
        """A foreign key failure for a deleted student whose id contains a conflict code"""
        error = APIError({
            "code": "23503",
            "message": 'insert or update on table "club-members" violates foreign key constraint',
            "details": 'Key (student_id)=(123505) is not present in table "students".',
        })
        assert classify_insert_error(error, CODES, MESSAGES) == CommitOutcome.FAILED

    def test_trigger_message_in_plain_exception(self):
        error = RuntimeError("Student already has a membership in category soft_skills_oriented_clubs")
        assert classify_insert_error(error, CODES, MESSAGES) == CommitOutcome.CATEGORY_CONFLICT


class TestStudentRegistry:
    def test_reads_all_pages(self):
        query = make_query(
            [{"id": 1, "first_name": "John", "last_name": "Smith"},
             {"id": 2, "first_name": "Mary", "last_name": None}],
            [{"id": 3, "first_name": "Eric", "last_name": "Mugisha"}],
        )
        registry = SupabaseStudentRegistry(make_client(query), ImportConfig(registry_page_size=2))

        students = registry.list_all()

        assert [s.id for s in students] == [1, 2, 3]
        assert students[1].last_name == ""
        query.range.assert_any_call(0, 1)
        query.range.assert_any_call(2, 3)


class TestClubStore:
    def test_category(self):
        store = SupabaseClubStore(make_client(make_query([{"id": 10, "category": "soft_skills_oriented_clubs"}])))
        assert store.get_category(10) == ClubCategory.SOFT_SKILLS_ORIENTED

    def test_missing_club(self):
        store = SupabaseClubStore(make_client(make_query([])))
        assert store.get_category(999) is None


class TestMembershipStore:
    def test_active_for_students(self):
        query = make_query([
            {"student_id": 1, "club_id": 11, "clubs": {"category": "subject_oriented_clubs"}},
            {"student_id": 1, "club_id": 21, "clubs": None},
        ])
        store = SupabaseMembershipStore(make_client(query))

        rows = store.list_active_for_students([1])

        assert [r.club_category for r in rows] == [ClubCategory.SUBJECT_ORIENTED, None]
        query.in_.assert_called_once_with("student_id", [1])

    def test_active_for_no_students_skips_query(self):
        client = MagicMock()
        assert SupabaseMembershipStore(client).list_active_for_students([]) == []
        client.table.assert_not_called()

    def test_bulk_insert_skips_duplicates(self):
        query = make_query([{"id": 1}])
        store = SupabaseMembershipStore(make_client(query))

        inserted = store.bulk_insert([MembershipIntent(student_id=1, club_id=10)])

        assert inserted == 1
        rows = query.upsert.call_args[0][0]
        assert rows[0]["membership_status"] == "active"
        assert query.upsert.call_args[1] == {"on_conflict": "club_id,student_id", "ignore_duplicates": True}

    def test_insert_one_conflict(self):
        query = make_query()
        query.execute.side_effect = APIError({"code": "23514", "message": "check violation"})
        store = SupabaseMembershipStore(make_client(query))

        assert store.insert_one(MembershipIntent(student_id=1, club_id=10)) == CommitOutcome.CATEGORY_CONFLICT

    def test_mark_left(self):
        query = make_query([{"id": 7}], [])
        store = SupabaseMembershipStore(make_client(query))

        assert store.mark_left(10, 1) is True
        assert store.mark_left(10, 1) is False
        assert query.update.call_args[0][0]["membership_status"] == "left"


class TestExtractionService:
    def test_extract_names(self):
        client = MagicMock()
        client.functions.invoke.return_value = {"names": ["John Smith", "Mary Uwase"]}

        names = SupabaseExtractionService(client).extract_names("bulk-import-1-a.pdf", "application/pdf")

        assert names == ["John Smith", "Mary Uwase"]
        body = client.functions.invoke.call_args[1]["invoke_options"]["body"]
        assert body == {"filePath": "bulk-import-1-a.pdf", "fileType": "application/pdf"}

    def test_extract_names_bytes_payload(self):
        client = MagicMock()
        client.functions.invoke.return_value = b'{"names": ["John Smith"]}'
        assert SupabaseExtractionService(client).extract_names("f", "text/csv") == ["John Smith"]

    def test_extraction_failure(self):
        client = MagicMock()
        client.functions.invoke.side_effect = RuntimeError("edge function 500")
        with pytest.raises(UpstreamError):
            SupabaseExtractionService(client).extract_names("f", "text/csv")

    def test_missing_names_key_is_empty(self):
        client = MagicMock()
        client.functions.invoke.return_value = {"error": None}
        assert SupabaseExtractionService(client).extract_names("f", "text/csv") == []

    @pytest.mark.parametrize("payload", [
        {"names": "John Smith"},
        ["John Smith"],
        b"not json",
    ])
    def test_malformed_payload(self, payload):
        client = MagicMock()
        client.functions.invoke.return_value = payload
        with pytest.raises(UpstreamError, match="Failed to process file with AI"):
            SupabaseExtractionService(client).extract_names("f", "text/csv")

    def test_upload_failure(self):
        client = MagicMock()
        client.storage.from_.return_value.upload.side_effect = RuntimeError("bucket missing")
        with pytest.raises(UpstreamError):
            SupabaseExtractionService(client).upload("f", b"x", "text/csv")

    def test_remove_is_best_effort(self):
        client = MagicMock()
        client.storage.from_.return_value.remove.side_effect = RuntimeError("gone")
        SupabaseExtractionService(client).remove("f")
