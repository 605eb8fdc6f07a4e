"""
Club Management Dependencies

Collaborator wiring for the member routes. Tests override get_member_service
via app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import HTTPException, status

from app.club.members.service import MemberService
from member_import.exceptions import MemberImportError


@lru_cache()
def get_member_service() -> MemberService:
    """Supabase-backed member service (one per process)"""
    from database.supabase_client import (
        SupabaseClubStore,
        SupabaseExtractionService,
        SupabaseMembershipStore,
        SupabaseStudentRegistry,
        get_supabase_client,
    )

    client = get_supabase_client()
    return MemberService(
        registry=SupabaseStudentRegistry(client),
        memberships=SupabaseMembershipStore(client),
        clubs=SupabaseClubStore(client),
        extraction=SupabaseExtractionService(client),
    )


def to_http_error(error: MemberImportError) -> HTTPException:
    """Single top-level error for a failed request"""
    code = getattr(error, "status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=code, detail=str(error))
