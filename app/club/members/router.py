"""
Club Members API Router

Roster bulk import, manual add, removal and active member lookup.
Authentication / club-leader checks are done upstream of these routes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from loguru import logger

from member_import.exceptions import MemberImportError
from member_import.schemas import ImportResult

from ..dependencies import get_member_service, to_http_error
from ..models import (
    ActiveMembersResponse,
    AddMembersRequest,
    AddMembersResponse,
    RemoveMemberResponse,
)
from .service import MemberService

router = APIRouter(prefix="/{club_id}/members", tags=["Club Members"])


# =============================================
# Bulk import
# =============================================

@router.post("/bulk-import", response_model=ImportResult)
async def bulk_import_members(
    club_id: str,
    file: Optional[UploadFile] = File(None),
    service: MemberService = Depends(get_member_service),
):
    """
    Roster bulk import

    Extracts names from the uploaded spreadsheet / PDF / document, matches
    them against the student registry and adds the matched students.
    Always answers with a complete summary or a single error.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    content = await file.read()
    try:
        return service.bulk_import(club_id, file.filename, content, file.content_type)
    except MemberImportError as e:
        logger.warning(f"Bulk import rejected for club {club_id}: {e}")
        raise to_http_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error during bulk import: {e}")
        raise HTTPException(status_code=500, detail="Internal server error during bulk import")


# =============================================
# Manual membership changes
# =============================================

@router.post("", response_model=AddMembersResponse)
async def add_members(
    club_id: str,
    body: AddMembersRequest,
    service: MemberService = Depends(get_member_service),
):
    """Add selected students to the club"""
    try:
        result = service.add_members(club_id, body.student_ids)
    except MemberImportError as e:
        raise to_http_error(e)

    if not result.added and result.already_members and not result.category_conflicts and not result.failed:
        raise HTTPException(status_code=400, detail="All selected students are already members of this club")

    return AddMembersResponse(
        added=result.added,
        alreadyMembers=result.already_members,
        categoryConflicts=result.category_conflicts,
        failed=result.failed,
        message=result.message,
    )


@router.delete("/{student_id}", response_model=RemoveMemberResponse)
async def remove_member(
    club_id: str,
    student_id: str,
    service: MemberService = Depends(get_member_service),
):
    """Mark the student's membership as left"""
    if not service.remove_member(club_id, student_id):
        raise HTTPException(status_code=404, detail="Active membership not found")
    return RemoveMemberResponse()


@router.get("/active", response_model=ActiveMembersResponse)
async def active_members(
    club_id: str,
    service: MemberService = Depends(get_member_service),
):
    """IDs of the club's active members"""
    return ActiveMembersResponse(memberIds=service.active_member_ids(club_id))
