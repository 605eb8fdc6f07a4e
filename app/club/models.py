"""
Club Management Models

Pydantic request/response models for the member routes
"""

from typing import List, Union

from pydantic import BaseModel, Field


class AddMembersRequest(BaseModel):
    """Manual add of selected students"""
    student_ids: List[Union[int, str]] = Field(..., alias="studentIds")

    class Config:
        populate_by_name = True


class AddMembersResponse(BaseModel):
    success: bool = True
    added: List[str] = Field(default_factory=list)
    already_members: List[str] = Field(default_factory=list, alias="alreadyMembers")
    category_conflicts: List[str] = Field(default_factory=list, alias="categoryConflicts")
    failed: List[str] = Field(default_factory=list)
    message: str = ""

    class Config:
        populate_by_name = True


class RemoveMemberResponse(BaseModel):
    success: bool = True
    message: str = "Member removed successfully"


class ActiveMembersResponse(BaseModel):
    member_ids: List[str] = Field(default_factory=list, alias="memberIds")

    class Config:
        populate_by_name = True
