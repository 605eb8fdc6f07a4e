"""
Club Management Router

Mounts the club member routes under /club
"""

from fastapi import APIRouter

from .members.router import router as members_router

router = APIRouter(prefix="/club", tags=["Club Management"])

router.include_router(members_router)
