"""
Club Management Module

Club membership administration
- Roster bulk import with fuzzy name matching
- Manual add / removal of members
"""

from .router import router as club_router

__all__ = ["club_router"]
