"""
Club Members Module

- Roster bulk import (spreadsheet / PDF / document -> club memberships)
- Manual add / removal of members
"""

from .service import MemberService

__all__ = ["MemberService"]
