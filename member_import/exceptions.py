"""
Member import errors

Only whole-request failures are raised. Per-name outcomes (unmatched,
already member, category conflict) are summary buckets, never exceptions.
"""


class MemberImportError(Exception):
    """Base class for errors that abort an import request"""

    status_code = 500


class InvalidUploadError(MemberImportError):
    """Missing file / club, disallowed type or size"""

    status_code = 400


class ClubNotFoundError(MemberImportError):
    """Target club does not exist"""

    status_code = 404

    def __init__(self, club_id):
        super().__init__(f"Target club not found: {club_id}")
        self.club_id = club_id


class NoNamesFoundError(MemberImportError):
    """Extraction returned zero names (distinct from 'all unmatched')"""

    status_code = 400

    def __init__(self, message: str = "No names found in the file. Please check the file format and content."):
        super().__init__(message)


class UpstreamError(MemberImportError):
    """Extraction service, registry or membership store unavailable"""

    status_code = 502
