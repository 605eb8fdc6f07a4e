"""
Member import settings
"""
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field
from dotenv import load_dotenv

load_dotenv()


class SupabaseConfig(BaseSettings):
    """Supabase settings"""

    supabase_url: str = Field(default="", description="Supabase Project URL")
    supabase_key: str = Field(default="", description="Supabase anon key")
    supabase_service_key: str = Field(default="", description="Supabase service role key (storage, edge functions)")

    class Config:
        env_prefix = ""
        case_sensitive = False


class ImportConfig(BaseSettings):
    """Roster import settings"""

    # Matching
    match_threshold: int = Field(default=50, description="Minimum score for a registry match")
    excluded_grades: List[str] = Field(
        default_factory=lambda: ["Senior6"],
        description="Graduating grades that are never import targets"
    )

    # Upload validation
    max_file_size: int = Field(default=10 * 1024 * 1024, description="Maximum upload size (bytes)")
    allowed_content_types: List[str] = Field(
        default_factory=lambda: [
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",  # .xlsx
            "application/vnd.ms-excel",  # .xls
            "text/csv",
            "text/plain",
            "application/pdf",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",  # .docx
        ]
    )

    # Storage / extraction
    storage_bucket: str = "members"
    extraction_function: str = "extract-names"

    # Tables
    students_table: str = "students"
    clubs_table: str = "clubs"
    memberships_table: str = "club-members"
    registry_page_size: int = Field(default=1000, description="Rows per registry page read")

    # Storage errors that mean "category / uniqueness constraint lost a race"
    category_conflict_codes: List[str] = Field(
        default_factory=lambda: [
            "23505",  # unique_violation
            "23514",  # check_violation
        ],
        description="SQLSTATE codes, compared exactly"
    )
    category_conflict_messages: List[str] = Field(
        default_factory=lambda: ["already has a membership in category"],
        description="Category trigger message fragments"
    )

    class Config:
        env_prefix = "MEMBER_IMPORT_"
        case_sensitive = False


# Global settings instances
supabase_config = SupabaseConfig()
import_config = ImportConfig()
