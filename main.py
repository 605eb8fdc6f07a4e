"""
Club roster import - command line entry point

  python main.py --club-id 12 roster.txt
  python main.py --club-id 12 roster.txt --registry students.json --category subject_oriented_clubs

roster.txt holds one extracted name per line. With --registry the run is
offline: students come from the JSON file and memberships are kept in memory.
"""
import json
import sys
from pathlib import Path
from typing import List

from loguru import logger

from member_import.exceptions import MemberImportError
from member_import.pipeline import ImportPipeline
from member_import.schemas import ClubCategory, StudentRecord
from member_import.stores import InMemoryClubStore, InMemoryMembershipStore, InMemoryStudentRegistry


# Logging
logger.remove()
logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level="INFO"
)
logger.add(
    "logs/member_import_{time:YYYY-MM-DD}.log",
    rotation="1 day",
    retention="30 days",
    level="DEBUG"
)


def read_names(path: Path) -> List[str]:
    """One name per line, blank lines skipped"""
    with open(path, "r", encoding="utf-8") as f:
        return [line.rstrip("\n") for line in f if line.strip()]


def offline_pipeline(registry_path: Path, club_id: str, category: ClubCategory) -> ImportPipeline:
    with open(registry_path, "r", encoding="utf-8") as f:
        students = [StudentRecord(**row) for row in json.load(f)]
    clubs = InMemoryClubStore({club_id: category})
    return ImportPipeline(
        registry=InMemoryStudentRegistry(students),
        memberships=InMemoryMembershipStore(clubs),
        clubs=clubs,
    )


def supabase_pipeline() -> ImportPipeline:
    from database.supabase_client import (
        SupabaseClubStore,
        SupabaseMembershipStore,
        SupabaseStudentRegistry,
        get_supabase_client,
    )

    client = get_supabase_client()
    return ImportPipeline(
        registry=SupabaseStudentRegistry(client),
        memberships=SupabaseMembershipStore(client),
        clubs=SupabaseClubStore(client),
    )


def main(argv=None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description="Import club members from a list of extracted names")
    parser.add_argument("names_file", type=Path, help="Text file, one name per line")
    parser.add_argument("--club-id", required=True, help="Target club ID")
    parser.add_argument("--registry", type=Path, help="Student registry JSON (offline run)")
    parser.add_argument(
        "--category",
        choices=[c.value for c in ClubCategory],
        default=ClubCategory.SUBJECT_ORIENTED.value,
        help="Target club category (offline run)"
    )

    args = parser.parse_args(argv)

    try:
        names = read_names(args.names_file)
        if args.registry:
            pipeline = offline_pipeline(args.registry, args.club_id, ClubCategory(args.category))
        else:
            pipeline = supabase_pipeline()
        result = pipeline.run(args.club_id, names)
    except MemberImportError as e:
        logger.error(f"Import failed: {e}")
        return 1
    except (OSError, ValueError) as e:
        # missing roster / registry file, bad registry JSON, missing Supabase settings
        logger.error(f"Import could not start: {e}")
        return 1

    print(result.model_dump_json(by_alias=True, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
