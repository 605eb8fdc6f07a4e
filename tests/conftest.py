"""
Pytest configuration and fixtures for member import tests
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from member_import.schemas import ClubCategory, StudentRecord
from member_import.stores import (
    InMemoryClubStore,
    InMemoryMembershipStore,
    InMemoryStudentRegistry,
    StaticExtractionService,
)

SUBJECT_CLUB = "10"
SUBJECT_CLUB_2 = "11"
SOFT_SKILLS_CLUB = "20"
SOFT_SKILLS_CLUB_2 = "21"


@pytest.fixture(scope="function")
def students():
    """Small registry in load order"""
    return [
        StudentRecord(id=1, first_name="John", last_name="Smith", grade="Senior2", combination="PCM", gender="male"),
        StudentRecord(id=2, first_name="Mary", last_name="Uwase", grade="Senior3", combination="MEG", gender="female"),
        StudentRecord(id=3, first_name="Jean Paul", last_name="Habimana", grade="Senior4", combination="HEG", gender="male"),
        StudentRecord(id=4, first_name="Alice", last_name="Mukamana", grade="Senior6", combination="PCB", gender="female"),
        StudentRecord(id=5, first_name="Eric", last_name="O'Neil", grade="Senior1", combination=None, gender="male"),
    ]


@pytest.fixture(scope="function")
def clubs():
    return InMemoryClubStore({
        SUBJECT_CLUB: ClubCategory.SUBJECT_ORIENTED,
        SUBJECT_CLUB_2: ClubCategory.SUBJECT_ORIENTED,
        SOFT_SKILLS_CLUB: ClubCategory.SOFT_SKILLS_ORIENTED,
        SOFT_SKILLS_CLUB_2: ClubCategory.SOFT_SKILLS_ORIENTED,
    })


@pytest.fixture(scope="function")
def memberships(clubs):
    return InMemoryMembershipStore(clubs)


@pytest.fixture(scope="function")
def registry(students):
    return InMemoryStudentRegistry(students)


@pytest.fixture(scope="function")
def extraction():
    return StaticExtractionService(["John Smith", "Uwase Mary", "Nobody Known"])
