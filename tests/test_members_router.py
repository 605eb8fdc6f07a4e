"""
Club member route tests

Tests run the FastAPI app against an in-memory MemberService injected
through dependency_overrides.
"""

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from app.club.dependencies import get_member_service
from app.club.members.service import MemberService
from app.server import app
from member_import.config import ImportConfig
from member_import.exceptions import UpstreamError

from conftest import SUBJECT_CLUB, SUBJECT_CLUB_2

CSV = ("roster.csv", b"name\nJohn Smith\n", "text/csv")


@pytest.fixture
def service(registry, memberships, clubs, extraction):
    return MemberService(registry, memberships, clubs, extraction, config=ImportConfig())


@pytest.fixture
def client(service):
    app.dependency_overrides[get_member_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def url(club_id, suffix=""):
    return f"/api/club/{club_id}/members{suffix}"


class TestBulkImportRoute:
    """POST /api/club/{club_id}/members/bulk-import"""

    def test_success_payload(self, client):
        response = client.post(url(SUBJECT_CLUB, "/bulk-import"), files={"file": CSV})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["summary"]["totalExtracted"] == 3
        assert data["summary"]["successfullyAdded"] == 2
        assert data["summary"]["unmatched"] == 1
        assert data["results"]["unmatched"] == ["Nobody Known"]
        assert {e["studentId"] for e in data["results"]["added"]} == {"1", "2"}
        assert "completedAt" in data

    def test_missing_file(self, client):
        response = client.post(url(SUBJECT_CLUB, "/bulk-import"))
        assert response.status_code == 400
        assert response.json()["detail"] == "No file provided"

    def test_invalid_type(self, client):
        response = client.post(
            url(SUBJECT_CLUB, "/bulk-import"),
            files={"file": ("photo.png", b"\x89PNG", "image/png")},
        )
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid file type")

    def test_unknown_club(self, client):
        response = client.post(url("999", "/bulk-import"), files={"file": CSV})
        assert response.status_code == 404

    def test_no_names(self, client, extraction):
        extraction.names = []
        response = client.post(url(SUBJECT_CLUB, "/bulk-import"), files={"file": CSV})
        assert response.status_code == 400
        assert response.json()["detail"].startswith("No names found")

    def test_upstream_failure(self):
        service = MagicMock()
        service.bulk_import.side_effect = UpstreamError("Failed to process file with AI")
        app.dependency_overrides[get_member_service] = lambda: service
        try:
            response = TestClient(app).post(url(SUBJECT_CLUB, "/bulk-import"), files={"file": CSV})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to process file with AI"

    def test_unexpected_failure(self):
        service = MagicMock()
        service.bulk_import.side_effect = RuntimeError("boom")
        app.dependency_overrides[get_member_service] = lambda: service
        try:
            response = TestClient(app).post(url(SUBJECT_CLUB, "/bulk-import"), files={"file": CSV})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal server error during bulk import"


class TestMemberRoutes:
    """Manual add, removal and active member lookup"""

    def test_add_members(self, client):
        response = client.post(url(SUBJECT_CLUB), json={"studentIds": [1, 2]})

        assert response.status_code == 200
        data = response.json()
        assert data["added"] == ["1", "2"]
        assert data["message"] == "Successfully added 2 student(s) to the club"

    def test_add_reports_category_conflicts(self, client, memberships):
        memberships.add_active(SUBJECT_CLUB_2, 2)

        data = client.post(url(SUBJECT_CLUB), json={"studentIds": [1, 2]}).json()

        assert data["added"] == ["1"]
        assert data["categoryConflicts"] == ["2"]

    def test_all_already_members(self, client, memberships):
        memberships.add_active(SUBJECT_CLUB, 1)

        response = client.post(url(SUBJECT_CLUB), json={"studentIds": [1]})

        assert response.status_code == 400
        assert response.json()["detail"] == "All selected students are already members of this club"

    def test_empty_selection(self, client):
        response = client.post(url(SUBJECT_CLUB), json={"studentIds": []})
        assert response.status_code == 400

    def test_remove_and_list(self, client, memberships):
        memberships.add_active(SUBJECT_CLUB, 1)
        memberships.add_active(SUBJECT_CLUB, 2)

        assert client.delete(url(SUBJECT_CLUB, "/1")).status_code == 200
        assert client.get(url(SUBJECT_CLUB, "/active")).json() == {"memberIds": ["2"]}

    def test_remove_missing_membership(self, client):
        assert client.delete(url(SUBJECT_CLUB, "/1")).status_code == 404


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
