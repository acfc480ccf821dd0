"""Tests for the screened content-creation endpoints (properties and bookings)."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.core.dependencies import get_spam_detection_service
from app.main import app as fastapi_app
from app.models.detection import DetectionResult
from app.models.enums import ReportStatus, ReportType, UserStatus
from app.models.property import Property
from app.models.report import SpamReport
from app.services.spam_detection import SpamDetectionService
from app.services.spam_scoring import aggregate

LISTING = {
    "title": "Sunny two-bedroom near the park",
    "description": "Quiet flat, fully furnished, available from June.",
    "property_type": "apartment",
    "price": 1200,
    "city": "Lyon",
}


class FixedVerdictService(SpamDetectionService):
    def __init__(self, overall: float):
        super().__init__()
        self.result = aggregate(
            {
                "keyword_score": overall,
                "pattern_score": overall,
                "user_score": overall,
                "frequency_score": overall,
            }
        )

    async def analyze(self, db, content, content_type, user_id) -> DetectionResult:
        return self.result


@pytest.fixture
def verdict():
    """Force the detector to return a fixed overall score for the test's requests."""

    def install(overall: float):
        service = FixedVerdictService(overall)
        fastapi_app.dependency_overrides[get_spam_detection_service] = lambda: service
        return service

    return install


@pytest.fixture(name="listing")
def listing_fixture(session: Session, other_user) -> Property:
    listing = Property(**LISTING, id_owner=other_user.id_user)
    session.add(listing)
    session.commit()
    session.refresh(listing)
    return listing


class TestCreateProperty:
    def test_clean_listing_is_published(
        self, client: TestClient, session: Session, user, auth_headers
    ):
        response = client.post("/api/properties", json=LISTING, headers=auth_headers(user))

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Property created successfully"
        assert body["data"]["status"] == "active"
        assert body["data"]["requires_review"] is False
        assert body["data"]["id_owner"] == user.id_user
        assert session.exec(select(SpamReport)).all() == []

    def test_spam_listing_is_rejected(
        self, client: TestClient, session: Session, user, auth_headers, verdict
    ):
        verdict(0.95)

        response = client.post("/api/properties", json=LISTING, headers=auth_headers(user))

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Content rejected due to spam detection",
            "data": {"spam_score": 95},
        }
        assert session.exec(select(Property)).all() == []
        report = session.exec(select(SpamReport)).one()
        assert report.report_type == ReportType.AUTOMATED
        assert report.content_id is None
        assert report.report_metadata["content_snapshot"]["title"] == LISTING["title"]

    def test_borderline_listing_is_held_for_review(
        self, client: TestClient, session: Session, user, auth_headers, verdict
    ):
        verdict(0.65)

        response = client.post("/api/properties", json=LISTING, headers=auth_headers(user))

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Property submitted for review"
        assert body["data"]["status"] == "pending_review"
        assert body["data"]["requires_review"] is True
        report = session.exec(select(SpamReport)).one()
        assert report.content_id == body["data"]["id_property"]
        assert report.status == ReportStatus.PENDING

    def test_shadowbanned_listing_stays_visible_to_author(
        self, client: TestClient, session: Session, user, auth_headers, verdict
    ):
        verdict(0.85)

        response = client.post("/api/properties", json=LISTING, headers=auth_headers(user))

        assert response.status_code == 201
        assert response.json()["data"]["status"] == "active"
        session.refresh(user)
        assert user.shadow_banned is True

    def test_admin_bypasses_screening(
        self, client: TestClient, admin_user, auth_headers, verdict
    ):
        verdict(1.0)

        response = client.post(
            "/api/properties", json=LISTING, headers=auth_headers(admin_user)
        )

        assert response.status_code == 201

    def test_banned_author_is_refused(
        self, client: TestClient, make_user, auth_headers
    ):
        banned = make_user(status=UserStatus.BANNED)

        response = client.post("/api/properties", json=LISTING, headers=auth_headers(banned))

        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_suspended_author_is_refused(
        self, client: TestClient, make_user, auth_headers
    ):
        suspended = make_user(
            status=UserStatus.SUSPENDED,
            suspended_until=datetime.now() + timedelta(days=3),
        )

        response = client.post(
            "/api/properties", json=LISTING, headers=auth_headers(suspended)
        )

        assert response.status_code == 403
        assert "suspended until" in response.json()["message"]

    def test_hourly_limit(self, client: TestClient, user, auth_headers):
        headers = auth_headers(user)
        for _ in range(10):
            assert (
                client.post("/api/properties", json=LISTING, headers=headers).status_code
                == 201
            )

        response = client.post("/api/properties", json=LISTING, headers=headers)

        assert response.status_code == 429
        retry_after = int(response.headers["Retry-After"])
        assert 3590 <= retry_after <= 3600
        assert response.json()["data"] == {"retry_after": retry_after}

    def test_invalid_payload(self, client: TestClient, user, auth_headers):
        response = client.post(
            "/api/properties",
            json={**LISTING, "price": -5, "title": ""},
            headers=auth_headers(user),
        )

        assert response.status_code == 400
        assert len(response.json()["errors"]) == 2

    def test_invalid_token(self, client: TestClient):
        response = client.post(
            "/api/properties",
            json=LISTING,
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["message"] == "Could not validate credentials"


class TestCreateBooking:
    def test_booking_request(self, client: TestClient, user, listing, auth_headers):
        response = client.post(
            "/api/bookings",
            json={
                "id_property": listing.id_property,
                "name": "Camille Martin",
                "message": "Could we arrive on Friday evening?",
                "guests": 2,
            },
            headers=auth_headers(user),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["id_user"] == user.id_user

    def test_unknown_property(self, client: TestClient, user, auth_headers):
        response = client.post(
            "/api/bookings",
            json={"id_property": 99999, "name": "Camille Martin"},
            headers=auth_headers(user),
        )
        assert response.status_code == 404

    def test_spam_booking_is_rejected(
        self, client: TestClient, user, listing, auth_headers, verdict
    ):
        verdict(0.92)

        response = client.post(
            "/api/bookings",
            json={"id_property": listing.id_property, "name": "WINNER"},
            headers=auth_headers(user),
        )

        assert response.status_code == 400
        assert response.json()["data"]["spam_score"] == 92

    def test_held_booking(
        self, client: TestClient, user, listing, auth_headers, verdict
    ):
        verdict(0.7)

        response = client.post(
            "/api/bookings",
            json={"id_property": listing.id_property, "name": "Camille Martin"},
            headers=auth_headers(user),
        )

        assert response.status_code == 201
        assert response.json()["data"]["status"] == "pending_review"
        assert response.json()["message"] == "Booking submitted for review"
