"""Shared fixtures for service tests."""

from datetime import datetime
from typing import Any

import pytest
from sqlmodel import Session

from app.models.booking import Booking
from app.models.detection import DetectionResult
from app.models.enums import ContentType, ReportCategory, ReportType, Severity
from app.models.property import Property
from app.models.report import SpamReport
from app.services.spam_detection import SpamDetectionService
from app.services.spam_scoring import aggregate


# Session and user fixtures are inherited from root conftest.py


def scored(overall: float) -> DetectionResult:
    """Build a verdict whose overall score is `overall`, every sub-score set equally."""
    return aggregate(
        {
            "keyword_score": overall,
            "pattern_score": overall,
            "user_score": overall,
            "frequency_score": overall,
        }
    )


class StubDetectionService(SpamDetectionService):
    """Detection service whose analysis always returns a fixed verdict."""

    def __init__(self, result: DetectionResult):
        super().__init__()
        self.result = result
        self.calls = 0

    async def analyze(self, db, content, content_type, user_id) -> DetectionResult:
        self.calls += 1
        return self.result


@pytest.fixture(name="make_property")
def make_property_fixture(session: Session):
    def make(owner, **overrides) -> Property:
        fields: dict[str, Any] = {
            "title": "Bright studio in the old town",
            "description": "Furnished studio close to the station, available now.",
            "price": 650.0,
            "city": "Nantes",
            "id_owner": owner.id_user,
        }
        fields.update(overrides)
        db_property = Property(**fields)
        session.add(db_property)
        session.commit()
        session.refresh(db_property)
        return db_property

    return make


@pytest.fixture(name="make_booking")
def make_booking_fixture(session: Session):
    def make(guest, listing, **overrides) -> Booking:
        fields: dict[str, Any] = {
            "id_property": listing.id_property,
            "id_user": guest.id_user,
            "name": "Jane Guest",
            "message": "Arriving around 6pm with my partner.",
            "guests": 2,
        }
        fields.update(overrides)
        booking = Booking(**fields)
        session.add(booking)
        session.commit()
        session.refresh(booking)
        return booking

    return make


@pytest.fixture(name="make_report")
def make_report_fixture(session: Session):
    def make(reported_user, **overrides) -> SpamReport:
        fields: dict[str, Any] = {
            "content_type": ContentType.PROPERTY,
            "content_id": 1,
            "id_user_reported": reported_user.id_user,
            "report_type": ReportType.USER_REPORTED,
            "category": ReportCategory.SPAM,
            "severity": Severity.MEDIUM,
            "reported_at": datetime.now(),
        }
        fields.update(overrides)
        report = SpamReport(**fields)
        session.add(report)
        session.commit()
        session.refresh(report)
        return report

    return make


@pytest.fixture(name="scored")
def scored_fixture():
    return scored


@pytest.fixture(name="stub_service")
def stub_service_fixture():
    def make(result: DetectionResult) -> StubDetectionService:
        return StubDetectionService(result)

    return make
