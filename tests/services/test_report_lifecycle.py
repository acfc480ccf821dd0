"""Tests for the report and appeal state machine."""

from datetime import datetime, timedelta

import pytest

from app.exceptions import (
    AppealAlreadySubmittedError,
    InvalidStateTransitionError,
    ValidationError,
)
from app.models.enums import AppealStatus, ContentType, ReportStatus
from app.models.report import SpamReport
from app.services import report_lifecycle as lifecycle

REVIEWER_ID = 42
NOW = datetime(2026, 3, 1, 12, 0, 0)


def new_report(**overrides) -> SpamReport:
    fields = {
        "content_type": ContentType.PROPERTY,
        "content_id": 1,
        "id_user_reported": 7,
        "reported_at": NOW - timedelta(hours=6),
    }
    fields.update(overrides)
    return SpamReport(**fields)


class TestTransitions:
    @pytest.mark.parametrize(
        "current, target",
        [
            (ReportStatus.PENDING, ReportStatus.UNDER_REVIEW),
            (ReportStatus.PENDING, ReportStatus.CONFIRMED),
            (ReportStatus.PENDING, ReportStatus.DISMISSED),
            (ReportStatus.UNDER_REVIEW, ReportStatus.FALSE_POSITIVE),
            (ReportStatus.CONFIRMED, ReportStatus.RESOLVED),
        ],
    )
    def test_allowed(self, current, target):
        assert lifecycle.can_transition(current, target) is True

    @pytest.mark.parametrize(
        "current, target",
        [
            (ReportStatus.UNDER_REVIEW, ReportStatus.PENDING),
            (ReportStatus.CONFIRMED, ReportStatus.DISMISSED),
            (ReportStatus.RESOLVED, ReportStatus.CONFIRMED),
            (ReportStatus.DISMISSED, ReportStatus.UNDER_REVIEW),
            (ReportStatus.FALSE_POSITIVE, ReportStatus.RESOLVED),
            (ReportStatus.PENDING, ReportStatus.RESOLVED),
        ],
    )
    def test_refused(self, current, target):
        assert lifecycle.can_transition(current, target) is False
        with pytest.raises(InvalidStateTransitionError):
            lifecycle.transition(new_report(status=current), target, NOW)

    def test_closed_status_stamps_resolved_at(self):
        report = lifecycle.transition(new_report(), ReportStatus.DISMISSED, NOW)
        assert report.resolved_at == NOW

    def test_resolved_at_is_not_overwritten(self):
        report = new_report(status=ReportStatus.CONFIRMED)
        lifecycle.transition(report, ReportStatus.RESOLVED, NOW)
        assert report.resolved_at == NOW

        # A second close on an already-stamped report keeps the first stamp
        report.status = ReportStatus.PENDING
        lifecycle.transition(report, ReportStatus.DISMISSED, NOW + timedelta(days=1))
        assert report.resolved_at == NOW

    def test_confirmation_does_not_stamp_resolved_at(self):
        report = lifecycle.transition(new_report(), ReportStatus.CONFIRMED, NOW)
        assert report.resolved_at is None


class TestReview:
    def test_start_review_claims_report(self):
        report = lifecycle.start_review(new_report(), REVIEWER_ID, NOW)
        assert report.status == ReportStatus.UNDER_REVIEW
        assert report.reviewed_by == REVIEWER_ID
        assert report.reviewed_at == NOW

    def test_review_records_verdict_and_notes(self):
        report = lifecycle.review(
            new_report(), REVIEWER_ID, ReportStatus.CONFIRMED, "Copied photos", NOW
        )
        assert report.status == ReportStatus.CONFIRMED
        assert report.review_notes == "Copied photos"

    def test_resolve_requires_confirmation(self):
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            lifecycle.resolve(new_report(status=ReportStatus.DISMISSED), REVIEWER_ID)
        assert exc_info.value.current == "dismissed"
        assert exc_info.value.target == "resolved"


class TestAppeals:
    def test_submit_on_confirmed_report(self):
        report = lifecycle.submit_appeal(
            new_report(status=ReportStatus.CONFIRMED),
            "The listing is genuine, here are the deeds.",
            NOW,
        )
        assert report.appeal_submitted is True
        assert report.appeal_status == AppealStatus.PENDING
        assert report.appeal_submitted_at == NOW

    @pytest.mark.parametrize(
        "status", [ReportStatus.PENDING, ReportStatus.DISMISSED, ReportStatus.FALSE_POSITIVE]
    )
    def test_only_confirmed_or_resolved_can_be_appealed(self, status):
        with pytest.raises(ValidationError):
            lifecycle.submit_appeal(new_report(status=status), "x" * 30)

    def test_second_appeal_is_refused(self):
        report = lifecycle.submit_appeal(
            new_report(status=ReportStatus.RESOLVED, id_report=5), "x" * 30
        )
        with pytest.raises(AppealAlreadySubmittedError) as exc_info:
            lifecycle.submit_appeal(report, "y" * 30)
        assert exc_info.value.report_id == 5

    def test_approval_reverses_report(self):
        report = new_report(status=ReportStatus.RESOLVED, resolved_at=NOW - timedelta(days=1))
        lifecycle.submit_appeal(report, "x" * 30, NOW)

        lifecycle.decide_appeal(report, REVIEWER_ID, AppealStatus.APPROVED, "Agreed", NOW)

        assert report.status == ReportStatus.FALSE_POSITIVE
        assert report.resolved_at == NOW
        assert report.appeal_reviewed_by == REVIEWER_ID
        assert report.appeal_review_notes == "Agreed"

    def test_denial_keeps_verdict(self):
        report = new_report(status=ReportStatus.CONFIRMED)
        lifecycle.submit_appeal(report, "x" * 30, NOW)

        lifecycle.decide_appeal(report, REVIEWER_ID, AppealStatus.DENIED, now=NOW)

        assert report.status == ReportStatus.CONFIRMED
        assert report.appeal_status == AppealStatus.DENIED

    def test_decided_appeal_cannot_be_reviewed_again(self):
        report = new_report(status=ReportStatus.CONFIRMED)
        lifecycle.submit_appeal(report, "x" * 30, NOW)
        lifecycle.decide_appeal(report, REVIEWER_ID, AppealStatus.DENIED, now=NOW)

        with pytest.raises(InvalidStateTransitionError):
            lifecycle.decide_appeal(report, REVIEWER_ID, AppealStatus.APPROVED, now=NOW)
