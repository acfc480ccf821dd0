"""Tests for the enforcement executor."""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlmodel import Session

from app.models.enums import (
    ActionTaken,
    BookingStatus,
    ContentType,
    PropertyStatus,
    UserStatus,
)
from app.services.enforcement import apply_action
from app.services.notification import ModerationNotifier

NOW = datetime(2026, 5, 4, 9, 30, 0)


@pytest.fixture
def notifier():
    return MagicMock(spec=ModerationNotifier)


class TestApplyAction:
    def test_warning_only_notifies(
        self, session: Session, user, make_report, notifier
    ):
        report = make_report(user)

        apply_action(session, report, ActionTaken.WARNING, notifier, NOW)

        notifier.warn.assert_called_once_with(session, user.id_user, report.id_report)
        assert report.action_taken == ActionTaken.WARNING
        assert user.status == UserStatus.ACTIVE

    def test_suspension(self, session: Session, user, make_report, notifier):
        report = make_report(user)

        apply_action(session, report, ActionTaken.USER_SUSPENDED, notifier, NOW)
        session.commit()
        session.refresh(user)

        assert user.status == UserStatus.SUSPENDED
        assert user.suspended_until == NOW + timedelta(days=7)
        assert report.action_details == {
            "duration": 7,
            "reason": "Spam activity",
            "automatic_expiry": (NOW + timedelta(days=7)).isoformat(),
        }
        notifier.suspended.assert_called_once_with(
            session, user.id_user, report.id_report, 7
        )

    def test_ban_clears_suspension(self, session: Session, make_user, make_report, notifier):
        offender = make_user(
            status=UserStatus.SUSPENDED, suspended_until=NOW + timedelta(days=1)
        )
        report = make_report(offender)

        apply_action(session, report, ActionTaken.USER_BANNED, notifier, NOW)

        assert offender.status == UserStatus.BANNED
        assert offender.suspended_until is None
        notifier.banned.assert_called_once()

    def test_shadowban_is_silent(self, session: Session, user, make_report, notifier):
        report = make_report(user)

        apply_action(session, report, ActionTaken.SHADOWBAN, notifier, NOW)

        assert user.shadow_banned is True
        assert user.status == UserStatus.ACTIVE
        assert notifier.method_calls == []

    def test_property_removal(
        self, session: Session, user, make_property, make_report, notifier
    ):
        listing = make_property(user)
        report = make_report(user, content_id=listing.id_property)

        apply_action(session, report, ActionTaken.CONTENT_REMOVED, notifier, NOW)

        assert listing.status == PropertyStatus.REMOVED
        notifier.content_removed.assert_called_once_with(
            session, user.id_user, report.id_report, "property"
        )

    def test_booking_removal_cancels_booking(
        self, session: Session, user, other_user, make_property, make_booking, make_report, notifier
    ):
        booking = make_booking(user, make_property(other_user))
        report = make_report(
            user, content_type=ContentType.BOOKING, content_id=booking.id_booking
        )

        apply_action(session, report, ActionTaken.CONTENT_REMOVED, notifier, NOW)

        assert booking.status == BookingStatus.CANCELLED

    def test_removal_of_missing_content_skips_notice(
        self, session: Session, user, make_report, notifier
    ):
        report = make_report(user, content_id=99999)

        apply_action(session, report, ActionTaken.CONTENT_REMOVED, notifier, NOW)

        notifier.content_removed.assert_not_called()
        assert report.action_taken == ActionTaken.CONTENT_REMOVED

    def test_missing_user_updates_report_only(
        self, session: Session, user, make_report, notifier
    ):
        report = make_report(user)
        report.id_user_reported = 99999

        apply_action(session, report, ActionTaken.USER_BANNED, notifier, NOW)

        assert report.action_taken == ActionTaken.USER_BANNED
        notifier.banned.assert_not_called()

    def test_default_notifier_writes_notifications(
        self, session: Session, user, make_report
    ):
        from app.services.notification import get_user_notifications

        report = make_report(user)
        apply_action(session, report, ActionTaken.USER_BANNED, now=NOW)
        session.commit()

        notices = get_user_notifications(session, user.id_user)
        assert [n.notification_type.value for n in notices] == ["account_banned"]
