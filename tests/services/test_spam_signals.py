"""Tests for the spam signal extractors."""

from datetime import datetime, timedelta

import pytest
from sqlmodel import Session

from app.models.enums import ContentType, ReportStatus
from app.services import spam_signals

NONEXISTENT_ID = 99999


class TestKeywordScore:
    def test_non_mapping_scores_zero(self):
        assert spam_signals.keyword_score("urgent lottery winner") == 0.0
        assert spam_signals.keyword_score(None) == 0.0

    def test_no_text_fields_scores_zero(self):
        assert spam_signals.keyword_score({"price": 100}) == 0.0
        assert spam_signals.keyword_score({"title": ""}) == 0.0

    def test_mean_over_present_fields(self):
        """'urgent' (high) and 'deal' (low) in the title, nothing in the description."""
        content = {"title": "URGENT deal", "description": "Quiet flat near the river"}
        assert spam_signals.keyword_score(content) == pytest.approx(0.175)

    def test_field_score_capped_at_one(self):
        content = {"title": "Urgent: lottery winner, congratulations, act now"}
        assert spam_signals.keyword_score(content) == pytest.approx(1.0)

    def test_only_string_fields_are_scanned(self):
        content = {"title": 1234, "name": "cheap"}
        assert spam_signals.keyword_score(content) == pytest.approx(0.05)

    def test_fields_outside_keyword_list_are_ignored(self):
        content = {"city": "urgent lottery", "title": "Garden flat"}
        assert spam_signals.keyword_score(content) == 0.0


class TestPatternScore:
    def test_clean_text_scores_zero(self):
        assert spam_signals.pattern_score({"title": "A quiet flat near the river"}) == 0.0

    def test_excessive_exclamation(self):
        assert spam_signals.pattern_score({"title": "Call now!!!"}) == pytest.approx(0.2)

    def test_shortened_url_counts_pattern_and_url_check(self):
        content = {"description": "see http://bit.ly/abc"}
        assert spam_signals.pattern_score(content) == pytest.approx(0.7)

    def test_repeated_word(self):
        content = {"description": "cheap cheap cheap cheap flat"}
        assert spam_signals.pattern_score(content) == pytest.approx(0.25)

    def test_caps_word_ratio(self):
        content = {"title": "BIG NEW FLAT now"}
        assert spam_signals.pattern_score(content) == pytest.approx(0.2)

    def test_caps_ratio_counts_short_words(self):
        """Short words count towards the total even though they never count as caps."""
        content = {"title": "a b c d e f g URGENT"}
        assert spam_signals.pattern_score(content) == pytest.approx(0.15)

    def test_ip_address_url(self):
        content = {"description": "details at http://192.168.10.4/listing"}
        assert spam_signals.pattern_score(content) == pytest.approx(0.4)

    def test_values_are_joined_across_fields(self):
        """Each pattern adds its weight once, whichever field it is found in."""
        content = {"title": "Wow!!!", "description": "Really!!!"}
        assert spam_signals.pattern_score(content) == pytest.approx(0.2)

    def test_score_is_clamped(self):
        content = {
            "title": "WINNER!!! CLAIM NOW??? REALLY?? YES??",
            "description": "call +1 555-123-4567 or mail deals@spam.com http://bit.ly/x $5000k",
        }
        assert spam_signals.pattern_score(content) == 1.0

    def test_non_text_content_scores_zero(self):
        assert spam_signals.pattern_score(42) == 0.0
        assert spam_signals.pattern_score({"price": 10}) == 0.0


class TestUserRiskProfile:
    def test_profile_fields(self, session: Session, make_user, make_report):
        author = make_user(phone=None, date_creation=datetime.now() - timedelta(days=3))
        make_report(author, status=ReportStatus.CONFIRMED)

        profile = spam_signals.build_user_risk_profile(session, author)

        assert profile.missing_fields == 1
        assert profile.tracked_fields == 4
        assert profile.confirmed_reports == 1
        assert 2.9 < profile.account_age_days < 3.1

    def test_reference_time(self, session: Session, make_user):
        created = datetime(2026, 1, 1)
        author = make_user(date_creation=created)

        profile = spam_signals.build_user_risk_profile(
            session, author, now=created + timedelta(days=10)
        )

        assert profile.account_age_days == pytest.approx(10.0)
        assert profile.confirmed_reports == 0


class TestUserScore:
    def test_unknown_user_scores_zero(self, session: Session):
        assert spam_signals.user_score(session, NONEXISTENT_ID) == 0.0

    def test_established_complete_profile_scores_zero(self, session: Session, user):
        assert spam_signals.user_score(session, user.id_user) == 0.0

    def test_new_account_with_empty_profile(self, session: Session, make_user):
        fresh = make_user(
            first_name=None,
            last_name=None,
            phone=None,
            avatar=None,
            date_creation=datetime.now(),
        )
        assert spam_signals.user_score(session, fresh.id_user) == pytest.approx(0.5)

    def test_young_account_with_partial_profile(self, session: Session, make_user):
        young = make_user(
            phone=None,
            avatar=None,
            date_creation=datetime.now() - timedelta(days=5),
        )
        assert spam_signals.user_score(session, young.id_user) == pytest.approx(0.25)

    def test_confirmed_reports_are_capped(self, session: Session, user, make_report):
        for _ in range(4):
            make_report(user, status=ReportStatus.CONFIRMED)
        make_report(user, status=ReportStatus.DISMISSED)

        assert spam_signals.user_score(session, user.id_user) == pytest.approx(0.5)


class TestFrequencyScore:
    def test_no_recent_content(self, session: Session, user):
        assert (
            spam_signals.frequency_score(session, user.id_user, ContentType.PROPERTY)
            == 0.0
        )

    def test_burst_in_last_hour(self, session: Session, user, make_property):
        for _ in range(6):
            make_property(user)
        score = spam_signals.frequency_score(session, user.id_user, ContentType.PROPERTY)
        assert score == pytest.approx(0.4)

    def test_moderate_hourly_rate(self, session: Session, user, make_property):
        for _ in range(4):
            make_property(user)
        score = spam_signals.frequency_score(session, user.id_user, "property")
        assert score == pytest.approx(0.2)

    def test_daily_volume_only(self, session: Session, user, make_property):
        two_hours_ago = datetime.now() - timedelta(hours=2)
        for _ in range(11):
            make_property(user, created_at=two_hours_ago)
        score = spam_signals.frequency_score(session, user.id_user, ContentType.PROPERTY)
        assert score == pytest.approx(0.15)

    def test_only_counts_requested_type(
        self, session: Session, user, other_user, make_property, make_booking
    ):
        listing = make_property(other_user)
        for _ in range(6):
            make_booking(user, listing)
        assert (
            spam_signals.frequency_score(session, user.id_user, ContentType.PROPERTY)
            == 0.0
        )
        assert spam_signals.frequency_score(
            session, user.id_user, ContentType.BOOKING
        ) == pytest.approx(0.4)

    def test_unknown_content_type_scores_zero(self, session: Session, user):
        assert spam_signals.frequency_score(session, user.id_user, "bogus") == 0.0
        assert (
            spam_signals.frequency_score(session, user.id_user, ContentType.MESSAGE)
            == 0.0
        )
