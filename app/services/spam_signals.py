"""Signal extractors for spam detection.

Each extractor reads one aspect of a submission and returns a sub-score in
[0, 1]. None of them mutate state.
"""

from collections import Counter
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any
from pydantic import BaseModel
from sqlmodel import Session, func, select

from app.core import spam_rules
from app.models.enums import ContentType, ReportStatus
from app.models.report import SpamReport
from app.models.user import User
from app.services.content import count_recent_content


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def keyword_score(content: Any) -> float:
    """
    Score a submission on the spam keywords found in its free-text fields.

    Each field of `KEYWORD_FIELDS` holding a non-empty string scores the sum
    of its matched keyword weights, capped at 1.0. The result is the mean over
    those fields.

    Parameters:
        content (Any): The submission payload; anything other than a mapping scores 0.

    Returns:
        float: Keyword sub-score in [0, 1].
    """
    if not isinstance(content, Mapping):
        return 0.0

    field_scores: list[float] = []
    for field in spam_rules.KEYWORD_FIELDS:
        text = content.get(field)
        if not isinstance(text, str) or not text:
            continue
        lowered = text.lower()
        score = 0.0
        for tier in spam_rules.KEYWORD_TIERS.values():
            for keyword in tier.keywords:
                if keyword in lowered:
                    score += tier.weight
        field_scores.append(min(score, 1.0))

    if not field_scores:
        return 0.0
    return sum(field_scores) / len(field_scores)


def _caps_ratio(text: str) -> float:
    """Share of all words that are upper-case words longer than two characters."""
    words = text.split()
    if not words:
        return 0.0
    caps = sum(1 for word in words if len(word) > 2 and word == word.upper())
    return caps / len(words)


def _has_repeated_word(text: str) -> bool:
    limit, _ = spam_rules.REPEATED_WORD
    counts = Counter(word for word in text.lower().split() if len(word) > 3)
    return any(count > limit for count in counts.values())


def _has_suspicious_url(text: str) -> bool:
    for url in spam_rules.URL_RE.findall(text):
        lowered = url.lower()
        if any(domain in lowered for domain in spam_rules.SHORTENER_DOMAINS):
            return True
        if spam_rules.IPV4_RE.search(url):
            return True
    return False


def pattern_score(content: Any) -> float:
    """
    Score a submission on structural spam patterns across all of its text.

    Every string value of the payload is joined with a space. Each pattern of
    `SPAM_PATTERNS` adds its weight once if it matches anywhere, then the
    caps ratio, repeated punctuation, repeated word and suspicious URL checks
    add theirs.

    Returns:
        float: Pattern sub-score clamped to [0, 1].
    """
    if isinstance(content, Mapping):
        values = content.values()
    elif isinstance(content, str):
        values = [content]
    else:
        return 0.0

    text = " ".join(value for value in values if isinstance(value, str))
    if not text:
        return 0.0

    score = 0.0
    for pattern in spam_rules.SPAM_PATTERNS:
        if pattern.regex.search(text):
            score += pattern.weight

    caps_threshold, caps_weight = spam_rules.CAPS_WORD_RATIO
    if _caps_ratio(text) > caps_threshold:
        score += caps_weight

    punctuation_limit, punctuation_weight = spam_rules.REPEATED_PUNCTUATION
    if len(spam_rules.REPEATED_PUNCTUATION_RE.findall(text)) > punctuation_limit:
        score += punctuation_weight

    if _has_repeated_word(text):
        score += spam_rules.REPEATED_WORD[1]

    if _has_suspicious_url(text):
        score += spam_rules.SUSPICIOUS_URL_WEIGHT

    return _clamp(score)


def count_confirmed_reports(
    session: Session, user_id: int, since: datetime | None = None
) -> int:
    """Count confirmed reports against a user, optionally only those filed since `since`."""
    statement = (
        select(func.count())
        .select_from(SpamReport)
        .where(
            SpamReport.id_user_reported == user_id,
            SpamReport.status == ReportStatus.CONFIRMED,
        )
    )
    if since is not None:
        statement = statement.where(SpamReport.reported_at >= since)
    return session.exec(statement).one()


def missing_profile_fields(user: User) -> int:
    return sum(1 for field in spam_rules.PROFILE_FIELDS if not getattr(user, field, None))


class UserRiskProfile(BaseModel):
    """Read-only view of a user's account risk, derived from the user row and report history."""

    id_user: int
    account_age_days: float
    tracked_fields: int
    missing_fields: int
    confirmed_reports: int


def build_user_risk_profile(
    session: Session, user: User, now: datetime | None = None
) -> UserRiskProfile:
    now = now or datetime.now()
    return UserRiskProfile(
        id_user=user.id_user,  # type: ignore[arg-type]
        account_age_days=(now - user.date_creation).total_seconds() / 86400,
        tracked_fields=len(spam_rules.PROFILE_FIELDS),
        missing_fields=missing_profile_fields(user),
        confirmed_reports=count_confirmed_reports(session, user.id_user),  # type: ignore[arg-type]
    )


def user_score(session: Session, user_id: int, now: datetime | None = None) -> float:
    """
    Score the author's account on age, profile completeness and report history.

    Runs blocking queries; the detection service calls it from a worker thread.

    Parameters:
        session (Session): Database session used for reads only.
        user_id (int): Author of the submission.
        now (datetime | None): Reference time; defaults to the current time.

    Returns:
        float: User sub-score in [0, 1]; 0 when the user does not exist.
    """
    user = session.get(User, user_id)
    if user is None:
        return 0.0
    profile = build_user_risk_profile(session, user, now)

    score = 0.0
    if profile.account_age_days < 1:
        score += spam_rules.NEW_ACCOUNT_WEIGHT
    elif profile.account_age_days < spam_rules.YOUNG_ACCOUNT_DAYS:
        score += spam_rules.YOUNG_ACCOUNT_WEIGHT

    score += (
        profile.missing_fields / profile.tracked_fields
    ) * spam_rules.INCOMPLETE_PROFILE_WEIGHT
    score += min(
        profile.confirmed_reports * spam_rules.CONFIRMED_REPORT_WEIGHT,
        spam_rules.CONFIRMED_REPORT_CAP,
    )
    return _clamp(score)


def _step_weight(count: int, steps: tuple[tuple[int, float], ...]) -> float:
    for limit, weight in steps:
        if count > limit:
            return weight
    return 0.0


def frequency_score(
    session: Session,
    user_id: int,
    content_type: ContentType | str,
    now: datetime | None = None,
) -> float:
    """
    Score how fast the author has been posting content of this type.

    Returns:
        float: Frequency sub-score in [0, 1]; 0 for content types without a store.
    """
    try:
        content_type = ContentType(content_type)
    except ValueError:
        return 0.0
    now = now or datetime.now()

    hourly = count_recent_content(
        session, user_id, content_type, now - timedelta(hours=1)
    )
    daily = count_recent_content(
        session, user_id, content_type, now - timedelta(hours=24)
    )
    score = _step_weight(hourly, spam_rules.HOURLY_POSTING_STEPS) + _step_weight(
        daily, spam_rules.DAILY_POSTING_STEPS
    )
    return _clamp(score)
