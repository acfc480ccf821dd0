"""
Action policy and pre-submission gate.

Turns a detection verdict into a moderation action and applies the
account-level protections (status check, adaptive rate limit) that run in
front of every content-creating route.
"""

from datetime import datetime, timedelta
from typing import Any

from anyio import to_thread
from loguru import logger
from pydantic import BaseModel
from sqlmodel import Session, col, select

from app.core.config import get_settings
from app.core.rate_tracker import RateTracker
from app.exceptions import (
    AccountRestrictedError,
    RateLimitExceededError,
    SpamContentRejectedError,
)
from app.models.detection import DetectionResult
from app.models.enums import (
    ContentType,
    SpamAction,
    Severity,
    UserRole,
    UserStatus,
)
from app.models.report import SpamReport
from app.models.user import User
from app.services.spam_detection import SpamDetectionService
from app.services.spam_signals import count_confirmed_reports

RATE_LIMIT_WINDOW_SECONDS = 3600
RECENT_REPORTS_LOOKBACK = timedelta(days=7)
RECENT_REPORTS_SAMPLE = 5
# (average overall score above which, hourly limit)
RATE_LIMIT_STEPS = ((0.7, 2), (0.5, 5))
RECENT_CONFIRMED_WINDOW = timedelta(hours=24)

REVIEW_ACTIONS = frozenset({SpamAction.MANUAL_REVIEW, SpamAction.ACCOUNT_SUSPEND})
RESTRICT_ACTIONS = frozenset({SpamAction.SHADOWBAN, SpamAction.ACCOUNT_SUSPEND})


class UserHistory(BaseModel):
    confirmed_reports: int = 0
    repeat_offender: bool = False


class ScreeningOutcome(BaseModel):
    action: SpamAction
    result: DetectionResult | None = None

    @property
    def held_for_review(self) -> bool:
        return self.action in REVIEW_ACTIONS

    def content_overrides(self, review_status: Any) -> dict[str, Any]:
        """Field values to apply to the content row before it is persisted."""
        if self.held_for_review:
            return {"status": review_status, "requires_review": True}
        return {}


def get_user_history(session: Session, user_id: int) -> UserHistory:
    confirmed = count_confirmed_reports(session, user_id)
    return UserHistory(
        confirmed_reports=confirmed,
        repeat_offender=confirmed >= get_settings().REPEAT_OFFENDER_REPORTS,
    )


def get_recommended_action(
    score: float, user_history: UserHistory | None = None
) -> SpamAction:
    """
    Map an overall spam score to a moderation action.

    Rules are evaluated in order and the first match wins:
    auto-reject, suspend (repeat offenders only), shadowban, manual review,
    otherwise approve.

    Parameters:
        score (float): Overall detection score in [0, 1].
        user_history (UserHistory | None): Author history; None is treated as a first offence.

    Returns:
        SpamAction: The recommended action.
    """
    settings = get_settings()
    repeat_offender = bool(user_history and user_history.repeat_offender)

    if score >= settings.AUTO_REJECT_THRESHOLD:
        return SpamAction.AUTO_REJECT
    if score >= settings.SHADOWBAN_THRESHOLD and repeat_offender:
        return SpamAction.ACCOUNT_SUSPEND
    if score >= settings.SHADOWBAN_THRESHOLD:
        return SpamAction.SHADOWBAN
    if score >= settings.MANUAL_REVIEW_THRESHOLD:
        return SpamAction.MANUAL_REVIEW
    return SpamAction.AUTO_APPROVE


async def screen_submission(
    session: Session,
    service: SpamDetectionService,
    author: User,
    content_type: ContentType,
    payload: dict[str, Any],
    metadata: dict[str, Any] | None = None,
) -> ScreeningOutcome:
    """
    Score a submission before it is persisted.

    Admin authors are approved without detection. Detection failures approve
    the submission. A submission scoring at or above the auto-reject threshold
    is recorded as an automated report carrying a snapshot of the payload and
    refused.

    Raises:
        SpamContentRejectedError: If the submission is auto-rejected.
    """
    if author.role == UserRole.ADMIN:
        return ScreeningOutcome(action=SpamAction.AUTO_APPROVE)

    try:
        result = await service.analyze(
            session, payload, content_type, author.id_user  # type: ignore[arg-type]
        )
    except Exception as e:
        logger.error(f"Pre-submission screening failed for user {author.id_user}: {e}")
        result = DetectionResult.clean()

    history = await to_thread.run_sync(
        get_user_history, session, author.id_user  # type: ignore[arg-type]
    )
    action = get_recommended_action(result.overall_score, history)

    if action == SpamAction.AUTO_REJECT:
        await to_thread.run_sync(
            lambda: service.record_detection(
                session,
                content_type,
                None,
                author.id_user,  # type: ignore[arg-type]
                result,
                force=True,
                snapshot=payload,
                metadata=metadata,
            )
        )
        logger.info(
            f"Rejected {ContentType(content_type).value} from user {author.id_user} "
            f"(confidence {result.confidence}%)"
        )
        raise SpamContentRejectedError(result.confidence)

    return ScreeningOutcome(action=action, result=result)


def apply_screening(
    session: Session,
    service: SpamDetectionService,
    outcome: ScreeningOutcome,
    author: User,
    content_type: ContentType,
    content_id: int,
    metadata: dict[str, Any] | None = None,
) -> SpamReport | None:
    """
    Record the screening verdict for persisted content and restrict the author when required.

    Approved content is only reported when its verdict meets the detection
    logging rule. Every other action files a report. Shadowban and suspend
    restrict the author; suspend also raises the report to critical severity
    so it surfaces as urgent.

    Returns:
        SpamReport | None: The report filed, if any.
    """
    if outcome.result is None:
        return None

    forced = outcome.action != SpamAction.AUTO_APPROVE
    report = service.record_detection(
        session,
        content_type,
        content_id,
        author.id_user,  # type: ignore[arg-type]
        outcome.result,
        force=forced,
        metadata=metadata,
    )

    if outcome.action in RESTRICT_ACTIONS:
        author.shadow_banned = True
        session.add(author)
        if outcome.action == SpamAction.ACCOUNT_SUSPEND and report is not None:
            report.severity = Severity.CRITICAL
            session.add(report)
        session.commit()
        if report is not None:
            session.refresh(report)
        logger.info(
            f"User {author.id_user} restricted after {outcome.action.value} "
            f"on {ContentType(content_type).value}:{content_id}"
        )
    return report


def check_user_spam_status(
    session: Session, user: User, now: datetime | None = None
) -> User:
    """
    Refuse restricted authors and lift expired suspensions.

    Raises:
        AccountRestrictedError: If the user is banned or currently suspended.
        RateLimitExceededError: If the user collected too many confirmed reports in the last 24 hours.
    """
    now = now or datetime.now()

    if user.status == UserStatus.BANNED:
        raise AccountRestrictedError("Account has been banned due to spam activity")

    if user.status == UserStatus.SUSPENDED:
        # No end date means the suspension is lifted by a moderator only.
        if user.suspended_until is None:
            raise AccountRestrictedError("Account suspended")
        if user.suspended_until > now:
            raise AccountRestrictedError(
                f"Account suspended until {user.suspended_until.isoformat()}"
            )
        user.status = UserStatus.ACTIVE
        user.suspended_until = None
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info(f"Lifted expired suspension for user {user.id_user}")

    recent_confirmed = count_confirmed_reports(
        session, user.id_user, since=now - RECENT_CONFIRMED_WINDOW  # type: ignore[arg-type]
    )
    if recent_confirmed >= get_settings().REPEAT_OFFENDER_REPORTS:
        raise RateLimitExceededError(
            "Too many spam reports. Please try again later.",
            retry_after=int(RECENT_CONFIRMED_WINDOW.total_seconds()),
        )
    return user


def adaptive_rate_limit(
    session: Session, user_id: int, now: datetime | None = None
) -> int:
    """
    Hourly submission limit for a user, tightened by their recent report scores.

    Averages `overall_score` over the user's last five reports from the past
    seven days that carry a detection result.
    """
    now = now or datetime.now()
    base = get_settings().RATE_LIMIT_BASE_PER_HOUR
    reports = session.exec(
        select(SpamReport)
        .where(
            SpamReport.id_user_reported == user_id,
            SpamReport.reported_at >= now - RECENT_REPORTS_LOOKBACK,
        )
        .order_by(col(SpamReport.reported_at).desc())
        .limit(RECENT_REPORTS_SAMPLE)
    ).all()

    scores = [
        report.detection_result.get("overall_score", 0.0)
        for report in reports
        if report.detection_result
    ]
    if not scores:
        return base
    average = sum(scores) / len(scores)
    for threshold, limit in RATE_LIMIT_STEPS:
        if average > threshold:
            return limit
    return base


def enforce_rate_limit(
    tracker: RateTracker,
    session: Session,
    user: User,
    content_type: ContentType,
) -> None:
    """
    Count this submission against the user's hourly limit.

    Refused attempts are not recorded, so a client retrying during a lockout
    gets through once its older submissions leave the window. Tracker
    failures are logged and let the request through.

    Raises:
        RateLimitExceededError: If the user already used their adaptive limit.
    """
    if user.role == UserRole.ADMIN:
        return
    limit = adaptive_rate_limit(session, user.id_user)  # type: ignore[arg-type]
    key = f"{user.id_user}:{ContentType(content_type).value}"
    try:
        hits, retry_after = tracker.usage(key, RATE_LIMIT_WINDOW_SECONDS)
        if hits < limit:
            tracker.record(key, RATE_LIMIT_WINDOW_SECONDS)
            return
    except Exception as e:
        logger.error(f"Rate tracker unavailable: {e}")
        return
    logger.info(f"User {user.id_user} hit the hourly limit of {limit} for {key}")
    raise RateLimitExceededError(retry_after=retry_after)


def lift_expired_suspensions(session: Session, now: datetime | None = None) -> int:
    """Reactivate every suspended account whose suspension has run out. The caller commits."""
    now = now or datetime.now()
    statement = select(User).where(
        User.status == UserStatus.SUSPENDED,
        col(User.suspended_until).is_not(None),
        col(User.suspended_until) <= now,
    )
    users = list(session.exec(statement).all())
    for user in users:
        user.status = UserStatus.ACTIVE
        user.suspended_until = None
        session.add(user)
    if users:
        logger.info(f"Lifted {len(users)} expired suspension(s)")
    return len(users)
