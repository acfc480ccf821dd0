"""Enforcement executor: applies a moderation action to a reported user and their content."""

from datetime import datetime, timedelta

from loguru import logger
from sqlmodel import Session

from app.core.config import get_settings
from app.core.telemetry import record_enforcement_metric
from app.models.enums import ActionTaken, ContentType, UserStatus
from app.models.report import SpamReport
from app.models.user import User
from app.services.content import remove_content
from app.services.notification import ModerationNotifier


def apply_action(
    session: Session,
    report: SpamReport,
    action: ActionTaken,
    notifier: ModerationNotifier | None = None,
    now: datetime | None = None,
) -> SpamReport:
    """
    Apply a moderation action for a report.

    The reported user is loaded and mutated according to `action`; if the user
    no longer exists only the report is updated. `action_taken` is always
    recorded on the report. Changes are added to the session but not
    committed.

    Parameters:
        session (Session): Database session; the caller commits.
        report (SpamReport): The report that motivated the action.
        action (ActionTaken): Action to apply.
        notifier (ModerationNotifier | None): Delivers notices to the affected user.
        now (datetime | None): Reference time for suspensions.

    Returns:
        SpamReport: The updated report.
    """
    action = ActionTaken(action)
    notifier = notifier or ModerationNotifier()
    now = now or datetime.now()
    settings = get_settings()

    user = session.get(User, report.id_user_reported)
    if user is None:
        logger.warning(
            f"Reported user {report.id_user_reported} not found; recording {action.value} on report {report.id_report} only"
        )
    elif action == ActionTaken.WARNING:
        notifier.warn(session, user.id_user, report.id_report)  # type: ignore[arg-type]
    elif action == ActionTaken.CONTENT_REMOVED:
        if remove_content(session, report.content_type, report.content_id):
            notifier.content_removed(
                session,
                user.id_user,  # type: ignore[arg-type]
                report.id_report,
                ContentType(report.content_type).value,
            )
    elif action == ActionTaken.USER_SUSPENDED:
        days = settings.SUSPENSION_DAYS
        user.status = UserStatus.SUSPENDED
        user.suspended_until = now + timedelta(days=days)
        report.action_details = {
            "duration": days,
            "reason": report.review_notes or "Spam activity",
            "automatic_expiry": user.suspended_until.isoformat(),
        }
        session.add(user)
        notifier.suspended(session, user.id_user, report.id_report, days)  # type: ignore[arg-type]
    elif action == ActionTaken.USER_BANNED:
        user.status = UserStatus.BANNED
        user.suspended_until = None
        session.add(user)
        notifier.banned(session, user.id_user, report.id_report)  # type: ignore[arg-type]
    elif action == ActionTaken.SHADOWBAN:
        user.shadow_banned = True
        session.add(user)

    report.action_taken = action
    session.add(report)
    record_enforcement_metric(action.value)
    logger.info(
        f"Applied {action.value} for report {report.id_report} (user {report.id_user_reported})"
    )
    return report
