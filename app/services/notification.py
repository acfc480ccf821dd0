"""Notification service for creating and reading moderation notices."""

from sqlmodel import Session, col, func, select

from app.models.enums import AppealStatus
from app.models.notification import (
    Notification,
    NotificationCreate,
    NotificationType,
)


def create_notification(
    session: Session, notification_in: NotificationCreate
) -> Notification:
    """
    Create a notification in the database.

    Args:
        session: Database session
        notification_in: Notification creation data

    Returns:
        Notification: Created notification
    """
    notification = Notification.model_validate(notification_in)
    session.add(notification)
    session.flush()
    session.refresh(notification)
    return notification


def get_user_notifications(
    session: Session,
    user_id: int,
    *,
    unread_only: bool = False,
    offset: int = 0,
    limit: int = 50,
) -> list[Notification]:
    """
    Get notifications for a user.

    Args:
        session: Database session
        user_id: User ID
        unread_only: If True, only return unread notifications
        offset: Pagination offset
        limit: Maximum notifications to return

    Returns:
        list[Notification]: List of notifications ordered by date (newest first)
    """
    statement = select(Notification).where(Notification.id_user == user_id)

    if unread_only:
        statement = statement.where(Notification.is_read == False)  # noqa: E712

    statement = (
        statement.order_by(Notification.created_at.desc())  # type: ignore
        .offset(offset)
        .limit(limit)
    )

    return list(session.exec(statement).all())


def mark_notifications_as_read(
    session: Session, notification_ids: list[int], user_id: int
) -> int:
    """
    Mark notifications as read.

    Only notifications owned by `user_id` are touched; unknown or foreign IDs
    are ignored.

    Returns:
        int: Number of notifications that changed state
    """
    statement = select(Notification).where(
        col(Notification.id_notification).in_(notification_ids),
        Notification.id_user == user_id,
    )

    count = 0
    for notification in session.exec(statement).all():
        if not notification.is_read:
            notification.is_read = True
            session.add(notification)
            count += 1

    session.commit()
    return count


def get_unread_count(session: Session, user_id: int) -> int:
    return session.exec(
        select(func.count())
        .select_from(Notification)
        .where(
            Notification.id_user == user_id,
            Notification.is_read == False,  # noqa: E712
        )
    ).one()


# Helper functions to create specific notification types


def notify_user(
    session: Session,
    user_id: int,
    notification_type: NotificationType,
    message: str,
    report_id: int | None = None,
) -> Notification:
    notification_in = NotificationCreate(
        id_user=user_id,
        notification_type=notification_type,
        message=message,
        related_report_id=report_id,
    )
    return create_notification(session, notification_in)


def create_spam_warning_notification(
    session: Session, user_id: int, report_id: int | None
) -> Notification:
    """Warn a user that their content was flagged as spam."""
    return notify_user(
        session,
        user_id,
        NotificationType.SPAM_WARNING,
        "Your content was flagged for violating our spam policy. "
        "Further violations may lead to account restrictions.",
        report_id,
    )


def create_suspension_notification(
    session: Session, user_id: int, report_id: int | None, days: int
) -> Notification:
    """Notify a user that their account was suspended."""
    return notify_user(
        session,
        user_id,
        NotificationType.ACCOUNT_SUSPENDED,
        f"Your account has been suspended for {days} days due to spam activity.",
        report_id,
    )


def create_ban_notification(
    session: Session, user_id: int, report_id: int | None
) -> Notification:
    """Notify a user that their account was banned."""
    return notify_user(
        session,
        user_id,
        NotificationType.ACCOUNT_BANNED,
        "Your account has been banned due to repeated spam activity.",
        report_id,
    )


def create_content_removed_notification(
    session: Session, user_id: int, report_id: int | None, content_type: str
) -> Notification:
    """Notify a user that one of their items was removed."""
    return notify_user(
        session,
        user_id,
        NotificationType.CONTENT_REMOVED,
        f"Your {content_type} was removed after a moderation review.",
        report_id,
    )


def create_appeal_decided_notification(
    session: Session, user_id: int, report_id: int | None, decision: AppealStatus
) -> Notification:
    """Notify a user of the outcome of their appeal."""
    outcome = "approved" if decision == AppealStatus.APPROVED else "denied"
    return notify_user(
        session,
        user_id,
        NotificationType.APPEAL_DECIDED,
        f"Your appeal for report #{report_id} has been {outcome}.",
        report_id,
    )


class ModerationNotifier:
    """Delivers enforcement notices as in-app notifications."""

    def warn(self, session: Session, user_id: int, report_id: int | None) -> None:
        create_spam_warning_notification(session, user_id, report_id)

    def suspended(
        self, session: Session, user_id: int, report_id: int | None, days: int
    ) -> None:
        create_suspension_notification(session, user_id, report_id, days)

    def banned(self, session: Session, user_id: int, report_id: int | None) -> None:
        create_ban_notification(session, user_id, report_id)

    def content_removed(
        self,
        session: Session,
        user_id: int,
        report_id: int | None,
        content_type: str,
    ) -> None:
        create_content_removed_notification(session, user_id, report_id, content_type)
