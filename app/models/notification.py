"""Notification models for moderation notices sent to users."""

from datetime import datetime
from enum import Enum
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, ForeignKey, Integer


class NotificationType(str, Enum):
    """Types of moderation notices a user can receive."""

    SPAM_WARNING = "spam_warning"
    ACCOUNT_SUSPENDED = "account_suspended"
    ACCOUNT_BANNED = "account_banned"
    CONTENT_REMOVED = "content_removed"
    APPEAL_DECIDED = "appeal_decided"


class NotificationBase(SQLModel):
    """Base notification fields."""

    notification_type: NotificationType
    message: str = Field(max_length=500)
    related_report_id: int | None = Field(default=None)
    is_read: bool = Field(default=False)


class Notification(NotificationBase, table=True):
    """Database notification model."""

    id_notification: int | None = Field(default=None, primary_key=True)
    id_user: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey(
                "user.id_user",
                ondelete="CASCADE",
                name="notification_id_user_fkey",
            ),
            nullable=False,
            index=True,
        )
    )
    created_at: datetime = Field(default_factory=datetime.now, index=True)


class NotificationPublic(NotificationBase):
    """Public notification response."""

    id_notification: int
    created_at: datetime


class NotificationCreate(SQLModel):
    """Schema for creating notifications (internal use)."""

    id_user: int
    notification_type: NotificationType
    message: str = Field(max_length=500)
    related_report_id: int | None = None


class NotificationMarkRead(SQLModel):
    """Schema for marking notifications as read."""

    notification_ids: list[int] = Field(min_length=1)
