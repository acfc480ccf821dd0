from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"


class PropertyStatus(str, Enum):
    ACTIVE = "active"
    PENDING_REVIEW = "pending_review"
    REMOVED = "removed"


class BookingStatus(str, Enum):
    PENDING = "pending"
    PENDING_REVIEW = "pending_review"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class ContentType(str, Enum):
    PROPERTY = "property"
    BOOKING = "booking"
    MESSAGE = "message"
    USER = "user"
    REVIEW = "review"


class ReportType(str, Enum):
    AUTOMATED = "automated"
    USER_REPORTED = "user_reported"
    ADMIN_FLAGGED = "admin_flagged"


class ReportCategory(str, Enum):
    SPAM = "spam"
    INAPPROPRIATE = "inappropriate"
    FAKE_LISTING = "fake_listing"
    DUPLICATE = "duplicate"
    MISLEADING = "misleading"
    OTHER = "other"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReportStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    CONFIRMED = "confirmed"
    FALSE_POSITIVE = "false_positive"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class AppealStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class ActionTaken(str, Enum):
    NONE = "none"
    WARNING = "warning"
    CONTENT_REMOVED = "content_removed"
    USER_SUSPENDED = "user_suspended"
    USER_BANNED = "user_banned"
    SHADOWBAN = "shadowban"


class RiskLevel(str, Enum):
    MINIMAL = "MINIMAL"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class SpamAction(str, Enum):
    """Automatic moderation decision produced by the action policy."""

    AUTO_REJECT = "auto_reject"
    MANUAL_REVIEW = "manual_review"
    AUTO_APPROVE = "auto_approve"
    SHADOWBAN = "shadowban"
    ACCOUNT_SUSPEND = "account_suspend"
