from datetime import datetime, timedelta
from typing import Any, Literal
from pydantic import BaseModel
from sqlalchemy import Column, JSON, event
from sqlmodel import SQLModel, Field

from app.models.detection import DetectionResult
from app.models.enums import (
    ActionTaken,
    AppealStatus,
    ContentType,
    ReportCategory,
    ReportStatus,
    ReportType,
    Severity,
)

SEVERITY_BASE_PRIORITY: dict[Severity, int] = {
    Severity.CRITICAL: 9,
    Severity.HIGH: 7,
    Severity.MEDIUM: 5,
    Severity.LOW: 3,
}
MIN_PRIORITY = 1
MAX_PRIORITY = 10
URGENT_PRIORITY = 8
STALE_AFTER = timedelta(days=7)


def derive_priority(
    severity: Severity, report_type: ReportType, confidence: int | None
) -> int:
    """
    Compute a report priority from its severity and detection confidence.

    Confidence is the 0-100 detection confidence; it only adjusts automated
    reports and is ignored when absent or zero.

    Returns:
        int: Priority clamped to [1, 10].
    """
    priority = SEVERITY_BASE_PRIORITY.get(Severity(severity), 5)
    if report_type == ReportType.AUTOMATED and confidence:
        ratio = confidence / 100
        if ratio > 0.9:
            priority += 2
        elif ratio > 0.7:
            priority += 1
        elif ratio < 0.5:
            priority -= 1
    return max(MIN_PRIORITY, min(MAX_PRIORITY, priority))


class UserReportDetails(BaseModel):
    reason: str
    description: str | None = None
    evidence: list[str] = []


class SpamReport(SQLModel, table=True):
    __tablename__ = "spam_report"

    id_report: int | None = Field(default=None, primary_key=True)

    # -- Reported content --
    content_type: ContentType = Field(index=True)
    content_id: int | None = Field(default=None, index=True)
    id_reporter: int | None = Field(
        default=None, foreign_key="user.id_user", index=True
    )
    id_user_reported: int = Field(foreign_key="user.id_user", index=True)

    # -- Classification --
    report_type: ReportType = Field(default=ReportType.AUTOMATED, index=True)
    category: ReportCategory = Field(default=ReportCategory.SPAM)
    severity: Severity = Field(default=Severity.MEDIUM, index=True)
    priority: int = Field(default=5, ge=MIN_PRIORITY, le=MAX_PRIORITY, index=True)
    status: ReportStatus = Field(default=ReportStatus.PENDING, index=True)

    detection_result: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSON, nullable=True)
    )
    user_report_details: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSON, nullable=True)
    )

    # -- Review and enforcement --
    action_taken: ActionTaken = Field(default=ActionTaken.NONE)
    action_details: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSON, nullable=True)
    )
    reviewed_by: int | None = Field(default=None, foreign_key="user.id_user")
    reviewed_at: datetime | None = None
    review_notes: str | None = Field(default=None, max_length=1000)

    # -- Appeal --
    appeal_submitted: bool = Field(default=False)
    appeal_submitted_at: datetime | None = None
    appeal_reason: str | None = Field(default=None, max_length=1000)
    appeal_status: AppealStatus | None = None
    appeal_reviewed_by: int | None = Field(default=None, foreign_key="user.id_user")
    appeal_reviewed_at: datetime | None = None
    appeal_review_notes: str | None = Field(default=None, max_length=1000)

    # -- Timestamps and audit trail --
    reported_at: datetime = Field(default_factory=datetime.now, index=True)
    resolved_at: datetime | None = None
    related_reports: list[int] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    report_metadata: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSON, nullable=True)
    )

    @property
    def detection_confidence(self) -> int | None:
        if not self.detection_result:
            return None
        return self.detection_result.get("confidence")

    @property
    def is_urgent(self) -> bool:
        high_priority = (
            self.priority >= URGENT_PRIORITY or self.severity == Severity.CRITICAL
        )
        return high_priority and self.status == ReportStatus.PENDING

    def is_stale(self, now: datetime | None = None) -> bool:
        now = now or datetime.now()
        return (
            self.status == ReportStatus.PENDING
            and now - self.reported_at > STALE_AFTER
        )

    def refresh_priority(self) -> None:
        self.priority = derive_priority(
            self.severity, self.report_type, self.detection_confidence
        )


@event.listens_for(SpamReport, "before_insert")
@event.listens_for(SpamReport, "before_update")
def _recompute_priority(mapper, connection, target: SpamReport) -> None:
    # Priority is never written directly; every flush re-derives it.
    target.refresh_priority()


class AppealPublic(BaseModel):
    submitted: bool
    submitted_at: datetime | None = None
    reason: str | None = None
    status: AppealStatus | None = None
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None


class SpamReportPublic(BaseModel):
    id_report: int
    content_type: ContentType
    content_id: int | None
    id_reporter: int | None
    id_user_reported: int
    report_type: ReportType
    category: ReportCategory
    severity: Severity
    priority: int
    status: ReportStatus
    detection_result: DetectionResult | None = None
    user_report_details: UserReportDetails | None = None
    action_taken: ActionTaken
    action_details: dict[str, Any] | None = None
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None
    appeal: AppealPublic
    reported_at: datetime
    resolved_at: datetime | None = None
    related_reports: list[int] = []
    is_urgent: bool
    is_stale: bool
    time_elapsed: float
    resolution_time: float | None = None


class ReportSubmit(BaseModel):
    content_type: ContentType
    content_id: int
    category: ReportCategory
    reason: str = Field(min_length=10, max_length=500)
    description: str | None = Field(default=None, max_length=1000)
    evidence: list[str] = Field(default_factory=list)


ReviewStatus = Literal["confirmed", "false_positive", "dismissed"]


class ReportReview(BaseModel):
    status: ReviewStatus
    notes: str | None = Field(default=None, max_length=1000)
    action: ActionTaken = ActionTaken.NONE


class BulkReportReview(ReportReview):
    report_ids: list[int] = Field(min_length=1, max_length=50)


class ReportResolve(BaseModel):
    notes: str | None = Field(default=None, max_length=1000)


class BulkReviewResult(BaseModel):
    successful: int
    failed: int


class AppealSubmit(BaseModel):
    reason: str = Field(min_length=20, max_length=1000)


class AppealReview(BaseModel):
    status: Literal["approved", "rejected"]
    notes: str | None = Field(default=None, max_length=1000)


class CheckContentRequest(BaseModel):
    content_type: Literal["property", "booking"]
    content_id: int
