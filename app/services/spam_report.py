"""Spam report service: submission, review, appeal and moderation queries."""

import math
from datetime import datetime, timedelta
from typing import Any, Literal

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, func, or_, select

from app.core import spam_rules
from app.exceptions import (
    AuthorizationError,
    DuplicateReportError,
    NotFoundError,
    ValidationError,
)
from app.models.detection import DetectionResult
from app.models.enums import (
    ActionTaken,
    AppealStatus,
    ContentType,
    ReportStatus,
    ReportType,
    Severity,
    UserRole,
)
from app.models.report import (
    AppealPublic,
    BulkReviewResult,
    ReportSubmit,
    SpamReport,
    SpamReportPublic,
    STALE_AFTER,
    URGENT_PRIORITY,
    UserReportDetails,
)
from app.models.user import User, UserSummary
from app.services import report_lifecycle
from app.services.content import get_content, get_content_owner_id
from app.services.enforcement import apply_action
from app.services.notification import (
    ModerationNotifier,
    create_appeal_decided_notification,
)
from app.utils.validation import ensure_id

URGENT_LIMIT = 20
TOP_REPORTED_USERS = 10
STATISTICS_PERIODS: dict[str, timedelta] = {
    "1d": timedelta(days=1),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
}
SORTABLE_FIELDS: dict[str, Any] = {
    "reported_at": SpamReport.reported_at,
    "priority": SpamReport.priority,
    "severity": SpamReport.severity,
    "status": SpamReport.status,
}
APPEAL_DECISIONS: dict[str, AppealStatus] = {
    "approved": AppealStatus.APPROVED,
    "rejected": AppealStatus.DENIED,
}


def to_report_public(
    report: SpamReport, now: datetime | None = None
) -> SpamReportPublic:
    """
    Convert a SpamReport row into its public representation.

    Derived fields (`is_urgent`, `is_stale`, `time_elapsed`, `resolution_time`)
    are computed at read time.

    Parameters:
        report (SpamReport): Persisted report.
        now (datetime | None): Reference time for the derived fields.

    Returns:
        SpamReportPublic: The report with its flattened appeal folded into an `appeal` object.
    """
    now = now or datetime.now()
    resolution_time = None
    if report.resolved_at is not None:
        resolution_time = (report.resolved_at - report.reported_at).total_seconds()

    return SpamReportPublic(
        id_report=ensure_id(report.id_report, "Report"),
        content_type=report.content_type,
        content_id=report.content_id,
        id_reporter=report.id_reporter,
        id_user_reported=report.id_user_reported,
        report_type=report.report_type,
        category=report.category,
        severity=report.severity,
        priority=report.priority,
        status=report.status,
        detection_result=(
            DetectionResult.model_validate(report.detection_result)
            if report.detection_result
            else None
        ),
        user_report_details=(
            UserReportDetails.model_validate(report.user_report_details)
            if report.user_report_details
            else None
        ),
        action_taken=report.action_taken,
        action_details=report.action_details,
        reviewed_by=report.reviewed_by,
        reviewed_at=report.reviewed_at,
        review_notes=report.review_notes,
        appeal=AppealPublic(
            submitted=report.appeal_submitted,
            submitted_at=report.appeal_submitted_at,
            reason=report.appeal_reason,
            status=report.appeal_status,
            reviewed_by=report.appeal_reviewed_by,
            reviewed_at=report.appeal_reviewed_at,
            review_notes=report.appeal_review_notes,
        ),
        reported_at=report.reported_at,
        resolved_at=report.resolved_at,
        related_reports=list(report.related_reports or []),
        is_urgent=report.is_urgent,
        is_stale=report.is_stale(now),
        time_elapsed=(now - report.reported_at).total_seconds(),
        resolution_time=resolution_time,
    )


def get_report(session: Session, report_id: int) -> SpamReport:
    """
    Retrieve a report by ID.

    Raises:
        NotFoundError: If no report has this ID.
    """
    report = session.get(SpamReport, report_id)
    if report is None:
        raise NotFoundError("Report", report_id)
    return report


def has_open_report(
    session: Session,
    content_type: ContentType,
    content_id: int,
    reporter_id: int,
) -> bool:
    statement = select(SpamReport.id_report).where(
        SpamReport.content_type == content_type,
        SpamReport.content_id == content_id,
        SpamReport.id_reporter == reporter_id,
        col(SpamReport.status).in_(list(report_lifecycle.OPEN_STATUSES)),
    )
    return session.exec(statement).first() is not None


def submit_report(
    session: Session,
    reporter: User,
    report_in: ReportSubmit,
    metadata: dict[str, Any] | None = None,
) -> SpamReport:
    """
    File a report from a user about a piece of content.

    Parameters:
        session: Database session.
        reporter: The authenticated user filing the report.
        report_in: Content reference, category and the reporter's explanation.
        metadata: Request metadata (ip address, user agent).

    Returns:
        SpamReport: The created report with status=PENDING.

    Raises:
        ValidationError: If the content type cannot be reported.
        NotFoundError: If the referenced content doesn't exist.
        DuplicateReportError: If the reporter already has an open report on this content.
    """
    content_type = ContentType(report_in.content_type)
    if content_type not in spam_rules.REPORTABLE_CONTENT_TYPES:
        raise ValidationError("Invalid content type", field="content_type")

    content = get_content(session, content_type, report_in.content_id)
    if content is None:
        raise NotFoundError(content_type.value.capitalize(), report_in.content_id)
    reported_user_id = get_content_owner_id(content_type, content)
    if reported_user_id is None:
        raise NotFoundError("User", f"owner of {content_type.value}")

    reporter_id = ensure_id(reporter.id_user, "Reporter")
    if has_open_report(session, content_type, report_in.content_id, reporter_id):
        raise DuplicateReportError()

    details = UserReportDetails(
        reason=report_in.reason,
        description=report_in.description,
        evidence=report_in.evidence,
    )
    report = SpamReport(
        content_type=content_type,
        content_id=report_in.content_id,
        id_reporter=reporter_id,
        id_user_reported=reported_user_id,
        report_type=(
            ReportType.ADMIN_FLAGGED
            if reporter.role == UserRole.ADMIN
            else ReportType.USER_REPORTED
        ),
        category=report_in.category,
        severity=spam_rules.CATEGORY_SEVERITY[report_in.category],
        user_report_details=details.model_dump(mode="json"),
        report_metadata=metadata or {},
        reported_at=datetime.now(),
    )
    session.add(report)
    try:
        session.commit()
        session.refresh(report)
    except IntegrityError:
        session.rollback()
        raise DuplicateReportError()

    logger.info(
        f"Report {report.id_report} filed by user {reporter_id} on {content_type.value}:{report_in.content_id}"
    )
    return report


def add_related_report(session: Session, report: SpamReport, other_id: int) -> SpamReport:
    """Link `other_id` to `report`; linking the same id twice is a no-op. The caller commits."""
    if other_id == report.id_report or other_id in (report.related_reports or []):
        return report
    report.related_reports = [*(report.related_reports or []), other_id]
    session.add(report)
    return report


def start_review(session: Session, report_id: int, reviewer: User) -> SpamReport:
    """
    Claim a pending report for review.

    Raises:
        NotFoundError: If the report doesn't exist.
        InvalidStateTransitionError: If the report is not pending.
    """
    report = get_report(session, report_id)
    report_lifecycle.start_review(report, ensure_id(reviewer.id_user, "Reviewer"))
    session.add(report)
    session.commit()
    session.refresh(report)
    return report


def review_report(
    session: Session,
    report_id: int,
    reviewer: User,
    status: ReportStatus | str,
    notes: str | None = None,
    action: ActionTaken = ActionTaken.NONE,
    notifier: ModerationNotifier | None = None,
) -> SpamReport:
    """
    Record a review verdict and apply the chosen action.

    The review is committed first. Enforcement then runs in its own
    transaction; if it fails the review stands and the failure is logged.

    Parameters:
        session: Database session.
        report_id: Report to review.
        reviewer: Admin performing the review.
        status: One of confirmed, false_positive, dismissed.
        notes: Optional reviewer notes.
        action: Enforcement action to apply after the review.
        notifier: Notice delivery for enforcement.

    Returns:
        SpamReport: The reviewed report.

    Raises:
        NotFoundError: If the report doesn't exist.
        InvalidStateTransitionError: If the report cannot move to `status`.
    """
    report = get_report(session, report_id)
    report_lifecycle.review(
        report,
        ensure_id(reviewer.id_user, "Reviewer"),
        ReportStatus(status),
        notes,
    )
    session.add(report)
    session.commit()
    session.refresh(report)

    action = ActionTaken(action)
    if action != ActionTaken.NONE:
        try:
            apply_action(session, report, action, notifier)
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Enforcement of {action.value} failed for report {report_id}: {e}")
        session.refresh(report)

    return report


def bulk_review_reports(
    session: Session,
    report_ids: list[int],
    reviewer: User,
    status: ReportStatus | str,
    notes: str | None = None,
    action: ActionTaken = ActionTaken.NONE,
    notifier: ModerationNotifier | None = None,
) -> BulkReviewResult:
    """
    Review several reports with the same verdict.

    Each report is committed independently; a failure on one (including a
    missing id) is rolled back and counted without affecting the others.

    Returns:
        BulkReviewResult: Number of successful and failed reviews.
    """
    successful = 0
    failed = 0
    for report_id in report_ids:
        try:
            review_report(
                session, report_id, reviewer, status, notes, action, notifier
            )
            successful += 1
        except Exception as e:
            session.rollback()
            failed += 1
            logger.warning(f"Bulk review skipped report {report_id}: {e}")
    return BulkReviewResult(successful=successful, failed=failed)


def resolve_report(
    session: Session, report_id: int, reviewer: User, notes: str | None = None
) -> SpamReport:
    """Close a confirmed report."""
    report = get_report(session, report_id)
    report_lifecycle.resolve(report, ensure_id(reviewer.id_user, "Reviewer"), notes)
    session.add(report)
    session.commit()
    session.refresh(report)
    return report


def submit_appeal(
    session: Session, report_id: int, user: User, reason: str
) -> SpamReport:
    """
    File the reported user's appeal against a report.

    Raises:
        NotFoundError: If the report doesn't exist.
        AuthorizationError: If `user` is not the reported user.
        ValidationError: If the report is not confirmed or resolved.
        AppealAlreadySubmittedError: If the report was already appealed.
    """
    report = get_report(session, report_id)
    if report.id_user_reported != user.id_user:
        raise AuthorizationError("You can only appeal reports against your account")

    report_lifecycle.submit_appeal(report, reason)
    session.add(report)
    session.commit()
    session.refresh(report)
    logger.info(f"Appeal submitted for report {report_id} by user {user.id_user}")
    return report


def review_appeal(
    session: Session,
    report_id: int,
    reviewer: User,
    decision: Literal["approved", "rejected"],
    notes: str | None = None,
) -> SpamReport:
    """
    Decide a pending appeal and notify the reported user.

    "rejected" is stored as `denied`. Approval reverses the report to
    `false_positive`.

    Raises:
        NotFoundError: If the report doesn't exist or has no appeal.
        InvalidStateTransitionError: If the appeal was already decided.
    """
    report = get_report(session, report_id)
    if not report.appeal_submitted:
        raise NotFoundError("Appeal", report_id)

    appeal_status = APPEAL_DECISIONS[decision]
    report_lifecycle.decide_appeal(
        report, ensure_id(reviewer.id_user, "Reviewer"), appeal_status, notes
    )
    session.add(report)
    if session.get(User, report.id_user_reported) is not None:
        create_appeal_decided_notification(
            session, report.id_user_reported, report.id_report, appeal_status
        )
    session.commit()
    session.refresh(report)
    return report


def list_reports(
    session: Session,
    *,
    status: ReportStatus | None = None,
    severity: Severity | None = None,
    content_type: ContentType | None = None,
    report_type: ReportType | None = None,
    page: int = 1,
    limit: int = 20,
    sort_by: str = "reported_at",
    sort_order: Literal["asc", "desc"] = "desc",
) -> tuple[list[SpamReport], int]:
    """
    Retrieve a filtered, sorted page of reports.

    Returns:
        tuple[list[SpamReport], int]: The page of reports and the total number of matches.

    Raises:
        ValidationError: If `sort_by` is not a sortable field.
    """
    if sort_by not in SORTABLE_FIELDS:
        raise ValidationError(f"Cannot sort by '{sort_by}'", field="sort_by")

    filters = []
    if status is not None:
        filters.append(SpamReport.status == status)
    if severity is not None:
        filters.append(SpamReport.severity == severity)
    if content_type is not None:
        filters.append(SpamReport.content_type == content_type)
    if report_type is not None:
        filters.append(SpamReport.report_type == report_type)

    total = session.exec(
        select(func.count()).select_from(SpamReport).where(*filters)
    ).one()

    column = col(SORTABLE_FIELDS[sort_by])
    ordering = column.asc() if sort_order == "asc" else column.desc()
    statement = (
        select(SpamReport)
        .where(*filters)
        .order_by(ordering, col(SpamReport.id_report).desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(session.exec(statement).all()), total


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def get_urgent_reports(session: Session) -> list[SpamReport]:
    """Pending reports with priority >= 8 or critical severity, highest priority and newest first."""
    statement = (
        select(SpamReport)
        .where(
            SpamReport.status == ReportStatus.PENDING,
            or_(
                col(SpamReport.priority) >= URGENT_PRIORITY,
                SpamReport.severity == Severity.CRITICAL,
            ),
        )
        .order_by(col(SpamReport.priority).desc(), col(SpamReport.reported_at).desc())
        .limit(URGENT_LIMIT)
    )
    return list(session.exec(statement).all())


def get_open_reports_for_user(session: Session, user_id: int) -> list[SpamReport]:
    """Pending or under-review reports against a user, newest first."""
    statement = (
        select(SpamReport)
        .where(
            SpamReport.id_user_reported == user_id,
            col(SpamReport.status).in_(list(report_lifecycle.OPEN_STATUSES)),
        )
        .order_by(col(SpamReport.reported_at).desc())
    )
    return list(session.exec(statement).all())


def get_statistics(
    session: Session, period: str = "7d", now: datetime | None = None
) -> dict[str, Any]:
    """
    Aggregate report activity over a period.

    Parameters:
        session: Database session.
        period: One of 1d, 7d, 30d, 90d.
        now: Reference time.

    Returns:
        dict: Totals by status and type, average detection confidence and the
        ten most reported users.

    Raises:
        ValidationError: If `period` is not supported.
    """
    if period not in STATISTICS_PERIODS:
        raise ValidationError(f"Unsupported period '{period}'", field="period")
    now = now or datetime.now()
    since = now - STATISTICS_PERIODS[period]

    in_period = SpamReport.reported_at >= since

    by_status = {
        ReportStatus(status).value: count
        for status, count in session.exec(
            select(SpamReport.status, func.count())
            .where(in_period)
            .group_by(SpamReport.status)
        ).all()
    }
    by_type = {
        ReportType(report_type).value: count
        for report_type, count in session.exec(
            select(SpamReport.report_type, func.count())
            .where(in_period)
            .group_by(SpamReport.report_type)
        ).all()
    }

    # Reports without a detection result extract to NULL and are left out of the mean
    confidence = col(SpamReport.detection_result)["confidence"].as_float()
    average = session.exec(select(func.avg(confidence)).where(in_period)).one()
    average_confidence = round(float(average), 2) if average is not None else None

    report_count = func.count(col(SpamReport.id_report)).label("report_count")
    top_rows = session.exec(
        select(User, report_count)
        .join(SpamReport, col(SpamReport.id_user_reported) == User.id_user)
        .where(in_period)
        .group_by(col(User.id_user))
        .order_by(report_count.desc(), col(User.id_user))
        .limit(TOP_REPORTED_USERS)
    ).all()
    top_users = [
        {
            "user": UserSummary.model_validate(user).model_dump(),
            "report_count": count,
        }
        for user, count in top_rows
    ]

    return {
        "period": period,
        "total_reports": sum(by_status.values()),
        "by_status": by_status,
        "by_type": by_type,
        "average_confidence": average_confidence,
        "top_reported_users": top_users,
    }


def get_stale_reports(session: Session, now: datetime | None = None) -> list[SpamReport]:
    """Pending reports older than a week, oldest first."""
    now = now or datetime.now()
    statement = (
        select(SpamReport)
        .where(
            SpamReport.status == ReportStatus.PENDING,
            col(SpamReport.reported_at) < now - STALE_AFTER,
        )
        .order_by(col(SpamReport.reported_at))
    )
    return list(session.exec(statement).all())
