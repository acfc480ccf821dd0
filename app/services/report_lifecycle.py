"""State machine for spam reports and their appeals.

All status changes on a SpamReport go through this module so that the
transition table, `resolved_at` stamping and appeal rules live in one place.
The functions mutate the report in memory only; callers own the transaction.
"""

from datetime import datetime

from app.exceptions import (
    AppealAlreadySubmittedError,
    InvalidStateTransitionError,
    ValidationError,
)
from app.models.enums import AppealStatus, ReportStatus
from app.models.report import SpamReport

REPORT_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset(
        {
            ReportStatus.UNDER_REVIEW,
            ReportStatus.CONFIRMED,
            ReportStatus.FALSE_POSITIVE,
            ReportStatus.DISMISSED,
        }
    ),
    ReportStatus.UNDER_REVIEW: frozenset(
        {
            ReportStatus.CONFIRMED,
            ReportStatus.FALSE_POSITIVE,
            ReportStatus.DISMISSED,
        }
    ),
    ReportStatus.CONFIRMED: frozenset({ReportStatus.RESOLVED}),
    ReportStatus.RESOLVED: frozenset(),
    ReportStatus.DISMISSED: frozenset(),
    ReportStatus.FALSE_POSITIVE: frozenset(),
}

APPEAL_TRANSITIONS: dict[AppealStatus, frozenset[AppealStatus]] = {
    AppealStatus.PENDING: frozenset({AppealStatus.APPROVED, AppealStatus.DENIED}),
    AppealStatus.APPROVED: frozenset(),
    AppealStatus.DENIED: frozenset(),
}

CLOSED_STATUSES = frozenset(
    {ReportStatus.RESOLVED, ReportStatus.DISMISSED, ReportStatus.FALSE_POSITIVE}
)
OPEN_STATUSES = frozenset({ReportStatus.PENDING, ReportStatus.UNDER_REVIEW})
APPEALABLE_STATUSES = frozenset({ReportStatus.CONFIRMED, ReportStatus.RESOLVED})


def can_transition(current: ReportStatus, target: ReportStatus) -> bool:
    return ReportStatus(target) in REPORT_TRANSITIONS[ReportStatus(current)]


def transition(
    report: SpamReport, target: ReportStatus, now: datetime | None = None
) -> SpamReport:
    """
    Move a report to `target`, enforcing the transition table.

    `resolved_at` is stamped the first time the report enters a closed status
    and never overwritten afterwards.

    Raises:
        InvalidStateTransitionError: If `target` is not reachable from the current status.
    """
    target = ReportStatus(target)
    if not can_transition(report.status, target):
        raise InvalidStateTransitionError(
            "Report", ReportStatus(report.status).value, target.value
        )
    report.status = target
    if target in CLOSED_STATUSES and report.resolved_at is None:
        report.resolved_at = now or datetime.now()
    return report


def start_review(
    report: SpamReport, reviewer_id: int, now: datetime | None = None
) -> SpamReport:
    now = now or datetime.now()
    transition(report, ReportStatus.UNDER_REVIEW, now)
    report.reviewed_by = reviewer_id
    report.reviewed_at = now
    return report


def review(
    report: SpamReport,
    reviewer_id: int,
    target: ReportStatus,
    notes: str | None = None,
    now: datetime | None = None,
) -> SpamReport:
    """Record a reviewer's verdict: confirmed, false_positive or dismissed."""
    now = now or datetime.now()
    transition(report, target, now)
    report.reviewed_by = reviewer_id
    report.reviewed_at = now
    if notes is not None:
        report.review_notes = notes
    return report


def resolve(
    report: SpamReport,
    reviewer_id: int,
    notes: str | None = None,
    now: datetime | None = None,
) -> SpamReport:
    now = now or datetime.now()
    transition(report, ReportStatus.RESOLVED, now)
    report.reviewed_by = reviewer_id
    report.reviewed_at = now
    if notes is not None:
        report.review_notes = notes
    return report


def submit_appeal(
    report: SpamReport, reason: str, now: datetime | None = None
) -> SpamReport:
    """
    Open the single appeal a report allows.

    Raises:
        ValidationError: If the report is not confirmed or resolved.
        AppealAlreadySubmittedError: If an appeal was already filed.
    """
    if ReportStatus(report.status) not in APPEALABLE_STATUSES:
        raise ValidationError("Only confirmed or resolved reports can be appealed")
    if report.appeal_submitted:
        raise AppealAlreadySubmittedError(report.id_report or 0)

    report.appeal_submitted = True
    report.appeal_submitted_at = now or datetime.now()
    report.appeal_reason = reason
    report.appeal_status = AppealStatus.PENDING
    return report


def decide_appeal(
    report: SpamReport,
    reviewer_id: int,
    decision: AppealStatus,
    notes: str | None = None,
    now: datetime | None = None,
) -> SpamReport:
    """
    Approve or deny a pending appeal.

    Approval reverses the report: its status becomes `false_positive` and
    `resolved_at` is restamped. Callers must check `appeal_submitted` first.

    Raises:
        InvalidStateTransitionError: If the appeal is no longer pending.
    """
    now = now or datetime.now()
    decision = AppealStatus(decision)
    current = AppealStatus(report.appeal_status or AppealStatus.PENDING)
    if decision not in APPEAL_TRANSITIONS[current]:
        raise InvalidStateTransitionError("Appeal", current.value, decision.value)

    report.appeal_status = decision
    report.appeal_reviewed_by = reviewer_id
    report.appeal_reviewed_at = now
    report.appeal_review_notes = notes
    if decision == AppealStatus.APPROVED:
        report.status = ReportStatus.FALSE_POSITIVE
        report.resolved_at = now
    return report
