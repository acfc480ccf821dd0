"""Spam router module: user reports, moderation review, appeals and content checks."""

from typing import Annotated, Literal

from anyio import to_thread
from fastapi import APIRouter, Path, Query

from app.core.dependencies import (
    CurrentAdmin,
    CurrentUser,
    DetectionServiceDep,
    RequestMetadata,
    SessionDep,
)
from app.exceptions import NotFoundError
from app.models.common import ApiResponse, Page, Pagination, ok
from app.models.enums import ContentType, ReportStatus, ReportType, Severity
from app.models.report import (
    AppealReview,
    AppealSubmit,
    BulkReportReview,
    BulkReviewResult,
    CheckContentRequest,
    ReportResolve,
    ReportReview,
    ReportSubmit,
    SpamReportPublic,
)
from app.services import spam_report as report_service
from app.services.content import content_payload, get_content, get_content_owner_id
from app.services.spam_scoring import generate_report_summary

router = APIRouter(prefix="/api/spam", tags=["spam"])

ReportId = Annotated[int, Path(ge=1)]


@router.post("/report", response_model=ApiResponse[SpamReportPublic], status_code=201)
def submit_report(
    *,
    session: SessionDep,
    current_user: CurrentUser,
    metadata: RequestMetadata,
    report_in: ReportSubmit,
):
    """
    Report a property, booking or user as spam or abuse.

    Any authenticated user can report content. The report is created with
    `pending` status and its severity derived from the category. A user may
    hold only one open report per piece of content.

    ## Request Body

    - `content_type` (string, required): `property`, `booking` or `user`
    - `content_id` (integer, required): ID of the reported content
    - `category` (string, required): `spam`, `inappropriate`, `fake_listing`, `duplicate`, `misleading` or `other`
    - `reason` (string, required): 10 to 500 characters
    - `description` (string, optional): up to 1000 characters
    - `evidence` (array of URLs, optional)

    ## Example Request

    ```json
    {
      "content_type": "property",
      "content_id": 42,
      "category": "fake_listing",
      "reason": "The photos are copied from another listing in a different city."
    }
    ```

    Raises:
        `400 Bad Request`: If the content type cannot be reported or the content was already reported by this user.
        `401 Unauthorized`: If no valid authentication token is provided.
        `404 Not Found`: If the reported content doesn't exist.
    """
    report = report_service.submit_report(session, current_user, report_in, metadata)
    return ok(report_service.to_report_public(report), "Report submitted successfully")


@router.get("/reports", response_model=ApiResponse[Page[SpamReportPublic]])
def list_reports(
    session: SessionDep,
    admin: CurrentAdmin,
    status: ReportStatus | None = None,
    severity: Severity | None = None,
    content_type: ContentType | None = None,
    report_type: ReportType | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    sort_by: Literal["reported_at", "priority", "severity", "status"] = "reported_at",
    sort_order: Literal["asc", "desc"] = "desc",
):
    """
    List reports with filters, sorting and pagination (admin only).

    Returns `items` plus a `pagination` object with `page`, `limit`, `total`
    and `pages`.
    """
    reports, total = report_service.list_reports(
        session,
        status=status,
        severity=severity,
        content_type=content_type,
        report_type=report_type,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    data = Page[SpamReportPublic](
        items=[report_service.to_report_public(report) for report in reports],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=report_service.page_count(total, limit),
        ),
    )
    return ok(data)


@router.get("/reports/urgent", response_model=ApiResponse[list[SpamReportPublic]])
def list_urgent_reports(session: SessionDep, admin: CurrentAdmin):
    """Up to 20 pending reports needing attention, highest priority first (admin only)."""
    reports = report_service.get_urgent_reports(session)
    return ok([report_service.to_report_public(report) for report in reports])


@router.put("/reports/bulk-review", response_model=ApiResponse[BulkReviewResult])
def bulk_review_reports(
    *, session: SessionDep, admin: CurrentAdmin, review_in: BulkReportReview
):
    """
    Apply one review verdict to up to 50 reports (admin only).

    Each report is processed independently; reports that are missing or
    cannot move to the requested status are counted in `failed`.
    """
    result = report_service.bulk_review_reports(
        session,
        review_in.report_ids,
        admin,
        review_in.status,
        review_in.notes,
        review_in.action,
    )
    return ok(
        result,
        f"Bulk review completed: {result.successful} successful, {result.failed} failed",
    )


@router.get(
    "/reports/user/{user_id}", response_model=ApiResponse[list[SpamReportPublic]]
)
def list_user_reports(
    session: SessionDep, admin: CurrentAdmin, user_id: Annotated[int, Path(ge=1)]
):
    """Pending and under-review reports against a user (admin only)."""
    reports = report_service.get_open_reports_for_user(session, user_id)
    return ok([report_service.to_report_public(report) for report in reports])


@router.get("/reports/{report_id}", response_model=ApiResponse[SpamReportPublic])
def get_report(session: SessionDep, admin: CurrentAdmin, report_id: ReportId):
    report = report_service.get_report(session, report_id)
    return ok(report_service.to_report_public(report))


@router.put(
    "/reports/{report_id}/start-review", response_model=ApiResponse[SpamReportPublic]
)
def start_review(session: SessionDep, admin: CurrentAdmin, report_id: ReportId):
    """Claim a pending report (admin only). Moves it to `under_review`."""
    report = report_service.start_review(session, report_id, admin)
    return ok(report_service.to_report_public(report), "Review started")


@router.put("/reports/{report_id}/review", response_model=ApiResponse[SpamReportPublic])
def review_report(
    *,
    session: SessionDep,
    admin: CurrentAdmin,
    report_id: ReportId,
    review_in: ReportReview,
):
    """
    Record a review verdict and optionally enforce an action (admin only).

    ## Request Body

    - `status` (string, required): `confirmed`, `false_positive` or `dismissed`
    - `notes` (string, optional): up to 1000 characters
    - `action` (string, optional): `none`, `warning`, `content_removed`, `user_suspended`, `user_banned` or `shadowban`

    The verdict is saved even if the enforcement action fails.

    Raises:
        `400 Bad Request`: If the report cannot move to the requested status.
        `404 Not Found`: If the report doesn't exist.
    """
    report = report_service.review_report(
        session,
        report_id,
        admin,
        review_in.status,
        review_in.notes,
        review_in.action,
    )
    return ok(report_service.to_report_public(report), "Report reviewed successfully")


@router.put(
    "/reports/{report_id}/resolve", response_model=ApiResponse[SpamReportPublic]
)
def resolve_report(
    *,
    session: SessionDep,
    admin: CurrentAdmin,
    report_id: ReportId,
    resolve_in: ReportResolve,
):
    """Close a confirmed report (admin only)."""
    report = report_service.resolve_report(session, report_id, admin, resolve_in.notes)
    return ok(report_service.to_report_public(report), "Report resolved")


@router.post(
    "/reports/{report_id}/appeal", response_model=ApiResponse[SpamReportPublic]
)
def submit_appeal(
    *,
    session: SessionDep,
    current_user: CurrentUser,
    report_id: ReportId,
    appeal_in: AppealSubmit,
):
    """
    Appeal a confirmed or resolved report against your own account.

    A report can be appealed once. The reason must be 20 to 1000 characters.

    Raises:
        `400 Bad Request`: If the report is not appealable or was already appealed.
        `403 Forbidden`: If the report is not against the authenticated user.
        `404 Not Found`: If the report doesn't exist.
    """
    report = report_service.submit_appeal(
        session, report_id, current_user, appeal_in.reason
    )
    return ok(report_service.to_report_public(report), "Appeal submitted successfully")


@router.put(
    "/reports/{report_id}/appeal/review",
    response_model=ApiResponse[SpamReportPublic],
)
def review_appeal(
    *,
    session: SessionDep,
    admin: CurrentAdmin,
    report_id: ReportId,
    appeal_in: AppealReview,
):
    """
    Approve or reject an appeal (admin only).

    Approving reverses the report to `false_positive`. The reported user is
    notified of the decision either way.
    """
    report = report_service.review_appeal(
        session, report_id, admin, appeal_in.status, appeal_in.notes
    )
    return ok(report_service.to_report_public(report), f"Appeal {appeal_in.status}")


@router.get("/statistics", response_model=ApiResponse[dict])
def get_statistics(
    session: SessionDep,
    admin: CurrentAdmin,
    period: Literal["1d", "7d", "30d", "90d"] = "7d",
):
    """Report activity over the last day, week, month or quarter (admin only)."""
    return ok(report_service.get_statistics(session, period))


@router.post("/check-content", response_model=ApiResponse[dict])
async def check_content(
    *,
    session: SessionDep,
    admin: CurrentAdmin,
    service: DetectionServiceDep,
    check_in: CheckContentRequest,
):
    """
    Run spam detection on an existing property or booking (admin only).

    The verdict is recorded as an automated report when it meets the
    detection logging rule.

    Raises:
        `404 Not Found`: If the content doesn't exist.
    """
    content_type = ContentType(check_in.content_type)
    content = await to_thread.run_sync(
        get_content, session, content_type, check_in.content_id
    )
    if content is None:
        raise NotFoundError(content_type.value.capitalize(), check_in.content_id)

    payload = content_payload(content)
    owner_id = get_content_owner_id(content_type, content)
    result = await service.detect_spam(
        session, payload, content_type, owner_id, check_in.content_id  # type: ignore[arg-type]
    )
    return ok(
        {
            "content": payload,
            "spam_detection": result.model_dump(mode="json"),
            "summary": generate_report_summary(result).model_dump(mode="json"),
        }
    )
