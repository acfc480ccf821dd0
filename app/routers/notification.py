"""Notification router: moderation notices for the signed-in user."""

from fastapi import APIRouter, Query

from app.core.dependencies import CurrentUser, SessionDep
from app.models.common import ApiResponse, ok
from app.models.notification import NotificationMarkRead, NotificationPublic
from app.services import notification as notification_service

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=ApiResponse[list[NotificationPublic]])
def get_notifications(
    *,
    session: SessionDep,
    current_user: CurrentUser,
    unread_only: bool = Query(
        False, description="If true, only return unread notifications"
    ),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
):
    """
    List warnings, suspensions, removals and appeal decisions sent to the caller.

    ### Query Parameters:
    - **unread_only**: Filter to only unread notifications
    - **offset**: Pagination offset
    - **limit**: Max results (1-100, default 50)

    Returns notifications ordered by date, newest first.
    """
    assert current_user.id_user is not None
    notifications = notification_service.get_user_notifications(
        session,
        current_user.id_user,
        unread_only=unread_only,
        offset=offset,
        limit=limit,
    )
    return ok([NotificationPublic.model_validate(n) for n in notifications])


@router.get("/unread-count", response_model=ApiResponse[dict])
def get_unread_count(*, session: SessionDep, current_user: CurrentUser):
    """Count unread notifications, for the badge in the UI."""
    assert current_user.id_user is not None
    count = notification_service.get_unread_count(session, current_user.id_user)
    return ok({"unread_count": count})


@router.patch("/mark-read", response_model=ApiResponse[dict])
def mark_notifications_as_read(
    *,
    session: SessionDep,
    current_user: CurrentUser,
    mark_read: NotificationMarkRead,
):
    """
    Mark notifications as read.

    IDs belonging to other users are ignored.
    """
    assert current_user.id_user is not None
    marked_count = notification_service.mark_notifications_as_read(
        session, mark_read.notification_ids, current_user.id_user
    )
    return ok({"marked_count": marked_count})
