"""Booking router module: booking requests guarded by spam screening."""

from typing import Annotated

from anyio import to_thread
from fastapi import APIRouter, Depends

from app.core.dependencies import (
    DetectionServiceDep,
    RequestMetadata,
    SessionDep,
    rate_limited,
)
from app.models.booking import BookingCreate, BookingPublic
from app.models.common import ApiResponse, ok
from app.models.enums import BookingStatus, ContentType
from app.models.user import User
from app.services import booking as booking_service
from app.services.spam_policy import apply_screening, screen_submission
from app.utils.validation import ensure_id

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post("", response_model=ApiResponse[BookingPublic], status_code=201)
async def create_booking(
    *,
    session: SessionDep,
    author: Annotated[User, Depends(rate_limited(ContentType.BOOKING))],
    service: DetectionServiceDep,
    metadata: RequestMetadata,
    booking_in: BookingCreate,
):
    """
    Request a booking for a property.

    The guest's name and message are scored before the booking is stored.

    Raises:
        `400 Bad Request`: If the request is rejected as spam.
        `404 Not Found`: If the property doesn't exist.
        `403 Forbidden`: If the account is banned or suspended.
        `429 Too Many Requests`: If the author exceeded their hourly limit.
    """
    await to_thread.run_sync(booking_service.ensure_bookable, session, booking_in)
    outcome = await screen_submission(
        session,
        service,
        author,
        ContentType.BOOKING,
        booking_in.model_dump(mode="json"),
        metadata,
    )
    booking = await to_thread.run_sync(
        booking_service.create_booking,
        session,
        ensure_id(author.id_user, "User"),
        booking_in,
        outcome.content_overrides(BookingStatus.PENDING_REVIEW),
    )
    await to_thread.run_sync(
        apply_screening,
        session,
        service,
        outcome,
        author,
        ContentType.BOOKING,
        ensure_id(booking.id_booking, "Booking"),
        metadata,
    )
    await to_thread.run_sync(session.refresh, booking)
    message = (
        "Booking submitted for review"
        if outcome.held_for_review
        else "Booking created successfully"
    )
    return ok(BookingPublic.model_validate(booking), message)
