"""Booking service module for the booking-request store guarded by spam screening."""

from typing import Any

from sqlmodel import Session

from app.models.booking import Booking, BookingCreate
from app.services.property import get_property


def create_booking(
    session: Session,
    user_id: int,
    booking_in: BookingCreate,
    overrides: dict[str, Any] | None = None,
) -> Booking:
    """
    Persist a booking request for an existing property.

    Raises:
        NotFoundError: If the property doesn't exist.
    """
    get_property(session, booking_in.id_property)
    booking = Booking.model_validate(
        booking_in, update={"id_user": user_id, **(overrides or {})}
    )
    session.add(booking)
    session.commit()
    session.refresh(booking)
    return booking


def ensure_bookable(session: Session, booking_in: BookingCreate) -> None:
    """Fail fast before screening when the target property is missing."""
    get_property(session, booking_in.id_property)
