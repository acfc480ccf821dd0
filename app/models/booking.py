from datetime import datetime
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from app.models.enums import BookingStatus

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.property import Property


class BookingBase(SQLModel):
    id_property: int = Field(foreign_key="property.id_property", index=True)
    name: str = Field(min_length=1, max_length=100)
    message: str | None = Field(default=None, max_length=1000)
    guests: int = Field(default=1, ge=1, le=20)


class Booking(BookingBase, table=True):
    id_booking: int | None = Field(default=None, primary_key=True)
    id_user: int = Field(foreign_key="user.id_user", index=True)
    status: BookingStatus = Field(default=BookingStatus.PENDING, index=True)
    requires_review: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.now, index=True)
    user: "User" = Relationship(back_populates="bookings")
    listing: "Property" = Relationship(back_populates="bookings")


class BookingCreate(BookingBase):
    pass


class BookingPublic(BookingBase):
    id_booking: int
    id_user: int
    status: BookingStatus
    requires_review: bool
    created_at: datetime
