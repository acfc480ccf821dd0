from datetime import datetime
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from .enums import UserRole, UserStatus

if TYPE_CHECKING:
    from app.models.property import Property
    from app.models.booking import Booking


class UserBase(SQLModel):
    username: str = Field(unique=True, index=True)
    email: str = Field(unique=True, index=True)
    first_name: str | None = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)
    phone: str | None = Field(default=None, max_length=20)
    avatar: str | None = Field(default=None)


class User(UserBase, table=True):
    id_user: int | None = Field(default=None, primary_key=True)
    role: UserRole = Field(default=UserRole.USER, index=True)
    status: UserStatus = Field(default=UserStatus.ACTIVE, index=True)
    suspended_until: datetime | None = Field(default=None)
    shadow_banned: bool = Field(default=False)
    date_creation: datetime = Field(default_factory=datetime.now)
    properties: list["Property"] = Relationship(back_populates="owner")
    bookings: list["Booking"] = Relationship(back_populates="user")


class UserCreate(UserBase):
    role: UserRole = UserRole.USER


class UserPublic(UserBase):
    id_user: int
    role: UserRole
    status: UserStatus
    date_creation: datetime


class UserSummary(SQLModel):
    """Minimal user view embedded in moderation statistics."""

    id_user: int
    username: str
    first_name: str | None = None
    last_name: str | None = None
    email: str
