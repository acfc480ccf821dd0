from datetime import datetime
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from app.models.enums import PropertyStatus

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.booking import Booking


class PropertyBase(SQLModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    property_type: str = Field(default="apartment", max_length=30)
    price: float = Field(ge=0)
    city: str = Field(max_length=80)


class Property(PropertyBase, table=True):
    id_property: int | None = Field(default=None, primary_key=True)
    id_owner: int = Field(foreign_key="user.id_user", index=True)
    status: PropertyStatus = Field(default=PropertyStatus.ACTIVE, index=True)
    requires_review: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.now, index=True)
    owner: "User" = Relationship(back_populates="properties")
    bookings: list["Booking"] = Relationship(back_populates="listing")


class PropertyCreate(PropertyBase):
    pass


class PropertyPublic(PropertyBase):
    id_property: int
    id_owner: int
    status: PropertyStatus
    requires_review: bool
    created_at: datetime
