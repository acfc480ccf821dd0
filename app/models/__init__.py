"""Table models, imported together so SQLModel.metadata knows every table."""

from app.models.user import User
from app.models.property import Property
from app.models.booking import Booking
from app.models.report import SpamReport
from app.models.notification import Notification

__all__ = ["User", "Property", "Booking", "SpamReport", "Notification"]
