"""Registry of moderatable content stores.

Maps a `ContentType` to the table that backs it so that detection, report
submission and enforcement can work on `(content_type, content_id)` pairs
without knowing the concrete model.
"""

from datetime import datetime
from typing import Any, NamedTuple
from sqlmodel import Session, SQLModel, func, select

from app.models.booking import Booking
from app.models.enums import BookingStatus, ContentType, PropertyStatus
from app.models.property import Property
from app.models.user import User


class ContentStore(NamedTuple):
    model: type[SQLModel]
    owner_field: str
    removed_status: Any


CONTENT_STORES: dict[ContentType, ContentStore] = {
    ContentType.PROPERTY: ContentStore(Property, "id_owner", PropertyStatus.REMOVED),
    ContentType.BOOKING: ContentStore(Booking, "id_user", BookingStatus.CANCELLED),
}


def get_content(
    session: Session, content_type: ContentType, content_id: int
) -> SQLModel | None:
    """
    Fetch a content item by type and primary key.

    `user` content resolves to the User row itself. Types without a backing
    store return None.
    """
    if content_type == ContentType.USER:
        return session.get(User, content_id)
    store = CONTENT_STORES.get(content_type)
    if store is None:
        return None
    return session.get(store.model, content_id)


def get_content_owner_id(content_type: ContentType, content: SQLModel) -> int | None:
    """Return the id of the user who authored `content`."""
    if content_type == ContentType.USER:
        return getattr(content, "id_user", None)
    store = CONTENT_STORES.get(content_type)
    if store is None:
        return None
    return getattr(content, store.owner_field, None)


def content_payload(content: SQLModel) -> dict[str, Any]:
    """Serialize a content row into the plain mapping the detectors read."""
    return content.model_dump(mode="json")


def count_recent_content(
    session: Session, user_id: int, content_type: ContentType, since: datetime
) -> int:
    """
    Count how many items of `content_type` the user created at or after `since`.

    Returns 0 for content types without a backing store.
    """
    store = CONTENT_STORES.get(ContentType(content_type))
    if store is None:
        return 0
    model = store.model
    owner_column = getattr(model, store.owner_field)
    statement = (
        select(func.count())
        .select_from(model)
        .where(owner_column == user_id, model.created_at >= since)  # type: ignore[attr-defined]
    )
    return session.exec(statement).one()


def remove_content(
    session: Session, content_type: ContentType, content_id: int | None
) -> bool:
    """
    Take a content item out of circulation.

    Properties become `removed`, bookings become `cancelled`. The caller owns
    the transaction.

    Returns:
        bool: True if an item was found and updated.
    """
    store = CONTENT_STORES.get(ContentType(content_type))
    if store is None or content_id is None:
        return False
    content = session.get(store.model, content_id)
    if content is None:
        return False
    content.status = store.removed_status  # type: ignore[attr-defined]
    session.add(content)
    return True
