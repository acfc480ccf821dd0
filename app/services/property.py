"""Property service module for the listing store guarded by spam screening."""

from typing import Any

from sqlmodel import Session

from app.exceptions import NotFoundError
from app.models.property import Property, PropertyCreate


def create_property(
    session: Session,
    owner_id: int,
    property_in: PropertyCreate,
    overrides: dict[str, Any] | None = None,
) -> Property:
    """
    Persist a new property listing.

    Parameters:
        session: Database session.
        owner_id: The listing owner's user ID.
        property_in: Listing data.
        overrides: Moderation fields (status, requires_review) set by screening.

    Returns:
        Property: The created listing.
    """
    db_property = Property.model_validate(
        property_in, update={"id_owner": owner_id, **(overrides or {})}
    )
    session.add(db_property)
    session.commit()
    session.refresh(db_property)
    return db_property


def get_property(session: Session, property_id: int) -> Property:
    """
    Retrieve a property by ID.

    Raises:
        NotFoundError: If the property doesn't exist.
    """
    db_property = session.get(Property, property_id)
    if db_property is None:
        raise NotFoundError("Property", property_id)
    return db_property
