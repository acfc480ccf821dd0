"""Property router module: listing creation guarded by spam screening."""

from typing import Annotated

from anyio import to_thread
from fastapi import APIRouter, Depends

from app.core.dependencies import (
    DetectionServiceDep,
    RequestMetadata,
    SessionDep,
    rate_limited,
)
from app.models.common import ApiResponse, ok
from app.models.enums import ContentType, PropertyStatus
from app.models.property import PropertyCreate, PropertyPublic
from app.models.user import User
from app.services import property as property_service
from app.services.spam_policy import apply_screening, screen_submission
from app.utils.validation import ensure_id

router = APIRouter(prefix="/api/properties", tags=["properties"])


@router.post("", response_model=ApiResponse[PropertyPublic], status_code=201)
async def create_property(
    *,
    session: SessionDep,
    author: Annotated[User, Depends(rate_limited(ContentType.PROPERTY))],
    service: DetectionServiceDep,
    metadata: RequestMetadata,
    property_in: PropertyCreate,
):
    """
    Publish a property listing.

    The listing is scored before it is stored. Depending on the verdict it is
    published, held for review (`status=pending_review`), or refused.

    ## Example Request

    ```json
    {
      "title": "Sunny two-bedroom near the park",
      "description": "Quiet flat, fully furnished, available from June.",
      "property_type": "apartment",
      "price": 1200,
      "city": "Lyon"
    }
    ```

    Raises:
        `400 Bad Request`: If the listing is rejected as spam (`data.spam_score` carries the confidence).
        `401 Unauthorized`: If no valid authentication token is provided.
        `403 Forbidden`: If the account is banned or suspended.
        `429 Too Many Requests`: If the author exceeded their hourly limit.
    """
    author_id = ensure_id(author.id_user, "User")
    outcome = await screen_submission(
        session,
        service,
        author,
        ContentType.PROPERTY,
        property_in.model_dump(mode="json"),
        metadata,
    )
    db_property = await to_thread.run_sync(
        property_service.create_property,
        session,
        author_id,
        property_in,
        outcome.content_overrides(PropertyStatus.PENDING_REVIEW),
    )
    await to_thread.run_sync(
        apply_screening,
        session,
        service,
        outcome,
        author,
        ContentType.PROPERTY,
        ensure_id(db_property.id_property, "Property"),
        metadata,
    )
    await to_thread.run_sync(session.refresh, db_property)
    message = (
        "Property submitted for review"
        if outcome.held_for_review
        else "Property created successfully"
    )
    return ok(PropertyPublic.model_validate(db_property), message)
