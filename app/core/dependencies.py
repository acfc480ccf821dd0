from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session, select

from app.core.config import get_settings
from app.core.rate_tracker import LimitsRateTracker, RateTracker
from app.core.security import decode_access_token
from app.database.database import get_session
from app.exceptions import AuthorizationError, InvalidTokenError
from app.models.enums import ContentType, UserRole
from app.models.user import User
from app.services.spam_detection import SpamDetectionService
from app.services.spam_policy import check_user_spam_status, enforce_rate_limit

# Tokens are minted by the identity service; this API only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")

SessionDep = Annotated[Session, Depends(get_session)]


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: SessionDep,
) -> User:
    """
    Resolve the authenticated user from an access JWT.

    Returns:
        user (User): The User whose username matches the token's subject.

    Raises:
        InvalidTokenError: If the token is invalid, not an access token, missing the subject, or if no matching user is found.
    """
    username = decode_access_token(token)
    user = session.exec(select(User).where(User.username == username)).first()
    if user is None:
        raise InvalidTokenError()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_current_admin(user: CurrentUser) -> User:
    """
    Require the authenticated user to hold the admin role.

    Raises:
        AuthorizationError: If the user is not an admin.
    """
    if user.role != UserRole.ADMIN:
        raise AuthorizationError("Admin access required")
    return user


CurrentAdmin = Annotated[User, Depends(get_current_admin)]


@lru_cache()
def get_spam_detection_service() -> SpamDetectionService:
    return SpamDetectionService()


@lru_cache()
def get_rate_tracker() -> RateTracker:
    return LimitsRateTracker(get_settings().RATE_LIMIT_STORAGE_URI)


DetectionServiceDep = Annotated[
    SpamDetectionService, Depends(get_spam_detection_service)
]
RateTrackerDep = Annotated[RateTracker, Depends(get_rate_tracker)]


def get_active_author(user: CurrentUser, session: SessionDep) -> User:
    """Authenticated user, refused when banned, suspended or flagged repeatedly."""
    return check_user_spam_status(session, user)


ActiveAuthor = Annotated[User, Depends(get_active_author)]


def rate_limited(content_type: ContentType):
    """
    Build a dependency enforcing the adaptive hourly limit for one content type.

    Parameters:
        content_type (ContentType): The kind of content the guarded route creates.

    Returns:
        Callable: A FastAPI dependency returning the author once the submission is counted.
    """

    def dependency(
        author: ActiveAuthor, session: SessionDep, tracker: RateTrackerDep
    ) -> User:
        enforce_rate_limit(tracker, session, author, content_type)
        return author

    return dependency


def get_request_metadata(request: Request) -> dict[str, str | None]:
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


RequestMetadata = Annotated[dict, Depends(get_request_metadata)]
