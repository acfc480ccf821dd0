from datetime import datetime, timedelta, timezone
from typing import Any, Literal

import jwt
from jwt.exceptions import PyJWTError

from app.core.config import get_settings
from app.exceptions import AppException, InvalidTokenError


def create_token(
    data: dict, expires_delta: timedelta, type: Literal["access", "refresh"]
) -> str:
    """
    Create a JSON Web Token with the given payload, expiration, and token type.

    Tokens are normally issued by the identity provider; this helper exists for
    internal tools and tests that need to mint a valid bearer token.

    Parameters:
        data (dict): Payload claims to include in the token.
        expires_delta (timedelta): Time span from now after which the token expires.
        type (Literal["access", "refresh"]): Token classification included in the token claims.

    Returns:
        token (str): Encoded JWT string.

    Raises:
        AppException: If the token cannot be generated.
    """
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": type})
    try:
        return jwt.encode(
            to_encode,
            settings.SECRET_KEY.get_secret_value(),
            algorithm=settings.ALGORITHM,
        )
    except PyJWTError:
        raise AppException("Could not generate authentication token.")


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token containing the provided payload.

    Parameters:
        data (dict): Claims to include in the token payload.
        expires_delta (timedelta | None): Optional time until expiration. If `None`, the expiration is set using ACCESS_TOKEN_EXPIRE_MINUTES from application settings.

    Returns:
        str: Encoded JWT access token string.
    """
    expires_delta = (
        expires_delta
        if expires_delta
        else timedelta(minutes=get_settings().ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return create_token(data, expires_delta=expires_delta, type="access")


def decode_access_token(token: str) -> str:
    """
    Validate an access token and return its subject.

    Returns:
        str: The username carried in the `sub` claim.

    Raises:
        InvalidTokenError: If the token is malformed, expired, not an access token or has no subject.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.SECRET_KEY.get_secret_value(),
            algorithms=[settings.ALGORITHM],
        )
    except PyJWTError:
        raise InvalidTokenError()

    username = payload.get("sub")
    if username is None or payload.get("type") != "access":
        raise InvalidTokenError()
    return username
