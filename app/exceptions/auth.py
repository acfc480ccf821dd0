"""Authentication and authorization exceptions."""

from app.exceptions.base import AppException


class AuthenticationError(AppException):
    """Base class for authentication-related errors."""

    pass


class InvalidTokenError(AuthenticationError):
    """Token is invalid, expired, or malformed."""

    def __init__(self, message: str = "Could not validate credentials"):
        """
        Initialize the InvalidTokenError with a descriptive message.

        Parameters:
            message (str): Error message describing the token problem. Defaults to "Could not validate credentials".
        """
        super().__init__(message)


class AuthorizationError(AppException):
    """Authenticated actor lacks the role or ownership required for this action."""

    def __init__(self, message: str = "Insufficient permissions"):
        """
        Initialize AuthorizationError with an optional message describing the permission failure.

        Parameters:
            message (str): Human-readable error message; defaults to "Insufficient permissions".
        """
        super().__init__(message)
