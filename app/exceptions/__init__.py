"""
Application exceptions module.

This module provides a clean separation of concerns for error handling:
- Base exceptions define the hierarchy
- CRUD exceptions handle database operations
- Auth exceptions handle authentication/authorization
- Spam exceptions cover detection, report lifecycle and account protections
- HTTP mapping is handled separately in app/core/error_handlers.py
"""

from app.exceptions.base import AppException
from app.exceptions.crud import (
    NotFoundError,
    ValidationError,
    ConflictError,
)
from app.exceptions.auth import (
    AuthenticationError,
    InvalidTokenError,
    AuthorizationError,
)
from app.exceptions.spam import (
    DetectionError,
    DuplicateReportError,
    AppealAlreadySubmittedError,
    InvalidStateTransitionError,
    SpamContentRejectedError,
    AccountRestrictedError,
    RateLimitExceededError,
)

__all__ = [
    # Base
    "AppException",
    # CRUD
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    # Auth
    "AuthenticationError",
    "InvalidTokenError",
    "AuthorizationError",
    # Spam
    "DetectionError",
    "DuplicateReportError",
    "AppealAlreadySubmittedError",
    "InvalidStateTransitionError",
    "SpamContentRejectedError",
    "AccountRestrictedError",
    "RateLimitExceededError",
]
