"""HTTP error handlers for FastAPI application.

This module provides the bridge between application exceptions and HTTP responses.
It maps domain-level exceptions to appropriate HTTP status codes and wraps every
error in the API envelope `{success, message, data?, errors?}`.

Purpose:
    - Keep HTTP concerns separate from business logic
    - Provide consistent error response format across the API
    - Allow easy modification of HTTP responses without changing domain logic
"""

from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    AuthorizationError,
    SpamContentRejectedError,
    AccountRestrictedError,
    RateLimitExceededError,
)


def error_response(
    status_code: int,
    message: str,
    data: Any = None,
    errors: list[Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """
    Build a JSONResponse carrying the failure envelope.

    Parameters:
        status_code (int): HTTP status code of the response.
        message (str): Human-readable error message.
        data (Any): Optional payload included under `data`.
        errors (list | None): Optional list of field-level errors included under `errors`.
        headers (dict | None): Optional extra response headers.

    Returns:
        JSONResponse: Response whose body is `{"success": false, "message": ...}` plus `data`/`errors` when provided.
    """
    content: dict[str, Any] = {"success": False, "message": message}
    if data is not None:
        content["data"] = data
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(
        status_code=status_code, content=jsonable_encoder(content), headers=headers
    )


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """
    Map a NotFoundError to an HTTP 404 JSON response.

    Parameters:
        request (Request): The incoming HTTP request.
        exc (NotFoundError): The exception indicating that a requested resource was not found.

    Returns:
        JSONResponse: Response with status 404 and the exception message.
    """
    return error_response(status.HTTP_404_NOT_FOUND, str(exc))


async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """
    Convert a ConflictError (duplicate report, repeated appeal, illegal state change) into HTTP 400.

    Parameters:
        request (Request): The incoming HTTP request.
        exc (ConflictError): The exception describing the conflicting state.

    Returns:
        JSONResponse: Response with status 400 and the exception message.
    """
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """
    Convert a ValidationError into an HTTP 400 Bad Request JSON response.

    Parameters:
        request (Request): The incoming HTTP request.
        exc (ValidationError): The domain validation error; if `exc.field` is set, the response lists it under `errors`.

    Returns:
        JSONResponse: Response with status 400 and, when available, a single-entry `errors` list.
    """
    errors = None
    if exc.field:
        errors = [{"field": exc.field, "message": str(exc)}]
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc), errors=errors)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Convert FastAPI request validation failures into a 400 envelope listing every invalid field.

    Returns:
        JSONResponse: Response with status 400, message "Validation failed" and the full `errors` list.
    """
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]
    return error_response(
        status.HTTP_400_BAD_REQUEST, "Validation failed", errors=errors
    )


async def spam_rejected_handler(
    request: Request, exc: SpamContentRejectedError
) -> JSONResponse:
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        str(exc),
        data={"spam_score": exc.confidence},
    )


async def rate_limit_handler(
    request: Request, exc: RateLimitExceededError
) -> JSONResponse:
    """
    Convert a RateLimitExceededError into HTTP 429, exposing `retry_after` in the body and a Retry-After header.
    """
    data = None
    headers = None
    if exc.retry_after is not None:
        data = {"retry_after": exc.retry_after}
        headers = {"Retry-After": str(exc.retry_after)}
    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS, str(exc), data=data, headers=headers
    )


async def authorization_error_handler(
    request: Request, exc: AuthorizationError | AccountRestrictedError
) -> JSONResponse:
    """
    Handle an AuthorizationError or AccountRestrictedError by returning a 403 Forbidden JSON response.

    Parameters:
        request (Request): The incoming HTTP request.
        exc (AuthorizationError | AccountRestrictedError): The exception indicating the actor may not perform the action.

    Returns:
        JSONResponse: Response with status code 403 and the exception message.
    """
    return error_response(status.HTTP_403_FORBIDDEN, str(exc))


async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    """
    Convert an AuthenticationError into a 401 Unauthorized JSON response that includes a WWW-Authenticate header.

    Parameters:
        request (Request): The incoming HTTP request that triggered the exception.
        exc (AuthenticationError): The authentication failure to expose in the response.

    Returns:
        JSONResponse: Response with status 401 and `WWW-Authenticate: Bearer` header.
    """
    return error_response(
        status.HTTP_401_UNAUTHORIZED,
        str(exc),
        headers={"WWW-Authenticate": "Bearer"},  # RFC 6750
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Wrap framework HTTP errors (missing bearer token, unknown route, wrong method) in the envelope.
    """
    return error_response(
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle unhandled application-level exceptions and produce a standardized 500 Internal Server Error response.

    Parameters:
        request (Request): The incoming HTTP request.
        exc (AppException): The unhandled application-level exception.

    Returns:
        JSONResponse: HTTP 500 response with message "An internal error occurred".
    """
    logger.error(f"Unhandled application error on {request.url.path}: {exc}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "An internal error occurred"
    )


def register_exception_handlers(app) -> None:
    """
    Register the application's domain-to-HTTP exception handlers on a FastAPI app.

    Registers handlers in order from most specific to most general so that subclassed
    exceptions are matched before their parent types. The following mappings are added:
    NotFoundError -> 404, ConflictError -> 400, ValidationError -> 400 (with `errors`),
    RequestValidationError -> 400 (full field list), SpamContentRejectedError -> 400
    (with `data.spam_score`), RateLimitExceededError -> 429, AuthorizationError and
    AccountRestrictedError -> 403, AuthenticationError -> 401 (adds
    `WWW-Authenticate: Bearer`), HTTPException -> envelope, and AppException -> 500.

    Parameters:
        app: The FastAPI application instance to which the exception handlers will be attached.
    """
    # CRUD exception handlers
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ConflictError, conflict_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Spam protection handlers
    app.add_exception_handler(SpamContentRejectedError, spam_rejected_handler)
    app.add_exception_handler(RateLimitExceededError, rate_limit_handler)
    app.add_exception_handler(AccountRestrictedError, authorization_error_handler)

    # Auth exception handlers
    app.add_exception_handler(AuthorizationError, authorization_error_handler)
    app.add_exception_handler(AuthenticationError, authentication_error_handler)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Catch-all for unhandled application exceptions
    app.add_exception_handler(AppException, app_exception_handler)
