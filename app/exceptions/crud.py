"""CRUD-related exceptions for database operations."""

from app.exceptions.base import AppException


class NotFoundError(AppException):
    """Resource not found in the database."""

    def __init__(self, resource: str, identifier: int | str):
        """
        Initialize a NotFoundError for a missing resource.

        Parameters:
            resource (str): The type or name of the resource that was not found.
            identifier (int | str): The identifier of the missing resource.

        Description:
            Stores `resource` and `identifier` as instance attributes and sets the exception message to
            "<resource> with identifier '<identifier>' not found".
        """
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class ValidationError(AppException):
    """Business logic validation failed."""

    def __init__(self, message: str, field: str | None = None):
        """
        Create a ValidationError representing a business logic validation failure.

        Parameters:
            message (str): Human-readable error message describing the validation failure.
            field (str | None): Optional name of the field associated with the validation error; may be None if not field-specific.
        """
        self.field = field
        super().__init__(message)


class ConflictError(AppException):
    """The request conflicts with the current state of a resource."""

    pass
