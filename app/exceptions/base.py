"""Root of the application exception hierarchy."""


class AppException(Exception):
    """Base class for all domain-level errors raised by the application."""

    def __init__(self, message: str = "An application error occurred"):
        self.message = message
        super().__init__(message)
