"""Exceptions raised by spam detection, the report lifecycle and account protections."""

from app.exceptions.base import AppException
from app.exceptions.crud import ConflictError


class DetectionError(AppException):
    """Internal scoring failure. Always recovered inside the detection service."""

    pass


class DuplicateReportError(ConflictError):
    """The reporter already has an open report on this content."""

    def __init__(self, message: str = "You have already reported this content"):
        super().__init__(message)


class AppealAlreadySubmittedError(ConflictError):
    def __init__(self, report_id: int):
        self.report_id = report_id
        super().__init__("Appeal already submitted for this report")


class InvalidStateTransitionError(ConflictError):
    """A report or appeal was asked to move to a state it cannot reach."""

    def __init__(self, entity: str, current: str, target: str):
        """
        Parameters:
            entity (str): What is transitioning, e.g. "Report" or "Appeal".
            current (str): The current state value.
            target (str): The requested state value.
        """
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(f"{entity} cannot move from '{current}' to '{target}'")


class SpamContentRejectedError(AppException):
    """Submitted content scored above the automatic rejection threshold."""

    def __init__(self, confidence: int):
        self.confidence = confidence
        super().__init__("Content rejected due to spam detection")


class AccountRestrictedError(AppException):
    """The author's account is banned or suspended."""

    pass


class RateLimitExceededError(AppException):
    def __init__(
        self,
        message: str = "Rate limit exceeded. Please try again later.",
        retry_after: int | None = None,
    ):
        self.retry_after = retry_after
        super().__init__(message)
