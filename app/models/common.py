"""Response envelope shared by every API route."""

from typing import Any, Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str = "OK"
    data: T | None = None
    errors: list[Any] | None = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class Page(BaseModel, Generic[T]):
    items: list[T]
    pagination: Pagination


def ok(data: Any = None, message: str = "OK") -> dict:
    """Build a success envelope."""
    return {"success": True, "message": message, "data": data}
