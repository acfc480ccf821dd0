from typing import TypeVar

from app.exceptions import AppException

T = TypeVar("T")


def ensure_id(id_value: T | None, resource_name: str = "Resource") -> T:
    """
    Narrow a persisted row's primary key from `T | None` to `T`.

    Rows fetched or refreshed from the database always carry their key, so a
    missing one means the object was never flushed.

    Raises:
        AppException: If the ID value is None.
    """
    if id_value is None:
        raise AppException(f"{resource_name} ID is missing; was it flushed?")
    return id_value
