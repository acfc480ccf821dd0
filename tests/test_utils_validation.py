import pytest

from app.exceptions import AppException
from app.utils.validation import ensure_id


def test_ensure_id_returns_value():
    assert ensure_id(42, "Report") == 42


def test_ensure_id_accepts_zero():
    assert ensure_id(0) == 0


def test_ensure_id_missing_raises():
    with pytest.raises(AppException) as exc_info:
        ensure_id(None, "Booking")
    assert exc_info.value.message.startswith("Booking ID is missing")
