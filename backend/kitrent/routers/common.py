# backend/kitrent/routers/common.py
"""Helpers shared by routers: error mapping and date checks."""

from datetime import date

from fastapi import HTTPException, status

from ..errors import BookingError
from ..services.slots.config import BookingConfig


def http_error(exc: BookingError) -> HTTPException:
    """Map a booking error to its HTTP status (400 / 403 / 404 / 409)."""
    return HTTPException(status_code=exc.status_code, detail=exc.detail)


def check_bookable_date(target_date: date, config: BookingConfig, today: date | None = None) -> None:
    today = today or date.today()

    if target_date < today:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date cannot be in the past",
        )

    if target_date > config.max_date(today):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Date cannot be more than {config.horizon_days} days ahead",
        )
