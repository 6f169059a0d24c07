# backend/kitrent/services/slots/config.py
"""
Booking configuration for kit/slot allocation.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache

from ...models.enums import BookingStatus, BLOCKING_STATUSES


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for booking/slots system.

    Attributes:
        horizon_days: How many days ahead bookings are accepted
        initial_status: Status of a freshly allocated booking
        recent_bookings_limit: How many bookings "my bookings" returns
        client_cancellable_statuses: Statuses a client may cancel from
    """
    horizon_days: int = 60
    initial_status: BookingStatus = BookingStatus.AWAITING_PREPAYMENT
    recent_bookings_limit: int = 20
    client_cancellable_statuses: frozenset[BookingStatus] = frozenset({
        BookingStatus.NEW,
        BookingStatus.AWAITING_PREPAYMENT,
    })

    def __post_init__(self):
        """Validate configuration."""
        if self.horizon_days < 0:
            raise ValueError(f"horizon_days must be >= 0, got {self.horizon_days}")
        if self.initial_status not in BLOCKING_STATUSES:
            raise ValueError(
                f"initial_status must hold a kit, got {self.initial_status.value}"
            )

    def max_date(self, today: date) -> date:
        """Last bookable date counted from `today`."""
        return today + timedelta(days=self.horizon_days)

    def is_bookable_date(self, target_date: date, today: date) -> bool:
        return today <= target_date <= self.max_date(today)


@lru_cache
def get_booking_config() -> BookingConfig:
    """
    Get booking configuration (singleton).

    In the future, this can read from environment or database.
    """
    return BookingConfig()
