# backend/kitrent/models/enums.py
"""
Closed value sets shared by models, services and schemas.

Stored in the database by their lowercase `value`.
"""

from enum import Enum


class BookingStatus(str, Enum):
    NEW = "new"
    AWAITING_PREPAYMENT = "awaiting_prepayment"
    PREPAID = "prepaid"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    # Reserved: shown by admin tooling, never produced by the lifecycle rules
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: "str | BookingStatus") -> "BookingStatus":
        """Accept "new", "NEW", " New " etc. Raises ValueError for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown booking status: {value!r}") from None


# Statuses that hold a kit against future allocation
BLOCKING_STATUSES = frozenset({
    BookingStatus.NEW,
    BookingStatus.AWAITING_PREPAYMENT,
    BookingStatus.PREPAID,
    BookingStatus.CONFIRMED,
})


class ServiceCode(str, Enum):
    SELF_CLEANING = "self_cleaning"
    PRO_CLEANING = "pro_cleaning"
    CLEANING = "cleaning"


# Services rented per slot with a kit
SLOTTED_SERVICES = frozenset({ServiceCode.SELF_CLEANING})


class City(str, Enum):
    ROSTOV_NA_DONU = "ROSTOV_NA_DONU"
    BATAYSK = "BATAYSK"
    STAVROPOL = "STAVROPOL"


class BookingSource(str, Enum):
    TELEGRAM_BOT = "telegram_bot"
    TELEGRAM_MINIAPP = "telegram_miniapp"
    MAX_BOT = "max_bot"
