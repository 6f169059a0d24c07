# backend/kitrent/services/lifecycle.py
"""
Booking lifecycle: status transitions and kit release.

    new ──► awaiting_prepayment ──► prepaid ──► confirmed
     │              │                  │
     └──────────────┴──────────────────┴──► cancelled

`confirmed` is also reachable directly from `new` / `awaiting_prepayment`.
Nothing leaves `confirmed` or `cancelled`. `in_progress` / `completed`
are reserved and never produced here.

Entering `cancelled` clears kit_id in the same UPDATE. The UPDATE is
conditional on the status that was read, so two racing transitions
cannot both apply (the kit is released once).

Entering `confirmed` / `cancelled` sends exactly one notification after
commit. A failing notifier never undoes the transition.
"""

import logging
from collections.abc import Callable, Iterable
from sqlalchemy import func, update
from sqlalchemy.orm import Session

from ..database import begin_serialized
from ..errors import InvalidInput, InvalidTransition, NotFound, PermissionDenied
from ..models.enums import BookingStatus
from ..models.generated import Bookings
from .events import notify
from .slots.config import BookingConfig, get_booking_config

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]

TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.NEW: frozenset({
        BookingStatus.AWAITING_PREPAYMENT,
        BookingStatus.PREPAID,
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.AWAITING_PREPAYMENT: frozenset({
        BookingStatus.PREPAID,
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.PREPAID: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
    }),
}

# Statuses some transition can lead to
REACHABLE_STATUSES = frozenset().union(*TRANSITIONS.values())

STATUS_MESSAGES = {
    BookingStatus.CONFIRMED: "✅ <b>Заказ подтверждён!</b>",
    BookingStatus.CANCELLED: "❌ <b>Заказ отменён</b>",
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def transition_booking(
    db: Session,
    booking_id: int,
    target_status: BookingStatus | str,
    *,
    client_ref: str | None = None,
    allowed_from: Iterable[BookingStatus] | None = None,
    notifier: Notifier = notify,
) -> Bookings:
    """
    Move a booking to `target_status`.

    Args:
        client_ref: when given, the booking must belong to this client
        allowed_from: narrower set of source statuses for this caller
        notifier: sink for the confirmed/cancelled message

    Raises:
        InvalidInput: unknown status string
        NotFound: no such booking
        PermissionDenied: booking belongs to another client
        InvalidTransition: move not allowed from the current status
    """
    try:
        target = BookingStatus.parse(target_status)
    except ValueError as e:
        raise InvalidInput(str(e)) from None

    if target not in REACHABLE_STATUSES:
        raise InvalidTransition(f"Status {target.value} cannot be set")

    booking = db.get(Bookings, booking_id)
    if booking is None:
        raise NotFound()
    if client_ref is not None and booking.client_ref != client_ref:
        raise PermissionDenied()

    current = booking.status
    sources = frozenset(allowed_from) if allowed_from is not None else frozenset(TRANSITIONS)
    if current not in sources or not can_transition(current, target):
        raise InvalidTransition(
            f"Cannot change booking status from {current.value} to {target.value}"
        )

    # Close the read, the write runs in its own serialized transaction
    db.rollback()
    _apply_transition(db, booking_id, current, target)

    booking = db.get(Bookings, booking_id)
    logger.info(
        f"Booking {booking_id}: {current.value} → {target.value}"
        + (" (kit released)" if target == BookingStatus.CANCELLED else "")
    )

    if target in STATUS_MESSAGES:
        _notify_status_change(booking, target, notifier)

    return booking


# ── Caller-specific shortcuts ────────────────────────────────────────────


def confirm_booking(db: Session, booking_id: int, notifier: Notifier = notify) -> Bookings:
    """Admin confirmation."""
    return transition_booking(db, booking_id, BookingStatus.CONFIRMED, notifier=notifier)


def reject_booking(db: Session, booking_id: int, notifier: Notifier = notify) -> Bookings:
    """Admin rejection: cancels and releases the kit."""
    return transition_booking(db, booking_id, BookingStatus.CANCELLED, notifier=notifier)


def cancel_booking_by_client(
    db: Session,
    booking_id: int,
    client_ref: str,
    config: BookingConfig | None = None,
    notifier: Notifier = notify,
) -> Bookings:
    """Client cancellation, only before prepayment."""
    config = config or get_booking_config()
    return transition_booking(
        db,
        booking_id,
        BookingStatus.CANCELLED,
        client_ref=client_ref,
        allowed_from=config.client_cancellable_statuses,
        notifier=notifier,
    )


def mark_prepaid(db: Session, booking_id: int, client_ref: str) -> Bookings:
    """Client reports the prepayment (proof handling is external)."""
    return transition_booking(
        db,
        booking_id,
        BookingStatus.PREPAID,
        client_ref=client_ref,
        allowed_from=(BookingStatus.NEW, BookingStatus.AWAITING_PREPAYMENT),
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _apply_transition(
    db: Session,
    booking_id: int,
    current: BookingStatus,
    target: BookingStatus,
) -> None:
    values = {"status": target, "updated_at": func.current_timestamp()}
    if target == BookingStatus.CANCELLED:
        values["kit_id"] = None

    try:
        begin_serialized(db)
        result = db.execute(
            update(Bookings)
            .where(Bookings.id == booking_id, Bookings.status == current)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            # Someone else moved the booking between our read and write
            raise InvalidTransition(
                f"Booking status changed concurrently, expected {current.value}"
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    # Drop the stale identity-map copy
    db.expire_all()


def format_status_message(booking: Bookings, target: BookingStatus) -> str:
    """Message for the client about the new status."""
    date_str = booking.scheduled_date.strftime("%d.%m.%Y") if booking.scheduled_date else "—"
    slot = booking.time_slot
    slot_str = f"{slot.start_time} - {slot.end_time}" if slot else "—"
    title = booking.service.title if booking.service else "Химчистка"

    return (
        f"{STATUS_MESSAGES[target]}\n\n"
        f"📋 Заказ: <code>{booking_code(booking.id)}</code>\n"
        f"🧹 {title}\n"
        f"📅 {date_str}\n"
        f"🕐 {slot_str}"
    )


def booking_code(booking_id: int) -> str:
    """Short human-facing booking code."""
    return f"{booking_id:06d}"


def _notify_status_change(booking: Bookings, target: BookingStatus, notifier: Notifier) -> None:
    try:
        notifier(booking.client_ref, format_status_message(booking, target))
    except Exception:
        logger.exception(f"Status notification failed for booking {booking.id}")
