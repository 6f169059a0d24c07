# backend/kitrent/services/slots/allocation.py
"""
Allocation transaction: bind a new booking to a free kit.

Steps:
1. Validate slot and service (outside the transaction)
2. Open a serialized transaction
3. Load active kits, slot orders and kit holds for [D-1, D+1]
4. Compute blocked kits, pick any free one
5. Create address + booking, commit

Any failure rolls the whole transaction back, address included.
A unique-index violation on (date, slot, kit) means another request won
the race and is reported as ConcurrencyConflict, never as a storage error.
"""

import logging
from dataclasses import dataclass
from datetime import date
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ...database import begin_serialized
from ...errors import BookingError, ConcurrencyConflict, InvalidInput, InvalidSlot, NoAvailableKit
from ...models.enums import BLOCKING_STATUSES, BookingSource, BookingStatus, City, ServiceCode
from ...models.generated import Addresses, Bookings, TimeSlots
from .catalog import list_active_kit_ids, require_city, require_slotted_service
from .config import BookingConfig, get_booking_config
from .window import compute_blocked_kits, load_kit_holds, load_slot_orders, pick_free_kit, window_range

logger = logging.getLogger(__name__)

# Name of the partial unique index guarding (scheduled_date, time_slot_id, kit_id)
KIT_UNIQUE_INDEX = "uq_bookings_date_slot_kit"


@dataclass(frozen=True)
class AllocationRequest:
    """Everything needed to allocate a kit-backed booking."""
    client_ref: str
    scheduled_date: date
    time_slot_id: int
    city: City | str
    address_line: str
    contact_name: str
    contact_phone: str
    service_code: ServiceCode = ServiceCode.SELF_CLEANING
    source: BookingSource = BookingSource.TELEGRAM_MINIAPP
    initial_status: BookingStatus | None = None


def allocate_booking(
    db: Session,
    request: AllocationRequest,
    config: BookingConfig | None = None,
) -> Bookings:
    """
    Create a booking for (scheduled_date, time_slot_id) holding a free kit.

    The session is used for its own transaction: it must not carry
    uncommitted work when called.

    Raises:
        InvalidInput / InvalidSlot: bad city, service or slot (nothing written)
        NoAvailableKit: every active kit is blocked for this date and slot
        ConcurrencyConflict: a concurrent booking claimed the kit first
    """
    config = config or get_booking_config()
    initial_status = request.initial_status or config.initial_status
    if initial_status not in BLOCKING_STATUSES:
        raise InvalidInput(f"Initial status must hold a kit, got {initial_status.value}")

    # Step 1: Validate before the transaction
    city = require_city(request.city)
    service_id = require_slotted_service(db, request.service_code).id
    if not _is_active_slot(db, request.time_slot_id):
        raise InvalidSlot()

    # Close the validation read, allocation gets a fresh serialized transaction
    db.rollback()

    try:
        # Step 2: Serialized transaction
        begin_serialized(db)
        booking = _allocate_in_transaction(db, request, city, service_id, initial_status)
        db.commit()
    except NoAvailableKit:
        db.rollback()
        logger.info(
            f"No free kit: date={request.scheduled_date.isoformat()}, "
            f"slot={request.time_slot_id}"
        )
        raise
    except BookingError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        if not _is_kit_uniqueness_violation(e):
            raise
        logger.warning(
            f"Kit race lost: date={request.scheduled_date.isoformat()}, "
            f"slot={request.time_slot_id}"
        )
        raise ConcurrencyConflict() from e
    except OperationalError as e:
        db.rollback()
        if not _is_serialization_failure(e):
            raise
        logger.warning(
            f"Serialization failure: date={request.scheduled_date.isoformat()}, "
            f"slot={request.time_slot_id}"
        )
        raise ConcurrencyConflict() from e
    except Exception:
        db.rollback()
        raise

    db.refresh(booking)

    logger.info(
        f"Booking allocated: booking_id={booking.id}, kit_id={booking.kit_id}, "
        f"date={request.scheduled_date.isoformat()}, slot={request.time_slot_id}, "
        f"client={request.client_ref}"
    )
    return booking


def _allocate_in_transaction(
    db: Session,
    request: AllocationRequest,
    city: City,
    service_id: int,
    initial_status: BookingStatus,
) -> Bookings:
    # Step 3: Load everything the decision needs
    active_kits = list_active_kit_ids(db)
    slot_orders = load_slot_orders(db)
    if request.time_slot_id not in slot_orders:
        raise InvalidSlot()

    date_start, date_end = window_range(request.scheduled_date)
    holds = load_kit_holds(db, date_start, date_end)

    # Step 4: Pick a kit
    blocked = compute_blocked_kits(
        request.scheduled_date, request.time_slot_id, holds, slot_orders
    )
    kit_id = pick_free_kit(active_kits, blocked)
    if kit_id is None:
        raise NoAvailableKit()

    # Step 5: Address + booking, same transaction
    address = Addresses(
        client_ref=request.client_ref,
        city=city.value,
        address_line=request.address_line,
        contact_name=request.contact_name,
        contact_phone=request.contact_phone,
    )
    db.add(address)
    db.flush()

    booking = Bookings(
        client_ref=request.client_ref,
        service_id=service_id,
        address_id=address.id,
        scheduled_date=request.scheduled_date,
        time_slot_id=request.time_slot_id,
        kit_id=kit_id,
        status=initial_status,
        source=request.source,
    )
    db.add(booking)
    db.flush()
    return booking


# ── Helpers ──────────────────────────────────────────────────────────────


def _is_active_slot(db: Session, slot_id: int) -> bool:
    slot = db.get(TimeSlots, slot_id)
    return slot is not None and bool(slot.is_active)


def _is_kit_uniqueness_violation(error: IntegrityError) -> bool:
    """True if the violated constraint is the (date, slot, kit) unique index."""
    message = str(error.orig)
    if KIT_UNIQUE_INDEX in message:
        return True
    # SQLite names the columns instead of the index
    return "UNIQUE constraint failed: bookings.scheduled_date" in message


def _is_serialization_failure(error: OperationalError) -> bool:
    """SQLSTATE 40001 (serialization_failure) from a SERIALIZABLE backend."""
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == "40001"
