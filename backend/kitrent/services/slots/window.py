# backend/kitrent/services/slots/window.py
"""
Allocation window: which kits are held for a given date and slot.

A kit booked for slot S on day D is held from the start of S on D
until the start of S on D+1. So a request for (D, S) has to look at:

  D-1  kits booked in a slot at or after S are still out
  D    kits booked in exactly S
  D+1  kits booked in a slot at or before S are promised before they come back

Holds are loaded with one range query over [D-1, D+1], the blocked set
is computed in memory.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from sqlalchemy.orm import Session

from ...models.enums import BLOCKING_STATUSES
from ...models.generated import Bookings, TimeSlots


@dataclass(frozen=True)
class KitHold:
    """A blocking booking reduced to what allocation needs."""
    scheduled_date: date
    time_slot_id: int
    kit_id: int


def load_kit_holds(db: Session, date_start: date, date_end: date) -> list[KitHold]:
    """Blocking bookings with a kit and a slot in [date_start, date_end] (inclusive)."""
    rows = (
        db.query(Bookings.scheduled_date, Bookings.time_slot_id, Bookings.kit_id)
        .filter(
            Bookings.scheduled_date >= date_start,
            Bookings.scheduled_date <= date_end,
            Bookings.status.in_(list(BLOCKING_STATUSES)),
            Bookings.kit_id.isnot(None),
            Bookings.time_slot_id.isnot(None),
        )
        .all()
    )
    return [
        KitHold(scheduled_date=d, time_slot_id=slot_id, kit_id=kit_id)
        for d, slot_id, kit_id in rows
    ]


def load_slot_orders(db: Session) -> dict[int, int]:
    """
    slot_id -> sort_order for the whole catalog.

    Inactive slots are included: a booking made before a slot was
    deactivated still holds its kit.
    """
    rows = db.query(TimeSlots.id, TimeSlots.sort_order).all()
    return {slot_id: sort_order for slot_id, sort_order in rows}


def window_range(target_date: date) -> tuple[date, date]:
    """Closed date range whose bookings can block `target_date`."""
    return target_date - timedelta(days=1), target_date + timedelta(days=1)


def compute_blocked_kits(
    target_date: date,
    slot_id: int,
    holds: list[KitHold],
    slot_orders: dict[int, int],
) -> set[int]:
    """Kit ids that cannot be given out for (target_date, slot_id)."""
    requested_order = slot_orders[slot_id]
    prev_date, next_date = window_range(target_date)

    blocked: set[int] = set()
    for hold in holds:
        if hold.scheduled_date == target_date:
            if hold.time_slot_id == slot_id:
                blocked.add(hold.kit_id)
            continue

        hold_order = slot_orders.get(hold.time_slot_id)
        if hold_order is None:
            continue

        if hold.scheduled_date == prev_date:
            # Yesterday's rental runs until the same slot today
            if requested_order <= hold_order:
                blocked.add(hold.kit_id)
        elif hold.scheduled_date == next_date:
            # Kit must be back before tomorrow's booked slot
            if requested_order >= hold_order:
                blocked.add(hold.kit_id)

    return blocked


def pick_free_kit(active_kit_ids: set[int], blocked: set[int]) -> int | None:
    """Any active kit outside `blocked`, or None. No rotation or balancing."""
    free = active_kit_ids - blocked
    if not free:
        return None
    return min(free)
