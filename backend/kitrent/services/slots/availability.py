# backend/kitrent/services/slots/availability.py
"""
Slot availability for a day (and a calendar of days).

Read-only and advisory: counts distinct kits already held in each slot
by blocking bookings on the date. The allocation transaction decides
authoritatively which kit (if any) a request gets.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from sqlalchemy.orm import Session

from ...models.enums import City, ServiceCode
from .catalog import (
    list_active_kit_ids,
    list_active_slots,
    require_city,
    require_slotted_service,
)
from .window import load_kit_holds

logger = logging.getLogger(__name__)


def calculate_availability(
    db: Session,
    target_date: date,
    city: City | str,
    service_code: ServiceCode | str = ServiceCode.SELF_CLEANING,
) -> list[dict]:
    """
    Per-slot availability for `target_date`.

    Returns:
        One dict per active slot, in sort order:
        {slot_id, start_time, end_time, available, free_kits}.
        Empty list when the catalog is empty.
    """
    require_city(city)
    require_slotted_service(db, service_code)

    slots = list_active_slots(db)
    if not slots:
        return []

    total_kits = len(list_active_kit_ids(db))
    booked = _booked_kits_by_slot(db, target_date, target_date)[target_date]

    result = []
    for slot in slots:
        booked_count = len(booked.get(slot.id, ()))
        free_kits = max(total_kits - booked_count, 0)
        result.append({
            "slot_id": slot.id,
            "start_time": slot.start_time,
            "end_time": slot.end_time,
            "available": booked_count < total_kits,
            "free_kits": free_kits,
        })

    logger.debug(
        f"Availability {target_date.isoformat()}: "
        f"{sum(1 for r in result if r['available'])}/{len(result)} slots open, "
        f"kits={total_kits}"
    )
    return result


def calculate_calendar(
    db: Session,
    start_date: date,
    end_date: date,
    city: City | str,
    service_code: ServiceCode | str = ServiceCode.SELF_CLEANING,
) -> list[dict]:
    """
    Per-day summary over [start_date, end_date].

    Same counting rule as calculate_availability, one range query for all days.

    Returns:
        List of {date, has_slots, open_slots_count}.
    """
    require_city(city)
    require_slotted_service(db, service_code)

    if end_date < start_date:
        start_date, end_date = end_date, start_date

    slots = list_active_slots(db)
    total_kits = len(list_active_kit_ids(db))
    booked_by_day = _booked_kits_by_slot(db, start_date, end_date)

    days = []
    current = start_date
    while current <= end_date:
        booked = booked_by_day[current]
        open_count = sum(
            1 for slot in slots
            if len(booked.get(slot.id, ())) < total_kits
        )
        days.append({
            "date": current,
            "has_slots": open_count > 0,
            "open_slots_count": open_count,
        })
        current += timedelta(days=1)

    return days


# ── Helpers ──────────────────────────────────────────────────────────────


def _booked_kits_by_slot(
    db: Session,
    date_start: date,
    date_end: date,
) -> defaultdict[date, dict[int, set[int]]]:
    """date -> slot_id -> distinct kit ids held by blocking bookings."""
    booked: defaultdict[date, dict[int, set[int]]] = defaultdict(dict)
    for hold in load_kit_holds(db, date_start, date_end):
        booked[hold.scheduled_date].setdefault(hold.time_slot_id, set()).add(hold.kit_id)
    return booked
