# backend/kitrent/services/slots/catalog.py
"""
Slot catalog and kit pool: read-only views over configuration tables.

Both are plain reads. An empty catalog or pool is a normal result,
callers treat it as "nothing available".
"""

from dataclasses import dataclass
from sqlalchemy.orm import Session

from ...errors import InvalidInput
from ...models.enums import SLOTTED_SERVICES, City, ServiceCode
from ...models.generated import Kits, Services, TimeSlots


@dataclass(frozen=True)
class SlotInfo:
    """Detached snapshot of an active time slot."""
    id: int
    start_time: str  # "HH:MM"
    end_time: str    # "HH:MM"
    sort_order: int

    @property
    def label(self) -> str:
        return f"{self.start_time} - {self.end_time}"


def list_active_slots(db: Session) -> list[SlotInfo]:
    """Active slots ordered by sort_order (ascending)."""
    rows = (
        db.query(TimeSlots)
        .filter(TimeSlots.is_active == 1)
        .order_by(TimeSlots.sort_order)
        .all()
    )
    return [
        SlotInfo(
            id=row.id,
            start_time=row.start_time,
            end_time=row.end_time,
            sort_order=row.sort_order,
        )
        for row in rows
    ]


def list_active_kit_ids(db: Session) -> set[int]:
    """Ids of active kits. Size of the set = capacity per slot per day."""
    rows = db.query(Kits.id).filter(Kits.is_active == 1).all()
    return {kit_id for (kit_id,) in rows}


# ── Request validation helpers ───────────────────────────────────────────


def require_city(city: City | str) -> City:
    """Parse a city code, InvalidInput for unsupported cities."""
    try:
        return City(city)
    except ValueError:
        raise InvalidInput(f"Unsupported city: {city}") from None


def get_active_service(db: Session, service_code: ServiceCode | str) -> Services | None:
    """Active service by code, or None."""
    try:
        code = ServiceCode(service_code)
    except ValueError:
        return None
    return (
        db.query(Services)
        .filter(Services.code == code, Services.is_active == 1)
        .first()
    )


def require_slotted_service(db: Session, service_code: ServiceCode | str) -> Services:
    """Active service that is rented per slot with a kit."""
    service = get_active_service(db, service_code)
    if service is None:
        raise InvalidInput("Service not available")
    if service.code not in SLOTTED_SERVICES:
        raise InvalidInput(f"Service {service.code.value} does not use time slots")
    return service
