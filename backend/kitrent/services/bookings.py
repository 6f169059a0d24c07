# backend/kitrent/services/bookings.py
"""
Booking reads and unslotted service requests.

Kit-backed bookings are created by slots.allocation.allocate_booking.
Requests for services without slots (pro cleaning, cleaning) hold
no slot and no kit, so they skip allocation entirely.
"""

import logging
from dataclasses import dataclass
from sqlalchemy.orm import Session

from ..errors import InvalidInput, NotFound, PermissionDenied
from ..models.enums import SLOTTED_SERVICES, BookingSource, BookingStatus, City, ServiceCode
from ..models.generated import Addresses, Bookings
from .slots.catalog import get_active_service, require_city

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceRequest:
    """Request for a service that is not rented per slot."""
    client_ref: str
    service_code: ServiceCode
    city: City | str
    address_line: str
    contact_name: str
    contact_phone: str
    details: str | None = None
    source: BookingSource = BookingSource.TELEGRAM_MINIAPP


def create_service_request(db: Session, request: ServiceRequest) -> Bookings:
    """Create an unslotted booking (status `new`, no slot, no kit)."""
    city = require_city(request.city)

    service = get_active_service(db, request.service_code)
    if service is None:
        raise InvalidInput("Service not available")
    if service.code in SLOTTED_SERVICES:
        raise InvalidInput(f"Service {service.code.value} requires a date and time slot")

    try:
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
            service_id=service.id,
            address_id=address.id,
            status=BookingStatus.NEW,
            source=request.source,
            details=request.details,
        )
        db.add(booking)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(booking)
    logger.info(
        f"Service request created: booking_id={booking.id}, "
        f"service={service.code.value}, client={request.client_ref}"
    )
    return booking


def get_booking(db: Session, booking_id: int, client_ref: str | None = None) -> Bookings:
    """
    Booking by id.

    With `client_ref`, only the owner may read it.
    """
    booking = db.get(Bookings, booking_id)
    if booking is None:
        raise NotFound()
    if client_ref is not None and booking.client_ref != client_ref:
        raise PermissionDenied()
    return booking


def list_client_bookings(db: Session, client_ref: str, limit: int = 20) -> list[Bookings]:
    """Most recent bookings of a client, newest first."""
    return (
        db.query(Bookings)
        .filter(Bookings.client_ref == client_ref)
        .order_by(Bookings.created_at.desc(), Bookings.id.desc())
        .limit(limit)
        .all()
    )
