# backend/kitrent/routers/bookings.py
"""
Bookings API endpoints.

Client:  POST /bookings/, GET /bookings/, GET /bookings/{id},
         POST /bookings/{id}/prepaid, POST /bookings/{id}/cancel
Admin:   PATCH /bookings/{id}/confirm, /reject, /status

A 409 on creation means the slot is taken: re-query availability
and pick another slot instead of repeating the same request.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import AuthorizationProvider, get_authorization_provider, get_client_ref, require_admin
from ..database import get_db
from ..errors import BookingError
from ..models.enums import SLOTTED_SERVICES
from ..schemas.bookings import (
    BookingCreate,
    BookingCreated,
    BookingRead,
    BookingStatusUpdate,
    BookingTransitionResult,
)
from ..services import lifecycle
from ..services.bookings import ServiceRequest, create_service_request, get_booking, list_client_bookings
from ..services.slots import AllocationRequest, allocate_booking, get_booking_config
from .common import check_bookable_date, http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/", response_model=list[BookingRead])
def list_my_bookings(
    client_ref: str = Depends(get_client_ref),
    db: Session = Depends(get_db),
):
    config = get_booking_config()
    return list_client_bookings(db, client_ref, limit=config.recent_bookings_limit)


@router.post("/", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    client_ref: str = Depends(get_client_ref),
    db: Session = Depends(get_db),
):
    """
    Create a booking.

    Slotted services go through kit allocation (409 when no kit is free).
    Other services become a `new` request without slot or kit.
    """
    try:
        if data.service_code in SLOTTED_SERVICES:
            config = get_booking_config()
            check_bookable_date(data.scheduled_date, config)
            booking = allocate_booking(
                db,
                AllocationRequest(
                    client_ref=client_ref,
                    scheduled_date=data.scheduled_date,
                    time_slot_id=data.time_slot_id,
                    city=data.city,
                    address_line=data.address.address_line,
                    contact_name=data.contact.name,
                    contact_phone=data.contact.phone,
                    service_code=data.service_code,
                    source=data.source,
                ),
                config,
            )
        else:
            booking = create_service_request(
                db,
                ServiceRequest(
                    client_ref=client_ref,
                    service_code=data.service_code,
                    city=data.city,
                    address_line=data.address.address_line,
                    contact_name=data.contact.name,
                    contact_phone=data.contact.phone,
                    details=data.details,
                    source=data.source,
                ),
            )
    except BookingError as e:
        raise http_error(e)

    return BookingCreated(booking_id=booking.id, kit_id=booking.kit_id, status=booking.status)


@router.get("/{id}", response_model=BookingRead)
def read_booking(
    id: int,
    client_ref: str = Depends(get_client_ref),
    authz: AuthorizationProvider = Depends(get_authorization_provider),
    db: Session = Depends(get_db),
):
    owner = None if authz.is_admin(client_ref) else client_ref
    try:
        return get_booking(db, id, client_ref=owner)
    except BookingError as e:
        raise http_error(e)


@router.post("/{id}/prepaid", response_model=BookingTransitionResult)
def report_prepayment(
    id: int,
    client_ref: str = Depends(get_client_ref),
    db: Session = Depends(get_db),
):
    try:
        booking = lifecycle.mark_prepaid(db, id, client_ref)
    except BookingError as e:
        raise http_error(e)
    return BookingTransitionResult(booking_id=booking.id, status=booking.status)


@router.post("/{id}/cancel", response_model=BookingTransitionResult)
def cancel_booking(
    id: int,
    client_ref: str = Depends(get_client_ref),
    db: Session = Depends(get_db),
):
    try:
        booking = lifecycle.cancel_booking_by_client(db, id, client_ref)
    except BookingError as e:
        raise http_error(e)
    return BookingTransitionResult(booking_id=booking.id, status=booking.status)


@router.patch("/{id}/confirm", response_model=BookingTransitionResult)
def confirm_booking(
    id: int,
    admin_ref: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        booking = lifecycle.confirm_booking(db, id)
    except BookingError as e:
        raise http_error(e)
    logger.info(f"Booking {id} confirmed by {admin_ref}")
    return BookingTransitionResult(booking_id=booking.id, status=booking.status)


@router.patch("/{id}/reject", response_model=BookingTransitionResult)
def reject_booking(
    id: int,
    admin_ref: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        booking = lifecycle.reject_booking(db, id)
    except BookingError as e:
        raise http_error(e)
    logger.info(f"Booking {id} rejected by {admin_ref}")
    return BookingTransitionResult(booking_id=booking.id, status=booking.status)


@router.patch("/{id}/status", response_model=BookingTransitionResult)
def change_booking_status(
    id: int,
    data: BookingStatusUpdate,
    admin_ref: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        booking = lifecycle.transition_booking(db, id, data.status)
    except BookingError as e:
        raise http_error(e)
    logger.info(f"Booking {id} set to {booking.status.value} by {admin_ref}")
    return BookingTransitionResult(booking_id=booking.id, status=booking.status)
