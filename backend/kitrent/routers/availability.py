# backend/kitrent/routers/availability.py
"""
Availability API endpoints.

GET /availability/          - slots of one day with free/occupied flag
GET /availability/calendar  - days with at least one open slot
"""

from datetime import date, timedelta
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_client_ref
from ..database import get_db
from ..errors import BookingError
from ..models.enums import City, ServiceCode
from ..schemas.slots import SlotAvailabilityRead, SlotsCalendarResponse, SlotsDayStatus
from ..services.slots import calculate_availability, calculate_calendar, get_booking_config
from .common import check_bookable_date, http_error


router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/", response_model=list[SlotAvailabilityRead])
def get_availability(
    city: City,
    target_date: date = Query(..., alias="date"),
    service_code: ServiceCode = ServiceCode.SELF_CLEANING,
    client_ref: str = Depends(get_client_ref),
    db: Session = Depends(get_db),
):
    """Per-slot availability for a day. Advisory: booking may still conflict."""
    config = get_booking_config()
    check_bookable_date(target_date, config)

    try:
        slots = calculate_availability(db, target_date, city, service_code)
    except BookingError as e:
        raise http_error(e)

    return [SlotAvailabilityRead(**slot) for slot in slots]


@router.get("/calendar", response_model=SlotsCalendarResponse)
def get_availability_calendar(
    city: City,
    start_date: date | None = None,
    end_date: date | None = None,
    service_code: ServiceCode = ServiceCode.SELF_CLEANING,
    client_ref: str = Depends(get_client_ref),
    db: Session = Depends(get_db),
):
    """Calendar of days with open slots, clipped to [today, today + horizon]."""
    config = get_booking_config()

    today = date.today()
    if start_date is None:
        start_date = today
    if end_date is None:
        end_date = start_date + timedelta(days=config.horizon_days)

    if start_date < today:
        start_date = today
    if end_date > config.max_date(today):
        end_date = config.max_date(today)
    if end_date < start_date:
        end_date = start_date

    try:
        days = calculate_calendar(db, start_date, end_date, city, service_code)
    except BookingError as e:
        raise http_error(e)

    return SlotsCalendarResponse(
        city=city.value,
        start_date=start_date,
        end_date=end_date,
        days=[SlotsDayStatus(**day) for day in days],
        horizon_days=config.horizon_days,
    )
