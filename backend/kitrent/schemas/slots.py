# backend/kitrent/schemas/slots.py
"""
Pydantic schemas for availability API.
"""

from datetime import date
from pydantic import BaseModel, Field


class SlotAvailabilityRead(BaseModel):
    """Availability of one time slot on a day."""
    slot_id: int
    start_time: str  # "HH:MM"
    end_time: str    # "HH:MM"
    available: bool
    free_kits: int = Field(0, description="Kits not yet booked in this slot (advisory)")

    model_config = {"from_attributes": True}


class SlotsDayStatus(BaseModel):
    """Status of a single day in calendar."""
    date: date
    has_slots: bool
    open_slots_count: int = 0

    model_config = {"from_attributes": True}


class SlotsCalendarResponse(BaseModel):
    """Response with calendar of available days."""
    city: str
    start_date: date
    end_date: date
    days: list[SlotsDayStatus]

    # Metadata
    horizon_days: int

    model_config = {"from_attributes": True}
