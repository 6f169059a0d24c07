# backend/kitrent/schemas/bookings.py

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from ..models.enums import SLOTTED_SERVICES, BookingSource, BookingStatus, City, ServiceCode


class AddressIn(BaseModel):
    city: str = Field(min_length=1, max_length=128)
    street: str = Field(min_length=1, max_length=256)
    house: str = Field(min_length=1, max_length=32)
    apartment: Optional[str] = Field(None, max_length=32)

    @property
    def address_line(self) -> str:
        """Composed line, e.g. "Ленина, д. 1, кв. 2". Apartment only when given."""
        parts = [self.street, f"д. {self.house}"]
        if self.apartment:
            parts.append(f"кв. {self.apartment}")
        return ", ".join(parts)


class ContactIn(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    phone: str = Field(min_length=5, max_length=32)


class BookingCreate(BaseModel):
    service_code: ServiceCode = ServiceCode.SELF_CLEANING
    city: City

    # Required for slotted services, ignored otherwise
    scheduled_date: Optional[date] = None
    time_slot_id: Optional[int] = None

    address: AddressIn
    contact: ContactIn
    details: Optional[str] = Field(None, max_length=2000)
    source: BookingSource = BookingSource.TELEGRAM_MINIAPP

    @model_validator(mode="after")
    def check_slot_fields(self) -> "BookingCreate":
        if self.service_code in SLOTTED_SERVICES:
            if self.scheduled_date is None or self.time_slot_id is None:
                raise ValueError(
                    f"scheduled_date and time_slot_id are required for {self.service_code.value}"
                )
        return self


class BookingRead(BaseModel):
    id: int
    client_ref: str
    service_id: int
    address_id: Optional[int] = None

    status: BookingStatus
    source: BookingSource

    scheduled_date: Optional[date] = None
    time_slot_id: Optional[int] = None
    kit_id: Optional[int] = None
    details: Optional[str] = None

    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class BookingCreated(BaseModel):
    """Result of a booking creation."""
    booking_id: int
    kit_id: Optional[int] = None
    status: BookingStatus


class BookingStatusUpdate(BaseModel):
    """Generic status change; accepts any casing ("CONFIRMED", "confirmed")."""
    status: BookingStatus

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return BookingStatus.parse(v)


class BookingTransitionResult(BaseModel):
    booking_id: int
    status: BookingStatus
