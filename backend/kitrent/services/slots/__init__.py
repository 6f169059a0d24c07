# backend/kitrent/services/slots/__init__.py
"""
Kit/slot allocation module.

Catalog: active slots and kits
Availability: advisory per-slot counts (read-only)
Allocation: authoritative kit assignment (transactional)
"""

from .config import BookingConfig, get_booking_config
from .catalog import SlotInfo, list_active_slots, list_active_kit_ids
from .availability import calculate_availability, calculate_calendar
from .allocation import AllocationRequest, allocate_booking
from .window import compute_blocked_kits

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "SlotInfo",
    "list_active_slots",
    "list_active_kit_ids",
    "calculate_availability",
    "calculate_calendar",
    "AllocationRequest",
    "allocate_booking",
    "compute_blocked_kits",
]
