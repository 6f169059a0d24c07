# backend/kitrent/seed.py
"""
Idempotent seeding of services, kits and time slots.

    python -m kitrent.seed [--create-tables]

Existing rows are updated in place and re-activated, nothing is deleted.
"""

import argparse
import logging

from sqlalchemy.orm import Session

from .models.enums import ServiceCode
from .models.generated import Kits, Services, TimeSlots

logger = logging.getLogger(__name__)

DEFAULT_SERVICES = [
    {"code": ServiceCode.SELF_CLEANING, "title": "Химчистка самообслуживания", "price_rub": 1500, "prepayment_rub": 500},
    {"code": ServiceCode.PRO_CLEANING, "title": "Профессиональная химчистка мастером", "price_rub": 0, "prepayment_rub": None},
    {"code": ServiceCode.CLEANING, "title": "Клининг", "price_rub": 0, "prepayment_rub": None},
]

DEFAULT_KIT_NUMBERS = (1, 2, 3)

DEFAULT_SLOTS = [
    ("07:00", "08:00"),
    ("08:00", "09:00"),
    ("09:00", "10:00"),
]


def seed_catalog(
    db: Session,
    kit_numbers=DEFAULT_KIT_NUMBERS,
    slots=DEFAULT_SLOTS,
    services=DEFAULT_SERVICES,
) -> None:
    """Upsert services, kits and slots; sort_order follows list order (1-based)."""
    for item in services:
        service = db.query(Services).filter(Services.code == item["code"]).first()
        if service is None:
            service = Services(code=item["code"])
            db.add(service)
        service.title = item["title"]
        service.price_rub = item["price_rub"]
        service.prepayment_rub = item["prepayment_rub"]
        service.is_active = 1

    for number in kit_numbers:
        kit = db.query(Kits).filter(Kits.number == number).first()
        if kit is None:
            db.add(Kits(number=number, is_active=1))
        else:
            kit.is_active = 1

    for sort_order, (start, end) in enumerate(slots, start=1):
        code = f"{start}-{end}"
        slot = db.query(TimeSlots).filter(TimeSlots.code == code).first()
        if slot is None:
            slot = TimeSlots(code=code)
            db.add(slot)
        slot.start_time = start
        slot.end_time = end
        slot.sort_order = sort_order
        slot.is_active = 1

    db.commit()
    logger.info(
        f"Seeded {len(services)} services, {len(kit_numbers)} kits, {len(slots)} slots"
    )


def main() -> None:
    from .database import SessionLocal, engine
    from .models import Base

    parser = argparse.ArgumentParser(description="Seed kit rental catalog")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create missing tables first (development only, use alembic otherwise)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    if args.create_tables:
        Base.metadata.create_all(engine)

    db = SessionLocal()
    try:
        seed_catalog(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
