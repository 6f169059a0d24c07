from datetime import date
from unittest.mock import patch

import pytest
from sqlalchemy.orm import sessionmaker

from kitrent.database import create_db_engine
from kitrent.models import Base
from kitrent.models.enums import City
from kitrent.seed import seed_catalog
from kitrent.services.slots import AllocationRequest, list_active_kit_ids, list_active_slots

THREE_SLOTS = [("07:00", "08:00"), ("08:00", "09:00"), ("09:00", "10:00")]


@pytest.fixture
def engine(tmp_path):
    # File-backed: several connections (threads) must see the same database
    engine = create_db_engine(f"sqlite:///{tmp_path / 'kitrent.db'}", busy_timeout=10)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def redis_mock():
    # Tests must never talk to a real Redis
    with patch("kitrent.services.events.redis_client") as client:
        yield client


@pytest.fixture
def seed(db):
    """seed(kits=2, slots=THREE_SLOTS) -> (sorted kit ids, slot ids in sort order)."""
    def _seed(kits: int = 2, slots=THREE_SLOTS):
        seed_catalog(db, kit_numbers=tuple(range(1, kits + 1)), slots=slots)
        kit_ids = sorted(list_active_kit_ids(db))
        slot_ids = [slot.id for slot in list_active_slots(db)]
        # Release the read lock so other connections can write
        db.rollback()
        return kit_ids, slot_ids

    return _seed


@pytest.fixture
def make_request():
    def _make(scheduled_date: date, slot_id: int, client: str = "client-1", **kwargs) -> AllocationRequest:
        return AllocationRequest(
            client_ref=client,
            scheduled_date=scheduled_date,
            time_slot_id=slot_id,
            city=kwargs.pop("city", City.ROSTOV_NA_DONU),
            address_line=kwargs.pop("address_line", "Ленина, д. 1, кв. 5"),
            contact_name=kwargs.pop("contact_name", "Иван"),
            contact_phone=kwargs.pop("contact_phone", "+79990000000"),
            **kwargs,
        )

    return _make
