from datetime import date, timedelta

import pytest

from kitrent.errors import InvalidInput
from kitrent.models.enums import BookingStatus, City, ServiceCode
from kitrent.models.generated import Bookings
from kitrent.services.slots import allocate_booking, calculate_availability, calculate_calendar

D = date(2025, 6, 10)
TWO_SLOTS = [("07:00", "08:00"), ("08:00", "09:00")]


def _flags(availability: list[dict]) -> list[tuple[int, bool]]:
    return [(slot["slot_id"], slot["available"]) for slot in availability]


def test_empty_day_has_every_slot_open(db, seed) -> None:
    _, (s1, s2) = seed(kits=2, slots=TWO_SLOTS)

    availability = calculate_availability(db, D, City.ROSTOV_NA_DONU)

    assert _flags(availability) == [(s1, True), (s2, True)]
    assert availability[0]["start_time"] == "07:00"
    assert availability[0]["end_time"] == "08:00"
    assert availability[0]["free_kits"] == 2


def test_slot_closes_when_every_kit_is_booked(db, seed, make_request) -> None:
    _, (s1, s2) = seed(kits=2, slots=TWO_SLOTS)

    allocate_booking(db, make_request(D, s1, client="a"))
    assert _flags(calculate_availability(db, D, City.ROSTOV_NA_DONU)) == [(s1, True), (s2, True)]
    assert calculate_availability(db, D, City.ROSTOV_NA_DONU)[0]["free_kits"] == 1

    allocate_booking(db, make_request(D, s1, client="b"))
    availability = calculate_availability(db, D, City.ROSTOV_NA_DONU)
    assert _flags(availability) == [(s1, False), (s2, True)]
    assert availability[0]["free_kits"] == 0


def test_no_kits_means_nothing_is_available(db, seed) -> None:
    _, (s1, s2) = seed(kits=0, slots=TWO_SLOTS)

    availability = calculate_availability(db, D, City.BATAYSK)

    assert _flags(availability) == [(s1, False), (s2, False)]


def test_empty_catalog_returns_empty_list(db, seed) -> None:
    seed(kits=2, slots=[])

    assert calculate_availability(db, D, City.STAVROPOL) == []


def test_only_same_day_bookings_are_counted(db, seed, make_request) -> None:
    # Cross-day holds are the allocator's business, availability is advisory
    _, (s1, s2, s3) = seed(kits=1)

    allocate_booking(db, make_request(D - timedelta(days=1), s3))

    assert all(slot["available"] for slot in calculate_availability(db, D, City.ROSTOV_NA_DONU))


def test_cancelled_bookings_do_not_count(db, seed, make_request) -> None:
    _, (s1, _, _) = seed(kits=1)

    booking = allocate_booking(db, make_request(D, s1))
    assert calculate_availability(db, D, City.ROSTOV_NA_DONU)[0]["available"] is False

    db.get(Bookings, booking.id).status = BookingStatus.CANCELLED
    db.commit()

    assert calculate_availability(db, D, City.ROSTOV_NA_DONU)[0]["available"] is True


def test_city_and_service_are_validated(db, seed) -> None:
    seed(kits=1)

    with pytest.raises(InvalidInput):
        calculate_availability(db, D, "MOSCOW")
    with pytest.raises(InvalidInput):
        calculate_availability(db, D, City.ROSTOV_NA_DONU, ServiceCode.PRO_CLEANING)
    with pytest.raises(InvalidInput):
        calculate_availability(db, D, City.ROSTOV_NA_DONU, "no_such_service")


def test_calendar_reports_open_slots_per_day(db, seed, make_request) -> None:
    _, (s1, s2) = seed(kits=1, slots=TWO_SLOTS)

    allocate_booking(db, make_request(D, s1, client="a"))
    allocate_booking(db, make_request(D + timedelta(days=2), s2, client="b"))

    days = calculate_calendar(db, D, D + timedelta(days=2), City.ROSTOV_NA_DONU)

    assert [day["date"] for day in days] == [D, D + timedelta(days=1), D + timedelta(days=2)]
    assert [day["open_slots_count"] for day in days] == [1, 2, 1]
    assert all(day["has_slots"] for day in days)


def test_calendar_with_no_kits_has_no_open_days(db, seed) -> None:
    seed(kits=0, slots=TWO_SLOTS)

    days = calculate_calendar(db, D + timedelta(days=1), D, City.ROSTOV_NA_DONU)

    # Reversed bounds are swapped
    assert [day["date"] for day in days] == [D, D + timedelta(days=1)]
    assert not any(day["has_slots"] for day in days)
