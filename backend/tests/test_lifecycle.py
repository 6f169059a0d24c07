import json
from datetime import date
from unittest.mock import Mock

import pytest

from kitrent.errors import InvalidInput, InvalidTransition, NotFound, PermissionDenied
from kitrent.models.enums import BookingStatus
from kitrent.models.generated import Bookings
from kitrent.services import lifecycle
from kitrent.services.events import P2P_QUEUE
from kitrent.services.slots import allocate_booking

D = date(2025, 6, 10)


@pytest.fixture
def booking(db, seed, make_request):
    _, (s1, _, _) = seed(kits=1)
    return allocate_booking(db, make_request(D, s1, client="client-1"))


def test_confirm_notifies_the_client_once(db, booking) -> None:
    notifier = Mock()

    confirmed = lifecycle.confirm_booking(db, booking.id, notifier=notifier)

    assert confirmed.status == BookingStatus.CONFIRMED
    assert confirmed.kit_id is not None
    notifier.assert_called_once()
    recipient, message = notifier.call_args.args
    assert recipient == "client-1"
    assert "Заказ подтверждён" in message
    assert lifecycle.booking_code(booking.id) in message
    assert "10.06.2025" in message
    assert "07:00 - 08:00" in message


def test_reject_releases_the_kit(db, booking) -> None:
    notifier = Mock()

    rejected = lifecycle.reject_booking(db, booking.id, notifier=notifier)

    assert rejected.status == BookingStatus.CANCELLED
    assert rejected.kit_id is None
    assert "Заказ отменён" in notifier.call_args.args[1]


def test_second_cancel_is_rejected_and_notifies_nothing(db, booking) -> None:
    notifier = Mock()

    lifecycle.reject_booking(db, booking.id, notifier=notifier)
    with pytest.raises(InvalidTransition):
        lifecycle.reject_booking(db, booking.id, notifier=notifier)

    assert notifier.call_count == 1


def test_failing_notifier_does_not_undo_the_transition(db, booking) -> None:
    notifier = Mock(side_effect=RuntimeError("bot is down"))

    confirmed = lifecycle.confirm_booking(db, booking.id, notifier=notifier)

    assert confirmed.status == BookingStatus.CONFIRMED
    db.expire_all()
    assert db.get(Bookings, booking.id).status == BookingStatus.CONFIRMED


def test_default_notifier_pushes_to_the_event_queue(db, booking, redis_mock) -> None:
    lifecycle.confirm_booking(db, booking.id)

    redis_mock.rpush.assert_called_once()
    queue, raw = redis_mock.rpush.call_args.args
    assert queue == P2P_QUEUE
    event = json.loads(raw)
    assert event["type"] == "booking_notification"
    assert event["recipient"] == "client-1"
    assert event["parse_mode"] == "HTML"


def test_queue_failure_is_swallowed(db, booking, redis_mock) -> None:
    redis_mock.rpush.side_effect = ConnectionError("redis is down")

    cancelled = lifecycle.reject_booking(db, booking.id)

    assert cancelled.status == BookingStatus.CANCELLED


def test_status_strings_are_case_insensitive(db, booking) -> None:
    updated = lifecycle.transition_booking(db, booking.id, "PREPAID", notifier=Mock())

    assert updated.status == BookingStatus.PREPAID


def test_unknown_status_is_invalid_input(db, booking) -> None:
    with pytest.raises(InvalidInput):
        lifecycle.transition_booking(db, booking.id, "archived", notifier=Mock())


@pytest.mark.parametrize("target", [BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED, BookingStatus.NEW])
def test_unreachable_statuses_cannot_be_set(db, booking, target) -> None:
    with pytest.raises(InvalidTransition):
        lifecycle.transition_booking(db, booking.id, target, notifier=Mock())


def test_nothing_leaves_confirmed(db, booking) -> None:
    notifier = Mock()
    lifecycle.confirm_booking(db, booking.id, notifier=notifier)

    with pytest.raises(InvalidTransition):
        lifecycle.reject_booking(db, booking.id, notifier=notifier)
    with pytest.raises(InvalidTransition):
        lifecycle.transition_booking(db, booking.id, BookingStatus.PREPAID, notifier=notifier)

    assert notifier.call_count == 1


def test_prepaid_path_then_confirm(db, booking) -> None:
    prepaid = lifecycle.mark_prepaid(db, booking.id, "client-1")
    assert prepaid.status == BookingStatus.PREPAID

    with pytest.raises(InvalidTransition):
        lifecycle.mark_prepaid(db, booking.id, "client-1")

    confirmed = lifecycle.confirm_booking(db, booking.id, notifier=Mock())
    assert confirmed.status == BookingStatus.CONFIRMED


def test_client_cancel_rules(db, booking) -> None:
    with pytest.raises(PermissionDenied):
        lifecycle.cancel_booking_by_client(db, booking.id, "someone-else", notifier=Mock())

    lifecycle.mark_prepaid(db, booking.id, "client-1")
    with pytest.raises(InvalidTransition):
        lifecycle.cancel_booking_by_client(db, booking.id, "client-1", notifier=Mock())


def test_client_can_cancel_before_prepayment(db, booking) -> None:
    cancelled = lifecycle.cancel_booking_by_client(db, booking.id, "client-1", notifier=Mock())

    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.kit_id is None


def test_unknown_booking_is_not_found(db, booking) -> None:
    with pytest.raises(NotFound):
        lifecycle.confirm_booking(db, booking.id + 100, notifier=Mock())


def test_lost_race_on_write_is_an_invalid_transition(db, booking) -> None:
    # Status moved by someone else after it was read
    lifecycle.reject_booking(db, booking.id, notifier=Mock())
    db.rollback()

    with pytest.raises(InvalidTransition):
        lifecycle._apply_transition(
            db, booking.id, BookingStatus.AWAITING_PREPAYMENT, BookingStatus.CANCELLED
        )


def test_cancelled_slot_can_be_booked_again(db, booking, make_request) -> None:
    kit_id = booking.kit_id
    slot_id = booking.time_slot_id
    lifecycle.reject_booking(db, booking.id, notifier=Mock())

    again = allocate_booking(db, make_request(D, slot_id, client="client-2"))

    assert again.kit_id == kit_id


def test_transition_table() -> None:
    assert lifecycle.can_transition(BookingStatus.NEW, BookingStatus.CONFIRMED)
    assert lifecycle.can_transition(BookingStatus.PREPAID, BookingStatus.CANCELLED)
    assert not lifecycle.can_transition(BookingStatus.PREPAID, BookingStatus.AWAITING_PREPAYMENT)
    assert not lifecycle.can_transition(BookingStatus.CANCELLED, BookingStatus.NEW)
    assert BookingStatus.IN_PROGRESS not in lifecycle.REACHABLE_STATUSES
