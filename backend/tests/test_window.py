from datetime import date

from kitrent.services.slots.window import KitHold, compute_blocked_kits, pick_free_kit, window_range

D = date(2025, 6, 10)
PREV = date(2025, 6, 9)
NEXT = date(2025, 6, 11)

# slot id -> sort order
S1, S2, S3 = 11, 12, 13
ORDERS = {S1: 1, S2: 2, S3: 3}


def test_window_range_spans_neighbour_days() -> None:
    assert window_range(D) == (PREV, NEXT)


def test_same_day_blocks_only_the_same_slot() -> None:
    holds = [KitHold(D, S2, kit_id=1)]

    assert compute_blocked_kits(D, S2, holds, ORDERS) == {1}
    assert compute_blocked_kits(D, S1, holds, ORDERS) == set()
    assert compute_blocked_kits(D, S3, holds, ORDERS) == set()


def test_yesterday_late_booking_blocks_early_and_equal_slots_today() -> None:
    holds = [KitHold(PREV, S2, kit_id=1)]

    assert compute_blocked_kits(D, S1, holds, ORDERS) == {1}
    assert compute_blocked_kits(D, S2, holds, ORDERS) == {1}
    assert compute_blocked_kits(D, S3, holds, ORDERS) == set()


def test_tomorrow_booking_blocks_equal_and_later_slots_today() -> None:
    holds = [KitHold(NEXT, S2, kit_id=1)]

    assert compute_blocked_kits(D, S1, holds, ORDERS) == set()
    assert compute_blocked_kits(D, S2, holds, ORDERS) == {1}
    assert compute_blocked_kits(D, S3, holds, ORDERS) == {1}


def test_holds_outside_the_window_are_ignored() -> None:
    holds = [
        KitHold(date(2025, 6, 8), S3, kit_id=1),
        KitHold(date(2025, 6, 12), S1, kit_id=2),
    ]

    assert compute_blocked_kits(D, S2, holds, ORDERS) == set()


def test_hold_in_unknown_slot_is_skipped() -> None:
    holds = [KitHold(PREV, 999, kit_id=1)]

    assert compute_blocked_kits(D, S1, holds, ORDERS) == set()


def test_blocked_set_collects_kits_from_all_days() -> None:
    holds = [
        KitHold(D, S2, kit_id=1),
        KitHold(PREV, S3, kit_id=2),
        KitHold(NEXT, S1, kit_id=3),
    ]

    assert compute_blocked_kits(D, S2, holds, ORDERS) == {1, 2, 3}


def test_pick_free_kit_never_returns_a_blocked_kit() -> None:
    kit = pick_free_kit({1, 2, 3}, {1, 3})
    assert kit == 2


def test_pick_free_kit_returns_none_when_everything_is_blocked() -> None:
    assert pick_free_kit({1, 2}, {1, 2}) is None
    assert pick_free_kit(set(), set()) is None
