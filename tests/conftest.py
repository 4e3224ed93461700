"""
Shared fixtures for the test suite.
"""

import pendulum
import pytest

from teeremap.domain.models import Fill, Guest, Member, SourceSlot, Teesheet


def build_slot(slot_id, start_time, occupants=(), capacity=4, sort_order=0):
    """Build a source slot whose occupants originate from it."""
    return SourceSlot(
        id=slot_id,
        start_time=start_time,
        capacity=capacity,
        occupants=tuple(occupants),
        sort_order=sort_order,
    )


@pytest.fixture
def teesheet() -> Teesheet:
    """
    A small morning tee sheet.

    07:50 [1 member] | 08:00 [4 members] | 08:10 [member, guest, fill]
    | 08:20 [empty] | 08:30 [1 member]
    """
    slots = [
        build_slot(1, "07:50", [Member(id=1, display_name="Ann Early", origin_slot_id=1)], sort_order=0),
        build_slot(
            2,
            "08:00",
            [Member(id=10 + i, display_name=f"Member {i}", origin_slot_id=2) for i in range(4)],
            sort_order=1,
        ),
        build_slot(
            3,
            "8:10 AM",
            [
                Member(id=20, display_name="Bob Host", origin_slot_id=3),
                Guest(id=5, display_name="Gary Guest", origin_slot_id=3, inviting_occupant_id=20),
                Fill(id=7, display_name="Reserved", origin_slot_id=3, fill_kind="reserved"),
            ],
            sort_order=2,
        ),
        build_slot(4, "08:20", sort_order=3),
        build_slot(5, "08:30", [Member(id=30, display_name="Zed Late", origin_slot_id=5)], sort_order=4),
    ]
    return Teesheet(date=pendulum.date(2024, 11, 25), version=0, slots=tuple(slots))
