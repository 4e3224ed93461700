"""
Tests for domain models and range selection.
"""

import pytest

from teeremap.domain.exceptions import InvalidRangeError
from teeremap.domain.models import (
    Fill,
    Guest,
    Member,
    OccupantGroup,
    OccupantKind,
    SlotCapacity,
    SourceSlot,
    TargetSlot,
)
from teeremap.domain.range_selector import select_range


class TestSlotCapacity:
    """Tests for SlotCapacity."""

    def test_remaining_and_fit(self):
        """Test capacity arithmetic."""
        capacity = SlotCapacity(capacity=4, occupied=1)

        assert capacity.remaining == 3
        assert capacity.can_fit(3)
        assert not capacity.can_fit(4)
        assert not capacity.is_full

    def test_add_returns_new_value(self):
        """Test adding occupants does not mutate the original."""
        capacity = SlotCapacity(capacity=4)

        updated = capacity.add(4)

        assert capacity.occupied == 0
        assert updated.occupied == 4
        assert updated.is_full
        assert str(updated) == "4 / 4"

    def test_add_beyond_capacity_raises(self):
        """Test overfilling is refused."""
        with pytest.raises(ValueError):
            SlotCapacity(capacity=2, occupied=1).add(2)

    def test_over_capacity_detection(self):
        """Test an overbooked slot reports zero remaining."""
        capacity = SlotCapacity(capacity=2, occupied=3)

        assert capacity.is_over
        assert capacity.remaining == 0

    def test_negative_values_rejected(self):
        """Test invalid capacities."""
        with pytest.raises(ValueError):
            SlotCapacity(capacity=-1)


class TestOccupants:
    """Tests for the occupant variants."""

    def test_kinds_and_identity(self):
        """Test the same id of different kinds is a different occupant."""
        member = Member(id=7, display_name="Ann", origin_slot_id=1)
        guest = Guest(id=7, display_name="Gus", origin_slot_id=1, inviting_occupant_id=3)
        fill = Fill(id=7, display_name="Reserved", origin_slot_id=1, fill_kind="reserved")

        assert member.kind is OccupantKind.MEMBER
        assert guest.kind is OccupantKind.GUEST
        assert fill.kind is OccupantKind.FILL
        assert len({member.key, guest.key, fill.key}) == 3
        assert member != guest

    def test_fill_label(self):
        """Test fill labels fall back from custom label to kind to a default."""
        assert Fill.label_for("reserved", "Pro shop") == "Pro shop"
        assert Fill.label_for("reserved", None) == "reserved"
        assert Fill.label_for(None, None) == "Fill"

    def test_group_needs_members(self):
        """Test an empty group is rejected."""
        with pytest.raises(ValueError):
            OccupantGroup(origin_slot_id=1, members=())


class TestSlots:
    """Tests for source and target slots."""

    def test_source_slot_minutes(self):
        """Test unparseable stored times become None."""
        assert SourceSlot(id=1, start_time="8:10 AM").start_minutes == 490
        assert SourceSlot(id=2, start_time="noonish").start_minutes is None

    def test_target_slot_validation(self):
        """Test target slots must start within the day."""
        with pytest.raises(ValueError):
            TargetSlot(id="x", start_minutes=1440)

        slot = TargetSlot(id="gen-485", start_minutes=485, assigned=[Member(id=1, display_name="A", origin_slot_id=1)])
        assert slot.start_time == "08:05"
        assert isinstance(slot.assigned, tuple)
        assert slot.slot_capacity.remaining == 3


class TestSelectRange:
    """Tests for range selection."""

    def test_selects_inclusive_range(self, teesheet):
        """Test the range follows tee sheet order, inclusive."""
        selected = select_range(teesheet.slots, 2, 4)

        assert selected.slot_ids == (2, 3, 4)
        assert len(selected.occupants) == 7
        assert selected.total_capacity == 12
        assert selected.first_start_minutes == 480
        assert selected.last_start_minutes == 500

    def test_occupants_keep_slot_order(self, teesheet):
        """Test occupants are collected slot by slot."""
        selected = select_range(teesheet.slots, 2, 3)

        origins = [o.origin_slot_id for o in selected.occupants]
        assert origins == [2, 2, 2, 2, 3, 3, 3]

    def test_reversed_range_rejected(self, teesheet):
        """Test start must not come after end."""
        with pytest.raises(InvalidRangeError):
            select_range(teesheet.slots, 4, 2)

    def test_unknown_slot_rejected(self, teesheet):
        """Test unknown ids are rejected."""
        with pytest.raises(InvalidRangeError):
            select_range(teesheet.slots, 2, 99)

    def test_origin_minutes_keep_unknown_times(self):
        """Test unparseable origin times map to None rather than 0."""
        slots = [SourceSlot(id=1, start_time="08:00"), SourceSlot(id=2, start_time="8 o'clock")]

        origins = select_range(slots, 1, 2).origin_minutes()

        assert origins == {1: 480, 2: None}
