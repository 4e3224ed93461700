"""
Tests for plan validation.
"""

from teeremap.domain.models import AssignmentPlan, Member, OccupantGroup, TargetSlot
from teeremap.domain.plan_validator import check_capacity, find_invariant_violations, validate


def _member(occupant_id, origin=1):
    return Member(id=occupant_id, display_name=f"Player {occupant_id}", origin_slot_id=origin)


class TestValidate:
    """Tests for the capacity feasibility check."""

    def test_counts_unassigned_demand(self):
        """Test unassigned occupants count towards demand."""
        plan = AssignmentPlan(
            source_range_slot_ids=(1,),
            target_slots=(TargetSlot(id="gen-480", start_minutes=480, capacity=2, assigned=(_member(1), _member(2))),),
            unassigned_groups=(OccupantGroup(origin_slot_id=1, members=(_member(3),)),),
        )

        result = validate(plan)

        assert result.total_occupants == 3
        assert result.total_capacity == 2
        assert result.overflow
        assert result.free_capacity == -1

    def test_equal_demand_is_not_overflow(self):
        """Test a full but sufficient plan."""
        plan = AssignmentPlan(
            source_range_slot_ids=(1,),
            target_slots=(TargetSlot(id="gen-480", start_minutes=480, capacity=1, assigned=(_member(1),)),),
        )

        assert not validate(plan).overflow

    def test_check_capacity_before_mapping(self):
        """Test the pre-mapping check on plain slot lists."""
        slots = [TargetSlot(id="a", start_minutes=480, capacity=3), TargetSlot(id="b", start_minutes=486, capacity=3)]

        assert check_capacity(7, slots).overflow
        assert not check_capacity(6, slots).overflow
        assert check_capacity(0, []).total_capacity == 0


class TestInvariantViolations:
    """Tests for structural invariant checks."""

    def test_valid_plan(self):
        """Test a consistent plan has no violations."""
        plan = AssignmentPlan(
            source_range_slot_ids=(1,),
            target_slots=(
                TargetSlot(id="a", start_minutes=480, assigned=(_member(1),)),
                TargetSlot(id="b", start_minutes=490, assigned=(_member(2),)),
            ),
        )

        assert find_invariant_violations(plan) == []

    def test_detects_every_problem(self):
        """Test duplicates, overbooking, ordering and double bookings are reported."""
        plan = AssignmentPlan(
            source_range_slot_ids=(1,),
            target_slots=(
                TargetSlot(id="b", start_minutes=490, capacity=1, assigned=(_member(1), _member(2))),
                TargetSlot(id="a", start_minutes=480, assigned=(_member(1),)),
                TargetSlot(id="c", start_minutes=480),
            ),
            unassigned_groups=(OccupantGroup(origin_slot_id=1, members=(_member(2),)),),
        )

        violations = find_invariant_violations(plan)

        assert "member 1 is placed in 2 slots" in violations
        assert "member 2 is both placed and unassigned" in violations
        assert "Slot 08:10 holds 2 but has capacity 1" in violations
        assert "Target slots are not sorted by start time" in violations
        assert "More than one target slot starts at 08:00" in violations
