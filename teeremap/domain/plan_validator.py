"""
Feasibility and consistency checks for assignment plans.
"""

from collections import Counter
from typing import List, Sequence

from .models import AssignmentPlan, TargetSlot, ValidationResult


def check_capacity(occupant_count: int, targets: Sequence[TargetSlot]) -> ValidationResult:
    """
    Compare total demand with the total capacity of ``targets``.

    Usable before any mapping happened, e.g. while slots are still being
    generated.
    """
    total_capacity = sum(slot.capacity for slot in targets)
    return ValidationResult(
        total_occupants=occupant_count,
        total_capacity=total_capacity,
        overflow=occupant_count > total_capacity,
    )


def validate(plan: AssignmentPlan) -> ValidationResult:
    """
    Report whether the plan's slots can hold everyone in the range.

    Overflow means total demand exceeds total capacity. It is advisory:
    the caller decides whether to add capacity, add slots or abort.
    """
    return check_capacity(plan.total_occupants, plan.target_slots)


def find_invariant_violations(plan: AssignmentPlan) -> List[str]:
    """
    Check the structural invariants of a plan.

    Returns:
        Human readable descriptions of every violation (empty if valid)
    """
    violations: List[str] = []

    seen = Counter(occupant.key for occupant in plan.assigned_occupants)
    for (kind, occupant_id), count in sorted(seen.items(), key=lambda item: (item[0][0].value, item[0][1])):
        if count > 1:
            violations.append(f"{kind.value} {occupant_id} is placed in {count} slots")

    for occupant in plan.unassigned_occupants:
        if occupant.key in seen:
            violations.append(
                f"{occupant.kind.value} {occupant.id} is both placed and unassigned"
            )

    for slot in plan.target_slots:
        if slot.slot_capacity.is_over:
            violations.append(
                f"Slot {slot.start_time} holds {len(slot.assigned)} but has capacity {slot.capacity}"
            )

    starts = [slot.start_minutes for slot in plan.target_slots]
    if starts != sorted(starts):
        violations.append("Target slots are not sorted by start time")
    duplicates = sorted(minutes for minutes, count in Counter(starts).items() if count > 1)
    for minutes in duplicates:
        violations.append(f"More than one target slot starts at {plan.target_slots[starts.index(minutes)].start_time}")

    return violations
