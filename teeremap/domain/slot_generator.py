"""
Generation and manual editing of replacement slots.

Everything here is a pure list operation: the input lists are never modified
and no occupant is moved. Mapping occupants is always a separate step.
"""

from dataclasses import replace
from typing import Iterable, List, Sequence

from .models import DEFAULT_CAPACITY, TargetSlot
from .time_codec import MINUTES_PER_DAY, format_time

# Gap used when a slot is inserted at either end of the list
EDGE_INSERT_GAP_MINUTES = 7
EMPTY_LIST_INSERT_MINUTES = 8 * 60


def _sorted_slots(slots: Iterable[TargetSlot]) -> List[TargetSlot]:
    return sorted(slots, key=lambda s: (s.start_minutes, s.id))


def generate_slots(
    start_minutes: int,
    end_minutes: int,
    interval_a: int,
    interval_b: int | None = None,
    capacity: int = DEFAULT_CAPACITY,
) -> List[TargetSlot]:
    """
    Generate empty slots from ``start_minutes`` up to and including ``end_minutes``.

    With ``interval_b`` the step alternates ``a, b, a, b, ...``, which gives
    the familiar 6-7-6-7 tee sheet cadence.

    Example:
        generate_slots(480, 510, 6, 7) -> 08:00, 08:06, 08:13, 08:19, 08:26

    Args:
        start_minutes: Time of the first slot
        end_minutes: Last time a slot may start at
        interval_a: First (or only) step in minutes
        interval_b: Optional alternating second step in minutes
        capacity: Capacity of every generated slot

    Returns:
        Ascending list of slots with ids ``gen-<minutes>``

    Raises:
        ValueError: If an interval is not a positive integer
    """
    for name, value in (("interval_a", interval_a), ("interval_b", interval_b)):
        if value is not None and (not isinstance(value, int) or value <= 0):
            raise ValueError(f"{name} must be a positive number of minutes, got {value!r}")

    slots: List[TargetSlot] = []
    current = start_minutes
    use_first_interval = True
    last_minute = min(end_minutes, MINUTES_PER_DAY - 1)

    while current <= last_minute:
        slots.append(
            TargetSlot(id=f"gen-{current}", start_minutes=current, capacity=capacity)
        )

        if interval_b is not None:
            current += interval_a if use_first_interval else interval_b
            use_first_interval = not use_first_interval
        else:
            current += interval_a

    return slots


def merge_slots(
    existing: Sequence[TargetSlot],
    generated: Sequence[TargetSlot],
) -> List[TargetSlot]:
    """
    Merge generated slots into an existing working set.

    Existing slots always win: a generated slot is only added when no
    existing slot starts at the same time. The result is sorted by start time.
    """
    taken = {slot.start_minutes for slot in existing}
    merged = list(existing)

    for slot in generated:
        if slot.start_minutes in taken:
            continue
        merged.append(slot)
        taken.add(slot.start_minutes)

    return _sorted_slots(merged)


def add_slot(
    slots: Sequence[TargetSlot],
    start_minutes: int,
    capacity: int = DEFAULT_CAPACITY,
) -> List[TargetSlot]:
    """Add a manually authored slot, keeping the list sorted."""
    if any(slot.start_minutes == start_minutes for slot in slots):
        raise ValueError(f"A slot already starts at {format_time(start_minutes)}")

    custom = TargetSlot(id=f"custom-{start_minutes}", start_minutes=start_minutes, capacity=capacity)
    return _sorted_slots([*slots, custom])


def insert_slot(
    slots: Sequence[TargetSlot],
    index: int,
    capacity: int = DEFAULT_CAPACITY,
) -> List[TargetSlot]:
    """
    Insert a slot in front of position ``index``.

    The new time is the midpoint of the neighbours, 7 minutes after the
    previous slot at the end of the list, 7 minutes before the next slot at
    the start, and 08:00 for an empty list.

    Raises:
        ValueError: If the index is out of bounds, the computed time leaves
            the day, or a slot already starts at that time
    """
    if not 0 <= index <= len(slots):
        raise ValueError(f"Insert position {index} out of range for {len(slots)} slot(s)")

    previous_slot = slots[index - 1] if index > 0 else None
    next_slot = slots[index] if index < len(slots) else None

    if previous_slot and next_slot:
        new_minutes = (previous_slot.start_minutes + next_slot.start_minutes) // 2
    elif previous_slot:
        new_minutes = previous_slot.start_minutes + EDGE_INSERT_GAP_MINUTES
    elif next_slot:
        new_minutes = max(0, next_slot.start_minutes - EDGE_INSERT_GAP_MINUTES)
    else:
        new_minutes = EMPTY_LIST_INSERT_MINUTES

    if new_minutes >= MINUTES_PER_DAY:
        raise ValueError("Cannot insert a slot past the end of the day")
    if any(slot.start_minutes == new_minutes for slot in slots):
        raise ValueError(f"No free minute to insert a slot at position {index}")

    inserted = TargetSlot(id=f"insert-{new_minutes}", start_minutes=new_minutes, capacity=capacity)
    updated = list(slots)
    updated.insert(index, inserted)
    return updated


def remove_slot(slots: Sequence[TargetSlot], slot_id: str) -> List[TargetSlot]:
    """Remove a slot by id. Unknown ids leave the list unchanged."""
    return [slot for slot in slots if slot.id != slot_id]


def clear_assignments(slots: Sequence[TargetSlot]) -> List[TargetSlot]:
    """Return the same slots with every assignment removed."""
    return [replace(slot, assigned=()) for slot in slots]
