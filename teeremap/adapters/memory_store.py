"""
In-memory tee sheet store.

Used by the tests and as the base of the JSON file store. Every change is
computed on a copy and swapped in as a whole, so a failing change leaves the
stored tee sheet untouched.
"""

import logging
from dataclasses import replace
from typing import List, Sequence

from ..domain.exceptions import ConcurrencyConflictError, InvalidRangeError
from ..domain.frost_delay import LATEST_START_MINUTES, MAX_DELAY_MINUTES, apply_frost_delay
from ..domain.models import SourceSlot, TargetSlot, Teesheet

logger = logging.getLogger(__name__)


def renumber_slots(slots: Sequence[SourceSlot]) -> List[SourceSlot]:
    """
    Sort slots by start time and renumber their sort order from zero.

    Slots whose start time does not parse keep their relative order at the end.
    """
    ordered = sorted(
        slots,
        key=lambda s: (s.start_minutes is None, s.start_minutes or 0),
    )
    return [replace(slot, sort_order=index) for index, slot in enumerate(ordered)]


def build_replacement(
    teesheet: Teesheet,
    range_slot_ids: Sequence[int],
    target_slots: Sequence[TargetSlot],
) -> Teesheet:
    """
    Compute the tee sheet after replacing a slot range.

    New slots get persistent ids above the current maximum and their
    occupants move with them. The result carries the next version.

    Raises:
        InvalidRangeError: If the ids are empty, unknown or not a contiguous run
    """
    if not range_slot_ids:
        raise InvalidRangeError("No slots given to replace")

    indices = [teesheet.index_of(slot_id) for slot_id in range_slot_ids]
    if any(index is None for index in indices):
        missing = [slot_id for slot_id, index in zip(range_slot_ids, indices) if index is None]
        raise InvalidRangeError(f"Unknown slot id(s): {missing}")

    start, end = min(indices), max(indices)
    if len(set(indices)) != len(indices) or end - start + 1 != len(indices):
        raise InvalidRangeError(f"Slots {list(range_slot_ids)} are not a contiguous range")

    next_id = max(slot.id for slot in teesheet.slots) + 1
    created: List[SourceSlot] = []

    for offset, target in enumerate(target_slots):
        slot_id = next_id + offset
        created.append(
            SourceSlot(
                id=slot_id,
                start_time=target.start_time,
                capacity=target.capacity,
                occupants=tuple(replace(o, origin_slot_id=slot_id) for o in target.assigned),
                display_name=target.display_name,
            )
        )

    slots = [*teesheet.slots[:start], *created, *teesheet.slots[end + 1:]]
    return replace(teesheet, version=teesheet.version + 1, slots=tuple(renumber_slots(slots)))


class InMemoryScheduleStore:
    """
    Schedule store that keeps a single tee sheet in memory.
    """

    def __init__(self, teesheet: Teesheet):
        self._teesheet = teesheet

    def load(self) -> Teesheet:
        """Return the current tee sheet snapshot."""
        return self._current()

    def replace_range(
        self,
        range_slot_ids: Sequence[int],
        target_slots: Sequence[TargetSlot],
        *,
        expected_version: int,
    ) -> Teesheet:
        """
        Atomically replace a slot range with new slots and their occupants.

        Args:
            range_slot_ids: Ids of the contiguous range to delete
            target_slots: Slots to insert, with their final assignments
            expected_version: Version of the snapshot the plan was built from

        Returns:
            The updated tee sheet

        Raises:
            ConcurrencyConflictError: If the tee sheet changed in the meantime
            InvalidRangeError: If the range is not valid for the current sheet
        """
        current = self._checked_current(expected_version)
        updated = build_replacement(current, range_slot_ids, target_slots)
        self._commit(updated)

        logger.info(
            "Replaced %d slot(s) with %d slot(s); tee sheet now at version %d",
            len(range_slot_ids), len(target_slots), updated.version,
        )
        return updated

    def shift_start_times(
        self,
        delay_minutes: int,
        *,
        expected_version: int,
        max_delay_minutes: int = MAX_DELAY_MINUTES,
        latest_start_minutes: int = LATEST_START_MINUTES,
    ) -> Teesheet:
        """Shift every slot of the tee sheet forward by ``delay_minutes``."""
        current = self._checked_current(expected_version)
        shifted = apply_frost_delay(
            current.slots,
            delay_minutes,
            max_delay_minutes=max_delay_minutes,
            latest_start_minutes=latest_start_minutes,
        )
        updated = replace(current, version=current.version + 1, slots=shifted)
        self._commit(updated)

        logger.info("Applied %d minute frost delay to %d slot(s)", delay_minutes, len(shifted))
        return updated

    def _checked_current(self, expected_version: int) -> Teesheet:
        current = self._current()
        if current.version != expected_version:
            raise ConcurrencyConflictError(
                f"Tee sheet changed (expected version {expected_version}, found {current.version})"
            )
        return current

    def _current(self) -> Teesheet:
        return self._teesheet

    def _commit(self, teesheet: Teesheet) -> None:
        self._teesheet = teesheet
