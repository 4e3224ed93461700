"""
Selection of the contiguous slot range that is going to be replaced.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from .exceptions import InvalidRangeError
from .models import Occupant, SourceSlot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectedRange:
    """
    A contiguous run of source slots together with their occupants.
    """
    slots: Tuple[SourceSlot, ...]

    @property
    def slot_ids(self) -> Tuple[int, ...]:
        return tuple(slot.id for slot in self.slots)

    @property
    def occupants(self) -> List[Occupant]:
        """All occupants of the range: slot by slot, members, guests, fills."""
        return [occupant for slot in self.slots for occupant in slot.occupants]

    @property
    def total_capacity(self) -> int:
        return sum(slot.capacity for slot in self.slots)

    @property
    def first_start_minutes(self) -> int | None:
        return self.slots[0].start_minutes if self.slots else None

    @property
    def last_start_minutes(self) -> int | None:
        return self.slots[-1].start_minutes if self.slots else None

    def origin_minutes(self) -> Dict[int, int | None]:
        """
        Map each slot id of the range to its start minutes.

        Unparseable start times map to None, never to a placeholder number.
        """
        origins: Dict[int, int | None] = {}
        for slot in self.slots:
            minutes = slot.start_minutes
            if minutes is None:
                logger.warning("Slot %s has an unparseable start time %r", slot.id, slot.start_time)
            origins[slot.id] = minutes
        return origins


def select_range(
    slots: Sequence[SourceSlot],
    start_slot_id: int,
    end_slot_id: int,
) -> SelectedRange:
    """
    Select the slots from ``start_slot_id`` to ``end_slot_id`` inclusive.

    ``slots`` must be in tee sheet order; the range follows that order.

    Raises:
        InvalidRangeError: If either id is unknown or the start comes after the end
    """
    ids = [slot.id for slot in slots]

    try:
        start_index = ids.index(start_slot_id)
        end_index = ids.index(end_slot_id)
    except ValueError as exc:
        raise InvalidRangeError(
            f"Unknown slot in range {start_slot_id}..{end_slot_id}"
        ) from exc

    if start_index > end_index:
        raise InvalidRangeError(
            f"Range start {start_slot_id} comes after range end {end_slot_id}"
        )

    return SelectedRange(slots=tuple(slots[start_index:end_index + 1]))
