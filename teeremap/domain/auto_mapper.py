"""
Core assignment of occupants to replacement slots.

This is the heart of the remap - pure domain logic without any external
dependencies (no storage, no I/O). Inputs are never modified; the plan is
built in one pass over a working copy of the target slots.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Sequence, Set, Tuple

from .models import (
    AssignmentPlan,
    Occupant,
    OccupantGroup,
    OccupantKind,
    SlotCapacity,
    Strategy,
    TargetSlot,
)
from .time_codec import format_time

logger = logging.getLogger(__name__)


def build_groups(occupants: Iterable[Occupant], keep_together: bool) -> List[OccupantGroup]:
    """
    Build the groups the mapper places atomically.

    With ``keep_together`` there is one group per origin slot, in the order
    the origin slots are first seen; otherwise every occupant is on its own.
    """
    if not keep_together:
        return [
            OccupantGroup(origin_slot_id=occupant.origin_slot_id, members=(occupant,))
            for occupant in occupants
        ]

    by_origin: Dict[int, List[Occupant]] = {}
    for occupant in occupants:
        by_origin.setdefault(occupant.origin_slot_id, []).append(occupant)

    return [
        OccupantGroup(origin_slot_id=origin_slot_id, members=tuple(members))
        for origin_slot_id, members in by_origin.items()
    ]


class AutoMapper:
    """
    Assigns occupant groups to target slots.

    Algorithm:
    1. Sort target slots by start time (working copy, inputs untouched)
    2. Visit groups by their original tee time, unknown times last
    3. Pick a slot with enough room according to the strategy
    4. Place the whole group there, or record it as unassigned

    Strategies:
    - ForwardOnly: nearest slot at or after the original time. If every slot
      with room is earlier, the latest such slot is used instead. Groups
      whose original time is unknown are never placed.
    - EarliestAvailable: earliest slot with room, original time ignored.
      Groups that fit nowhere stay unassigned.

    With keep-together, groups are rebuilt per origin slot whatever shape the
    caller passed. If some occupants of an origin already sit in a target slot,
    the rest join them there when it has room; otherwise the rest are placed
    by the strategy and the origin ends up in two slots.
    """

    def __init__(self, strategy: Strategy = Strategy.FORWARD_ONLY, keep_together: bool = True):
        self.strategy = Strategy(strategy)
        self.keep_together = keep_together

    def map(
        self,
        groups: Sequence[OccupantGroup],
        targets: Sequence[TargetSlot],
        origins: Mapping[int, int | None],
        source_range_slot_ids: Sequence[int] = (),
    ) -> AssignmentPlan:
        """
        Build an assignment plan.

        Args:
            groups: Occupant groups to place
            targets: Replacement slots; existing assignments are kept
            origins: Original start minutes per origin slot id (None if unknown)
            source_range_slot_ids: Ids of the slots being replaced

        Returns:
            AssignmentPlan with target slots sorted by start time
        """
        slots = sorted(targets, key=lambda s: (s.start_minutes, s.id))
        placed: List[List[Occupant]] = [list(slot.assigned) for slot in slots]
        capacities: List[SlotCapacity] = [slot.slot_capacity for slot in slots]
        already_placed = {occupant.key for slot in slots for occupant in slot.assigned}
        anchors = self._anchor_slots(slots)

        unassigned: List[OccupantGroup] = []

        for group in self._ordered_groups(self._prepare_groups(groups, already_placed), origins):
            anchor = anchors.get(group.origin_slot_id)
            if anchor is not None and capacities[anchor].can_fit(group.size):
                index = anchor
            else:
                index = self._find_best_slot(group.size, origins.get(group.origin_slot_id), slots, capacities)

            if index is None:
                unassigned.append(group)
                continue

            placed[index].extend(group.members)
            capacities[index] = capacities[index].add(group.size)
            logger.debug(
                "Placed %d occupant(s) from slot %s into %s",
                group.size, group.origin_slot_id, slots[index].start_time,
            )

        if unassigned:
            logger.warning(
                "%d group(s) with %d occupant(s) could not be placed",
                len(unassigned), sum(group.size for group in unassigned),
            )

        return AssignmentPlan(
            source_range_slot_ids=tuple(source_range_slot_ids),
            target_slots=tuple(
                slot.with_assigned(tuple(occupants)) for slot, occupants in zip(slots, placed)
            ),
            unassigned_groups=tuple(unassigned),
        )

    def _prepare_groups(
        self,
        groups: Sequence[OccupantGroup],
        already_placed: Set[Tuple[OccupantKind, int]],
    ) -> List[OccupantGroup]:
        """
        Drop occupants that already sit in a target slot, then regroup the
        rest: one group per origin slot when kept together, singletons
        otherwise.
        """
        remaining = [
            member
            for group in groups
            for member in group.members
            if member.key not in already_placed
        ]
        return build_groups(remaining, self.keep_together)

    def _anchor_slots(self, slots: List[TargetSlot]) -> Dict[int, int]:
        """Map origin slot ids to the first target slot already holding one of their occupants."""
        if not self.keep_together:
            return {}

        anchors: Dict[int, int] = {}
        for index, slot in enumerate(slots):
            for occupant in slot.assigned:
                anchors.setdefault(occupant.origin_slot_id, index)
        return anchors

    @staticmethod
    def _ordered_groups(
        groups: List[OccupantGroup],
        origins: Mapping[int, int | None],
    ) -> List[OccupantGroup]:
        """
        Order groups by original time. Groups without a known time go last,
        ordered by origin slot id. The sort is stable for equal times.
        """
        def sort_key(group: OccupantGroup) -> Tuple[int, int]:
            minutes = origins.get(group.origin_slot_id)
            if minutes is None:
                return (1, group.origin_slot_id)
            return (0, minutes)

        return sorted(groups, key=sort_key)

    def _find_best_slot(
        self,
        size: int,
        origin: int | None,
        slots: List[TargetSlot],
        capacities: List[SlotCapacity],
    ) -> int | None:
        """
        Return the index of the slot to use for a group, or None.
        """
        eligible = [index for index, capacity in enumerate(capacities) if capacity.can_fit(size)]

        if self.strategy is Strategy.EARLIEST_AVAILABLE:
            return eligible[0] if eligible else None

        if origin is None:
            logger.warning("Skipping group of %d: original tee time is unknown", size)
            return None

        best_index: int | None = None
        best_distance: int | None = None
        for index in eligible:
            start = slots[index].start_minutes
            if start < origin:
                continue
            distance = start - origin
            if best_distance is None or distance < best_distance:
                best_index = index
                best_distance = distance

        if best_index is not None:
            return best_index

        # Every slot with room is earlier than the original time
        if eligible:
            fallback = eligible[-1]
            logger.info(
                "No slot at or after %s has room for %d; falling back to %s",
                format_time(origin), size, slots[fallback].start_time,
            )
            return fallback

        return None


def auto_map(
    groups: Sequence[OccupantGroup],
    targets: Sequence[TargetSlot],
    origins: Mapping[int, int | None],
    strategy: Strategy = Strategy.FORWARD_ONLY,
    keep_together: bool = True,
    source_range_slot_ids: Sequence[int] = (),
) -> AssignmentPlan:
    """Convenience wrapper around ``AutoMapper.map``."""
    mapper = AutoMapper(strategy=strategy, keep_together=keep_together)
    return mapper.map(groups, targets, origins, source_range_slot_ids=source_range_slot_ids)
