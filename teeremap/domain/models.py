"""
Domain models for tee sheet slots, occupants and remap plans.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import ClassVar, List, Tuple

from pendulum import Date

from .time_codec import MINUTES_PER_DAY, format_time, try_parse_time

DEFAULT_CAPACITY = 4


class OccupantKind(str, Enum):
    """Discriminant for the occupant variants."""
    MEMBER = "member"
    GUEST = "guest"
    FILL = "fill"


class Strategy(str, Enum):
    """How a target slot's proximity to the original tee time is weighed."""
    FORWARD_ONLY = "forward-only"
    EARLIEST_AVAILABLE = "earliest-available"


@dataclass(frozen=True)
class Occupant:
    """
    Someone (or something) holding a place in a slot.

    Use one of the concrete variants: ``Member``, ``Guest`` or ``Fill``.
    Ids are only unique per kind, so identity is ``(kind, id)``.
    """
    id: int
    display_name: str
    origin_slot_id: int

    kind: ClassVar[OccupantKind]

    @property
    def key(self) -> Tuple[OccupantKind, int]:
        """Identity of the occupant across kinds."""
        return (self.kind, self.id)


@dataclass(frozen=True)
class Member(Occupant):
    """A club member booked into a slot."""
    kind: ClassVar[OccupantKind] = OccupantKind.MEMBER


@dataclass(frozen=True)
class Guest(Occupant):
    """A guest, usually invited by a member."""
    inviting_occupant_id: int | None = None
    kind: ClassVar[OccupantKind] = OccupantKind.GUEST


@dataclass(frozen=True)
class Fill(Occupant):
    """A placeholder that blocks a place without naming a player."""
    fill_kind: str = "unknown"
    custom_label: str | None = None
    kind: ClassVar[OccupantKind] = OccupantKind.FILL

    @staticmethod
    def label_for(fill_kind: str | None, custom_label: str | None) -> str:
        """Display label for a fill: custom label, then fill kind, then "Fill"."""
        return custom_label or fill_kind or "Fill"


@dataclass(frozen=True)
class SlotCapacity:
    """
    Capacity bookkeeping for a single slot.

    Shared by the mapper, the validator and the CLI previews so that
    occupancy arithmetic lives in exactly one place.
    """
    capacity: int
    occupied: int = 0

    def __post_init__(self):
        if self.capacity < 0:
            raise ValueError(f"Capacity must not be negative, got {self.capacity}")
        if self.occupied < 0:
            raise ValueError(f"Occupied count must not be negative, got {self.occupied}")

    @property
    def remaining(self) -> int:
        return max(self.capacity - self.occupied, 0)

    @property
    def is_full(self) -> bool:
        return self.remaining == 0

    @property
    def is_over(self) -> bool:
        return self.occupied > self.capacity

    def can_fit(self, count: int) -> bool:
        """Check if ``count`` more occupants fit."""
        return count <= self.remaining

    def add(self, count: int) -> "SlotCapacity":
        """Return the capacity after placing ``count`` more occupants."""
        if not self.can_fit(count):
            raise ValueError(
                f"Cannot place {count} occupant(s), only {self.remaining} place(s) left"
            )
        return SlotCapacity(capacity=self.capacity, occupied=self.occupied + count)

    def __str__(self) -> str:
        return f"{self.occupied} / {self.capacity}"


@dataclass(frozen=True)
class SourceSlot:
    """
    An existing slot of the tee sheet, as read from storage.

    ``start_time`` keeps the stored text; ``start_minutes`` is None when that
    text cannot be parsed.
    """
    id: int
    start_time: str
    capacity: int = DEFAULT_CAPACITY
    occupants: Tuple[Occupant, ...] = ()
    display_name: str | None = None
    sort_order: int = 0

    def __post_init__(self):
        object.__setattr__(self, "occupants", tuple(self.occupants))

    @property
    def start_minutes(self) -> int | None:
        return try_parse_time(self.start_time)

    @property
    def slot_capacity(self) -> SlotCapacity:
        return SlotCapacity(capacity=self.capacity, occupied=len(self.occupants))


@dataclass(frozen=True)
class TargetSlot:
    """
    A proposed replacement slot.

    Ids are only stable within one plan (``gen-480``, ``custom-483`` ...);
    the store hands out persistent ids when the plan is committed.
    """
    id: str
    start_minutes: int
    capacity: int = DEFAULT_CAPACITY
    assigned: Tuple[Occupant, ...] = ()
    display_name: str | None = None

    def __post_init__(self):
        if not 0 <= self.start_minutes < MINUTES_PER_DAY:
            raise ValueError(f"Start minutes out of range: {self.start_minutes}")
        if self.capacity < 0:
            raise ValueError(f"Capacity must not be negative, got {self.capacity}")
        object.__setattr__(self, "assigned", tuple(self.assigned))

    @property
    def start_time(self) -> str:
        return format_time(self.start_minutes)

    @property
    def slot_capacity(self) -> SlotCapacity:
        return SlotCapacity(capacity=self.capacity, occupied=len(self.assigned))

    def with_assigned(self, occupants: Tuple[Occupant, ...]) -> "TargetSlot":
        """Return a copy of this slot holding ``occupants``."""
        return replace(self, assigned=tuple(occupants))


@dataclass(frozen=True)
class OccupantGroup:
    """The unit the mapper places atomically."""
    origin_slot_id: int
    members: Tuple[Occupant, ...]

    def __post_init__(self):
        object.__setattr__(self, "members", tuple(self.members))
        if not self.members:
            raise ValueError("An occupant group needs at least one member")

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class AssignmentPlan:
    """
    The proposed, not yet committed, replacement of a slot range.
    """
    source_range_slot_ids: Tuple[int, ...]
    target_slots: Tuple[TargetSlot, ...]
    unassigned_groups: Tuple[OccupantGroup, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "source_range_slot_ids", tuple(self.source_range_slot_ids))
        object.__setattr__(self, "target_slots", tuple(self.target_slots))
        object.__setattr__(self, "unassigned_groups", tuple(self.unassigned_groups))

    @property
    def assigned_occupants(self) -> List[Occupant]:
        return [occupant for slot in self.target_slots for occupant in slot.assigned]

    @property
    def unassigned_occupants(self) -> List[Occupant]:
        return [occupant for group in self.unassigned_groups for occupant in group.members]

    @property
    def total_occupants(self) -> int:
        """Total demand: placed plus unplaced occupants."""
        return len(self.assigned_occupants) + len(self.unassigned_occupants)

    @property
    def total_capacity(self) -> int:
        return sum(slot.capacity for slot in self.target_slots)

    def slot_for(self, occupant: Occupant) -> TargetSlot | None:
        """Find the target slot an occupant was placed in."""
        for slot in self.target_slots:
            if any(placed.key == occupant.key for placed in slot.assigned):
                return slot
        return None


@dataclass(frozen=True)
class ValidationResult:
    """Aggregate capacity feasibility of a plan."""
    total_occupants: int
    total_capacity: int
    overflow: bool

    @property
    def free_capacity(self) -> int:
        return self.total_capacity - self.total_occupants


@dataclass(frozen=True)
class Teesheet:
    """
    Snapshot of one day's tee sheet.

    ``version`` increases with every committed change and backs the
    optimistic concurrency check of the stores.
    """
    date: Date
    version: int = 0
    slots: Tuple[SourceSlot, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "slots", tuple(self.slots))

    def index_of(self, slot_id: int) -> int | None:
        """Position of a slot in the sheet, or None if unknown."""
        for index, slot in enumerate(self.slots):
            if slot.id == slot_id:
                return index
        return None

    @property
    def occupant_count(self) -> int:
        return sum(len(slot.occupants) for slot in self.slots)
