"""
Application service for replacing a tee sheet range.

The service coordinates the store and the domain-level steps: select the
range, generate replacement slots, map occupants, validate and commit.
Previews are side-effect free and may be recomputed as often as needed;
only ``commit`` writes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from ..config import FrostDelayConfig, RemapDefaults
from ..domain.auto_mapper import auto_map, build_groups
from ..domain.exceptions import CapacityOverflowError, ConcurrencyConflictError, InvalidRangeError
from ..domain.models import AssignmentPlan, Strategy, TargetSlot, Teesheet, ValidationResult
from ..domain.plan_validator import validate
from ..domain.range_selector import SelectedRange, select_range
from ..domain.slot_generator import add_slot, generate_slots, merge_slots
from ..domain.time_codec import format_time, parse_time
from .plan_executor import PlanExecutor, ScheduleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RangeSnapshot:
    """A selected range and the tee sheet version it was read from."""
    version: int
    selected: SelectedRange


@dataclass(frozen=True)
class RemapPreview:
    """A computed plan with its capacity check, ready to be committed."""
    version: int
    plan: AssignmentPlan
    validation: ValidationResult

    @property
    def has_overflow(self) -> bool:
        return self.validation.overflow


@dataclass(frozen=True)
class RemapResult:
    """Outcome of a committed remap."""
    teesheet: Teesheet
    preview: RemapPreview
    attempts: int


class RemapService:
    """
    Orchestrates snapshot reads, plan computation and commits.
    """

    def __init__(
        self,
        store: ScheduleStore,
        defaults: RemapDefaults | None = None,
        frost_delay_config: FrostDelayConfig | None = None,
    ) -> None:
        self._store = store
        self._executor = PlanExecutor(store)
        self.defaults = defaults or RemapDefaults()
        self.frost_delay_config = frost_delay_config or FrostDelayConfig()

    def snapshot(self) -> Teesheet:
        """Read the current tee sheet."""
        return self._store.load()

    def select(self, start_slot_id: int, end_slot_id: int) -> RangeSnapshot:
        """Select a range from a fresh snapshot."""
        teesheet = self._store.load()
        selected = select_range(teesheet.slots, start_slot_id, end_slot_id)
        return RangeSnapshot(version=teesheet.version, selected=selected)

    def generate_targets(
        self,
        selected: SelectedRange,
        existing: Sequence[TargetSlot] = (),
        *,
        interval_a: int | None = None,
        interval_b: int | None = None,
        alternating: bool | None = None,
        capacity: int | None = None,
    ) -> List[TargetSlot]:
        """
        Generate slots from the first to the last start time of the range
        and merge them into ``existing``.

        Raises:
            TimeParseError: If the range's first or last start time is malformed
            InvalidRangeError: If the range is empty
        """
        if not selected.slots:
            raise InvalidRangeError("Cannot generate slots for an empty range")

        start = parse_time(selected.slots[0].start_time)
        end = parse_time(selected.slots[-1].start_time)

        interval_a = self.defaults.interval_a if interval_a is None else interval_a
        alternating = self.defaults.alternating if alternating is None else alternating
        if interval_b is None:
            interval_b = self.defaults.interval_b
        if capacity is None:
            capacity = self.defaults.capacity
        second_interval = interval_b if alternating else None

        generated = generate_slots(
            start,
            end,
            interval_a,
            second_interval,
            capacity=capacity,
        )
        logger.debug("Generated %d slot(s) from %s to %s", len(generated), format_time(start), format_time(end))
        return merge_slots(existing, generated)

    def custom_slots(self, start_minutes: Sequence[int], capacity: int | None = None) -> List[TargetSlot]:
        """Build manually authored slots for the given start times."""
        if capacity is None:
            capacity = self.defaults.capacity
        slots: List[TargetSlot] = []
        for minutes in start_minutes:
            slots = add_slot(slots, minutes, capacity=capacity)
        return slots

    def preview(
        self,
        snapshot: RangeSnapshot,
        targets: Sequence[TargetSlot],
        *,
        strategy: Strategy | None = None,
        keep_together: bool | None = None,
    ) -> RemapPreview:
        """Map the range's occupants onto ``targets`` and check capacity."""
        strategy = Strategy(strategy or self.defaults.strategy)
        keep_together = self.defaults.keep_together if keep_together is None else keep_together

        selected = snapshot.selected
        plan = auto_map(
            build_groups(selected.occupants, keep_together),
            targets,
            selected.origin_minutes(),
            strategy=strategy,
            keep_together=keep_together,
            source_range_slot_ids=selected.slot_ids,
        )
        return RemapPreview(version=snapshot.version, plan=plan, validation=validate(plan))

    def commit(self, preview: RemapPreview, *, allow_overflow: bool = False) -> Teesheet:
        """
        Persist a previewed plan.

        Raises:
            CapacityOverflowError: If demand exceeds capacity and overflow is not allowed
            ConcurrencyConflictError: If the tee sheet changed since the preview
        """
        if preview.has_overflow and not allow_overflow:
            raise CapacityOverflowError(
                f"{preview.validation.total_occupants} players need to be mapped but only "
                f"{preview.validation.total_capacity} places available"
            )
        if preview.plan.unassigned_groups:
            logger.warning(
                "Committing plan with %d unassigned occupant(s); they will be removed from the sheet",
                len(preview.plan.unassigned_occupants),
            )
        return self._executor.apply(preview.plan, preview.version)

    def remap(
        self,
        start_slot_id: int,
        end_slot_id: int,
        *,
        extra_start_minutes: Sequence[int] = (),
        strategy: Strategy | None = None,
        keep_together: bool | None = None,
        interval_a: int | None = None,
        interval_b: int | None = None,
        alternating: bool | None = None,
        capacity: int | None = None,
        allow_overflow: bool = False,
        max_attempts: int = 2,
    ) -> RemapResult:
        """
        Select, generate, map and commit in one go.

        A concurrency conflict discards the whole plan and recomputes it from
        a fresh snapshot, up to ``max_attempts`` times.
        """
        attempts = max(1, int(max_attempts or 1))

        for attempt in range(1, attempts + 1):
            snapshot = self.select(start_slot_id, end_slot_id)
            targets = self.generate_targets(
                snapshot.selected,
                self.custom_slots(extra_start_minutes, capacity=capacity),
                interval_a=interval_a,
                interval_b=interval_b,
                alternating=alternating,
                capacity=capacity,
            )
            preview = self.preview(snapshot, targets, strategy=strategy, keep_together=keep_together)

            try:
                teesheet = self.commit(preview, allow_overflow=allow_overflow)
            except ConcurrencyConflictError as exc:
                if attempt == attempts:
                    raise
                logger.warning("Attempt %d/%d: %s; recomputing plan", attempt, attempts, exc)
                continue

            return RemapResult(teesheet=teesheet, preview=preview, attempts=attempt)

    def frost_delay(self, delay_minutes: int) -> Teesheet:
        """Shift the whole tee sheet forward by ``delay_minutes``."""
        current = self._store.load()
        return self._store.shift_start_times(
            delay_minutes,
            expected_version=current.version,
            max_delay_minutes=self.frost_delay_config.max_delay_minutes,
            latest_start_minutes=self.frost_delay_config.latest_start_minutes,
        )
