"""
Committing assignment plans to a schedule store.

The executor is the only writer of durable state. It refuses plans that
break an invariant and turns unexpected store failures into
``PersistenceError`` so callers deal with one error type.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

from ..domain.exceptions import InvalidPlanError, PersistenceError, RemapError
from ..domain.models import AssignmentPlan, TargetSlot, Teesheet
from ..domain.plan_validator import find_invariant_violations

logger = logging.getLogger(__name__)


class ScheduleStore(Protocol):
    """Protocol describing the storage behaviour needed by the services."""

    def load(self) -> Teesheet:
        """Return the current tee sheet snapshot."""

    def replace_range(
        self,
        range_slot_ids: Sequence[int],
        target_slots: Sequence[TargetSlot],
        *,
        expected_version: int,
    ) -> Teesheet:
        """Atomically replace a slot range; all or nothing."""

    def shift_start_times(
        self,
        delay_minutes: int,
        *,
        expected_version: int,
        max_delay_minutes: int = ...,
        latest_start_minutes: int = ...,
    ) -> Teesheet:
        """Shift every slot forward; all or nothing."""


class PlanExecutor:
    """
    Applies a plan to a schedule store in a single atomic call.
    """

    def __init__(self, store: ScheduleStore) -> None:
        self._store = store

    def apply(self, plan: AssignmentPlan, expected_version: int) -> Teesheet:
        """
        Replace the plan's source range with its target slots.

        Args:
            plan: The plan to commit
            expected_version: Version of the snapshot the plan was built from

        Returns:
            The updated tee sheet

        Raises:
            InvalidPlanError: If the plan violates an invariant
            ConcurrencyConflictError: If the snapshot is stale
            InvalidRangeError: If the source range no longer fits the sheet
            PersistenceError: If the store failed; the sheet is unchanged
        """
        violations = find_invariant_violations(plan)
        if violations:
            raise InvalidPlanError(violations)

        try:
            return self._store.replace_range(
                plan.source_range_slot_ids,
                plan.target_slots,
                expected_version=expected_version,
            )
        except RemapError:
            raise
        except Exception as exc:
            logger.error("Store failed to apply plan: %s", exc)
            raise PersistenceError(f"Failed to replace time slots: {exc}") from exc
