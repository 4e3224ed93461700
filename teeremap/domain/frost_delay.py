"""
Frost delay: push the whole tee sheet back after a weather hold.
"""

from dataclasses import replace
from typing import Sequence, Tuple

from .exceptions import FrostDelayError
from .models import SourceSlot
from .time_codec import format_time, format_time_12h

MAX_DELAY_MINUTES = 180
LATEST_START_MINUTES = 20 * 60


def apply_frost_delay(
    slots: Sequence[SourceSlot],
    delay_minutes: int,
    max_delay_minutes: int = MAX_DELAY_MINUTES,
    latest_start_minutes: int = LATEST_START_MINUTES,
) -> Tuple[SourceSlot, ...]:
    """
    Shift every slot forward by ``delay_minutes``.

    Occupants, ids and sort order are kept; only start times change.

    Args:
        slots: The tee sheet's slots in sheet order
        delay_minutes: Minutes to shift by
        max_delay_minutes: Largest delay allowed
        latest_start_minutes: No slot may start later than this after the shift

    Returns:
        The shifted slots

    Raises:
        FrostDelayError: If the delay is out of range, a start time does not
            parse, or a slot would start after the latest start
    """
    if not 1 <= delay_minutes <= max_delay_minutes:
        raise FrostDelayError(f"Delay must be between 1 and {max_delay_minutes} minutes")
    if not slots:
        raise FrostDelayError("No slots found for this tee sheet")

    shifted = []
    for slot in slots:
        minutes = slot.start_minutes
        if minutes is None:
            raise FrostDelayError(f"Slot {slot.id} has an unparseable start time {slot.start_time!r}")

        new_minutes = minutes + delay_minutes
        if new_minutes > latest_start_minutes:
            raise FrostDelayError(
                f"Cannot apply {delay_minutes} minute delay - would push "
                f"{slot.start_time} past {format_time_12h(latest_start_minutes)}"
            )
        shifted.append(replace(slot, start_time=format_time(new_minutes)))

    return tuple(shifted)
