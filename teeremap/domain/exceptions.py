"""
Domain-specific exception hierarchy for the remapping engine.
"""

from typing import List, Sequence


class RemapError(Exception):
    """Base class for all application-level errors."""


class TimeParseError(RemapError, ValueError):
    """Raised when a time-of-day string cannot be parsed."""

    def __init__(self, raw: object, reason: str = "Invalid time format"):
        self.raw = raw
        super().__init__(f"{reason}: {raw!r}")


class InvalidRangeError(RemapError):
    """Raised when a slot range does not exist or is not contiguous."""


class InvalidPlanError(RemapError):
    """Raised when a plan breaks a structural invariant and cannot be applied."""

    def __init__(self, violations: Sequence[str]):
        self.violations: List[str] = list(violations)
        super().__init__("Plan is invalid: " + "; ".join(self.violations))


class CapacityOverflowError(RemapError):
    """Raised when a remap is committed although demand exceeds capacity."""


class ConcurrencyConflictError(RemapError):
    """Raised when the tee sheet changed since the snapshot was read."""


class PersistenceError(RemapError):
    """Raised when the schedule store fails to apply a change."""


class FrostDelayError(RemapError):
    """Raised when a frost delay cannot be applied to the tee sheet."""


class ConfigError(RemapError):
    """Raised when the configuration file is unreadable or invalid."""
