"""
Domain layer - Pure remapping logic without external dependencies.
"""

from .auto_mapper import AutoMapper, auto_map, build_groups
from .models import (
    AssignmentPlan,
    Fill,
    Guest,
    Member,
    Occupant,
    OccupantGroup,
    OccupantKind,
    SlotCapacity,
    SourceSlot,
    Strategy,
    TargetSlot,
    Teesheet,
    ValidationResult,
)
from .plan_validator import check_capacity, find_invariant_violations, validate
from .range_selector import SelectedRange, select_range
from .slot_generator import generate_slots, merge_slots
from .time_codec import format_time, parse_time, try_parse_time

__all__ = [
    "AssignmentPlan", "AutoMapper", "Fill", "Guest", "Member", "Occupant",
    "OccupantGroup", "OccupantKind", "SelectedRange", "SlotCapacity",
    "SourceSlot", "Strategy", "TargetSlot", "Teesheet", "ValidationResult",
    "auto_map", "build_groups", "check_capacity", "find_invariant_violations",
    "format_time", "generate_slots", "merge_slots", "parse_time",
    "select_range", "try_parse_time", "validate",
]
