"""
Service layer helpers that orchestrate the store and domain logic.
"""

from .plan_executor import PlanExecutor, ScheduleStore
from .remap_service import RangeSnapshot, RemapPreview, RemapResult, RemapService

__all__ = ["PlanExecutor", "RangeSnapshot", "RemapPreview", "RemapResult", "RemapService", "ScheduleStore"]
