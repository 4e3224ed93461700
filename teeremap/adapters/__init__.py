"""
Adapters layer - Tee sheet storage.
"""

from .json_store import JsonScheduleStore
from .memory_store import InMemoryScheduleStore

__all__ = ["JsonScheduleStore", "InMemoryScheduleStore"]
