"""Fetch-result store: the engine's only source of state."""

from .models import FetchOutcome, ModuleUnit
from .base import FetchResultStore
from .memory import MemoryStore
from .sqlite import SQLiteStore

__all__ = [
    "FetchOutcome",
    "ModuleUnit",
    "FetchResultStore",
    "MemoryStore",
    "SQLiteStore",
]
