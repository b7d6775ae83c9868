"""
Repository layer - Data access abstractions.

Implements the repository pattern for guide and point-of-interest
persistence, decoupling the domain from the storage backend.
"""

from .guide_repository import IGuideRepository
from .memory_repository import MemoryGuideRepository
from .sqlite_repository import SQLiteGuideRepository

__all__ = ["IGuideRepository", "MemoryGuideRepository", "SQLiteGuideRepository"]
