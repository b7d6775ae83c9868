"""
Guidebook storage engine.

Validated construction of guides and points of interest, and the
repositories that persist them.
"""

from .domain.entities import (
    Coordinate,
    EntityOptions,
    Guide,
    PointOfInterest,
    coordinate_from_text,
    make_coordinate,
    new_guide,
    new_point_of_interest,
)
from .domain.exceptions import (
    EmptyNameException,
    EmptyValueException,
    EntityNotFoundException,
    GuidebookException,
    GuideNotFoundException,
    InvalidGuideReferenceException,
    NotANumberException,
    OutOfRangeException,
    PointOfInterestNotFoundException,
    StorageException,
    ValidationErrorCode,
    ValidationException,
)
from .repositories import IGuideRepository, MemoryGuideRepository, SQLiteGuideRepository

__version__ = "0.1.0"

__all__ = [
    "Coordinate",
    "EntityOptions",
    "Guide",
    "PointOfInterest",
    "coordinate_from_text",
    "make_coordinate",
    "new_guide",
    "new_point_of_interest",
    "EmptyNameException",
    "EmptyValueException",
    "EntityNotFoundException",
    "GuidebookException",
    "GuideNotFoundException",
    "InvalidGuideReferenceException",
    "NotANumberException",
    "OutOfRangeException",
    "PointOfInterestNotFoundException",
    "StorageException",
    "ValidationErrorCode",
    "ValidationException",
    "IGuideRepository",
    "MemoryGuideRepository",
    "SQLiteGuideRepository",
]
