"""
Custom exceptions for the guidebook domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, database drivers, etc.).
"""

from enum import Enum
from typing import Any, Optional


class ValidationErrorCode(str, Enum):
    """Reasons an entity or coordinate can fail validation."""

    EMPTY_NAME = "empty_name"
    OUT_OF_RANGE = "out_of_range"
    NOT_A_NUMBER = "not_a_number"
    EMPTY = "empty"
    INVALID_GUIDE_REFERENCE = "invalid_guide_reference"


class GuidebookException(Exception):
    """Base exception for all guidebook errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(GuidebookException):
    """Raised when input validation fails before any storage interaction."""

    code: ValidationErrorCode

    def __init__(
        self,
        field: str,
        value: Any,
        reason: str,
        code: Optional[ValidationErrorCode] = None,
    ):
        if code is not None:
            self.code = code
        self.field = field
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={
                "field": field,
                "value": str(value),
                "reason": reason,
                "code": self.code.value if hasattr(self, "code") else None,
            },
        )


class EmptyNameException(ValidationException):
    """Raised when a guide or point of interest is given an empty name."""

    code = ValidationErrorCode.EMPTY_NAME

    def __init__(self, entity: str = "guide"):
        super().__init__("name", "", f"{entity} name cannot be empty")


class OutOfRangeException(ValidationException):
    """Raised when a latitude or longitude falls outside Earth bounds."""

    code = ValidationErrorCode.OUT_OF_RANGE

    def __init__(self, field: str, value: float, lower: float, upper: float):
        self.lower = lower
        self.upper = upper
        super().__init__(
            field, value, f"{field} has to be in the [{lower:g}, {upper:g}] range"
        )


class NotANumberException(ValidationException):
    """Raised when a coordinate given as text cannot be parsed."""

    code = ValidationErrorCode.NOT_A_NUMBER

    def __init__(self, field: str, value: str):
        super().__init__(field, value, f"{field} has to be a number")


class EmptyValueException(ValidationException):
    """Raised when a required text field arrives empty."""

    code = ValidationErrorCode.EMPTY

    def __init__(self, field: str):
        super().__init__(field, "", f"{field} cannot be empty")


class InvalidGuideReferenceException(ValidationException):
    """Raised when a point of interest is built without a valid guide id."""

    code = ValidationErrorCode.INVALID_GUIDE_REFERENCE

    def __init__(self, guide_id: Any):
        super().__init__("guide_id", guide_id, "guide id has to be a positive integer")


class StorageException(GuidebookException):
    """Raised when the backing store fails (I/O, constraints, lock timeouts)."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        self.operation = operation
        message = f"Storage {operation} failed"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message, details={"operation": operation, "reason": reason}
        )


class EntityNotFoundException(GuidebookException):
    """Raised when a write targets an entity that does not exist."""

    def __init__(self, entity: str, entity_id: Any, details: Optional[dict] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            message=f"{entity} not found: {entity_id}",
            details={"entity": entity, "id": entity_id, **(details or {})},
        )


class GuideNotFoundException(EntityNotFoundException):
    """Raised when a guide referenced by a write does not exist."""

    def __init__(self, guide_id: int):
        self.guide_id = guide_id
        super().__init__("guide", guide_id)


class PointOfInterestNotFoundException(EntityNotFoundException):
    """Raised when a point of interest targeted by an update does not exist."""

    def __init__(self, guide_id: int, poi_id: int):
        self.guide_id = guide_id
        self.poi_id = poi_id
        super().__init__("point of interest", poi_id, details={"guide_id": guide_id})
