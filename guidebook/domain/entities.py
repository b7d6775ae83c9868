"""
Domain entities for guides and points of interest.

Core business objects representing places and the locations catalogued
under them. These entities are framework-agnostic; the constructors in this
module are the only place where user input is validated.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from .exceptions import (
    EmptyNameException,
    EmptyValueException,
    InvalidGuideReferenceException,
    NotANumberException,
    OutOfRangeException,
)

# Earth bounds in degrees
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0


@dataclass(frozen=True)
class Coordinate:
    """
    Value object for a latitude/longitude pair.

    Immutable and validated on creation, so an out-of-range
    Coordinate can never exist.
    """

    latitude: float
    longitude: float

    def __post_init__(self):
        """Validate bounds on creation."""
        # NaN fails both comparisons and is rejected here
        if not MIN_LATITUDE <= self.latitude <= MAX_LATITUDE:
            raise OutOfRangeException(
                "latitude", self.latitude, MIN_LATITUDE, MAX_LATITUDE
            )
        if not MIN_LONGITUDE <= self.longitude <= MAX_LONGITUDE:
            raise OutOfRangeException(
                "longitude", self.longitude, MIN_LONGITUDE, MAX_LONGITUDE
            )


ORIGIN = Coordinate(0.0, 0.0)


def make_coordinate(latitude: float, longitude: float) -> Coordinate:
    """
    Build a Coordinate from numeric values.

    Raises:
        OutOfRangeException: If latitude is outside [-90, 90] or
            longitude is outside [-180, 180]
    """
    return Coordinate(latitude=float(latitude), longitude=float(longitude))


def _parse_degrees(field_name: str, text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise NotANumberException(field_name, text) from None
    if math.isnan(value):
        raise NotANumberException(field_name, text)
    return value


def coordinate_from_text(latitude: str, longitude: str) -> Coordinate:
    """
    Build a Coordinate from form input.

    Checks run in a fixed order so the first message a user sees is stable:
    empty latitude, empty longitude, unparsable latitude, unparsable
    longitude, then the numeric range checks.

    Args:
        latitude: Latitude as typed by the user
        longitude: Longitude as typed by the user

    Returns:
        Validated Coordinate

    Raises:
        EmptyValueException: If either field is empty or whitespace
        NotANumberException: If either field does not parse as a number
        OutOfRangeException: If the parsed values are outside Earth bounds
    """
    latitude = (latitude or "").strip()
    longitude = (longitude or "").strip()

    if not latitude:
        raise EmptyValueException("latitude")
    if not longitude:
        raise EmptyValueException("longitude")

    lat = _parse_degrees("latitude", latitude)
    lon = _parse_degrees("longitude", longitude)
    return make_coordinate(lat, lon)


@dataclass(frozen=True)
class EntityOptions:
    """
    Optional attributes for building a Guide or PointOfInterest.

    Each field is independent so callers can combine a description with
    either coordinate source. The ``with_*`` helpers return new copies.
    Coordinate sources are validated when the entity is built, not here.
    """

    description: Optional[str] = None
    coordinates: Optional[Tuple[float, float]] = None
    coordinate_text: Optional[Tuple[str, str]] = None

    def with_description(self, description: str) -> "EntityOptions":
        return replace(self, description=description)

    def with_coordinates(self, latitude: float, longitude: float) -> "EntityOptions":
        return replace(self, coordinates=(latitude, longitude))

    def with_coordinate_text(self, latitude: str, longitude: str) -> "EntityOptions":
        return replace(self, coordinate_text=(latitude, longitude))


def _apply_options(
    options: Optional[EntityOptions],
) -> Tuple[Optional[str], Coordinate]:
    """
    Resolve options into (description, coordinate).

    Applied in order: description, numeric coordinates, text coordinates.
    The first invalid option raises; a text coordinate wins over a numeric one.
    """
    description = None
    coordinate = ORIGIN
    if options is None:
        return description, coordinate

    if options.description is not None:
        description = options.description
    if options.coordinates is not None:
        coordinate = make_coordinate(*options.coordinates)
    if options.coordinate_text is not None:
        coordinate = coordinate_from_text(*options.coordinate_text)
    return description, coordinate


@dataclass
class Guide:
    """
    Aggregate root for a catalogued place.

    Points of interest are owned by reference (their guide_id) and are
    loaded through the repository, never embedded here.
    An id of 0 means the guide has not been persisted yet.
    """

    name: str
    coordinate: Coordinate = field(default=ORIGIN)
    description: Optional[str] = None
    id: int = 0

    @property
    def is_persisted(self) -> bool:
        return self.id > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "latitude": self.coordinate.latitude,
            "longitude": self.coordinate.longitude,
        }


@dataclass
class PointOfInterest:
    """
    A named location belonging to exactly one Guide.

    ``guide_id`` is fixed once assigned; re-pointing a POI at another
    guide raises AttributeError.
    """

    name: str
    guide_id: int
    coordinate: Coordinate = field(default=ORIGIN)
    description: Optional[str] = None
    id: int = 0

    def __setattr__(self, name, value):
        if name == "guide_id" and getattr(self, "guide_id", 0):
            if value != self.guide_id:
                raise AttributeError("guide_id cannot change once assigned")
        super().__setattr__(name, value)

    @property
    def is_persisted(self) -> bool:
        return self.id > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "guide_id": self.guide_id,
            "name": self.name,
            "description": self.description,
            "latitude": self.coordinate.latitude,
            "longitude": self.coordinate.longitude,
        }


def new_guide(name: str, options: Optional[EntityOptions] = None) -> Guide:
    """
    Build a validated, not yet persisted Guide.

    Args:
        name: Guide name (must not be empty)
        options: Optional description and coordinate source

    Returns:
        Transient Guide (id 0)

    Raises:
        EmptyNameException: If name is empty
        ValidationException: If a coordinate option is invalid
    """
    if not name:
        raise EmptyNameException("guide")
    description, coordinate = _apply_options(options)
    return Guide(name=name, coordinate=coordinate, description=description)


def new_point_of_interest(
    name: str, guide_id: int, options: Optional[EntityOptions] = None
) -> PointOfInterest:
    """
    Build a validated, not yet persisted PointOfInterest.

    Args:
        name: POI name (must not be empty)
        guide_id: Id of the owning guide (must be positive)
        options: Optional description and coordinate source

    Raises:
        EmptyNameException: If name is empty
        InvalidGuideReferenceException: If guide_id is not a positive integer
        ValidationException: If a coordinate option is invalid
    """
    if not name:
        raise EmptyNameException("point of interest")
    if isinstance(guide_id, bool) or not isinstance(guide_id, int) or guide_id <= 0:
        raise InvalidGuideReferenceException(guide_id)
    description, coordinate = _apply_options(options)
    return PointOfInterest(
        name=name, guide_id=guide_id, coordinate=coordinate, description=description
    )
