"""
Guide repository interface (Abstract Base Class).

Defines the contract for guide and point-of-interest persistence
independent of the underlying storage mechanism.

Lookups signal absence by returning None; only genuine backing-store
failures raise StorageException. Writes that target a missing entity
raise a NotFound exception.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..domain.entities import Guide, PointOfInterest


class IGuideRepository(ABC):
    """
    Abstract repository interface for guides and their points of interest.

    Entities passed to ``create_*`` are updated in place with the id
    assigned by the store. Entities returned by reads are copies.
    """

    @abstractmethod
    def create_guide(self, guide: Guide) -> Guide:
        """
        Persist a new guide and assign its id.

        Args:
            guide: Validated guide that has not been persisted yet

        Returns:
            The same guide, with ``id`` set

        Raises:
            StorageException: If the store rejects the row or fails
        """
        pass

    @abstractmethod
    def get_guide_by_id(self, guide_id: int) -> Optional[Guide]:
        """
        Find a guide by id.

        Returns:
            Guide if found, None otherwise
        """
        pass

    @abstractmethod
    def update_guide(self, guide: Guide) -> None:
        """
        Overwrite name, description and coordinate of an existing guide.

        Raises:
            GuideNotFoundException: If no guide has ``guide.id``
            StorageException: If the store fails
        """
        pass

    @abstractmethod
    def delete_guide(self, guide_id: int) -> None:
        """
        Delete a guide together with its points of interest.

        Deleting an id that does not exist is not an error.
        """
        pass

    @abstractmethod
    def get_all_guides(self) -> List[Guide]:
        """
        Get every guide, ordered by id.

        Returns:
            List of guides; empty only when there are none
        """
        pass

    @abstractmethod
    def search(self, prefix: str) -> List[Guide]:
        """
        Find guides whose name starts with ``prefix``.

        Matching is case-sensitive; an empty prefix matches every guide.
        """
        pass

    @abstractmethod
    def count_guides(self) -> int:
        """Return the number of stored guides."""
        pass

    @abstractmethod
    def create_poi(self, poi: PointOfInterest) -> PointOfInterest:
        """
        Persist a new point of interest under an existing guide.

        Raises:
            StorageException / GuideNotFoundException: If ``poi.guide_id``
                does not reference a stored guide
        """
        pass

    @abstractmethod
    def get_poi(self, guide_id: int, poi_id: int) -> Optional[PointOfInterest]:
        """
        Find a point of interest under a guide.

        Returns:
            PointOfInterest if found under that guide, None otherwise
        """
        pass

    @abstractmethod
    def update_poi(self, poi: PointOfInterest) -> None:
        """
        Overwrite name, description and coordinate of an existing POI.

        The owning guide never changes.

        Raises:
            PointOfInterestNotFoundException: If no POI has ``poi.id``
                under ``poi.guide_id``
        """
        pass

    @abstractmethod
    def delete_poi(self, guide_id: int, poi_id: int) -> None:
        """Delete a point of interest; a missing id is not an error."""
        pass

    @abstractmethod
    def get_all_pois(self, guide_id: int) -> List[PointOfInterest]:
        """Get every point of interest under a guide, ordered by id."""
        pass

    @abstractmethod
    def count_pois(self, guide_id: int) -> int:
        """Return the number of points of interest under a guide."""
        pass

    def close(self) -> None:
        """Release resources held by the repository."""

    def __enter__(self) -> "IGuideRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
