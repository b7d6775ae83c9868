"""
In-memory implementation of the guide repository.

Reference store used for tests and for running without a database file.
Honors the same contract as the SQLite store: ids are never reused,
lookups return None on absence and deleting a guide removes its POIs.
"""

import itertools
import threading
from dataclasses import replace
from typing import Dict, List, Optional

import structlog

from ..domain.entities import Guide, PointOfInterest
from ..domain.exceptions import (
    GuideNotFoundException,
    PointOfInterestNotFoundException,
    StorageException,
)
from .guide_repository import IGuideRepository

logger = structlog.get_logger(__name__)


class MemoryGuideRepository(IGuideRepository):
    """
    Dictionary-backed repository.

    Attributes:
        guides: Stored guides keyed by id
        pois: Stored points of interest keyed by id
    """

    def __init__(self):
        self.guides: Dict[int, Guide] = {}
        self.pois: Dict[int, PointOfInterest] = {}
        self._guide_ids = itertools.count(1)
        self._poi_ids = itertools.count(1)
        self._lock = threading.RLock()

    def create_guide(self, guide: Guide) -> Guide:
        self._check_insertable("create_guide", guide)
        with self._lock:
            guide.id = next(self._guide_ids)
            self.guides[guide.id] = replace(guide)
        logger.debug("guide created", guide_id=guide.id)
        return guide

    def get_guide_by_id(self, guide_id: int) -> Optional[Guide]:
        with self._lock:
            stored = self.guides.get(guide_id)
            return replace(stored) if stored else None

    def update_guide(self, guide: Guide) -> None:
        with self._lock:
            if guide.id not in self.guides:
                raise GuideNotFoundException(guide.id)
            self._check_name("update_guide", guide.name)
            self.guides[guide.id] = replace(guide)
        logger.debug("guide updated", guide_id=guide.id)

    def delete_guide(self, guide_id: int) -> None:
        with self._lock:
            if self.guides.pop(guide_id, None) is None:
                return
            orphaned = [pid for pid, p in self.pois.items() if p.guide_id == guide_id]
            for pid in orphaned:
                del self.pois[pid]
        logger.debug("guide deleted", guide_id=guide_id, pois_deleted=len(orphaned))

    def get_all_guides(self) -> List[Guide]:
        with self._lock:
            return [replace(g) for _, g in sorted(self.guides.items())]

    def search(self, prefix: str) -> List[Guide]:
        with self._lock:
            return [
                replace(g)
                for _, g in sorted(self.guides.items())
                if g.name.startswith(prefix)
            ]

    def count_guides(self) -> int:
        with self._lock:
            return len(self.guides)

    def create_poi(self, poi: PointOfInterest) -> PointOfInterest:
        self._check_insertable("create_poi", poi)
        with self._lock:
            if poi.guide_id not in self.guides:
                raise GuideNotFoundException(poi.guide_id)
            poi.id = next(self._poi_ids)
            self.pois[poi.id] = replace(poi)
        logger.debug("poi created", guide_id=poi.guide_id, poi_id=poi.id)
        return poi

    def get_poi(self, guide_id: int, poi_id: int) -> Optional[PointOfInterest]:
        with self._lock:
            stored = self.pois.get(poi_id)
            if stored is None or stored.guide_id != guide_id:
                return None
            return replace(stored)

    def update_poi(self, poi: PointOfInterest) -> None:
        with self._lock:
            stored = self.pois.get(poi.id)
            if stored is None or stored.guide_id != poi.guide_id:
                raise PointOfInterestNotFoundException(poi.guide_id, poi.id)
            self._check_name("update_poi", poi.name)
            self.pois[poi.id] = replace(poi)
        logger.debug("poi updated", guide_id=poi.guide_id, poi_id=poi.id)

    def delete_poi(self, guide_id: int, poi_id: int) -> None:
        with self._lock:
            stored = self.pois.get(poi_id)
            if stored is not None and stored.guide_id == guide_id:
                del self.pois[poi_id]

    def get_all_pois(self, guide_id: int) -> List[PointOfInterest]:
        with self._lock:
            return [
                replace(p)
                for _, p in sorted(self.pois.items())
                if p.guide_id == guide_id
            ]

    def count_pois(self, guide_id: int) -> int:
        with self._lock:
            return sum(1 for p in self.pois.values() if p.guide_id == guide_id)

    def _check_insertable(self, operation: str, entity) -> None:
        """Mirror the relational store: no re-insert, no empty names."""
        if entity.id:
            raise StorageException(operation, f"entity already persisted with id {entity.id}")
        self._check_name(operation, entity.name)

    @staticmethod
    def _check_name(operation: str, name: str) -> None:
        if not name:
            raise StorageException(operation, "name cannot be empty")
