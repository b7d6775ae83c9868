"""
SQLite implementation of the guide repository.

Persists guides and points of interest through SQLAlchemy. Referential
integrity, non-empty names and coordinate bounds are enforced by the
schema; any backing-store failure surfaces as StorageException.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

import structlog
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings
from ..database import Database
from ..domain.entities import Coordinate, Guide, PointOfInterest
from ..domain.exceptions import (
    GuideNotFoundException,
    PointOfInterestNotFoundException,
    StorageException,
)
from ..models import GuideRecord, PoiRecord
from .guide_repository import IGuideRepository

logger = structlog.get_logger(__name__)


class SQLiteGuideRepository(IGuideRepository):
    """SQLite implementation for guide and point-of-interest persistence."""

    def __init__(self, database: Database, owns_database: bool = False):
        """
        Initialize repository.

        Args:
            database: Database wrapper; opened here if it is not open yet
            owns_database: Close the database when the repository is closed
        """
        self.database = database.open()
        self.owns_database = owns_database

    @classmethod
    def open(
        cls, path: Optional[str] = None, settings: Optional[Settings] = None
    ) -> "SQLiteGuideRepository":
        """
        Open a repository backed by its own database handle.

        Args:
            path: SQLite file path; defaults to ``Settings.DATABASE_PATH``
            settings: Settings to use; defaults to the process settings

        Raises:
            StorageException: If the path is empty or cannot be opened
        """
        return cls(Database(path, settings), owns_database=True)

    def close(self) -> None:
        if self.owns_database:
            self.database.close()

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        """Run one transaction, translating driver errors to StorageException."""
        try:
            with self.database.session_scope() as session:
                yield session
        except SQLAlchemyError as e:
            reason = str(getattr(e, "orig", None) or e)
            raise StorageException(operation, reason) from e

    # Guides

    def create_guide(self, guide: Guide) -> Guide:
        if guide.id:
            raise StorageException(
                "create_guide", f"guide already persisted with id {guide.id}"
            )
        with self._session("create_guide") as session:
            record = GuideRecord(
                name=guide.name,
                description=guide.description,
                latitude=guide.coordinate.latitude,
                longitude=guide.coordinate.longitude,
            )
            session.add(record)
            session.flush()

        guide.id = record.id
        logger.debug("guide created", guide_id=guide.id)
        return guide

    def get_guide_by_id(self, guide_id: int) -> Optional[Guide]:
        with self._session("get_guide_by_id") as session:
            record = session.get(GuideRecord, guide_id)
            return self._to_guide(record) if record else None

    def update_guide(self, guide: Guide) -> None:
        with self._session("update_guide") as session:
            updated = (
                session.query(GuideRecord)
                .filter(GuideRecord.id == guide.id)
                .update(
                    {
                        GuideRecord.name: guide.name,
                        GuideRecord.description: guide.description,
                        GuideRecord.latitude: guide.coordinate.latitude,
                        GuideRecord.longitude: guide.coordinate.longitude,
                    },
                    synchronize_session=False,
                )
            )
            if updated == 0:
                raise GuideNotFoundException(guide.id)
        logger.debug("guide updated", guide_id=guide.id)

    def delete_guide(self, guide_id: int) -> None:
        with self._session("delete_guide") as session:
            # Explicit so the cascade holds even with foreign keys disabled
            pois_deleted = (
                session.query(PoiRecord)
                .filter(PoiRecord.guide_id == guide_id)
                .delete(synchronize_session=False)
            )
            deleted = (
                session.query(GuideRecord)
                .filter(GuideRecord.id == guide_id)
                .delete(synchronize_session=False)
            )
        if deleted:
            logger.debug("guide deleted", guide_id=guide_id, pois_deleted=pois_deleted)

    def get_all_guides(self) -> List[Guide]:
        with self._session("get_all_guides") as session:
            records = session.query(GuideRecord).order_by(GuideRecord.id).all()
            return [self._to_guide(r) for r in records]

    def search(self, prefix: str) -> List[Guide]:
        with self._session("search") as session:
            query = session.query(GuideRecord)
            if prefix:
                # LIKE is case-insensitive in SQLite; compare the leading characters
                query = query.filter(
                    func.substr(GuideRecord.name, 1, len(prefix)) == prefix
                )
            records = query.order_by(GuideRecord.id).all()
            return [self._to_guide(r) for r in records]

    def count_guides(self) -> int:
        with self._session("count_guides") as session:
            return session.query(func.count(GuideRecord.id)).scalar() or 0

    # Points of interest

    def create_poi(self, poi: PointOfInterest) -> PointOfInterest:
        if poi.id:
            raise StorageException(
                "create_poi", f"point of interest already persisted with id {poi.id}"
            )
        with self._session("create_poi") as session:
            record = PoiRecord(
                name=poi.name,
                description=poi.description,
                latitude=poi.coordinate.latitude,
                longitude=poi.coordinate.longitude,
                guide_id=poi.guide_id,
            )
            session.add(record)
            session.flush()

        poi.id = record.id
        logger.debug("poi created", guide_id=poi.guide_id, poi_id=poi.id)
        return poi

    def get_poi(self, guide_id: int, poi_id: int) -> Optional[PointOfInterest]:
        with self._session("get_poi") as session:
            record = (
                session.query(PoiRecord)
                .filter(PoiRecord.id == poi_id, PoiRecord.guide_id == guide_id)
                .first()
            )
            return self._to_poi(record) if record else None

    def update_poi(self, poi: PointOfInterest) -> None:
        with self._session("update_poi") as session:
            updated = (
                session.query(PoiRecord)
                .filter(PoiRecord.id == poi.id, PoiRecord.guide_id == poi.guide_id)
                .update(
                    {
                        PoiRecord.name: poi.name,
                        PoiRecord.description: poi.description,
                        PoiRecord.latitude: poi.coordinate.latitude,
                        PoiRecord.longitude: poi.coordinate.longitude,
                    },
                    synchronize_session=False,
                )
            )
            if updated == 0:
                raise PointOfInterestNotFoundException(poi.guide_id, poi.id)
        logger.debug("poi updated", guide_id=poi.guide_id, poi_id=poi.id)

    def delete_poi(self, guide_id: int, poi_id: int) -> None:
        with self._session("delete_poi") as session:
            session.query(PoiRecord).filter(
                PoiRecord.id == poi_id, PoiRecord.guide_id == guide_id
            ).delete(synchronize_session=False)

    def get_all_pois(self, guide_id: int) -> List[PointOfInterest]:
        with self._session("get_all_pois") as session:
            records = (
                session.query(PoiRecord)
                .filter(PoiRecord.guide_id == guide_id)
                .order_by(PoiRecord.id)
                .all()
            )
            return [self._to_poi(r) for r in records]

    def count_pois(self, guide_id: int) -> int:
        with self._session("count_pois") as session:
            return (
                session.query(func.count(PoiRecord.id))
                .filter(PoiRecord.guide_id == guide_id)
                .scalar()
                or 0
            )

    @staticmethod
    def _to_guide(record: GuideRecord) -> Guide:
        """Map database row to domain entity."""
        return Guide(
            id=record.id,
            name=record.name,
            description=record.description,
            coordinate=Coordinate(record.latitude, record.longitude),
        )

    @staticmethod
    def _to_poi(record: PoiRecord) -> PointOfInterest:
        """Map database row to domain entity."""
        return PointOfInterest(
            id=record.id,
            guide_id=record.guide_id,
            name=record.name,
            description=record.description,
            coordinate=Coordinate(record.latitude, record.longitude),
        )
