"""
Database models for the guidebook storage engine.

This module defines the SQLAlchemy ORM tables backing guides and their
points of interest. Name and coordinate rules from the domain layer are
mirrored as CHECK constraints so the database rejects invalid rows even
when the domain constructors were bypassed.
"""

from typing import Any

from sqlalchemy import CheckConstraint, Column, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import declarative_base

Base: Any = declarative_base()


class GuideRecord(Base):
    """
    Guide table row.

    Attributes:
        id: Primary key, assigned by SQLite and never reused (AUTOINCREMENT)
        name: Guide name, never empty
        description: Optional free text
        latitude: Latitude in degrees, [-90, 90]
        longitude: Longitude in degrees, [-180, 180]
    """

    __tablename__ = "guide"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    __table_args__ = (
        CheckConstraint("name <> ''", name="ck_guide_name_not_empty"),
        CheckConstraint("latitude BETWEEN -90 AND 90", name="ck_guide_latitude"),
        CheckConstraint("longitude BETWEEN -180 AND 180", name="ck_guide_longitude"),
        {"sqlite_autoincrement": True},
    )


class PoiRecord(Base):
    """
    Point of interest table row.

    Attributes:
        id: Primary key, assigned by SQLite and never reused (AUTOINCREMENT)
        name: POI name, never empty
        description: Optional free text
        latitude: Latitude in degrees, [-90, 90]
        longitude: Longitude in degrees, [-180, 180]
        guide_id: Owning guide (column ``guideId``), removed with its guide
    """

    __tablename__ = "poi"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    guide_id = Column(
        "guideId",
        Integer,
        ForeignKey("guide.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        CheckConstraint("name <> ''", name="ck_poi_name_not_empty"),
        CheckConstraint("latitude BETWEEN -90 AND 90", name="ck_poi_latitude"),
        CheckConstraint("longitude BETWEEN -180 AND 180", name="ck_poi_longitude"),
        {"sqlite_autoincrement": True},
    )
