"""
Tests for the SQLite repository.

Behaviour that only the relational store has: constraint enforcement,
error translation, durability across handles and schema details.
"""

import sqlite3
import threading
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from guidebook.config import Settings
from guidebook.database import Database
from guidebook.domain.entities import (
    Coordinate,
    Guide,
    PointOfInterest,
    new_guide,
    new_point_of_interest,
)
from guidebook.domain.exceptions import StorageException
from guidebook.repositories.sqlite_repository import SQLiteGuideRepository


class TestSQLiteRepository:
    """SQLite-only behaviour."""

    def test_initialization_opens_database(self, settings):
        """Test repository opens a closed database."""
        db = Database(settings=settings)
        repo = SQLiteGuideRepository(db)
        try:
            assert db.is_open
            assert repo.owns_database is False
        finally:
            db.close()

    def test_open_with_empty_path_fails(self):
        """Test an empty database path is rejected."""
        with pytest.raises(StorageException, match="path cannot be empty"):
            SQLiteGuideRepository.open("")

    def test_open_owns_database(self, tmp_path, settings):
        """Test repositories opened by path close their database."""
        repo = SQLiteGuideRepository.open(str(tmp_path / "owned.db"), settings)
        assert repo.owns_database

        repo.close()

        assert not repo.database.is_open

    def test_data_survives_reopen(self, tmp_path, settings):
        """Test guides are durable across handles."""
        path = str(tmp_path / "durable.db")
        with SQLiteGuideRepository.open(path, settings) as repo:
            guide = repo.create_guide(new_guide("Tuscany"))
            repo.create_poi(new_point_of_interest("Uffizi", guide.id))

        with SQLiteGuideRepository.open(path, settings) as repo:
            assert repo.get_guide_by_id(guide.id).name == "Tuscany"
            assert [p.name for p in repo.get_all_pois(guide.id)] == ["Uffizi"]

    def test_foreign_key_violation_is_storage_error(self, sqlite_repo):
        """Test POI under a missing guide surfaces the FK failure."""
        with pytest.raises(StorageException, match="FOREIGN KEY"):
            sqlite_repo.create_poi(new_point_of_interest("Cafeología", 1))

    def test_empty_name_check_constraint(self, sqlite_repo):
        """Test the schema rejects empty names when the constructor is bypassed."""
        with pytest.raises(StorageException, match="CHECK"):
            sqlite_repo.create_guide(Guide(name=""))

    def test_empty_name_on_update_rejected(self, sqlite_repo):
        """Test the schema rejects clearing a name on update."""
        guide = sqlite_repo.create_guide(new_guide("Tuscany"))
        guide.name = ""

        with pytest.raises(StorageException):
            sqlite_repo.update_guide(guide)
        assert sqlite_repo.get_guide_by_id(guide.id).name == "Tuscany"

    def test_failed_create_leaves_store_usable(self, sqlite_repo):
        """Test a rolled back transaction does not poison the handle."""
        with pytest.raises(StorageException):
            sqlite_repo.create_poi(new_point_of_interest("Cafeología", 5))

        guide = sqlite_repo.create_guide(new_guide("San Cristobal"))
        assert sqlite_repo.get_guide_by_id(guide.id) is not None

    def test_create_persisted_poi_rejected(self, sqlite_repo):
        """Test a POI cannot be created twice."""
        guide = sqlite_repo.create_guide(new_guide("Tuscany"))
        poi = sqlite_repo.create_poi(new_point_of_interest("Uffizi", guide.id))
        with pytest.raises(StorageException):
            sqlite_repo.create_poi(poi)

    def test_search_non_ascii_prefix(self, sqlite_repo):
        """Test prefix compares characters, not bytes."""
        sqlite_repo.create_guide(new_guide("Ñuñoa"))
        sqlite_repo.create_guide(new_guide("Nunoa"))

        assert [g.name for g in sqlite_repo.search("Ñu")] == ["Ñuñoa"]

    def test_search_treats_wildcards_literally(self, sqlite_repo):
        """Test LIKE wildcards in the prefix are not special."""
        sqlite_repo.create_guide(new_guide("100% Tuscany"))
        sqlite_repo.create_guide(new_guide("1000 Islands"))

        assert [g.name for g in sqlite_repo.search("100%")] == ["100% Tuscany"]
        assert sqlite_repo.search("_") == []

    def test_read_failure_is_storage_error(self, sqlite_repo):
        """Test query failures are raised, not reported as empty results."""
        with patch.object(
            sqlite_repo.database,
            "session_scope",
            side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
        ):
            with pytest.raises(StorageException, match="database is locked"):
                sqlite_repo.get_all_guides()

    def test_closed_database_raises(self, settings):
        """Test operations after close fail with StorageException."""
        repo = SQLiteGuideRepository.open(settings=settings)
        repo.close()

        with pytest.raises(StorageException, match="not open"):
            repo.get_all_guides()

    def test_close_does_not_close_shared_database(self, database):
        """Test repositories built on a shared database leave it open."""
        repo = SQLiteGuideRepository(database)
        repo.close()
        assert database.is_open


class TestEntityMapping:
    """Row to entity mapping."""

    def test_to_guide(self):
        """Test guide row mapping."""
        record = MagicMock(
            id=3, latitude=1.5, longitude=2.5, description=None
        )
        record.name = "Verona"

        guide = SQLiteGuideRepository._to_guide(record)

        assert guide == Guide(name="Verona", coordinate=Coordinate(1.5, 2.5), id=3)

    def test_to_poi(self):
        """Test POI row mapping."""
        record = MagicMock(
            id=4, guide_id=3, latitude=1.5, longitude=2.5, description="arena"
        )
        record.name = "Arena di Verona"

        poi = SQLiteGuideRepository._to_poi(record)

        assert poi == PointOfInterest(
            name="Arena di Verona",
            guide_id=3,
            coordinate=Coordinate(1.5, 2.5),
            description="arena",
            id=4,
        )


def test_settings_path_used_by_default(tmp_path):
    """Test the database path falls back to settings."""
    settings = Settings(DATABASE_PATH=str(tmp_path / "from_settings.db"))
    with SQLiteGuideRepository.open(settings=settings) as repo:
        repo.create_guide(new_guide("Tuscany"))

    assert (tmp_path / "from_settings.db").exists()


class TestConcurrency:
    """Shared handle under concurrent callers and write contention."""

    def test_concurrent_creates_get_unique_ids(self, settings):
        """Test writer threads sharing one handle never receive the same id."""
        threads_count = 4
        per_thread = 50
        ids = []
        errors = []
        ids_lock = threading.Lock()

        with SQLiteGuideRepository.open(settings=settings) as repo:

            def writer(worker):
                try:
                    for i in range(per_thread):
                        guide = repo.create_guide(new_guide(f"g{worker}-{i}"))
                        with ids_lock:
                            ids.append(guide.id)
                except Exception as e:  # collected and asserted below
                    errors.append(e)

            def stray_poi_writer():
                for _ in range(per_thread):
                    try:
                        repo.create_poi(new_point_of_interest("stray", 10_000))
                    except StorageException:
                        pass

            workers = [
                threading.Thread(target=writer, args=(n,)) for n in range(threads_count)
            ]
            workers.append(threading.Thread(target=stray_poi_writer))
            for t in workers:
                t.start()
            for t in workers:
                t.join()

            assert errors == []
            assert len(ids) == threads_count * per_thread
            assert len(set(ids)) == len(ids)
            assert repo.count_guides() == threads_count * per_thread
            assert repo.count_pois(10_000) == 0

    def test_writer_blocked_past_busy_timeout(self, tmp_path):
        """Test a writer locked out longer than the busy timeout gets StorageException."""
        path = str(tmp_path / "locked.db")
        settings = Settings(DATABASE_PATH=path, BUSY_TIMEOUT_MS=200)

        with SQLiteGuideRepository.open(settings=settings) as repo:
            blocker = sqlite3.connect(path, isolation_level=None)
            try:
                blocker.execute("BEGIN IMMEDIATE")
                with pytest.raises(StorageException, match="database is locked"):
                    repo.create_guide(new_guide("Tuscany"))
            finally:
                blocker.execute("ROLLBACK")
                blocker.close()

            guide = repo.create_guide(new_guide("Tuscany"))
            assert guide.id > 0
            assert repo.count_guides() == 1

    def test_failed_statements_do_not_leak_timings(self, sqlite_repo, database):
        """Test statements that raise leave no start time behind."""
        for _ in range(5):
            with pytest.raises(StorageException):
                sqlite_repo.create_poi(new_point_of_interest("Cafeología", 404))

        with database.engine.connect() as conn:
            assert conn.info.get("query_start_time", []) == []
