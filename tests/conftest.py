"""
Test configuration and fixtures
"""

import pytest

from guidebook.config import Settings
from guidebook.database import Database
from guidebook.repositories.memory_repository import MemoryGuideRepository
from guidebook.repositories.sqlite_repository import SQLiteGuideRepository


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a fresh database file"""
    return Settings(DATABASE_PATH=str(tmp_path / "guides.db"))


@pytest.fixture
def database(settings):
    """Open database, closed after the test"""
    db = Database(settings=settings).open()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def sqlite_repo(database):
    """SQLite repository on a temporary file"""
    return SQLiteGuideRepository(database)


@pytest.fixture
def memory_repo():
    """In-memory repository"""
    return MemoryGuideRepository()


@pytest.fixture(params=["memory", "sqlite"])
def repository(request):
    """Every repository implementation, so contract tests run against both"""
    return request.getfixturevalue(f"{request.param}_repo")
