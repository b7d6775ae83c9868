"""
Database configuration and connection management.

Owns the single SQLite handle shared by every storage operation. The handle
is opened and closed explicitly; connection-level settings (journal mode,
busy timeout, foreign keys) are applied once per connection on open.
"""

import logging
import re
import threading
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings, get_settings
from .domain.exceptions import StorageException
from .models import Base

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

PRAGMA_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def get_database_url(path: str) -> str:
    """
    Build a SQLAlchemy URL for a SQLite database path.

    Args:
        path: Filesystem path, or ``:memory:`` for a private in-memory database

    Returns:
        SQLAlchemy connection URL
    """
    if path == MEMORY_PATH:
        return "sqlite://"
    return f"sqlite:///{path}"


class Database:
    """
    Lifecycle wrapper around the SQLite engine.

    One instance owns one connection (StaticPool). Every repository call goes
    through that handle, and a lock lets exactly one transaction use it at a
    time, so callers on different threads never interleave on the connection.

    Usage:
        with Database("guides.db") as db:
            with db.session_scope() as session:
                ...
    """

    def __init__(self, path: Optional[str] = None, settings: Optional[Settings] = None):
        """
        Initialize the database wrapper without connecting.

        Args:
            path: SQLite file path; defaults to ``Settings.DATABASE_PATH``
            settings: Settings to use; defaults to the process settings
        """
        self.settings = settings or get_settings()
        self.path = self.settings.DATABASE_PATH if path is None else path
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._lock = threading.RLock()

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self) -> "Database":
        """
        Connect, apply connection settings and create missing tables.

        Returns:
            self, for chaining

        Raises:
            StorageException: If the path is empty or the database cannot be opened
        """
        if not self.path:
            raise StorageException("open", "database path cannot be empty")
        if self.is_open:
            return self

        busy_timeout_ms = self.settings.BUSY_TIMEOUT_MS
        engine = create_engine(
            get_database_url(self.path),
            connect_args={
                "check_same_thread": False,
                "timeout": busy_timeout_ms / 1000,
            },
            poolclass=StaticPool,
            echo=False,
        )
        self._register_events(engine)

        try:
            Base.metadata.create_all(bind=engine, checkfirst=True)
        except SQLAlchemyError as e:
            engine.dispose()
            raise StorageException("open", str(e)) from e

        self.engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )
        logger.info(
            f"Opened database {self.path} (journal_mode={self.settings.JOURNAL_MODE}, "
            f"busy_timeout={busy_timeout_ms}ms, foreign_keys={self.settings.FOREIGN_KEYS})"
        )
        return self

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        with self._lock:
            if self.engine is None:
                return
            self.engine.dispose()
            self.engine = None
            self._session_factory = None
        logger.info(f"Closed database {self.path}")

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope around a series of operations.

        Commits on success, rolls back on any error and always closes.
        The shared connection is held for the whole scope.

        Raises:
            StorageException: If the database is not open
        """
        if self._session_factory is None:
            raise StorageException("session", "database is not open")

        with self._lock:
            session = self._session_factory()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def pragma(self, name: str) -> Any:
        """
        Read a SQLite PRAGMA value from the shared connection.

        Args:
            name: PRAGMA name, e.g. ``journal_mode``

        Raises:
            ValueError: If name is not a bare identifier
        """
        if not PRAGMA_NAME_PATTERN.match(name or ""):
            raise ValueError(f"Invalid PRAGMA name: {name!r}")
        if self.engine is None:
            raise StorageException("pragma", "database is not open")
        with self._lock, self.engine.connect() as conn:
            return conn.execute(text(f"PRAGMA {name}")).scalar()

    def _register_events(self, engine: Engine) -> None:
        settings = self.settings

        @event.listens_for(engine, "connect")
        def set_sqlite_pragmas(dbapi_connection, connection_record):
            """Apply connection settings; foreign_keys must be set outside a transaction."""
            cursor = dbapi_connection.cursor()
            cursor.execute(f"PRAGMA journal_mode={settings.JOURNAL_MODE}")
            cursor.execute(f"PRAGMA busy_timeout={settings.BUSY_TIMEOUT_MS}")
            cursor.execute(
                f"PRAGMA foreign_keys={'ON' if settings.FOREIGN_KEYS else 'OFF'}"
            )
            cursor.close()

        @event.listens_for(engine, "before_cursor_execute")
        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            """Track query start time."""
            conn.info.setdefault("query_start_time", []).append(time.perf_counter())

        @event.listens_for(engine, "after_cursor_execute")
        def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            """Log slow queries."""
            total_time_ms = (time.perf_counter() - conn.info["query_start_time"].pop()) * 1000

            if total_time_ms > settings.SLOW_QUERY_THRESHOLD_MS:
                logger.warning(
                    f"Slow query detected: {total_time_ms:.2f}ms",
                    extra={
                        "query_time_ms": total_time_ms,
                        "statement": statement[:200],
                        "parameters": str(parameters)[:100] if parameters else None,
                    },
                )

        @event.listens_for(engine, "handle_error")
        def handle_error(exception_context):
            """Drop the start time of a statement that raised."""
            conn = exception_context.connection
            if conn is not None:
                starts = conn.info.get("query_start_time")
                if starts:
                    starts.pop()
