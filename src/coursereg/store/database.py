"""Database connection manager for the entity store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from coursereg.store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Connection, Engine

# Execution option marking a connection that will write
IMMEDIATE = "immediate"


class Database:
    """Database connection manager.

    Manages SQLite database connections with WAL mode and foreign keys
    enabled. A connection tagged with the ``immediate`` execution option
    starts its transaction with ``BEGIN IMMEDIATE``, so a writer holds the
    database lock from its first read: a conflict check and the write that
    follows it cannot interleave with another writer. Every other
    transaction uses a deferred ``BEGIN`` and reads a WAL snapshot without
    taking the lock.
    """

    def __init__(self, db_path: str = "coursereg.db", busy_timeout: float = 5.0) -> None:
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for in-memory DB.
            busy_timeout: Seconds to wait for a competing writer's lock.
        """
        self.db_path = db_path
        self.busy_timeout = busy_timeout
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            # In-memory databases share one connection across threads (TestClient)
            if self.db_path == ":memory:":
                self._engine = create_engine(
                    "sqlite:///:memory:",
                    echo=False,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False, "timeout": self.busy_timeout},
                )
            else:
                self._engine = create_engine(
                    f"sqlite:///{self.db_path}",
                    echo=False,
                    connect_args={"check_same_thread": False, "timeout": self.busy_timeout},
                )

            @event.listens_for(self._engine, "connect")
            def set_sqlite_pragma(dbapi_connection: object, _connection_record: object) -> None:
                # Let SQLAlchemy emit BEGIN itself (see begin_transaction)
                dbapi_connection.isolation_level = None  # type: ignore[attr-defined]
                cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            @event.listens_for(self._engine, "begin")
            def begin_transaction(conn: Connection) -> None:
                if conn.get_execution_options().get(IMMEDIATE):
                    conn.exec_driver_sql("BEGIN IMMEDIATE")
                else:
                    conn.exec_driver_sql("BEGIN")

        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_tables(self) -> None:
        """Create all tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all tables. Use with caution!"""
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            A new SQLAlchemy session.
        """
        return self.session_factory()

    def is_wal_mode(self) -> bool:
        """Check if WAL mode is enabled.

        Returns:
            True if WAL mode is enabled.
        """
        with self.engine.connect() as conn:
            result = conn.execute(text("PRAGMA journal_mode"))
            mode = result.scalar()
            return mode == "wal"

    def close(self) -> None:
        """Close the database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
