"""EntityStore - transactional access to the entity tables."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from coursereg.store.database import IMMEDIATE, Database
from coursereg.store.exceptions import translate_integrity_error

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a listing plus the total number of matching rows."""

    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size


def page_offset(page: int, page_size: int) -> int:
    """Offset of a 1-based page."""
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    return (page - 1) * page_size


class EntityStore:
    """Main entry point for persistence.

    A store handle is created once and injected into every manager. Each
    manager operation runs inside one ``unit_of_work`` so validation,
    conflict checks and the write share a single transaction.
    """

    def __init__(self, db_path: str = "coursereg.db", busy_timeout: float = 5.0) -> None:
        """Initialize the store with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
            busy_timeout: Seconds to wait for a competing writer
        """
        self._db = Database(db_path, busy_timeout=busy_timeout)
        self._db.create_tables()

    @property
    def database(self) -> Database:
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        """Run a block inside one write transaction.

        Commits when the block exits normally and rolls back on any
        exception. Integrity failures, whether raised by a flush inside the
        block or by the final commit, surface as typed store errors.

        Yields:
            The transaction's session.
        """
        session = self._db.get_session()
        try:
            session.connection(execution_options={IMMEDIATE: True})
            yield session
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise translate_integrity_error(e) from e
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def reading(self) -> Iterator[Session]:
        """Run a read-only block on a snapshot; nothing is committed.

        The transaction is deferred, so it never waits for an open writer.
        """
        session = self._db.get_session()
        try:
            yield session
        finally:
            session.rollback()
            session.close()

    @staticmethod
    def flush(session: Session) -> None:
        """Flush pending writes, translating integrity failures."""
        try:
            session.flush()
        except IntegrityError as e:
            raise translate_integrity_error(e) from e

    @staticmethod
    def paginate(
        session: Session,
        stmt: Select[Any],
        page: int,
        page_size: int,
    ) -> tuple[list[Any], int]:
        """Run one page of a select plus a count of the unpaged result.

        Args:
            session: Open session
            stmt: Fully filtered and ordered select of one entity
            page: 1-based page number
            page_size: Maximum rows per page

        Returns:
            (rows on the page, total matching rows)
        """
        offset = page_offset(page, page_size)
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = session.execute(count_stmt).scalar_one()
        rows = session.execute(stmt.limit(page_size).offset(offset)).scalars().all()
        return list(rows), total
