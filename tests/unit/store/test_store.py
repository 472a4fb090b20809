"""Unit tests for EntityStore transactions and error translation."""

import sqlite3
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from coursereg.store import (
    Course,
    EntityStore,
    ForeignKeyViolation,
    Inscription,
    InscriptionStatus,
    Page,
    StoreError,
    UniqueViolation,
    page_offset,
)
from coursereg.store.exceptions import translate_integrity_error


def _integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, sqlite3.IntegrityError(message))


def _course(short_code: str = "GIS-101") -> Course:
    return Course(
        name="GIS",
        short_code=short_code,
        description="",
        modality="online",
        price=Decimal("10.00"),
        start_date=date(2030, 1, 1),
        end_date=date(2030, 2, 1),
    )


@pytest.mark.unit
class TestPagination:
    """Tests for page arithmetic."""

    def test_page_offset(self) -> None:
        assert page_offset(1, 10) == 0
        assert page_offset(3, 25) == 50

    def test_page_offset_rejects_page_zero(self) -> None:
        with pytest.raises(ValueError):
            page_offset(0, 10)

    def test_page_offset_rejects_empty_page(self) -> None:
        with pytest.raises(ValueError):
            page_offset(1, 0)

    def test_total_pages_rounds_up(self) -> None:
        assert Page(items=[], total=21, page=1, page_size=10).total_pages == 3
        assert Page(items=[], total=0, page=1, page_size=10).total_pages == 0


@pytest.mark.unit
class TestTranslateIntegrityError:
    """Tests for driver error translation."""

    def test_single_column_unique(self) -> None:
        error = translate_integrity_error(
            _integrity_error("UNIQUE constraint failed: invoices.invoice_number")
        )

        assert isinstance(error, UniqueViolation)
        assert error.table == "invoices"
        assert error.fields == ("invoice_number",)

    def test_composite_unique(self) -> None:
        error = translate_integrity_error(
            _integrity_error(
                "UNIQUE constraint failed: inscriptions.course_id, inscriptions.person_id"
            )
        )

        assert isinstance(error, UniqueViolation)
        assert error.fields == ("course_id", "person_id")
        assert error.covers("person_id")
        assert not error.covers("voucher_id")

    def test_foreign_key(self) -> None:
        error = translate_integrity_error(_integrity_error("FOREIGN KEY constraint failed"))

        assert isinstance(error, ForeignKeyViolation)

    def test_other_integrity_failure(self) -> None:
        error = translate_integrity_error(
            _integrity_error("NOT NULL constraint failed: courses.name")
        )

        assert type(error) is StoreError


@pytest.mark.unit
class TestUnitOfWork:
    """Tests for unit_of_work commit and rollback."""

    def test_commits_on_success(self, store: EntityStore) -> None:
        with store.unit_of_work() as session:
            session.add(_course())

        with store.reading() as session:
            assert session.execute(select(Course.short_code)).scalar_one() == "GIS-101"

    def test_rolls_back_on_error(self, store: EntityStore) -> None:
        with pytest.raises(RuntimeError), store.unit_of_work() as session:
            session.add(_course())
            store.flush(session)
            raise RuntimeError("abort")

        with store.reading() as session:
            assert session.execute(select(Course)).first() is None

    def test_unique_violation_on_commit(self, store: EntityStore) -> None:
        with store.unit_of_work() as session:
            session.add(_course())

        with pytest.raises(UniqueViolation) as exc_info, store.unit_of_work() as session:
            session.add(_course())

        assert exc_info.value.table == "courses"
        assert exc_info.value.fields == ("short_code",)

    def test_flush_translates_violation(self, store: EntityStore) -> None:
        with pytest.raises(UniqueViolation), store.unit_of_work() as session:
            session.add(_course("DUP"))
            session.add(_course("DUP"))
            store.flush(session)

    def test_foreign_keys_enforced(self, store: EntityStore) -> None:
        with pytest.raises(ForeignKeyViolation), store.unit_of_work() as session:
            session.add(Inscription(course_id=99, person_id=99, billing_id=99, voucher_id=1))

    def test_wal_mode_for_file_database(self, tmp_path) -> None:
        file_store = EntityStore(str(tmp_path / "store.db"))
        try:
            assert file_store.database.is_wal_mode()
        finally:
            file_store.close()


@pytest.mark.unit
class TestInscriptionModel:
    """Tests for the Inscription model's derived status."""

    def test_status_follows_enrolled_flag(self) -> None:
        pending = Inscription(course_id=1, person_id=1, billing_id=1, voucher_id=1)
        enrolled = Inscription(course_id=1, person_id=1, billing_id=1, voucher_id=2, enrolled=True)

        assert pending.status == InscriptionStatus.PENDING
        assert enrolled.status == InscriptionStatus.ENROLLED
