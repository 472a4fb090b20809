"""CourseCatalog - courses and their external platform mappings."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select

from coursereg.audit import AuditEventType, AuditTrail
from coursereg.errors import EntityKind, ValidationError, classified
from coursereg.registry.models import (
    CourseIntegrationView,
    CourseUpdate,
    CourseView,
    IntegrationUpdate,
    apply_changes,
    check_page,
    ordering,
    reject_nulls,
    supplied,
    to_money,
)
from coursereg.store import (
    Course,
    CourseIntegration,
    EntityStore,
    Inscription,
    Modality,
    Page,
    UniqueViolation,
)
from coursereg.validation import ConflictGuard, ReferenceValidator, conflict_from

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

COURSE_ORDER_FIELDS = ("id", "name", "short_code", "start_date", "price")
_COURSE_NULLABLE = frozenset({"payment_link"})


def _check_modality(modality: str) -> str:
    try:
        return Modality(modality).value
    except ValueError as e:
        allowed = ", ".join(m.value for m in Modality)
        raise ValidationError(f"Invalid modality {modality!r}; expected one of {allowed}") from e


def _check_dates(start_date: date, end_date: date) -> None:
    if start_date >= end_date:
        raise ValidationError("Course start date must be before its end date")


class CourseCatalog:
    """Course administration.

    Courses referenced by inscriptions cannot be deleted; their financial
    history would be lost.
    """

    def __init__(self, store: EntityStore, audit: AuditTrail | None = None) -> None:
        self._store = store
        self._audit = audit if audit is not None else AuditTrail()

    # --- Course Operations ---

    def create_course(
        self,
        name: str,
        short_code: str,
        modality: str,
        price: Decimal | str | int,
        start_date: date,
        end_date: date,
        description: str = "",
        payment_link: str | None = None,
    ) -> CourseView:
        """Create a course.

        Raises:
            ValidationError: Bad modality, negative price or start >= end
            ConflictError: If the short code is taken
        """
        modality = _check_modality(modality)
        amount = to_money(price, "price")
        _check_dates(start_date, end_date)

        with classified("creating the course"):
            try:
                with self._store.unit_of_work() as session:
                    ConflictGuard(session).check_course_code(short_code)
                    course = Course(
                        name=name,
                        short_code=short_code,
                        description=description,
                        modality=modality,
                        price=amount,
                        payment_link=payment_link,
                        start_date=start_date,
                        end_date=end_date,
                    )
                    session.add(course)
                    self._store.flush(session)
                    view = CourseView.from_model(course)
            except UniqueViolation as e:
                raise conflict_from(e, {"short_code": short_code}) from e

        logger.info("Course %s created (%s)", view.id, view.short_code)
        return view

    def get_course(self, course_id: int) -> CourseView:
        """Get course by ID.

        Raises:
            NotFoundError: If course doesn't exist
        """
        with classified("reading the course"), self._store.reading() as session:
            course = ReferenceValidator(session).require(EntityKind.COURSE, course_id)
            return CourseView.from_model(course)

    def list_courses(
        self,
        page: int = 1,
        page_size: int = 10,
        order_by: str = "id",
        order: str = "asc",
    ) -> Page[CourseView]:
        """List courses one page at a time."""
        check_page(page, page_size)
        clause = ordering(Course, COURSE_ORDER_FIELDS, order_by, order)

        with classified("listing courses"), self._store.reading() as session:
            stmt = select(Course).order_by(clause, Course.id)
            rows, total = self._store.paginate(session, stmt, page, page_size)
            return Page(
                items=[CourseView.from_model(c) for c in rows],
                total=total,
                page=page,
                page_size=page_size,
            )

    def list_available_courses(self, today: date | None = None) -> list[CourseView]:
        """Courses that have not started yet, soonest first."""
        today = today if today is not None else date.today()
        with classified("listing available courses"), self._store.reading() as session:
            stmt = select(Course).where(Course.start_date >= today).order_by(Course.start_date)
            return [CourseView.from_model(c) for c in session.execute(stmt).scalars()]

    def update_course(self, course_id: int, update: CourseUpdate) -> CourseView:
        """Apply a partial update. Only supplied fields change.

        Raises:
            NotFoundError: If course doesn't exist
            ValidationError: If the resulting dates or values are invalid
            ConflictError: If the new short code belongs to another course
        """
        changes = supplied(update)
        reject_nulls(changes, _COURSE_NULLABLE)
        if "modality" in changes:
            changes["modality"] = _check_modality(changes["modality"])
        if "price" in changes:
            changes["price"] = to_money(changes["price"], "price")

        with classified("updating the course"):
            try:
                with self._store.unit_of_work() as session:
                    course = ReferenceValidator(session).require(EntityKind.COURSE, course_id)
                    if "short_code" in changes:
                        ConflictGuard(session).check_course_code(
                            changes["short_code"], exclude_course_id=course_id
                        )
                    _check_dates(
                        changes.get("start_date", course.start_date),
                        changes.get("end_date", course.end_date),
                    )
                    apply_changes(course, changes, nullable=_COURSE_NULLABLE)
                    self._store.flush(session)
                    view = CourseView.from_model(course)
            except UniqueViolation as e:
                raise conflict_from(e, changes) from e

        logger.info("Course %s updated (%s)", course_id, ", ".join(sorted(changes)) or "no changes")
        return view

    def delete_course(self, course_id: int) -> None:
        """Delete a course that no inscription references.

        Raises:
            NotFoundError: If course doesn't exist
            ConflictError: If inscriptions still reference it
        """
        with classified("deleting the course"), self._store.unit_of_work() as session:
            course = ReferenceValidator(session).require(EntityKind.COURSE, course_id)
            ConflictGuard(session).check_no_dependents(
                EntityKind.COURSE, course_id, Inscription, "course_id", "inscriptions"
            )
            session.delete(course)

        logger.info("Course %s deleted", course_id)
        self._audit.record(AuditEventType.COURSE_DELETED, course_id, "Course deleted")

    # --- Integration Operations ---

    def create_integration(
        self,
        course_id: int,
        external_course_id: int,
        external_short_name: str,
        active: bool = True,
    ) -> CourseIntegrationView:
        """Map a course to a course on the external learning platform.

        Raises:
            NotFoundError: If course doesn't exist
            ConflictError: If the course is already mapped or the external ID is taken
        """
        values = {"course_id": course_id, "external_course_id": external_course_id}
        with classified("creating the course integration"):
            try:
                with self._store.unit_of_work() as session:
                    ReferenceValidator(session).require(EntityKind.COURSE, course_id)
                    guard = ConflictGuard(session)
                    guard.check_integration_absent(course_id)
                    guard.check_external_course_id(external_course_id)
                    integration = CourseIntegration(
                        course_id=course_id,
                        external_course_id=external_course_id,
                        external_short_name=external_short_name,
                        active=active,
                    )
                    session.add(integration)
                    self._store.flush(session)
                    view = CourseIntegrationView.from_model(integration)
            except UniqueViolation as e:
                raise conflict_from(e, values) from e

        logger.info("Integration created for course %s -> %s", course_id, external_course_id)
        return view

    def _require_integration(self, session: Session, course_id: int) -> CourseIntegration:
        return ReferenceValidator(session).require_by(
            EntityKind.COURSE_INTEGRATION, "course_id", course_id, field="course ID"
        )

    def get_integration(self, course_id: int) -> CourseIntegrationView:
        """Get the integration mapping of a course.

        Raises:
            NotFoundError: If the course has no mapping
        """
        with classified("reading the course integration"), self._store.reading() as session:
            return CourseIntegrationView.from_model(self._require_integration(session, course_id))

    def update_integration(self, course_id: int, update: IntegrationUpdate) -> CourseIntegrationView:
        """Apply a partial update to a course's integration mapping.

        The external ID check ignores the mapping being updated, so resending
        its current value is not a conflict.

        Raises:
            NotFoundError: If the course has no mapping
            ConflictError: If the external ID belongs to another course's mapping
        """
        changes = supplied(update)
        reject_nulls(changes)
        with classified("updating the course integration"):
            try:
                with self._store.unit_of_work() as session:
                    integration = self._require_integration(session, course_id)
                    if "external_course_id" in changes:
                        ConflictGuard(session).check_external_course_id(
                            changes["external_course_id"], exclude_course_id=course_id
                        )
                    apply_changes(integration, changes, nullable=frozenset())
                    self._store.flush(session)
                    view = CourseIntegrationView.from_model(integration)
            except UniqueViolation as e:
                raise conflict_from(e, changes) from e

        logger.info("Integration updated for course %s", course_id)
        return view
