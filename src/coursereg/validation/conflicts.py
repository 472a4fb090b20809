"""Conflict Guard - cross-record uniqueness and exclusivity rules.

Every check only reads. The same rules are the backstop for writes that slip
past a check: ``conflict_from`` turns a store-level ``UniqueViolation`` into
the ConflictError the check would have raised.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from coursereg.errors import ConflictError, ConflictRule, EntityKind
from coursereg.store.models import (
    Course,
    CourseIntegration,
    Inscription,
    Invoice,
    Person,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from coursereg.store.exceptions import UniqueViolation

_MESSAGES: dict[ConflictRule, str] = {
    ConflictRule.DUPLICATE_INSCRIPTION: (
        "Person with ID {person_id} is already enrolled in course with ID {course_id}"
    ),
    ConflictRule.VOUCHER_IN_USE: "Voucher with ID {voucher_id} is already in use by another inscription",
    ConflictRule.DUPLICATE_INVOICE: "An invoice already exists for inscription with ID {inscription_id}",
    ConflictRule.DUPLICATE_INVOICE_NUMBER: "Invoice number {invoice_number} is already in use",
    ConflictRule.DUPLICATE_INCOME_NUMBER: "Income number {income_number} is already in use",
    ConflictRule.DUPLICATE_IDENTIFICATION: "Identification number {identification} is already registered",
    ConflictRule.DUPLICATE_EMAIL: "Email {email} is already registered",
    ConflictRule.DUPLICATE_COURSE_CODE: "Course short code {short_code} is already in use",
    ConflictRule.DUPLICATE_INTEGRATION: "Course with ID {course_id} already has an external integration",
    ConflictRule.DUPLICATE_EXTERNAL_COURSE_ID: "External course ID {external_course_id} is already in use",
    ConflictRule.DUPLICATE_RECORD: "A record with these unique values already exists",
}

_VIOLATION_RULES: dict[tuple[str, tuple[str, ...]], ConflictRule] = {
    ("inscriptions", ("course_id", "person_id")): ConflictRule.DUPLICATE_INSCRIPTION,
    ("inscriptions", ("voucher_id",)): ConflictRule.VOUCHER_IN_USE,
    ("invoices", ("inscription_id",)): ConflictRule.DUPLICATE_INVOICE,
    ("invoices", ("invoice_number",)): ConflictRule.DUPLICATE_INVOICE_NUMBER,
    ("invoices", ("income_number",)): ConflictRule.DUPLICATE_INCOME_NUMBER,
    ("persons", ("identification",)): ConflictRule.DUPLICATE_IDENTIFICATION,
    ("persons", ("email",)): ConflictRule.DUPLICATE_EMAIL,
    ("courses", ("short_code",)): ConflictRule.DUPLICATE_COURSE_CODE,
    ("course_integrations", ("course_id",)): ConflictRule.DUPLICATE_INTEGRATION,
    ("course_integrations", ("external_course_id",)): ConflictRule.DUPLICATE_EXTERNAL_COURSE_ID,
}


def _conflict(rule: ConflictRule, **values: Any) -> ConflictError:
    message = _MESSAGES[rule].format_map(defaultdict(lambda: "?", values))
    return ConflictError(rule, message)


def conflict_from(violation: UniqueViolation, values: Mapping[str, Any]) -> ConflictError:
    """Translate a store unique violation into the matching ConflictError.

    Args:
        violation: Typed violation raised by the store
        values: Values of the attempted write, used to name the duplicate

    Returns:
        ConflictError naming the rule whose constraint fired.
    """
    rule = _VIOLATION_RULES.get(
        (violation.table, tuple(sorted(violation.fields))), ConflictRule.DUPLICATE_RECORD
    )
    return _conflict(rule, **values)


class ConflictGuard:
    """Pre-write uniqueness checks bound to one session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _first(self, stmt: Any) -> Any:
        return self._session.execute(stmt.limit(1)).scalar_one_or_none()

    def check_inscription_pair(
        self, course_id: int, person_id: int, exclude_inscription_id: int | None = None
    ) -> None:
        """At most one inscription per (course, person)."""
        stmt = select(Inscription.id).where(
            Inscription.course_id == course_id,
            Inscription.person_id == person_id,
        )
        if exclude_inscription_id is not None:
            stmt = stmt.where(Inscription.id != exclude_inscription_id)
        if self._first(stmt) is not None:
            raise _conflict(
                ConflictRule.DUPLICATE_INSCRIPTION, course_id=course_id, person_id=person_id
            )

    def check_voucher_free(self, voucher_id: int) -> None:
        """A voucher belongs to at most one inscription."""
        owner = self._first(select(Inscription.id).where(Inscription.voucher_id == voucher_id))
        if owner is not None:
            raise ConflictError(
                ConflictRule.VOUCHER_IN_USE,
                f"Voucher with ID {voucher_id} is already assigned to inscription with ID {owner}",
            )

    def check_invoice_absent(self, inscription_id: int) -> None:
        """At most one invoice per inscription."""
        stmt = select(Invoice.id).where(Invoice.inscription_id == inscription_id)
        if self._first(stmt) is not None:
            raise _conflict(ConflictRule.DUPLICATE_INVOICE, inscription_id=inscription_id)

    def check_invoice_numbers(self, invoice_number: str, income_number: str) -> None:
        """Invoice and income numbers are each globally unique."""
        stmt = select(Invoice.id).where(Invoice.invoice_number == invoice_number)
        if self._first(stmt) is not None:
            raise _conflict(ConflictRule.DUPLICATE_INVOICE_NUMBER, invoice_number=invoice_number)
        stmt = select(Invoice.id).where(Invoice.income_number == income_number)
        if self._first(stmt) is not None:
            raise _conflict(ConflictRule.DUPLICATE_INCOME_NUMBER, income_number=income_number)

    def check_person_unique(
        self,
        identification: str | None = None,
        email: str | None = None,
        exclude_person_id: int | None = None,
    ) -> None:
        """Identification number and email are each unique across persons."""
        checks = (
            ("identification", identification, ConflictRule.DUPLICATE_IDENTIFICATION),
            ("email", email, ConflictRule.DUPLICATE_EMAIL),
        )
        for name, value, rule in checks:
            if value is None:
                continue
            stmt = select(Person.id).where(getattr(Person, name) == value)
            if exclude_person_id is not None:
                stmt = stmt.where(Person.id != exclude_person_id)
            if self._first(stmt) is not None:
                raise _conflict(rule, **{name: value})

    def check_course_code(self, short_code: str, exclude_course_id: int | None = None) -> None:
        stmt = select(Course.id).where(Course.short_code == short_code)
        if exclude_course_id is not None:
            stmt = stmt.where(Course.id != exclude_course_id)
        if self._first(stmt) is not None:
            raise _conflict(ConflictRule.DUPLICATE_COURSE_CODE, short_code=short_code)

    def check_integration_absent(self, course_id: int) -> None:
        stmt = select(CourseIntegration.id).where(CourseIntegration.course_id == course_id)
        if self._first(stmt) is not None:
            raise _conflict(ConflictRule.DUPLICATE_INTEGRATION, course_id=course_id)

    def check_external_course_id(
        self, external_course_id: int, exclude_course_id: int | None = None
    ) -> None:
        """External course ids are unique; a row never conflicts with itself."""
        stmt = select(CourseIntegration.id).where(
            CourseIntegration.external_course_id == external_course_id
        )
        if exclude_course_id is not None:
            stmt = stmt.where(CourseIntegration.course_id != exclude_course_id)
        if self._first(stmt) is not None:
            raise _conflict(
                ConflictRule.DUPLICATE_EXTERNAL_COURSE_ID, external_course_id=external_course_id
            )

    def check_no_dependents(
        self, kind: EntityKind, key: int, dependent: type[Any], column: str, label: str
    ) -> None:
        """Refuse to delete a row that other rows still reference.

        Args:
            kind: Kind of the row being deleted
            key: Its primary key
            dependent: Model holding the reference
            column: Referencing column on the dependent model
            label: Plural name of the dependents for the message
        """
        stmt = select(func.count()).select_from(dependent).where(getattr(dependent, column) == key)
        count = self._session.execute(stmt).scalar_one()
        if count:
            raise ConflictError(
                ConflictRule.HAS_DEPENDENTS,
                f"{kind.value} with ID {key} cannot be deleted: it has {count} associated {label}",
            )
