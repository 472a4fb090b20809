"""InscriptionManager - creation and mutation of inscriptions.

An inscription ties a person to a course through a billing profile and a
payment voucher. It starts PENDING and becomes ENROLLED only when an
administrator sets ``enrolled`` after its invoice has been verified. There is
no way back to PENDING.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from coursereg.audit import AuditEventType, AuditTrail
from coursereg.enrollment.models import Actor, InscriptionUpdate, InscriptionView
from coursereg.errors import (
    ConflictError,
    ConflictRule,
    EntityKind,
    PermissionDeniedError,
    classified,
)
from coursereg.registry import (
    ParticipantRegistry,
    check_page,
    ordering,
    reject_nulls,
    supplied,
)
from coursereg.store import EntityStore, Inscription, Page, UniqueViolation
from coursereg.validation import ConflictGuard, ReferenceValidator, conflict_from

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

INSCRIPTION_ORDER_FIELDS = ("id", "created_at", "course_id", "person_id")
ADMIN_FIELDS = ("course_id", "enrolled")
INSCRIPTION_NULLABLE = frozenset({"discount_id"})

_EAGER = (
    selectinload(Inscription.course),
    selectinload(Inscription.person),
    selectinload(Inscription.billing_profile),
    selectinload(Inscription.voucher),
    selectinload(Inscription.discount),
    selectinload(Inscription.invoices),
)


class InscriptionManager:
    """Lifecycle of inscriptions.

    Every operation runs in one store transaction: references are resolved,
    conflict rules checked and the write performed without another writer
    interleaving.
    """

    def __init__(
        self,
        store: EntityStore,
        audit: AuditTrail | None = None,
        participants: ParticipantRegistry | None = None,
    ) -> None:
        self._store = store
        self._audit = audit if audit is not None else AuditTrail()
        self._participants = participants if participants is not None else ParticipantRegistry(store)

    def create(
        self,
        course_id: int,
        person_id: int,
        billing_id: int,
        voucher_id: int,
        discount_id: int | None = None,
    ) -> InscriptionView:
        """Create a PENDING inscription.

        Args:
            course_id: Course to enroll in
            person_id: Registering person
            billing_id: Billing profile for the invoice
            voucher_id: Uploaded payment voucher, not yet used by any inscription
            discount_id: Optional discount

        Returns:
            The created inscription.

        Raises:
            NotFoundError: For the first reference that does not resolve
            ConflictError: If the person already has an inscription for the
                course or the voucher is already used
        """
        values = {"course_id": course_id, "person_id": person_id, "voucher_id": voucher_id}
        with classified("creating the inscription"):
            try:
                with self._store.unit_of_work() as session:
                    ReferenceValidator(session).resolve(
                        course_id=course_id,
                        person_id=person_id,
                        billing_id=billing_id,
                        voucher_id=voucher_id,
                        discount_id=discount_id,
                    )
                    guard = ConflictGuard(session)
                    guard.check_inscription_pair(course_id, person_id)
                    guard.check_voucher_free(voucher_id)

                    inscription = Inscription(
                        course_id=course_id,
                        person_id=person_id,
                        billing_id=billing_id,
                        voucher_id=voucher_id,
                        discount_id=discount_id,
                    )
                    session.add(inscription)
                    self._store.flush(session)
                    view = self._view(session, inscription)
            except UniqueViolation as e:
                raise conflict_from(e, values) from e

        logger.info("Inscription %s created: person %s in course %s", view.id, person_id, course_id)
        self._audit.record(
            AuditEventType.INSCRIPTION_CREATED,
            view.id,
            f"Person {person_id} registered for course {course_id}",
        )
        return view

    def get(self, inscription_id: int) -> InscriptionView:
        """Get inscription by ID.

        Raises:
            NotFoundError: If inscription doesn't exist
        """
        with classified("reading the inscription"), self._store.reading() as session:
            inscription = ReferenceValidator(session).require(EntityKind.INSCRIPTION, inscription_id)
            return InscriptionView.from_model(inscription)

    def list_inscriptions(
        self,
        page: int = 1,
        page_size: int = 10,
        order_by: str = "created_at",
        order: str = "desc",
        course_id: int | None = None,
        enrolled: bool | None = None,
    ) -> Page[InscriptionView]:
        """List inscriptions one page at a time.

        Args:
            page: 1-based page number
            page_size: Maximum inscriptions per page
            order_by: One of INSCRIPTION_ORDER_FIELDS
            order: "asc" or "desc"
            course_id: Only inscriptions for this course
            enrolled: Only inscriptions with this enrolled flag

        Returns:
            The page plus the total number of matching inscriptions.
        """
        check_page(page, page_size)
        clause = ordering(Inscription, INSCRIPTION_ORDER_FIELDS, order_by, order)

        stmt = select(Inscription).options(*_EAGER)
        if course_id is not None:
            stmt = stmt.where(Inscription.course_id == course_id)
        if enrolled is not None:
            stmt = stmt.where(Inscription.enrolled == enrolled)
        stmt = stmt.order_by(clause, Inscription.id)

        with classified("listing inscriptions"), self._store.reading() as session:
            rows, total = self._store.paginate(session, stmt, page, page_size)
            return Page(
                items=[InscriptionView.from_model(i) for i in rows],
                total=total,
                page=page,
                page_size=page_size,
            )

    def update(
        self,
        inscription_id: int,
        update: InscriptionUpdate,
        actor: Actor | None = None,
    ) -> InscriptionView:
        """Apply a partial update.

        Only supplied fields change. Person and billing edits go through the
        participant registry inside this transaction.

        Raises:
            ValidationError: If a field other than discount_id is set to None
            PermissionDeniedError: If a non-administrator changes the course
                or the enrolled flag
            NotFoundError: If the inscription or a new reference doesn't exist
            ConflictError: If the new course already has this person, the
                enrollment preconditions fail, or enrolled is reset
        """
        actor = actor if actor is not None else Actor()
        changes = supplied(update)
        reject_nulls(changes, INSCRIPTION_NULLABLE)
        restricted = [name for name in ADMIN_FIELDS if name in changes]
        if restricted and not actor.is_admin:
            raise PermissionDeniedError(
                f"Only an administrator can change {', '.join(restricted)} of an inscription"
            )

        with classified("updating the inscription"):
            try:
                with self._store.unit_of_work() as session:
                    inscription = ReferenceValidator(session).require(
                        EntityKind.INSCRIPTION, inscription_id
                    )
                    enrolling = self._apply(session, inscription, changes)
                    self._store.flush(session)
                    session.expire(inscription)
                    view = InscriptionView.from_model(inscription)
            except UniqueViolation as e:
                raise conflict_from(e, {"inscription_id": inscription_id, **changes}) from e

        logger.info(
            "Inscription %s updated by %s (%s)",
            inscription_id,
            actor.role.value,
            ", ".join(sorted(changes)) or "no changes",
        )
        self._audit.record(
            AuditEventType.INSCRIPTION_UPDATED,
            inscription_id,
            f"Updated fields: {', '.join(sorted(changes)) or 'none'}",
        )
        if enrolling:
            self._audit.record(
                AuditEventType.INSCRIPTION_ENROLLED, inscription_id, "Inscription enrolled"
            )
        return view

    def _apply(self, session: Session, inscription: Inscription, changes: dict) -> bool:
        """Apply changes to a loaded inscription. Returns True when it becomes ENROLLED."""
        references = ReferenceValidator(session)

        if "course_id" in changes and changes["course_id"] != inscription.course_id:
            references.require(EntityKind.COURSE, changes["course_id"])
            ConflictGuard(session).check_inscription_pair(
                changes["course_id"], inscription.person_id, exclude_inscription_id=inscription.id
            )
            inscription.course_id = changes["course_id"]

        if "billing_id" in changes:
            references.require(EntityKind.BILLING_PROFILE, changes["billing_id"])
            inscription.billing_id = changes["billing_id"]

        if "discount_id" in changes:
            if changes["discount_id"] is not None:
                references.require(EntityKind.DISCOUNT, changes["discount_id"])
            inscription.discount_id = changes["discount_id"]

        if "person" in changes:
            self._participants.update_person_in(session, inscription.person_id, changes["person"])

        if "billing" in changes:
            self._participants.update_billing_in(session, inscription.billing_id, changes["billing"])

        if "enrolled" not in changes or changes["enrolled"] == inscription.enrolled:
            return False
        if not changes["enrolled"]:
            raise ConflictError(
                ConflictRule.ALREADY_ENROLLED,
                f"Inscription with ID {inscription.id} is already enrolled and cannot return to pending",
            )
        self._check_payment(inscription)
        inscription.enrolled = True
        return True

    def _check_payment(self, inscription: Inscription) -> None:
        if not inscription.invoices:
            raise ConflictError(
                ConflictRule.NO_INVOICE,
                f"Inscription with ID {inscription.id} has no invoice and cannot be enrolled",
            )
        if not any(invoice.payment_verified for invoice in inscription.invoices):
            raise ConflictError(
                ConflictRule.PAYMENT_NOT_VERIFIED,
                f"Payment for inscription with ID {inscription.id} has not been verified",
            )

    def delete(self, inscription_id: int) -> None:
        """Delete a PENDING inscription.

        An unverified invoice is deleted with it.

        Raises:
            NotFoundError: If inscription doesn't exist
            ConflictError: If the inscription is ENROLLED or has a verified invoice
        """
        with classified("deleting the inscription"), self._store.unit_of_work() as session:
            inscription = ReferenceValidator(session).require(EntityKind.INSCRIPTION, inscription_id)
            if inscription.enrolled:
                raise ConflictError(
                    ConflictRule.INSCRIPTION_NOT_PENDING,
                    f"Inscription with ID {inscription_id} is enrolled and cannot be deleted",
                )
            if any(invoice.payment_verified for invoice in inscription.invoices):
                raise ConflictError(
                    ConflictRule.VERIFIED_INVOICE,
                    f"Inscription with ID {inscription_id} has a verified invoice and cannot be deleted",
                )
            # Unverified invoices go with it (delete-orphan cascade)
            session.delete(inscription)

        logger.info("Inscription %s deleted", inscription_id)
        self._audit.record(AuditEventType.INSCRIPTION_DELETED, inscription_id, "Inscription deleted")

    def _view(self, session: Session, inscription: Inscription) -> InscriptionView:
        # Loads server defaults such as created_at
        session.refresh(inscription)
        return InscriptionView.from_model(inscription)
