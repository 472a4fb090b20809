"""InvoiceManager - staff-issued invoices and one-way payment verification."""

from __future__ import annotations

import logging
import re
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from coursereg.audit import AuditEventType, AuditTrail
from coursereg.errors import (
    ConflictError,
    ConflictRule,
    EntityKind,
    ValidationError,
    classified,
)
from coursereg.invoicing.models import InvoiceView
from coursereg.registry import check_page, ordering, to_money
from coursereg.store import EntityStore, Inscription, Invoice, Page, UniqueViolation
from coursereg.validation import ConflictGuard, ReferenceValidator, conflict_from

logger = logging.getLogger(__name__)

INVOICE_ORDER_FIELDS = ("id", "invoice_number", "income_number", "amount_paid")
MAX_NUMBER_LENGTH = 100
_INVOICE_NUMBER_PATTERN = re.compile(r"^[A-Z0-9-]+$")

_RELATIONS = (
    selectinload(Invoice.inscription).selectinload(Inscription.course),
    selectinload(Invoice.inscription).selectinload(Inscription.person),
    selectinload(Invoice.billing_profile),
)


def _check_number(value: str, label: str) -> str:
    cleaned = value.strip()
    if not 1 <= len(cleaned) <= MAX_NUMBER_LENGTH:
        raise ValidationError(f"{label} must be between 1 and {MAX_NUMBER_LENGTH} characters")
    return cleaned


class InvoiceManager:
    """Invoice creation, verification and lookups.

    Verification is one-way: a verified invoice can neither be verified
    again nor deleted.
    """

    def __init__(self, store: EntityStore, audit: AuditTrail | None = None) -> None:
        self._store = store
        self._audit = audit if audit is not None else AuditTrail()

    def create(
        self,
        inscription_id: int,
        billing_id: int,
        amount_paid: Decimal | str | int,
        income_number: str,
        invoice_number: str,
    ) -> InvoiceView:
        """Create an unverified invoice for an inscription.

        Args:
            inscription_id: Inscription being invoiced
            billing_id: Billing profile the invoice is issued to
            amount_paid: Amount received, two decimal places
            income_number: Accounting income number, globally unique
            invoice_number: Invoice number (uppercase letters, digits and
                dashes), globally unique

        Returns:
            The created invoice.

        Raises:
            ValidationError: If the amount or a number is malformed
            NotFoundError: If the inscription or billing profile doesn't exist
            ConflictError: If the inscription already has an invoice or a
                number is already in use (the duplicated field is named)
        """
        amount = to_money(amount_paid, "amount_paid")
        income_number = _check_number(income_number, "Income number")
        invoice_number = _check_number(invoice_number, "Invoice number")
        if not _INVOICE_NUMBER_PATTERN.match(invoice_number):
            raise ValidationError(
                "Invoice number may only contain uppercase letters, digits and dashes"
            )
        values = {
            "inscription_id": inscription_id,
            "income_number": income_number,
            "invoice_number": invoice_number,
        }

        with classified("creating the invoice"):
            try:
                with self._store.unit_of_work() as session:
                    ReferenceValidator(session).resolve(
                        inscription_id=inscription_id, billing_id=billing_id
                    )
                    guard = ConflictGuard(session)
                    guard.check_invoice_absent(inscription_id)
                    guard.check_invoice_numbers(invoice_number, income_number)

                    invoice = Invoice(
                        inscription_id=inscription_id,
                        billing_id=billing_id,
                        amount_paid=amount,
                        income_number=income_number,
                        invoice_number=invoice_number,
                    )
                    session.add(invoice)
                    self._store.flush(session)
                    view = InvoiceView.from_model(invoice)
            except UniqueViolation as e:
                raise conflict_from(e, values) from e

        logger.info("Invoice %s (%s) created for inscription %s", view.id, invoice_number, inscription_id)
        self._audit.record(
            AuditEventType.INVOICE_CREATED,
            view.id,
            f"Invoice {invoice_number} issued for inscription {inscription_id}",
        )
        return view

    def verify_payment(self, invoice_id: int) -> InvoiceView:
        """Mark an invoice's payment as verified.

        Raises:
            NotFoundError: If invoice doesn't exist
            ConflictError: If the invoice is already verified
        """
        with classified("verifying the payment"), self._store.unit_of_work() as session:
            invoice = ReferenceValidator(session).require(EntityKind.INVOICE, invoice_id)
            if invoice.payment_verified:
                raise ConflictError(
                    ConflictRule.ALREADY_VERIFIED,
                    f"Payment for invoice with ID {invoice_id} is already verified",
                )
            invoice.payment_verified = True
            self._store.flush(session)
            view = InvoiceView.from_model(invoice)

        logger.info("Payment verified for invoice %s", invoice_id)
        self._audit.record(
            AuditEventType.INVOICE_VERIFIED,
            invoice_id,
            f"Payment verified for inscription {view.inscription_id}",
        )
        return view

    def delete(self, invoice_id: int) -> None:
        """Delete an unverified invoice.

        Raises:
            NotFoundError: If invoice doesn't exist
            ConflictError: If the invoice is verified
        """
        with classified("deleting the invoice"), self._store.unit_of_work() as session:
            invoice = ReferenceValidator(session).require(EntityKind.INVOICE, invoice_id)
            if invoice.payment_verified:
                raise ConflictError(
                    ConflictRule.VERIFIED_INVOICE,
                    f"Invoice with ID {invoice_id} has a verified payment and cannot be deleted",
                )
            session.delete(invoice)

        logger.info("Invoice %s deleted", invoice_id)
        self._audit.record(AuditEventType.INVOICE_DELETED, invoice_id, "Invoice deleted")

    # --- Lookups ---

    def get(self, invoice_id: int, include_relations: bool = False) -> InvoiceView:
        """Get invoice by ID.

        Raises:
            NotFoundError: If invoice doesn't exist
        """
        with classified("reading the invoice"), self._store.reading() as session:
            invoice = ReferenceValidator(session).require(EntityKind.INVOICE, invoice_id)
            return InvoiceView.from_model(invoice, include_relations)

    def get_by_invoice_number(self, invoice_number: str) -> InvoiceView:
        """Get invoice by invoice number, with relations.

        Raises:
            NotFoundError: If no invoice has that number
        """
        with classified("reading the invoice"), self._store.reading() as session:
            invoice = ReferenceValidator(session).require_by(
                EntityKind.INVOICE, "invoice_number", invoice_number, field="number"
            )
            return InvoiceView.from_model(invoice, include_relations=True)

    def get_by_income_number(self, income_number: str) -> InvoiceView:
        """Get invoice by income number, with relations.

        Raises:
            NotFoundError: If no invoice has that income number
        """
        with classified("reading the invoice"), self._store.reading() as session:
            invoice = ReferenceValidator(session).require_by(
                EntityKind.INVOICE, "income_number", income_number, field="income number"
            )
            return InvoiceView.from_model(invoice, include_relations=True)

    def get_by_inscription(self, inscription_id: int) -> list[InvoiceView]:
        """Invoices of an inscription; empty when none has been issued yet.

        Raises:
            NotFoundError: If the inscription doesn't exist
        """
        with classified("reading invoices of the inscription"), self._store.reading() as session:
            ReferenceValidator(session).require(EntityKind.INSCRIPTION, inscription_id)
            stmt = (
                select(Invoice)
                .where(Invoice.inscription_id == inscription_id)
                .options(*_RELATIONS)
                .order_by(Invoice.id)
            )
            return [
                InvoiceView.from_model(i, include_relations=True)
                for i in session.execute(stmt).scalars()
            ]

    def get_for_inscription(self, inscription_id: int) -> InvoiceView:
        """The invoice of an inscription.

        Raises:
            NotFoundError: If the inscription has no invoice
        """
        with classified("reading the invoice"), self._store.reading() as session:
            invoice = ReferenceValidator(session).require_by(
                EntityKind.INVOICE, "inscription_id", inscription_id, field="inscription ID"
            )
            return InvoiceView.from_model(invoice, include_relations=True)

    def list_invoices(
        self,
        page: int = 1,
        page_size: int = 10,
        order_by: str = "id",
        order: str = "asc",
        include_relations: bool = False,
    ) -> Page[InvoiceView]:
        """List invoices one page at a time.

        Args:
            page: 1-based page number
            page_size: Maximum invoices per page
            order_by: One of INVOICE_ORDER_FIELDS
            order: "asc" or "desc"
            include_relations: Attach course, person and billing detail

        Returns:
            The page plus the total number of invoices.
        """
        check_page(page, page_size)
        clause = ordering(Invoice, INVOICE_ORDER_FIELDS, order_by, order)

        stmt = select(Invoice).order_by(clause, Invoice.id)
        if include_relations:
            stmt = stmt.options(*_RELATIONS)

        with classified("listing invoices"), self._store.reading() as session:
            rows, total = self._store.paginate(session, stmt, page, page_size)
            return Page(
                items=[InvoiceView.from_model(i, include_relations) for i in rows],
                total=total,
                page=page,
                page_size=page_size,
            )
