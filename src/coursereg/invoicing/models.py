"""Data models for invoices and payment verification."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal  # noqa: TC003 - used at runtime in dataclasses
from enum import StrEnum
from typing import Any

from coursereg.registry.models import BillingProfileView, CourseView, PersonView


class InvoiceState(StrEnum):
    """Verification state of an invoice. VERIFIED is terminal."""

    UNVERIFIED = "UNVERIFIED"
    VERIFIED = "VERIFIED"


@dataclass(frozen=True)
class InvoiceRelations:
    """Course, person and billing detail attached on request."""

    inscription_enrolled: bool
    course: CourseView
    person: PersonView
    billing_profile: BillingProfileView


@dataclass(frozen=True)
class InvoiceView:
    id: int
    inscription_id: int
    billing_id: int
    amount_paid: Decimal
    payment_verified: bool
    income_number: str
    invoice_number: str
    relations: InvoiceRelations | None = None

    @property
    def state(self) -> InvoiceState:
        return InvoiceState.VERIFIED if self.payment_verified else InvoiceState.UNVERIFIED

    @classmethod
    def from_model(cls, invoice: Any, include_relations: bool = False) -> InvoiceView:
        relations = None
        if include_relations:
            inscription = invoice.inscription
            relations = InvoiceRelations(
                inscription_enrolled=inscription.enrolled,
                course=CourseView.from_model(inscription.course),
                person=PersonView.from_model(inscription.person),
                billing_profile=BillingProfileView.from_model(invoice.billing_profile),
            )
        return cls(
            id=invoice.id,
            inscription_id=invoice.inscription_id,
            billing_id=invoice.billing_id,
            amount_paid=invoice.amount_paid,
            payment_verified=invoice.payment_verified,
            income_number=invoice.income_number,
            invoice_number=invoice.invoice_number,
            relations=relations,
        )
