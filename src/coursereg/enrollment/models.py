"""Data models for the inscription lifecycle."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003 - used at runtime in dataclasses
from decimal import Decimal  # noqa: TC003 - used at runtime in dataclasses
from enum import StrEnum
from typing import Any

from coursereg.registry.models import (
    UNSET,
    BillingProfileUpdate,
    BillingProfileView,
    CourseView,
    DiscountView,
    PersonUpdate,
    PersonView,
    VoucherView,
    Unset,
)
from coursereg.store.models import InscriptionStatus


class Role(StrEnum):
    """Capability level of the actor performing a change."""

    ADMIN = "admin"
    STAFF = "staff"


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation. Authentication happens upstream."""

    role: Role = Role.STAFF
    name: str = "system"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass
class InscriptionUpdate:
    """Partial update for an inscription.

    ``course_id`` and ``enrolled`` need an administrator. ``person`` and
    ``billing`` carry edits to the referenced person and billing profile.
    """

    course_id: int | Unset = UNSET
    billing_id: int | Unset = UNSET
    discount_id: int | None | Unset = UNSET
    enrolled: bool | Unset = UNSET
    person: PersonUpdate | Unset = UNSET
    billing: BillingProfileUpdate | Unset = UNSET


@dataclass(frozen=True)
class InvoiceSummary:
    """Invoice fields shown alongside an inscription."""

    id: int
    invoice_number: str
    income_number: str
    amount_paid: Decimal
    payment_verified: bool

    @classmethod
    def from_model(cls, invoice: Any) -> InvoiceSummary:
        return cls(
            id=invoice.id,
            invoice_number=invoice.invoice_number,
            income_number=invoice.income_number,
            amount_paid=invoice.amount_paid,
            payment_verified=invoice.payment_verified,
        )


@dataclass(frozen=True)
class InscriptionView:
    """Materialized inscription with its references resolved."""

    id: int
    course_id: int
    person_id: int
    billing_id: int
    voucher_id: int
    discount_id: int | None
    enrolled: bool
    created_at: datetime
    course: CourseView
    person: PersonView
    billing_profile: BillingProfileView
    voucher: VoucherView | None
    discount: DiscountView | None
    invoices: list[InvoiceSummary] = field(default_factory=list)

    @property
    def status(self) -> InscriptionStatus:
        return InscriptionStatus.ENROLLED if self.enrolled else InscriptionStatus.PENDING

    @property
    def payment_verified(self) -> bool:
        return any(invoice.payment_verified for invoice in self.invoices)

    @classmethod
    def from_model(cls, inscription: Any) -> InscriptionView:
        return cls(
            id=inscription.id,
            course_id=inscription.course_id,
            person_id=inscription.person_id,
            billing_id=inscription.billing_id,
            voucher_id=inscription.voucher_id,
            discount_id=inscription.discount_id,
            enrolled=inscription.enrolled,
            created_at=inscription.created_at,
            course=CourseView.from_model(inscription.course),
            person=PersonView.from_model(inscription.person),
            billing_profile=BillingProfileView.from_model(inscription.billing_profile),
            voucher=(
                VoucherView.from_model(inscription.voucher)
                if inscription.voucher is not None
                else None
            ),
            discount=(
                DiscountView.from_model(inscription.discount)
                if inscription.discount is not None
                else None
            ),
            invoices=[InvoiceSummary.from_model(i) for i in inscription.invoices],
        )
