"""Data models for inscription reports."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any

from coursereg.enrollment.models import InvoiceSummary
from coursereg.registry.models import (
    BillingProfileView,
    CourseView,
    DiscountView,
    PersonView,
    VoucherView,
)


class ReportKind(StrEnum):
    """Preset report types; each adds its own filter to the caller's."""

    INSCRIPTIONS = "inscriptions"
    PAID = "paid"
    ENROLLED = "enrolled"
    PENDING = "pending"


class PaymentStatus(StrEnum):
    """Payment state of one inscription as shown in reports."""

    VERIFIED = "VERIFIED"
    IN_REVIEW = "IN_REVIEW"
    PENDING = "PENDING"


@dataclass(frozen=True)
class ReportFilter:
    """Filters applied to the inscription set. None means no filter.

    ``end_date`` includes the whole day.
    """

    course_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    verified: bool | None = None
    enrolled: bool | None = None

    def for_kind(self, kind: ReportKind) -> ReportFilter:
        """Return this filter with the preset of a report kind applied."""
        if kind == ReportKind.PAID:
            return replace(self, verified=True)
        if kind == ReportKind.PENDING:
            return replace(self, verified=False)
        if kind == ReportKind.ENROLLED:
            return replace(self, enrolled=True)
        return self

    def as_dict(self) -> dict[str, Any]:
        return {
            name: value
            for name, value in (
                ("course_id", self.course_id),
                ("start_date", self.start_date),
                ("end_date", self.end_date),
                ("verified", self.verified),
                ("enrolled", self.enrolled),
            )
            if value is not None
        }


@dataclass(frozen=True)
class ReportRow:
    """One inscription with everything a report shows about it."""

    inscription_id: int
    created_at: datetime
    enrolled: bool
    course: CourseView
    person: PersonView
    billing_profile: BillingProfileView
    voucher: VoucherView | None
    discount: DiscountView | None
    invoices: list[InvoiceSummary] = field(default_factory=list)

    @property
    def payment_verified(self) -> bool:
        return any(invoice.payment_verified for invoice in self.invoices)

    @property
    def payment_status(self) -> PaymentStatus:
        if self.payment_verified:
            return PaymentStatus.VERIFIED
        if self.invoices:
            return PaymentStatus.IN_REVIEW
        return PaymentStatus.PENDING

    @property
    def amount_paid(self) -> Decimal:
        return sum((invoice.amount_paid for invoice in self.invoices), Decimal("0.00"))

    @property
    def verified_amount(self) -> Decimal:
        return sum(
            (invoice.amount_paid for invoice in self.invoices if invoice.payment_verified),
            Decimal("0.00"),
        )


@dataclass(frozen=True)
class ReportSummary:
    """Statistics over a report's rows. Money is summed as Decimal."""

    total: int
    enrolled: int
    not_enrolled: int
    verified_invoices: int
    pending_payments: int
    verified_income: Decimal
    count_by_course: dict[int, int]
    distinct_courses: int


@dataclass(frozen=True)
class Report:
    kind: ReportKind
    filters: ReportFilter
    rows: list[ReportRow]
    summary: ReportSummary
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def total_records(self) -> int:
        return len(self.rows)
