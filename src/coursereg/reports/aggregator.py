"""ReportAggregator - read-only statistics over filtered inscriptions."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, time, timedelta
from decimal import Decimal

from sqlalchemy import exists, select
from sqlalchemy.orm import selectinload

from coursereg.enrollment.models import InvoiceSummary
from coursereg.errors import ValidationError, classified
from coursereg.registry.models import (
    BillingProfileView,
    CourseView,
    DiscountView,
    PersonView,
    VoucherView,
)
from coursereg.reports.models import (
    Report,
    ReportFilter,
    ReportKind,
    ReportRow,
    ReportSummary,
)
from coursereg.store import EntityStore, Inscription, Invoice

logger = logging.getLogger(__name__)


def _row(inscription: Inscription) -> ReportRow:
    return ReportRow(
        inscription_id=inscription.id,
        created_at=inscription.created_at,
        enrolled=inscription.enrolled,
        course=CourseView.from_model(inscription.course),
        person=PersonView.from_model(inscription.person),
        billing_profile=BillingProfileView.from_model(inscription.billing_profile),
        voucher=VoucherView.from_model(inscription.voucher) if inscription.voucher else None,
        discount=DiscountView.from_model(inscription.discount) if inscription.discount else None,
        invoices=[InvoiceSummary.from_model(i) for i in inscription.invoices],
    )


def summarize(rows: list[ReportRow]) -> ReportSummary:
    """Compute report statistics by iterating the rows."""
    enrolled = sum(1 for row in rows if row.enrolled)
    verified_invoices = sum(
        1 for row in rows for invoice in row.invoices if invoice.payment_verified
    )
    verified_income = sum((row.verified_amount for row in rows), Decimal("0.00"))
    by_course = Counter(row.course.id for row in rows)
    return ReportSummary(
        total=len(rows),
        enrolled=enrolled,
        not_enrolled=len(rows) - enrolled,
        verified_invoices=verified_invoices,
        pending_payments=sum(1 for row in rows if not row.payment_verified),
        verified_income=verified_income,
        count_by_course=dict(sorted(by_course.items())),
        distinct_courses=len(by_course),
    )


class ReportAggregator:
    """Builds reports from committed state. Never writes."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def rows(self, filters: ReportFilter | None = None) -> list[ReportRow]:
        """Matching inscriptions, newest first.

        Raises:
            ValidationError: If the date range is reversed
        """
        filters = filters if filters is not None else ReportFilter()
        if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
            raise ValidationError("Report start date must not be after its end date")

        stmt = select(Inscription).options(
            selectinload(Inscription.course),
            selectinload(Inscription.person),
            selectinload(Inscription.billing_profile),
            selectinload(Inscription.voucher),
            selectinload(Inscription.discount),
            selectinload(Inscription.invoices),
        )
        if filters.course_id is not None:
            stmt = stmt.where(Inscription.course_id == filters.course_id)
        if filters.enrolled is not None:
            stmt = stmt.where(Inscription.enrolled == filters.enrolled)
        if filters.start_date is not None:
            stmt = stmt.where(
                Inscription.created_at >= datetime.combine(filters.start_date, time.min)
            )
        if filters.end_date is not None:
            next_day = datetime.combine(filters.end_date + timedelta(days=1), time.min)
            stmt = stmt.where(Inscription.created_at < next_day)
        if filters.verified is not None:
            verified = exists().where(
                Invoice.inscription_id == Inscription.id,
                Invoice.payment_verified.is_(True),
            )
            stmt = stmt.where(verified if filters.verified else ~verified)
        stmt = stmt.order_by(Inscription.created_at.desc(), Inscription.id.desc())

        with classified("building the report"), self._store.reading() as session:
            return [_row(i) for i in session.execute(stmt).scalars()]

    def build(
        self,
        kind: ReportKind = ReportKind.INSCRIPTIONS,
        filters: ReportFilter | None = None,
    ) -> Report:
        """Build a report: matching rows plus their summary.

        Args:
            kind: Preset whose filter is added to ``filters``
            filters: Caller's filters

        Returns:
            The report with the filters actually applied.
        """
        applied = (filters if filters is not None else ReportFilter()).for_kind(kind)
        rows = self.rows(applied)
        summary = summarize(rows)
        logger.info("Report %s built: %d rows, filters %s", kind.value, summary.total, applied.as_dict())
        return Report(kind=kind, filters=applied, rows=rows, summary=summary)
