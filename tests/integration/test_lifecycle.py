"""Integration tests for the full inscription lifecycle on a file database."""

from datetime import date
from decimal import Decimal

import pytest
from factories import CEDULA_2, Enrollment, make_person, make_voucher

from coursereg.audit import AuditEvent, AuditEventType
from coursereg.enrollment import Actor, InscriptionManager, InscriptionUpdate, Role
from coursereg.errors import ConflictError, NotFoundError
from coursereg.invoicing import InvoiceManager
from coursereg.registry import CourseCatalog, DiscountRegistry, ParticipantRegistry, VoucherRegistry
from coursereg.reports import PaymentStatus, ReportAggregator, ReportFilter, ReportKind
from coursereg.store import EntityStore

ADMIN = Actor(role=Role.ADMIN, name="registrar")


@pytest.mark.integration
class TestLifecycle:
    """Register, invoice, verify, enroll and report."""

    def test_full_flow(
        self,
        refs: Enrollment,
        inscriptions: InscriptionManager,
        invoices: InvoiceManager,
        reports: ReportAggregator,
        discounts: DiscountRegistry,
        events: list[AuditEvent],
    ) -> None:
        discount = discounts.create_discount(kind="early", amount=Decimal("15.00"))
        inscription = inscriptions.create(
            refs.course_id, refs.person_id, refs.billing_id, refs.voucher_id, discount.id
        )
        invoice = invoices.create(
            inscription.id, refs.billing_id, Decimal("135.00"), "ING-0001", "FAC-0001"
        )

        in_review = reports.build(ReportKind.PENDING)
        invoices.verify_payment(invoice.id)
        enrolled = inscriptions.update(inscription.id, InscriptionUpdate(enrolled=True), ADMIN)
        paid = reports.build(ReportKind.PAID)

        assert in_review.rows[0].payment_status == PaymentStatus.IN_REVIEW
        assert enrolled.status.value == "ENROLLED"
        assert enrolled.payment_verified is True
        assert enrolled.discount.amount == Decimal("15.00")
        assert paid.summary.total == 1
        assert paid.summary.enrolled == 1
        assert paid.summary.verified_income == Decimal("135.00")
        assert [e.event_type for e in events] == [
            AuditEventType.INSCRIPTION_CREATED,
            AuditEventType.INVOICE_CREATED,
            AuditEventType.INVOICE_VERIFIED,
            AuditEventType.INSCRIPTION_UPDATED,
            AuditEventType.INSCRIPTION_ENROLLED,
        ]

    def test_enrolled_inscription_is_locked(
        self,
        refs: Enrollment,
        inscriptions: InscriptionManager,
        invoices: InvoiceManager,
        catalog: CourseCatalog,
    ) -> None:
        inscription = inscriptions.create(
            refs.course_id, refs.person_id, refs.billing_id, refs.voucher_id
        )
        invoice = invoices.create(inscription.id, refs.billing_id, "150", "ING-1", "FAC-1")
        invoices.verify_payment(invoice.id)
        inscriptions.update(inscription.id, InscriptionUpdate(enrolled=True), ADMIN)

        with pytest.raises(ConflictError):
            inscriptions.update(inscription.id, InscriptionUpdate(enrolled=False), ADMIN)
        with pytest.raises(ConflictError):
            inscriptions.delete(inscription.id)
        with pytest.raises(ConflictError):
            invoices.delete(invoice.id)
        with pytest.raises(ConflictError):
            catalog.delete_course(refs.course_id)

    def test_pending_delete_cascades_invoice(
        self, refs: Enrollment, inscriptions: InscriptionManager, invoices: InvoiceManager
    ) -> None:
        inscription = inscriptions.create(
            refs.course_id, refs.person_id, refs.billing_id, refs.voucher_id
        )
        invoice = invoices.create(inscription.id, refs.billing_id, "150", "ING-1", "FAC-1")

        inscriptions.delete(inscription.id)

        with pytest.raises(NotFoundError):
            invoices.get(invoice.id)

    def test_reopened_store_keeps_data(
        self,
        db_path: str,
        refs: Enrollment,
        inscriptions: InscriptionManager,
        invoices: InvoiceManager,
    ) -> None:
        inscription = inscriptions.create(
            refs.course_id, refs.person_id, refs.billing_id, refs.voucher_id
        )
        invoices.create(inscription.id, refs.billing_id, "150.00", "ING-1", "FAC-1")

        reopened = EntityStore(db_path)
        try:
            view = InvoiceManager(reopened).get_by_invoice_number("FAC-1")
        finally:
            reopened.close()

        assert view.inscription_id == inscription.id
        assert view.amount_paid == Decimal("150.00")


@pytest.mark.integration
class TestReportsAcrossCourses:
    """Report filters over several courses and people."""

    def test_course_and_date_filters(
        self,
        refs: Enrollment,
        catalog: CourseCatalog,
        participants: ParticipantRegistry,
        vouchers: VoucherRegistry,
        inscriptions: InscriptionManager,
        reports: ReportAggregator,
    ) -> None:
        second_course = catalog.create_course(
            name="Remote Sensing",
            short_code="RS-201",
            modality="in_person",
            price=Decimal("200.00"),
            start_date=date(2030, 5, 1),
            end_date=date(2030, 6, 30),
        )
        other = make_person(participants, identification=CEDULA_2, email="luis@example.com")
        inscriptions.create(refs.course_id, refs.person_id, refs.billing_id, refs.voucher_id)
        inscriptions.create(
            second_course.id, other.id, refs.billing_id, make_voucher(vouchers, "b.pdf").id
        )
        inscriptions.create(
            second_course.id, refs.person_id, refs.billing_id, make_voucher(vouchers, "c.pdf").id
        )

        everything = reports.build()
        second_only = reports.build(filters=ReportFilter(course_id=second_course.id))
        future = reports.build(filters=ReportFilter(start_date=date(2099, 1, 1)))

        assert everything.summary.total == 3
        assert everything.summary.distinct_courses == 2
        assert everything.summary.count_by_course == {refs.course_id: 1, second_course.id: 2}
        assert second_only.summary.total == 2
        assert {row.person.identification for row in second_only.rows} == {
            "1710034065",
            CEDULA_2,
        }
        assert future.rows == []
        assert future.summary.verified_income == Decimal("0.00")
