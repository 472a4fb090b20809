"""Shared pytest fixtures and configuration."""

import pytest
from factories import Enrollment, make_billing, make_course, make_person, make_voucher

from coursereg.audit import AuditEvent, AuditTrail
from coursereg.enrollment import InscriptionManager
from coursereg.invoicing import InvoiceManager
from coursereg.registry import (
    CourseCatalog,
    DiscountRegistry,
    ParticipantRegistry,
    VoucherRegistry,
)
from coursereg.reports import ReportAggregator
from coursereg.store import EntityStore


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def store():
    """Create an in-memory EntityStore."""
    s = EntityStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def events() -> list[AuditEvent]:
    """Audit events recorded during a test."""
    return []


@pytest.fixture
def audit(events: list[AuditEvent]) -> AuditTrail:
    """Audit trail that collects every event."""
    trail = AuditTrail()
    trail.subscribe(events.append)
    return trail


@pytest.fixture
def catalog(store: EntityStore, audit: AuditTrail) -> CourseCatalog:
    return CourseCatalog(store, audit)


@pytest.fixture
def participants(store: EntityStore) -> ParticipantRegistry:
    return ParticipantRegistry(store)


@pytest.fixture
def vouchers(store: EntityStore) -> VoucherRegistry:
    return VoucherRegistry(store)


@pytest.fixture
def discounts(store: EntityStore) -> DiscountRegistry:
    return DiscountRegistry(store)


@pytest.fixture
def inscriptions(
    store: EntityStore, audit: AuditTrail, participants: ParticipantRegistry
) -> InscriptionManager:
    return InscriptionManager(store, audit, participants)


@pytest.fixture
def invoices(store: EntityStore, audit: AuditTrail) -> InvoiceManager:
    return InvoiceManager(store, audit)


@pytest.fixture
def reports(store: EntityStore) -> ReportAggregator:
    return ReportAggregator(store)


@pytest.fixture
def refs(
    catalog: CourseCatalog, participants: ParticipantRegistry, vouchers: VoucherRegistry
) -> Enrollment:
    """Course, person, billing profile and voucher ready for an inscription."""
    return Enrollment(
        course_id=make_course(catalog).id,
        person_id=make_person(participants).id,
        billing_id=make_billing(participants).id,
        voucher_id=make_voucher(vouchers).id,
    )
