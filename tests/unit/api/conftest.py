"""Fixtures for route tests."""

import pytest
from factories import BILLING, COURSE, PERSON, VOUCHER
from fastapi import FastAPI
from fastapi.testclient import TestClient

from coursereg.api import Services, get_services, register_exception_handlers
from coursereg.api.routes import (
    billing_profiles,
    courses,
    discounts,
    inscriptions,
    invoices,
    persons,
    reports,
    vouchers,
)
from coursereg.audit import AuditTrail
from coursereg.config import Settings


@pytest.fixture
def services():
    """Services wired to an in-memory store."""
    s = Services.build(Settings(db_path=":memory:", max_page_size=20), audit=AuditTrail())
    yield s
    s.close()


@pytest.fixture
def app(services: Services) -> FastAPI:
    """Create a test FastAPI app with the services dependency overridden."""
    app = FastAPI()

    def override_get_services():
        yield services

    app.dependency_overrides[get_services] = override_get_services
    register_exception_handlers(app)

    for module in (
        courses,
        persons,
        billing_profiles,
        vouchers,
        discounts,
        inscriptions,
        invoices,
        reports,
    ):
        app.include_router(module.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def seeded(client: TestClient) -> dict[str, int]:
    """Create one course, person, billing profile and voucher over HTTP."""
    return {
        "course_id": client.post("/api/v1/courses", json=COURSE).json()["data"]["id"],
        "person_id": client.post("/api/v1/persons", json=PERSON).json()["data"]["id"],
        "billing_id": client.post("/api/v1/billing-profiles", json=BILLING).json()["data"]["id"],
        "voucher_id": client.post("/api/v1/vouchers", json=VOUCHER).json()["data"]["id"],
    }
