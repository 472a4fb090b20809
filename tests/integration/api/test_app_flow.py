"""Integration tests for the assembled application on a file database."""

import pytest
from factories import BILLING, COURSE, PERSON, VOUCHER
from fastapi.testclient import TestClient

from coursereg.api import create_app
from coursereg.config import Settings

ADMIN = {"X-Role": "admin"}


@pytest.fixture
def client(db_path: str):
    """Client for the full app; the lifespan opens and closes the store."""
    app = create_app(Settings(db_path=db_path, max_page_size=50))
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


def _post(client: TestClient, path: str, body: dict, **kwargs) -> dict:
    response = client.post(f"/api/v1{path}", json=body, **kwargs)
    assert response.status_code in (200, 201), response.text
    return response.json()["data"]


@pytest.mark.integration
class TestEnrollmentFlow:
    """Register -> invoice -> verify -> enroll -> report over HTTP."""

    def test_enrollment_flow(self, client: TestClient) -> None:
        course = _post(client, "/courses", COURSE)
        person = _post(client, "/persons", PERSON)
        billing = _post(client, "/billing-profiles", BILLING)
        voucher = _post(client, "/vouchers", VOUCHER)

        inscription = _post(
            client,
            "/inscriptions",
            {
                "course_id": course["id"],
                "person_id": person["id"],
                "billing_id": billing["id"],
                "voucher_id": voucher["id"],
            },
        )
        assert inscription["status"] == "PENDING"

        invoice = _post(
            client,
            "/invoices",
            {
                "inscription_id": inscription["id"],
                "billing_id": billing["id"],
                "amount_paid": "150.00",
                "income_number": "ING-2030-001",
                "invoice_number": "FAC-2030-001",
            },
        )
        pending = client.get("/api/v1/reports", params={"kind": "pending"}).json()["data"]
        assert pending["rows"][0]["payment_status"] == "IN_REVIEW"

        _post(client, f"/invoices/{invoice['id']}/verify", {})
        enrolled = client.patch(
            f"/api/v1/inscriptions/{inscription['id']}", json={"enrolled": True}, headers=ADMIN
        )
        assert enrolled.status_code == 200
        assert enrolled.json()["data"]["status"] == "ENROLLED"

        report = client.get("/api/v1/reports", params={"kind": "enrolled"}).json()["data"]
        assert report["total_records"] == 1
        assert report["summary"]["enrolled"] == 1
        assert report["summary"]["verified_income"] == "150.00"

    def test_course_listing_persists_across_requests(self, client: TestClient) -> None:
        for code in ("A-1", "B-2", "C-3"):
            _post(client, "/courses", {**COURSE, "short_code": code})

        first = client.get("/api/v1/courses", params={"page_size": 2, "order_by": "short_code"})
        second = client.get(
            "/api/v1/courses", params={"page": 2, "page_size": 2, "order_by": "short_code"}
        )

        assert [c["short_code"] for c in first.json()["data"]["items"]] == ["A-1", "B-2"]
        assert [c["short_code"] for c in second.json()["data"]["items"]] == ["C-3"]

    def test_errors_use_envelope(self, client: TestClient) -> None:
        missing = client.get("/api/v1/inscriptions/404")
        forbidden = client.patch(
            "/api/v1/inscriptions/404", json={"course_id": 1}, headers={"X-Role": "staff"}
        )

        assert missing.status_code == 404
        assert missing.json() == {"data": None, "error": "Inscription with ID 404 not found"}
        assert forbidden.status_code == 403
        assert forbidden.json()["data"] is None


@pytest.mark.integration
class TestDataSurvivesRestart:
    """A new app on the same file sees earlier writes."""

    def test_restart(self, db_path: str) -> None:
        with TestClient(create_app(Settings(db_path=db_path))) as client:
            _post(client, "/courses", COURSE)

        with TestClient(create_app(Settings(db_path=db_path))) as client:
            response = client.get("/api/v1/courses")

        assert response.json()["data"]["total"] == 1
