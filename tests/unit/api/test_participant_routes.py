"""Unit tests for person, billing profile, voucher and discount routes."""

import pytest
from factories import BILLING, PERSON, VOUCHER
from fastapi.testclient import TestClient


@pytest.mark.unit
class TestPersonRoutes:
    """Tests for /persons."""

    def test_create_and_lookup(self, client: TestClient) -> None:
        created = client.post("/api/v1/persons", json=PERSON)

        by_identification = client.get("/api/v1/persons/by-identification/1710034065")

        assert created.status_code == 201
        assert by_identification.status_code == 200
        assert by_identification.json()["data"]["id"] == created.json()["data"]["id"]

    def test_invalid_cedula(self, client: TestClient) -> None:
        response = client.post("/api/v1/persons", json={**PERSON, "identification": "1710034066"})

        assert response.status_code == 422
        assert "cedula" in response.json()["error"]

    def test_duplicate_email(self, client: TestClient) -> None:
        client.post("/api/v1/persons", json=PERSON)

        response = client.post("/api/v1/persons", json={**PERSON, "identification": "0926687856"})

        assert response.status_code == 409

    def test_lookup_missing(self, client: TestClient) -> None:
        response = client.get("/api/v1/persons/by-identification/0926687856")

        assert response.status_code == 404
        assert response.json()["error"] == "Person with identification 0926687856 not found"

    def test_patch_and_list(self, client: TestClient) -> None:
        person_id = client.post("/api/v1/persons", json=PERSON).json()["data"]["id"]

        patched = client.patch(f"/api/v1/persons/{person_id}", json={"institution": "USFQ"})
        listing = client.get("/api/v1/persons")

        assert patched.json()["data"]["institution"] == "USFQ"
        assert listing.json()["data"]["total"] == 1

    def test_delete(self, client: TestClient) -> None:
        person_id = client.post("/api/v1/persons", json=PERSON).json()["data"]["id"]

        assert client.delete(f"/api/v1/persons/{person_id}").status_code == 204
        assert client.get(f"/api/v1/persons/{person_id}").status_code == 404


@pytest.mark.unit
class TestBillingProfileRoutes:
    """Tests for /billing-profiles."""

    def test_crud(self, client: TestClient) -> None:
        created = client.post("/api/v1/billing-profiles", json=BILLING)
        billing_id = created.json()["data"]["id"]

        patched = client.patch(
            f"/api/v1/billing-profiles/{billing_id}", json={"phone": "072800000"}
        )
        deleted = client.delete(f"/api/v1/billing-profiles/{billing_id}")

        assert created.status_code == 201
        assert patched.json()["data"]["phone"] == "072800000"
        assert deleted.status_code == 204
        assert client.get(f"/api/v1/billing-profiles/{billing_id}").status_code == 404


@pytest.mark.unit
class TestVoucherRoutes:
    """Tests for /vouchers."""

    def test_create_get_delete(self, client: TestClient) -> None:
        created = client.post("/api/v1/vouchers", json=VOUCHER)
        voucher_id = created.json()["data"]["id"]

        fetched = client.get(f"/api/v1/vouchers/{voucher_id}")
        deleted = client.delete(f"/api/v1/vouchers/{voucher_id}")

        assert created.status_code == 201
        assert fetched.json()["data"]["filename"] == "voucher.pdf"
        assert fetched.json()["data"]["uploaded_at"] is not None
        assert deleted.status_code == 204

    def test_voucher_in_use(self, client: TestClient, seeded: dict[str, int]) -> None:
        client.post("/api/v1/inscriptions", json=seeded)

        response = client.delete(f"/api/v1/vouchers/{seeded['voucher_id']}")

        assert response.status_code == 409


@pytest.mark.unit
class TestDiscountRoutes:
    """Tests for /discounts."""

    def test_crud(self, client: TestClient) -> None:
        created = client.post(
            "/api/v1/discounts", json={"kind": "group", "amount": "30.00", "student_count": 3}
        )
        discount_id = created.json()["data"]["id"]

        patched = client.patch(f"/api/v1/discounts/{discount_id}", json={"percentage": "5"})
        listing = client.get("/api/v1/discounts")
        deleted = client.delete(f"/api/v1/discounts/{discount_id}")

        assert created.status_code == 201
        assert created.json()["data"]["amount"] == "30.00"
        assert patched.json()["data"]["percentage"] == "5.00"
        assert len(listing.json()["data"]) == 1
        assert deleted.status_code == 204

    def test_percentage_out_of_range(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/discounts", json={"kind": "bad", "amount": "0", "percentage": "150"}
        )

        assert response.status_code == 422
