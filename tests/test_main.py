"""Tests for the Flask development server."""

import uuid

import pytest

from main import app

PRICING_SETTINGS = {
    "application_type": "standard",
    "enabled": True,
    "pricing_tiers": [
        {
            "tier_name": "Regular",
            "months_before_event": 0,
            "full_price": 120,
            "installment_3_total": 110,
            "installment_3_enabled": True,
        },
    ],
}


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


class TestFlaskRoutes:
    """Test the HTTP routes and error mapping."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"

    def test_api_info(self, client):
        body = client.get("/api").get_json()

        assert body["status"] == "ok"
        assert "validate_catalog" in body["endpoints"]

    def test_quote_registration(self, client):
        response = client.post(
            "/quote_registration",
            json={"pricing_settings": PRICING_SETTINGS, "event_start_date": "2026-06-15", "as_of": "2026-01-10"},
        )

        assert response.status_code == 200
        body = response.get_json()
        plan = body["payment_options"][1]
        assert plan["plan"] == "3"
        assert [p["amount"] for p in plan["installments"]] == [36.67, 36.67, 36.66]
        assert len(body["warnings"]) == 1

    def test_registration_after_event_start_is_blocked(self, client):
        response = client.post(
            "/quote_registration",
            json={"pricing_settings": PRICING_SETTINGS, "event_start_date": "2026-06-15", "as_of": "2026-06-16"},
        )

        assert response.status_code == 422
        assert response.get_json()["code"] == "NO_APPLICABLE_TIER"

    def test_empty_body(self, client):
        response = client.post("/validate_pricing", data="")

        assert response.status_code == 400
        assert response.get_json()["status"] == "failed"

    def test_bad_date(self, client):
        response = client.post(
            "/quote_registration",
            json={"pricing_settings": PRICING_SETTINGS, "event_start_date": "15/06/2026"},
        )

        assert response.status_code == 400
        assert response.get_json()["status"] == "validation_failed"

    def test_validate_pricing(self, client):
        response = client.post("/validate_pricing", json={"pricing_settings": PRICING_SETTINGS})

        body = response.get_json()
        assert response.status_code == 200
        assert body["valid"]
        assert len(body["pricing_settings"][0]["warnings"]) == 1

    def test_validate_catalog_venue_capacity(self, client):
        tickets = [
            {
                "id": str(uuid.uuid4()),
                "name": name,
                "price_gbp": "25.00",
                "start_date": "2026-05-01",
                "end_date": "2026-06-14",
                "is_active": True,
                "capacity": capacity,
            }
            for name, capacity in (("Day Pass", 300), ("VIP", 200))
        ]
        response = client.post("/validate_catalog", json={"ticket_types": tickets, "max_attendees": 450})

        body = response.get_json()
        assert response.status_code == 200
        assert not body["valid"]
        assert body["issues"][0]["message"] == "Total ticket capacity (500) exceeds the maximum daily capacity (450)"

    def test_unknown_order_ticket(self, client):
        response = client.post(
            "/ticket_availability",
            json={"ticket_types": [], "date": "2026-06-01", "order": {"ticket_type_id": str(uuid.uuid4())}},
        )

        assert response.status_code == 400
        assert response.get_json()["code"] == "UNKNOWN_TICKET"
