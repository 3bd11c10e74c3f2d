"""Tests for AWS Lambda handler."""

import base64
import json
import uuid

from lambda_handler import lambda_handler

PRICING_SETTINGS = {
    "application_type": "standard",
    "enabled": True,
    "pricing_tiers": [
        {"tier_name": "Late", "months_before_event": 0, "full_price": 150},
        {"tier_name": "Early", "months_before_event": 6, "full_price": 100},
    ],
}


def post(path, payload):
    return {"httpMethod": "POST", "path": path, "body": json.dumps(payload)}


class TestLambdaHandler:
    """Test the Lambda handler routes and responses."""

    def test_health_check(self):
        """GET /health returns healthy status."""
        event = {"httpMethod": "GET", "path": "/health"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["status"] == "healthy"

    def test_api_info(self):
        """GET /api lists every route."""
        event = {"httpMethod": "GET", "path": "/api"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["status"] == "ok"
        assert "/quote_registration" in body["endpoints"]
        assert "health" in body["endpoints"]

    def test_cors_preflight(self):
        """OPTIONS requests return CORS headers."""
        event = {"httpMethod": "OPTIONS", "path": "/quote_registration"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        assert "Access-Control-Allow-Origin" in response["headers"]
        assert "Access-Control-Allow-Methods" in response["headers"]

    def test_not_found(self):
        """Unknown paths return 404."""
        event = {"httpMethod": "GET", "path": "/unknown"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 404

    def test_quote_registration_success(self):
        """POST /quote_registration resolves the tier."""
        payload = {"pricing_settings": PRICING_SETTINGS, "event_start_date": "2026-06-15", "as_of": "2025-11-01"}
        response = lambda_handler(post("/quote_registration", payload), None)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["tier"]["tier_name"] == "Early"
        assert body["payment_options"][0]["total"] == 100.0

    def test_quote_registration_base64_body(self):
        """API Gateway may deliver the body base64 encoded."""
        payload = {"pricing_settings": PRICING_SETTINGS, "event_start_date": "2026-06-15", "as_of": "2026-05-20"}
        event = {
            "httpMethod": "POST",
            "path": "/quote_registration",
            "isBase64Encoded": True,
            "body": base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii"),
        }
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        assert json.loads(response["body"])["tier"]["tier_name"] == "Late"

    def test_quote_registration_disabled_returns_422(self):
        """Disabled fees block checkout instead of charging zero."""
        payload = {
            "pricing_settings": {**PRICING_SETTINGS, "enabled": False},
            "event_start_date": "2026-06-15",
            "as_of": "2025-11-01",
        }
        response = lambda_handler(post("/quote_registration", payload), None)

        assert response["statusCode"] == 422
        body = json.loads(response["body"])
        assert body["status"] == "resolution_failed"
        assert body["code"] == "TIER_DISABLED"

    def test_quote_registration_invalid_table(self):
        """A malformed tier table returns 400 with its issues."""
        payload = {
            "pricing_settings": {**PRICING_SETTINGS, "pricing_tiers": []},
            "event_start_date": "2026-06-15",
        }
        response = lambda_handler(post("/quote_registration", payload), None)

        assert response["statusCode"] == 400
        body = json.loads(response["body"])
        assert body["status"] == "validation_failed"
        assert body["issues"][0]["field"] == "pricing_tiers"

    def test_missing_field(self):
        """Missing required keys return 400."""
        response = lambda_handler(post("/quote_registration", {"pricing_settings": PRICING_SETTINGS}), None)

        assert response["statusCode"] == 400
        assert json.loads(response["body"])["status"] == "validation_failed"

    def test_empty_body(self):
        """POST with empty body returns 400."""
        event = {"httpMethod": "POST", "path": "/validate_pricing", "body": ""}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 400
        body = json.loads(response["body"])
        assert "error" in body

    def test_invalid_json(self):
        """POST with invalid JSON returns 400."""
        event = {"httpMethod": "POST", "path": "/validate_catalog", "body": "not valid json"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 400
        body = json.loads(response["body"])
        assert "error" in body

    def test_validate_catalog(self):
        """POST /validate_catalog reports integrity failures."""
        parking = {
            "id": str(uuid.uuid4()),
            "name": "Parking",
            "price_gbp": "10.00",
            "start_date": "2026-05-01",
            "end_date": "2026-06-14",
            "is_active": True,
            "dependency_ticket_id": str(uuid.uuid4()),
        }
        response = lambda_handler(post("/validate_catalog", {"event_id": 1, "ticket_types": [parking]}), None)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert not body["valid"]
        assert body["integrity_failure"]

    def test_ticket_availability(self):
        """POST /ticket_availability evaluates every ticket type."""
        day_pass = {
            "id": str(uuid.uuid4()),
            "name": "Day Pass",
            "price_gbp": "25.00",
            "start_date": "2026-05-01",
            "end_date": "2026-06-14",
            "is_active": True,
            "capacity": 50,
        }
        payload = {
            "ticket_types": [day_pass],
            "sales": [{"ticket_type_id": day_pass["id"], "quantity_sold": 50, "date": "2026-05-20"}],
            "date": "2026-06-01",
        }
        response = lambda_handler(post("/ticket_availability", payload), None)

        assert response["statusCode"] == 200
        entry = json.loads(response["body"])["ticket_types"][0]
        assert not entry["purchasable"]
        assert entry["remaining"] == 0
        assert entry["reason"] == "SOLD_OUT"

    def test_ticket_without_price_returns_400(self):
        """A ticket row with no price is a malformed payload."""
        day_pass = {
            "id": str(uuid.uuid4()),
            "name": "Day Pass",
            "start_date": "2026-05-01",
            "end_date": "2026-06-14",
            "is_active": True,
        }
        response = lambda_handler(post("/validate_catalog", {"ticket_types": [day_pass]}), None)

        assert response["statusCode"] == 400
        assert json.loads(response["body"])["status"] == "validation_failed"

    def test_http_api_format(self):
        """Supports HTTP API v2 event format."""
        event = {"requestContext": {"http": {"method": "GET"}}, "rawPath": "/health"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
