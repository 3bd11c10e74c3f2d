"""
AWS Lambda handler for the Registration Pricing Engine API.

This is the production entry point for AWS Lambda deployments.
For local development, use main.py (Flask app) instead.
"""

import base64
import json
import logging
import os

from registration_engine import RegistrationProcessor
from registration_engine.errors import ResolutionError, ValidationError

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Environment (dev, staging, prod)
ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")

# Venue capacity used when a catalog request does not carry max_attendees
DEFAULT_MAX_ATTENDEES = int(os.environ["DEFAULT_MAX_ATTENDEES"]) if os.environ.get("DEFAULT_MAX_ATTENDEES") else None

# Initialize processor (reused across warm invocations)
processor = RegistrationProcessor()

# CORS headers for API Gateway
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}

POST_ROUTES = {
    "/quote_registration": ("registration quote", lambda data: processor.quote_registration_from_dict(data)),
    "/ticket_availability": ("ticket availability", lambda data: processor.check_availability_from_dict(data)),
    "/validate_catalog": (
        "catalog validation",
        lambda data: processor.validate_catalog_from_dict(data, DEFAULT_MAX_ATTENDEES),
    ),
    "/validate_pricing": ("pricing validation", lambda data: processor.validate_pricing_from_dict(data)),
}


def lambda_handler(event, context):
    """
    Main Lambda entry point.

    Handles API Gateway events for:
    - GET /health
    - GET /api
    - POST /quote_registration, /ticket_availability, /validate_catalog, /validate_pricing
    - OPTIONS (CORS preflight)
    """
    # Handle CORS preflight
    http_method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    if http_method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS_HEADERS, "body": ""}

    # Get path (supports both REST API and HTTP API formats)
    path = event.get("path") or event.get("rawPath", "")

    # Route to appropriate handler
    if path == "/health" and http_method == "GET":
        return handle_health()
    elif path == "/api" and http_method == "GET":
        return handle_api_info()
    elif path in POST_ROUTES and http_method == "POST":
        label, operation = POST_ROUTES[path]
        return handle_operation(event, label, operation)
    else:
        return _response(404, {"error": "Not found", "path": path})


def _response(status_code, body):
    return {"statusCode": status_code, "headers": CORS_HEADERS, "body": json.dumps(body)}


def handle_health():
    """Health check endpoint."""
    return _response(200, {"status": "healthy", "environment": ENVIRONMENT})


def handle_api_info():
    """API information endpoint."""
    return _response(
        200,
        {
            "status": "ok",
            "message": "Registration Pricing & Ticket Inventory API",
            "version": "1.0",
            "environment": ENVIRONMENT,
            "runtime": "AWS Lambda",
            "endpoints": {path: f"{path} [POST]" for path in POST_ROUTES} | {"health": "/health [GET]"},
        },
    )


def handle_operation(event, label, operation):
    """Parse the request body and run an engine operation on it."""
    try:
        body = event.get("body", "")
        if isinstance(body, str):
            if not body:
                return _response(400, {"error": "No input data provided", "status": "failed"})
            # Handle base64 encoded body (API Gateway)
            if event.get("isBase64Encoded"):
                body = base64.b64decode(body).decode("utf-8")
            input_data = json.loads(body)
        else:
            input_data = body

        logger.info(f"Processing {label}")
        result = operation(input_data)
        return _response(200, result)

    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return _response(400, {"error": f"Invalid JSON: {str(e)}", "status": "failed"})

    except ValidationError as e:
        logger.error(f"Validation error: {e}")
        return _response(
            400,
            {
                "error": e.message,
                "code": e.code.value,
                "issues": [issue.to_dict() for issue in e.issues],
                "status": "validation_failed",
            },
        )

    except ResolutionError as e:
        # Checkout must be blocked; never fall back to a zero price
        logger.warning(f"Resolution error: {e}")
        return _response(422, {"error": e.message, "code": e.code.value, "status": "resolution_failed"})

    except (ValueError, KeyError, TypeError) as e:
        # Malformed payloads (missing fields, invalid types, etc.)
        logger.error(f"Validation error: {str(e)}")
        return _response(400, {"error": f"Validation error: {str(e)}", "status": "validation_failed"})

    except Exception as e:
        # Unexpected errors - log details but return generic message to avoid information disclosure
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        return _response(500, {"error": "An unexpected error occurred during processing", "status": "failed"})
