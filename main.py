from flask import Flask, request, jsonify
from flask_cors import CORS
from registration_engine import RegistrationProcessor
from registration_engine.errors import ResolutionError, ValidationError
import os
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)

# Enable CORS for all routes (settings UI and registration pages call the API directly)
CORS(app)

# Venue capacity used when a catalog request does not carry max_attendees
DEFAULT_MAX_ATTENDEES = int(os.environ["DEFAULT_MAX_ATTENDEES"]) if os.environ.get("DEFAULT_MAX_ATTENDEES") else None

# Initialize the registration processor
processor = RegistrationProcessor()


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Registration Pricing & Ticket Inventory API",
        "version": "1.0",
        "endpoints": {
            "quote_registration": "/quote_registration [POST]",
            "ticket_availability": "/ticket_availability [POST]",
            "validate_catalog": "/validate_catalog [POST]",
            "validate_pricing": "/validate_pricing [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


def _handle(operation, label):
    """Run an engine operation on the JSON body and map errors to responses."""
    try:
        input_data = request.get_json(force=True, silent=True)

        if not input_data:
            return jsonify({
                "error": "No input data provided",
                "status": "failed"
            }), 400

        logger.info(f"Processing {label}")
        result = operation(input_data)
        return jsonify(result), 200

    except ValidationError as e:
        logger.error(f"Validation error: {e}")
        return jsonify({
            "error": e.message,
            "code": e.code.value,
            "issues": [issue.to_dict() for issue in e.issues],
            "status": "validation_failed"
        }), 400

    except ResolutionError as e:
        # Checkout must be blocked; never fall back to a zero price
        logger.warning(f"Resolution error: {e}")
        return jsonify({
            "error": e.message,
            "code": e.code.value,
            "status": "resolution_failed"
        }), 422

    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"Validation error: {str(e)}")
        return jsonify({
            "error": f"Validation error: {str(e)}",
            "status": "validation_failed"
        }), 400

    except Exception as e:
        logger.error(f"Processing error: {str(e)}", exc_info=True)
        return jsonify({
            "error": "An unexpected error occurred during processing",
            "status": "failed"
        }), 500


@app.route("/quote_registration", methods=["POST"])
def quote_registration():
    """Resolve the registration price and payment options"""
    return _handle(processor.quote_registration_from_dict, "registration quote")


@app.route("/ticket_availability", methods=["POST"])
def ticket_availability():
    """Availability of every ticket type for a date"""
    return _handle(processor.check_availability_from_dict, "ticket availability")


@app.route("/validate_catalog", methods=["POST"])
def validate_catalog():
    """Validate ticket types before they are saved"""
    return _handle(
        lambda data: processor.validate_catalog_from_dict(data, DEFAULT_MAX_ATTENDEES),
        "catalog validation"
    )


@app.route("/validate_pricing", methods=["POST"])
def validate_pricing():
    """Validate pricing tiers before they are saved"""
    return _handle(processor.validate_pricing_from_dict, "pricing validation")


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
