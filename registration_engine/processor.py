"""
Registration Processor - Main Orchestrator

Coordinates tier resolution, installment planning, catalog validation and
ticket availability for the settings and registration services.
"""

import logging
from datetime import date
from typing import Any, Dict
from uuid import UUID

from .calculators import InstallmentCalculator, OrderQuoter, TicketAvailabilityEngine, TierResolver
from .catalog import TicketCatalog
from .errors import ErrorCode, ResolutionError, ValidationError
from .models import RegistrationQuote, SaleRecord, TicketDiscount, TierTable, ValidationIssue, parse_date
from .output import OutputBuilder
from .validators import DiscountValidator

logger = logging.getLogger(__name__)


class RegistrationProcessor:
    """
    Main orchestrator for registration pricing and ticket inventory.

    Registration quote pipeline:
    1. Validate the tier table
    2. Resolve the applicable tier
    3. Build payment options (full, 3 and 6 installments)
    4. Build output

    Ticket availability pipeline:
    1. Load catalog and sales snapshot
    2. Evaluate every ticket type
    3. Quote the requested order line, if any
    4. Build output
    """

    def __init__(self):
        self.resolver = TierResolver()
        self.installment_calculator = InstallmentCalculator()
        self.availability_engine = TicketAvailabilityEngine()
        self.order_quoter = OrderQuoter()
        self.discount_validator = DiscountValidator()
        self.output_builder = OutputBuilder()

    # -------------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------------

    def quote_registration(
        self,
        table: TierTable,
        event_start_date,
        as_of=None,
        installment_start_date=None,
    ) -> RegistrationQuote:
        """
        Resolve the price of a registration and its payment options.

        Raises:
            ValidationError: the tier table is malformed
            ResolutionError: no tier applies or fees are disabled
        """
        # Step 1: Validate
        result = table.validate()
        if not result.ok:
            raise ValidationError(result.issues)

        # Step 2: Resolve tier
        event_start = parse_date(event_start_date)
        registered_on = parse_date(as_of) if as_of is not None else date.today()
        tier = self.resolver.resolve(table, event_start, registered_on)

        # Step 3: Payment options
        start = parse_date(installment_start_date) if installment_start_date is not None else registered_on
        options = self.installment_calculator.payment_options(tier, start)

        return RegistrationQuote(
            application_type=table.application_type,
            event_start_date=event_start,
            as_of=registered_on,
            lead_months=self.resolver.lead_months(registered_on, event_start),
            tier=tier,
            payment_options=options,
        )

    def quote_registration_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Quote a registration from raw dictionary input.

        Convenience method for API usage.
        """
        table = TierTable.from_dict(data["pricing_settings"])
        quote = self.quote_registration(
            table,
            data["event_start_date"],
            as_of=data.get("as_of"),
            installment_start_date=data.get("installment_start_date"),
        )
        logger.info(f"Quoted tier '{quote.tier.name}' for {quote.application_type}")
        return self.output_builder.build_quote(quote)

    def validate_pricing_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate one or more tier tables; installment totals below full price are warnings."""
        settings = data["pricing_settings"]
        if isinstance(settings, dict):
            settings = [settings]

        responses = []
        for raw in settings:
            table = TierTable.from_dict(raw)
            result = table.validate()
            warnings = []
            for tier in table.tiers:
                for plan in self.installment_calculator.PLAN_LENGTHS:
                    warning = self.installment_calculator.surcharge_warning(tier, plan)
                    if warning:
                        warnings.append(warning)
            response = self.output_builder.build_validation(result, warnings)
            response["application_type"] = table.application_type
            responses.append(response)

        return {"valid": all(r["valid"] for r in responses), "pricing_settings": responses}

    # -------------------------------------------------------------------------
    # Tickets
    # -------------------------------------------------------------------------

    def validate_catalog_from_dict(self, data: Dict[str, Any], default_max_attendees: int | None = None) -> Dict[str, Any]:
        """
        Validate a catalog and its discount codes before they are saved.
        Any issue blocks the save; a catalog with dangling or cyclic
        dependencies is never persisted.
        """
        catalog = TicketCatalog.from_dict(data.get("event_id"), data.get("ticket_types", []))
        max_attendees = data.get("max_attendees", default_max_attendees)

        discounts = [TicketDiscount.from_dict(d) for d in data.get("discounts", [])]

        result = catalog.validate().merge(catalog.validate_venue_capacity(max_attendees))
        result = result.merge(self.discount_validator.validate_all(discounts))
        if not result.ok:
            logger.info(f"Catalog for event {catalog.event_id} failed validation: {result.first_error.message}")

        return self.output_builder.build_validation(result)

    def check_availability_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Availability of every ticket type for a date, and an optional order
        quote: {"ticket_type_id", "quantity", "attendee_age"?, "discount_code"?}.
        Discount codes are looked up in "discounts", ignoring case.
        """
        catalog = TicketCatalog.from_dict(data.get("event_id"), data.get("ticket_types", []))
        sales = [SaleRecord.from_dict(s) for s in data.get("sales", [])]
        purchased = {UUID(str(i)) for i in data.get("purchased_ticket_ids", [])}
        on_date = parse_date(data["date"])

        availability = self.availability_engine.catalog_availability(catalog, on_date, sales, purchased)
        names = {t.id: t.name for t in catalog}

        output = {
            "date": on_date.isoformat(),
            "ticket_types": self.output_builder.build_availability(names, availability),
        }

        order = data.get("order")
        if order:
            ticket_id = UUID(str(order["ticket_type_id"]))
            ticket = catalog.get(ticket_id)
            if ticket is None:
                issue = ValidationIssue(
                    ErrorCode.UNKNOWN_TICKET, "order.ticket_type_id", f"Unknown ticket type in order: {ticket_id}"
                )
                raise ValidationError([issue])
            quote = self.order_quoter.quote(
                ticket,
                int(order.get("quantity", 1)),
                availability[ticket_id],
                attendee_age=order.get("attendee_age"),
                discount=self._find_discount(data.get("discounts", []), order.get("discount_code")),
                on_date=on_date,
            )
            output["order"] = self.output_builder.build_order_quote(quote)

        return output

    def _find_discount(self, raw_discounts: list, code: str | None) -> TicketDiscount | None:
        """
        Resolve an order's discount code, ignoring case. An unknown or
        malformed code raises ValidationError.
        """
        if not code:
            return None

        for raw in raw_discounts:
            discount = TicketDiscount.from_dict(raw)
            if discount.matches(code):
                result = self.discount_validator.validate(discount)
                if not result.ok:
                    raise ValidationError(result.issues)
                return discount

        issue = ValidationIssue(ErrorCode.UNKNOWN_DISCOUNT, "order.discount_code", f"Unknown discount code: {code}")
        raise ValidationError([issue])


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def quote_registration_from_json(json_input: str) -> str:
    """
    Quote a registration from JSON string input and return JSON string output.
    """
    import json

    try:
        input_data = json.loads(json_input)
        processor = RegistrationProcessor()
        result = processor.quote_registration_from_dict(input_data)
        return json.dumps(result, indent=2)

    except ValidationError as e:
        error_response = {"error": e.message, "code": e.code.value, "status": "validation_failed"}
        return json.dumps(error_response, indent=2)

    except ResolutionError as e:
        error_response = {"error": e.message, "code": e.code.value, "status": "resolution_failed"}
        return json.dumps(error_response, indent=2)

    except ValueError as e:
        error_response = {"error": str(e), "status": "validation_failed"}
        return json.dumps(error_response, indent=2)
