"""
Output Builder

Constructs JSON-ready API responses from engine results.
"""

from decimal import Decimal

from .errors import INTEGRITY_CODES
from .models import Availability, OrderQuote, PaymentOption, RegistrationQuote, ValidationResult


def to_money(value: Decimal | None) -> float | None:
    """Convert Decimal to float with 2 decimal places."""
    if value is None:
        return None
    return round(float(value), 2)


def _fmt(value) -> str:
    """Format a number as currency string for descriptions."""
    return f"£{value:,.2f}"


class OutputBuilder:
    """Builds the response sections returned by the processor."""

    def build_quote(self, quote: RegistrationQuote) -> dict:
        """Resolved tier and every payment option for a registration."""
        tier = quote.tier
        return {
            "registration_summary": {
                "application_type": quote.application_type,
                "event_start_date": quote.event_start_date.isoformat(),
                "as_of": quote.as_of.isoformat(),
                "lead_months": quote.lead_months,
            },
            "tier": {
                "tier_name": tier.name,
                "months_before_event": tier.months_before_event,
                "full_price": to_money(tier.full_price),
                "description": (
                    f"Registered {quote.lead_months} months before the event; "
                    f"'{tier.name}' applies from {tier.months_before_event} months out at {_fmt(tier.full_price)}"
                ),
            },
            "payment_options": [self._build_option(o) for o in quote.payment_options],
            "warnings": list(quote.warnings),
        }

    def _build_option(self, option: PaymentOption) -> dict:
        count = len(option.installments)
        if option.plan == "full":
            description = f"Single payment of {_fmt(option.total)}"
        else:
            first = option.installments[0].amount
            description = f"{count} monthly payments of {_fmt(first)} totalling {_fmt(option.total)}"

        return {
            "plan": option.plan,
            "total": to_money(option.total),
            "description": description,
            "installments": [
                {
                    "number": p.number,
                    "amount": to_money(p.amount),
                    "due_date": p.due_date.isoformat() if p.due_date else None,
                }
                for p in option.installments
            ],
            "warning": option.warning,
        }

    def build_availability(self, ticket_names: dict, availability: dict) -> list[dict]:
        """One entry per ticket type, in catalog order."""
        return [self._build_availability_entry(ticket_names[ticket_id], a) for ticket_id, a in availability.items()]

    def _build_availability_entry(self, name: str, availability: Availability) -> dict:
        return {
            "ticket_type_id": str(availability.ticket_type_id),
            "name": name,
            "purchasable": availability.purchasable,
            "remaining": availability.remaining,
            "unlimited": availability.is_unlimited,
            "reason": availability.reason.value if availability.reason else None,
        }

    def build_order_quote(self, quote: OrderQuote) -> dict:
        if not quote.accepted:
            description = f"Order rejected: {quote.reason.value}"
        elif quote.discount_code:
            description = (
                f"{quote.quantity} × {_fmt(quote.unit_price)} = {_fmt(quote.subtotal)}, "
                f"less {quote.discount_code} ({_fmt(quote.discount_amount)}) = {_fmt(quote.total)}"
            )
        else:
            description = f"{quote.quantity} × {_fmt(quote.unit_price)} = {_fmt(quote.total)}"

        return {
            "ticket_type_id": str(quote.ticket_type_id),
            "quantity": quote.quantity,
            "unit_price": to_money(quote.unit_price),
            "subtotal": to_money(quote.subtotal),
            "discount_code": quote.discount_code,
            "discount_amount": to_money(quote.discount_amount),
            "total": to_money(quote.total),
            "accepted": quote.accepted,
            "reason": quote.reason.value if quote.reason else None,
            "description": description,
        }

    def build_validation(self, result: ValidationResult, warnings=()) -> dict:
        return {
            "valid": result.ok,
            "integrity_failure": any(issue.code in INTEGRITY_CODES for issue in result.issues),
            "issues": [issue.to_dict() for issue in result.issues],
            "warnings": list(warnings),
        }
