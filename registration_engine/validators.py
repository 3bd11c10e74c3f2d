"""
Input Validation for the Registration Engine

Validates tier tables, ticket types and discount codes before they are accepted or persisted.
Returns ValidationResult objects with field-level issues; nothing is raised
for malformed input at this level.
"""

from decimal import Decimal

from .errors import ErrorCode
from .models import DiscountType, PricingTier, TicketDiscount, TicketType, TierTable, ValidationIssue, ValidationResult

MIN_AGE_LIMIT = 100
PENNY = Decimal("0.01")


def is_whole_pence(amount: Decimal) -> bool:
    return amount == amount.quantize(PENNY)


class TierTableValidator:
    """Validates a tier table according to business rules."""

    def validate(self, table: TierTable) -> ValidationResult:
        """
        Run all tier table checks and collect every issue found.
        """
        issues: list[ValidationIssue] = []

        if table.enabled and not table.tiers:
            issues.append(
                ValidationIssue(
                    code=ErrorCode.EMPTY_TABLE,
                    field="pricing_tiers",
                    message=f"{table.application_type} must have at least one pricing tier",
                )
            )

        for i, tier in enumerate(table.tiers):
            issues.extend(self._validate_tier(i, tier))

        return ValidationResult(issues=tuple(issues))

    def _validate_tier(self, index: int, tier: PricingTier) -> list[ValidationIssue]:
        """Validate tier-level constraints."""
        issues = []

        def invalid(field: str, message: str) -> None:
            issues.append(ValidationIssue(ErrorCode.INVALID_TIER, f"pricing_tiers[{index}].{field}", message))

        if not tier.name or not tier.name.strip():
            invalid("tier_name", "All tiers must have a name")

        if tier.months_before_event < 0:
            invalid("months_before_event", f"months_before_event cannot be negative, got: {tier.months_before_event}")

        if tier.full_price <= 0:
            invalid("full_price", f"full_price must be positive, got: {tier.full_price}")
        elif not is_whole_pence(tier.full_price):
            invalid("full_price", f"full_price must be a whole number of pence, got: {tier.full_price}")

        for plan in (3, 6):
            total = tier.installment_total(plan)
            if tier.installment_enabled(plan) and (total is None or total <= 0):
                invalid(f"installment_{plan}_total", f"{plan}-month installment total must be greater than zero")
            elif total is not None and not is_whole_pence(total):
                invalid(
                    f"installment_{plan}_total",
                    f"{plan}-month installment total must be a whole number of pence, got: {total}",
                )

        return issues


class TicketValidator:
    """Validates the fields of a single ticket type (no catalog context)."""

    def validate(self, ticket: TicketType) -> ValidationResult:
        issues = []

        def invalid(field: str, message: str) -> None:
            issues.append(ValidationIssue(ErrorCode.INVALID_TICKET, field, message))

        if not ticket.name or not ticket.name.strip():
            invalid("name", "All ticket types must have a name")

        if ticket.price_gbp < Decimal("0"):
            invalid("price_gbp", f"price_gbp cannot be negative, got: {ticket.price_gbp}")
        elif not is_whole_pence(ticket.price_gbp):
            invalid("price_gbp", f"price_gbp must be a whole number of pence, got: {ticket.price_gbp}")

        if ticket.end_date < ticket.start_date:
            invalid(
                "end_date",
                f"end_date ({ticket.end_date.isoformat()}) is before start_date ({ticket.start_date.isoformat()})",
            )

        if ticket.capacity is not None and ticket.capacity <= 0:
            invalid("capacity", f"capacity must be positive when set, got: {ticket.capacity}")

        if ticket.max_per_order is not None and ticket.max_per_order <= 0:
            invalid("max_per_order", f"max_per_order must be positive when set, got: {ticket.max_per_order}")

        if ticket.min_age is not None and not (0 <= ticket.min_age <= MIN_AGE_LIMIT):
            invalid("min_age", f"min_age must be between 0 and {MIN_AGE_LIMIT}, got: {ticket.min_age}")

        return ValidationResult(issues=tuple(issues))


class DiscountValidator:
    """Validates discount codes before they are saved or redeemed."""

    def validate(self, discount: TicketDiscount, prefix: str = "") -> ValidationResult:
        issues = []

        def invalid(field: str, message: str) -> None:
            issues.append(ValidationIssue(ErrorCode.INVALID_DISCOUNT, f"{prefix}{field}", message))

        if not discount.code or not discount.code.strip():
            invalid("code", "All discounts must have a code")

        value = discount.discount_value
        if value <= 0:
            invalid("discount_value", f"discount_value must be positive, got: {value}")
        elif discount.discount_type == DiscountType.PERCENTAGE and value > 100:
            invalid("discount_value", f"A percentage discount cannot exceed 100, got: {value}")
        elif discount.discount_type == DiscountType.FIXED and not is_whole_pence(value):
            invalid("discount_value", f"A fixed discount must be a whole number of pence, got: {value}")

        if discount.end_date is not None and discount.end_date < discount.start_date:
            invalid(
                "end_date",
                f"end_date ({discount.end_date.isoformat()}) is before start_date ({discount.start_date.isoformat()})",
            )

        if discount.max_uses is not None and discount.max_uses <= 0:
            invalid("max_uses", f"max_uses must be positive when set, got: {discount.max_uses}")

        if discount.current_uses < 0:
            invalid("current_uses", f"current_uses cannot be negative, got: {discount.current_uses}")

        return ValidationResult(issues=tuple(issues))

    def validate_all(self, discounts) -> ValidationResult:
        """Validate every discount of an event; codes must be unique ignoring case."""
        result = ValidationResult()
        seen = set()
        for i, discount in enumerate(discounts):
            prefix = f"discounts[{i}]."
            result = result.merge(self.validate(discount, prefix))

            code = discount.code.strip().upper()
            if code and code in seen:
                result = result.merge(
                    ValidationResult(
                        issues=(
                            ValidationIssue(
                                ErrorCode.INVALID_DISCOUNT,
                                f"{prefix}code",
                                f"Discount code '{code}' is used more than once",
                            ),
                        )
                    )
                )
            seen.add(code)
        return result
