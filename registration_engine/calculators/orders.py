"""
Order Quoter

Checks a requested quantity of one ticket type against its availability
and per-order limits, and prices it, applying a discount code if given.
"""

from datetime import date
from decimal import Decimal

from ..models import Availability, DenialReason, DiscountType, OrderQuote, TicketDiscount, TicketType, parse_date
from .installments import quantize_money

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class OrderQuoter:
    """Prices a single ticket line of an order."""

    def quote(
        self,
        ticket: TicketType,
        quantity: int,
        availability: Availability,
        attendee_age: int | None = None,
        discount: TicketDiscount | None = None,
        on_date=None,
    ) -> OrderQuote:
        """
        Accept or reject the requested quantity.

        Priority order:
        1. Availability denial (inactive, window, day, dependency, sold out)
        2. Quantity below one
        3. Above the per-order maximum
        4. Above the remaining capacity
        5. Attendee younger than the minimum age
        6. Discount inactive, outside its dates, or used up

        on_date is the day the discount is redeemed (defaults to today).
        """
        unit_price = quantize_money(ticket.price_gbp)
        code = discount.code if discount is not None else None

        def reject(reason: DenialReason) -> OrderQuote:
            return OrderQuote(
                ticket_type_id=ticket.id,
                quantity=quantity,
                unit_price=unit_price,
                total=None,
                accepted=False,
                reason=reason,
                discount_code=code,
                availability=availability,
            )

        if not availability.purchasable:
            return reject(availability.reason)

        if quantity < 1:
            return reject(DenialReason.INVALID_QUANTITY)

        if ticket.max_per_order is not None and quantity > ticket.max_per_order:
            return reject(DenialReason.EXCEEDS_MAX_PER_ORDER)

        if availability.remaining is not None and quantity > availability.remaining:
            return reject(DenialReason.INSUFFICIENT_REMAINING)

        if ticket.min_age is not None and attendee_age is not None and attendee_age < ticket.min_age:
            return reject(DenialReason.AGE_RESTRICTED)

        subtotal = quantize_money(unit_price * quantity)
        total = subtotal

        if discount is not None:
            day = parse_date(on_date) if on_date is not None else date.today()
            if not discount.is_active:
                return reject(DenialReason.DISCOUNT_INACTIVE)
            if not discount.valid_on(day):
                return reject(DenialReason.DISCOUNT_OUTSIDE_WINDOW)
            if discount.exhausted:
                return reject(DenialReason.DISCOUNT_EXHAUSTED)
            total = self.apply_discount(subtotal, discount)

        return OrderQuote(
            ticket_type_id=ticket.id,
            quantity=quantity,
            unit_price=unit_price,
            total=total,
            accepted=True,
            subtotal=subtotal,
            discount_code=code,
            discount_amount=subtotal - total if discount is not None else None,
            availability=availability,
        )

    @staticmethod
    def apply_discount(subtotal: Decimal, discount: TicketDiscount) -> Decimal:
        """Discounted total, never below zero."""
        if discount.discount_type == DiscountType.PERCENTAGE:
            discounted = subtotal * (1 - discount.discount_value / HUNDRED)
        else:
            discounted = subtotal - discount.discount_value
        return quantize_money(max(discounted, ZERO))
