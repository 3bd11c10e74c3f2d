"""
Installment Calculator

Splits a tier's installment total into equal payments.
All amounts use Decimal with ROUND_HALF_UP rounding; the final payment
absorbs any rounding remainder so a plan always sums to its total.
"""

import calendar
from datetime import date
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

from ..errors import PlanUnavailableError
from ..models import PaymentInstallment, PaymentOption, PricingTier

CENT = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def add_months(start: date, months: int) -> date:
    """Same day N months later, clamped to the last day of a shorter month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class InstallmentCalculator:
    """Computes payment schedules for a pricing tier."""

    PLAN_LENGTHS = (3, 6)

    def schedule(self, tier: PricingTier, plan: int, start_date: date | None = None) -> tuple[PaymentInstallment, ...]:
        """
        Per-payment amounts for a 3- or 6-payment plan.

        With a start_date, payments fall due monthly from that date.

        Raises:
            PlanUnavailableError: plan length unsupported, disabled on the tier, or no total set
        """
        if plan not in self.PLAN_LENGTHS:
            raise PlanUnavailableError(tier.name, plan)

        total = tier.installment_total(plan)
        if not tier.installment_enabled(plan) or total is None or total <= 0:
            raise PlanUnavailableError(tier.name, plan)

        amounts = self._split(total, plan)
        return tuple(
            PaymentInstallment(
                number=i + 1,
                amount=amount,
                due_date=add_months(start_date, i) if start_date is not None else None,
            )
            for i, amount in enumerate(amounts)
        )

    def _split(self, total: Decimal, count: int) -> list[Decimal]:
        """
        Equal payments rounded to the cent; the last one takes the remainder.

        110 / 3 -> 36.67, 36.67, 36.66
        """
        base = quantize_money(total / count)
        if base * (count - 1) > total:
            # Rounding up would leave the final payment negative
            base = (total / count).quantize(CENT, rounding=ROUND_DOWN)

        final = total - base * (count - 1)
        return [base] * (count - 1) + [final]

    def surcharge_warning(self, tier: PricingTier, plan: int) -> str | None:
        """
        Installment totals are expected to include a surcharge over the full
        price. A lower total is allowed but flagged for the administrator.
        """
        total = tier.installment_total(plan)
        if total is None or not tier.installment_enabled(plan):
            return None
        if total < tier.full_price:
            return (
                f"{plan}-payment total ({total}) for tier '{tier.name}' "
                f"is lower than the full price ({tier.full_price})"
            )
        return None

    def payment_options(self, tier: PricingTier, start_date: date | None = None) -> tuple[PaymentOption, ...]:
        """Full payment plus every enabled installment plan."""
        options = [
            PaymentOption(
                plan="full",
                total=tier.full_price,
                installments=(PaymentInstallment(number=1, amount=tier.full_price, due_date=start_date),),
            )
        ]

        for plan in self.PLAN_LENGTHS:
            if not tier.installment_enabled(plan):
                continue
            options.append(
                PaymentOption(
                    plan=str(plan),
                    total=tier.installment_total(plan),
                    installments=self.schedule(tier, plan, start_date),
                    warning=self.surcharge_warning(tier, plan),
                )
            )

        return tuple(options)
