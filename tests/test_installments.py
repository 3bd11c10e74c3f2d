"""
Unit Tests for Installment Calculator

Tests verify payment splitting, due dates and plan availability.
"""

from datetime import date
from decimal import Decimal

import pytest

from registration_engine.calculators.installments import InstallmentCalculator, add_months, quantize_money
from registration_engine.errors import ErrorCode, PlanUnavailableError
from registration_engine.models import PricingTier


def make_tier(i3="110", i3_on=True, i6="120", i6_on=True, price="100"):
    return PricingTier(
        name="Early Bird",
        months_before_event=3,
        full_price=Decimal(price),
        installment_3_total=Decimal(i3) if i3 is not None else None,
        installment_3_enabled=i3_on,
        installment_6_total=Decimal(i6) if i6 is not None else None,
        installment_6_enabled=i6_on,
    )


class TestQuantizeMoney:
    """Test the money rounding utility."""

    def test_rounds_up_at_half(self):
        assert quantize_money(Decimal("0.005")) == Decimal("0.01")

    def test_rounds_down_below_half(self):
        assert quantize_money(Decimal("36.664")) == Decimal("36.66")


class TestSchedule:
    """Test splitting a plan total into payments."""

    @pytest.fixture
    def calculator(self):
        return InstallmentCalculator()

    def test_110_over_three_payments(self, calculator):
        """£110 / 3 = £36.67, £36.67, £36.66"""
        schedule = calculator.schedule(make_tier(), 3)

        assert [p.amount for p in schedule] == [Decimal("36.67"), Decimal("36.67"), Decimal("36.66")]
        assert sum(p.amount for p in schedule) == Decimal("110")

    def test_even_split_over_six_payments(self, calculator):
        schedule = calculator.schedule(make_tier(), 6)

        assert [p.amount for p in schedule] == [Decimal("20.00")] * 6

    def test_final_payment_absorbs_remainder(self, calculator):
        """£170 / 6 = 5 × £28.33 + £28.35"""
        schedule = calculator.schedule(make_tier(i6="170"), 6)

        assert [p.amount for p in schedule[:5]] == [Decimal("28.33")] * 5
        assert schedule[-1].amount == Decimal("28.35")

    @pytest.mark.parametrize("total", ["110", "160", "210", "99.99", "1000.01", "0.04", "333.33"])
    @pytest.mark.parametrize("plan", [3, 6])
    def test_payments_sum_exactly_to_total(self, calculator, total, plan):
        tier = make_tier(i3=total, i6=total)
        schedule = calculator.schedule(tier, plan)

        assert len(schedule) == plan
        assert sum(p.amount for p in schedule) == Decimal(total)
        assert all(p.amount >= 0 for p in schedule)

    def test_tiny_total_never_goes_negative(self, calculator):
        schedule = calculator.schedule(make_tier(i6="0.04"), 6)

        assert [p.amount for p in schedule] == [Decimal("0.00")] * 5 + [Decimal("0.04")]

    def test_payments_are_numbered(self, calculator):
        assert [p.number for p in calculator.schedule(make_tier(), 3)] == [1, 2, 3]

    def test_no_due_dates_without_start(self, calculator):
        assert all(p.due_date is None for p in calculator.schedule(make_tier(), 3))

    def test_monthly_due_dates(self, calculator):
        schedule = calculator.schedule(make_tier(), 3, start_date=date(2026, 1, 31))

        assert [p.due_date for p in schedule] == [date(2026, 1, 31), date(2026, 2, 28), date(2026, 3, 31)]

    def test_disabled_plan_unavailable(self, calculator):
        with pytest.raises(PlanUnavailableError) as exc_info:
            calculator.schedule(make_tier(i3_on=False), 3)

        assert exc_info.value.code == ErrorCode.PLAN_UNAVAILABLE

    def test_missing_total_unavailable(self, calculator):
        with pytest.raises(PlanUnavailableError):
            calculator.schedule(make_tier(i6=None), 6)

    def test_unsupported_plan_length(self, calculator):
        with pytest.raises(PlanUnavailableError):
            calculator.schedule(make_tier(), 12)


class TestAddMonths:
    """Test calendar month arithmetic for due dates."""

    def test_same_day_next_month(self):
        assert add_months(date(2026, 3, 15), 1) == date(2026, 4, 15)

    def test_clamps_to_month_end(self):
        assert add_months(date(2026, 8, 31), 1) == date(2026, 9, 30)

    def test_leap_february(self):
        assert add_months(date(2027, 12, 29), 2) == date(2028, 2, 29)

    def test_crosses_year(self):
        assert add_months(date(2026, 11, 5), 3) == date(2027, 2, 5)


class TestSurchargeWarning:
    """Installment totals below the full price are flagged, not rejected."""

    @pytest.fixture
    def calculator(self):
        return InstallmentCalculator()

    def test_total_above_full_price_has_no_warning(self, calculator):
        assert calculator.surcharge_warning(make_tier(), 3) is None

    def test_total_below_full_price_is_flagged(self, calculator):
        tier = make_tier(i3="90")
        warning = calculator.surcharge_warning(tier, 3)

        assert "lower than the full price" in warning
        # Still schedulable
        assert sum(p.amount for p in calculator.schedule(tier, 3)) == Decimal("90")

    def test_disabled_plan_has_no_warning(self, calculator):
        assert calculator.surcharge_warning(make_tier(i3="90", i3_on=False), 3) is None


class TestPaymentOptions:
    """Test the list of ways to pay for a tier."""

    @pytest.fixture
    def calculator(self):
        return InstallmentCalculator()

    def test_all_plans_enabled(self, calculator):
        options = calculator.payment_options(make_tier())

        assert [o.plan for o in options] == ["full", "3", "6"]
        assert options[0].total == Decimal("100")
        assert options[1].total == Decimal("110")
        assert options[2].total == Decimal("120")

    def test_only_full_payment(self, calculator):
        options = calculator.payment_options(make_tier(i3_on=False, i6_on=False))

        assert [o.plan for o in options] == ["full"]
        assert options[0].installments[0].amount == Decimal("100")

    def test_option_carries_warning(self, calculator):
        options = calculator.payment_options(make_tier(i6="95"))

        assert options[1].warning is None
        assert options[2].warning is not None
