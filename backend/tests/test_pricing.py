"""
Tests for cart and order arithmetic.
"""

from decimal import Decimal

from hypothesis import given, strategies as st

from rest_api.services.domain.pricing import (
    clamp_quantity,
    compute_totals,
    line_amount,
    line_total,
    portion_multiplier,
    quantize_money,
    scale_nutrition,
)


class TestPricing:
    def test_large_portion_costs_one_and_a_half(self):
        assert portion_multiplier("Large") == Decimal("1.5")
        assert portion_multiplier("Standard") == Decimal(1)
        assert portion_multiplier(None) == Decimal(1)

    def test_two_large_ten_dollar_items(self):
        total = line_total(Decimal("10.00"), "Large", 2)
        totals = compute_totals([total])
        assert total == Decimal("30.00")
        assert totals.subtotal == Decimal("30.00")
        assert totals.tax == Decimal("3.00")
        assert totals.total == Decimal("33.00")

    def test_rounds_half_up_to_cents(self):
        assert quantize_money(Decimal("0.125")) == Decimal("0.13")
        assert line_total(Decimal("7.33"), "Large", 1) == Decimal("11.00")

    def test_subtotal_sums_unrounded_lines(self):
        # 10.01 Large is 15.015 per line; each line shows 15.02
        amounts = [line_amount(Decimal("10.01"), "Large", 1)] * 2
        assert [quantize_money(a) for a in amounts] == [Decimal("15.02")] * 2
        totals = compute_totals(amounts)
        assert totals.subtotal == Decimal("30.03")
        assert totals.tax == Decimal("3.00")
        assert totals.total == Decimal("33.03")

    def test_empty_cart_totals_zero(self):
        totals = compute_totals([])
        assert totals.subtotal == totals.tax == totals.total == Decimal("0.00")

    def test_quantity_is_clamped(self):
        assert clamp_quantity(0) == 1
        assert clamp_quantity(-4) == 1
        assert clamp_quantity(150) == 99
        assert clamp_quantity(12) == 12

    def test_scale_nutrition_for_large(self):
        scaled = scale_nutrition({"calories": 401, "protein": 21}, "Large")
        assert scaled["calories"] == 602
        assert scaled["protein"] == 32
        assert scaled["fiber"] == 0


class TestPricingProperties:
    @given(
        cents=st.integers(min_value=1, max_value=100_000),
        quantity=st.integers(min_value=1, max_value=99),
        portion=st.sampled_from(["Standard", "Large"]),
    )
    def test_total_is_subtotal_plus_tax(self, cents, quantity, portion):
        price = Decimal(cents) / 100
        totals = compute_totals([line_total(price, portion, quantity)])
        assert totals.total == totals.subtotal + totals.tax
        assert totals.subtotal >= price

    @given(
        cents=st.lists(st.integers(min_value=1, max_value=10_000), min_size=1, max_size=10),
        portion=st.sampled_from(["Standard", "Large"]),
    )
    def test_subtotal_is_rounded_exact_sum(self, cents, portion):
        amounts = [line_amount(Decimal(c) / 100, portion, 1) for c in cents]
        exact = sum(amounts, Decimal(0))
        assert compute_totals(amounts).subtotal == quantize_money(exact)
