"""
Cart and order arithmetic.

All money is Decimal. Only displayed figures are quantized to cents
(ROUND_HALF_UP):

    line_amount = unit_price * portion_multiplier * quantity   (unrounded)
    line_total  = line_amount, quantized for display
    subtotal    = sum(line_amount), quantized once
    tax         = subtotal * tax_rate   (10 %)
    total       = subtotal + tax

A "Large" portion costs 1.5x and scales nutrition by the same factor.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from shared.config.constants import NUTRITION_FIELDS, Limits, Portion
from shared.config.settings import settings

CENT = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def portion_multiplier(portion: str | None) -> Decimal:
    if portion == Portion.LARGE:
        return settings.large_portion_multiplier
    return Decimal(1)


def clamp_quantity(quantity: int) -> int:
    return max(Limits.MIN_QUANTITY, min(Limits.MAX_QUANTITY, int(quantity)))


def line_amount(unit_price: Decimal, portion: str | None, quantity: int) -> Decimal:
    return Decimal(unit_price) * portion_multiplier(portion) * quantity


def line_total(unit_price: Decimal, portion: str | None, quantity: int) -> Decimal:
    return quantize_money(line_amount(unit_price, portion, quantity))


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def compute_totals(line_amounts: Iterable[Decimal], tax_rate: Decimal | None = None) -> Totals:
    """Totals over unrounded line amounts; the subtotal is rounded once."""
    rate = settings.tax_rate if tax_rate is None else tax_rate
    subtotal = quantize_money(sum((Decimal(t) for t in line_amounts), Decimal(0)))
    tax = quantize_money(subtotal * rate)
    return Totals(subtotal=subtotal, tax=tax, total=quantize_money(subtotal + tax))


def scale_nutrition(nutrition: dict[str, Any] | None, portion: str | None) -> dict[str, int]:
    """Nutrition for one serving of ``portion``, rounded to whole units."""
    nutrition = nutrition or {}
    factor = portion_multiplier(portion)
    scaled = {}
    for name in NUTRITION_FIELDS:
        value = Decimal(str(nutrition.get(name) or 0)) * factor
        scaled[name] = int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return scaled
