"""
Category-aware sales tax.

Tax is grouped by catalog category: each category's line totals are summed,
multiplied by that category's rate and rounded to the cent. The breakdown is
rebuilt from the current line items on every call.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Tuple

TAX_RATE_TOBACCO = Decimal("0.20")
TAX_RATE_ALCOHOL = Decimal("0.15")
TAX_RATE_DEFAULT = Decimal("0.07")

CATEGORY_TAX_RATES: Dict[str, Decimal] = {
    "TOBACCO": TAX_RATE_TOBACCO,
    "ALCOHOL": TAX_RATE_ALCOHOL,
}

CENT = Decimal("0.01")


def tax_rate_for_category(category: str) -> Decimal:
    """Rate for a category; anything not in the table pays the default rate."""
    return CATEGORY_TAX_RATES.get(category, TAX_RATE_DEFAULT)


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CategoryTax:
    """Tax owed by one category."""
    category: str
    subtotal: Decimal
    rate: Decimal

    @property
    def tax_amount(self) -> Decimal:
        return round_money(self.subtotal * self.rate)

    @property
    def formatted_rate(self) -> str:
        return f"{self.rate * 100:.0f}%"


@dataclass(frozen=True)
class TaxBreakdown:
    """Per-category tax plus the grand total."""
    categories: Dict[str, CategoryTax] = field(default_factory=dict)

    @property
    def total_tax(self) -> Decimal:
        return sum((ct.tax_amount for ct in self.categories.values()), Decimal("0.00"))

    def has_multiple_tax_rates(self) -> bool:
        """
        True when a display should render a per-category breakdown: more than
        one category present, or any category taxed at a non-default rate.
        """
        return len(self.categories) > 1 or any(
            ct.rate != TAX_RATE_DEFAULT for ct in self.categories.values()
        )


def calculate_tax_breakdown(line_totals: Iterable[Tuple[str, Decimal]]) -> TaxBreakdown:
    """
    Build a breakdown from (category, line_total) pairs.

    Categories keep first-seen order so displays list them as scanned.
    """
    subtotals: Dict[str, Decimal] = OrderedDict()
    for category, line_total in line_totals:
        subtotals[category] = subtotals.get(category, Decimal("0")) + line_total

    return TaxBreakdown(categories={
        category: CategoryTax(category=category, subtotal=subtotal, rate=tax_rate_for_category(category))
        for category, subtotal in subtotals.items()
    })
