"""
Tests for category tax calculation.
"""
from decimal import Decimal

from pos_register.services.tax import (
    TAX_RATE_ALCOHOL,
    TAX_RATE_DEFAULT,
    TAX_RATE_TOBACCO,
    calculate_tax_breakdown,
    tax_rate_for_category,
)


class TestTaxRates:
    """Test the category rate table."""

    def test_tobacco_rate(self):
        assert tax_rate_for_category("TOBACCO") == Decimal("0.20")

    def test_alcohol_rate(self):
        assert tax_rate_for_category("ALCOHOL") == Decimal("0.15")

    def test_unknown_category_uses_default(self):
        assert tax_rate_for_category("OTHER") == TAX_RATE_DEFAULT
        assert tax_rate_for_category("PRODUCE") == Decimal("0.07")


class TestTaxBreakdown:
    """Test grouping line totals by category."""

    def test_groups_lines_by_category(self):
        breakdown = calculate_tax_breakdown([
            ("OTHER", Decimal("2.00")),
            ("TOBACCO", Decimal("5.00")),
            ("OTHER", Decimal("3.00")),
        ])

        assert set(breakdown.categories) == {"OTHER", "TOBACCO"}
        assert breakdown.categories["OTHER"].subtotal == Decimal("5.00")
        assert breakdown.categories["OTHER"].tax_amount == Decimal("0.35")
        assert breakdown.categories["TOBACCO"].tax_amount == Decimal("1.00")
        assert breakdown.total_tax == Decimal("1.35")

    def test_category_tax_rounds_half_up_to_cents(self):
        """$0.50 at 7% is 3.5 cents, which rounds to 4 cents."""
        breakdown = calculate_tax_breakdown([("OTHER", Decimal("0.50"))])
        assert breakdown.total_tax == Decimal("0.04")

    def test_empty_breakdown(self):
        breakdown = calculate_tax_breakdown([])
        assert breakdown.total_tax == Decimal("0.00")
        assert breakdown.has_multiple_tax_rates() is False

    def test_single_default_category_is_not_multiple_rates(self):
        breakdown = calculate_tax_breakdown([("OTHER", Decimal("4.00"))])
        assert breakdown.has_multiple_tax_rates() is False

    def test_single_non_default_category_is_multiple_rates(self):
        """A lone ALCOHOL line still needs the breakdown shown."""
        breakdown = calculate_tax_breakdown([("ALCOHOL", Decimal("10.00"))])
        assert breakdown.has_multiple_tax_rates() is True
        assert breakdown.categories["ALCOHOL"].rate == TAX_RATE_ALCOHOL

    def test_two_default_rate_categories_are_multiple_rates(self):
        breakdown = calculate_tax_breakdown([
            ("OTHER", Decimal("1.00")),
            ("SNACKS", Decimal("1.00")),
        ])
        assert breakdown.has_multiple_tax_rates() is True

    def test_formatted_rate(self):
        breakdown = calculate_tax_breakdown([("TOBACCO", Decimal("5.00"))])
        assert breakdown.categories["TOBACCO"].formatted_rate == "20%"
        assert breakdown.categories["TOBACCO"].rate == TAX_RATE_TOBACCO
