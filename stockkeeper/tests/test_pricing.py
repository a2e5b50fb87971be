"""
Tests for line-item arithmetic (pure, no database).
"""

from decimal import Decimal

import pytest

from stockkeeper.exceptions import InvalidInput
from stockkeeper.pricing import calculate_line, round_money, summarize_lines, to_quantity


class TestCalculateLine:
    """Tests for calculate_line()."""

    def test_percent_discount_and_single_tax(self):
        """10 x 100 with 10% discount and 18% tax."""
        line = calculate_line(10, 100, discount_percent=10, tax_rates=18)

        assert line.subtotal == Decimal('1000.00')
        assert line.discount == Decimal('100.00')
        assert line.taxable == Decimal('900.00')
        assert line.tax_total == Decimal('162.00')
        assert line.total == Decimal('1062.00')

    def test_split_tax_components(self):
        """CGST + SGST split yields one amount per component."""
        line = calculate_line(2, 500, tax_rates={'cgst': 9, 'sgst': 9})

        assert line.taxes == {'cgst': Decimal('90.00'), 'sgst': Decimal('90.00')}
        assert line.total == Decimal('1180.00')

    def test_list_of_rates_named_in_order(self):
        """A list of rates becomes tax_1, tax_2..."""
        line = calculate_line(1, 100, tax_rates=[5, 1])

        assert line.taxes == {'tax_1': Decimal('5.00'), 'tax_2': Decimal('1.00')}

    def test_flat_discount_used_without_percent(self):
        """discount_amount applies when discount_percent is 0."""
        line = calculate_line(4, 25, discount_amount=Decimal('10'))

        assert line.discount == Decimal('10.00')
        assert line.taxable == Decimal('90.00')
        assert line.total == Decimal('90.00')

    def test_percent_wins_over_amount(self):
        """When both are given, the percentage is used."""
        line = calculate_line(1, 200, discount_percent=50, discount_amount=5)

        assert line.discount == Decimal('100.00')

    def test_rounds_half_up(self):
        """Money figures are rounded half-up to two places."""
        line = calculate_line(1, Decimal('0.125'))

        assert line.subtotal == Decimal('0.13')

    def test_zero_quantity_is_allowed(self):
        """A zero line prices to zero."""
        line = calculate_line(0, 100, tax_rates=18)

        assert line.total == Decimal('0.00')

    @pytest.mark.parametrize('kwargs, code', [
        ({'quantity': -1, 'rate': 10}, 'INVALID_QUANTITY'),
        ({'quantity': 1, 'rate': -10}, 'INVALID_RATE'),
        ({'quantity': 1, 'rate': 10, 'discount_percent': 120}, 'INVALID_DISCOUNT'),
        ({'quantity': 1, 'rate': 10, 'discount_amount': 11}, 'INVALID_DISCOUNT'),
        ({'quantity': 1, 'rate': 10, 'tax_rates': -5}, 'INVALID_TAX_RATE'),
        ({'quantity': 'abc', 'rate': 10}, 'INVALID_INPUT'),
    ])
    def test_invalid_input(self, kwargs, code):
        """Negative or malformed figures raise InvalidInput."""
        with pytest.raises(InvalidInput) as exc:
            calculate_line(**kwargs)

        assert exc.value.code == code


class TestSummarizeLines:
    """Tests for summarize_lines()."""

    def test_header_totals(self):
        """Grand total = taxable + taxes + freight + other charges."""
        lines = [
            calculate_line(10, 100, discount_percent=10, tax_rates={'cgst': 9, 'sgst': 9}),
            calculate_line(1, 50, tax_rates={'cgst': 9, 'sgst': 9}),
        ]

        totals = summarize_lines(lines, freight=25, other_charges=Decimal('5.50'))

        assert totals.subtotal == Decimal('1050.00')
        assert totals.discount == Decimal('100.00')
        assert totals.taxable == Decimal('950.00')
        assert totals.taxes == {'cgst': Decimal('85.50'), 'sgst': Decimal('85.50')}
        assert totals.tax_total == Decimal('171.00')
        assert totals.charges == Decimal('30.50')
        assert totals.grand_total == Decimal('1151.50')

    def test_negative_charges_rejected(self):
        """Freight cannot be negative."""
        with pytest.raises(InvalidInput):
            summarize_lines([], freight=-1)


def test_round_money_uses_configured_places(settings):
    """MONEY_DECIMAL_PLACES controls the rounding scale."""
    settings.STOCKKEEPER = {'MONEY_DECIMAL_PLACES': 3}

    assert round_money(Decimal('1.23456')) == Decimal('1.235')


@pytest.mark.parametrize('value', ['1.0006', 'NaN', 'Infinity'])
def test_to_quantity_rejects_unstorable(value):
    """Quantities must be finite and fit QUANTITY_DECIMAL_PLACES."""
    with pytest.raises(InvalidInput):
        to_quantity(value)


def test_to_quantity_keeps_value():
    """Values at or below the stored scale pass unchanged."""
    assert to_quantity('2.125') == Decimal('2.125')
    assert to_quantity(Decimal('4.5000')) == Decimal('4.5')
