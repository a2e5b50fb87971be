"""
Tests for unit-of-measure conversion (pure, no database).
"""

from decimal import Decimal

import pytest

from stockkeeper.exceptions import InvalidInput
from stockkeeper.uom import UOMConversion, convert_quantity, get_uom_conversions

PIECE, BOX, PALLET = 1, 12, 40


@pytest.fixture
def conversions():
    """A box holds 24 pieces; a pallet holds 40 boxes."""
    return [
        UOMConversion(BOX, PIECE, Decimal('24'), product_id=101),
        {'from_uom_id': PALLET, 'to_uom_id': BOX, 'factor': 40},
    ]


class TestConvertQuantity:
    """Tests for convert_quantity()."""

    def test_same_unit(self):
        """No conversion needed within one unit."""
        assert convert_quantity(Decimal('7'), PIECE, PIECE, []) == Decimal('7')

    def test_direct(self, conversions):
        """3 boxes are 72 pieces."""
        assert convert_quantity(3, BOX, PIECE, conversions) == Decimal('72')

    def test_reverse(self, conversions):
        """Pieces to boxes divides by the box factor."""
        assert convert_quantity(48, PIECE, BOX, conversions) == Decimal('2')
        assert convert_quantity(1, PIECE, BOX, conversions) == Decimal('0.042')

    def test_mapping_conversion(self, conversions):
        """Conversions may be given as plain mappings."""
        assert convert_quantity(Decimal('0.5'), PALLET, BOX, conversions) == Decimal('20')

    def test_missing_conversion(self, conversions):
        """Unrelated units raise instead of passing the quantity through."""
        with pytest.raises(InvalidInput) as exc:
            convert_quantity(1, PALLET, PIECE, conversions)

        assert exc.value.code == 'UOM_CONVERSION_NOT_FOUND'

    def test_zero_factor(self):
        """A factor must be positive."""
        with pytest.raises(InvalidInput) as exc:
            convert_quantity(1, BOX, PIECE, [UOMConversion(BOX, PIECE, Decimal('0'))])

        assert exc.value.code == 'INVALID_CONVERSION_FACTOR'


class TestGetUOMConversions:
    """Tests for get_uom_conversions()."""

    def test_alternate_units_to_base(self):
        """Every alternate unit converts into the base unit."""
        conversions = get_uom_conversions(PIECE, {BOX: 24, PIECE: 1}, product_id=101)

        assert conversions == [UOMConversion(BOX, PIECE, Decimal('24'), product_id=101)]
        assert convert_quantity(96, PIECE, BOX, conversions) == Decimal('4')
