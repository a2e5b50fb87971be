"""
Tests for stock.validate_stock_transaction() and stock.stock_position().
"""

from decimal import Decimal

import pytest

from stockkeeper import stock, InsufficientStock
from stockkeeper.models import MovementType
from stockkeeper.tests.conftest import PRODUCT


pytestmark = pytest.mark.django_db


class TestValidateStockTransaction:
    """Tests for stock.validate_stock_transaction()."""

    def test_outward_within_available(self, stocked):
        """Issuing less than available is valid."""
        result = stock.validate_stock_transaction(
            PRODUCT, stocked, Decimal('40'), MovementType.SALE_OUT,
        )

        assert result.is_valid
        assert result.current_stock == Decimal('100')
        assert result.available_stock == Decimal('100')

    def test_outward_exceeding_available(self, stocked):
        """Issuing more than available is reported, not raised."""
        result = stock.validate_stock_transaction(
            PRODUCT, stocked, Decimal('130'), MovementType.SALE_OUT,
        )

        assert not result.is_valid
        assert result.code == 'INSUFFICIENT_STOCK'
        assert result.shortfall == Decimal('30')
        assert 'Insufficient stock' in result.message
        assert 'Short by: 30' in result.message

    def test_reservations_reduce_what_validates(self, stocked):
        """Available stock, not on-hand, is what outward lines check against."""
        stock.create_reservation(Decimal('70'), PRODUCT, stocked, 'sales_order', 'SO-1')

        result = stock.validate_stock_transaction(
            PRODUCT, stocked, Decimal('40'), MovementType.TRANSFER_OUT,
        )

        assert not result.is_valid
        assert result.current_stock == Decimal('100')
        assert result.available_stock == Decimal('30')

    def test_inward_always_valid_on_quantity(self, warehouse):
        """Receipts do not need stock."""
        result = stock.validate_stock_transaction(
            PRODUCT, warehouse, Decimal('5'), MovementType.PURCHASE_IN,
        )

        assert result.is_valid
        assert result.current_stock == Decimal('0')

    def test_inactive_warehouse(self, warehouse):
        """Inactive warehouses fail validation."""
        warehouse.is_active = False
        warehouse.save()

        result = stock.validate_stock_transaction(
            PRODUCT, warehouse, Decimal('5'), MovementType.PURCHASE_IN,
        )

        assert not result.is_valid
        assert result.code == 'WAREHOUSE_NOT_FOUND'

    def test_bin_of_other_warehouse(self, stocked, branch):
        """A bin must belong to the warehouse of the line."""
        from stockkeeper.models import StorageBin
        other_bin = StorageBin.objects.create(warehouse=branch, code='B-01')

        result = stock.validate_stock_transaction(
            PRODUCT, stocked, Decimal('5'), MovementType.SALE_OUT, bin=other_bin,
        )

        assert result.code == 'BIN_NOT_FOUND'

    @pytest.mark.parametrize('quantity', [Decimal('0'), Decimal('-3')])
    def test_non_positive_quantity(self, stocked, quantity):
        """Quantities must be positive."""
        result = stock.validate_stock_transaction(
            PRODUCT, stocked, quantity, MovementType.SALE_OUT,
        )

        assert result.code == 'INVALID_QUANTITY'

    def test_unknown_movement_type(self, stocked):
        """Unknown movement types are rejected."""
        result = stock.validate_stock_transaction(PRODUCT, stocked, 1, 'teleport')

        assert result.code == 'INVALID_MOVEMENT_TYPE'

    def test_raise_for_error(self, stocked):
        """raise_for_error() turns the result into the typed exception."""
        result = stock.validate_stock_transaction(
            PRODUCT, stocked, Decimal('150'), MovementType.SALE_OUT,
        )

        with pytest.raises(InsufficientStock) as exc:
            result.raise_for_error()

        assert exc.value.shortfall == Decimal('50')


class TestStockPosition:
    """Tests for stock.stock_position()."""

    def test_position_figures(self, stocked, user):
        """available = on_hand - reserved - on_hold."""
        stock.create_reservation(Decimal('20'), PRODUCT, stocked, 'sales_order', 'SO-1')
        stock.create_qc_hold(Decimal('5'), PRODUCT, stocked, 'Damaged packaging', user=user)

        position = stock.stock_position(PRODUCT, stocked)

        assert position.on_hand == Decimal('100')
        assert position.reserved == Decimal('20')
        assert position.on_hold == Decimal('5')
        assert position.available == Decimal('75')

    def test_variants_are_separate_keys(self, warehouse):
        """Stock of a variant is not stock of the plain product."""
        stock.receive(Decimal('10'), PRODUCT, warehouse, variant_id=7, reason='Receipt')

        assert stock.available(PRODUCT, warehouse, variant_id=7) == Decimal('10')
        assert stock.available(PRODUCT, warehouse) == Decimal('0')
