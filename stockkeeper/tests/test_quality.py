"""
Tests for quality control holds.
"""

from decimal import Decimal

import pytest

from stockkeeper import stock, StockError, InsufficientStock
from stockkeeper.models import MovementType, QCHoldStatus
from stockkeeper.tests.conftest import PRODUCT


pytestmark = pytest.mark.django_db


class TestQCHold:
    """Tests for the QC hold lifecycle."""

    def test_hold_reduces_available_only(self, stocked, user):
        """Held stock is unavailable but still on hand."""
        hold = stock.create_qc_hold(Decimal('15'), PRODUCT, stocked, 'Supplier batch check', user=user)

        assert hold.status == QCHoldStatus.ON_HOLD
        assert stock.on_hand(PRODUCT, stocked) == Decimal('100')
        assert stock.available(PRODUCT, stocked) == Decimal('85')
        assert list(stock.get_active_qc_holds(PRODUCT, stocked)) == [hold]

    def test_hold_more_than_available(self, stocked):
        """Only available stock can be held."""
        stock.create_reservation(Decimal('90'), PRODUCT, stocked, 'sales_order', 'SO-1')

        with pytest.raises(InsufficientStock):
            stock.create_qc_hold(Decimal('20'), PRODUCT, stocked, 'Check')

    def test_hold_requires_reason(self, stocked):
        """Holds need a reason."""
        with pytest.raises(StockError) as exc:
            stock.create_qc_hold(Decimal('1'), PRODUCT, stocked, '')

        assert exc.value.code == 'REASON_REQUIRED'

    def test_held_stock_cannot_be_reserved(self, stocked):
        """Reservations see QC holds."""
        stock.create_qc_hold(Decimal('50'), PRODUCT, stocked, 'Check')

        with pytest.raises(StockError) as exc:
            stock.create_reservation(Decimal('60'), PRODUCT, stocked, 'sales_order', 'SO-1')

        assert exc.value.code == 'OVER_ALLOCATION'

    def test_release_restores_available(self, stocked, user):
        """Passed inspection puts the quantity back."""
        hold = stock.create_qc_hold(Decimal('15'), PRODUCT, stocked, 'Check')

        released = stock.release_qc_hold(hold, user=user, notes='All good')

        assert released.status == QCHoldStatus.RELEASED
        assert released.released_by == user
        assert stock.available(PRODUCT, stocked) == Decimal('100')

    def test_reject_disposes_of_quantity(self, stocked, user):
        """Failed inspection writes an adjustment_out for the held quantity."""
        hold = stock.create_qc_hold(Decimal('15'), PRODUCT, stocked, 'Mould found')

        rejected = stock.reject_qc_hold(hold, user=user)

        assert rejected.status == QCHoldStatus.REJECTED
        assert stock.on_hand(PRODUCT, stocked) == Decimal('85')
        assert stock.available(PRODUCT, stocked) == Decimal('85')
        entry = stock.ledger(txn_id=rejected.related_txn_id).get()
        assert entry.movement_type == MovementType.ADJUSTMENT_OUT
        assert entry.quantity_delta == Decimal('-15')
        assert entry.reference_type == 'qc_hold'

    def test_reject_after_warehouse_deactivated(self, stocked):
        """Held stock can still be written off in a closed warehouse."""
        hold = stock.create_qc_hold(Decimal('15'), PRODUCT, stocked, 'Mould found')
        stocked.is_active = False
        stocked.save(update_fields=['is_active'])

        stock.reject_qc_hold(hold)

        assert stock.on_hand(PRODUCT, stocked) == Decimal('85')

    def test_resolved_hold_cannot_change(self, stocked):
        """Only ON_HOLD holds can be released or rejected."""
        hold = stock.create_qc_hold(Decimal('15'), PRODUCT, stocked, 'Check')
        stock.release_qc_hold(hold)

        with pytest.raises(StockError) as exc:
            stock.reject_qc_hold(hold)

        assert exc.value.code == 'INVALID_STATUS'
        assert stock.on_hand(PRODUCT, stocked) == Decimal('100')

    def test_listing_covers_variants(self, warehouse):
        """Without a variant the listing shows holds on every variant."""
        stock.receive(Decimal('10'), PRODUCT, warehouse, variant_id=7)
        stock.receive(Decimal('10'), PRODUCT, warehouse)
        variant_hold = stock.create_qc_hold(Decimal('4'), PRODUCT, warehouse, 'Check', variant_id=7)
        plain_hold = stock.create_qc_hold(Decimal('1'), PRODUCT, warehouse, 'Check')

        assert set(stock.get_active_qc_holds(PRODUCT, warehouse)) == {variant_hold, plain_hold}
        assert list(stock.get_active_qc_holds(PRODUCT, warehouse, variant_id=7)) == [variant_hold]
        assert stock.on_hold(PRODUCT, warehouse) == Decimal('1')
        assert stock.available(PRODUCT, warehouse, variant_id=7) == Decimal('6')
