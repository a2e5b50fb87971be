"""
Tests for pick lists.
"""

from decimal import Decimal

import pytest

from stockkeeper import stock, StockError, InsufficientStock
from stockkeeper.models import PickList, PickListStatus, PickStatus
from stockkeeper.tests.conftest import OTHER_PRODUCT, PRODUCT


pytestmark = pytest.mark.django_db


class TestCreatePickList:
    """Tests for stock.create_pick_list()."""

    def test_creates_pending_details(self, stocked, storage_bin, user):
        """One PENDING detail per line, in sequence."""
        details = stock.create_pick_list(
            stocked,
            [
                {'product_id': PRODUCT, 'required_quantity': Decimal('10'), 'bin': storage_bin},
                {'product_id': PRODUCT, 'required_quantity': Decimal('5')},
            ],
            user=user,
            number='PL-1',
        )

        assert [d.pick_sequence for d in details] == [1, 2]
        assert {d.status for d in details} == {PickStatus.PENDING}
        assert details[0].bin == storage_bin
        assert details[0].pick_list.status == PickListStatus.DRAFT

    def test_pick_list_does_not_reserve(self, stocked):
        """Creating a pick list leaves availability alone."""
        stock.create_pick_list(stocked, [{'product_id': PRODUCT, 'required_quantity': 40}])

        assert stock.available(PRODUCT, stocked) == Decimal('100')

    def test_lines_of_same_key_validated_together(self, stocked):
        """Two lines of 60 exceed the 100 available."""
        with pytest.raises(InsufficientStock):
            stock.create_pick_list(
                stocked,
                [
                    {'product_id': PRODUCT, 'required_quantity': 60},
                    {'product_id': PRODUCT, 'required_quantity': 60},
                ],
            )

        assert PickList.objects.count() == 0

    def test_unstocked_product(self, stocked):
        """Lines without stock are rejected."""
        with pytest.raises(InsufficientStock):
            stock.create_pick_list(stocked, [{'product_id': OTHER_PRODUCT, 'required_quantity': 1}])

    def test_empty_pick_list(self, stocked):
        """A pick list needs lines."""
        with pytest.raises(StockError):
            stock.create_pick_list(stocked, [])


class TestPicking:
    """Tests for stock.record_pick() and stock.close_pick_detail()."""

    @pytest.fixture
    def detail(self, stocked):
        return stock.create_pick_list(
            stocked, [{'product_id': PRODUCT, 'required_quantity': Decimal('10')}],
        )[0]

    def test_partial_pick(self, detail):
        """A partial pick puts line and header in progress."""
        picked = stock.record_pick(detail, Decimal('4'))

        assert picked.status == PickStatus.PICKING
        assert picked.remaining == Decimal('6')
        assert picked.pick_list.status == PickListStatus.IN_PROGRESS

    def test_full_pick_completes(self, detail):
        """Picking everything completes the line and the list."""
        picked = stock.record_pick(detail, Decimal('10'))

        assert picked.status == PickStatus.COMPLETED
        picked.pick_list.refresh_from_db()
        assert picked.pick_list.status == PickListStatus.COMPLETED

    def test_over_pick_rejected(self, detail):
        """picked_quantity cannot exceed required_quantity."""
        with pytest.raises(StockError) as exc:
            stock.record_pick(detail, Decimal('11'))

        assert exc.value.code == 'INVALID_QUANTITY'

    def test_close_short(self, detail):
        """Closing a partly picked line marks it SHORT."""
        stock.record_pick(detail, Decimal('7'))

        closed = stock.close_pick_detail(detail, notes='Shelf empty')

        assert closed.status == PickStatus.SHORT
        assert closed.remaining == Decimal('3')
        assert closed.notes == 'Shelf empty'
        closed.pick_list.refresh_from_db()
        assert closed.pick_list.status == PickListStatus.COMPLETED

    def test_short_line_is_closed(self, detail):
        """No more picks once a line is closed short."""
        stock.close_pick_detail(detail)

        with pytest.raises(StockError):
            stock.record_pick(detail, Decimal('1'))
