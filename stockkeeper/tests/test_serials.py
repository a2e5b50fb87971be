"""
Tests for serialized unit tracking.
"""

import pytest

from stockkeeper import stock, StockError, SerialNotAvailable
from stockkeeper.models import SerialStatus, SerialUnit
from stockkeeper.tests.conftest import PRODUCT


pytestmark = pytest.mark.django_db


@pytest.fixture
def serials(warehouse):
    """Three available units: SN-1, SN-2, SN-3."""
    return stock.register_serial_numbers(PRODUCT, warehouse, ['SN-1', 'SN-2', 'SN-3'])


class TestRegisterSerials:
    """Tests for stock.register_serial_numbers()."""

    def test_registered_units_are_available(self, serials, warehouse):
        """New units start AVAILABLE."""
        available = stock.get_available_serial_numbers(PRODUCT, warehouse)

        assert [u.serial_number for u in available] == ['SN-1', 'SN-2', 'SN-3']

    def test_duplicate_serial(self, serials, warehouse):
        """A serial number exists once."""
        with pytest.raises(StockError) as exc:
            stock.register_serial_numbers(PRODUCT, warehouse, ['SN-4', 'SN-2'])

        assert exc.value.code == 'DUPLICATE_SERIAL'
        assert exc.value.data['serials'] == ['SN-2']
        assert not SerialUnit.objects.filter(serial_number='SN-4').exists()

    def test_blank_serial(self, warehouse):
        """Blank serial numbers are rejected."""
        with pytest.raises(StockError):
            stock.register_serial_numbers(PRODUCT, warehouse, ['  '])


class TestUpdateSerialStatus:
    """Tests for stock.update_serial_number_status()."""

    def test_batch_update(self, serials):
        """All units of a valid batch move together."""
        units = stock.update_serial_number_status(['SN-1', 'SN-2'], SerialStatus.RESERVED, txn_id='abc')

        assert {u.status for u in units} == {SerialStatus.RESERVED}
        assert {u.last_txn_id for u in units} == {'abc'}

    def test_batch_with_sold_unit_changes_nothing(self, serials):
        """One sold serial rejects the whole batch."""
        stock.update_serial_number_status('SN-2', SerialStatus.SOLD)

        with pytest.raises(SerialNotAvailable) as exc:
            stock.update_serial_number_status(['SN-1', 'SN-2', 'SN-3'], SerialStatus.SOLD)

        assert exc.value.serials == ['SN-2']
        statuses = dict(SerialUnit.objects.values_list('serial_number', 'status'))
        assert statuses == {
            'SN-1': SerialStatus.AVAILABLE,
            'SN-2': SerialStatus.SOLD,
            'SN-3': SerialStatus.AVAILABLE,
        }

    def test_unknown_serial_in_batch(self, serials):
        """Unknown serials are listed and nothing changes."""
        with pytest.raises(SerialNotAvailable) as exc:
            stock.update_serial_number_status(['SN-1', 'SN-404'], SerialStatus.RESERVED)

        assert exc.value.serials == ['SN-404']
        assert exc.value.data['missing'] == ['SN-404']
        assert SerialUnit.objects.get(serial_number='SN-1').status == SerialStatus.AVAILABLE

    def test_reserved_can_be_released(self, serials):
        """RESERVED -> AVAILABLE is the one backwards move."""
        stock.update_serial_number_status('SN-1', SerialStatus.RESERVED)

        units = stock.update_serial_number_status('SN-1', SerialStatus.AVAILABLE)

        assert units[0].status == SerialStatus.AVAILABLE

    def test_scrapped_is_final(self, serials):
        """Terminal statuses do not move."""
        stock.update_serial_number_status('SN-3', SerialStatus.SCRAPPED)

        with pytest.raises(SerialNotAvailable):
            stock.update_serial_number_status('SN-3', SerialStatus.AVAILABLE)

    def test_unknown_status(self, serials):
        """Statuses outside SerialStatus are invalid input."""
        with pytest.raises(StockError) as exc:
            stock.update_serial_number_status('SN-1', 'lost')

        assert exc.value.code == 'INVALID_STATUS'

    def test_available_listing_follows_status(self, serials, warehouse):
        """Only AVAILABLE units are listed."""
        stock.update_serial_number_status(['SN-1'], SerialStatus.SOLD)

        listed = stock.get_available_serial_numbers(PRODUCT, warehouse)

        assert [u.serial_number for u in listed] == ['SN-2', 'SN-3']
