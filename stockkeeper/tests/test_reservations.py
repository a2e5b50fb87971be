"""
Tests for the reservation lifecycle.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.management import call_command
from django.utils import timezone

from stockkeeper import stock, StockError, OverAllocation
from stockkeeper.models import Reservation, ReservationStatus
from stockkeeper.tests.conftest import PRODUCT


pytestmark = pytest.mark.django_db


class TestCreateReservation:
    """Tests for stock.create_reservation()."""

    def test_reservation_reduces_available(self, stocked, user):
        """Reserving 30 of 100 leaves 70 available."""
        reservation = stock.create_reservation(
            Decimal('30'), PRODUCT, stocked, 'sales_order', 'SO-1', user=user,
        )

        assert reservation.status == ReservationStatus.ACTIVE
        assert reservation.reserved_by == user
        assert stock.available(PRODUCT, stocked) == Decimal('70')
        assert stock.on_hand(PRODUCT, stocked) == Decimal('100')

    def test_over_allocation(self, warehouse):
        """Reserving 50 when 40 is on hand fails."""
        stock.receive(Decimal('40'), PRODUCT, warehouse, reason='Receipt')

        with pytest.raises(OverAllocation) as exc:
            stock.create_reservation(Decimal('50'), PRODUCT, warehouse, 'sales_order', 'SO-1')

        assert exc.value.code == 'OVER_ALLOCATION'
        assert exc.value.available == Decimal('40')
        assert Reservation.objects.count() == 0

    def test_second_reservation_sees_the_first(self, warehouse):
        """With 40 on hand, 30 then 15 fails on the second."""
        stock.receive(Decimal('40'), PRODUCT, warehouse, reason='Receipt')
        stock.create_reservation(Decimal('30'), PRODUCT, warehouse, 'sales_order', 'SO-1')

        with pytest.raises(OverAllocation) as exc:
            stock.create_reservation(Decimal('15'), PRODUCT, warehouse, 'sales_order', 'SO-2')

        assert exc.value.available == Decimal('10')
        assert exc.value.data['reserved'] == Decimal('30')

    def test_reserved_never_exceeds_on_hand(self, stocked):
        """Sum of active reservations stays within on-hand."""
        for i in range(4):
            stock.create_reservation(Decimal('25'), PRODUCT, stocked, 'sales_order', f'SO-{i}')

        with pytest.raises(OverAllocation):
            stock.create_reservation(Decimal('0.001'), PRODUCT, stocked, 'sales_order', 'SO-X')

        assert stock.reserved(PRODUCT, stocked) == stock.on_hand(PRODUCT, stocked)

    def test_requires_reference_type(self, stocked):
        """A reservation must say what it is for."""
        with pytest.raises(StockError) as exc:
            stock.create_reservation(Decimal('1'), PRODUCT, stocked, '')

        assert exc.value.code == 'INVALID_INPUT'

    def test_default_ttl(self, stocked, settings):
        """RESERVATION_TTL_MINUTES sets expires_at when none is given."""
        settings.STOCKKEEPER = {'RESERVATION_TTL_MINUTES': 15}

        reservation = stock.create_reservation(Decimal('1'), PRODUCT, stocked, 'cart', 'C-1')

        assert reservation.expires_at is not None
        assert reservation.expires_at > timezone.now() + timedelta(minutes=14)


class TestActiveReservations:
    """get_active_reservations() and the availability formula agree."""

    def test_available_matches_listing(self, stocked):
        """available = on_hand - sum of listed active reservations."""
        stock.create_reservation(Decimal('10'), PRODUCT, stocked, 'sales_order', 'SO-1')
        stock.create_reservation(Decimal('15'), PRODUCT, stocked, 'pick_list', 'PL-1')
        released = stock.create_reservation(Decimal('5'), PRODUCT, stocked, 'sales_order', 'SO-2')
        stock.release_reservation(released)

        listed = stock.get_active_reservations(PRODUCT, stocked)
        total = sum((r.reserved_quantity for r in listed), Decimal('0'))

        assert total == Decimal('25')
        assert stock.available(PRODUCT, stocked) == stock.on_hand(PRODUCT, stocked) - total

    def test_expired_reservation_stops_counting(self, stocked):
        """A past expires_at frees the stock before any sweep."""
        stock.create_reservation(
            Decimal('60'), PRODUCT, stocked, 'cart', 'C-1',
            expires_at=timezone.now() - timedelta(minutes=1),
        )

        assert stock.get_active_reservations(PRODUCT, stocked).count() == 0
        assert stock.available(PRODUCT, stocked) == Decimal('100')


class TestReleaseReservation:
    """Tests for stock.release_reservation()."""

    def test_release_restores_available(self, stocked):
        """Releasing gives the quantity back to availability."""
        reservation = stock.create_reservation(Decimal('30'), PRODUCT, stocked, 'sales_order', 'SO-1')

        released = stock.release_reservation(reservation, reason='Order cancelled')

        assert released.status == ReservationStatus.RELEASED
        assert released.resolved_at is not None
        assert released.metadata['release_reason'] == 'Order cancelled'
        assert stock.available(PRODUCT, stocked) == Decimal('100')

    def test_release_is_idempotent(self, stocked):
        """Releasing twice is a no-op the second time."""
        reservation = stock.create_reservation(Decimal('30'), PRODUCT, stocked, 'sales_order', 'SO-1')
        first = stock.release_reservation(reservation)

        second = stock.release_reservation(reservation)

        assert second.status == ReservationStatus.RELEASED
        assert second.resolved_at == first.resolved_at

    def test_release_consumed_is_noop(self, stocked):
        """A consumed reservation stays consumed."""
        reservation = stock.create_reservation(Decimal('30'), PRODUCT, stocked, 'sales_order', 'SO-1')
        stock.consume_reservation(reservation)

        result = stock.release_reservation(reservation)

        assert result.status == ReservationStatus.CONSUMED

    def test_release_for_reference(self, stocked):
        """All active reservations of a reference are released together."""
        stock.create_reservation(Decimal('10'), PRODUCT, stocked, 'sales_order', 'SO-1')
        stock.create_reservation(Decimal('10'), PRODUCT, stocked, 'sales_order', 'SO-1')
        stock.create_reservation(Decimal('10'), PRODUCT, stocked, 'sales_order', 'SO-2')

        assert stock.release_reservations_for('sales_order', 'SO-1') == 2
        assert stock.reserved(PRODUCT, stocked) == Decimal('10')

    def test_unknown_reservation(self, db):
        """Unknown ids raise InvalidInput."""
        with pytest.raises(StockError) as exc:
            stock.release_reservation(999999)

        assert exc.value.code == 'RESERVATION_NOT_FOUND'


class TestConsumeReservation:
    """Tests for stock.consume_reservation()."""

    def test_consume_issues_stock(self, stocked, user):
        """Consuming issues the reserved quantity and closes the reservation."""
        reservation = stock.create_reservation(Decimal('30'), PRODUCT, stocked, 'sales_order', 'SO-1')

        entry = stock.consume_reservation(reservation, user=user)

        reservation.refresh_from_db()
        assert entry.quantity_delta == Decimal('-30')
        assert entry.reference_number == 'SO-1'
        assert reservation.status == ReservationStatus.CONSUMED
        assert stock.on_hand(PRODUCT, stocked) == Decimal('70')
        assert stock.available(PRODUCT, stocked) == Decimal('70')

    def test_consume_twice_fails(self, stocked):
        """A consumed reservation cannot be issued against again."""
        reservation = stock.create_reservation(Decimal('30'), PRODUCT, stocked, 'sales_order', 'SO-1')
        stock.consume_reservation(reservation)

        with pytest.raises(StockError) as exc:
            stock.consume_reservation(reservation)

        assert exc.value.code == 'INVALID_STATUS'
        assert stock.on_hand(PRODUCT, stocked) == Decimal('70')


class TestReleaseExpired:
    """Tests for stock.release_expired_reservations()."""

    def _expired(self, warehouse, quantity, number):
        return stock.create_reservation(
            quantity, PRODUCT, warehouse, 'cart', number,
            expires_at=timezone.now() - timedelta(minutes=5),
        )

    def test_sweep_releases_expired(self, stocked):
        """Expired ACTIVE reservations become RELEASED."""
        expired = self._expired(stocked, Decimal('10'), 'C-1')
        live = stock.create_reservation(Decimal('10'), PRODUCT, stocked, 'cart', 'C-2')

        assert stock.release_expired_reservations() == 1

        expired.refresh_from_db()
        live.refresh_from_db()
        assert expired.status == ReservationStatus.RELEASED
        assert live.status == ReservationStatus.ACTIVE

    def test_sweep_in_batches(self, stocked, settings):
        """Batches smaller than the backlog still release everything."""
        settings.STOCKKEEPER = {'EXPIRED_BATCH_SIZE': 2}
        for i in range(5):
            self._expired(stocked, Decimal('1'), f'C-{i}')

        assert stock.release_expired_reservations() == 5
        assert Reservation.objects.expired().count() == 0

    def test_management_command(self, stocked, capsys):
        """release_expired_reservations command reports the count."""
        self._expired(stocked, Decimal('10'), 'C-1')

        call_command('release_expired_reservations', '--dry-run')
        assert '1 reservation(s) would be released' in capsys.readouterr().out
        assert Reservation.objects.expired().count() == 1

        call_command('release_expired_reservations')
        assert '1 reservation(s) released' in capsys.readouterr().out
        assert Reservation.objects.expired().count() == 0
