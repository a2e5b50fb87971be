"""
Stock reservations — lifecycle (create, release, consume, expire).

All methods use transaction.atomic() with appropriate locking.
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from stockkeeper.conf import stockkeeper_settings
from stockkeeper.exceptions import InvalidInput, OverAllocation
from stockkeeper.models.enums import MovementType, ReservationStatus
from stockkeeper.models.reservation import Reservation
from stockkeeper.models.stock import StockLevel
from stockkeeper.services.queries import (
    StockQueries,
    clean_quantity,
    get_bin,
    get_warehouse,
)

logger = logging.getLogger('stockkeeper')


def _get_locked(reservation) -> Reservation:
    pk = reservation.pk if isinstance(reservation, Reservation) else reservation
    try:
        return Reservation.objects.select_for_update().get(pk=pk)
    except Reservation.DoesNotExist:
        raise InvalidInput('RESERVATION_NOT_FOUND', reservation=pk) from None


class StockReservations:
    """Reservation lifecycle methods."""

    @classmethod
    def create_reservation(cls, quantity, product_id, warehouse, reference_type,
                           reference_number='', user=None, variant_id=None, bin=None,
                           reference_id=None, expires_at=None, notes='',
                           **metadata) -> Reservation:
        """
        Reserve stock for an order, pick list or transfer.

        Fails unless quantity + active reservations + QC-held quantity fits
        within on-hand stock for the key, so the sum of active
        reservations never exceeds on-hand.

        Raises:
            OverAllocation: not enough unreserved stock
            InvalidInput: non-positive quantity, missing reference_type,
                unknown warehouse/bin

        Concurrency:
            - Runs under transaction.atomic()
            - Locks the StockLevel row of the key before summing
              reservations, so two reservations on a key serialize
        """
        quantity = clean_quantity(quantity)
        if not reference_type:
            raise InvalidInput('INVALID_INPUT', field='reference_type')

        wh = get_warehouse(warehouse)
        storage_bin = get_bin(bin, wh)

        if expires_at is None and stockkeeper_settings.RESERVATION_TTL_MINUTES:
            expires_at = timezone.now() + timedelta(
                minutes=stockkeeper_settings.RESERVATION_TTL_MINUTES
            )

        with transaction.atomic():
            level = StockLevel.objects.lock_key(product_id, wh, variant_id)
            position = StockQueries.stock_position(product_id, wh, variant_id)

            if quantity > position.available:
                raise OverAllocation(
                    available=position.available,
                    requested=quantity,
                    on_hand=level._quantity,
                    reserved=position.reserved,
                )

            reservation = Reservation.objects.create(
                product_id=product_id,
                variant_id=variant_id,
                warehouse=wh,
                bin=storage_bin,
                reserved_quantity=quantity,
                reference_type=reference_type,
                reference_id=reference_id,
                reference_number=reference_number,
                reserved_by=user,
                expires_at=expires_at,
                notes=notes,
                metadata=metadata,
            )
            logger.info(
                "stock.reservation.created",
                extra={
                    "reservation_id": reservation.pk,
                    "product_id": product_id,
                    "warehouse": wh.code,
                    "qty": str(quantity),
                    "reference": f"{reference_type}:{reference_number}",
                },
            )
            return reservation

    @classmethod
    def release_reservation(cls, reservation, reason='Released') -> Reservation:
        """
        Release a reservation.

        Transition: ACTIVE -> RELEASED. Idempotent: a reservation that is
        already released or consumed is returned unchanged.
        """
        with transaction.atomic():
            locked = _get_locked(reservation)

            if locked.status != ReservationStatus.ACTIVE:
                return locked

            locked.status = ReservationStatus.RELEASED
            locked.resolved_at = timezone.now()
            locked.metadata['release_reason'] = reason
            locked.save(update_fields=['status', 'resolved_at', 'metadata'])
            logger.info(
                "stock.reservation.released",
                extra={"reservation_id": locked.pk, "reason": reason},
            )
            return locked

    @classmethod
    def release_reservations_for(cls, reference_type, reference_number,
                                 reason='Released') -> int:
        """Release every active reservation of a reference. Returns count."""
        with transaction.atomic():
            ids = list(
                Reservation.objects.select_for_update()
                .for_reference(reference_type, reference_number)
                .filter(status=ReservationStatus.ACTIVE)
                .values_list('pk', flat=True)
            )
            for pk in ids:
                cls.release_reservation(pk, reason=reason)
        return len(ids)

    @classmethod
    def consume_reservation(cls, reservation, movement_type=MovementType.SALE_OUT,
                            quantity=None, user=None, txn_id=None, reason=None):
        """
        Issue stock against a reservation.

        Issues its full quantity unless a smaller quantity is given; either
        way the reservation ends CONSUMED.

        Returns:
            The StockLedgerEntry written
        """
        from stockkeeper.services.movements import StockMovements

        pk = reservation.pk if isinstance(reservation, Reservation) else reservation
        try:
            current = Reservation.objects.get(pk=pk)
        except Reservation.DoesNotExist:
            raise InvalidInput('RESERVATION_NOT_FOUND', reservation=pk) from None

        return StockMovements.issue(
            quantity if quantity is not None else current.reserved_quantity,
            current.product_id,
            current.warehouse_id,
            variant_id=current.variant_id,
            bin=current.bin_id,
            movement_type=movement_type,
            reservation=current,
            reference_type=current.reference_type,
            reference_id=current.reference_id,
            reference_number=current.reference_number,
            txn_id=txn_id,
            user=user,
            reason=reason or f"Reservation {current.pk} consumed",
        )

    @classmethod
    def release_expired_reservations(cls) -> int:
        """
        Release all expired reservations in batches.

        Returns:
            Number of reservations released

        Concurrency:
            - Each batch runs under its own transaction.atomic()
            - Uses select_for_update() with SKIP LOCKED
            - Safe for multiple instances
        """
        now = timezone.now()
        total = 0
        batch_size = stockkeeper_settings.EXPIRED_BATCH_SIZE

        while True:
            with transaction.atomic():
                batch_ids = list(
                    Reservation.objects.select_for_update(skip_locked=True)
                    .expired()
                    .values_list('pk', flat=True)[:batch_size]
                )

                if not batch_ids:
                    break

                Reservation.objects.filter(pk__in=batch_ids).update(
                    status=ReservationStatus.RELEASED,
                    resolved_at=now,
                )
                total += len(batch_ids)

        if total:
            logger.info(
                "stock.reservations.expired_released",
                extra={"released": total},
            )
        return total
