"""
Quality control holds — withhold quantity pending inspection.

A hold only removes stock from availability; on-hand is untouched until
the hold is rejected, which disposes of the quantity through the ledger.
"""

import logging

from django.db import transaction
from django.utils import timezone

from stockkeeper.exceptions import (
    InsufficientStock,
    InvalidInput,
    InvalidStateTransition,
)
from stockkeeper.models.enums import MovementType, QCHoldStatus
from stockkeeper.models.quality import QCHold
from stockkeeper.models.stock import StockLevel
from stockkeeper.services.queries import (
    StockQueries,
    clean_quantity,
    get_bin,
    get_warehouse,
)

logger = logging.getLogger('stockkeeper')


def _get_hold(hold, lock=False) -> QCHold:
    pk = hold.pk if isinstance(hold, QCHold) else hold
    qs = QCHold.objects.select_for_update() if lock else QCHold.objects
    try:
        return qs.get(pk=pk)
    except QCHold.DoesNotExist:
        raise InvalidInput('QC_HOLD_NOT_FOUND', hold=pk) from None


def _ensure_on_hold(hold: QCHold, target) -> None:
    if hold.status != QCHoldStatus.ON_HOLD:
        raise InvalidStateTransition(
            'INVALID_STATUS',
            current=hold.status,
            expected=QCHoldStatus.ON_HOLD,
            target=target,
        )


class QualityControl:
    """QC hold methods."""

    @classmethod
    def create_qc_hold(cls, quantity, product_id, warehouse, reason, user=None,
                       variant_id=None, bin=None, serial_number='', inspector=None,
                       related_txn_id='') -> QCHold:
        """
        Put quantity on hold for inspection.

        Only available stock can be held; held stock is then excluded from
        availability until released or rejected.

        Raises:
            InsufficientStock: quantity > available
            InvalidInput: non-positive quantity, empty reason
        """
        quantity = clean_quantity(quantity)
        if not reason:
            raise InvalidInput('REASON_REQUIRED')

        wh = get_warehouse(warehouse)
        storage_bin = get_bin(bin, wh)

        with transaction.atomic():
            StockLevel.objects.lock_key(product_id, wh, variant_id)
            available = StockQueries.available(product_id, wh, variant_id)

            if quantity > available:
                raise InsufficientStock(available=available, requested=quantity)

            hold = QCHold.objects.create(
                product_id=product_id,
                variant_id=variant_id,
                warehouse=wh,
                bin=storage_bin,
                serial_number=serial_number,
                hold_quantity=quantity,
                hold_reason=reason,
                inspector=inspector,
                created_by=user,
                related_txn_id=related_txn_id,
            )
            logger.info(
                "stock.qc_hold.created",
                extra={
                    "hold_id": hold.pk,
                    "product_id": product_id,
                    "warehouse": wh.code,
                    "qty": str(quantity),
                    "reason": reason,
                },
            )
            return hold

    @classmethod
    def release_qc_hold(cls, hold, user=None, notes='') -> QCHold:
        """
        Inspection passed: quantity re-enters availability.

        Transition: ON_HOLD -> RELEASED
        """
        with transaction.atomic():
            locked = _get_hold(hold, lock=True)
            _ensure_on_hold(locked, QCHoldStatus.RELEASED)

            locked.status = QCHoldStatus.RELEASED
            locked.released_by = user
            locked.resolved_at = timezone.now()
            locked.release_notes = notes
            locked.save(update_fields=['status', 'released_by', 'resolved_at', 'release_notes'])
            logger.info(
                "stock.qc_hold.released",
                extra={"hold_id": locked.pk, "qty": str(locked.hold_quantity)},
            )
            return locked

    @classmethod
    def reject_qc_hold(cls, hold, user=None, notes='') -> QCHold:
        """
        Inspection failed: quantity is disposed of.

        Transition: ON_HOLD -> REJECTED, plus an adjustment_out ledger
        entry for hold_quantity in the same transaction.
        """
        from stockkeeper.services.movements import StockMovements

        current = _get_hold(hold)

        with transaction.atomic():
            # Key lock first, same order as every other mutation
            StockLevel.objects.lock_key(current.product_id, current.warehouse_id, current.variant_id)
            locked = _get_hold(current, lock=True)
            _ensure_on_hold(locked, QCHoldStatus.REJECTED)

            locked.status = QCHoldStatus.REJECTED
            locked.released_by = user
            locked.resolved_at = timezone.now()
            locked.release_notes = notes
            locked.save(update_fields=['status', 'released_by', 'resolved_at', 'release_notes'])

            entry = StockMovements.issue(
                locked.hold_quantity,
                locked.product_id,
                locked.warehouse_id,
                variant_id=locked.variant_id,
                bin=locked.bin_id,
                movement_type=MovementType.ADJUSTMENT_OUT,
                reference_type='qc_hold',
                reference_id=locked.pk,
                user=user,
                reason=f"QC rejected: {locked.hold_reason}",
                allow_inactive=True,
            )
            locked.related_txn_id = entry.txn_id
            locked.save(update_fields=['related_txn_id'])

            logger.info(
                "stock.qc_hold.rejected",
                extra={
                    "hold_id": locked.pk,
                    "qty": str(locked.hold_quantity),
                    "txn_id": entry.txn_id,
                },
            )
            return locked
