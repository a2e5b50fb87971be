"""
Stock movements — state-changing operations (receive, issue, adjust, commit).

All methods use transaction.atomic() and lock the StockLevel row of the
(product, variant, warehouse) key before re-checking availability. The
ledger entry itself decrements with a conditional UPDATE, so stock cannot
go negative even if a caller skips the lock.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from stockkeeper.exceptions import (
    InsufficientStock,
    InvalidInput,
    InvalidStateTransition,
    OverAllocation,
)
from stockkeeper.models.enums import MovementType, ReservationStatus
from stockkeeper.models.ledger import StockLedgerEntry, new_txn_id
from stockkeeper.models.reservation import Reservation
from stockkeeper.models.stock import StockLevel
from stockkeeper.pricing import to_quantity
from stockkeeper.services.queries import (
    StockQueries,
    clean_quantity,
    get_bin,
    get_warehouse,
)
from stockkeeper.services.validation import StockValidationResult, StockValidator

logger = logging.getLogger('stockkeeper')


@dataclass(frozen=True)
class MovementLine:
    """One line of a stock entry document."""

    product_id: int
    quantity: Decimal
    variant_id: int | None = None
    bin: object = None
    reason: str = ''


@dataclass(frozen=True)
class LinePreview:
    """What committing a line would do, computed with the commit rules."""

    previous_stock: Decimal
    new_stock: Decimal
    validation: StockValidationResult

    @property
    def is_valid(self) -> bool:
        return self.validation.is_valid


def _post(level, delta, movement_type, bin=None, txn_id=None, reference_type='',
          reference_id=None, reference_number='', reason='', user=None, metadata=None):
    """Write one ledger entry against a locked level."""
    return StockLedgerEntry.objects.create(
        stock_level=level,
        product_id=level.product_id,
        variant_id=level.variant_id,
        warehouse_id=level.warehouse_id,
        bin=bin,
        movement_type=movement_type,
        quantity_delta=delta,
        txn_id=txn_id or new_txn_id(),
        reference_type=reference_type,
        reference_id=reference_id,
        reference_number=reference_number,
        reason=reason,
        user=user,
        metadata=metadata or {},
    )


def _get_reservation(reservation) -> Reservation:
    pk = reservation.pk if isinstance(reservation, Reservation) else reservation
    try:
        return Reservation.objects.select_for_update().get(pk=pk)
    except Reservation.DoesNotExist:
        raise InvalidInput('RESERVATION_NOT_FOUND', reservation=pk) from None


class StockMovements:
    """State-changing stock movement methods."""

    @classmethod
    def receive(cls, quantity, product_id, warehouse, variant_id=None, bin=None,
                movement_type=MovementType.PURCHASE_IN, reference_type='',
                reference_id=None, reference_number='', txn_id=None,
                user=None, reason='Receipt', allow_inactive=False,
                **metadata) -> StockLedgerEntry:
        """
        Stock entry.

        Creates the StockLevel for the key if needed and posts a positive
        ledger entry. Compensating entries pass allow_inactive=True so they
        still post after the warehouse or bin has been deactivated.

        Raises:
            InvalidInput: non-positive quantity, outward movement type,
                unknown/inactive warehouse or bin

        Concurrency:
            - Runs under transaction.atomic()
            - Locks the StockLevel row
            - StockLedgerEntry.save() updates _quantity atomically
        """
        quantity = clean_quantity(quantity)
        if not MovementType.is_inward(movement_type):
            raise InvalidInput('INVALID_MOVEMENT_TYPE', movement_type=movement_type)

        wh = get_warehouse(warehouse, active_only=not allow_inactive)
        storage_bin = get_bin(bin, wh, active_only=not allow_inactive)

        with transaction.atomic():
            level = StockLevel.objects.lock_key(product_id, wh, variant_id)
            entry = _post(
                level, quantity, movement_type,
                bin=storage_bin,
                txn_id=txn_id,
                reference_type=reference_type,
                reference_id=reference_id,
                reference_number=reference_number,
                reason=reason,
                user=user,
                metadata=metadata,
            )
            logger.info(
                "stock.receive",
                extra={
                    "product_id": product_id,
                    "variant_id": variant_id,
                    "warehouse": wh.code,
                    "qty": str(quantity),
                    "movement_type": str(movement_type),
                    "new_stock": str(entry.new_stock),
                    "txn_id": entry.txn_id,
                },
            )
            return entry

    @classmethod
    def issue(cls, quantity, product_id, warehouse, variant_id=None, bin=None,
              movement_type=MovementType.SALE_OUT, reservation=None,
              reference_type='', reference_id=None, reference_number='',
              txn_id=None, user=None, reason='Issue', allow_inactive=False,
              **metadata) -> StockLedgerEntry:
        """
        Stock exit.

        When a reservation is given, its quantity counts toward what may be
        issued and it is marked CONSUMED in the same transaction.

        Raises:
            InsufficientStock: quantity > available (+ consumed reservation)
            InvalidInput: non-positive quantity, inward movement type,
                reservation for a different key
            InvalidStateTransition: reservation is not active

        Concurrency:
            - Runs under transaction.atomic()
            - Locks the StockLevel row, then the reservation
            - Verifies availability after lock
        """
        quantity = clean_quantity(quantity)
        if not MovementType.is_outward(movement_type):
            raise InvalidInput('INVALID_MOVEMENT_TYPE', movement_type=movement_type)

        wh = get_warehouse(warehouse, active_only=not allow_inactive)
        storage_bin = get_bin(bin, wh, active_only=not allow_inactive)

        with transaction.atomic():
            level = StockLevel.objects.lock_key(product_id, wh, variant_id)

            allowance = Decimal('0')
            locked_reservation = None
            if reservation is not None:
                locked_reservation = _get_reservation(reservation)
                if (locked_reservation.product_id != product_id
                        or locked_reservation.variant_id != variant_id
                        or locked_reservation.warehouse_id != wh.pk):
                    raise InvalidInput(
                        'RESERVATION_MISMATCH',
                        reservation=locked_reservation.pk,
                    )
                if not locked_reservation.is_active:
                    raise InvalidStateTransition(
                        'INVALID_STATUS',
                        current=locked_reservation.status,
                        expected=ReservationStatus.ACTIVE,
                    )
                allowance = locked_reservation.reserved_quantity

            available = StockQueries.available(product_id, wh, variant_id) + allowance
            if quantity > available:
                raise InsufficientStock(available=available, requested=quantity)

            entry = _post(
                level, -quantity, movement_type,
                bin=storage_bin,
                txn_id=txn_id,
                reference_type=reference_type,
                reference_id=reference_id,
                reference_number=reference_number,
                reason=reason,
                user=user,
                metadata=metadata,
            )

            if locked_reservation is not None:
                locked_reservation.status = ReservationStatus.CONSUMED
                locked_reservation.resolved_at = timezone.now()
                locked_reservation.metadata['consumed_quantity'] = str(quantity)
                locked_reservation.metadata['txn_id'] = entry.txn_id
                locked_reservation.save(update_fields=['status', 'resolved_at', 'metadata'])

            logger.info(
                "stock.issue",
                extra={
                    "product_id": product_id,
                    "variant_id": variant_id,
                    "warehouse": wh.code,
                    "qty": str(quantity),
                    "movement_type": str(movement_type),
                    "new_stock": str(entry.new_stock),
                    "reservation": locked_reservation.pk if locked_reservation else None,
                    "txn_id": entry.txn_id,
                },
            )
            return entry

    @classmethod
    def adjust(cls, counted_quantity, product_id, warehouse, reason, variant_id=None,
               bin=None, user=None, txn_id=None) -> StockLedgerEntry | None:
        """
        Physical count adjustment.

        Calculates delta automatically: counted_quantity - on_hand, and
        posts it as adjustment_in / adjustment_out. Returns None when the
        count matches. A count below what is reserved or held on the key is
        refused; release those first.

        Raises:
            OverAllocation: counted_quantity < reserved + on_hold
            InvalidInput('REASON_REQUIRED'): If reason is empty
            InvalidInput('INVALID_QUANTITY'): If counted_quantity < 0
        """
        if not reason:
            raise InvalidInput('REASON_REQUIRED')

        counted = to_quantity(counted_quantity, 'counted_quantity')
        if counted < 0:
            raise InvalidInput('INVALID_QUANTITY', requested=counted)

        wh = get_warehouse(warehouse)
        storage_bin = get_bin(bin, wh)

        with transaction.atomic():
            level = StockLevel.objects.lock_key(product_id, wh, variant_id)
            delta = counted - level._quantity

            if delta == 0:
                return None

            if delta < 0:
                position = StockQueries.stock_position(product_id, wh, variant_id)
                committed = position.reserved + position.on_hold
                if counted < committed:
                    raise OverAllocation(
                        available=counted,
                        requested=committed,
                        reserved=position.reserved,
                        on_hold=position.on_hold,
                    )

            movement_type = (
                MovementType.ADJUSTMENT_IN if delta > 0 else MovementType.ADJUSTMENT_OUT
            )
            entry = _post(
                level, delta, movement_type,
                bin=storage_bin,
                txn_id=txn_id,
                reference_type='physical_count',
                reason=f"Adjustment: {reason}",
                user=user,
                metadata={'counted_quantity': str(counted)},
            )
            logger.info(
                "stock.adjust",
                extra={
                    "product_id": product_id,
                    "warehouse": wh.code,
                    "delta": str(delta),
                    "reason": reason,
                },
            )
            return entry

    @classmethod
    def commit_lines(cls, lines, movement_type, warehouse, user=None, txn_id=None,
                     reference_type='', reference_id=None, reference_number='',
                     reason='') -> list[StockLedgerEntry]:
        """
        Commit every line of a stock entry document as one transaction.

        All entries share one txn_id. Lines are posted in key order so
        concurrent documents lock keys in the same order; the result is
        returned in input order. Any failing line rolls back the whole
        document.

        Args:
            lines: MovementLine instances or mappings with the same keys
            movement_type: One MovementType for the whole document
        """
        lines = [
            MovementLine(**line) if isinstance(line, Mapping) else line
            for line in lines
        ]
        if not lines:
            raise InvalidInput('INVALID_INPUT', field='lines')

        if MovementType.is_inward(movement_type):
            post = cls.receive
        elif MovementType.is_outward(movement_type):
            post = cls.issue
        else:
            raise InvalidInput('INVALID_MOVEMENT_TYPE', movement_type=movement_type)

        txn_id = txn_id or new_txn_id()
        order = sorted(
            range(len(lines)),
            key=lambda i: (lines[i].product_id, lines[i].variant_id or 0),
        )
        entries: list[StockLedgerEntry | None] = [None] * len(lines)

        with transaction.atomic():
            for i in order:
                line = lines[i]
                entries[i] = post(
                    line.quantity,
                    line.product_id,
                    warehouse,
                    variant_id=line.variant_id,
                    bin=line.bin,
                    movement_type=movement_type,
                    reference_type=reference_type,
                    reference_id=reference_id,
                    reference_number=reference_number,
                    txn_id=txn_id,
                    user=user,
                    reason=line.reason or reason or str(movement_type),
                )

        logger.info(
            "stock.commit",
            extra={
                "txn_id": txn_id,
                "movement_type": str(movement_type),
                "lines": len(entries),
                "reference": reference_number,
            },
        )
        return entries

    @classmethod
    def preview_line(cls, product_id, warehouse, quantity, movement_type,
                     variant_id=None, bin=None) -> LinePreview:
        """
        Previous/new stock a line would produce, for display while editing.

        Uses the same validator as commit, so a valid preview commits
        unless stock changes in between.
        """
        validation = StockValidator.validate_stock_transaction(
            product_id, warehouse, quantity, movement_type, variant_id, bin,
        )
        previous = validation.current_stock
        requested = validation.requested or Decimal('0')
        if MovementType.is_outward(movement_type):
            new = previous - requested
        else:
            new = previous + requested
        return LinePreview(previous_stock=previous, new_stock=new, validation=validation)
