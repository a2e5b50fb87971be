"""
Pick lists — turn validated outward lines into picking work.

Pick lists do not reserve stock. Callers that want picked stock protected
reserve it themselves (reference_type='pick_list').
"""

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction

from stockkeeper.exceptions import InvalidInput
from stockkeeper.models.enums import (
    MovementType,
    PickListStatus,
    PickStatus,
    PriorityLevel,
)
from stockkeeper.models.picking import PickList, PickListDetail
from stockkeeper.pricing import to_quantity
from stockkeeper.services.queries import clean_quantity, get_bin, get_warehouse
from stockkeeper.services.validation import StockValidator

logger = logging.getLogger('stockkeeper')


@dataclass(frozen=True)
class PickLine:
    """One outward line to be picked."""

    product_id: int
    required_quantity: Decimal
    variant_id: int | None = None
    bin: object = None
    uom_id: int | None = None
    instructions: str = ''


def _get_detail(detail) -> PickListDetail:
    pk = detail.pk if isinstance(detail, PickListDetail) else detail
    try:
        return PickListDetail.objects.select_for_update().get(pk=pk)
    except PickListDetail.DoesNotExist:
        raise InvalidInput('PICK_DETAIL_NOT_FOUND', detail=pk) from None


def _refresh_header(pick_list: PickList) -> None:
    statuses = list(pick_list.details.values_list('status', flat=True))
    if statuses and all(s in (PickStatus.COMPLETED, PickStatus.SHORT) for s in statuses):
        status = PickListStatus.COMPLETED
    elif any(s != PickStatus.PENDING for s in statuses):
        status = PickListStatus.IN_PROGRESS
    else:
        status = PickListStatus.DRAFT

    if pick_list.status != status:
        pick_list.status = status
        pick_list.save(update_fields=['status', 'updated_at'])


class PickLists:
    """Pick list methods."""

    @classmethod
    def create_pick_list(cls, warehouse, lines, user=None,
                         priority_level=PriorityLevel.NORMAL, picker=None,
                         number=None, special_instructions='') -> list[PickListDetail]:
        """
        Create a pick list with one PENDING detail per line.

        Every line is validated as an outward movement; lines for the same
        key are validated on their combined quantity. Nothing is created
        if any line fails.

        Returns:
            The created PickListDetail rows, in pick sequence

        Raises:
            InsufficientStock: some key lacks available stock
            InvalidInput: empty list, bad quantity, unknown warehouse/bin
        """
        wh = get_warehouse(warehouse)
        lines = [
            PickLine(**line) if isinstance(line, Mapping) else line
            for line in lines
        ]
        if not lines:
            raise InvalidInput('INVALID_INPUT', field='lines')

        totals: dict[tuple, Decimal] = {}
        bins = []
        for line in lines:
            quantity = clean_quantity(line.required_quantity)
            bins.append(get_bin(line.bin, wh))
            key = (line.product_id, line.variant_id)
            totals[key] = totals.get(key, Decimal('0')) + quantity

        for (product_id, variant_id), quantity in totals.items():
            StockValidator.validate_stock_transaction(
                product_id, wh, quantity, MovementType.SALE_OUT, variant_id,
            ).raise_for_error()

        with transaction.atomic():
            pick_list = PickList.objects.create(
                number=number or f"PL-{uuid.uuid4().hex[:12].upper()}",
                warehouse=wh,
                picker=picker,
                priority_level=priority_level,
                special_instructions=special_instructions,
                created_by=user,
            )
            PickListDetail.objects.bulk_create([
                PickListDetail(
                    pick_list=pick_list,
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    warehouse=wh,
                    bin=storage_bin,
                    required_quantity=to_quantity(line.required_quantity),
                    uom_id=line.uom_id,
                    pick_sequence=sequence,
                    pick_instructions=line.instructions,
                    status=PickStatus.PENDING,
                )
                for sequence, (line, storage_bin) in enumerate(zip(lines, bins), start=1)
            ])
            logger.info(
                "stock.pick_list.created",
                extra={
                    "pick_list": pick_list.number,
                    "warehouse": wh.code,
                    "lines": len(lines),
                },
            )
            return list(pick_list.details.all())

    @classmethod
    def record_pick(cls, detail, picked_quantity) -> PickListDetail:
        """
        Record how much of a line has been picked so far.

        Status follows the quantity: 0 -> PENDING, partial -> PICKING,
        full -> COMPLETED.

        Raises:
            InvalidInput: picked_quantity outside 0..required_quantity,
                or the line is already closed short
        """
        picked = to_quantity(picked_quantity, 'picked_quantity')

        with transaction.atomic():
            locked = _get_detail(detail)

            if locked.status == PickStatus.SHORT:
                raise InvalidInput('INVALID_STATUS', current=locked.status)
            if picked < 0 or picked > locked.required_quantity:
                raise InvalidInput(
                    'INVALID_QUANTITY',
                    requested=picked,
                    required=locked.required_quantity,
                )

            if picked == 0:
                locked.status = PickStatus.PENDING
            elif picked == locked.required_quantity:
                locked.status = PickStatus.COMPLETED
            else:
                locked.status = PickStatus.PICKING
            locked.picked_quantity = picked
            locked.save(update_fields=['picked_quantity', 'status'])

            _refresh_header(locked.pick_list)
            return locked

    @classmethod
    def close_pick_detail(cls, detail, notes='') -> PickListDetail:
        """
        Close a line: COMPLETED if fully picked, otherwise SHORT.
        """
        with transaction.atomic():
            locked = _get_detail(detail)

            if locked.picked_quantity == locked.required_quantity:
                locked.status = PickStatus.COMPLETED
            else:
                locked.status = PickStatus.SHORT
            if notes:
                locked.notes = notes
            locked.save(update_fields=['status', 'notes'])

            _refresh_header(locked.pick_list)
            logger.info(
                "stock.pick_list.line_closed",
                extra={
                    "detail_id": locked.pk,
                    "status": locked.status,
                    "short_by": str(locked.remaining),
                },
            )
            return locked
