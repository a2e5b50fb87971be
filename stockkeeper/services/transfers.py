"""
Stock transfers — the warehouse-to-warehouse lifecycle.

Every transition:
1. Locks the transfer row
2. Checks the move against TRANSFER_TRANSITIONS and raises
   InvalidStateTransition before touching anything
3. Runs the stock side (reservations, ledger) and the status change in
   the same transaction.atomic(), so a failure leaves no partial state
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from stockkeeper.conf import stockkeeper_settings
from stockkeeper.exceptions import (
    ApprovalRequired,
    InsufficientStock,
    InvalidInput,
    InvalidStateTransition,
)
from stockkeeper.models.enums import (
    ApprovalStatus,
    MovementType,
    TransferLineStatus,
    TransferStatus,
)
from stockkeeper.models.ledger import new_txn_id
from stockkeeper.models.stock import StockLevel
from stockkeeper.models.transfer import StockTransfer, TransferDetail
from stockkeeper.pricing import calculate_line, to_decimal, to_quantity
from stockkeeper.services.queries import StockQueries, get_bin, get_warehouse

logger = logging.getLogger('stockkeeper')

RESERVATION_REFERENCE = 'stock_transfer'


@dataclass(frozen=True)
class TransferLine:
    """One requested line of a new transfer."""

    product_id: int
    requested_quantity: Decimal
    unit_cost: Decimal = Decimal('0')
    variant_id: int | None = None
    uom_id: int | None = None
    from_bin: object = None
    to_bin: object = None
    notes: str = ''


def _lock(transfer) -> StockTransfer:
    pk = transfer.pk if isinstance(transfer, StockTransfer) else transfer
    try:
        return StockTransfer.objects.select_for_update().get(pk=pk)
    except StockTransfer.DoesNotExist:
        raise InvalidInput('TRANSFER_NOT_FOUND', transfer=pk) from None


def _check(transfer: StockTransfer, target) -> None:
    if not transfer.can_transition_to(target):
        raise InvalidStateTransition(
            current=transfer.transfer_status,
            target=target,
            transfer=transfer.transfer_number,
        )


def _per_line(transfer: StockTransfer, quantities) -> dict:
    """Validate a {line_id: quantity} mapping against the transfer's lines."""
    if quantities is None:
        return {}
    line_ids = set(transfer.lines.values_list('pk', flat=True))
    cleaned = {}
    for line_id, quantity in quantities.items():
        if line_id not in line_ids:
            raise InvalidInput('UNKNOWN_LINE', line=line_id, transfer=transfer.transfer_number)
        quantity = to_quantity(quantity, 'quantity')
        if quantity < 0:
            raise InvalidInput('INVALID_QUANTITY', requested=quantity, line=line_id)
        cleaned[line_id] = quantity
    return cleaned


def _log(event, transfer, **extra):
    logger.info(
        event,
        extra={
            "transfer": transfer.transfer_number,
            "status": transfer.transfer_status,
            **extra,
        },
    )


class StockTransfers:
    """Transfer lifecycle methods."""

    @classmethod
    def create_transfer(cls, transfer_number, from_warehouse=None, to_warehouse=None,
                        lines=(), user=None, **fields) -> StockTransfer:
        """
        Create a DRAFT transfer.

        A draft may be incomplete; completeness is checked on submit.
        Line total_cost is priced with the shared line calculator.

        Args:
            transfer_number: Caller-assigned document number
            from_warehouse / to_warehouse: Warehouse instances or pks
            lines: TransferLine instances or mappings with the same keys
            user: Creator (checked against the approver later)
            **fields: Other StockTransfer fields (priority_level, carrier_name...)
        """
        if not transfer_number:
            raise InvalidInput('INVALID_INPUT', field='transfer_number')

        source = get_warehouse(from_warehouse) if from_warehouse is not None else None
        destination = get_warehouse(to_warehouse) if to_warehouse is not None else None
        lines = [
            TransferLine(**line) if isinstance(line, Mapping) else line
            for line in lines
        ]

        with transaction.atomic():
            transfer = StockTransfer.objects.create(
                transfer_number=transfer_number,
                from_warehouse=source,
                to_warehouse=destination,
                created_by=user,
                **fields,
            )
            for line in lines:
                cls.add_line(transfer, line)

            _log("stock.transfer.created", transfer, lines=len(lines))
            return transfer

    @classmethod
    def add_line(cls, transfer, line) -> TransferDetail:
        """Add a line to a DRAFT transfer."""
        if isinstance(line, Mapping):
            line = TransferLine(**line)

        with transaction.atomic():
            locked = _lock(transfer)
            if locked.transfer_status != TransferStatus.DRAFT:
                raise InvalidStateTransition(
                    'INVALID_STATUS',
                    current=locked.transfer_status,
                    expected=TransferStatus.DRAFT,
                )

            quantity = to_quantity(line.requested_quantity, 'requested_quantity')
            amounts = calculate_line(quantity, line.unit_cost)
            from_bin = get_bin(line.from_bin, locked.from_warehouse) if locked.from_warehouse else None
            to_bin = get_bin(line.to_bin, locked.to_warehouse) if locked.to_warehouse else None

            return TransferDetail.objects.create(
                transfer=locked,
                product_id=line.product_id,
                variant_id=line.variant_id,
                uom_id=line.uom_id,
                requested_quantity=quantity,
                unit_cost=amounts.rate,
                total_cost=amounts.total,
                from_bin=from_bin,
                to_bin=to_bin,
                notes=line.notes,
            )

    @classmethod
    def submit_transfer(cls, transfer, user=None, auto_approve=False) -> StockTransfer:
        """
        Submit a draft for approval.

        Transition: DRAFT -> PENDING_APPROVAL (-> APPROVED when
        auto_approve and the estimated cost is within the threshold)

        Raises:
            InvalidInput: no line with quantity, warehouses missing, equal,
                or of different companies
            ApprovalRequired: auto_approve above TRANSFER_APPROVAL_THRESHOLD
            InvalidStateTransition: not a draft
        """
        with transaction.atomic():
            locked = _lock(transfer)
            _check(locked, TransferStatus.PENDING_APPROVAL)

            source, destination = locked.from_warehouse, locked.to_warehouse
            if source is None or destination is None:
                raise InvalidInput('WAREHOUSES_REQUIRED', transfer=locked.transfer_number)
            if source.pk == destination.pk:
                raise InvalidInput('SAME_WAREHOUSE', warehouse=source.code)
            if source.company_id != destination.company_id:
                raise InvalidInput(
                    'CROSS_COMPANY',
                    from_company=source.company_id,
                    to_company=destination.company_id,
                )

            lines = list(locked.lines.all())
            if not any(line.requested_quantity > 0 for line in lines):
                raise InvalidInput('EMPTY_TRANSFER', transfer=locked.transfer_number)

            estimated = locked.total_value
            threshold = to_decimal(stockkeeper_settings.TRANSFER_APPROVAL_THRESHOLD)
            requires_approval = estimated > threshold

            if auto_approve and requires_approval:
                raise ApprovalRequired(
                    estimated_cost=estimated,
                    threshold=threshold,
                    transfer=locked.transfer_number,
                )

            locked.transfer_status = TransferStatus.PENDING_APPROVAL
            locked.approval_status = ApprovalStatus.PENDING
            locked.estimated_cost = estimated
            locked.requires_approval = requires_approval

            if auto_approve:
                _check(locked, TransferStatus.APPROVED)
                locked.transfer_status = TransferStatus.APPROVED
                locked.approval_status = ApprovalStatus.APPROVED
                locked.approved_by = user
                locked.approved_at = timezone.now()
                locked.approval_remarks = 'Auto-approved within threshold'

            locked.save()
            _log(
                "stock.transfer.submitted",
                locked,
                estimated_cost=str(estimated),
                requires_approval=requires_approval,
            )
            return locked

    @classmethod
    def approve_transfer(cls, transfer, approver, remarks='') -> StockTransfer:
        """
        Approve a pending transfer.

        Transition: PENDING_APPROVAL -> APPROVED

        Raises:
            ApprovalRequired: no approver, or approver is the creator
        """
        with transaction.atomic():
            locked = _lock(transfer)
            _check(locked, TransferStatus.APPROVED)

            if approver is None:
                raise ApprovalRequired(transfer=locked.transfer_number)
            if locked.created_by_id is not None and approver.pk == locked.created_by_id:
                raise ApprovalRequired(
                    'SELF_APPROVAL',
                    transfer=locked.transfer_number,
                    approver=approver.pk,
                )

            locked.transfer_status = TransferStatus.APPROVED
            locked.approval_status = ApprovalStatus.APPROVED
            locked.approved_by = approver
            locked.approved_at = timezone.now()
            locked.approval_remarks = remarks
            locked.save()
            _log("stock.transfer.approved", locked, approver=approver.pk)
            return locked

    @classmethod
    def reject_transfer(cls, transfer, approver, reason='') -> StockTransfer:
        """
        Deny approval.

        Transition: PENDING_APPROVAL -> REJECTED
        """
        with transaction.atomic():
            locked = _lock(transfer)
            _check(locked, TransferStatus.REJECTED)

            if approver is None:
                raise ApprovalRequired(transfer=locked.transfer_number)

            locked.transfer_status = TransferStatus.REJECTED
            locked.approval_status = ApprovalStatus.REJECTED
            locked.rejection_reason = reason
            locked.save()
            _log("stock.transfer.rejected", locked, approver=approver.pk, reason=reason)
            return locked

    @classmethod
    def reopen_transfer(cls, transfer, user=None) -> StockTransfer:
        """
        Bring a rejected transfer back to DRAFT for editing and resubmission.

        Transition: REJECTED -> DRAFT
        """
        with transaction.atomic():
            locked = _lock(transfer)
            _check(locked, TransferStatus.DRAFT)

            locked.transfer_status = TransferStatus.DRAFT
            locked.approval_status = ApprovalStatus.PENDING
            locked.save()
            _log("stock.transfer.reopened", locked)
            return locked

    @classmethod
    def ship_transfer(cls, transfer, user=None, quantities=None) -> StockTransfer:
        """
        Ship an approved transfer from the source warehouse.

        Transition: APPROVED -> IN_TRANSIT

        For each line, reserves what can be released (the requested or
        given quantity, capped at available stock), then issues it as
        transfer_out consuming that reservation. shipped_quantity is what
        actually left; a line shipped below its request becomes SHORT.

        Args:
            quantities: Optional {line_id: quantity to ship}; defaults to
                the requested quantity of every line

        Raises:
            InsufficientStock: nothing at all could be shipped
            InvalidInput: quantity above requested, unknown line
        """
        from stockkeeper.services.movements import StockMovements
        from stockkeeper.services.reservations import StockReservations

        with transaction.atomic():
            locked = _lock(transfer)
            _check(locked, TransferStatus.IN_TRANSIT)

            wanted = _per_line(locked, quantities)
            source = locked.from_warehouse
            txn_id = new_txn_id()
            total_requested = Decimal('0')
            total_shipped = Decimal('0')

            for line in locked.lines.select_for_update().order_by('product_id', 'variant_id', 'pk'):
                want = (
                    wanted.get(line.pk, Decimal('0'))
                    if quantities is not None
                    else line.requested_quantity
                )
                if want > line.requested_quantity:
                    raise InvalidInput(
                        'INVALID_QUANTITY',
                        requested=want,
                        line=line.pk,
                        max=line.requested_quantity,
                    )
                total_requested += want

                shipped = Decimal('0')
                if want > 0:
                    StockLevel.objects.lock_key(line.product_id, source, line.variant_id)
                    available = StockQueries.available(line.product_id, source, line.variant_id)
                    shipped = min(want, max(available, Decimal('0')))

                if shipped > 0:
                    reservation = StockReservations.create_reservation(
                        shipped,
                        line.product_id,
                        source,
                        RESERVATION_REFERENCE,
                        reference_number=locked.transfer_number,
                        reference_id=locked.pk,
                        user=user,
                        variant_id=line.variant_id,
                        bin=line.from_bin_id,
                    )
                    StockMovements.issue(
                        shipped,
                        line.product_id,
                        source,
                        variant_id=line.variant_id,
                        bin=line.from_bin_id,
                        movement_type=MovementType.TRANSFER_OUT,
                        reservation=reservation,
                        reference_type=RESERVATION_REFERENCE,
                        reference_id=locked.pk,
                        reference_number=locked.transfer_number,
                        txn_id=txn_id,
                        user=user,
                        reason=f"Transfer {locked.transfer_number} shipped",
                    )
                    total_shipped += shipped

                line.shipped_quantity = shipped
                line.line_status = (
                    TransferLineStatus.SHIPPED
                    if shipped == line.requested_quantity
                    else TransferLineStatus.SHORT
                )
                line.save(update_fields=['shipped_quantity', 'line_status'])

            if total_shipped == 0:
                raise InsufficientStock(
                    available=Decimal('0'),
                    requested=total_requested,
                    transfer=locked.transfer_number,
                )

            locked.transfer_status = TransferStatus.IN_TRANSIT
            locked.shipped_at = timezone.now()
            locked.metadata['ship_txn_id'] = txn_id
            locked.save()
            _log("stock.transfer.shipped", locked, shipped=str(total_shipped), txn_id=txn_id)
            return locked

    @classmethod
    def receive_transfer(cls, transfer, user=None, quantities=None) -> StockTransfer:
        """
        Receive goods at the destination warehouse.

        Transition: IN_TRANSIT | PARTIALLY_RECEIVED -> PARTIALLY_RECEIVED | COMPLETED

        Each line's received_quantity grows by the given quantity, capped
        at shipped_quantity. COMPLETED only when every line has
        received == shipped.

        Args:
            quantities: Optional {line_id: quantity received now}; defaults
                to everything still outstanding

        Raises:
            InvalidInput: nothing to receive, negative quantity, unknown line
        """
        from stockkeeper.services.movements import StockMovements

        with transaction.atomic():
            locked = _lock(transfer)
            if locked.transfer_status not in (
                TransferStatus.IN_TRANSIT,
                TransferStatus.PARTIALLY_RECEIVED,
            ):
                raise InvalidStateTransition(
                    current=locked.transfer_status,
                    target=TransferStatus.PARTIALLY_RECEIVED,
                    transfer=locked.transfer_number,
                )

            given = _per_line(locked, quantities)
            destination = locked.to_warehouse
            txn_id = new_txn_id()
            received_now = Decimal('0')
            lines = list(locked.lines.select_for_update().order_by('product_id', 'variant_id', 'pk'))

            for line in lines:
                outstanding = line.in_transit_quantity
                qty = given.get(line.pk, Decimal('0')) if quantities is not None else outstanding
                accepted = min(qty, outstanding)
                if qty > accepted:
                    logger.warning(
                        "stock.transfer.receipt_capped",
                        extra={
                            "transfer": locked.transfer_number,
                            "line": line.pk,
                            "given": str(qty),
                            "accepted": str(accepted),
                        },
                    )
                if accepted <= 0:
                    continue

                StockMovements.receive(
                    accepted,
                    line.product_id,
                    destination,
                    variant_id=line.variant_id,
                    bin=line.to_bin_id,
                    movement_type=MovementType.TRANSFER_IN,
                    reference_type=RESERVATION_REFERENCE,
                    reference_id=locked.pk,
                    reference_number=locked.transfer_number,
                    txn_id=txn_id,
                    user=user,
                    reason=f"Transfer {locked.transfer_number} received",
                )
                line.received_quantity += accepted
                line.line_status = (
                    TransferLineStatus.RECEIVED
                    if line.is_fully_received
                    else TransferLineStatus.PARTIALLY_RECEIVED
                )
                line.save(update_fields=['received_quantity', 'line_status'])
                received_now += accepted

            complete = all(line.is_fully_received for line in lines)
            if received_now == 0 and not complete:
                raise InvalidInput('NOTHING_TO_RECEIVE', transfer=locked.transfer_number)

            target = TransferStatus.COMPLETED if complete else TransferStatus.PARTIALLY_RECEIVED
            _check(locked, target)
            locked.transfer_status = target
            if complete:
                locked.completed_at = timezone.now()
            locked.save()
            _log("stock.transfer.received", locked, received=str(received_now), txn_id=txn_id)
            return locked

    @classmethod
    def cancel_transfer(cls, transfer, user=None, reason='') -> StockTransfer:
        """
        Cancel a transfer from any non-terminal state.

        Releases the transfer's active reservations and returns whatever is
        shipped but not received to the source warehouse with compensating
        transfer_in entries.
        """
        from stockkeeper.services.movements import StockMovements
        from stockkeeper.services.reservations import StockReservations

        with transaction.atomic():
            locked = _lock(transfer)
            _check(locked, TransferStatus.CANCELLED)

            released = StockReservations.release_reservations_for(
                RESERVATION_REFERENCE,
                locked.transfer_number,
                reason=f"Transfer {locked.transfer_number} cancelled",
            )

            txn_id = new_txn_id()
            returned = Decimal('0')
            for line in locked.lines.select_for_update().order_by('product_id', 'variant_id', 'pk'):
                in_transit = line.in_transit_quantity
                if in_transit > 0:
                    StockMovements.receive(
                        in_transit,
                        line.product_id,
                        locked.from_warehouse,
                        variant_id=line.variant_id,
                        bin=line.from_bin_id,
                        movement_type=MovementType.TRANSFER_IN,
                        reference_type=RESERVATION_REFERENCE,
                        reference_id=locked.pk,
                        reference_number=locked.transfer_number,
                        txn_id=txn_id,
                        user=user,
                        reason=f"Transfer {locked.transfer_number} cancelled: returned to source",
                        allow_inactive=True,
                    )
                    returned += in_transit
                if line.line_status != TransferLineStatus.RECEIVED:
                    line.line_status = TransferLineStatus.CANCELLED
                    line.save(update_fields=['line_status'])

            locked.transfer_status = TransferStatus.CANCELLED
            locked.cancelled_at = timezone.now()
            locked.metadata['cancel_reason'] = reason
            if returned:
                locked.metadata['cancel_txn_id'] = txn_id
            locked.save()
            _log(
                "stock.transfer.cancelled",
                locked,
                released_reservations=released,
                returned=str(returned),
            )
            return locked
