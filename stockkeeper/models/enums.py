"""
Enums for Stockkeeper models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class MovementType(models.TextChoices):
    """
    Kind of ledger movement.

    Direction is fixed per type (see INWARD / OUTWARD below).
    SALE_RETURN_OUT is the customer-return document posting goods back
    into the warehouse, so it counts as inward despite its name.
    """
    PURCHASE_IN = 'purchase_in', _('Purchase receipt')
    PURCHASE_RETURN_IN = 'purchase_return_in', _('Purchase return (in)')
    PURCHASE_RETURN_OUT = 'purchase_return_out', _('Return to vendor')
    SALE_OUT = 'sale_out', _('Sale')
    SALE_RETURN_IN = 'sale_return_in', _('Sales return')
    SALE_RETURN_OUT = 'sale_return_out', _('Sales return (legacy)')
    TRANSFER_IN = 'transfer_in', _('Transfer in')
    TRANSFER_OUT = 'transfer_out', _('Transfer out')
    ADJUSTMENT_IN = 'adjustment_in', _('Adjustment in')
    ADJUSTMENT_OUT = 'adjustment_out', _('Adjustment out')

    @classmethod
    def is_inward(cls, value) -> bool:
        return value in INWARD_MOVEMENTS

    @classmethod
    def is_outward(cls, value) -> bool:
        return value in OUTWARD_MOVEMENTS


INWARD_MOVEMENTS = frozenset({
    MovementType.PURCHASE_IN,
    MovementType.PURCHASE_RETURN_IN,
    MovementType.SALE_RETURN_IN,
    MovementType.SALE_RETURN_OUT,
    MovementType.TRANSFER_IN,
    MovementType.ADJUSTMENT_IN,
})

OUTWARD_MOVEMENTS = frozenset({
    MovementType.PURCHASE_RETURN_OUT,
    MovementType.SALE_OUT,
    MovementType.TRANSFER_OUT,
    MovementType.ADJUSTMENT_OUT,
})


class ReservationStatus(models.TextChoices):
    """Reservation lifecycle status."""
    ACTIVE = 'active', _('Active')         # Holding stock
    RELEASED = 'released', _('Released')   # Cancelled or expired
    CONSUMED = 'consumed', _('Consumed')   # Stock issued against it


class SerialStatus(models.TextChoices):
    """Per-unit status of a serialized item."""
    AVAILABLE = 'available', _('Available')
    RESERVED = 'reserved', _('Reserved')
    SOLD = 'sold', _('Sold')
    TRANSFERRED = 'transferred', _('Transferred')
    SCRAPPED = 'scrapped', _('Scrapped')


# Allowed serial transitions. Only reserved -> available goes backwards.
SERIAL_TRANSITIONS = {
    SerialStatus.AVAILABLE: frozenset({
        SerialStatus.RESERVED,
        SerialStatus.SOLD,
        SerialStatus.TRANSFERRED,
        SerialStatus.SCRAPPED,
    }),
    SerialStatus.RESERVED: frozenset({
        SerialStatus.AVAILABLE,
        SerialStatus.SOLD,
        SerialStatus.TRANSFERRED,
        SerialStatus.SCRAPPED,
    }),
    SerialStatus.SOLD: frozenset(),
    SerialStatus.TRANSFERRED: frozenset(),
    SerialStatus.SCRAPPED: frozenset(),
}


class QCHoldStatus(models.TextChoices):
    """Quality control hold status."""
    ON_HOLD = 'on_hold', _('On hold')
    RELEASED = 'released', _('Released')
    REJECTED = 'rejected', _('Rejected')


class PickStatus(models.TextChoices):
    """Pick list line status."""
    PENDING = 'pending', _('Pending')
    PICKING = 'picking', _('Picking')
    COMPLETED = 'completed', _('Completed')
    SHORT = 'short', _('Short')


class PickListStatus(models.TextChoices):
    """Pick list header status."""
    DRAFT = 'draft', _('Draft')
    IN_PROGRESS = 'in_progress', _('In progress')
    COMPLETED = 'completed', _('Completed')
    CANCELLED = 'cancelled', _('Cancelled')


class PriorityLevel(models.TextChoices):
    LOW = 'low', _('Low')
    NORMAL = 'normal', _('Normal')
    HIGH = 'high', _('High')
    URGENT = 'urgent', _('Urgent')


class TransferStatus(models.TextChoices):
    """
    Warehouse transfer lifecycle.

    draft → pending_approval → approved → in_transit → partially_received → completed

    CANCELLED is reachable from every non-terminal state.
    REJECTED is reachable only from PENDING_APPROVAL and goes back to
    DRAFT only through an explicit reopen.
    """
    DRAFT = 'draft', _('Draft')
    PENDING_APPROVAL = 'pending_approval', _('Pending approval')
    APPROVED = 'approved', _('Approved')
    REJECTED = 'rejected', _('Rejected')
    IN_TRANSIT = 'in_transit', _('In transit')
    PARTIALLY_RECEIVED = 'partially_received', _('Partially received')
    COMPLETED = 'completed', _('Completed')
    CANCELLED = 'cancelled', _('Cancelled')


TRANSFER_TRANSITIONS = {
    TransferStatus.DRAFT: frozenset({
        TransferStatus.PENDING_APPROVAL,
        TransferStatus.CANCELLED,
    }),
    TransferStatus.PENDING_APPROVAL: frozenset({
        TransferStatus.APPROVED,
        TransferStatus.REJECTED,
        TransferStatus.CANCELLED,
    }),
    TransferStatus.APPROVED: frozenset({
        TransferStatus.IN_TRANSIT,
        TransferStatus.CANCELLED,
    }),
    TransferStatus.REJECTED: frozenset({
        TransferStatus.DRAFT,
        TransferStatus.CANCELLED,
    }),
    TransferStatus.IN_TRANSIT: frozenset({
        TransferStatus.PARTIALLY_RECEIVED,
        TransferStatus.COMPLETED,
        TransferStatus.CANCELLED,
    }),
    TransferStatus.PARTIALLY_RECEIVED: frozenset({
        TransferStatus.PARTIALLY_RECEIVED,
        TransferStatus.COMPLETED,
        TransferStatus.CANCELLED,
    }),
    TransferStatus.COMPLETED: frozenset(),
    TransferStatus.CANCELLED: frozenset(),
}


class ApprovalStatus(models.TextChoices):
    PENDING = 'pending', _('Pending')
    APPROVED = 'approved', _('Approved')
    REJECTED = 'rejected', _('Rejected')


class TransferLineStatus(models.TextChoices):
    """Per-line status of a transfer."""
    PENDING = 'pending', _('Pending')
    SHIPPED = 'shipped', _('Shipped')
    SHORT = 'short', _('Short shipped')
    PARTIALLY_RECEIVED = 'partially_received', _('Partially received')
    RECEIVED = 'received', _('Received')
    CANCELLED = 'cancelled', _('Cancelled')


class DamageSeverity(models.TextChoices):
    MINOR = 'minor', _('Minor')
    MAJOR = 'major', _('Major')
    TOTAL_LOSS = 'total_loss', _('Total loss')


class DamageAction(models.TextChoices):
    WRITE_OFF = 'write_off', _('Write off')
    REPAIR = 'repair', _('Repair')
    RETURN_TO_VENDOR = 'return_to_vendor', _('Return to vendor')
    DISPOSE = 'dispose', _('Dispose')
