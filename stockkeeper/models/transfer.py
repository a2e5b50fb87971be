"""
StockTransfer / TransferDetail models — warehouse-to-warehouse movement.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import F, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockkeeper.models.enums import (
    TRANSFER_TRANSITIONS,
    ApprovalStatus,
    PriorityLevel,
    TransferLineStatus,
    TransferStatus,
)


class StockTransfer(models.Model):
    """
    Transfer header.

    LIFECYCLE (see TRANSFER_TRANSITIONS):

        draft ─► pending_approval ─► approved ─► in_transit ─► partially_received ─► completed
                        │                                                    
                        └─► rejected ─(reopen)─► draft

        any non-terminal state ─► cancelled

    transfer_status only changes through stockkeeper.services.transfers.
    """

    transfer_number = models.CharField(max_length=50, unique=True, verbose_name=_('Transfer number'))
    transfer_date = models.DateTimeField(default=timezone.now)

    from_warehouse = models.ForeignKey(
        'stockkeeper.Warehouse',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='outgoing_transfers',
        verbose_name=_('From warehouse'),
    )
    to_warehouse = models.ForeignKey(
        'stockkeeper.Warehouse',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='incoming_transfers',
        verbose_name=_('To warehouse'),
    )

    transfer_status = models.CharField(
        max_length=20,
        choices=TransferStatus.choices,
        default=TransferStatus.DRAFT,
        db_index=True,
        verbose_name=_('Status'),
    )
    approval_status = models.CharField(
        max_length=20,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
        verbose_name=_('Approval'),
    )
    requires_approval = models.BooleanField(default=False)
    estimated_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))

    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Approved by'),
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    approval_remarks = models.TextField(blank=True, default='')
    rejection_reason = models.TextField(blank=True, default='')

    priority_level = models.CharField(
        max_length=10,
        choices=PriorityLevel.choices,
        default=PriorityLevel.NORMAL,
    )
    transport_method = models.CharField(max_length=30, blank=True, default='')
    carrier_name = models.CharField(max_length=100, blank=True, default='')
    tracking_number = models.CharField(max_length=100, blank=True, default='')
    expected_delivery_date = models.DateField(null=True, blank=True)
    special_instructions = models.TextField(blank=True, default='')

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Created by'),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        verbose_name = _('Stock transfer')
        verbose_name_plural = _('Stock transfers')
        ordering = ['-transfer_date']

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def total_quantity(self) -> Decimal:
        return self.lines.aggregate(
            t=Coalesce(Sum('requested_quantity'), Decimal('0'))
        )['t']

    @property
    def total_value(self) -> Decimal:
        return self.lines.aggregate(
            t=Coalesce(Sum('total_cost'), Decimal('0'))
        )['t']

    def can_transition_to(self, status) -> bool:
        return status in TRANSFER_TRANSITIONS.get(self.transfer_status, frozenset())

    def __str__(self) -> str:
        return f"{self.transfer_number} [{self.transfer_status}]"


class TransferDetail(models.Model):
    """Transfer line. received <= shipped <= requested, always."""

    transfer = models.ForeignKey(
        StockTransfer,
        on_delete=models.CASCADE,
        related_name='lines',
    )
    product_id = models.PositiveIntegerField(verbose_name=_('Product'))
    variant_id = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('Variant'))
    uom_id = models.PositiveIntegerField(null=True, blank=True)

    requested_quantity = models.DecimalField(max_digits=12, decimal_places=3)
    shipped_quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0'))
    received_quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0'))

    unit_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))

    from_bin = models.ForeignKey(
        'stockkeeper.StorageBin',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
    )
    to_bin = models.ForeignKey(
        'stockkeeper.StorageBin',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
    )

    line_status = models.CharField(
        max_length=20,
        choices=TransferLineStatus.choices,
        default=TransferLineStatus.PENDING,
    )
    notes = models.TextField(blank=True, default='')

    class Meta:
        verbose_name = _('Transfer line')
        verbose_name_plural = _('Transfer lines')
        ordering = ['transfer', 'pk']
        constraints = [
            models.CheckConstraint(
                condition=Q(received_quantity__gte=0)
                & Q(received_quantity__lte=F('shipped_quantity'))
                & Q(shipped_quantity__lte=F('requested_quantity')),
                name='transfer_line_quantities_ordered',
            ),
        ]

    @property
    def in_transit_quantity(self) -> Decimal:
        """Shipped but not yet received."""
        return self.shipped_quantity - self.received_quantity

    @property
    def is_fully_received(self) -> bool:
        return self.received_quantity == self.shipped_quantity

    def __str__(self) -> str:
        return (
            f"#{self.product_id} req={self.requested_quantity} "
            f"ship={self.shipped_quantity} recv={self.received_quantity}"
        )
