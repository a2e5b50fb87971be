"""
StockLedgerEntry model — immutable ledger of quantity changes.
"""

import uuid

from django.conf import settings
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockkeeper.exceptions import InsufficientStock
from stockkeeper.models.enums import MovementType


def new_txn_id() -> str:
    return uuid.uuid4().hex


class StockLedgerEntry(models.Model):
    """
    Immutable record of a quantity change.

    Rules:
    - NEVER update() or delete()
    - Corrections are new entries with inverse delta
    - Updates StockLevel._quantity atomically on save()
    - previous_stock / new_stock are filled in by save() from the row
      it just updated, so new_stock == previous_stock + quantity_delta

    This is the ONLY model that changes on-hand quantity.
    """

    stock_level = models.ForeignKey(
        'stockkeeper.StockLevel',
        on_delete=models.PROTECT,
        related_name='entries',
        verbose_name=_('Stock level'),
    )

    # Denormalized key, copied from stock_level on save
    product_id = models.PositiveIntegerField(verbose_name=_('Product'))
    variant_id = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('Variant'))
    warehouse = models.ForeignKey(
        'stockkeeper.Warehouse',
        on_delete=models.PROTECT,
        related_name='+',
        verbose_name=_('Warehouse'),
    )
    bin = models.ForeignKey(
        'stockkeeper.StorageBin',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Bin'),
    )

    movement_type = models.CharField(
        max_length=30,
        choices=MovementType.choices,
        verbose_name=_('Movement type'),
    )
    quantity_delta = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Delta'),
        help_text=_('Positive = inward, negative = outward'),
    )
    previous_stock = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Previous stock'),
    )
    new_stock = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('New stock'),
    )

    # Groups the entries of one document commit
    txn_id = models.CharField(
        max_length=64,
        default=new_txn_id,
        db_index=True,
        verbose_name=_('Transaction'),
    )

    # External reference (invoice, transfer, pick list, etc)
    reference_type = models.CharField(max_length=50, blank=True, default='')
    reference_id = models.PositiveIntegerField(null=True, blank=True)
    reference_number = models.CharField(max_length=100, blank=True, default='')

    reason = models.CharField(
        max_length=255,
        verbose_name=_('Reason'),
        help_text=_('Required. E.g. "Invoice INV-123", "Physical count"'),
    )
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))

    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Timestamp'))
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('User'),
    )

    class Meta:
        verbose_name = _('Ledger entry')
        verbose_name_plural = _('Ledger entries')
        ordering = ['timestamp', 'pk']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(new_stock__gte=0),
                name='ledger_new_stock_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['stock_level', 'timestamp'], name='ledger_level_ts_idx'),
            models.Index(fields=['reference_type', 'reference_number'], name='ledger_reference_idx'),
        ]

    def save(self, *args, **kwargs):
        """Save entry and update the stock level cache atomically."""
        # Immutability check
        if self.pk:
            raise ValueError(
                "Ledger entries are immutable. "
                "To correct, create a new entry with the inverse delta."
            )

        if not self.reason:
            raise ValueError("Reason is required")
        if not self.quantity_delta:
            raise ValueError("Ledger entries must carry a non-zero delta")

        from stockkeeper.models.stock import StockLevel

        with transaction.atomic():
            target = StockLevel.objects.filter(pk=self.stock_level_id)
            if self.quantity_delta < 0:
                # Conditional decrement: never read-then-write
                target = target.filter(_quantity__gte=-self.quantity_delta)

            updated = target.update(
                _quantity=F('_quantity') + self.quantity_delta,
                updated_at=timezone.now(),
            )

            level = StockLevel.objects.values(
                '_quantity', 'product_id', 'variant_id', 'warehouse_id'
            ).get(pk=self.stock_level_id)

            if not updated:
                raise InsufficientStock(
                    available=level['_quantity'],
                    requested=-self.quantity_delta,
                )

            self.product_id = level['product_id']
            self.variant_id = level['variant_id']
            self.warehouse_id = level['warehouse_id']
            self.new_stock = level['_quantity']
            self.previous_stock = self.new_stock - self.quantity_delta

            super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion — entries are immutable."""
        raise ValueError(
            "Ledger entries are immutable. "
            "To reverse, create a new entry with the inverse delta."
        )

    @property
    def is_inward(self) -> bool:
        return self.quantity_delta > 0

    def __str__(self) -> str:
        signal = '+' if self.quantity_delta > 0 else ''
        return f"{signal}{self.quantity_delta} | {self.movement_type} | {self.reason}"
