"""
StockLevel model — on-hand quantity cache per (product, variant, warehouse).
"""

import logging
from decimal import Decimal

from django.db import models
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _


class StockLevelManager(models.Manager):
    """Manager with helper methods for StockLevel queries."""

    def for_key(self, product_id, warehouse, variant_id=None):
        """Filter to the single (product, variant, warehouse) key."""
        return self.filter(
            product_id=product_id,
            variant_id=variant_id,
            warehouse=warehouse,
        )

    def lock_key(self, product_id, warehouse, variant_id=None):
        """
        Get or create the row for a key and lock it.

        Must run inside transaction.atomic(). The locked row is the mutex
        for every mutation on that key: ledger writes, reservations and
        QC holds all take it before reading availability.
        """
        level, _ = self.get_or_create(
            product_id=product_id,
            variant_id=variant_id,
            warehouse=warehouse,
        )
        return self.select_for_update().get(pk=level.pk)


class StockLevel(models.Model):
    """
    On-hand quantity of a product (variant) in a warehouse.

    Performance:
    - _quantity is a cache updated atomically by StockLedgerEntry
    - Read is O(1), not O(N)
    - Use recalculate() for audit/correction

    The database refuses a negative _quantity; the ledger refuses to
    even try (conditional update).
    """

    product_id = models.PositiveIntegerField(
        verbose_name=_('Product'),
    )
    variant_id = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name=_('Variant'),
    )
    warehouse = models.ForeignKey(
        'stockkeeper.Warehouse',
        on_delete=models.PROTECT,
        related_name='stock_levels',
        verbose_name=_('Warehouse'),
    )

    # Quantity cache (updated atomically by StockLedgerEntry)
    _quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal('0'),
        verbose_name=_('On hand'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StockLevelManager()

    class Meta:
        verbose_name = _('Stock level')
        verbose_name_plural = _('Stock levels')
        constraints = [
            models.UniqueConstraint(
                fields=['product_id', 'variant_id', 'warehouse'],
                name='unique_stock_level_key',
            ),
            models.CheckConstraint(
                condition=models.Q(_quantity__gte=0),
                name='stock_level_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['product_id', 'warehouse'], name='stocklevel_product_wh_idx'),
        ]

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def quantity(self) -> Decimal:
        """On-hand quantity — O(1) cache read."""
        return self._quantity

    @property
    def reserved(self) -> Decimal:
        """Sum of active, non-expired reservations on this key."""
        from stockkeeper.models.reservation import Reservation
        return Reservation.objects.active().for_key(
            self.product_id, self.warehouse_id, self.variant_id
        ).total()

    @property
    def on_hold(self) -> Decimal:
        """Sum of QC holds still on hold on this key."""
        from stockkeeper.models.quality import QCHold
        return QCHold.objects.on_hold().for_key(
            self.product_id, self.warehouse_id, self.variant_id
        ).total()

    @property
    def available(self) -> Decimal:
        """Available for new outward commitments."""
        return self._quantity - self.reserved - self.on_hold

    # ══════════════════════════════════════════════════════════════
    # METHODS
    # ══════════════════════════════════════════════════════════════

    def recalculate(self) -> Decimal:
        """
        Recalculate on-hand quantity from the ledger.

        Use for:
        - Integrity audit
        - Correction after detected inconsistency

        Returns:
            New calculated quantity
        """
        total = self.entries.aggregate(
            t=Coalesce(Sum('quantity_delta'), Decimal('0'))
        )['t']

        if total != self._quantity:
            old = self._quantity
            self._quantity = total
            self.save(update_fields=['_quantity', 'updated_at'])

            logger = logging.getLogger('stockkeeper')
            logger.warning(
                "stock.level.recalculated",
                extra={
                    "stock_level_id": self.pk,
                    "old": str(old),
                    "new": str(total),
                },
            )

        return total

    def __str__(self) -> str:
        variant = f"/v{self.variant_id}" if self.variant_id else ""
        return f"#{self.product_id}{variant} [{self.warehouse.code}]: {self._quantity}"
