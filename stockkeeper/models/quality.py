"""
QCHold model — quantity withheld from availability pending inspection.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockkeeper.models.enums import QCHoldStatus


class QCHoldQuerySet(models.QuerySet):

    def on_hold(self):
        return self.filter(status=QCHoldStatus.ON_HOLD)

    def for_key(self, product_id, warehouse, variant_id=None):
        return self.filter(
            product_id=product_id,
            variant_id=variant_id,
            warehouse=warehouse,
        )

    def for_product(self, product_id, warehouse, variant_id=None):
        """Like for_key, but None matches every variant."""
        qs = self.filter(product_id=product_id, warehouse=warehouse)
        if variant_id is not None:
            qs = qs.filter(variant_id=variant_id)
        return qs

    def total(self) -> Decimal:
        return self.aggregate(
            t=Coalesce(Sum('hold_quantity'), Decimal('0'))
        )['t']


class QCHold(models.Model):
    """
    Quality control hold.

    While ON_HOLD, hold_quantity is excluded from available stock.
    RELEASED puts it back; REJECTED disposes of it (the rejecting call
    writes the matching adjustment_out ledger entry).
    """

    product_id = models.PositiveIntegerField(verbose_name=_('Product'))
    variant_id = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('Variant'))
    warehouse = models.ForeignKey(
        'stockkeeper.Warehouse',
        on_delete=models.PROTECT,
        related_name='qc_holds',
        verbose_name=_('Warehouse'),
    )
    bin = models.ForeignKey(
        'stockkeeper.StorageBin',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
    )
    serial_number = models.CharField(max_length=100, blank=True, default='')

    hold_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Held quantity'),
    )
    hold_reason = models.CharField(max_length=255, verbose_name=_('Reason'))
    hold_date = models.DateTimeField(default=timezone.now)

    status = models.CharField(
        max_length=20,
        choices=QCHoldStatus.choices,
        default=QCHoldStatus.ON_HOLD,
        db_index=True,
        verbose_name=_('Status'),
    )
    inspector = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Inspector'),
    )
    inspection_notes = models.TextField(blank=True, default='')

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    released_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    resolved_at = models.DateTimeField(null=True, blank=True)
    release_notes = models.TextField(blank=True, default='')
    related_txn_id = models.CharField(max_length=64, blank=True, default='')

    objects = QCHoldQuerySet.as_manager()

    class Meta:
        verbose_name = _('QC hold')
        verbose_name_plural = _('QC holds')
        ordering = ['hold_date', 'pk']
        indexes = [
            models.Index(fields=['product_id', 'warehouse', 'status'], name='qchold_key_status_idx'),
        ]

    def __str__(self) -> str:
        return f"QC {self.hold_quantity}x #{self.product_id} [{self.status}]"
