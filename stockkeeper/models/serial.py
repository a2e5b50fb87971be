"""
SerialUnit model — one row per serialized physical unit.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from stockkeeper.models.enums import SERIAL_TRANSITIONS, SerialStatus


class SerialUnitQuerySet(models.QuerySet):

    def available(self):
        return self.filter(status=SerialStatus.AVAILABLE)

    def for_key(self, product_id, warehouse, variant_id=None):
        qs = self.filter(product_id=product_id, warehouse=warehouse)
        if variant_id is not None:
            qs = qs.filter(variant_id=variant_id)
        return qs


class SerialUnit(models.Model):
    """
    A single serialized unit.

    Exactly one row per serial number. Status moves forward only, except
    RESERVED -> AVAILABLE (release); see SERIAL_TRANSITIONS.
    """

    serial_number = models.CharField(
        max_length=100,
        unique=True,
        verbose_name=_('Serial number'),
    )
    product_id = models.PositiveIntegerField(verbose_name=_('Product'))
    variant_id = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('Variant'))
    warehouse = models.ForeignKey(
        'stockkeeper.Warehouse',
        on_delete=models.PROTECT,
        related_name='serial_units',
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
    status = models.CharField(
        max_length=20,
        choices=SerialStatus.choices,
        default=SerialStatus.AVAILABLE,
        db_index=True,
        verbose_name=_('Status'),
    )
    last_txn_id = models.CharField(max_length=64, blank=True, default='')
    cost_price = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    expiry_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = SerialUnitQuerySet.as_manager()

    class Meta:
        verbose_name = _('Serial unit')
        verbose_name_plural = _('Serial units')
        ordering = ['serial_number']
        indexes = [
            models.Index(fields=['product_id', 'warehouse', 'status'], name='serial_key_status_idx'),
        ]

    def can_transition_to(self, status) -> bool:
        return status in SERIAL_TRANSITIONS.get(self.status, frozenset())

    def __str__(self) -> str:
        return f"{self.serial_number} [{self.status}]"
