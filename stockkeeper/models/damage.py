"""
DamageAssessment model — a recorded loss event.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockkeeper.models.enums import DamageAction, DamageSeverity


class DamageAssessment(models.Model):
    """Damage found on stock. Recording it does not move stock."""

    warehouse = models.ForeignKey(
        'stockkeeper.Warehouse',
        on_delete=models.PROTECT,
        related_name='damage_assessments',
        verbose_name=_('Warehouse'),
    )
    product_id = models.PositiveIntegerField(verbose_name=_('Product'))
    variant_id = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('Variant'))
    serial_number = models.CharField(max_length=100, blank=True, default='')

    damaged_quantity = models.DecimalField(max_digits=12, decimal_places=3)
    damage_type = models.CharField(max_length=50, verbose_name=_('Damage type'))
    damage_severity = models.CharField(
        max_length=20,
        choices=DamageSeverity.choices,
        verbose_name=_('Severity'),
    )
    damage_description = models.TextField(blank=True, default='')
    estimated_loss_value = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    action_taken = models.CharField(
        max_length=20,
        choices=DamageAction.choices,
        blank=True,
        default='',
    )
    insurance_claim_number = models.CharField(max_length=100, blank=True, default='')
    related_txn_id = models.CharField(max_length=64, blank=True, default='')

    assessed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Assessed by'),
    )
    assessment_date = models.DateField(default=timezone.localdate, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Damage assessment')
        verbose_name_plural = _('Damage assessments')
        ordering = ['-assessment_date', '-pk']

    def __str__(self) -> str:
        return f"{self.damaged_quantity}x #{self.product_id} {self.damage_severity}"
