"""
PickList / PickListDetail models — picking work orders.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockkeeper.models.enums import PickListStatus, PickStatus, PriorityLevel


class PickList(models.Model):
    """Picking work order for one warehouse."""

    number = models.CharField(max_length=50, unique=True, verbose_name=_('Number'))
    warehouse = models.ForeignKey(
        'stockkeeper.Warehouse',
        on_delete=models.PROTECT,
        related_name='pick_lists',
        verbose_name=_('Warehouse'),
    )
    pick_list_date = models.DateTimeField(default=timezone.now)
    picker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Picker'),
    )
    status = models.CharField(
        max_length=20,
        choices=PickListStatus.choices,
        default=PickListStatus.DRAFT,
        db_index=True,
    )
    priority_level = models.CharField(
        max_length=10,
        choices=PriorityLevel.choices,
        default=PriorityLevel.NORMAL,
    )
    special_instructions = models.TextField(blank=True, default='')
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Pick list')
        verbose_name_plural = _('Pick lists')
        ordering = ['-pick_list_date']

    def __str__(self) -> str:
        return self.number


class PickListDetail(models.Model):
    """One line to pick. 0 <= picked_quantity <= required_quantity."""

    pick_list = models.ForeignKey(
        PickList,
        on_delete=models.CASCADE,
        related_name='details',
    )
    product_id = models.PositiveIntegerField(verbose_name=_('Product'))
    variant_id = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('Variant'))
    warehouse = models.ForeignKey(
        'stockkeeper.Warehouse',
        on_delete=models.PROTECT,
        related_name='+',
    )
    bin = models.ForeignKey(
        'stockkeeper.StorageBin',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
    )
    required_quantity = models.DecimalField(max_digits=12, decimal_places=3)
    picked_quantity = models.DecimalField(max_digits=12, decimal_places=3, default=Decimal('0'))
    uom_id = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('Unit of measure'))
    pick_sequence = models.PositiveIntegerField(default=0)
    pick_instructions = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=PickStatus.choices,
        default=PickStatus.PENDING,
        db_index=True,
    )
    notes = models.TextField(blank=True, default='')

    class Meta:
        verbose_name = _('Pick list line')
        verbose_name_plural = _('Pick list lines')
        ordering = ['pick_list', 'pick_sequence']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(picked_quantity__gte=0)
                & models.Q(picked_quantity__lte=models.F('required_quantity')),
                name='pick_detail_picked_within_required',
            ),
        ]

    @property
    def remaining(self) -> Decimal:
        return self.required_quantity - self.picked_quantity

    def __str__(self) -> str:
        return f"{self.pick_sequence}. #{self.product_id} {self.picked_quantity}/{self.required_quantity}"
