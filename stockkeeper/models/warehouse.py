"""
Warehouse and StorageBin models — where stock exists.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Warehouse(models.Model):
    """
    A stock-holding location.

    Warehouses are stable entities, created during system setup by the
    master-data layer. The tenant is carried here as an explicit
    ``company_id``; every stock record hangs off a warehouse, so tenant
    scoping follows from it.

    Examples:
        Warehouse.objects.create(code='main', name='Main Warehouse', company_id=1)
        Warehouse.objects.create(code='north', name='North Branch', company_id=1)
    """

    code = models.SlugField(
        unique=True,
        max_length=50,
        verbose_name=_('Code'),
        help_text=_('Unique identifier (e.g. main, north-branch)'),
    )
    name = models.CharField(
        max_length=100,
        verbose_name=_('Name'),
    )
    company_id = models.PositiveIntegerField(
        db_index=True,
        verbose_name=_('Company'),
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name=_('Active'),
        help_text=_('Inactive warehouses reject every movement.'),
    )
    metadata = models.JSONField(
        default=dict,
        blank=True,
        verbose_name=_('Metadata'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Warehouse')
        verbose_name_plural = _('Warehouses')
        ordering = ['code']

    def __str__(self) -> str:
        return self.name


class StorageBin(models.Model):
    """Addressable slot inside a warehouse (rack/shelf/bin)."""

    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        related_name='bins',
        verbose_name=_('Warehouse'),
    )
    code = models.CharField(
        max_length=50,
        verbose_name=_('Code'),
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Storage bin')
        verbose_name_plural = _('Storage bins')
        ordering = ['warehouse', 'code']
        constraints = [
            models.UniqueConstraint(
                fields=['warehouse', 'code'],
                name='unique_bin_code_per_warehouse',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.warehouse.code}/{self.code}"
