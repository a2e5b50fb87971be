"""
Reservation model — soft, revocable claim on stock.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockkeeper.models.enums import ReservationStatus


class ReservationQuerySet(models.QuerySet):
    """
    Custom QuerySet for Reservation.

    active() is the single definition of "active" used both for listing
    reservations and for the availability formula; they cannot diverge.
    """

    def active(self):
        """
        Active and not expired.

        IMPORTANT: Ignores expired reservations even if status is still
        ACTIVE. Availability stays correct regardless of sweep timing.
        """
        return self.filter(status=ReservationStatus.ACTIVE).filter(
            Q(expires_at__isnull=True) | Q(expires_at__gte=timezone.now())
        )

    def expired(self):
        """Still ACTIVE but past their expiry."""
        return self.filter(
            status=ReservationStatus.ACTIVE,
            expires_at__lt=timezone.now(),
        )

    def for_key(self, product_id, warehouse, variant_id=None):
        return self.filter(
            product_id=product_id,
            variant_id=variant_id,
            warehouse=warehouse,
        )

    def for_reference(self, reference_type, reference_number):
        return self.filter(
            reference_type=reference_type,
            reference_number=reference_number,
        )

    def total(self) -> Decimal:
        return self.aggregate(
            t=Coalesce(Sum('reserved_quantity'), Decimal('0'))
        )['t']


class Reservation(models.Model):
    """
    Quantity reserved against an order, pick list or transfer.

    LIFECYCLE:

        ┌────────┐   consume()   ┌──────────┐
        │ ACTIVE │ ────────────► │ CONSUMED │
        └────────┘               └──────────┘
             │
             │ release() / expiry
             ▼
        ┌──────────┐
        │ RELEASED │
        └──────────┘

    Rows are never deleted; only status changes, for audit history.
    """

    product_id = models.PositiveIntegerField(verbose_name=_('Product'))
    variant_id = models.PositiveIntegerField(null=True, blank=True, verbose_name=_('Variant'))
    warehouse = models.ForeignKey(
        'stockkeeper.Warehouse',
        on_delete=models.PROTECT,
        related_name='reservations',
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

    reserved_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        verbose_name=_('Reserved quantity'),
    )

    # What the reservation is for (sales_order / pick_list / stock_transfer ...)
    reference_type = models.CharField(max_length=50, verbose_name=_('Reference type'))
    reference_id = models.PositiveIntegerField(null=True, blank=True)
    reference_number = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Reference number'))

    status = models.CharField(
        max_length=20,
        choices=ReservationStatus.choices,
        default=ReservationStatus.ACTIVE,
        db_index=True,
        verbose_name=_('Status'),
    )

    reserved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Reserved by'),
    )
    reservation_date = models.DateTimeField(default=timezone.now, verbose_name=_('Reserved at'))
    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_('Expires at'),
        help_text=_('If still active at this time it stops counting and is swept as released'),
    )
    resolved_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Resolved at'),
        help_text=_('When consumed or released'),
    )
    notes = models.TextField(blank=True, default='')
    metadata = models.JSONField(default=dict, blank=True)

    objects = ReservationQuerySet.as_manager()

    class Meta:
        verbose_name = _('Reservation')
        verbose_name_plural = _('Reservations')
        ordering = ['reservation_date', 'pk']
        indexes = [
            models.Index(fields=['status', 'expires_at'], name='reservation_status_exp_idx'),
            models.Index(fields=['product_id', 'warehouse', 'status'], name='reservation_key_status_idx'),
            models.Index(fields=['reference_type', 'reference_number'], name='reservation_reference_idx'),
        ]

    @property
    def is_active(self) -> bool:
        """Is ACTIVE and not expired?"""
        if self.status != ReservationStatus.ACTIVE:
            return False
        if self.expires_at is None:
            return True
        return timezone.now() <= self.expires_at

    def __str__(self) -> str:
        ref = f"{self.reference_type}:{self.reference_number or self.reference_id}"
        return f"{self.reserved_quantity}x #{self.product_id} ({ref}) [{self.status}]"
