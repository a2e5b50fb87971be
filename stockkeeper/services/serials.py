"""
Serial numbers — per-unit status tracking.

Batch updates are all-or-nothing: if any serial in the batch cannot take
the requested status, no serial changes.
"""

import logging

from django.db import transaction
from django.utils import timezone

from stockkeeper.exceptions import InvalidInput, SerialNotAvailable
from stockkeeper.models.enums import SerialStatus
from stockkeeper.models.serial import SerialUnit
from stockkeeper.services.queries import get_bin, get_warehouse

logger = logging.getLogger('stockkeeper')


def _clean_serials(serials) -> list[str]:
    if isinstance(serials, str):
        serials = [serials]
    cleaned = []
    for serial in serials:
        serial = (serial or '').strip()
        if not serial:
            raise InvalidInput('INVALID_INPUT', field='serial_number')
        if serial not in cleaned:
            cleaned.append(serial)
    if not cleaned:
        raise InvalidInput('INVALID_INPUT', field='serials')
    return cleaned


class SerialNumbers:
    """Serialized unit methods."""

    @classmethod
    def get_available_serial_numbers(cls, product_id, warehouse, variant_id=None):
        """Units of a product in a warehouse with status AVAILABLE."""
        return SerialUnit.objects.available().for_key(product_id, warehouse, variant_id)

    @classmethod
    def register_serial_numbers(cls, product_id, warehouse, serials, variant_id=None,
                                bin=None, cost_price=None, expiry_date=None) -> list[SerialUnit]:
        """
        Register new units as AVAILABLE.

        Raises:
            InvalidInput('DUPLICATE_SERIAL'): a serial already exists
        """
        serials = _clean_serials(serials)
        wh = get_warehouse(warehouse)
        storage_bin = get_bin(bin, wh)

        with transaction.atomic():
            existing = sorted(
                SerialUnit.objects.filter(serial_number__in=serials)
                .values_list('serial_number', flat=True)
            )
            if existing:
                raise InvalidInput('DUPLICATE_SERIAL', serials=existing)

            units = SerialUnit.objects.bulk_create([
                SerialUnit(
                    serial_number=serial,
                    product_id=product_id,
                    variant_id=variant_id,
                    warehouse=wh,
                    bin=storage_bin,
                    cost_price=cost_price,
                    expiry_date=expiry_date,
                )
                for serial in serials
            ])
            logger.info(
                "stock.serials.registered",
                extra={
                    "product_id": product_id,
                    "warehouse": wh.code,
                    "count": len(units),
                },
            )
            return units

    @classmethod
    def update_serial_number_status(cls, serials, status, txn_id='') -> list[SerialUnit]:
        """
        Move a batch of serials to a new status.

        Raises:
            SerialNotAvailable: some serial is unknown or cannot legally
                move to status; e.data['serials'] lists them and nothing
                is changed
            InvalidInput: unknown status or empty batch

        Concurrency:
            - Runs under transaction.atomic()
            - Locks every unit of the batch (ordered by serial) before checking
        """
        if status not in SerialStatus.values:
            raise InvalidInput('INVALID_STATUS', status=status)
        serials = _clean_serials(serials)

        with transaction.atomic():
            units = list(
                SerialUnit.objects.select_for_update()
                .filter(serial_number__in=serials)
                .order_by('serial_number')
            )
            found = {unit.serial_number: unit for unit in units}

            missing = [s for s in serials if s not in found]
            blocked = {
                unit.serial_number: unit.status
                for unit in units
                if not unit.can_transition_to(status)
            }
            if missing or blocked:
                raise SerialNotAvailable(
                    serials=sorted(missing + list(blocked)),
                    missing=missing,
                    current=blocked,
                    target=status,
                )

            SerialUnit.objects.filter(pk__in=[u.pk for u in units]).update(
                status=status,
                last_txn_id=txn_id or '',
                updated_at=timezone.now(),
            )
            logger.info(
                "stock.serials.status_updated",
                extra={
                    "count": len(units),
                    "status": status,
                    "txn_id": txn_id,
                },
            )
            return list(
                SerialUnit.objects.filter(serial_number__in=serials).order_by('serial_number')
            )
