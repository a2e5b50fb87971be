"""
Stock queries — read-only operations.

All methods are classmethods on Stock and take no locks. The availability
formula lives here once:

    available = on_hand - active reservations - on-hold QC quantity

Mutating services call the same methods after locking the StockLevel row,
so the advisory answer and the authoritative one cannot disagree.
"""

from dataclasses import dataclass
from decimal import Decimal

from stockkeeper.exceptions import InvalidInput
from stockkeeper.models.ledger import StockLedgerEntry
from stockkeeper.models.quality import QCHold
from stockkeeper.models.reservation import Reservation
from stockkeeper.models.stock import StockLevel
from stockkeeper.models.warehouse import StorageBin, Warehouse
from stockkeeper.pricing import to_quantity


@dataclass(frozen=True)
class StockPosition:
    """Stock figures of one (product, variant, warehouse) key."""

    product_id: int
    variant_id: int | None
    warehouse_id: int
    on_hand: Decimal
    reserved: Decimal
    on_hold: Decimal

    @property
    def available(self) -> Decimal:
        return self.on_hand - self.reserved - self.on_hold


def get_warehouse(warehouse, active_only=True) -> Warehouse:
    """Resolve a Warehouse instance or pk to an active Warehouse."""
    if isinstance(warehouse, Warehouse):
        if warehouse.is_active or not active_only:
            return warehouse
        raise InvalidInput('WAREHOUSE_NOT_FOUND', warehouse=warehouse.pk)
    qs = Warehouse.objects.filter(pk=warehouse)
    if active_only:
        qs = qs.filter(is_active=True)
    found = qs.first()
    if found is None:
        raise InvalidInput('WAREHOUSE_NOT_FOUND', warehouse=warehouse)
    return found


def get_bin(bin, warehouse: Warehouse, active_only=True) -> StorageBin | None:
    """Resolve an optional bin and check it belongs to the warehouse."""
    if bin is None:
        return None
    pk = bin.pk if isinstance(bin, StorageBin) else bin
    qs = StorageBin.objects.filter(pk=pk, warehouse=warehouse)
    if active_only:
        qs = qs.filter(is_active=True)
    found = qs.first()
    if found is None:
        raise InvalidInput('BIN_NOT_FOUND', bin=pk, warehouse=warehouse.pk)
    return found


def clean_quantity(quantity) -> Decimal:
    """Quantities that move or reserve stock must be positive."""
    quantity = to_quantity(quantity, 'quantity')
    if quantity <= 0:
        raise InvalidInput('INVALID_QUANTITY', requested=quantity)
    return quantity


class StockQueries:
    """Read-only stock query methods."""

    @classmethod
    def on_hand(cls, product_id, warehouse, variant_id=None) -> Decimal:
        """Physical quantity on the ledger, ignoring reservations and holds."""
        quantity = StockLevel.objects.for_key(
            product_id, warehouse, variant_id
        ).values_list('_quantity', flat=True).first()
        return quantity if quantity is not None else Decimal('0')

    @classmethod
    def get_active_reservations(cls, product_id, warehouse, variant_id=None):
        """
        Active, non-expired reservations on a key.

        reserved() sums exactly this queryset.
        """
        return Reservation.objects.active().for_key(product_id, warehouse, variant_id)

    @classmethod
    def reserved(cls, product_id, warehouse, variant_id=None) -> Decimal:
        return cls.get_active_reservations(product_id, warehouse, variant_id).total()

    @classmethod
    def get_active_qc_holds(cls, product_id, warehouse, variant_id=None):
        """
        QC holds still withholding stock of a product in a warehouse.

        Without variant_id, holds on every variant are listed. on_hold()
        sums the exact key instead.
        """
        return QCHold.objects.on_hold().for_product(product_id, warehouse, variant_id)

    @classmethod
    def on_hold(cls, product_id, warehouse, variant_id=None) -> Decimal:
        return QCHold.objects.on_hold().for_key(product_id, warehouse, variant_id).total()

    @classmethod
    def stock_position(cls, product_id, warehouse, variant_id=None) -> StockPosition:
        """
        On-hand, reserved, held and available figures for a key.

        Args:
            product_id: Product id
            warehouse: Warehouse instance or pk
            variant_id: Variant id (None = the product without variant)
        """
        warehouse_id = warehouse.pk if isinstance(warehouse, Warehouse) else warehouse
        return StockPosition(
            product_id=product_id,
            variant_id=variant_id,
            warehouse_id=warehouse_id,
            on_hand=cls.on_hand(product_id, warehouse_id, variant_id),
            reserved=cls.reserved(product_id, warehouse_id, variant_id),
            on_hold=cls.on_hold(product_id, warehouse_id, variant_id),
        )

    @classmethod
    def available(cls, product_id, warehouse, variant_id=None) -> Decimal:
        """Quantity eligible for new outward commitments."""
        return cls.stock_position(product_id, warehouse, variant_id).available

    @classmethod
    def get_stock_level(cls, product_id, warehouse, variant_id=None) -> StockLevel | None:
        return StockLevel.objects.for_key(product_id, warehouse, variant_id).first()

    @classmethod
    def ledger(cls, product_id=None, warehouse=None, variant_id=None, txn_id=None):
        """Ledger entries with filters, oldest first."""
        qs = StockLedgerEntry.objects.all()

        if product_id is not None:
            qs = qs.filter(product_id=product_id, variant_id=variant_id)

        if warehouse is not None:
            qs = qs.filter(warehouse=warehouse)

        if txn_id is not None:
            qs = qs.filter(txn_id=txn_id)

        return qs
