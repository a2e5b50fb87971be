"""
Stock validation — advisory check of a proposed movement.

validate_stock_transaction() is what document editors call while a line is
being edited. It never locks and never raises for business outcomes; it
answers with a StockValidationResult. The authoritative check is repeated
by the movement services under the key lock at commit time.
"""

from dataclasses import dataclass
from decimal import Decimal

from stockkeeper.exceptions import InsufficientStock, InvalidInput, StockError
from stockkeeper.models.enums import MovementType
from stockkeeper.services.queries import (
    StockQueries,
    clean_quantity,
    get_bin,
    get_warehouse,
)


@dataclass(frozen=True)
class StockValidationResult:
    """Outcome of validate_stock_transaction()."""

    is_valid: bool
    current_stock: Decimal
    available_stock: Decimal
    message: str | None = None
    code: str | None = None
    requested: Decimal | None = None

    @property
    def shortfall(self) -> Decimal:
        if self.requested is None or self.is_valid:
            return Decimal('0')
        return max(self.requested - self.available_stock, Decimal('0'))

    def raise_for_error(self) -> None:
        """Raise the typed error this result stands for (no-op when valid)."""
        if self.is_valid:
            return
        if self.code == InsufficientStock.default_code:
            raise InsufficientStock(
                message=self.message,
                available=self.available_stock,
                requested=self.requested,
            )
        raise InvalidInput(self.code, message=self.message)


class StockValidator:
    """Advisory validation of proposed stock movements."""

    @classmethod
    def validate_stock_transaction(cls, product_id, warehouse, quantity, movement_type,
                                   variant_id=None, bin=None) -> StockValidationResult:
        """
        Check whether a movement may go ahead.

        Outward movements are valid when quantity <= available stock.
        Inward movements are always valid on quantity. Both check that the
        warehouse exists and is active and that the bin, if given, belongs
        to it.

        Args:
            product_id: Product id
            warehouse: Warehouse instance or pk
            quantity: Proposed quantity (positive)
            movement_type: A MovementType value
            variant_id: Variant id (None = the product without variant)
            bin: Optional StorageBin instance or pk

        Returns:
            StockValidationResult
        """
        zero = Decimal('0')

        if movement_type not in MovementType.values:
            return StockValidationResult(
                is_valid=False,
                current_stock=zero,
                available_stock=zero,
                message=f'Unknown movement type: {movement_type}',
                code='INVALID_MOVEMENT_TYPE',
            )

        try:
            wh = get_warehouse(warehouse)
            get_bin(bin, wh)
            quantity = clean_quantity(quantity)
        except StockError as e:
            return StockValidationResult(
                is_valid=False,
                current_stock=zero,
                available_stock=zero,
                message=e.message,
                code=e.code,
            )

        position = StockQueries.stock_position(product_id, wh, variant_id)

        if MovementType.is_inward(movement_type):
            return StockValidationResult(
                is_valid=True,
                current_stock=position.on_hand,
                available_stock=position.available,
                message='Inward movement - stock will increase',
                requested=quantity,
            )

        if quantity > position.available:
            shortfall = quantity - position.available
            return StockValidationResult(
                is_valid=False,
                current_stock=position.on_hand,
                available_stock=position.available,
                message=(
                    f'Insufficient stock. Available: {position.available}, '
                    f'Required: {quantity}, Short by: {shortfall}'
                ),
                code=InsufficientStock.default_code,
                requested=quantity,
            )

        return StockValidationResult(
            is_valid=True,
            current_stock=position.on_hand,
            available_stock=position.available,
            message='Movement valid',
            requested=quantity,
        )
