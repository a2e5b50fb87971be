"""
Exceptions for Stockkeeper.

All errors are StockError with a structured code for programmatic handling.
Each business-rule category has its own subclass so callers can catch
precisely what they can react to:

    InvalidInput            malformed quantity, rate or reference
    InsufficientStock       the movement would drive stock negative
    OverAllocation          reservation exceeds on-hand stock
    SerialNotAvailable      serial unit cannot take the requested status
    InvalidStateTransition  transfer transition not in the transition table
    ApprovalRequired        value above threshold without a valid sign-off

None of these are retryable: the same call gives the same answer. Database
errors (lock timeouts, serialization failures) are not wrapped; they reach
the caller as ``django.db.DatabaseError`` and are the only ones worth retrying.
"""

from decimal import Decimal
from typing import Any


class StockError(Exception):
    """
    Structured exception for stock operations.

    Usage:
        try:
            stock.issue(10, product_id, warehouse)
        except StockError as e:
            if e.code == 'INSUFFICIENT_STOCK':
                print(f"Only {e.available} available")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    default_code = 'STOCK_ERROR'
    retryable = False

    _default_messages = {
        'STOCK_ERROR': 'Stock operation failed',
        'INVALID_INPUT': 'Invalid input',
        'INVALID_QUANTITY': 'Invalid quantity (must be positive)',
        'INVALID_PRECISION': 'Quantity has more decimal places than stored',
        'INVALID_RATE': 'Invalid rate (must not be negative)',
        'INVALID_DISCOUNT': 'Invalid discount',
        'INVALID_TAX_RATE': 'Invalid tax rate (must not be negative)',
        'INVALID_MOVEMENT_TYPE': 'Unknown movement type',
        'INVALID_STATUS': 'Invalid status for this operation',
        'REASON_REQUIRED': 'Reason is required',
        'WAREHOUSE_NOT_FOUND': 'Warehouse not found or inactive',
        'BIN_NOT_FOUND': 'Storage bin not found in this warehouse',
        'RESERVATION_NOT_FOUND': 'Reservation not found',
        'QC_HOLD_NOT_FOUND': 'Quality control hold not found',
        'PICK_DETAIL_NOT_FOUND': 'Pick list line not found',
        'DUPLICATE_SERIAL': 'Serial number already registered',
        'INSUFFICIENT_STOCK': 'Insufficient stock for this movement',
        'OVER_ALLOCATION': 'Reservation exceeds on-hand stock',
        'SERIAL_NOT_AVAILABLE': 'Serial number cannot take the requested status',
        'INVALID_STATE_TRANSITION': 'Transition not allowed from the current state',
        'APPROVAL_REQUIRED': 'Approval by a second person is required',
        'SELF_APPROVAL': 'Approver must differ from the transfer creator',
        'TRANSFER_NOT_FOUND': 'Stock transfer not found',
        'WAREHOUSES_REQUIRED': 'Source and destination warehouses are required',
        'SAME_WAREHOUSE': 'Source and destination warehouses must differ',
        'CROSS_COMPANY': 'Warehouses belong to different companies',
        'EMPTY_TRANSFER': 'Transfer has no line with a positive quantity',
        'NOTHING_TO_RECEIVE': 'Nothing left in transit to receive',
        'UNKNOWN_LINE': 'Line does not belong to this transfer',
        'INVALID_SEVERITY': 'Unknown damage severity',
        'INVALID_ACTION': 'Unknown damage action',
        'RESERVATION_MISMATCH': 'Reservation is for a different product, variant or warehouse',
        'UOM_CONVERSION_NOT_FOUND': 'No conversion between these units of measure',
        'INVALID_CONVERSION_FACTOR': 'Conversion factor must be positive',
    }

    def __init__(self, code: str | None = None, message: str | None = None, **data):
        self.code = code or self.default_code
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    @property
    def available(self) -> Decimal:
        """Shortcut for data['available']."""
        return self.data.get('available', Decimal('0'))

    @property
    def requested(self) -> Decimal:
        """Shortcut for data['requested']."""
        return self.data.get('requested', Decimal('0'))

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }


class InvalidInput(StockError):
    default_code = 'INVALID_INPUT'


class InsufficientStock(StockError):
    """Outward movement larger than available stock."""

    default_code = 'INSUFFICIENT_STOCK'

    @property
    def shortfall(self) -> Decimal:
        return self.requested - self.available


class OverAllocation(StockError):
    default_code = 'OVER_ALLOCATION'


class SerialNotAvailable(StockError):
    default_code = 'SERIAL_NOT_AVAILABLE'

    @property
    def serials(self) -> list[str]:
        """Serial numbers that blocked the batch."""
        return self.data.get('serials', [])


class InvalidStateTransition(StockError):
    default_code = 'INVALID_STATE_TRANSITION'


class ApprovalRequired(StockError):
    default_code = 'APPROVAL_REQUIRED'
