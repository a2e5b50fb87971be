"""
Django Stockkeeper — inventory movement consistency engine.

Ledger-backed stock levels per (product, variant, warehouse), reservations,
serial units, quality holds, pick lists and inter-warehouse transfers.

Usage:
    from stockkeeper import stock, StockError

    stock.receive(100, product_id, warehouse, reason='PO-1001')
    stock.create_reservation(30, product_id, warehouse, 'sales_order', 'SO-7')
    stock.available(product_id, warehouse)  # 70
"""

_MODELS = {
    'Warehouse': 'stockkeeper.models.warehouse',
    'StorageBin': 'stockkeeper.models.warehouse',
    'StockLevel': 'stockkeeper.models.stock',
    'StockLedgerEntry': 'stockkeeper.models.ledger',
    'Reservation': 'stockkeeper.models.reservation',
    'SerialUnit': 'stockkeeper.models.serial',
    'QCHold': 'stockkeeper.models.quality',
    'PickList': 'stockkeeper.models.picking',
    'PickListDetail': 'stockkeeper.models.picking',
    'StockTransfer': 'stockkeeper.models.transfer',
    'TransferDetail': 'stockkeeper.models.transfer',
    'DamageAssessment': 'stockkeeper.models.damage',
    'MovementType': 'stockkeeper.models.enums',
    'ReservationStatus': 'stockkeeper.models.enums',
    'SerialStatus': 'stockkeeper.models.enums',
    'TransferStatus': 'stockkeeper.models.enums',
}

_ERRORS = (
    'StockError',
    'InvalidInput',
    'InsufficientStock',
    'OverAllocation',
    'SerialNotAvailable',
    'InvalidStateTransition',
    'ApprovalRequired',
)


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'stock':
        from stockkeeper.service import Stock
        return Stock
    elif name in _ERRORS:
        from stockkeeper import exceptions
        return getattr(exceptions, name)
    elif name in _MODELS:
        from importlib import import_module
        return getattr(import_module(_MODELS[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ['stock', *_ERRORS, *_MODELS]

__version__ = '0.1.0'
