"""
Stock Service — The single public interface for all stock operations.

Usage:
    from stockkeeper import stock, StockError

    stock.receive(100, product_id, warehouse, reason='PO-1001')
    reservation = stock.create_reservation(30, product_id, warehouse, 'sales_order', 'SO-7')
    stock.available(product_id, warehouse)  # 70
"""

from stockkeeper.services import (
    DamageAssessments,
    PickLists,
    QualityControl,
    SerialNumbers,
    StockMovements,
    StockQueries,
    StockReservations,
    StockTransfers,
    StockValidator,
)


class Stock(
    StockQueries,
    StockValidator,
    StockMovements,
    StockReservations,
    SerialNumbers,
    QualityControl,
    PickLists,
    StockTransfers,
    DamageAssessments,
):
    """
    Single interface for all stock operations.

    Parameter convention: (quantity, product_id, warehouse, ...)
    Stock is keyed by (product_id, variant_id, warehouse); bins are recorded
    on ledger entries only.

    IMPORTANT: All state-changing methods use atomic transactions and lock
    the StockLevel row of the key before checking availability. See each
    method's docstring.
    """
