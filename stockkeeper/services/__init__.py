"""
Stock services — modular organization of stock operations.

Each class groups one concern; stockkeeper.service.Stock combines them:
    from stockkeeper.services import StockQueries, StockMovements, StockReservations
"""

from stockkeeper.services.damage import DamageAssessments
from stockkeeper.services.movements import LinePreview, MovementLine, StockMovements
from stockkeeper.services.picking import PickLine, PickLists
from stockkeeper.services.quality import QualityControl
from stockkeeper.services.queries import StockPosition, StockQueries
from stockkeeper.services.reservations import StockReservations
from stockkeeper.services.serials import SerialNumbers
from stockkeeper.services.transfers import StockTransfers, TransferLine
from stockkeeper.services.validation import StockValidationResult, StockValidator

__all__ = [
    'StockQueries',
    'StockPosition',
    'StockValidator',
    'StockValidationResult',
    'StockMovements',
    'MovementLine',
    'LinePreview',
    'StockReservations',
    'SerialNumbers',
    'QualityControl',
    'PickLists',
    'PickLine',
    'StockTransfers',
    'TransferLine',
    'DamageAssessments',
]
