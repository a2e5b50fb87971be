"""
Stockkeeper Models.

Core models for inventory movements:
- Warehouse / StorageBin: Where stock exists
- StockLevel: On-hand cache per (product, variant, warehouse)
- StockLedgerEntry: Immutable ledger of changes
- Reservation: Soft holds against orders, pick lists, transfers
- QCHold: Quantity withheld pending inspection
- SerialUnit: Per-unit status of serialized stock
- PickList / PickListDetail: Picking work orders
- StockTransfer / TransferDetail: Warehouse-to-warehouse movements
- DamageAssessment: Recorded loss events
"""

from stockkeeper.models.damage import DamageAssessment
from stockkeeper.models.enums import (
    ApprovalStatus,
    DamageAction,
    DamageSeverity,
    MovementType,
    PickListStatus,
    PickStatus,
    PriorityLevel,
    QCHoldStatus,
    ReservationStatus,
    SerialStatus,
    TransferLineStatus,
    TransferStatus,
)
from stockkeeper.models.ledger import StockLedgerEntry
from stockkeeper.models.picking import PickList, PickListDetail
from stockkeeper.models.quality import QCHold
from stockkeeper.models.reservation import Reservation
from stockkeeper.models.serial import SerialUnit
from stockkeeper.models.stock import StockLevel
from stockkeeper.models.transfer import StockTransfer, TransferDetail
from stockkeeper.models.warehouse import StorageBin, Warehouse

__all__ = [
    'ApprovalStatus',
    'DamageAction',
    'DamageSeverity',
    'MovementType',
    'PickListStatus',
    'PickStatus',
    'PriorityLevel',
    'QCHoldStatus',
    'ReservationStatus',
    'SerialStatus',
    'TransferLineStatus',
    'TransferStatus',
    'Warehouse',
    'StorageBin',
    'StockLevel',
    'StockLedgerEntry',
    'Reservation',
    'QCHold',
    'SerialUnit',
    'PickList',
    'PickListDetail',
    'StockTransfer',
    'TransferDetail',
    'DamageAssessment',
]
