"""
Stockkeeper configuration.

Usage in settings.py:
    STOCKKEEPER = {
        "TRANSFER_APPROVAL_THRESHOLD": Decimal("50000"),
        "RESERVATION_TTL_MINUTES": 30,
        "EXPIRED_BATCH_SIZE": 200,
        "MONEY_DECIMAL_PLACES": 2,
    }
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from django.conf import settings


@dataclass
class StockkeeperSettings:
    """Stockkeeper configuration settings."""

    # Transfers valued above this need a second person to approve
    TRANSFER_APPROVAL_THRESHOLD: Decimal = Decimal('0')

    # Default reservation TTL in minutes (0 = no expiration)
    RESERVATION_TTL_MINUTES: int = 0

    # Batch size for release_expired_reservations processing
    EXPIRED_BATCH_SIZE: int = 200

    # Rounding scale for line-item money figures
    MONEY_DECIMAL_PLACES: int = 2

    # Rounding scale for quantities (matches DecimalField decimal_places)
    QUANTITY_DECIMAL_PLACES: int = 3


def get_stockkeeper_settings() -> StockkeeperSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKKEEPER", {})
    return StockkeeperSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockkeeperSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stockkeeper_settings(), name)


stockkeeper_settings = _LazySettings()
