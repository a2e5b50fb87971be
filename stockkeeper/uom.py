"""
Unit-of-measure conversion — document quantities to the base unit.

Documents may carry a line in a pack or purchase unit (uom_id); the ledger,
reservations and the validator count in the product's base unit. Convert
before calling them.

A conversion states how many to_uom units make one from_uom unit:

    converted = quantity * factor    when a from -> to conversion exists
    converted = quantity / factor    when only the to -> from one exists

The result is rounded half-up to QUANTITY_DECIMAL_PLACES.

Examples:
    conversions = get_uom_conversions(base_uom_id=1, factors={12: 24})
    convert_quantity(3, 12, 1, conversions)    -> 72    (3 boxes of 24)
    convert_quantity(48, 1, 12, conversions)   -> 2
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from stockkeeper.conf import stockkeeper_settings
from stockkeeper.exceptions import InvalidInput
from stockkeeper.pricing import to_decimal


@dataclass(frozen=True)
class UOMConversion:
    """One from_uom_id unit equals `factor` to_uom_id units."""

    from_uom_id: int
    to_uom_id: int
    factor: Decimal
    product_id: int | None = None


def _clean(conversion) -> UOMConversion:
    if isinstance(conversion, Mapping):
        conversion = UOMConversion(**conversion)
    factor = to_decimal(conversion.factor, 'factor')
    if not factor.is_finite() or factor <= 0:
        raise InvalidInput(
            'INVALID_CONVERSION_FACTOR',
            from_uom=conversion.from_uom_id,
            to_uom=conversion.to_uom_id,
            factor=conversion.factor,
        )
    return UOMConversion(
        from_uom_id=conversion.from_uom_id,
        to_uom_id=conversion.to_uom_id,
        factor=factor,
        product_id=conversion.product_id,
    )


def get_uom_conversions(base_uom_id, factors: Mapping, product_id=None) -> list[UOMConversion]:
    """
    Conversions of a product's alternate units into its base unit.

    Args:
        base_uom_id: The unit stock is counted in
        factors: {uom_id: base units in one uom_id}; the base unit itself
            is skipped
        product_id: Recorded on each conversion
    """
    return [
        _clean(UOMConversion(uom_id, base_uom_id, factor, product_id))
        for uom_id, factor in factors.items()
        if uom_id != base_uom_id
    ]


def convert_quantity(quantity, from_uom_id, to_uom_id,
                     conversions: Iterable) -> Decimal:
    """
    Convert quantity between two units.

    Args:
        conversions: UOMConversion instances or mappings with the same keys

    Raises:
        InvalidInput('UOM_CONVERSION_NOT_FOUND'): no direct or reverse
            conversion between the two units
        InvalidInput('INVALID_CONVERSION_FACTOR'): a factor is not positive
    """
    quantity = to_decimal(quantity, 'quantity')
    if from_uom_id == to_uom_id:
        return quantity

    conversions = [_clean(c) for c in conversions]
    places = Decimal(1).scaleb(-stockkeeper_settings.QUANTITY_DECIMAL_PLACES)

    for c in conversions:
        if c.from_uom_id == from_uom_id and c.to_uom_id == to_uom_id:
            return (quantity * c.factor).quantize(places, rounding=ROUND_HALF_UP)

    for c in conversions:
        if c.from_uom_id == to_uom_id and c.to_uom_id == from_uom_id:
            return (quantity / c.factor).quantize(places, rounding=ROUND_HALF_UP)

    raise InvalidInput('UOM_CONVERSION_NOT_FOUND', from_uom=from_uom_id, to_uom=to_uom_id)
