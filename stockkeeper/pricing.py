"""
Line-item arithmetic — isolated, testable, reusable.

Every document type (purchase order, GRN, invoice, return, stock entry,
transfer) prices its lines through calculate_line(), so totals computed on
different documents for the same inputs are identical to the cent.

    subtotal = quantity * rate
    discount = subtotal * discount_percent / 100   if discount_percent > 0
             = discount_amount                     otherwise
    taxable  = subtotal - discount
    tax_i    = taxable * rate_i / 100              for each tax component
    total    = taxable + sum(tax_i)

Each money figure is rounded half-up to MONEY_DECIMAL_PLACES as it is
produced; later figures are computed from the rounded earlier ones.

Examples:
    calculate_line(10, 100, discount_percent=10, tax_rates=18)
        -> discount=100.00 taxable=900.00 tax=162.00 total=1062.00
    calculate_line(2, 500, tax_rates={'cgst': 9, 'sgst': 9})
        -> taxes={'cgst': 90.00, 'sgst': 90.00} total=1180.00
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from stockkeeper.conf import stockkeeper_settings
from stockkeeper.exceptions import InvalidInput

ZERO = Decimal('0')
HUNDRED = Decimal('100')


@dataclass(frozen=True)
class LineAmounts:
    """Money figures of one document line."""

    quantity: Decimal
    rate: Decimal
    subtotal: Decimal
    discount: Decimal
    taxable: Decimal
    taxes: dict[str, Decimal] = field(default_factory=dict)
    tax_total: Decimal = ZERO
    total: Decimal = ZERO


@dataclass(frozen=True)
class DocumentTotals:
    """Header totals of a document, summed from its lines."""

    subtotal: Decimal
    discount: Decimal
    taxable: Decimal
    taxes: dict[str, Decimal]
    tax_total: Decimal
    charges: Decimal
    grand_total: Decimal


def to_decimal(value, field_name: str = 'value') -> Decimal:
    """Coerce int/str/float/Decimal/None to Decimal, or raise InvalidInput."""
    if value is None or value == '':
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so 0.1 becomes Decimal('0.1'), not its binary expansion
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInput('INVALID_INPUT', field=field_name, value=value) from None


def to_quantity(value, field_name: str = 'quantity') -> Decimal:
    """
    Coerce to Decimal and check it fits the stored quantity scale.

    More decimals than QUANTITY_DECIMAL_PLACES are rejected rather than
    rounded, so the ledger keeps exactly what the caller asked for.
    """
    value = to_decimal(value, field_name)
    if not value.is_finite():
        raise InvalidInput('INVALID_INPUT', field=field_name, value=value)
    places = stockkeeper_settings.QUANTITY_DECIMAL_PLACES
    if value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP) != value:
        raise InvalidInput('INVALID_PRECISION', field=field_name, value=value, places=places)
    return value


def round_money(value: Decimal, places: int | None = None) -> Decimal:
    """Round half-up to the configured money scale."""
    if places is None:
        places = stockkeeper_settings.MONEY_DECIMAL_PLACES
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _normalize_tax_rates(tax_rates) -> dict[str, Decimal]:
    """
    Accept one rate, a list of rates, or named components.

    18                        -> {'tax': 18}
    [5, 1]                    -> {'tax_1': 5, 'tax_2': 1}
    {'cgst': 9, 'sgst': 9}    -> as given
    """
    if tax_rates is None:
        return {}
    if isinstance(tax_rates, Mapping):
        items = list(tax_rates.items())
    elif isinstance(tax_rates, (int, float, str, Decimal)):
        items = [('tax', tax_rates)]
    elif isinstance(tax_rates, Iterable):
        items = [(f'tax_{i}', r) for i, r in enumerate(tax_rates, start=1)]
    else:
        raise InvalidInput('INVALID_TAX_RATE', rate=tax_rates)

    rates = {}
    for name, rate in items:
        rate = to_decimal(rate, 'tax_rate')
        if rate < 0:
            raise InvalidInput('INVALID_TAX_RATE', component=name, rate=rate)
        rates[name] = rate
    return rates


def calculate_line(quantity, rate, discount_percent=0, discount_amount=0,
                   tax_rates=()) -> LineAmounts:
    """
    Compute discount, taxable amount, taxes and total of one line.

    Args:
        quantity: Line quantity (>= 0)
        rate: Unit price (>= 0)
        discount_percent: Percentage discount; wins when > 0
        discount_amount: Flat discount, used when discount_percent is 0
        tax_rates: One rate, a list of rates, or a mapping of named
            components (e.g. CGST/SGST or IGST)

    Returns:
        LineAmounts

    Raises:
        InvalidInput: negative quantity, rate, discount or tax rate;
            discount percent above 100; discount above subtotal
    """
    quantity = to_decimal(quantity, 'quantity')
    rate = to_decimal(rate, 'rate')
    discount_percent = to_decimal(discount_percent, 'discount_percent')
    discount_amount = to_decimal(discount_amount, 'discount_amount')

    if quantity < 0:
        raise InvalidInput('INVALID_QUANTITY', requested=quantity)
    if rate < 0:
        raise InvalidInput('INVALID_RATE', rate=rate)
    if discount_percent < 0 or discount_percent > HUNDRED or discount_amount < 0:
        raise InvalidInput(
            'INVALID_DISCOUNT',
            discount_percent=discount_percent,
            discount_amount=discount_amount,
        )

    rates = _normalize_tax_rates(tax_rates)

    subtotal = round_money(quantity * rate)
    if discount_percent > 0:
        discount = round_money(subtotal * discount_percent / HUNDRED)
    else:
        discount = round_money(discount_amount)

    if discount > subtotal:
        raise InvalidInput('INVALID_DISCOUNT', discount_amount=discount, subtotal=subtotal)

    taxable = subtotal - discount
    taxes = {
        name: round_money(taxable * pct / HUNDRED)
        for name, pct in rates.items()
    }
    tax_total = sum(taxes.values(), ZERO)

    return LineAmounts(
        quantity=quantity,
        rate=rate,
        subtotal=subtotal,
        discount=discount,
        taxable=taxable,
        taxes=taxes,
        tax_total=tax_total,
        total=taxable + tax_total,
    )


def summarize_lines(lines: Iterable[LineAmounts], freight=0,
                    other_charges=0) -> DocumentTotals:
    """
    Header totals: sum of line figures plus freight and other charges.

    grand_total = taxable + tax_total + freight + other_charges
    """
    freight = round_money(to_decimal(freight, 'freight'))
    other_charges = round_money(to_decimal(other_charges, 'other_charges'))
    if freight < 0 or other_charges < 0:
        raise InvalidInput('INVALID_INPUT', freight=freight, other_charges=other_charges)

    subtotal = discount = taxable = tax_total = ZERO
    taxes: dict[str, Decimal] = {}
    for line in lines:
        subtotal += line.subtotal
        discount += line.discount
        taxable += line.taxable
        tax_total += line.tax_total
        for name, amount in line.taxes.items():
            taxes[name] = taxes.get(name, ZERO) + amount

    charges = freight + other_charges
    return DocumentTotals(
        subtotal=subtotal,
        discount=discount,
        taxable=taxable,
        taxes=taxes,
        tax_total=tax_total,
        charges=charges,
        grand_total=taxable + tax_total + charges,
    )
