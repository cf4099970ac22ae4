"""Money helpers for the costing services.

Prices and costs are carried as Decimal. Quantities stay float, so they are
converted through str() before they meet a price.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, float, int, str, None]


def to_decimal(value: Number) -> Decimal:
    """
    Convert a stored or user-supplied number to Decimal.

    None becomes 0. Floats go through str() so 0.1 stays 0.1.

    Examples:
        >>> to_decimal(2.5)
        Decimal('2.5')
        >>> to_decimal(None)
        Decimal('0')
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def cost_to_string(value: Number) -> str:
    """
    Format a cost with 2 decimals, rounding half up.

    Examples:
        >>> cost_to_string(Decimal("4.125"))
        '4.13'
        >>> cost_to_string(None)
        '0.00'
    """
    rounded = to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return str(rounded)
