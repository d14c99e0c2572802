"""Money conversions between computed floats, stored Decimals and display strings"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_decimal(x: Any) -> Optional[Decimal]:
    """
    Convert a computed amount to Decimal for persistence.

    Args:
        x: None, str, int, float or Decimal

    Returns:
        Decimal value or None

    Examples:
        >>> to_decimal(7.5)
        Decimal("7.5")
        >>> to_decimal(0.1 + 0.2)
        Decimal("0.30000000000000004")
        >>> to_decimal(None)
        None
    """
    if x is None or x == "":
        return None

    if isinstance(x, Decimal):
        return x

    try:
        # Via str so floats keep their shortest repr instead of binary noise
        return Decimal(str(x))
    except (InvalidOperation, ValueError, TypeError) as e:
        logger.warning(f"Failed to convert amount to Decimal: {x!r}, error: {e}")
        return None


def amount_to_wire(d: Optional[Decimal]) -> Optional[str]:
    """
    Render a Decimal amount as a plain string without scientific notation.

    Examples:
        >>> amount_to_wire(Decimal("150.00"))
        "150"
        >>> amount_to_wire(Decimal("7.50"))
        "7.5"
    """
    if d is None:
        return None
    s = format(d, 'f')
    if '.' in s:
        s = s.rstrip('0').rstrip('.')
    return s if s not in ('', '-0') else '0'


def format_amount(amount: Any) -> str:
    """Two-decimal display string, half-up rounding (presentation only)."""
    value = to_decimal(amount)
    if value is None:
        value = Decimal("0")
    if not value.is_finite():
        return str(value)
    return str(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def format_currency(amount: Any, currency: str) -> str:
    """
    Examples:
        >>> format_currency(150, "RM")
        "RM 150.00"
    """
    return f"{currency} {format_amount(amount)}"


def format_quantity(quantity: float) -> str:
    """Quantities print without a trailing .0 (10.0 -> "10", 2.5 -> "2.5")."""
    if quantity != quantity:
        return "0"
    if float(quantity).is_integer():
        return str(int(quantity))
    return str(quantity)
