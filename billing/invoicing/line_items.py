"""
Line item normalization and invoice totals.

Jobs store their line items as a loosely typed JSON payload. Over time the
payload has been written as a list of objects, as a single object, or left
empty, and two field naming conventions are in circulation:

    {"description": ..., "quantity": ..., "unit_price": ...}
    {"item_name": ...,   "unit_quantity": ..., "unit_price": ...}

normalize_line_items() turns any of these into a list of NormalizedLineItem.
It never raises: unusable values become 0 and non-object entries become
zero-priced placeholders. Every such substitution is logged as a warning
so upstream data corruption is visible to operators. Non-finite values
(NaN, "Infinity", "1e400") count as unusable.

calculate_total() refuses a sum that overflows the float range.
"""

import logging
import math
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional

from billing.exceptions import AmountOutOfRangeError
from billing.models.invoice import NormalizedLineItem

logger = logging.getLogger(__name__)

DESCRIPTION_KEYS = ("description", "item_name")
QUANTITY_KEYS = ("quantity", "unit_quantity")
UNIT_PRICE_KEY = "unit_price"

# Quantity used for non-object entries in a line item list
PLACEHOLDER_QUANTITY = 0.0


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_number(value: Any) -> Optional[float]:
    """Finite float value of a number-like input, or None when it is unusable."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    try:
        if isinstance(value, (int, float, Decimal)):
            number = float(value)
        elif isinstance(value, str):
            # float() accepts "1_000"; stored payloads never mean that
            if "_" in value:
                return None
            number = float(value.strip())
        else:
            return None
    except (ValueError, OverflowError):
        # non-numeric text, signalling NaN, ints beyond float range
        return None
    # NaN, "Infinity" and "1e400" cannot be billed
    return number if math.isfinite(number) else None


def number_or_zero(value: Any) -> float:
    """
    Coerce a loosely typed value to a finite float, falling back to 0.

    Numbers pass through (NaN and infinities become 0), booleans count as
    1/0, decimal numeric strings are parsed after stripping whitespace.
    Anything else is 0.
    """
    number = _parse_number(value)
    return 0.0 if number is None else number


def _first_present(item: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = item.get(key)
        if not _is_missing(value):
            return value
    return None


def _coerce_field(value: Any, field: str, position: int) -> float:
    if _is_missing(value):
        return 0.0
    number = _parse_number(value)
    if number is None:
        logger.warning(
            "Line item %d: non-numeric %s %r coerced to 0", position, field, value
        )
        return 0.0
    return number


def _normalize_item(item: Any, position: int) -> NormalizedLineItem:
    label = f"Item {position}"

    if not isinstance(item, Mapping):
        logger.warning(
            "Line item %d is %s, not an object; using zero-priced placeholder",
            position, type(item).__name__,
        )
        return NormalizedLineItem(description=label, quantity=PLACEHOLDER_QUANTITY, unit_price=0.0)

    description = _first_present(item, DESCRIPTION_KEYS)
    quantity = _first_present(item, QUANTITY_KEYS)
    unit_price = item.get(UNIT_PRICE_KEY)

    return NormalizedLineItem(
        description=str(description) if description is not None else label,
        quantity=_coerce_field(quantity, "quantity", position),
        unit_price=_coerce_field(unit_price, "unit_price", position),
    )


def normalize_line_items(raw: Any) -> List[NormalizedLineItem]:
    """
    Normalize a job's raw line_items payload.

    Args:
        raw: None, a single mapping, or a list of (possibly malformed) entries

    Returns:
        Line items in input order; [] when there is nothing to normalize
    """
    if isinstance(raw, (list, tuple)):
        return [_normalize_item(item, i + 1) for i, item in enumerate(raw)]

    if isinstance(raw, Mapping):
        return [_normalize_item(raw, 1)]

    if raw is not None:
        logger.warning(
            "line_items payload of type %s ignored; treating as empty", type(raw).__name__
        )
    return []


def line_total(item: NormalizedLineItem) -> float:
    return item.quantity * item.unit_price


def calculate_total(items: Optional[Iterable[NormalizedLineItem]]) -> float:
    """
    Sum of quantity * unit_price. Unrounded and unclamped; [] gives 0.

    Raises:
        AmountOutOfRangeError: finite inputs whose products or sum overflow
    """
    total = 0.0
    for item in items or ():
        total += line_total(item)
    if not math.isfinite(total):
        logger.warning("Line item total overflowed to %r; refusing to invoice", total)
        raise AmountOutOfRangeError()
    return total
