"""Line item normalization, invoice totals and invoice materialization"""

from .line_items import (
    normalize_line_items,
    calculate_total,
    line_total,
    number_or_zero,
)
from .materializer import ensure_invoice

__all__ = [
    "normalize_line_items",
    "calculate_total",
    "line_total",
    "number_or_zero",
    "ensure_invoice",
]
