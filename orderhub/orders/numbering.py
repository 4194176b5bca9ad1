"""
Human-readable order numbers: ``<year>-<zero padded sequence>``.
"""

from typing import Optional

DEFAULT_WIDTH = 5


def year_prefix(year: int) -> str:
    return f"{year}-"


def format_order_number(year: int, sequence: int, width: int = DEFAULT_WIDTH) -> str:
    """Format e.g. (2026, 7) -> '2026-00007'."""
    if sequence < 1:
        raise ValueError(f"Sequence must be positive, got {sequence}")
    return f"{year_prefix(year)}{sequence:0{width}d}"


def parse_sequence(order_id: str, year: int) -> Optional[int]:
    """
    Return the numeric suffix of an order number for the given year.
    Numbers from other years, or imported ids like 'AMZ-12345', give None.
    """
    prefix = year_prefix(year)
    if not order_id or not order_id.startswith(prefix):
        return None
    suffix = order_id[len(prefix):]
    if not suffix.isdigit():
        return None
    return int(suffix)
