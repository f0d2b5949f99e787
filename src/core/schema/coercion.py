"""
Field coercion from raw CSV text to typed values.

Numeric parsing is strict: surrounding whitespace, digit separators,
trailing content and out-of-range values make the cell absent (None).
Coercion never raises.
"""

import math
import re

from .columns import ColumnType, column_type_for

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)


def parse_integer(cell: str) -> int | None:
    """Parse a base-10 integer that fits a BIGINT column, or None."""
    if not _INTEGER_PATTERN.fullmatch(cell):
        return None
    try:
        value = int(cell)
    except ValueError:
        # more digits than int() accepts
        return None
    if not INT64_MIN <= value <= INT64_MAX:
        return None
    return value


def parse_float(cell: str) -> float | None:
    """Parse a finite float, or None when the cell is not one."""
    if not _FLOAT_PATTERN.fullmatch(cell):
        return None
    value = float(cell)
    if not math.isfinite(value):
        # e.g. "1e999" overflows to inf
        return None
    return value


def coerce_field(cell: str, column_type: ColumnType) -> int | float | str | None:
    """
    Coerce a raw cell to the given column type.

    Args:
        cell: Raw text of the cell
        column_type: Target type

    Returns:
        The typed value, or None when a numeric cell cannot be parsed.
        String cells are always present, including the empty string.
    """
    if column_type is ColumnType.INTEGER:
        return parse_integer(cell)
    if column_type is ColumnType.FLOAT:
        return parse_float(cell)
    return cell


def coerce_column(name: str, cell: str) -> int | float | str | None:
    """Coerce a cell using the type declared for a canonical column name."""
    return coerce_field(cell, column_type_for(name))
