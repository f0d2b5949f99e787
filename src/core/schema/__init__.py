"""
Column schema and field coercion for the movie dataset.
"""

from .coercion import coerce_column, coerce_field, parse_float, parse_integer
from .columns import (
    AUXILIARY_COLUMNS,
    COLUMN_ALIASES,
    COLUMN_DEFAULTS,
    COLUMN_TYPES,
    SCHEMA_COLUMNS,
    UNKNOWN_TEXT,
    ColumnType,
    canonical_column_name,
    column_type_for,
)

__all__ = [
    "AUXILIARY_COLUMNS",
    "COLUMN_ALIASES",
    "COLUMN_DEFAULTS",
    "COLUMN_TYPES",
    "SCHEMA_COLUMNS",
    "UNKNOWN_TEXT",
    "ColumnType",
    "canonical_column_name",
    "column_type_for",
    "coerce_column",
    "coerce_field",
    "parse_float",
    "parse_integer",
]
