"""
Column definitions for the FilmTV movie dataset.

Declares the type of every known column, the header aliases used by the
FilmTV export, and the default applied by the cleaner to absent values.
"""

from enum import Enum


class ColumnType(str, Enum):
    """Target type of a column."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"


# Persisted columns, in table order
SCHEMA_COLUMNS: dict[str, ColumnType] = {
    "primary_id": ColumnType.INTEGER,
    "title": ColumnType.STRING,
    "year": ColumnType.INTEGER,
    "category": ColumnType.STRING,
    "duration": ColumnType.INTEGER,
    "origin": ColumnType.STRING,
    "score_average": ColumnType.FLOAT,
    "score_critics": ColumnType.FLOAT,
    "score_public": ColumnType.FLOAT,
    "vote_count": ColumnType.INTEGER,
}

# Ingested but never persisted
AUXILIARY_COLUMNS: dict[str, ColumnType] = {
    "directors": ColumnType.STRING,
    "actors": ColumnType.STRING,
    "description": ColumnType.STRING,
    "notes": ColumnType.STRING,
    "humor": ColumnType.INTEGER,
    "rhythm": ColumnType.INTEGER,
    "effort": ColumnType.INTEGER,
    "tension": ColumnType.INTEGER,
    "erotism": ColumnType.INTEGER,
}

COLUMN_TYPES: dict[str, ColumnType] = {**SCHEMA_COLUMNS, **AUXILIARY_COLUMNS}

# FilmTV export header -> canonical column name
COLUMN_ALIASES: dict[str, str] = {
    "filmtv_id": "primary_id",
    "genre": "category",
    "country": "origin",
    "avg_vote": "score_average",
    "critics_vote": "score_critics",
    "public_vote": "score_public",
    "total_votes": "vote_count",
}

UNKNOWN_TEXT = "Unknown"

COLUMN_DEFAULTS: dict[str, int | float | str] = {
    "primary_id": 0,
    "title": UNKNOWN_TEXT,
    "year": 0,
    "category": UNKNOWN_TEXT,
    "duration": 0,
    "origin": UNKNOWN_TEXT,
    "score_average": 0.0,
    "score_critics": 0.0,
    "score_public": 0.0,
    "vote_count": 0,
}


def canonical_column_name(header: str) -> str:
    """
    Normalize a header cell to its canonical column name.

    Strips whitespace and a leading UTF-8 BOM, then resolves FilmTV aliases.
    Unknown headers are returned stripped but otherwise untouched.
    """
    name = header.lstrip("\ufeff").strip()
    return COLUMN_ALIASES.get(name, name)


def column_type_for(name: str) -> ColumnType:
    """Declared type for a canonical column name (STRING when unknown)."""
    return COLUMN_TYPES.get(name, ColumnType.STRING)
