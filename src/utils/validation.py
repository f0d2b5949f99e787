"""
Checks on values that reach SQL text or the filesystem.

The destination table name is spliced into DDL and DML, the sample size
becomes a LIMIT, and the input path is opened by the reader. Each is
checked once, where it enters the pipeline.
"""

import re

MAX_SAMPLE_LIMIT = 10000

# NAMEDATALEN - 1
MAX_TABLE_NAME_LENGTH = 63

MAX_INPUT_PATH_LENGTH = 4096

TABLE_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Names that read as statements when they show up in a migration or log line
RESERVED_TABLE_NAMES = frozenset({
    "select", "insert", "update", "delete", "drop", "create", "alter",
    "table", "database", "index", "view", "user", "grant", "revoke",
})


class ValidationError(ValueError):
    """A configured value cannot be used by the pipeline."""


def validate_limit(limit: int, field_name: str = "limit", max_limit: int = MAX_SAMPLE_LIMIT) -> int:
    """
    Check a row count used as a LIMIT.

    Args:
        limit: Number of rows to read back
        field_name: Setting the value came from, used in the message
        max_limit: Largest accepted value

    Returns:
        The limit, unchanged

    Raises:
        ValidationError: If limit is not an int in 1..max_limit
    """
    # bool is an int subclass; True would silently mean LIMIT 1
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError(f"{field_name} must be an integer row count, not {type(limit).__name__}")
    if limit < 1:
        raise ValidationError(f"{field_name} must be at least 1 row, got {limit}")
    if limit > max_limit:
        raise ValidationError(f"{field_name} of {limit} rows is above the cap of {max_limit}")
    return limit


def sanitize_sql_identifier(identifier: str, field_name: str = "table_name") -> str:
    """
    Check a destination table name and return it without surrounding spaces.

    Only unquoted-style names are accepted (letters, digits, underscores, not
    starting with a digit), so the name behaves the same quoted or not.
    """
    if not isinstance(identifier, str) or not identifier.strip():
        raise ValidationError(f"{field_name} is required")

    name = identifier.strip()
    if not TABLE_NAME_PATTERN.fullmatch(name):
        raise ValidationError(
            f"{field_name} {name!r} may only use letters, digits and underscores "
            "and must not start with a digit"
        )
    if len(name) > MAX_TABLE_NAME_LENGTH:
        raise ValidationError(
            f"{field_name} is {len(name)} characters; PostgreSQL allows {MAX_TABLE_NAME_LENGTH}"
        )
    if name.lower() in RESERVED_TABLE_NAMES:
        raise ValidationError(f"{field_name} {name!r} is an SQL keyword")
    return name


def validate_file_path(file_path: str, field_name: str = "input") -> str:
    """Check the CSV input path before it is opened; returns it stripped."""
    if not isinstance(file_path, str) or not file_path.strip():
        raise ValidationError(f"{field_name} path is required")

    path = file_path.strip()
    if "\x00" in path:
        raise ValidationError(f"{field_name} path contains a NUL character")
    if len(path) > MAX_INPUT_PATH_LENGTH:
        raise ValidationError(
            f"{field_name} path is {len(path)} characters; the limit is {MAX_INPUT_PATH_LENGTH}"
        )
    return path
