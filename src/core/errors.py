"""
Error taxonomy for the movie ETL pipeline.

Each pipeline stage wraps the library errors it can hit into one of these
types so the orchestrator can report which stage failed and why.
Rows rejected by the cleaner (non-positive primary_id) are not errors.
"""

from enum import Enum


class PipelineError(Exception):
    """Base class for all pipeline failures."""


class IngestionErrorKind(str, Enum):
    """Cause of an ingestion failure."""

    IO = "io"
    CSV = "csv"
    DESERIALIZATION = "deserialization"


class IngestionError(PipelineError):
    """
    Raised when the source file cannot be opened, read as delimited text,
    or when a row cannot be assembled into a RawRecord.

    Attributes:
        kind: What went wrong (io, csv, deserialization)
        row: 1-based data row number, when the failure is tied to a row
    """

    def __init__(self, kind: IngestionErrorKind, message: str, row: int | None = None):
        self.kind = kind
        self.row = row
        self.message = message
        location = f" (row {row})" if row is not None else ""
        super().__init__(f"[{kind.value}]{location} {message}")


class TransformError(PipelineError):
    """Raised on internal defects while building clean records."""

    def __init__(self, message: str, column: str | None = None):
        self.column = column
        self.message = message
        prefix = f"{column}: " if column else ""
        super().__init__(f"{prefix}{message}")


class StoreError(PipelineError):
    """
    Raised when a store operation fails in the database layer.

    Attributes:
        operation: Store operation name (connect, ensure_schema, clear, upsert, sample, count)
    """

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"{operation} failed: {message}")
