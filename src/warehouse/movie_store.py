"""
Movie table operations: DDL, idempotent upsert and verification reads.

Implements INSERT ... ON CONFLICT UPDATE so reloading the same file
leaves the table unchanged.
"""

from contextlib import contextmanager
from typing import Any, Sequence

import psycopg
from psycopg import sql

from src.core.errors import StoreError
from src.core.models import CleanRecord
from src.core.schema import SCHEMA_COLUMNS
from src.observability.logger import get_logger
from src.observability.metrics import increment_counter, store_errors_total
from src.utils.validation import ValidationError, sanitize_sql_identifier, validate_limit

from .connection import DatabaseConnectionPool


logger = get_logger(__name__)

PRIMARY_KEY = "primary_id"

_COLUMN_DDL = {
    "primary_id": "BIGINT PRIMARY KEY",
    "title": "TEXT NOT NULL",
    "year": "BIGINT NOT NULL",
    "category": "TEXT NOT NULL",
    "duration": "BIGINT NOT NULL",
    "origin": "TEXT NOT NULL",
    "score_average": "DOUBLE PRECISION NOT NULL",
    "score_critics": "DOUBLE PRECISION NOT NULL",
    "score_public": "DOUBLE PRECISION NOT NULL",
    "vote_count": "BIGINT NOT NULL",
}


@contextmanager
def _store_operation(operation: str):
    """Wrap database and pool failures of one operation as StoreError."""
    try:
        yield
    except StoreError:
        increment_counter(store_errors_total, operation=operation)
        raise
    except (psycopg.Error, RuntimeError) as e:
        increment_counter(store_errors_total, operation=operation)
        raise StoreError(operation, str(e)) from e


class MovieStore:
    """
    Writes clean movie records to a PostgreSQL table.

    The table maps 1:1 to CleanRecord and is keyed by primary_id. Store
    operations are not retried; any failure raises StoreError.
    """

    def __init__(self, pool: DatabaseConnectionPool, table_name: str = "movie"):
        """
        Initialize movie store.

        Args:
            pool: Database connection pool
            table_name: Destination table

        Raises:
            ValidationError: If table_name is not a safe SQL identifier
        """
        self.pool = pool
        self.table_name = sanitize_sql_identifier(table_name, "table_name")
        self._table = sql.Identifier(self.table_name)
        self._columns = sql.SQL(", ").join(sql.Identifier(c) for c in SCHEMA_COLUMNS)

    def ensure_schema(self) -> None:
        """Create the destination table if it does not exist."""
        columns = sql.SQL(",\n").join(
            sql.SQL("{} {}").format(sql.Identifier(name), sql.SQL(ddl))
            for name, ddl in _COLUMN_DDL.items()
        )
        query = sql.SQL("CREATE TABLE IF NOT EXISTS {table} (\n{columns}\n)").format(
            table=self._table, columns=columns
        )

        with _store_operation("ensure_schema"):
            self.pool.execute_command(query)
        logger.debug(f"Ensured table {self.table_name}")

    def clear(self) -> None:
        """
        Drop the destination table if it exists.

        This discards every stored row; the next load replaces the whole
        dataset.
        """
        query = sql.SQL("DROP TABLE IF EXISTS {table}").format(table=self._table)

        with _store_operation("clear"):
            self.pool.execute_command(query)
        logger.info(f"Dropped table {self.table_name}")

    def upsert(self, records: Sequence[CleanRecord]) -> int:
        """
        Insert records, overwriting every non-key column on primary_id conflict.

        Rows are written in input order inside a single transaction: if any
        row fails, none of the batch is committed.

        Args:
            records: CleanRecord instances

        Returns:
            Number of records upserted
        """
        if not records:
            return 0

        updates = sql.SQL(",\n").join(
            sql.SQL("{col} = EXCLUDED.{col}").format(col=sql.Identifier(name))
            for name in SCHEMA_COLUMNS
            if name != PRIMARY_KEY
        )
        query = sql.SQL(
            "INSERT INTO {table} ({columns})\n"
            "VALUES ({placeholders})\n"
            "ON CONFLICT ({key}) DO UPDATE SET\n{updates}"
        ).format(
            table=self._table,
            columns=self._columns,
            placeholders=sql.SQL(", ").join(sql.Placeholder() * len(SCHEMA_COLUMNS)),
            key=sql.Identifier(PRIMARY_KEY),
            updates=updates,
        )

        with _store_operation("upsert"):
            with self.pool.get_connection() as conn:
                with conn.transaction():
                    with conn.cursor() as cur:
                        cur.executemany(query, [record.as_row() for record in records])

        return len(records)

    def sample(self, limit: int) -> list[dict[str, Any]]:
        """
        Read back the first rows ordered by primary_id.

        Args:
            limit: Maximum number of rows (positive)

        Returns:
            List of row dictionaries
        """
        try:
            limit = validate_limit(limit, "limit")
        except ValidationError as e:
            raise StoreError("sample", str(e)) from e

        query = sql.SQL(
            "SELECT {columns} FROM {table} ORDER BY {key} LIMIT %s"
        ).format(columns=self._columns, table=self._table, key=sql.Identifier(PRIMARY_KEY))

        with _store_operation("sample"):
            return self.pool.execute_query(query, (limit,))

    def count(self) -> int:
        """Number of rows in the destination table."""
        query = sql.SQL("SELECT COUNT(*) AS row_count FROM {table}").format(table=self._table)

        with _store_operation("count"):
            result = self.pool.execute_query(query)
        return result[0]["row_count"] if result else 0
