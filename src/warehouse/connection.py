"""
PostgreSQL connection pool management using psycopg3

The pool's worker threads open and refresh connections in the background,
independently of the pipeline thread. Their failures are logged by
psycopg_pool and surface to callers only as a timeout when a connection
is requested.
"""
import os
from contextlib import contextmanager

from psycopg import OperationalError
from psycopg.abc import Query
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from src.core.errors import StoreError
from src.observability.logger import get_logger


logger = get_logger(__name__)


def _whole_units(value: float) -> int:
    # libpq reads 0 as "no limit", so round sub-unit values up to 1
    return max(1, round(value))


class DatabaseConnectionPool:
    """
    PostgreSQL connection pool manager using psycopg3

    Every connection carries a server-side statement_timeout so no store
    operation can block the pipeline indefinitely.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        conninfo: str | None = None,
        min_size: int = 1,
        max_size: int = 4,
        timeout: float = 30.0,
        statement_timeout: float = 60.0,
    ) -> None:
        """
        Initialize database connection pool

        Args:
            host: Database host (defaults to env var DB_HOST)
            port: Database port (defaults to env var DB_PORT)
            database: Database name (defaults to env var DB_NAME)
            user: Database user (defaults to env var DB_USER)
            password: Database password (defaults to env var DB_PASSWORD)
            conninfo: Full connection string; overrides the individual settings.
                DATABASE_URL is used only when neither conninfo nor any
                individual setting is passed
            min_size: Minimum pool size
            max_size: Maximum pool size
            timeout: Connect and pool acquisition timeout in seconds
            statement_timeout: Server-side limit for a single statement in seconds
        """
        self._pool: ConnectionPool | None = None
        self.min_size = min_size
        self.max_size = max_size
        self.timeout = timeout
        self.statement_timeout = statement_timeout

        options = f"-c statement_timeout={_whole_units(statement_timeout * 1000)}"
        explicit = any(value is not None for value in (host, port, database, user, password))
        if conninfo is None and not explicit:
            conninfo = os.getenv("DATABASE_URL")

        if conninfo:
            self.conninfo = make_conninfo(
                conninfo,
                connect_timeout=_whole_units(timeout),
                options=options,
            )
            return

        self.host = host or os.getenv("DB_HOST", "localhost")
        self.port = port or int(os.getenv("DB_PORT", "5432"))
        self.database = database or os.getenv("DB_NAME", "postgres")
        self.user = user or os.getenv("DB_USER", "postgres")
        self.password = password or os.getenv("DB_PASSWORD")

        # Security: Require password to be explicitly set
        if not self.password:
            raise ValueError(
                "Database password must be provided. "
                "Set DB_PASSWORD or DATABASE_URL environment variable or pass to constructor."
            )

        self.conninfo = make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=self.password,
            connect_timeout=_whole_units(timeout),
            options=options,
        )

    def open(self) -> None:
        """
        Open the connection pool and wait for the first connection.

        Raises:
            StoreError: If no connection can be established within the timeout
        """
        if self._pool is not None:
            return

        pool = ConnectionPool(
            conninfo=self.conninfo,
            min_size=self.min_size,
            max_size=self.max_size,
            timeout=self.timeout,
            kwargs={"row_factory": dict_row},  # Return rows as dictionaries
            open=False,
        )
        try:
            pool.open(wait=True, timeout=self.timeout)
        except OperationalError as e:
            pool.close()
            raise StoreError("connect", str(e)) from e

        self._pool = pool
        logger.info("Database connection pool opened")

    def close(self) -> None:
        """Close the connection pool"""
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    @contextmanager
    def get_connection(self):
        """
        Get a connection from the pool

        The block commits on success and rolls back on error.

        Yields:
            psycopg.Connection: Database connection

        Raises:
            RuntimeError: If pool is not open
        """
        if self._pool is None:
            raise RuntimeError("Connection pool is not open. Call open() first.")

        with self._pool.connection() as conn:
            yield conn

    @contextmanager
    def get_cursor(self):
        """
        Get a cursor from a pooled connection

        Yields:
            psycopg.Cursor: Database cursor
        """
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                yield cur

    def execute_query(self, query: Query, params: tuple | None = None) -> list[dict]:
        """
        Execute a SELECT query and return results

        Args:
            query: SQL SELECT query
            params: Query parameters (optional)

        Returns:
            List of dictionaries (one per row)
        """
        with self.get_cursor() as cur:
            cur.execute(query, params)
            return cur.fetchall()

    def execute_command(self, command: Query, params: tuple | None = None) -> int:
        """
        Execute a DDL or INSERT/UPDATE/DELETE command

        Args:
            command: SQL command
            params: Command parameters (optional)

        Returns:
            Number of rows affected
        """
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(command, params)
                rowcount = cur.rowcount
            conn.commit()
            return rowcount

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
