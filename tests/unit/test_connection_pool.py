"""
Unit tests for database connection pool

Covers configuration resolution and connect failures without a server, and
pooled queries against PostgreSQL using testcontainers.
"""
import pytest
from psycopg.conninfo import conninfo_to_dict

from src.core.errors import StoreError
from src.warehouse.connection import DatabaseConnectionPool


@pytest.fixture
def no_db_env(monkeypatch):
    for name in ("DATABASE_URL", "DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
class TestPoolConfiguration:
    """Tests for connection settings"""

    def test_password_is_required(self, no_db_env):
        with pytest.raises(ValueError, match="password"):
            DatabaseConnectionPool(host="localhost", user="etl")

    def test_explicit_settings(self, no_db_env):
        pool = DatabaseConnectionPool(
            host="db.internal", port=6543, database="movies", user="etl", password="secret",
            timeout=5.0, statement_timeout=2.5,
        )

        params = conninfo_to_dict(pool.conninfo)
        assert params["host"] == "db.internal"
        assert params["port"] == "6543"
        assert params["dbname"] == "movies"
        assert params["user"] == "etl"
        assert params["connect_timeout"] == "5"
        assert params["options"] == "-c statement_timeout=2500"
        assert not pool.is_open

    def test_settings_from_environment(self, no_db_env, monkeypatch):
        monkeypatch.setenv("DB_HOST", "warehouse")
        monkeypatch.setenv("DB_PORT", "15432")
        monkeypatch.setenv("DB_PASSWORD", "from-env")

        pool = DatabaseConnectionPool()

        params = conninfo_to_dict(pool.conninfo)
        assert params["host"] == "warehouse"
        assert params["port"] == "15432"
        assert params["dbname"] == "postgres"
        assert params["password"] == "from-env"
        assert params["options"] == "-c statement_timeout=60000"

    def test_database_url_used_without_explicit_settings(self, no_db_env, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://etl:pw@urlhost:5433/films")
        monkeypatch.setenv("DB_HOST", "env-host")

        pool = DatabaseConnectionPool()

        params = conninfo_to_dict(pool.conninfo)
        assert params["host"] == "urlhost"
        assert params["dbname"] == "films"
        assert params["connect_timeout"] == "30"

    def test_explicit_settings_win_over_database_url(self, no_db_env, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://etl:pw@urlhost:5433/films")

        pool = DatabaseConnectionPool(host="db.internal", password="secret")

        params = conninfo_to_dict(pool.conninfo)
        assert params["host"] == "db.internal"
        assert params["password"] == "secret"
        assert params["dbname"] == "postgres"

    def test_explicit_conninfo_wins_over_database_url(self, no_db_env, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://etl:pw@urlhost:5433/films")

        pool = DatabaseConnectionPool(conninfo="host=arghost dbname=movies password=x")

        params = conninfo_to_dict(pool.conninfo)
        assert params["host"] == "arghost"
        assert params["dbname"] == "movies"

    @pytest.mark.parametrize(
        "timeout, statement_timeout, connect_param, statement_option",
        [
            (0.2, 0.0004, "1", "-c statement_timeout=1"),
            (0.5, 0.25, "1", "-c statement_timeout=250"),
            (2.6, 1.5, "3", "-c statement_timeout=1500"),
        ],
    )
    def test_fractional_timeouts_never_become_zero(
        self, no_db_env, timeout, statement_timeout, connect_param, statement_option
    ):
        pool = DatabaseConnectionPool(
            password="secret", timeout=timeout, statement_timeout=statement_timeout
        )

        params = conninfo_to_dict(pool.conninfo)
        assert params["connect_timeout"] == connect_param
        assert params["options"] == statement_option
        assert pool.timeout == timeout

    def test_get_connection_requires_open_pool(self, no_db_env):
        pool = DatabaseConnectionPool(password="secret")

        with pytest.raises(RuntimeError, match="not open"):
            with pool.get_connection():
                pass

    def test_close_without_open(self, no_db_env):
        pool = DatabaseConnectionPool(password="secret")
        pool.close()
        assert not pool.is_open


@pytest.mark.unit
def test_unreachable_server_raises_store_error(no_db_env):
    """Nothing listens on port 1; open() gives up after the timeout"""
    pool = DatabaseConnectionPool(
        host="127.0.0.1", port=1, database="movies", user="etl", password="secret",
        timeout=1.0,
    )

    with pytest.raises(StoreError) as exc_info:
        pool.open()

    assert exc_info.value.operation == "connect"
    assert not pool.is_open


@pytest.mark.integration
def test_get_connection(db_pool):
    """Test getting a connection from the pool"""
    with db_pool.get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1 as test")
            result = cur.fetchone()
            assert result["test"] == 1


@pytest.mark.integration
def test_statement_timeout_applied(db_pool):
    """Every pooled connection carries the configured statement_timeout"""
    result = db_pool.execute_query("SHOW statement_timeout")

    assert result[0]["statement_timeout"] == "30s"


@pytest.mark.integration
def test_execute_command_commits(db_pool):
    db_pool.execute_command("DROP TABLE IF EXISTS pool_scratch")
    db_pool.execute_command("CREATE TABLE pool_scratch (id BIGINT)")
    try:
        affected = db_pool.execute_command("INSERT INTO pool_scratch VALUES (%s), (%s)", (1, 2))

        assert affected == 2
        assert db_pool.execute_query("SELECT COUNT(*) AS n FROM pool_scratch")[0]["n"] == 2
    finally:
        db_pool.execute_command("DROP TABLE pool_scratch")


@pytest.mark.integration
def test_context_manager_opens_and_closes(postgres_container):
    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_movies",
        user="test_pipeline",
        password="test_password",
    )

    with pool:
        assert pool.is_open
        assert pool.execute_query("SELECT 1 AS ok") == [{"ok": 1}]

    assert not pool.is_open
