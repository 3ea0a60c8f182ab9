"""Unit tests for core.pool.connect: driver kwargs, execute, cursor helpers."""

import sqlite3
import threading
from unittest.mock import MagicMock, patch

import pytest

from linkpool.core.config import Settings
from linkpool.core.pool import build_config, connect, cursor_to_dicts, execute, row_count
from linkpool.models import ConnectionConfig, DriverKind

_CFG = Settings(
    CONNECT_TIMEOUT=7,
    AUTOCOMMIT=True,
    MYSQL_INIT_COMMAND="SET NAMES utf8mb4",
    MYSQL_SQL_MODE="TRADITIONAL",
)


@patch("linkpool.core.pool.connect.pymysql.connect")
def test_connect_mysql_kwargs(mock_connect: MagicMock) -> None:
    config = build_config(
        "m",
        DriverKind.MYSQL,
        cfg=_CFG,
        host="db",
        port=3307,
        database="shop",
        username="u",
        password="p",
    )
    conn = connect(config, cfg=_CFG)

    assert conn is mock_connect.return_value
    mock_connect.assert_called_once_with(
        host="db",
        port=3307,
        database="shop",
        user="u",
        password="p",
        connect_timeout=7,
        autocommit=True,
        sql_mode="TRADITIONAL",
        init_command="SET NAMES utf8mb4",
    )


@patch("linkpool.core.pool.connect.pymysql.connect")
def test_connect_mysql_socket_options_override(mock_connect: MagicMock) -> None:
    """Caller options win over pool defaults such as sql_mode and autocommit."""
    config = build_config(
        "m",
        DriverKind.MYSQL_SOCKET,
        cfg=_CFG,
        socket="/run/mysqld.sock",
        username="u",
        password=None,
        options={"sql_mode": "ANSI", "autocommit": False},
    )
    connect(config, cfg=_CFG)

    kwargs = mock_connect.call_args.kwargs
    assert kwargs["unix_socket"] == "/run/mysqld.sock"
    assert "host" not in kwargs
    assert kwargs["password"] == ""
    assert kwargs["sql_mode"] == "ANSI"
    assert kwargs["autocommit"] is False


@patch("linkpool.core.pool.connect.psycopg.connect")
def test_connect_postgresql_kwargs(mock_connect: MagicMock) -> None:
    config = build_config(
        "pg",
        DriverKind.POSTGRESQL,
        host="pg",
        port=5433,
        database="app",
        username="u",
        password="p",
        options={"application_name": "linkpool"},
    )
    connect(config, cfg=_CFG)

    mock_connect.assert_called_once_with(
        host="pg",
        port=5433,
        dbname="app",
        user="u",
        password="p",
        connect_timeout=7,
        autocommit=True,
        application_name="linkpool",
    )


@patch("linkpool.core.pool.connect.psycopg.connect")
def test_connect_postgresql_socket_file(mock_connect: MagicMock) -> None:
    """A socket file path is split into libpq's socket directory and port."""
    config = build_config(
        "pg",
        DriverKind.POSTGRESQL_SOCKET,
        socket="/var/run/postgresql/.s.PGSQL.5434",
        username="u",
        password="p",
    )
    connect(config, cfg=_CFG)

    kwargs = mock_connect.call_args.kwargs
    assert kwargs["host"] == "/var/run/postgresql"
    assert kwargs["port"] == 5434


@patch("linkpool.core.pool.connect.psycopg.connect")
def test_connect_postgresql_socket_directory(mock_connect: MagicMock) -> None:
    config = build_config(
        "pg", DriverKind.POSTGRESQL_SOCKET, socket="/tmp", username="u", password="p"
    )
    connect(config, cfg=_CFG)

    kwargs = mock_connect.call_args.kwargs
    assert kwargs["host"] == "/tmp"
    assert "port" not in kwargs


def test_connect_sqlite_memory_autocommit() -> None:
    config = build_config("lite", DriverKind.SQLITE)
    conn = connect(config, cfg=_CFG)
    try:
        assert isinstance(conn, sqlite3.Connection)
        assert conn.isolation_level is None
    finally:
        conn.close()


@patch("linkpool.core.pool.connect.pymysql.connect")
def test_connect_dsn_only_config_uses_dsn_fields(mock_connect: MagicMock) -> None:
    """A hand-built config without structured fields is opened from its DSN."""
    config = ConnectionConfig(
        name="x",
        driver_kind=DriverKind.MYSQL,
        dsn="mysql:host=db;port=3307;dbname=shop",
        username="u",
    )
    connect(config, cfg=_CFG)

    kwargs = mock_connect.call_args.kwargs
    assert kwargs["host"] == "db"
    assert kwargs["port"] == 3307
    assert kwargs["database"] == "shop"


@patch("linkpool.core.pool.connect.psycopg.connect")
def test_connect_postgresql_keeps_semicolon_in_database(mock_connect: MagicMock) -> None:
    """Values are passed to the driver as given, not recovered from the DSN text."""
    config = build_config(
        "pg",
        DriverKind.POSTGRESQL,
        host="127.0.0.1",
        port=1,
        database="a;b",
        username="u",
        password="p",
    )
    connect(config, cfg=_CFG)

    kwargs = mock_connect.call_args.kwargs
    assert kwargs["dbname"] == "a;b"
    assert kwargs["port"] == 1


def test_connect_sqlite_link_usable_from_other_thread() -> None:
    config = build_config("lite", DriverKind.SQLITE)
    conn = connect(config, cfg=_CFG)
    results: list[object] = []
    try:
        worker = threading.Thread(
            target=lambda: results.append(conn.execute("SELECT 1").fetchone()[0])
        )
        worker.start()
        worker.join(timeout=5)
        assert results == [1]
    finally:
        conn.close()


def test_execute_binds_positional_and_named() -> None:
    conn = sqlite3.connect(":memory:")
    try:
        execute(conn, "CREATE TABLE t (id INTEGER, name TEXT)")
        execute(conn, "INSERT INTO t VALUES (?, ?)", [1, "a"])
        execute(conn, "INSERT INTO t VALUES (:id, :name)", {"id": 2, "name": "b"})
        cur = execute(conn, "SELECT id, name FROM t ORDER BY id")
        assert cursor_to_dicts(cur) == [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]
    finally:
        conn.close()


def test_execute_empty_params_runs_unbound() -> None:
    """Empty params are not bound, so a literal % survives for format-style drivers."""
    mock_cur = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value = mock_cur

    cur = execute(mock_conn, "SELECT 'a%'", [])

    assert cur is mock_cur
    mock_cur.execute.assert_called_once_with("SELECT 'a%'")


def test_execute_closes_cursor_on_failure() -> None:
    mock_cur = MagicMock()
    mock_cur.execute.side_effect = sqlite3.OperationalError("boom")
    mock_conn = MagicMock()
    mock_conn.cursor.return_value = mock_cur

    with pytest.raises(sqlite3.OperationalError):
        execute(mock_conn, "SELECT 1", (1,))
    mock_cur.close.assert_called_once()


def test_row_count_prefers_driver_rowcount() -> None:
    cur = MagicMock()
    cur.rowcount = 4
    assert row_count(cur) == 4
    cur.fetchall.assert_not_called()


def test_row_count_counts_rows_when_driver_reports_minus_one() -> None:
    cur = MagicMock()
    cur.rowcount = -1
    cur.description = [("id",)]
    cur.fetchall.return_value = [(1,), (2,)]
    assert row_count(cur) == 2


def test_row_count_no_result_set() -> None:
    cur = MagicMock()
    cur.rowcount = -1
    cur.description = None
    assert row_count(cur) == 0


def test_cursor_to_dicts_without_description() -> None:
    cur = MagicMock()
    cur.description = None
    assert cursor_to_dicts(cur) == []
