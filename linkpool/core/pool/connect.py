"""
Driver boundary: open native connections from a ConnectionConfig and run statements.

Uses pymysql (MySQL), psycopg (PostgreSQL) or sqlite3 (SQLite) based on the
config's driver family. Functions here raise the drivers' own exceptions;
the pool wraps them into PoolError subclasses.
"""

import logging
import os
import sqlite3
from collections.abc import Mapping, Sequence
from typing import Any

import psycopg
import pymysql

from linkpool.core.config import Settings, settings as default_settings
from linkpool.models import SQLITE_MEMORY, ConnectionConfig

_log = logging.getLogger(__name__)

# Everything a driver may raise while connecting, executing or fetching.
DRIVER_ERRORS: tuple[type[BaseException], ...] = (
    pymysql.Error,
    psycopg.Error,
    sqlite3.Error,
)

_PG_SOCKET_PREFIX = ".s.PGSQL."


def _without_none(kwargs: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in kwargs.items() if v is not None}


def _port(value: int | str | None) -> int | None:
    return int(value) if value not in (None, "") else None


def _connect_mysql(config: ConnectionConfig, cfg: Settings) -> Any:
    kwargs = _without_none(
        {
            "host": config.host,
            "unix_socket": config.socket,
            "port": _port(config.port),
            "database": config.database,
            "user": config.username,
            "password": config.password if config.password is not None else "",
            "connect_timeout": cfg.CONNECT_TIMEOUT,
            "autocommit": cfg.AUTOCOMMIT,
            # Strict error reporting: warnings on bad data become errors.
            "sql_mode": cfg.MYSQL_SQL_MODE,
        }
    )
    kwargs.update(config.options)
    return pymysql.connect(**kwargs)


def _pg_socket_target(socket: str) -> tuple[str, int | None]:
    """libpq wants the socket directory; a full socket file path also carries the port."""
    base = os.path.basename(socket)
    if base.startswith(_PG_SOCKET_PREFIX):
        suffix = base[len(_PG_SOCKET_PREFIX) :]
        return os.path.dirname(socket), int(suffix) if suffix.isdigit() else None
    return socket, None


def _connect_pgsql(config: ConnectionConfig, cfg: Settings) -> Any:
    host = config.host
    port = _port(config.port)
    socket = config.socket
    if socket:
        host, socket_port = _pg_socket_target(socket)
        port = port or socket_port
    kwargs = _without_none(
        {
            "host": host,
            "port": port,
            "dbname": config.database,
            "user": config.username,
            "password": config.password,
            "connect_timeout": cfg.CONNECT_TIMEOUT,
            "autocommit": cfg.AUTOCOMMIT,
        }
    )
    kwargs.update(config.options)
    return psycopg.connect(**kwargs)


def _connect_sqlite(config: ConnectionConfig, cfg: Settings) -> Any:
    # Cached links may be used from other threads; callers serialize access.
    kwargs: dict[str, Any] = {"check_same_thread": False}
    if cfg.AUTOCOMMIT:
        kwargs["isolation_level"] = None
    kwargs.update(config.options)
    return sqlite3.connect(config.database or SQLITE_MEMORY, **kwargs)


_CONNECTORS = {
    "mysql": _connect_mysql,
    "pgsql": _connect_pgsql,
    "sqlite": _connect_sqlite,
}


def connect(config: ConnectionConfig, *, cfg: Settings | None = None) -> Any:
    """
    Open a native connection for config.

    - Driver keyword arguments come from the config's host/socket/port/database;
      config.options are applied last so they override pool defaults
      (timeout, autocommit, sql_mode, check_same_thread).
    - Raises the driver's exception (see DRIVER_ERRORS), OSError, or ValueError for
      a port that is not a number.
    """
    cfg = cfg or default_settings
    scheme = config.driver_kind.family
    _log.debug("Opening %s link %r (%s)", scheme, config.name, config.dsn)
    return _CONNECTORS[scheme](config, cfg)


def execute(
    conn: Any,
    sql: str,
    params: Sequence[Any] | Mapping[str, Any] | None = None,
) -> Any:
    """
    Execute sql on a new cursor and return the cursor.

    Placeholders follow the driver's paramstyle. Empty params run the statement unbound.
    The cursor is closed if execution fails.
    """
    cur = conn.cursor()
    try:
        if params:
            if not isinstance(params, Mapping):
                params = tuple(params)
            cur.execute(sql, params)
        else:
            cur.execute(sql)
    except BaseException:
        close_quiet(cur)
        raise
    return cur


def column_names(cursor: Any) -> list[str]:
    """Result-set column names, [] for statements that return no rows."""
    return [column[0] for column in cursor.description or ()]


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Every remaining row keyed by column name, in result-set order."""
    names = column_names(cursor)
    if not names:
        return []
    rows = cursor.fetchall()
    return [dict(zip(names, values, strict=True)) for values in rows]


def row_count(cursor: Any) -> int:
    """
    Affected or returned row count.

    Drivers report -1 when they cannot tell (sqlite3 for SELECT); row-returning
    statements are then counted by fetching, anything else counts as 0.
    """
    rc = cursor.rowcount
    if rc is not None and rc >= 0:
        return rc
    if cursor.description:
        return len(cursor.fetchall())
    return 0


def close_quiet(resource: Any) -> None:
    try:
        resource.close()
    except Exception as e:
        _log.debug("Ignoring error while closing %r: %s", resource, e)
