"""
DSN assembly per driver family.

A DSN is ``<scheme>:<key>=<value>;<key>=<value>`` for MySQL and PostgreSQL
and ``sqlite:<path>`` for SQLite. Fragments are emitted only for inputs that
are present and non-empty; values are not escaped.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from linkpool.core.config import Settings, settings as default_settings
from linkpool.models import SQLITE_MEMORY, ConnectionConfig, DriverKind

_log = logging.getLogger(__name__)


def _join(scheme: str, fragments: list[tuple[str, Any]]) -> str:
    parts = [f"{key}={value}" for key, value in fragments if value]
    return f"{scheme}:" + ";".join(parts)


def mysql_dsn(
    host: str | None = None,
    *,
    socket: str | None = None,
    port: int | None = None,
    database: str | None = None,
) -> str:
    return _join(
        "mysql",
        [("host", host), ("unix_socket", socket), ("port", port), ("dbname", database)],
    )


def pgsql_dsn(
    host: str | None = None,
    *,
    socket: str | None = None,
    port: int | None = None,
    database: str | None = None,
) -> str:
    return _join(
        "pgsql",
        [("host", host), ("unix_socket", socket), ("port", port), ("dbname", database)],
    )


def sqlite_dsn(database: str | None = None) -> str:
    return f"sqlite:{database or SQLITE_MEMORY}"


def _merge_options(
    defaults: Mapping[str, Any], options: Mapping[str, Any] | None
) -> dict[str, Any]:
    merged = dict(defaults)
    if options:
        merged.update(options)
    return merged


def _target(kind: DriverKind, params: dict[str, Any]) -> dict[str, Any]:
    """Structured host/socket/port/database the driver is opened with; empty values dropped."""
    keys = ("socket", "database") if kind.uses_socket else ("host", "port", "database")
    return {key: params[key] for key in keys if params.get(key)}


def _mysql_config(
    name: str, kind: DriverKind, params: dict[str, Any], cfg: Settings
) -> ConnectionConfig:
    if kind.uses_socket:
        dsn = mysql_dsn(socket=params.get("socket"), database=params.get("database"))
    else:
        dsn = mysql_dsn(
            params.get("host"), port=params.get("port"), database=params.get("database")
        )
    return ConnectionConfig(
        name=name,
        driver_kind=kind,
        dsn=dsn,
        **_target(kind, params),
        username=params.get("username"),
        password=params.get("password"),
        options=_merge_options(
            {"init_command": cfg.MYSQL_INIT_COMMAND}, params.get("options")
        ),
    )


def _pgsql_config(
    name: str, kind: DriverKind, params: dict[str, Any], cfg: Settings
) -> ConnectionConfig:
    if kind.uses_socket:
        dsn = pgsql_dsn(socket=params.get("socket"), database=params.get("database"))
    else:
        dsn = pgsql_dsn(
            params.get("host"), port=params.get("port"), database=params.get("database")
        )
    return ConnectionConfig(
        name=name,
        driver_kind=kind,
        dsn=dsn,
        **_target(kind, params),
        username=params.get("username"),
        password=params.get("password"),
        options=_merge_options({}, params.get("options")),
    )


def _sqlite_config(
    name: str, kind: DriverKind, params: dict[str, Any], cfg: Settings
) -> ConnectionConfig:
    return ConnectionConfig(
        name=name,
        driver_kind=kind,
        dsn=sqlite_dsn(params.get("database")),
        database=params.get("database") or SQLITE_MEMORY,
        username=None,
        password=None,
        options=_merge_options({}, params.get("options")),
    )


_BUILDERS: dict[
    DriverKind, Callable[[str, DriverKind, dict[str, Any], Settings], ConnectionConfig]
] = {
    DriverKind.MYSQL: _mysql_config,
    DriverKind.MYSQL_SOCKET: _mysql_config,
    DriverKind.POSTGRESQL: _pgsql_config,
    DriverKind.POSTGRESQL_SOCKET: _pgsql_config,
    DriverKind.SQLITE: _sqlite_config,
}


def build_config(
    name: str,
    driver_kind: DriverKind | str,
    *,
    cfg: Settings | None = None,
    **params: Any,
) -> ConnectionConfig:
    """
    Build the ConnectionConfig for one name.

    - params: host / socket / port / database / username / password / options,
      as relevant for the driver kind; absent or empty values are left out of the DSN.
    - cfg: settings supplying family defaults (MySQL init command); module settings if None.
    """
    kind = DriverKind(driver_kind)
    config = _BUILDERS[kind](name, kind, params, cfg or default_settings)
    _log.debug("Built %s config %r: %s", kind.value, name, config.dsn)
    return config
