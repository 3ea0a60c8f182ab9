"""
Named connection pool: configuration registry, connection cache and query execution.

One native connection ("link") per symbolic name, opened lazily on first use
and reused until dropped. Omitted names resolve to the first name ever
registered. A process-wide instance is available through get_pool().
"""

import logging
import threading
from collections.abc import Mapping, Sequence
from typing import Any

from linkpool.core.config import Settings, settings as default_settings
from linkpool.core.result_shape import resolve_shape, shape_result
from linkpool.models import SQLITE_MEMORY, ConnectionConfig, DriverKind, ResultShape

from .connect import DRIVER_ERRORS, close_quiet, connect, execute
from .dsn import build_config
from .errors import LinkConnectionError, QueryError, UnknownConnectionName

_log = logging.getLogger(__name__)


class Pool:
    """Registry of named connection configs plus a cache of their open links."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or default_settings
        self._configs: dict[str, ConnectionConfig] = {}
        self._links: dict[str, Any] = {}
        # Registration log: the first entry is the default name.
        self._order: list[str] = []
        self._lock = threading.Lock()

    def __enter__(self) -> "Pool":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Configuration registry
    # ------------------------------------------------------------------

    def add(self, config: ConnectionConfig) -> "Pool":
        """Register config under config.name, replacing any previous config of that name."""
        with self._lock:
            if config.name not in self._configs:
                self._order.append(config.name)
            self._configs[config.name] = config
        _log.debug("Registered %s config %r", config.driver_kind.value, config.name)
        return self

    def _add(self, name: str, kind: DriverKind, **params: Any) -> "Pool":
        if not isinstance(name, str) or not name:
            raise ValueError("Connection name must be a non-empty string")
        return self.add(build_config(name, kind, cfg=self._settings, **params))

    def add_mysql(
        self,
        name: str,
        host: str,
        username: str | None,
        password: str | None,
        database: str | None = None,
        options: Mapping[str, Any] | None = None,
        port: int | None = None,
    ) -> "Pool":
        return self._add(
            name,
            DriverKind.MYSQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            options=options,
        )

    def add_mysql_socket(
        self,
        name: str,
        socket: str | None,
        username: str | None,
        password: str | None,
        database: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> "Pool":
        return self._add(
            name,
            DriverKind.MYSQL_SOCKET,
            socket=socket,
            database=database,
            username=username,
            password=password,
            options=options,
        )

    def add_postgresql(
        self,
        name: str,
        host: str,
        username: str | None,
        password: str | None,
        database: str | None = None,
        options: Mapping[str, Any] | None = None,
        port: int | None = None,
    ) -> "Pool":
        return self._add(
            name,
            DriverKind.POSTGRESQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            options=options,
        )

    def add_postgresql_socket(
        self,
        name: str,
        socket: str | None,
        username: str | None,
        password: str | None,
        database: str | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> "Pool":
        return self._add(
            name,
            DriverKind.POSTGRESQL_SOCKET,
            socket=socket,
            database=database,
            username=username,
            password=password,
            options=options,
        )

    def add_sqlite(
        self,
        name: str,
        database: str | None = SQLITE_MEMORY,
        options: Mapping[str, Any] | None = None,
    ) -> "Pool":
        return self._add(name, DriverKind.SQLITE, database=database, options=options)

    def names(self) -> list[str]:
        """Registered names in registration order."""
        with self._lock:
            return list(self._order)

    def has_config(self, name: str) -> bool:
        with self._lock:
            return name in self._configs

    def get_config(self, name: str | None = None) -> ConnectionConfig:
        resolved = self.resolve_name(name)
        with self._lock:
            config = self._configs.get(resolved)
        if config is None:
            raise UnknownConnectionName(
                f"No connection configured under name {resolved!r}", name=resolved
            )
        return config

    def resolve_name(self, name: str | None = None) -> str:
        """Return name, or the first registered name when name is None or empty."""
        if name:
            return name
        with self._lock:
            if not self._order:
                raise UnknownConnectionName("No connections have been configured")
            return self._order[0]

    # ------------------------------------------------------------------
    # Connection cache
    # ------------------------------------------------------------------

    def get_link(self, name: str | None = None) -> Any:
        """Return the cached link for name, opening and caching it on first use."""
        resolved = self.resolve_name(name)
        with self._lock:
            link = self._links.get(resolved)
        if link is not None:
            return link

        fresh = self._open(resolved)
        with self._lock:
            # Another thread may have cached a link while this one was connecting.
            link = self._links.setdefault(resolved, fresh)
        if link is not fresh:
            _log.debug("Link %r opened concurrently; closing the duplicate", resolved)
            close_quiet(fresh)
        return link

    def open_link(self, name: str | None = None) -> Any:
        """
        Open a new link for name and cache it, whether or not one is cached already.

        A previously cached link for the same name is closed once the new one is in place.
        """
        resolved = self.resolve_name(name)
        fresh = self._open(resolved)
        with self._lock:
            previous = self._links.get(resolved)
            self._links[resolved] = fresh
        if previous is not None and previous is not fresh:
            _log.warning("Replacing open link %r; closing the previous connection", resolved)
            close_quiet(previous)
        return fresh

    def drop_link(self, name: str | None = None) -> None:
        """Close and forget the cached link for name; no-op when none is cached."""
        if not name:
            with self._lock:
                if not self._order:
                    return
            name = self.resolve_name(name)
        with self._lock:
            link = self._links.pop(name, None)
        if link is not None:
            _log.debug("Dropping link %r", name)
            close_quiet(link)

    def has_link(self, name: str | None = None) -> bool:
        resolved = self.resolve_name(name)
        with self._lock:
            return resolved in self._links

    def dispose(self) -> None:
        """Close every cached link. Configs stay registered."""
        with self._lock:
            links = list(self._links.items())
            self._links.clear()
        for link_name, link in links:
            _log.debug("Disposing link %r", link_name)
            close_quiet(link)

    def stats(self) -> dict[str, int]:
        """Counts of registered configs and currently open links."""
        with self._lock:
            return {
                "configs": len(self._configs),
                "open_links": len(self._links),
            }

    def _open(self, name: str) -> Any:
        config = self.get_config(name)
        try:
            return connect(config, cfg=self._settings)
        except (*DRIVER_ERRORS, OSError, ValueError, TypeError) as e:
            _log.error("Failed to open link %r (%s): %s", name, config.dsn, e, exc_info=True)
            raise LinkConnectionError(
                f"Failed to connect to {name!r}: {e}", name=name
            ) from e

    # ------------------------------------------------------------------
    # Query execution
    # ------------------------------------------------------------------

    def run_query(
        self,
        query: str,
        params: Sequence[Any] | Mapping[str, Any] | None = None,
        shape: ResultShape | str = ResultShape.ALL_ROWS,
        name: str | None = None,
    ) -> Any:
        """
        Execute query on the link for name and return the result in the requested shape.

        - params: positional sequence or mapping for named placeholders, in the
          driver's paramstyle; None or empty runs the statement without binding.
        - shape: see linkpool.core.result_shape. Zero rows give [], {} or NO_VALUE.
        - Raises QueryError wrapping the driver error when execution or fetching fails.
        """
        result_shape = resolve_shape(shape)
        resolved = self.resolve_name(name)
        conn = self.get_link(resolved)
        if self._settings.LOG_SQL:
            _log.debug("Running on %r: %s", resolved, query)
        try:
            cur = execute(conn, query, params)
        except DRIVER_ERRORS as e:
            _log.error("Query failed on %r: %s. SQL: %s", resolved, e, query, exc_info=True)
            raise QueryError(
                f"SQL execution failed: {e}", name=resolved, query=query
            ) from e
        try:
            return shape_result(cur, result_shape)
        except DRIVER_ERRORS as e:
            _log.error("Fetching results failed on %r: %s. SQL: %s", resolved, e, query, exc_info=True)
            raise QueryError(
                f"SQL result fetch failed: {e}", name=resolved, query=query
            ) from e
        finally:
            close_quiet(cur)


_pool: Pool | None = None
_pool_lock = threading.Lock()


def get_pool() -> Pool:
    """Process-wide Pool, created on first use; independent Pool() instances are unaffected."""
    global _pool
    if _pool is None:
        with _pool_lock:
            if _pool is None:
                _pool = Pool()
    return _pool


def reset_pool() -> None:
    """Dispose and forget the singleton Pool."""
    global _pool
    with _pool_lock:
        pool, _pool = _pool, None
    if pool is not None:
        pool.dispose()
