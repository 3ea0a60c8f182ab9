"""
Errors raised by the connection pool.

All of them derive from PoolError so callers can catch the whole family;
each also derives from the builtin that best describes it.
"""


class PoolError(Exception):
    """Base class for connection pool failures."""

    def __init__(self, message: str, *, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name


class UnknownConnectionName(PoolError, LookupError):
    """No configuration is registered under the requested (or default) name."""


class LinkConnectionError(PoolError, ConnectionError):
    """The driver failed to open a connection (auth, network, missing file/socket)."""


class QueryError(PoolError, ValueError):
    """The driver failed to execute a statement or fetch its rows."""

    def __init__(
        self, message: str, *, name: str | None = None, query: str | None = None
    ) -> None:
        super().__init__(message, name=name)
        self.query = query
