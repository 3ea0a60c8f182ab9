"""
linkpool: named database links with lazy open, caching and shaped query results.
"""

from linkpool.core.pool import (
    LinkConnectionError,
    Pool,
    PoolError,
    QueryError,
    UnknownConnectionName,
    get_pool,
    reset_pool,
)
from linkpool.models import NO_VALUE, ConnectionConfig, DriverKind, ResultShape

__all__ = [
    "Pool",
    "get_pool",
    "reset_pool",
    "ConnectionConfig",
    "DriverKind",
    "ResultShape",
    "NO_VALUE",
    "PoolError",
    "UnknownConnectionName",
    "LinkConnectionError",
    "QueryError",
]
