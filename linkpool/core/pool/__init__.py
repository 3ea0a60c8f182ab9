"""
Named connection pool for MySQL, PostgreSQL and SQLite.

pymysql, psycopg and sqlite3 are used directly; a ConnectionConfig
(driver kind, DSN, credentials, options) is enough to open a link.
"""

from linkpool.models import parse_dsn

from .connect import connect, cursor_to_dicts, execute, row_count
from .dsn import build_config
from .errors import LinkConnectionError, PoolError, QueryError, UnknownConnectionName
from .manager import Pool, get_pool, reset_pool

__all__ = [
    "connect",
    "execute",
    "cursor_to_dicts",
    "row_count",
    "build_config",
    "parse_dsn",
    "Pool",
    "get_pool",
    "reset_pool",
    "PoolError",
    "UnknownConnectionName",
    "LinkConnectionError",
    "QueryError",
]
