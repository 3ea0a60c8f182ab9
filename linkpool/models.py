"""
Connection-registry models.

Enums: DriverKind (which driver family and transport a config targets),
ResultShape (how run_query reshapes a result set).
Model: ConnectionConfig (one per symbolic connection name).
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class DriverKind(str, Enum):
    """Supported driver kinds (family plus TCP/socket transport)."""

    MYSQL = "mysql"
    MYSQL_SOCKET = "mysql_socket"
    POSTGRESQL = "pgsql"
    POSTGRESQL_SOCKET = "pgsql_socket"
    SQLITE = "sqlite"

    @property
    def family(self) -> str:
        """DSN scheme token shared by the TCP and socket variants."""
        return self.value.split("_", 1)[0]

    @property
    def uses_socket(self) -> bool:
        return self.value.endswith("_socket")


class ResultShape(str, Enum):
    """Output forms for Pool.run_query."""

    AFFECTED_ROW_COUNT = "affected_row_count"
    ALL_ROWS = "all_rows"
    FIRST_ROW = "first_row"
    FIRST_COLUMN_ALL_ROWS = "first_column_all_rows"
    FIRST_CELL_OF_FIRST_ROW = "first_cell_of_first_row"


class _NoValue:
    """Singleton returned when a scalar is requested from an empty result."""

    _instance: "_NoValue | None" = None

    def __new__(cls) -> "_NoValue":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __reduce__(self) -> str:
        return "NO_VALUE"


NO_VALUE = _NoValue()


# ---------------------------------------------------------------------------
# ConnectionConfig
# ---------------------------------------------------------------------------

SQLITE_MEMORY = ":memory:"


def parse_dsn(dsn: str) -> tuple[str, dict[str, str]]:
    """
    Split a DSN into (scheme, fields).

    For SQLite the single field is ``path`` (the remainder after ``sqlite:``,
    taken verbatim so paths may contain ``;`` or ``=``).
    """
    scheme, sep, rest = dsn.partition(":")
    if not sep:
        raise ValueError(f"DSN has no scheme: {dsn!r}")
    if scheme == "sqlite":
        return scheme, {"path": rest or SQLITE_MEMORY}
    fields: dict[str, str] = {}
    for part in rest.split(";"):
        if not part:
            continue
        key, eq, value = part.partition("=")
        if not eq:
            raise ValueError(f"Malformed DSN fragment {part!r} in {dsn!r}")
        fields[key.strip()] = value.strip()
    return scheme, fields


_TARGET_FIELDS = ("host", "socket", "port", "database")


class ConnectionConfig(BaseModel):
    """
    Everything needed to open the native connection for one name.

    host / socket / port / database are what the driver is opened with; dsn is
    their display form. A config built from a DSN alone gets those fields
    filled from it, and the DSN scheme must match the driver kind.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    driver_kind: DriverKind
    dsn: str = Field(..., min_length=1)
    host: str | None = None
    socket: str | None = None
    # Not coerced: a bad port surfaces when the link is opened.
    port: int | str | None = None
    database: str | None = None
    username: str | None = None
    password: str | None = Field(default=None, repr=False)
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Driver connect keyword arguments; caller values win over family defaults.",
    )

    @model_validator(mode="before")
    @classmethod
    def _check_dsn(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not isinstance(data.get("dsn"), str):
            return data
        try:
            kind = DriverKind(data.get("driver_kind"))
        except ValueError:
            return data  # reported by field validation
        scheme = data["dsn"].partition(":")[0]
        if scheme != kind.family:
            raise ValueError(
                f"DSN scheme {scheme!r} does not match driver kind {kind.value!r}"
            )
        if any(data.get(key) for key in _TARGET_FIELDS):
            return data
        _, fields = parse_dsn(data["dsn"])
        data = dict(data)
        if scheme == "sqlite":
            data["database"] = fields["path"]
        else:
            data["host"] = fields.get("host")
            data["socket"] = fields.get("unix_socket")
            data["port"] = fields.get("port")
            data["database"] = fields.get("dbname")
        return data
