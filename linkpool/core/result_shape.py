"""
Result shaping.

Turns an executed cursor into the form selected by ResultShape:

    AFFECTED_ROW_COUNT       -> int
    ALL_ROWS                 -> list of {column: value}
    FIRST_ROW                -> {column: value}, {} when there are no rows
    FIRST_COLUMN_ALL_ROWS    -> list of first-column values
    FIRST_CELL_OF_FIRST_ROW  -> scalar, NO_VALUE when there are no rows

An empty result is never an error. Statements that return no result set
(DDL, DML) shape to the empty form of every row-based shape.
"""

from typing import Any

from linkpool.core.pool.connect import column_names, cursor_to_dicts, row_count
from linkpool.models import NO_VALUE, ResultShape


def _first_row(cursor: Any) -> dict[str, Any]:
    names = column_names(cursor)
    if not names:
        return {}
    row = cursor.fetchone()
    if row is None:
        return {}
    return dict(zip(names, row, strict=True))


def _first_column(cursor: Any) -> list[Any]:
    if not cursor.description:
        return []
    return [row[0] for row in cursor.fetchall()]


def _first_cell(cursor: Any) -> Any:
    if not cursor.description:
        return NO_VALUE
    row = cursor.fetchone()
    if row is None:
        return NO_VALUE
    return row[0]


_SHAPERS = {
    ResultShape.AFFECTED_ROW_COUNT: row_count,
    ResultShape.ALL_ROWS: cursor_to_dicts,
    ResultShape.FIRST_ROW: _first_row,
    ResultShape.FIRST_COLUMN_ALL_ROWS: _first_column,
    ResultShape.FIRST_CELL_OF_FIRST_ROW: _first_cell,
}


def resolve_shape(shape: ResultShape | str) -> ResultShape:
    try:
        return ResultShape(shape)
    except ValueError:
        raise ValueError(f"Unsupported result shape: {shape!r}") from None


def shape_result(cursor: Any, shape: ResultShape | str = ResultShape.ALL_ROWS) -> Any:
    """Shape the executed cursor's result; fetches only what the shape needs."""
    return _SHAPERS[resolve_shape(shape)](cursor)
