"""Row lookup inside a table body."""

from typing import Any

from excel_data.db.host import LiveTable
from excel_data.errors import MissingRowError

NOT_FOUND = 0

Row = dict[int, Any]


def same_value(cell: Any, key_value: Any) -> bool:
    """Equality of a cell value and a key, keeping booleans apart from numbers."""
    if isinstance(cell, bool) != isinstance(key_value, bool):
        return False
    return cell == key_value


def find_position_by_key(table: LiveTable, column_position: int, key_value: Any) -> int:
    """Return the 1-based body position of the first row holding ``key_value``.

    Returns :data:`NOT_FOUND` (0) when no row matches, the body is empty or
    ``key_value`` is None. Later rows with the same value are never returned.
    """
    if key_value is None:
        return NOT_FOUND
    for position, cell in enumerate(table.read_column(column_position), start=1):
        if same_value(cell, key_value):
            return position
    return NOT_FOUND


def fetch_row(table: LiveTable, position: int) -> Row:
    """Read one body row as a mapping of 1-based column position to raw value.

    Raises
    ------
    MissingRowError
        If ``position`` is outside the current table body.
    """
    row_count = table.row_count()
    if not 1 <= position <= row_count:
        raise MissingRowError(position, row_count)
    return to_row(table.read_row(position))


def to_row(values: tuple[Any, ...]) -> Row:
    return {position: value for position, value in enumerate(values, start=1)}
