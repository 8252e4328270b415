"""openpyxl backend for Excel tables (Insert > Table ranges).

Opens workbooks, finds named tables across worksheets and exposes each one
as a :class:`SheetTable` addressed by 1-based body row positions.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Sequence

import openpyxl
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.utils.cell import range_boundaries
from openpyxl.worksheet.table import Table
from openpyxl.worksheet.worksheet import Worksheet

from excel_data.errors import MissingColumnError, MissingRowError, MissingTableError

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")


def open_workbook(path: str | Path) -> Workbook:
    """Open an Excel workbook for reading and writing.

    Parameters
    ----------
    path : str | Path
        Path to the .xlsx/.xlsm file.

    Returns
    -------
    Workbook
        The loaded workbook, with VBA kept for macro-enabled files.

    Raises
    ------
    FileNotFoundError
        If the workbook file does not exist.
    ValueError
        If the file extension is not an Excel workbook format.
    """
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Workbook not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported file extension: {suffix}")
    return openpyxl.load_workbook(str(path), keep_vba=suffix in (".xlsm", ".xltm"))


def find_table(container: Workbook | Worksheet, name: str) -> SheetTable:
    """Find the table called ``name`` in a workbook or a single worksheet.

    Raises
    ------
    MissingTableError
        If no worksheet in ``container`` holds a table with that name.
    """
    worksheets = container.worksheets if isinstance(container, Workbook) else [container]
    for worksheet in worksheets:
        for table in getattr(worksheet, "tables", {}).values():
            if name in (table.name, table.displayName):
                logger.debug("Found table %s on sheet %s (%s)", name, worksheet.title, table.ref)
                return SheetTable(worksheet, table)
    raise MissingTableError(name)


class SheetTable:
    """A worksheet table seen as a header plus a body of rows.

    Body positions are 1-based and count from the first row below the header.
    A body whose single row is entirely empty counts as no rows at all: it is
    the insert row Excel keeps in an emptied table.
    """

    def __init__(self, worksheet: Worksheet, table: Table) -> None:
        self.worksheet = worksheet
        self.table = table

    @property
    def name(self) -> str:
        return self.table.displayName or self.table.name

    @property
    def columns(self) -> list[str]:
        min_col, min_row, max_col, _ = self._bounds()
        if not self._header_rows():
            return [column.name for column in self.table.tableColumns]
        header = next(
            self.worksheet.iter_rows(
                min_row=min_row, max_row=min_row, min_col=min_col, max_col=max_col, values_only=True
            )
        )
        return [
            str(value) if value is not None else f"Column{offset}"
            for offset, value in enumerate(header, start=1)
        ]

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def row_count(self) -> int:
        first, last = self._body_span()
        physical = last - first + 1
        if physical == 1 and all(value is None for value in self._sheet_row(first)):
            return 0
        return max(physical, 0)

    def read_body(self) -> list[tuple[Any, ...]]:
        if not self.row_count():
            return []
        first, last = self._body_span()
        min_col, _, max_col, _ = self._bounds()
        return list(
            self.worksheet.iter_rows(
                min_row=first, max_row=last, min_col=min_col, max_col=max_col, values_only=True
            )
        )

    def read_row(self, position: int) -> tuple[Any, ...]:
        self._check_row(position, self.row_count())
        first, _ = self._body_span()
        return self._sheet_row(first + position - 1)

    def read_column(self, position: int) -> list[Any]:
        self._check_column(position)
        return [row[position - 1] for row in self.read_body()]

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def write_cell(self, row_position: int, column_position: int, value: Any) -> None:
        first, last = self._body_span()
        self._check_row(row_position, last - first + 1)
        self._check_column(column_position)
        min_col, _, _, _ = self._bounds()
        if value == "\0":
            # Empty Char cells read back as NUL, which worksheets cannot hold.
            value = None
        # Worksheet.cell(value=None) leaves the old value in place.
        cell = self.worksheet.cell(row=first + row_position - 1, column=min_col + column_position - 1)
        cell.value = value

    def append_row(self) -> int:
        """Add an empty row at the bottom of the body and return its position."""
        count = self.row_count()
        first, last = self._body_span()
        if count == 0 and last == first:
            return 1
        min_col, min_row, max_col, max_row = self._bounds()
        self._shift_below(last + 1, rows=1)
        self._set_ref(min_col, min_row, max_col, max_row + 1)
        return count + 1

    def delete_row(self, position: int) -> None:
        """Remove a body row, moving the cells below it up by one row."""
        count = self.row_count()
        self._check_row(position, count)
        first, _ = self._body_span()
        sheet_row = first + position - 1
        min_col, min_row, max_col, max_row = self._bounds()
        for column in range(min_col, max_col + 1):
            self.worksheet.cell(row=sheet_row, column=column).value = None
        if count == 1:
            return
        self._shift_below(sheet_row + 1, rows=-1)
        self._set_ref(min_col, min_row, max_col, max_row - 1)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _bounds(self) -> tuple[int, int, int, int]:
        return range_boundaries(self.table.ref)

    def _header_rows(self) -> int:
        count = self.table.headerRowCount
        return 1 if count is None else count

    def _totals_rows(self) -> int:
        return self.table.totalsRowCount or 0

    def _body_span(self) -> tuple[int, int]:
        _, min_row, _, max_row = self._bounds()
        return min_row + self._header_rows(), max_row - self._totals_rows()

    def _sheet_row(self, sheet_row: int) -> tuple[Any, ...]:
        min_col, _, max_col, _ = self._bounds()
        return next(
            self.worksheet.iter_rows(
                min_row=sheet_row, max_row=sheet_row, min_col=min_col, max_col=max_col, values_only=True
            )
        )

    def _check_row(self, position: int, row_count: int) -> None:
        if not 1 <= position <= row_count:
            raise MissingRowError(position, row_count)

    def _check_column(self, position: int) -> None:
        min_col, _, max_col, _ = self._bounds()
        if not 1 <= position <= max_col - min_col + 1:
            raise MissingColumnError(self.name, position)

    def _shift_below(self, start_row: int, rows: int) -> None:
        # Cells under the table move with it, limited to the table's columns.
        bottom = self.worksheet.max_row
        if start_row > bottom:
            return
        min_col, _, max_col, _ = self._bounds()
        cells = f"{get_column_letter(min_col)}{start_row}:{get_column_letter(max_col)}{bottom}"
        self.worksheet.move_range(cells, rows=rows)

    def _set_ref(self, min_col: int, min_row: int, max_col: int, max_row: int) -> None:
        first, last = get_column_letter(min_col), get_column_letter(max_col)
        self.table.ref = f"{first}{min_row}:{last}{max_row}"
        if self.table.autoFilter is not None:
            self.table.autoFilter.ref = f"{first}{min_row}:{last}{max_row - self._totals_rows()}"
        logger.debug("Table %s now spans %s", self.name, self.table.ref)


class WorkbookHost:
    """In-process host for openpyxl workbooks.

    openpyxl has no user interface, so the interactive flag is plain state;
    it still lets :class:`~excel_data.db.table_context.TableContext` run the
    same suppress/restore cycle it runs against a live Excel application.
    """

    def __init__(self, interactive: bool = True) -> None:
        self._interactive = interactive

    def get_interactive(self) -> bool:
        return self._interactive

    def set_interactive(self, interactive: bool) -> None:
        self._interactive = bool(interactive)

    def max(self, values: Sequence[Any]) -> float:
        """Largest number in ``values``, ignoring text and booleans like Excel's MAX."""
        numbers = [
            value
            for value in values
            if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)
        ]
        return max(numbers, default=0)
