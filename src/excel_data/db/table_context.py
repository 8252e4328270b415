"""CRUD access to one Excel table through one model type.

Rows are read from and written to the live table on every call; nothing is
cached apart from the resolved column metadata. Row positions shift when rows
are added or deleted, so rows are always located again by key.

Two contexts writing to the same table (from other threads, processes or
Excel users) are not coordinated: two concurrent ``save`` calls for new
models can both see the key as missing and both pick the same next key.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from excel_data.db import locator, translator
from excel_data.db.coercion import is_integer_type
from excel_data.db.columns import ColumnDescriptor
from excel_data.db.declarations import model_declaration
from excel_data.db.host import Host, LiveTable
from excel_data.db.interaction import suppressed_interaction
from excel_data.db.metadata import TableMetadata, resolve
from excel_data.db.workbook import WorkbookHost, find_table
from excel_data.settings import Settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class TableContext(Generic[ModelT]):
    """A model type bound to a live table.

    Parameters
    ----------
    model_type : type[ModelT]
        Pydantic model or dataclass declaring a table name and columns.
        Must be constructible without arguments.
    table : LiveTable
        The table the model's rows live in.
    host : Host
        The application owning the table.
    settings : Settings | None
        Overrides the process-wide settings.

    Raises
    ------
    ConfigurationError
        If the model's declarations do not fit the table.
    """

    def __init__(
        self,
        model_type: type[ModelT],
        table: LiveTable,
        host: Host,
        *,
        settings: Settings | None = None,
    ) -> None:
        self.model_type = model_type
        self.table = table
        self.host = host
        self.settings = settings
        self.metadata: TableMetadata = resolve(model_type, table)

    @classmethod
    def from_workbook(
        cls,
        model_type: type[ModelT],
        workbook: Workbook,
        host: Host | None = None,
        *,
        settings: Settings | None = None,
    ) -> TableContext[ModelT]:
        """Bind to the model's table, searching every worksheet of ``workbook``."""
        table = find_table(workbook, model_declaration(model_type).table_name)
        return cls(model_type, table, host or WorkbookHost(), settings=settings)

    @classmethod
    def from_worksheet(
        cls,
        model_type: type[ModelT],
        worksheet: Worksheet,
        host: Host | None = None,
        *,
        settings: Settings | None = None,
    ) -> TableContext[ModelT]:
        """Bind to the model's table on ``worksheet`` only."""
        table = find_table(worksheet, model_declaration(model_type).table_name)
        return cls(model_type, table, host or WorkbookHost(), settings=settings)

    # -----------------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------------

    def save(self, model: ModelT) -> None:
        """Update the row holding the model's key, or append a new row.

        A new model with an integer key gets ``max(existing keys) + 1`` as its
        key before it is written. Read-only columns are never written.
        """
        key = self.metadata.key_column
        with suppressed_interaction(self.host, self.settings):
            position = self._find_position(model)
            if position == locator.NOT_FOUND:
                if is_integer_type(key.value_type):
                    next_key = int(self.host.max(self.table.read_column(key.position))) + 1
                    setattr(model, key.property_name, next_key)
                position = self.table.append_row()
                logger.info("Creating row %d in table %s", position, self.table.name)
            else:
                logger.info("Updating row %d in table %s", position, self.table.name)
            self._write_row(position, model)

    def delete(self, model: ModelT) -> None:
        """Remove the row holding the model's key; a missing row is ignored."""
        with suppressed_interaction(self.host, self.settings):
            position = self._find_position(model)
            if position == locator.NOT_FOUND:
                logger.debug(
                    "No row with key %r in table %s, nothing to delete",
                    getattr(model, self.metadata.key_column.property_name),
                    self.table.name,
                )
                return
            self.table.delete_row(position)
            logger.info("Deleted row %d from table %s", position, self.table.name)

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def get_all(self) -> list[ModelT]:
        """Every row of the table body, top to bottom."""
        return [
            translator.model_from_row(self.metadata, locator.to_row(values))
            for values in self.table.read_body()
        ]

    def get_by_id(self, key_value: Any) -> ModelT | None:
        """The first row whose key equals ``key_value``, or None."""
        return self.get_by_column(key_value, self.metadata.key_column)

    def get_by_column(self, value: Any, column: ColumnDescriptor | str) -> ModelT | None:
        """The first row whose ``column`` equals ``value``, or None.

        ``column`` is a resolved descriptor or the name of a mapped property.
        """
        if isinstance(column, str):
            column = self.metadata.column(column)
        position = locator.find_position_by_key(self.table, column.position, value)
        if position == locator.NOT_FOUND:
            return None
        return self.get_by_row_index(position)

    def get_by_row_index(self, position: int) -> ModelT:
        """The row at 1-based body ``position``.

        Raises
        ------
        MissingRowError
            If ``position`` is outside the table body.
        """
        return translator.model_from_row(self.metadata, locator.fetch_row(self.table, position))

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _find_position(self, model: ModelT) -> int:
        key = self.metadata.key_column
        return locator.find_position_by_key(
            self.table, key.position, getattr(model, key.property_name)
        )

    def _write_row(self, position: int, model: ModelT) -> None:
        for column_position, value in translator.row_from_model(self.metadata, model).items():
            self.table.write_cell(position, column_position, value)
