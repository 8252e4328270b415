"""Exception hierarchy for the Excel table mapping layer."""

from typing import Any


class ExcelDataError(Exception):
    """Base class for every error raised by excel_data."""


class ConfigurationError(ExcelDataError):
    """A model type or its column declarations do not fit the live table."""


class MissingTableError(ConfigurationError, LookupError):
    """The named table does not exist in the workbook or worksheet."""

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        super().__init__(f"Table {table_name!r} not found")


class MissingColumnError(ConfigurationError, IndexError):
    """A declared column name or position does not exist in the table."""

    def __init__(self, table_name: str, column: str | int) -> None:
        self.table_name = table_name
        self.column = column
        super().__init__(f"Column {column!r} not found in table {table_name!r}")


class MissingRowError(ExcelDataError, IndexError):
    """A row position lies outside the current table body."""

    def __init__(self, position: int, row_count: int) -> None:
        self.position = position
        self.row_count = row_count
        super().__init__(f"Row {position} not found (table body has {row_count} rows)")


class ConversionError(ExcelDataError, ValueError):
    """A raw cell value cannot be converted to the declared property type."""

    def __init__(self, message: str, value: Any, column: str | None = None) -> None:
        self.value = value
        self.column = column
        super().__init__(message)


class UnsupportedTypeError(ExcelDataError, TypeError):
    """A declared property type has no conversion rule."""

    def __init__(self, declared_type: Any) -> None:
        self.declared_type = declared_type
        name = getattr(declared_type, "__name__", repr(declared_type))
        super().__init__(f"Conversion to {name} is not supported")


class InteractionTimeoutError(ExcelDataError, TimeoutError):
    """The host could not be switched to non-interactive mode in time."""
