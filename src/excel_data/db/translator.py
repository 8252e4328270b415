"""Translation between table rows and model instances."""

from typing import Any

from excel_data.db.coercion import to_raw, to_typed
from excel_data.db.locator import Row
from excel_data.db.metadata import TableMetadata
from excel_data.errors import ConversionError


def model_from_row(metadata: TableMetadata, row: Row) -> Any:
    """Build a model instance from a raw row.

    Raises
    ------
    ConversionError
        If a cell cannot be converted; the error names the column and value.
        No partially filled model is returned.
    """
    model = metadata.model_type()
    for column in metadata.columns.values():
        value = row.get(column.position)
        try:
            typed = to_typed(column.value_type, value)
        except ConversionError as exc:
            raise ConversionError(
                f"Cannot read value {value!r} from column {column.name!r}: {exc}",
                value,
                column=column.name,
            ) from exc
        setattr(model, column.property_name, typed)
    return model


def row_from_model(metadata: TableMetadata, model: Any) -> dict[int, Any]:
    """Stage the writable property values of ``model`` by column position."""
    return {
        column.position: to_raw(getattr(model, column.property_name))
        for column in metadata.writable_columns
    }
