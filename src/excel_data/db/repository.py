"""Repository base class over a :class:`TableContext`."""

from typing import Any, Generic

from excel_data.db.columns import ColumnDescriptor
from excel_data.db.table_context import ModelT, TableContext


class BaseRepository(Generic[ModelT]):
    """Forwards every call to its table context; subclass to add queries."""

    def __init__(self, table_context: TableContext[ModelT]) -> None:
        self.table_context = table_context

    def save(self, model: ModelT) -> None:
        self.table_context.save(model)

    def delete(self, model: ModelT) -> None:
        self.table_context.delete(model)

    def get_all(self) -> list[ModelT]:
        return self.table_context.get_all()

    def get_by_id(self, key_value: Any) -> ModelT | None:
        return self.table_context.get_by_id(key_value)

    def get_by_column(self, value: Any, column: ColumnDescriptor | str) -> ModelT | None:
        return self.table_context.get_by_column(value, column)

    def get_by_row_index(self, position: int) -> ModelT:
        return self.table_context.get_by_row_index(position)
