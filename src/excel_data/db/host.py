"""Protocols for the live table and its host application."""

from typing import Any, Protocol, Sequence


class LiveTable(Protocol):
    """A named table in a workbook, addressed by 1-based body row positions."""

    @property
    def name(self) -> str: ...

    @property
    def columns(self) -> Sequence[str]: ...

    def row_count(self) -> int: ...

    def read_body(self) -> list[tuple[Any, ...]]: ...

    def read_row(self, position: int) -> tuple[Any, ...]: ...

    def read_column(self, position: int) -> list[Any]: ...

    def write_cell(self, row_position: int, column_position: int, value: Any) -> None: ...

    def append_row(self) -> int: ...

    def delete_row(self, position: int) -> None: ...


class Host(Protocol):
    """The application owning the workbook."""

    def get_interactive(self) -> bool: ...

    def set_interactive(self, interactive: bool) -> None: ...

    def max(self, values: Sequence[Any]) -> float: ...
