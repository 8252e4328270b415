"""Column and table declarations for model types.

A model binds to an Excel table through a class-level table name and
``Annotated`` metadata on each mapped property::

    @table_name("Customers")
    class Customer(BaseModel):
        id: Annotated[int, Column(index=1, key=True)] = 0
        name: Annotated[str, Column(name="Name")] = ""
        archived: Annotated[bool, Column(name="Archived", read_only=True)] = False

Properties without a :class:`Column` marker are not mapped.
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass
from functools import cache
from typing import Annotated, Any, TypeVar

from pydantic import BaseModel

from excel_data.errors import ConfigurationError

TABLE_NAME_ATTR = "__table_name__"

ModelT = TypeVar("ModelT")


@dataclass(frozen=True)
class Column:
    """Per-property column marker.

    Parameters
    ----------
    name : str | None
        Header text of the column in the table.
    index : int | None
        1-based column position, used when ``name`` is not given.
    read_only : bool
        Never write this property back to the table.
    key : bool
        Use this property to locate rows.
    """

    name: str | None = None
    index: int | None = None
    read_only: bool = False
    key: bool = False

    def __post_init__(self) -> None:
        if self.index is not None and self.index < 1:
            raise ConfigurationError(f"Column index must be >= 1, got {self.index}")


@dataclass(frozen=True)
class DeclaredProperty:
    """A model property carrying a :class:`Column` marker."""

    property_name: str
    declared_type: Any
    column: Column


@dataclass(frozen=True)
class ModelDeclaration:
    """Static, per-type view of a model's table binding."""

    model_type: type
    table_name: str
    properties: tuple[DeclaredProperty, ...]


def table_name(name: str):
    """Class decorator recording the Excel table a model is stored in."""
    if not name:
        raise ConfigurationError("Table name must be a non-empty string")

    def decorate(cls: type[ModelT]) -> type[ModelT]:
        setattr(cls, TABLE_NAME_ATTR, name)
        return cls

    return decorate


def _split_annotated(hint: Any) -> tuple[Any, tuple[Any, ...]]:
    if typing.get_origin(hint) is Annotated:
        declared_type, *metadata = typing.get_args(hint)
        return declared_type, tuple(metadata)
    return hint, ()


def _column_marker(metadata: typing.Iterable[Any]) -> Column | None:
    for item in metadata:
        if isinstance(item, Column):
            return item
    return None


def _declared_properties(model_type: type) -> list[DeclaredProperty]:
    declared = []
    if isinstance(model_type, type) and issubclass(model_type, BaseModel):
        for field_name, field_info in model_type.model_fields.items():
            marker = _column_marker(field_info.metadata)
            if marker is not None:
                declared.append(DeclaredProperty(field_name, field_info.annotation, marker))
    elif dataclasses.is_dataclass(model_type):
        hints = typing.get_type_hints(model_type, include_extras=True)
        for field in dataclasses.fields(model_type):
            declared_type, metadata = _split_annotated(hints[field.name])
            marker = _column_marker(metadata)
            if marker is not None:
                declared.append(DeclaredProperty(field.name, declared_type, marker))
    else:
        raise ConfigurationError(
            f"{model_type!r} is neither a pydantic model nor a dataclass"
        )
    return declared


@cache
def model_declaration(model_type: type) -> ModelDeclaration:
    """Collect the table name and column markers of ``model_type``.

    Built once per model type and cached for the life of the process.

    Raises
    ------
    ConfigurationError
        If the type carries no table name or is not a supported model kind.
    """
    name = getattr(model_type, TABLE_NAME_ATTR, None)
    if not name:
        raise ConfigurationError(f"Model {model_type.__name__} does not declare a table name")
    return ModelDeclaration(
        model_type=model_type,
        table_name=name,
        properties=tuple(_declared_properties(model_type)),
    )
