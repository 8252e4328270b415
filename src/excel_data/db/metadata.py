"""Binding of a model type's column declarations to a live table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

from excel_data.db import coercion
from excel_data.db.columns import ColumnDescriptor
from excel_data.db.declarations import DeclaredProperty, model_declaration
from excel_data.db.host import LiveTable
from excel_data.errors import ConfigurationError, MissingColumnError, UnsupportedTypeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableMetadata:
    """Resolved columns of one model type against one live table."""

    model_type: type
    table_name: str
    columns: Mapping[str, ColumnDescriptor] = field(default_factory=dict)
    key_property: str | None = None

    @property
    def key_column(self) -> ColumnDescriptor:
        if self.key_property is None:
            raise ConfigurationError(
                f"Model {self.model_type.__name__} has no key column in table {self.table_name!r}"
            )
        return self.columns[self.key_property]

    @property
    def writable_columns(self) -> list[ColumnDescriptor]:
        return [column for column in self.columns.values() if not column.read_only]

    def column(self, property_name: str) -> ColumnDescriptor:
        try:
            return self.columns[property_name]
        except KeyError:
            raise ConfigurationError(
                f"Property {property_name!r} of {self.model_type.__name__} is not mapped to a column"
            ) from None


def _locate(declared: DeclaredProperty, table: LiveTable, headers: list[str]) -> tuple[str, int] | None:
    marker = declared.column
    if marker.name is not None:
        if marker.name in headers:
            return marker.name, headers.index(marker.name) + 1
        folded = [header.casefold() for header in headers]
        if marker.name.casefold() in folded:
            position = folded.index(marker.name.casefold()) + 1
            return headers[position - 1], position
        raise MissingColumnError(table.name, marker.name)
    if marker.index is not None:
        if marker.index > len(headers):
            raise MissingColumnError(table.name, marker.index)
        return headers[marker.index - 1], marker.index
    return None


def resolve(model_type: type, table: LiveTable) -> TableMetadata:
    """Resolve the column declarations of ``model_type`` against ``table``.

    Columns are located by declared name (case-insensitive, like Excel's own
    lookup) or, failing that, by declared position. The key is the first
    property marked ``key=True``; without one, the property bound to column 1.

    Raises
    ------
    ConfigurationError
        If the model declares no table name or two properties share a column.
    MissingColumnError
        If a declared name or position does not exist in the table.
    UnsupportedTypeError
        If a mapped property's type has no conversion rule.
    """
    declaration = model_declaration(model_type)
    headers = list(table.columns)

    columns: dict[str, ColumnDescriptor] = {}
    taken: dict[int, str] = {}
    key_property = None
    for declared in declaration.properties:
        located = _locate(declared, table, headers)
        if located is None:
            continue
        name, position = located
        if position in taken:
            raise ConfigurationError(
                f"Properties {taken[position]!r} and {declared.property_name!r} "
                f"both map to column {name!r} of table {table.name!r}"
            )
        if not coercion.is_supported(declared.declared_type):
            raise UnsupportedTypeError(declared.declared_type)
        is_key = declared.column.key and key_property is None
        if is_key:
            key_property = declared.property_name
        elif declared.column.key:
            logger.warning(
                "Ignoring key marker on %s.%s, key is already %s",
                model_type.__name__,
                declared.property_name,
                key_property,
            )
        taken[position] = declared.property_name
        columns[declared.property_name] = ColumnDescriptor(
            property_name=declared.property_name,
            name=name,
            position=position,
            value_type=declared.declared_type,
            read_only=declared.column.read_only,
            is_key=is_key,
        )

    if key_property is None and 1 in taken:
        key_property = taken[1]
        columns[key_property] = replace(columns[key_property], is_key=True)

    logger.debug(
        "Resolved %d columns of %s against table %s (key: %s)",
        len(columns),
        model_type.__name__,
        table.name,
        key_property,
    )
    return TableMetadata(
        model_type=model_type,
        table_name=declaration.table_name,
        columns=MappingProxyType(columns),
        key_property=key_property,
    )
