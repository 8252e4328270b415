"""Resolved column metadata."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ColumnDescriptor:
    """One model property bound to one column of a live table."""

    property_name: str
    name: str
    position: int
    value_type: Any
    read_only: bool = False
    is_key: bool = False
