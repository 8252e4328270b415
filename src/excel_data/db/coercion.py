"""Conversion between raw cell values and declared property types.

Raw values are whatever openpyxl (or another host) hands back for a cell:
``str``, ``int``, ``float``, ``bool``, ``datetime`` or ``None`` for an empty
cell. Declared types are the annotations of mapped model properties.
"""

from __future__ import annotations

import logging
import math
import types
import typing
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, NewType

from openpyxl.utils.datetime import from_excel

from excel_data.errors import ConversionError, UnsupportedTypeError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Fixed-width integer and character types
# ---------------------------------------------------------------------------
Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
UInt8 = NewType("UInt8", int)
UInt16 = NewType("UInt16", int)
UInt32 = NewType("UInt32", int)
UInt64 = NewType("UInt64", int)
Char = NewType("Char", str)

INTEGER_RANGES: dict[Any, tuple[int, int] | None] = {
    int: None,
    Int8: (-(2**7), 2**7 - 1),
    Int16: (-(2**15), 2**15 - 1),
    Int32: (-(2**31), 2**31 - 1),
    Int64: (-(2**63), 2**63 - 1),
    UInt8: (0, 2**8 - 1),
    UInt16: (0, 2**16 - 1),
    UInt32: (0, 2**32 - 1),
    UInt64: (0, 2**64 - 1),
}

_UNION_TYPES = (typing.Union, types.UnionType)


def unwrap_optional(declared_type: Any) -> tuple[Any, bool]:
    """Split ``T | None`` into ``(T, True)``; other types give ``(T, False)``."""
    if typing.get_origin(declared_type) in _UNION_TYPES:
        args = [arg for arg in typing.get_args(declared_type) if arg is not type(None)]
        if len(args) == 1 and len(args) < len(typing.get_args(declared_type)):
            return args[0], True
    return declared_type, False


def is_integer_type(declared_type: Any) -> bool:
    """True for ``int``, the fixed-width integer aliases and their optionals."""
    base, _ = unwrap_optional(declared_type)
    return base in INTEGER_RANGES


# ---------------------------------------------------------------------------
# Scalar converters
# ---------------------------------------------------------------------------


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _to_float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    raise ConversionError(f"Cannot convert value {value!r} to number", value)


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal(0)
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ConversionError(f"Cannot convert value {value!r} to number", value)
        return Decimal(repr(value))
    if isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            pass
        else:
            if result.is_finite():
                return result
    raise ConversionError(f"Cannot convert value {value!r} to number", value)


def _to_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "false"):
            return text == "true"
    raise ConversionError(f"Cannot convert value {value!r} to boolean", value)


def _to_char(value: Any) -> str:
    if value is None:
        return "\0"
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return chr(value)
        except (ValueError, OverflowError):
            pass
    elif isinstance(value, str) and len(value) == 1:
        return value
    raise ConversionError(f"Cannot convert value {value!r} to a single character", value)


def _integer_converter(bounds: tuple[int, int] | None) -> Callable[[Any], int]:
    def convert(value: Any) -> int:
        if value is None:
            return 0
        number = _parse_integer(value)
        if bounds is not None and not bounds[0] <= number <= bounds[1]:
            raise ConversionError(f"Cannot convert value {value!r} to number", value)
        return number

    return convert


def _parse_integer(value: Any) -> int:
    if isinstance(value, int):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            raise ConversionError(f"Cannot convert value {value!r} to number", value) from None
    if isinstance(value, (float, Decimal)):
        try:
            # Half-to-even, as the host's own numeric conversion does.
            return int(round(value))
        except (ValueError, OverflowError):
            pass
    raise ConversionError(f"Cannot convert value {value!r} to number", value)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        result = from_excel(value)
        if isinstance(result, datetime):
            return result
        if isinstance(result, date):
            return datetime.combine(result, time())
        raise ValueError(f"{value!r} is not a date serial")
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip())
    raise ValueError(f"{value!r} is not a date")


def _to_datetime(value: Any) -> datetime:
    if value is None:
        return datetime.min
    try:
        return _parse_datetime(value)
    except (ValueError, TypeError, OverflowError):
        logger.warning("Cannot convert %r to a date, using %s", value, datetime.min)
        return datetime.min


def _to_date(value: Any) -> date:
    if value is None:
        return date.min
    try:
        return _parse_datetime(value).date()
    except (ValueError, TypeError, OverflowError):
        logger.warning("Cannot convert %r to a date, using %s", value, date.min)
        return date.min


_CONVERTERS: dict[Any, Callable[[Any], Any]] = {
    str: _to_str,
    float: _to_float,
    Decimal: _to_decimal,
    bool: _to_bool,
    datetime: _to_datetime,
    date: _to_date,
    Char: _to_char,
    **{int_type: _integer_converter(bounds) for int_type, bounds in INTEGER_RANGES.items()},
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def is_supported(declared_type: Any) -> bool:
    """True if :func:`to_typed` has a conversion rule for ``declared_type``."""
    base, _ = unwrap_optional(declared_type)
    return base in _CONVERTERS


def to_typed(declared_type: Any, value: Any) -> Any:
    """Convert a raw cell value to ``declared_type``.

    Parameters
    ----------
    declared_type : Any
        Declared property type, possibly ``T | None``.
    value : Any
        Raw cell value; ``None`` for an empty cell.

    Returns
    -------
    Any
        The converted value. An empty cell gives ``None`` for optional types
        and the type's zero value otherwise. Date and datetime values that
        cannot be parsed give ``date.min`` / ``datetime.min``.

    Raises
    ------
    ConversionError
        If a numeric, boolean or character value cannot be converted.
    UnsupportedTypeError
        If ``declared_type`` has no conversion rule.
    """
    base, optional = unwrap_optional(declared_type)
    converter = _CONVERTERS.get(base)
    if converter is None:
        raise UnsupportedTypeError(declared_type)
    if optional and value is None:
        return None
    return converter(value)


def to_raw(value: Any) -> Any:
    """Return the value to write into a cell for a typed property value."""
    return value
