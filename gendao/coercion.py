##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Typed-value coercion for business object attributes.

Attribute values of a `GenericBo` are whatever JSON produced: `None`, `bool`,
`int`, `float`, `str`, `list` or `dict`. This module converts such a value to a
requested semantic type (`TargetType`), raising `TypeConversionError` when the
value cannot be represented in that type.
"""

import json
import logging
from collections.abc import Mapping
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict

from gendao.exceptions import TypeConversionError


LOG = logging.getLogger(__name__)

TRUE_STRINGS = ("true", "t", "yes", "y", "on", "1")
FALSE_STRINGS = ("false", "f", "no", "n", "off", "0", "")


class TargetType(Enum):
    """
    Enum of the semantic types an attribute value can be coerced to.

    Attributes:
        STRING: Convert to `str`.
        INT: Convert to `int`.
        FLOAT: Convert to `float`.
        BOOL: Convert to `bool`.
        TIME: Convert to a `datetime`.
        LIST: Convert to `list`.
        DICT: Convert to `dict`.
    """

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    TIME = "time"
    LIST = "list"
    DICT = "dict"


def _fail(value: Any, target_type: TargetType, reason: str = None) -> TypeConversionError:
    msg = f"Cannot convert {value!r} ({type(value).__name__}) to {target_type.value}"
    if reason:
        msg += f": {reason}"
    return TypeConversionError(msg)


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise _fail(value, TargetType.STRING, str(exc)) from exc
    if isinstance(value, (list, tuple, Mapping)):
        return json.dumps(value, sort_keys=True, separators=(",", ":"))
    raise _fail(value, TargetType.STRING)


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise _fail(value, TargetType.INT, "not an integral number")
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 10)
        except ValueError:
            pass
        try:
            as_float = float(text)
        except ValueError as exc:
            raise _fail(value, TargetType.INT, "not a numeric string") from exc
        return _to_int(as_float)
    raise _fail(value, TargetType.INT)


def _to_float(value: Any) -> float:
    if isinstance(value, (bool, int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as exc:
            raise _fail(value, TargetType.FLOAT, "not a numeric string") from exc
    raise _fail(value, TargetType.FLOAT)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
        raise _fail(value, TargetType.BOOL, "not a boolean string")
    raise _fail(value, TargetType.BOOL)


def _to_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, bool):
        raise _fail(value, TargetType.TIME)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise _fail(value, TargetType.TIME, "timestamp out of range") from exc
    if isinstance(value, str):
        text = value.strip()
        # fromisoformat() only understands a trailing "Z" since Python 3.11
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as exc:
            raise _fail(value, TargetType.TIME, "not an ISO-8601 string") from exc
    raise _fail(value, TargetType.TIME)


def _load_json(value: str, target_type: TargetType, expected: type) -> Any:
    try:
        loaded = json.loads(value)
    except json.JSONDecodeError as exc:
        raise _fail(value, target_type, str(exc)) from exc
    if not isinstance(loaded, expected):
        raise _fail(value, target_type, f"JSON payload is not a {expected.__name__}")
    return loaded


def _to_list(value: Any) -> list:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    if isinstance(value, str):
        return _load_json(value, TargetType.LIST, list)
    raise _fail(value, TargetType.LIST)


def _to_dict(value: Any) -> dict:
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, str):
        return _load_json(value, TargetType.DICT, dict)
    raise _fail(value, TargetType.DICT)


CONVERTERS: Dict[TargetType, Callable[[Any], Any]] = {
    TargetType.STRING: _to_string,
    TargetType.INT: _to_int,
    TargetType.FLOAT: _to_float,
    TargetType.BOOL: _to_bool,
    TargetType.TIME: _to_time,
    TargetType.LIST: _to_list,
    TargetType.DICT: _to_dict,
}


def _resolve_target_type(target_type: Any) -> TargetType:
    if isinstance(target_type, TargetType):
        return target_type
    try:
        return TargetType(target_type)
    except ValueError as exc:
        raise TypeConversionError(f"Unknown target type {target_type!r}") from exc


def to_type(value: Any, target_type: TargetType = None) -> Any:
    """
    Convert `value` to the semantic type `target_type`.

    Args:
        value: The value to convert.
        target_type: The type to convert to. If None, `value` is returned as-is.

    Returns:
        The converted value. `None` always converts to `None`.

    Raises:
        TypeConversionError: If `value` cannot be represented as `target_type`.
    """
    if value is None or target_type is None:
        return value
    return CONVERTERS[_resolve_target_type(target_type)](value)


def zero_value(target_type: TargetType = None) -> Any:
    """
    Get the zero value for a target type.

    Args:
        target_type: The type to get the zero value for.

    Returns:
        The zero value of `target_type`, or None if the type has none.
    """
    zeros = {
        TargetType.STRING: "",
        TargetType.INT: 0,
        TargetType.FLOAT: 0.0,
        TargetType.BOOL: False,
        TargetType.LIST: [],
        TargetType.DICT: {},
    }
    if target_type is None:
        return None
    try:
        target_type = _resolve_target_type(target_type)
    except TypeConversionError:
        return None
    # Lists and dicts are mutable so hand out a fresh copy
    return type(zeros[target_type])() if target_type in zeros else None
