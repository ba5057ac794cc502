##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Utility functions shared by the gendao backends.

These helpers convert row values into a format the storage can hold (JSON-encoded
hash fields for key-value stores, JSON text for nested values in relational
stores) and back, and provide the client-side filtering and sorting used by
backends that can't query on arbitrary fields.
"""

import base64
import json
import logging
from functools import cmp_to_key
from typing import Any, Dict, Iterable, List, Mapping, Optional

from gendao.bo.generic_bo import dump_json


LOG = logging.getLogger(__name__)


def _to_text(value: Any) -> Any:
    """Decode a `bytes` value returned by a client that doesn't decode responses."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return value


def serialize_hash_fields(row: Mapping[str, Any]) -> Dict[str, str]:
    """
    Convert a row into a mapping of field -> JSON text, suitable for a hash.

    Every value is JSON-encoded so that its type survives the round trip (a hash
    can only hold strings).

    Args:
        row: The row to serialize.

    Returns:
        A dictionary of JSON-encoded values.
    """
    return {name: dump_json(value).decode("utf-8") for name, value in row.items()}


def deserialize_hash_fields(data: Mapping[Any, Any]) -> Dict[str, Any]:
    """
    Convert the fields of a hash back into a row.

    Values that aren't valid JSON (written by something other than gendao) are kept
    as plain strings.

    Args:
        data: The hash as returned by the client. Keys and values may be `bytes`.

    Returns:
        The decoded row.
    """
    row = {}
    for key, val in data.items():
        key, val = _to_text(key), _to_text(val)
        try:
            row[key] = json.loads(val)
        except (TypeError, ValueError):
            LOG.debug(f"Field '{key}' doesn't hold JSON, keeping the raw value.")
            row[key] = val
    return row


def to_sql_value(value: Any) -> Any:
    """
    Convert a row value into something sqlite3 can bind.

    Lists and dicts are stored as JSON text; everything else is bound as-is.
    Columns meant to hold such values should be declared with the `JSON` type
    so they're decoded again on read (see `load_sql_json`).

    Args:
        value: The value to convert.

    Returns:
        The value to bind in a query.
    """
    if isinstance(value, (list, dict)):
        return dump_json(value).decode("utf-8")
    return value


def load_sql_json(value: bytes) -> Any:
    """
    Decode a value read from a column declared with the `JSON` type.

    Registered as the sqlite3 converter for `JSON` columns. Text that isn't
    valid JSON is returned as a plain string.

    Args:
        value: The raw column value, as handed to sqlite3 converters.

    Returns:
        The decoded value.
    """
    text = value.decode("utf-8")
    try:
        return json.loads(text)
    except ValueError:
        LOG.debug(f"Value '{text}' of a JSON column isn't JSON, keeping it as text.")
        return text


def from_sql_value(value: Any) -> Any:
    """
    Convert a value read from sqlite3 back into a row value.

    Text is never decoded here, only columns declared `JSON` are (by the
    connection). Blobs become UTF-8 text when they decode cleanly and base64
    text otherwise; anything else is returned unchanged.

    Args:
        value: The value read from the database.

    Returns:
        The row value.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        value = bytes(value)
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return base64.b64encode(value).decode("ascii")
    return value


def serialize_sql_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert every value of a row with `to_sql_value`."""
    return {name: to_sql_value(value) for name, value in row.items()}


def deserialize_sql_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Convert a row read from sqlite3 (such as a `sqlite3.Row`) into a dictionary of row values.

    Args:
        row: The row read from the database.

    Returns:
        The decoded row.
    """
    return {key: from_sql_value(row[key]) for key in row.keys()}


def value_matches(actual: Any, expected: Any) -> bool:
    """
    Tell whether a single row value satisfies a filter value.

    A list filter value means "any of these", None means "missing or null", and
    anything else means equality.

    Args:
        actual: The value of the row.
        expected: The value of the filter.

    Returns:
        True if the value satisfies the filter, False otherwise.
    """
    if isinstance(expected, list):
        return any(value_matches(actual, option) for option in expected)
    if expected is None:
        return actual is None
    if isinstance(expected, bool) or isinstance(actual, bool):
        return type(expected) is type(actual) and expected == actual
    return actual == expected


def row_matches(row: Mapping[str, Any], filters: Optional[Mapping[str, Any]]) -> bool:
    """
    Tell whether a row satisfies every condition of a filter.

    Args:
        row: The row to check.
        filters: Column name -> expected value. None or empty matches everything.

    Returns:
        True if the row satisfies the filter, False otherwise.
    """
    if not filters:
        return True
    return all(value_matches(row.get(column), expected) for column, expected in filters.items())


def _type_rank(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, (bool, int, float)):
        return 1
    if isinstance(value, str):
        return 2
    return 3


def compare_values(left: Any, right: Any) -> int:
    """
    Compare two row values for sorting.

    Nulls sort first, then numbers, then strings, then everything else (compared
    by their canonical JSON encoding).

    Args:
        left: The first value.
        right: The second value.

    Returns:
        A negative number, zero, or a positive number like a classic `cmp` function.
    """
    left_rank, right_rank = _type_rank(left), _type_rank(right)
    if left_rank != right_rank:
        return left_rank - right_rank
    if left_rank == 0:
        return 0
    if left_rank == 3:
        left, right = dump_json(left), dump_json(right)
    return (left > right) - (left < right)


def sort_rows(rows: Iterable[Mapping[str, Any]], sorting: Optional[Mapping[str, int]]) -> List[Mapping[str, Any]]:
    """
    Sort rows on the client side.

    Args:
        rows: The rows to sort.
        sorting: Ordered column name -> 1 (ascending) or -1 (descending). None or
            empty keeps the original order.

    Returns:
        The sorted rows. Rows comparing equal keep their original order.
    """
    rows = list(rows)
    if not sorting:
        return rows

    def _compare(left: Mapping[str, Any], right: Mapping[str, Any]) -> int:
        for column, direction in sorting.items():
            result = compare_values(left.get(column), right.get(column))
            if result:
                return result * direction
        return 0

    return sorted(rows, key=cmp_to_key(_compare))
