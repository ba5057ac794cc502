##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Shared orchestration for `GenericDao` implementations.

Backend DAOs don't inherit CRUD logic from a common base class. Instead each of
them holds a `GenericDaoHelper`, which carries the immutable configuration
(row mapper and primary-key fields) and the pieces of logic that are the same
for every backend: building the exact-match filter of a business object,
normalizing filter/sorting encodings, mapping rows, and client-side paging.
"""

import json
import logging
from collections.abc import Mapping
from itertools import islice
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence, Union

from gendao.bo.generic_bo import GenericBo
from gendao.exceptions import GdaoError, TranslationError
from gendao.mappers.row_mapper import WILDCARD_STORAGE, RowMapper


if TYPE_CHECKING:
    from gendao.dao.generic_dao import GenericDao


LOG = logging.getLogger(__name__)

SORT_ASCENDING = 1
SORT_DESCENDING = -1
SORT_DIRECTIONS = {
    "asc": SORT_ASCENDING,
    "ascending": SORT_ASCENDING,
    "desc": SORT_DESCENDING,
    "descending": SORT_DESCENDING,
}


def _decode_json_object(value: Union[str, bytes, bytearray, memoryview], what: str) -> Dict:
    if isinstance(value, (bytearray, memoryview)):
        value = bytes(value)
    try:
        loaded = json.loads(value)
    except ValueError as exc:
        raise TranslationError(f"Cannot decode {what} from JSON: {exc}") from exc
    if not isinstance(loaded, dict):
        raise TranslationError(f"Expected {what} to be a JSON object but got {type(loaded).__name__}")
    return loaded


def to_filter_map(filter: Any) -> Optional[Dict[str, Any]]:  # pylint: disable=redefined-builtin
    """
    Normalize a filter to a dictionary.

    Args:
        filter: None, a mapping, a JSON string, or JSON bytes.

    Returns:
        The filter as a dictionary, or None if `filter` is None.

    Raises:
        TranslationError: If `filter` is in none of the recognized encodings.
    """
    if filter is None:
        return None
    if isinstance(filter, Mapping):
        return dict(filter)
    if isinstance(filter, (str, bytes, bytearray, memoryview)):
        return _decode_json_object(filter, "filter")
    raise TranslationError(f"Cannot convert filter of type {type(filter).__name__} to a dict: {filter!r}")


def _sort_direction(column: str, direction: Any) -> int:
    if isinstance(direction, str):
        key = direction.strip().lower()
        if key in SORT_DIRECTIONS:
            return SORT_DIRECTIONS[key]
        try:
            direction = int(key)
        except ValueError as exc:
            raise TranslationError(f"Invalid sort direction for '{column}': {direction!r}") from exc
    if isinstance(direction, bool) or not isinstance(direction, (int, float)) or direction == 0:
        raise TranslationError(f"Invalid sort direction for '{column}': {direction!r}")
    return SORT_ASCENDING if direction > 0 else SORT_DESCENDING


def to_sorting_map(sorting: Any) -> Optional[Dict[str, int]]:
    """
    Normalize a sorting specification to an ordered dictionary of column -> direction.

    Directions are normalized to 1 (ascending) and -1 (descending); any positive
    or negative number, and the strings "asc"/"desc", are accepted.

    Args:
        sorting: None, a mapping, a JSON string, or JSON bytes.

    Returns:
        The sorting as a dictionary, or None if `sorting` is None.

    Raises:
        TranslationError: If `sorting` is in none of the recognized encodings or
            holds an invalid direction.
    """
    if sorting is None:
        return None
    if isinstance(sorting, Mapping):
        data = dict(sorting)
    elif isinstance(sorting, (str, bytes, bytearray, memoryview)):
        data = _decode_json_object(sorting, "sorting")
    else:
        raise TranslationError(f"Cannot convert sorting of type {type(sorting).__name__} to a dict: {sorting!r}")
    return {column: _sort_direction(column, direction) for column, direction in data.items()}


def page(items: Iterable[Any], start_offset: int = 0, num_items: int = 0) -> List[Any]:
    """
    Apply paging on the client side.

    Args:
        items: The items to page through.
        start_offset: Zero-based number of items to skip.
        num_items: Maximum number of items to keep. <= 0 means no limit.

    Returns:
        The requested page.
    """
    start = max(start_offset or 0, 0)
    stop = start + num_items if num_items and num_items > 0 else None
    return list(islice(items, start, stop))


class GenericDaoHelper:
    """
    Shared logic for `GenericDao` implementations, injected by composition.

    Attributes:
        row_mapper (RowMapper): The row mapper translating business objects to rows.
        primary_keys (Mapping[str, Sequence[str]]): Storage id (or `*`) -> names of
            the fields forming the primary key.

    Methods:
        key_fields: Get the primary-key fields of a storage.
        create_filter: Build the exact-match filter of a business object.
        delete: Default `delete` implementation built on `delete_many`.
        to_row: Map a business object to a row.
        to_bo: Map a row to a business object.
        to_bo_list: Map a list of rows to business objects.
    """

    def __init__(self, row_mapper: RowMapper, primary_keys: Union[Mapping, Sequence[str]] = None):
        """
        Initialize the helper.

        Args:
            row_mapper: The row mapper translating business objects to rows.
            primary_keys: Either a mapping of storage id (or `*`) to primary-key field
                names, or a plain list of field names used for every storage.
        """
        if row_mapper is None:
            raise ValueError("A row mapper is required.")
        self.row_mapper: RowMapper = row_mapper
        if primary_keys is None:
            primary_keys = {}
        elif not isinstance(primary_keys, Mapping):
            primary_keys = {WILDCARD_STORAGE: primary_keys}
        self.primary_keys: Mapping[str, Sequence[str]] = MappingProxyType(
            {storage: tuple(fields) for storage, fields in primary_keys.items()}
        )

    def key_fields(self, storage_id: str) -> List[str]:
        """
        Get the primary-key fields of a storage: the exact storage id first, then the wildcard.

        Args:
            storage_id: The table/collection to get the key of.

        Returns:
            The names of the primary-key fields (empty if none are configured).
        """
        fields = self.primary_keys.get(storage_id)
        if fields is None:
            fields = self.primary_keys.get(WILDCARD_STORAGE, ())
        return list(fields)

    def create_filter(self, storage_id: str, bo: GenericBo) -> Dict[str, Any]:
        """
        Build the filter matching exactly `bo`: its primary-key attributes, with
        names translated to column names by the row mapper.

        Args:
            storage_id: The table/collection the business object lives in.
            bo: The business object.

        Returns:
            A dictionary of column name -> value.

        Raises:
            GdaoError: If no primary key is configured for the storage.
            AttributeNotFoundError: If `bo` lacks one of the primary-key attributes.
            TranslationError: If the row mapper does not produce mapping-shaped rows.
        """
        fields = self.key_fields(storage_id)
        if not fields:
            raise GdaoError(f"No primary key is configured for storage '{storage_id}'.")
        key_bo = GenericBo({name: bo.get_attr(name) for name in fields})
        row = self.row_mapper.to_row(storage_id, key_bo)
        if not isinstance(row, Mapping):
            raise TranslationError(f"Row mapper produced a {type(row).__name__}, cannot build a filter from it.")
        return dict(row)

    def delete(self, dao: "GenericDao", storage_id: str, bo: GenericBo) -> int:
        """
        Remove a business object by deleting everything that matches its filter.

        Args:
            dao: The DAO to act on.
            storage_id: The table/collection to remove the business object from.
            bo: The business object to remove.

        Returns:
            The number of removed business objects.
        """
        return dao.delete_many(storage_id, dao.create_filter(storage_id, bo))

    def to_row(self, storage_id: str, bo: GenericBo) -> Any:
        """
        Map a business object to a row of `storage_id`.

        Args:
            storage_id: The table/collection the row belongs to.
            bo: The business object.

        Returns:
            The backend-native row.
        """
        return self.row_mapper.to_row(storage_id, bo)

    def to_bo(self, storage_id: str, row: Any) -> Optional[GenericBo]:
        """
        Map a row of `storage_id` to a business object.

        Args:
            storage_id: The table/collection the row comes from.
            row: The backend-native row.

        Returns:
            The business object, or None if `row` is None.
        """
        return self.row_mapper.to_bo(storage_id, row)

    def to_bo_list(self, storage_id: str, rows: Iterable[Any]) -> List[GenericBo]:
        """
        Map rows of `storage_id` to business objects.

        Args:
            storage_id: The table/collection the rows come from.
            rows: The backend-native rows.

        Returns:
            The business objects, in the order of `rows`.
        """
        result = []
        for row in rows:
            bo = self.row_mapper.to_bo(storage_id, row)
            if bo is not None:
                result.append(bo)
        LOG.debug(f"Mapped {len(result)} row(s) of '{storage_id}' to business objects.")
        return result
