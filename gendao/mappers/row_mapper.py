##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Row mappers translate a `GenericBo` to a backend-native row and back.

This module defines the `RowMapper` interface that every DAO relies on, and
`GenericRowMapper`, the implementation for backends whose rows are mappings from
column name to value (key-value and relational stores). Column names can be
translated per storage (table/collection) through translation tables, with a
case transformation as the fallback.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Union

from gendao.bo.generic_bo import GenericBo, load_json_object
from gendao.exceptions import TranslationError


LOG = logging.getLogger(__name__)

# Storage id matching every storage in a translation table
WILDCARD_STORAGE = "*"
# Column list meaning "all columns", used by schema-free backends
COLUMNS_ALL = "*"


class NameTransformation(Enum):
    """
    Enum of the default transformations applied to field/column names.

    Attributes:
        INTACT: Names are kept as-is.
        LOWER_CASE: Names are lower-cased.
        UPPER_CASE: Names are upper-cased.
    """

    INTACT = "intact"
    LOWER_CASE = "lower_case"
    UPPER_CASE = "upper_case"

    def apply(self, name: str) -> str:
        """
        Apply this transformation to a name.

        Args:
            name: The name to transform.

        Returns:
            The transformed name.
        """
        if self is NameTransformation.LOWER_CASE:
            return name.lower()
        if self is NameTransformation.UPPER_CASE:
            return name.upper()
        return name


class RowMapper(ABC):
    """
    Base class for all row mappers.

    Methods:
        to_row: Transform a `GenericBo` into a row suitable for the backend.
        to_bo: Transform a backend row into a `GenericBo`.
        columns_list: List the column names of a storage.
    """

    @abstractmethod
    def to_row(self, storage_id: str, bo: Optional[GenericBo]) -> Any:
        """
        Transform a `GenericBo` into a row suitable for persisting to the backend.

        Args:
            storage_id: The table/collection the row belongs to.
            bo: The business object to transform. None gives None.

        Returns:
            The backend-native row.
        """
        raise NotImplementedError("Subclasses of `RowMapper` must implement a `to_row` method.")

    @abstractmethod
    def to_bo(self, storage_id: str, row: Any) -> Optional[GenericBo]:
        """
        Transform a backend row into a `GenericBo`.

        Args:
            storage_id: The table/collection the row comes from.
            row: The backend-native row. None gives None.

        Returns:
            The business object.

        Raises:
            TranslationError: If `row` is not in one of the shapes this mapper recognizes.
        """
        raise NotImplementedError("Subclasses of `RowMapper` must implement a `to_bo` method.")

    @abstractmethod
    def columns_list(self, storage_id: str) -> List[str]:
        """
        Get the column names of a storage.

        Args:
            storage_id: The table/collection to get the columns of.

        Returns:
            The list of column names, or `[COLUMNS_ALL]` if no list is configured.
        """
        raise NotImplementedError("Subclasses of `RowMapper` must implement a `columns_list` method.")


def row_to_mapping(row: Any) -> Optional[Dict[str, Any]]:
    """
    Interpret a row given in one of the recognized encodings as a dictionary.

    Recognized encodings are a mapping (or a mapping-like record exposing `keys()`
    and item access such as `sqlite3.Row`), a JSON string, and a JSON byte sequence
    (`bytes`, `bytearray` or `memoryview`).

    Args:
        row: The row to interpret.

    Returns:
        The row as a dictionary, or None if `row` is None.

    Raises:
        TranslationError: If `row` is in none of the recognized encodings.
    """
    if row is None:
        return None
    if isinstance(row, Mapping):
        return dict(row)
    if isinstance(row, (str, bytes, bytearray, memoryview)):
        return load_json_object(row)
    if hasattr(row, "keys") and hasattr(row, "__getitem__"):
        return {key: row[key] for key in row.keys()}
    raise TranslationError(f"Cannot construct a GenericBo from input of type {type(row).__name__}: {row!r}")


def _frozen_translator(translator: Optional[Mapping]) -> Mapping:
    if not translator:
        return MappingProxyType({})
    return MappingProxyType({storage: MappingProxyType(dict(table)) for storage, table in translator.items()})


@dataclass(frozen=True, eq=False)
class GenericRowMapper(RowMapper):
    """
    Row mapper for backends whose rows are mappings from column name to value.

    A mapper is an immutable configuration value: build it once and share it
    between DAOs and threads.

    Attributes:
        name_transformation: The case transformation applied to names that no
            translation table covers.
        gbo_field_to_col_name_translator: Storage id (or `*`) -> {field name: column name},
            used by `to_row`.
        col_name_to_gbo_field_translator: Storage id (or `*`) -> {column name: field name},
            used by `to_bo`.
        columns_list_map: Storage id -> list of column names.
    """

    name_transformation: Union[NameTransformation, str] = NameTransformation.INTACT
    gbo_field_to_col_name_translator: Mapping = field(default_factory=dict)
    col_name_to_gbo_field_translator: Mapping = field(default_factory=dict)
    columns_list_map: Mapping = field(default_factory=dict)

    def __post_init__(self):
        # Frozen dataclass, so the normalized values have to go through object.__setattr__
        object.__setattr__(self, "name_transformation", NameTransformation(self.name_transformation))
        object.__setattr__(
            self, "gbo_field_to_col_name_translator", _frozen_translator(self.gbo_field_to_col_name_translator)
        )
        object.__setattr__(
            self, "col_name_to_gbo_field_translator", _frozen_translator(self.col_name_to_gbo_field_translator)
        )
        object.__setattr__(
            self,
            "columns_list_map",
            MappingProxyType({storage: tuple(cols) for storage, cols in (self.columns_list_map or {}).items()}),
        )

    def _translation_table(self, translator: Mapping, storage_id: str) -> Optional[Mapping]:
        """
        Pick the translation table of a storage: the exact storage id first, then the wildcard.

        Args:
            translator: The translator to pick the table from.
            storage_id: The table/collection being mapped.

        Returns:
            The translation table, or None if neither entry exists.
        """
        table = translator.get(storage_id)
        if table is None:
            table = translator.get(WILDCARD_STORAGE)
        return table

    def translate_name(self, translator: Mapping, storage_id: str, name: str) -> str:
        """
        Translate a single field/column name.

        The name is looked up in the storage's translation table as-is, then after
        the case transformation; if neither is present the case-transformed name is used.

        Args:
            translator: Either of the two translators of this mapper.
            storage_id: The table/collection being mapped.
            name: The name to translate.

        Returns:
            The translated name.
        """
        transformed = self.name_transformation.apply(name)
        table = self._translation_table(translator, storage_id)
        if table:
            if name in table:
                return table[name]
            if transformed in table:
                return table[transformed]
        return transformed

    def field_to_column(self, storage_id: str, name: str) -> str:
        """Translate a business object field name to a column name."""
        return self.translate_name(self.gbo_field_to_col_name_translator, storage_id, name)

    def column_to_field(self, storage_id: str, name: str) -> str:
        """Translate a column name to a business object field name."""
        return self.translate_name(self.col_name_to_gbo_field_translator, storage_id, name)

    def to_row(self, storage_id: str, bo: Optional[GenericBo]) -> Optional[Dict[str, Any]]:
        """
        Transform a `GenericBo` into a dictionary of column name -> value.

        Args:
            storage_id: The table/collection the row belongs to.
            bo: The business object to transform. None gives None.

        Returns:
            The row as a dictionary.
        """
        if bo is None:
            return None
        return {self.field_to_column(storage_id, name): value for name, value in bo.to_dict().items()}

    def to_bo(self, storage_id: str, row: Any) -> Optional[GenericBo]:
        """
        Transform a row into a `GenericBo`.

        Args:
            storage_id: The table/collection the row comes from.
            row: A mapping, a JSON string, or a JSON byte sequence. None gives None.

        Returns:
            The business object.

        Raises:
            TranslationError: If `row` is in none of the recognized encodings.
        """
        data = row_to_mapping(row)
        if data is None:
            return None
        return GenericBo({self.column_to_field(storage_id, name): value for name, value in data.items()})

    def columns_list(self, storage_id: str) -> List[str]:
        """
        Get the configured column names of a storage.

        Args:
            storage_id: The table/collection to get the columns of.

        Returns:
            The configured list of column names, or `[COLUMNS_ALL]` if none is configured.
        """
        cols = self.columns_list_map.get(storage_id)
        return list(cols) if cols is not None else [COLUMNS_ALL]
