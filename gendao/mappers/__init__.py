##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
The `mappers` package translates business objects to backend-native rows and back.

Modules:
    row_mapper: Contains the `RowMapper` interface and `GenericRowMapper`, the
        mapper for mapping-shaped rows with configurable column-name translation.
"""

from gendao.mappers.row_mapper import (
    COLUMNS_ALL,
    WILDCARD_STORAGE,
    GenericRowMapper,
    NameTransformation,
    RowMapper,
    row_to_mapping,
)


__all__ = [
    "COLUMNS_ALL",
    "WILDCARD_STORAGE",
    "GenericRowMapper",
    "NameTransformation",
    "RowMapper",
    "row_to_mapping",
]
