##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Row mapper for document stores.

Documents are schema-free, so there is no name translation and no column list.
`MongoDao` hands documents to this mapper as (relaxed extended) JSON, which keeps
the mapper independent of BSON types.
"""

from typing import Any, Dict, List, Optional

from gendao.bo.generic_bo import GenericBo
from gendao.exceptions import TranslationError
from gendao.mappers.row_mapper import COLUMNS_ALL, RowMapper


class MongoRowMapper(RowMapper):
    """
    Row mapper for MongoDB documents.

    `to_row` is a structural copy of the business object with field names intact,
    `to_bo` only accepts a JSON document (text or bytes), and `columns_list` is
    always `[COLUMNS_ALL]`.
    """

    def to_row(self, storage_id: str, bo: Optional[GenericBo]) -> Optional[Dict[str, Any]]:
        if bo is None:
            return None
        return bo.to_dict()

    def to_bo(self, storage_id: str, row: Any) -> Optional[GenericBo]:
        if row is None:
            return None
        if isinstance(row, (str, bytes, bytearray, memoryview)):
            return GenericBo().from_json(row)
        raise TranslationError(f"Cannot construct a GenericBo from input of type {type(row).__name__}: {row!r}")

    def columns_list(self, storage_id: str) -> List[str]:
        return [COLUMNS_ALL]
