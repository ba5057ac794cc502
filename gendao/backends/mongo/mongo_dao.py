##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Document-store implementation of `GenericDao`, backed by MongoDB.

Storage ids are collection names. Filters and sortings are handed to MongoDB
natively, so any MongoDB query operator can be used in a filter, and paging uses
the cursor's `skip`/`limit`.

Documents cross the row mapper boundary as relaxed extended JSON (see
`bson.json_util`): `ObjectId` values show up in a business object as
`{"$oid": "..."}` and dates as `{"$date": "..."}`, and both are converted back
to their BSON types when written.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from bson import json_util
from bson.json_util import RELAXED_JSON_OPTIONS
from pymongo import MongoClient
from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from gendao.backends.mongo.mongo_row_mapper import MongoRowMapper
from gendao.bo.generic_bo import GenericBo
from gendao.dao.dao_helper import GenericDaoHelper, to_filter_map, to_sorting_map
from gendao.dao.generic_dao import GenericDao
from gendao.exceptions import DuplicatedEntryError, TranslationError
from gendao.mappers.row_mapper import RowMapper


LOG = logging.getLogger(__name__)

DEFAULT_PRIMARY_KEYS = {"*": ["_id"]}


def to_document(data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Convert a row or filter into a BSON-ready document.

    Values may be written in extended JSON notation (such as `{"$oid": ...}`)
    or already be BSON types (such as `ObjectId` or `datetime`); both end up
    as BSON types.

    Args:
        data: The row or filter. None gives an empty document.

    Returns:
        The document, with extended JSON values converted to their BSON types.

    Raises:
        TranslationError: If `data` holds values with no BSON representation.
    """
    if not data:
        return {}
    try:
        return json_util.loads(json_util.dumps(data, json_options=RELAXED_JSON_OPTIONS))
    except TypeError as exc:
        raise TranslationError(f"Data is not BSON-serializable: {exc}") from exc


def from_document(document: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Convert a document read from MongoDB into relaxed extended JSON.

    Args:
        document: The document. None gives None.

    Returns:
        The document as JSON text.
    """
    if document is None:
        return None
    return json_util.dumps(document, json_options=RELAXED_JSON_OPTIONS)


@contextmanager
def duplicate_key_errors(storage_id: str) -> Iterator[None]:
    """
    Context manager turning `DuplicateKeyError` into `DuplicatedEntryError`.

    Args:
        storage_id: The collection being written, for the error message.
    """
    try:
        yield
    except DuplicateKeyError as exc:
        raise DuplicatedEntryError(f"Duplicated entry in collection '{storage_id}': {exc}") from exc


class MongoDao(GenericDao):
    """
    `GenericDao` implementation for MongoDB.

    Attributes:
        database (Database): The database holding the collections.
        helper (GenericDaoHelper): Row mapper and primary-key configuration.
        tx_mode (bool): Whether `create` runs inside a multi-document transaction.
    """

    def __init__(
        self,
        database: Database = None,
        row_mapper: RowMapper = None,
        primary_keys: Any = None,
        tx_mode: bool = False,
        url: str = None,
        db_name: str = None,
    ):
        """
        Initialize the DAO.

        Args:
            database: A pymongo database. Either this or `url` is required.
            row_mapper: The row mapper to use. Defaults to a `MongoRowMapper`.
            primary_keys: Collection (or `*`) -> primary-key field names, or a list of
                field names used for every collection. Defaults to `_id`.
            tx_mode: Whether `create` runs inside a multi-document transaction (needs a
                replica set or a sharded cluster).
            url: A MongoDB connection string to build a client from when `database` isn't given.
            db_name: The database to use with `url`. Defaults to the one named in the connection string.
        """
        if database is None:
            if url is None:
                raise ValueError("MongoDao needs either a database or a url.")
            client = MongoClient(url)
            database = client[db_name] if db_name else client.get_default_database()
        self.database: Database = database
        self.helper: GenericDaoHelper = GenericDaoHelper(
            row_mapper or MongoRowMapper(), primary_keys or DEFAULT_PRIMARY_KEYS
        )
        self.tx_mode: bool = tx_mode

    def get_collection(self, storage_id: str) -> Collection:
        """
        Get the collection of a storage id.

        Args:
            storage_id: The name of the collection.

        Returns:
            The collection.
        """
        return self.database[storage_id]

    def _to_bo(self, storage_id: str, document: Optional[Dict[str, Any]]) -> Optional[GenericBo]:
        return self.helper.to_bo(storage_id, from_document(document))

    def _to_document(self, storage_id: str, bo: GenericBo) -> Dict[str, Any]:
        return to_document(self.helper.to_row(storage_id, bo))

    def get_row_mapper(self) -> RowMapper:
        return self.helper.row_mapper

    def is_tx_mode(self) -> bool:
        return self.tx_mode

    def enable_tx_mode(self, enabled: bool):
        self.tx_mode = bool(enabled)

    def create_filter(self, storage_id: str, bo: GenericBo) -> Dict[str, Any]:
        return self.helper.create_filter(storage_id, bo)

    def delete(self, storage_id: str, bo: GenericBo) -> int:
        return self.helper.delete(self, storage_id, bo)

    def delete_many(self, storage_id: str, filter: Any) -> int:  # pylint: disable=redefined-builtin
        query = to_document(to_filter_map(filter))
        result = self.get_collection(storage_id).delete_many(query)
        LOG.debug(f"Deleted {result.deleted_count} document(s) from '{storage_id}'.")
        return result.deleted_count

    def fetch_one(self, storage_id: str, filter: Any) -> Optional[GenericBo]:  # pylint: disable=redefined-builtin
        query = to_document(to_filter_map(filter))
        return self._to_bo(storage_id, self.get_collection(storage_id).find_one(query))

    def fetch_many(
        self,
        storage_id: str,
        filter: Any = None,  # pylint: disable=redefined-builtin
        sorting: Any = None,
        start_offset: int = 0,
        num_items: int = 0,
    ) -> List[GenericBo]:
        query = to_document(to_filter_map(filter))
        sorting_map = to_sorting_map(sorting)

        cursor = self.get_collection(storage_id).find(query)
        try:
            if sorting_map:
                cursor = cursor.sort(list(sorting_map.items()))
            if start_offset and start_offset > 0:
                cursor = cursor.skip(start_offset)
            if num_items and num_items > 0:
                cursor = cursor.limit(num_items)
            return self.helper.to_bo_list(storage_id, (from_document(document) for document in cursor))
        finally:
            cursor.close()

    def _insert_if_not_exist(self, storage_id: str, bo: GenericBo, session: ClientSession = None):
        """
        Insert `bo` unless a document matching its filter already exists.

        Args:
            storage_id: The collection to insert into.
            bo: The business object to insert.
            session: The session of the enclosing transaction, if any.

        Raises:
            DuplicatedEntryError: If a matching document already exists.
        """
        query = to_document(self.create_filter(storage_id, bo))
        collection = self.get_collection(storage_id)
        if collection.find_one(query, session=session) is not None:
            raise DuplicatedEntryError(f"A document matching {query} already exists in collection '{storage_id}'.")
        with duplicate_key_errors(storage_id):
            collection.insert_one(self._to_document(storage_id, bo), session=session)

    def create(self, storage_id: str, bo: GenericBo) -> int:
        if not self.tx_mode:
            self._insert_if_not_exist(storage_id, bo)
            return 1

        with self.database.client.start_session() as session:
            with session.start_transaction(read_concern=ReadConcern("snapshot"), write_concern=WriteConcern(w="majority")):
                self._insert_if_not_exist(storage_id, bo, session=session)

        LOG.debug(f"Created a document in '{storage_id}' in a transaction.")
        return 1

    def update(self, storage_id: str, bo: GenericBo) -> int:
        query = to_document(self.create_filter(storage_id, bo))
        with duplicate_key_errors(storage_id):
            previous = self.get_collection(storage_id).find_one_and_replace(
                query, self._to_document(storage_id, bo), upsert=False
            )
        return 0 if previous is None else 1

    def save(self, storage_id: str, bo: GenericBo) -> int:
        query = to_document(self.create_filter(storage_id, bo))
        with duplicate_key_errors(storage_id):
            self.get_collection(storage_id).find_one_and_replace(query, self._to_document(storage_id, bo), upsert=True)
        return 1
