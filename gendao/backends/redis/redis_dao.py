##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Key-value implementation of `GenericDao`, backed by Redis.

Each business object is stored as one hash at `{storage_id}:{key}`, where the key
is derived from the values of the business object's filter (see `build_key`).
Every hash field is JSON-encoded so value types survive the round trip.

Redis can't query on hash fields, so filters are evaluated on the client over a
`SCAN` of the storage's keys, and sorting and paging are applied on the client as
well. The cost of `fetch_many` and `delete_many` is therefore linear in the size
of the storage. `fetch_one` reads the key derived from the filter directly when
possible before falling back to a scan.

The keys prefixed by `{storage_id}:` must be dedicated to that storage.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional, Tuple

from redis import Redis
from redis.exceptions import WatchError

from gendao.backends.utils import deserialize_hash_fields, row_matches, serialize_hash_fields, sort_rows
from gendao.bo.generic_bo import GenericBo, dump_json
from gendao.dao.dao_helper import GenericDaoHelper, page, to_filter_map, to_sorting_map
from gendao.dao.generic_dao import GenericDao
from gendao.exceptions import DuplicatedEntryError, TranslationError
from gendao.mappers.row_mapper import GenericRowMapper, RowMapper


LOG = logging.getLogger(__name__)

PATTERN_SPECIAL_CHARS = "\\*?[]"


def escape_pattern(text: str) -> str:
    """
    Escape the glob characters of `text` for use in a `SCAN MATCH` pattern.

    Args:
        text: The text to escape.

    Returns:
        The escaped text.
    """
    return "".join(f"\\{char}" if char in PATTERN_SPECIAL_CHARS else char for char in text)


def build_key(storage_id: str, filters: Mapping) -> str:
    """
    Build the Redis key of a business object from its filter.

    A single value, or the list of values of a multi-column filter (ordered by
    column name), is JSON-encoded, so values of different types (such as `"5"`
    and `5`) never share a key.

    Args:
        storage_id: The storage the business object lives in.
        filters: The business object's filter (column name -> value).

    Returns:
        The key of the hash holding the business object.

    Raises:
        TranslationError: If `filters` is empty.
    """
    if not filters:
        raise TranslationError(f"Cannot build a key for storage '{storage_id}' from an empty filter.")
    # Integral floats share the key of the equal int
    values = [
        int(value) if isinstance(value, float) and value.is_integer() else value
        for value in (filters[column] for column in sorted(filters))
    ]
    ident = dump_json(values[0] if len(values) == 1 else values).decode("utf-8")
    return f"{storage_id}:{ident}"


class RedisDao(GenericDao):
    """
    `GenericDao` implementation for Redis.

    Attributes:
        client (Redis): The Redis client used for database operations.
        helper (GenericDaoHelper): Row mapper and primary-key configuration.
        tx_mode (bool): Whether `create` guards its existence check with WATCH/MULTI/EXEC.
    """

    def __init__(
        self,
        client: Redis = None,
        row_mapper: RowMapper = None,
        primary_keys: Any = None,
        tx_mode: bool = False,
        url: str = None,
    ):
        """
        Initialize the DAO.

        Args:
            client: A Redis client instance. Either this or `url` is required.
            row_mapper: The row mapper to use. Defaults to a `GenericRowMapper` with no translation.
            primary_keys: Storage id (or `*`) -> primary-key field names, or a list of
                field names used for every storage.
            tx_mode: Whether `create` guards its existence check with WATCH/MULTI/EXEC.
            url: A Redis URL to build a client from when `client` isn't given.
        """
        if client is None:
            if url is None:
                raise ValueError("RedisDao needs either a client or a url.")
            client = Redis.from_url(url)
        self.client: Redis = client
        self.helper: GenericDaoHelper = GenericDaoHelper(row_mapper or GenericRowMapper(), primary_keys)
        self.tx_mode: bool = tx_mode

    def _to_hash(self, storage_id: str, bo: GenericBo) -> Dict[str, str]:
        row = self.helper.to_row(storage_id, bo)
        if not isinstance(row, Mapping):
            raise TranslationError(f"Row mapper produced a {type(row).__name__}, Redis needs a mapping.")
        return serialize_hash_fields(row)

    def _key_of(self, storage_id: str, bo: GenericBo) -> str:
        return build_key(storage_id, self.create_filter(storage_id, bo))

    def _scan(self, storage_id: str) -> Iterator[Tuple[Any, Dict[str, Any]]]:
        """
        Iterate over every business object row of a storage.

        Args:
            storage_id: The storage to scan.

        Yields:
            Tuples of (key, decoded row).
        """
        for key in self.client.scan_iter(match=f"{escape_pattern(storage_id)}:*"):
            data = self.client.hgetall(key)
            if data:
                yield key, deserialize_hash_fields(data)

    def _matching(self, storage_id: str, filters: Optional[Dict[str, Any]]) -> List[Tuple[Any, Dict[str, Any]]]:
        matches = [(key, row) for key, row in self._scan(storage_id) if row_matches(row, filters)]
        # Keys are the only stable order Redis gives us
        matches.sort(key=lambda item: item[0])
        return matches

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
        filters = to_filter_map(filter)
        keys = [key for key, _ in self._matching(storage_id, filters)]
        if not keys:
            return 0
        num_deleted = self.client.delete(*keys)
        LOG.debug(f"Deleted {num_deleted} hash(es) from '{storage_id}'.")
        return num_deleted

    def fetch_one(self, storage_id: str, filter: Any) -> Optional[GenericBo]:  # pylint: disable=redefined-builtin
        filters = to_filter_map(filter)

        if filters and not any(isinstance(value, list) for value in filters.values()):
            data = self.client.hgetall(build_key(storage_id, filters))
            if data:
                row = deserialize_hash_fields(data)
                if row_matches(row, filters):
                    return self.helper.to_bo(storage_id, row)

        matches = self._matching(storage_id, filters)
        if not matches:
            return None
        return self.helper.to_bo(storage_id, matches[0][1])

    def fetch_many(
        self,
        storage_id: str,
        filter: Any = None,  # pylint: disable=redefined-builtin
        sorting: Any = None,
        start_offset: int = 0,
        num_items: int = 0,
    ) -> List[GenericBo]:
        filters = to_filter_map(filter)
        sorting_map = to_sorting_map(sorting)
        LOG.debug(f"Scanning '{storage_id}' with filter {filters} and sorting {sorting_map}.")

        rows = sort_rows([row for _, row in self._matching(storage_id, filters)], sorting_map)
        return self.helper.to_bo_list(storage_id, page(rows, start_offset, num_items))

    def create(self, storage_id: str, bo: GenericBo) -> int:
        key = self._key_of(storage_id, bo)
        data = self._to_hash(storage_id, bo)

        if not self.tx_mode:
            if self.client.exists(key):
                raise DuplicatedEntryError(f"Key '{key}' already exists.")
            self.client.hset(key, mapping=data)
            LOG.debug(f"Created hash '{key}'.")
            return 1

        with self.client.pipeline() as pipe:
            try:
                pipe.watch(key)
                if pipe.exists(key):
                    raise DuplicatedEntryError(f"Key '{key}' already exists.")
                pipe.multi()
                pipe.hset(key, mapping=data)
                pipe.execute()
            except WatchError as exc:
                raise DuplicatedEntryError(f"Key '{key}' was written concurrently.") from exc

        LOG.debug(f"Created hash '{key}' in a transaction.")
        return 1

    def update(self, storage_id: str, bo: GenericBo) -> int:
        key = self._key_of(storage_id, bo)
        data = self._to_hash(storage_id, bo)

        with self.client.pipeline() as pipe:
            pipe.watch(key)
            if not pipe.exists(key):
                return 0
            pipe.multi()
            pipe.delete(key)
            pipe.hset(key, mapping=data)
            pipe.execute()

        LOG.debug(f"Updated hash '{key}'.")
        return 1

    def save(self, storage_id: str, bo: GenericBo) -> int:
        key = self._key_of(storage_id, bo)
        data = self._to_hash(storage_id, bo)

        with self.client.pipeline(transaction=True) as pipe:
            pipe.delete(key)
            pipe.hset(key, mapping=data)
            pipe.execute()

        LOG.debug(f"Saved hash '{key}'.")
        return 1
