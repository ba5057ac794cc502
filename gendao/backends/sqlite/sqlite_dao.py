##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Relational implementation of `GenericDao`, backed by SQLite.

Storage ids are table names and filters are translated to WHERE clauses made of
equality (`=`), membership (`IN` for list values), and `IS NULL` (for None
values) conditions joined with `AND`. Tables must already exist; gendao never
creates or migrates schemas.

A new connection is opened for every operation. With transaction mode enabled,
`create` and `save` run inside `BEGIN IMMEDIATE ... COMMIT` so their
check-then-write sequence is atomic.
"""

import logging
import sqlite3
from collections.abc import Mapping
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from gendao.backends.sqlite.sqlite_connection import SQLiteConnection
from gendao.backends.utils import deserialize_sql_row, serialize_sql_row, to_sql_value
from gendao.bo.generic_bo import GenericBo
from gendao.dao.dao_helper import GenericDaoHelper, to_filter_map, to_sorting_map
from gendao.dao.generic_dao import GenericDao
from gendao.exceptions import DuplicatedEntryError, TranslationError
from gendao.mappers.row_mapper import COLUMNS_ALL, GenericRowMapper, RowMapper


LOG = logging.getLogger(__name__)

DUPLICATE_MESSAGES = ("UNIQUE constraint failed", "PRIMARY KEY must be unique", "is not unique")


def quote_identifier(name: str) -> str:
    """
    Quote a table or column name for use in a SQL statement.

    Args:
        name: The identifier to quote.

    Returns:
        The quoted identifier.
    """
    return '"' + str(name).replace('"', '""') + '"'


def build_where_clause(filters: Optional[Dict[str, Any]]) -> Tuple[str, List[Any]]:
    """
    Build a SQL WHERE clause and its parameter list from a filter dictionary.

    Args:
        filters: Column name -> value. A list value builds an `IN` condition (an empty
            list matches nothing), None builds an `IS NULL` condition, and anything
            else builds an equality condition.

    Returns:
        A tuple of (where_clause, params). The clause is empty when there is no filter.
    """
    if not filters:
        return "", []

    conditions = []
    params = []
    for column, value in filters.items():
        col = quote_identifier(column)
        if isinstance(value, list):
            options = [option for option in value if option is not None]
            sub_conditions = []
            if options:
                sub_conditions.append(f"{col} IN ({', '.join('?' for _ in options)})")
                params.extend(to_sql_value(option) for option in options)
            if len(options) != len(value):
                sub_conditions.append(f"{col} IS NULL")
            if not sub_conditions:
                # Avoid generating invalid SQL like `IN ()`
                conditions.append("1 = 0")
            else:
                conditions.append("(" + " OR ".join(sub_conditions) + ")")
        elif value is None:
            conditions.append(f"{col} IS NULL")
        else:
            conditions.append(f"{col} = ?")
            params.append(to_sql_value(value))

    return "WHERE " + " AND ".join(conditions), params


def build_order_by_clause(sorting: Optional[Dict[str, int]]) -> str:
    """
    Build a SQL ORDER BY clause from a normalized sorting dictionary.

    Args:
        sorting: Ordered column name -> 1 (ascending) or -1 (descending).

    Returns:
        The ORDER BY clause, or an empty string if there is no sorting.
    """
    if not sorting:
        return ""
    terms = [f"{quote_identifier(column)} {'ASC' if direction > 0 else 'DESC'}" for column, direction in sorting.items()]
    return "ORDER BY " + ", ".join(terms)


def build_limit_clause(start_offset: int, num_items: int) -> Tuple[str, List[int]]:
    """
    Build a SQL LIMIT/OFFSET clause.

    Args:
        start_offset: Zero-based number of rows to skip.
        num_items: Maximum number of rows to return. <= 0 means no limit.

    Returns:
        A tuple of (limit_clause, params).
    """
    start_offset = max(start_offset or 0, 0)
    if num_items and num_items > 0:
        return "LIMIT ? OFFSET ?", [num_items, start_offset]
    if start_offset > 0:
        # SQLite needs a LIMIT to accept an OFFSET; -1 means no limit
        return "LIMIT -1 OFFSET ?", [start_offset]
    return "", []


@contextmanager
def duplicate_entry_errors(storage_id: str) -> Iterator[None]:
    """
    Context manager turning uniqueness violations into `DuplicatedEntryError`.

    Other integrity errors (NOT NULL, CHECK, FOREIGN KEY) propagate unchanged.

    Args:
        storage_id: The table being written, for the error message.
    """
    try:
        yield
    except sqlite3.IntegrityError as exc:
        if any(msg in str(exc) for msg in DUPLICATE_MESSAGES):
            raise DuplicatedEntryError(f"Duplicated entry in table '{storage_id}': {exc}") from exc
        raise


class SQLiteDao(GenericDao):
    """
    `GenericDao` implementation for SQLite databases.

    Attributes:
        db_path (str): The path to the database file.
        helper (GenericDaoHelper): Row mapper and primary-key configuration.
        tx_mode (bool): Whether `create` and `save` run in a transaction.
    """

    def __init__(
        self,
        db_path: str,
        row_mapper: RowMapper = None,
        primary_keys: Any = None,
        tx_mode: bool = False,
        timeout: float = 5.0,
    ):
        """
        Initialize the DAO.

        Args:
            db_path: The path to the database file.
            row_mapper: The row mapper to use. Defaults to a `GenericRowMapper` with no translation.
            primary_keys: Storage id (or `*`) -> primary-key field names, or a list of
                field names used for every table.
            tx_mode: Whether `create` and `save` run in a transaction.
            timeout: Seconds to wait for a lock held by another connection.
        """
        self.db_path: str = str(db_path)
        self.timeout: float = timeout
        self.helper: GenericDaoHelper = GenericDaoHelper(row_mapper or GenericRowMapper(), primary_keys)
        self.tx_mode: bool = tx_mode

    def _connect(self) -> SQLiteConnection:
        return SQLiteConnection(self.db_path, timeout=self.timeout)

    @contextmanager
    def _transaction(self, conn: sqlite3.Connection, enabled: bool) -> Iterator[sqlite3.Connection]:
        """
        Run the enclosed statements inside `BEGIN IMMEDIATE ... COMMIT` when `enabled`.

        Args:
            conn: The connection to run the transaction on.
            enabled: Whether to open a transaction at all.
        """
        if not enabled:
            yield conn
            return
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

    def _to_sql_row(self, storage_id: str, bo: GenericBo) -> Dict[str, Any]:
        row = self.helper.to_row(storage_id, bo)
        if not isinstance(row, Mapping):
            raise TranslationError(f"Row mapper produced a {type(row).__name__}, SQLite needs a mapping.")
        return serialize_sql_row(row)

    def _select_clause(self, storage_id: str) -> str:
        columns = self.helper.row_mapper.columns_list(storage_id)
        if not columns or COLUMNS_ALL in columns:
            return "*"
        return ", ".join(quote_identifier(column) for column in columns)

    def _table_columns(self, conn: sqlite3.Connection, storage_id: str) -> List[str]:
        """
        Get the names of the columns of a table.

        Args:
            conn: An open connection.
            storage_id: The name of the table.

        Returns:
            The column names, in table order (empty if the table doesn't exist).
        """
        cursor = conn.execute(f"PRAGMA table_info({quote_identifier(storage_id)})")
        return [row["name"] for row in cursor.fetchall()]

    def _exists(self, conn: sqlite3.Connection, storage_id: str, filters: Dict[str, Any]) -> bool:
        where_clause, params = build_where_clause(filters)
        cursor = conn.execute(f"SELECT 1 FROM {quote_identifier(storage_id)} {where_clause} LIMIT 1", params)
        return cursor.fetchone() is not None

    def _insert(self, conn: sqlite3.Connection, storage_id: str, row: Dict[str, Any]):
        columns_str = ", ".join(quote_identifier(column) for column in row)
        placeholders_str = ", ".join("?" for _ in row)
        with duplicate_entry_errors(storage_id):
            conn.execute(
                f"INSERT INTO {quote_identifier(storage_id)} ({columns_str}) VALUES ({placeholders_str})",
                list(row.values()),
            )

    def _replace(self, conn: sqlite3.Connection, storage_id: str, filters: Dict[str, Any], row: Dict[str, Any]) -> int:
        """
        Overwrite the row(s) matching `filters` with `row`; table columns that `row`
        doesn't mention are set to NULL.

        Returns:
            The number of rows updated.
        """
        columns = list(row)
        columns.extend(column for column in self._table_columns(conn, storage_id) if column not in row)
        set_str = ", ".join(f"{quote_identifier(column)} = ?" for column in columns)
        where_clause, where_params = build_where_clause(filters)
        params = [row.get(column) for column in columns] + where_params
        with duplicate_entry_errors(storage_id):
            cursor = conn.execute(f"UPDATE {quote_identifier(storage_id)} SET {set_str} {where_clause}", params)
        return cursor.rowcount

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
        where_clause, params = build_where_clause(filters)
        query = f"DELETE FROM {quote_identifier(storage_id)} {where_clause}"
        LOG.debug(f"SQLite query: {query}")
        LOG.debug(f"SQLite params: {params}")

        with self._connect() as conn:
            cursor = conn.execute(query, params)
            num_rows = cursor.rowcount

        LOG.debug(f"Deleted {num_rows} row(s) from '{storage_id}'.")
        return num_rows

    def fetch_one(self, storage_id: str, filter: Any) -> Optional[GenericBo]:  # pylint: disable=redefined-builtin
        filters = to_filter_map(filter)
        where_clause, params = build_where_clause(filters)
        query = f"SELECT {self._select_clause(storage_id)} FROM {quote_identifier(storage_id)} {where_clause} LIMIT 1"
        LOG.debug(f"SQLite query: {query}")
        LOG.debug(f"SQLite params: {params}")

        with self._connect() as conn:
            row = conn.execute(query, params).fetchone()

        if row is None:
            return None
        return self.helper.to_bo(storage_id, deserialize_sql_row(row))

    def fetch_many(
        self,
        storage_id: str,
        filter: Any = None,  # pylint: disable=redefined-builtin
        sorting: Any = None,
        start_offset: int = 0,
        num_items: int = 0,
    ) -> List[GenericBo]:
        filters = to_filter_map(filter)
        where_clause, params = build_where_clause(filters)
        order_by_clause = build_order_by_clause(to_sorting_map(sorting))
        limit_clause, limit_params = build_limit_clause(start_offset, num_items)
        query = (
            f"SELECT {self._select_clause(storage_id)} FROM {quote_identifier(storage_id)} "
            f"{where_clause} {order_by_clause} {limit_clause}"
        )
        params = params + limit_params
        LOG.debug(f"SQLite query: {query}")
        LOG.debug(f"SQLite params: {params}")

        with self._connect() as conn:
            rows = [deserialize_sql_row(row) for row in conn.execute(query, params).fetchall()]

        return self.helper.to_bo_list(storage_id, rows)

    def create(self, storage_id: str, bo: GenericBo) -> int:
        filters = self.create_filter(storage_id, bo)
        row = self._to_sql_row(storage_id, bo)

        with self._connect() as conn:
            with self._transaction(conn, self.tx_mode):
                if self._exists(conn, storage_id, filters):
                    raise DuplicatedEntryError(f"An entry matching {filters} already exists in table '{storage_id}'.")
                self._insert(conn, storage_id, row)

        LOG.debug(f"Created a row in '{storage_id}' matching {filters}.")
        return 1

    def update(self, storage_id: str, bo: GenericBo) -> int:
        filters = self.create_filter(storage_id, bo)
        row = self._to_sql_row(storage_id, bo)

        with self._connect() as conn:
            num_rows = self._replace(conn, storage_id, filters, row)

        LOG.debug(f"Updated {num_rows} row(s) in '{storage_id}' matching {filters}.")
        return 1 if num_rows > 0 else 0

    def save(self, storage_id: str, bo: GenericBo) -> int:
        filters = self.create_filter(storage_id, bo)
        row = self._to_sql_row(storage_id, bo)

        with self._connect() as conn:
            with self._transaction(conn, self.tx_mode):
                if self._replace(conn, storage_id, filters, row) == 0:
                    self._insert(conn, storage_id, row)

        LOG.debug(f"Saved a row in '{storage_id}' matching {filters}.")
        return 1
