##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
SQLite connection context manager for gendao.

This module defines the `SQLiteConnection` class, which opens a configured SQLite
connection on entry (WAL mode, foreign key support, name-based column access,
driver-side autocommit so that transactions are only ever opened explicitly,
decoding of columns declared `JSON`) and guarantees it's closed on exit.
"""

import logging
import sqlite3
import sys
from pathlib import Path
from types import TracebackType
from typing import Type

from gendao.backends.utils import load_sql_json


LOG = logging.getLogger(__name__)

IN_MEMORY_DB = ":memory:"
JSON_COLUMN_TYPE = "JSON"

sqlite3.register_converter(JSON_COLUMN_TYPE, load_sql_json)


class SQLiteConnection:
    """
    Context manager for establishing and safely closing a SQLite database connection.

    Attributes:
        db_path (str): The path to the database file.
        timeout (float): Seconds to wait for a lock held by another connection.
        conn (sqlite3.Connection): The active SQLite connection used within the context.
    """

    def __init__(self, db_path: str, timeout: float = 5.0):
        """
        Initialize the SQLiteConnection context manager.

        Args:
            db_path: The path to the database file.
            timeout: Seconds to wait for a lock held by another connection.
        """
        self.db_path: str = str(db_path)
        self.timeout: float = timeout
        self.conn: sqlite3.Connection = None

    def __enter__(self) -> sqlite3.Connection:
        """
        Enters the runtime context related to this object and creates a sqlite connection.

        Returns:
            A sqlite connection.
        """
        if self.db_path != IN_MEMORY_DB:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        connection_kwargs = {
            "check_same_thread": False,
            "timeout": self.timeout,
            "detect_types": sqlite3.PARSE_DECLTYPES,
        }
        if sys.version_info < (3, 12):  # Autocommit wasn't added until python 3.12
            connection_kwargs["isolation_level"] = None
        else:
            connection_kwargs["autocommit"] = True

        self.conn = sqlite3.connect(self.db_path, **connection_kwargs)

        # Enable WAL mode for better concurrent access
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA foreign_keys=ON")

        # This enables name-based access to columns
        self.conn.row_factory = sqlite3.Row

        return self.conn

    def __exit__(self, exc_type: Type[Exception], exc_value: Exception, traceback: TracebackType):
        """
        Exits the runtime context and closes the connection if it's still open.

        Args:
            exc_type: The exception type raised, if any.
            exc_value: The exception instance raised, if any.
            traceback: The traceback object, if an exception was raised.
        """
        if self.conn:
            self.conn.close()
            self.conn = None
