##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
SQLite-based backend for gendao.

Modules:
    sqlite_connection: Provides a context-managed SQLite connection with safe configuration.
    sqlite_dao: Implements the `GenericDao` interface using SQLite.
"""

from gendao.backends.sqlite.sqlite_connection import SQLiteConnection
from gendao.backends.sqlite.sqlite_dao import SQLiteDao


__all__ = ["SQLiteConnection", "SQLiteDao"]
