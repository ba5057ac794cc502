##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
MongoDB-based backend for gendao.

Modules:
    mongo_row_mapper: Contains `MongoRowMapper`, the row mapper for schema-free documents.
    mongo_dao: Implements the `GenericDao` interface using MongoDB.
"""

from gendao.backends.mongo.mongo_dao import MongoDao
from gendao.backends.mongo.mongo_row_mapper import MongoRowMapper


__all__ = ["MongoDao", "MongoRowMapper"]
