##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Concrete `GenericDao` implementations for gendao.

Subpackages:
    mongo: Document-store backend built on pymongo.
    redis: Key-value backend built on redis-py, one hash per business object.
    sqlite: Relational backend built on the standard library's sqlite3.

Modules:
    backend_factory: Contains `DaoBackendFactory`, used to select and instantiate a backend by name.
    utils: Value (de)serialization and client-side filtering/sorting shared by the backends.
"""
