##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
gendao: a generic data-access-object layer.

This package provides a backend-agnostic business object (`GenericBo`), row
mappers that translate it to and from backend-native rows, and a uniform CRUD
contract (`GenericDao`) implemented for document, key-value and relational stores.
"""

import os


__version__ = "0.3.0"
VERSION = __version__
PATH_TO_PROJ = os.path.join(os.path.dirname(__file__), "")
