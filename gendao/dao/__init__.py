##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
The `dao` package defines the generic data access object contract.

Modules:
    generic_dao: Contains `GenericDao`, the CRUD interface every backend implements.
    dao_helper: Contains `GenericDaoHelper`, the shared logic injected into backend DAOs,
        along with filter/sorting normalization and client-side paging helpers.
"""

from gendao.dao.dao_helper import GenericDaoHelper, page, to_filter_map, to_sorting_map
from gendao.dao.generic_dao import GenericDao


__all__ = ["GenericDao", "GenericDaoHelper", "page", "to_filter_map", "to_sorting_map"]
