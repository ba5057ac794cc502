##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
The `bo` package holds the business object types handled by gendao.

Modules:
    generic_bo: Contains `GenericBo`, the backend-agnostic attribute bag that DAOs read and write.
    bo_model: Contains `BoModel`, a dataclass base for application-level typed business objects.
"""

from gendao.bo.bo_model import BoModel
from gendao.bo.generic_bo import GenericBo


__all__ = ["BoModel", "GenericBo"]
