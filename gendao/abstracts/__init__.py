##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
The `abstracts` package provides ABC classes used throughout gendao.

Modules:
    factory: Contains `GdaoBaseFactory`, used to manage pluggable components.
"""

from gendao.abstracts.factory import GdaoBaseFactory


__all__ = ["GdaoBaseFactory"]
