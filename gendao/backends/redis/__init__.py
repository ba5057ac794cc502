##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Redis-based backend for gendao.

Modules:
    redis_dao: Implements the `GenericDao` interface using Redis hashes.
"""

from gendao.backends.redis.redis_dao import RedisDao


__all__ = ["RedisDao"]
