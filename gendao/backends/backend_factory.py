##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Backend factory for selecting and instantiating DAO backends in gendao.

This module defines the `DaoBackendFactory` class, which keeps track of the
available `GenericDao` implementations (MongoDB, Redis, SQLite, plus any plugin
published under the `gendao.backends` entry point group) and instantiates them
by name or alias.
"""

from typing import Any, Type

from gendao.abstracts import GdaoBaseFactory
from gendao.backends.mongo.mongo_dao import MongoDao
from gendao.backends.redis.redis_dao import RedisDao
from gendao.backends.sqlite.sqlite_dao import SQLiteDao
from gendao.dao.generic_dao import GenericDao
from gendao.exceptions import BackendNotSupportedError


class DaoBackendFactory(GdaoBaseFactory):
    """
    Factory class for managing and instantiating supported DAO backends.

    Attributes:
        _registry (Dict[str, GenericDao]): Maps canonical backend names to DAO classes.
        _aliases (Dict[str, str]): Maps alternate names to canonical backend names.

    Methods:
        register: Register a new DAO class and optional aliases.
        list_available: Return a list of supported backend names.
        create: Instantiate a DAO class by name or alias.
        get_component_info: Return metadata about a registered backend.
    """

    def _register_builtins(self):
        """
        Register built-in backend implementations.
        """
        self.register("mongo", MongoDao, aliases=["mongodb"])
        self.register("redis", RedisDao, aliases=["rediss"])
        self.register("sqlite", SQLiteDao)

    def _validate_component(self, component_class: Any):
        """
        Ensure registered component is a subclass of GenericDao.

        Args:
            component_class: The class to validate.

        Raises:
            TypeError: If the component does not subclass GenericDao.
        """
        if not isinstance(component_class, type) or not issubclass(component_class, GenericDao):
            raise TypeError(f"{component_class} must inherit from GenericDao")

    def _entry_point_group(self) -> str:
        """
        Entry point group used for discovering backend plugins.

        Returns:
            The entry point namespace for gendao backend plugins.
        """
        return "gendao.backends"

    def _raise_component_error_class(self, msg: str) -> Type[Exception]:
        """
        Raise `BackendNotSupportedError` for unsupported backends.

        Args:
            msg: The message to add to the error being raised.
        """
        raise BackendNotSupportedError(msg)


backend_factory = DaoBackendFactory()
