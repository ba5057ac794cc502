##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Tests for the `backend_factory.py` module.
"""

import pytest
from pytest_mock import MockerFixture

from gendao.backends.backend_factory import DaoBackendFactory
from gendao.backends.mongo import MongoDao
from gendao.backends.redis import RedisDao
from gendao.backends.sqlite import SQLiteDao
from gendao.exceptions import BackendNotSupportedError
from tests.fixture_types import FixtureRedis, FixtureStr


class TestDaoBackendFactory:
    """
    Test suite for the `DaoBackendFactory`.

    This class tests that the backend factory registers, resolves, instantiates,
    and reports the supported DAO backends.
    """

    @pytest.fixture
    def backend_factory(self, mocker: MockerFixture) -> DaoBackendFactory:
        """
        An instance of the `DaoBackendFactory` class with no installed plugins.

        Args:
            mocker: PyTest mocker fixture.

        Returns:
            An instance of the `DaoBackendFactory` class for testing.
        """
        mocker.patch("gendao.abstracts.factory.entry_points", return_value=[])
        return DaoBackendFactory()

    def test_list_available_backends(self, backend_factory: DaoBackendFactory):
        """
        Test that `list_available` returns the built-in backends.

        Args:
            backend_factory: An instance of the `DaoBackendFactory` class for testing.
        """
        assert set(backend_factory.list_available()) == {"mongo", "redis", "sqlite"}

    @pytest.mark.parametrize(
        "alias, expected_cls", [("mongodb", MongoDao), ("rediss", RedisDao), ("sqlite", SQLiteDao)]
    )
    def test_aliases(self, backend_factory: DaoBackendFactory, alias: str, expected_cls: type):
        """
        Test that names and aliases resolve to the right DAO class.

        Args:
            backend_factory: An instance of the `DaoBackendFactory` class for testing.
            alias: The name or alias of the backend.
            expected_cls: The DAO class the alias should resolve to.
        """
        assert backend_factory.get_component_class(alias) is expected_cls

    def test_create_sqlite_dao(self, backend_factory: DaoBackendFactory, sqlite_db_path: FixtureStr):
        """
        Test creating a SQLite DAO with constructor arguments.

        Args:
            backend_factory: An instance of the `DaoBackendFactory` class for testing.
            sqlite_db_path: The path to the test database.
        """
        dao = backend_factory.create("sqlite", {"db_path": sqlite_db_path, "tx_mode": True})
        assert isinstance(dao, SQLiteDao)
        assert dao.db_path == sqlite_db_path
        assert dao.is_tx_mode()

    def test_create_redis_dao(self, backend_factory: DaoBackendFactory, mock_redis: FixtureRedis):
        """
        Test creating a Redis DAO around an existing client.

        Args:
            backend_factory: An instance of the `DaoBackendFactory` class for testing.
            mock_redis: A mocked Redis client.
        """
        dao = backend_factory.create("rediss", {"client": mock_redis})
        assert isinstance(dao, RedisDao)
        assert dao.client is mock_redis

    def test_create_invalid_backend(self, backend_factory: DaoBackendFactory):
        """
        Test that unknown backends raise `BackendNotSupportedError`.

        Args:
            backend_factory: An instance of the `DaoBackendFactory` class for testing.
        """
        with pytest.raises(BackendNotSupportedError, match="not supported"):
            backend_factory.create("cassandra")

    def test_create_with_missing_arguments(self, backend_factory: DaoBackendFactory):
        """
        Test that a DAO that can't be constructed is reported as a ValueError.

        Args:
            backend_factory: An instance of the `DaoBackendFactory` class for testing.
        """
        with pytest.raises(ValueError, match="Failed to create component 'redis'"):
            backend_factory.create("redis", {})

    def test_register_non_dao_raises(self, backend_factory: DaoBackendFactory):
        """
        Test that only `GenericDao` subclasses can be registered.

        Args:
            backend_factory: An instance of the `DaoBackendFactory` class for testing.
        """
        with pytest.raises(TypeError, match="must inherit from GenericDao"):
            backend_factory.register("bogus", dict)

    def test_get_component_info(self, backend_factory: DaoBackendFactory):
        """
        Test metadata returned for a built-in backend.

        Args:
            backend_factory: An instance of the `DaoBackendFactory` class for testing.
        """
        info = backend_factory.get_component_info("mongodb")
        assert info["name"] == "mongo"
        assert info["class"] == "MongoDao"
        assert info["module"] == "gendao.backends.mongo.mongo_dao"
