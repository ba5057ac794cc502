##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Tests for the `redis_dao.py` module.
"""

import json
from typing import Dict

import pytest
from pytest_mock import MockerFixture
from redis.exceptions import WatchError

from gendao.backends.redis.redis_dao import RedisDao, build_key, escape_pattern
from gendao.bo import GenericBo
from gendao.exceptions import DuplicatedEntryError, TranslationError
from gendao.mappers import GenericRowMapper
from tests.fixture_types import FixtureCallable, FixtureRedis


def populate(mock_redis: FixtureRedis, rows: Dict[str, Dict]):
    """
    Make the mocked client serve `rows` from `scan_iter` and `hgetall`.

    Args:
        mock_redis: A mocked Redis client.
        rows: Key -> row. Row values are JSON-encoded the way the DAO stores them.
    """
    store = {key: {name: json.dumps(value) for name, value in row.items()} for key, row in rows.items()}

    def _scan_iter(match: str = None):
        prefix = match[:-1] if match and match.endswith("*") else ""
        # Unordered on purpose, like a real SCAN
        return iter(sorted((key for key in store if key.startswith(prefix)), reverse=True))

    mock_redis.scan_iter.side_effect = _scan_iter
    mock_redis.hgetall.side_effect = lambda key: dict(store.get(key, {}))


class TestKeyHelpers:
    """Tests for the module-level key helpers."""

    def test_escape_pattern(self):
        """Test that glob characters are escaped."""
        assert escape_pattern("users") == "users"
        assert escape_pattern("a*b?[c]") == "a\\*b\\?\\[c\\]"
        assert escape_pattern("back\\slash") == "back\\\\slash"

    @pytest.mark.parametrize(
        "filters, expected",
        [
            ({"id": "u1"}, 'users:"u1"'),
            ({"id": 5}, "users:5"),
            ({"id": "5"}, 'users:"5"'),
            ({"id": 5.0}, "users:5"),
            ({"id": None}, "users:null"),
            ({"id": {"b": 1, "a": 2}}, 'users:{"a":2,"b":1}'),
            ({"b": 2, "a": "x"}, 'users:["x",2]'),
        ],
    )
    def test_build_key(self, filters: Dict, expected: str):
        """
        Test the keys built from various filters.

        Args:
            filters: The filter of a business object.
            expected: The expected key.
        """
        assert build_key("users", filters) == expected

    def test_build_key_is_independent_of_filter_order(self):
        """Test that multi-column keys don't depend on the order of the filter."""
        assert build_key("users", {"a": 1, "b": 2}) == build_key("users", {"b": 2, "a": 1})

    def test_build_key_tells_strings_from_numbers(self):
        """Test that a string and a number with the same text get different keys."""
        assert build_key("users", {"id": "5"}) != build_key("users", {"id": 5})

    def test_build_key_empty_filter(self):
        """Test that an empty filter can't identify a business object."""
        with pytest.raises(TranslationError):
            build_key("users", {})


class TestRedisDaoInit:
    """Tests for the construction of a `RedisDao`."""

    def test_needs_client_or_url(self):
        """Test that a client or a URL is required."""
        with pytest.raises(ValueError, match="client or a url"):
            RedisDao()

    def test_builds_client_from_url(self, mocker: MockerFixture):
        """
        Test that a client is built from the URL when none is given.

        Args:
            mocker: PyTest mocker fixture.
        """
        mock_redis_cls = mocker.patch("gendao.backends.redis.redis_dao.Redis")

        dao = RedisDao(url="redis://localhost:6379/0")

        mock_redis_cls.from_url.assert_called_once_with("redis://localhost:6379/0")
        assert dao.client is mock_redis_cls.from_url.return_value

    def test_defaults(self, mock_redis: FixtureRedis):
        """
        Test the default row mapper and transaction mode.

        Args:
            mock_redis: A mocked Redis client.
        """
        dao = RedisDao(mock_redis, primary_keys=["userId"])
        assert isinstance(dao.get_row_mapper(), GenericRowMapper)
        assert not dao.is_tx_mode()
        dao.enable_tx_mode(True)
        assert dao.is_tx_mode()


class TestRedisDaoWrites:
    """Tests for `create`, `update`, and `save`."""

    @pytest.fixture
    def dao(self, mock_redis: FixtureRedis) -> RedisDao:
        """
        A `RedisDao` over the mocked client, keyed on `userId`.

        Args:
            mock_redis: A mocked Redis client.

        Returns:
            The DAO.
        """
        return RedisDao(mock_redis, primary_keys={"*": ["userId"]})

    def test_create(self, dao: RedisDao, mock_redis: FixtureRedis, make_user_bo: FixtureCallable):
        """
        Test that `create` writes one hash of JSON-encoded fields.

        Args:
            dao: A `RedisDao` over the mocked client.
            mock_redis: A mocked Redis client.
            make_user_bo: Helper building user business objects.
        """
        mock_redis.exists.return_value = 0

        assert dao.create("users", make_user_bo("u1", age=36, tags=["a"])) == 1

        mock_redis.exists.assert_called_once_with('users:"u1"')
        mock_redis.hset.assert_called_once_with(
            'users:"u1"', mapping={"userId": '"u1"', "age": "36", "tags": '["a"]'}
        )

    def test_create_duplicate(self, dao: RedisDao, mock_redis: FixtureRedis, make_user_bo: FixtureCallable):
        """
        Test that `create` refuses to overwrite an existing hash.

        Args:
            dao: A `RedisDao` over the mocked client.
            mock_redis: A mocked Redis client.
            make_user_bo: Helper building user business objects.
        """
        mock_redis.exists.return_value = 1

        with pytest.raises(DuplicatedEntryError):
            dao.create("users", make_user_bo("u1"))

        mock_redis.hset.assert_not_called()

    def test_create_with_number_when_string_exists(self, mock_redis: FixtureRedis):
        """
        Test that a business object keyed by a number isn't a duplicate of one keyed
        by the same digits as a string.

        Args:
            mock_redis: A mocked Redis client.
        """
        dao = RedisDao(mock_redis, primary_keys=["id"])
        mock_redis.exists.side_effect = lambda key: int(key == 'items:"5"')

        assert dao.create("items", GenericBo({"id": 5, "n": 1})) == 1

        mock_redis.exists.assert_called_once_with("items:5")
        mock_redis.hset.assert_called_once_with("items:5", mapping={"id": "5", "n": "1"})

    def test_create_in_tx_mode(self, dao: RedisDao, mock_redis: FixtureRedis, make_user_bo: FixtureCallable):
        """
        Test that `create` in transaction mode watches the key and writes inside MULTI/EXEC.

        Args:
            dao: A `RedisDao` over the mocked client.
            mock_redis: A mocked Redis client.
            make_user_bo: Helper building user business objects.
        """
        dao.enable_tx_mode(True)
        pipe = mock_redis.mock_pipeline
        pipe.exists.return_value = 0

        assert dao.create("users", make_user_bo("u1")) == 1

        pipe.watch.assert_called_once_with('users:"u1"')
        pipe.multi.assert_called_once()
        pipe.hset.assert_called_once_with('users:"u1"', mapping={"userId": '"u1"'})
        pipe.execute.assert_called_once()
        mock_redis.hset.assert_not_called()

    def test_create_in_tx_mode_duplicate(
        self, dao: RedisDao, mock_redis: FixtureRedis, make_user_bo: FixtureCallable
    ):
        """
        Test that `create` in transaction mode refuses an existing key.

        Args:
            dao: A `RedisDao` over the mocked client.
            mock_redis: A mocked Redis client.
            make_user_bo: Helper building user business objects.
        """
        dao.enable_tx_mode(True)
        pipe = mock_redis.mock_pipeline
        pipe.exists.return_value = 1

        with pytest.raises(DuplicatedEntryError):
            dao.create("users", make_user_bo("u1"))

        pipe.execute.assert_not_called()

    def test_create_in_tx_mode_concurrent_write(
        self, dao: RedisDao, mock_redis: FixtureRedis, make_user_bo: FixtureCallable
    ):
        """
        Test that a key written between WATCH and EXEC is reported as a duplicate.

        Args:
            dao: A `RedisDao` over the mocked client.
            mock_redis: A mocked Redis client.
            make_user_bo: Helper building user business objects.
        """
        dao.enable_tx_mode(True)
        pipe = mock_redis.mock_pipeline
        pipe.exists.return_value = 0
        pipe.execute.side_effect = WatchError("Watched variable changed.")

        with pytest.raises(DuplicatedEntryError, match="concurrently"):
            dao.create("users", make_user_bo("u1"))

    def test_update_missing(self, dao: RedisDao, mock_redis: FixtureRedis, make_user_bo: FixtureCallable):
        """
        Test that updating a missing hash writes nothing.

        Args:
            dao: A `RedisDao` over the mocked client.
            mock_redis: A mocked Redis client.
            make_user_bo: Helper building user business objects.
        """
        pipe = mock_redis.mock_pipeline
        pipe.exists.return_value = 0

        assert dao.update("users", make_user_bo("ghost")) == 0

        pipe.multi.assert_not_called()
        pipe.execute.assert_not_called()

    def test_update_replaces_hash(self, dao: RedisDao, mock_redis: FixtureRedis, make_user_bo: FixtureCallable):
        """
        Test that updating an existing hash replaces all of its fields.

        Args:
            dao: A `RedisDao` over the mocked client.
            mock_redis: A mocked Redis client.
            make_user_bo: Helper building user business objects.
        """
        pipe = mock_redis.mock_pipeline
        pipe.exists.return_value = 1

        assert dao.update("users", make_user_bo("u1", name="Bob")) == 1

        pipe.watch.assert_called_once_with('users:"u1"')
        pipe.delete.assert_called_once_with('users:"u1"')
        pipe.hset.assert_called_once_with('users:"u1"', mapping={"userId": '"u1"', "name": '"Bob"'})
        pipe.execute.assert_called_once()

    def test_save(self, dao: RedisDao, mock_redis: FixtureRedis, make_user_bo: FixtureCallable):
        """
        Test that `save` replaces the hash in a single transaction.

        Args:
            dao: A `RedisDao` over the mocked client.
            mock_redis: A mocked Redis client.
            make_user_bo: Helper building user business objects.
        """
        pipe = mock_redis.mock_pipeline

        assert dao.save("users", make_user_bo("u1", name="Ada")) == 1

        mock_redis.pipeline.assert_called_once_with(transaction=True)
        pipe.delete.assert_called_once_with('users:"u1"')
        pipe.hset.assert_called_once_with('users:"u1"', mapping={"userId": '"u1"', "name": '"Ada"'})
        pipe.execute.assert_called_once()


class TestRedisDaoReads:
    """Tests for `fetch_one`, `fetch_many`, `delete`, and `delete_many`."""

    @pytest.fixture
    def dao(self, mock_redis: FixtureRedis) -> RedisDao:
        """
        A `RedisDao` over a mocked client holding four users and one unrelated key.

        Args:
            mock_redis: A mocked Redis client.

        Returns:
            The DAO.
        """
        populate(
            mock_redis,
            {
                'users:"u1"': {"userId": "u1", "name": "Ada", "age": 36, "active": True},
                'users:"u2"': {"userId": "u2", "name": "Bob", "age": 25, "active": False},
                'users:"u3"': {"userId": "u3", "name": "Cy", "age": 41, "active": True},
                'users:"u4"': {"userId": "u4", "name": "Bob", "age": None, "active": 1},
                'orders:"o1"': {"orderId": "o1"},
            },
        )
        return RedisDao(mock_redis, primary_keys=["userId"])

    def test_fetch_one_by_key(self, dao: RedisDao, mock_redis: FixtureRedis):
        """
        Test that a filter identifying a key is served without a scan.

        Args:
            dao: A `RedisDao` over a populated mocked client.
            mock_redis: A mocked Redis client.
        """
        bo = dao.fetch_one("users", {"userId": "u1"})

        assert bo == GenericBo({"userId": "u1", "name": "Ada", "age": 36, "active": True})
        mock_redis.hgetall.assert_called_once_with('users:"u1"')
        mock_redis.scan_iter.assert_not_called()

    def test_fetch_one_by_scan(self, dao: RedisDao, mock_redis: FixtureRedis):
        """
        Test that a filter on other fields falls back to a scan and picks the lowest key.

        Args:
            dao: A `RedisDao` over a populated mocked client.
            mock_redis: A mocked Redis client.
        """
        bo = dao.fetch_one("users", {"name": "Bob"})

        assert bo.get_attr("userId") == "u2"
        mock_redis.scan_iter.assert_called_once_with(match="users:*")

    def test_fetch_one_key_hit_not_matching_filter(self, dao: RedisDao):
        """
        Test that a hash found at the derived key must still satisfy the filter.

        Args:
            dao: A `RedisDao` over a populated mocked client.
        """
        assert dao.fetch_one("users", {"name": "u1"}) is None

    def test_fetch_one_no_match(self, dao: RedisDao):
        """
        Test that no match gives None.

        Args:
            dao: A `RedisDao` over a populated mocked client.
        """
        assert dao.fetch_one("users", {"userId": "nobody"}) is None

    def test_fetch_many_filters(self, dao: RedisDao):
        """
        Test equality, membership, null, and type-strict boolean filters.

        Args:
            dao: A `RedisDao` over a populated mocked client.
        """

        def ids(bos):
            return [bo.get_attr("userId") for bo in bos]

        assert ids(dao.fetch_many("users")) == ["u1", "u2", "u3", "u4"]
        assert ids(dao.fetch_many("users", {"name": "Bob"})) == ["u2", "u4"]
        assert ids(dao.fetch_many("users", {"userId": ["u3", "u1", "zz"]})) == ["u1", "u3"]
        assert ids(dao.fetch_many("users", {"age": None})) == ["u4"]
        assert ids(dao.fetch_many("users", {"active": True})) == ["u1", "u3"]
        assert ids(dao.fetch_many("users", '{"name": "Cy"}')) == ["u3"]

    def test_fetch_many_sorted_and_paged(self, dao: RedisDao):
        """
        Test that sorting is applied before paging, with nulls first.

        Args:
            dao: A `RedisDao` over a populated mocked client.
        """
        result = dao.fetch_many("users", sorting={"age": 1})
        assert [bo.get_attr("userId") for bo in result] == ["u4", "u2", "u1", "u3"]

        result = dao.fetch_many("users", sorting={"age": "desc"}, start_offset=1, num_items=2)
        assert [bo.get_attr("userId") for bo in result] == ["u1", "u2"]

        result = dao.fetch_many("users", sorting={"age": -1}, start_offset=3, num_items=0)
        assert [bo.get_attr("userId") for bo in result] == ["u4"]

    def test_fetch_many_only_scans_its_storage(self, dao: RedisDao):
        """
        Test that keys of other storages are never returned.

        Args:
            dao: A `RedisDao` over a populated mocked client.
        """
        assert dao.fetch_many("orders") == [GenericBo({"orderId": "o1"})]

    def test_fetch_keeps_non_json_values(self, mock_redis: FixtureRedis):
        """
        Test that hash fields written by something else are kept as text.

        Args:
            mock_redis: A mocked Redis client.
        """
        mock_redis.hgetall.return_value = {b"userId": b'"u9"', b"note": b"plain text"}
        dao = RedisDao(mock_redis, primary_keys=["userId"])

        assert dao.fetch_one("users", {"userId": "u9"}) == GenericBo({"userId": "u9", "note": "plain text"})

    def test_delete_many(self, dao: RedisDao, mock_redis: FixtureRedis):
        """
        Test that the matching keys are deleted in one call.

        Args:
            dao: A `RedisDao` over a populated mocked client.
            mock_redis: A mocked Redis client.
        """
        mock_redis.delete.return_value = 2

        assert dao.delete_many("users", {"name": "Bob"}) == 2
        mock_redis.delete.assert_called_once_with('users:"u2"', 'users:"u4"')

    def test_delete_many_no_match(self, dao: RedisDao, mock_redis: FixtureRedis):
        """
        Test that nothing is deleted when nothing matches.

        Args:
            dao: A `RedisDao` over a populated mocked client.
            mock_redis: A mocked Redis client.
        """
        assert dao.delete_many("users", {"name": "Zed"}) == 0
        mock_redis.delete.assert_not_called()

    def test_delete(self, dao: RedisDao, mock_redis: FixtureRedis):
        """
        Test that `delete` removes the business object matching the key of a business object.

        Args:
            dao: A `RedisDao` over a populated mocked client.
            mock_redis: A mocked Redis client.
        """
        mock_redis.delete.return_value = 1

        assert dao.delete("users", GenericBo({"userId": "u3", "name": "ignored"})) == 1
        mock_redis.delete.assert_called_once_with('users:"u3"')
