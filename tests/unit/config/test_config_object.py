##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Test the functionality of the Config object.
"""

from copy import copy
from types import SimpleNamespace

from gendao.config import Config
from tests.fixture_types import FixtureCallable


class TestConfig:
    """
    Class for testing the Config object. We'll store a valid `app_dict`
    as an attribute here so that each test doesn't have to redefine it
    each time.
    """

    app_dict = {
        "backend": {"type": "sqlite", "db_path": "/tmp/gendao.db"},
        "row_mapper": {"name_transformation": "lower_case", "columns": {"users": ["user_id", "name"]}},
        "dao": {"primary_keys": ["userId"], "tx_mode": True},
    }

    def test_config_creation(self):
        """
        Test the creation of the Config object. This should create nested namespaces
        for each section in the `app_dict` variable and save them to their respective
        attributes in the object.
        """
        config = Config(self.app_dict)

        assert config.backend == SimpleNamespace(**self.app_dict["backend"])
        assert config.row_mapper == SimpleNamespace(
            name_transformation="lower_case", columns=SimpleNamespace(users=["user_id", "name"])
        )
        assert config.dao == SimpleNamespace(**self.app_dict["dao"])

    def test_config_creation_missing_sections(self):
        """
        Test the creation of the Config object with missing or empty sections.
        These should just be left as None.
        """
        config = Config({"backend": self.app_dict["backend"], "dao": None, "unrelated": {"a": 1}})

        assert config.backend == SimpleNamespace(**self.app_dict["backend"])
        assert config.row_mapper is None
        assert config.dao is None
        assert not hasattr(config, "unrelated")

    def test_config_creation_does_not_alias_input(self):
        """
        Test that modifying the Config object doesn't modify the dictionary it was built from.
        """
        config = Config(self.app_dict)
        config.row_mapper.columns.users.append("age")

        assert self.app_dict["row_mapper"]["columns"]["users"] == ["user_id", "name"]

    def test_config_copy(self):
        """
        Test the `__copy__` magic method of the Config object. Here we'll make sure
        each section of the copy is a different object with the same values.
        """
        config = Config(self.app_dict)
        copied_config = copy(config)

        assert config is not copied_config
        assert config.backend is not copied_config.backend
        assert config.backend == copied_config.backend
        assert config.row_mapper == copied_config.row_mapper
        assert config.dao == copied_config.dao

    def test_config_str(self):
        """
        Test the `__str__` magic method of the Config object.
        """
        config = Config({"backend": self.app_dict["backend"]})

        expected_str = (
            "config:\n"
            "  backend:\n"
            "    type: 'sqlite'\n"
            "    db_path: '/tmp/gendao.db'\n"
            "  row_mapper:\n"
            "    None\n"
            "  dao:\n"
            "    None"
        )
        assert str(config) == expected_str

    def test_from_file(self, write_yaml_file: FixtureCallable):
        """
        Test that a Config object can be read from a YAML file.

        Args:
            write_yaml_file: Helper writing a dictionary to a YAML file.
        """
        config = Config.from_file(write_yaml_file(self.app_dict))

        assert config.backend.type == "sqlite"
        assert config.dao.primary_keys == ["userId"]
        assert config.dao.tx_mode is True

    def test_from_file_missing(self, tmp_path):
        """
        Test that no Config object is built from a file that doesn't exist.

        Args:
            tmp_path: PyTest temporary path fixture.
        """
        assert Config.from_file(str(tmp_path / "missing.yaml")) is None
