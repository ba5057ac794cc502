##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
This module contains pytest fixtures to be used throughout the entire test suite.
"""
import os
from glob import glob

import pytest
import yaml

from tests.fixture_types import FixtureCallable


# pylint: disable=redefined-outer-name


#######################################
# Loading in Module Specific Fixtures #
#######################################

TESTS_DIR = os.path.dirname(os.path.abspath(__file__))
REPO_ROOT = os.path.dirname(TESTS_DIR)

fixture_glob = os.path.join(TESTS_DIR, "fixtures", "**", "*.py")
pytest_plugins = [
    os.path.relpath(fixture_file, REPO_ROOT).replace(os.sep, ".")[: -len(".py")]
    for fixture_file in glob(fixture_glob, recursive=True)
    if not fixture_file.endswith("__init__.py")
]


#######################################
######### Fixture Definitions #########
#######################################


@pytest.fixture
def write_yaml_file(tmp_path) -> FixtureCallable:
    """
    Fixture that provides a helper writing a dictionary to a YAML file in a temporary directory.

    Args:
        tmp_path: PyTest temporary path fixture.

    Returns:
        A function taking a dictionary (and optionally a file name) that returns
        the path to the written file.
    """

    def _write_yaml_file(contents: dict, filename: str = "gendao.yaml") -> str:
        filepath = tmp_path / filename
        with open(filepath, "w") as yaml_file:
            yaml.dump(contents, yaml_file)
        return str(filepath)

    return _write_yaml_file
