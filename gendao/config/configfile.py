##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
This module handles loading gendao configuration files and building the objects
they describe.

A configuration file looks like this (every section is optional):

```yaml
backend:
  type: sqlite            # any name or alias known to the backend factory
  db_path: ./gendao.db    # remaining keys are passed to the DAO's constructor
row_mapper:
  name_transformation: lower_case
  gbo_field_to_col_name:
    "*": {userId: user_id}
  col_name_to_gbo_field:
    "*": {user_id: userId}
  columns:
    users: [user_id, name]
dao:
  primary_keys:
    "*": [userId]
  tx_mode: true
```
"""
import logging
import os
from types import SimpleNamespace
from typing import Any, Dict, Optional

from gendao.backends.backend_factory import backend_factory
from gendao.config import Config
from gendao.dao.generic_dao import GenericDao
from gendao.mappers.row_mapper import GenericRowMapper, NameTransformation
from gendao.utils import get_yaml_var, load_yaml, nested_namespace_to_dicts


LOG = logging.getLogger(__name__)


def load_config(filepath: str) -> Optional[Dict]:
    """
    Reads a gendao YAML configuration file and returns its contents as a dictionary.

    Args:
        filepath: The path to the YAML configuration file.

    Returns:
        A dictionary containing the contents of the YAML file or None if file doesn't exist.
    """
    if not os.path.isfile(filepath):
        LOG.info(f"No config file at {filepath}")
        return None
    LOG.info(f"Reading config from file {filepath}")
    return load_yaml(filepath) or {}


def _as_dict(value: Any) -> Any:
    """Turn a namespace read from the configuration back into plain dictionaries."""
    if isinstance(value, SimpleNamespace):
        return nested_namespace_to_dicts(value)
    return value


def build_row_mapper(config: Config) -> Optional[GenericRowMapper]:
    """
    Build a row mapper from the `row_mapper` section of a configuration.

    Args:
        config: The configuration.

    Returns:
        The row mapper, or None if the configuration has no `row_mapper` section
        (the DAO then uses its own default).

    Raises:
        ValueError: If `name_transformation` isn't one of the known transformations.
    """
    section = config.row_mapper
    if section is None:
        return None

    name_transformation = get_yaml_var(section, "name_transformation", NameTransformation.INTACT.value)
    try:
        name_transformation = NameTransformation(str(name_transformation).lower())
    except ValueError as exc:
        valid = ", ".join(item.value for item in NameTransformation)
        raise ValueError(f"Invalid name_transformation '{name_transformation}'. Valid values: {valid}") from exc

    return GenericRowMapper(
        name_transformation=name_transformation,
        gbo_field_to_col_name_translator=_as_dict(get_yaml_var(section, "gbo_field_to_col_name", None)) or {},
        col_name_to_gbo_field_translator=_as_dict(get_yaml_var(section, "col_name_to_gbo_field", None)) or {},
        columns_list_map=_as_dict(get_yaml_var(section, "columns", None)) or {},
    )


def build_dao(config: Config, **connection: Any) -> GenericDao:
    """
    Instantiate the DAO described by a configuration.

    Args:
        config: The configuration. Its `backend` section must at least name the backend `type`.
        **connection: Extra constructor arguments for the DAO, typically an already
            connected client (`client=` for Redis, `database=` for MongoDB). They take
            precedence over the settings of the `backend` section.

    Returns:
        The DAO.

    Raises:
        ValueError: If the configuration doesn't name a backend type.
        BackendNotSupportedError: If the backend type isn't known to the factory.
    """
    if config.backend is None or get_yaml_var(config.backend, "type", None) is None:
        raise ValueError("The configuration must name a backend type under 'backend.type'.")

    backend_settings = _as_dict(config.backend)
    backend_type = backend_settings.pop("type")

    dao_kwargs = dict(backend_settings)
    dao_kwargs.update(connection)

    row_mapper = build_row_mapper(config)
    if row_mapper is not None:
        dao_kwargs["row_mapper"] = row_mapper

    if config.dao is not None:
        primary_keys = _as_dict(get_yaml_var(config.dao, "primary_keys", None))
        if primary_keys is not None:
            dao_kwargs["primary_keys"] = primary_keys
        dao_kwargs["tx_mode"] = bool(get_yaml_var(config.dao, "tx_mode", False))

    LOG.debug(f"Building a '{backend_type}' DAO with settings {sorted(dao_kwargs)}.")
    return backend_factory.create(backend_type, dao_kwargs)
