##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Used to store the DAO configuration.

The `config` package loads a YAML description of a DAO (which backend to use, how
the row mapper translates names, and which fields form the primary keys) and
turns it into ready-to-use objects.

Modules:
    configfile.py: Loads configuration files and builds row mappers and DAOs from them.
"""
from copy import copy
from types import SimpleNamespace
from typing import Dict, List, Optional

from gendao.utils import nested_dict_to_namespaces


SECTIONS: List[str] = ["backend", "row_mapper", "dao"]


class Config:  # pylint: disable=R0903
    """
    The Config class, meant to store all gendao config settings in one place.

    Attributes:
        backend (Optional[SimpleNamespace]): The backend type and its connection settings.
        row_mapper (Optional[SimpleNamespace]): Name transformation, translation tables, and column lists.
        dao (Optional[SimpleNamespace]): Primary keys and transaction mode.

    Methods:
        from_file: Build a Config from a YAML file.
        load_app_into_namespaces: Converts the provided configuration dictionary into namespaces
            and assigns them to the Config instance's attributes.
    """

    def __init__(self, app_dict: Dict):
        """
        Initializes the Config instance with configuration data from a dictionary.

        Args:
            app_dict: A dictionary that may include the keys "backend", "row_mapper" and "dao",
                each of which is converted into a `SimpleNamespace`. Missing sections are None.
        """
        self.backend: Optional[SimpleNamespace] = None
        self.row_mapper: Optional[SimpleNamespace] = None
        self.dao: Optional[SimpleNamespace] = None
        self.load_app_into_namespaces(app_dict or {})

    @classmethod
    def from_file(cls, filepath: str) -> Optional["Config"]:
        """
        Build a Config from a YAML file.

        Args:
            filepath: The path to the YAML configuration file.

        Returns:
            The configuration, or None if the file doesn't exist.
        """
        from gendao.config.configfile import load_config  # pylint: disable=import-outside-toplevel

        app_dict = load_config(filepath)
        if app_dict is None:
            return None
        return cls(app_dict)

    def __copy__(self) -> "Config":
        cls = self.__class__
        result = cls.__new__(cls)
        result.__dict__.update({section: copy(self.__dict__[section]) for section in SECTIONS})
        return result

    def __str__(self) -> str:
        formatted_str = "config:"
        for name in SECTIONS:
            attr = getattr(self, name)
            if attr is not None:
                items = (f"    {k}: {v!r}" for k, v in attr.__dict__.items())
                joined_items = "\n".join(items)
                formatted_str += f"\n  {name}:\n{joined_items}"
            else:
                formatted_str += f"\n  {name}:\n    None"
        return formatted_str

    def load_app_into_namespaces(self, app_dict: Dict):
        """
        Converts the provided application dictionary into namespaces and assigns them
        to the Config instance's attributes.

        Args:
            app_dict: A dictionary containing configuration data.
        """
        for field in SECTIONS:
            try:
                section = app_dict[field]
            except KeyError:
                # The sections are optional
                continue
            if section is not None:
                setattr(self, field, nested_dict_to_namespaces(section))
