##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
This module houses the dataclass base for application-level business objects.

Applications usually work with typed objects rather than with `GenericBo`
attribute bags. Subclassing `BoModel` gives such an object the dictionary/JSON
conversions that `GenericBo.transfer_via_json` and `GenericBo.import_via_json`
rely on.
"""

import json
import logging
from dataclasses import Field, asdict, dataclass, field
from dataclasses import fields as dataclass_fields
from typing import Dict, Tuple, Type, TypeVar


LOG = logging.getLogger(__name__)
T = TypeVar("T", bound="BoModel")


@dataclass
class BoModel:
    """
    A base class for dataclasses that provides common serialization and
    deserialization functionality, with support for additional data.

    Attributes:
        additional_data: A dictionary to store any extra data not explicitly defined
            as fields in the dataclass.

    Methods:
        to_dict: Convert the dataclass instance to a dictionary.
        to_json: Serialize the dataclass instance to a JSON string.
        from_dict (classmethod): Create an instance of the dataclass from a dictionary.
        from_json (classmethod): Create an instance of the dataclass from a JSON string.
        get_instance_fields: Retrieve the fields associated with this dataclass instance.
        get_class_fields (classmethod): Retrieve the fields associated with the dataclass itself.
    """

    additional_data: Dict = field(default_factory=dict)

    def to_dict(self) -> Dict:
        """
        Convert the dataclass to a dictionary.

        Entries of `additional_data` are flattened into the top level so that the
        result looks like the record it was built from.

        Returns:
            The dataclass as a dictionary.
        """
        data = asdict(self)
        extra = data.pop("additional_data", {}) or {}
        for key, val in extra.items():
            data.setdefault(key, val)
        return data

    def to_json(self) -> str:
        """
        Serialize the dataclass to a JSON string.

        Returns:
            The dataclass as a JSON string.
        """
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls: Type[T], data: Dict) -> T:
        """
        Create an instance of the dataclass from a dictionary.

        Keys that don't match a field of the dataclass are kept in `additional_data`.

        Args:
            data: A dictionary to turn into an instance of this dataclass.

        Returns:
            An instance of the dataclass that called this.
        """
        field_names = {fld.name for fld in cls.get_class_fields()}
        known = {}
        extra = dict(data.get("additional_data") or {})
        for key, val in data.items():
            if key == "additional_data":
                continue
            if key in field_names:
                known[key] = val
            else:
                LOG.debug(f"Field '{key}' does not exist in {cls.__name__}. Adding it to 'additional_data'.")
                extra[key] = val
        return cls(additional_data=extra, **known)

    @classmethod
    def from_json(cls: Type[T], json_str: str) -> T:
        """
        Create an instance of the dataclass from a JSON string.

        Args:
            json_str: A JSON string to turn into an instance of this dataclass.

        Returns:
            An instance of the dataclass that called this.
        """
        data = json.loads(json_str)
        return cls.from_dict(data)

    def get_instance_fields(self) -> Tuple[Field]:
        """
        Get the fields associated with this instance.

        Returns:
            A tuple of dataclass.Field objects representing the fields in this data class.
        """
        return dataclass_fields(self)

    @classmethod
    def get_class_fields(cls) -> Tuple[Field]:
        """
        Get the fields associated with this object.

        Returns:
            A tuple of dataclass.Field objects representing the fields in this data class.
        """
        return dataclass_fields(cls)
