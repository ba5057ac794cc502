##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
The generic business object (GBO).

A `GenericBo` is a backend-agnostic attribute bag: a mapping from attribute name
to any JSON-representable value. It is what row mappers produce and consume,
and JSON is the bridge between a `GenericBo` and an application-level typed
object (see `transfer_via_json` and `import_via_json`).
"""

import dataclasses
import json
import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Dict, List, Type, TypeVar, Union

from gendao.coercion import TargetType, to_type, zero_value
from gendao.exceptions import AttributeNotFoundError, TranslationError, TypeConversionError


LOG = logging.getLogger(__name__)
T = TypeVar("T")


def _json_default(value: Any) -> Any:
    """
    Fallback encoder for values that the `json` module can't serialize natively.

    Args:
        value: The value to encode.

    Returns:
        A JSON-representable version of `value`.

    Raises:
        TypeError: If `value` has no JSON representation.
    """
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return list(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dump_json(data: Any) -> bytes:
    """
    Serialize `data` to canonical JSON: sorted keys, compact separators, UTF-8.

    Args:
        data: The data to serialize.

    Returns:
        The canonical JSON encoding of `data`.

    Raises:
        TranslationError: If `data` contains values with no JSON representation.
    """
    try:
        return json.dumps(
            data, default=_json_default, sort_keys=True, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise TranslationError(f"Data is not JSON-serializable: {exc}") from exc


def load_json_object(data: Union[str, bytes, bytearray, memoryview]) -> Dict:
    """
    Parse a JSON document whose top level must be an object.

    Args:
        data: The JSON document as text or bytes.

    Returns:
        The parsed object.

    Raises:
        TranslationError: If `data` is malformed JSON or not a JSON object.
    """
    if isinstance(data, (bytearray, memoryview)):
        data = bytes(data)
    try:
        loaded = json.loads(data)
    except (TypeError, ValueError) as exc:
        raise TranslationError(f"Invalid JSON: {exc}") from exc
    if not isinstance(loaded, dict):
        raise TranslationError(f"Expected a JSON object but got {type(loaded).__name__}")
    return loaded


class GenericBo:
    """
    A dynamically-typed, JSON-serializable attribute container.

    Attribute names are case-sensitive strings. Values are JSON-representable:
    `None`, `bool`, `int`, `float`, `str`, `list` or `dict` (nested freely).

    Methods:
        from_json: Replace all attributes with the contents of a JSON object.
        to_json: Serialize the attributes to canonical JSON.
        get_attr: Read an attribute, converting it to a target type.
        get_attr_unsafe: Like `get_attr` but returns a default instead of raising.
        set_attr: Set or overwrite an attribute.
        remove_attr: Remove an attribute.
        transfer_via_json: Convert this object into an application-level typed object.
        import_via_json: Load the attributes of an application-level typed object.
    """

    def __init__(self, data: Mapping = None):
        """
        Create a new business object.

        Args:
            data: Optional initial attributes. They are deep-copied through JSON.
        """
        self._attrs: Dict[str, Any] = {}
        if data is not None:
            if not isinstance(data, Mapping):
                raise TranslationError(f"Cannot build a GenericBo from {type(data).__name__}")
            self._attrs = load_json_object(dump_json(dict(data)))

    @classmethod
    def from_object(cls, source: Any) -> "GenericBo":
        """
        Build a new business object from an application-level typed object.

        Args:
            source: A `BoModel`, dataclass instance, mapping or plain object.

        Returns:
            A new `GenericBo` holding the attributes of `source`.
        """
        return cls().import_via_json(source)

    def from_json(self, data: Union[str, bytes, bytearray, memoryview]) -> "GenericBo":
        """
        Replace all attributes of this object with the contents of a JSON object.

        Args:
            data: A JSON object as text or bytes.

        Returns:
            This object.

        Raises:
            TranslationError: If `data` is malformed JSON or not a JSON object.
        """
        self._attrs = load_json_object(data)
        return self

    def to_json(self) -> bytes:
        """
        Serialize the attributes of this object to canonical JSON.

        Returns:
            The JSON encoding of the attributes.
        """
        return dump_json(self._attrs)

    def to_dict(self) -> Dict[str, Any]:
        """
        Get a deep copy of the attributes of this object, as plain JSON values.

        Returns:
            A dictionary of the attributes.
        """
        return load_json_object(self.to_json())

    def attr_names(self) -> List[str]:
        """Get the names of all attributes of this object."""
        return list(self._attrs.keys())

    def clone(self) -> "GenericBo":
        """Create an independent copy of this object."""
        return GenericBo().from_json(self.to_json())

    def get_attr(self, name: str, target_type: TargetType = None) -> Any:
        """
        Read an attribute, converting it to `target_type`.

        Args:
            name: The name of the attribute.
            target_type: The type to convert the value to. If None, the raw value is returned.

        Returns:
            The (converted) value, or None if the attribute holds null.

        Raises:
            AttributeNotFoundError: If this object has no attribute named `name`.
            TypeConversionError: If the value can't be converted to `target_type`.
        """
        if name not in self._attrs:
            raise AttributeNotFoundError(f"Attribute '{name}' does not exist")
        return to_type(self._attrs[name], target_type)

    def get_attr_unsafe(self, name: str, target_type: TargetType = None) -> Any:
        """
        Read an attribute like `get_attr` but never raise.

        Args:
            name: The name of the attribute.
            target_type: The type to convert the value to. If None, the raw value is returned.

        Returns:
            The (converted) value. A missing attribute gives None and a value that
            can't be converted gives the zero value of `target_type`.
        """
        try:
            return self.get_attr(name, target_type)
        except AttributeNotFoundError:
            return None
        except TypeConversionError as exc:
            LOG.debug(f"Returning zero value for attribute '{name}': {exc}")
            return zero_value(target_type)

    def set_attr(self, name: str, value: Any) -> "GenericBo":
        """
        Set or overwrite an attribute.

        The value is copied through JSON, so later changes to `value` don't
        reach this object and tuples, sets or datetimes are stored as their
        JSON representation.

        Args:
            name: The name of the attribute.
            value: The value of the attribute.

        Returns:
            This object, so calls can be chained.

        Raises:
            TranslationError: If `value` has no JSON representation.
        """
        self._attrs[name] = load_json_object(dump_json({name: value}))[name]
        return self

    def remove_attr(self, name: str) -> "GenericBo":
        """
        Remove an attribute if it exists.

        Args:
            name: The name of the attribute.

        Returns:
            This object, so calls can be chained.
        """
        self._attrs.pop(name, None)
        return self

    def transfer_via_json(self, target: Type[T]) -> T:
        """
        Convert this object into an instance of `target` by serializing it to JSON
        and deserializing the JSON into the target type.

        Supported targets are classes providing a `from_dict` classmethod (such as
        `BoModel` subclasses), `dict`, and any class whose constructor accepts the
        attributes as keyword arguments (such as plain dataclasses).

        Args:
            target: The type to convert to.

        Returns:
            An instance of `target`.

        Raises:
            TranslationError: If `target` can't accept the JSON data.
        """
        data = load_json_object(self.to_json())
        try:
            if target is dict:
                return data
            if hasattr(target, "from_dict"):
                return target.from_dict(data)
            return target(**data)
        except (TypeError, ValueError, KeyError) as exc:
            raise TranslationError(f"Cannot decode {self!r} into {getattr(target, '__name__', target)}: {exc}") from exc

    def import_via_json(self, source: Any) -> "GenericBo":
        """
        Replace all attributes of this object with those of `source`, using JSON
        as the intermediate representation.

        Args:
            source: A `BoModel`, dataclass instance, mapping, or object with a `__dict__`.

        Returns:
            This object.

        Raises:
            TranslationError: If `source` can't be serialized to a JSON object.
        """
        if hasattr(source, "to_dict"):
            data = source.to_dict()
        elif dataclasses.is_dataclass(source) and not isinstance(source, type):
            data = dataclasses.asdict(source)
        elif isinstance(source, Mapping):
            data = dict(source)
        elif hasattr(source, "__dict__"):
            data = vars(source)
        else:
            raise TranslationError(f"Cannot import attributes from {type(source).__name__}")
        return self.from_json(dump_json(data))

    def __contains__(self, name: str) -> bool:
        return name in self._attrs

    def __len__(self) -> int:
        return len(self._attrs)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, GenericBo):
            return NotImplemented
        return self._attrs == other._attrs

    def __repr__(self) -> str:
        return f"GenericBo({self._attrs!r})"
