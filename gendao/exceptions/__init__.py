##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
Module of all gendao-specific exception types.

Errors raised by the underlying backend drivers are not wrapped; they reach the
caller unchanged. Only duplicate-key violations are converted to
`DuplicatedEntryError` so that callers get the same error regardless of backend.
"""

# Pylint complains that these exceptions are no different from Exception
# but we don't care, we just need new names for exceptions here
# pylint: disable=W0235

__all__ = (
    "GdaoError",
    "DuplicatedEntryError",
    "TranslationError",
    "TypeConversionError",
    "AttributeNotFoundError",
    "BackendNotSupportedError",
)


class GdaoError(Exception):
    """
    Base class for all errors raised by gendao itself.
    """


class DuplicatedEntryError(GdaoError):
    """
    Exception to signal that a write failed because of a data integrity
    violation: the entry or one of its unique keys already exists.
    """

    def __init__(self, message: str = "data integrity violation: duplicated entry/key"):
        super().__init__(message)


class TranslationError(GdaoError, ValueError):
    """
    Exception to signal that a filter, sorting, row or JSON payload could not
    be interpreted in any of the recognized shapes.
    """


class TypeConversionError(GdaoError, ValueError):
    """
    Exception to signal that a value could not be converted to the requested type.
    """


class AttributeNotFoundError(GdaoError, LookupError):
    """
    Exception to signal that a business object has no attribute with the given name.
    """


class BackendNotSupportedError(GdaoError):
    """
    Exception to signal that the provided backend is not supported.
    """
