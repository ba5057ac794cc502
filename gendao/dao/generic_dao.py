##############################################################################
# Copyright (c) gendao Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to gendao.
##############################################################################

"""
This module defines the interface of a generic data access object.

`GenericDao` outlines the CRUD contract that every backend implementation
(document store, key-value store, relational database) must honor. All
operations take a storage id (the table or collection to act on) and exchange
`GenericBo` instances with the caller.

Common rules for all implementations:

- Absence of a match is never an error: `delete`/`delete_many`/`update` return 0
  and `fetch_one` returns None.
- Integrity violations raise `DuplicatedEntryError`; nothing is written.
- Filters and sortings may be given as a mapping, a JSON string or JSON bytes.
  Any other encoding raises `TranslationError`.
- Errors from the backend driver propagate unchanged and are never retried here.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from gendao.bo.generic_bo import GenericBo
from gendao.mappers.row_mapper import RowMapper


class GenericDao(ABC):
    """
    Base class for all data access objects supported in gendao.

    Methods:
        create_filter: Build a filter matching exactly one business object.
        delete: Remove a business object.
        delete_many: Remove all business objects matching a filter.
        fetch_one: Fetch one business object matching a filter.
        fetch_many: Fetch business objects matching a filter, with sorting and paging.
        create: Insert a business object if it does not exist yet.
        update: Replace an existing business object.
        save: Replace a business object, inserting it if it does not exist.
        enable_tx_mode: Turn on/off the use of backend transactions for writes.
        is_tx_mode: Tell whether transaction mode is enabled.
        get_row_mapper: Get the row mapper used by this DAO.
    """

    @abstractmethod
    def get_row_mapper(self) -> RowMapper:
        """
        Get the row mapper used by this DAO.

        Returns:
            The row mapper.
        """
        raise NotImplementedError("Subclasses of `GenericDao` must implement a `get_row_mapper` method.")

    @abstractmethod
    def create_filter(self, storage_id: str, bo: GenericBo) -> Any:
        """
        Build a filter that matches exactly the given business object, based on its
        primary key attribute(s). Equal business objects must give equal filters.

        Args:
            storage_id: The table/collection the business object lives in.
            bo: The business object.

        Returns:
            A backend-specific filter.
        """
        raise NotImplementedError("Subclasses of `GenericDao` must implement a `create_filter` method.")

    @abstractmethod
    def delete(self, storage_id: str, bo: GenericBo) -> int:
        """
        Remove a business object from the storage.

        Args:
            storage_id: The table/collection to remove the business object from.
            bo: The business object to remove.

        Returns:
            1 if the business object was removed, 0 if it did not exist.
        """
        raise NotImplementedError("Subclasses of `GenericDao` must implement a `delete` method.")

    @abstractmethod
    def delete_many(self, storage_id: str, filter: Any) -> int:  # pylint: disable=redefined-builtin
        """
        Remove all business objects matching a filter.

        Args:
            storage_id: The table/collection to remove business objects from.
            filter: The filter selecting the business objects to remove.

        Returns:
            The number of removed business objects (0 is a valid outcome).
        """
        raise NotImplementedError("Subclasses of `GenericDao` must implement a `delete_many` method.")

    @abstractmethod
    def fetch_one(self, storage_id: str, filter: Any) -> Optional[GenericBo]:  # pylint: disable=redefined-builtin
        """
        Fetch one business object matching a filter.

        If more than one business object matches, which one is returned depends on
        the backend's natural order.

        Args:
            storage_id: The table/collection to fetch from.
            filter: The filter selecting the business object.

        Returns:
            The business object, or None if nothing matches.
        """
        raise NotImplementedError("Subclasses of `GenericDao` must implement a `fetch_one` method.")

    @abstractmethod
    def fetch_many(
        self,
        storage_id: str,
        filter: Any = None,  # pylint: disable=redefined-builtin
        sorting: Any = None,
        start_offset: int = 0,
        num_items: int = 0,
    ) -> List[GenericBo]:
        """
        Fetch business objects matching a filter.

        Args:
            storage_id: The table/collection to fetch from.
            filter: The filter selecting the business objects. None matches everything.
            sorting: Column name -> 1 (ascending) or -1 (descending). None means the
                backend's default order.
            start_offset: Zero-based number of matches to skip.
            num_items: Maximum number of business objects to return. <= 0 means no limit.

        Returns:
            The list of matching business objects.
        """
        raise NotImplementedError("Subclasses of `GenericDao` must implement a `fetch_many` method.")

    @abstractmethod
    def create(self, storage_id: str, bo: GenericBo) -> int:
        """
        Insert a business object if no business object matching its filter exists.

        Args:
            storage_id: The table/collection to insert into.
            bo: The business object to insert.

        Returns:
            1 once the business object is inserted.

        Raises:
            DuplicatedEntryError: If the business object already exists. The existing
                one is not modified.
        """
        raise NotImplementedError("Subclasses of `GenericDao` must implement a `create` method.")

    @abstractmethod
    def update(self, storage_id: str, bo: GenericBo) -> int:
        """
        Replace an existing business object. Nothing is created if it doesn't exist.

        Args:
            storage_id: The table/collection to update.
            bo: The new version of the business object.

        Returns:
            1 if the business object was updated, 0 if it did not exist.

        Raises:
            DuplicatedEntryError: If the update would violate a uniqueness constraint.
        """
        raise NotImplementedError("Subclasses of `GenericDao` must implement an `update` method.")

    @abstractmethod
    def save(self, storage_id: str, bo: GenericBo) -> int:
        """
        Replace a business object, inserting it if it doesn't exist.

        Args:
            storage_id: The table/collection to write to.
            bo: The business object to write.

        Returns:
            1 once the business object is written.

        Raises:
            DuplicatedEntryError: If the write would violate a uniqueness constraint.
        """
        raise NotImplementedError("Subclasses of `GenericDao` must implement a `save` method.")

    @abstractmethod
    def enable_tx_mode(self, enabled: bool):
        """
        Turn on/off the use of the backend's transaction primitive by write
        operations. Backends without such a primitive ignore this.

        Args:
            enabled: Whether transaction mode should be on.
        """
        raise NotImplementedError("Subclasses of `GenericDao` must implement an `enable_tx_mode` method.")

    @abstractmethod
    def is_tx_mode(self) -> bool:
        """
        Tell whether transaction mode is enabled.

        Returns:
            True if transaction mode is on, False otherwise.
        """
        raise NotImplementedError("Subclasses of `GenericDao` must implement an `is_tx_mode` method.")
