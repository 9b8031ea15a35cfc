"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract key/value interface for storage.
It mirrors browser localStorage:
string keys, string values, nothing more. This allows us to:
1. Keep data in plain files on the user's machine
2. Use in-memory storage for testing
3. Swap in a real database later
4. Keep the state container decoupled from where bytes end up

The interface is intentionally tiny - we're not building a database.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for key/value storage.

    Any storage implementation (files, memory, a database table)
    must implement these methods.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored text, or None if nothing is stored

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: The storage key
            value: Text to store

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """
        Remove a key. Removing a missing key is not an error.

        Raises:
            StorageError: If the backend cannot be modified
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """
        List every stored key.

        Returns:
            Keys in no particular order
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
