"""
Storage Services Package

Provides the abstract key/value interface, its file and in-memory
implementations, and the repository that persists a user's AppState.
"""

from investtrack.services.storage.interface import (
    ConnectionError,
    KeyValueStorageInterface,
    StorageError,
)
from investtrack.services.storage.local_files import LocalFileStorage
from investtrack.services.storage.memory import InMemoryStorage
from investtrack.services.storage.repository import AppDataRepository

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "LocalFileStorage",
    # Repository
    "AppDataRepository",
]
