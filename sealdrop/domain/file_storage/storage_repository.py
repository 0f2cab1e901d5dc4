"""
Ciphertext Store Interface

Abstract interface for storing encrypted blobs by reference.
The domain layer depends on this contract only; the bytes it handles are
always ciphertext produced on a client device.
"""

from abc import ABC, abstractmethod
from typing import Optional


class ICiphertextStore(ABC):
    """
    Interface for ciphertext blob storage.

    Contract Guarantees:
    - put() returns a fresh opaque reference for every call
    - get() returns None for unknown references (no exceptions)
    - delete() returns False for unknown references
    - exists() never raises for malformed references

    Implementations raise StorageError when the underlying medium fails.
    """

    @abstractmethod
    def put(self, content: bytes) -> str:
        """
        Store a blob.

        Args:
            content: Ciphertext bytes

        Returns:
            Opaque reference to the stored blob

        Raises:
            StorageError: If the blob could not be written
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, ref: str) -> Optional[bytes]:
        """
        Fetch a blob.

        Returns:
            Ciphertext bytes, or None if no blob exists for ref
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, ref: str) -> bool:
        """
        Delete a blob.

        Returns:
            True if a blob was removed, False if none existed

        Raises:
            StorageError: If the blob exists but could not be removed
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, ref: str) -> bool:
        """Check whether a blob exists for ref."""
        pass  # pragma: no cover
