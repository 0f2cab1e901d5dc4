"""
Access Log Repositories

Append-only repository interface for the audit trail.
"""

from abc import ABC, abstractmethod
from typing import List

from .entities import AccessLogEntry


class AccessLogRepository(ABC):
    """Abstract append-only store for AccessLogEntry records."""

    @abstractmethod
    def append(self, entry: AccessLogEntry) -> None:
        """Append an entry. Raises StorageError if the store is unavailable."""
        pass  # pragma: no cover

    @abstractmethod
    def find_by_file_id(self, file_id: str) -> List[AccessLogEntry]:
        """Return all entries for a file, oldest first."""
        pass  # pragma: no cover

    @abstractmethod
    def delete_by_file_id(self, file_id: str) -> int:
        """
        Remove all entries of a file.

        Only called when the file record itself is deleted.

        Returns:
            Number of entries removed
        """
        pass  # pragma: no cover
