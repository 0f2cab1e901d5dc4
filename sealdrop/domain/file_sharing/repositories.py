"""
File Record Repositories

Repository interface for file record persistence.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from .entities import FileRecord
from .value_objects import ConsumeOutcome

# id, deadline and upload time are fixed at creation
UPDATABLE_FIELDS = frozenset({
    "original_name",
    "mime_type",
    "download_count",
    "max_downloads",
    "password_hash",
    "is_expired",
})


class FileRecordRepository(ABC):
    """
    Abstract repository interface for file record persistence.

    Implementations raise StorageError when the backing store is unavailable.
    """

    @abstractmethod
    def create(self, record: FileRecord) -> None:
        """
        Persist a new record.

        Args:
            record: FileRecord to store
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, record_id: str) -> Optional[FileRecord]:
        """
        Retrieve a record by id.

        Returns:
            FileRecord if found, None otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def update(self, record_id: str, **fields) -> bool:
        """
        Update individual fields of a record.

        Only UPDATABLE_FIELDS may be changed; anything else raises ValueError.

        Returns:
            True if the record existed and was updated
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """
        Delete a record.

        Returns:
            True if deleted, False if it did not exist
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_expired_unswept(self, now: datetime) -> List[FileRecord]:
        """
        Find records with expires_at < now that are not yet marked expired.
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_by_owner(self, owner_id: str) -> List[FileRecord]:
        """Find all records uploaded by an owner, newest first."""
        pass  # pragma: no cover

    @abstractmethod
    def consume_download(
        self, record_id: str, now: datetime
    ) -> Tuple[ConsumeOutcome, Optional[FileRecord]]:
        """
        Atomically increment download_count iff the record still exists,
        is not expired at `now` and download_count < max_downloads.

        This is one conditional operation, never a read followed by a write.

        Returns:
            (outcome, record) where record reflects the state after the
            operation (None when not found)
        """
        pass  # pragma: no cover

    @abstractmethod
    def mark_expired(self, record_id: str) -> bool:
        """
        Set is_expired on a record.

        Returns:
            True if the flag transitioned from False to True
        """
        pass  # pragma: no cover
