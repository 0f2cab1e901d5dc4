"""
Domain Events

Immutable records of significant state changes in the domain.
Events decouple side effects (logging, notifications) from core business logic.
No event carries plaintext, passwords, password hashes or key material.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the aggregate that generated the event (file id)
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class FileUploadedEvent(DomainEvent):
    """
    Event emitted when a ciphertext and its record have been stored.

    Attributes:
        size_bytes: Size of the original file
        max_downloads: Download limit of the share
        expires_at: Deadline of the share
        password_protected: Whether a password gates downloads
    """
    size_bytes: int
    max_downloads: int
    expires_at: datetime
    password_protected: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "size_bytes": self.size_bytes,
            "max_downloads": self.max_downloads,
            "expires_at": self.expires_at.isoformat(),
            "password_protected": self.password_protected,
        })
        return base_dict


@dataclass(frozen=True)
class FileViewedEvent(DomainEvent):
    """Event emitted when a file's public metadata was served."""
    pass


@dataclass(frozen=True)
class FileDownloadedEvent(DomainEvent):
    """
    Event emitted when a download was granted.

    Attributes:
        download_count: Counter value after the grant
        max_downloads: Download limit of the share
    """
    download_count: int
    max_downloads: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "download_count": self.download_count,
            "max_downloads": self.max_downloads,
        })
        return base_dict


@dataclass(frozen=True)
class FileAccessDeniedEvent(DomainEvent):
    """
    Event emitted when the access gate rejected a request.

    Attributes:
        reason: Error category value of the rejection
        access_type: 'view' or 'download'
    """
    reason: str
    access_type: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "reason": self.reason,
            "access_type": self.access_type,
        })
        return base_dict


@dataclass(frozen=True)
class FileDeletedEvent(DomainEvent):
    """Event emitted when an owner removed a file and its ciphertext."""
    owner_id: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict["owner_id"] = self.owner_id
        return base_dict


@dataclass(frozen=True)
class SweepCompletedEvent(DomainEvent):
    """
    Event emitted after an expiration sweep ran.

    aggregate_id is the literal "sweeper".

    Attributes:
        reclaimed_ids: Files whose ciphertext was deleted
        failed_ids: Files that could not be reclaimed this time
        skipped: True when another sweep was already running
    """
    reclaimed_ids: Tuple[str, ...]
    failed_ids: Tuple[str, ...]
    skipped: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "reclaimed_ids": list(self.reclaimed_ids),
            "failed_ids": list(self.failed_ids),
            "skipped": self.skipped,
        })
        return base_dict
