"""
File Sharing Entities

Domain entity for a shared, client-encrypted file.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from .value_objects import ShareId


@dataclass
class FileRecord:
    """
    Entity describing one shared file.

    The server never interprets exported_key or nonce; they are stored and
    returned verbatim. ciphertext_ref points at the blob in the ciphertext
    store, not at the bytes themselves.

    Invariant: 0 <= download_count <= max_downloads.
    """
    id: str
    ciphertext_ref: str
    exported_key: str
    nonce: str
    original_name: str
    size_bytes: int
    mime_type: str
    uploaded_at: datetime
    expires_at: datetime
    max_downloads: int
    download_count: int = 0
    owner_id: Optional[str] = None
    password_hash: Optional[str] = None
    is_expired: bool = False

    @classmethod
    def create(
        cls,
        ciphertext_ref: str,
        exported_key: str,
        nonce: str,
        original_name: str,
        size_bytes: int,
        mime_type: str,
        max_downloads: int,
        expiry_hours: int,
        owner_id: Optional[str] = None,
        password_hash: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "FileRecord":
        """
        Factory method to create a new record.

        expires_at is fixed here and never extended afterwards.
        """
        now = now or datetime.utcnow()
        return cls(
            id=str(ShareId.generate()),
            ciphertext_ref=ciphertext_ref,
            exported_key=exported_key,
            nonce=nonce,
            original_name=original_name,
            size_bytes=size_bytes,
            mime_type=mime_type,
            uploaded_at=now,
            expires_at=now + timedelta(hours=expiry_hours),
            max_downloads=max_downloads,
            owner_id=owner_id,
            password_hash=password_hash,
        )

    @property
    def requires_password(self) -> bool:
        return self.password_hash is not None

    def is_past_deadline(self, now: Optional[datetime] = None) -> bool:
        """
        Check expiry the way the gate does.

        The is_expired flag may lag behind the deadline because the sweeper
        runs on an interval, so both are consulted.
        """
        now = now or datetime.utcnow()
        return self.is_expired or now > self.expires_at

    def is_exhausted(self) -> bool:
        return self.download_count >= self.max_downloads

    @property
    def remaining_downloads(self) -> int:
        return max(0, self.max_downloads - self.download_count)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return not self.is_past_deadline(now) and not self.is_exhausted()

    def to_public_dict(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Metadata safe to show to anyone holding the link.

        Omits the ciphertext reference, the exported key, the nonce and the
        password hash.
        """
        return {
            "id": self.id,
            "originalName": self.original_name,
            "fileSize": self.size_bytes,
            "mimeType": self.mime_type,
            "uploadDate": self.uploaded_at.isoformat(),
            "expiryDate": self.expires_at.isoformat(),
            "downloadCount": self.download_count,
            "maxDownloads": self.max_downloads,
            "isExpired": self.is_past_deadline(now),
            "requiresPassword": self.requires_password,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for persistence."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "ciphertext_ref": self.ciphertext_ref,
            "exported_key": self.exported_key,
            "nonce": self.nonce,
            "original_name": self.original_name,
            "size_bytes": self.size_bytes,
            "mime_type": self.mime_type,
            "uploaded_at": self.uploaded_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "expires_at_ts": epoch_seconds(self.expires_at),
            "download_count": self.download_count,
            "max_downloads": self.max_downloads,
            "password_hash": self.password_hash,
            "is_expired": self.is_expired,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FileRecord":
        """Create FileRecord from dictionary."""
        return cls(
            id=data["id"],
            owner_id=data.get("owner_id"),
            ciphertext_ref=data["ciphertext_ref"],
            exported_key=data["exported_key"],
            nonce=data["nonce"],
            original_name=data["original_name"],
            size_bytes=int(data["size_bytes"]),
            mime_type=data["mime_type"],
            uploaded_at=datetime.fromisoformat(data["uploaded_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
            download_count=int(data.get("download_count", 0)),
            max_downloads=int(data["max_downloads"]),
            password_hash=data.get("password_hash"),
            is_expired=bool(data.get("is_expired", False)),
        )


_EPOCH = datetime(1970, 1, 1)


def epoch_seconds(value: datetime) -> float:
    """Seconds since the epoch for a naive UTC datetime."""
    return (value - _EPOCH).total_seconds()
