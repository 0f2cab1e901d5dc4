"""
Share Result Value Objects

Encapsulate the outcomes of upload, download and owner queries.
"""

import base64
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from sealdrop.domain.file_sharing.entities import FileRecord


@dataclass(frozen=True)
class UploadResult:
    """
    Outcome of a successful upload.

    Carries the links only; never the key or the password hash.
    """
    file_id: str
    expires_at: datetime
    share_url: str
    download_url: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "fileId": self.file_id,
            "expiresAt": self.expires_at.isoformat(),
            "shareUrl": self.share_url,
            "downloadUrl": self.download_url,
        }


@dataclass(frozen=True)
class DownloadResult:
    """
    Outcome of a granted download.

    The recipient needs the ciphertext plus the exported key and nonce to
    decrypt locally.
    """
    record: FileRecord
    ciphertext: bytes

    def to_dict(self) -> Dict[str, Any]:
        record = self.record
        return {
            "success": True,
            "file": {
                "id": record.id,
                "originalName": record.original_name,
                "fileSize": record.size_bytes,
                "mimeType": record.mime_type,
                "exportedKey": record.exported_key,
                "nonce": record.nonce,
                "downloadCount": record.download_count,
                "maxDownloads": record.max_downloads,
            },
            "encryptedData": base64.b64encode(self.ciphertext).decode("ascii"),
        }


@dataclass(frozen=True)
class OwnerStats:
    """Aggregates over the files of one owner."""
    total_files: int = 0
    total_downloads: int = 0
    total_size: int = 0
    active_files: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalFiles": self.total_files,
            "totalDownloads": self.total_downloads,
            "totalSize": self.total_size,
            "activeFiles": self.active_files,
        }
