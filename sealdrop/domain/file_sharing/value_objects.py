"""
File Sharing Value Objects

Immutable value objects for type safety and validation.
"""

import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class InvalidShareIdError(ValueError):
    """Raised when a share id is malformed."""
    pass


@dataclass(frozen=True)
class ShareId:
    """
    Value object representing the capability id of a shared file.

    Possession of the id is the only authorization for anonymous access,
    so ids carry 128 bits of randomness and are URL-safe.
    """
    value: str

    MIN_LENGTH = 16
    MAX_LENGTH = 64

    def __post_init__(self):
        if not self._is_valid():
            raise InvalidShareIdError(f"Invalid share id: {self.value!r}")

    def _is_valid(self) -> bool:
        if not self.value or not isinstance(self.value, str):
            return False

        if not self.MIN_LENGTH <= len(self.value) <= self.MAX_LENGTH:
            return False

        return all(c.isalnum() or c in "-_" for c in self.value)

    @classmethod
    def generate(cls) -> "ShareId":
        """Generate a new random share id (16 bytes of entropy)."""
        return cls(secrets.token_urlsafe(16))

    @classmethod
    def is_well_formed(cls, value: str) -> bool:
        """Check a raw string without raising."""
        try:
            cls(value)
            return True
        except InvalidShareIdError:
            return False

    def __str__(self) -> str:
        return self.value


class AccessType(Enum):
    """Kinds of audited access to a shared file."""

    UPLOAD = "upload"
    VIEW = "view"
    DOWNLOAD = "download"


class ConsumeOutcome(Enum):
    """Result of the atomic bounded download increment."""

    CONSUMED = "consumed"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    LIMIT_REACHED = "limit_reached"


@dataclass(frozen=True)
class UploadLimits:
    """
    Bounds applied to upload parameters.

    max_downloads is a hard cap; there is no unlimited marker.
    """
    max_file_size: int = 100 * 1024 * 1024
    max_name_length: int = 255
    max_mime_length: int = 255
    max_opaque_length: int = 4096
    min_downloads: int = 1
    max_downloads: int = 100
    min_expiry_hours: int = 1
    max_expiry_hours: int = 24 * 7

    # AES-GCM appends a 16-byte authentication tag to the plaintext
    ciphertext_overhead: int = 16

    @property
    def max_ciphertext_size(self) -> int:
        return self.max_file_size + self.ciphertext_overhead


@dataclass(frozen=True)
class Actor:
    """Network identity of a caller, recorded in the access log."""
    address: str = ""
    agent: str = ""
    owner_id: Optional[str] = None
