"""
Upload Validation

Checks upload parameters against UploadLimits and reports the first
failing field.
"""

from dataclasses import dataclass
from typing import Any, Optional

from sealdrop.domain.errors import ValidationError

from .value_objects import UploadLimits


@dataclass
class UploadRequest:
    """Parameters supplied alongside an uploaded ciphertext."""
    original_name: Any
    size_bytes: Any
    mime_type: Any
    exported_key: Any
    nonce: Any
    max_downloads: Any = 1
    expiry_hours: Any = 24
    password: Optional[str] = None

    def __repr__(self) -> str:
        # Keep the password out of reprs and tracebacks
        return (
            f"UploadRequest(original_name={self.original_name!r}, "
            f"size_bytes={self.size_bytes!r}, mime_type={self.mime_type!r}, "
            f"max_downloads={self.max_downloads!r}, "
            f"expiry_hours={self.expiry_hours!r}, "
            f"password={'***' if self.password else None})"
        )


class UploadValidator:
    """
    Validates upload parameters in a fixed field order.

    Order: original_name, size_bytes, mime_type, exported_key, nonce,
    max_downloads, expiry_hours, then the ciphertext length.
    """

    def __init__(self, limits: Optional[UploadLimits] = None):
        self.limits = limits or UploadLimits()

    def validate(self, request: UploadRequest, ciphertext_size: int) -> UploadRequest:
        """
        Validate and normalize an upload request.

        Integer fields given as strings (form posts) are converted.

        Returns:
            A normalized UploadRequest

        Raises:
            ValidationError: Naming the first failing field
        """
        limits = self.limits

        original_name = self._text(
            "original_name", request.original_name, limits.max_name_length
        )
        size_bytes = self._integer(
            "size_bytes", request.size_bytes, 1, limits.max_file_size
        )
        mime_type = self._text("mime_type", request.mime_type, limits.max_mime_length)
        exported_key = self._text(
            "exported_key", request.exported_key, limits.max_opaque_length
        )
        nonce = self._text("nonce", request.nonce, limits.max_opaque_length)
        max_downloads = self._integer(
            "max_downloads",
            request.max_downloads,
            limits.min_downloads,
            limits.max_downloads,
        )
        expiry_hours = self._integer(
            "expiry_hours",
            request.expiry_hours,
            limits.min_expiry_hours,
            limits.max_expiry_hours,
        )

        if ciphertext_size <= 0:
            raise ValidationError("ciphertext", "no encrypted file content uploaded")
        if ciphertext_size > limits.max_ciphertext_size:
            raise ValidationError(
                "ciphertext", f"must be at most {limits.max_ciphertext_size} bytes"
            )

        password = request.password if request.password else None

        return UploadRequest(
            original_name=original_name,
            size_bytes=size_bytes,
            mime_type=mime_type,
            exported_key=exported_key,
            nonce=nonce,
            max_downloads=max_downloads,
            expiry_hours=expiry_hours,
            password=password,
        )

    @staticmethod
    def _text(field: str, value: Any, max_length: int) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(field, "is required")
        if len(value) > max_length:
            raise ValidationError(field, f"must be at most {max_length} characters")
        return value

    @staticmethod
    def _integer(field: str, value: Any, minimum: int, maximum: int) -> int:
        if isinstance(value, bool):
            raise ValidationError(field, "must be an integer")
        if isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError:
                raise ValidationError(field, "must be an integer")
        if not isinstance(value, int):
            raise ValidationError(field, "must be an integer")
        if not minimum <= value <= maximum:
            raise ValidationError(field, f"must be between {minimum} and {maximum}")
        return value
