"""
Share Client

Client-side orchestration: encrypts before upload and decrypts after
download, so only ciphertext and the exported key ever reach the server.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from sealdrop.domain.errors import (
    DomainError,
    ExpiredError,
    ForbiddenError,
    LimitReachedError,
    NotFoundError,
    PasswordInvalidError,
    PasswordRequiredError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)

from .cipher import CipherEngine
from .keys import decode_nonce, encode_nonce, export_key, import_key

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60

_ERRORS_BY_CATEGORY = {
    "file_not_found": NotFoundError,
    "file_expired": ExpiredError,
    "download_limit_reached": LimitReachedError,
    "password_required": PasswordRequiredError,
    "password_invalid": PasswordInvalidError,
    "unauthorized": UnauthorizedError,
    "forbidden": ForbiddenError,
    "storage_unavailable": StorageError,
}


@dataclass
class DownloadedFile:
    """Decrypted result of a download."""
    file_id: str
    original_name: str
    mime_type: str
    content: bytes
    download_count: int
    max_downloads: int

    def __repr__(self) -> str:
        return (
            f"DownloadedFile(file_id={self.file_id[:8]!r}, "
            f"original_name={self.original_name!r}, size={len(self.content)})"
        )


class ShareClient:
    """
    HTTP client for the /api/v1 share API.

    Errors returned by the server are raised as the matching domain
    exception; transport failures are raised as StorageError.
    """

    def __init__(
        self,
        base_url: str,
        owner_id: Optional[str] = None,
        owner_header: str = "X-User-Id",
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        cipher: Optional[CipherEngine] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.owner_id = owner_id
        self.owner_header = owner_header
        self.session = session or requests.Session()
        self.timeout = timeout
        self.cipher = cipher or CipherEngine()

    # ------------------------------------------------------------------
    # Sender
    # ------------------------------------------------------------------

    def upload(
        self,
        content: bytes,
        original_name: str,
        mime_type: str = "application/octet-stream",
        max_downloads: int = 1,
        expiry_hours: int = 24,
        password: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Encrypt content locally and upload the ciphertext.

        Returns:
            The server's upload response (fileId, expiresAt, shareUrl, downloadUrl)
        """
        encrypted = self.cipher.encrypt(content)
        try:
            exported_key = export_key(encrypted.key)
        finally:
            encrypted.key.destroy()

        form = {
            "originalName": original_name,
            "fileSize": str(len(content)),
            "mimeType": mime_type,
            "exportedKey": exported_key,
            "nonce": encode_nonce(encrypted.nonce),
            "maxDownloads": str(max_downloads),
            "expiryHours": str(expiry_hours),
        }
        if password:
            form["password"] = password

        files = {"file": ("ciphertext.enc", encrypted.ciphertext, "application/octet-stream")}
        response = self._request("POST", "/files/upload", data=form, files=files)
        logger.info(f"Uploaded {len(content)} bytes as {response.get('fileId', '')[:8]}")
        return response

    # ------------------------------------------------------------------
    # Recipient
    # ------------------------------------------------------------------

    def info(self, file_id: str) -> Dict[str, Any]:
        """Public metadata of a share (logs a view, consumes nothing)."""
        return self._request("GET", f"/files/{file_id}/info")["file"]

    def download(self, file_id: str, password: Optional[str] = None) -> DownloadedFile:
        """
        Consume one download and decrypt it locally.

        Raises:
            IntegrityError: If the ciphertext fails authentication
            KeyFormatError: If the key or nonce cannot be decoded
        """
        payload = {"password": password} if password else {}
        body = self._request("POST", f"/files/{file_id}/download", json=payload)

        meta = body["file"]
        ciphertext = base64.b64decode(body["encryptedData"])
        nonce = decode_nonce(meta["nonce"])

        with import_key(meta["exportedKey"]) as key:
            content = self.cipher.decrypt(ciphertext, key, nonce)

        return DownloadedFile(
            file_id=meta["id"],
            original_name=meta["originalName"],
            mime_type=meta["mimeType"],
            content=content,
            download_count=meta["downloadCount"],
            max_downloads=meta["maxDownloads"],
        )

    # ------------------------------------------------------------------
    # Owner
    # ------------------------------------------------------------------

    def list_files(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/files")["files"]

    def stats(self) -> Dict[str, int]:
        return self._request("GET", "/files/stats")["stats"]

    def access_logs(self, file_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/files/{file_id}/logs")["logs"]

    def delete(self, file_id: str) -> None:
        self._request("DELETE", f"/files/{file_id}")

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = kwargs.pop("headers", {})
        if self.owner_id:
            headers[self.owner_header] = self.owner_id

        try:
            response = self.session.request(
                method, f"{self.base_url}{path}",
                headers=headers, timeout=self.timeout, **kwargs,
            )
        except requests.RequestException as e:
            raise StorageError(f"Share server unreachable: {e.__class__.__name__}", e) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.ok:
            return body
        raise _error_from_response(response.status_code, body)


def _error_from_response(status_code: int, body: Dict[str, Any]) -> DomainError:
    category = body.get("error") if isinstance(body, dict) else None
    message = (body.get("message") if isinstance(body, dict) else None) or f"HTTP {status_code}"

    if category == "validation_failed":
        field = body.get("field") or "request"
        details = body.get("details") or message
        # details arrive as "<field>: <reason>"
        return ValidationError(field, details.split(": ", 1)[-1])

    error_class = _ERRORS_BY_CATEGORY.get(category)
    if error_class is None:
        if status_code >= 500:
            return StorageError(f"Server error {status_code}: {message}")
        return DomainError(f"Request failed with {status_code}: {message}")
    return error_class(message)
