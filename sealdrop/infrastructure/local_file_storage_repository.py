"""
Local Ciphertext Store Implementation

Concrete implementation of ICiphertextStore for the local filesystem.
Blobs are written under a single base directory with server-generated
names, so a reference can never address a path outside that directory.
"""

import os
import re
import tempfile
import uuid
from pathlib import Path
from typing import Optional

from sealdrop.domain.errors import StorageError
from sealdrop.domain.file_storage.storage_repository import ICiphertextStore

_REF_PATTERN = re.compile(r"^[0-9a-f]{32}\.enc$")


class LocalCiphertextStore(ICiphertextStore):
    """
    Local filesystem implementation of ICiphertextStore.

    Thread Safety:
        put() writes to a temporary file and renames it into place, so a
        concurrent get() sees either nothing or the complete blob.

    Attributes:
        base_path: Directory holding the .enc blobs
    """

    def __init__(self, base_path: str = "/tmp/sealdrop"):
        """
        Initialize the store.

        Args:
            base_path: Base directory for blob storage (default: /tmp/sealdrop)
        """
        self.base_path = Path(base_path)
        self._ensure_base_directory()

    def _ensure_base_directory(self) -> None:
        """
        Ensure the base storage directory exists.

        Raises:
            StorageError: If the directory cannot be created
        """
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Failed to create storage directory: {self.base_path}", e
            ) from e

    def _path_for(self, ref: str) -> Optional[Path]:
        if not isinstance(ref, str) or not _REF_PATTERN.match(ref):
            return None
        return self.base_path / ref

    # ICiphertextStore interface methods

    def put(self, content: bytes) -> str:
        """
        Store ciphertext under a fresh reference.

        Returns:
            Reference of the form '<32 hex chars>.enc'

        Raises:
            StorageError: If the blob could not be written
        """
        ref = f"{uuid.uuid4().hex}.enc"
        target = self.base_path / ref

        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.base_path, suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(content)
                os.replace(tmp_path, target)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write ciphertext: {e}", e) from e

        return ref

    def get(self, ref: str) -> Optional[bytes]:
        """
        Read a blob.

        Returns:
            Ciphertext bytes, or None if no blob exists for ref
        """
        path = self._path_for(ref)
        if path is None or not path.is_file():
            return None

        try:
            return path.read_bytes()
        except FileNotFoundError:
            # deleted between the check and the read
            return None
        except OSError as e:
            raise StorageError(f"Failed to read ciphertext {ref}: {e}", e) from e

    def delete(self, ref: str) -> bool:
        """
        Delete a blob.

        Returns:
            True if a blob was removed, False if none existed

        Raises:
            StorageError: If the blob exists but could not be removed
        """
        path = self._path_for(ref)
        if path is None:
            return False

        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete ciphertext {ref}: {e}", e) from e

    def exists(self, ref: str) -> bool:
        """Never raises; malformed references simply do not exist."""
        path = self._path_for(ref)
        try:
            return path is not None and path.is_file()
        except OSError:
            return False
