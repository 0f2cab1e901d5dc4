"""
Share Configuration

Upload limits, storage location, backend selection and sweep cadence,
read from the environment.
"""

import os
from typing import Optional

from sealdrop.domain.file_sharing.value_objects import UploadLimits


class ShareConfig:
    """File sharing configuration settings."""

    def __init__(self):
        self.max_file_size_mb = int(os.getenv("MAX_FILE_SIZE_MB", 100))
        self.storage_dir: Optional[str] = os.getenv("STORAGE_DIR", "/tmp/sealdrop")
        self.record_backend = os.getenv("RECORD_BACKEND", "redis").lower()
        self.public_base_url: Optional[str] = os.getenv("PUBLIC_BASE_URL") or None
        self.sweep_interval_seconds = float(os.getenv("SWEEP_INTERVAL_SECONDS", 3600))
        self.sweep_lock_timeout = int(os.getenv("SWEEP_LOCK_TIMEOUT", 600))
        self.password_hash_method = os.getenv("PASSWORD_HASH_METHOD", "scrypt")
        self.owner_header = os.getenv("OWNER_HEADER", "X-User-Id")

    @property
    def max_file_size(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def upload_limits(self) -> UploadLimits:
        return UploadLimits(max_file_size=self.max_file_size)

    @property
    def max_request_size(self) -> int:
        # ciphertext plus GCM tag plus room for the multipart envelope and form fields
        return self.upload_limits.max_ciphertext_size + 64 * 1024
