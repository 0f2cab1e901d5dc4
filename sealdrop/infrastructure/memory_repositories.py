"""
In-Memory Repositories

Process-local implementations of the record store, the access log and the
ciphertext store. Used for single-process deployments (RECORD_BACKEND=memory)
and in tests.

Records are stored as their persistence dictionaries so callers never hold
a live reference into the store.
"""

import threading
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sealdrop.domain.access_log.entities import AccessLogEntry
from sealdrop.domain.access_log.repositories import AccessLogRepository
from sealdrop.domain.file_sharing.entities import FileRecord
from sealdrop.domain.file_sharing.repositories import UPDATABLE_FIELDS, FileRecordRepository
from sealdrop.domain.file_sharing.value_objects import ConsumeOutcome
from sealdrop.domain.file_storage.storage_repository import ICiphertextStore


class InMemoryFileRecordRepository(FileRecordRepository):
    """Dictionary-backed record store; one lock serializes every operation."""

    def __init__(self):
        self._records: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def create(self, record: FileRecord) -> None:
        with self._lock:
            self._records[record.id] = record.to_dict()

    def get(self, record_id: str) -> Optional[FileRecord]:
        with self._lock:
            data = self._records.get(record_id)
        return FileRecord.from_dict(data) if data is not None else None

    def update(self, record_id: str, **fields) -> bool:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        with self._lock:
            data = self._records.get(record_id)
            if data is None:
                return False
            data.update(fields)
            return True

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def find_expired_unswept(self, now: datetime) -> List[FileRecord]:
        with self._lock:
            snapshot = list(self._records.values())

        records = [FileRecord.from_dict(data) for data in snapshot]
        return [r for r in records if not r.is_expired and r.expires_at < now]

    def find_by_owner(self, owner_id: str) -> List[FileRecord]:
        with self._lock:
            snapshot = [d for d in self._records.values() if d.get("owner_id") == owner_id]

        records = [FileRecord.from_dict(data) for data in snapshot]
        records.sort(key=lambda r: r.uploaded_at, reverse=True)
        return records

    def consume_download(
        self, record_id: str, now: datetime
    ) -> Tuple[ConsumeOutcome, Optional[FileRecord]]:
        with self._lock:
            data = self._records.get(record_id)
            if data is None:
                return ConsumeOutcome.NOT_FOUND, None

            record = FileRecord.from_dict(data)
            if record.is_past_deadline(now):
                return ConsumeOutcome.EXPIRED, record
            if record.is_exhausted():
                return ConsumeOutcome.LIMIT_REACHED, record

            data["download_count"] = record.download_count + 1
            return ConsumeOutcome.CONSUMED, FileRecord.from_dict(data)

    def mark_expired(self, record_id: str) -> bool:
        with self._lock:
            data = self._records.get(record_id)
            if data is None or data.get("is_expired"):
                return False
            data["is_expired"] = True
            return True


class InMemoryAccessLogRepository(AccessLogRepository):
    """Per-file lists of entries, oldest first."""

    def __init__(self):
        self._entries: Dict[str, List[AccessLogEntry]] = {}
        self._lock = threading.Lock()

    def append(self, entry: AccessLogEntry) -> None:
        with self._lock:
            self._entries.setdefault(entry.file_id, []).append(entry)

    def find_by_file_id(self, file_id: str) -> List[AccessLogEntry]:
        with self._lock:
            return list(self._entries.get(file_id, []))

    def delete_by_file_id(self, file_id: str) -> int:
        with self._lock:
            return len(self._entries.pop(file_id, []))


class InMemoryCiphertextStore(ICiphertextStore):
    """Blob store kept in a dictionary."""

    def __init__(self):
        self._blobs: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def put(self, content: bytes) -> str:
        ref = f"{uuid.uuid4().hex}.enc"
        with self._lock:
            self._blobs[ref] = bytes(content)
        return ref

    def get(self, ref: str) -> Optional[bytes]:
        with self._lock:
            return self._blobs.get(ref)

    def delete(self, ref: str) -> bool:
        with self._lock:
            return self._blobs.pop(ref, None) is not None

    def exists(self, ref: str) -> bool:
        with self._lock:
            return ref in self._blobs
