"""
Share Application Service

Server-side orchestration of upload, view, download, owner management and
on-demand sweeps. The service only ever handles ciphertext; key material
arrives as an opaque exported string and is returned as such.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sealdrop.domain.access_log import AccessLogEntry, AccessLogger
from sealdrop.domain.errors import (
    AccessDeniedError,
    ExpiredError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
)
from sealdrop.domain.events import (
    FileAccessDeniedEvent,
    FileDeletedEvent,
    FileDownloadedEvent,
    FileUploadedEvent,
    FileViewedEvent,
    SweepCompletedEvent,
)
from sealdrop.domain.file_sharing import (
    AccessGate,
    AccessType,
    Actor,
    ExpirationSweeper,
    FileRecord,
    FileRecordRepository,
    PasswordHasher,
    SweepReport,
    UploadRequest,
    UploadValidator,
)
from sealdrop.domain.file_storage import ICiphertextStore

from .event_publisher import EventPublisher
from .share_results import DownloadResult, OwnerStats, UploadResult

logger = logging.getLogger(__name__)


class ShareService:
    """
    Application service for sharing encrypted files.

    Coordinates the validator, ciphertext store, record store, access gate,
    access logger and sweeper. Domain errors propagate unchanged to the API
    layer, which maps them to HTTP responses.
    """

    def __init__(
        self,
        record_repository: FileRecordRepository,
        ciphertext_store: ICiphertextStore,
        access_gate: AccessGate,
        access_logger: AccessLogger,
        password_hasher: PasswordHasher,
        sweeper: ExpirationSweeper,
        event_publisher: Optional[EventPublisher] = None,
        validator: Optional[UploadValidator] = None,
    ):
        self.record_repo = record_repository
        self.store = ciphertext_store
        self.gate = access_gate
        self.access_logger = access_logger
        self.hasher = password_hasher
        self.sweeper = sweeper
        self.event_publisher = event_publisher
        self.validator = validator or UploadValidator()

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(
        self,
        request: UploadRequest,
        ciphertext: bytes,
        actor: Optional[Actor] = None,
        base_url: str = "",
        now: Optional[datetime] = None,
    ) -> UploadResult:
        """
        Validate, store and register an encrypted upload.

        The blob is written first; if the record cannot be persisted the blob
        is removed again before the error propagates.

        Args:
            request: Upload parameters
            ciphertext: Encrypted file content
            actor: Caller identity (owner id is taken from here)
            base_url: Public base URL for the returned links

        Returns:
            UploadResult with the file id, deadline and links

        Raises:
            ValidationError: Naming the first failing field
            StorageError: If the blob or the record could not be stored
        """
        now = now or datetime.utcnow()
        actor = actor or Actor()
        request = self.validator.validate(request, len(ciphertext))

        password_hash = self.hasher.hash(request.password) if request.password else None

        ref = self.store.put(ciphertext)
        record = FileRecord.create(
            ciphertext_ref=ref,
            exported_key=request.exported_key,
            nonce=request.nonce,
            original_name=request.original_name,
            size_bytes=request.size_bytes,
            mime_type=request.mime_type,
            max_downloads=request.max_downloads,
            expiry_hours=request.expiry_hours,
            owner_id=actor.owner_id,
            password_hash=password_hash,
            now=now,
        )

        try:
            self.record_repo.create(record)
        except Exception as e:
            logger.error(f"Failed to persist record for upload, discarding blob: {e}")
            self._discard_blob(ref)
            if isinstance(e, StorageError):
                raise
            raise StorageError("Failed to persist file record", e) from e

        self.access_logger.record(record.id, AccessType.UPLOAD, actor, now)
        self._publish(FileUploadedEvent(
            aggregate_id=record.id,
            occurred_at=now,
            size_bytes=record.size_bytes,
            max_downloads=record.max_downloads,
            expires_at=record.expires_at,
            password_protected=record.requires_password,
        ))

        base_url = base_url.rstrip("/")
        return UploadResult(
            file_id=record.id,
            expires_at=record.expires_at,
            share_url=f"{base_url}/share/{record.id}",
            download_url=f"{base_url}/download/{record.id}",
        )

    def _discard_blob(self, ref: str) -> None:
        try:
            self.store.delete(ref)
        except StorageError as e:
            logger.error(f"Could not discard orphaned blob {ref}: {e}")

    # ------------------------------------------------------------------
    # Recipient operations
    # ------------------------------------------------------------------

    def get_info(
        self, record_id: str, actor: Optional[Actor] = None, now: Optional[datetime] = None
    ) -> FileRecord:
        """
        Return a record for a metadata view and log the view.

        Never changes the download counter.

        Raises:
            NotFoundError, ExpiredError
        """
        now = now or datetime.utcnow()
        record = self.record_repo.get(record_id)
        try:
            record = self.gate.check_view(record, record_id, now)
        except AccessDeniedError as e:
            self._publish_denied(record_id, e, AccessType.VIEW, now)
            raise

        self.access_logger.record(record.id, AccessType.VIEW, actor, now)
        self._publish(FileViewedEvent(aggregate_id=record.id, occurred_at=now))
        return record

    def download(
        self,
        record_id: str,
        password: Optional[str] = None,
        actor: Optional[Actor] = None,
        now: Optional[datetime] = None,
    ) -> DownloadResult:
        """
        Pass the access gate, consume one download and return the ciphertext.

        Raises:
            NotFoundError, ExpiredError, LimitReachedError,
            PasswordRequiredError, PasswordInvalidError, StorageError
        """
        now = now or datetime.utcnow()
        try:
            record = self.gate.grant_download(record_id, password, now)
        except AccessDeniedError as e:
            self._publish_denied(record_id, e, AccessType.DOWNLOAD, now)
            raise

        ciphertext = self.store.get(record.ciphertext_ref)
        if ciphertext is None:
            # the sweeper reclaimed the blob between the grant and the read
            if record.is_past_deadline(now):
                raise ExpiredError(f"File {record.id[:8]} has expired")
            raise StorageError(f"Ciphertext of file {record.id[:8]} is missing")

        self.access_logger.record(record.id, AccessType.DOWNLOAD, actor, now)
        self._publish(FileDownloadedEvent(
            aggregate_id=record.id,
            occurred_at=now,
            download_count=record.download_count,
            max_downloads=record.max_downloads,
        ))
        return DownloadResult(record=record, ciphertext=ciphertext)

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def delete(self, record_id: str, owner_id: Optional[str]) -> None:
        """
        Remove a file's ciphertext, record and access log.

        The record is marked expired first, so a failure in a later step
        leaves a file recipients can no longer reach; the owner may retry.

        Raises:
            UnauthorizedError: If no owner is identified
            NotFoundError: If the record does not exist
            ForbiddenError: If the caller is not the uploader
            StorageError: If a store fails part way
        """
        record = self._owned_record(record_id, owner_id)

        self.record_repo.mark_expired(record.id)
        self.store.delete(record.ciphertext_ref)
        self.record_repo.delete(record.id)
        try:
            self.access_logger.purge(record.id)
        except StorageError as e:
            logger.warning(f"Could not purge access log of file {record.id[:8]}: {e}")

        self._publish(FileDeletedEvent(
            aggregate_id=record.id, occurred_at=datetime.utcnow(), owner_id=owner_id
        ))

    def list_owner_files(self, owner_id: Optional[str]) -> List[FileRecord]:
        """Files uploaded by an owner, newest first."""
        if not owner_id:
            raise UnauthorizedError("Owner identity required")
        return self.record_repo.find_by_owner(owner_id)

    def get_owner_stats(
        self, owner_id: Optional[str], now: Optional[datetime] = None
    ) -> OwnerStats:
        now = now or datetime.utcnow()
        records = self.list_owner_files(owner_id)
        return OwnerStats(
            total_files=len(records),
            total_downloads=sum(r.download_count for r in records),
            total_size=sum(r.size_bytes for r in records),
            active_files=sum(1 for r in records if r.is_active(now)),
        )

    def get_access_logs(
        self, record_id: str, owner_id: Optional[str]
    ) -> List[AccessLogEntry]:
        """
        Audit trail of a file, oldest first.

        Raises:
            UnauthorizedError, NotFoundError, ForbiddenError
        """
        record = self._owned_record(record_id, owner_id)
        return self.access_logger.entries_for(record.id)

    def _owned_record(self, record_id: str, owner_id: Optional[str]) -> FileRecord:
        if not owner_id:
            raise UnauthorizedError("Owner identity required")

        record = self.record_repo.get(record_id)
        if record is None:
            raise NotFoundError(f"File {record_id[:8]} not found")
        if record.owner_id != owner_id:
            raise ForbiddenError(f"Caller does not own file {record_id[:8]}")
        return record

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def run_sweep(self, now: Optional[datetime] = None) -> SweepReport:
        """Run one expiration sweep (no-op if one is already running)."""
        report = self.sweeper.sweep(now)
        self._publish(SweepCompletedEvent(
            aggregate_id="sweeper",
            occurred_at=report.finished_at or report.started_at,
            reclaimed_ids=tuple(report.reclaimed),
            failed_ids=tuple(report.failures),
            skipped=report.skipped,
        ))
        return report

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _publish(self, event) -> None:
        if self.event_publisher is not None:
            self.event_publisher.publish(event)

    def _publish_denied(
        self, record_id: str, error: AccessDeniedError, access_type: AccessType, now: datetime
    ) -> None:
        self._publish(FileAccessDeniedEvent(
            aggregate_id=record_id,
            occurred_at=now,
            reason=error.category.value,
            access_type=access_type.value,
        ))
