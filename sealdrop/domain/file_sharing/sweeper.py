"""
Expiration Sweeper

Reclaims the ciphertext of records whose deadline has passed.

The sweeper is a two-state machine (IDLE -> SWEEPING -> IDLE) guarded by a
single-flight lock: an invocation that finds a sweep already running is a
no-op, it is not queued.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from ..file_storage.storage_repository import ICiphertextStore
from .repositories import FileRecordRepository

logger = logging.getLogger(__name__)


class SweeperState(Enum):
    IDLE = "idle"
    SWEEPING = "sweeping"


@dataclass
class SweepReport:
    """Outcome of one sweep invocation."""
    started_at: datetime
    finished_at: Optional[datetime] = None
    skipped: bool = False
    examined: int = 0
    reclaimed: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def reclaimed_count(self) -> int:
        return len(self.reclaimed)

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "skipped": self.skipped,
            "examined": self.examined,
            "reclaimed": self.reclaimed_count,
            "reclaimed_ids": list(self.reclaimed),
            "failures": dict(self.failures),
        }


class ExpirationSweeper:
    """
    Domain service that deletes expired ciphertext and flags its record.

    The guard lock must offer acquire(blocking=False) and release(); a
    threading.Lock covers a single process and a Redis lock covers several
    workers sharing one record store.
    """

    def __init__(
        self,
        record_repository: FileRecordRepository,
        ciphertext_store: ICiphertextStore,
        guard=None,
    ):
        self.record_repo = record_repository
        self.store = ciphertext_store
        self._guard = guard if guard is not None else threading.Lock()
        self._state = SweeperState.IDLE

    @property
    def state(self) -> SweeperState:
        return self._state

    def sweep(self, now: Optional[datetime] = None) -> SweepReport:
        """
        Run one sweep unless another one is in progress.

        For each record with expires_at < now and is_expired False the blob
        is deleted first, then the record is marked expired. A failure on
        one record is reported and the sweep moves on; a record whose blob
        could not be deleted stays unmarked and is retried next time.

        Returns:
            SweepReport (skipped=True if a sweep was already running)

        Raises:
            StorageError: If the guard cannot be reached
        """
        now = now or datetime.utcnow()
        report = SweepReport(started_at=now)

        if not self._guard.acquire(blocking=False):
            logger.info("Sweep already running, skipping")
            report.skipped = True
            report.finished_at = datetime.utcnow()
            return report

        self._state = SweeperState.SWEEPING
        try:
            self._sweep_records(now, report)
        finally:
            self._state = SweeperState.IDLE
            self._release_guard()

        report.finished_at = datetime.utcnow()
        logger.info(
            f"Sweep completed - examined: {report.examined}, "
            f"reclaimed: {report.reclaimed_count}, failures: {len(report.failures)}"
        )
        return report

    def _sweep_records(self, now: datetime, report: SweepReport) -> None:
        expired = self.record_repo.find_expired_unswept(now)
        report.examined = len(expired)

        for record in expired:
            try:
                self.store.delete(record.ciphertext_ref)
            except Exception as e:
                report.failures[record.id] = f"ciphertext delete failed: {e}"
                logger.warning(
                    f"Could not delete ciphertext of file {record.id[:8]}: {e}"
                )
                continue

            try:
                self.record_repo.mark_expired(record.id)
            except Exception as e:
                report.failures[record.id] = f"mark expired failed: {e}"
                logger.warning(f"Could not mark file {record.id[:8]} expired: {e}")
                continue

            report.reclaimed.append(record.id)

    def _release_guard(self) -> None:
        try:
            self._guard.release()
        except Exception as e:
            # A Redis lock may have timed out while the sweep ran
            logger.warning(f"Sweep guard release failed: {e}")
