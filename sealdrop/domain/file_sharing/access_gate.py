"""
Access Gate

Server-side decision function for every info and download request.

Checks run in a fixed order, each with its own error (and HTTP status):

1. existence   -> NotFoundError
2. expiry      -> ExpiredError
3. exhaustion  -> LimitReachedError
4. password    -> PasswordRequiredError / PasswordInvalidError
5. grant       -> atomic bounded increment (downloads only)

A view runs steps 1-2 only and never touches the counter.
"""

from datetime import datetime
from typing import Optional

from sealdrop.domain.errors import (
    ExpiredError,
    LimitReachedError,
    NotFoundError,
    PasswordInvalidError,
    PasswordRequiredError,
)

from .entities import FileRecord
from .password import PasswordHasher
from .repositories import FileRecordRepository
from .value_objects import ConsumeOutcome


class AccessGate:
    """
    Ordered access checks plus the exactly-once download grant.

    check_view and check_download are pure; grant_download performs the one
    conditional write of the whole request path.
    """

    def __init__(
        self, record_repository: FileRecordRepository, password_hasher: PasswordHasher
    ):
        self.record_repo = record_repository
        self.hasher = password_hasher

    def check_view(
        self, record: Optional[FileRecord], record_id: str = "", now: Optional[datetime] = None
    ) -> FileRecord:
        """
        Run steps 1-2 for a metadata view.

        Raises:
            NotFoundError, ExpiredError
        """
        now = now or datetime.utcnow()
        if record is None:
            raise NotFoundError(f"File {record_id[:8]} not found")
        if record.is_past_deadline(now):
            raise ExpiredError(f"File {record.id[:8]} has expired")
        return record

    def check_download(
        self,
        record: Optional[FileRecord],
        supplied_password: Optional[str],
        record_id: str = "",
        now: Optional[datetime] = None,
    ) -> FileRecord:
        """
        Run steps 1-4 for a download.

        Raises:
            NotFoundError, ExpiredError, LimitReachedError,
            PasswordRequiredError, PasswordInvalidError
        """
        record = self.check_view(record, record_id, now)

        if record.is_exhausted():
            raise LimitReachedError(f"File {record.id[:8]} download limit reached")

        if record.password_hash is not None:
            if not supplied_password:
                raise PasswordRequiredError(f"File {record.id[:8]} requires a password")
            if not self.hasher.verify(supplied_password, record.password_hash):
                raise PasswordInvalidError(f"Invalid password for file {record.id[:8]}")

        return record

    def grant_download(
        self,
        record_id: str,
        supplied_password: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> FileRecord:
        """
        Run steps 1-5 and consume one download.

        The increment is a single conditional repository operation that
        re-checks existence, expiry and the bound, so concurrent grants
        against the last remaining download cannot both succeed.

        Returns:
            The record as it is after the increment

        Raises:
            NotFoundError, ExpiredError, LimitReachedError,
            PasswordRequiredError, PasswordInvalidError
        """
        now = now or datetime.utcnow()
        record = self.record_repo.get(record_id)
        self.check_download(record, supplied_password, record_id, now)

        outcome, updated = self.record_repo.consume_download(record_id, now)

        if outcome is ConsumeOutcome.CONSUMED:
            return updated
        if outcome is ConsumeOutcome.NOT_FOUND:
            raise NotFoundError(f"File {record_id[:8]} not found")
        if outcome is ConsumeOutcome.EXPIRED:
            raise ExpiredError(f"File {record_id[:8]} has expired")
        raise LimitReachedError(f"File {record_id[:8]} download limit reached")
