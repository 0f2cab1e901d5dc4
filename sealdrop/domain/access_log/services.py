"""
Access Log Services

Best-effort audit logging. Recording an entry never fails the operation
that triggered it.
"""

import logging
from datetime import datetime
from typing import List, Optional

from ..file_sharing.value_objects import AccessType, Actor
from .entities import AccessLogEntry
from .repositories import AccessLogRepository

logger = logging.getLogger(__name__)


class AccessLogger:
    """Domain service that appends to and reads the access log."""

    def __init__(self, log_repository: AccessLogRepository):
        self.log_repo = log_repository

    def record(
        self,
        file_id: str,
        access_type: AccessType,
        actor: Optional[Actor] = None,
        now: Optional[datetime] = None,
    ) -> Optional[AccessLogEntry]:
        """
        Append an access entry.

        Failures are logged and swallowed; auditing is not a correctness
        dependency of upload, view or download.

        Returns:
            The stored entry, or None if it could not be recorded
        """
        try:
            entry = AccessLogEntry.create(file_id, access_type, actor, now)
            self.log_repo.append(entry)
            return entry
        except Exception as e:
            logger.warning(
                f"Failed to record {access_type.value} access for file "
                f"{file_id[:8]}: {e.__class__.__name__}"
            )
            return None

    def entries_for(self, file_id: str) -> List[AccessLogEntry]:
        """Return the audit trail of a file, oldest first."""
        return self.log_repo.find_by_file_id(file_id)

    def purge(self, file_id: str) -> int:
        """Remove the audit trail of a deleted file."""
        return self.log_repo.delete_by_file_id(file_id)
