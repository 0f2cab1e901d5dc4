"""
Redis Access Log Repository

Append-only audit trail stored as one Redis list per file.
"""

import logging
from typing import List

from sealdrop.domain.access_log.entities import AccessLogEntry
from sealdrop.domain.access_log.repositories import AccessLogRepository

from .redis_repository import RedisRepository

logger = logging.getLogger(__name__)


def _log_key(file_id: str) -> str:
    return f"access_log:{file_id}"


class RedisAccessLogRepository(AccessLogRepository):
    """RPUSH keeps entries in insertion order, so reads come back oldest first."""

    def __init__(self, redis_repo: RedisRepository):
        self.redis_repo = redis_repo

    def append(self, entry: AccessLogEntry) -> None:
        self.redis_repo.append_json(_log_key(entry.file_id), entry.to_dict())

    def find_by_file_id(self, file_id: str) -> List[AccessLogEntry]:
        return [
            AccessLogEntry.from_dict(data)
            for data in self.redis_repo.list_json(_log_key(file_id))
        ]

    def delete_by_file_id(self, file_id: str) -> int:
        entries = self.redis_repo.list_json(_log_key(file_id))
        self.redis_repo.delete(_log_key(file_id))
        logger.debug(f"Purged {len(entries)} access log entries for {file_id[:8]}")
        return len(entries)
