"""
Unit tests for the access log entity and the best-effort AccessLogger.
"""

from unittest.mock import Mock

from sealdrop.domain.access_log import AccessLogEntry, AccessLogger
from sealdrop.domain.errors import StorageError
from sealdrop.domain.file_sharing import AccessType, Actor


class TestAccessLogEntry:
    def test_create_copies_actor(self, fixed_datetime):
        actor = Actor(address="203.0.113.9", agent="curl/8.0", owner_id="owner-1")

        entry = AccessLogEntry.create("file-id", AccessType.VIEW, actor, fixed_datetime)

        assert entry.actor_address == "203.0.113.9"
        assert entry.actor_agent == "curl/8.0"
        assert entry.accessed_at == fixed_datetime

    def test_anonymous_actor(self, fixed_datetime):
        entry = AccessLogEntry.create("file-id", AccessType.DOWNLOAD, None, fixed_datetime)
        assert entry.actor_address == ""
        assert entry.actor_agent == ""

    def test_dict_round_trip(self, fixed_datetime):
        entry = AccessLogEntry.create("file-id", AccessType.UPLOAD, Actor("10.0.0.1", "ua"), fixed_datetime)
        assert AccessLogEntry.from_dict(entry.to_dict()) == entry

    def test_public_dict(self, fixed_datetime):
        entry = AccessLogEntry.create("file-id", AccessType.VIEW, Actor("10.0.0.1", "ua"), fixed_datetime)
        assert entry.to_public_dict() == {
            "id": entry.id,
            "accessType": "view",
            "ipAddress": "10.0.0.1",
            "userAgent": "ua",
            "accessedAt": fixed_datetime.isoformat(),
        }


class TestAccessLogger:
    def test_records_in_order(self, access_logger, fixed_datetime):
        access_logger.record("file-a", AccessType.UPLOAD, now=fixed_datetime)
        access_logger.record("file-a", AccessType.VIEW, now=fixed_datetime)
        access_logger.record("file-b", AccessType.VIEW, now=fixed_datetime)

        kinds = [e.access_type for e in access_logger.entries_for("file-a")]
        assert kinds == [AccessType.UPLOAD, AccessType.VIEW]

    def test_store_failure_is_swallowed(self, fixed_datetime, caplog):
        repo = Mock()
        repo.append.side_effect = StorageError("redis down")

        result = AccessLogger(repo).record("file-a", AccessType.DOWNLOAD, now=fixed_datetime)

        assert result is None
        assert "Failed to record download access" in caplog.text

    def test_purge(self, access_logger, fixed_datetime):
        access_logger.record("file-a", AccessType.UPLOAD, now=fixed_datetime)
        access_logger.record("file-a", AccessType.VIEW, now=fixed_datetime)

        assert access_logger.purge("file-a") == 2
        assert access_logger.entries_for("file-a") == []
