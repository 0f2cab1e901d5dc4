"""
Redis File Record Repository

Concrete implementation of FileRecordRepository on top of RedisRepository.

Layout:
    file_record:{id}        JSON document of the record
    file_owner:{owner_id}   sorted set of record ids scored by upload time
    file_expiry             sorted set of unswept record ids scored by deadline
"""

import json
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sealdrop.domain.errors import StorageError
from sealdrop.domain.file_sharing.entities import FileRecord, epoch_seconds
from sealdrop.domain.file_sharing.repositories import UPDATABLE_FIELDS, FileRecordRepository
from sealdrop.domain.file_sharing.value_objects import ConsumeOutcome

from .redis_repository import RedisRepository

logger = logging.getLogger(__name__)

EXPIRY_INDEX = "file_expiry"

# KEYS[1] record key; ARGV[1] current timestamp.
# Returns {status} or {status, json}.
CONSUME_DOWNLOAD_SCRIPT = """
local data = redis.call('GET', KEYS[1])
if not data then
    return {'not_found'}
end
local record = cjson.decode(data)
if record['is_expired'] == true or tonumber(ARGV[1]) > tonumber(record['expires_at_ts']) then
    return {'expired', data}
end
local count = tonumber(record['download_count'])
if count >= tonumber(record['max_downloads']) then
    return {'limit_reached', data}
end
record['download_count'] = count + 1
local updated = cjson.encode(record)
redis.call('SET', KEYS[1], updated)
return {'consumed', updated}
"""

# KEYS[1] record key, KEYS[2] expiry index; ARGV[1] record id.
MARK_EXPIRED_SCRIPT = """
local data = redis.call('GET', KEYS[1])
redis.call('ZREM', KEYS[2], ARGV[1])
if not data then
    return 0
end
local record = cjson.decode(data)
if record['is_expired'] == true then
    return 0
end
record['is_expired'] = true
redis.call('SET', KEYS[1], cjson.encode(record))
return 1
"""

# KEYS[1] record key, KEYS[2] expiry index; ARGV[1] record id,
# ARGV[2] owner index key prefix.
DELETE_RECORD_SCRIPT = """
local data = redis.call('GET', KEYS[1])
if not data then
    return 0
end
local record = cjson.decode(data)
redis.call('ZREM', KEYS[2], ARGV[1])
if type(record['owner_id']) == 'string' then
    redis.call('ZREM', ARGV[2] .. record['owner_id'], ARGV[1])
end
redis.call('DEL', KEYS[1])
return 1
"""

# KEYS[1] record key; ARGV[1] JSON object of fields to merge.
UPDATE_FIELDS_SCRIPT = """
local data = redis.call('GET', KEYS[1])
if not data then
    return 0
end
local record = cjson.decode(data)
for field, value in pairs(cjson.decode(ARGV[1])) do
    record[field] = value
end
redis.call('SET', KEYS[1], cjson.encode(record))
return 1
"""

_OUTCOMES = {
    "consumed": ConsumeOutcome.CONSUMED,
    "not_found": ConsumeOutcome.NOT_FOUND,
    "expired": ConsumeOutcome.EXPIRED,
    "limit_reached": ConsumeOutcome.LIMIT_REACHED,
}


def _record_key(record_id: str) -> str:
    return f"file_record:{record_id}"


def _owner_key(owner_id: str) -> str:
    return f"file_owner:{owner_id}"


def _to_str(value) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisFileRecordRepository(FileRecordRepository):
    """
    Redis-backed record store.

    consume_download, mark_expired and delete run as server-side Lua scripts
    so the read and the writes cannot interleave with another client.
    """

    def __init__(self, redis_repo: RedisRepository):
        self.redis_repo = redis_repo

    def create(self, record: FileRecord) -> None:
        data = record.to_dict()
        self.redis_repo.set_json(_record_key(record.id), data)
        if not record.is_expired:
            self.redis_repo.index_add(EXPIRY_INDEX, record.id, data["expires_at_ts"])
        if record.owner_id:
            self.redis_repo.index_add(
                _owner_key(record.owner_id), record.id, epoch_seconds(record.uploaded_at)
            )
        logger.debug(f"Stored file record {record.id[:8]}")

    def get(self, record_id: str) -> Optional[FileRecord]:
        data = self.redis_repo.get_json(_record_key(record_id))
        if data is None:
            return None
        return FileRecord.from_dict(data)

    def update(self, record_id: str, **fields) -> bool:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")
        if not fields:
            return self.redis_repo.exists(_record_key(record_id))

        result = self.redis_repo.run_script(
            UPDATE_FIELDS_SCRIPT, [_record_key(record_id)], [json.dumps(fields)]
        )
        return bool(result)

    def delete(self, record_id: str) -> bool:
        result = self.redis_repo.run_script(
            DELETE_RECORD_SCRIPT,
            [_record_key(record_id), EXPIRY_INDEX],
            [record_id, self.redis_repo.make_key(_owner_key(""))],
        )
        return bool(result)

    def find_expired_unswept(self, now: datetime) -> List[FileRecord]:
        candidate_ids = self.redis_repo.index_below(EXPIRY_INDEX, epoch_seconds(now))
        records = self._load_many(candidate_ids)
        return [
            record for record in records
            if not record.is_expired and record.expires_at < now
        ]

    def find_by_owner(self, owner_id: str) -> List[FileRecord]:
        record_ids = self.redis_repo.index_members(_owner_key(owner_id), newest_first=True)
        return self._load_many(record_ids)

    def consume_download(
        self, record_id: str, now: datetime
    ) -> Tuple[ConsumeOutcome, Optional[FileRecord]]:
        result = self.redis_repo.run_script(
            CONSUME_DOWNLOAD_SCRIPT, [_record_key(record_id)], [epoch_seconds(now)]
        )
        if not result:
            raise StorageError(f"Empty reply consuming download of {record_id[:8]}")

        outcome = _OUTCOMES.get(_to_str(result[0]))
        if outcome is None:
            raise StorageError(f"Unexpected consume reply: {result[0]!r}")
        if len(result) < 2:
            return outcome, None
        return outcome, FileRecord.from_dict(json.loads(_to_str(result[1])))

    def mark_expired(self, record_id: str) -> bool:
        result = self.redis_repo.run_script(
            MARK_EXPIRED_SCRIPT,
            [_record_key(record_id), EXPIRY_INDEX],
            [record_id],
        )
        return bool(result)

    def _load_many(self, record_ids: List[str]) -> List[FileRecord]:
        documents = self.redis_repo.get_many_json([_record_key(rid) for rid in record_ids])
        records = []
        for record_id, data in zip(record_ids, documents):
            if data is None:
                # index entry outlived its record
                logger.debug(f"Skipping dangling index entry {record_id[:8]}")
                continue
            records.append(FileRecord.from_dict(data))
        return records
