"""Infrastructure layer for Redis, the filesystem and password hashing."""

from .local_file_storage_repository import LocalCiphertextStore
from .memory_repositories import (
    InMemoryAccessLogRepository,
    InMemoryCiphertextStore,
    InMemoryFileRecordRepository,
)
from .password_hasher import WerkzeugPasswordHasher
from .redis_access_log_repository import RedisAccessLogRepository
from .redis_file_record_repository import RedisFileRecordRepository
from .redis_repository import RedisConnectionManager, RedisRepository
from .storage_factory import StorageFactory

__all__ = [
    "InMemoryAccessLogRepository",
    "InMemoryCiphertextStore",
    "InMemoryFileRecordRepository",
    "LocalCiphertextStore",
    "RedisAccessLogRepository",
    "RedisConnectionManager",
    "RedisFileRecordRepository",
    "RedisRepository",
    "StorageFactory",
    "WerkzeugPasswordHasher",
]
