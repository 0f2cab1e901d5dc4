"""
Storage Factory

Builds the ciphertext store, record store and access log store for the
configured backend. The application layer depends only on the domain
interfaces these return.
"""

import logging
from typing import Optional, Tuple

from sealdrop.domain.access_log.repositories import AccessLogRepository
from sealdrop.domain.file_sharing.repositories import FileRecordRepository
from sealdrop.domain.file_storage.storage_repository import ICiphertextStore

from .local_file_storage_repository import LocalCiphertextStore
from .memory_repositories import (
    InMemoryAccessLogRepository,
    InMemoryCiphertextStore,
    InMemoryFileRecordRepository,
)
from .redis_access_log_repository import RedisAccessLogRepository
from .redis_file_record_repository import RedisFileRecordRepository
from .redis_repository import RedisRepository

logger = logging.getLogger(__name__)

BACKEND_REDIS = "redis"
BACKEND_MEMORY = "memory"


class StorageFactory:
    """Factory for the storage adapters of one deployment."""

    @staticmethod
    def create_ciphertext_store(storage_dir: Optional[str]) -> ICiphertextStore:
        """
        Create the blob store.

        Args:
            storage_dir: Directory for .enc blobs; None keeps blobs in memory

        Raises:
            StorageError: If the storage directory cannot be created
        """
        if storage_dir is None:
            logger.info("Storage factory: using in-memory ciphertext store")
            return InMemoryCiphertextStore()

        store = LocalCiphertextStore(storage_dir)
        logger.info(f"Storage factory: using local ciphertext store at {storage_dir}")
        return store

    @staticmethod
    def create_record_stores(
        backend: str, redis_repo: Optional[RedisRepository] = None
    ) -> Tuple[FileRecordRepository, AccessLogRepository]:
        """
        Create the record store and the access log store.

        Args:
            backend: 'redis' or 'memory'
            redis_repo: Required for the redis backend

        Raises:
            ValueError: For an unknown backend or a missing redis repository
        """
        if backend == BACKEND_MEMORY:
            logger.info("Storage factory: using in-memory record stores")
            return InMemoryFileRecordRepository(), InMemoryAccessLogRepository()

        if backend == BACKEND_REDIS:
            if redis_repo is None:
                raise ValueError("Redis backend selected but Redis is not initialized")
            logger.info("Storage factory: using Redis record stores")
            return RedisFileRecordRepository(redis_repo), RedisAccessLogRepository(redis_repo)

        raise ValueError(f"Unknown record backend: {backend!r}")
