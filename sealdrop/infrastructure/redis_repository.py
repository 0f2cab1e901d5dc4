"""
Redis Repository Base Class

Provides prefixed key access, Lua-scripted atomic operations and the Redis
lock used by the sweeper. Connection failures surface as StorageError.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import redis
from redis.exceptions import RedisError

from sealdrop.domain.errors import StorageError

logger = logging.getLogger(__name__)


class RedisRepository:
    """Base Redis repository with atomic operations and distributed locking."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix
        self._scripts: Dict[str, Any] = {}

    def make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def set_json(self, key: str, data: Dict[str, Any], ttl: Optional[int] = None) -> bool:
        """
        Atomically set JSON data with optional TTL.

        Args:
            key: Redis key
            data: Dictionary to store as JSON
            ttl: Time to live in seconds

        Returns:
            True if successful
        """
        try:
            redis_key = self.make_key(key)
            json_data = json.dumps(data)

            if ttl:
                return bool(self.redis.setex(redis_key, ttl, json_data))
            return bool(self.redis.set(redis_key, json_data))
        except RedisError as e:
            raise StorageError(f"Error setting JSON data for key {key}", e) from e

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Returns:
            Dictionary if found, None otherwise
        """
        try:
            data = self.redis.get(self.make_key(key))
        except RedisError as e:
            raise StorageError(f"Error getting JSON data for key {key}", e) from e

        if data is None:
            return None
        return _decode_json(data)

    def get_many_json(self, keys: Sequence[str]) -> List[Optional[Dict[str, Any]]]:
        """Fetch several JSON values in one round trip (MGET)."""
        if not keys:
            return []
        try:
            values = self.redis.mget([self.make_key(key) for key in keys])
        except RedisError as e:
            raise StorageError("Error getting JSON data for multiple keys", e) from e
        return [_decode_json(value) if value is not None else None for value in values]

    def delete(self, *keys: str) -> int:
        """
        Delete keys from Redis.

        Returns:
            Number of keys removed
        """
        if not keys:
            return 0
        try:
            return self.redis.delete(*[self.make_key(key) for key in keys])
        except RedisError as e:
            raise StorageError(f"Error deleting keys {keys}", e) from e

    def exists(self, key: str) -> bool:
        """Check if a key exists in Redis."""
        try:
            return self.redis.exists(self.make_key(key)) > 0
        except RedisError as e:
            raise StorageError(f"Error checking existence of key {key}", e) from e

    # ------------------------------------------------------------------
    # Sorted-set indexes
    # ------------------------------------------------------------------

    def index_add(self, index: str, member: str, score: float) -> None:
        try:
            self.redis.zadd(self.make_key(index), {member: score})
        except RedisError as e:
            raise StorageError(f"Error adding to index {index}", e) from e

    def index_remove(self, index: str, member: str) -> None:
        try:
            self.redis.zrem(self.make_key(index), member)
        except RedisError as e:
            raise StorageError(f"Error removing from index {index}", e) from e

    def index_below(self, index: str, max_score: float) -> List[str]:
        """Members with score strictly below max_score, lowest first."""
        try:
            members = self.redis.zrangebyscore(
                self.make_key(index), "-inf", f"({max_score}"
            )
        except RedisError as e:
            raise StorageError(f"Error reading index {index}", e) from e
        return [_to_str(member) for member in members]

    def index_members(self, index: str, newest_first: bool = True) -> List[str]:
        try:
            key = self.make_key(index)
            if newest_first:
                members = self.redis.zrevrange(key, 0, -1)
            else:
                members = self.redis.zrange(key, 0, -1)
        except RedisError as e:
            raise StorageError(f"Error reading index {index}", e) from e
        return [_to_str(member) for member in members]

    # ------------------------------------------------------------------
    # Append-only lists
    # ------------------------------------------------------------------

    def append_json(self, key: str, data: Dict[str, Any]) -> None:
        try:
            self.redis.rpush(self.make_key(key), json.dumps(data))
        except RedisError as e:
            raise StorageError(f"Error appending to list {key}", e) from e

    def list_json(self, key: str) -> List[Dict[str, Any]]:
        try:
            values = self.redis.lrange(self.make_key(key), 0, -1)
        except RedisError as e:
            raise StorageError(f"Error reading list {key}", e) from e
        return [_decode_json(value) for value in values]

    # ------------------------------------------------------------------
    # Atomic scripts and locks
    # ------------------------------------------------------------------

    def run_script(self, script: str, keys: Sequence[str], args: Sequence[Any]) -> Any:
        """
        Execute a Lua script atomically on the server.

        Scripts are registered once and invoked by SHA afterwards.
        Keys are prefixed before the call.
        """
        registered = self._scripts.get(script)
        if registered is None:
            registered = self.redis.register_script(script)
            self._scripts[script] = registered

        try:
            return registered(keys=[self.make_key(key) for key in keys], args=list(args))
        except RedisError as e:
            raise StorageError("Error executing Redis script", e) from e

    def create_lock(self, lock_name: str, timeout: int = 600) -> "RedisLock":
        """
        Create a lock usable as the sweeper's single-flight guard.

        The lock offers acquire(blocking=False) and release().
        """
        return RedisLock(self.redis.lock(self.make_key(f"lock:{lock_name}"), timeout=timeout))


class RedisLock:
    """Redis lock whose connection failures surface as StorageError."""

    def __init__(self, lock):
        self._lock = lock

    def acquire(self, blocking: bool = True) -> bool:
        try:
            return bool(self._lock.acquire(blocking=blocking))
        except RedisError as e:
            raise StorageError("Error acquiring Redis lock", e) from e

    def release(self) -> None:
        try:
            self._lock.release()
        except RedisError as e:
            raise StorageError("Error releasing Redis lock", e) from e


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 max_connections: int = 20, decode_responses: bool = False,
                 password: Optional[str] = None):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except RedisError:
            return False

    def close(self):
        """Close the connection pool."""
        if self.connection_pool:
            self.connection_pool.disconnect()


def _to_str(value) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


def _decode_json(value) -> Dict[str, Any]:
    try:
        return json.loads(_to_str(value))
    except json.JSONDecodeError as e:
        raise StorageError("Corrupt JSON value in Redis", e) from e
