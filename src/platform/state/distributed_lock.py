"""
Distributed lock on Kvrocks (SET NX EX), used to keep a single expiry sweeper
running across replicas.
"""

from typing import Optional
from uuid import uuid4

from redis.exceptions import RedisError

from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import KvrocksClientType


_RELEASE_IF_OWNER = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class DistributedLock:
    def __init__(self, *, client: KvrocksClientType, key: str, ttl_seconds: int) -> None:
        self._client = client
        self.key = key
        self.ttl_seconds = ttl_seconds
        self.lock_value: Optional[str] = None

    async def acquire(self) -> bool:
        """
        Try to take the lock without blocking.

        Returns False when another owner holds it or the store is unreachable;
        either way the caller skips this round.
        """
        value = str(uuid4())
        try:
            acquired = await self._client.set(self.key, value, nx=True, ex=self.ttl_seconds)
        except RedisError as e:
            Logger.base.error(f'❌ [LOCK] Error acquiring {self.key}: {e}')
            return False

        if not acquired:
            Logger.base.debug(f'⏳ [LOCK] {self.key} held elsewhere')
            return False
        self.lock_value = value
        Logger.base.debug(f'🔒 [LOCK] Acquired {self.key} (ttl={self.ttl_seconds}s)')
        return True

    async def release(self) -> bool:
        """Delete the lock only if we still own it."""
        if not self.lock_value:
            return False

        try:
            released = await self._client.eval(  # type: ignore[misc]
                _RELEASE_IF_OWNER, 1, self.key, self.lock_value
            )
        except RedisError as e:
            Logger.base.error(f'❌ [LOCK] Error releasing {self.key}: {e}')
            return False
        finally:
            self.lock_value = None

        if not released:
            Logger.base.warning(f'⚠️ [LOCK] {self.key} expired before release')
        return bool(released)
