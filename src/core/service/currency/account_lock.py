"""
Per-account mutual exclusion for claims and deposits.

A claim reads the cooldown and balance, mints, then writes the claim time back.
Two concurrent claims for the same address must not both pass the check, so
the whole sequence runs while holding the account's lock.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager, suppress
from typing import AsyncContextManager, AsyncIterator, Dict, Optional

import redis.asyncio as redis
from redis.asyncio.lock import Lock
from redis.exceptions import LockError, RedisError

from src.core.exceptions.base import NotEligibleError, ServiceErrorCode, UpstreamFailureError
from src.core.logger.logger import get_logger
from src.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()


def _in_progress(address: str) -> NotEligibleError:
    return NotEligibleError(
        "Another claim or deposit for this account is in progress. Please try again shortly.",
        code=ServiceErrorCode.CLAIM_IN_PROGRESS,
        details={"address": address},
    )


class AccountLock(ABC):
    """Usage: `async with lock.hold(address): ...`"""

    @abstractmethod
    def hold(self, address: str) -> AsyncContextManager[None]:
        """Hold the address's lock for the duration of the block.

        Raises:
            NotEligibleError: CLAIM_IN_PROGRESS when the lock is not free in time
        """


class RedisAccountLock(AccountLock):
    """
    Lock shared by every worker, backed by redis-py's `Lock`.

    While the block runs, the key's TTL is renewed every third of `timeout`,
    so a slow mint confirmation cannot outlive the lock. The TTL only runs out
    when the holding process stops renewing it.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        timeout: Optional[float] = None,
        wait: Optional[float] = None,
        prefix: str = "claim:lock",
    ):
        self.redis = redis_client
        self.timeout = timeout or settings.CLAIM_LOCK_TIMEOUT_SECONDS
        self.wait = wait if wait is not None else settings.CLAIM_LOCK_WAIT_SECONDS
        self.prefix = prefix

    async def _keep_alive(self, lock: Lock, key: str) -> None:
        while True:
            await asyncio.sleep(self.timeout / 3)
            try:
                await lock.reacquire()
            except (LockError, RedisError) as e:
                logger.error(f"Failed to renew account lock: {e}", extra={"key": key})
                return

    @asynccontextmanager
    async def hold(self, address: str) -> AsyncIterator[None]:
        key = f"{self.prefix}:{address.lower()}"
        lock = self.redis.lock(key, timeout=self.timeout, blocking_timeout=self.wait)
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            logger.error(f"Failed to acquire account lock: {e}", extra={"key": key})
            raise UpstreamFailureError(
                "Claim lock store is unavailable",
                code=ServiceErrorCode.SERVICE_UNAVAILABLE,
            ) from e

        if not acquired:
            logger.warning("Account lock busy", extra={"key": key})
            raise _in_progress(address)

        renewal = asyncio.create_task(self._keep_alive(lock, key))
        try:
            yield
        finally:
            renewal.cancel()
            with suppress(asyncio.CancelledError):
                await renewal
            try:
                await lock.release()
            except (LockError, RedisError) as e:
                logger.error(f"Account lock lost before release: {e}", extra={"key": key})


class LocalAccountLock(AccountLock):
    """In-process lock for a single worker and for tests"""

    def __init__(self, wait: Optional[float] = None):
        self.wait = wait if wait is not None else settings.CLAIM_LOCK_WAIT_SECONDS
        self._locks: Dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def hold(self, address: str) -> AsyncIterator[None]:
        key = address.lower()
        lock = self._locks.setdefault(key, asyncio.Lock())
        try:
            await asyncio.wait_for(lock.acquire(), self.wait)
        except asyncio.TimeoutError:
            logger.warning("Account lock busy", extra={"address": key})
            raise _in_progress(address)

        try:
            yield
        finally:
            lock.release()
