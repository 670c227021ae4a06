from typing import Awaitable, Callable, TypeVar

import anyio
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    TimeoutError as RedisTimeoutError,
)

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import TransientStoreError
from src.platform.logging.loguru_io import Logger


_T = TypeVar('_T')

RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    TransientStoreError,
    RedisConnectionError,
    RedisTimeoutError,
)


def backoff_delay(attempt: int, *, base_delay: float, max_delay: float) -> float:
    """Exponential delay before retry number ``attempt`` (1-based), capped at max_delay."""
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


async def retry_transient(
    operation: Callable[[], Awaitable[_T]],
    *,
    op_name: str,
    attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
) -> _T:
    """
    Run an idempotent store operation, retrying connection drops and timeouts.

    Only reads and other idempotent calls go through here; claims and confirms
    surface the first failure to the caller.

    Raises:
        TransientStoreError: every attempt failed
    """
    attempts = attempts or settings.TRANSIENT_RETRY_ATTEMPTS
    base_delay = settings.TRANSIENT_RETRY_BASE_DELAY if base_delay is None else base_delay
    max_delay = settings.TRANSIENT_RETRY_MAX_DELAY if max_delay is None else max_delay

    last_error: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except RETRYABLE_ERRORS as e:
            last_error = e
            if attempt == attempts:
                break
            delay = backoff_delay(attempt, base_delay=base_delay, max_delay=max_delay)
            Logger.base.warning(
                f'🔁 [RETRY] {op_name} failed ({type(e).__name__}: {e}), '
                f'attempt {attempt}/{attempts}, retrying in {delay:.2f}s'
            )
            await anyio.sleep(delay)

    raise TransientStoreError(f'{op_name} unavailable after {attempts} attempts: {last_error}')
