"""Retry utilities for gateway calls."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from flashgen_core.errors import GatewayError
from flashgen_core.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Default retry configuration
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_BASE = 2.0  # seconds before the 2nd attempt, doubled after
DEFAULT_MAX_WAIT = 30.0  # seconds

SleepFunc = Callable[[float], Awaitable[None]]


def is_retryable(exc: BaseException) -> bool:
    """Return True for failures worth another attempt.

    Server-side gateway errors (5xx) and network-level failures qualify.
    Client errors (4xx) and everything else fail immediately.
    """
    if isinstance(exc, GatewayError):
        return exc.retryable
    return isinstance(exc, (ConnectionError, TimeoutError, asyncio.TimeoutError))


def get_async_retry(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    backoff_base: float = DEFAULT_BACKOFF_BASE,
    max_wait: float = DEFAULT_MAX_WAIT,
    jitter: float = 0.0,
    sleep: SleepFunc = asyncio.sleep,
) -> AsyncRetrying:
    """Create an async retry context manager.

    The wait before attempt ``n + 1`` is ``backoff_base * 2 ** (n - 1)``
    seconds (2s then 4s with the defaults), plus up to ``jitter`` seconds.

    Args:
        max_attempts: Maximum number of attempts, including the first
        backoff_base: Wait before the second attempt, in seconds
        max_wait: Upper bound for a single wait, in seconds
        jitter: Upper bound of uniform random jitter added to each wait
        sleep: Awaitable sleep used between attempts

    Returns:
        AsyncRetrying context manager
    """
    wait = wait_exponential(multiplier=backoff_base, exp_base=2, max=max_wait)
    if jitter > 0:
        wait = wait + wait_random(0, jitter)

    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait,
        retry=retry_if_exception(is_retryable),
        reraise=True,
        sleep=sleep,
    )


def _format_exception(e: BaseException) -> str:
    """Format exception for logging, handling nested/empty exceptions."""
    msg = str(e).strip()

    if not msg:
        msg = type(e).__name__

    if e.__cause__:
        cause_msg = str(e.__cause__).strip()
        if cause_msg:
            msg = f"{msg} (caused by: {cause_msg})"

    status_code = getattr(e, "status_code", None)
    if status_code is not None:
        msg = f"HTTP {status_code}: {msg}"

    return msg or "Unknown error"


async def with_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    operation_name: str = "operation",
    backoff_base: float = DEFAULT_BACKOFF_BASE,
    jitter: float = 0.0,
    sleep: SleepFunc = asyncio.sleep,
    **kwargs: Any,
) -> T:
    """Execute an async function with retry logic.

    Args:
        func: Async function to execute
        *args: Positional arguments for the function
        max_attempts: Maximum number of attempts
        operation_name: Name for logging purposes
        backoff_base: Wait before the second attempt, in seconds
        jitter: Upper bound of random jitter added to each wait
        sleep: Awaitable sleep used between attempts
        **kwargs: Keyword arguments for the function

    Returns:
        Result of the function

    Raises:
        The last exception if all attempts fail, or the first
        non-retryable exception
    """
    attempt = 0

    retrying = get_async_retry(
        max_attempts=max_attempts,
        backoff_base=backoff_base,
        jitter=jitter,
        sleep=sleep,
    )
    async for attempt_ctx in retrying:
        with attempt_ctx:
            attempt += 1
            if attempt > 1:
                logger.info(
                    f"Retrying {operation_name} (attempt {attempt}/{max_attempts})"
                )
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                error_msg = _format_exception(e)
                if is_retryable(e):
                    logger.warning(
                        f"{operation_name} failed (attempt {attempt}/{max_attempts}): {error_msg}"
                    )
                else:
                    logger.error(
                        f"{operation_name} failed with non-retryable error: {error_msg}"
                    )
                raise  # Let tenacity decide whether to retry

    raise RuntimeError(f"{operation_name} failed after {max_attempts} attempts")
