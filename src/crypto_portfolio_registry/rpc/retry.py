"""Backoff policy for registry contract reads.

Reads (``getMany``) are idempotent and are retried on transient RPC
failures. Writes are never wrapped here: a resubmitted ``setMany`` would be
a second transaction.
"""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RetryConfig:
    """
    Backoff schedule for registry reads.

    Parameters
    ----------
    max_retries : int
        Extra attempts after the first failed read
    base_delay : float
        Seconds to wait before the first retry
    max_delay : float
        Upper bound for any single wait
    exponential_base : float
        Growth factor of the wait between retries
    no_retry : tuple[type[Exception], ...]
        Errors that fail the read immediately, such as reverts or arguments
        the ABI encoder rejects

    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        no_retry: tuple[type[Exception], ...] = (),
    ) -> None:
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.no_retry = no_retry

    @property
    def attempts(self) -> int:
        """Total number of calls made before giving up."""
        return self.max_retries + 1

    def get_delay(self, attempt: int) -> float:
        """Seconds to wait after the failed attempt with 0-based index ``attempt``."""
        return min(self.base_delay * self.exponential_base**attempt, self.max_delay)


def with_retry(
    config: RetryConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Wrap a contract read so transient failures are retried with backoff.

    Parameters
    ----------
    config : RetryConfig | None
        Backoff schedule. Uses the default schedule if None.
    sleep : Callable[[float], None]
        Waits between attempts

    Returns
    -------
    Callable
        Decorator producing the retrying read

    """
    config = config or RetryConfig()

    def decorator(read: Callable[..., T]) -> Callable[..., T]:
        name = getattr(read, "__name__", "registry read")

        @wraps(read)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(config.attempts):
                try:
                    return read(*args, **kwargs)
                except config.no_retry:
                    raise
                except Exception as e:
                    if attempt + 1 == config.attempts:
                        logger.warning("%s failed after %d attempts: %s", name, config.attempts, e)
                        raise
                    delay = config.get_delay(attempt)
                    logger.debug(
                        "%s attempt %d/%d failed, next read in %.1fs: %s",
                        name,
                        attempt + 1,
                        config.attempts,
                        delay,
                        e,
                    )
                    sleep(delay)
            msg = f"{name} was given no attempts"
            raise RuntimeError(msg)

        return wrapper

    return decorator
