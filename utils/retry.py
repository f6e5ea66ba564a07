"""
Bounded retry helper used for outbound HTTP calls.

A RetryPolicy describes how many attempts to make and how long to wait between
them; retry_call() applies it to any callable, independent of the transport.
"""

import time
from dataclasses import dataclass
from typing import Callable, Tuple, Type

from config import RETRY_DELAYS, RETRY_LIMITS, get_logger
from utils.errors import RetryError

logger = get_logger("retry")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = RETRY_LIMITS["http_request"]
    delay: float = RETRY_DELAYS["http_request"]
    backoff: float = 1.0  # 1.0 keeps the delay fixed

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0 or self.backoff < 1.0:
            raise ValueError("delay must be >= 0 and backoff >= 1.0")

    def delay_before(self, attempt: int) -> float:
        """Seconds to wait before the given retry (attempt numbers start at 1)."""
        return self.delay * (self.backoff ** (attempt - 1))


def retry_call(
    func: Callable,
    policy: RetryPolicy,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    description: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
):
    """
    Call func until it succeeds or the policy is exhausted

    Args:
        func: Zero-argument callable
        policy: Attempt budget and delays
        retry_on: Exception types that trigger another attempt; anything else propagates
        description: Used in log messages
        sleep: Injected for tests

    Returns:
        Whatever func returns

    Raises:
        RetryError: when all attempts failed
    """
    last_error = None
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return func()
        except retry_on as e:
            last_error = e
            attempts_left = policy.max_attempts - attempt
            if attempts_left <= 0:
                break
            logger.warning(
                f"RETRY: {description} failed ({e}). {attempts_left} attempts left."
            )
            sleep(policy.delay_before(attempt))

    logger.error(
        f"RETRY_ERROR: {description} failed after {policy.max_attempts} attempts: {last_error}"
    )
    raise RetryError(
        f"{description} failed after {policy.max_attempts} attempts",
        attempts=policy.max_attempts,
        last_error=last_error,
    )
