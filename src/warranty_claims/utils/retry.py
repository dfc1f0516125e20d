"""Exponential-backoff retry for notification transports."""

import logging
from typing import Callable, TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Transport failures worth another attempt; smtplib errors are OSError subclasses
RETRYABLE_EXCEPTIONS = (ConnectionError, TimeoutError, OSError)


def _log_retry(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome else None
    logger.debug(
        "[delivery_retry] attempt=%d, wait=%.2fs, error=%s",
        state.attempt_number,
        state.next_action.sleep if state.next_action else 0.0,
        f"{type(error).__name__}: {error}" if error else None,
    )


def with_dispatch_retry(
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 8.0,
    multiplier: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = RETRYABLE_EXCEPTIONS,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry a delivery callable on transient errors, then re-raise the last one.

    Anything outside ``retry_on`` (a rejected address, a malformed message)
    fails on the first attempt.
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        reraise=True,
    )
