"""Retry policy for feed, provider and catalog requests (tenacity)."""

import logging

import httpx
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger("allreview_seeder")

# Transient network failures only; HTTP status errors are not retried.
TRANSIENT_ERRORS: tuple[type[Exception], ...] = (httpx.TransportError, ConnectionError)


def _log_retry(max_attempts: int):
    def before_sleep(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(
            "Retrying %s in %.1fs (attempt %d/%d): %s",
            getattr(state.fn, "__qualname__", "call"),
            state.next_action.sleep if state.next_action else 0,
            state.attempt_number,
            max_attempts,
            exc,
        )
    return before_sleep


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 30,
    retry_on: tuple[type[Exception], ...] = (Exception,),
):
    """Decorator factory for retrying operations with exponential backoff.

    The last exception is re-raised once attempts run out, so callers decide
    whether a failure is absorbed (providers, feeds) or escalated (catalog).
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry(max_attempts),
        reraise=True,
    )


def retry_transient(max_attempts: int = 3, **kwargs):
    """with_retry limited to TRANSIENT_ERRORS."""
    return with_retry(max_attempts=max_attempts, retry_on=TRANSIENT_ERRORS, **kwargs)
