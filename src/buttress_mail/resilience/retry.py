"""Retry policies for provider calls, built on tenacity.

Two policies live here:

- :func:`resilient_api_call` retries connection-level ``httpx`` failures
  (never HTTP status errors) with exponential backoff and jitter.
- :func:`retry_once_after_refresh` implements the single-shot recovery from
  an expired access token: refresh once, retry once, then give up.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
    wait_none,
)

from buttress_mail.domain.errors import AuthenticationError

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")


def _before_sleep_log(retry_state: RetryCallState) -> None:
    """Log a warning before each backoff retry."""
    api_name = getattr(retry_state.fn, "_api_name", "unknown") if retry_state.fn else "unknown"
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Retrying API call",
        api_name=api_name,
        attempt=retry_state.attempt_number,
        wait=retry_state.next_action.sleep if retry_state.next_action else 0,
        exception=str(exception),
    )


def resilient_api_call(api_name: str) -> Callable[[F], F]:
    """Create a retry decorator for a provider HTTP call.

    Returns a tenacity retry decorator configured with:
    - 3 attempts maximum
    - Exponential backoff with jitter (1s initial, 30s max, 5s jitter)
    - Retry only on ``httpx.TransportError`` (timeouts, refused connections)
    - Warning log before each retry
    - Original exception re-raised after exhaustion

    Args:
        api_name: Human-readable name for the API (used in logs).

    Returns:
        A decorator that wraps the function with retry logic.
    """

    def decorator(func: F) -> F:
        func._api_name = api_name  # type: ignore[attr-defined]

        wrapped = retry(
            stop=stop_after_attempt(3),
            wait=wait_exponential_jitter(initial=1, max=30, jitter=5),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=_before_sleep_log,
            reraise=True,
        )(func)

        return wrapped  # type: ignore[return-value]

    return decorator


async def retry_once_after_refresh(
    operation: Callable[[], Awaitable[T]],
    refresh: Callable[[], Awaitable[Any]],
    api_name: str,
) -> T:
    """Run *operation*, refreshing credentials and retrying once on auth failure.

    Only :class:`AuthenticationError` triggers the recovery.  *refresh* is
    awaited at most once, immediately before the second attempt; any error
    it raises ends the call.  A failure of the second attempt is re-raised
    unchanged.

    Args:
        operation: Zero-argument coroutine factory performing the call.
        refresh: Zero-argument coroutine factory obtaining a new token.
        api_name: Human-readable name for the API (used in logs).

    Returns:
        The result of the first successful attempt.
    """

    def _log_refresh(retry_state: RetryCallState) -> None:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Access token rejected, refreshing before retry",
            api_name=api_name,
            attempt=retry_state.attempt_number,
            exception=str(exception),
        )

    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(2),
            wait=wait_none(),
            retry=retry_if_exception_type(AuthenticationError),
            before_sleep=_log_refresh,
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    await refresh()
                return await operation()
    except AuthenticationError as exc:
        logger.error("API call rejected after token refresh", api_name=api_name, exception=str(exc))
        raise

    raise AssertionError("unreachable")  # pragma: no cover
