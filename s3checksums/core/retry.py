"""Bounded retry with exponential backoff for every object-store call.

Built on ``tenacity.Retrying``.  All failures are treated as transient.
Permanent errors (bad credentials, malformed keys) therefore cost
``max_attempts`` tries before being reported.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy(BaseModel):
    """Attempt ceiling and backoff schedule.

    The delay after failed attempt ``n`` (1-based) is
    ``base_delay * backoff_factor ** (n - 1)``: 1s, 2s, 4s, ... by default.
    No delay follows the final attempt.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=1.0, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1)

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * self.backoff_factor ** (attempt - 1)

    def wait(self) -> wait_exponential:
        return wait_exponential(multiplier=self.base_delay, exp_base=self.backoff_factor)


class RetryResult(BaseModel, Generic[T]):
    """Success value or final error of a retried operation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ok: bool
    value: Any = None
    attempts: int = 0
    error: Exception | None = None

    @property
    def error_message(self) -> str:
        if self.error is None:
            return ""
        return f"{type(self.error).__name__}: {self.error}"

    def unwrap(self) -> T:
        """Return the value, or re-raise the last error if every attempt failed."""
        if not self.ok:
            assert self.error is not None
            raise self.error
        return self.value


def _log_before_sleep(label: str, max_attempts: int) -> Callable[[RetryCallState], None]:
    def _log(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome is not None else None
        delay = state.next_action.sleep if state.next_action is not None else 0.0
        logger.debug(
            "%s failed (attempt %d/%d): %s; retrying in %.1fs",
            label, state.attempt_number, max_attempts, exc, delay,
        )

    return _log


def retry(
    operation: Callable[[], T],
    policy: RetryPolicy | None = None,
    *,
    sleep: Callable[[float], Any] = time.sleep,
    description: str = "",
) -> RetryResult[T]:
    """Run *operation* up to ``policy.max_attempts`` times.

    Never raises for ``Exception`` subclasses; the caller decides whether an
    exhausted result is a per-item failure or fatal.
    """
    policy = policy or RetryPolicy()
    label = description or getattr(operation, "__name__", "operation")
    attempts = 0

    def _attempt() -> T:
        nonlocal attempts
        attempts += 1
        return operation()

    retrying = Retrying(
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(policy.max_attempts),
        wait=policy.wait(),
        sleep=sleep,
        before_sleep=_log_before_sleep(label, policy.max_attempts),
        reraise=False,
    )
    try:
        value = retrying(_attempt)
    except RetryError as exc:
        last_error = exc.last_attempt.exception()
        logger.warning("%s failed after %d attempt(s): %s", label, attempts, last_error)
        return RetryResult(ok=False, attempts=attempts, error=last_error)
    return RetryResult(ok=True, value=value, attempts=attempts)
