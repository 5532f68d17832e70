"""
Bounded Polling: Exponential Backoff with Jitter

Used to wait for an eventually-visible backend to report an object's
presence (after a write) or absence (after a delete).

- Exponential backoff: base × factor^n, capped
- Full jitter: random(0, backoff) to prevent thundering herd
- Bounded by attempt count and a global deadline

Transport-level retries of individual calls belong to the S3 client;
nothing here re-issues a write.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, Type

from lfsstore.core import constants as C

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackoffPolicy:
    """Polling configuration."""

    max_attempts: int = C.WAIT_MAX_ATTEMPTS
    base_delay_ms: int = C.WAIT_BASE_DELAY_MS
    max_delay_ms: int = C.WAIT_MAX_DELAY_MS
    exponential_base: float = 2.0
    jitter: bool = True  # Full jitter
    timeout_s: float = float(C.WAIT_TIMEOUT_S)
    retryable_exceptions: tuple[Type[Exception], ...] = (Exception,)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delays must be >= 0")
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be > 0, got {self.timeout_s}")

    @classmethod
    def default(cls) -> BackoffPolicy:
        return cls()

    @classmethod
    def immediate(cls, max_attempts: int = 3) -> BackoffPolicy:
        """Poll without sleeping (in-memory backends, tests)."""
        return cls(max_attempts=max_attempts, base_delay_ms=0, max_delay_ms=0, jitter=False)

    def with_retryable(self, *exceptions: Type[Exception]) -> BackoffPolicy:
        """Copy of this policy that tolerates only the given exceptions."""
        return BackoffPolicy(
            max_attempts=self.max_attempts,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms,
            exponential_base=self.exponential_base,
            jitter=self.jitter,
            timeout_s=self.timeout_s,
            retryable_exceptions=tuple(exceptions),
        )


@dataclass
class PollStats:
    """Outcome of a poll_until call."""
    satisfied: bool = False
    attempts: int = 0
    total_delay_ms: float = 0.0
    last_error: Optional[str] = None


def calculate_backoff(
    attempt: int,
    base_delay_ms: int,
    max_delay_ms: int,
    exponential_base: float,
    jitter: bool,
) -> float:
    """
    Calculate backoff delay with optional jitter.

    Full jitter: random(0, min(cap, base * factor^attempt))

    Safe for any attempt number: growth past the float range is
    treated as reaching the cap.
    """
    if base_delay_ms <= 0 or max_delay_ms <= 0:
        return 0.0

    # Exponential delay
    try:
        delay = min(float(max_delay_ms), base_delay_ms * (exponential_base ** attempt))
    except OverflowError:
        delay = float(max_delay_ms)

    # Full jitter
    if jitter:
        delay = random.uniform(0, delay)

    return delay


def poll_until(
    condition: Callable[[], bool],
    policy: Optional[BackoffPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> PollStats:
    """
    Call condition until it returns True or the policy bound is reached.

    Exceptions listed in policy.retryable_exceptions count as a failed
    probe and are recorded in PollStats.last_error. Any other exception
    propagates.

    Args:
        condition: Probe returning True once the awaited state holds
        policy: Attempt, delay and deadline bounds (default if None)
        sleep: Sleep function taking seconds

    Returns:
        PollStats with satisfied=True on success
    """
    if policy is None:
        policy = BackoffPolicy.default()

    stats = PollStats()
    deadline = time.monotonic() + policy.timeout_s

    for attempt in range(policy.max_attempts):
        if attempt > 0 and time.monotonic() >= deadline:
            logger.debug(f"Poll deadline reached after {stats.attempts} attempts")
            break

        stats.attempts += 1
        try:
            if condition():
                stats.satisfied = True
                return stats
        except policy.retryable_exceptions as e:
            stats.last_error = str(e)
            logger.debug(f"Probe {attempt + 1} failed: {e}")

        if attempt < policy.max_attempts - 1:
            delay = calculate_backoff(
                attempt=attempt,
                base_delay_ms=policy.base_delay_ms,
                max_delay_ms=policy.max_delay_ms,
                exponential_base=policy.exponential_base,
                jitter=policy.jitter,
            )
            # Never sleep past the deadline
            remaining_ms = max(0.0, (deadline - time.monotonic()) * 1000)
            delay = min(delay, remaining_ms)
            stats.total_delay_ms += delay
            sleep(delay / 1000)

    return stats
