"""
Unit Tests: Bounded Polling

Tests:
    - Backoff growth, cap and jitter bounds
    - poll_until attempt budget, deadline and exception handling
"""

import types

import pytest

from lfsstore.reliability import retry
from lfsstore.reliability.retry import BackoffPolicy, calculate_backoff, poll_until


class Condition:
    """Callable that turns true on the n-th call, optionally raising first."""

    def __init__(self, true_on=1, errors=()):
        self.true_on = true_on
        self.errors = list(errors)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.calls >= self.true_on


class TestCalculateBackoff:

    def test_exponential_growth(self):
        delays = [calculate_backoff(n, 100, 10_000, 2.0, jitter=False) for n in range(4)]
        assert delays == [100, 200, 400, 800]

    def test_capped(self):
        assert calculate_backoff(10, 100, 5_000, 2.0, jitter=False) == 5_000

    @pytest.mark.parametrize("attempt", [1023, 1024, 5_000])
    def test_huge_attempt_stays_at_cap(self, attempt):
        assert calculate_backoff(attempt, 100, 5_000, 2.0, jitter=False) == 5_000
        assert 0 <= calculate_backoff(attempt, 100, 5_000, 2.0, jitter=True) <= 5_000

    def test_zero_delays(self):
        assert calculate_backoff(2_000, 0, 0, 2.0, jitter=False) == 0.0

    def test_full_jitter_bounds(self):
        for _ in range(100):
            delay = calculate_backoff(3, 100, 5_000, 2.0, jitter=True)
            assert 0 <= delay <= 800


class TestBackoffPolicy:

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_attempts": 0}, {"base_delay_ms": -1}, {"max_delay_ms": -1}, {"timeout_s": 0}],
    )
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            BackoffPolicy(**kwargs)

    def test_immediate(self):
        policy = BackoffPolicy.immediate(max_attempts=4)
        assert policy.max_attempts == 4
        assert policy.base_delay_ms == 0
        assert policy.jitter is False

    def test_with_retryable_keeps_bounds(self):
        policy = BackoffPolicy(max_attempts=7, base_delay_ms=10).with_retryable(KeyError)
        assert policy.max_attempts == 7
        assert policy.base_delay_ms == 10
        assert policy.retryable_exceptions == (KeyError,)


class TestPollUntil:

    def test_immediate_success_never_sleeps(self):
        sleeps = []

        stats = poll_until(Condition(true_on=1), BackoffPolicy(), sleep=sleeps.append)

        assert stats.satisfied
        assert stats.attempts == 1
        assert sleeps == []

    def test_success_after_retries(self):
        sleeps = []
        policy = BackoffPolicy(max_attempts=5, base_delay_ms=100, jitter=False)

        stats = poll_until(Condition(true_on=3), policy, sleep=sleeps.append)

        assert stats.satisfied
        assert stats.attempts == 3
        assert sleeps == pytest.approx([0.1, 0.2])
        assert stats.total_delay_ms == pytest.approx(300)

    def test_attempt_budget(self):
        sleeps = []
        condition = Condition(true_on=100)
        policy = BackoffPolicy(max_attempts=4, base_delay_ms=1, jitter=False)

        stats = poll_until(condition, policy, sleep=sleeps.append)

        assert not stats.satisfied
        assert stats.attempts == 4
        assert condition.calls == 4
        # No sleep after the final attempt
        assert len(sleeps) == 3

    def test_deadline(self, monkeypatch):
        clock = [1000.0]
        monkeypatch.setattr(retry, "time", types.SimpleNamespace(monotonic=lambda: clock[0]))

        def advance(seconds):
            clock[0] += seconds

        policy = BackoffPolicy(max_attempts=50, base_delay_ms=1000, max_delay_ms=1000, jitter=False, timeout_s=2.5)

        stats = poll_until(Condition(true_on=100), policy, sleep=advance)

        assert not stats.satisfied
        assert stats.attempts == 3
        # Last sleep shortened to the remaining budget
        assert stats.total_delay_ms == pytest.approx(2500)

    def test_retryable_errors_recorded(self):
        condition = Condition(true_on=1, errors=[ConnectionError("reset"), ConnectionError("reset again")])
        policy = BackoffPolicy.immediate(max_attempts=5).with_retryable(ConnectionError)

        stats = poll_until(condition, policy, sleep=lambda s: None)

        assert stats.satisfied
        assert stats.attempts == 3
        assert stats.last_error == "reset again"

    def test_budget_beyond_float_range(self):
        policy = BackoffPolicy(max_attempts=1_100, base_delay_ms=1, max_delay_ms=1, jitter=False, timeout_s=600)

        stats = poll_until(Condition(true_on=10_000), policy, sleep=lambda s: None)

        assert not stats.satisfied
        assert stats.attempts == 1_100

    def test_other_errors_propagate(self):
        condition = Condition(errors=[KeyError("boom")])
        policy = BackoffPolicy.immediate().with_retryable(ConnectionError)

        with pytest.raises(KeyError):
            poll_until(condition, policy, sleep=lambda s: None)
