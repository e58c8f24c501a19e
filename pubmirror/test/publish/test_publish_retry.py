from __future__ import annotations

import time

from pubmirror.core.result import Err, Ok, Result
from pubmirror.publish.retry import RetryState, retry


class _Flaky:
    """Fails until the ``succeed_on``-th call (1-based)."""

    def __init__(self, succeed_on: int | None) -> None:
        self.succeed_on = succeed_on
        self.states: list[RetryState] = []

    def __call__(self, state: RetryState) -> Result[str, str]:
        self.states.append(state)
        n = len(self.states)
        if self.succeed_on is not None and n >= self.succeed_on:
            return Ok(f"ok on {n}")
        return Err(f"failure {n}")


class _Sleeps:
    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def test_first_success_returns_immediately() -> None:
    op = _Flaky(succeed_on=1)
    sleeps = _Sleeps()

    assert retry(op, num_attempts=5, delay=10.0, sleep=sleeps) == Ok("ok on 1")
    assert op.states == [RetryState(attempt=0, remaining=5, total=5)]
    assert sleeps.delays == []


def test_succeeds_on_nth_call() -> None:
    for n in range(1, 6):
        op = _Flaky(succeed_on=n)
        sleeps = _Sleeps()

        result = retry(op, num_attempts=5, delay=3.0, sleep=sleeps)

        assert result == Ok(f"ok on {n}")
        assert len(op.states) == n
        assert sleeps.delays == [3.0] * (n - 1)


def test_always_failing_runs_exactly_num_attempts() -> None:
    op = _Flaky(succeed_on=None)
    sleeps = _Sleeps()

    result = retry(op, num_attempts=10, delay=3.0, sleep=sleeps)

    assert result == Err("failure 10")
    assert len(op.states) == 10
    assert len(sleeps.delays) == 9


def test_state_counts_attempts() -> None:
    op = _Flaky(succeed_on=3)
    retry(op, num_attempts=4, delay=0, sleep=_Sleeps())

    assert op.states == [
        RetryState(attempt=0, remaining=4, total=4),
        RetryState(attempt=1, remaining=3, total=4),
        RetryState(attempt=2, remaining=2, total=4),
    ]


def test_zero_attempts_still_calls_once() -> None:
    op = _Flaky(succeed_on=None)
    assert retry(op, num_attempts=0, delay=1.0, sleep=_Sleeps()) == Err("failure 1")
    assert len(op.states) == 1


def test_real_delay_between_attempts() -> None:
    stamps: list[float] = []

    def op(state: RetryState) -> Result[None, str]:
        stamps.append(time.monotonic())
        return Ok(None) if state.attempt == 2 else Err("not yet")

    assert retry(op, num_attempts=3, delay=0.05) == Ok(None)
    gaps = [b - a for a, b in zip(stamps, stamps[1:])]
    assert len(gaps) == 2
    assert all(gap >= 0.05 for gap in gaps)
