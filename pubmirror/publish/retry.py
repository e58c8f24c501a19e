"""Bounded retry with a fixed delay.

``retry`` calls an operation until it returns Ok or the attempt budget runs
out, sleeping a constant ``delay`` between attempts. The operation receives a
RetryState so it can report progress ("attempt 3 of 10").
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from pubmirror.core.result import Err, Result

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class RetryState:
    attempt: int  # 0 on the first call
    remaining: int
    total: int


def retry[T, E](
    operation: Callable[[RetryState], Result[T, E]],
    *,
    num_attempts: int,
    delay: float,
    sleep: Callable[[float], None] = time.sleep,
) -> Result[T, E]:
    """Run ``operation`` until it succeeds or ``num_attempts`` calls have failed.

    Args:
        operation: Called with the current RetryState.
        num_attempts: Maximum number of calls (values below 1 mean 1).
        delay: Seconds to wait between a failure and the next call.
        sleep: Injected for tests.

    Returns:
        The first Ok, or the Err from the last call.
    """
    total = max(1, num_attempts)
    attempt = 0
    while True:
        result = operation(RetryState(attempt=attempt, remaining=total - attempt, total=total))
        if not isinstance(result, Err):
            return result
        attempt += 1
        if attempt >= total:
            return result
        sleep(delay)
