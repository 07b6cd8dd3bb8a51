"""RetryPolicy — bounded polling for records that appear eventually."""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING, TypeVar

from .exceptions import RetryExhaustedError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


class RetryPolicy:
    """Exponential backoff limited by attempts and by an overall deadline.

    ``run`` keeps calling an operation while it fails with one of the
    ``retry_on`` errors. It stops at whichever limit is hit first: the
    attempt count, or ``deadline`` seconds since the first call. A pending
    attempt is cut off at the deadline too, so a stalled store cannot hold
    the loop open. Any other error propagates unchanged.

    Usage::

        policy = RetryPolicy(max_attempts=10, deadline=5.0)
        message = await policy.run(
            lambda: store.load(message_id), retry_on=MessageNotFoundError
        )
    """

    def __init__(
        self,
        *,
        max_attempts: int = 10,
        base_delay: float = 0.05,
        max_delay: float = 1.0,
        deadline: float | None = None,
        jitter: bool = True,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if min(base_delay, max_delay) < 0:
            raise ValueError("delays must be non-negative")
        if base_delay > max_delay:
            raise ValueError("base_delay cannot exceed max_delay")
        if deadline is not None and deadline <= 0:
            raise ValueError("deadline must be positive")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.deadline = deadline
        self.jitter = jitter

    def backoff(self, failed_attempts: int) -> float:
        """Pause after *failed_attempts* failures, doubling up to ``max_delay``."""
        pause = min(self.base_delay * 2 ** max(failed_attempts - 1, 0), self.max_delay)
        if self.jitter:
            pause *= random.uniform(0.5, 1.5)  # noqa: S311
        return pause

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        retry_on: type[Exception] | tuple[type[Exception], ...],
    ) -> T:
        """Return the first successful result of *operation*.

        Raises:
            RetryExhaustedError: attempts or deadline ran out first.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        attempts = 0
        last_error: Exception | None = None

        def remaining() -> float | None:
            if self.deadline is None:
                return None
            return self.deadline - (loop.time() - started)

        while attempts < self.max_attempts:
            budget = remaining()
            if budget is not None and budget <= 0:
                break
            attempts += 1
            try:
                return await asyncio.wait_for(operation(), budget)
            except asyncio.TimeoutError:
                break
            except retry_on as e:
                last_error = e
            if attempts == self.max_attempts:
                break
            pause = self.backoff(attempts)
            budget = remaining()
            if budget is not None:
                pause = min(pause, max(budget, 0.0))
            if pause > 0:
                await asyncio.sleep(pause)

        raise RetryExhaustedError(attempts, loop.time() - started, last_error)
