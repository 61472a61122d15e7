"""
Bounded retry with jittered Fibonacci backoff around one polling cycle.

The policy awaits an operation up to ``max_attempts`` times.  Between
attempts it sleeps for the next Fibonacci multiple of ``base_delay_s``
(b, b, 2b, 3b, 5b, ...), scaled by a uniform random factor in [0, 1) when
jitter is enabled.  When every attempt fails it raises
:class:`~chargehq_edge.src.errors.RetriesExhaustedError`; the caller decides
what to do with the tick.

CHANGELOG:
- 2026-10-19: Retry every failed attempt, not only ReadError
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TypeVar

from chargehq_edge.src.errors import RetriesExhaustedError, error_kind

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BASE_DELAY_S: float = 0.01
"""Unit of the Fibonacci delay sequence (10 ms)."""

DEFAULT_MAX_ATTEMPTS: int = 5
"""Attempts per tick before giving up."""


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Attempt limit and delay schedule for one tick.

    Attributes:
        base_delay_s: First delay in seconds; later delays follow the
            Fibonacci sequence in multiples of this value.
        max_attempts: Total attempts, including the first one.
        jitter: Multiply each delay by ``random.random()`` when True.
    """

    base_delay_s: float = DEFAULT_BASE_DELAY_S
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    jitter: bool = True

    def __post_init__(self) -> None:  # noqa: D105
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_s < 0:
            raise ValueError("base_delay_s must be >= 0")

    def base_delays(self) -> Iterator[float]:
        """Yield the un-jittered delays between attempts (max_attempts - 1)."""
        current, following = self.base_delay_s, self.base_delay_s
        for _ in range(self.max_attempts - 1):
            yield current
            current, following = following, current + following

    def delays(self) -> Iterator[float]:
        """Yield the delays actually slept between attempts."""
        for delay in self.base_delays():
            yield delay * random.random() if self.jitter else delay

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Await *operation* until it succeeds or attempts run out.

        Any exception from an attempt is retried, whether it comes from the
        Modbus reads or from handing the payload on.

        Args:
            operation: Zero-argument coroutine function for one full attempt.

        Returns:
            The first successful result.

        Raises:
            RetriesExhaustedError: Every attempt raised.
        """
        delays = self.delays()
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except Exception as exc:
                logger.warning(
                    "Attempt %d/%d failed (%s error): %s",
                    attempt,
                    self.max_attempts,
                    error_kind(exc),
                    exc,
                )
                delay = next(delays, None)
                if delay is None:
                    raise RetriesExhaustedError(attempt, exc) from exc
            await asyncio.sleep(delay)
