"""
Bounded readiness wait for a dependency that connects in the background.

The poller sleeps one interval per tick and gives up after a fixed number
of ticks. On every tick the exhaustion check runs before the liveness
check, so a dependency that only comes up on the last tick still counts
as a timeout.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 10
POLL_INTERVAL_MS = 1000


class ReadinessTimeout(Exception):
    """Raised when the dependency did not report ready within the budget."""

    def __init__(self, attempts: int, max_attempts: int):
        super().__init__(
            f"dependency not ready after {attempts} of {max_attempts} attempts"
        )
        self.attempts = attempts
        self.max_attempts = max_attempts


@dataclass
class ReadinessState:
    """Progress of a single readiness wait."""

    max_attempts: int = MAX_ATTEMPTS
    poll_interval_ms: int = POLL_INTERVAL_MS
    attempt_count: int = 0
    ready: bool = False

    @property
    def exhausted(self) -> bool:
        return self.attempt_count >= self.max_attempts


class ReadinessPoller:
    """Polls a liveness predicate once per interval until it holds."""

    def __init__(
        self,
        max_attempts: int = MAX_ATTEMPTS,
        poll_interval_ms: int = POLL_INTERVAL_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.poll_interval_ms = poll_interval_ms
        self._sleep = sleep

    async def wait_until_ready(
        self, check_liveness: Callable[[], bool]
    ) -> ReadinessState:
        """
        Wait until ``check_liveness()`` returns True.

        Returns the final state on success, raises ReadinessTimeout once
        ``max_attempts`` ticks have elapsed.
        """
        state = ReadinessState(
            max_attempts=self.max_attempts,
            poll_interval_ms=self.poll_interval_ms,
        )
        while not state.exhausted:
            await self._sleep(state.poll_interval_ms / 1000)
            state.attempt_count += 1
            if state.exhausted:
                break
            if check_liveness():
                state.ready = True
                logger.info("Dependency ready after %d attempt(s)", state.attempt_count)
                return state
            logger.debug(
                "Dependency not ready (attempt %d/%d)",
                state.attempt_count,
                state.max_attempts,
            )
        raise ReadinessTimeout(state.attempt_count, state.max_attempts)
