import unittest

from files_manager.readiness import (
    MAX_ATTEMPTS,
    POLL_INTERVAL_MS,
    ReadinessPoller,
    ReadinessTimeout,
)


class FakeClock:
    """Records every sleep instead of waiting."""

    def __init__(self):
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


def liveness_after(ticks: int):
    """Predicate that is False for ``ticks`` calls and True afterwards."""
    calls = {"n": 0}

    def check() -> bool:
        calls["n"] += 1
        return calls["n"] > ticks

    check.calls = calls
    return check


class ReadinessPollerTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.poller = ReadinessPoller(sleep=self.clock.sleep)

    def test_defaults(self):
        self.assertEqual(MAX_ATTEMPTS, 10)
        self.assertEqual(POLL_INTERVAL_MS, 1000)
        self.assertEqual(self.poller.max_attempts, 10)
        self.assertEqual(self.poller.poll_interval_ms, 1000)

    async def test_ready_on_first_tick(self):
        state = await self.poller.wait_until_ready(lambda: True)
        self.assertTrue(state.ready)
        self.assertEqual(state.attempt_count, 1)
        self.assertEqual(self.clock.sleeps, [1.0])

    async def test_succeeds_after_exactly_n_plus_one_ticks(self):
        for n in range(MAX_ATTEMPTS - 1):
            clock = FakeClock()
            poller = ReadinessPoller(sleep=clock.sleep)
            state = await poller.wait_until_ready(liveness_after(n))
            self.assertTrue(state.ready)
            self.assertEqual(state.attempt_count, n + 1)
            self.assertEqual(len(clock.sleeps), n + 1)

    async def test_times_out_after_exactly_max_attempts(self):
        check = liveness_after(1000)
        with self.assertRaises(ReadinessTimeout) as ctx:
            await self.poller.wait_until_ready(check)
        self.assertEqual(ctx.exception.attempts, MAX_ATTEMPTS)
        self.assertEqual(ctx.exception.max_attempts, MAX_ATTEMPTS)
        self.assertEqual(len(self.clock.sleeps), MAX_ATTEMPTS)
        # The last tick hits the budget before liveness is evaluated.
        self.assertEqual(check.calls["n"], MAX_ATTEMPTS - 1)

    async def test_exhaustion_wins_on_final_tick(self):
        # False on ticks 1-9, would be True on tick 10.
        check = liveness_after(MAX_ATTEMPTS - 1)
        with self.assertRaises(ReadinessTimeout):
            await self.poller.wait_until_ready(check)
        self.assertEqual(len(self.clock.sleeps), MAX_ATTEMPTS)

    async def test_attempts_reset_between_waits(self):
        with self.assertRaises(ReadinessTimeout):
            await self.poller.wait_until_ready(lambda: False)
        self.clock.sleeps.clear()

        state = await self.poller.wait_until_ready(lambda: True)
        self.assertEqual(state.attempt_count, 1)
        self.assertEqual(len(self.clock.sleeps), 1)

        state = await self.poller.wait_until_ready(lambda: True)
        self.assertEqual(state.attempt_count, 1)

    async def test_custom_budget_and_interval(self):
        poller = ReadinessPoller(max_attempts=3, poll_interval_ms=250, sleep=self.clock.sleep)
        with self.assertRaises(ReadinessTimeout) as ctx:
            await poller.wait_until_ready(lambda: False)
        self.assertEqual(ctx.exception.attempts, 3)
        self.assertEqual(self.clock.sleeps, [0.25, 0.25, 0.25])

    async def test_single_attempt_budget_never_checks_liveness(self):
        poller = ReadinessPoller(max_attempts=1, sleep=self.clock.sleep)
        check = liveness_after(0)
        with self.assertRaises(ReadinessTimeout):
            await poller.wait_until_ready(check)
        self.assertEqual(check.calls["n"], 0)

    def test_rejects_empty_budget(self):
        with self.assertRaises(ValueError):
            ReadinessPoller(max_attempts=0)


if __name__ == "__main__":
    unittest.main()
