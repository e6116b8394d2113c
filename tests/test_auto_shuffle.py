from __future__ import annotations

import random
import unittest

from luckydraw.models.draw_state import DrawState
from luckydraw.services.auto_shuffle import AutoShuffleScheduler, SchedulerState
from luckydraw.services.draw_pool_engine import DrawPoolEngine
from luckydraw.services.draw_session import SessionSettings, initialize
from luckydraw.services.persistence import PersistenceAdapter
from luckydraw.services.session_guard import SessionGuard

from tests.fakes import ManualTimerService, RecordingConfirmation, make_repository


class _CountingEngine(DrawPoolEngine):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.reshuffles = 0

    def reshuffle(self) -> bool:
        self.reshuffles += 1
        return super().reshuffle()


class AutoShuffleSchedulerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.timers = ManualTimerService()
        self.engine = _CountingEngine(
            DrawState(pool=tuple(range(1, 9))), random=random.Random(4).random
        )
        self.scheduler = AutoShuffleScheduler(self.engine, self.timers, interval=2.0)
        self.engine.add_listener(self.scheduler.on_state_change)

    def test_ticks_every_interval(self) -> None:
        self.scheduler.start()
        self.assertIs(self.scheduler.state, SchedulerState.ACTIVE)
        self.timers.advance(1.5)
        self.assertEqual(self.engine.reshuffles, 0)
        self.timers.advance(0.5)
        self.assertEqual(self.engine.reshuffles, 1)
        self.timers.advance(6.0)
        self.assertEqual(self.engine.reshuffles, 4)
        self.assertEqual(sorted(self.engine.state.pool), list(range(1, 9)))

    def test_no_timer_stacking(self) -> None:
        self.scheduler.start()
        for _ in range(5):
            self.engine.add_free_text("x")
        self.assertEqual(len(self.timers.pending), 1)
        self.timers.advance(2.0)
        self.assertEqual(self.engine.reshuffles, 1)

    def test_state_change_restarts_countdown(self) -> None:
        self.scheduler.start()
        self.timers.advance(1.5)
        self.engine.add_free_text("new")
        self.timers.advance(1.5)
        self.assertEqual(self.engine.reshuffles, 0)
        self.timers.advance(0.5)
        self.assertEqual(self.engine.reshuffles, 1)

    def test_hover_suspends_and_resumes(self) -> None:
        self.scheduler.start()
        self.scheduler.set_hover(True)
        self.assertIs(self.scheduler.state, SchedulerState.SUSPENDED)
        self.assertFalse(self.scheduler.pending)
        self.timers.advance(10.0)
        self.assertEqual(self.engine.reshuffles, 0)

        self.scheduler.set_hover(False)
        self.assertIs(self.scheduler.state, SchedulerState.ACTIVE)
        self.timers.advance(2.0)
        self.assertEqual(self.engine.reshuffles, 1)

    def test_disable_suspends(self) -> None:
        self.scheduler.start()
        self.scheduler.set_enabled(False)
        self.timers.advance(10.0)
        self.assertEqual(self.engine.reshuffles, 0)
        # Committed changes do not re-arm a suspended scheduler.
        self.engine.add_free_text("x")
        self.assertFalse(self.scheduler.pending)

    def test_late_tick_of_replaced_timer_is_ignored(self) -> None:
        self.scheduler.start()
        replaced = self.timers.pending[0]
        self.scheduler.set_hover(False)

        # The old timer was already running when it got cancelled.
        replaced.fired = True
        replaced.callback()

        self.assertEqual(len(self.timers.pending), 1)
        self.assertTrue(self.scheduler.pending)
        self.assertEqual(self.engine.reshuffles, 0)
        self.timers.advance(2.0)
        self.assertEqual(self.engine.reshuffles, 1)
        self.assertEqual(len(self.timers.pending), 1)

    def test_stop_cancels_pending(self) -> None:
        self.scheduler.start()
        self.scheduler.stop()
        self.assertEqual(self.timers.pending, [])
        self.timers.advance(10.0)
        self.assertEqual(self.engine.reshuffles, 0)


class SchedulerWithGuardTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repo, self.db_engine = make_repository()
        self.timers = ManualTimerService()
        self.rng = random.Random(12)

    def tearDown(self) -> None:
        self.db_engine.dispose()

    def test_blocked_guard_suspends(self) -> None:
        guard = SessionGuard(self.repo, random=self.rng.random)
        guard.start()
        engine = DrawPoolEngine(DrawState(pool=(1, 2, 3)), guard=guard)
        scheduler = AutoShuffleScheduler(engine, self.timers, guard=guard)
        guard.on_blocked(scheduler.recompute)
        scheduler.start()

        self.repo.set("opened", "other")
        guard.check()

        self.assertIs(scheduler.state, SchedulerState.SUSPENDED)
        self.assertEqual(self.timers.pending, [])

    def test_initialize_wires_everything(self) -> None:
        PersistenceAdapter(self.repo).save(DrawState(pool=("a", "b", "c")))
        settings = SessionSettings(shuffle_interval=2.0, check_interval=1.0)

        session = initialize(
            self.repo,
            self.timers,
            settings=settings,
            confirmation=RecordingConfirmation(True),
            random=self.rng.random,
        )
        self.assertEqual(sorted(session.state.pool), ["a", "b", "c"])
        self.assertEqual(self.repo.get("opened"), session.token)
        self.assertIs(session.scheduler.state, SchedulerState.ACTIVE)

        # Auto-shuffle writes through.
        self.timers.advance(2.0)
        self.assertEqual(PersistenceAdapter(self.repo).load(), session.state)

        other = initialize(self.repo, self.timers, settings=settings, random=self.rng.random)
        self.timers.advance(1.0)
        self.assertTrue(session.blocked)
        self.assertIs(session.scheduler.state, SchedulerState.SUSPENDED)
        self.assertFalse(session.engine.pick_winners(1))
        self.assertFalse(other.blocked)

        session.teardown()
        other.teardown()
        self.assertEqual(self.timers.pending, [])


if __name__ == "__main__":
    unittest.main()
