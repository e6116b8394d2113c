"""Periodic pool reordering for display.

Restart-on-change: every call to :meth:`AutoShuffleScheduler.recompute`
cancels the pending timer and, if the scheduler is still ``ACTIVE``, arms a
fresh one. The engine calls ``recompute`` after each committed change, so a
tick's own reshuffle arms the next tick.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from functools import partial
from typing import Optional

from luckydraw.models.draw_state import DrawState
from luckydraw.services.draw_pool_engine import DrawPoolEngine
from luckydraw.services.session_guard import SessionGuard
from luckydraw.services.timers import TimerHandle, TimerService

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 2.0


class SchedulerState(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class AutoShuffleScheduler:
    def __init__(
        self,
        engine: DrawPoolEngine,
        timer_service: TimerService,
        *,
        guard: Optional[SessionGuard] = None,
        interval: float = DEFAULT_INTERVAL,
        enabled: bool = True,
    ) -> None:
        self._engine = engine
        self._timers = timer_service
        self._guard = guard
        self._interval = interval
        self._enabled = enabled
        self._hovering = False
        self._stopped = False
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> SchedulerState:
        suspended = (
            self._stopped
            or self._hovering
            or not self._enabled
            or (self._guard is not None and self._guard.blocked)
        )
        return SchedulerState.SUSPENDED if suspended else SchedulerState.ACTIVE

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def set_hover(self, hovering: bool) -> None:
        """Pointer over the pool pauses shuffling so entries can be clicked."""

        self._hovering = bool(hovering)
        self.recompute()

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)
        self.recompute()

    def start(self) -> None:
        self._stopped = False
        self.recompute()

    def stop(self) -> None:
        self._stopped = True
        self.recompute()

    def on_state_change(self, state: DrawState) -> None:
        self.recompute()

    def recompute(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1
            if self.state is SchedulerState.ACTIVE:
                self._timer = self._timers.schedule(
                    self._interval, partial(self._tick, self._generation)
                )

    def _tick(self, generation: int) -> None:
        with self._lock:
            # A timer that fired while being replaced must not touch the new one.
            if generation != self._generation:
                return
            self._timer = None
        if self.state is not SchedulerState.ACTIVE:
            return
        # A committed reshuffle re-arms through on_state_change.
        if not self._engine.reshuffle():
            logger.debug("Auto-shuffle skipped; rescheduling")
            self.recompute()
