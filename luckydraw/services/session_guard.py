"""Best-effort detection of a second session sharing the same store.

Each session writes a fresh token to one well-known slot on start. A session
that later finds somebody else's token in that slot assumes it has been
superseded and blocks itself for good.

This is detection, not a lock: two sessions starting within one check interval
may both see their own token for a while and race on the draw record. Writes
stay last-writer-wins either way.
"""

from __future__ import annotations

import logging
import random as _random
import threading
from functools import partial
from typing import Callable

from luckydraw.repositories.kv_repository import STORE_ERRORS, KeyValueRepository
from luckydraw.services.shuffler import RandomSource
from luckydraw.services.timers import TimerHandle, TimerService

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_KEY = "opened"


class SessionGuard:
    def __init__(
        self,
        repository: KeyValueRepository,
        key: str = DEFAULT_TOKEN_KEY,
        random: RandomSource = _random.random,
    ) -> None:
        self._repo = repository
        self._key = key
        self._random = random
        self._token: str | None = None
        self._blocked = False
        self._listeners: list[Callable[[], None]] = []
        self._lock = threading.Lock()
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._timer_service: TimerService | None = None
        self._interval = 0.0
        self._watching = False

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def blocked(self) -> bool:
        return self._blocked

    def on_blocked(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def start(self) -> str:
        """Claim the token slot for this session, overwriting any other claim."""

        self._token = repr(self._random())
        self._repo.set(self._key, self._token)
        logger.info("Session %s claimed slot %r", self._token, self._key)
        return self._token

    def check(self) -> bool:
        """Return ``True`` while this session still owns the slot."""

        if self._blocked:
            return False
        if self._token is None:
            return True

        stored = self._repo.get(self._key)
        if stored == self._token:
            return True

        self._block(stored)
        return False

    def _block(self, stored: str | None) -> None:
        with self._lock:
            if self._blocked:
                return
            self._blocked = True
            self._cancel_timer()
        logger.warning(
            "Session %s superseded by %s; further changes are disabled",
            self._token,
            stored,
        )
        for listener in list(self._listeners):
            listener()

    def watch(self, timer_service: TimerService, interval: float) -> None:
        """Re-run :meth:`check` every ``interval`` seconds until blocked or stopped."""

        with self._lock:
            self._timer_service = timer_service
            self._interval = interval
            self._watching = True
            self._schedule()

    def stop(self) -> None:
        with self._lock:
            self._watching = False
            self._cancel_timer()

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        try:
            owned = self.check()
        except STORE_ERRORS:
            logger.exception("Session check failed; retrying on next tick")
            owned = True
        if owned:
            with self._lock:
                self._schedule()

    def _schedule(self) -> None:
        self._cancel_timer()
        if not self._watching or self._blocked or self._timer_service is None:
            return
        self._timer = self._timer_service.schedule(
            self._interval, partial(self._tick, self._generation)
        )

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
