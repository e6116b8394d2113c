"""Session lifecycle: explicit ``initialize()`` and ``teardown()``.

One :class:`DrawSession` corresponds to one open client (one browser tab).
Starting a session loads the persisted record, claims the session-token slot
and arms the auto-shuffle and session-check timers. Nothing happens at import
time.
"""

from __future__ import annotations

import logging
import random as _random
import threading
from dataclasses import dataclass
from typing import Optional

from luckydraw.models.draw_state import DrawState
from luckydraw.repositories.kv_repository import KeyValueRepository
from luckydraw.services.auto_shuffle import DEFAULT_INTERVAL, AutoShuffleScheduler
from luckydraw.services.confirmation import ConfirmationProvider
from luckydraw.services.draw_pool_engine import DrawPoolEngine
from luckydraw.services.persistence import DEFAULT_STORE_KEY, PersistenceAdapter
from luckydraw.services.session_guard import DEFAULT_TOKEN_KEY, SessionGuard
from luckydraw.services.shuffler import RandomSource
from luckydraw.services.timers import TimerService

logger = logging.getLogger(__name__)

# Older sessions kept after a newer one claims the slot, so their clients can
# still read the blocked notice.
DEFAULT_MAX_SUPERSEDED = 8


@dataclass(frozen=True)
class SessionSettings:
    store_key: str = DEFAULT_STORE_KEY
    token_key: str = DEFAULT_TOKEN_KEY
    shuffle_interval: float = DEFAULT_INTERVAL
    check_interval: float = DEFAULT_INTERVAL
    auto_shuffle: bool = True
    max_superseded: int = DEFAULT_MAX_SUPERSEDED

    @classmethod
    def from_config(cls, config: dict) -> "SessionSettings":
        return cls(
            store_key=str(config.get("STORE_KEY", DEFAULT_STORE_KEY)),
            token_key=str(config.get("SESSION_TOKEN_KEY", DEFAULT_TOKEN_KEY)),
            shuffle_interval=float(config.get("AUTO_SHUFFLE_INTERVAL", DEFAULT_INTERVAL)),
            check_interval=float(config.get("SESSION_CHECK_INTERVAL", DEFAULT_INTERVAL)),
            auto_shuffle=bool(config.get("AUTO_SHUFFLE_ENABLED", True)),
            max_superseded=int(config.get("MAX_SUPERSEDED_SESSIONS", DEFAULT_MAX_SUPERSEDED)),
        )


@dataclass
class DrawSession:
    token: str
    engine: DrawPoolEngine
    guard: SessionGuard
    scheduler: AutoShuffleScheduler
    persistence: PersistenceAdapter
    closed: bool = False

    @property
    def state(self) -> DrawState:
        return self.engine.state

    @property
    def blocked(self) -> bool:
        return self.guard.blocked

    def teardown(self) -> None:
        """Cancel every timer owned by this session."""

        if self.closed:
            return
        self.closed = True
        self.scheduler.stop()
        self.guard.stop()
        logger.info("Session %s closed", self.token)


def initialize(
    repository: KeyValueRepository,
    timer_service: TimerService,
    *,
    settings: SessionSettings | None = None,
    confirmation: Optional[ConfirmationProvider] = None,
    random: RandomSource = _random.random,
) -> DrawSession:
    """Start a session against ``repository``.

    Order matters: the state is loaded before the token slot is claimed, and
    the engine persists before it reschedules.
    """

    settings = settings or SessionSettings()
    persistence = PersistenceAdapter(repository, key=settings.store_key)
    state = persistence.load()

    guard = SessionGuard(repository, key=settings.token_key, random=random)
    token = guard.start()

    engine = DrawPoolEngine(
        state,
        persistence=persistence,
        guard=guard,
        confirmation=confirmation,
        random=random,
    )
    scheduler = AutoShuffleScheduler(
        engine,
        timer_service,
        guard=guard,
        interval=settings.shuffle_interval,
        enabled=settings.auto_shuffle,
    )
    engine.add_listener(scheduler.on_state_change)
    guard.on_blocked(scheduler.recompute)

    guard.watch(timer_service, settings.check_interval)
    scheduler.start()

    logger.info(
        "Session %s started with %d entries in pool", token, len(state.pool)
    )
    return DrawSession(
        token=token,
        engine=engine,
        guard=guard,
        scheduler=scheduler,
        persistence=persistence,
    )


class SessionRegistry:
    """Live sessions of one application, keyed by token."""

    def __init__(
        self,
        repository: KeyValueRepository,
        timer_service: TimerService,
        settings: SessionSettings | None = None,
        random: RandomSource = _random.random,
    ) -> None:
        self.repository = repository
        self.timer_service = timer_service
        self.settings = settings or SessionSettings()
        self.random = random
        self._sessions: dict[str, DrawSession] = {}
        self._lock = threading.Lock()

    def open(self) -> DrawSession:
        session = initialize(
            self.repository,
            self.timer_service,
            settings=self.settings,
            random=self.random,
        )
        with self._lock:
            self._sessions[session.token] = session
            evicted = self._evict_superseded()
        for old in evicted:
            old.teardown()
        if evicted:
            logger.info("Evicted %d superseded sessions", len(evicted))
        return session

    def _evict_superseded(self) -> list[DrawSession]:
        # Every session but the newest lost the token slot when it was opened.
        # Dicts keep insertion order, so the oldest come first.
        excess = len(self._sessions) - 1 - max(self.settings.max_superseded, 0)
        if excess <= 0:
            return []
        tokens = list(self._sessions)[:excess]
        return [self._sessions.pop(token) for token in tokens]

    def get(self, token: str) -> DrawSession | None:
        with self._lock:
            return self._sessions.get(token)

    def close(self, token: str) -> bool:
        with self._lock:
            session = self._sessions.pop(token, None)
        if session is None:
            return False
        session.teardown()
        return True

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.teardown()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
