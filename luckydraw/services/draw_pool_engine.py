"""Draw pool state engine.

Owns the live :class:`DrawState` and is the only place it changes. Every
operation runs under one lock and swaps in a complete new snapshot, so no
caller (HTTP thread or timer callback) can observe a half-applied update.

Operations never raise. They return ``True`` when the state changed and
``False`` for no-ops, declined confirmations and blocked sessions.

After each change the new state is persisted first and change listeners
(e.g. the auto-shuffle reschedule) run second.
"""

from __future__ import annotations

import logging
import random as _random
import threading
from typing import Callable, Iterable, Optional

from luckydraw.models.draw_state import DrawState, Entry
from luckydraw.services.confirmation import DECLINE_ALL, ConfirmationProvider
from luckydraw.services.dedup import dedup
from luckydraw.services.persistence import PersistenceAdapter
from luckydraw.services.session_guard import SessionGuard
from luckydraw.services.shuffler import RandomSource, shuffle

logger = logging.getLogger(__name__)

StateListener = Callable[[DrawState], None]


def merge_winners(newer: Iterable[Entry], older: Iterable[Entry]) -> list[Entry]:
    """Union of two winner lists, ``newer`` first, without repeats."""

    return dedup([*newer, *older])


def parse_lines(text: str) -> list[str]:
    return [line for line in text.split("\n") if line]


class DrawPoolEngine:
    """Pool, winners and draft input for one session."""

    def __init__(
        self,
        state: DrawState | None = None,
        *,
        persistence: PersistenceAdapter | None = None,
        guard: SessionGuard | None = None,
        confirmation: ConfirmationProvider | None = None,
        random: RandomSource = _random.random,
    ) -> None:
        """Create an engine around an already loaded state.

        Parameters
        ----------
        state : DrawState, optional
            Starting state; empty when omitted.
        persistence : PersistenceAdapter, optional
            Written after every successful mutation.
        guard : SessionGuard, optional
            When blocked, all mutations become no-ops.
        confirmation : ConfirmationProvider, optional
            Default prompt for draw/remove/reset. Declines everything when
            omitted, so destructive calls need an explicit answer.
        random : callable, optional
            Uniform source in ``[0, 1)`` used for shuffling.
        """

        self._state = state if state is not None else DrawState.empty()
        self._persistence = persistence
        self._guard = guard
        self._confirmation = confirmation or DECLINE_ALL
        self._random = random
        self._listeners: list[StateListener] = []
        self._lock = threading.RLock()

    @property
    def state(self) -> DrawState:
        return self._state

    @property
    def blocked(self) -> bool:
        return self._guard is not None and self._guard.blocked

    def add_listener(self, listener: StateListener) -> None:
        """Call ``listener(state)`` after every committed change, after persisting."""

        self._listeners.append(listener)

    def update_pending_input(self, text: str) -> bool:
        """Store the not-yet-submitted multi-line draft."""

        with self._lock:
            if not self._mutable("update_pending_input"):
                return False
            self._commit(self._state.evolve(pending_input=str(text or "")))
            return True

    def add_free_text(self, lines: Optional[str] = None) -> bool:
        """Append one entry per non-empty line and clear the draft.

        ``lines`` defaults to the stored draft.
        """

        with self._lock:
            if not self._mutable("add_free_text"):
                return False
            text = self._state.pending_input if lines is None else str(lines)
            pool = dedup([*self._state.pool, *parse_lines(text)])
            self._commit(self._state.evolve(pool=pool, pending_input=""))
            return True

    def add_range(self, n: int) -> bool:
        """Replace the pool with ``1..n``."""

        with self._lock:
            if not self._mutable("add_range"):
                return False
            if isinstance(n, bool) or not isinstance(n, int) or n < 1:
                logger.info("Ignoring add_range(%r)", n)
                return False
            pool = dedup(range(1, n + 1))
            self._commit(self._state.evolve(pool=pool, pending_input=""))
            return True

    def pick_winners(self, k: int, confirmation: ConfirmationProvider | None = None) -> bool:
        """Draw up to ``k`` winners from the pool.

        The previous winners are archived into past winners (newest first),
        the drawn entries leave the pool. ``k`` is clamped to the pool size.
        """

        with self._lock:
            if not self._mutable("pick_winners"):
                return False
            if not self._confirm(
                confirmation, f"Are you ready? We will pick {k} winner(s)."
            ):
                return False

            shuffled = shuffle(dedup(self._state.pool), self._random)
            count = self._clamp(k, len(shuffled))
            winners, remainder = shuffled[:count], shuffled[count:]
            self._commit(
                self._state.evolve(
                    pool=remainder,
                    current_winners=winners,
                    past_winners=merge_winners(
                        self._state.current_winners, self._state.past_winners
                    ),
                )
            )
            logger.info("Picked %d winner(s); %d left in pool", count, len(remainder))
            return True

    def flush_current_into_past(self) -> bool:
        with self._lock:
            if not self._mutable("flush_current_into_past"):
                return False
            self._commit(
                self._state.evolve(
                    current_winners=(),
                    past_winners=merge_winners(
                        self._state.current_winners, self._state.past_winners
                    ),
                )
            )
            return True

    def remove_entry(self, value: Entry, confirmation: ConfirmationProvider | None = None) -> bool:
        with self._lock:
            if not self._mutable("remove_entry"):
                return False
            if not any(self._same(entry, value) for entry in self._state.pool):
                return False
            if not self._confirm(confirmation, f'Do you want to remove "{value}"?'):
                return False
            pool = [entry for entry in self._state.pool if not self._same(entry, value)]
            self._commit(self._state.evolve(pool=pool))
            return True

    def reset(self, confirmation: ConfirmationProvider | None = None) -> bool:
        with self._lock:
            if not self._mutable("reset"):
                return False
            if not self._confirm(confirmation, "Everything will be gone. Are you sure?"):
                return False
            self._commit(DrawState.empty())
            logger.info("Draw state reset")
            return True

    def reshuffle(self) -> bool:
        """Reorder the pool in place of the old one (auto-shuffle tick)."""

        with self._lock:
            if not self._mutable("reshuffle"):
                return False
            pool = dedup(shuffle(list(self._state.pool), self._random))
            self._commit(self._state.evolve(pool=pool))
            return True

    def _mutable(self, operation: str) -> bool:
        if self.blocked:
            logger.info("Session blocked; %s ignored", operation)
            return False
        return True

    def _confirm(self, override: ConfirmationProvider | None, message: str) -> bool:
        provider = override or self._confirmation
        if provider.confirm(message):
            return True
        logger.info("Declined: %s", message)
        return False

    @staticmethod
    def _same(left: Entry, right: Entry) -> bool:
        return type(left) is type(right) and left == right

    @staticmethod
    def _clamp(k: object, upper: int) -> int:
        try:
            count = int(k)  # type: ignore[call-overload]
        except (TypeError, ValueError, OverflowError):
            return 0
        return max(0, min(count, upper))

    def _commit(self, state: DrawState) -> None:
        self._state = state
        if self._persistence is not None:
            self._persistence.save(state)
        for listener in list(self._listeners):
            listener(state)
