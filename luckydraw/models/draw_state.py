"""In-memory draw state aggregate.

The engine never mutates a ``DrawState``; each operation builds a new one and
swaps it in, so readers always see a whole snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Union

Entry = Union[str, int]


@dataclass(frozen=True)
class DrawState:
    """Pool, winners and the draft input awaiting parse."""

    pool: tuple[Entry, ...] = field(default_factory=tuple)
    current_winners: tuple[Entry, ...] = field(default_factory=tuple)
    past_winners: tuple[Entry, ...] = field(default_factory=tuple)
    pending_input: str = ""

    @classmethod
    def empty(cls) -> "DrawState":
        return cls()

    def evolve(self, **changes: object) -> "DrawState":
        """Return a copy with ``changes`` applied; sequences are frozen to tuples."""

        for name in ("pool", "current_winners", "past_winners"):
            if name in changes:
                changes[name] = tuple(changes[name])  # type: ignore[arg-type]
        return replace(self, **changes)  # type: ignore[arg-type]

    @property
    def is_empty(self) -> bool:
        return self == DrawState.empty()
