"""Stable de-duplication of pool entries."""

from __future__ import annotations

from typing import Iterable

from luckydraw.models.draw_state import Entry


def _key(entry: Entry) -> tuple[type, Entry]:
    # ``1`` and ``"1"`` are different entries; ``True`` would otherwise collide with ``1``.
    return (type(entry), entry)


def dedup(entries: Iterable[Entry]) -> list[Entry]:
    """Return ``entries`` keeping only the first occurrence of each value.

    Relative order of first occurrences is preserved and the input is not
    modified, so ``dedup(dedup(x)) == dedup(x)``.
    """

    seen: set[tuple[type, Entry]] = set()
    out: list[Entry] = []
    for entry in entries:
        key = _key(entry)
        if key in seen:
            continue
        seen.add(key)
        out.append(entry)
    return out
