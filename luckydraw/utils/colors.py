"""Deterministic display colour per pool entry.

Purely cosmetic; has no bearing on draws.
"""

from __future__ import annotations

import math
import re

from luckydraw.models.draw_state import Entry

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")


def _seed(s: float) -> float:
    s = math.sin(s) * 10000
    return s - math.floor(s)


def entry_seed(entry: Entry) -> int:
    """Leading integer of the entry, or the code point of its first character."""

    text = str(entry)
    match = _LEADING_INT.match(text)
    if match and int(match.group()) != 0:
        return int(match.group())
    return ord(text[0]) if text else 0


def entry_color(entry: Entry) -> str:
    hue = _seed(entry_seed(entry)) * 360
    return f"hsl({hue:.2f}, 100%, 75%)"
