"""In-place Fisher-Yates shuffle."""

from __future__ import annotations

import random as _random
from typing import Callable, MutableSequence, TypeVar

T = TypeVar("T")

RandomSource = Callable[[], float]


def shuffle(
    items: MutableSequence[T],
    random: RandomSource = _random.random,
) -> MutableSequence[T]:
    """Uniformly permute ``items`` in place and return the same sequence.

    ``random`` must return floats in ``[0, 1)``; no cryptographic source is needed.
    """

    for i in range(len(items) - 1, 0, -1):
        j = min(int(random() * (i + 1)), i)
        items[i], items[j] = items[j], items[i]
    return items
