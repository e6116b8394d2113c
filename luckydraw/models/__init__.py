"""ORM models and the draw state aggregate."""

from luckydraw.models.draw_state import DrawState, Entry
from luckydraw.models.kv_entry import KeyValueEntry

__all__ = ["DrawState", "Entry", "KeyValueEntry"]
