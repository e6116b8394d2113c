"""Key-value store table.

Columns:
- key (PK)
- value (serialized text)
"""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from luckydraw.models.base import Base


class KeyValueEntry(Base):
    """One row per storage slot (draw record, session token)."""

    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
