"""Confirmation capability for destructive engine operations."""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class ConfirmationProvider(Protocol):
    def confirm(self, message: str) -> bool:
        """Return ``True`` to proceed, ``False`` to abort with no state change."""
        ...


class StaticConfirmation:
    """Answer every prompt with a fixed value.

    The HTTP layer builds one per request from the client's ``confirm`` flag.
    """

    def __init__(self, answer: bool) -> None:
        self.answer = bool(answer)

    def confirm(self, message: str) -> bool:
        logger.debug("Confirmation %r answered %s", message, self.answer)
        return self.answer


DECLINE_ALL = StaticConfirmation(False)
