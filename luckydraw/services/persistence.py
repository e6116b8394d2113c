"""Write-through mirror of the draw state in the key-value store."""

from __future__ import annotations

import json
import logging

from marshmallow import ValidationError

from luckydraw.models.draw_state import DrawState
from luckydraw.repositories.kv_repository import STORE_ERRORS, KeyValueRepository
from luckydraw.schemas.draw_state import DrawStateSchema

logger = logging.getLogger(__name__)

DEFAULT_STORE_KEY = "PersistStore"


class PersistenceAdapter:
    """Serialize the whole :class:`DrawState` under one fixed key.

    Holds no copy of the state. ``load`` never raises: a missing or broken
    record yields the empty state.
    """

    def __init__(self, repository: KeyValueRepository, key: str = DEFAULT_STORE_KEY) -> None:
        self._repo = repository
        self._key = key
        self._schema = DrawStateSchema()

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> DrawState:
        try:
            raw = self._repo.get(self._key)
        except STORE_ERRORS:
            logger.exception("Could not read draw record %r; starting empty", self._key)
            return DrawState.empty()

        if raw is None:
            return DrawState.empty()

        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning("Draw record %r is not valid JSON; starting empty", self._key)
            return DrawState.empty()

        if not isinstance(payload, dict):
            logger.warning("Draw record %r is not an object; starting empty", self._key)
            return DrawState.empty()

        try:
            return self._schema.load(payload)
        except ValidationError as exc:
            logger.warning("Draw record %r failed validation: %s", self._key, exc.messages)
            return DrawState.empty()

    def save(self, state: DrawState) -> None:
        raw = self._schema.dumps(state)
        try:
            self._repo.set(self._key, raw)
        except STORE_ERRORS:
            # In-memory state stays authoritative; the next save retries.
            logger.exception("Could not write draw record %r", self._key)
