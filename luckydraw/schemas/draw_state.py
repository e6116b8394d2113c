"""Marshmallow schema for the persisted draw record."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load

from luckydraw.models.draw_state import DrawState


class EntryField(fields.Field):
    """A pool entry: either a string or an integer (booleans rejected)."""

    default_error_messages = {"invalid": "Entry must be a string or an integer."}

    def _validate_entry(self, value: Any) -> str | int:
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise self.make_error("invalid")
        return value

    def _serialize(self, value: Any, attr: str | None, obj: Any, **kwargs: Any) -> Any:
        if value is None:
            return None
        return self._validate_entry(value)

    def _deserialize(self, value: Any, attr: str | None, data: Any, **kwargs: Any) -> str | int:
        return self._validate_entry(value)


class DrawStateSchema(Schema):
    """``{pool, currentWinner, pastWinner, input}`` <-> :class:`DrawState`."""

    class Meta:
        unknown = EXCLUDE

    pool = fields.List(EntryField(), load_default=list)
    current_winners = fields.List(EntryField(), data_key="currentWinner", load_default=list)
    past_winners = fields.List(EntryField(), data_key="pastWinner", load_default=list)
    pending_input = fields.String(data_key="input", load_default="")

    @post_load
    def _make_state(self, data: dict[str, Any], **kwargs: Any) -> DrawState:
        return DrawState().evolve(**data)
