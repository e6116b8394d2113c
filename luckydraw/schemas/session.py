"""Schemas for the draw session API."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from luckydraw.schemas.draw_state import DrawStateSchema, EntryField

DEFAULT_PICK_AMOUNT = 5


class PendingInputSchema(Schema):
    text = fields.String(required=True)


class AddTextSchema(Schema):
    # Omitted: use the stored draft.
    text = fields.String(required=False, load_default=None, allow_none=True)


class AddRangeSchema(Schema):
    count = fields.Integer(required=True, strict=True, validate=validate.Range(min=1, max=100_000))


class PickSchema(Schema):
    count = fields.Integer(
        required=False,
        strict=True,
        load_default=DEFAULT_PICK_AMOUNT,
        validate=validate.Range(min=1),
    )
    confirm = fields.Boolean(required=False, load_default=False)


class RemoveSchema(Schema):
    value = EntryField(required=True)
    confirm = fields.Boolean(required=False, load_default=False)


class ConfirmSchema(Schema):
    confirm = fields.Boolean(required=False, load_default=False)


class AutoShuffleSchema(Schema):
    hover = fields.Boolean(required=False)
    enabled = fields.Boolean(required=False)

    @validates_schema
    def _validate_any(self, data, **kwargs):  # type: ignore[no-untyped-def]
        if "hover" not in data and "enabled" not in data:
            raise ValidationError({"_schema": ["Provide hover and/or enabled"]})


class SessionSnapshotSchema(Schema):
    token = fields.String(required=True)
    state = fields.Nested(DrawStateSchema, required=True)
    blocked = fields.Boolean(required=True)
    auto_shuffle = fields.String(required=True)
    pool_colors = fields.List(fields.String(), required=True)
