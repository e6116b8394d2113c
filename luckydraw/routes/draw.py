"""Draw session routes (controllers). No business logic here."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, request

from luckydraw.errors import NotFoundError, SessionConflictError, ValidationError
from luckydraw.schemas.session import (
    AddRangeSchema,
    AddTextSchema,
    AutoShuffleSchema,
    ConfirmSchema,
    PendingInputSchema,
    PickSchema,
    RemoveSchema,
    SessionSnapshotSchema,
)
from luckydraw.services.confirmation import StaticConfirmation
from luckydraw.services.draw_session import DrawSession, SessionRegistry
from luckydraw.utils.colors import entry_color
from luckydraw.utils.responses import applied, ok

draw_bp = Blueprint("draw", __name__)

_snapshot_schema = SessionSnapshotSchema()
_input_schema = PendingInputSchema()
_text_schema = AddTextSchema()
_range_schema = AddRangeSchema()
_pick_schema = PickSchema()
_remove_schema = RemoveSchema()
_confirm_schema = ConfirmSchema()
_auto_shuffle_schema = AutoShuffleSchema()


def _registry() -> SessionRegistry:
    return current_app.extensions["draw_sessions"]


def _payload() -> dict[str, Any]:
    return request.get_json(silent=True) or {}


def _get_session(token: str) -> DrawSession:
    session = _registry().get(token)
    if session is None:
        raise NotFoundError(message="Unknown or closed session")
    return session


def _active_session(token: str) -> DrawSession:
    """Session lookup for mutating calls; runs an on-demand guard check."""

    session = _get_session(token)
    if not session.guard.check():
        raise SessionConflictError()
    return session


def _snapshot(session: DrawSession) -> dict[str, Any]:
    state = session.state
    return _snapshot_schema.dump(
        {
            "token": session.token,
            "state": state,
            "blocked": session.blocked,
            "auto_shuffle": session.scheduler.state.value,
            "pool_colors": [entry_color(entry) for entry in state.pool],
        }
    )


@draw_bp.post("/sessions")
def open_session():
    session = _registry().open()
    return ok(_snapshot(session), status_code=201)


@draw_bp.get("/sessions/<token>")
def get_session(token: str):
    session = _get_session(token)
    session.guard.check()
    return ok(_snapshot(session))


@draw_bp.delete("/sessions/<token>")
def close_session(token: str):
    if not _registry().close(token):
        raise NotFoundError(message="Unknown or closed session")
    return ok({"token": token, "closed": True})


@draw_bp.put("/sessions/<token>/input")
def update_input(token: str):
    data = _input_schema.load(_payload())
    session = _active_session(token)
    changed = session.engine.update_pending_input(data["text"])
    return applied(changed, _snapshot(session))


@draw_bp.post("/sessions/<token>/pool/text")
def add_text(token: str):
    data = _text_schema.load(_payload())
    session = _active_session(token)
    changed = session.engine.add_free_text(data.get("text"))
    return applied(changed, _snapshot(session))


@draw_bp.post("/sessions/<token>/pool/range")
def add_range(token: str):
    data = _range_schema.load(_payload())
    session = _active_session(token)
    changed = session.engine.add_range(int(data["count"]))
    return applied(changed, _snapshot(session))


@draw_bp.post("/sessions/<token>/pool/remove")
def remove_entry(token: str):
    data = _remove_schema.load(_payload())
    session = _active_session(token)
    changed = session.engine.remove_entry(
        data["value"], confirmation=StaticConfirmation(data["confirm"])
    )
    return applied(changed, _snapshot(session))


@draw_bp.post("/sessions/<token>/draw")
def pick_winners(token: str):
    data = _pick_schema.load(_payload())
    session = _active_session(token)
    if not session.state.pool:
        raise ValidationError(
            message="Pool is empty",
            details={"count": ["Add entries to the pool before drawing"]},
        )
    changed = session.engine.pick_winners(
        int(data["count"]), confirmation=StaticConfirmation(data["confirm"])
    )
    return applied(changed, _snapshot(session))


@draw_bp.post("/sessions/<token>/flush")
def flush_winners(token: str):
    session = _active_session(token)
    changed = session.engine.flush_current_into_past()
    return applied(changed, _snapshot(session))


@draw_bp.post("/sessions/<token>/reset")
def reset(token: str):
    data = _confirm_schema.load(_payload())
    session = _active_session(token)
    changed = session.engine.reset(confirmation=StaticConfirmation(data["confirm"]))
    return applied(changed, _snapshot(session))


@draw_bp.put("/sessions/<token>/auto-shuffle")
def update_auto_shuffle(token: str):
    data = _auto_shuffle_schema.load(_payload())
    session = _get_session(token)
    if "hover" in data:
        session.scheduler.set_hover(data["hover"])
    if "enabled" in data:
        session.scheduler.set_enabled(data["enabled"])
    return ok(_snapshot(session))
