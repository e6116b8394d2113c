"""Helpers for the ``{success, data, error}`` JSON envelope."""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify


def ok(data: Any, status_code: int = 200) -> tuple[Response, int]:
    """Success response."""

    return jsonify({"success": True, "data": data, "error": None}), status_code


def applied(changed: bool, snapshot: dict[str, Any]) -> tuple[Response, int]:
    """Success response for an engine operation.

    ``applied`` is ``False`` for no-ops and declined confirmations; neither is
    an error.
    """

    return ok({"applied": bool(changed), **snapshot})


def fail(
    code: str, message: str, status_code: int, details: Any | None = None
) -> tuple[Response, int]:
    """Error response."""

    body = {"code": code, "message": message, "details": details}
    return jsonify({"success": False, "data": None, "error": body}), status_code
