"""Health check routes."""

from __future__ import annotations

from flask import Blueprint, current_app

from luckydraw.db import get_db_backend
from luckydraw.utils.responses import ok

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    """Health check endpoint."""

    return ok(
        {
            "status": "ok",
            "backend": get_db_backend(),
            "sessions": len(current_app.extensions["draw_sessions"]),
        }
    )
