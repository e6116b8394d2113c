"""Lucky draw: pool, winners and a single-active-session guard behind a Flask API."""

from __future__ import annotations

import atexit
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from flask import Flask

if TYPE_CHECKING:
    from luckydraw.config import BaseConfig
    from luckydraw.services.timers import TimerService


def create_app(
    config: type[BaseConfig] | None = None,
    *,
    timer_service: TimerService | None = None,
) -> Flask:
    """Application factory.

    Args:
        config: Configuration class; resolved from ``APP_ENV`` when omitted.
        timer_service: Timer capability for auto-shuffle and session checks;
            defaults to daemon ``threading.Timer`` instances.

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from luckydraw.config import get_config
    from luckydraw.db import init_db
    from luckydraw.error_handlers import register_error_handlers
    from luckydraw.logging_config import configure_logging
    from luckydraw.repositories.kv_repository import KeyValueRepository
    from luckydraw.routes.draw import draw_bp
    from luckydraw.routes.health import health_bp
    from luckydraw.services.draw_session import SessionRegistry, SessionSettings
    from luckydraw.services.timers import ThreadingTimerService

    app = Flask(__name__)
    app.config.from_object(config or get_config())

    configure_logging(app)
    init_db(app)
    register_error_handlers(app)

    registry = SessionRegistry(
        KeyValueRepository.from_app(app),
        timer_service or ThreadingTimerService(),
        settings=SessionSettings.from_config(app.config),
    )
    app.extensions["draw_sessions"] = registry
    atexit.register(registry.close_all)

    app.register_blueprint(health_bp)
    app.register_blueprint(draw_bp, url_prefix="/api")

    return app
