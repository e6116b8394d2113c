"""Storage engine setup.

SQL backend: one SQLAlchemy engine + session factory per app. The key-value
repository opens a short-lived session per read/write because timer callbacks
touch the store outside of any request.

Mongo backend: one ``MongoClient`` per app.
"""

from __future__ import annotations

from typing import Any

from flask import Flask, current_app
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from luckydraw.models.base import Base


def create_app_engine(database_url: str) -> Engine:
    url = make_url(database_url)

    # In-memory sqlite lives per connection; share one across threads.
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )

    if url.get_backend_name() == "sqlite":
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            future=True,
        )

    return create_engine(database_url, pool_pre_ping=True, future=True)


def _create_mongo_db(uri: str, database: str) -> Any:
    from pymongo import MongoClient

    client = MongoClient(uri)
    return client[database]


def init_db(app: Flask) -> None:
    """Initialize the configured storage backend."""

    backend = str(app.config.get("DB_BACKEND", "sql")).lower().strip()
    app.extensions["db_backend"] = backend

    if backend == "mongo":
        app.extensions["mongo_db"] = _create_mongo_db(
            str(app.config["MONGODB_URI"]), str(app.config["MONGODB_DB"])
        )
        return

    engine = create_app_engine(str(app.config["DATABASE_URL"]))
    session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    # Single table; no migrations needed.
    Base.metadata.create_all(bind=engine)

    app.extensions["engine"] = engine
    app.extensions["session_factory"] = session_factory


def get_db_backend(app: Flask | None = None) -> str:
    target = app or current_app
    return str(target.extensions.get("db_backend", "sql"))


def get_session_factory(app: Flask | None = None) -> sessionmaker:
    target = app or current_app
    factory = target.extensions.get("session_factory")
    if factory is None:
        raise RuntimeError("Database session factory not initialized")
    return factory


def get_mongo_db(app: Flask | None = None) -> Any:
    target = app or current_app
    db = target.extensions.get("mongo_db")
    if db is None:
        raise RuntimeError("Mongo database not initialized")
    return db
