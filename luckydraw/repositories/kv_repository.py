"""Repository layer for the key-value store.

Every slot is a plain string. Writes overwrite (last writer wins); there is no
locking across sessions.
"""

from __future__ import annotations

from typing import Any

from flask import Flask
from pymongo.errors import PyMongoError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from luckydraw.db import get_db_backend, get_mongo_db, get_session_factory
from luckydraw.models.kv_entry import KeyValueEntry

# Failures of either backend; callers that must not raise catch these.
STORE_ERRORS = (SQLAlchemyError, PyMongoError)


class KeyValueRepository:
    """Get/set string values by key on the SQL or Mongo backend."""

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        mongo_db: Any | None = None,
    ) -> None:
        if session_factory is None and mongo_db is None:
            raise ValueError("Either a session factory or a mongo database is required")
        self._session_factory = session_factory
        self._mongo_db = mongo_db

    @classmethod
    def from_app(cls, app: Flask) -> "KeyValueRepository":
        if get_db_backend(app) == "mongo":
            return cls(mongo_db=get_mongo_db(app))
        return cls(session_factory=get_session_factory(app))

    @property
    def backend(self) -> str:
        return "mongo" if self._mongo_db is not None else "sql"

    def _session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("SQLAlchemy session factory required for sql backend")
        return self._session_factory()

    def get(self, key: str) -> str | None:
        if self.backend == "mongo":
            doc = self._mongo_db["kv_store"].find_one({"_id": key})
            if not doc:
                return None
            value = doc.get("value")
            return None if value is None else str(value)

        with self._session() as session:
            return session.scalar(select(KeyValueEntry.value).where(KeyValueEntry.key == key))

    def set(self, key: str, value: str) -> None:
        if self.backend == "mongo":
            self._mongo_db["kv_store"].replace_one(
                {"_id": key}, {"_id": key, "value": str(value)}, upsert=True
            )
            return

        with self._session() as session, session.begin():
            entry = session.get(KeyValueEntry, key)
            if entry is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value

    def delete(self, key: str) -> None:
        if self.backend == "mongo":
            self._mongo_db["kv_store"].delete_one({"_id": key})
            return

        with self._session() as session, session.begin():
            entry = session.get(KeyValueEntry, key)
            if entry is not None:
                session.delete(entry)
