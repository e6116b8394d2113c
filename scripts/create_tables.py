"""Create the key-value store table and optionally inspect or clear the draw record.

Reads DATABASE_URL from .env / environment.

Usage:
  python scripts/create_tables.py            # create tables
  python scripts/create_tables.py --show     # also print the stored draw record
  python scripts/create_tables.py --clear    # also delete the draw record and session token
"""

from __future__ import annotations

import argparse
import pathlib
import sys

from dotenv import load_dotenv
from sqlalchemy.orm import sessionmaker

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from luckydraw.config import get_config, resolve_database_url
from luckydraw.db import create_app_engine
from luckydraw.models.base import Base
from luckydraw.repositories.kv_repository import KeyValueRepository
from luckydraw.services.persistence import PersistenceAdapter

# Import models so they register with Base.metadata
from luckydraw import models  # noqa: F401


def main(argv: list[str] | None = None) -> int:
    """Create all ORM tables in the target database."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--show", action="store_true", help="print the stored draw record")
    parser.add_argument("--clear", action="store_true", help="delete draw record and token")
    args = parser.parse_args(argv)

    load_dotenv()
    env_local = PROJECT_ROOT / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)

    config = get_config()
    engine = create_app_engine(resolve_database_url())
    Base.metadata.create_all(bind=engine)
    print("Tables created (or already exist).")

    repo = KeyValueRepository(session_factory=sessionmaker(bind=engine, expire_on_commit=False))

    if args.clear:
        repo.delete(config.STORE_KEY)
        repo.delete(config.SESSION_TOKEN_KEY)
        print(f"Cleared {config.STORE_KEY!r} and {config.SESSION_TOKEN_KEY!r}.")

    if args.show:
        state = PersistenceAdapter(repo, key=config.STORE_KEY).load()
        print(f"pool ({len(state.pool)}): {list(state.pool)}")
        print(f"current winners: {list(state.current_winners)}")
        print(f"past winners: {list(state.past_winners)}")
        print(f"pending input: {state.pending_input!r}")

    engine.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
