"""Database connection settings and schema creation."""

from __future__ import annotations

import os
from collections.abc import Mapping

from sqlalchemy import URL, Engine, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from kaotonamae.models import Base, StoreError

_CONNECT_FAILURE = "Could not connect to database."


def database_url(env: Mapping[str, str] | None = None) -> URL:
    """Build the MySQL URL from DB_USER, DB_PASSWORD, DB_HOST, DB_PORT and DB_NAME."""
    env = os.environ if env is None else env
    port_text = env.get("DB_PORT", "")
    try:
        port = int(port_text) if port_text else None
    except ValueError:
        raise ValueError(f"invalid DB_PORT: {port_text!r}") from None
    return URL.create(
        "mysql+pymysql",
        username=env.get("DB_USER") or None,
        password=env.get("DB_PASSWORD") or None,
        host=env.get("DB_HOST") or None,
        port=port,
        database=env.get("DB_NAME") or None,
        query={"charset": "utf8mb4"},
    )


def create_engine_from_env(env: Mapping[str, str] | None = None) -> Engine:
    """Open an engine from the environment and check that the server answers."""
    try:
        engine = create_engine(database_url(env))
        with engine.connect():
            pass
    except (SQLAlchemyError, ValueError) as exc:
        raise StoreError(_CONNECT_FAILURE) from exc
    return engine


def migrate(engine: Engine) -> None:
    """Create every table that does not exist yet."""
    Base.metadata.create_all(engine)


def session_factory(engine: Engine) -> sessionmaker[Session]:
    """Sessions bound to the engine whose objects stay readable after commit."""
    return sessionmaker(bind=engine, expire_on_commit=False)