from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from .settings import get_settings


def get_engine_url() -> str:
    settings = get_settings()
    url = settings.database_url
    if url.startswith("sqlite+aiosqlite:///"):
        # The store is synchronous; older async URLs fall back to the plain driver
        url = url.replace("sqlite+aiosqlite:///", "sqlite:///", 1)
    return url


def create_db_engine(url: Optional[str] = None) -> Engine:
    url = url or get_engine_url()
    if not url.startswith("sqlite"):
        return create_engine(url, echo=False)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # A single shared connection, otherwise every session sees an empty database
        kwargs["poolclass"] = StaticPool
    return create_engine(url, echo=False, **kwargs)


@lru_cache
def get_engine() -> Engine:
    return create_db_engine()


@contextmanager
def get_session(engine: Engine) -> Iterator[Session]:
    with Session(engine, expire_on_commit=False, autoflush=False) as session:
        yield session


def init_db(engine: Engine) -> None:
    # Create tables
    SQLModel.metadata.create_all(engine)
