"""
SQLAlchemy declarative base, engine and session factory.

In-memory SQLite gives every new connection its own empty database, so the
in-memory mode pins one shared connection with StaticPool.
"""
from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

MEMORY_URL = "sqlite://"


class Base(DeclarativeBase):
    pass


def resolve_url(location: str | Path) -> str:
    """Turn a URL, a bare file path or ``:memory:`` into an SQLAlchemy URL."""
    text = str(location).strip()
    if text in ("", ":memory:"):
        return MEMORY_URL
    if "://" in text:
        return text
    return f"sqlite:///{text}"


def is_memory_url(url: str) -> bool:
    return url in (MEMORY_URL, "sqlite:///:memory:") or url.endswith("mode=memory")


def make_engine(url: str) -> Engine:
    if is_memory_url(url):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
