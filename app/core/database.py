"""
Database engine and session management using SQLAlchemy.
Uses synchronous SQLite by default; any SQLAlchemy URL works.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings

settings = get_settings()


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine, applying the SQLite-specific connection options."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}  # Required for SQLite
        if ":memory:" in url or url == "sqlite://":
            # Share the single in-memory database across threads
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo, pool_pre_ping=True)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for all SQLAlchemy models."""
    pass


def init_db(bind: Engine = engine) -> None:
    """Create all database tables from model metadata."""
    # Import models so they register on Base.metadata
    import app.models.transaction  # noqa: F401

    Base.metadata.create_all(bind=bind)
