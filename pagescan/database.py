"""
Database engine and session factory.
SQLite by default; any SQLAlchemy URL works via PAGESCAN_DATABASE_URL.
"""

import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("PAGESCAN_DATABASE_URL", "sqlite:///crawl_data.db")
DATABASE_ECHO = os.getenv("PAGESCAN_DB_ECHO", "false").lower() in ("1", "true", "yes")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def create_db_engine(url: str = DATABASE_URL, echo: bool = DATABASE_ECHO) -> Engine:
    """
    Build an engine for the given URL.
    In-memory SQLite shares a single connection so every session sees the same data.
    """
    kwargs = {"echo": echo, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # probes run in executor threads; the connection may cross them
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)
    logger.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(engine, expire_on_commit=False, autoflush=False)
