"""
Record store for crawl analyses.

Keeps one live row per URL. Upserts purge tombstoned rows for the URL first,
then run a single INSERT ... ON CONFLICT DO UPDATE against the partial unique
index, so concurrent upserts of the same URL cannot create duplicates.
"""

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, func, select, text, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .database import Base, create_db_engine, create_session_factory
from .errors import NotFound, PersistenceError
from .models import PageAnalysis
from .records import CrawlRecord, encode_analysis

logger = logging.getLogger(__name__)

_LIVE_ROW = text("deleted_at IS NULL")

_DIALECT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordStore:
    """Durable storage of PageAnalysis results, one live row per URL."""

    def __init__(self, engine: Engine, session_factory: Optional[sessionmaker] = None):
        if engine.dialect.name not in _DIALECT_INSERTS:
            raise ValueError(f"Unsupported database dialect: {engine.dialect.name}")
        self.engine = engine
        self._session_factory = session_factory or create_session_factory(engine)
        self._insert = _DIALECT_INSERTS[engine.dialect.name]

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> "RecordStore":
        return cls(create_db_engine(url, echo=echo))

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Schema creation failed: {exc}") from exc

    def is_healthy(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        """Session scoped to one commit; store failures surface as PersistenceError."""
        try:
            with self._session_factory.begin() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Store %s failed: %s", action, exc)
            raise PersistenceError(f"Failed to {action}: {exc}") from exc

    # --- writes ---

    def upsert(self, analysis: PageAnalysis) -> CrawlRecord:
        """
        Insert or refresh the live row for analysis.url and return it.

        The row id is preserved across repeated upserts of the same URL.
        A tombstoned row for the URL is purged first and never resurrected.
        """
        values = encode_analysis(analysis)
        values["crawled_at"] = _utcnow()

        with self._transaction("save crawl result") as session:
            purged = session.execute(
                delete(CrawlRecord).where(CrawlRecord.url == analysis.url, CrawlRecord.deleted_at.is_not(None))
            ).rowcount
            if purged:
                logger.info("Purged %d tombstoned record(s) for %s", purged, analysis.url)

            stmt = self._insert(CrawlRecord).values(**values)
            refreshed = {name: stmt.excluded[name] for name in values if name != "url"}
            refreshed["updated_at"] = func.now()
            stmt = stmt.on_conflict_do_update(
                index_elements=["url"],
                index_where=_LIVE_ROW,
                set_=refreshed,
            )
            session.execute(stmt)

            record = session.scalars(
                select(CrawlRecord)
                .where(CrawlRecord.url == analysis.url, CrawlRecord.deleted_at.is_(None))
                .execution_options(populate_existing=True)
            ).one()

        logger.info("Saved crawl record %d for %s", record.id, record.url)
        return record

    def soft_delete(self, ids: Iterable[int]) -> int:
        """Tombstone live rows. Returns how many rows were marked."""
        ids = set(ids)
        if not ids:
            return 0
        with self._transaction("soft delete crawl records") as session:
            count = session.execute(
                update(CrawlRecord)
                .where(CrawlRecord.id.in_(ids), CrawlRecord.deleted_at.is_(None))
                .values(deleted_at=_utcnow())
            ).rowcount
        logger.info("Tombstoned %d crawl record(s)", count)
        return count

    def bulk_hard_delete(self, ids: Iterable[int]) -> int:
        """
        Physically remove rows by id, tombstoned or not. Unknown ids are
        ignored; the count covers only rows that actually existed.
        """
        ids = set(ids)
        if not ids:
            return 0
        with self._transaction("delete crawl records") as session:
            count = session.execute(delete(CrawlRecord).where(CrawlRecord.id.in_(ids))).rowcount
        logger.info("Deleted %d of %d requested crawl record(s)", count, len(ids))
        return count

    # --- reads ---

    def list_all(self) -> list[CrawlRecord]:
        with self._transaction("list crawl records") as session:
            return list(session.scalars(
                select(CrawlRecord).where(CrawlRecord.deleted_at.is_(None)).order_by(CrawlRecord.id)
            ))

    def get_by_id(self, record_id: int) -> CrawlRecord:
        with self._transaction("load crawl record") as session:
            record = session.scalars(
                select(CrawlRecord).where(CrawlRecord.id == record_id, CrawlRecord.deleted_at.is_(None))
            ).one_or_none()
        if record is None:
            raise NotFound(record_id)
        return record

    def find_by_url(self, url: str) -> Optional[CrawlRecord]:
        with self._transaction("load crawl record") as session:
            return session.scalars(
                select(CrawlRecord).where(CrawlRecord.url == url, CrawlRecord.deleted_at.is_(None))
            ).one_or_none()
