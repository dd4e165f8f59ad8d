"""
Persisted crawl records.

One live row per URL: a partial unique index over url where deleted_at is
NULL. headings and broken_links are stored as JSON text; nothing queries
their contents.
"""

from __future__ import annotations

import json
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base
from .models import BrokenLink, PageAnalysis, empty_headings


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class CrawlRecord(Base, TimestampMixin):
    __tablename__ = "crawl_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(String(2000), nullable=False)

    html_version: Mapped[str] = mapped_column(String(16), nullable=False, default="Unknown")
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    headings: Mapped[str] = mapped_column(Text, nullable=False, default="{}")       # JSON object h1..h6 -> count
    internal_links: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    external_links: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    inaccessible_links: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    broken_links: Mapped[str] = mapped_column(Text, nullable=False, default="[]")   # JSON array of BrokenLink
    has_login_form: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    crawled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_crawl_records_deleted_at", "deleted_at"),
        Index(
            "uq_crawl_records_live_url",
            "url",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
        # ids are never reused after a purge
        {"sqlite_autoincrement": True},
    )

    def decoded_headings(self) -> dict[str, int]:
        headings = empty_headings()
        headings.update(json.loads(self.headings or "{}"))
        return headings

    def decoded_broken_links(self) -> list[BrokenLink]:
        return [BrokenLink.from_dict(item) for item in json.loads(self.broken_links or "[]")]

    def to_analysis(self) -> PageAnalysis:
        return PageAnalysis(
            url=self.url,
            html_version=self.html_version,
            title=self.title,
            headings=self.decoded_headings(),
            internal_links=self.internal_links,
            external_links=self.external_links,
            inaccessible_links=self.inaccessible_links,
            broken_links=self.decoded_broken_links(),
            has_login_form=self.has_login_form,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url": self.url,
            "html_version": self.html_version,
            "title": self.title,
            "headings": self.decoded_headings(),
            "internal_links": self.internal_links,
            "external_links": self.external_links,
            "inaccessible_links": self.inaccessible_links,
            "broken_links": [link.to_dict() for link in self.decoded_broken_links()],
            "has_login_form": self.has_login_form,
            "crawled_at": self.crawled_at,
        }


def encode_analysis(analysis: PageAnalysis) -> dict:
    """Column values for a PageAnalysis, with the structured parts JSON-encoded."""
    return {
        "url": analysis.url,
        "html_version": analysis.html_version,
        "title": analysis.title,
        "headings": json.dumps(analysis.headings),
        "internal_links": analysis.internal_links,
        "external_links": analysis.external_links,
        "inaccessible_links": analysis.inaccessible_links,
        "broken_links": json.dumps([link.to_dict() for link in analysis.broken_links]),
        "has_login_form": analysis.has_login_form,
    }
