from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class CrawlRequest(BaseModel):
    url: str

    @field_validator("url")
    @classmethod
    def url_must_be_http(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v


class IdsRequest(BaseModel):
    ids: list[int]


class CrawlSummary(BaseModel):
    html_version: str
    title: str
    headings: dict[str, int]
    internal_links: int
    external_links: int
    inaccessible_links: int
    has_login_form: bool


class CrawlResponse(BaseModel):
    result: CrawlSummary
    record_id: int
    message: str


class BrokenLinkOut(BaseModel):
    url: str
    status_code: int
    error_message: Optional[str] = None


class CrawlRecordOut(BaseModel):
    id: int
    url: str
    html_version: str
    title: str
    headings: dict[str, int]
    internal_links: int
    external_links: int
    inaccessible_links: int
    broken_links: list[BrokenLinkOut] = []
    has_login_form: bool
    crawled_at: datetime


class HistoryResponse(BaseModel):
    history: list[CrawlRecordOut]
    count: int


class BulkDeleteResponse(BaseModel):
    message: str
    deleted_count: int


class BulkRerunResponse(BaseModel):
    message: str
    success_count: int
    failed_count: int
    failed_urls: list[str] = []


class HealthResponse(BaseModel):
    status: str
    database: str  # "connected" or "unavailable"


class ErrorResponse(BaseModel):
    """Body of the catch-all 500 response."""
    detail: str
    code: str
