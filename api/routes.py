import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from pagescan.core import crawl, rerun
from pagescan.errors import FetchError, NotFound, ParseError, PersistenceError
from pagescan.store import RecordStore
from .schemas import (
    BulkDeleteResponse,
    BulkRerunResponse,
    CrawlRecordOut,
    CrawlRequest,
    CrawlResponse,
    ErrorResponse,
    HealthResponse,
    HistoryResponse,
    IdsRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(responses={500: {"model": ErrorResponse, "description": "Unexpected server error"}})


def get_store(request: Request) -> RecordStore:
    """The store built at startup; injected rather than held in a module global."""
    return request.app.state.store


def _require_ids(ids: list[int]) -> None:
    if not ids:
        raise HTTPException(status_code=400, detail="No IDs provided")


@router.post("/crawl", response_model=CrawlResponse, summary="Analyze a URL and save the result")
async def crawl_url(request: CrawlRequest, store: RecordStore = Depends(get_store)) -> CrawlResponse:
    """
    Fetches the page, analyzes its structure and links, and upserts the result.

    - Re-crawling a URL refreshes its existing record; the record id is kept.
    - Unreachable pages or non-200 responses return 502 and nothing is stored.
    """
    try:
        record = await crawl(request.url, store)
    except FetchError as exc:
        raise HTTPException(status_code=502, detail=f"Failed to fetch URL: {exc.reason}")
    except ParseError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to parse HTML: {exc}")
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to save crawl result")

    return CrawlResponse(
        result=record.to_analysis().summary(),
        record_id=record.id,
        message="Crawl result saved successfully",
    )


@router.get("/crawl/history", response_model=HistoryResponse, summary="List stored analyses")
async def crawl_history(store: RecordStore = Depends(get_store)) -> HistoryResponse:
    try:
        records = store.list_all()
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to retrieve crawl history")

    history = [record.to_dict() for record in records]
    return HistoryResponse(history=history, count=len(history))


@router.get("/crawl/{record_id}", response_model=CrawlRecordOut, summary="Fetch one stored analysis")
async def crawl_detail(record_id: int, store: RecordStore = Depends(get_store)) -> CrawlRecordOut:
    try:
        record = store.get_by_id(record_id)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to retrieve crawl result")
    return CrawlRecordOut(**record.to_dict())


@router.delete("/crawl/bulk", response_model=BulkDeleteResponse, summary="Hard-delete stored analyses")
async def bulk_delete(request: IdsRequest, store: RecordStore = Depends(get_store)) -> BulkDeleteResponse:
    _require_ids(request.ids)
    try:
        deleted = store.bulk_hard_delete(request.ids)
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to delete crawl results")

    return BulkDeleteResponse(
        message=f"Successfully deleted {deleted} crawl results",
        deleted_count=deleted,
    )


@router.post("/crawl/bulk/rerun", response_model=BulkRerunResponse, summary="Re-run stored analyses")
async def bulk_rerun(request: IdsRequest, store: RecordStore = Depends(get_store)) -> BulkRerunResponse:
    """Failures are isolated per id and reported in the counts, never as an HTTP error."""
    _require_ids(request.ids)
    summary = await rerun(request.ids, store)
    return BulkRerunResponse(
        message=f"Re-run completed: {summary.success_count} successful, {summary.failed_count} failed",
        **summary.to_dict(),
    )


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(store: RecordStore = Depends(get_store)) -> HealthResponse:
    db_status = "connected" if store.is_healthy() else "unavailable"
    return HealthResponse(status="ok", database=db_status)
