import logging
from collections.abc import Iterable

from .analyzer import analyze
from .errors import NotFound, PageScanError
from .fetcher import fetch_page
from .models import RerunSummary
from .records import CrawlRecord
from .store import RecordStore

logger = logging.getLogger(__name__)


async def crawl(url: str, store: RecordStore) -> CrawlRecord:
    """
    Top-level entry point. Fetches, analyzes and persists a single URL.
    Raises the first FetchError / ParseError / PersistenceError hit; nothing is
    stored unless the whole pipeline succeeds.
    """
    html = await fetch_page(url)
    analysis = await analyze(html, source_url=url)
    return store.upsert(analysis)


async def rerun(ids: Iterable[int], store: RecordStore) -> RerunSummary:
    """
    Re-crawl the URLs behind the given record ids, in order.
    Each id is isolated: a lookup miss or pipeline failure is counted and the
    loop moves on.
    """
    summary = RerunSummary()
    for record_id in ids:
        try:
            record = store.get_by_id(record_id)
        except NotFound:
            logger.warning("Rerun skipped, record %s not found", record_id)
            summary.failed_count += 1
            continue
        except PageScanError as exc:
            logger.error("Rerun lookup failed for record %s: %s", record_id, exc)
            summary.failed_count += 1
            continue

        try:
            await crawl(record.url, store)
        except PageScanError as exc:
            logger.error("Rerun failed for %s: %s", record.url, exc)
            summary.failed_count += 1
            summary.failed_urls.append(record.url)
            continue

        summary.success_count += 1

    logger.info("Rerun completed: %d successful, %d failed", summary.success_count, summary.failed_count)
    return summary
