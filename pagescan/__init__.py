from .analyzer import analyze
from .core import crawl, rerun
from .errors import FetchError, NotFound, PageScanError, ParseError, PersistenceError
from .fetcher import fetch_page
from .models import BrokenLink, PageAnalysis, RerunSummary
from .parser import parse_html
from .records import CrawlRecord
from .store import RecordStore

__all__ = [
    "crawl", "rerun", "analyze", "fetch_page", "parse_html",
    "PageAnalysis", "BrokenLink", "RerunSummary", "CrawlRecord", "RecordStore",
    "PageScanError", "FetchError", "ParseError", "PersistenceError", "NotFound",
]
