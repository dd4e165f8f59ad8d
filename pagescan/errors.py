class PageScanError(Exception):
    """Base class for every failure the analysis pipeline surfaces."""


class FetchError(PageScanError):
    """Primary document could not be retrieved (transport error or non-200)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class ParseError(PageScanError):
    """Fetched body could not be parsed as HTML."""


class PersistenceError(PageScanError):
    """Record store operation failed."""


class NotFound(PageScanError):
    """No live record exists for the requested id."""

    def __init__(self, record_id: int):
        super().__init__(f"Crawl record {record_id} not found")
        self.record_id = record_id
