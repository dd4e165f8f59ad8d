import asyncio
import logging
import os

import requests

from .errors import FetchError

logger = logging.getLogger(__name__)

# realistic browser UA, avoids most trivial bot blocks
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)

FETCH_TIMEOUT = float(os.getenv("PAGESCAN_FETCH_TIMEOUT", "10"))  # seconds
MAX_CONTENT_BYTES = 5 * 1024 * 1024  # 5 MB ceiling to avoid runaway pages

REQUEST_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


def _sync_fetch(url: str) -> str:
    """Synchronous fetch using requests, run inside a thread executor."""
    try:
        with requests.get(url, headers=REQUEST_HEADERS, timeout=FETCH_TIMEOUT, allow_redirects=True) as response:
            # anything but a plain 200 is a failed fetch, redirects included
            if response.status_code != 200:
                raise FetchError(url, f"HTTP {response.status_code}")
            return response.text[:MAX_CONTENT_BYTES]
    except requests.RequestException as exc:
        raise FetchError(url, str(exc)) from exc


async def fetch_page(url: str) -> str:
    """
    Fetch the HTML content of a URL asynchronously.

    Uses requests in a thread executor to stay non-blocking inside the async
    event loop. Raises FetchError on transport failure, a non-200 status, or when
    the whole exchange takes longer than FETCH_TIMEOUT.
    """
    loop = asyncio.get_running_loop()
    try:
        html = await asyncio.wait_for(loop.run_in_executor(None, _sync_fetch, url), FETCH_TIMEOUT)
    except asyncio.TimeoutError as exc:
        raise FetchError(url, f"timed out after {FETCH_TIMEOUT:g}s") from exc
    logger.debug("Fetched %s (%d chars)", url, len(html))
    return html
