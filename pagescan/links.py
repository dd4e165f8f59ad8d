import asyncio
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urljoin, urlsplit

import requests

from .models import BrokenLink

logger = logging.getLogger(__name__)

INTERNAL = "internal"
EXTERNAL = "external"

PROBE_TIMEOUT = float(os.getenv("PAGESCAN_PROBE_TIMEOUT", "2"))  # seconds, per link
PROBE_CONCURRENCY = int(os.getenv("PAGESCAN_PROBE_CONCURRENCY", "8"))

# ASCII control characters, or a "%" not followed by two hex digits
_MALFORMED_HREF = re.compile(r"[\x00-\x1f\x7f]|%(?![0-9A-Fa-f]{2})")


@dataclass
class LinkProbe:
    url: str
    bucket: str                             # internal | external
    reachable: bool
    status_code: int = 0
    error: Optional[str] = None

    def as_broken_link(self) -> BrokenLink:
        return BrokenLink(url=self.url, status_code=self.status_code, error_message=self.error)


@dataclass
class LinkReport:
    internal_links: int = 0
    external_links: int = 0
    inaccessible_links: int = 0
    broken_links: list[BrokenLink] = field(default_factory=list)


def _host(url: str) -> str:
    # host[:port] without any userinfo prefix; no other normalisation
    return urlsplit(url).netloc.rpartition("@")[2]


def resolve_link(href: str, base_url: str) -> Optional[str]:
    """Resolve an href against the page URL. None if it is empty or unparsable."""
    if not href:
        return None
    if _MALFORMED_HREF.search(href):
        logger.debug("Skipping malformed href %r", href)
        return None
    try:
        absolute = urljoin(base_url, href)
        urlsplit(absolute)  # surfaces bad netlocs such as unclosed IPv6 brackets
    except ValueError as exc:
        logger.debug("Skipping unresolvable href %r: %s", href, exc)
        return None
    return absolute


def classify_link(absolute_url: str, base_url: str) -> str:
    return INTERNAL if _host(absolute_url) == _host(base_url) else EXTERNAL


def probe_link(absolute_url: str, base_url: str) -> LinkProbe:
    """
    HEAD the link with a short timeout. Never raises: transport errors and
    4xx/5xx responses both come back as an unreachable LinkProbe.
    """
    bucket = classify_link(absolute_url, base_url)
    try:
        with requests.head(absolute_url, timeout=PROBE_TIMEOUT, allow_redirects=True) as response:
            status = response.status_code
    except (requests.RequestException, ValueError) as exc:
        logger.debug("Probe failed for %s: %s", absolute_url, exc)
        return LinkProbe(url=absolute_url, bucket=bucket, reachable=False, status_code=0, error=str(exc))

    if 400 <= status < 600:
        return LinkProbe(url=absolute_url, bucket=bucket, reachable=False, status_code=status)
    return LinkProbe(url=absolute_url, bucket=bucket, reachable=True, status_code=status)


async def check_links(hrefs: list[str], base_url: str, concurrency: int = PROBE_CONCURRENCY) -> LinkReport:
    """
    Resolve, classify and probe every anchor href of a page.

    Probes run in the thread executor, at most `concurrency` at a time, and each
    one is abandoned after PROBE_TIMEOUT seconds overall. Results are merged back
    in anchor order so broken_links is deterministic.
    Duplicate hrefs are probed and counted once per occurrence.
    """
    resolved = [url for url in (resolve_link(href, base_url) for href in hrefs) if url is not None]
    if not resolved:
        return LinkReport()

    loop = asyncio.get_running_loop()
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _probe(url: str) -> LinkProbe:
        async with semaphore:
            try:
                return await asyncio.wait_for(
                    loop.run_in_executor(None, probe_link, url, base_url), PROBE_TIMEOUT
                )
            except asyncio.TimeoutError:
                # requests' timeout is per socket read, this one covers the whole exchange
                logger.debug("Gave up on %s after %.1fs", url, PROBE_TIMEOUT)
                return LinkProbe(
                    url=url,
                    bucket=classify_link(url, base_url),
                    reachable=False,
                    status_code=0,
                    error=f"timed out after {PROBE_TIMEOUT:g}s",
                )

    probes = await asyncio.gather(*(_probe(url) for url in resolved))

    report = LinkReport()
    for probe in probes:
        if probe.bucket == INTERNAL:
            report.internal_links += 1
        else:
            report.external_links += 1
        if not probe.reachable:
            report.inaccessible_links += 1
            report.broken_links.append(probe.as_broken_link())

    logger.info(
        "Checked %d links on %s: %d internal, %d external, %d inaccessible",
        len(resolved), base_url, report.internal_links, report.external_links, report.inaccessible_links,
    )
    return report
