import logging

from .links import check_links
from .models import PageAnalysis
from .parser import parse_html

logger = logging.getLogger(__name__)


async def analyze(html: str, source_url: str) -> PageAnalysis:
    """
    Turn a fetched document into a PageAnalysis.

    Parsing failures raise ParseError. Link probe failures never do; they end
    up as inaccessible counts and broken_links entries.
    """
    parsed = parse_html(html, url=source_url)
    links = await check_links(parsed["hrefs"], base_url=source_url)

    return PageAnalysis(
        url=source_url,
        html_version=parsed["html_version"],
        title=parsed["title"],
        headings=parsed["headings"],
        internal_links=links.internal_links,
        external_links=links.external_links,
        inaccessible_links=links.inaccessible_links,
        broken_links=links.broken_links,
        has_login_form=parsed["has_login_form"],
    )
