import logging
from typing import Optional

from bs4 import BeautifulSoup, Doctype, NavigableString, Tag

from .errors import ParseError
from .models import HEADING_TAGS, HTML5, UNKNOWN, XHTML

logger = logging.getLogger(__name__)


def _first_node(soup: BeautifulSoup):
    """First top-level node of the document, skipping whitespace-only text."""
    for node in soup.contents:
        if isinstance(node, NavigableString) and not isinstance(node, Doctype) and not node.strip():
            continue
        return node
    return None


def _detect_html_version(soup: BeautifulSoup) -> str:
    """
    Crude markup version heuristic:
      1. root <html xmlns="...xhtml..."> -> XHTML
      2. root <html lang="..."> (non-empty) -> HTML5
      3. otherwise Unknown
    A leading DOCTYPE declaration always forces HTML5, whatever the root says.
    """
    version = UNKNOWN
    root = soup.find("html")
    if isinstance(root, Tag):
        xmlns = root.get("xmlns")
        lang = root.get("lang")
        if xmlns is not None and "xhtml" in xmlns:
            version = XHTML
        elif lang:
            version = HTML5

    if isinstance(_first_node(soup), Doctype):
        version = HTML5
    return version


def _get_title(soup: BeautifulSoup) -> str:
    title_tag = soup.find("title")
    return title_tag.get_text() if title_tag else ""


def _count_headings(soup: BeautifulSoup) -> dict[str, int]:
    return {tag: len(soup.find_all(tag)) for tag in HEADING_TAGS}


def _has_login_form(soup: BeautifulSoup) -> bool:
    return any(form.find("input", attrs={"type": "password"}) for form in soup.find_all("form"))


def _get_hrefs(soup: BeautifulSoup) -> list[str]:
    """Raw href values of every <a href> in document order; empty ones dropped."""
    return [a["href"] for a in soup.find_all("a", href=True) if a["href"]]


def parse_html(html: str, url: Optional[str] = None) -> dict:
    """
    Parse raw HTML and return a flat dict of the structural signals.
    Link resolution and probing happen afterwards in the analyzer layer.
    """
    try:
        soup = BeautifulSoup(html, "lxml")
    except Exception as exc:
        logger.error("HTML parse failed for %s: %s", url or "<document>", exc)
        raise ParseError(f"Failed to parse HTML: {exc}") from exc

    return {
        "html_version": _detect_html_version(soup),
        "title": _get_title(soup),
        "headings": _count_headings(soup),
        "has_login_form": _has_login_form(soup),
        "hrefs": _get_hrefs(soup),
    }
