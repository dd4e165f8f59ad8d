from unittest.mock import MagicMock

from pagescan.models import BrokenLink, PageAnalysis


def make_analysis(url="https://example.com/", **overrides) -> PageAnalysis:
    fields = dict(
        url=url,
        html_version="HTML5",
        title="Example Domain",
        headings={"h1": 1, "h2": 2, "h3": 0, "h4": 0, "h5": 0, "h6": 0},
        internal_links=3,
        external_links=1,
        inaccessible_links=1,
        broken_links=[BrokenLink(url="https://example.com/missing", status_code=404)],
        has_login_form=False,
    )
    fields.update(overrides)
    return PageAnalysis(**fields)


def http_response(status_code=200, text=""):
    """A requests.Response stand-in that also works as a context manager."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.__enter__.return_value = response
    return response
