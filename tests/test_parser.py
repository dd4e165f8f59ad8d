import pytest

from pagescan.errors import ParseError
from pagescan.parser import parse_html


SAMPLE_HTML = """<!DOCTYPE html>
<html>
<head>
    <title>Test Page</title>
</head>
<body>
    <h1>Main Heading</h1>
    <h2>Sub Heading</h2>
    <h2>Another Sub Heading</h2>
    <div><h3>Nested</h3></div>
    <a href="/internal">Internal Link</a>
    <a href="https://external.com">External Link</a>
    <a href="">Empty</a>
    <a>No href</a>
    <form>
        <input type="password" name="pwd" />
    </form>
</body>
</html>
"""


# --- markup version ---

def test_lang_without_doctype_is_html5():
    parsed = parse_html('<html lang="en"><head><title>x</title></head><body></body></html>')
    assert parsed["html_version"] == "HTML5"


def test_xhtml_namespace_is_xhtml():
    html = '<html xmlns="http://www.w3.org/1999/xhtml" lang="en"><body></body></html>'
    assert parse_html(html)["html_version"] == "XHTML"


def test_non_xhtml_namespace_falls_back_to_lang():
    html = '<html xmlns="urn:example" lang="fr"><body></body></html>'
    assert parse_html(html)["html_version"] == "HTML5"


def test_empty_lang_is_unknown():
    assert parse_html('<html lang=""><body><p>hi</p></body></html>')["html_version"] == "Unknown"


def test_bare_html_is_unknown():
    assert parse_html("<html><body><p>hi</p></body></html>")["html_version"] == "Unknown"


def test_doctype_forces_html5():
    assert parse_html("<!DOCTYPE html><html><body></body></html>")["html_version"] == "HTML5"


def test_doctype_overrides_xhtml_namespace():
    html = (
        '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" '
        '"http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">'
        '<html xmlns="http://www.w3.org/1999/xhtml"><body></body></html>'
    )
    assert parse_html(html)["html_version"] == "HTML5"


def test_doctype_after_leading_whitespace_still_counts():
    assert parse_html("\n\n  <!DOCTYPE html><html><body></body></html>")["html_version"] == "HTML5"


# --- title ---

def test_title_extracted():
    assert parse_html(SAMPLE_HTML)["title"] == "Test Page"


def test_missing_title_is_empty_string():
    assert parse_html("<html><body><h1>hi</h1></body></html>")["title"] == ""


def test_first_title_wins():
    html = "<html><head><title>First</title></head><body><svg><title>Second</title></svg></body></html>"
    assert parse_html(html)["title"] == "First"


# --- headings ---

def test_heading_counts():
    headings = parse_html(SAMPLE_HTML)["headings"]
    assert headings == {"h1": 1, "h2": 2, "h3": 1, "h4": 0, "h5": 0, "h6": 0}


def test_heading_keys_always_present():
    headings = parse_html("<html><body><p>no headings</p></body></html>")["headings"]
    assert list(headings) == ["h1", "h2", "h3", "h4", "h5", "h6"]
    assert sum(headings.values()) == 0


# --- login form ---

def test_password_input_in_form_is_login_form():
    assert parse_html(SAMPLE_HTML)["has_login_form"] is True


def test_deeply_nested_password_input_counts():
    html = '<form><div><label>pw <input type="password"></label></div></form>'
    assert parse_html(html)["has_login_form"] is True


def test_password_input_outside_form_is_not_login_form():
    html = '<html><body><input type="password"><form><input type="text"></form></body></html>'
    assert parse_html(html)["has_login_form"] is False


def test_no_forms_is_not_login_form():
    assert parse_html("<html><body></body></html>")["has_login_form"] is False


# --- anchors ---

def test_hrefs_in_document_order_without_empty_ones():
    assert parse_html(SAMPLE_HTML)["hrefs"] == ["/internal", "https://external.com"]


def test_duplicate_hrefs_are_kept():
    html = '<a href="/a">1</a><a href="/a">2</a>'
    assert parse_html(html)["hrefs"] == ["/a", "/a"]


# --- failures ---

def test_parser_failure_raises_parse_error():
    with pytest.raises(ParseError):
        parse_html(object())
