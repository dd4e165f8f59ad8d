import time
from unittest.mock import patch

import pytest
import requests

from pagescan.errors import FetchError
from pagescan.fetcher import FETCH_TIMEOUT, fetch_page

from helpers import http_response


@pytest.mark.asyncio
async def test_fetch_returns_body_on_200():
    with patch("pagescan.fetcher.requests.get", return_value=http_response(200, "<html></html>")) as mock_get:
        html = await fetch_page("https://example.com/")

    assert html == "<html></html>"
    assert mock_get.call_args.kwargs["timeout"] == FETCH_TIMEOUT
    assert mock_get.call_args.kwargs["allow_redirects"] is True


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [201, 204, 304, 404, 500])
async def test_fetch_non_200_raises(status):
    response = http_response(status, "nope")
    with patch("pagescan.fetcher.requests.get", return_value=response):
        with pytest.raises(FetchError) as exc_info:
            await fetch_page("https://example.com/")

    assert str(status) in exc_info.value.reason
    response.__exit__.assert_called_once()


@pytest.mark.asyncio
async def test_fetch_transport_error_raises():
    with patch("pagescan.fetcher.requests.get", side_effect=requests.ConnectionError("Connection refused")):
        with pytest.raises(FetchError) as exc_info:
            await fetch_page("https://dead.example.com/")

    assert exc_info.value.url == "https://dead.example.com/"
    assert "Connection refused" in exc_info.value.reason


@pytest.mark.asyncio
async def test_fetch_response_closed_on_success():
    response = http_response(200, "<html></html>")
    with patch("pagescan.fetcher.requests.get", return_value=response):
        await fetch_page("https://example.com/")

    response.__exit__.assert_called_once()


@pytest.mark.asyncio
async def test_fetch_gives_up_when_whole_exchange_is_too_slow():
    def slow_fetch(url):
        time.sleep(0.5)
        return "<html></html>"

    started = time.monotonic()
    with patch("pagescan.fetcher.FETCH_TIMEOUT", 0.1), patch("pagescan.fetcher._sync_fetch", side_effect=slow_fetch):
        with pytest.raises(FetchError) as exc_info:
            await fetch_page("https://slow.example.com/")

    assert time.monotonic() - started < 0.4
    assert exc_info.value.url == "https://slow.example.com/"
    assert "timed out" in exc_info.value.reason
