from __future__ import annotations

import pytest

from httplens.exceptions import UrlRejected
from httplens.parser import MAX_URL_LENGTH, parse_requests, url_rejection, validate_url


@pytest.mark.parametrize(
    "url",
    [
        "http://example.com",
        "https://example.com/api",
        "https://example.com:8443/path?q=1&r=2",
        "http://localhost:3000/api",
        "http://127.0.0.1/x",
        "http://[::1]:8080/",
        "https://user:pw@example.com/#frag",
        "HTTP://EXAMPLE.COM/upper",
        "http://example.com./trailing-dot",
        "http://my-host_1.internal/",
    ],
)
def test_accepts_absolute_http_urls(url: str) -> None:
    assert url_rejection(url) is None
    assert validate_url(url) == url


@pytest.mark.parametrize(
    "url, scheme",
    [
        ("file:///etc/passwd", "file"),
        ("javascript:alert(1)", "javascript"),
        ("data:text/plain,hello", "data"),
        ("ftp://example.com/file", "ftp"),
        ("ws://example.com/socket", "ws"),
        ("wss://example.com/socket", "wss"),
    ],
)
def test_rejects_other_schemes(url: str, scheme: str) -> None:
    with pytest.raises(UrlRejected) as info:
        validate_url(url)
    assert info.value.url == url
    assert f"'{scheme}'" in info.value.reason
    assert "only http and https" in info.value.reason


@pytest.mark.parametrize(
    "url",
    ["example.com/api", "http//example.com", "/relative/path", "not-a-url"],
)
def test_rejects_relative_or_schemeless(url: str) -> None:
    reason = url_rejection(url)
    assert reason is not None
    assert "not an absolute URL" in reason


@pytest.mark.parametrize("url", ["http://", "http:///path", "https:example.com"])
def test_rejects_missing_host(url: str) -> None:
    reason = url_rejection(url)
    assert reason is not None
    assert "missing host" in reason


@pytest.mark.parametrize(
    "url",
    [
        "http://exa^mple.com/",
        "http://exa<mple>.com/",
        "http://a|b.com/",
        "http://ex%ample.com/",
        "http://ex\\ample.com/",
        "http://a..b/",
        "http://.example.com/",
        "https://user@bad^host:8080/",
    ],
)
def test_rejects_invalid_host(url: str) -> None:
    assert url_rejection(url) == f"Invalid URL '{url}': invalid host"
    assert parse_requests(f"GET {url}") == []


@pytest.mark.parametrize("url", ["http://[::1", "http://example.com:99999/"])
def test_rejects_unparseable(url: str) -> None:
    reason = url_rejection(url)
    assert reason is not None
    assert reason.startswith("Invalid URL")


def test_length_limit() -> None:
    prefix = "http://example.com/"
    at_limit = prefix + "a" * (MAX_URL_LENGTH - len(prefix))
    assert len(at_limit) == MAX_URL_LENGTH
    assert url_rejection(at_limit) is None
    reason = url_rejection(at_limit + "a")
    assert reason is not None
    assert "maximum length" in reason


def test_rejection_reasons_are_distinct() -> None:
    reasons = {
        url_rejection("http://example.com/" + "a" * MAX_URL_LENGTH),
        url_rejection("example.com"),
        url_rejection("ftp://example.com"),
        url_rejection("http:///nohost"),
        url_rejection("http://a..b/"),
    }
    assert None not in reasons
    assert len(reasons) == 5


def test_rejected_block_does_not_stop_later_blocks() -> None:
    text = "GET file:///etc/passwd\n###\nGET http://example.com/ok"
    (request,) = parse_requests(text)
    assert request.url == "http://example.com/ok"
    assert request.line == 2
