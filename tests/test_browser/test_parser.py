"""Tests for history row parsing."""

from history_clients.browser.models import Browser, HistoryRecord
from history_clients.browser.parser import parse_row


def test_parse_valid_chromium_row():
    raw = {
        "title": "Example Page",
        "url": "https://example.com/page",
        "visit_time": 13_344_473_600_123_456,
    }
    result = parse_row(raw, Browser.BRAVE)
    assert isinstance(result, HistoryRecord)
    assert result.utc_time == 1_700_000_000_123
    assert result.browser is Browser.BRAVE
    assert result.title == "Example Page"


def test_parse_safari_row_uses_apple_epoch():
    raw = {"title": "Apple", "url": "https://apple.com/", "visit_time": 0.0}
    result = parse_row(raw, Browser.SAFARI)
    assert result is not None
    assert result.utc_time == 978_307_200_000


def test_parse_missing_title_is_empty():
    raw = {"title": None, "url": "https://example.com/", "visit_time": 0}
    result = parse_row(raw, Browser.FIREFOX)
    assert result is not None
    assert result.title == ""


def test_parse_keeps_non_http_urls():
    raw = {"title": "", "url": "file:///Users/test/file.html", "visit_time": 0}
    result = parse_row(raw, Browser.FIREFOX)
    assert result is not None
    assert result.url == "file:///Users/test/file.html"


def test_parse_empty_url():
    assert parse_row({"title": "x", "url": "", "visit_time": 0}, Browser.CHROME) is None
    assert parse_row({"title": "x", "url": None, "visit_time": 0}, Browser.CHROME) is None


def test_parse_missing_visit_time():
    raw = {"title": "x", "url": "https://example.com/", "visit_time": None}
    assert parse_row(raw, Browser.FIREFOX) is None


def test_parse_bad_visit_time():
    raw = {"title": "x", "url": "https://example.com/", "visit_time": "yesterday"}
    assert parse_row(raw, Browser.CHROME) is None


def test_parse_decodes_blob_text():
    raw = {"title": b"Caf\xc3\xa9", "url": b"https://example.com/", "visit_time": 0}
    result = parse_row(raw, Browser.MAXTHON)
    assert result is not None
    assert result.title == "Café"
    assert result.url == "https://example.com/"
