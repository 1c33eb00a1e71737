"""Parse raw history rows into normalized HistoryRecord objects."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from history_clients.browser.models import Browser, HistoryRecord
from history_clients.browser.timestamps import normalize

logger = logging.getLogger(__name__)


def parse_row(raw: Mapping[str, Any], browser: Browser) -> HistoryRecord | None:
    """Normalize one row with title/url/visit_time keys; None for unusable rows."""
    url = raw["url"]
    if isinstance(url, bytes):
        url = url.decode("utf-8", errors="replace")
    url = str(url).strip() if url is not None else ""
    if not url:
        return None

    visit_time = raw["visit_time"]
    if visit_time is None:
        return None
    try:
        utc_time = normalize(visit_time, browser.group)
    except ValueError:
        logger.debug("Skipping %s row with bad visit time %r", browser.value, visit_time)
        return None

    title = raw["title"]
    if isinstance(title, bytes):
        title = title.decode("utf-8", errors="replace")

    return HistoryRecord(
        title=str(title).strip() if title is not None else "",
        url=url,
        utc_time=utc_time,
        browser=browser,
    )
