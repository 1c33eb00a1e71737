"""Run snapshot, query and cleanup for every profile path of one browser."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Iterable

from history_clients.browser.adapters import QueryAdapter, adapter_for
from history_clients.browser.models import (
    Browser,
    Diagnostic,
    DiagnosticKind,
    ExtractionResult,
)
from history_clients.browser.snapshot import checkpoint, take_snapshot
from history_clients.browser.timestamps import now_ms, validate_window
from history_clients.exceptions import (
    CheckpointError,
    CleanupError,
    QueryFailedError,
    SourceUnreadableError,
)

logger = logging.getLogger(__name__)


def _default_window() -> int:
    raw = os.environ.get("HISTORY_CLIENTS_WINDOW_MINUTES", "5")
    try:
        window = int(raw)
    except ValueError:
        window = -1
    if window < 0:
        logger.warning("Ignoring invalid HISTORY_CLIENTS_WINDOW_MINUTES=%r", raw)
        return 5
    return window


DEFAULT_WINDOW_MINUTES = _default_window()

ProfilePath = str | os.PathLike


def extract_family(
    paths: Iterable[ProfilePath | None] | None,
    browser: Browser | str,
    window_minutes: int = DEFAULT_WINDOW_MINUTES,
    now: int | None = None,
) -> ExtractionResult:
    """Extract recent records from every profile path of one browser.

    A failing path contributes no records and a Diagnostic; nothing but
    invalid input is raised.
    """
    browser, adapter, now = _prepare(browser, window_minutes, now)
    result = ExtractionResult()
    for path in _usable(paths, browser):
        result.extend(_extract_path(path, browser, adapter, window_minutes, now))
    return result


async def aextract_family(
    paths: Iterable[ProfilePath | None] | None,
    browser: Browser | str,
    window_minutes: int = DEFAULT_WINDOW_MINUTES,
    now: int | None = None,
) -> ExtractionResult:
    """Async version of extract_family; paths are processed concurrently.

    Each path runs in a worker thread. If the awaiting task is abandoned the
    thread still finishes and releases its snapshot.
    """
    browser, adapter, now = _prepare(browser, window_minutes, now)
    usable = _usable(paths, browser)
    partials = await asyncio.gather(*[
        asyncio.to_thread(_extract_path, path, browser, adapter, window_minutes, now)
        for path in usable
    ])
    result = ExtractionResult()
    for partial in partials:
        result.extend(partial)
    return result


def _prepare(
    browser: Browser | str, window_minutes: int, now: int | None
) -> tuple[Browser, QueryAdapter, int]:
    validate_window(window_minutes)
    browser = Browser.parse(browser)
    return browser, adapter_for(browser), now if now is not None else now_ms()


def _usable(paths: Iterable[ProfilePath | None] | None, browser: Browser) -> list[ProfilePath]:
    if isinstance(paths, (str, os.PathLike)):
        paths = [paths]
    usable = [p for p in (paths or []) if p is not None and os.fspath(p) != ""]
    if not usable:
        logger.info("No %s history databases to read", browser.value)
    return usable


def _extract_path(
    path: ProfilePath,
    browser: Browser,
    adapter: QueryAdapter,
    window_minutes: int,
    now: int,
) -> ExtractionResult:
    """Checkpoint, snapshot, query and release one profile database."""
    result = ExtractionResult()
    source = os.fspath(path)

    def report(kind: DiagnosticKind, error: Exception) -> None:
        logger.warning("%s history (%s): %s", browser.value, source, error)
        result.diagnostics.append(Diagnostic(kind, browser, source, str(error)))

    if adapter.requires_checkpoint:
        try:
            checkpoint(path)
        except CheckpointError as e:
            # Best-effort: the snapshot may miss rows still in the WAL.
            report(DiagnosticKind.CHECKPOINT_FAILED, e)

    try:
        snapshot = take_snapshot(path)
    except SourceUnreadableError as e:
        report(DiagnosticKind.SOURCE_UNREADABLE, e)
        return result

    try:
        result.records.extend(
            adapter.query_recent(snapshot.path, window_minutes, browser, now=now)
        )
    except QueryFailedError as e:
        result.records.clear()
        report(DiagnosticKind.QUERY_FAILED, e)
    finally:
        try:
            snapshot.release()
        except CleanupError as e:
            report(DiagnosticKind.CLEANUP_FAILED, e)

    logger.debug("%d %s records from %s", len(result.records), browser.value, source)
    return result
