"""Recent history across browser families, fanned out concurrently."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

from history_clients.browser.extractor import (
    DEFAULT_WINDOW_MINUTES,
    ProfilePath,
    aextract_family,
    extract_family,
)
from history_clients.browser.models import (
    Browser,
    Diagnostic,
    DiagnosticKind,
    ExtractionResult,
    FamilyGroup,
    HistoryRecord,
)
from history_clients.browser.native import PLATFORM_ONLY_OS, PlatformHistorySource
from history_clients.browser.timestamps import now_ms, validate_window
from history_clients.exceptions import InvalidInputError, PlatformSourceError

logger = logging.getLogger(__name__)


class BrowserHistoryReader:
    """Read recent history for any set of browsers from discovered profile paths.

    Args:
        profile_paths: Mapping of browser (enum or name) to candidate database
            paths, as produced by path discovery. Browsers missing from the
            mapping have nothing to read.
        platform_source: Reader for the platform-only family (Internet
            Explorer). Only consulted when running on Windows.
        platform: Override for ``sys.platform``.
        clock: Returns the current UTC epoch milliseconds.
    """

    def __init__(
        self,
        profile_paths: Mapping[Browser | str, Iterable[ProfilePath | None]] | None = None,
        platform_source: PlatformHistorySource | None = None,
        platform: str | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        paths: dict[Browser, tuple[ProfilePath | None, ...]] = {}
        for name, candidates in (profile_paths or {}).items():
            browser = Browser.parse(name)
            if isinstance(candidates, (str, os.PathLike)):
                candidates = [candidates]
            paths[browser] = paths.get(browser, ()) + tuple(candidates or ())
        self.profile_paths: Mapping[Browser, tuple[ProfilePath | None, ...]] = (
            MappingProxyType(paths)
        )
        self.platform_source = platform_source
        self.platform = platform or sys.platform
        self._clock = clock

    # ---- Sync methods ----

    def extract_all(
        self,
        browsers: Iterable[Browser | str] | None = None,
        window_minutes: int = DEFAULT_WINDOW_MINUTES,
    ) -> ExtractionResult:
        """Extract recent history for ``browsers`` (default: every browser).

        Families and paths are read one after another, so this is safe to
        call from code that already runs an event loop. Records are
        concatenated in request order, unsorted and not de-duplicated. Only
        invalid input raises.
        """
        validate_window(window_minutes)
        requested = self._requested(browsers)
        now = self._clock()
        return self._merge(
            [self._extract_one(browser, window_minutes, now) for browser in requested]
        )

    def extract(
        self, browser: Browser | str, window_minutes: int = DEFAULT_WINDOW_MINUTES
    ) -> ExtractionResult:
        """Extract recent history for a single browser."""
        validate_window(window_minutes)
        return self._extract_one(Browser.parse(browser), window_minutes, self._clock())

    # ---- Async methods ----

    async def aextract_all(
        self,
        browsers: Iterable[Browser | str] | None = None,
        window_minutes: int = DEFAULT_WINDOW_MINUTES,
    ) -> ExtractionResult:
        """Async version of extract_all; families and paths run concurrently."""
        validate_window(window_minutes)
        requested = self._requested(browsers)
        now = self._clock()
        partials = await asyncio.gather(*[
            self._aextract_one(browser, window_minutes, now) for browser in requested
        ])
        return self._merge(partials)

    async def aextract(
        self, browser: Browser | str, window_minutes: int = DEFAULT_WINDOW_MINUTES
    ) -> ExtractionResult:
        """Async version of extract."""
        validate_window(window_minutes)
        return await self._aextract_one(Browser.parse(browser), window_minutes, self._clock())

    # ---- Private helpers ----

    @staticmethod
    def _requested(browsers: Iterable[Browser | str] | None) -> list[Browser]:
        if browsers is None:
            return list(Browser)
        if isinstance(browsers, (str, Browser)):
            raise InvalidInputError(
                "browsers must be an iterable of browsers, not a single name"
            )
        requested: list[Browser] = []
        for name in browsers:
            browser = Browser.parse(name)
            if browser not in requested:
                requested.append(browser)
        return requested

    @staticmethod
    def _merge(partials: list[ExtractionResult]) -> ExtractionResult:
        result = ExtractionResult()
        for partial in partials:
            result.extend(partial)
        if result.partial_failure:
            logger.warning(
                "History extraction finished with %d diagnostic(s)", len(result.diagnostics)
            )
        return result

    def _extract_one(self, browser: Browser, window_minutes: int, now: int) -> ExtractionResult:
        if browser.group is FamilyGroup.PLATFORM:
            return self._extract_platform(browser, window_minutes, now)
        return extract_family(
            self.profile_paths.get(browser, ()), browser, window_minutes, now=now
        )

    async def _aextract_one(
        self, browser: Browser, window_minutes: int, now: int
    ) -> ExtractionResult:
        if browser.group is FamilyGroup.PLATFORM:
            return await asyncio.to_thread(
                self._extract_platform, browser, window_minutes, now
            )
        return await aextract_family(
            self.profile_paths.get(browser, ()), browser, window_minutes, now=now
        )

    def _extract_platform(
        self, browser: Browser, window_minutes: int, now: int
    ) -> ExtractionResult:
        result = ExtractionResult()
        if self.platform != PLATFORM_ONLY_OS:
            return result
        if self.platform_source is None:
            logger.info("No platform source configured for %s", browser.value)
            return result

        try:
            records = self.platform_source.fetch_recent(window_minutes, now)
            result.records.extend(self._check_platform_records(records, browser))
        except Exception as e:
            error = e if isinstance(e, PlatformSourceError) else PlatformSourceError(
                f"{browser.value} platform source failed: {e}"
            )
            logger.warning("%s", error)
            result.diagnostics.append(
                Diagnostic(DiagnosticKind.PLATFORM_FAILED, browser, "", str(error))
            )
        return result

    @staticmethod
    def _check_platform_records(records, browser: Browser) -> list[HistoryRecord]:
        checked = list(records or [])
        for record in checked:
            if not isinstance(record, HistoryRecord):
                raise PlatformSourceError(
                    f"{browser.value} platform source returned {type(record).__name__}, "
                    "expected HistoryRecord"
                )
        return checked
