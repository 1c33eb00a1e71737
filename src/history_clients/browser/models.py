"""Data models for the browser history module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from history_clients.exceptions import InvalidInputError


class FamilyGroup(Enum):
    """On-disk schema and time-epoch convention shared by a set of browsers."""

    MOZILLA = "mozilla"  # moz_places, µs since 1970
    CHROMIUM = "chromium"  # urls, µs since 1601
    WEBKIT = "webkit"  # history_items/history_visits, s since 2001
    MAXTHON = "maxthon"  # zmxhistoryentry, s since 2001
    PLATFORM = "platform"  # native API only, no database file


class Browser(str, Enum):
    FIREFOX = "Firefox"
    SEAMONKEY = "SeaMonkey"
    CHROME = "Chrome"
    OPERA = "Opera"
    TORCH = "Torch"
    VIVALDI = "Vivaldi"
    BRAVE = "Brave"
    SAFARI = "Safari"
    MAXTHON = "Maxthon"
    INTERNET_EXPLORER = "InternetExplorer"

    @property
    def group(self) -> FamilyGroup:
        return _BROWSER_GROUPS[self]

    @classmethod
    def parse(cls, value: Browser | str) -> Browser:
        """Resolve an enum member or a case-insensitive browser name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if wanted in (member.value.lower(), member.name.lower()):
                    return member
        raise InvalidInputError(f"Unknown browser: {value!r}")


_BROWSER_GROUPS = {
    Browser.FIREFOX: FamilyGroup.MOZILLA,
    Browser.SEAMONKEY: FamilyGroup.MOZILLA,
    Browser.CHROME: FamilyGroup.CHROMIUM,
    Browser.OPERA: FamilyGroup.CHROMIUM,
    Browser.TORCH: FamilyGroup.CHROMIUM,
    Browser.VIVALDI: FamilyGroup.CHROMIUM,
    Browser.BRAVE: FamilyGroup.CHROMIUM,
    Browser.SAFARI: FamilyGroup.WEBKIT,
    Browser.MAXTHON: FamilyGroup.MAXTHON,
    Browser.INTERNET_EXPLORER: FamilyGroup.PLATFORM,
}


@dataclass(frozen=True)
class HistoryRecord:
    """A normalized browser history entry."""

    title: str
    url: str
    utc_time: int  # epoch milliseconds, UTC
    browser: Browser

    @property
    def visited_at(self) -> str:
        """UTC ISO 8601 form of utc_time; empty when out of datetime range."""
        # timestamps imports FamilyGroup from this module
        from history_clients.browser.timestamps import to_iso

        return to_iso(self.utc_time)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "utc_time": self.utc_time,
            "url": self.url,
            "browser": self.browser.value,
        }


class DiagnosticKind(str, Enum):
    SOURCE_UNREADABLE = "source_unreadable"
    CHECKPOINT_FAILED = "checkpoint_failed"
    QUERY_FAILED = "query_failed"
    CLEANUP_FAILED = "cleanup_failed"
    PLATFORM_FAILED = "platform_failed"


@dataclass(frozen=True)
class Diagnostic:
    """A recovered failure on one source, reported alongside the records."""

    kind: DiagnosticKind
    browser: Browser
    path: str
    message: str


@dataclass
class ExtractionResult:
    """Records from one extraction pass plus any per-source diagnostics.

    Iterating the result yields its records, so callers that only want data
    can treat it as a plain sequence of ``HistoryRecord``.
    """

    records: list[HistoryRecord] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def partial_failure(self) -> bool:
        """True when at least one source contributed nothing because it failed.

        A failed checkpoint only risks staleness, so it does not count.
        """
        return any(
            d.kind is not DiagnosticKind.CHECKPOINT_FAILED for d in self.diagnostics
        )

    def extend(self, other: ExtractionResult) -> None:
        self.records.extend(other.records)
        self.diagnostics.extend(other.diagnostics)

    def to_dicts(self) -> list[dict]:
        return [r.to_dict() for r in self.records]

    def __iter__(self) -> Iterator[HistoryRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)
