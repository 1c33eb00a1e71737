"""Contract for history stores reachable only through a native platform API."""

from __future__ import annotations

from abc import ABC, abstractmethod

from history_clients.browser.models import HistoryRecord

# Internet Explorer/Edge (spartan.edb) is only readable through the Windows API.
PLATFORM_ONLY_OS = "win32"


class PlatformHistorySource(ABC):
    """Abstract interface for a platform-native history reader."""

    @abstractmethod
    def fetch_recent(self, window_minutes: int, now: int) -> list[HistoryRecord]:
        """Return records visited at or after ``now - window_minutes``.

        Records must already be normalized (``utc_time`` in epoch ms, UTC).
        """
        ...
