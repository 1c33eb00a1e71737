"""Unified exception hierarchy for history-clients."""


class HistoryClientError(Exception):
    """Base exception for all history-client errors."""


# Browser
class BrowserError(HistoryClientError):
    """Base exception for browser history operations."""


class SourceUnreadableError(BrowserError):
    """Profile database is missing, unreadable, or could not be copied."""


class CheckpointError(BrowserError):
    """WAL checkpoint against a live database could not complete."""


class QueryFailedError(BrowserError):
    """Query against a snapshot failed (corrupt file or schema mismatch)."""


class CleanupError(BrowserError):
    """Temporary snapshot could not be deleted after use."""


class PlatformSourceError(BrowserError):
    """Platform-native history source failed."""


# Input
class InvalidInputError(HistoryClientError):
    """Malformed top-level input (unknown browser, bad recency window)."""
