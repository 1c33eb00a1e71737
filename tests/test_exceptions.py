"""Tests for exception hierarchy."""

from history_clients.exceptions import (
    HistoryClientError,
    BrowserError,
    SourceUnreadableError,
    CheckpointError,
    QueryFailedError,
    CleanupError,
    PlatformSourceError,
    InvalidInputError,
)


def test_all_inherit_from_base():
    for exc_class in [
        BrowserError,
        SourceUnreadableError, CheckpointError, QueryFailedError, CleanupError,
        PlatformSourceError,
        InvalidInputError,
    ]:
        assert issubclass(exc_class, HistoryClientError)


def test_browser_hierarchy():
    for exc_class in [
        SourceUnreadableError, CheckpointError, QueryFailedError, CleanupError,
        PlatformSourceError,
    ]:
        assert issubclass(exc_class, BrowserError)


def test_invalid_input_is_not_a_source_failure():
    assert not issubclass(InvalidInputError, BrowserError)


def test_exception_message():
    e = QueryFailedError("test error")
    assert str(e) == "test error"
