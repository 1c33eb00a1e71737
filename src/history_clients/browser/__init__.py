"""Recent browser history extraction (Mozilla, Chromium, Safari, Maxthon)."""

from history_clients.browser.reader import BrowserHistoryReader
from history_clients.browser.extractor import extract_family, aextract_family
from history_clients.browser.adapters import QueryAdapter, adapter_for
from history_clients.browser.native import PlatformHistorySource
from history_clients.browser.snapshot import Snapshot, take_snapshot, checkpoint
from history_clients.browser.timestamps import normalize
from history_clients.browser.models import (
    Browser,
    FamilyGroup,
    HistoryRecord,
    Diagnostic,
    DiagnosticKind,
    ExtractionResult,
)

__all__ = [
    "BrowserHistoryReader",
    "extract_family",
    "aextract_family",
    "QueryAdapter",
    "adapter_for",
    "PlatformHistorySource",
    "Snapshot",
    "take_snapshot",
    "checkpoint",
    "normalize",
    "Browser",
    "FamilyGroup",
    "HistoryRecord",
    "Diagnostic",
    "DiagnosticKind",
    "ExtractionResult",
]
