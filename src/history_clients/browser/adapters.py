"""Per-family queries against history database snapshots."""

from __future__ import annotations

import logging
import os
import sqlite3
from abc import ABC
from pathlib import Path
from typing import Iterator

from history_clients.browser.models import Browser, FamilyGroup, HistoryRecord
from history_clients.browser.parser import parse_row
from history_clients.browser.timestamps import cutoff_ms, now_ms, raw_lower_bound
from history_clients.exceptions import InvalidInputError, QueryFailedError

logger = logging.getLogger(__name__)

_SQLITE_INT_MIN = -(2**63)
_SQLITE_INT_MAX = 2**63 - 1


class QueryAdapter(ABC):
    """Schema and time-column knowledge for one family group.

    Subclasses set ``group`` and ``sql``. The query must select ``title``,
    ``url`` and ``visit_time`` columns and take one parameter: the raw
    lower bound for ``visit_time``.
    """

    group: FamilyGroup
    sql: str
    requires_checkpoint: bool = False

    def query_recent(
        self,
        snapshot_path: str | os.PathLike,
        window_minutes: int,
        browser: Browser,
        now: int | None = None,
    ) -> Iterator[HistoryRecord]:
        """Yield records visited within the last ``window_minutes``.

        Single pass over the query result. sqlite errors surface as
        QueryFailedError while iterating.
        """
        cutoff = cutoff_ms(window_minutes, now if now is not None else now_ms())
        bound = raw_lower_bound(cutoff, self.group)
        bound = min(max(bound, _SQLITE_INT_MIN), _SQLITE_INT_MAX)

        path = Path(snapshot_path)
        try:
            conn = sqlite3.connect(
                f"{path.resolve().as_uri()}?mode=ro&immutable=1", uri=True
            )
            conn.row_factory = sqlite3.Row
        except sqlite3.Error as e:
            raise QueryFailedError(f"Cannot open snapshot {path}: {e}") from e

        try:
            for row in conn.execute(self.sql, (bound,)):
                record = parse_row(row, browser)
                if record is None or record.utc_time < cutoff:
                    continue
                yield record
        except sqlite3.Error as e:
            raise QueryFailedError(
                f"Failed querying {browser.value} history ({path.name}): {e}"
            ) from e
        finally:
            conn.close()


class MozillaAdapter(QueryAdapter):
    """Firefox, SeaMonkey: places.sqlite, µs since 1970."""

    group = FamilyGroup.MOZILLA
    requires_checkpoint = True
    sql = """
        SELECT
            title,
            url,
            last_visit_date AS visit_time
        FROM moz_places
        WHERE last_visit_date >= ?
    """


class ChromiumAdapter(QueryAdapter):
    """Chrome, Opera, Torch, Vivaldi, Brave: History, µs since 1601."""

    group = FamilyGroup.CHROMIUM
    sql = """
        SELECT
            title,
            url,
            last_visit_time AS visit_time
        FROM urls
        WHERE last_visit_time >= ?
    """


class WebKitAdapter(QueryAdapter):
    """Safari: History.db, seconds since 2001."""

    group = FamilyGroup.WEBKIT
    requires_checkpoint = True
    sql = """
        SELECT
            v.title AS title,
            i.url AS url,
            v.visit_time AS visit_time
        FROM history_items i
        JOIN history_visits v ON i.id = v.history_item
        WHERE v.visit_time >= ?
    """


class MaxthonAdapter(QueryAdapter):
    """Maxthon: Core Data history store, seconds since 2001."""

    group = FamilyGroup.MAXTHON
    requires_checkpoint = True
    sql = """
        SELECT
            ztitle AS title,
            zurl AS url,
            zlastvisittime AS visit_time
        FROM zmxhistoryentry
        WHERE zlastvisittime >= ?
    """


ADAPTERS: dict[FamilyGroup, QueryAdapter] = {
    FamilyGroup.MOZILLA: MozillaAdapter(),
    FamilyGroup.CHROMIUM: ChromiumAdapter(),
    FamilyGroup.WEBKIT: WebKitAdapter(),
    FamilyGroup.MAXTHON: MaxthonAdapter(),
}


def adapter_for(browser: Browser) -> QueryAdapter:
    """Look up the query adapter for a browser's family group."""
    try:
        return ADAPTERS[browser.group]
    except KeyError:
        raise InvalidInputError(
            f"{browser.value} has no database adapter; it is read through a platform source"
        ) from None
