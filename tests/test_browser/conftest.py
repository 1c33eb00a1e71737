"""Fixture databases shaped like each browser family's history store."""

import sqlite3

import pytest

from history_clients.browser.timestamps import APPLE_EPOCH_OFFSET, CHROME_EPOCH_OFFSET_MS

# 2025-10-09T09:06:40Z, a whole second so seconds-based stores hit it exactly.
NOW_MS = 1_760_000_800_000


def chrome_raw(utc_ms):
    return (utc_ms + CHROME_EPOCH_OFFSET_MS) * 1000


def mozilla_raw(utc_ms):
    return utc_ms * 1000


def apple_raw(utc_ms):
    return utc_ms // 1000 - APPLE_EPOCH_OFFSET


_SCHEMAS = {
    "chromium": (
        [
            """
            CREATE TABLE urls (
                id INTEGER PRIMARY KEY,
                url LONGVARCHAR,
                title LONGVARCHAR,
                visit_count INTEGER DEFAULT 0,
                last_visit_time INTEGER NOT NULL
            )
            """,
        ],
        "INSERT INTO urls (title, url, last_visit_time) VALUES (?, ?, ?)",
        chrome_raw,
    ),
    "mozilla": (
        [
            """
            CREATE TABLE moz_places (
                id INTEGER PRIMARY KEY,
                url LONGVARCHAR,
                title LONGVARCHAR,
                visit_count INTEGER DEFAULT 0,
                last_visit_date INTEGER
            )
            """,
        ],
        "INSERT INTO moz_places (title, url, last_visit_date) VALUES (?, ?, ?)",
        mozilla_raw,
    ),
    "maxthon": (
        [
            """
            CREATE TABLE ZMXHISTORYENTRY (
                Z_PK INTEGER PRIMARY KEY,
                ZTITLE VARCHAR,
                ZURL VARCHAR,
                ZHOST VARCHAR,
                ZLASTVISITTIME TIMESTAMP
            )
            """,
        ],
        "INSERT INTO ZMXHISTORYENTRY (ZTITLE, ZURL, ZLASTVISITTIME) VALUES (?, ?, ?)",
        apple_raw,
    ),
}


def _create_safari(conn, rows):
    conn.execute("""
        CREATE TABLE history_items (
            id INTEGER PRIMARY KEY,
            url TEXT NOT NULL UNIQUE,
            visit_count INTEGER NOT NULL DEFAULT 0
        )
    """)
    conn.execute("""
        CREATE TABLE history_visits (
            id INTEGER PRIMARY KEY,
            history_item INTEGER NOT NULL,
            visit_time REAL NOT NULL,
            title TEXT
        )
    """)
    for item_id, (title, url, utc_ms) in enumerate(rows, start=1):
        conn.execute("INSERT INTO history_items (id, url) VALUES (?, ?)", (item_id, url))
        conn.execute(
            "INSERT INTO history_visits (history_item, visit_time, title) VALUES (?, ?, ?)",
            (item_id, float(apple_raw(utc_ms)), title),
        )


@pytest.fixture
def history_db(tmp_path):
    """Factory: history_db(kind, rows, name) -> Path.

    ``rows`` are (title, url, utc_ms) tuples; utc_ms is converted to the
    store's raw time format.
    """

    def _make(kind, rows, name=None):
        db_path = tmp_path / (name or f"{kind}.sqlite")
        conn = sqlite3.connect(str(db_path))
        if kind == "webkit":
            _create_safari(conn, rows)
        else:
            statements, insert, to_raw = _SCHEMAS[kind]
            for statement in statements:
                conn.execute(statement)
            for title, url, utc_ms in rows:
                conn.execute(insert, (title, url, to_raw(utc_ms)))
        conn.commit()
        conn.close()
        return db_path

    return _make


@pytest.fixture
def snapshot_dir(tmp_path, monkeypatch):
    """Point snapshots at an empty directory the test can inspect."""
    directory = tmp_path / "snapshots"
    directory.mkdir()
    monkeypatch.setenv("HISTORY_CLIENTS_SNAPSHOT_DIR", str(directory))
    return directory


@pytest.fixture
def now():
    return NOW_MS
