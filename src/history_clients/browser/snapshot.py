"""Private, disposable copies of live browser databases.

Browsers keep their history databases open (and often locked) while running,
so every query runs against a copy under the snapshot directory. Each copy is
named with a fresh uuid4, which is the only thing keeping concurrent
extractions apart; no locking is involved.
"""

from __future__ import annotations

import logging
import os
import shutil
import sqlite3
import tempfile
import uuid
from pathlib import Path

from history_clients.exceptions import (
    CheckpointError,
    CleanupError,
    SourceUnreadableError,
)

logger = logging.getLogger(__name__)


def _checkpoint_timeout() -> float:
    raw = os.environ.get("HISTORY_CLIENTS_CHECKPOINT_TIMEOUT", "1.0")
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid HISTORY_CLIENTS_CHECKPOINT_TIMEOUT=%r", raw)
        return 1.0


CHECKPOINT_TIMEOUT = _checkpoint_timeout()

_SIDECAR_SUFFIXES = ("-wal", "-shm", "-journal")


def snapshot_dir() -> Path:
    """Directory for snapshots; HISTORY_CLIENTS_SNAPSHOT_DIR overrides the temp dir."""
    configured = os.environ.get("HISTORY_CLIENTS_SNAPSHOT_DIR")
    return Path(configured) if configured else Path(tempfile.gettempdir())


class Snapshot:
    """An exclusively owned temporary copy of one database file.

    Use as a context manager, or call ``release()`` on every exit path.
    """

    def __init__(self, source: Path, path: Path):
        self.source = source
        self.path = path
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Delete the copy and any sidecar files SQLite left next to it."""
        if self._released:
            return
        self._released = True
        failures = []
        for target in [self.path] + [
            Path(f"{self.path}{suffix}") for suffix in _SIDECAR_SUFFIXES
        ]:
            try:
                target.unlink(missing_ok=True)
            except OSError as e:
                failures.append(f"{target}: {e}")
        if failures:
            raise CleanupError(
                f"Failed to remove snapshot of {self.source}: {'; '.join(failures)}"
            )
        logger.debug("Released snapshot %s", self.path)

    def __enter__(self) -> Snapshot:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.release()
        except CleanupError as e:
            if exc is None:
                raise
            # Don't mask the exception already in flight.
            logger.warning("%s", e)

    def __repr__(self) -> str:
        return f"Snapshot(source={str(self.source)!r}, path={str(self.path)!r})"


def take_snapshot(source: str | os.PathLike, directory: Path | None = None) -> Snapshot:
    """Copy ``source`` byte-for-byte to a uniquely named temporary file."""
    if source is None or os.fspath(source) == "":
        raise SourceUnreadableError("Empty profile path")
    source_path = Path(source)
    try:
        found = source_path.is_file()
    except OSError as e:
        raise SourceUnreadableError(f"Cannot stat {source_path}: {e}") from e
    if not found:
        raise SourceUnreadableError(f"History database not found at {source_path}")

    target_dir = directory or snapshot_dir()
    target = target_dir / f"{uuid.uuid4().hex}.sqlite"
    try:
        shutil.copyfile(source_path, target)
    except OSError as e:
        try:
            target.unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to remove partial snapshot %s", target)
        raise SourceUnreadableError(
            f"Failed to copy history database {source_path}: {e}"
        ) from e

    logger.debug("Snapshot of %s at %s", source_path, target)
    return Snapshot(source_path, target)


def checkpoint(source: str | os.PathLike, timeout: float = CHECKPOINT_TIMEOUT) -> None:
    """Merge the live database's write-ahead log into its main file.

    Without this, pages committed only to the WAL are invisible in a copy of
    the main file. Opened with mode=rw so a missing file is never created.
    """
    source_path = Path(source)
    try:
        # resolve() raises RuntimeError on a symlink loop before Python 3.13
        conn = sqlite3.connect(
            f"{source_path.resolve().as_uri()}?mode=rw", uri=True, timeout=timeout
        )
    except (sqlite3.Error, OSError, RuntimeError) as e:
        raise CheckpointError(f"Cannot open {source_path} for checkpoint: {e}") from e

    try:
        row = conn.execute("PRAGMA wal_checkpoint(FULL)").fetchone()
    except sqlite3.Error as e:
        raise CheckpointError(f"Checkpoint failed for {source_path}: {e}") from e
    finally:
        conn.close()

    if row and row[0]:
        raise CheckpointError(
            f"Checkpoint of {source_path} incomplete: database busy"
        )
