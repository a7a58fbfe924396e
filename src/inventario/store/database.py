"""Serialized access to the inventory SQLite database.

The desktop shell may issue commands from several worker threads, but the
store only ever runs one of them at a time.  :class:`Database` owns the single
connection and a lock; :meth:`Database.session` is the only way to reach the
connection, so callers never see the lock itself.
"""

from __future__ import annotations

import shutil
import sqlite3
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
import logging

from ..errors import PersistenceError, SchemaVersionError

logger = logging.getLogger(__name__)


class Database:
    """Thread-safe owner of one SQLite connection."""

    def __init__(self, db_path: str | Path, *, timeout: float = 10.0) -> None:
        """Open (or create) the database at *db_path*.

        Args:
            db_path: Path to the SQLite database file
            timeout: Seconds SQLite waits on a file lock held by another process
        """
        self._db_path = Path(db_path)
        self._timeout = timeout
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = self._connect()

    @property
    def path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(
                str(self._db_path),
                check_same_thread=False,  # guarded by self._lock instead
                timeout=self._timeout,
            )
            # WAL keeps readers in other processes (backup tools) off our writes.
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
            conn.row_factory = sqlite3.Row
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to open database {self._db_path}: {exc}") from exc
        logger.debug("Opened database %s", self._db_path)
        return conn

    @contextmanager
    def session(self) -> Iterator[sqlite3.Connection]:
        """Hold the connection exclusively for the duration of the block.

        Statements run inside the block are committed when it exits normally
        and rolled back when it raises.  ``sqlite3.Error`` is re-raised as
        :class:`PersistenceError`.
        """
        with self._lock:
            conn = self._conn
            if conn is None:
                raise PersistenceError(f"Database {self._db_path} is closed")
            try:
                yield conn
                conn.commit()
            except sqlite3.Error as exc:
                conn.rollback()
                raise PersistenceError(str(exc)) from exc
            except BaseException:
                conn.rollback()
                raise

    def backup_to(self, destination: str | Path) -> Path:
        """Write a consistent copy of the live database to *destination*.

        The copy uses the rollback journal so it is a single self-contained file.
        """
        target_path = Path(destination)
        with self._lock:
            if self._conn is None:
                raise PersistenceError(f"Database {self._db_path} is closed")
            try:
                target = sqlite3.connect(str(target_path))
                try:
                    self._conn.backup(target)
                    target.execute("PRAGMA journal_mode=DELETE")
                finally:
                    target.close()
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to back up database to {target_path}: {exc}") from exc
        logger.info("Backed up %s to %s", self._db_path, target_path)
        return target_path

    def replace_with(self, source: str | Path, *, max_user_version: Optional[int] = None) -> None:
        """Replace the live content with the database at *source*.

        *source* is staged in a scratch directory (with its ``-wal`` file, if
        any) so the caller's file is never modified, checked with
        ``PRAGMA quick_check`` and, when *max_user_version* is given, against
        the supported schema version.  Only then is it copied into the open
        connection with the online backup API; a failure at any step leaves
        the live database untouched.
        """
        source_path = Path(source)
        with tempfile.TemporaryDirectory(prefix="inventario-import-") as scratch:
            staged = Path(scratch) / "import.db"
            try:
                shutil.copyfile(source_path, staged)
                source_wal = Path(str(source_path) + "-wal")
                if source_wal.is_file():
                    shutil.copyfile(source_wal, Path(str(staged) + "-wal"))
            except OSError as exc:
                raise PersistenceError(f"Failed to read {source_path}: {exc}") from exc

            try:
                incoming = sqlite3.connect(str(staged))
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to open {source_path}: {exc}") from exc
            try:
                self._check_incoming(incoming, source_path, max_user_version)
                with self._lock:
                    if self._conn is None:
                        raise PersistenceError(f"Database {self._db_path} is closed")
                    self._conn.commit()
                    incoming.backup(self._conn)
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to import {source_path}: {exc}") from exc
            finally:
                incoming.close()
        logger.info("Replaced database %s with %s", self._db_path, source_path)

    @staticmethod
    def _check_incoming(
        conn: sqlite3.Connection, source_path: Path, max_user_version: Optional[int]
    ) -> None:
        result = conn.execute("PRAGMA quick_check").fetchone()
        if result is None or result[0] != "ok":
            detail = result[0] if result else "no result"
            raise PersistenceError(f"{source_path} failed the integrity check: {detail}")
        version = int(conn.execute("PRAGMA user_version").fetchone()[0])
        if max_user_version is not None and version > max_user_version:
            raise SchemaVersionError(
                f"{source_path} uses schema version {version}, newer than supported version {max_user_version}"
            )

    def close(self) -> None:
        """Close the connection; later sessions raise :class:`PersistenceError`."""
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
            logger.debug("Closed database %s", self._db_path)

    @property
    def closed(self) -> bool:
        return self._conn is None


__all__ = ["Database"]
