"""SQLite-backed fetch-result store.

Blocking sqlite3 calls run in a worker thread via ``asyncio.to_thread`` so
the event loop is never blocked; a lock serializes access to the shared
connection. Each method is a single statement, so reads are consistent per
call. Any sqlite3 failure surfaces as StoreUnavailable.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar, Union

from ..constants import TERMINAL_STATUSES
from ..errors import NotFound, StoreUnavailable
from ..paths import major_of
from ..versioning import VersionRecord, VersionType
from .base import FetchResultStore, check_version_types
from .models import FetchOutcome, ModuleUnit

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS modules (
    module_path TEXT NOT NULL,
    version TEXT NOT NULL,
    version_type TEXT NOT NULL,
    commit_time TEXT,
    sort_version TEXT NOT NULL,
    series_path TEXT NOT NULL,
    PRIMARY KEY (module_path, version)
);
CREATE INDEX IF NOT EXISTS idx_modules_series
    ON modules(series_path, version_type, sort_version);

CREATE TABLE IF NOT EXISTS paths (
    path TEXT PRIMARY KEY,
    module_path TEXT NOT NULL,
    v1_path TEXT NOT NULL,
    major INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_paths_v1 ON paths(v1_path, major);

CREATE TABLE IF NOT EXISTS version_map (
    module_path TEXT NOT NULL,
    requested_version TEXT NOT NULL,
    resolved_version TEXT,
    go_mod_path TEXT NOT NULL,
    status INTEGER NOT NULL,
    error TEXT NOT NULL DEFAULT '',
    response_text TEXT NOT NULL DEFAULT '',
    PRIMARY KEY (module_path, requested_version)
);
"""


def _outcome_from_row(row: sqlite3.Row) -> FetchOutcome:
    return FetchOutcome(
        module_path=row["module_path"],
        requested_version=row["requested_version"],
        resolved_version=row["resolved_version"],
        go_mod_path=row["go_mod_path"],
        status=row["status"],
        error=row["error"],
        response_text=row["response_text"],
    )


def _record_from_row(row: sqlite3.Row) -> VersionRecord:
    commit_time = row["commit_time"]
    return VersionRecord(
        module_path=row["module_path"],
        version=row["version"],
        version_type=VersionType(row["version_type"]),
        commit_time=datetime.fromisoformat(commit_time) if commit_time else None,
        sort_key=row["sort_version"],
    )


class SQLiteStore(FetchResultStore):
    """Relational store over a single SQLite database file."""

    def __init__(self, db_path: Union[str, Path]):
        self._db_path = str(db_path)
        self._lock = threading.Lock()
        try:
            if self._db_path != ":memory:":
                Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode = WAL")
            self._conn.execute("PRAGMA busy_timeout = 5000")
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"cannot open {self._db_path}: {exc}") from exc
        logger.debug("SQLiteStore initialized at %s", self._db_path)

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        def call():
            with self._lock:
                try:
                    return fn(*args)
                except sqlite3.Error as exc:
                    raise StoreUnavailable(f"{fn.__name__}: {exc}") from exc
        return await asyncio.to_thread(call)

    def _query(self, sql: str, params: Sequence[Any]) -> List[sqlite3.Row]:
        return self._conn.execute(sql, tuple(params)).fetchall()

    def _query_one(self, sql: str, params: Sequence[Any]) -> Optional[sqlite3.Row]:
        return self._conn.execute(sql, tuple(params)).fetchone()

    async def get_version_map(self, full_path: str, version: str) -> FetchOutcome:
        row = await self._run(
            self._query_one,
            "SELECT * FROM version_map WHERE module_path = ? AND requested_version = ?",
            (full_path, version),
        )
        if row is None:
            raise NotFound(f"no version map entry for {full_path}@{version}")
        return _outcome_from_row(row)

    async def get_version_maps_for_paths(
        self, paths: Sequence[str], version: str
    ) -> List[FetchOutcome]:
        if not paths:
            return []
        placeholders = ", ".join("?" for _ in paths)
        rows = await self._run(
            self._query,
            f"""SELECT * FROM version_map
                WHERE module_path IN ({placeholders})
                AND requested_version = ?
                AND (status < 200 OR status >= 300)""",
            (*paths, version),
        )
        return [_outcome_from_row(row) for row in rows]

    async def get_latest_major_path_for_path(self, full_path: str) -> str:
        row = await self._run(
            self._query_one,
            """SELECT path FROM paths
               WHERE v1_path = ?
               ORDER BY major DESC, path
               LIMIT 1""",
            (full_path,),
        )
        if row is None or row["path"] == full_path:
            raise NotFound(f"no higher major version of {full_path}")
        return row["path"]

    async def get_tagged_versions(
        self, series_path: str, types: Sequence[VersionType]
    ) -> List[VersionRecord]:
        limit = check_version_types(types)
        placeholders = ", ".join("?" for _ in types)
        sql = f"""SELECT * FROM modules
                  WHERE series_path = ?
                  AND version_type IN ({placeholders})
                  ORDER BY sort_version DESC, version DESC"""
        if limit:
            sql += f" LIMIT {limit}"
        rows = await self._run(self._query, sql, (series_path, *(t.value for t in types)))
        return [_record_from_row(row) for row in rows]

    def _insert_module(self, record: VersionRecord, unit_paths: List[str]) -> None:
        with self._conn:
            self._conn.execute(
                """INSERT OR REPLACE INTO modules
                   (module_path, version, version_type, commit_time, sort_version, series_path)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    record.module_path,
                    record.version,
                    record.version_type.value,
                    record.commit_time.isoformat() if record.commit_time else None,
                    record.sort_key,
                    record.series_path,
                ),
            )
            major = major_of(record.module_path)
            for path in (record.module_path, *unit_paths):
                unit = ModuleUnit(path=path, module_path=record.module_path)
                self._conn.execute(
                    """INSERT OR REPLACE INTO paths (path, module_path, v1_path, major)
                       VALUES (?, ?, ?, ?)""",
                    (unit.path, unit.module_path, unit.v1_path, major),
                )

    async def insert_module(
        self, record: VersionRecord, unit_paths: Iterable[str] = ()
    ) -> None:
        await self._run(self._insert_module, record, list(unit_paths))

    def _record_fetch_outcome(self, outcome: FetchOutcome) -> bool:
        terminal = ", ".join(str(int(s)) for s in sorted(TERMINAL_STATUSES))
        with self._conn:
            cur = self._conn.execute(
                f"""INSERT INTO version_map
                    (module_path, requested_version, resolved_version, go_mod_path,
                     status, error, response_text)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT (module_path, requested_version) DO UPDATE SET
                        resolved_version = excluded.resolved_version,
                        go_mod_path = excluded.go_mod_path,
                        status = excluded.status,
                        error = excluded.error,
                        response_text = excluded.response_text
                    WHERE version_map.status NOT IN ({terminal})""",
                (
                    outcome.module_path,
                    outcome.requested_version,
                    outcome.resolved_version,
                    outcome.go_mod_path,
                    outcome.status,
                    outcome.error,
                    outcome.response_text,
                ),
            )
            return cur.rowcount > 0

    async def record_fetch_outcome(self, outcome: FetchOutcome) -> bool:
        written = await self._run(self._record_fetch_outcome, outcome)
        if not written:
            logger.debug(
                "Keeping terminal status for %s@%s", outcome.module_path, outcome.requested_version
            )
        return written

    async def close(self) -> None:
        await self._run(self._conn.close)
