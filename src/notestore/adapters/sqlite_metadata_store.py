"""SQLite-backed durable metadata store."""

import asyncio
import json
import logging
import sqlite3
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..core.errors import BackendError, NotFoundError
from ..core.model import FindNoteOpts, NoteId, NoteMeta
from ..core.ports import MetadataStore

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1"


@dataclass
class SQLiteMetadataStore(MetadataStore):
    """
    Note metadata in a single SQLite table.

    Queryable columns (fname, vault, stub) are lifted out of the record; the
    full record is kept as JSON in ``payload`` so no field is ever lost.
    """

    db_path: Path
    _ready: bool = field(default=False, init=False, repr=False)

    def _conn(self) -> sqlite3.Connection:
        """Get a connection to the SQLite database."""
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        conn = self._conn()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS notes (
                    id TEXT PRIMARY KEY,
                    fname TEXT NOT NULL,
                    fname_lower TEXT NOT NULL,
                    vault TEXT NOT NULL,
                    stub INTEGER NOT NULL DEFAULT 0,
                    updated INTEGER NOT NULL DEFAULT 0,
                    payload TEXT NOT NULL
                )
            """)

            conn.execute("CREATE INDEX IF NOT EXISTS notes_fname_idx ON notes(fname_lower)")
            conn.execute("CREATE INDEX IF NOT EXISTS notes_vault_idx ON notes(vault)")

            conn.execute(
                """
                INSERT INTO meta(key, value) VALUES('schema_version', ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                (SCHEMA_VERSION,),
            )

            conn.commit()
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        """Ensure DB exists and schema is initialized."""
        if self._ready:
            return
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        if self.db_path.exists():
            try:
                conn = self._conn()
                try:
                    conn.execute("SELECT 1").fetchone()
                finally:
                    conn.close()
            except sqlite3.DatabaseError:
                # Corrupt DB: keep it for inspection and start over
                timestamp = int(time.time())
                backup_path = self.db_path.with_suffix(f".bad-{timestamp}.sqlite")
                self.db_path.rename(backup_path)
                logger.warning("Corrupt metadata DB backed up to %s", backup_path)

        self._init_schema()
        self._ready = True

    def schema_version(self) -> str | None:
        self._ensure_schema()
        conn = self._conn()
        try:
            row = conn.execute(
                "SELECT value FROM meta WHERE key = 'schema_version'"
            ).fetchone()
            return row[0] if row else None
        finally:
            conn.close()

    def _get(self, id: NoteId) -> NoteMeta:
        self._ensure_schema()
        conn = self._conn()
        try:
            row = conn.execute("SELECT payload FROM notes WHERE id = ?", (id,)).fetchone()
        finally:
            conn.close()
        if row is None:
            raise NotFoundError(id, f"No metadata for note {id}")
        return NoteMeta.from_dict(json.loads(row[0]))

    def _write(self, id: NoteId, meta: NoteMeta) -> str:
        self._ensure_schema()
        conn = self._conn()
        try:
            conn.execute(
                """
                INSERT INTO notes (id, fname, fname_lower, vault, stub, updated, payload)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    fname = excluded.fname,
                    fname_lower = excluded.fname_lower,
                    vault = excluded.vault,
                    stub = excluded.stub,
                    updated = excluded.updated,
                    payload = excluded.payload
                """,
                (
                    id,
                    meta.fname,
                    meta.fname.lower(),
                    meta.vault.fs_path,
                    1 if meta.stub else 0,
                    meta.updated,
                    json.dumps(meta.to_dict()),
                ),
            )
            conn.commit()
        finally:
            conn.close()
        return id

    def _delete(self, id: NoteId) -> str:
        self._ensure_schema()
        conn = self._conn()
        try:
            cur = conn.execute("DELETE FROM notes WHERE id = ?", (id,))
            conn.commit()
        finally:
            conn.close()
        if cur.rowcount == 0:
            raise NotFoundError(id, f"No metadata for note {id}")
        return id

    def _find(self, opts: FindNoteOpts) -> list[NoteMeta]:
        self._ensure_schema()
        clauses: list[str] = []
        params: list[Any] = []
        if opts.fname is not None:
            clauses.append("fname_lower = ?")
            params.append(opts.fname.lower())
        if opts.vault is not None:
            clauses.append("vault = ?")
            params.append(opts.vault.fs_path)
        if opts.exclude_stub:
            clauses.append("stub = 0")

        sql = "SELECT payload FROM notes"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY fname, id"

        conn = self._conn()
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()
        return [NoteMeta.from_dict(json.loads(row[0])) for row in rows]

    async def _run(self, fn: Any, *args: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except (sqlite3.Error, OSError) as e:
            # OSError covers creating the DB directory and moving a corrupt DB aside
            key = args[0] if args and isinstance(args[0], str) else None
            raise BackendError("Metadata database error", key=key, cause=e) from e

    async def get(self, id: NoteId) -> NoteMeta:
        return await self._run(self._get, id)

    async def write(self, id: NoteId, meta: NoteMeta) -> str:
        return await self._run(self._write, id, meta)

    async def delete(self, id: NoteId) -> str:
        return await self._run(self._delete, id)

    async def find(self, opts: FindNoteOpts) -> list[NoteMeta]:
        return await self._run(self._find, opts)
