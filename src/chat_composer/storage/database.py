"""SQLite database connection manager with schema migration."""

from __future__ import annotations

from pathlib import Path

import aiosqlite

from chat_composer.log import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS groups (
    mls_group_id    TEXT PRIMARY KEY,
    nostr_group_id  TEXT NOT NULL UNIQUE,
    name            TEXT NOT NULL,
    description     TEXT NOT NULL DEFAULT '',
    group_type      TEXT NOT NULL CHECK(group_type IN ('DirectMessage','Group')),
    admin_pubkeys   TEXT NOT NULL DEFAULT '[]',
    relays_json     TEXT NOT NULL DEFAULT '[]',
    created_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f','now'))
);

CREATE TABLE IF NOT EXISTS contacts (
    pubkey              TEXT PRIMARY KEY,
    metadata_json       TEXT NOT NULL DEFAULT '{}',
    nip17               INTEGER NOT NULL DEFAULT 0,
    nip104              INTEGER NOT NULL DEFAULT 0,
    nostr_relays        TEXT NOT NULL DEFAULT '[]',
    inbox_relays        TEXT NOT NULL DEFAULT '[]',
    key_package_relays  TEXT NOT NULL DEFAULT '[]'
);

CREATE TABLE IF NOT EXISTS uploads (
    sha256          TEXT PRIMARY KEY,
    media_type      TEXT NOT NULL,
    size            INTEGER NOT NULL,
    data            BLOB NOT NULL,
    created_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f','now'))
);

CREATE TABLE IF NOT EXISTS messages (
    id              TEXT PRIMARY KEY,
    mls_group_id    TEXT NOT NULL REFERENCES groups(mls_group_id) ON DELETE CASCADE,
    pubkey          TEXT NOT NULL,
    created_at      INTEGER NOT NULL,
    kind            INTEGER NOT NULL,
    tags_json       TEXT NOT NULL DEFAULT '[]',
    content         TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_messages_group
    ON messages(mls_group_id, created_at, id);

CREATE TABLE IF NOT EXISTS message_attachments (
    message_id      TEXT NOT NULL REFERENCES messages(id) ON DELETE CASCADE,
    position        INTEGER NOT NULL,
    sha256          TEXT NOT NULL REFERENCES uploads(sha256),
    filename        TEXT NOT NULL,
    PRIMARY KEY (message_id, position)
);
"""


class Database:
    """Async SQLite database manager."""

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open connection and run migrations."""
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self._db_path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.execute("PRAGMA foreign_keys=ON")
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()
        logger.info("database_initialized", path=self._db_path)

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._conn

    async def close(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None
            logger.info("database_closed")
