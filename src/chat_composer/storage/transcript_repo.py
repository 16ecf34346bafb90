"""Repository for groups, contacts, uploads and group transcripts."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Optional

from chat_composer.core.types import EventKind, GroupType
from chat_composer.log import get_logger
from chat_composer.messenger.models import (
    ContactMetadata,
    EnrichedContact,
    FilePayload,
    Group,
    MessageEvent,
)
from chat_composer.storage.database import Database

logger = get_logger(__name__)


class TranscriptRepository:
    """CRUD over the local store backing the local messaging backend."""

    def __init__(self, db: Database):
        self._db = db

    # -- groups ---------------------------------------------------------

    async def upsert_group(self, group: Group) -> None:
        await self._db.conn.execute(
            """INSERT INTO groups
               (mls_group_id, nostr_group_id, name, description, group_type,
                admin_pubkeys, relays_json)
               VALUES (?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(mls_group_id) DO UPDATE SET
                   name = excluded.name,
                   description = excluded.description,
                   group_type = excluded.group_type,
                   admin_pubkeys = excluded.admin_pubkeys,
                   relays_json = excluded.relays_json""",
            (
                group.mls_group_id,
                group.nostr_group_id,
                group.name,
                group.description,
                str(group.group_type),
                json.dumps(group.admin_pubkeys),
                json.dumps(group.relays),
            ),
        )
        await self._db.conn.commit()

    async def get_group(self, group_id: str) -> Optional[Group]:
        """Find a group by its MLS id or its nostr id. An MLS id match wins."""
        cursor = await self._db.conn.execute(
            """SELECT * FROM groups WHERE mls_group_id = ? OR nostr_group_id = ?
               ORDER BY mls_group_id = ? DESC LIMIT 1""",
            (group_id, group_id, group_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return Group(
            mls_group_id=row["mls_group_id"],
            nostr_group_id=row["nostr_group_id"],
            name=row["name"],
            description=row["description"],
            admin_pubkeys=json.loads(row["admin_pubkeys"]),
            relays=json.loads(row["relays_json"]),
            group_type=GroupType(row["group_type"]),
        )

    # -- contacts -------------------------------------------------------

    async def upsert_contact(self, pubkey: str, contact: EnrichedContact) -> None:
        await self._db.conn.execute(
            """INSERT OR REPLACE INTO contacts
               (pubkey, metadata_json, nip17, nip104, nostr_relays, inbox_relays,
                key_package_relays)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                pubkey,
                json.dumps({k: v for k, v in asdict(contact.metadata).items() if v is not None}),
                int(contact.nip17),
                int(contact.nip104),
                json.dumps(contact.nostr_relays),
                json.dumps(contact.inbox_relays),
                json.dumps(contact.key_package_relays),
            ),
        )
        await self._db.conn.commit()

    async def get_contact(self, pubkey: str) -> Optional[EnrichedContact]:
        cursor = await self._db.conn.execute("SELECT * FROM contacts WHERE pubkey = ?", (pubkey,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return EnrichedContact(
            metadata=ContactMetadata(**json.loads(row["metadata_json"])),
            nip17=bool(row["nip17"]),
            nip104=bool(row["nip104"]),
            nostr_relays=json.loads(row["nostr_relays"]),
            inbox_relays=json.loads(row["inbox_relays"]),
            key_package_relays=json.loads(row["key_package_relays"]),
        )

    # -- uploads --------------------------------------------------------

    async def save_upload(self, payload: FilePayload) -> str:
        """Store a blob keyed by content hash. Returns the hash."""
        digest = payload.sha256
        await self._db.conn.execute(
            """INSERT OR IGNORE INTO uploads (sha256, media_type, size, data)
               VALUES (?, ?, ?, ?)""",
            (digest, payload.media_type, payload.size, payload.data),
        )
        await self._db.conn.commit()
        return digest

    async def has_upload(self, digest: str) -> bool:
        cursor = await self._db.conn.execute("SELECT 1 FROM uploads WHERE sha256 = ?", (digest,))
        return await cursor.fetchone() is not None

    # -- transcript -----------------------------------------------------

    async def add_message(
        self,
        mls_group_id: str,
        event: MessageEvent,
        attachments: list[FilePayload] | None = None,
    ) -> bool:
        """Append an event to a group's transcript. Returns False if it was already there."""
        cursor = await self._db.conn.execute(
            """INSERT OR IGNORE INTO messages
               (id, mls_group_id, pubkey, created_at, kind, tags_json, content)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                event.id,
                mls_group_id,
                event.pubkey,
                event.created_at,
                event.kind,
                json.dumps(event.tags),
                event.content,
            ),
        )
        inserted = cursor.rowcount > 0
        if inserted and attachments:
            await self._db.conn.executemany(
                """INSERT INTO message_attachments (message_id, position, sha256, filename)
                   VALUES (?, ?, ?, ?)""",
                [(event.id, i, a.sha256, a.filename) for i, a in enumerate(attachments)],
            )
        await self._db.conn.commit()
        if not inserted:
            logger.debug("message_already_in_transcript", event_id=event.id)
        return inserted

    async def get_transcript(self, mls_group_id: str, limit: int = 100) -> list[MessageEvent]:
        """Most recent `limit` events, oldest first, ties broken by id."""
        cursor = await self._db.conn.execute(
            """SELECT * FROM (
                   SELECT * FROM messages WHERE mls_group_id = ?
                   ORDER BY created_at DESC, id DESC
                   LIMIT ?
               ) ORDER BY created_at ASC, id ASC""",
            (mls_group_id, limit),
        )
        rows = await cursor.fetchall()
        return [self._row_to_event(row) for row in rows]

    async def get_message(
        self, event_id: str, mls_group_id: Optional[str] = None
    ) -> Optional[MessageEvent]:
        """Look up one event, optionally only within a single group's transcript."""
        if mls_group_id is None:
            cursor = await self._db.conn.execute("SELECT * FROM messages WHERE id = ?", (event_id,))
        else:
            cursor = await self._db.conn.execute(
                "SELECT * FROM messages WHERE id = ? AND mls_group_id = ?",
                (event_id, mls_group_id),
            )
        row = await cursor.fetchone()
        return self._row_to_event(row) if row is not None else None

    async def get_deletions(self, mls_group_id: str) -> list[MessageEvent]:
        """Every deletion event in a group's transcript, oldest first."""
        cursor = await self._db.conn.execute(
            """SELECT * FROM messages WHERE mls_group_id = ? AND kind = ?
               ORDER BY created_at ASC, id ASC""",
            (mls_group_id, int(EventKind.DELETION)),
        )
        return [self._row_to_event(row) for row in await cursor.fetchall()]

    async def get_attachment_names(self, event_id: str) -> list[str]:
        cursor = await self._db.conn.execute(
            "SELECT filename FROM message_attachments WHERE message_id = ? ORDER BY position",
            (event_id,),
        )
        return [row["filename"] for row in await cursor.fetchall()]

    @staticmethod
    def _row_to_event(row) -> MessageEvent:
        return MessageEvent(
            id=row["id"],
            pubkey=row["pubkey"],
            created_at=row["created_at"],
            kind=row["kind"],
            tags=json.loads(row["tags_json"]),
            content=row["content"],
        )
