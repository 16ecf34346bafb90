"""Messaging backend over the local SQLite store.

Stands in for a relay-connected backend during development and in the CLI.
Messages are not encrypted or published; they are stored in the group's
transcript and returned in canonical form.
"""

from __future__ import annotations

import time

from chat_composer.config import BackendConfig
from chat_composer.core.errors import BackendError, UnknownContactError, UnknownGroupError
from chat_composer.log import get_logger
from chat_composer.messenger.base import MessagingBackend
from chat_composer.messenger.events import build_file_tag
from chat_composer.messenger.models import (
    EnrichedContact,
    FilePayload,
    Group,
    MessageEvent,
    OutboundMessage,
    UploadReceipt,
)
from chat_composer.storage.transcript_repo import TranscriptRepository

logger = get_logger(__name__)


class LocalMessagingBackend(MessagingBackend):
    def __init__(self, repo: TranscriptRepository, config: BackendConfig, account_pubkey: str):
        self._repo = repo
        self._config = config
        self._account_pubkey = account_pubkey

    async def _require_group(self, group_id: str) -> Group:
        group = await self._repo.get_group(group_id)
        if group is None:
            raise UnknownGroupError(group_id)
        return group

    async def resolve_group_relays(self, group_id: str) -> list[str]:
        group = await self._require_group(group_id)
        if self._config.dev_mode:
            return [self._config.dev_relay]
        return list(group.relays) or list(self._config.default_relays)

    async def upload_attachment(self, group_id: str, payload: FilePayload) -> UploadReceipt:
        await self._require_group(group_id)
        if payload.size > self._config.max_upload_bytes:
            raise BackendError(
                f"{payload.filename} is {payload.size} bytes, "
                f"limit is {self._config.max_upload_bytes}"
            )
        digest = await self._repo.save_upload(payload)
        logger.info("upload_stored", group_id=group_id, sha256=digest, size=payload.size)
        return UploadReceipt(sha256=digest, size=payload.size)

    async def send_message(self, message: OutboundMessage) -> MessageEvent:
        group = await self._require_group(message.group_id)
        for payload in message.attachments:
            if not await self._repo.has_upload(payload.sha256):
                raise BackendError(f"{payload.filename} was not uploaded")

        created_at = int(time.time())
        tags = [list(t) for t in message.tags]
        tags.extend(build_file_tag(payload) for payload in message.attachments)
        event = MessageEvent(
            id=MessageEvent.compute_id(
                self._account_pubkey, created_at, int(message.kind), tags, message.text
            ),
            pubkey=self._account_pubkey,
            created_at=created_at,
            kind=int(message.kind),
            tags=tags,
            content=message.text,
        )
        if not await self._repo.add_message(group.mls_group_id, event, message.attachments):
            raise BackendError(f"message {event.id} is already in the transcript")
        logger.info(
            "message_stored",
            group_id=group.mls_group_id,
            event_id=event.id,
            attachments=len(message.attachments),
        )
        return event

    async def resolve_contact_identity(self, pubkey: str) -> EnrichedContact:
        contact = await self._repo.get_contact(pubkey)
        if contact is None:
            raise UnknownContactError(pubkey)
        return contact
