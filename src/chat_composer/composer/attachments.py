"""Attachment registry: ordered attachments and their upload status."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from chat_composer.core.types import AttachmentStatus
from chat_composer.log import get_logger
from chat_composer.messenger.models import FilePayload

logger = get_logger(__name__)


@dataclass(slots=True)
class Attachment:
    id: str
    payload: FilePayload
    status: AttachmentStatus = AttachmentStatus.UPLOADING

    @property
    def filename(self) -> str:
        return self.payload.filename


class AttachmentRegistry:
    """Owns the attachments of one draft, in the order they were added.

    Status moves only from UPLOADING to SUCCESS or ERROR, once. Updates for
    ids that were removed are dropped.
    """

    def __init__(self) -> None:
        self._items: dict[str, Attachment] = {}

    def add(self, payload: FilePayload) -> Attachment:
        attachment = Attachment(id=uuid.uuid4().hex[:12], payload=payload)
        self._items[attachment.id] = attachment
        logger.info(
            "attachment_added",
            attachment_id=attachment.id,
            media_type=payload.media_type,
            size=payload.size,
        )
        return attachment

    def remove(self, attachment_id: str) -> bool:
        """Remove an attachment in any status. Returns False if it was not present."""
        removed = self._items.pop(attachment_id, None)
        if removed is None:
            return False
        logger.info("attachment_removed", attachment_id=attachment_id, status=str(removed.status))
        return True

    def set_status(self, attachment_id: str, status: AttachmentStatus) -> bool:
        """Apply a terminal status. Returns True only when the status changed."""
        if status == AttachmentStatus.UPLOADING:
            raise ValueError("UPLOADING is the initial status and cannot be set")
        attachment = self._items.get(attachment_id)
        if attachment is None:
            logger.debug("status_update_dropped", attachment_id=attachment_id, status=str(status))
            return False
        if attachment.status != AttachmentStatus.UPLOADING:
            return False
        attachment.status = status
        return True

    def get(self, attachment_id: str) -> Attachment | None:
        return self._items.get(attachment_id)

    def all(self) -> list[Attachment]:
        return list(self._items.values())

    def successful_attachments(self) -> list[Attachment]:
        return [a for a in self._items.values() if a.status == AttachmentStatus.SUCCESS]

    @property
    def has_pending_uploads(self) -> bool:
        return any(a.status == AttachmentStatus.UPLOADING for a in self._items.values())

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, attachment_id: object) -> bool:
        return attachment_id in self._items
