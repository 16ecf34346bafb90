"""Upload coordinator: one independent upload task per attachment."""

from __future__ import annotations

import asyncio

from chat_composer.composer.attachments import Attachment, AttachmentRegistry
from chat_composer.core.context import ComposerContext
from chat_composer.core.errors import AttachmentUploadError
from chat_composer.core.result import Err, Ok, Result, capture
from chat_composer.core.types import AttachmentStatus
from chat_composer.log import get_logger
from chat_composer.messenger.base import MessagingBackend
from chat_composer.messenger.models import UploadReceipt

logger = get_logger(__name__)


class UploadCoordinator:
    """Starts uploads as soon as attachments are added and records their outcome.

    Uploads never wait on each other and a failure in one does not touch the
    others. There is no retry and no cancellation: if the attachment is
    removed while its upload is running, the outcome is dropped on arrival.
    """

    def __init__(
        self,
        backend: MessagingBackend,
        registry: AttachmentRegistry,
        context: ComposerContext,
        group_id: str,
    ):
        self._backend = backend
        self._registry = registry
        self._context = context
        self._group_id = group_id
        self._tasks: set[asyncio.Task[Result[UploadReceipt, AttachmentUploadError]]] = set()

    def start(self, attachment: Attachment) -> asyncio.Task[Result[UploadReceipt, AttachmentUploadError]]:
        """Schedule the upload. Must be called from inside a running event loop."""
        task = asyncio.create_task(self._run(attachment), name=f"upload-{attachment.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, attachment: Attachment) -> Result[UploadReceipt, AttachmentUploadError]:
        logger.info("upload_started", attachment_id=attachment.id, size=attachment.payload.size)
        outcome = await capture(self._backend.upload_attachment(self._group_id, attachment.payload))

        match outcome:
            case Ok(value=receipt):
                applied = self._registry.set_status(attachment.id, AttachmentStatus.SUCCESS)
                logger.info(
                    "upload_succeeded",
                    attachment_id=attachment.id,
                    sha256=receipt.sha256,
                    applied=applied,
                )
                return Ok(receipt)
            case Err(error=cause):
                error = AttachmentUploadError(attachment.id, attachment.filename, cause)
                applied = self._registry.set_status(attachment.id, AttachmentStatus.ERROR)
                logger.warning(
                    "upload_failed",
                    attachment_id=attachment.id,
                    error=str(cause),
                    applied=applied,
                )
                if applied:
                    self._context.notifier.error("Upload failed", attachment.filename)
                return Err(error)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait until every upload started so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
