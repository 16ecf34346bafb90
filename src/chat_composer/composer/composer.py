"""Composer facade: wires one conversation's draft, attachments, reply and send."""

from __future__ import annotations

from chat_composer.composer.attachments import Attachment, AttachmentRegistry
from chat_composer.composer.draft import DraftBuffer
from chat_composer.composer.orchestrator import SendOrchestrator, SendResult
from chat_composer.composer.reply import ReplyContext
from chat_composer.composer.uploads import UploadCoordinator
from chat_composer.composer.view import ComposerView
from chat_composer.core.context import ComposerContext
from chat_composer.core.types import SendState
from chat_composer.log import get_logger
from chat_composer.messenger.base import MessagingBackend
from chat_composer.messenger.models import FilePayload, ReplyTarget

logger = get_logger(__name__)


class Composer:
    """Everything the user edits before pressing send, for a single group."""

    def __init__(
        self,
        backend: MessagingBackend,
        context: ComposerContext,
        view: ComposerView,
        group_id: str,
    ):
        self.group_id = group_id
        self.attachments = AttachmentRegistry()
        self.draft = DraftBuffer(self.attachments)
        self.reply = ReplyContext()
        self.uploads = UploadCoordinator(backend, self.attachments, context, group_id)
        self.orchestrator = SendOrchestrator(
            backend=backend,
            context=context,
            view=view,
            group_id=group_id,
            draft=self.draft,
            attachments=self.attachments,
            reply=self.reply,
        )

    @property
    def text(self) -> str:
        return self.draft.text

    @text.setter
    def text(self, value: str) -> None:
        self.draft.text = value

    def add_attachment(self, payload: FilePayload) -> Attachment:
        """Register a file and start uploading it right away."""
        attachment = self.attachments.add(payload)
        self.uploads.start(attachment)
        return attachment

    def remove_attachment(self, attachment_id: str) -> bool:
        return self.attachments.remove(attachment_id)

    def reply_to(self, target: ReplyTarget, is_target_deleted: bool = False) -> None:
        self.reply.set(target, is_target_deleted)

    def cancel_reply(self) -> None:
        self.reply.clear()

    @property
    def is_sending(self) -> bool:
        return self.orchestrator.state == SendState.SENDING

    @property
    def can_send(self) -> bool:
        return (
            not self.is_sending
            and not self.draft.is_empty
            and not self.attachments.has_pending_uploads
        )

    async def wait_for_uploads(self) -> None:
        await self.uploads.wait_idle()

    async def send(self) -> SendResult:
        return await self.orchestrator.send()
