"""Send orchestrator: turns the draft into one outbound message."""

from __future__ import annotations

import time
import uuid

from chat_composer.composer.attachments import AttachmentRegistry
from chat_composer.composer.draft import DraftBuffer
from chat_composer.composer.reply import ReplyContext
from chat_composer.composer.view import ComposerView
from chat_composer.core.context import ComposerContext
from chat_composer.core.errors import SendBlocked, SendTransportError
from chat_composer.core.result import Err, Ok, Result, capture
from chat_composer.core.types import BlockReason, EventKind, SendState
from chat_composer.log import get_logger
from chat_composer.messenger.base import MessagingBackend
from chat_composer.messenger.events import build_reply_tag
from chat_composer.messenger.models import EchoMessage, MessageEvent, OutboundMessage

logger = get_logger(__name__)

TEMP_ID_PREFIX = "pending-"

SendResult = Result[MessageEvent, SendBlocked | SendTransportError]


class SendOrchestrator:
    """Idle -> Sending -> Idle, with named guards and unconditional cleanup.

    Guards run in a fixed order: a send already in flight, then an empty
    draft, then uploads still pending. Once SENDING is entered the reply
    context is cleared and the state returns to IDLE on every exit path.
    Draft text and attachments are cleared only after the backend accepts
    the message.
    """

    def __init__(
        self,
        backend: MessagingBackend,
        context: ComposerContext,
        view: ComposerView,
        group_id: str,
        draft: DraftBuffer,
        attachments: AttachmentRegistry,
        reply: ReplyContext,
    ):
        self._backend = backend
        self._context = context
        self._view = view
        self._group_id = group_id
        self._draft = draft
        self._attachments = attachments
        self._reply = reply
        self._state = SendState.IDLE

    @property
    def state(self) -> SendState:
        return self._state

    def _check_guards(self) -> SendBlocked | None:
        if self._state == SendState.SENDING:
            return SendBlocked(BlockReason.ALREADY_SENDING)
        if self._draft.is_empty:
            return SendBlocked(BlockReason.EMPTY_DRAFT)
        if self._attachments.has_pending_uploads:
            self._context.notifier.error(
                "Uploads in progress",
                "Wait for attachments to finish uploading before sending.",
            )
            return SendBlocked(BlockReason.UPLOADS_PENDING)
        return None

    async def send(self) -> SendResult:
        blocked = self._check_guards()
        if blocked is not None:
            logger.info("send_blocked", reason=str(blocked.reason))
            return Err(blocked)

        # Entered before the first await so a concurrent send() sees SENDING.
        self._state = SendState.SENDING
        try:
            return await self._send_snapshot()
        finally:
            self._reply.clear()
            self._state = SendState.IDLE

    async def _send_snapshot(self) -> SendResult:
        text = self._draft.text
        included = self._attachments.successful_attachments()
        excluded = len(self._attachments) - len(included)
        target = self._reply.target

        tags: list[list[str]] = []
        if target is not None:
            relays = await capture(self._backend.resolve_group_relays(self._group_id))
            if isinstance(relays, Err):
                return self._fail(relays.error)
            tags.append(build_reply_tag(target, relays.value))

        echo = EchoMessage(
            temp_id=TEMP_ID_PREFIX + uuid.uuid4().hex[:12],
            pubkey=self._context.account_pubkey,
            created_at=int(time.time()),
            content=text,
            tags=tags,
            attachment_ids=[a.id for a in included],
        )
        self._view.show_pending(echo)

        outbound = OutboundMessage(
            group_id=self._group_id,
            text=text,
            kind=EventKind.CHAT_MESSAGE,
            tags=tags,
            attachments=[a.payload for a in included],
        )
        logger.info(
            "send_started",
            temp_id=echo.temp_id,
            attachments=len(included),
            excluded_attachments=excluded,
            reply=target is not None,
        )

        outcome = await capture(self._backend.send_message(outbound))
        if isinstance(outcome, Err):
            return self._fail(outcome.error)

        message = outcome.value
        self._view.show_confirmed(echo, message)
        self._draft.clear()
        self._attachments.clear()
        logger.info("send_succeeded", temp_id=echo.temp_id, event_id=message.id)
        return Ok(message)

    def _fail(self, cause: Exception) -> Err[SendTransportError]:
        error = SendTransportError(self._group_id, cause)
        logger.error("send_failed", error=str(cause))
        self._context.notifier.error("Failed to send message", str(cause))
        return Err(error)
