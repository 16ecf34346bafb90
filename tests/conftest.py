from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from chat_composer.composer.composer import Composer
from chat_composer.composer.view import ComposerView
from chat_composer.config import BackendConfig
from chat_composer.core.context import ComposerContext
from chat_composer.core.errors import BackendError, UnknownContactError
from chat_composer.core.notifications import Notifier
from chat_composer.core.types import NoticeLevel
from chat_composer.messenger.base import MessagingBackend
from chat_composer.messenger.local import LocalMessagingBackend
from chat_composer.messenger.models import (
    EchoMessage,
    EnrichedContact,
    FilePayload,
    Group,
    MessageEvent,
    OutboundMessage,
    UploadReceipt,
)
from chat_composer.storage.database import Database
from chat_composer.storage.transcript_repo import TranscriptRepository

ACCOUNT = "a" * 64
AUTHOR = "b" * 64
GROUP_ID = "group-1"


class FakeBackend(MessagingBackend):
    """Backend whose uploads and sends can be held open and made to fail."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.relays: list[str] = ["wss://relay.one", "wss://relay.two"]
        self.upload_gates: dict[str, asyncio.Event] = {}
        self.failing_uploads: set[str] = set()
        self.send_gate: asyncio.Event | None = None
        self.send_error: Exception | None = None
        self.relay_error: Exception | None = None
        self.sent: list[OutboundMessage] = []
        self.contacts: dict[str, EnrichedContact] = {}

    def hold_upload(self, filename: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.upload_gates[filename] = gate
        return gate

    async def resolve_group_relays(self, group_id: str) -> list[str]:
        self.calls.append("relays")
        if self.relay_error is not None:
            raise self.relay_error
        return list(self.relays)

    async def upload_attachment(self, group_id: str, payload: FilePayload) -> UploadReceipt:
        gate = self.upload_gates.get(payload.filename)
        if gate is not None:
            await gate.wait()
        self.calls.append(f"upload:{payload.filename}")
        if payload.filename in self.failing_uploads:
            raise BackendError(f"upload rejected: {payload.filename}")
        return UploadReceipt(sha256=payload.sha256, size=payload.size)

    async def send_message(self, message: OutboundMessage) -> MessageEvent:
        self.calls.append("send")
        if self.send_gate is not None:
            await self.send_gate.wait()
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(message)
        return MessageEvent(
            id=MessageEvent.compute_id(ACCOUNT, 1700000000, int(message.kind), message.tags, message.text),
            pubkey=ACCOUNT,
            created_at=1700000000,
            kind=int(message.kind),
            tags=message.tags,
            content=message.text,
        )

    async def resolve_contact_identity(self, pubkey: str) -> EnrichedContact:
        if pubkey not in self.contacts:
            raise UnknownContactError(pubkey)
        return self.contacts[pubkey]


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.notices: list[tuple[NoticeLevel, str, str]] = []

    def notify(self, level: NoticeLevel, title: str, detail: str = "") -> None:
        self.notices.append((level, title, detail))


class RecordingView(ComposerView):
    def __init__(self, calls: list[str] | None = None) -> None:
        self.calls = calls if calls is not None else []
        self.pending: list[EchoMessage] = []
        self.confirmed: list[tuple[EchoMessage, MessageEvent]] = []

    def show_pending(self, echo: EchoMessage) -> None:
        self.calls.append("echo")
        self.pending.append(echo)

    def show_confirmed(self, echo: EchoMessage, message: MessageEvent) -> None:
        self.calls.append("confirmed")
        self.confirmed.append((echo, message))


def make_file(name: str, data: bytes = b"data", media_type: str = "image/png") -> FilePayload:
    return FilePayload(data=data, media_type=media_type, filename=name)


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def view(backend: FakeBackend) -> RecordingView:
    # Shares the backend's call log so echo/send/confirm ordering is observable.
    return RecordingView(backend.calls)


@pytest.fixture()
def context(notifier: RecordingNotifier) -> ComposerContext:
    return ComposerContext(account_pubkey=ACCOUNT, notifier=notifier)


@pytest.fixture()
def composer(backend: FakeBackend, context: ComposerContext, view: RecordingView) -> Composer:
    return Composer(backend=backend, context=context, view=view, group_id=GROUP_ID)


@pytest.fixture()
async def repo(tmp_path: Path):
    db = Database(str(tmp_path / "chat.db"))
    await db.initialize()
    repository = TranscriptRepository(db)
    await repository.upsert_group(
        Group(
            mls_group_id=GROUP_ID,
            nostr_group_id="nostr-group-1",
            name="Friends",
            relays=["wss://group.relay"],
        )
    )
    yield repository
    await db.close()


@pytest.fixture()
def local_backend(repo: TranscriptRepository) -> LocalMessagingBackend:
    return LocalMessagingBackend(repo, BackendConfig(default_relays=["wss://default"]), ACCOUNT)
