"""Message, contact and group models shared by the composer and its backends."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Optional

from chat_composer.core.types import EventKind, GroupType


@dataclass(frozen=True, slots=True)
class FilePayload:
    """Binary content offered for upload (image, file, etc.)."""

    data: bytes
    media_type: str  # e.g. "image/jpeg", "application/pdf"
    filename: str = "attachment"

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def sha256(self) -> str:
        return hashlib.sha256(self.data).hexdigest()


@dataclass(frozen=True, slots=True)
class UploadReceipt:
    """Acknowledgement returned by a backend after storing an upload."""

    sha256: str
    size: int
    url: Optional[str] = None


@dataclass(frozen=True, slots=True)
class MessageEvent:
    """A chat event in the canonical (backend-confirmed) shape."""

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: list[list[str]] = field(default_factory=list)
    content: str = ""
    sig: Optional[str] = None

    @staticmethod
    def compute_id(pubkey: str, created_at: int, kind: int, tags: list[list[str]], content: str) -> str:
        """Event id: sha256 over the compact JSON serialization of the event fields."""
        serialized = json.dumps(
            [0, pubkey, created_at, kind, tags, content],
            separators=(",", ":"),
            ensure_ascii=False,
        )
        return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class EchoMessage:
    """Provisional local rendering of a message that has not been confirmed yet."""

    temp_id: str
    pubkey: str
    created_at: int
    content: str
    tags: list[list[str]] = field(default_factory=list)
    kind: int = EventKind.CHAT_MESSAGE
    attachment_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ReplyTarget:
    """The message a draft is replying to."""

    id: str
    pubkey: str
    content: str = ""

    @classmethod
    def from_event(cls, event: MessageEvent) -> ReplyTarget:
        return cls(id=event.id, pubkey=event.pubkey, content=event.content)


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    group_id: str
    text: str
    kind: int = EventKind.CHAT_MESSAGE
    tags: list[list[str]] = field(default_factory=list)
    attachments: list[FilePayload] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ContactMetadata:
    name: Optional[str] = None
    display_name: Optional[str] = None
    about: Optional[str] = None
    picture: Optional[str] = None
    banner: Optional[str] = None
    website: Optional[str] = None
    nip05: Optional[str] = None
    lud06: Optional[str] = None
    lud16: Optional[str] = None


@dataclass(frozen=True, slots=True)
class EnrichedContact:
    metadata: ContactMetadata = field(default_factory=ContactMetadata)
    nip17: bool = False
    nip104: bool = False
    nostr_relays: list[str] = field(default_factory=list)
    inbox_relays: list[str] = field(default_factory=list)
    key_package_relays: list[str] = field(default_factory=list)

    def preferred_relays(self, fallback: list[str]) -> list[str]:
        """Inbox relays first, then general relays, then the caller's defaults."""
        if self.inbox_relays:
            return list(self.inbox_relays)
        if self.nostr_relays:
            return list(self.nostr_relays)
        return list(fallback)


@dataclass(frozen=True, slots=True)
class Group:
    mls_group_id: str
    nostr_group_id: str
    name: str
    description: str = ""
    admin_pubkeys: list[str] = field(default_factory=list)
    relays: list[str] = field(default_factory=list)
    group_type: GroupType = GroupType.GROUP
