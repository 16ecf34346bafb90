"""Abstract messaging backend interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from chat_composer.messenger.models import (
    EnrichedContact,
    FilePayload,
    MessageEvent,
    OutboundMessage,
    UploadReceipt,
)


class MessagingBackend(ABC):
    """Collaborator that owns encryption, relay selection and delivery.

    The composer never does network I/O itself; everything that leaves the
    process goes through one of these four operations. Implementations
    signal failure by raising.
    """

    @abstractmethod
    async def resolve_group_relays(self, group_id: str) -> list[str]:
        """Return the group's relay endpoints, most preferred first."""
        ...

    @abstractmethod
    async def upload_attachment(self, group_id: str, payload: FilePayload) -> UploadReceipt:
        """Store a single file for later reference from a message."""
        ...

    @abstractmethod
    async def send_message(self, message: OutboundMessage) -> MessageEvent:
        """Deliver a message and return its canonical representation."""
        ...

    @abstractmethod
    async def resolve_contact_identity(self, pubkey: str) -> EnrichedContact:
        """Look up display metadata and relay preferences for a public key."""
        ...
