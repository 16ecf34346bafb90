"""Display names for public keys, resolved through the messaging backend."""

from __future__ import annotations

from chat_composer.core.errors import BackendError
from chat_composer.log import get_logger
from chat_composer.messenger.base import MessagingBackend
from chat_composer.messenger.models import EnrichedContact

logger = get_logger(__name__)


def shorten_pubkey(pubkey: str, keep: int = 8) -> str:
    if len(pubkey) <= keep * 2:
        return pubkey
    return f"{pubkey[:keep]}…{pubkey[-keep:]}"


def display_name(pubkey: str, contact: EnrichedContact | None) -> str:
    if contact is not None:
        meta = contact.metadata
        if meta.display_name:
            return meta.display_name
        if meta.name:
            return meta.name
    return shorten_pubkey(pubkey)


class IdentityResolver:
    """Resolves message authors for display. Never used on the send path."""

    def __init__(self, backend: MessagingBackend):
        self._backend = backend

    async def lookup(self, pubkey: str) -> EnrichedContact | None:
        try:
            return await self._backend.resolve_contact_identity(pubkey)
        except BackendError as e:
            logger.debug("contact_unresolved", pubkey=pubkey, error=str(e))
            return None

    async def display_name(self, pubkey: str) -> str:
        return display_name(pubkey, await self.lookup(pubkey))
