"""Composer registry mapping group ids to composer instances."""

from __future__ import annotations

from typing import Callable

from chat_composer.composer.composer import Composer
from chat_composer.composer.view import ComposerView
from chat_composer.core.context import ComposerContext
from chat_composer.log import get_logger
from chat_composer.messenger.base import MessagingBackend

logger = get_logger(__name__)


class ComposerRegistry:
    """Keeps one composer per open conversation so drafts never mix."""

    def __init__(
        self,
        backend: MessagingBackend,
        context: ComposerContext,
        view_factory: Callable[[str], ComposerView],
    ):
        self._backend = backend
        self._context = context
        self._view_factory = view_factory
        self._composers: dict[str, Composer] = {}

    def get(self, group_id: str) -> Composer:
        """Get or create the composer for a group."""
        if group_id not in self._composers:
            self._composers[group_id] = Composer(
                backend=self._backend,
                context=self._context,
                view=self._view_factory(group_id),
                group_id=group_id,
            )
            logger.info("composer_created", group_id=group_id)
        return self._composers[group_id]

    def close(self, group_id: str) -> None:
        """Drop a conversation's composer. Unsent drafts are not kept."""
        if self._composers.pop(group_id, None) is not None:
            logger.info("composer_closed", group_id=group_id)

    async def wait_for_uploads(self) -> None:
        for composer in list(self._composers.values()):
            await composer.wait_for_uploads()
