"""Application orchestrator - wires storage, backend and composers."""

from __future__ import annotations

from typing import Callable

from chat_composer.composer.view import ComposerView, ConsoleView
from chat_composer.config import AppConfig
from chat_composer.core.context import ComposerContext
from chat_composer.core.identity import IdentityResolver
from chat_composer.core.notifications import ConsoleNotifier, Notifier
from chat_composer.core.session import ComposerRegistry
from chat_composer.log import get_logger
from chat_composer.messenger.local import LocalMessagingBackend
from chat_composer.storage.database import Database
from chat_composer.storage.transcript_repo import TranscriptRepository

logger = get_logger(__name__)


class ComposerApp:
    """Top-level application orchestrator."""

    def __init__(
        self,
        config: AppConfig,
        notifier: Notifier | None = None,
        view_factory: Callable[[str], ComposerView] | None = None,
    ):
        self.config = config
        self.db = Database(config.storage.db_path)
        self.repo = TranscriptRepository(self.db)
        self.backend = LocalMessagingBackend(self.repo, config.backend, config.account.pubkey)
        self.context = ComposerContext(
            account_pubkey=config.account.pubkey,
            notifier=notifier or ConsoleNotifier(),
        )
        self.composers = ComposerRegistry(
            backend=self.backend,
            context=self.context,
            view_factory=view_factory or (lambda _group_id: ConsoleView()),
        )
        self.identities = IdentityResolver(self.backend)

    async def start(self) -> None:
        await self.db.initialize()
        logger.info("chat_composer_started", account=self.config.account.pubkey[:8])

    async def stop(self) -> None:
        """Let in-flight uploads land, then close storage."""
        await self.composers.wait_for_uploads()
        await self.db.close()
        logger.info("chat_composer_stopped")
