"""Single-slot holder for the message being replied to."""

from __future__ import annotations

from chat_composer.log import get_logger
from chat_composer.messenger.models import ReplyTarget

logger = get_logger(__name__)


class ReplyContext:
    def __init__(self) -> None:
        self._target: ReplyTarget | None = None
        self._is_target_deleted = False

    def set(self, target: ReplyTarget, is_target_deleted: bool = False) -> None:
        """Point the draft at `target`, replacing any previous reference."""
        self._target = target
        self._is_target_deleted = is_target_deleted
        logger.debug("reply_target_set", target_id=target.id, deleted=is_target_deleted)

    def clear(self) -> None:
        self._target = None
        self._is_target_deleted = False

    @property
    def target(self) -> ReplyTarget | None:
        return self._target

    @property
    def is_target_deleted(self) -> bool:
        # Display only; a deleted target can still be quoted.
        return self._is_target_deleted

    @property
    def is_set(self) -> bool:
        return self._target is not None
