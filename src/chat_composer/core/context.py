"""Per-composer context passed explicitly instead of read from globals."""

from __future__ import annotations

from dataclasses import dataclass

from chat_composer.core.notifications import Notifier


@dataclass(frozen=True, slots=True)
class ComposerContext:
    """Who is composing, and where their notices go."""

    account_pubkey: str
    notifier: Notifier
