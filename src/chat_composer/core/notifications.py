"""Transient user-facing notices (toasts)."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import TextIO

from chat_composer.core.types import NoticeLevel
from chat_composer.log import get_logger

logger = get_logger(__name__)


class Notifier(ABC):
    """Sink for short, non-blocking messages shown to the user."""

    @abstractmethod
    def notify(self, level: NoticeLevel, title: str, detail: str = "") -> None:
        ...

    def error(self, title: str, detail: str = "") -> None:
        self.notify(NoticeLevel.ERROR, title, detail)


class ConsoleNotifier(Notifier):
    """Writes notices to a text stream, one line each."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream or sys.stderr

    def notify(self, level: NoticeLevel, title: str, detail: str = "") -> None:
        line = f"[{level}] {title}"
        if detail:
            line += f": {detail}"
        print(line, file=self._stream)
        logger.debug("notice_shown", level=str(level), title=title)
