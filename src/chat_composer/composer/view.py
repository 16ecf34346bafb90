"""Abstract view that receives optimistic and confirmed messages."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import TextIO

from chat_composer.messenger.models import EchoMessage, MessageEvent


class ComposerView(ABC):
    """The surrounding UI, as seen by the send orchestrator.

    `show_pending` is always called before `show_confirmed` for the same
    echo. A pending message whose send failed is left for the UI to
    reconcile.
    """

    @abstractmethod
    def show_pending(self, echo: EchoMessage) -> None:
        ...

    @abstractmethod
    def show_confirmed(self, echo: EchoMessage, message: MessageEvent) -> None:
        """Replace a pending echo with the backend's canonical message."""
        ...


class ConsoleView(ComposerView):
    """Prints pending and confirmed messages, for the command line."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream or sys.stdout

    def show_pending(self, echo: EchoMessage) -> None:
        print(f"… sending ({echo.temp_id})", file=self._stream)

    def show_confirmed(self, echo: EchoMessage, message: MessageEvent) -> None:
        print(f"✓ sent {message.id}", file=self._stream)
