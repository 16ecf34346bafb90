"""Draft buffer holding the text under composition."""

from __future__ import annotations

from chat_composer.composer.attachments import AttachmentRegistry


class DraftBuffer:
    """Current text plus the emptiness check that gates sending.

    Emptiness counts attachments too: a draft with no text but with
    attachments can still be sent.
    """

    def __init__(self, attachments: AttachmentRegistry):
        self._attachments = attachments
        self._text = ""

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        self._text = value

    @property
    def is_empty(self) -> bool:
        return len(self._text) == 0 and len(self._attachments) == 0

    def clear(self) -> None:
        self._text = ""
