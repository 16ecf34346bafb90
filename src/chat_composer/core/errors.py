"""Error taxonomy for the composer and its backends."""

from __future__ import annotations

from dataclasses import dataclass

from chat_composer.core.types import BlockReason


class ComposerError(Exception):
    """Base class for every error raised or reported by the composer."""


class AttachmentUploadError(ComposerError):
    """An upload failed. Scoped to a single attachment."""

    def __init__(self, attachment_id: str, filename: str, cause: BaseException | str):
        self.attachment_id = attachment_id
        self.filename = filename
        self.cause = cause
        super().__init__(f"Failed to upload {filename}: {cause}")


class SendTransportError(ComposerError):
    """The backend failed to deliver an outbound message."""

    def __init__(self, group_id: str, cause: BaseException | str):
        self.group_id = group_id
        self.cause = cause
        super().__init__(f"Failed to send message: {cause}")


class BackendError(ComposerError):
    """Raised by messaging backend implementations."""


class UnknownGroupError(BackendError):
    def __init__(self, group_id: str):
        self.group_id = group_id
        super().__init__(f"Unknown group: {group_id}")


class UnknownContactError(BackendError):
    def __init__(self, pubkey: str):
        self.pubkey = pubkey
        super().__init__(f"Unknown contact: {pubkey}")


@dataclass(frozen=True, slots=True)
class SendBlocked:
    """A send refused client-side. Reported as a value, never raised."""

    reason: BlockReason

    def __str__(self) -> str:
        return f"send blocked: {self.reason}"
