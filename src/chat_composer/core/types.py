"""Shared types and enumerations."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class AttachmentStatus(StrEnum):
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


class SendState(StrEnum):
    IDLE = "idle"
    SENDING = "sending"


class BlockReason(StrEnum):
    EMPTY_DRAFT = "empty_draft"
    UPLOADS_PENDING = "uploads_pending"
    ALREADY_SENDING = "already_sending"


class NoticeLevel(StrEnum):
    INFO = "info"
    ERROR = "error"


class EventKind(IntEnum):
    DELETION = 5
    REACTION = 7
    CHAT_MESSAGE = 9


class GroupType(StrEnum):
    DIRECT_MESSAGE = "DirectMessage"
    GROUP = "Group"
