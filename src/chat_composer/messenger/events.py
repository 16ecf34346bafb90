"""Tag helpers for reading and building chat events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from chat_composer.core.types import EventKind
from chat_composer.messenger.models import FilePayload, MessageEvent, ReplyTarget

REPLY_MARKER = "q"
EVENT_MARKER = "e"
FILE_METADATA_MARKER = "imeta"


@dataclass(frozen=True, slots=True)
class Reaction:
    id: str
    pubkey: str
    content: str
    created_at: int
    target_id: str
    is_mine: bool
    event: MessageEvent


def build_reply_tag(target: ReplyTarget, relays: list[str]) -> list[str]:
    """Quote tag: marker, target id, relay hint, target author."""
    relay_hint = relays[0] if relays else ""
    return [REPLY_MARKER, target.id, relay_hint, target.pubkey]


def build_file_tag(payload: FilePayload) -> list[str]:
    """Inline metadata for one attached file, so the event id covers its content."""
    return [
        FILE_METADATA_MARKER,
        f"x {payload.sha256}",
        f"m {payload.media_type}",
        f"filename {payload.filename}",
    ]


def _first_tag_value(event: MessageEvent, marker: str) -> Optional[str]:
    for tag in event.tags:
        if len(tag) >= 2 and tag[0] == marker and tag[1]:
            return tag[1]
    return None


def reply_target_id(event: MessageEvent) -> Optional[str]:
    """Id of the message this event replies to, if any."""
    return _first_tag_value(event, REPLY_MARKER)


def event_to_reaction(event: MessageEvent, my_pubkey: str) -> Optional[Reaction]:
    """Build a Reaction from a reaction event, or None when it names no target."""
    target_id = _first_tag_value(event, EVENT_MARKER)
    if target_id is None:
        return None
    return Reaction(
        id=event.id,
        pubkey=event.pubkey,
        content=event.content,
        created_at=event.created_at,
        target_id=target_id,
        is_mine=event.pubkey == my_pubkey,
        event=event,
    )


def deleted_event_ids(events: Iterable[MessageEvent]) -> set[str]:
    """Ids referenced by deletion events. Only the author may delete their own message."""
    events = list(events)
    authors = {e.id: e.pubkey for e in events}
    deleted: set[str] = set()
    for event in events:
        if event.kind != EventKind.DELETION:
            continue
        for tag in event.tags:
            if len(tag) >= 2 and tag[0] == EVENT_MARKER and tag[1]:
                author = authors.get(tag[1])
                if author is None or author == event.pubkey:
                    deleted.add(tag[1])
    return deleted
