from __future__ import annotations

from chat_composer.core.types import EventKind
from chat_composer.messenger.events import (
    build_reply_tag,
    deleted_event_ids,
    event_to_reaction,
    reply_target_id,
)
from chat_composer.messenger.models import MessageEvent, ReplyTarget


def _reaction(tags: list[list[str]]) -> MessageEvent:
    return MessageEvent(
        id="test-id",
        pubkey="test-pubkey",
        created_at=1234567890,
        kind=EventKind.REACTION,
        tags=tags,
        content="👍",
        sig="signature",
    )


class TestEventToReaction:
    def test_returns_reaction_for_own_event(self) -> None:
        event = _reaction([["p", "author-pubkey"], ["e", "target-event-id"], ["other", "value"]])
        reaction = event_to_reaction(event, "test-pubkey")

        assert reaction is not None
        assert reaction.id == "test-id"
        assert reaction.pubkey == "test-pubkey"
        assert reaction.content == "👍"
        assert reaction.created_at == 1234567890
        assert reaction.target_id == "target-event-id"
        assert reaction.is_mine is True
        assert reaction.event is event

    def test_is_mine_false_for_other_pubkey(self) -> None:
        event = _reaction([["e", "target-event-id"]])
        assert event_to_reaction(event, "other-pubkey").is_mine is False

    def test_without_target_returns_none(self) -> None:
        assert event_to_reaction(_reaction([["p", "author-pubkey"], ["other", "value"]]), "x") is None

    def test_with_empty_e_tag_returns_none(self) -> None:
        assert event_to_reaction(_reaction([["p", "author-pubkey"], ["e"], ["other", "value"]]), "x") is None


def test_reply_tag_round_trips_through_reply_target_id() -> None:
    tag = build_reply_tag(ReplyTarget(id="m1", pubkey="pk"), ["wss://a", "wss://b"])
    assert tag == ["q", "m1", "wss://a", "pk"]

    event = MessageEvent(id="x", pubkey="pk2", created_at=1, kind=EventKind.CHAT_MESSAGE, tags=[tag])
    assert reply_target_id(event) == "m1"
    assert reply_target_id(MessageEvent(id="y", pubkey="pk", created_at=1, kind=9)) is None


def test_deleted_event_ids_only_honours_author_deletions() -> None:
    mine = MessageEvent(id="m1", pubkey="alice", created_at=1, kind=EventKind.CHAT_MESSAGE, content="a")
    theirs = MessageEvent(id="m2", pubkey="bob", created_at=2, kind=EventKind.CHAT_MESSAGE, content="b")
    deletion = MessageEvent(
        id="d1",
        pubkey="alice",
        created_at=3,
        kind=EventKind.DELETION,
        tags=[["e", "m1"], ["e", "m2"]],
    )

    assert deleted_event_ids([mine, theirs, deletion]) == {"m1"}


def test_event_id_is_deterministic_and_content_sensitive() -> None:
    a = MessageEvent.compute_id("pk", 10, 9, [["q", "m1", "", "pk"]], "hello")
    b = MessageEvent.compute_id("pk", 10, 9, [["q", "m1", "", "pk"]], "hello")
    c = MessageEvent.compute_id("pk", 10, 9, [], "hello")

    assert a == b
    assert a != c
    assert len(a) == 64
