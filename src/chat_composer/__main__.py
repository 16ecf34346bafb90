"""CLI entry point for chat-composer."""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path
from typing import Awaitable, Callable

from chat_composer.app import ComposerApp
from chat_composer.config import AppConfig, load_config
from chat_composer.core.errors import SendBlocked
from chat_composer.core.result import Err
from chat_composer.core.types import EventKind, GroupType
from chat_composer.log import bind_conversation, setup_logging
from chat_composer.messenger.events import deleted_event_ids, reply_target_id
from chat_composer.messenger.models import (
    ContactMetadata,
    EnrichedContact,
    FilePayload,
    Group,
    ReplyTarget,
)


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", default="config.yaml", help="Path to config file")
    parser.add_argument("-e", "--env", default=".env", help="Path to .env file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chat-composer",
        description="Compose and send group chat messages with attachments and replies",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("config-check", help="Validate configuration")
    _add_config_args(check_parser)

    group_parser = subparsers.add_parser("add-group", help="Register a group in the local store")
    _add_config_args(group_parser)
    group_parser.add_argument("group_id", help="MLS group id (hex)")
    group_parser.add_argument("--nostr-id", help="Nostr group id (defaults to the MLS id)")
    group_parser.add_argument("--name", required=True)
    group_parser.add_argument("--description", default="")
    group_parser.add_argument("--relay", action="append", default=[], help="Group relay URL (repeatable)")
    group_parser.add_argument("--admin", action="append", default=[], help="Admin pubkey (repeatable)")
    group_parser.add_argument("--dm", action="store_true", help="Mark as a direct message group")

    contact_parser = subparsers.add_parser("add-contact", help="Register a contact in the local store")
    _add_config_args(contact_parser)
    contact_parser.add_argument("pubkey")
    contact_parser.add_argument("--name")
    contact_parser.add_argument("--display-name")
    contact_parser.add_argument("--inbox-relay", action="append", default=[])
    contact_parser.add_argument("--relay", action="append", default=[])

    send_parser = subparsers.add_parser("send", help="Compose and send a message")
    _add_config_args(send_parser)
    send_parser.add_argument("group_id")
    send_parser.add_argument("-t", "--text", default="")
    send_parser.add_argument("-a", "--attach", action="append", default=[], help="File to attach (repeatable)")
    send_parser.add_argument("-r", "--reply-to", help="Id of the message to reply to")

    history_parser = subparsers.add_parser("history", help="Show a group's transcript")
    _add_config_args(history_parser)
    history_parser.add_argument("group_id")
    history_parser.add_argument("-n", "--limit", type=int, default=50)

    whois_parser = subparsers.add_parser("whois", help="Show a contact's display identity")
    _add_config_args(whois_parser)
    whois_parser.add_argument("pubkey")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, args.env)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "config-check":
        _check_config(args.config, config)
        return

    setup_logging(config.log_level)
    handlers: dict[str, Callable[[ComposerApp, argparse.Namespace], Awaitable[int]]] = {
        "add-group": _add_group,
        "add-contact": _add_contact,
        "send": _send,
        "history": _history,
        "whois": _whois,
    }
    sys.exit(asyncio.run(_with_app(config, handlers[args.command], args)))


def _check_config(config_path: str, config: AppConfig) -> None:
    print(f"Configuration valid: {config_path}")
    print(f"  Account: {config.account.pubkey}")
    print(f"  Data directory: {config.data_dir}")
    print(f"  Storage: {config.storage.db_path}")
    relays = ", ".join(config.backend.default_relays) or "(none)"
    print(f"  Default relays: {relays}")
    if config.backend.dev_mode:
        print(f"  Dev mode: on (relay {config.backend.dev_relay})")


async def _with_app(
    config: AppConfig,
    handler: Callable[[ComposerApp, argparse.Namespace], Awaitable[int]],
    args: argparse.Namespace,
) -> int:
    app = ComposerApp(config)
    await app.start()
    try:
        return await handler(app, args)
    finally:
        await app.stop()


async def _add_group(app: ComposerApp, args: argparse.Namespace) -> int:
    group = Group(
        mls_group_id=args.group_id,
        nostr_group_id=args.nostr_id or args.group_id,
        name=args.name,
        description=args.description,
        admin_pubkeys=args.admin,
        relays=args.relay,
        group_type=GroupType.DIRECT_MESSAGE if args.dm else GroupType.GROUP,
    )
    await app.repo.upsert_group(group)
    print(f"Group saved: {group.name} ({group.mls_group_id})")
    return 0


async def _add_contact(app: ComposerApp, args: argparse.Namespace) -> int:
    contact = EnrichedContact(
        metadata=ContactMetadata(name=args.name, display_name=args.display_name),
        nostr_relays=args.relay,
        inbox_relays=args.inbox_relay,
    )
    await app.repo.upsert_contact(args.pubkey, contact)
    print(f"Contact saved: {args.pubkey}")
    return 0


def _read_payload(path: Path) -> FilePayload:
    media_type, _ = mimetypes.guess_type(path.name)
    return FilePayload(
        data=path.read_bytes(),
        media_type=media_type or "application/octet-stream",
        filename=path.name,
    )


async def _send(app: ComposerApp, args: argparse.Namespace) -> int:
    group = await app.repo.get_group(args.group_id)
    if group is None:
        print(f"Unknown group: {args.group_id}", file=sys.stderr)
        return 1

    bind_conversation(group.mls_group_id)
    composer = app.composers.get(group.mls_group_id)
    composer.text = args.text

    for raw_path in args.attach:
        path = Path(raw_path)
        if not path.is_file():
            print(f"Not a file: {path}", file=sys.stderr)
            return 1
        composer.add_attachment(_read_payload(path))

    if args.reply_to:
        target = await app.repo.get_message(args.reply_to, group.mls_group_id)
        if target is None:
            print(f"Unknown message in {group.name}: {args.reply_to}", file=sys.stderr)
            return 1
        deletions = await app.repo.get_deletions(group.mls_group_id)
        composer.reply_to(
            ReplyTarget.from_event(target),
            is_target_deleted=target.id in deleted_event_ids([target, *deletions]),
        )

    # The CLI has no one to press send again, so wait for uploads first.
    await composer.wait_for_uploads()
    result = await composer.send()
    if isinstance(result, Err):
        if isinstance(result.error, SendBlocked):
            print(str(result.error), file=sys.stderr)
        return 1
    return 0


async def _history(app: ComposerApp, args: argparse.Namespace) -> int:
    group = await app.repo.get_group(args.group_id)
    if group is None:
        print(f"Unknown group: {args.group_id}", file=sys.stderr)
        return 1

    events = await app.repo.get_transcript(group.mls_group_id, limit=args.limit)
    deleted = deleted_event_ids(events)
    names: dict[str, str] = {}
    for event in events:
        if event.kind != EventKind.CHAT_MESSAGE:
            continue
        if event.pubkey not in names:
            names[event.pubkey] = await app.identities.display_name(event.pubkey)
        line = f"{event.id[:8]} {names[event.pubkey]}: "
        line += "(deleted)" if event.id in deleted else event.content
        reply_id = reply_target_id(event)
        if reply_id:
            line += f"  ↪ {reply_id[:8]}"
        files = await app.repo.get_attachment_names(event.id)
        if files:
            line += f"  [{', '.join(files)}]"
        print(line)
    return 0


async def _whois(app: ComposerApp, args: argparse.Namespace) -> int:
    contact = await app.identities.lookup(args.pubkey)
    print(await app.identities.display_name(args.pubkey))
    if contact is not None:
        relays = contact.preferred_relays(app.config.backend.default_relays)
        print(f"  relays: {', '.join(relays) or '(none)'}")
    return 0


if __name__ == "__main__":
    main()
