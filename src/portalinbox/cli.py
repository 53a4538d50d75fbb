"""Summary: Command-line interface for the portal inbox.

Importance: Drives the inbox engine locally without a browser.
Alternatives: Use only the HTTP API.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from portalinbox.app import build_session
from portalinbox.config import InboxConfig
from portalinbox.environment import classify
from portalinbox.errors import ComposeError, MappingError
from portalinbox.formatting import format_relative_date, initials
from portalinbox.services import InboxSession


def build_parser() -> argparse.ArgumentParser:
    """Summary: Build the CLI argument parser.

    Importance: Defines supported commands for local operation.
    Alternatives: Use a CLI framework like Typer or Click.
    """

    parser = argparse.ArgumentParser(description="Portal Inbox CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_messages = subparsers.add_parser("list", help="List unread messages")
    list_messages.add_argument("--archived", action="store_true", help="List read messages")

    mark_read = subparsers.add_parser("mark-read", help="Mark a message as read")
    mark_read.add_argument("message_id", type=str)

    subparsers.add_parser("mark-all-read", help="Mark all messages as read")

    reply = subparsers.add_parser("reply", help="Reply to a message")
    reply.add_argument("message_id", type=str)
    reply.add_argument("text", type=str)

    subparsers.add_parser("clear-read-status", help="Reset the local read timestamp and reload")

    classify_parser = subparsers.add_parser("classify", help="Classify an origin as local or hosted")
    classify_parser.add_argument("origin", type=str)

    return parser


def _print_messages(session: InboxSession) -> None:
    messages = session.get_filtered_messages()
    if not messages:
        print("No archived messages" if session.view_mode == "archived" else "No unread messages")
        return
    for message in messages:
        print(
            f"[{initials(message.sender)}] {message.id}: {message.subject} "
            f"({message.sender}, {format_relative_date(message.date)})"
        )


async def _run(args: argparse.Namespace, session: InboxSession) -> int:
    try:
        outcome = await session.load_messages()
    except MappingError as exc:
        print(f"Failed to load messages: {exc.message}")
        return 1
    if not outcome.ok:
        print(f"Failed to load messages: {outcome.error}")
        return 1

    if args.command == "list":
        if args.archived:
            session.toggle_view()
        print(f"{session.unread_count} unread")
        _print_messages(session)
        return 0

    if args.command == "mark-read":
        if session.get_message(args.message_id) is None:
            print(f"Message {args.message_id} not found.")
            return 1
        updated = await session.mark_message_as_read(args.message_id)
        print("Marked as read." if updated else "Already read.")
        return 0

    if args.command == "mark-all-read":
        session.mark_all_messages_as_read()
        print("All messages marked as read.")
        return 0

    if args.command == "reply":
        try:
            result = await session.create_reply(args.message_id, args.text)
        except ComposeError as exc:
            print(f"Reply not sent: {exc.message}")
            return 1
        print(result.message)
        return 0 if result.success else 1

    if args.command == "clear-read-status":
        outcome = await session.clear_read_status()
        print(f"Read status cleared; {outcome.unread_count} unread.")
        return 0 if outcome.ok else 1

    return 2


def run_cli(argv: list[str] | None = None) -> int:
    """Summary: Execute CLI commands based on arguments.

    Importance: Drives the inbox workflows without a UI.
    Alternatives: Invoke the session via the HTTP API.
    """

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "classify":
        print(classify(args.origin))
        return 0

    config = InboxConfig.from_env()
    session = build_session(config)
    return asyncio.run(_run(args, session))


if __name__ == "__main__":
    raise SystemExit(run_cli())
