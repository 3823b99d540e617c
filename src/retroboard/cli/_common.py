"""Shared helpers for CLI command handlers."""

import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Coroutine, TypeVar

from retroboard.engine.voting import VoteApplier
from retroboard.errors import RetroboardError, StoreError
from retroboard.model.board import Board
from retroboard.model.card import Votable
from retroboard.notify import CollectingNotifier, Notify, PrintNotifier
from retroboard.paths import BoardRef, CardRef, GroupRef, ItemRef
from retroboard.settings import read_config
from retroboard.store.git import GitStore

T = TypeVar("T")


@dataclass
class Session:
    """Everything a handler needs: the opened store and who is acting."""

    store: GitStore
    board: Board
    user: str
    json_mode: bool
    notify: Notify

    @property
    def board_ref(self) -> BoardRef:
        return BoardRef(self.board.board_id)

    def card_ref(self, card_id: str) -> CardRef:
        col = self.board.find_card_column(card_id)
        if col is None:
            error(f"Card '{card_id}' not found.", self.json_mode)
        return self.board_ref.column(col.column_id).card(card_id)

    def group_ref(self, group_id: str) -> GroupRef:
        try:
            col, _ = self.board.find_group(group_id)
        except RetroboardError as e:
            error(e.message, self.json_mode)
        return self.board_ref.column(col.column_id).group(group_id)

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run an engine coroutine; classified failures exit 1."""
        try:
            return asyncio.run(coro)
        except RetroboardError as e:
            error(e.message, self.json_mode)

    @property
    def messages(self) -> list[str]:
        """Notifications collected so far (JSON mode only)."""
        return getattr(self.notify, "messages", [])

    def save(self, message: str) -> str:
        try:
            return self.store.save(message)
        except StoreError as e:
            error(e.message, self.json_mode)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )


def identity(args, repo_path: Path) -> tuple[str, str]:
    """(user, board id) from flags, falling back to git config."""
    config = read_config(repo_path)
    user = getattr(args, "user", None) or config["user"]
    board_id = getattr(args, "board", None) or config["board"]
    return user, board_id


def open_session_or_die(args) -> Session:
    """Load the board named by args. Exit 1 with message if it is missing."""
    configure_logging(getattr(args, "verbose", False))
    repo_path = Path(args.repo).resolve()
    user, board_id = identity(args, repo_path)
    store = GitStore(repo_path)
    try:
        store.load()
    except StoreError as e:
        error(e.message, args.json)
    data = store.tree.get(BoardRef(board_id).path)
    if not data:
        error(f"Board '{board_id}' not found. Run 'retroboard init' first.", args.json)
    notify = CollectingNotifier() if args.json else PrintNotifier()
    return Session(store, Board.from_dict(board_id, data), user, args.json, notify)


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2, ensure_ascii=False))


def output_result(data: dict, text: str, json_mode: bool) -> None:
    """Output mutation result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)


def cast_vote(session: Session, ref: ItemRef, item: Votable, delta: int) -> int:
    """Vote on a card or group, save, and report. Rejections still exit 0."""
    applier = VoteApplier(session.store, session.notify)
    resolution = session.run(applier.vote(ref, item, session.user, delta, session.board.settings))
    commit = None
    if not resolution.rejected:
        commit = session.save(f"{resolution.describe(ref.collection.rstrip('s'))} {ref.item_id}")

    total = session.store.tree.get(ref.votes) or 0
    mine = session.store.tree.get(ref.voter(session.user)) or 0
    if session.json_mode:
        output_json(
            {
                "id": ref.item_id,
                "outcome": resolution.outcome.value,
                "applied_delta": resolution.applied_delta,
                "votes": total,
                "your_vote": mine,
                "messages": session.messages,
                "commit": commit,
            }
        )
    elif commit is not None:
        print(f"{ref.item_id}: {total} votes ({commit[:7]})")
    return 0
