"""Handlers for 'retroboard board' commands."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from retroboard.cli._common import Session, error, open_session_or_die, output_json, output_result
from retroboard.engine.ordering import BoardItem, card_text, group_members, results, sort_items
from retroboard.engine.voting import reset_all_votes
from retroboard.errors import RetroboardError
from retroboard.model.board import Board, check_board, votes_remaining
from retroboard.model.card import Card
from retroboard.store.git import dump_document, load_document
from retroboard.workflow import (
    WorkflowPhase,
    are_interactions_visible,
    next_phase,
    phase_description,
)


def _votes(session: Session, item) -> int | None:
    settings = session.board.settings
    if not are_interactions_visible(settings.workflow_phase, settings.retrospective_mode):
        return None
    return item.votes


def _card_json(session: Session, card: Card) -> dict:
    return {
        "kind": "card",
        "id": card.card_id,
        "content": card_text(card, session.user, session.board.settings),
        "votes": _votes(session, card),
        "your_vote": card.user_vote(session.user),
        "comments": len(card.comments),
    }


def _item_json(session: Session, col, item: BoardItem) -> dict:
    if item.kind == "card":
        return _card_json(session, item.item)
    members = group_members(col, item.item, session.board.settings.sort_by_votes)
    return {
        "kind": "group",
        "id": item.item_id,
        "name": item.item.name,
        "votes": _votes(session, item.item),
        "your_vote": item.item.user_vote(session.user),
        "cards": [_card_json(session, c) for c in members],
    }


def _board_json(session: Session) -> dict:
    board = session.board
    settings = board.settings
    columns = []
    for col in board.columns.values():
        items = [_item_json(session, col, i) for i in sort_items(col, settings.sort_by_votes)]
        columns.append({"id": col.column_id, "title": col.title, "items": items})
    return {
        "id": board.board_id,
        "title": board.title,
        "phase": settings.workflow_phase.value,
        "retrospective_mode": settings.retrospective_mode,
        "votes_remaining": votes_remaining(board, session.user),
        "columns": columns,
    }


def _fmt_votes(votes: int | None) -> str:
    return "-" if votes is None else str(votes)


def board_show(args) -> int:
    """Show columns with their groups and cards in display order."""
    session = open_session_or_die(args)
    data = _board_json(session)
    if args.json:
        output_json(data)
        return 0

    console = Console()
    console.print(f"[bold]{escape(data['title'])}[/bold]")
    if data["retrospective_mode"]:
        phase = WorkflowPhase(data["phase"])
        console.print(f"Phase: {phase.value} ({phase_description(phase)})", highlight=False)
    console.print(f"Votes remaining: {data['votes_remaining']}", highlight=False)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Column")
    table.add_column("ID")
    table.add_column("Item")
    table.add_column("Votes", justify="right")
    for col in data["columns"]:
        table.add_row(escape(col["title"]), col["id"], "", "")
        for item in col["items"]:
            if item["kind"] == "group":
                table.add_row("", item["id"], f"[bold]{escape(item['name'])}[/bold]", _fmt_votes(item["votes"]))
                for card in item["cards"]:
                    table.add_row("", card["id"], f"  {escape(card['content'])}", _fmt_votes(card["votes"]))
            else:
                table.add_row("", item["id"], escape(item["content"]), _fmt_votes(item["votes"]))
    console.print(table)
    return 0


def board_results(args) -> int:
    """List the top-voted items across all columns."""
    session = open_session_or_die(args)
    items = results(session.board, args.limit)
    rows = []
    for item in items:
        if item.kind == "group":
            text = item.item.name
        else:
            text = card_text(item.item, session.user, session.board.settings)
        rows.append(
            {"kind": item.kind, "id": item.item_id, "column": item.column_id, "text": text, "votes": item.votes}
        )

    if args.json:
        output_json(rows)
    else:
        for rank, row in enumerate(rows, start=1):
            print(f"{rank:>2}. {row['votes']:>3}  {row['text']}")
    return 0


def board_export(args) -> int:
    """Dump the board snapshot as YAML (or JSON)."""
    session = open_session_or_die(args)
    data = session.store.tree.get(session.board_ref.path)
    if args.json:
        output_json(data)
    else:
        print(dump_document(data), end="")
    return 0


def board_import(args) -> int:
    """Replace the board with a validated YAML snapshot."""
    session = open_session_or_die(args)
    try:
        data = load_document(Path(args.file).read_text(encoding="utf-8"))
        board = Board.from_dict(session.board.board_id, data)
        check_board(board)
    except OSError as e:
        error(f"cannot read {args.file}: {e.strerror}", args.json)
    except RetroboardError as e:
        error(e.message, args.json)
    except (TypeError, ValueError) as e:
        error(f"Invalid board in {args.file}: {e}", args.json)

    session.run(session.store.write(session.board_ref.path, board.to_dict()))
    commit = session.save(f"Import board from {Path(args.file).name}")

    cards = sum(len(c.cards) for c in board.columns.values())
    output_result(
        {"commit": commit, "columns": len(board.columns), "cards": cards},
        f"Imported {len(board.columns)} columns, {cards} cards ({commit[:7]})",
        args.json,
    )
    return 0


def board_phase(args) -> int:
    """Show or change the workflow phase."""
    session = open_session_or_die(args)
    current = session.board.settings.workflow_phase

    if args.next:
        phase = next_phase(current)
    elif args.phase:
        try:
            phase = WorkflowPhase.parse(args.phase)
        except ValueError as e:
            error(str(e), args.json)
    else:
        output_result(
            {"phase": current.value, "description": phase_description(current)},
            f"{current.value}: {phase_description(current)}",
            args.json,
        )
        return 0

    session.run(session.store.write(session.board_ref.setting("workflowPhase"), phase.value))
    commit = session.save(f"Set phase to {phase.value}")
    output_result(
        {"phase": phase.value, "previous": current.value, "commit": commit},
        f"Phase {current.value} -> {phase.value} ({commit[:7]})",
        args.json,
    )
    return 0


def board_set(args) -> int:
    """Change one board setting."""
    session = open_session_or_die(args)
    try:
        settings = session.board.settings.updated(args.key, args.value)
    except KeyError:
        error(f"Unknown setting '{args.key}'", args.json)
    except ValueError as e:
        error(f"Invalid value for '{args.key}': {e}", args.json)

    session.run(session.store.write(session.board_ref.settings, settings.to_dict()))
    commit = session.save(f"Set {args.key} to {args.value}")
    output_result(
        {"settings": settings.to_dict(), "commit": commit},
        f"Set {args.key} = {args.value} ({commit[:7]})",
        args.json,
    )
    return 0


def board_reset_votes(args) -> int:
    """Zero every vote on the board."""
    session = open_session_or_die(args)
    touched = session.run(reset_all_votes(session.store, session.board))
    commit = session.save("Reset all votes")
    output_result(
        {"reset": touched, "commit": commit},
        f"Reset votes on {touched} items ({commit[:7]})",
        args.json,
    )
    return 0
