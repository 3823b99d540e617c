"""Handlers for 'retroboard card' commands."""

from retroboard.cli._common import cast_vote, open_session_or_die, output_result
from retroboard.engine.grouping import GroupingEngine
from retroboard.engine.interactions import InteractionEngine


def card_vote(args) -> int:
    """Upvote or downvote a card (args.delta is +1 or -1)."""
    session = open_session_or_die(args)
    ref = session.card_ref(args.id)
    _, card = session.board.find_card(args.id)
    return cast_vote(session, ref, card, args.delta)


def card_react(args) -> int:
    """Toggle the user's emoji reaction on a card."""
    session = open_session_or_die(args)
    ref = session.card_ref(args.id)
    _, card = session.board.find_card(args.id)
    engine = InteractionEngine(session.store, session.notify)
    present = session.run(engine.toggle_reaction(ref, card, args.emoji, session.user, session.board.settings))
    verb = "React" if present else "Unreact"
    commit = session.save(f"{verb} {args.emoji} on {args.id}")
    count = session.store.tree.get(ref.reaction_count(args.emoji)) or 0
    output_result(
        {"id": args.id, "emoji": args.emoji, "reacted": present, "count": count, "commit": commit},
        f"{args.emoji} {count} ({commit[:7]})",
        args.json,
    )
    return 0


def card_comment(args) -> int:
    """Add a comment to a card."""
    session = open_session_or_die(args)
    ref = session.card_ref(args.id)
    engine = InteractionEngine(session.store, session.notify)
    comment = session.run(engine.add_comment(ref, args.text, session.user, session.board.settings))
    commit = session.save(f"Comment on {args.id}")
    output_result(
        {"id": args.id, "comment": comment.comment_id, "content": comment.content, "commit": commit},
        f"Comment {comment.comment_id} ({commit[:7]})",
        args.json,
    )
    return 0


def card_move(args) -> int:
    """Move a card to a column; moving it to its own column takes it out of its group."""
    session = open_session_or_die(args)
    session.card_ref(args.id)
    engine = GroupingEngine(session.store, session.board.board_id, session.notify)
    card = session.run(engine.move_card(args.id, args.column, session.board))
    commit = session.save(f"Move card {args.id} to {args.column}")
    output_result(
        {"id": card.card_id, "column": args.column, "commit": commit},
        f"Moved {card.card_id} to {args.column} ({commit[:7]})",
        args.json,
    )
    return 0
