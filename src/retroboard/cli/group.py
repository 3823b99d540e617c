"""Handlers for 'retroboard group' commands."""

from retroboard.cli._common import cast_vote, error, open_session_or_die, output_result
from retroboard.engine.grouping import GroupingEngine
from retroboard.errors import RetroboardError


def group_create(args) -> int:
    """Group two cards under a name, as if one were dropped onto the other."""
    session = open_session_or_die(args)
    engine = GroupingEngine(session.store, session.board.board_id, session.notify)
    try:
        pending = engine.begin(args.dragged, args.target, session.board)
    except RetroboardError as e:
        error(e.message, args.json)

    if pending is None:
        output_result({"group": None}, "Nothing to group", args.json)
        return 0

    group = session.run(engine.commit(args.name, session.board.settings))
    joined = pending.existing_group is not None
    if joined:
        commit = session.save(f"Add {args.dragged} to group {group.group_id}")
    else:
        commit = session.save(f'Group "{group.name}"')
    output_result(
        {
            "group": group.group_id,
            "name": group.name,
            "column": pending.target_column_id,
            "cards": [args.dragged, args.target],
            "joined": joined,
            "commit": commit,
        },
        f"{group.group_id}  {group.name} ({commit[:7]})",
        args.json,
    )
    return 0


def group_add(args) -> int:
    """Put a card into an existing group."""
    session = open_session_or_die(args)
    engine = GroupingEngine(session.store, session.board.board_id, session.notify)
    session.run(engine.add_to_group(args.card, args.id, session.board))
    commit = session.save(f"Add {args.card} to group {args.id}")
    output_result(
        {"group": args.id, "card": args.card, "commit": commit},
        f"Added {args.card} to {args.id} ({commit[:7]})",
        args.json,
    )
    return 0


def group_vote(args) -> int:
    """Upvote or downvote a group (args.delta is +1 or -1)."""
    session = open_session_or_die(args)
    ref = session.group_ref(args.id)
    _, group = session.board.find_group(args.id)
    return cast_vote(session, ref, group, args.delta)


def group_rename(args) -> int:
    session = open_session_or_die(args)
    engine = GroupingEngine(session.store, session.board.board_id, session.notify)
    name = session.run(engine.rename_group(args.id, args.name, session.board))
    commit = session.save(f'Rename group {args.id} to "{name}"')
    output_result(
        {"group": args.id, "name": name, "commit": commit},
        f"Renamed {args.id} to {name} ({commit[:7]})",
        args.json,
    )
    return 0


def group_ungroup(args) -> int:
    """Dissolve a group, leaving its cards in place."""
    session = open_session_or_die(args)
    engine = GroupingEngine(session.store, session.board.board_id, session.notify)
    members = session.run(engine.ungroup(args.id, session.board))
    commit = session.save(f"Ungroup {args.id}")
    output_result(
        {"group": args.id, "cards": members, "commit": commit},
        f"Ungrouped {len(members)} cards ({commit[:7]})",
        args.json,
    )
    return 0
