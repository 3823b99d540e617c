"""CLI argument parser and dispatch for retroboard."""

import argparse

from retroboard.cli.board import (
    board_export,
    board_import,
    board_phase,
    board_reset_votes,
    board_results,
    board_set,
    board_show,
)
from retroboard.cli.card import card_comment, card_move, card_react, card_vote
from retroboard.cli.group import group_add, group_create, group_rename, group_ungroup, group_vote
from retroboard.cli.init import init_board
from retroboard.engine.voting import DOWNVOTE, UPVOTE


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--repo", default=".", help="Path to git repository (default: .)")
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    common.add_argument("--user", help="Act as this user (default: git config retroboard.user or user.email)")
    common.add_argument("--board", help="Board ID (default: git config retroboard.board or 'default')")
    common.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")

    parser = argparse.ArgumentParser(
        prog="retroboard",
        description="Git-backed retrospective board",
        parents=[common],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- init ---
    init_p = nouns.add_parser("init", help="Create a board", parents=[common])
    init_p.add_argument("--title", help="Board title")
    init_p.add_argument("--column", action="append", help="Column title (repeatable)")
    init_p.set_defaults(func=init_board)

    # --- board ---
    board_p = nouns.add_parser("board", help="Board operations", parents=[common])
    board_verbs = board_p.add_subparsers(dest="verb")

    board_show_p = board_verbs.add_parser("show", help="Show columns, groups and cards", parents=[common])
    board_show_p.set_defaults(func=board_show)

    board_results_p = board_verbs.add_parser("results", help="Top-voted items", parents=[common])
    board_results_p.add_argument("--limit", type=int, help="Show at most this many items")
    board_results_p.set_defaults(func=board_results)

    board_import_p = board_verbs.add_parser("import", help="Replace board from a YAML file", parents=[common])
    board_import_p.add_argument("file", help="YAML board snapshot")
    board_import_p.set_defaults(func=board_import)

    board_export_p = board_verbs.add_parser("export", help="Dump board as YAML", parents=[common])
    board_export_p.set_defaults(func=board_export)

    board_phase_p = board_verbs.add_parser("phase", help="Show or set the workflow phase", parents=[common])
    board_phase_p.add_argument("phase", nargs="?", help="Phase to switch to")
    board_phase_p.add_argument("--next", action="store_true", help="Advance to the next phase")
    board_phase_p.set_defaults(func=board_phase)

    board_set_p = board_verbs.add_parser("set", help="Change a board setting", parents=[common])
    board_set_p.add_argument("key", help="Setting name, e.g. multipleVotesAllowed")
    board_set_p.add_argument("value", help="New value")
    board_set_p.set_defaults(func=board_set)

    board_reset_p = board_verbs.add_parser("reset-votes", help="Zero all votes", parents=[common])
    board_reset_p.set_defaults(func=board_reset_votes)

    # board with no verb = show
    board_p.set_defaults(func=board_show)

    # --- card ---
    card_p = nouns.add_parser("card", help="Card operations", parents=[common])
    card_verbs = card_p.add_subparsers(dest="verb")

    card_up_p = card_verbs.add_parser("up", help="Upvote a card", parents=[common])
    card_up_p.add_argument("id", help="Card ID")
    card_up_p.set_defaults(func=card_vote, delta=UPVOTE)

    card_down_p = card_verbs.add_parser("down", help="Downvote a card", parents=[common])
    card_down_p.add_argument("id", help="Card ID")
    card_down_p.set_defaults(func=card_vote, delta=DOWNVOTE)

    card_react_p = card_verbs.add_parser("react", help="Toggle an emoji reaction", parents=[common])
    card_react_p.add_argument("id", help="Card ID")
    card_react_p.add_argument("emoji", help="Emoji")
    card_react_p.set_defaults(func=card_react)

    card_comment_p = card_verbs.add_parser("comment", help="Comment on a card", parents=[common])
    card_comment_p.add_argument("id", help="Card ID")
    card_comment_p.add_argument("text", help="Comment text")
    card_comment_p.set_defaults(func=card_comment)

    card_move_p = card_verbs.add_parser("move", help="Move a card", parents=[common])
    card_move_p.add_argument("id", help="Card ID")
    card_move_p.add_argument("--column", dest="column", required=True, help="Target column ID")
    card_move_p.set_defaults(func=card_move)

    # --- group ---
    group_p = nouns.add_parser("group", help="Group operations", parents=[common])
    group_verbs = group_p.add_subparsers(dest="verb")

    group_create_p = group_verbs.add_parser("create", help="Group two cards", parents=[common])
    group_create_p.add_argument("dragged", help="ID of the card being dropped")
    group_create_p.add_argument("target", help="ID of the card dropped onto")
    group_create_p.add_argument("name", nargs="?", help="Group name (ignored when the target is already grouped)")
    group_create_p.set_defaults(func=group_create)

    group_add_p = group_verbs.add_parser("add", help="Add a card to a group", parents=[common])
    group_add_p.add_argument("id", help="Group ID")
    group_add_p.add_argument("card", help="Card ID")
    group_add_p.set_defaults(func=group_add)

    group_up_p = group_verbs.add_parser("up", help="Upvote a group", parents=[common])
    group_up_p.add_argument("id", help="Group ID")
    group_up_p.set_defaults(func=group_vote, delta=UPVOTE)

    group_down_p = group_verbs.add_parser("down", help="Downvote a group", parents=[common])
    group_down_p.add_argument("id", help="Group ID")
    group_down_p.set_defaults(func=group_vote, delta=DOWNVOTE)

    group_rename_p = group_verbs.add_parser("rename", help="Rename a group", parents=[common])
    group_rename_p.add_argument("id", help="Group ID")
    group_rename_p.add_argument("name", help="New group name")
    group_rename_p.set_defaults(func=group_rename)

    group_ungroup_p = group_verbs.add_parser("ungroup", help="Dissolve a group", parents=[common])
    group_ungroup_p.add_argument("id", help="Group ID")
    group_ungroup_p.set_defaults(func=group_ungroup)

    return parser
