"""Board snapshot types."""

from retroboard.model.board import (
    DEFAULT_COLUMNS,
    Board,
    Column,
    check_board,
    count_user_votes,
    new_board,
    votes_remaining,
)
from retroboard.model.card import (
    Card,
    Comment,
    Group,
    Reaction,
    Votable,
    validate_card_content,
    validate_group_name,
)

__all__ = [
    "DEFAULT_COLUMNS",
    "Board",
    "Card",
    "Column",
    "Comment",
    "Group",
    "Reaction",
    "Votable",
    "check_board",
    "count_user_votes",
    "new_board",
    "validate_card_content",
    "validate_group_name",
    "votes_remaining",
]
