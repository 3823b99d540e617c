"""Columns and boards, parsed from a store snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field

from retroboard.errors import NotFoundError, ValidationError
from retroboard.ids import column_id
from retroboard.model.card import Card, Group, validate_card_content
from retroboard.settings import BoardSettings


@dataclass
class Column:
    column_id: str
    title: str = ""
    cards: dict[str, Card] = field(default_factory=dict)
    groups: dict[str, Group] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, column_id: str, data: dict) -> Column:
        return cls(
            column_id=column_id,
            title=data.get("title", ""),
            cards={cid: Card.from_dict(cid, c) for cid, c in (data.get("cards") or {}).items()},
            groups={gid: Group.from_dict(gid, g) for gid, g in (data.get("groups") or {}).items()},
        )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "cards": {cid: c.to_dict() for cid, c in self.cards.items()},
            "groups": {gid: g.to_dict() for gid, g in self.groups.items()},
        }

    def find_card(self, card_id: str) -> Card | None:
        return self.cards.get(card_id)

    def group_members(self, group_id: str) -> list[Card]:
        """Cards pointing at group_id, in creation order."""
        members = [c for c in self.cards.values() if c.group_id == group_id]
        return sorted(members, key=lambda c: c.created)


@dataclass
class Board:
    board_id: str
    title: str = "Untitled Board"
    columns: dict[str, Column] = field(default_factory=dict)
    settings: BoardSettings = field(default_factory=BoardSettings)
    owner: str | None = None
    created: int = 0

    @classmethod
    def from_dict(cls, board_id: str, data: dict | None) -> Board:
        data = data or {}
        columns = data.get("columns") or {}
        return cls(
            board_id=board_id,
            title=data.get("title", "Untitled Board"),
            # column ids carry an ordering prefix
            columns={cid: Column.from_dict(cid, columns[cid]) for cid in sorted(columns)},
            settings=BoardSettings.from_dict(data.get("settings")),
            owner=data.get("owner"),
            created=int(data.get("created") or 0),
        )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "owner": self.owner,
            "created": self.created,
            "columns": {cid: c.to_dict() for cid, c in self.columns.items()},
            "settings": self.settings.to_dict(),
        }

    def column(self, column_id: str) -> Column:
        col = self.columns.get(column_id)
        if col is None:
            raise NotFoundError(f"Column '{column_id}' not found")
        return col

    def find_card_column(self, card_id: str) -> Column | None:
        """Find the column containing a card."""
        for col in self.columns.values():
            if card_id in col.cards:
                return col
        return None

    def find_card(self, card_id: str) -> tuple[Column, Card]:
        col = self.find_card_column(card_id)
        if col is None:
            raise NotFoundError(f"Card '{card_id}' not found")
        return col, col.cards[card_id]

    def find_group(self, group_id: str) -> tuple[Column, Group]:
        for col in self.columns.values():
            if group_id in col.groups:
                return col, col.groups[group_id]
        raise NotFoundError(f"Group '{group_id}' not found")


def count_user_votes(board: Board, user_id: str) -> int:
    """Positive vote units a user has placed on cards and groups."""
    total = 0
    for col in board.columns.values():
        for item in [*col.cards.values(), *col.groups.values()]:
            total += max(item.user_vote(user_id), 0)
    return total


def votes_remaining(board: Board, user_id: str, limit: int | None = None) -> int:
    """Votes left in the user's budget; never negative."""
    if limit is None:
        limit = board.settings.votes_per_user
    return max(limit - count_user_votes(board, user_id), 0)


DEFAULT_COLUMNS = ("To Do", "In Progress", "Done")


def new_board(
    board_id: str,
    title: str = "Untitled Board",
    column_titles: list[str] | tuple[str, ...] = DEFAULT_COLUMNS,
    owner: str | None = None,
    created: int = 0,
) -> Board:
    """A fresh board with empty columns in the given order."""
    columns = {}
    for index, column_title in enumerate(column_titles):
        cid = column_id(index)
        columns[cid] = Column(column_id=cid, title=column_title)
    return Board(board_id=board_id, title=title, columns=columns, owner=owner, created=created)


def check_board(board: Board) -> None:
    """Raise ValidationError if a snapshot breaks the board's invariants.

    Cards need content, tallies cannot be negative, and a card can only
    belong to a group in its own column.
    """
    for col in board.columns.values():
        for card in col.cards.values():
            try:
                validate_card_content(card.content)
            except ValidationError as e:
                raise ValidationError(f"Card '{card.card_id}': {e.message}") from None
            if card.group_id is not None and card.group_id not in col.groups:
                raise ValidationError(
                    f"Card '{card.card_id}' belongs to group '{card.group_id}' outside column '{col.column_id}'"
                )
        for item in [*col.cards.values(), *col.groups.values()]:
            if item.votes < 0:
                raise ValidationError(f"Item '{item.item_id}' has a negative vote total")
